"""
Lambda Uploader - packages, uploads and deploys AWS Lambda functions.

This package provides the deployment pipeline that takes a local function source through
packaging, upload of the archive to S3, and creation or update of the Lambda function.
"""

__version__ = "0.1.0"
