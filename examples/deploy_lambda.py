#!/usr/bin/env python3
"""
Example script for packaging a source directory and creating an AWS Lambda function from it.
"""
import argparse
import logging
import sys

from lambda_uploader.main import LambdaCreatorFactory
from lambda_uploader.models import FunctionUploadDetails
from lambda_uploader.packaging.packager import ZipPackager
from lambda_uploader.session import AwsAccountSettings


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()]
    )


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Example script for creating an AWS Lambda function from a source directory"
    )

    parser.add_argument(
        "--source-dir",
        required=True,
        help="Directory holding the function sources"
    )
    parser.add_argument(
        "--function-name",
        required=True,
        help="Name of the Lambda function"
    )
    parser.add_argument(
        "--role-arn",
        required=True,
        help="ARN of the IAM execution role"
    )
    parser.add_argument(
        "--s3-bucket",
        required=True,
        help="S3 bucket to upload the function archive to"
    )

    # General options
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser.parse_args()


def main() -> int:
    """Main entry point for the example script."""
    args = parse_args()
    setup_logging(args.verbose)

    logger = logging.getLogger(__name__)
    logger.info("Starting example deployment")

    try:
        details = FunctionUploadDetails(
            name=args.function_name,
            handler="app.handler",
            runtime="python3.12",
            role_arn=args.role_arn,
            description="Created by the lambda_uploader example",
        )

        creator = LambdaCreatorFactory.create(AwsAccountSettings(), ZipPackager())
        function = creator.create_lambda(args.source_dir, "app.py", details, args.s3_bucket).result()

        logger.info(f"Successfully created Lambda function: {function.arn}")
        return 0

    except Exception as e:
        logger.error(f"Deployment failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
