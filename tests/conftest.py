"""
Pytest configuration file for Lambda Uploader tests.
"""
import pytest
from unittest.mock import patch

import boto3
import moto

from lambda_uploader.models import FunctionUploadDetails
from lambda_uploader.session import AwsAccountSettings


@pytest.fixture
def aws_credentials():
    """Mocked AWS Credentials for moto."""
    with patch.dict('os.environ', {
        'AWS_ACCESS_KEY_ID': 'testing',
        'AWS_SECRET_ACCESS_KEY': 'testing',
        'AWS_SECURITY_TOKEN': 'testing',
        'AWS_SESSION_TOKEN': 'testing',
        'AWS_DEFAULT_REGION': 'us-east-1',
    }):
        yield


@pytest.fixture
def s3_client(aws_credentials):
    """S3 client fixture."""
    with moto.mock_aws():
        yield boto3.client('s3')


@pytest.fixture
def account_settings(aws_credentials):
    """Account settings bound to the mocked credentials."""
    return AwsAccountSettings(region_name='us-east-1')


@pytest.fixture
def function_details():
    """Details of a Java function."""
    return FunctionUploadDetails(
        name='fn1',
        handler='pkg.Handler::go',
        runtime='java8',
        role_arn='arn:aws:iam::123:role/r',
        description='A test function',
        timeout=30,
        memory_size=512,
        env_vars={'STAGE': 'test'},
        tracing_mode='Active',
    )
