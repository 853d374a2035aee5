"""
Builds Lambda API request parameters from function details.
"""
from typing import Any, Dict

from lambda_uploader.models import FunctionUploadDetails, UploadedCode


class FunctionConfigBuilder:
    """
    Translates FunctionUploadDetails into the parameters of the Lambda
    create_function, update_function_code and update_function_configuration calls.
    """

    def __init__(self, details: FunctionUploadDetails):
        self.details = details

    def configuration(self) -> Dict[str, Any]:
        """Runtime configuration shared by create and configuration update."""
        details = self.details
        return {
            'FunctionName': details.name,
            'Handler': details.handler,
            'Role': details.role_arn,
            'Runtime': details.runtime,
            'Description': details.description,
            'Timeout': details.timeout,
            'MemorySize': details.memory_size,
            'Environment': {
                'Variables': dict(details.env_vars)
            },
            'TracingConfig': {
                'Mode': details.tracing_mode
            },
        }

    def create_request(self, uploaded_code: UploadedCode) -> Dict[str, Any]:
        code = {
            'S3Bucket': uploaded_code.bucket,
            'S3Key': uploaded_code.key,
        }
        if uploaded_code.version:
            code['S3ObjectVersion'] = uploaded_code.version

        params = self.configuration()
        params['Code'] = code
        return params

    def code_update_request(self, uploaded_code: UploadedCode) -> Dict[str, Any]:
        params = {
            'FunctionName': self.details.name,
            'S3Bucket': uploaded_code.bucket,
            'S3Key': uploaded_code.key,
        }
        if uploaded_code.version:
            params['S3ObjectVersion'] = uploaded_code.version
        return params
