"""
Validation of function details before a deployment is started.
"""
import re
from typing import Optional

from lambda_uploader.errors import InvalidFunctionDetailsError
from lambda_uploader.models import FunctionUploadDetails
from lambda_uploader.packaging.packager import Packager

MAX_NAME_LENGTH = 64
MIN_TIMEOUT = 1
MAX_TIMEOUT = 900
MIN_MEMORY_SIZE = 128
MAX_MEMORY_SIZE = 10240

_FUNCTION_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def validate_configuration_settings(details: FunctionUploadDetails) -> None:
    """
    Check the runtime configuration of a function.

    Raises:
        InvalidFunctionDetailsError: If a setting is missing or out of range
    """
    if not details.name:
        raise InvalidFunctionDetailsError("Function name must be specified")
    if len(details.name) > MAX_NAME_LENGTH:
        raise InvalidFunctionDetailsError(f"Function name must not exceed {MAX_NAME_LENGTH} characters")
    if not _FUNCTION_NAME_PATTERN.match(details.name):
        raise InvalidFunctionDetailsError(
            "Function name may only contain alphanumerics, hyphens and underscores"
        )
    if not details.handler or not details.handler.strip():
        raise InvalidFunctionDetailsError("Handler must be specified")
    if not details.runtime:
        raise InvalidFunctionDetailsError("Runtime must be specified")
    if not details.role_arn:
        raise InvalidFunctionDetailsError("IAM role must be specified")
    if not MIN_TIMEOUT <= details.timeout <= MAX_TIMEOUT:
        raise InvalidFunctionDetailsError(
            f"Timeout must be between {MIN_TIMEOUT} and {MAX_TIMEOUT} seconds"
        )
    if not MIN_MEMORY_SIZE <= details.memory_size <= MAX_MEMORY_SIZE:
        raise InvalidFunctionDetailsError(
            f"Memory must be between {MIN_MEMORY_SIZE} and {MAX_MEMORY_SIZE} MB"
        )


def validate_code_settings(
    details: FunctionUploadDetails,
    s3_bucket: Optional[str],
    packager: Packager
) -> None:
    """
    Check that the code of a function can be packaged and uploaded.

    Raises:
        InvalidFunctionDetailsError: If the bucket is missing or the runtime unsupported
    """
    if not s3_bucket:
        raise InvalidFunctionDetailsError("S3 bucket must be specified")
    if not packager.supports_runtime(details.runtime):
        raise InvalidFunctionDetailsError(f"Deploying using the runtime {details.runtime} is not supported")
