"""
Exceptions raised by the deployment pipeline.
"""
from typing import Optional


class LambdaUploaderError(Exception):
    """Base class for errors raised by this package."""


class UploadFailedError(LambdaUploaderError):
    """
    Raised when the function archive could not be stored in S3.

    The original exception is kept both as ``cause`` and as ``__cause__``.
    """

    def __init__(self, bucket: str, key: str, cause: Optional[BaseException] = None):
        super().__init__("Failed to upload function code")
        self.bucket = bucket
        self.key = key
        self.cause = cause
        self.__cause__ = cause


class PackagingError(LambdaUploaderError):
    """Raised when a deployable archive cannot be built."""


class InvalidFunctionDetailsError(LambdaUploaderError, ValueError):
    """Raised when function details fail validation."""
