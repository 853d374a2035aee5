"""
Code uploader module.
Handles upload of packaged function archives to S3.
"""
import logging
from concurrent.futures import Executor, Future
from pathlib import Path
from typing import Any, Optional, Union

from lambda_uploader.errors import UploadFailedError
from lambda_uploader.futures import default_executor, failed
from lambda_uploader.models import FunctionUploadDetails, UploadedCode

logger = logging.getLogger(__name__)


class CodeUploader:
    """
    Uploads function archives to an S3 bucket.

    The archive of a function is always stored under ``<function-name>.zip``, so a new
    upload for the same function overwrites the previous object. On versioned buckets
    the returned code reference carries the version S3 assigned.
    """

    def __init__(self, s3_client: Any, executor: Optional[Executor] = None):
        """
        Initialize the code uploader.

        Args:
            s3_client: boto3 S3 client, shared between uploads
            executor: Worker pool to run uploads on. Defaults to the shared pool.
        """
        self.s3_client = s3_client
        self.executor = executor or default_executor()

    def _put_archive(self, bucket: str, key: str, code: Path) -> UploadedCode:
        try:
            with open(code, "rb") as body:
                response = self.s3_client.put_object(Bucket=bucket, Key=key, Body=body)
        except Exception as e:
            logger.error(f"Error uploading {code} to s3://{bucket}/{key}: {e}")
            raise UploadFailedError(bucket, key, e) from e

        version = response.get("VersionId")
        logger.info(f"Uploaded {code} to s3://{bucket}/{key} (version: {version})")
        return UploadedCode(bucket=bucket, key=key, version=version)

    def upload(
        self,
        function_details: FunctionUploadDetails,
        code: Union[str, Path],
        s3_bucket: str
    ) -> "Future[UploadedCode]":
        """
        Upload a function archive.

        Args:
            function_details: Details of the function the archive belongs to
            code: Local path of the archive
            s3_bucket: Name of the bucket to upload to

        Returns:
            Future resolving to the uploaded code reference, or failing with
            UploadFailedError, or with ValueError when no bucket is given
        """
        if not s3_bucket:
            return failed(ValueError("S3 bucket name is required"))

        key = function_details.archive_key
        return self.executor.submit(self._put_archive, s3_bucket, key, Path(code))
