"""
Deployment pipeline for Lambda Uploader.

This module composes packaging, upload of the archive to S3, and creation or update of the
Lambda function into the two end-to-end deployment flows.
"""
import logging
from concurrent.futures import Future
from pathlib import Path
from typing import Union

from lambda_uploader.futures import then_compose
from lambda_uploader.lambda_func.function_creator import LambdaFunctionCreator
from lambda_uploader.models import FunctionUploadDetails, LambdaFunction
from lambda_uploader.packaging.packager import Artifact, Packager
from lambda_uploader.s3.code_uploader import CodeUploader
from lambda_uploader.session import AwsAccountSettings

logger = logging.getLogger(__name__)


class LambdaCreator:
    """
    Main class for deploying function sources to AWS Lambda.

    Each deployment runs package -> upload -> create or update. A stage starts only once
    the previous one has succeeded; the first failing stage fails the returned future with
    its own error and no later stage runs. No state is kept between deployments.
    """

    def __init__(self, packager: Packager, uploader: CodeUploader, function_creator: LambdaFunctionCreator):
        self.packager = packager
        self.uploader = uploader
        self.function_creator = function_creator

    def _package_and_upload(
        self,
        module: Union[str, Path],
        source_file: Union[str, Path],
        function_details: FunctionUploadDetails,
        s3_bucket: str
    ) -> Future:
        def upload(artifact: Artifact) -> Future:
            try:
                uploaded = self.uploader.upload(function_details, artifact.location, s3_bucket)
            except Exception:
                self.packager.release(artifact)
                raise
            uploaded.add_done_callback(lambda _: self.packager.release(artifact))
            return uploaded

        logger.info(f"Packaging {module} for Lambda function {function_details.name}")
        return then_compose(self.packager.create_package(module, source_file), upload)

    def create_lambda(
        self,
        module: Union[str, Path],
        source_file: Union[str, Path],
        function_details: FunctionUploadDetails,
        s3_bucket: str
    ) -> "Future[LambdaFunction]":
        """
        Package, upload and create a new Lambda function.

        Args:
            module: Root of the function sources
            source_file: File holding the function handler
            function_details: Configuration of the new function
            s3_bucket: Bucket to upload the archive to

        Returns:
            Future resolving to the created function
        """
        return then_compose(
            self._package_and_upload(module, source_file, function_details, s3_bucket),
            lambda uploaded_code: self.function_creator.create(function_details, uploaded_code)
        )

    def update_lambda(
        self,
        module: Union[str, Path],
        source_file: Union[str, Path],
        function_details: FunctionUploadDetails,
        s3_bucket: str,
        replace_configuration: bool = True
    ) -> "Future[None]":
        """
        Package, upload and deploy new code to an existing Lambda function.

        Args:
            module: Root of the function sources
            source_file: File holding the function handler
            function_details: Configuration of the function
            s3_bucket: Bucket to upload the archive to
            replace_configuration: Also replace the function configuration after the code

        Returns:
            Future resolving to None once the function is updated
        """
        return then_compose(
            self._package_and_upload(module, source_file, function_details, s3_bucket),
            lambda uploaded_code: self.function_creator.update(
                function_details,
                uploaded_code,
                replace_configuration
            )
        )


class LambdaCreatorFactory:
    """Wires a LambdaCreator to clients of the active account."""

    @staticmethod
    def create(account_settings: AwsAccountSettings, packager: Packager) -> LambdaCreator:
        return LambdaCreator(
            packager,
            CodeUploader(account_settings.client('s3')),
            LambdaFunctionCreator(account_settings.client('lambda'), account_settings)
        )
