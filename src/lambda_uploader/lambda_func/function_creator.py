"""
Lambda function creator module.
Handles creation of Lambda functions and updates of their code and configuration.
"""
import logging
from concurrent.futures import Executor, Future
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError

from lambda_uploader.futures import default_executor
from lambda_uploader.lambda_func.config_builder import FunctionConfigBuilder
from lambda_uploader.models import FunctionUploadDetails, LambdaFunction, UploadedCode
from lambda_uploader.session import AwsAccountSettings

logger = logging.getLogger(__name__)


class LambdaFunctionCreator:
    """
    Creates and updates Lambda functions from uploaded code.

    This class handles:
    - Creating a new Lambda function from code stored in S3
    - Updating the code of an existing function, optionally replacing its configuration
    - Replacing the configuration of an existing function

    Code and configuration are updated by two separate calls, code first. If the
    configuration update fails, the new code stays deployed and the failure is reported.
    Remote errors are passed through unchanged and never retried.
    """

    def __init__(
        self,
        lambda_client: Any,
        account_settings: AwsAccountSettings,
        executor: Optional[Executor] = None,
        wait_for_update: bool = True
    ):
        """
        Initialize the Lambda function creator.

        Args:
            lambda_client: boto3 Lambda client, shared between deployments
            account_settings: Source of the credential/region identity of created functions
            executor: Worker pool to run remote calls on. Defaults to the shared pool.
            wait_for_update: Wait for the function to settle after each remote call
        """
        self.lambda_client = lambda_client
        self.account_settings = account_settings
        self.executor = executor or default_executor()
        self.wait_for_update = wait_for_update

    def _wait(self, waiter_name: str, function_name: str) -> None:
        """
        Wait for a Lambda function to settle, unless waiting is disabled.

        Args:
            waiter_name: Name of the boto3 Lambda waiter
            function_name: Name of the Lambda function
        """
        if self.wait_for_update:
            waiter = self.lambda_client.get_waiter(waiter_name)
            waiter.wait(FunctionName=function_name)

    def _create_function(self, details: FunctionUploadDetails, uploaded_code: UploadedCode) -> LambdaFunction:
        """
        Create a new Lambda function from code stored in S3.

        Args:
            details: Configuration of the new function
            uploaded_code: Location of the function archive in S3

        Returns:
            The created function, stamped with the active credential and region
        """
        params = FunctionConfigBuilder(details).create_request(uploaded_code)
        try:
            response = self.lambda_client.create_function(**params)
            logger.info(f"Created Lambda function: {response['FunctionArn']}")
            self._wait('function_active', details.name)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error creating Lambda function {details.name}: {e}")
            raise

        return LambdaFunction.from_configuration(
            response,
            self.account_settings.active_credential_provider_id,
            self.account_settings.active_region
        )

    def _update_function_code(self, details: FunctionUploadDetails, uploaded_code: UploadedCode) -> None:
        """
        Point an existing Lambda function at new code stored in S3.

        Args:
            details: Details naming the function to update
            uploaded_code: Location of the new function archive in S3
        """
        params = FunctionConfigBuilder(details).code_update_request(uploaded_code)
        try:
            response = self.lambda_client.update_function_code(**params)
            logger.info(f"Updated Lambda function code: {response.get('FunctionArn')}")
            self._wait('function_updated', details.name)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error updating Lambda function code for {details.name}: {e}")
            raise

    def _update_function_configuration(self, details: FunctionUploadDetails) -> None:
        """
        Replace the configuration of an existing Lambda function.

        Args:
            details: New configuration of the function
        """
        params = FunctionConfigBuilder(details).configuration()
        try:
            response = self.lambda_client.update_function_configuration(**params)
            logger.info(f"Updated Lambda function configuration: {response.get('FunctionArn')}")
            self._wait('function_updated', details.name)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error updating Lambda function configuration for {details.name}: {e}")
            raise

    def _update_code_and_configuration(
        self,
        details: FunctionUploadDetails,
        uploaded_code: UploadedCode,
        replace_configuration: bool
    ) -> None:
        """
        Update the code of a function, then optionally its configuration.

        Args:
            details: Configuration of the function
            uploaded_code: Location of the new function archive in S3
            replace_configuration: Also replace the configuration after the code
        """
        self._update_function_code(details, uploaded_code)
        if replace_configuration:
            self._update_function_configuration(details)

    def create(self, details: FunctionUploadDetails, uploaded_code: UploadedCode) -> "Future[LambdaFunction]":
        """
        Create a Lambda function from uploaded code.

        Args:
            details: Configuration of the new function
            uploaded_code: Location of the function archive in S3

        Returns:
            Future resolving to the created function
        """
        return self.executor.submit(self._create_function, details, uploaded_code)

    def update(
        self,
        details: FunctionUploadDetails,
        uploaded_code: Optional[UploadedCode] = None,
        replace_configuration: bool = True
    ) -> "Future[None]":
        """
        Update an existing Lambda function.

        With ``uploaded_code``, the function code is replaced and, when
        ``replace_configuration`` is set, the configuration is replaced afterwards.
        Without it, only the configuration is replaced.

        Args:
            details: Configuration of the function
            uploaded_code: Location of the new function archive in S3
            replace_configuration: Also replace the configuration after the code

        Returns:
            Future resolving to None once all remote calls have completed
        """
        if uploaded_code is None:
            return self.executor.submit(self._update_function_configuration, details)
        return self.executor.submit(
            self._update_code_and_configuration,
            details,
            uploaded_code,
            replace_configuration
        )
