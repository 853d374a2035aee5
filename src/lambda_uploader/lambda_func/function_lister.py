"""
Lists the Lambda functions of the active account and region.
"""
import logging
from typing import Any, Iterator, List, Optional, Tuple

from botocore.exceptions import ClientError

from lambda_uploader.models import LambdaFunction
from lambda_uploader.session import AwsAccountSettings

logger = logging.getLogger(__name__)


class LambdaFunctionLister:
    """Pages through ListFunctions and maps each entry to a LambdaFunction."""

    def __init__(self, lambda_client: Any, account_settings: AwsAccountSettings):
        self.lambda_client = lambda_client
        self.account_settings = account_settings

    def list_functions(self, marker: Optional[str] = None) -> Tuple[List[LambdaFunction], Optional[str]]:
        """
        Fetch one page of functions.

        Args:
            marker: Pagination marker returned by the previous page

        Returns:
            The functions of the page and the marker of the next page, if any
        """
        params = {}
        if marker:
            params['Marker'] = marker

        try:
            response = self.lambda_client.list_functions(**params)
        except ClientError as e:
            logger.error(f"Error listing Lambda functions: {e}")
            raise

        functions = [
            LambdaFunction.from_configuration(
                configuration,
                self.account_settings.active_credential_provider_id,
                self.account_settings.active_region
            )
            for configuration in response.get('Functions', [])
        ]
        return functions, response.get('NextMarker')

    def iter_functions(self) -> Iterator[LambdaFunction]:
        marker = None
        while True:
            functions, marker = self.list_functions(marker)
            yield from functions
            if not marker:
                return
