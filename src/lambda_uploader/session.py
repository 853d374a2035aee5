"""
Active AWS account settings.
Supplies the boto3 clients and the credential/region identity used by the pipeline.
"""
import logging
from typing import Any, Optional

import boto3

logger = logging.getLogger(__name__)

DEFAULT_CREDENTIAL_PROVIDER_ID = "default"


class AwsAccountSettings:
    """
    Wraps the boto3 session that deployments run under.

    Credentials and region resolve through boto3's usual chain (``AWS_PROFILE``,
    ``AWS_DEFAULT_REGION``, shared config files) unless given explicitly.
    """

    def __init__(
        self,
        profile_name: Optional[str] = None,
        region_name: Optional[str] = None,
        boto_session: Optional[boto3.Session] = None
    ):
        """
        Initialize the account settings.

        Args:
            profile_name: Named profile to use. If not provided, uses the default chain.
            region_name: AWS region name. If not provided, uses the default region.
            boto_session: Existing session to wrap instead of creating one.
        """
        self.boto_session = boto_session or boto3.Session(
            profile_name=profile_name,
            region_name=region_name
        )

    @property
    def active_credential_provider_id(self) -> str:
        return self.boto_session.profile_name or DEFAULT_CREDENTIAL_PROVIDER_ID

    @property
    def active_region(self) -> Optional[str]:
        return self.boto_session.region_name

    def client(self, service_name: str) -> Any:
        """Create a boto3 client for ``service_name`` bound to this session."""
        logger.debug(f"Creating {service_name} client in region {self.active_region}")
        return self.boto_session.client(service_name)
