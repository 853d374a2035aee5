"""
Value types exchanged between the stages of the deployment pipeline.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

TRACING_ACTIVE = "Active"
TRACING_PASS_THROUGH = "PassThrough"

DEFAULT_TIMEOUT = 30
DEFAULT_MEMORY_SIZE = 128


@dataclass(frozen=True)
class FunctionUploadDetails:
    """
    User supplied description of a Lambda function.

    Attributes:
        name: Name of the Lambda function
        handler: Handler identifier, e.g. ``app.handler``
        runtime: Runtime identifier, e.g. ``python3.12``
        role_arn: ARN of the execution role
        description: Free-form description of the function
        timeout: Timeout in seconds
        memory_size: Memory size in MB
        env_vars: Environment variables of the function
        tracing_mode: ``Active`` or ``PassThrough``
    """

    name: str
    handler: str
    runtime: str
    role_arn: str
    description: str = ""
    timeout: int = DEFAULT_TIMEOUT
    memory_size: int = DEFAULT_MEMORY_SIZE
    env_vars: Mapping[str, str] = field(default_factory=dict)
    tracing_mode: str = TRACING_PASS_THROUGH

    def __post_init__(self):
        object.__setattr__(self, "env_vars", MappingProxyType(dict(self.env_vars)))

    @property
    def archive_key(self) -> str:
        """S3 key the packaged code of this function is stored under."""
        return f"{self.name}.zip"


@dataclass(frozen=True)
class UploadedCode:
    """Location of an uploaded function archive."""

    bucket: str
    key: str
    version: Optional[str] = None


@dataclass(frozen=True)
class LambdaFunction:
    """
    A deployed Lambda function, together with the account identity it was deployed with.
    """

    name: str
    arn: str
    description: Optional[str]
    last_modified: Optional[str]
    handler: Optional[str]
    runtime: Optional[str]
    role: str
    env_variables: Optional[Mapping[str, str]]
    timeout: int
    memory_size: int
    xray_enabled: bool
    credential_provider_id: str
    region: Optional[str]

    @classmethod
    def from_configuration(
        cls,
        configuration: Dict[str, Any],
        credential_provider_id: str,
        region: Optional[str]
    ) -> "LambdaFunction":
        """
        Build a function descriptor from a Lambda ``FunctionConfiguration`` response.

        Args:
            configuration: Response of ``create_function`` or one item of ``list_functions``
            credential_provider_id: Identity of the credentials used
            region: Region the function lives in

        Returns:
            The function descriptor
        """
        env_variables = configuration.get("Environment", {}).get("Variables")
        tracing_mode = configuration.get("TracingConfig", {}).get("Mode")
        return cls(
            name=configuration["FunctionName"],
            arn=configuration["FunctionArn"],
            description=configuration.get("Description"),
            last_modified=configuration.get("LastModified"),
            handler=configuration.get("Handler"),
            runtime=configuration.get("Runtime"),
            role=configuration["Role"],
            env_variables=MappingProxyType(dict(env_variables)) if env_variables is not None else None,
            timeout=configuration["Timeout"],
            memory_size=configuration["MemorySize"],
            xray_enabled=tracing_mode == TRACING_ACTIVE,
            credential_provider_id=credential_provider_id,
            region=region,
        )
