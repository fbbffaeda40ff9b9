"""Configuration management for Event Hubs scale-down automation."""

from pathlib import Path
from typing import Annotated, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Temporal Connection Settings
    temporal_address: str = Field(
        ...,
        description="Temporal address (e.g., namespace.account.tmprl.cloud:7233)",
    )
    temporal_namespace: str = Field(
        ...,
        description="Temporal namespace to run this workflow in",
    )

    # Authentication - Use either API key OR mTLS certificates
    temporal_api_key: Optional[str] = Field(
        default=None,
        description="Temporal namespace API key (alternative to mTLS)",
    )
    temporal_cert_path: Optional[Path] = Field(
        default=None,
        description="Path to mTLS certificate file (alternative to API key)",
    )
    temporal_key_path: Optional[Path] = Field(
        default=None,
        description="Path to mTLS private key file (alternative to API key)",
    )

    # Azure Service Principal
    azure_client_id: str = Field(
        ...,
        description="Client (application) id of the service principal",
    )
    azure_client_secret: str = Field(
        ...,
        description="Client secret of the service principal",
    )
    azure_tenant_id: str = Field(
        ...,
        description="Tenant (directory) id of the service principal",
    )
    arm_base_url: str = Field(
        default="https://management.azure.com",
        description="Base URL for the Azure Resource Manager API",
    )
    arm_request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for each Resource Manager request",
    )

    # Scale-down Settings
    scale_down_tag: str = Field(
        default="ScaleDownTUs",
        min_length=1,
        description="Tag key that opts a namespace into scale-down and holds its target TUs",
    )
    schedule_cron: str = Field(
        default="* * * * *",
        description="Cron expression for the scale-down schedule",
    )

    # Notification Settings
    slack_webhook_url: Optional[str] = Field(
        default=None,
        description="Slack webhook URL for failure notifications",
    )

    # Operational Settings
    dry_run_mode: bool = Field(
        default=False,
        description="If true, runs started or scheduled by the scripts preview changes without executing them",
    )
    namespace_allowlist: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="If specified, only manage these namespaces (comma-separated)",
    )
    namespace_denylist: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Namespaces to exclude from management (comma-separated)",
    )

    # Worker Settings
    task_queue: str = Field(
        default="eventhub-scale-down-task-queue",
        description="Task queue name for the worker",
    )

    @field_validator("namespace_allowlist", "namespace_denylist", mode="before")
    @classmethod
    def parse_comma_separated(cls, v):
        """Parse comma-separated string into list."""
        if isinstance(v, str):
            return [ns.strip() for ns in v.split(",") if ns.strip()]
        return v or []

    @field_validator("temporal_cert_path", "temporal_key_path")
    @classmethod
    def validate_path_exists(cls, v):
        """Validate that certificate/key paths exist if provided."""
        if v is not None and not v.exists():
            raise ValueError(f"File not found: {v}")
        return v

    def validate_auth_config(self) -> None:
        """Validate that exactly one Temporal authentication method is usable."""
        has_api_key = self.temporal_api_key is not None
        has_cert = self.temporal_cert_path is not None
        has_key = self.temporal_key_path is not None

        if has_cert != has_key:
            raise ValueError(
                "If using mTLS, both TEMPORAL_CERT_PATH and "
                "TEMPORAL_KEY_PATH must be provided"
            )

        if not has_api_key and not has_cert:
            raise ValueError(
                "Must provide either TEMPORAL_API_KEY or both "
                "TEMPORAL_CERT_PATH and TEMPORAL_KEY_PATH"
            )

    def use_api_key_auth(self) -> bool:
        """Check if using API key authentication."""
        return self.temporal_api_key is not None

    def use_mtls_auth(self) -> bool:
        """Check if using mTLS authentication."""
        return (
            self.temporal_cert_path is not None
            and self.temporal_key_path is not None
        )

    def should_manage_namespace(self, namespace: str) -> bool:
        """Check if a namespace should be managed based on allow/deny lists."""
        # If allowlist is specified, namespace must be in it
        if self.namespace_allowlist and namespace not in self.namespace_allowlist:
            return False

        # If denylist is specified, namespace must not be in it
        if self.namespace_denylist and namespace in self.namespace_denylist:
            return False

        return True


# Global settings instance
settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings
