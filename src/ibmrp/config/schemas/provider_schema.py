"""IBM Cloud provider configuration schema."""
from typing import List, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator


class EndpointsConfig(BaseModel):
    """Optional service endpoint overrides."""

    resource_controller: Optional[str] = None
    resource_manager: Optional[str] = None
    global_catalog: Optional[str] = None
    global_tagging: Optional[str] = None
    cloud_databases: Optional[str] = None
    event_notifications: Optional[str] = None
    iam: Optional[str] = None


class IBMProviderConfig(BaseModel):
    """Settings used to build the IBM Cloud SDK clients."""

    api_key: Optional[SecretStr] = Field(None, description="IBM Cloud IAM API key")
    region: str = Field("us-south", description="Region for regional services")
    resource_group_id: Optional[str] = Field(
        None, description="Resource group used when a resource does not set one"
    )
    environment: str = Field("production", description="IBM Cloud environment")
    visibility: str = Field("public", description="Endpoint visibility: public or private")
    env_tags: List[str] = Field(
        default_factory=list, description="Tags attached to every taggable resource"
    )
    endpoints: EndpointsConfig = Field(default_factory=lambda: EndpointsConfig())

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        valid_environments = ["production", "staging"]
        if v not in valid_environments:
            raise ValueError(f"Environment must be one of {valid_environments}")
        return v

    @field_validator("visibility")
    @classmethod
    def validate_visibility(cls, v: str) -> str:
        valid = ["public", "private", "public-and-private"]
        if v not in valid:
            raise ValueError(f"Visibility must be one of {valid}")
        return v

    @field_validator("env_tags", mode="before")
    @classmethod
    def split_env_tags(cls, v):
        """Accept the comma-separated form used by IC_ENV_TAGS."""
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        return v

    @property
    def console_url(self) -> str:
        """Base URL of the IBM Cloud console."""
        if self.environment == "staging":
            return "https://test.cloud.ibm.com"
        return "https://cloud.ibm.com"
