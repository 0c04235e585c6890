"""Timeout and polling configuration schemas."""
from pydantic import BaseModel, Field, field_validator, model_validator


class TimeoutsConfig(BaseModel):
    """Default operation timeouts in seconds."""

    create: int = Field(60 * 60, description="Create timeout in seconds")
    update: int = Field(60 * 60, description="Update timeout in seconds")
    delete: int = Field(10 * 60, description="Delete timeout in seconds")

    @field_validator("create", "update", "delete")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v


class PollingConfig(BaseModel):
    """Polling intervals for asynchronous operations."""

    task_interval: float = Field(5.0, description="Seconds between database task status checks")
    instance_delay: float = Field(10.0, description="Seconds to wait before the first instance state check")
    instance_min_timeout: float = Field(10.0, description="Minimum seconds between instance state checks")
    not_found_checks: int = Field(20, description="Consecutive empty refreshes tolerated while polling")
    deployment_ready_attempts: int = Field(3, description="Retries while waiting for the database API")
    deployment_ready_base_delay: float = Field(
        10.0, description="Base delay for the quadratic deployment-ready back-off"
    )

    @field_validator("task_interval", "instance_delay", "instance_min_timeout", "deployment_ready_base_delay")
    @classmethod
    def validate_interval(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Interval must be non-negative")
        return v

    @model_validator(mode="after")
    def validate_counts(self) -> "PollingConfig":
        """Validate retry and not-found counts."""
        if self.not_found_checks < 1:
            raise ValueError("not_found_checks must be at least 1")
        if self.deployment_ready_attempts < 0:
            raise ValueError("deployment_ready_attempts must be non-negative")
        return self
