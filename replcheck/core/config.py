from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ..datastructures.type_aliases import Principal


class CheckSettings(BaseSettings):
    """Range replication check configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="REPLCHECK_", env_file=".env", extra="ignore"
    )

    node_count: int = Field(
        3, ge=1, description="Number of nodes in the cluster under test."
    )
    max_attempts: int = Field(
        20, ge=1, description="How many ticks to poll before giving up."
    )
    tick_interval: float = Field(
        1.0, gt=0, description="Seconds between two replica count checks."
    )
    desired_factor: int = Field(
        3, ge=1, description="Replication factor the store aims for."
    )
    row_limit: int = Field(
        10, ge=1, description="Metadata rows fetched per scan."
    )
    target_node: int = Field(
        0, ge=0, description="Index of the node the client talks to."
    )
    admin_principal: Principal = Field(
        "root", description="Administrative user the client authenticates as."
    )
    scheme: str | None = Field(
        None,
        description="Endpoint scheme; defaults to whatever the cluster harness serves.",
    )
    request_timeout: float = Field(
        5.0, gt=0, description="Seconds to wait for a single scan reply."
    )
    replication_interval: float = Field(
        1.0, gt=0, description="Local cluster only: seconds per up-replication step."
    )
    event_buffer: int = Field(
        10, ge=1, description="Local cluster only: capacity of the event queue."
    )
    missing_range_is_transient: bool = Field(
        False,
        description="Treat a missing bootstrap range as 'not yet converged' instead of fatal.",
    )
    log_level: str = Field("INFO", description="loguru level for the stderr sink.")
    log_debug_scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        (), description="Modules that log at DEBUG regardless of log_level."
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("log_debug_scopes", mode="before")
    @classmethod
    def _split_scopes(cls, value: object) -> object:
        if isinstance(value, str):
            return tuple(scope.strip() for scope in value.split(",") if scope.strip())
        return value
