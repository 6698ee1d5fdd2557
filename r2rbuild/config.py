"""Build configuration — env-driven settings for the orchestrator.

Centralized config using pydantic-settings. Reads from a .env file and
R2RBUILD_* environment variables. The CI flag is also picked up from the
``TRAVIS`` variable set by the Travis CI runners the images are built on.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class R2RBuildSettings(BaseSettings):
    """Orchestrator settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export TRAVIS=true
        export R2RBUILD_LOG_LEVEL=DEBUG
        export R2RBUILD_NAMESPACE=myaccount

    Or via .env file::

        R2RBUILD_BUILD_SPEC_DIR=docker
        R2RBUILD_REQUIRE_REVISION=true
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="R2RBUILD_",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
    )

    # CI environment flag, passed through to the build as TRAVIS
    ci: bool = Field(
        default=False,
        validation_alias=AliasChoices("R2RBUILD_CI", "TRAVIS"),
    )
    log_level: str = "WARNING"

    # Image naming and build spec location
    namespace: str = "arturklauser"
    build_spec_dir: Path = Path("docker")
    docker_binary: str = "docker"

    # Parallelism policy
    ci_parallelism_ceiling: int = Field(default=8, ge=1)
    local_parallelism_ceiling: int = Field(default=2, ge=1)

    # Heartbeat: one line per interval, minutes 0..100
    heartbeat_interval_seconds: float = Field(default=60.0, gt=0)
    heartbeat_max_beats: int = Field(default=101, ge=0)

    # Source revision provenance
    require_revision: bool = False
    unknown_revision: str = "unknown-revision"

    @field_validator("ci", mode="before")
    @classmethod
    def _ci_flag(cls, value: Any) -> bool:
        # Only the exact string "true" marks a CI run, as Travis sets it
        if isinstance(value, bool):
            return value
        return value == "true"

    @property
    def parallelism_ceiling(self) -> int:
        """Ceiling that applies to the current execution environment."""
        return self.ci_parallelism_ceiling if self.ci else self.local_parallelism_ceiling
