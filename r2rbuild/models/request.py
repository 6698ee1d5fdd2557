"""Resolved request and result models for a single build invocation."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from r2rbuild.models.releases import ReleasePolicy, VersionTriple
from r2rbuild.models.stages import BuildStage


class HostFacts(BaseModel):
    """Environment queries that feed the derived build parameters."""

    model_config = ConfigDict(frozen=True)

    available_units: int | None = None  # None when the CPU count is unknown
    architecture: str = ""
    ci: bool = False
    buildx: bool = False


class VersionQuery(BaseModel):
    """Result of the metadata-only stage. Never triggers a build."""

    model_config = ConfigDict(frozen=True)

    distribution_version: str
    release: ReleasePolicy

    @property
    def version(self) -> VersionTriple:
        return self.release.version


class BuildRequest(BaseModel):
    """Immutable configuration for exactly one external build invocation."""

    model_config = ConfigDict(frozen=True)

    distribution_version: str
    build_stage: BuildStage
    version: VersionTriple
    package_release: str
    parallelism: int = Field(ge=1)
    ci: bool = False
    cross_build_enabled: bool = False
    buildx: bool = False
    image_identifier: str
    build_spec_path: Path

    @property
    def image_tag(self) -> str:
        return f"{self.image_identifier}:{self.version.tag}-{self.distribution_version}"


class BuildResult(BaseModel):
    """Outcome of a completed build invocation."""

    model_config = ConfigDict(frozen=True)

    image_tag: str
    exit_code: int
    revision: str
    started_at: datetime
    finished_at: datetime
    duration_seconds: float = Field(ge=0)
    heartbeats: int = 0

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0
