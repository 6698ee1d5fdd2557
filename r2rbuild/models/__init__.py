"""r2rbuild data models — all Pydantic v2, all frozen (immutable)."""

from r2rbuild.models.releases import (
    DEFAULT_RELEASES,
    ReleasePolicy,
    ReleaseTable,
    VersionTriple,
    make_release_table,
)
from r2rbuild.models.request import BuildRequest, BuildResult, HostFacts, VersionQuery
from r2rbuild.models.stages import (
    ARTIFACT_STAGES,
    METADATA_STAGE,
    STAGE_DESCRIPTIONS,
    VALID_TRANSITIONS,
    BuildStage,
    OrchestratorState,
)

__all__ = [
    # releases
    "VersionTriple",
    "ReleasePolicy",
    "ReleaseTable",
    "DEFAULT_RELEASES",
    "make_release_table",
    # stages
    "BuildStage",
    "ARTIFACT_STAGES",
    "METADATA_STAGE",
    "STAGE_DESCRIPTIONS",
    "OrchestratorState",
    "VALID_TRANSITIONS",
    # request
    "HostFacts",
    "VersionQuery",
    "BuildRequest",
    "BuildResult",
]
