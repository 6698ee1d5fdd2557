"""Build stage and orchestrator state models."""

from __future__ import annotations

from enum import Enum


class BuildStage(str, Enum):
    """What a single invocation produces."""

    BUILD_ENV = "build-env"
    SERVER_DEB = "server-deb"
    DESKTOP_DEB = "desktop-deb"
    SERVER = "server"
    RSTUDIO_VERSION = "rstudio-version"

    @property
    def is_artifact(self) -> bool:
        return self in ARTIFACT_STAGES


ARTIFACT_STAGES: frozenset[BuildStage] = frozenset({
    BuildStage.BUILD_ENV,
    BuildStage.SERVER_DEB,
    BuildStage.DESKTOP_DEB,
    BuildStage.SERVER,
})

METADATA_STAGE = BuildStage.RSTUDIO_VERSION

STAGE_DESCRIPTIONS: dict[BuildStage, str] = {
    BuildStage.BUILD_ENV: "create build environment",
    BuildStage.SERVER_DEB: "build server Debian package",
    BuildStage.DESKTOP_DEB: "build desktop Debian package",
    BuildStage.SERVER: "create server runtime environment",
    BuildStage.RSTUDIO_VERSION: "print rstudio version",
}


class OrchestratorState(str, Enum):
    """Lifecycle of one orchestrator invocation."""

    IDLE = "idle"
    INPUTS_PARSED = "inputs_parsed"
    CONFIG_RESOLVED = "config_resolved"
    BUILDING = "building"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# Valid state transitions, enforced by BuildOrchestrator.
# Terminal states (SUCCEEDED, FAILED) have no outgoing transitions; there
# are no retries.
VALID_TRANSITIONS: dict[OrchestratorState, set[OrchestratorState]] = {
    OrchestratorState.IDLE: {OrchestratorState.INPUTS_PARSED, OrchestratorState.FAILED},
    OrchestratorState.INPUTS_PARSED: {
        OrchestratorState.CONFIG_RESOLVED,
        OrchestratorState.FAILED,
    },
    OrchestratorState.CONFIG_RESOLVED: {
        OrchestratorState.BUILDING,
        OrchestratorState.SUCCEEDED,  # metadata-only stage
        OrchestratorState.FAILED,
    },
    OrchestratorState.BUILDING: {OrchestratorState.SUCCEEDED, OrchestratorState.FAILED},
    OrchestratorState.SUCCEEDED: set(),  # terminal
    OrchestratorState.FAILED: set(),  # terminal
}
