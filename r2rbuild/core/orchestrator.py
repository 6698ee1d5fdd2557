"""Build orchestrator — the central coordinator for one build invocation.

The BuildOrchestrator wires together input parsing, config resolution,
host probing, the build spec filter, revision lookup, the heartbeat and the
build engine into a linear pipeline:

    idle -> inputs_parsed -> config_resolved -> building -> succeeded | failed

The metadata stage goes straight from config_resolved to succeeded. Every
error moves the orchestrator to failed; nothing is retried.
"""

from __future__ import annotations

import logging
import shlex
import time
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path

from rich.console import Console

from r2rbuild.config import R2RBuildSettings
from r2rbuild.core.build_spec import load_build_spec
from r2rbuild.core.clock import format_duration, timestamp, utc_now
from r2rbuild.core.engine import BuildEngine, BuildInvocation, DockerEngine, ExternalBuildFailure
from r2rbuild.core.heartbeat import Heartbeat
from r2rbuild.core.host import probe_host
from r2rbuild.core.resolver import parse_inputs, resolve_config
from r2rbuild.core.revision import RevisionLookupError, resolve_revision
from r2rbuild.models.releases import DEFAULT_RELEASES, ReleaseTable
from r2rbuild.models.request import BuildRequest, BuildResult, HostFacts, VersionQuery
from r2rbuild.models.stages import VALID_TRANSITIONS, OrchestratorState

logger = logging.getLogger(__name__)


class InvalidTransitionError(RuntimeError):
    """Raised when a requested state transition is not valid."""


class BuildOrchestrator:
    """Drives one build invocation from raw arguments to exit status.

    Parameters
    ----------
    settings:
        Orchestrator settings. Read from the environment if not provided.
    releases:
        The release table inputs are resolved against.
    engine:
        Build engine backend. Defaults to ``DockerEngine``.
    host:
        Pre-probed host facts. Probed lazily if not provided.
    buildx:
        Whether the invocation runs in buildx mode.
    revision_resolver:
        Returns the source revision for *source_dir*.
    """

    def __init__(
        self,
        settings: R2RBuildSettings | None = None,
        *,
        releases: ReleaseTable = DEFAULT_RELEASES,
        engine: BuildEngine | None = None,
        host: HostFacts | None = None,
        buildx: bool = False,
        revision_resolver: Callable[[Path | None], str] = resolve_revision,
        source_dir: Path | None = None,
        console: Console | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.settings = settings or R2RBuildSettings()
        self.releases = releases
        self.engine = engine or DockerEngine(self.settings.docker_binary)
        self.buildx = buildx
        self.console = console or Console(highlight=False)
        self._host = host
        self._revision_resolver = revision_resolver
        self._source_dir = source_dir
        self._clock = clock

        self._state = OrchestratorState.IDLE
        self.history: list[OrchestratorState] = [self._state]

    # ------------------------------------------------------------------
    # State management
    # ------------------------------------------------------------------

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def host(self) -> HostFacts:
        if self._host is None:
            self._host = probe_host(self.settings, buildx=self.buildx)
        return self._host

    def _transition(self, target: OrchestratorState) -> None:
        allowed = VALID_TRANSITIONS.get(self._state, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition from {self._state.value} to {target.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )
        logger.debug("State %s -> %s", self._state.value, target.value)
        self._state = target
        self.history.append(target)

    def _fail(self) -> None:
        if OrchestratorState.FAILED in VALID_TRANSITIONS.get(self._state, set()):
            self._transition(OrchestratorState.FAILED)

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def parse_inputs(self, args: Sequence[str]) -> tuple[str, str]:
        """Validate the argument count and return (version, stage)."""
        try:
            parsed = parse_inputs(args)
        except Exception:
            self._fail()
            raise
        self._transition(OrchestratorState.INPUTS_PARSED)
        return parsed

    def resolve(self, distribution_version: str, build_stage: str) -> BuildRequest | VersionQuery:
        """Resolve inputs into a build request or a metadata-only query.

        A ``VersionQuery`` completes the invocation successfully.
        """
        try:
            resolved = resolve_config(
                distribution_version,
                build_stage,
                releases=self.releases,
                host=lambda: self.host,
                namespace=self.settings.namespace,
                build_spec_dir=self.settings.build_spec_dir,
                ci_ceiling=self.settings.ci_parallelism_ceiling,
                local_ceiling=self.settings.local_parallelism_ceiling,
            )
        except Exception:
            self._fail()
            raise
        self._transition(OrchestratorState.CONFIG_RESOLVED)
        if isinstance(resolved, VersionQuery):
            self._transition(OrchestratorState.SUCCEEDED)
        return resolved

    def lookup_revision(self) -> str:
        """Return the source revision, or the placeholder in degraded mode."""
        try:
            return self._revision_resolver(self._source_dir)
        except RevisionLookupError as exc:
            if self.settings.require_revision:
                raise
            logger.warning(
                "%s; using placeholder %r", exc, self.settings.unknown_revision
            )
            return self.settings.unknown_revision

    @staticmethod
    def build_args(request: BuildRequest, *, revision: str, build_date: str) -> dict[str, str]:
        """Named parameters passed to the build engine, in a stable order."""
        return {
            "DEBIAN_VERSION": request.distribution_version,
            "VERSION_TAG": request.version.tag,
            "VERSION_MAJOR": str(request.version.major),
            "VERSION_MINOR": str(request.version.minor),
            "VERSION_PATCH": str(request.version.patch),
            "PACKAGE_RELEASE": request.package_release,
            "BUILD_PARALLELISM": str(request.parallelism),
            "TRAVIS": "true" if request.ci else "false",
            "VCS_REF": revision,
            "BUILD_DATE": build_date,
        }

    def run_build(self, request: BuildRequest) -> BuildResult:
        """Run the external build for *request*.

        Lifecycle:
        1. Print the start timestamp and start the heartbeat
        2. Resolve the source revision
        3. Load the build spec, disabling cross-build lines when enabled
        4. Invoke the engine and report its wall-clock duration
        5. Stop the heartbeat (always) and print the completion timestamp

        Raises ``ExternalBuildFailure`` carrying the engine's exit status
        when the build fails.
        """
        self._transition(OrchestratorState.BUILDING)

        started_at = self._clock()
        self.console.print(f"Start building at {timestamp(started_at)} ...")

        revision = self.settings.unknown_revision
        exit_code: int | None = None
        duration = 0.0
        heartbeat = Heartbeat(
            self.console.print,
            interval=self.settings.heartbeat_interval_seconds,
            max_beats=self.settings.heartbeat_max_beats,
        )
        try:
            with heartbeat:
                revision = self.lookup_revision()
                invocation = BuildInvocation(
                    build_spec=load_build_spec(
                        request.build_spec_path,
                        cross_build_enabled=request.cross_build_enabled,
                    ),
                    build_args=self.build_args(
                        request, revision=revision, build_date=timestamp(self._clock())
                    ),
                    tag=request.image_tag,
                    buildx=request.buildx,
                )
                self.console.print(
                    f"+ {shlex.join(self.engine.command(invocation))}", markup=False, soft_wrap=True
                )

                start = time.monotonic()
                try:
                    exit_code = self.engine.build(invocation)
                finally:
                    duration = time.monotonic() - start
                    self.console.print(f"Build time: {format_duration(duration)}")
        except BaseException:
            self._fail()
            raise
        finally:
            finished_at = self._clock()
            self.console.print(f"Done building at {timestamp(finished_at)}")

        if exit_code != 0:
            logger.error("Build of %s failed with exit code %s", request.image_tag, exit_code)
            self._fail()
            raise ExternalBuildFailure(exit_code)

        self._transition(OrchestratorState.SUCCEEDED)
        return BuildResult(
            image_tag=request.image_tag,
            exit_code=exit_code,
            revision=revision,
            started_at=started_at,
            finished_at=finished_at,
            duration_seconds=duration,
            heartbeats=heartbeat.beats,
        )
