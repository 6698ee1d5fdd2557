"""Build parameter resolution.

Turns the two positional inputs into either a ``BuildRequest`` (artifact
stages) or a ``VersionQuery`` (metadata stage). All validation happens here,
before any external process is started.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from r2rbuild.core.host import compute_parallelism, detect_cross_build
from r2rbuild.models.releases import ReleaseTable
from r2rbuild.models.request import BuildRequest, HostFacts, VersionQuery
from r2rbuild.models.stages import BuildStage

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised for invalid command line input. Callers print usage and exit 1."""


class InvalidArgumentCount(ConfigError):
    """Raised when the number of positional arguments is not exactly two."""


class UnsupportedVersion(ConfigError):
    """Raised when the Debian version is not in the release table."""


class UnsupportedStage(ConfigError):
    """Raised when the build stage is not a known stage."""


def parse_inputs(args: Sequence[str]) -> tuple[str, str]:
    """Split the positional arguments into (distribution_version, build_stage)."""
    if len(args) != 2:
        raise InvalidArgumentCount(
            f"Invalid number ({len(args)}) of command line arguments."
        )
    return args[0], args[1]


def resolve_config(
    distribution_version: str,
    build_stage: str,
    *,
    releases: ReleaseTable,
    host: HostFacts | Callable[[], HostFacts],
    namespace: str,
    build_spec_dir: Path,
    ci_ceiling: int = 8,
    local_ceiling: int = 2,
) -> BuildRequest | VersionQuery:
    """Resolve the inputs against *releases* into a request.

    The version is checked before the stage. The metadata stage returns a
    ``VersionQuery`` without consulting *host*, which may be a zero-argument
    callable so the host is only probed for artifact stages.

    Raises
    ------
    UnsupportedVersion
        If *distribution_version* is not a key of *releases*.
    UnsupportedStage
        If *build_stage* is not a ``BuildStage`` value.
    ParallelismUnavailable
        If an artifact stage is requested and the CPU count is unknown.
    """
    release = releases.get(distribution_version)
    if release is None:
        raise UnsupportedVersion(f"Unsupported Debian version '{distribution_version}'")

    try:
        stage = BuildStage(build_stage)
    except ValueError:
        raise UnsupportedStage(f"Unsupported build stage '{build_stage}'") from None

    if not stage.is_artifact:
        return VersionQuery(distribution_version=distribution_version, release=release)

    if callable(host):
        host = host()
    parallelism = compute_parallelism(
        host.available_units,
        host.ci,
        ci_ceiling=ci_ceiling,
        local_ceiling=local_ceiling,
    )
    cross_build = detect_cross_build(host.architecture, host.buildx)

    request = BuildRequest(
        distribution_version=distribution_version,
        build_stage=stage,
        version=release.version,
        package_release=release.package_release,
        parallelism=parallelism,
        ci=host.ci,
        cross_build_enabled=cross_build,
        buildx=host.buildx,
        image_identifier=f"{namespace}/raspberrypi-rstudio-{stage.value}",
        build_spec_path=Path(build_spec_dir) / f"Dockerfile.{stage.value}",
    )
    logger.info(
        "Resolved %s/%s: version=%s parallelism=%d cross_build=%s",
        distribution_version,
        stage.value,
        release.version.tag,
        parallelism,
        cross_build,
    )
    return request
