"""Host probing and the derived parallelism / cross-build parameters."""

from __future__ import annotations

import logging
import os
import platform
import re

from r2rbuild.config import R2RBuildSettings
from r2rbuild.models.request import HostFacts

logger = logging.getLogger(__name__)

_ARM_PATTERN = re.compile(r"(arm|aarch64)")


class ParallelismUnavailable(RuntimeError):
    """Raised when the number of usable CPUs cannot be determined."""


def available_units() -> int | None:
    """Return the number of CPUs this process may run on, or None if unknown.

    Prefers the scheduler affinity set (what ``nproc`` reports) over the raw
    machine CPU count.
    """
    sched_getaffinity = getattr(os, "sched_getaffinity", None)
    if sched_getaffinity is not None:
        try:
            return len(sched_getaffinity(0)) or None
        except OSError:
            logger.debug("sched_getaffinity failed, falling back to cpu_count")
    return os.cpu_count()


def probe_host(settings: R2RBuildSettings, *, buildx: bool = False) -> HostFacts:
    """Collect the host facts for this invocation."""
    facts = HostFacts(
        available_units=available_units(),
        architecture=platform.machine(),
        ci=settings.ci,
        buildx=buildx,
    )
    logger.debug("Host facts: %s", facts)
    return facts


def compute_parallelism(
    available_units: int | None,
    is_ci: bool,
    *,
    ci_ceiling: int = 8,
    local_ceiling: int = 2,
) -> int:
    """Bound the build parallelism by available CPUs and the policy ceiling.

    CI runners get the higher ceiling so that long builds fit in the job
    time limit. An unknown CPU count is an error, never a default.
    """
    if available_units is None or available_units < 1:
        raise ParallelismUnavailable(
            f"Cannot determine available CPUs (got {available_units!r})."
        )
    ceiling = ci_ceiling if is_ci else local_ceiling
    return min(ceiling, available_units)


def detect_cross_build(host_architecture: str, buildx: bool) -> bool:
    """Return whether the build runs on real or emulated ARM.

    In that case the cross-build shims in the Dockerfile must be disabled.
    """
    return bool(_ARM_PATTERN.search(host_architecture)) or buildx
