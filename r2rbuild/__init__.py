"""r2rbuild: RStudio-for-Raspberry-Pi build orchestrator.

Resolves version and packaging metadata per Debian release, derives the
build parallelism and cross-build toggle for the host, and drives the
container build engine with a progress heartbeat:
  - Release table: stretch (1.1.463), buster and bullseye (1.4.1103)
  - Stages: build-env, server-deb, desktop-deb, server, rstudio-version
  - Parallelism capped at 8 on CI, 2 locally
  - Cross-build shims disabled on ARM hosts and in buildx mode
"""

__version__ = "0.1.0"
__description__ = "Build orchestrator for RStudio Debian packages on the Raspberry Pi"

from r2rbuild.core.orchestrator import BuildOrchestrator
from r2rbuild.core.resolver import resolve_config
from r2rbuild.cli.app import app as cli

__all__ = ["BuildOrchestrator", "resolve_config", "cli", "__version__"]
