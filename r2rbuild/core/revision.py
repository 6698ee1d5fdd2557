"""Source revision lookup for build provenance."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

# ``HEAD^!`` limits the log to HEAD itself, so this also works on
# --depth=1 shallow clones where HEAD has no parent.
GIT_REVISION_COMMAND: list[str] = ["git", "log", "--pretty=format:%H", "HEAD^!"]


class RevisionLookupError(RuntimeError):
    """Raised when the current commit cannot be determined."""


def resolve_revision(cwd: Path | None = None) -> str:
    """Return the full commit SHA of HEAD in *cwd*.

    Raises
    ------
    RevisionLookupError
        If git is missing, the directory is not a repository, or the output
        is empty.
    """
    try:
        result = subprocess.run(
            GIT_REVISION_COMMAND,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (subprocess.SubprocessError, OSError) as exc:
        raise RevisionLookupError(f"git revision lookup failed: {exc}") from exc

    if result.returncode != 0:
        detail = result.stderr.strip() or f"exit code {result.returncode}"
        raise RevisionLookupError(f"git revision lookup failed: {detail}")

    revision = result.stdout.strip()
    if not revision:
        raise RevisionLookupError("git revision lookup returned no commit")

    logger.debug("Resolved revision %s", revision)
    return revision
