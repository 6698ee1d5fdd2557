"""Usage text for malformed invocations."""

from __future__ import annotations

from r2rbuild.models.releases import ReleaseTable
from r2rbuild.models.stages import STAGE_DESCRIPTIONS

BUILDX_BANNER = "\n".join([
    "=" * 78,
    "Note that buildx mode depends on the experimental Docker support for the",
    "_buildx_ plugin. Unless you know what you're doing, use r2rbuild instead.",
    "=" * 78,
    "",
])


def _dotted(label: str, width: int) -> str:
    return f"{label} {'.' * max(width - len(label), 3)}"


def usage_text(prog: str, releases: ReleaseTable, error: str | None = None) -> str:
    """Render the usage message, preceded by *error* when given."""
    lines: list[str] = []
    if error:
        lines += [error, ""]
    lines.append(f"Usage: {prog} <debian-version> <stage>")

    version_rows = [
        f"{_dotted(codename, 12)} Debian version {policy.debian_major}"
        for codename, policy in releases.items()
    ]
    stage_rows = [
        f"{_dotted(stage.value, 18)} {description}"
        for stage, description in STAGE_DESCRIPTIONS.items()
    ]
    for i, row in enumerate(version_rows):
        prefix = "debian-version: " if i == 0 else " " * len("debian-version: ")
        lines.append(f"         {prefix}{row}")
    for i, row in enumerate(stage_rows):
        prefix = "stage: " if i == 0 else " " * len("stage: ")
        lines.append(f"         {prefix}{row}")
    return "\n".join(lines)
