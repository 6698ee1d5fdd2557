"""Container build engine adapter.

Defines the ``BuildEngine`` Protocol the orchestrator drives, and the
``DockerEngine`` implementation that pipes the build spec into
``docker build -`` (or ``docker buildx build --load -`` in buildx mode).
The engine's own output is streamed through unmodified.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from r2rbuild.core.build_spec import SPEC_ENCODING

logger = logging.getLogger(__name__)

# Shell convention for "command not found".
ENGINE_NOT_FOUND_EXIT_CODE = 127


class ExternalBuildFailure(RuntimeError):
    """Raised when the build engine exits non-zero.

    ``exit_code`` is the engine's own status and becomes the process status.
    """

    def __init__(self, exit_code: int, message: str = "") -> None:
        self.exit_code = exit_code
        super().__init__(message or f"Build engine failed with exit code {exit_code}")


class BuildInvocation(BaseModel):
    """Everything the engine needs for one build."""

    model_config = ConfigDict(frozen=True)

    build_spec: str
    build_args: dict[str, str]
    tag: str
    buildx: bool = False


@runtime_checkable
class BuildEngine(Protocol):
    """Protocol for build engine backends.

    Any object with ``command(invocation) -> list[str]`` and
    ``build(invocation) -> int`` satisfies this protocol.
    """

    def command(self, invocation: BuildInvocation) -> list[str]:
        """Return the argv that ``build`` will run."""
        ...

    def build(self, invocation: BuildInvocation) -> int:
        """Run the build and return the engine's exit status."""
        ...


class DockerEngine:
    """Runs ``docker build`` with the build spec on stdin.

    Parameters
    ----------
    binary:
        The docker executable name or path.
    """

    def __init__(self, binary: str = "docker") -> None:
        self.binary = binary

    def command(self, invocation: BuildInvocation) -> list[str]:
        if invocation.buildx:
            argv = [self.binary, "buildx", "build", "--load"]
        else:
            argv = [self.binary, "build"]
        for name, value in invocation.build_args.items():
            argv += ["--build-arg", f"{name}={value}"]
        argv += ["-t", invocation.tag, "-"]
        return argv

    @staticmethod
    def encode_spec(build_spec: str) -> bytes:
        """Encode the spec back to the bytes it was read from."""
        return build_spec.encode(SPEC_ENCODING)

    def build(self, invocation: BuildInvocation) -> int:
        argv = self.command(invocation)
        logger.info("Running %s", shlex.join(argv))
        try:
            result = subprocess.run(argv, input=self.encode_spec(invocation.build_spec))
        except FileNotFoundError as exc:
            raise ExternalBuildFailure(
                ENGINE_NOT_FOUND_EXIT_CODE, f"Build engine not found: {self.binary}"
            ) from exc
        return result.returncode
