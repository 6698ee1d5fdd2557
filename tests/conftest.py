"""Shared test fixtures for r2rbuild."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from r2rbuild.config import R2RBuildSettings
from r2rbuild.core.engine import BuildInvocation, DockerEngine
from r2rbuild.core.orchestrator import BuildOrchestrator
from r2rbuild.models.request import HostFacts

REVISION = "0123456789abcdef0123456789abcdef01234567"

DOCKERFILE_TEXT = """\
ARG DEBIAN_VERSION
FROM balenalib/raspberrypi3-debian:${DEBIAN_VERSION}
RUN [ "cross-build-start" ]
RUN apt-get update && apt-get install -y build-essential
RUN [ "cross-build-end" ]
"""


class FakeEngine:
    """Records invocations instead of running docker."""

    def __init__(self, exit_code: int = 0) -> None:
        self.exit_code = exit_code
        self.invocations: list[BuildInvocation] = []
        self._docker = DockerEngine("docker")

    def command(self, invocation: BuildInvocation) -> list[str]:
        return self._docker.command(invocation)

    def build(self, invocation: BuildInvocation) -> int:
        self.invocations.append(invocation)
        return self.exit_code


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Isolate tests from CI variables and any .env file in the cwd."""
    monkeypatch.delenv("TRAVIS", raising=False)
    monkeypatch.delenv("R2RBUILD_CI", raising=False)
    monkeypatch.delenv("R2RBUILD_BUILD_SPEC_DIR", raising=False)
    monkeypatch.delenv("R2RBUILD_REQUIRE_REVISION", raising=False)
    monkeypatch.delenv("R2RBUILD_LOG_LEVEL", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def spec_dir(tmp_path: Path) -> Path:
    """A docker/ directory with a Dockerfile for every artifact stage."""
    directory = tmp_path / "docker"
    directory.mkdir()
    for stage in ("build-env", "server-deb", "desktop-deb", "server"):
        (directory / f"Dockerfile.{stage}").write_text(DOCKERFILE_TEXT)
    return directory


@pytest.fixture
def settings(clean_env: Path, spec_dir: Path) -> R2RBuildSettings:
    return R2RBuildSettings(build_spec_dir=spec_dir)


@pytest.fixture
def x86_host() -> HostFacts:
    return HostFacts(available_units=4, architecture="x86_64", ci=False, buildx=False)


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def console_buffer() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def console(console_buffer: io.StringIO) -> Console:
    return Console(file=console_buffer, width=200, highlight=False)


@pytest.fixture
def make_orchestrator(settings, x86_host, fake_engine, console):
    """Factory fixture: build a BuildOrchestrator with test doubles."""

    def _factory(custom_settings: R2RBuildSettings | None = None, **overrides) -> BuildOrchestrator:
        kwargs = {
            "host": x86_host,
            "engine": fake_engine,
            "revision_resolver": lambda cwd: REVISION,
            "console": console,
        }
        kwargs.update(overrides)
        return BuildOrchestrator(custom_settings or settings, **kwargs)

    return _factory


@pytest.fixture
def revision() -> str:
    """The commit SHA the stub revision resolver reports."""
    return REVISION


@pytest.fixture
def dockerfile_text() -> str:
    return DOCKERFILE_TEXT
