"""Main Typer application.

Entry points (configured via pyproject.toml console_scripts):

- ``r2rbuild <debian-version> <stage>`` builds with ``docker build``.
- ``r2rbuildx <debian-version> <stage>`` is the same in buildx mode.
"""

from __future__ import annotations

import logging

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from r2rbuild.cli.usage import BUILDX_BANNER, usage_text
from r2rbuild.config import R2RBuildSettings
from r2rbuild.core.build_spec import BuildSpecError
from r2rbuild.core.engine import DockerEngine, ExternalBuildFailure
from r2rbuild.core.host import ParallelismUnavailable
from r2rbuild.core.orchestrator import BuildOrchestrator
from r2rbuild.core.resolver import ConfigError
from r2rbuild.core.revision import RevisionLookupError, resolve_revision
from r2rbuild.models.releases import DEFAULT_RELEASES
from r2rbuild.models.request import VersionQuery

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

app = typer.Typer(
    name="r2rbuild",
    help="Build RStudio Debian packages and images for the Raspberry Pi.",
    rich_markup_mode="rich",
    add_completion=False,
)


def _log_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{name}'")
    return level


def _configure_logging(level: int) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


@app.command(name="build", help="Build one stage for one Debian version.")
def build_cmd(
    ctx: typer.Context,
    args: list[str] | None = typer.Argument(
        None,
        metavar="DEBIAN_VERSION STAGE",
        help="Debian version (e.g. buster) and build stage (e.g. server-deb).",
        show_default=False,
    ),
    buildx: bool = typer.Option(
        False,
        "--buildx",
        help="Build with the experimental docker buildx plugin.",
    ),
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to R2RBUILD_LOG_LEVEL).",
    ),
) -> None:
    """Resolve the build parameters and run the container build."""
    try:
        settings = R2RBuildSettings()
        level = _log_level(log_level or settings.log_level)
    except (ValidationError, ValueError) as exc:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1)
    _configure_logging(level)

    prog = ctx.find_root().info_name or "r2rbuild"
    buildx = buildx or "buildx" in prog
    if buildx:
        console.print(BUILDX_BANNER, markup=False)

    orchestrator = BuildOrchestrator(
        settings,
        releases=DEFAULT_RELEASES,
        engine=DockerEngine(settings.docker_binary),
        buildx=buildx,
        revision_resolver=resolve_revision,
        console=console,
    )

    try:
        distribution_version, build_stage = orchestrator.parse_inputs(args or [])
        resolved = orchestrator.resolve(distribution_version, build_stage)
    except ConfigError as exc:
        err_console.print(usage_text(prog, DEFAULT_RELEASES, str(exc)), markup=False, soft_wrap=True)
        raise typer.Exit(code=1)
    except ParallelismUnavailable as exc:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1)

    if isinstance(resolved, VersionQuery):
        # Printed plainly for scripting
        console.print(resolved.version.tag, markup=False)
        return

    try:
        orchestrator.run_build(resolved)
    except (BuildSpecError, RevisionLookupError) as exc:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1)
    except ExternalBuildFailure as exc:
        err_console.print(f"[bold red]Build failed:[/bold red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=exc.exit_code)


def main() -> None:
    """CLI entry point."""
    app()


def main_buildx() -> None:
    """CLI entry point for buildx mode."""
    app(prog_name="r2rbuildx")


if __name__ == "__main__":
    main()
