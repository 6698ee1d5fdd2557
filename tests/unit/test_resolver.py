"""Tests for input parsing and build parameter resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from r2rbuild.core.host import ParallelismUnavailable
from r2rbuild.core.resolver import (
    ConfigError,
    InvalidArgumentCount,
    UnsupportedStage,
    UnsupportedVersion,
    parse_inputs,
    resolve_config,
)
from r2rbuild.models.releases import DEFAULT_RELEASES
from r2rbuild.models.request import BuildRequest, HostFacts, VersionQuery
from r2rbuild.models.stages import BuildStage


def _resolve(version: str, stage: str, host: HostFacts | None = None):
    return resolve_config(
        version,
        stage,
        releases=DEFAULT_RELEASES,
        host=host or HostFacts(available_units=4, architecture="x86_64"),
        namespace="arturklauser",
        build_spec_dir=Path("docker"),
    )


class TestParseInputs:
    def test_two_arguments(self):
        assert parse_inputs(["buster", "server"]) == ("buster", "server")

    @pytest.mark.parametrize("args", [[], ["buster"], ["buster", "server", "extra"]])
    def test_wrong_count(self, args: list[str]):
        with pytest.raises(InvalidArgumentCount, match=rf"Invalid number \({len(args)}\)"):
            parse_inputs(args)

    def test_invalid_count_is_config_error(self):
        assert issubclass(InvalidArgumentCount, ConfigError)


class TestResolveConfig:
    @pytest.mark.parametrize("version", ["X", "jessie", "", "Buster"])
    def test_unsupported_version(self, version: str):
        with pytest.raises(UnsupportedVersion, match="Unsupported Debian version"):
            _resolve(version, "server-deb")

    @pytest.mark.parametrize("stage", ["deb", "", "SERVER", "rstudio"])
    def test_unsupported_stage(self, stage: str):
        with pytest.raises(UnsupportedStage, match="Unsupported build stage"):
            _resolve("buster", stage)

    def test_version_checked_before_stage(self):
        with pytest.raises(UnsupportedVersion):
            _resolve("X", "bogus")

    @pytest.mark.parametrize("version", ["stretch", "buster", "bullseye"])
    def test_metadata_stage_returns_version_query(self, version: str):
        result = _resolve(version, "rstudio-version")
        assert isinstance(result, VersionQuery)
        assert result.version == DEFAULT_RELEASES[version].version

    def test_metadata_stage_ignores_unknown_cpu_count(self):
        result = _resolve("buster", "rstudio-version", HostFacts(available_units=None))
        assert isinstance(result, VersionQuery)
        assert result.version.tag == "1.4.1103"

    def test_artifact_stage_needs_cpu_count(self):
        with pytest.raises(ParallelismUnavailable):
            _resolve("buster", "server-deb", HostFacts(available_units=None))

    @pytest.mark.parametrize("stage", ["build-env", "server-deb", "desktop-deb", "server"])
    def test_artifact_stage_paths(self, stage: str):
        request = _resolve("bullseye", stage)
        assert isinstance(request, BuildRequest)
        assert request.build_stage == BuildStage(stage)
        assert request.image_identifier == f"arturklauser/raspberrypi-rstudio-{stage}"
        assert request.build_spec_path == Path("docker") / f"Dockerfile.{stage}"

    def test_request_fields(self):
        request = _resolve("stretch", "server-deb")
        assert request.version.tag == "1.1.463"
        assert request.package_release == "4~r2r.stretch"
        assert request.parallelism == 2
        assert request.cross_build_enabled is False
        assert request.image_tag == "arturklauser/raspberrypi-rstudio-server-deb:1.1.463-stretch"

    def test_ci_host_gets_higher_ceiling(self):
        host = HostFacts(available_units=32, architecture="aarch64", ci=True)
        request = _resolve("buster", "desktop-deb", host)
        assert request.parallelism == 8
        assert request.ci is True
        assert request.cross_build_enabled is True

    def test_buildx_propagates(self):
        host = HostFacts(available_units=4, architecture="x86_64", buildx=True)
        request = _resolve("buster", "server", host)
        assert request.buildx is True
        assert request.cross_build_enabled is True

    def test_custom_release_table(self):
        from r2rbuild.models.releases import ReleasePolicy, VersionTriple, make_release_table

        table = make_release_table(
            ReleasePolicy(
                codename="trixie",
                debian_major=13,
                version=VersionTriple(major=2022, minor=7, patch=1),
                package_revision=2,
            )
        )
        result = resolve_config(
            "trixie",
            "rstudio-version",
            releases=table,
            host=HostFacts(),
            namespace="n",
            build_spec_dir=Path("d"),
        )
        assert result.version.tag == "2022.7.1"
        with pytest.raises(UnsupportedVersion):
            resolve_config(
                "buster",
                "rstudio-version",
                releases=table,
                host=HostFacts(),
                namespace="n",
                build_spec_dir=Path("d"),
            )


class TestLazyHostFacts:
    def test_metadata_stage_never_calls_host_provider(self):
        def provider() -> HostFacts:
            raise AssertionError("host probed for the metadata stage")

        result = _resolve("buster", "rstudio-version", provider)
        assert isinstance(result, VersionQuery)

    def test_artifact_stage_calls_host_provider_once(self):
        calls: list[int] = []

        def provider() -> HostFacts:
            calls.append(1)
            return HostFacts(available_units=32, architecture="armv7l", ci=True)

        request = _resolve("bullseye", "server", provider)
        assert calls == [1]
        assert request.parallelism == 8
        assert request.cross_build_enabled is True
