"""Release policy models — which RStudio version each Debian release builds."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field


class VersionTriple(BaseModel):
    """RStudio source version as major.minor.patch."""

    model_config = ConfigDict(frozen=True)

    major: int = Field(ge=0)
    minor: int = Field(ge=0)
    patch: int = Field(ge=0)

    @property
    def tag(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def __str__(self) -> str:
        return self.tag


class ReleasePolicy(BaseModel):
    """Build policy for one supported Debian release.

    The package release tag is derived from a revision counter that is bumped
    whenever the packaging changes without an upstream version change.
    """

    model_config = ConfigDict(frozen=True)

    codename: str
    debian_major: int
    version: VersionTriple
    package_revision: int = Field(ge=1)
    note: str = ""

    @property
    def package_release(self) -> str:
        return f"{self.package_revision}~r2r.{self.codename}"


ReleaseTable = Mapping[str, ReleasePolicy]


def make_release_table(*policies: ReleasePolicy) -> ReleaseTable:
    """Build an immutable codename -> policy mapping."""
    return MappingProxyType({p.codename: p for p in policies})


DEFAULT_RELEASES: ReleaseTable = make_release_table(
    ReleasePolicy(
        codename="stretch",
        debian_major=9,
        version=VersionTriple(major=1, minor=1, patch=463),
        package_revision=4,
        # RStudio 1.2+ needs QT 5.10; stretch only ships QT 5.7.1.
        note="latest 1.1 tag as of 2019-04-06",
    ),
    ReleasePolicy(
        codename="buster",
        debian_major=10,
        version=VersionTriple(major=1, minor=4, patch=1103),
        package_revision=1,
        note="latest 1.4 tag as of 2021-02-06",
    ),
    ReleasePolicy(
        codename="bullseye",
        debian_major=11,
        version=VersionTriple(major=1, minor=4, patch=1103),
        package_revision=1,
        note="latest 1.4 tag as of 2021-02-06",
    ),
)
