"""Semantic version parsing and manipulation.

Versions have the shape ``MAJOR.MINOR.PATCH[-STAGE.BUILD]`` where STAGE is
one of ``alpha``, ``beta`` or ``rc``. Anything else is rejected so that
formatting a parsed version always gives back the original string.

Ordering:
    - numeric triple first
    - a stable version sorts above any prerelease of the same triple
    - among prereleases: stage (alpha < beta < rc), then build number
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import StrEnum
from functools import total_ordering

from pls_release.exceptions import VersionError

SEMVER_REGEX = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(?:-(alpha|beta|rc)\.(0|[1-9]\d*))?$"
)


class Stage(StrEnum):
    """Release stage. Declaration order is the progression order."""

    ALPHA = "alpha"
    BETA = "beta"
    RC = "rc"
    STABLE = "stable"

    @property
    def rank(self) -> int:
        return list(Stage).index(self)


class BumpKind(StrEnum):
    """Classification of a version change."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    TRANSITION = "transition"


@dataclass(frozen=True, slots=True)
class Prerelease:
    """Prerelease suffix, e.g. ``beta.2``."""

    stage: Stage
    build: int

    def __str__(self) -> str:
        return f"{self.stage}.{self.build}"


@total_ordering
@dataclass(frozen=True, slots=True)
class ParsedVersion:
    """A parsed semantic version."""

    major: int
    minor: int
    patch: int
    prerelease: Prerelease | None = None

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.prerelease}" if self.prerelease else base

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ParsedVersion):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def _sort_key(self) -> tuple[int, int, int, int, int]:
        if self.prerelease is None:
            return (self.major, self.minor, self.patch, Stage.STABLE.rank, 0)
        return (
            self.major,
            self.minor,
            self.patch,
            self.prerelease.stage.rank,
            self.prerelease.build,
        )

    @property
    def stage(self) -> Stage:
        return self.prerelease.stage if self.prerelease else Stage.STABLE

    @property
    def base(self) -> ParsedVersion:
        """The version without its prerelease suffix."""
        return replace(self, prerelease=None)


def parse_version(text: str) -> ParsedVersion | None:
    """Parse a version string.

    Returns:
        ParsedVersion, or None if the string is not a supported version
    """
    match = SEMVER_REGEX.match(text.strip())
    if not match:
        return None

    major, minor, patch, stage, build = match.groups()
    prerelease = Prerelease(Stage(stage), int(build)) if stage else None
    return ParsedVersion(int(major), int(minor), int(patch), prerelease)


def require_version(text: str) -> ParsedVersion:
    """Parse a version string, raising on invalid input.

    Raises:
        VersionError: If the string is not a supported version
    """
    parsed = parse_version(text)
    if parsed is None:
        raise VersionError(f"Invalid version: {text!r}", version=text)
    return parsed


def format_version(version: ParsedVersion) -> str:
    return str(version)


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b
    """
    pa, pb = require_version(a), require_version(b)
    if pa == pb:
        return 0
    return -1 if pa < pb else 1


def get_stage(version: str) -> Stage:
    return require_version(version).stage


def get_base(version: str) -> str:
    """Version without prerelease suffix: ``1.2.0-rc.1`` -> ``1.2.0``."""
    return str(require_version(version).base)


def bump_version(version: str, kind: BumpKind) -> str:
    """Apply a numeric bump, dropping any prerelease suffix.

    Examples:
        >>> bump_version("1.2.3", BumpKind.MINOR)
        '1.3.0'
    """
    base = require_version(version).base

    if kind == BumpKind.MAJOR:
        return str(ParsedVersion(base.major + 1, 0, 0))
    if kind == BumpKind.MINOR:
        return str(ParsedVersion(base.major, base.minor + 1, 0))
    if kind == BumpKind.PATCH:
        return str(ParsedVersion(base.major, base.minor, base.patch + 1))
    raise VersionError(f"Cannot apply a {kind} bump numerically", version=version, kind=str(kind))


def bump_prerelease(version: str) -> str:
    """Increment the prerelease build: ``1.0.0-alpha.0`` -> ``1.0.0-alpha.1``."""
    parsed = require_version(version)
    if parsed.prerelease is None:
        raise VersionError(f"Not a prerelease version: {version}", version=version)
    pre = parsed.prerelease
    return str(replace(parsed, prerelease=Prerelease(pre.stage, pre.build + 1)))


def to_prerelease(version: str, kind: BumpKind, stage: Stage) -> str:
    """Bump a stable version and start a prerelease.

    Examples:
        >>> to_prerelease("1.2.3", BumpKind.MINOR, Stage.ALPHA)
        '1.3.0-alpha.0'
    """
    if stage == Stage.STABLE:
        raise VersionError("Target stage must be a prerelease stage", stage=str(stage))
    bumped = require_version(bump_version(version, kind))
    return str(replace(bumped, prerelease=Prerelease(stage, 0)))


def transition(version: str, target: Stage) -> str:
    """Move directly to another stage without changing the numeric base.

    A stable target strips the suffix; a prerelease target starts at build 0.
    """
    base = require_version(version).base
    if target == Stage.STABLE:
        return str(base)
    return str(replace(base, prerelease=Prerelease(target, 0)))
