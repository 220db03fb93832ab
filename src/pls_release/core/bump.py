"""Next-version calculation from a set of commits.

Pure functions, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pls_release.core.commits import CommitType
from pls_release.core.version import (
    BumpKind,
    Stage,
    bump_prerelease,
    bump_version,
    get_stage,
    parse_version,
    require_version,
    to_prerelease,
    transition,
)
from pls_release.exceptions import VersionError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pls_release.core.commits import Commit


@dataclass(frozen=True, slots=True)
class VersionBump:
    """One proposed version transition.

    ``kind`` is the commit-derived classification. While in prerelease it is
    recorded for display only and does not affect ``to``.
    """

    from_version: str
    to_version: str
    kind: BumpKind
    commits: tuple[Commit, ...] = field(default_factory=tuple)


def determine_bump_kind(commits: Sequence[Commit], current_version: str | None = None) -> BumpKind | None:
    """Determine the bump kind from commits.

    Rules:
        - any breaking change -> major (minor while the major version is 0)
        - any ``feat`` -> minor
        - any other commit -> patch
        - no commits -> None (nothing to release)

    Args:
        commits: Releasable commits since the last release
        current_version: Version being bumped, for the pre-1.0 rule

    Returns:
        BumpKind, or None if there is nothing to release
    """
    if not commits:
        return None

    if any(c.breaking for c in commits):
        if current_version is not None:
            parsed = parse_version(current_version)
            if parsed is not None and parsed.major == 0:
                return BumpKind.MINOR
        return BumpKind.MAJOR

    if any(c.kind == CommitType.FEAT for c in commits):
        return BumpKind.MINOR

    return BumpKind.PATCH


def calculate_bump(current_version: str, commits: Sequence[Commit]) -> VersionBump | None:
    """Calculate the next version for a set of commits.

    In prerelease only the build counter advances (``alpha.3`` -> ``alpha.4``).

    Returns:
        VersionBump, or None if there are no commits
    """
    kind = determine_bump_kind(commits, current_version)
    if kind is None:
        return None

    if get_stage(current_version) != Stage.STABLE:
        next_version = bump_prerelease(current_version)
    else:
        next_version = bump_version(current_version, kind)

    return VersionBump(
        from_version=current_version,
        to_version=next_version,
        kind=kind,
        commits=tuple(commits),
    )


def classify_change(from_version: str, to_version: str) -> BumpKind:
    """Classify an already-chosen version change.

    Used when the commit-derived kind is unavailable, e.g. after a human
    picked a version or when intent is reconstructed from the manifest.
    """
    source = require_version(from_version)
    target = require_version(to_version)

    if target.prerelease is not None or source.prerelease is not None:
        return BumpKind.TRANSITION
    if target.major > source.major:
        return BumpKind.MAJOR
    if target.minor > source.minor:
        return BumpKind.MINOR
    return BumpKind.PATCH


def calculate_transition(
    current_version: str,
    target: Stage,
    kind: BumpKind = BumpKind.MINOR,
) -> str:
    """Calculate an explicit stage transition.

    Stable -> prerelease bumps by ``kind`` first, then appends ``stage.0``.
    Prerelease -> later stage keeps the numeric base.

    Raises:
        VersionError: If the target is not later than the current stage
    """
    current_stage = require_version(current_version).stage

    if current_stage == Stage.STABLE:
        if target == Stage.STABLE:
            raise VersionError(
                "Already on a stable version; use a normal release instead",
                code="INVALID_TRANSITION",
                version=current_version,
                target=str(target),
            )
        return to_prerelease(current_version, kind, target)

    if target.rank <= current_stage.rank:
        raise VersionError(
            f"Cannot transition from {current_stage} back to {target}",
            code="INVALID_TRANSITION",
            version=current_version,
            target=str(target),
        )
    return transition(current_version, target)
