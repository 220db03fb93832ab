"""Version selection embedded in the proposal description.

The proposal body carries a machine-readable block that lets a human
override the proposed version by ticking a checkbox::

    <!-- pls:options -->
    **Current: 1.3.0** (minor) <!-- pls:v:1.3.0:minor:current -->

    Switch to:
    - [ ] 1.3.0-alpha.0 (alpha) <!-- pls:v:1.3.0-alpha.0:transition -->
    - [ ] ~~1.3.0-alpha.0~~ (alpha) <!-- pls:v:1.3.0-alpha.0:transition:disabled:already past alpha -->
    <!-- pls:options:end -->

Only the text between the two markers is read or replaced, so prose around
the block survives edits. When several boxes are ticked the first one wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from pls_release.core.version import BumpKind, Stage, get_base, get_stage

if TYPE_CHECKING:
    from pls_release.core.bump import VersionBump

OPTIONS_START = "<!-- pls:options -->"
OPTIONS_END = "<!-- pls:options:end -->"

CURRENT_MARKER_REGEX = re.compile(r"<!-- pls:v:([^:]+):([^:]+):current -->")
OPTION_MARKER_REGEX = re.compile(r"<!-- pls:v:([^:]+):([^:]+)(?::disabled:(.+?))? -->")
LABEL_REGEX = re.compile(r"\(([^)]+)\)\s*<!--")
CHECKED_REGEX = re.compile(r"^\s*- \[[xX]\]")

VERSION_PATTERN = r"\d+\.\d+\.\d+(?:-[a-z]+\.\d+)?"
HEADER_REGEX = re.compile(rf"^## Release {VERSION_PATTERN}", re.MULTILINE)
TITLE_VERSION_REGEX = re.compile(rf"v({VERSION_PATTERN})")
CHANGES_REGEX = re.compile(r"^### Changes\n\n(.*?)\n\n---\n", re.MULTILINE | re.DOTALL)

DEFAULT_DISABLED_REASON = "unavailable"
NO_CHANGES_TEXT = "_No user-facing changes._"


@dataclass(frozen=True, slots=True)
class VersionOption:
    version: str
    kind: BumpKind
    label: str
    selected: bool = False
    disabled: bool = False
    disabled_reason: str | None = None


@dataclass(frozen=True, slots=True)
class VersionSelection:
    """Options parsed from a proposal body and the one in effect."""

    options: tuple[VersionOption, ...]
    selected: VersionOption | None


def _stage_version(base: str, stage: Stage) -> str:
    return base if stage == Stage.STABLE else f"{base}-{stage}.0"


def generate_options(bump: VersionBump, selected_version: str | None = None) -> list[VersionOption]:
    """Build the version options for a bump.

    Option 0 is always the commit-derived target. From a stable version the
    alpha/beta/rc starts of the same target are offered; from a prerelease
    every later stage is offered and earlier stages are listed as disabled.

    Args:
        bump: Commit-derived bump
        selected_version: Version to mark as selected instead of option 0,
            if it is one of the enabled options

    Returns:
        Options in display order
    """
    base = get_base(bump.to_version)
    current_stage = get_stage(bump.from_version)

    options = [
        VersionOption(
            version=bump.to_version,
            kind=bump.kind,
            label=bump.kind.value,
            selected=True,
        )
    ]

    def add(stage: Stage, *, disabled: bool = False) -> None:
        version = _stage_version(base, stage)
        if version == bump.to_version and not disabled:
            return
        options.append(
            VersionOption(
                version=version,
                kind=BumpKind.TRANSITION,
                label=stage.value,
                disabled=disabled,
                disabled_reason=f"already past {stage}" if disabled else None,
            )
        )

    if current_stage == Stage.STABLE:
        for stage in (Stage.ALPHA, Stage.BETA, Stage.RC):
            add(stage)
    else:
        for stage in Stage:
            if stage.rank > current_stage.rank:
                add(stage)
        for stage in Stage:
            if stage.rank < current_stage.rank:
                add(stage, disabled=True)

    if selected_version is None or selected_version == bump.to_version:
        return options

    if not any(o.version == selected_version and not o.disabled for o in options):
        # Override carried over from an earlier proposal with a different base
        options.append(
            VersionOption(
                version=selected_version,
                kind=BumpKind.TRANSITION,
                label=get_stage(selected_version).value,
            )
        )

    return [
        replace(o, selected=o.version == selected_version and not o.disabled) for o in options
    ]


def generate_options_block(options: list[VersionOption] | tuple[VersionOption, ...]) -> str:
    """Serialize options between the start and end markers."""
    lines = [OPTIONS_START]

    selected = next((o for o in options if o.selected and not o.disabled), None)
    alternatives = [o for o in options if o is not selected]

    if selected is not None:
        lines.append(
            f"**Current: {selected.version}** ({selected.label}) "
            f"<!-- pls:v:{selected.version}:{selected.kind}:current -->"
        )

    if alternatives:
        lines.append("")
        lines.append("Switch to:")
        for opt in alternatives:
            if opt.disabled:
                reason = opt.disabled_reason or DEFAULT_DISABLED_REASON
                lines.append(
                    f"- [ ] ~~{opt.version}~~ ({opt.label}) "
                    f"<!-- pls:v:{opt.version}:{opt.kind}:disabled:{reason} -->"
                )
            else:
                lines.append(
                    f"- [ ] {opt.version} ({opt.label}) <!-- pls:v:{opt.version}:{opt.kind} -->"
                )

    lines.append(OPTIONS_END)
    return "\n".join(lines)


def _parse_kind(token: str) -> BumpKind | None:
    try:
        return BumpKind(token)
    except ValueError:
        return None


def parse_options_block(body: str) -> VersionSelection | None:
    """Parse the options block out of a proposal body.

    The ``current`` line is always a candidate. The first ticked, enabled
    checkbox overrides it. Ticked disabled options are never selected.

    Returns:
        VersionSelection, or None if the markers are missing
    """
    start = body.find(OPTIONS_START)
    end = body.find(OPTIONS_END)
    if start == -1 or end == -1 or end <= start:
        return None

    section = body[start + len(OPTIONS_START) : end]

    options: list[VersionOption] = []
    current: VersionOption | None = None
    checked: VersionOption | None = None

    for line in section.splitlines():
        label_match = LABEL_REGEX.search(line)

        current_match = CURRENT_MARKER_REGEX.search(line)
        if current_match:
            version, kind_token = current_match.groups()
            kind = _parse_kind(kind_token)
            if kind is None:
                continue
            current = VersionOption(
                version=version,
                kind=kind,
                label=label_match.group(1) if label_match else kind_token,
                selected=True,
            )
            options.append(current)
            continue

        if not line.strip().startswith("- ["):
            continue

        marker = OPTION_MARKER_REGEX.search(line)
        if not marker:
            continue

        version, kind_token, reason = marker.groups()
        kind = _parse_kind(kind_token)
        if kind is None:
            continue

        is_checked = bool(CHECKED_REGEX.match(line))
        option = VersionOption(
            version=version,
            kind=kind,
            label=label_match.group(1) if label_match else kind_token,
            selected=is_checked,
            disabled=reason is not None,
            disabled_reason=reason,
        )
        options.append(option)

        if is_checked and not option.disabled and checked is None:
            checked = option

    return VersionSelection(options=tuple(options), selected=checked or current)


def get_selected_version(body: str) -> str | None:
    selection = parse_options_block(body)
    if selection is None or selection.selected is None:
        return None
    return selection.selected.version


def declared_version(title: str) -> str | None:
    """Version a proposal title claims, e.g. ``chore: release v1.2.0``."""
    match = TITLE_VERSION_REGEX.search(title)
    return match.group(1) if match else None


def proposal_title(version: str) -> str:
    return f"chore: release v{version}"


def generate_pr_body(
    bump: VersionBump,
    changelog: str,
    options: list[VersionOption] | None = None,
) -> str:
    """Render the full proposal description."""
    if options is None:
        options = generate_options(bump)
    selected = next((o for o in options if o.selected and not o.disabled), None)
    version = selected.version if selected else bump.to_version

    return f"""## Release {version}

This PR was automatically created by pls.

### Changes

{changelog or NO_CHANGES_TEXT}

---
*Merging this PR will create a release and tag.*

<details>
<summary>Version Selection</summary>

Select a version option below. The branch will be updated when the workflow runs.

{generate_options_block(options)}

</details>"""


def update_pr_body(body: str, new_version: str) -> str:
    """Mark ``new_version`` as current and refresh the release header.

    A version that is not among the options is added as a selected
    transition option, so the body always shows what the branch holds.
    Text outside the options block and the header is left untouched.
    """
    selection = parse_options_block(body)
    if selection is None:
        return body

    options = list(selection.options)
    if not any(o.version == new_version and not o.disabled for o in options):
        options.append(
            VersionOption(
                version=new_version,
                kind=BumpKind.TRANSITION,
                label=get_stage(new_version).value,
            )
        )

    updated = [replace(o, selected=o.version == new_version and not o.disabled) for o in options]
    block = generate_options_block(updated)

    start = body.find(OPTIONS_START)
    end = body.find(OPTIONS_END) + len(OPTIONS_END)
    new_body = body[:start] + block + body[end:]

    return HEADER_REGEX.sub(f"## Release {new_version}", new_body, count=1)


def extract_changelog(body: str) -> str | None:
    """Read the ``### Changes`` section back out of a proposal body."""
    match = CHANGES_REGEX.search(body)
    if not match:
        return None
    changes = match.group(1).strip()
    if not changes or changes == NO_CHANGES_TEXT:
        return None
    return changes


def generate_bootstrap_pr_body(version: str, manifest_path: str) -> str:
    return f"""## Initialize pls

This PR adds `.pls/versions.json` to start tracking releases.

- Detected version: `{version}`
- Detected from: `{manifest_path}`

Merging this PR records `{version}` as the current release.
Future releases will work automatically from conventional commits."""
