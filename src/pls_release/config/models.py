"""Configuration models.

Convention over configuration: most repositories need no config file at
all. Field names are snake_case in Python and camelCase in JSON.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

Strategy = Literal["simple", "two-branch"]

# Older config files used "next" for the two-branch strategy
LEGACY_STRATEGIES = {"next": "two-branch"}

TWO_BRANCH_DEFAULT_BASE = "next"


class PlsConfig(BaseModel):
    """Repository release configuration.

    Attributes:
        base_branch: Where commits land and proposals are opened against
        target_branch: Where releases are merged and tagged
        release_branch: Branch holding the release proposal
        version_file: Optional text file carrying an ``@pls-version`` marker
        strategy: ``simple`` (one branch) or ``two-branch`` (base is rebased
            onto target after every release)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    base_branch: str = "main"
    target_branch: str = "main"
    release_branch: str = "pls-release"
    version_file: str | None = None
    strategy: Strategy = Field(default="simple")

    @field_validator("strategy", mode="before")
    @classmethod
    def _normalize_strategy(cls, value: Any) -> Any:
        if isinstance(value, str):
            return LEGACY_STRATEGIES.get(value, value)
        return value

    @model_validator(mode="before")
    @classmethod
    def _two_branch_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        strategy = data.get("strategy")
        if not isinstance(strategy, str):
            return data
        two_branch = LEGACY_STRATEGIES.get(strategy, strategy) == "two-branch"
        if two_branch and "baseBranch" not in data and "base_branch" not in data:
            return {**data, "base_branch": TWO_BRANCH_DEFAULT_BASE}
        return data

    @property
    def is_two_branch(self) -> bool:
        return self.strategy == "two-branch" and self.base_branch != self.target_branch
