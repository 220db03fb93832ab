"""pls-release: release automation driven by conventional commits.

Proposes releases as pull requests, lets a human switch the proposed
version from the pull request description, and tags and publishes the
release once the proposal is merged.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
