"""Keep the base branch rebased onto the target branch.

Used by the ``two-branch`` strategy: commits land on the base branch
(``next``), releases land on the target branch (``main``), and after every
release the base branch is rebased onto the target and force-pushed with a
lease. The lease makes a concurrent push to the base branch fail the push
instead of being discarded, and the loop retries with backoff.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pls_release.exceptions import GitError
from pls_release.logging import get_logger

if TYPE_CHECKING:
    from pls_release.config.models import PlsConfig
    from pls_release.vcs.base import BranchSyncable

logger = get_logger(__name__)

MAX_RETRIES = 3
DEFAULT_REMOTE = "origin"


@dataclass(frozen=True, slots=True)
class BranchSyncResult:
    """Outcome of a branch sync. Failures are reported here, never raised.

    Attributes:
        synced: The base branch now sits on top of the target branch
        attempts: Push attempts made
        error: Human-readable reason when not synced
        conflict: The rebase hit conflicts and needs a human
    """

    synced: bool
    attempts: int = 0
    error: str | None = None
    conflict: bool = False


def backoff_delay(retry: int) -> int:
    """Seconds to wait before retry number ``retry`` (1-based): 2, 4, 8, ..."""
    return 2**retry


def sync_branches(
    repo: BranchSyncable,
    config: PlsConfig,
    *,
    max_retries: int = MAX_RETRIES,
    sleep: Callable[[float], None] = time.sleep,
    remote: str = DEFAULT_REMOTE,
) -> BranchSyncResult:
    """Rebase the base branch onto the target branch and push it.

    Args:
        repo: Local repository
        config: Branch configuration
        max_retries: Retries after the first attempt when the push is rejected
        sleep: Called with the backoff delay in seconds
        remote: Remote holding both branches

    Returns:
        BranchSyncResult
    """
    base, target = config.base_branch, config.target_branch
    if base == target:
        return BranchSyncResult(synced=True)

    attempts = 0
    for retry in range(max_retries + 1):
        if retry:
            delay = backoff_delay(retry)
            logger.warning("branch_sync_retry", branch=base, retry=retry, delay=delay)
            sleep(delay)

        attempts += 1
        try:
            repo.fetch(remote)
            repo.checkout_branch(base, f"{remote}/{base}")

            if not repo.rebase(f"{remote}/{target}"):
                logger.error("branch_sync_conflict", branch=base, onto=target)
                return BranchSyncResult(
                    synced=False,
                    attempts=attempts,
                    error=f"Rebase of {base} onto {target} failed with conflicts; sync it manually",
                    conflict=True,
                )

            if repo.push_force_with_lease(remote, base):
                logger.info("branch_synced", branch=base, onto=target, attempts=attempts)
                return BranchSyncResult(synced=True, attempts=attempts)
        except GitError as e:
            logger.error("branch_sync_failed", branch=base, error=e.message, stderr=e.stderr)
            return BranchSyncResult(
                synced=False,
                attempts=attempts,
                error=f"Failed to sync {base}: {e.message}",
            )

        logger.info("branch_push_rejected", branch=base, attempt=attempts)

    return BranchSyncResult(
        synced=False,
        attempts=attempts,
        error=f"Could not sync {base} after {attempts} attempts; manual sync may be needed",
    )
