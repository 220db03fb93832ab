"""Release workflows.

Each workflow receives its ports and configuration explicitly and never
reads the environment or the working directory itself.
"""

from __future__ import annotations

from pls_release.workflows.branch_sync import BranchSyncResult, sync_branches
from pls_release.workflows.finalize import FinalizeResult, finalize_release
from pls_release.workflows.init import InitResult, init_locally
from pls_release.workflows.local import LocalReleaseResult, release_locally, transition_locally
from pls_release.workflows.propose import ProposeResult, propose_release
from pls_release.workflows.sync import SyncResult, sync_proposal

__all__ = [
    "BranchSyncResult",
    "FinalizeResult",
    "InitResult",
    "LocalReleaseResult",
    "ProposeResult",
    "SyncResult",
    "finalize_release",
    "init_locally",
    "propose_release",
    "release_locally",
    "sync_branches",
    "sync_proposal",
    "transition_locally",
]
