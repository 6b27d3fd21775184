"""Pure transition functions for the branch / pull-request workflow and the
version history.

Each function takes the current immutable value(s) and returns the new
one(s), or raises ``TransitionError`` and leaves its input untouched.
Allowed transitions::

    create_branch:       main           -> feature branch
    open_pull_request:   feature branch, status != open  -> status open
    merge_pull_request:  status open    -> status merged, branch main,
                                           current version bumped
"""

from __future__ import annotations

import dataclasses

from devops_demo.domain.enums import PullRequestStatus
from devops_demo.domain.exceptions import TransitionError
from devops_demo.domain.values import BranchState, VersionState
from devops_demo.infrastructure.config import WorkflowConfig

_DEFAULT = WorkflowConfig()


def create_branch(branch: BranchState, config: WorkflowConfig = _DEFAULT) -> BranchState:
    """Check out the feature branch.  Only allowed from the main branch."""
    if branch.active_branch != config.main_branch:
        raise TransitionError(
            f"Already on branch {branch.active_branch}; "
            f"merge it back into {config.main_branch} first.",
            action="create_branch",
        )
    return dataclasses.replace(branch, active_branch=config.feature_branch)


def open_pull_request(branch: BranchState, config: WorkflowConfig = _DEFAULT) -> BranchState:
    """Open a pull request for the active feature branch."""
    if branch.active_branch == config.main_branch:
        raise TransitionError(
            f"Cannot open a pull request from {config.main_branch}; "
            "create a feature branch first.",
            action="open_pull_request",
        )
    if branch.pull_request_status is PullRequestStatus.OPEN:
        raise TransitionError(
            f"A pull request for {branch.active_branch} is already open.",
            action="open_pull_request",
        )
    return dataclasses.replace(branch, pull_request_status=PullRequestStatus.OPEN)


def merge_pull_request(
    branch: BranchState,
    versions: VersionState,
    config: WorkflowConfig = _DEFAULT,
) -> tuple[BranchState, VersionState]:
    """Merge the open pull request.

    Returns ``(new_branch, new_versions)``: the branch is reset to main and
    the current version moves to ``config.merged_version``.
    """
    if branch.pull_request_status is not PullRequestStatus.OPEN:
        raise TransitionError("No open pull request to merge.", action="merge_pull_request")
    new_branch = BranchState(
        active_branch=config.main_branch,
        pull_request_status=PullRequestStatus.MERGED,
    )
    # ``previous`` is left alone on merge.
    new_versions = dataclasses.replace(versions, current=config.merged_version)
    return new_branch, new_versions


def apply_rollback(
    versions: VersionState,
    config: WorkflowConfig = _DEFAULT,
    target: str | None = None,
) -> VersionState:
    """Version cascade after a successful rollback.

    ``current`` takes *target*, the version the rollback restored (the old
    ``previous`` when omitted); ``previous`` takes the fixed fallback
    version.  A caller that awaited the rollback passes the version it
    captured before awaiting, so a concurrent rollback cannot shift it.
    """
    return VersionState(
        current=versions.previous if target is None else target,
        previous=config.rollback_fallback_version,
    )
