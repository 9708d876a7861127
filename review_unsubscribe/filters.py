"""Filter predicate deciding which notification threads to unsubscribe from."""

from typing import Dict, Optional

from .models import (
    PULL_REQUEST_SUBJECT,
    REVIEW_REQUESTED_REASON,
    ExclusionPolicy,
    Identity,
    NotificationThread,
    PullRequestRef,
    TeamPullRequest,
)


def exclusion_reason(
    thread: NotificationThread,
    policy: ExclusionPolicy,
    identity: Identity,
    team_pulls: Optional[Dict[PullRequestRef, TeamPullRequest]] = None
) -> Optional[str]:
    """Return why a thread must not be unsubscribed, or None if it is a candidate.

    Rules are checked in order and the first failing one is reported.

    Args:
        thread: The notification thread
        policy: Exclusion policy for this run
        identity: The authenticated user
        team_pulls: Pull requests with the policy's team requested, keyed by ref.
            Required in team mode, ignored otherwise.

    Returns:
        A short human-readable reason, or None
    """
    if thread.subject_type != PULL_REQUEST_SUBJECT:
        return f"subject is {thread.subject_type or 'unknown'}, not a pull request"

    if thread.reason != REVIEW_REQUESTED_REASON:
        return f"reason is {thread.reason}"

    ref = thread.pull_request
    if ref is None:
        return f"subject url {thread.subject_url!r} is not a pull request"

    if ref in policy.excluded:
        return f"{ref} is explicitly excluded"

    # Inclusive boundary
    if policy.cutoff is not None and thread.updated_at < policy.cutoff:
        return f"updated {thread.updated_at.date()} before cutoff"

    if policy.is_team_mode:
        team_pull = (team_pulls or {}).get(ref)
        if team_pull is None:
            return f"{policy.team} is not requested on {ref}"
        if team_pull.author == identity.login:
            return f"{ref} is authored by {identity.login}"

    return None


def should_unsubscribe(
    thread: NotificationThread,
    policy: ExclusionPolicy,
    identity: Identity,
    team_pulls: Optional[Dict[PullRequestRef, TeamPullRequest]] = None
) -> bool:
    """Return True if the thread is a candidate for unsubscribing."""
    return exclusion_reason(thread, policy, identity, team_pulls) is None
