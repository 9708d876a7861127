"""Unsubscribes the authenticated user from review-request notification threads."""

import logging
from typing import Callable, Dict, Optional

import requests

from .api_client import GitHubAPIClient
from .exceptions import ActionFailure
from .filters import exclusion_reason
from .models import (
    ExclusionPolicy,
    Identity,
    NotificationThread,
    PullRequestRef,
    RunSummary,
    TeamPullRequest,
    ThreadOutcome,
    ThreadState,
)


class NotificationUnsubscriber:
    """Fetches notifications, filters them and unsubscribes from the survivors.

    Threads are processed one at a time in fetch order. A failure on one
    thread is recorded and processing continues with the next.
    """

    def __init__(
        self,
        client: GitHubAPIClient,
        policy: ExclusionPolicy = None,
        dry_run: bool = False,
        unread_only: bool = False,
        on_outcome: Optional[Callable[[ThreadOutcome], None]] = None
    ):
        """Initialize the unsubscriber.

        Args:
            client: Authenticated GitHub API client
            policy: Which threads are eligible, defaults to all review requests
            dry_run: Report what would be unsubscribed without changing anything
            unread_only: Only consider notifications not yet marked as read
            on_outcome: Called with each thread's outcome as soon as it is known
        """
        self.client = client
        self.policy = policy or ExclusionPolicy()
        self.dry_run = dry_run
        self.unread_only = unread_only
        self.on_outcome = on_outcome

    def run(self) -> RunSummary:
        """Process all review-request notifications once.

        Returns:
            Summary with one outcome per fetched thread
        """
        summary = RunSummary()

        identity = self.client.get_current_user()
        summary.identity = identity
        logging.info(f"Authenticated as {identity.login}")
        logging.info(f"Policy: {self.policy.describe()}")

        team_pulls = None
        if self.policy.is_team_mode:
            team_pulls = self.fetch_team_pulls()

        # All pages are fetched before acting so updates made meanwhile cannot shift pages
        threads = list(self.client.list_notifications(unread_only=self.unread_only))
        logging.info(f"Fetched {len(threads)} notification(s)")

        for thread in threads:
            summary.fetched += 1
            outcome = self.process_thread(thread, identity, team_pulls)
            summary.add(outcome)
            if self.on_outcome:
                self.on_outcome(outcome)

        logging.info(
            f"Processed {summary.fetched} notification(s): "
            f"{len(summary.candidates)} candidate(s), {len(summary.failures)} failure(s)"
        )
        return summary

    def fetch_team_pulls(self) -> Dict[PullRequestRef, TeamPullRequest]:
        """Fetch open pull requests with the policy's team requested as reviewer."""
        team_pulls = {}
        for team_pull in self.client.search_team_review_requests(self.policy.team):
            team_pulls[team_pull.ref] = team_pull
        logging.info(f"Found {len(team_pulls)} open PR(s) requesting review from {self.policy.team}")
        return team_pulls

    def process_thread(
        self,
        thread: NotificationThread,
        identity: Identity,
        team_pulls: Optional[Dict[PullRequestRef, TeamPullRequest]] = None
    ) -> ThreadOutcome:
        """Filter, guard and act on a single thread."""
        reason = exclusion_reason(thread, self.policy, identity, team_pulls)
        if reason is not None:
            logging.debug(f"Excluding {thread.label}: {reason}")
            return ThreadOutcome(thread, ThreadState.EXCLUDED, reason)

        ref = thread.pull_request
        if self.is_review_requested_from(ref, identity):
            return ThreadOutcome(thread, ThreadState.GUARDED, f"{identity.login} is a requested reviewer")

        if self.dry_run:
            return ThreadOutcome(thread, ThreadState.WOULD_UNSUBSCRIBE)

        return self.unsubscribe(thread)

    def is_review_requested_from(self, ref: PullRequestRef, identity: Identity) -> bool:
        """Check live whether the user is individually requested to review a pull request.

        The notification snapshot can be stale, so the pull request is fetched
        again. If it cannot be fetched the answer is True so the thread is left
        alone.
        """
        try:
            requested = self.client.get_requested_reviewers(ref)
        except (requests.RequestException, ValueError, AttributeError) as e:
            logging.warning(f"Could not check review requests on {ref}, leaving it subscribed: {e}")
            return True

        if identity.login in requested:
            logging.info(f"{identity.login} is requested to review {ref}, skipping")
            return True
        return False

    def unsubscribe(self, thread: NotificationThread) -> ThreadOutcome:
        """Delete the thread subscription if one exists.

        A missing subscription counts as success, so calling this twice on the
        same thread is harmless.
        """
        try:
            subscription = self.client.get_thread_subscription(thread.id)
            if subscription is None:
                logging.debug(f"No subscription for {thread.label}")
                return ThreadOutcome(thread, ThreadState.ALREADY_UNSUBSCRIBED)

            if not self.client.delete_thread_subscription(thread.id):
                return ThreadOutcome(thread, ThreadState.ALREADY_UNSUBSCRIBED)
        except ActionFailure as e:
            logging.error(f"Failed to unsubscribe from {thread.label}: {e}")
            return ThreadOutcome(thread, ThreadState.DELETE_FAILED, str(e))
        except requests.RequestException as e:
            logging.error(f"Failed to unsubscribe from {thread.label}: {e}")
            return ThreadOutcome(thread, ThreadState.DELETE_FAILED, str(e))

        logging.info(f"Unsubscribed from {thread.label}")
        return ThreadOutcome(thread, ThreadState.UNSUBSCRIBED)
