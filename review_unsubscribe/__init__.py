"""GitHub Review Request Unsubscriber - leave review-request notification threads you no longer need."""

__version__ = '0.1.0'

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
from .api_client import GitHubAPIClient
from .filters import should_unsubscribe, exclusion_reason
from .unsubscriber import NotificationUnsubscriber
from .output import OutputFormatter

__all__ = [
    'ExclusionPolicy',
    'Identity',
    'NotificationThread',
    'PullRequestRef',
    'RunSummary',
    'TeamPullRequest',
    'ThreadOutcome',
    'ThreadState',
    'GitHubAPIClient',
    'should_unsubscribe',
    'exclusion_reason',
    'NotificationUnsubscriber',
    'OutputFormatter',
]
