"""Data models for review-request notification threads."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from .exceptions import PayloadError

GITHUB_TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%SZ'

PULL_REQUEST_SUBJECT = 'PullRequest'
REVIEW_REQUESTED_REASON = 'review_requested'

# https://api.github.com/repos/{owner}/{repo}/pulls/{number}, also GHE /api/v3 prefixes
_API_PULL_URL_RE = re.compile(r'/repos/([^/]+)/([^/]+)/pulls/(\d+)/?$')

# owner/repo#123
_SHORT_REF_RE = re.compile(r'^([\w.-]+)/([\w.-]+)#(\d+)$')

# owner/repo/pull/123 or https://github.com/owner/repo/pull/123[/files...]
_PATH_REF_RE = re.compile(r'^(?:https?://[^/]+/)?([\w.-]+)/([\w.-]+)/pulls?/(\d+)(?:[/?#].*)?$')


def parse_github_timestamp(value: str) -> datetime:
    """Parse a GitHub API timestamp into an aware UTC datetime.

    Raises:
        PayloadError: If the value is not in GitHub's timestamp format
    """
    try:
        return datetime.strptime(value, GITHUB_TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except (TypeError, ValueError) as e:
        raise PayloadError(f"Invalid timestamp {value!r}: {e}") from e


@dataclass(frozen=True, eq=False)
class PullRequestRef:
    """A pull request identified by repository and number.

    Owner and repository names compare case-insensitively, as on GitHub;
    ``str()`` keeps the original spelling.
    """
    owner: str
    repo: str
    number: int

    def __post_init__(self):
        if self.number <= 0:
            raise ValueError(f"Pull request number must be positive, got {self.number}")

    def _key(self):
        return (self.owner.casefold(), self.repo.casefold(), self.number)

    def __eq__(self, other):
        if not isinstance(other, PullRequestRef):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def api_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}/pulls/{self.number}"

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}#{self.number}"

    @classmethod
    def from_api_url(cls, url: Optional[str]) -> Optional['PullRequestRef']:
        """Parse a pull request API URL, returning None if it is not one."""
        if not url:
            return None
        match = _API_PULL_URL_RE.search(url)
        if not match:
            return None
        owner, repo, number = match.groups()
        if int(number) <= 0:
            return None
        return cls(owner, repo, int(number))

    @classmethod
    def parse(cls, text: str) -> Optional['PullRequestRef']:
        """Parse a user-supplied reference such as ``owner/repo#123`` or a pull request URL.

        Returns:
            The parsed reference, or None if the text is not a recognised reference
        """
        text = (text or '').strip()
        for pattern in (_SHORT_REF_RE, _PATH_REF_RE):
            match = pattern.match(text)
            if match:
                owner, repo, number = match.groups()
                if int(number) <= 0:
                    return None
                return cls(owner, repo, int(number))
        return cls.from_api_url(text)


@dataclass(frozen=True)
class Identity:
    """The authenticated user."""
    login: str

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> 'Identity':
        login = payload.get('login') if isinstance(payload, dict) else None
        if not login:
            raise PayloadError("User payload has no 'login'")
        return cls(login)


@dataclass(frozen=True)
class NotificationThread:
    """A single notification thread as returned by ``GET /notifications``."""
    id: str
    reason: str
    subject_type: str
    subject_url: Optional[str]
    subject_title: str
    updated_at: datetime
    repository: str = ''

    @property
    def pull_request(self) -> Optional[PullRequestRef]:
        if self.subject_type != PULL_REQUEST_SUBJECT:
            return None
        return PullRequestRef.from_api_url(self.subject_url)

    @property
    def label(self) -> str:
        ref = self.pull_request
        return str(ref) if ref else f"thread {self.id}"

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> 'NotificationThread':
        """Build a thread from an API payload.

        Raises:
            PayloadError: If required fields are missing or malformed
        """
        if not isinstance(payload, dict):
            raise PayloadError(f"Notification payload must be an object, got {type(payload).__name__}")

        subject = payload.get('subject')
        if not isinstance(subject, dict):
            raise PayloadError(f"Notification {payload.get('id')!r} has no subject")

        for key in ('id', 'reason', 'updated_at'):
            if payload.get(key) in (None, ''):
                raise PayloadError(f"Notification {payload.get('id')!r} is missing '{key}'")

        repository = payload.get('repository') or {}

        return cls(
            id=str(payload['id']),
            reason=payload['reason'],
            subject_type=subject.get('type') or '',
            subject_url=subject.get('url'),
            subject_title=subject.get('title') or '',
            updated_at=parse_github_timestamp(payload['updated_at']),
            repository=repository.get('full_name', '') if isinstance(repository, dict) else '',
        )


@dataclass(frozen=True)
class TeamPullRequest:
    """An open pull request that has a team requested as reviewer."""
    ref: PullRequestRef
    author: str

    @classmethod
    def from_search_item(cls, item: Dict[str, Any]) -> 'TeamPullRequest':
        """Build from a ``/search/issues`` result item.

        Raises:
            PayloadError: If the item is not a pull request or lacks an author
        """
        pull_request = item.get('pull_request') or {}
        ref = PullRequestRef.from_api_url(pull_request.get('url'))
        if ref is None:
            raise PayloadError(f"Search item {item.get('number')!r} is not a pull request")
        author = (item.get('user') or {}).get('login')
        if not author:
            raise PayloadError(f"Search item {ref} has no author")
        return cls(ref, author)


@dataclass(frozen=True)
class ExclusionPolicy:
    """Which review-request threads are eligible for unsubscribing."""
    excluded: FrozenSet[PullRequestRef] = frozenset()
    cutoff: Optional[datetime] = None
    team: Optional[str] = None

    @property
    def is_team_mode(self) -> bool:
        return bool(self.team)

    def describe(self) -> str:
        parts = []
        if self.excluded:
            parts.append(f"excluding {len(self.excluded)} PR(s)")
        if self.cutoff:
            parts.append(f"updated since {self.cutoff.strftime(GITHUB_TIMESTAMP_FORMAT)}")
        if self.team:
            parts.append(f"team {self.team}")
        return ', '.join(parts) if parts else 'all review requests'


class ThreadState(Enum):
    """Terminal state of a thread for one run."""
    EXCLUDED = 'excluded'
    GUARDED = 'skipped'
    UNSUBSCRIBED = 'unsubscribed'
    ALREADY_UNSUBSCRIBED = 'already unsubscribed'
    DELETE_FAILED = 'failed'
    WOULD_UNSUBSCRIBE = 'would unsubscribe'


@dataclass
class ThreadOutcome:
    """What happened to one thread."""
    thread: NotificationThread
    state: ThreadState
    detail: str = ''

    @property
    def succeeded(self) -> bool:
        return self.state in (ThreadState.UNSUBSCRIBED, ThreadState.ALREADY_UNSUBSCRIBED)


@dataclass
class RunSummary:
    """Aggregate result of a run."""
    identity: Optional[Identity] = None
    fetched: int = 0
    outcomes: List[ThreadOutcome] = field(default_factory=list)

    def add(self, outcome: ThreadOutcome):
        self.outcomes.append(outcome)

    def count(self, state: ThreadState) -> int:
        return sum(1 for outcome in self.outcomes if outcome.state == state)

    @property
    def candidates(self) -> List[ThreadOutcome]:
        """Outcomes for threads that passed the filter."""
        return [o for o in self.outcomes if o.state != ThreadState.EXCLUDED]

    @property
    def failures(self) -> List[ThreadOutcome]:
        return [o for o in self.outcomes if o.state == ThreadState.DELETE_FAILED]

    @property
    def is_empty(self) -> bool:
        return not self.candidates
