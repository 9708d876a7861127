"""Configuration: credentials, command-line values and logging."""

import logging
import os
import re
import subprocess
from datetime import datetime, timezone
from typing import Iterable, Optional

from .exceptions import ValidationError
from .models import ExclusionPolicy, PullRequestRef

CUTOFF_DATE_FORMAT = '%Y-%m-%d'
CUTOFF_TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%SZ'

_CUTOFF_RE = re.compile(r'^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}:\d{2}Z)?$')
_TEAM_RE = re.compile(r'^@?([\w.-]+)/([\w.-]+)$')


def configure_logging():
    """Configure root logging (can be overridden by LOG_LEVEL environment variable)."""
    log_level = os.environ.get('LOG_LEVEL', 'INFO').upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(asctime)s %(levelname)s: %(message)s',
        datefmt='%m/%d/%Y %I:%M:%S %p'
    )


def resolve_github_token() -> Optional[str]:
    """Return a GitHub token or None if no source is available.

    Resolution order:
      1. GITHUB_TOKEN environment variable
      2. GH_TOKEN environment variable
      3. `gh auth token` (GitHub CLI session)
    """
    for name in ('GITHUB_TOKEN', 'GH_TOKEN'):
        token = os.environ.get(name)
        if token:
            logging.debug(f"Using GitHub token from {name}")
            return token.strip()

    try:
        result = subprocess.run(
            ['gh', 'auth', 'token'],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logging.debug(f"GitHub CLI token lookup unavailable: {e}")
        return None

    if result.returncode == 0 and result.stdout.strip():
        logging.debug("Resolved GitHub token via gh CLI session")
        return result.stdout.strip()
    return None


def parse_cutoff(text: Optional[str]) -> Optional[datetime]:
    """Parse a cutoff given as YYYY-MM-DD or YYYY-MM-DDTHH:MM:SSZ.

    A date means midnight UTC on that day.

    Returns:
        Aware UTC datetime, or None if no cutoff was given

    Raises:
        ValidationError: If the text is in neither format
    """
    if text is None or not text.strip():
        return None

    text = text.strip()
    if not _CUTOFF_RE.match(text):
        raise ValidationError("Cutoff must be YYYY-MM-DD or YYYY-MM-DDTHH:MM:SSZ", value=text)

    for fmt in (CUTOFF_DATE_FORMAT, CUTOFF_TIMESTAMP_FORMAT):
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    raise ValidationError("Cutoff must be YYYY-MM-DD or YYYY-MM-DDTHH:MM:SSZ", value=text)


def parse_exclusions(values: Iterable[str]) -> frozenset:
    """Parse pull request references to exclude.

    Each value may itself be a comma- or whitespace-separated list.

    Raises:
        ValidationError: If any reference cannot be parsed
    """
    excluded = set()
    for value in values or ():
        for item in re.split(r'[,\s]+', value):
            if not item:
                continue
            ref = PullRequestRef.parse(item)
            if ref is None:
                raise ValidationError("Not a pull request reference (expected owner/repo#123 or a PR URL)", value=item)
            excluded.add(ref)
    return frozenset(excluded)


def parse_team(text: Optional[str]) -> Optional[str]:
    """Parse a team given as org/team-slug (a leading @ is allowed).

    Raises:
        ValidationError: If the text is not in org/team-slug form
    """
    if text is None or not text.strip():
        return None

    match = _TEAM_RE.match(text.strip())
    if not match:
        raise ValidationError("Team must be given as org/team-slug", value=text)
    org, slug = match.groups()
    return f"{org}/{slug}"


def build_policy(exclude: Iterable[str] = (), since: str = None, team: str = None) -> ExclusionPolicy:
    """Build an exclusion policy from raw command-line values.

    Raises:
        ValidationError: If any value is malformed
    """
    policy = ExclusionPolicy(
        excluded=parse_exclusions(exclude),
        cutoff=parse_cutoff(since),
        team=parse_team(team),
    )
    if policy.excluded:
        logging.info(f"Excluding PRs: {', '.join(sorted(str(ref) for ref in policy.excluded))}")
    return policy
