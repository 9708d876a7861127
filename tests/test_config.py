"""
Unit tests for configuration parsing and token resolution
"""

import logging
import subprocess
import pytest
from datetime import datetime, timezone
from unittest.mock import Mock, patch

from review_unsubscribe.config import (
    build_policy,
    configure_logging,
    parse_cutoff,
    parse_exclusions,
    parse_team,
    resolve_github_token,
)
from review_unsubscribe.exceptions import ValidationError
from review_unsubscribe.models import PullRequestRef


class TestParseCutoff:
    """Test cases for cutoff parsing."""

    def test_date_means_midnight_utc(self):
        assert parse_cutoff('2024-01-01') == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_full_timestamp(self):
        assert parse_cutoff('2024-01-01T08:30:00Z') == datetime(2024, 1, 1, 8, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize('text', [None, '', '   '])
    def test_absent_cutoff(self, text):
        assert parse_cutoff(text) is None

    @pytest.mark.parametrize('text', [
        '2024/01/01', '01-01-2024', '2024-13-01', 'yesterday', '2024-01-01T08:30', '2024-01-01T08:30:00',
        '2024-1-1', '2024-1-1T1:2:3Z', '2024-01-1',
    ])
    def test_malformed_cutoff(self, text):
        """Test that malformed dates raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            parse_cutoff(text)
        assert text in str(exc_info.value)


class TestParseExclusions:
    """Test cases for exclusion list parsing."""

    def test_repeated_and_comma_separated(self):
        excluded = parse_exclusions(['org/x#5,org/x#6', 'https://github.com/org/y/pull/7'])

        assert excluded == frozenset({
            PullRequestRef('org', 'x', 5),
            PullRequestRef('org', 'x', 6),
            PullRequestRef('org', 'y', 7),
        })

    def test_empty(self):
        assert parse_exclusions([]) == frozenset()
        assert parse_exclusions(None) == frozenset()

    def test_invalid_reference(self):
        with pytest.raises(ValidationError):
            parse_exclusions(['org/x#5', 'nonsense'])


class TestParseTeam:
    """Test cases for team parsing."""

    @pytest.mark.parametrize('text', ['org/reviewers', '@org/reviewers', ' org/reviewers '])
    def test_valid(self, text):
        assert parse_team(text) == 'org/reviewers'

    def test_absent(self):
        assert parse_team(None) is None

    @pytest.mark.parametrize('text', ['reviewers', 'org/', '/reviewers', 'org/team/extra'])
    def test_invalid(self, text):
        with pytest.raises(ValidationError):
            parse_team(text)


class TestBuildPolicy:
    """Test cases for building an exclusion policy."""

    def test_combined(self):
        policy = build_policy(exclude=['org/x#5'], since='2024-01-01', team='org/reviewers')

        assert policy.excluded == frozenset({PullRequestRef('org', 'x', 5)})
        assert policy.cutoff == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert policy.team == 'org/reviewers'

    def test_defaults(self):
        policy = build_policy()
        assert policy.excluded == frozenset()
        assert policy.cutoff is None
        assert policy.team is None


class TestResolveGitHubToken:
    """Test cases for token resolution order."""

    @pytest.fixture(autouse=True)
    def clear_env(self, monkeypatch):
        monkeypatch.delenv('GITHUB_TOKEN', raising=False)
        monkeypatch.delenv('GH_TOKEN', raising=False)

    def test_github_token_first(self, monkeypatch):
        monkeypatch.setenv('GITHUB_TOKEN', 'from_github_token')
        monkeypatch.setenv('GH_TOKEN', 'from_gh_token')

        with patch('review_unsubscribe.config.subprocess.run') as mock_run:
            assert resolve_github_token() == 'from_github_token'
            mock_run.assert_not_called()

    def test_gh_token_second(self, monkeypatch):
        monkeypatch.setenv('GH_TOKEN', 'from_gh_token')
        assert resolve_github_token() == 'from_gh_token'

    def test_gh_cli_fallback(self):
        result = Mock(returncode=0, stdout='cli_token\n')
        with patch('review_unsubscribe.config.subprocess.run', return_value=result):
            assert resolve_github_token() == 'cli_token'

    def test_gh_cli_not_logged_in(self):
        result = Mock(returncode=1, stdout='')
        with patch('review_unsubscribe.config.subprocess.run', return_value=result):
            assert resolve_github_token() is None

    def test_gh_cli_missing(self):
        with patch('review_unsubscribe.config.subprocess.run', side_effect=FileNotFoundError('gh')):
            assert resolve_github_token() is None

    def test_gh_cli_timeout(self):
        with patch('review_unsubscribe.config.subprocess.run',
                   side_effect=subprocess.TimeoutExpired(cmd='gh', timeout=5)):
            assert resolve_github_token() is None


class TestConfigureLogging:
    """Test cases for logging configuration."""

    def test_log_level_from_environment(self, monkeypatch):
        monkeypatch.setenv('LOG_LEVEL', 'debug')
        with patch('review_unsubscribe.config.logging.basicConfig') as mock_basic_config:
            configure_logging()
        assert mock_basic_config.call_args[1]['level'] == logging.DEBUG

    def test_invalid_log_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv('LOG_LEVEL', 'chatty')
        with patch('review_unsubscribe.config.logging.basicConfig') as mock_basic_config:
            configure_logging()
        assert mock_basic_config.call_args[1]['level'] == logging.INFO
