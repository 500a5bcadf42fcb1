"""Tests for SecurityValidator log sanitization."""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest

from config import GitHubClientConfig
from exceptions import PlatformAuthError
from github_client import GitHubClient
from security import SecurityValidator


@pytest.mark.parametrize('message', [
    'token=abc123',
    'token: abc123',
    'TOKEN = abc123',
])
def test_token_assignments_are_redacted(message: str) -> None:
    sanitized = SecurityValidator.sanitize_for_logging(message)
    assert 'abc123' not in sanitized
    assert 'token=[REDACTED]' in sanitized


def test_prose_mentioning_tokens_is_left_alone() -> None:
    message = 'error: github token not provided (use --gh-token)'
    assert SecurityValidator.sanitize_for_logging(message) == message


def test_github_tokens_are_redacted() -> None:
    sanitized = SecurityValidator.sanitize_for_logging('auth with ghp_abcDEF123 failed')
    assert sanitized == 'auth with [GITHUB_TOKEN_REDACTED] failed'


@patch('github_client.requests.get')
def test_forbidden_org_message_survives_sanitizing(mock_get: Mock) -> None:
    client = GitHubClient(GitHubClientConfig(api_url='https://api.github.com', token='t'))
    mock_get.return_value = Mock(status_code=403)

    with pytest.raises(PlatformAuthError) as excinfo:
        client.check_org_access('acme-mirror')

    reason = excinfo.value.reason
    assert SecurityValidator.sanitize_for_logging(reason) == reason
    assert "cannot access 'acme-mirror'" in reason
