"""Tests for GitHubClient wrappers around PyGithub and REST calls."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, Mock, patch

import github
import pytest
import requests

from config import GitHubClientConfig
from exceptions import (ApiError, DiscoveryError, EditError, ForkError,
                        PlatformAuthError, PlatformError)
from github_client import GitHubClient


def _make_client(api_url: str = 'https://api.github.com') -> GitHubClient:
    client = GitHubClient(
        GitHubClientConfig(api_url=api_url, token='token-value', retry_delay_s=0.0)
    )
    client.api = Mock()
    return client


def _gh_repo(full_name: str, language: str = 'Python', fork: bool = False,
             archived: bool = False, private: bool = False) -> SimpleNamespace:
    owner, name = full_name.split('/')
    return SimpleNamespace(
        full_name=full_name,
        name=name,
        owner=SimpleNamespace(login=owner),
        language=language,
        fork=fork,
        archived=archived,
        private=private,
    )


def test_search_query_filters_public_sources() -> None:
    query = GitHubClient.build_search_query('acme', 'python')
    assert query == 'org:acme language:python is:public archived:false fork:false'


def test_search_query_quotes_multi_word_languages() -> None:
    query = GitHubClient.build_search_query('acme', 'jupyter notebook')
    assert 'language:"jupyter notebook"' in query


def test_list_repos_builds_descriptors_and_drops_forks() -> None:
    client = _make_client()
    client.api.search_repositories.return_value = [
        _gh_repo('acme/api'),
        _gh_repo('acme/forked', fork=True),
        _gh_repo('acme/old', archived=True),
        _gh_repo('acme/etl'),
    ]

    repos = client.list_repos('acme', 'python')

    assert [r.full_name for r in repos] == ['acme/api', 'acme/etl']
    assert repos[0].name == 'api'
    assert repos[0].owner_login == 'acme'
    assert repos[0].primary_language == 'Python'


def test_list_repos_wraps_api_errors() -> None:
    client = _make_client()
    client.api.search_repositories.side_effect = github.GithubException(
        503, {'message': 'Service Unavailable'}, None
    )

    with pytest.raises(DiscoveryError) as excinfo:
        client.list_repos('acme', 'go')

    assert 'Service Unavailable' in excinfo.value.reason


def test_list_repos_requires_connection() -> None:
    client = _make_client()
    client.api = None

    with pytest.raises(PlatformError):
        client.list_repos('acme', 'go')


def test_fork_repo_returns_fork_name() -> None:
    client = _make_client()
    source = Mock()
    source.create_fork.return_value = SimpleNamespace(full_name='acme-mirror/api')
    client.api.get_repo.return_value = source

    assert client.fork_repo('acme/api', 'acme-mirror') == 'acme-mirror/api'
    client.api.get_repo.assert_called_once_with('acme/api')
    source.create_fork.assert_called_once_with(organization='acme-mirror')


def test_fork_repo_surfaces_platform_message() -> None:
    client = _make_client()
    client.api.get_repo.side_effect = github.GithubException(
        404, {'message': 'Not Found'}, None
    )

    with pytest.raises(ForkError) as excinfo:
        client.fork_repo('acme/missing', 'acme-mirror')

    assert 'Not Found' in excinfo.value.reason
    assert excinfo.value.target == 'acme/missing'


def test_edit_repo_topics_appends_topic() -> None:
    client = _make_client()
    repo = Mock()
    repo.get_topics.return_value = ['infra']
    client.api.get_repo.return_value = repo

    topics = client.edit_repo_topics('acme-mirror/api', add_topic='acme')

    assert topics == ['infra', 'acme']
    repo.replace_topics.assert_called_once_with(['infra', 'acme'])


def test_edit_repo_topics_skips_existing_topic() -> None:
    client = _make_client()
    repo = Mock()
    repo.get_topics.return_value = ['acme']
    client.api.get_repo.return_value = repo

    client.edit_repo_topics('acme-mirror/api', add_topic='acme')

    repo.replace_topics.assert_not_called()


def test_edit_repo_topics_wraps_errors() -> None:
    client = _make_client()
    repo = Mock()
    repo.get_topics.return_value = []
    repo.replace_topics.side_effect = github.GithubException(
        422, {'message': 'Validation Failed'}, None
    )
    client.api.get_repo.return_value = repo

    with pytest.raises(EditError):
        client.edit_repo_topics('acme-mirror/api', add_topic='acme')


@patch('github_client.requests.patch')
def test_enable_default_code_scanning_sends_configured_state(
    mock_patch: MagicMock,
) -> None:
    client = _make_client('https://github.acme.com/api/v3')
    mock_patch.return_value = Mock(status_code=202, json=Mock(return_value={'run_id': 7}))

    assert client.enable_default_code_scanning('acme-mirror', 'api') == {'run_id': 7}

    url = mock_patch.call_args.args[0]
    assert url == (
        'https://github.acme.com/api/v3/repos/acme-mirror/api/code-scanning/default-setup'
    )
    assert mock_patch.call_args.kwargs['json'] == {'state': 'configured'}
    assert mock_patch.call_args.kwargs['headers']['Authorization'] == 'Bearer token-value'


@patch('github_client.requests.patch')
def test_enable_default_code_scanning_rejected(mock_patch: MagicMock) -> None:
    client = _make_client()
    mock_patch.return_value = Mock(
        status_code=403,
        text='forbidden',
        json=Mock(return_value={'message': 'Code scanning is not enabled'}),
    )

    with pytest.raises(ApiError) as excinfo:
        client.enable_default_code_scanning('acme-mirror', 'api')

    assert excinfo.value.status_code == 403
    assert 'Code scanning is not enabled' in excinfo.value.reason


@patch('github_client.requests.patch')
def test_enable_default_code_scanning_transport_error(mock_patch: MagicMock) -> None:
    client = _make_client()
    mock_patch.side_effect = requests.ConnectionError('connection reset')

    with pytest.raises(ApiError):
        client.enable_default_code_scanning('acme-mirror', 'api')


@patch('github_client.time.sleep')
@patch('github_client.requests.get')
def test_wait_repo_available_polls_until_visible(
    mock_get: MagicMock, mock_sleep: MagicMock
) -> None:
    client = _make_client()
    mock_get.side_effect = [Mock(status_code=404), Mock(status_code=200)]

    assert client.wait_repo_available('acme-mirror/api') is True
    assert mock_get.call_count == 2
    mock_sleep.assert_called_once()


@patch('github_client.requests.get')
def test_check_org_access_missing_org(mock_get: MagicMock) -> None:
    client = _make_client()
    mock_get.return_value = Mock(status_code=404)

    with pytest.raises(PlatformError) as excinfo:
        client.check_org_access('ghost-org')

    assert 'ghost-org' in excinfo.value.reason
    assert mock_get.call_args.args[0] == 'https://api.github.com/orgs/ghost-org'


@patch('github_client.requests.get')
def test_check_org_access_forbidden_is_auth_error(mock_get: MagicMock) -> None:
    client = _make_client()
    mock_get.return_value = Mock(status_code=403)

    with pytest.raises(PlatformAuthError):
        client.check_org_access('acme-mirror')
