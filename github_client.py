#!/usr/bin/env python3
"""GitHub API wrapper for listing, forking and configuring repositories."""

from __future__ import annotations

import time
from typing import List, Optional

import github
import requests

from catalog import RepoDescriptor
from config import DEFAULT_API_URL, GitHubClientConfig
from exceptions import (ApiError, DiscoveryError, EditError, ForkError,
                        PlatformAuthError, PlatformError)
from logging_utils import Logger
from security import SecurityValidator


def _describe(error: Exception) -> str:
    """Platform diagnostic text for an exception, with credentials redacted."""
    if isinstance(error, github.GithubException):
        data = error.data if isinstance(error.data, dict) else {}
        message = data.get("message") or str(error)
        details = [
            item.get("message", "")
            for item in data.get("errors", []) or []
            if isinstance(item, dict) and item.get("message")
        ]
        text = f"{error.status} {message}"
        if details:
            text += f" ({'; '.join(details)})"
        return SecurityValidator.sanitize_for_logging(text)
    return SecurityValidator.sanitize_for_logging(str(error))


class GitHubClient:
    """Wrapper around the GitHub API exposing the operations a migration needs.

    Every remote call raises a :class:`PlatformError` subclass on failure;
    deciding whether that failure is fatal is left to the caller.
    """

    def __init__(self, config: GitHubClientConfig) -> None:
        self.config = config
        self.api: Optional[github.Github] = None

    def connect(self) -> None:
        Logger.info(f"init github API: {self.config.api_url}")
        try:
            auth = github.Auth.Token(self.config.token)
            if self.config.api_url != DEFAULT_API_URL:
                self.api = github.Github(base_url=self.config.api_url, auth=auth)
            else:
                self.api = github.Github(auth=auth)
            user = self.api.get_user()
            Logger.debug(f"authenticated as: {user.login}")
        except github.BadCredentialsException:
            raise PlatformAuthError("authentication failed (github): invalid token")
        except github.GithubException as e:
            raise PlatformError(f"github error: {_describe(e)}")
        except requests.RequestException as e:
            raise PlatformError(f"failed to contact github api: {_describe(e)}")

    def _require_api(self) -> github.Github:
        if self.api is None:
            raise PlatformError("github API not initialized")
        return self.api

    def _get_api_headers(self) -> dict:
        """Get standard API headers for GitHub requests."""
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.config.token}",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def check_org_access(self, org: str) -> None:
        """Check the organization exists and is visible to the token."""
        org_url = f"{self.config.api_url}/orgs/{org}"
        try:
            r_org = requests.get(org_url, headers=self._get_api_headers(), timeout=30)
        except requests.RequestException as e:
            raise PlatformError(f"failed to contact github api: {_describe(e)}", org)

        if r_org.status_code == 401:
            raise PlatformAuthError(
                "unauthorized (401): token invalid or not authorized for GitHub API",
                org,
            )
        if r_org.status_code == 403:
            raise PlatformAuthError(
                f"forbidden (403): the credentials in use cannot access '{org}'. "
                "Possible causes: missing read:org scope, "
                "fine-grained token not granted to the org, "
                "or SAML SSO not authorized for this token.",
                org,
            )
        if r_org.status_code == 404:
            raise PlatformError(
                f"not found (404): organization '{org}' does not "
                "exist or is not visible to this token.",
                org,
            )
        if r_org.status_code != 200:
            Logger.warn(
                f"unexpected response checking org visibility: {r_org.status_code}"
            )

    @staticmethod
    def build_search_query(org: str, language: str) -> str:
        """Search qualifiers for public, non-archived, non-fork repos of a language."""
        if " " in language:
            language = f'"{language}"'
        return f"org:{org} language:{language} is:public archived:false fork:false"

    def list_repos(self, org: str, language: str) -> List[RepoDescriptor]:
        api = self._require_api()
        query = self.build_search_query(org, language)
        Logger.debug(f"search: {query}")
        try:
            results = api.search_repositories(query=query, sort="updated", order="desc")
            # Drop anything the search qualifiers let through
            return [
                RepoDescriptor.from_github(repo)
                for repo in results
                if not repo.fork and not repo.archived and not repo.private
            ]
        except github.BadCredentialsException as e:
            raise PlatformAuthError(
                f"authentication failed listing '{org}': {_describe(e)}", org
            )
        except github.GithubException as e:
            raise DiscoveryError(
                f"failed to list {language} repos of '{org}': {_describe(e)}", org
            )
        except requests.RequestException as e:
            raise DiscoveryError(
                f"failed to contact github api listing '{org}': {_describe(e)}", org
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise DiscoveryError(
                f"unexpected response listing '{org}': {_describe(e)}", org
            )

    def fork_repo(self, full_name: str, dest_org: str) -> str:
        """Fork ``full_name`` into ``dest_org`` and return the fork's full name."""
        api = self._require_api()
        try:
            source = api.get_repo(full_name)
            fork = source.create_fork(organization=dest_org)
        except github.GithubException as e:
            raise ForkError(
                f"failed to fork '{full_name}' into '{dest_org}': {_describe(e)}",
                full_name,
            )
        except requests.RequestException as e:
            raise ForkError(
                f"failed to contact github api forking '{full_name}': {_describe(e)}",
                full_name,
            )
        return fork.full_name

    def wait_repo_available(self, full_name: str) -> bool:
        """Wait until a repository is visible via REST.

        Forks are created asynchronously, so a fresh fork can 404 for a while.
        Returns True if the repository is available, False otherwise.
        """
        url = f"{self.config.api_url}/repos/{full_name}"
        attempts = self.config.wait_attempts
        for i in range(1, attempts + 1):
            try:
                r = requests.get(url, headers=self._get_api_headers(), timeout=15)
                if r.status_code == 200:
                    Logger.debug(f"repository '{full_name}' verified as accessible")
                    return True
                if r.status_code == 404:
                    Logger.debug(
                        f"repository '{full_name}' not yet visible "
                        f"(attempt {i}/{attempts})"
                    )
                else:
                    Logger.warn(
                        f"unexpected status {r.status_code} when checking "
                        f"repository '{full_name}'"
                    )
            except requests.RequestException as e:
                Logger.debug(f"request error checking repository '{full_name}': {e}")
            if i < attempts:
                time.sleep(self.config.retry_delay_s)

        Logger.warn(f"repository '{full_name}' not accessible after {attempts} attempts")
        return False

    def edit_repo_topics(self, full_name: str, add_topic: str) -> List[str]:
        """Add ``add_topic`` to a repository, keeping its existing topics."""
        api = self._require_api()
        try:
            repo = api.get_repo(full_name)
            topics = list(repo.get_topics())
            if add_topic in topics:
                Logger.debug(f"topic '{add_topic}' already set on {full_name}")
                return topics
            topics.append(add_topic)
            repo.replace_topics(topics)
        except github.GithubException as e:
            raise EditError(
                f"failed to add topic '{add_topic}' to '{full_name}': {_describe(e)}",
                full_name,
            )
        except requests.RequestException as e:
            raise EditError(
                f"failed to contact github api editing '{full_name}': {_describe(e)}",
                full_name,
            )
        return topics

    def enable_default_code_scanning(self, org: str, repo_name: str) -> dict:
        """Set code scanning default setup to 'configured'."""
        full_name = f"{org}/{repo_name}"
        url = f"{self.config.api_url}/repos/{full_name}/code-scanning/default-setup"
        try:
            r = requests.patch(
                url,
                headers=self._get_api_headers(),
                json={"state": "configured"},
                timeout=30,
            )
        except requests.RequestException as e:
            raise ApiError(
                f"failed to contact github api configuring '{full_name}': "
                f"{_describe(e)}",
                full_name,
            )

        if r.status_code not in (200, 202):
            try:
                message = r.json().get("message", r.text)
            except ValueError:
                message = r.text
            raise ApiError(
                f"code scanning setup rejected for '{full_name}' "
                f"({r.status_code}): {SecurityValidator.sanitize_for_logging(message)}",
                full_name,
                status_code=r.status_code,
            )

        try:
            return r.json()
        except ValueError:
            return {}
