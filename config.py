#!/usr/bin/env python3
"""Configuration dataclasses for org-forklift."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

DEFAULT_LANGUAGES = ["python", "go", "javascript", "ruby"]
DEFAULT_API_URL = "https://api.github.com"


class FailurePolicy(Enum):
    """How per-repository errors affect the rest of the run."""
    BEST_EFFORT = "best-effort"
    FAIL_FAST = "fail-fast"


@dataclass
class SourceConfig:
    """Where repositories are migrated from."""
    org: Optional[str]
    repo: Optional[str]

    @property
    def single_repo(self) -> bool:
        return bool(self.repo)


@dataclass
class GitHubConfig:
    """GitHub-specific configuration."""
    api_url: str
    token: str
    dest_org: str


@dataclass
class MigrationBehaviorConfig:
    """Migration behavior configuration."""
    languages: List[str] = field(default_factory=lambda: list(DEFAULT_LANGUAGES))
    failure_policy: FailurePolicy = FailurePolicy.BEST_EFFORT
    dry_run: bool = False
    assume_yes: bool = False
    wait: bool = True
    retry_delay_s: float = 3.0


@dataclass
class GitHubClientConfig:
    """Configuration for GitHub client operations."""
    api_url: str
    token: str
    retry_delay_s: float = 3.0
    wait_attempts: int = 10


@dataclass
class Config:
    """Main configuration for an org-to-org fork migration."""
    source: SourceConfig
    github: GitHubConfig
    behavior: MigrationBehaviorConfig
