#!/usr/bin/env python3
"""Utility functions for org-forklift."""

import re
from typing import List
from urllib.parse import quote, urlparse

MAX_TOPIC_LENGTH = 50


def normalize_topic(owner_login: str) -> str:
    """Map an owner login to a valid GitHub topic.

    Topics are lowercase letters, digits and hyphens, at most 50 characters.
    Example: 'Acme-Corp' -> 'acme-corp'
    """
    topic = re.sub(r"[^a-z0-9-]+", "-", owner_login.lower())
    topic = re.sub(r"-+", "-", topic).strip("-")
    return topic[:MAX_TOPIC_LENGTH]


def parse_languages(raw: str) -> List[str]:
    """Split a comma-separated language list, keeping order and dropping repeats."""
    languages: List[str] = []
    for item in raw.split(","):
        language = item.strip().lower()
        if language and language not in languages:
            languages.append(language)
    return languages


def web_base_url(api_url: str) -> str:
    """Return the web UI base URL derived from the API endpoint."""
    parsed = urlparse(api_url)
    if parsed.netloc == "api.github.com":
        return "https://github.com"

    base_path = parsed.path.rstrip("/")
    if base_path.endswith("/api/v3"):
        base_path = base_path[: -len("/api/v3")]
    base = f"{parsed.scheme}://{parsed.netloc}"
    if base_path:
        base += base_path
    return base


def security_coverage_url(api_url: str, org: str, topic: str) -> str:
    """Link to the org security coverage view filtered by topic."""
    query = quote(f"topic:{topic}", safe="")
    return f"{web_base_url(api_url)}/orgs/{org}/security/coverage?query={query}"
