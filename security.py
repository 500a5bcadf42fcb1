#!/usr/bin/env python3
"""Security validation utilities for org-forklift."""

import re
from typing import List, Optional


class SecurityValidator:
    """Security validation utilities for input sanitization and validation."""

    # Maximum lengths enforced by GitHub
    MAX_REPO_NAME_LENGTH = 100
    MAX_LOGIN_LENGTH = 39
    MAX_URL_LENGTH = 2048
    MAX_LANGUAGE_LENGTH = 50

    # Allowed characters for various inputs
    SAFE_REPO_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")
    SAFE_LOGIN_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?$")
    SAFE_LANGUAGE_PATTERN = re.compile(r"^[A-Za-z0-9+#. -]+$")

    @classmethod
    def _reject_control_characters(cls, value: str, label: str) -> None:
        if "\x00" in value or any(ord(c) < 32 for c in value):
            raise ValueError(f"{label} contains null bytes or control characters")

    @classmethod
    def validate_repo_name(cls, name: str) -> str:
        """Validate a bare repository name (no owner part)."""
        if not name or not isinstance(name, str):
            raise ValueError("Repository name must be a non-empty string")

        if len(name) > cls.MAX_REPO_NAME_LENGTH:
            raise ValueError(
                f"Repository name exceeds maximum length of {cls.MAX_REPO_NAME_LENGTH}"
            )

        # Check for path traversal attempts
        if name in (".", "..") or "/" in name or "\\" in name:
            raise ValueError("Repository name contains invalid path characters")

        cls._reject_control_characters(name, "Repository name")

        if not cls.SAFE_REPO_NAME_PATTERN.match(name):
            raise ValueError("Repository name contains invalid characters")

        return name

    @classmethod
    def validate_login(cls, login: str) -> str:
        """Validate a user or organization login."""
        if not login or not isinstance(login, str):
            raise ValueError("Login must be a non-empty string")

        if len(login) > cls.MAX_LOGIN_LENGTH:
            raise ValueError(
                f"Login exceeds maximum length of {cls.MAX_LOGIN_LENGTH}"
            )

        cls._reject_control_characters(login, "Login")

        if not cls.SAFE_LOGIN_PATTERN.match(login):
            raise ValueError(f"Login '{login}' contains invalid characters")

        return login

    @classmethod
    def validate_full_name(cls, full_name: str) -> str:
        """Validate an ``owner/name`` repository identifier without altering it."""
        if not full_name or not isinstance(full_name, str):
            raise ValueError("Repository must be a non-empty 'owner/name' string")

        parts = full_name.split("/")
        if len(parts) != 2:
            raise ValueError(f"Repository '{full_name}' must have the form owner/name")

        cls.validate_login(parts[0])
        cls.validate_repo_name(parts[1])
        return full_name

    @classmethod
    def validate_language(cls, language: str) -> str:
        """Validate a language filter such as ``python`` or ``c++``."""
        if not language or not isinstance(language, str):
            raise ValueError("Language filter must be a non-empty string")

        if len(language) > cls.MAX_LANGUAGE_LENGTH:
            raise ValueError(
                f"Language filter exceeds maximum length of {cls.MAX_LANGUAGE_LENGTH}"
            )

        cls._reject_control_characters(language, "Language filter")

        if not cls.SAFE_LANGUAGE_PATTERN.match(language):
            raise ValueError(f"Language filter '{language}' contains invalid characters")

        return language

    @classmethod
    def validate_url(cls, url: str, allowed_schemes: Optional[List[str]] = None) -> str:
        """Validate URL for security."""
        if not url or not isinstance(url, str):
            raise ValueError("URL must be a non-empty string")

        if len(url) > cls.MAX_URL_LENGTH:
            raise ValueError(f"URL exceeds maximum length of {cls.MAX_URL_LENGTH}")

        # Check for null bytes and control characters
        if "\x00" in url or any(ord(c) < 32 for c in url if c not in "\t\n\r"):
            raise ValueError("URL contains null bytes or control characters")

        if not url.startswith(("http://", "https://")):
            raise ValueError("URL must use http or https scheme")

        if allowed_schemes:
            scheme = url.split("://")[0].lower()
            if scheme not in allowed_schemes:
                raise ValueError(
                    f"URL scheme '{scheme}' not in allowed schemes: {allowed_schemes}"
                )

        return url.rstrip("/")

    @classmethod
    def sanitize_for_logging(cls, message: str) -> str:
        """Sanitize message for safe logging by removing potential credentials."""
        if not message:
            return message

        # Patterns to redact
        patterns = [
            (r"https://[^:/@\s]+:[^@\s]+@", "https://[REDACTED]@"),  # URLs with credentials
            (r"token\s*[=:]\s*[^\s]+", "token=[REDACTED]"),  # Token assignments
            (r"bearer\s+[^\s]+", "Bearer [REDACTED]"),  # Authorization headers
            (r"ghp_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub tokens
            (r"gho_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub OAuth tokens
            (r"ghu_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub user tokens
            (r"ghs_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub server tokens
            (r"ghr_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub refresh tokens
            (r"github_pat_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # Fine-grained PATs
        ]

        sanitized = message
        for pattern, replacement in patterns:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized
