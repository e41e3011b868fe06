#!/usr/bin/env python3
"""
Error types raised and recorded while mirroring a GitLab group.
"""

from pathlib import Path
from typing import Optional


class MirrorError(Exception):
    """Base class for all gitlab-mirror errors."""


class ConfigurationError(MirrorError):
    """Required configuration or credential is missing or invalid."""


class ApiError(MirrorError):
    """The GitLab API answered with an error payload or could not be reached."""

    def __init__(self, message: str, endpoint: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.endpoint = endpoint
        self.status_code = status_code

    def __str__(self) -> str:
        if self.endpoint:
            return f"{self.message} ({self.endpoint})"
        return self.message


class TransportError(MirrorError):
    """A git clone or pull exited with a failure."""

    def __init__(self, operation: str, target: str, detail: str = ""):
        self.operation = operation
        self.target = target
        self.detail = detail
        message = f"git {operation} failed for {target}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class LocalConflict(MirrorError):
    """A local path is in the way: not a git repository, or not a usable directory."""

    def __init__(self, path: Path, detail: Optional[str] = None):
        self.path = path
        self.detail = detail
        super().__init__(detail or f"{path} exists but is not a git repository")
