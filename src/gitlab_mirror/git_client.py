#!/usr/bin/env python3
"""
Git operations used by the synchronizer.

Only the exit status matters: clone and pull either succeed or fail with a
short description of what git reported.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from git import Repo, GitCommandError, GitCommandNotFound, InvalidGitRepositoryError, NoSuchPathError


@dataclass(frozen=True)
class GitResult:
    """Result of one git invocation."""

    success: bool
    detail: str = ""


class GitClient:
    """Interface for the version-control collaborator."""

    def clone(self, url: str, path: Path) -> GitResult:
        raise NotImplementedError

    def pull(self, path: Path) -> GitResult:
        raise NotImplementedError


def _describe_git_error(error: Exception) -> str:
    if isinstance(error, GitCommandError):
        stderr = (error.stderr or '').strip()
        # GitPython prefixes stderr with "stderr: '"
        if stderr.startswith("stderr: '"):
            stderr = stderr[len("stderr: '"):].rstrip("'").strip()
        return stderr.splitlines()[-1] if stderr else f"exit status {error.status}"
    return str(error)


class GitPythonClient(GitClient):
    """Runs git through GitPython."""

    def __init__(self):
        self.logger = logging.getLogger('gitlab_mirror.git')

    def clone(self, url: str, path: Path) -> GitResult:
        """
        Clone ``url`` into ``path``.

        Args:
            url: Remote repository URL
            path: Directory to create

        Returns:
            GitResult describing the outcome
        """
        self.logger.debug(f"git clone {url} {path}")
        try:
            Repo.clone_from(url, str(path))
            return GitResult(True)
        except (GitCommandError, GitCommandNotFound, OSError) as e:
            self.logger.debug(f"git clone failed: {e}")
            return GitResult(False, _describe_git_error(e))

    def pull(self, path: Path) -> GitResult:
        """Run ``git pull`` inside an existing working copy."""
        self.logger.debug(f"git pull in {path}")
        try:
            Repo(str(path)).git.pull()
            return GitResult(True)
        except (GitCommandError, GitCommandNotFound, InvalidGitRepositoryError, NoSuchPathError, OSError) as e:
            self.logger.debug(f"git pull failed: {e}")
            return GitResult(False, _describe_git_error(e))
