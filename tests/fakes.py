"""
In-memory stand-ins for the GitLab API and git used by the tests.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from gitlab_mirror.exceptions import ApiError
from gitlab_mirror.git_client import GitClient, GitResult
from gitlab_mirror.models import Group, Repository


def project(repo_id: Any, name: str, namespace: str = 'org', archived: bool = False) -> Dict[str, Any]:
    """Build a project listing item the way GitLab returns it."""
    return {
        'id': repo_id,
        'name': name,
        'path_with_namespace': f'{namespace}/{name}',
        'ssh_url_to_repo': f'git@gitlab.example.com:{namespace}/{name}.git',
        'http_url_to_repo': f'https://gitlab.example.com/{namespace}/{name}.git',
        'archived': archived,
    }


class FakeGitLabApi:
    """Group tree held in dictionaries; records every call in order."""

    def __init__(self, groups: Dict[Any, Dict[str, Any]], projects: Optional[Dict[Any, List[Dict]]] = None,
                 subgroups: Optional[Dict[Any, List[Any]]] = None, errors: Optional[Dict[tuple, str]] = None):
        self.groups = groups
        self.projects = projects or {}
        self.subgroups = subgroups or {}
        self.errors = errors or {}
        self.calls: List[tuple] = []

    def _check(self, group_id: Any, stage: str) -> None:
        self.calls.append((stage, group_id))
        if (group_id, stage) in self.errors:
            raise ApiError(self.errors[(group_id, stage)], endpoint=f'/groups/{group_id}')

    def get_group(self, group_id: Any) -> Group:
        self._check(group_id, 'lookup')
        if group_id not in self.groups:
            raise ApiError('404 Group Not Found', endpoint=f'/groups/{group_id}', status_code=404)
        return Group.from_api(self.groups[group_id])

    def list_projects(self, group_id: Any) -> List[Repository]:
        self._check(group_id, 'projects')
        return [Repository.from_api(item) for item in self.projects.get(group_id, [])]

    def list_subgroups(self, group_id: Any) -> List[Any]:
        self._check(group_id, 'subgroups')
        return list(self.subgroups.get(group_id, []))


class FakeGitClient(GitClient):
    """Creates a ``.git`` directory on clone; fails for listed URLs or paths."""

    def __init__(self, failing_urls=(), failing_pulls=()):
        self.failing_urls = set(failing_urls)
        self.failing_pulls = set(failing_pulls)
        self.clones: List[tuple] = []
        self.pulls: List[Path] = []

    def clone(self, url: str, path: Path) -> GitResult:
        self.clones.append((url, Path(path)))
        if url in self.failing_urls:
            return GitResult(False, 'Repository not found.')
        (Path(path) / '.git').mkdir(parents=True)
        return GitResult(True)

    def pull(self, path: Path) -> GitResult:
        self.pulls.append(Path(path))
        if Path(path).name in self.failing_pulls:
            return GitResult(False, 'Could not read from remote repository.')
        return GitResult(True)
