"""
GitLab Mirror - clone and update a whole GitLab group hierarchy.

This package provides:
- GitLabCloner: Mirror a group and its subgroups into local directories
- GroupWalker: Depth-first traversal of a group tree
- RepositorySynchronizer: Clone-or-pull decision for a single repository
"""

__version__ = "1.0.0"

from .cloner import GitLabCloner
from .config import MirrorConfig, TransportPreference
from .walker import GroupWalker
from .synchronizer import RepositorySynchronizer

__all__ = ["GitLabCloner", "MirrorConfig", "TransportPreference", "GroupWalker", "RepositorySynchronizer"]
