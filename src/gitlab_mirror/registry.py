#!/usr/bin/env python3
"""
Per-run registry of repositories that have already been handled.
"""

import threading
from typing import Any, Set


class DedupRegistry:
    """Claims repository IDs so each one is cloned or pulled at most once per run."""

    def __init__(self):
        self._claimed: Set[Any] = set()
        self._lock = threading.Lock()

    def try_claim(self, repo_id: Any) -> bool:
        """
        Claim a repository ID.

        Returns:
            True if the ID was not claimed before in this run, False otherwise
        """
        with self._lock:
            if repo_id in self._claimed:
                return False
            self._claimed.add(repo_id)
            return True

    def __contains__(self, repo_id: Any) -> bool:
        with self._lock:
            return repo_id in self._claimed

    def __len__(self) -> int:
        with self._lock:
            return len(self._claimed)
