# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Run-scoped repository metadata cache.

One instance belongs to one run: it is created by (or injected into) the pull
request collector and dropped with it. Entries are never evicted.
"""

import threading
from typing import TYPE_CHECKING, Dict

import bittensor as bt

from gitstats.classes import RepoMetadata
from gitstats.utils.utils import normalize_repo_name

if TYPE_CHECKING:
    from gitstats.utils.github_api_tools import GitHubGateway


class RepositoryMetadataCache:
    """Memoized ``GET /repos/{owner}/{name}`` lookups keyed by normalized ``owner/name``.

    Concurrent lookups of the same key are single-flight: one caller fetches,
    the others wait on the per-key lock and read the stored entry.
    """

    def __init__(self, gateway: 'GitHubGateway'):
        self.gateway = gateway
        self._entries: Dict[str, RepoMetadata] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, repo_full_name: str) -> bool:
        return normalize_repo_name(repo_full_name) in self._entries

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(key, threading.Lock())

    def get(self, owner: str, name: str) -> RepoMetadata:
        """Return metadata for owner/name, fetching it on first use.

        Lookup failures propagate; nothing is stored for a failed key.
        """
        key = normalize_repo_name(f"{owner}/{name}")

        cached = self._entries.get(key)
        if cached is not None:
            return cached

        with self._lock_for(key):
            cached = self._entries.get(key)
            if cached is not None:
                return cached

            repo_data = self.gateway.request('GET', f"/repos/{owner}/{name}").unwrap()
            metadata = RepoMetadata.from_github_response(repo_data)
            self._entries[key] = metadata
            bt.logging.debug(f"Cached metadata for {key}: {metadata}")
            return metadata
