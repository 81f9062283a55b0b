# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Persist the stats record locally and, optionally, to an existing GitHub Gist.

Gists are only ever updated, never created: the target gist must already hold
a file with the expected name.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import bittensor as bt

from gitstats.classes import GitHubStats
from gitstats.constants import DEFAULT_GIST_FILENAME, JSON_INDENT, LOCAL_OUTPUT_FILENAME
from gitstats.errors import GistFileMissingError
from gitstats.utils.github_api_tools import GitHubGateway


@dataclass
class PublishResult:
    """Where the stats ended up. ``gist_error`` is set when the gist update failed."""

    local_path: Path
    gist_url: Optional[str] = None
    gist_error: Optional[Exception] = None

    @property
    def gist_failed(self) -> bool:
        return self.gist_error is not None


def serialize_stats(stats: GitHubStats) -> str:
    return json.dumps(stats.to_dict(), indent=JSON_INDENT, ensure_ascii=False)


def write_local(stats: GitHubStats, cwd: Union[str, Path]) -> Path:
    """Write the stats record to ``<cwd>/github-stats.json``. Filesystem errors propagate."""
    filepath = Path(cwd) / LOCAL_OUTPUT_FILENAME
    filepath.write_text(serialize_stats(stats), encoding='utf-8')
    bt.logging.info(f"Wrote stats to {filepath}")
    return filepath


def update_gist(
    stats: GitHubStats,
    gist_id: str,
    gateway: GitHubGateway,
    filename: str = DEFAULT_GIST_FILENAME,
) -> str:
    """
    Replace ``filename`` in an existing gist with the serialized stats.

    Args:
        stats (GitHubStats): Record to publish
        gist_id (str): Id of a gist that already contains ``filename``
        gateway (GitHubGateway): Authenticated gateway
        filename (str): Name of the gist file to overwrite

    Returns:
        str: The gist's web URL

    Raises:
        GistFileMissingError: the gist has no file named ``filename``; nothing is patched
    """
    existing_gist = gateway.request('GET', f"/gists/{gist_id}").unwrap()
    if filename not in (existing_gist.get('files') or {}):
        raise GistFileMissingError(gist_id, filename)

    response = gateway.request(
        'PATCH',
        f"/gists/{gist_id}",
        json={'files': {filename: {'content': serialize_stats(stats)}}},
    ).unwrap()

    gist_url = response.get('html_url') or existing_gist.get('html_url')
    bt.logging.info(f"Updated {filename} in gist {gist_id}")
    return gist_url


def publish(
    stats: GitHubStats,
    cwd: Union[str, Path],
    gateway: GitHubGateway,
    gist_id: Optional[str] = None,
    gist_filename: str = DEFAULT_GIST_FILENAME,
) -> PublishResult:
    """Write the local file, then update the gist if one is configured.

    A failed gist update is recorded on the result instead of raised; the
    local file has been written by then.
    """
    result = PublishResult(local_path=write_local(stats, cwd))
    if not gist_id:
        return result

    try:
        result.gist_url = update_gist(stats, gist_id, gateway, gist_filename)
    except Exception as e:
        bt.logging.warning(f"Failed to update gist {gist_id}: {e}")
        result.gist_error = e
    return result
