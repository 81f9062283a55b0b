"""
gitstats utilities
"""

import hashlib
from typing import Optional, Tuple
from urllib.parse import urlparse


def mask_secret(secret: str, length: int = 5) -> str:
    """Return a short SHA-256 hash of a secret for logging."""
    h = hashlib.sha256(str(secret).encode("utf-8")).hexdigest()
    return f"<masked:{h[:length]}>"


def normalize_repo_name(repo_name: str) -> str:
    """Normalize repository name to lowercase for case-insensitive comparison.

    Args:
        repo_name (str): Repository name in format 'owner/repo'

    Returns:
        str: Lowercase repository name
    """
    return repo_name.lower()


def parse_repository_url(repository_url: Optional[str]) -> Optional[Tuple[str, str]]:
    """Split a GitHub API repository URL into (owner, name).

    Accepts ``https://api.github.com/repos/{owner}/{name}`` and the Enterprise
    form ``https://host/api/v3/repos/{owner}/{name}``.

    Returns:
        Optional[Tuple[str, str]]: (owner, name), or None if the URL is missing or malformed
    """
    if not repository_url or not isinstance(repository_url, str):
        return None

    parts = [part for part in urlparse(repository_url).path.split('/') if part]
    if len(parts) < 3 or parts[-3] != 'repos':
        return None

    owner, name = parts[-2], parts[-1]
    return owner, name
