# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Resolve command options into a single Options record.

Precedence for each setting: command option, then environment (a ``.env``
file in the working directory is loaded first, without overriding variables
that are already set), then the GitHub CLI for the token, then defaults.
"""

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import bittensor as bt
from dotenv import load_dotenv

from gitstats.constants import (
    DEFAULT_API_VERSION,
    DEFAULT_BASE_URL,
    DEFAULT_GIST_FILENAME,
    DEFAULT_PER_PAGE,
    DEFAULT_REPO_LIMIT,
    DEFAULT_REQUEST_TIMEOUT,
    GIST_ID_ENV_VAR,
    TOKEN_ENV_VARS,
)
from gitstats.errors import ConfigError
from gitstats.utils.utils import mask_secret


@dataclass(frozen=True)
class Options:
    """Resolved configuration for one run"""

    cwd: str
    token: str
    api_version: str = DEFAULT_API_VERSION
    per_page: int = DEFAULT_PER_PAGE
    base_url: str = DEFAULT_BASE_URL
    gist_id: Optional[str] = None
    gist_filename: str = DEFAULT_GIST_FILENAME
    repo_limit: int = DEFAULT_REPO_LIMIT
    timeout: float = DEFAULT_REQUEST_TIMEOUT
    deadline: Optional[float] = None


def read_token_from_github_cli() -> str:
    """Return the token of the logged-in GitHub CLI user, or '' when unavailable."""
    try:
        result = subprocess.run(['gh', 'auth', 'token'], capture_output=True, text=True, timeout=10, check=True)
    except (OSError, subprocess.SubprocessError) as e:
        bt.logging.debug(f"Could not read token from GitHub CLI: {e}")
        return ''
    return result.stdout.strip()


def resolve_token(token: Optional[str] = None) -> str:
    if token:
        return token
    for env_var in TOKEN_ENV_VARS:
        value = os.environ.get(env_var, '').strip()
        if value:
            bt.logging.debug(f"Using GitHub token from {env_var}")
            return value
    return read_token_from_github_cli()


def resolve_config(
    cwd: Optional[str] = None,
    token: Optional[str] = None,
    api_version: Optional[str] = None,
    per_page: Optional[int] = None,
    base_url: Optional[str] = None,
    gist_id: Optional[str] = None,
    gist_filename: Optional[str] = None,
    repo_limit: Optional[int] = None,
    timeout: Optional[float] = None,
    deadline: Optional[float] = None,
) -> Options:
    """
    Merge command options with environment and defaults.

    Raises:
        ConfigError: no token could be found, or a numeric option is out of range
    """
    cwd = cwd or os.getcwd()
    if not Path(cwd).is_dir():
        raise ConfigError(f"Working directory does not exist: {cwd}")

    load_dotenv(Path(cwd) / '.env', override=False)

    resolved_token = resolve_token(token)
    if not resolved_token:
        raise ConfigError(
            f"No GitHub token found. Pass --token, set {' or '.join(TOKEN_ENV_VARS)}, or log in with `gh auth login`."
        )

    options = Options(
        cwd=cwd,
        token=resolved_token,
        api_version=api_version or DEFAULT_API_VERSION,
        per_page=per_page if per_page is not None else DEFAULT_PER_PAGE,
        base_url=base_url or DEFAULT_BASE_URL,
        gist_id=gist_id or os.environ.get(GIST_ID_ENV_VAR) or None,
        gist_filename=gist_filename or DEFAULT_GIST_FILENAME,
        repo_limit=repo_limit if repo_limit is not None else DEFAULT_REPO_LIMIT,
        timeout=timeout if timeout is not None else DEFAULT_REQUEST_TIMEOUT,
        deadline=deadline or None,
    )

    if not 1 <= options.per_page <= 100:
        raise ConfigError(f"per_page must be between 1 and 100 (got {options.per_page})")
    if not 1 <= options.repo_limit <= 100:
        raise ConfigError(f"repo_limit must be between 1 and 100 (got {options.repo_limit})")
    if options.timeout <= 0:
        raise ConfigError(f"timeout must be positive (got {options.timeout})")

    bt.logging.debug(
        f"Resolved config: cwd={options.cwd}, token={mask_secret(options.token)}, base_url={options.base_url}, "
        f"per_page={options.per_page}, gist_id={options.gist_id}"
    )
    return options
