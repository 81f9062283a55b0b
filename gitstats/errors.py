# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Exceptions raised by gitstats.

Transport failures are not wrapped: ``requests.RequestException`` and
``requests.HTTPError`` reach the caller unchanged once retries are exhausted.
"""


class GitStatsError(Exception):
    """Base class for gitstats errors."""


class ConfigError(GitStatsError):
    """Configuration could not be resolved (e.g. no GitHub token)."""


class GraphQLError(GitStatsError):
    """A GraphQL response carried an ``errors`` member."""

    def __init__(self, errors):
        self.errors = errors
        messages = [e.get('message', str(e)) if isinstance(e, dict) else str(e) for e in errors or []]
        super().__init__(f"GraphQL query failed: {'; '.join(messages) or 'unknown error'}")


class RunDeadlineExceeded(GitStatsError):
    """The overall run deadline passed before a remote call could start."""


class GistFileMissingError(GitStatsError):
    """The target gist does not contain the expected file."""

    def __init__(self, gist_id: str, filename: str):
        self.gist_id = gist_id
        self.filename = filename
        super().__init__(f'Gist {gist_id} does not contain {filename} file')
