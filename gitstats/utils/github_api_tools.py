# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
GitHub REST and GraphQL gateway.

Every remote call returns a ``CallResult`` and goes through ``with_retries``,
which retries transient failures and rate limits up to ``DEFAULT_RETRIES``
times. ``CallResult.unwrap()`` re-raises the underlying error unchanged once
retries are exhausted.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

import bittensor as bt
import requests

from gitstats.classes import GitHubUser
from gitstats.constants import (
    BASE_GITHUB_API_URL,
    BASE_GITHUB_GRAPHQL_URL,
    DEFAULT_API_VERSION,
    DEFAULT_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETRIES,
    RATE_LIMIT_BUFFER_SECONDS,
    RATE_LIMIT_MAX_WAIT_SECONDS,
    RATE_LIMIT_MIN_REMAINING,
    RETRY_BACKOFF_BASE_SECONDS,
)
from gitstats.errors import GraphQLError, RunDeadlineExceeded


# =============================================================================
# Rate Limits
# =============================================================================


@dataclass
class RateLimitInfo:
    """Represents GitHub API rate limit information extracted from response headers."""

    limit: int  # Maximum requests allowed per hour
    remaining: int  # Requests remaining in current window
    reset_timestamp: int  # Unix timestamp when the rate limit resets
    used: int  # Requests used in current window

    @property
    def is_exceeded(self) -> bool:
        return self.remaining == 0

    @property
    def seconds_until_reset(self) -> int:
        current_time = int(time.time())
        return max(0, self.reset_timestamp - current_time)

    def __str__(self) -> str:
        return f"RateLimit(remaining={self.remaining}/{self.limit}, resets_in={self.seconds_until_reset}s)"


def parse_rate_limit_headers(response: requests.Response) -> Optional[RateLimitInfo]:
    """
    Parse GitHub API rate limit information from response headers.

    Args:
        response: The HTTP response from GitHub API

    Returns:
        RateLimitInfo object if headers are present, None otherwise
    """
    headers = response.headers

    try:
        limit = int(headers.get('X-RateLimit-Limit', 0))
        remaining = int(headers.get('X-RateLimit-Remaining', 0))
        reset_timestamp = int(headers.get('X-RateLimit-Reset', 0))
        used = int(headers.get('X-RateLimit-Used', 0))
    except (ValueError, TypeError) as e:
        bt.logging.debug(f"Could not parse rate limit headers: {e}")
        return None

    if limit == 0 and reset_timestamp == 0:
        return None

    return RateLimitInfo(limit=limit, remaining=remaining, reset_timestamp=reset_timestamp, used=used)


def is_rate_limited(response: requests.Response) -> Tuple[bool, Optional[int]]:
    """
    Check if a response indicates rate limiting and calculate wait time.

    Returns:
        Tuple of (is_rate_limited, seconds_to_wait)
    """
    if response.status_code not in (403, 429):
        return (False, None)

    retry_after = response.headers.get('Retry-After')
    if retry_after:
        try:
            return (True, min(int(retry_after), RATE_LIMIT_MAX_WAIT_SECONDS))
        except (ValueError, TypeError):
            pass

    rate_limit_info = parse_rate_limit_headers(response)
    if rate_limit_info and rate_limit_info.is_exceeded:
        wait_seconds = min(rate_limit_info.seconds_until_reset + RATE_LIMIT_BUFFER_SECONDS, RATE_LIMIT_MAX_WAIT_SECONDS)
        return (True, wait_seconds)

    if 'rate limit' in response.text.lower():
        return (True, 60)

    return (False, None)


def check_preemptive_rate_limit(response: requests.Response) -> None:
    """Log a warning when the remaining request budget is running low."""
    rate_limit_info = parse_rate_limit_headers(response)

    if rate_limit_info and rate_limit_info.remaining <= RATE_LIMIT_MIN_REMAINING:
        bt.logging.warning(
            f"Approaching GitHub API rate limit: {rate_limit_info.remaining} requests remaining, "
            f"resets in {rate_limit_info.seconds_until_reset}s"
        )


def wait_for_rate_limit_reset(wait_seconds: int, context: str = "") -> None:
    """Wait for rate limit to reset with progress logging."""
    context_str = f" for {context}" if context else ""
    bt.logging.warning(f"GitHub API rate limit exceeded{context_str}. Waiting {wait_seconds}s for reset...")

    if wait_seconds <= 60:
        time.sleep(wait_seconds)
    else:
        intervals = wait_seconds // 60
        remaining = wait_seconds % 60

        for i in range(intervals):
            time.sleep(60)
            elapsed = (i + 1) * 60
            bt.logging.info(f"Rate limit wait: {elapsed}s elapsed, {wait_seconds - elapsed}s remaining")

        if remaining > 0:
            time.sleep(remaining)

    bt.logging.info("Rate limit wait complete, resuming API requests")


# =============================================================================
# Call results & retries
# =============================================================================


class FailureKind(Enum):
    """Why a remote call failed"""

    TRANSIENT = "transient"  # network error or 5xx
    RATE_LIMITED = "rate_limited"
    FATAL = "fatal"  # 4xx or GraphQL errors, never retried


@dataclass
class CallResult:
    """Outcome of a single remote call: either data, or a failure kind plus the underlying error."""

    data: Any = None
    failure: Optional[FailureKind] = None
    error: Optional[Exception] = None
    wait_seconds: Optional[int] = None
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def retryable(self) -> bool:
        return self.failure in (FailureKind.TRANSIENT, FailureKind.RATE_LIMITED)

    def unwrap(self) -> Any:
        """Return the data, or raise the underlying error unchanged."""
        if self.ok:
            return self.data
        raise self.error

    @classmethod
    def success(cls, data: Any) -> 'CallResult':
        return cls(data=data)

    @classmethod
    def failed(cls, failure: FailureKind, error: Exception, wait_seconds: Optional[int] = None) -> 'CallResult':
        return cls(failure=failure, error=error, wait_seconds=wait_seconds)


class Deadline:
    """Overall run deadline shared by every call issued through a gateway."""

    def __init__(self, seconds: Optional[float] = None):
        self.seconds = seconds
        self.expires_at = time.monotonic() + seconds if seconds else None

    def remaining(self) -> Optional[float]:
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self, context: str = "") -> None:
        if self.expired:
            raise RunDeadlineExceeded(f"Run deadline of {self.seconds}s exceeded before {context or 'remote call'}")


def with_retries(
    call: Callable[[], CallResult],
    retries: int = DEFAULT_RETRIES,
    context: str = "",
    deadline: Optional[Deadline] = None,
) -> CallResult:
    """
    Run ``call`` until it succeeds, fails fatally, or ``retries`` retries are used up.

    Transient failures back off exponentially (1s, 2s, 4s); rate-limited calls
    wait for the reset reported by GitHub.

    Args:
        call: Zero-argument callable issuing one attempt
        retries: Retries after the first attempt
        context: Label for log messages (e.g. "GET /user")
        deadline: Optional run deadline; waiting past it raises RunDeadlineExceeded

    Returns:
        CallResult of the last attempt, with ``attempts`` set
    """
    attempts = retries + 1
    result = CallResult()

    for attempt in range(attempts):
        result = call()
        result.attempts = attempt + 1

        if result.ok or not result.retryable:
            return result

        if attempt == attempts - 1:
            bt.logging.error(f"{context} failed after {attempts} attempts: {result.error}")
            break

        if result.failure is FailureKind.RATE_LIMITED:
            wait_seconds = result.wait_seconds or 60
        else:
            wait_seconds = RETRY_BACKOFF_BASE_SECONDS * (2**attempt)

        remaining = deadline.remaining() if deadline else None
        if remaining is not None and remaining < wait_seconds:
            raise RunDeadlineExceeded(f"Run deadline of {deadline.seconds}s exceeded while retrying {context}")

        if result.failure is FailureKind.RATE_LIMITED:
            wait_for_rate_limit_reset(wait_seconds, context=context)
        else:
            bt.logging.warning(
                f"{context} failed (attempt {attempt + 1}/{attempts}): {result.error}, retrying in {wait_seconds}s..."
            )
            time.sleep(wait_seconds)

    return result


def classify_response(response: requests.Response) -> CallResult:
    """Turn an HTTP response into a CallResult."""
    rate_limited, wait_seconds = is_rate_limited(response)
    if rate_limited:
        return CallResult.failed(FailureKind.RATE_LIMITED, _http_error(response), wait_seconds)

    if response.status_code >= 500:
        return CallResult.failed(FailureKind.TRANSIENT, _http_error(response))

    if response.status_code >= 400:
        return CallResult.failed(FailureKind.FATAL, _http_error(response))

    check_preemptive_rate_limit(response)
    if response.status_code == 204:
        return CallResult.success(None)
    return CallResult.success(response.json())


def _http_error(response: requests.Response) -> requests.HTTPError:
    return requests.HTTPError(
        f"{response.status_code} error for {response.url}: {response.text[:200]}",
        response=response,
    )


# =============================================================================
# Gateway
# =============================================================================


def resolve_api_urls(base_url: str = DEFAULT_BASE_URL) -> Tuple[str, str]:
    """Map a GitHub host to its (REST, GraphQL) API roots.

    Hosts other than github.com are treated as GitHub Enterprise Server.
    """
    host = base_url.strip().rstrip('/')
    for prefix in ('https://', 'http://'):
        if host.startswith(prefix):
            host = host[len(prefix):]
    if host in (DEFAULT_BASE_URL, 'api.github.com'):
        return BASE_GITHUB_API_URL, BASE_GITHUB_GRAPHQL_URL
    return f"https://{host}/api/v3", f"https://{host}/api/graphql"


def make_headers(token: str, api_version: str = DEFAULT_API_VERSION) -> Dict[str, str]:
    """Build standard GitHub HTTP headers for a token.

    Args:
        token (str): GitHub token
        api_version (str): Value of the X-GitHub-Api-Version header
    Returns:
        Dict[str, str]: Mapping of HTTP header names to values.
    """
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": api_version,
    }


class GitHubGateway:
    """Authenticated access to the GitHub REST and GraphQL APIs with retries."""

    def __init__(
        self,
        token: str,
        api_version: str = DEFAULT_API_VERSION,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        deadline: Optional[Deadline] = None,
        retries: int = DEFAULT_RETRIES,
    ):
        self.rest_url, self.graphql_url = resolve_api_urls(base_url)
        self.headers = make_headers(token, api_version)
        self.timeout = timeout
        self.deadline = deadline or Deadline()
        self.retries = retries

    def _timeout(self) -> float:
        remaining = self.deadline.remaining()
        if remaining is None:
            return self.timeout
        return min(self.timeout, remaining)

    def _send(self, method: str, url: str, context: str, **kwargs) -> CallResult:
        self.deadline.check(context)
        try:
            response = requests.request(method, url, headers=self.headers, timeout=self._timeout(), **kwargs)
        except requests.RequestException as e:
            return CallResult.failed(FailureKind.TRANSIENT, e)
        return classify_response(response)

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> CallResult:
        """Issue a REST call, e.g. ``request('GET', '/user')``."""
        context = f"{method} {path}"
        url = f"{self.rest_url}{path}"
        bt.logging.debug(f"GitHub REST {context} params={params}")
        return with_retries(
            lambda: self._send(method, url, context, params=params, json=json),
            retries=self.retries,
            context=context,
            deadline=self.deadline,
        )

    def query(self, document: str, variables: Optional[Dict[str, Any]] = None) -> CallResult:
        """Issue a GraphQL query; the result data is the response's ``data`` member."""

        def attempt() -> CallResult:
            result = self._send(
                'POST', self.graphql_url, "GraphQL query", json={"query": document, "variables": variables or {}}
            )
            if not result.ok:
                return result
            payload = result.data or {}
            if payload.get('errors'):
                return CallResult.failed(FailureKind.FATAL, GraphQLError(payload['errors']))
            return CallResult.success(payload.get('data'))

        bt.logging.debug(f"GitHub GraphQL query variables={variables}")
        return with_retries(attempt, retries=self.retries, context="GraphQL query", deadline=self.deadline)

    def get_user(self) -> GitHubUser:
        """Fetch the authenticated user's identity."""
        user_data = self.request('GET', '/user').unwrap()
        return GitHubUser.from_github_response(user_data)
