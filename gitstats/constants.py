# The MIT License (MIT)
# Copyright © 2025 Entrius

# =============================================================================
# General
# =============================================================================
NAME = 'gitstats'
VERSION = '1.0.0'

# =============================================================================
# GitHub API
# =============================================================================
DEFAULT_BASE_URL = 'github.com'
BASE_GITHUB_API_URL = 'https://api.github.com'
BASE_GITHUB_GRAPHQL_URL = 'https://api.github.com/graphql'
DEFAULT_API_VERSION = '2022-11-28'
DEFAULT_PER_PAGE = 50
DEFAULT_REPO_LIMIT = 100  # GraphQL connections return at most 100 nodes per page
DEFAULT_REQUEST_TIMEOUT = 30  # seconds

# =============================================================================
# Retries & Rate Limits
# =============================================================================
DEFAULT_RETRIES = 3  # retries after the first attempt (4 attempts total)
RETRY_BACKOFF_BASE_SECONDS = 1  # 1s, 2s, 4s
RATE_LIMIT_BUFFER_SECONDS = 5  # Extra buffer time when waiting for rate limit reset
RATE_LIMIT_MIN_REMAINING = 10  # Minimum remaining requests before warning
RATE_LIMIT_MAX_WAIT_SECONDS = 900  # Maximum time to wait for rate limit reset (15 min)

# =============================================================================
# Output
# =============================================================================
LOCAL_OUTPUT_FILENAME = 'github-stats.json'
DEFAULT_GIST_FILENAME = 'contributions.json'
JSON_INDENT = 2

# =============================================================================
# Credentials
# =============================================================================
TOKEN_ENV_VARS = ('GH_PAT', 'GITHUB_TOKEN')
GIST_ID_ENV_VAR = 'GIST_ID'

# =============================================================================
# Rank
# =============================================================================
COMMITS_MEDIAN = 250
COMMITS_WEIGHT = 2
PRS_MEDIAN = 50
PRS_WEIGHT = 3
ISSUES_MEDIAN = 25
ISSUES_WEIGHT = 1
REVIEWS_MEDIAN = 2
REVIEWS_WEIGHT = 1
STARS_MEDIAN = 50
STARS_WEIGHT = 4
FOLLOWERS_MEDIAN = 10
FOLLOWERS_WEIGHT = 1

TOTAL_RANK_WEIGHT = (
    COMMITS_WEIGHT + PRS_WEIGHT + ISSUES_WEIGHT + REVIEWS_WEIGHT + STARS_WEIGHT + FOLLOWERS_WEIGHT
)

RANK_THRESHOLDS = [1, 12.5, 25, 37.5, 50, 62.5, 75, 87.5, 100]
RANK_LEVELS = ['S', 'A+', 'A', 'A-', 'B+', 'B', 'B-', 'C+', 'C']
