# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
gitstats CLI - Main entry point

Usage:
    gitstats                          - Export stats to ./github-stats.json
    gitstats --gist-id <id>           - Also update contributions.json in an existing gist
    gitstats --cwd out/ --per-page 100
"""

import sys
from typing import Optional, Tuple

import bittensor as bt
import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gitstats.classes import GitHubStats
from gitstats.config import Options, resolve_config
from gitstats.constants import (
    DEFAULT_API_VERSION,
    DEFAULT_BASE_URL,
    DEFAULT_GIST_FILENAME,
    DEFAULT_PER_PAGE,
    DEFAULT_REPO_LIMIT,
    DEFAULT_REQUEST_TIMEOUT,
    NAME,
    VERSION,
)
from gitstats.publish import PublishResult, publish
from gitstats.stats.graphql_stats import build_stats, fetch_graphql_stats
from gitstats.stats.pull_requests import PullRequestCollector
from gitstats.stats.rank import rank_stats
from gitstats.utils.github_api_tools import Deadline, GitHubGateway

console = Console()


def print_success(message: str) -> None:
    """Print a standardized success message."""
    console.print(f'  [green]✓[/green] {message}')


def print_error(message: str) -> None:
    """Print a standardized error message."""
    console.print(f'\n  [red]✗[/red] {escape(message)}\n', soft_wrap=True)


def print_summary(stats: GitHubStats) -> None:
    table = Table(show_header=True, header_style='bold magenta')
    table.add_column('Stat', style='cyan')
    table.add_column('Value', style='green', justify='right')

    table.add_row('Commits', str(stats.commits))
    table.add_row('Pull requests', f'{stats.pull_request.total_count} ({stats.pull_request.merged_count} merged)')
    table.add_row('Issues', f'{stats.issues.total_count} ({stats.issues.open_count} open)')
    table.add_row('Reviews', str(stats.reviews))
    table.add_row('Stars', str(stats.repositories.total_stargazers))
    table.add_row('Followers', str(stats.followers))
    if stats.rank is not None:
        table.add_row('Rank', f'{stats.rank.level} ({stats.rank.percentile:.1f}%)')

    console.print(table)


def run(options: Options) -> Tuple[GitHubStats, PublishResult]:
    """Fetch, merge, rank and publish the stats for the authenticated user."""
    gateway = GitHubGateway(
        token=options.token,
        api_version=options.api_version,
        base_url=options.base_url,
        timeout=options.timeout,
        deadline=Deadline(options.deadline),
    )

    with console.status('getting user information'):
        user = gateway.get_user()
    print_success(f'user information retrieved: {escape(user.username)}')

    with console.status('getting pull requests'):
        pull_requests = PullRequestCollector(gateway).collect(user.username, options.per_page)
    print_success(f'pull requests retrieved: {len(pull_requests)}')

    with console.status('getting stats'):
        graphql_stats = fetch_graphql_stats(gateway, user, options.repo_limit)
    print_success('stats retrieved')

    stats = build_stats(user, graphql_stats, pull_requests)
    stats.rank = rank_stats(stats)

    with console.status('publishing stats'):
        result = publish(stats, options.cwd, gateway, options.gist_id, options.gist_filename)
    return stats, result


@click.command(name=NAME, context_settings={'help_option_names': ['-h', '--help']})
@click.option('--cwd', type=click.Path(file_okay=False), help='Working directory for github-stats.json')
@click.option('--token', help='GitHub token (defaults to GH_PAT, GITHUB_TOKEN or `gh auth token`)')
@click.option('--api-version', default=DEFAULT_API_VERSION, show_default=True, help='GitHub API version')
@click.option('--per-page', type=int, default=DEFAULT_PER_PAGE, show_default=True, help='Pull requests to collect')
@click.option('--base-url', default=DEFAULT_BASE_URL, show_default=True, help='GitHub host')
@click.option('--gist-id', help='GitHub Gist ID to update (defaults to GIST_ID)')
@click.option('--gist-filename', default=DEFAULT_GIST_FILENAME, show_default=True, help='File to overwrite in the gist')
@click.option(
    '--repo-limit', type=int, default=DEFAULT_REPO_LIMIT, show_default=True, help='Owned repositories to count stars over'
)
@click.option('--timeout', type=float, default=DEFAULT_REQUEST_TIMEOUT, show_default=True, help='Per-request timeout (s)')
@click.option('--deadline', type=float, default=None, help='Overall run deadline (s)')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.version_option(version=VERSION, prog_name=NAME)
def cli(
    cwd: Optional[str],
    token: Optional[str],
    api_version: str,
    per_page: int,
    base_url: str,
    gist_id: Optional[str],
    gist_filename: str,
    repo_limit: int,
    timeout: float,
    deadline: Optional[float],
    verbose: bool,
):
    """Export GitHub stats and publish to a GitHub Gist"""
    if verbose:
        bt.logging.set_debug(True)

    console.print(f'\n[yellow]{NAME}[/yellow] [dim]v{VERSION}[/dim]\n')

    try:
        options = resolve_config(
            cwd=cwd,
            token=token,
            api_version=api_version,
            per_page=per_page,
            base_url=base_url,
            gist_id=gist_id,
            gist_filename=gist_filename,
            repo_limit=repo_limit,
            timeout=timeout,
            deadline=deadline,
        )
        stats, result = run(options)
    except Exception as e:
        print_error(str(e) or e.__class__.__name__)
        sys.exit(1)

    print_summary(stats)
    console.print(f'\n  [green]✓[/green] [dim]Local file:[/dim] {escape(str(result.local_path))}', soft_wrap=True)

    if result.gist_failed:
        console.print(f'  [yellow]![/yellow] failed to update gist: {escape(str(result.gist_error))}\n', soft_wrap=True)
    elif result.gist_url:
        console.print(f'  [green]✓[/green] [dim]Gist URL:[/dim] {escape(result.gist_url)}\n', soft_wrap=True)


def main():
    """Main entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
