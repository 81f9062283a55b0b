# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Tests for the gitstats command (CliRunner).

Covers:
    - end-to-end run against mocked GitHub responses
    - exit status on configuration and core failures
    - gist failures reported as warnings with exit status 0
"""

import json
from unittest.mock import patch

import pytest
import requests
from click.testing import CliRunner

from gitstats.cli.main import cli

API = 'https://api.github.com'
GIST_ID = 'aa5a315d61ae9438b18d'

USER = {'login': 'octocat', 'name': 'The Octocat', 'avatar_url': 'https://avatars.githubusercontent.com/u/583231'}
SEARCH = {
    'total_count': 3,
    'incomplete_results': False,
    'items': [
        {
            'number': 12,
            'title': 'Add retries',
            'html_url': 'https://github.com/octo-org/widgets/pull/12',
            'repository_url': f'{API}/repos/octo-org/widgets',
            'created_at': '2025-04-01T09:00:00Z',
            'state': 'closed',
            'draft': False,
            'pull_request': {'merged_at': '2025-04-02T09:00:00Z'},
        },
        {
            'number': 13,
            'title': 'Rejected idea',
            'html_url': 'https://github.com/octo-org/widgets/pull/13',
            'repository_url': f'{API}/repos/octo-org/widgets',
            'created_at': '2025-04-03T09:00:00Z',
            'state': 'closed',
            'draft': False,
            'pull_request': {'merged_at': None},
        },
        {
            'number': 4,
            'title': 'Tidy dotfiles',
            'html_url': 'https://github.com/octocat/dotfiles/pull/4',
            'repository_url': f'{API}/repos/octocat/dotfiles',
            'created_at': '2025-04-05T09:00:00Z',
            'state': 'open',
            'draft': True,
            'pull_request': {'merged_at': None},
        },
    ],
}
REPOS = {
    '/repos/octo-org/widgets': {'owner': {'type': 'Organization'}, 'stargazers_count': 1200},
    '/repos/octocat/dotfiles': {'owner': {'type': 'User'}, 'stargazers_count': 7},
}
GRAPHQL = {
    'data': {
        'user': {
            'login': 'octocat',
            'commits': {'totalCommitContributions': 250},
            'reviews': {'totalPullRequestReviewContributions': 2},
            'repositoriesContributedTo': {'totalCount': 5},
            'pullRequests': {'totalCount': 50},
            'mergedPullRequests': {'totalCount': 40},
            'openIssues': {'totalCount': 5},
            'closedIssues': {'totalCount': 20},
            'followers': {'totalCount': 10},
            'repositoryDiscussions': {'totalCount': 0},
            'repositoryDiscussionComments': {'totalCount': 0},
            'repositories': {'totalCount': 1, 'nodes': [{'name': 'hello-world', 'stargazers': {'totalCount': 50}}]},
        }
    }
}


class FakeGitHub:
    """Stand-in for requests.request routing by method and URL."""

    def __init__(self, response_factory, gist_files=None, fail_user=False):
        self.response_factory = response_factory
        self.gist_files = gist_files
        self.fail_user = fail_user
        self.calls = []

    def __call__(self, method, url, **kwargs):
        path = url[len(API):]
        self.calls.append((method, path))
        if path == '/user':
            if self.fail_user:
                return self.response_factory(401, text='Bad credentials')
            return self.response_factory(200, USER)
        if path == '/search/issues':
            return self.response_factory(200, SEARCH)
        if path in REPOS:
            return self.response_factory(200, REPOS[path])
        if path == '/graphql':
            return self.response_factory(200, GRAPHQL)
        if path == f'/gists/{GIST_ID}' and self.gist_files is not None:
            return self.response_factory(
                200, {'html_url': f'https://gist.github.com/octocat/{GIST_ID}', 'files': self.gist_files}
            )
        return self.response_factory(404, text='Not Found')


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, tmp_path, *args):
    with patch.dict('os.environ', {'GH_PAT': '', 'GITHUB_TOKEN': '', 'GIST_ID': ''}):
        return runner.invoke(cli, ['--cwd', str(tmp_path), '--token', 'ghp_test', *args])


class TestRun:
    @patch('gitstats.utils.github_api_tools.requests.request')
    def test_writes_local_file(self, mock_request, runner, tmp_path, response_factory):
        fake = FakeGitHub(response_factory)
        mock_request.side_effect = fake

        result = invoke(runner, tmp_path)

        assert result.exit_code == 0, result.output
        data = json.loads((tmp_path / 'github-stats.json').read_text(encoding='utf-8'))
        assert data['user'] == {
            'name': 'The Octocat',
            'username': 'octocat',
            'avatar': 'https://avatars.githubusercontent.com/u/583231',
        }
        assert [pr['number'] for pr in data['pullRequest']['data']] == [12, 4]
        assert [pr['state'] for pr in data['pullRequest']['data']] == ['merged', 'draft']
        assert data['pullRequest']['data'][0]['type'] == 'Organization'
        assert data['issues'] == {'totalCount': 25, 'openCount': 5, 'closedCount': 20}
        assert data['rank'] == {'level': 'B+', 'percentile': 50.0}
        assert ('GET', '/gists/' + GIST_ID) not in fake.calls

    @patch('gitstats.utils.github_api_tools.requests.request')
    def test_each_repository_fetched_once(self, mock_request, runner, tmp_path, response_factory):
        fake = FakeGitHub(response_factory)
        mock_request.side_effect = fake

        invoke(runner, tmp_path)

        assert fake.calls.count(('GET', '/repos/octo-org/widgets')) == 1
        assert fake.calls.count(('POST', '/graphql')) == 1

    @patch('gitstats.utils.github_api_tools.requests.request')
    def test_updates_gist(self, mock_request, runner, tmp_path, response_factory):
        fake = FakeGitHub(response_factory, gist_files={'contributions.json': {'content': '{}'}})
        mock_request.side_effect = fake

        result = invoke(runner, tmp_path, '--gist-id', GIST_ID)

        assert result.exit_code == 0, result.output
        assert ('PATCH', f'/gists/{GIST_ID}') in fake.calls
        assert f'https://gist.github.com/octocat/{GIST_ID}' in result.output

    @patch('gitstats.utils.github_api_tools.requests.request')
    def test_missing_gist_file_is_a_warning(self, mock_request, runner, tmp_path, response_factory):
        fake = FakeGitHub(response_factory, gist_files={'README.md': {}})
        mock_request.side_effect = fake

        result = invoke(runner, tmp_path, '--gist-id', GIST_ID)

        assert result.exit_code == 0, result.output
        assert 'does not contain contributions.json' in result.output
        assert ('PATCH', f'/gists/{GIST_ID}') not in fake.calls
        assert (tmp_path / 'github-stats.json').exists()


class TestFailures:
    @patch('gitstats.utils.github_api_tools.requests.request')
    def test_core_failure_exits_non_zero(self, mock_request, runner, tmp_path, response_factory):
        mock_request.side_effect = FakeGitHub(response_factory, fail_user=True)

        result = invoke(runner, tmp_path)

        assert result.exit_code == 1
        assert '401' in result.output
        assert not (tmp_path / 'github-stats.json').exists()

    @patch('gitstats.utils.github_api_tools.time.sleep')
    @patch('gitstats.utils.github_api_tools.requests.request', side_effect=requests.ConnectionError('offline'))
    def test_transport_failure_exits_non_zero(self, mock_request, mock_sleep, runner, tmp_path):
        result = invoke(runner, tmp_path)

        assert result.exit_code == 1
        assert mock_request.call_count == 4
        assert 'offline' in result.output

    @patch('gitstats.config.read_token_from_github_cli', return_value='')
    def test_missing_token_exits_non_zero(self, mock_gh, runner, tmp_path):
        with patch.dict('os.environ', {'GH_PAT': '', 'GITHUB_TOKEN': ''}):
            result = runner.invoke(cli, ['--cwd', str(tmp_path)])

        assert result.exit_code == 1
        assert 'No GitHub token' in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])

        assert result.exit_code == 0
        assert 'gitstats' in result.output
