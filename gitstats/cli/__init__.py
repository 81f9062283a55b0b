# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
gitstats CLI

Usage:
    gitstats [--gist-id ID] [--cwd PATH] [--per-page N]
"""
