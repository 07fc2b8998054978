"""
Pytest plugin for VoiceCommit testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
discovered by pytest. To use them in your tests, add this to your
conftest.py:

    pytest_plugins = ["voicecommit.testing.conftest"]
"""

from voicecommit.testing.fixtures import (
    auth_token,
    credential_store,
    fake_github,
    github_client,
    loopback_link,
    sample_repository,
    sample_result,
)

__all__ = [
    "fake_github",
    "github_client",
    "auth_token",
    "sample_repository",
    "sample_result",
    "loopback_link",
    "credential_store",
]
