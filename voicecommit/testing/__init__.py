"""VoiceCommit testing utilities.

Provides a fake GitHub API and fixtures for testing code built on VoiceCommit.
"""

from voicecommit.testing.fixtures import (
    SAMPLE_TOKEN,
    create_mock_repository,
    create_mock_result,
)
from voicecommit.testing.mock import ConfiguredError, FakeGitHubAPI, MockCall

__all__ = [
    # Fake API
    "FakeGitHubAPI",
    "MockCall",
    "ConfiguredError",
    # Helper functions
    "create_mock_repository",
    "create_mock_result",
    "SAMPLE_TOKEN",
]
