"""VoiceCommit - turn spoken requests into commits on GitHub."""

from voicecommit.app import VoiceCommitApp
from voicecommit.client import GitHubClient
from voicecommit.config import AppConfig
from voicecommit.coordinator import CoordinatorState, RequestCoordinator
from voicecommit.credentials import FileCredentialStore, MemoryCredentialStore
from voicecommit.exceptions import (
    ApiError,
    CommitError,
    ConfigurationError,
    CredentialStoreError,
    GenerationError,
    NetworkError,
    NotAuthenticatedError,
    PreconditionError,
    RemoteFileNotFoundError,
    RequestSupersededError,
    SyncError,
    VoiceCommitError,
)
from voicecommit.generation import CodeGenerationPipeline
from voicecommit.logging import configure_logging, get_logger
from voicecommit.sync import DeliveryMode, DeviceSyncChannel, LoopbackLink
from voicecommit.types import (
    AuthToken,
    CodeGenerationResult,
    CommitRecord,
    FileChange,
    FileOperation,
    Repository,
    VoiceRequest,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Application
    "VoiceCommitApp",
    "AppConfig",
    "RequestCoordinator",
    "CoordinatorState",
    # Components
    "GitHubClient",
    "CodeGenerationPipeline",
    "DeviceSyncChannel",
    "DeliveryMode",
    "LoopbackLink",
    "FileCredentialStore",
    "MemoryCredentialStore",
    # Types
    "AuthToken",
    "Repository",
    "FileChange",
    "FileOperation",
    "CodeGenerationResult",
    "CommitRecord",
    "VoiceRequest",
    # Exceptions
    "VoiceCommitError",
    "ConfigurationError",
    "PreconditionError",
    "NotAuthenticatedError",
    "ApiError",
    "RemoteFileNotFoundError",
    "NetworkError",
    "GenerationError",
    "SyncError",
    "CredentialStoreError",
    "RequestSupersededError",
    "CommitError",
    # Logging
    "configure_logging",
    "get_logger",
]
