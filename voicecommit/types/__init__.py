"""VoiceCommit type definitions.

This module exports all data model types used by the package.
"""

from voicecommit.types.auth import AuthToken, TokenKind
from voicecommit.types.changes import CodeGenerationResult, CommitRecord, FileChange, FileOperation
from voicecommit.types.repos import Repository
from voicecommit.types.requests import RequestStatus, StatusKind, VoiceRequest
from voicecommit.types.sync import (
    ApiKeyUpdate,
    ContextReceived,
    MessageReceived,
    PeerReachabilityChanged,
    SyncEvent,
    SyncMessage,
    TokenClear,
    TokenReply,
    TokenRequest,
    TokenUpdate,
)

__all__ = [
    # Auth
    "AuthToken",
    "TokenKind",
    # Repositories
    "Repository",
    # Changes
    "FileChange",
    "FileOperation",
    "CodeGenerationResult",
    "CommitRecord",
    # Requests
    "VoiceRequest",
    "RequestStatus",
    "StatusKind",
    # Sync
    "SyncMessage",
    "TokenUpdate",
    "TokenClear",
    "TokenRequest",
    "TokenReply",
    "ApiKeyUpdate",
    "SyncEvent",
    "PeerReachabilityChanged",
    "MessageReceived",
    "ContextReceived",
]
