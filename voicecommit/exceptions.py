"""VoiceCommit exception classes."""

from typing import Any


class VoiceCommitError(Exception):
    """Base exception for all VoiceCommit errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class ConfigurationError(VoiceCommitError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class PreconditionError(VoiceCommitError):
    """Raised when an operation is invoked while its guard does not hold."""

    def __init__(self, message: str) -> None:
        super().__init__("PRECONDITION_FAILED", message)


class NotAuthenticatedError(VoiceCommitError):
    """Raised when no usable token is available or the remote rejects it."""

    def __init__(self, message: str = "Not authenticated with GitHub") -> None:
        super().__init__("NOT_AUTHENTICATED", message)


class ApiError(VoiceCommitError):
    """Raised on any non-success HTTP response."""

    def __init__(self, status_code: int, body: Any, message: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__("API_ERROR", message or f"HTTP {status_code}")


class RemoteFileNotFoundError(VoiceCommitError):
    """Raised by the blob SHA lookup when the path does not exist on the branch."""

    def __init__(self, path: str, branch: str) -> None:
        self.path = path
        self.branch = branch
        super().__init__("FILE_NOT_FOUND", f"{path} not found on {branch}")


class NetworkError(VoiceCommitError):
    """Raised when a request fails before any HTTP response arrives."""

    def __init__(self, message: str) -> None:
        super().__init__("NETWORK_ERROR", message)


class GenerationError(VoiceCommitError):
    """Raised when no code generation path produced a result."""

    def __init__(self, message: str) -> None:
        super().__init__("GENERATION_ERROR", message)


class SyncError(VoiceCommitError):
    """Raised by peer transports when a cross-device delivery fails."""

    def __init__(self, message: str) -> None:
        super().__init__("SYNC_ERROR", message)


class CredentialStoreError(VoiceCommitError):
    """Raised on credential store I/O failures (absence is not an error)."""

    def __init__(self, message: str) -> None:
        super().__init__("CREDENTIAL_STORE_ERROR", message)


class RequestSupersededError(VoiceCommitError):
    """Raised when an in-flight result arrives after its request was dropped."""

    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        super().__init__(
            "REQUEST_SUPERSEDED", f"Request {request_id} was superseded before completion"
        )


class CommitError(VoiceCommitError):
    """Raised when an approved batch failed for a reason other than the API or network."""

    def __init__(self, message: str) -> None:
        super().__init__("COMMIT_FAILED", message)
