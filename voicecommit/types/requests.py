"""Voice request lifecycle models."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class StatusKind(str, Enum):
    TRANSCRIBING = "transcribing"
    PROCESSING = "processing"
    REVIEWING = "reviewing"
    COMMITTING = "committing"
    COMPLETED = "completed"
    FAILED = "failed"


# Forward-only order; FAILED is handled separately
_ORDER = [
    StatusKind.TRANSCRIBING,
    StatusKind.PROCESSING,
    StatusKind.REVIEWING,
    StatusKind.COMMITTING,
    StatusKind.COMPLETED,
]


@dataclass(frozen=True)
class RequestStatus:
    """Status of a voice request; ``reason`` is set only for failures."""

    kind: StatusKind
    reason: str | None = None

    @classmethod
    def failed(cls, reason: str) -> "RequestStatus":
        return cls(StatusKind.FAILED, reason)

    @property
    def is_terminal(self) -> bool:
        return self.kind in (StatusKind.COMPLETED, StatusKind.FAILED)

    @property
    def display_name(self) -> str:
        if self.kind is StatusKind.FAILED:
            return f"Failed: {self.reason}"
        return self.kind.value.capitalize()

    def can_transition_to(self, target: "RequestStatus") -> bool:
        """
        Check a status transition.

        Progression is forward-only. ``failed`` is reachable from any
        non-terminal status and ``reviewing`` may return to ``transcribing``
        when the result is rejected.
        """
        if self.is_terminal:
            return False
        if target.kind is StatusKind.FAILED:
            return True
        if self.kind is StatusKind.REVIEWING and target.kind is StatusKind.TRANSCRIBING:
            return True
        return _ORDER.index(target.kind) > _ORDER.index(self.kind)


TRANSCRIBING = RequestStatus(StatusKind.TRANSCRIBING)
PROCESSING = RequestStatus(StatusKind.PROCESSING)
REVIEWING = RequestStatus(StatusKind.REVIEWING)
COMMITTING = RequestStatus(StatusKind.COMMITTING)
COMPLETED = RequestStatus(StatusKind.COMPLETED)


@dataclass
class VoiceRequest:
    """One spoken request, from accepted transcript to commit."""

    transcript_text: str
    target_repository_id: int | None = None
    status: RequestStatus = TRANSCRIBING
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def advance(self, status: RequestStatus) -> None:
        """
        Move to ``status``.

        Raises:
            ValueError: If the transition is not allowed
        """
        if not self.status.can_transition_to(status):
            raise ValueError(
                f"Invalid status transition {self.status.kind.value} -> {status.kind.value}"
            )
        self.status = status
