"""
Request coordinator.

State machine driving one voice request at a time through generation,
review and commit:

    UNAUTHENTICATED -> IDLE -> AWAITING_VOICE_INPUT -> GENERATING
        -> REVIEWING -> COMMITTING -> IDLE

Guards are checked before anything suspends, so a rejected call never
changes state. Every failure ends in an explicit transition (IDLE, or
UNAUTHENTICATED for authentication failures) and is recorded in
``last_error`` before it is re-raised.
"""

import logging
from enum import Enum

from voicecommit.client import GitHubClient
from voicecommit.exceptions import (
    CommitError,
    GenerationError,
    NotAuthenticatedError,
    PreconditionError,
    RequestSupersededError,
    VoiceCommitError,
)
from voicecommit.generation.pipeline import CodeGenerationPipeline
from voicecommit.sync.channel import DeviceSyncChannel
from voicecommit.types.auth import AuthToken
from voicecommit.types.changes import CodeGenerationResult, CommitRecord, FileOperation
from voicecommit.types.repos import Repository
from voicecommit.types.requests import (
    COMMITTING,
    COMPLETED,
    PROCESSING,
    REVIEWING,
    TRANSCRIBING,
    RequestStatus,
    StatusKind,
    VoiceRequest,
)

logger = logging.getLogger("voicecommit.coordinator")


class CoordinatorState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    IDLE = "idle"
    AWAITING_VOICE_INPUT = "awaiting_voice_input"
    GENERATING = "generating"
    REVIEWING = "reviewing"
    COMMITTING = "committing"


_BUSY = (CoordinatorState.GENERATING, CoordinatorState.REVIEWING, CoordinatorState.COMMITTING)


class RequestCoordinator:
    """
    Coordinates the sync channel, the generation pipeline and GitHub.

    The coordinator only reads the token cache. It follows the channel's
    token changes and hands the current token to the GitHub client.

    Args:
        channel: Source of the GitHub token
        pipeline: Turns transcripts into generated files
        github: Repository mutation client
    """

    def __init__(
        self,
        channel: DeviceSyncChannel,
        pipeline: CodeGenerationPipeline,
        github: GitHubClient,
    ) -> None:
        self.channel = channel
        self.pipeline = pipeline
        self.github = github

        self.state = CoordinatorState.UNAUTHENTICATED
        self.selected_repository: Repository | None = None
        self.current_request: VoiceRequest | None = None
        self.current_result: CodeGenerationResult | None = None
        self.last_commit_records: list[CommitRecord] = []
        self.last_error: VoiceCommitError | None = None

        self._unsubscribe = channel.subscribe(self._on_token_changed)
        if channel.token is not None:
            self._on_token_changed(channel.token)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def _on_token_changed(self, token: AuthToken | None) -> None:
        if token is not None and token.is_usable():
            self.github.set_token(token)
            if self.state is CoordinatorState.UNAUTHENTICATED:
                self._transition(CoordinatorState.IDLE)
            return

        self.github.clear_token()
        if self.state is not CoordinatorState.UNAUTHENTICATED:
            self._discard_request()
            self._transition(CoordinatorState.UNAUTHENTICATED)

    def close(self) -> None:
        """Stop following token changes."""
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    async def list_repositories(self) -> list[Repository]:
        self._require_authenticated()
        try:
            return await self.github.repos.list()
        except NotAuthenticatedError as e:
            self._fail(e, CoordinatorState.UNAUTHENTICATED)
            raise

    async def create_repository(
        self, name: str, description: str | None = None, private: bool = False
    ) -> Repository:
        """Create a repository and select it."""
        self._require_selectable()
        try:
            repo = await self.github.repos.create(name, description=description, private=private)
        except NotAuthenticatedError as e:
            self._fail(e, CoordinatorState.UNAUTHENTICATED)
            raise
        self.select_repository(repo)
        return repo

    def select_repository(self, repo: Repository) -> None:
        self._require_selectable()
        self.selected_repository = repo
        logger.info("Selected repository %s", repo.full_name)

    # ------------------------------------------------------------------
    # Voice request lifecycle
    # ------------------------------------------------------------------

    def begin_voice_input(self) -> None:
        """
        Enter AWAITING_VOICE_INPUT.

        Raises:
            NotAuthenticatedError: If no usable token has been received
            PreconditionError: If no repository is selected or a request is
                already in flight
        """
        self._enter_voice_input()

    async def submit_transcript(self, transcript: str) -> CodeGenerationResult:
        """
        Generate files for a transcript and move to REVIEWING.

        Entering from IDLE implies the voice capture that produced the
        transcript, so the AWAITING_VOICE_INPUT guard applies.

        Raises:
            PreconditionError: If the transcript is empty, no repository is
                selected, or a request is already in flight
            GenerationError: If generation failed (state returns to IDLE)
            RequestSupersededError: If the request was abandoned meanwhile
        """
        if not transcript or not transcript.strip():
            raise PreconditionError("transcript is empty")
        repo = self._enter_voice_input()

        request = self.current_request
        if request is not None and request.status.kind is StatusKind.TRANSCRIBING:
            # Re-recording after a rejection keeps the same request
            request.transcript_text = transcript
        else:
            request = VoiceRequest(transcript_text=transcript, target_repository_id=repo.repo_id)
        request.advance(PROCESSING)
        self.current_request = request
        self.current_result = None
        self._transition(CoordinatorState.GENERATING)

        try:
            result = await self.pipeline.generate(transcript, repo)
        except VoiceCommitError as e:
            self._ensure_current(request, CoordinatorState.GENERATING)
            self._fail(e, CoordinatorState.IDLE)
            raise
        except Exception as e:
            self._ensure_current(request, CoordinatorState.GENERATING)
            error = GenerationError(f"Generation failed: {e!r}")
            self._fail(error, CoordinatorState.IDLE)
            raise error from e

        self._ensure_current(request, CoordinatorState.GENERATING)
        request.advance(REVIEWING)
        self.current_result = result
        self._transition(CoordinatorState.REVIEWING)
        logger.info("Request %s ready for review: %s", request.id, result.summary)
        return result

    def reject(self) -> None:
        """Discard the generated result and return to voice capture."""
        if self.state is not CoordinatorState.REVIEWING or self.current_request is None:
            raise PreconditionError("nothing to review")
        self.current_request.advance(TRANSCRIBING)
        self.current_result = None
        self._transition(CoordinatorState.AWAITING_VOICE_INPUT)

    def cancel(self) -> None:
        """
        Abandon the current request and return to IDLE.

        A generation still running for it is not aborted; its result is
        discarded when it arrives.
        """
        if self.state is CoordinatorState.COMMITTING:
            raise PreconditionError("cannot cancel while committing")
        if self.state not in (
            CoordinatorState.AWAITING_VOICE_INPUT,
            CoordinatorState.GENERATING,
            CoordinatorState.REVIEWING,
        ):
            return
        self._discard_request()
        self._transition(CoordinatorState.IDLE)

    async def approve(self) -> list[CommitRecord]:
        """
        Commit the reviewed files, one at a time in order.

        The batch is not transactional: files written before a failure stay
        committed and are listed in ``last_commit_records``.

        Returns:
            One CommitRecord per file written

        Raises:
            PreconditionError: If there is no result under review
            NotAuthenticatedError: On a missing or rejected token (state
                returns to UNAUTHENTICATED)
            ApiError: If GitHub rejects a request (state returns to IDLE)
            NetworkError: If GitHub is unreachable (state returns to IDLE)
            CommitError: If the batch failed for any other reason (state
                returns to IDLE)
        """
        request = self.current_request
        result = self.current_result
        repo = self.selected_repository
        if (
            self.state is not CoordinatorState.REVIEWING
            or request is None
            or result is None
            or repo is None
        ):
            raise PreconditionError("nothing to approve")

        request.advance(COMMITTING)
        self.last_commit_records = []
        records = self.last_commit_records
        self._transition(CoordinatorState.COMMITTING)

        try:
            if result.branch_name:
                await self.github.create_branch(repo, result.branch_name, repo.default_branch)
                self._ensure_current(request, CoordinatorState.COMMITTING)

            for change in result.files:
                if change.operation is FileOperation.DELETE:
                    logger.warning("Skipping delete of %s: deletes are not applied", change.path)
                    continue
                record = await self.github.commit_file(
                    repo, change.path, change.content, result.commit_message, result.branch_name
                )
                self._ensure_current(request, CoordinatorState.COMMITTING)
                records.append(record)
        except RequestSupersededError:
            raise
        except NotAuthenticatedError as e:
            self._ensure_current(request, CoordinatorState.COMMITTING)
            self._fail(e, CoordinatorState.UNAUTHENTICATED)
            raise
        except VoiceCommitError as e:
            self._ensure_current(request, CoordinatorState.COMMITTING)
            if records:
                logger.warning(
                    "Commit batch failed after %d of %d files; earlier files remain committed",
                    len(records),
                    len(result.files),
                )
            self._fail(e, CoordinatorState.IDLE)
            raise
        except Exception as e:
            self._ensure_current(request, CoordinatorState.COMMITTING)
            error = CommitError(f"Commit failed after {len(records)} files: {e!r}")
            self._fail(error, CoordinatorState.IDLE)
            raise error from e

        request.advance(COMPLETED)
        logger.info(
            "Committed %d files to %s@%s",
            len(records),
            repo.full_name,
            result.branch_name or repo.default_branch,
        )
        self.current_request = None
        self.current_result = None
        self.last_error = None
        self._transition(CoordinatorState.IDLE)
        return records

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _transition(self, target: CoordinatorState) -> None:
        if target is not self.state:
            logger.debug("State %s -> %s", self.state.value, target.value)
            self.state = target

    def _require_authenticated(self) -> None:
        if self.state is CoordinatorState.UNAUTHENTICATED:
            raise NotAuthenticatedError()

    def _enter_voice_input(self) -> Repository:
        self._require_authenticated()
        repo = self.selected_repository
        if repo is None:
            raise PreconditionError("no repository selected")
        if self.state in _BUSY:
            raise PreconditionError(f"a request is already {self.state.value}")
        if self.state is CoordinatorState.IDLE:
            self._transition(CoordinatorState.AWAITING_VOICE_INPUT)
        return repo

    def _require_selectable(self) -> None:
        self._require_authenticated()
        if self.state in _BUSY:
            raise PreconditionError(f"a request is already {self.state.value}")

    def _ensure_current(self, request: VoiceRequest, state: CoordinatorState) -> None:
        """Stale-result guard for results arriving after an await."""
        if self.current_request is not request or self.state is not state:
            logger.info("Discarding late result for superseded request %s", request.id)
            raise RequestSupersededError(request.id)

    def _fail(self, error: VoiceCommitError, target: CoordinatorState) -> None:
        logger.warning("Request failed: %s", error.message)
        self.last_error = error
        if self.current_request is not None and not self.current_request.status.is_terminal:
            self.current_request.advance(RequestStatus.failed(error.message))
        self.current_request = None
        self.current_result = None
        if target is CoordinatorState.UNAUTHENTICATED:
            self.github.clear_token()
        self._transition(target)

    def _discard_request(self) -> None:
        if self.current_request is not None:
            logger.info("Discarding request %s", self.current_request.id)
        self.current_request = None
        self.current_result = None
