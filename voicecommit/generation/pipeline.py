"""Code generation pipeline: generative backend first, templates as fallback."""

import logging
import re
from datetime import datetime, timezone

from voicecommit.exceptions import GenerationError, VoiceCommitError
from voicecommit.generation.backends import GenerativeBackend
from voicecommit.generation.parsing import extract_file_changes
from voicecommit.generation.prompting import SYSTEM_PROMPT, build_user_prompt
from voicecommit.generation.templates import find_template
from voicecommit.types.changes import CodeGenerationResult
from voicecommit.types.repos import Repository

logger = logging.getLogger(__name__)


def branch_slug(transcript: str, max_length: int = 40) -> str:
    """Lowercase, dash-separated slug of a transcript."""
    slug = re.sub(r"[^a-z0-9]+", "-", transcript.lower()).strip("-")
    return slug[:max_length].rstrip("-") or "request"


class CodeGenerationPipeline:
    """
    Turns a transcript into a CodeGenerationResult.

    The backend is tried first. Any failure on that path (network, HTTP
    status, or a response with no extractable files) is logged and the
    keyword template fallback is returned instead.

    Args:
        backend: Generative backend (None means templates only)
        use_templates: Allow the template fallback
        demo_mode: Skip the backend and always use templates
        branch_prefix: When set, results target a fresh branch
            ``<prefix><slug>-<timestamp>``
    """

    def __init__(
        self,
        backend: GenerativeBackend | None = None,
        use_templates: bool = True,
        demo_mode: bool = False,
        branch_prefix: str | None = None,
    ) -> None:
        self.backend = backend
        self.use_templates = use_templates
        self.demo_mode = demo_mode
        self.branch_prefix = branch_prefix

    async def generate(
        self, transcript: str, repository: Repository | None = None
    ) -> CodeGenerationResult:
        """
        Generate files for a transcript.

        Raises:
            GenerationError: If the transcript is empty, or the backend failed
                and the template fallback is disabled
        """
        text = transcript.strip()
        if not text:
            raise GenerationError("Transcript is empty")

        if self.backend is None or self.demo_mode:
            if not self.use_templates:
                raise GenerationError("No generative backend configured and templates are disabled")
            return self._with_branch(self.generate_from_template(text), text)

        try:
            result = await self.generate_with_backend(text, repository)
        except Exception as e:
            reason = e.message if isinstance(e, VoiceCommitError) else repr(e)
            if not self.use_templates:
                raise GenerationError(f"Generation failed: {reason}") from e
            logger.warning("Generative backend failed (%s); using template fallback", reason)
            result = self.generate_from_template(text)

        return self._with_branch(result, text)

    async def generate_with_backend(
        self, transcript: str, repository: Repository | None = None
    ) -> CodeGenerationResult:
        """
        Primary path. An empty parse counts as a failure.

        Raises:
            GenerationError: If no backend is configured or nothing was extracted
        """
        if self.backend is None:
            raise GenerationError("No generative backend configured")
        response = await self.backend.complete(
            SYSTEM_PROMPT, build_user_prompt(transcript, repository)
        )
        files = extract_file_changes(response)
        if not files:
            raise GenerationError("No code files found in backend response")

        logger.info("Extracted %d files from backend response", len(files))
        return CodeGenerationResult(
            files=tuple(files),
            commit_message=f"Generate code via voice request: {transcript}",
            summary=f"Generated {len(files)} files from voice request",
        )

    @staticmethod
    def generate_from_template(transcript: str) -> CodeGenerationResult:
        """Fallback path. Deterministic and never fails for non-empty input."""
        template = find_template(transcript)
        logger.info("Using template %r", template.name)
        return template.to_result()

    def _with_branch(self, result: CodeGenerationResult, transcript: str) -> CodeGenerationResult:
        if not self.branch_prefix or result.branch_name:
            return result
        stamp = int(datetime.now(timezone.utc).timestamp())
        return CodeGenerationResult(
            files=result.files,
            commit_message=result.commit_message,
            summary=result.summary,
            branch_name=f"{self.branch_prefix}{branch_slug(transcript)}-{stamp}",
        )
