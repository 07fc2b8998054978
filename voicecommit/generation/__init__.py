"""Code generation pipeline."""

from voicecommit.generation.backends import (
    AnthropicBackend,
    GenerativeBackend,
    HTTPBackend,
    OpenAIBackend,
)
from voicecommit.generation.parsing import extract_file_changes
from voicecommit.generation.pipeline import CodeGenerationPipeline
from voicecommit.generation.templates import Template, find_template

__all__ = [
    "CodeGenerationPipeline",
    "GenerativeBackend",
    "HTTPBackend",
    "AnthropicBackend",
    "OpenAIBackend",
    "extract_file_changes",
    "Template",
    "find_template",
]
