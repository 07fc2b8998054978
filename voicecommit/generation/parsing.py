"""Extraction of file blocks from free-text model output."""

import re

from voicecommit.types.changes import FileChange

# **filename.ext** followed by a fenced block
_NAMED_BLOCK = re.compile(r"\*\*([^*]+)\*\*\s*```(\w+)?\s*(.*?)```", re.DOTALL)

# Bare fenced block with an optional language tag
_BARE_BLOCK = re.compile(r"```(\w+)?\n(.*?)\n```", re.DOTALL)

LANGUAGE_EXTENSIONS = {
    "html": "html",
    "css": "css",
    "javascript": "js",
    "js": "js",
    "python": "py",
    "swift": "swift",
    "java": "java",
    "cpp": "cpp",
    "c": "c",
}


def filename_for(language: str | None, index: int) -> str:
    """Synthesize a filename for the ``index``-th anonymous block."""
    ext = LANGUAGE_EXTENSIONS.get((language or "").lower(), "txt")
    return f"main.{ext}" if index == 0 else f"file{index + 1}.{ext}"


def normalize_path(raw: str) -> str:
    """Anchor a model-supplied filename at the repository root."""
    path = raw.strip().strip("`").strip()
    if "://" in path:
        path = path.split("://", 1)[1].split("/", 1)[-1]
    while path.startswith(("./", "/")):
        path = path[2:] if path.startswith("./") else path[1:]
    return path


def extract_file_changes(response: str) -> list[FileChange]:
    """
    Extract files from a model response.

    Named ``**filename**`` blocks are preferred. When none are present,
    bare fenced blocks are used with filenames derived from their language
    tag. Returns an empty list when nothing usable is found.
    """
    files: list[FileChange] = []

    for match in _NAMED_BLOCK.finditer(response):
        path = normalize_path(match.group(1))
        if not path:
            continue
        files.append(FileChange(path=path, content=match.group(3).strip()))

    if files:
        return files

    for index, match in enumerate(_BARE_BLOCK.finditer(response)):
        files.append(
            FileChange(path=filename_for(match.group(1), index), content=match.group(2).strip())
        )

    return files
