"""Prompt construction for the generative backend."""

from voicecommit.types.repos import Repository

SYSTEM_PROMPT = """\
You are a senior software engineer who turns short spoken requests into small,
complete, working projects.

Generate multiple interconnected files that work together as a cohesive
application, including a README.md with setup instructions. Keep every file
path relative to the repository root.

OUTPUT FORMAT:
Provide each file in the following format:

**path/to/filename.ext**
```language
[complete file content here]
```
"""


def build_user_prompt(transcript: str, repository: Repository | None = None) -> str:
    """Combine the transcript with the target repository context."""
    lines = [f"Request: {transcript.strip()}", ""]
    if repository is not None:
        lines.append(f"Target repository: {repository.full_name}")
        lines.append(f"Default branch: {repository.default_branch}")
        lines.append("")
    lines.append("Generate the complete project now.")
    return "\n".join(lines)
