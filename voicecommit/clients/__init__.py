"""VoiceCommit GitHub resource clients."""

from voicecommit.clients.branches import BranchesClient
from voicecommit.clients.contents import ContentsClient
from voicecommit.clients.repos import ReposClient

__all__ = [
    "BranchesClient",
    "ContentsClient",
    "ReposClient",
]
