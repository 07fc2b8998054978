"""Device sync channel and peer transports."""

from voicecommit.sync.channel import DeliveryMode, DeviceSyncChannel
from voicecommit.sync.memory import LoopbackEndpoint, LoopbackLink
from voicecommit.sync.peer import EventHandler, PeerTransport

__all__ = [
    "DeviceSyncChannel",
    "DeliveryMode",
    "PeerTransport",
    "EventHandler",
    "LoopbackLink",
    "LoopbackEndpoint",
]
