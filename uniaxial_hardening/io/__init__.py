"""uniaxial_hardening.io - 材料状態の転送."""

from uniaxial_hardening.io.transfer import (
    RESERVED_SLOT,
    TRANSFER_RECORD_SIZE,
    ChannelProtocol,
    MemoryChannel,
    pack_state,
    recv_self,
    send_self,
    unpack_state,
)

__all__ = [
    "RESERVED_SLOT",
    "TRANSFER_RECORD_SIZE",
    "ChannelProtocol",
    "MemoryChannel",
    "pack_state",
    "unpack_state",
    "send_self",
    "recv_self",
]
