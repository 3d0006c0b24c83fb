from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from unispi.parsing.inform.errors import InformPacketError
    from unispi.parsing.inform.frame import PacketHeader


class EncryptionMethod(str, Enum):
    NONE = "none"
    AES_CBC = "AES-CBC"
    AES_GCM = "AES-GCM"


class CompressionMethod(str, Enum):
    NONE = "none"
    ZLIB = "zlib"
    SNAPPY = "Snappy"


class InformDataType(IntEnum):
    BINARY = 0
    JSON = 1


class PacketStage(str, Enum):
    START = "start"
    HEADER_PARSED = "header_parsed"
    KEY_RESOLVED = "key_resolved"
    DECRYPTED = "decrypted"
    DECOMPRESSED = "decompressed"
    DECODED = "decoded"
    FAILED = "failed"


@dataclass
class PacketResult:
    """
    Outcome of decoding one inform packet.

    ``error`` and ``data`` are mutually exclusive. ``head`` is kept whenever
    the header parsed, even if a later stage failed.
    """
    head: Optional["PacketHeader"] = None
    data: Any = None
    error: Optional["InformPacketError"] = None
    key_used: Optional[str] = None
    warnings: list[str] = field(default_factory=list)
    stage: PacketStage = PacketStage.START

    @property
    def ok(self) -> bool:
        return self.error is None and self.stage == PacketStage.DECODED

    @property
    def failed_stage(self) -> Optional[PacketStage]:
        return self.error.stage if self.error is not None else None

    def as_dict(self) -> dict[str, Any]:
        return {
            "head": self.head.as_dict() if self.head is not None else None,
            "data": self.data,
            "error": (
                {
                    "type": type(self.error).__name__,
                    "message": str(self.error),
                    "stage": self.error.stage.value,
                }
                if self.error is not None
                else None
            ),
            "key_used": self.key_used,
            "warnings": list(self.warnings),
            "stage": self.stage.value,
        }
