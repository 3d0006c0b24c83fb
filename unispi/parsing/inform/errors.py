"""
Error taxonomy for inform packet decoding.

Every error carries the pipeline stage it belongs to so a failed
``PacketResult`` can report where decoding stopped.
"""
from __future__ import annotations

from typing import Optional

from unispi.parsing.inform.model import CompressionMethod, PacketStage


class InformPacketError(ValueError):
    """Base class for every failure raised while decoding an inform packet."""

    # State the pipeline had reached when this error stopped it.
    stage: PacketStage = PacketStage.START


class MagicMismatch(InformPacketError):
    """The first four bytes are not the ``TNBU`` magic."""

    stage = PacketStage.START

    def __init__(self, found: bytes, expected: int):
        self.found = bytes(found)
        self.value = int.from_bytes(self.found, byteorder="big")
        self.expected = expected
        text = self.found.decode("latin-1")
        super().__init__(f"expected TNBU ({expected}), got {text!r} ({self.value})")


class TruncatedHeader(InformPacketError):
    """The buffer is shorter than the fixed header."""

    stage = PacketStage.START

    def __init__(self, available: int, required: int):
        self.available = available
        self.required = required
        super().__init__(f"Packet is too short for a header, expected {required} got {available} bytes.")


class TruncatedPayload(InformPacketError):
    """The declared payload length exceeds the bytes following the header."""

    stage = PacketStage.START

    def __init__(self, expected: int, available: int):
        self.expected = expected
        self.available = available
        super().__init__(f"Payload is too short, expected {expected} got {available} bytes.")


class KeyResolutionFailure(InformPacketError):
    """The key provider raised instead of returning a key or ``None``."""

    stage = PacketStage.HEADER_PARSED


class KeyFormatInvalid(InformPacketError):
    """The resolved secret is not hex of a valid AES key size."""

    stage = PacketStage.KEY_RESOLVED


class AuthenticationFailure(InformPacketError):
    """AES-GCM tag verification failed; the header or payload was altered."""

    stage = PacketStage.KEY_RESOLVED


class CipherTextInvalid(InformPacketError):
    """AES-CBC ciphertext is not block aligned or its padding is malformed."""

    stage = PacketStage.KEY_RESOLVED


class DecompressionFailure(InformPacketError):
    stage = PacketStage.DECRYPTED

    def __init__(self, method: CompressionMethod, cause: Optional[BaseException] = None):
        self.method = method
        self.cause = cause
        super().__init__(f"{method.value} decompression failed: {cause}")


class PayloadDecodeFailure(InformPacketError):
    stage = PacketStage.DECOMPRESSED
