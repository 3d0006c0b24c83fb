from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from unispi.core.binary import format_mac, iter_set_bits, read_u16_be, read_u32_be
from unispi.parsing.inform.errors import MagicMismatch, TruncatedHeader, TruncatedPayload
from unispi.parsing.inform.model import CompressionMethod, EncryptionMethod, InformDataType

logger = logging.getLogger(__name__)

# 'TNBU', which is 'UBNT' backwards.
INFORM_MAGIC = 0x544E4255
HEADER_SIZE = 40
EXPECTED_VERSION = 0

FLAG_ENCRYPTED = 0x01
FLAG_COMPRESSED = 0x02
FLAG_COMPRESSED_SNAPPY = 0x04
FLAG_ENCRYPTED_GCM = 0x08

FLAG_NAMES: dict[int, str] = {
    0: "Encrypted",
    1: "Compressed",
    2: "CompressedSnappy",
    3: "EncryptedGCM",
}


def decode_flags(bits: int) -> Tuple[str, ...]:
    return tuple(FLAG_NAMES.get(index, f"Unk_{index}") for index in iter_set_bits(bits, 16))


def encryption_for_flags(bits: int) -> EncryptionMethod:
    if bits & FLAG_ENCRYPTED_GCM:
        return EncryptionMethod.AES_GCM
    if bits & FLAG_ENCRYPTED:
        return EncryptionMethod.AES_CBC
    return EncryptionMethod.NONE


def compression_for_flags(bits: int) -> CompressionMethod:
    if bits & FLAG_COMPRESSED_SNAPPY:
        return CompressionMethod.SNAPPY
    if bits & FLAG_COMPRESSED:
        return CompressionMethod.ZLIB
    return CompressionMethod.NONE


@dataclass(frozen=True)
class PacketHeader:
    raw_header: bytes
    version: int
    mac: str
    encryption_method: EncryptionMethod
    compression_method: CompressionMethod
    iv: bytes
    data_type: int
    flags: Tuple[str, ...]
    flag_bits: int
    payload_length: int

    @property
    def data_type_name(self) -> Optional[str]:
        try:
            return InformDataType(self.data_type).name
        except ValueError:
            return None

    @property
    def unknown_flags(self) -> Tuple[str, ...]:
        return tuple(flag for flag in self.flags if flag.startswith("Unk_"))

    @classmethod
    def from_bytes(cls, packet: bytes | memoryview) -> Tuple["PacketHeader", memoryview, list[str]]:
        """
        Parse the fixed 40-byte header of an inform packet.

        Args:
            packet: The complete packet as received.

        Returns:
            The header, a zero-copy view of the payload region and a list of
            non-fatal warnings (unexpected version, unknown flag bits).

        Raises:
            MagicMismatch: The buffer does not start with ``TNBU``.
            TruncatedHeader: The buffer is shorter than the header.
            TruncatedPayload: The declared payload length exceeds the buffer.
        """
        view = memoryview(packet)
        if len(view) < 4:
            raise TruncatedHeader(len(view), HEADER_SIZE)
        magic = read_u32_be(view, 0)
        if magic != INFORM_MAGIC:
            raise MagicMismatch(view[:4].tobytes(), INFORM_MAGIC)
        if len(view) < HEADER_SIZE:
            raise TruncatedHeader(len(view), HEADER_SIZE)

        raw_header = view[:HEADER_SIZE].tobytes()
        payload_length = read_u32_be(raw_header, 36)
        available = len(view) - HEADER_SIZE
        if payload_length > available:
            raise TruncatedPayload(payload_length, available)
        payload = view[HEADER_SIZE: HEADER_SIZE + payload_length]

        warnings: list[str] = []
        flag_bits = read_u16_be(raw_header, 14)
        flags = decode_flags(flag_bits)
        header = cls(
            raw_header=raw_header,
            version=read_u32_be(raw_header, 4),
            mac=format_mac(raw_header[8:14]),
            encryption_method=encryption_for_flags(flag_bits),
            compression_method=compression_for_flags(flag_bits),
            iv=raw_header[16:32],
            data_type=read_u32_be(raw_header, 32),
            flags=flags,
            flag_bits=flag_bits,
            payload_length=payload_length,
        )

        if header.unknown_flags:
            message = f"Unknown flags found, decoding may fail downstream! {list(flags)}"
            logger.warning(message)
            warnings.append(message)
        if header.version != EXPECTED_VERSION:
            message = f"Version was expected to be '{EXPECTED_VERSION}', was {header.version}"
            logger.warning(message)
            warnings.append(message)

        return header, payload, warnings

    def as_dict(self) -> dict:
        return {
            "version": self.version,
            "mac": self.mac,
            "encryption_method": self.encryption_method.value,
            "compression_method": self.compression_method.value,
            "iv": self.iv.hex(),
            "data_type": self.data_type,
            "flags": list(self.flags),
            "payload_length": self.payload_length,
        }
