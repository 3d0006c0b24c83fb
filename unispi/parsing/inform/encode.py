"""
Inform packet builder.

Produces complete packets with the layout
``[TNBU] [version] [mac] [flags] [iv] [data type] [length] [payload]``,
compressing and encrypting the JSON payload the way devices do. Used to build
fixtures and to check that decoding reverses encoding.
"""
from __future__ import annotations

import json
import os
import zlib
from typing import Any, Optional

import snappy

from unispi.crypto import aes_cbc_encrypt, aes_gcm_encrypt, key_from_hex
from unispi.core.binary import parse_mac
from unispi.parsing.inform.frame import (
    FLAG_COMPRESSED,
    FLAG_COMPRESSED_SNAPPY,
    FLAG_ENCRYPTED,
    FLAG_ENCRYPTED_GCM,
    INFORM_MAGIC,
)
from unispi.parsing.inform.keys import DEFAULT_KEY
from unispi.parsing.inform.model import CompressionMethod, EncryptionMethod, InformDataType


def build_header(
    mac: str,
    flags: int,
    iv: bytes,
    payload_length: int,
    version: int = 0,
    data_type: int = InformDataType.JSON,
) -> bytes:
    if len(iv) != 16:
        raise ValueError("iv must be 16 bytes")
    for name, value, size in (
        ("version", version, 4),
        ("flags", flags, 2),
        ("data_type", int(data_type), 4),
        ("payload_length", payload_length, 4),
    ):
        if not 0 <= value < 1 << (8 * size):
            raise ValueError(f"{name} does not fit in {size} bytes: {value}")
    header = (
        INFORM_MAGIC.to_bytes(4, "big")
        + version.to_bytes(4, "big")
        + parse_mac(mac)
        + flags.to_bytes(2, "big")
        + iv
        + int(data_type).to_bytes(4, "big")
        + payload_length.to_bytes(4, "big")
    )
    return header


def build_inform_packet(
    payload: Any,
    mac: str,
    key: str = DEFAULT_KEY,
    encryption: EncryptionMethod = EncryptionMethod.AES_CBC,
    compression: CompressionMethod = CompressionMethod.ZLIB,
    iv: Optional[bytes] = None,
    version: int = 0,
    data_type: int = InformDataType.JSON,
    extra_flags: int = 0,
) -> bytes:
    """
    Build a complete inform packet.

    Args:
        payload: A JSON-serialisable value, or ``bytes`` used verbatim.
        mac: Device MAC address, e.g. ``"aa:bb:cc:dd:ee:ff"``.
        key: Hex encoded AES key.
        encryption: Cipher applied after compression.
        compression: Compression applied to the serialised payload.
        iv: 16-byte IV; random when omitted.
        version: Header version field.
        data_type: Header data type field.
        extra_flags: Additional raw flag bits OR-ed into the bitfield.

    Returns:
        The packet bytes.
    """
    if isinstance(payload, (bytes, bytearray)):
        body = bytes(payload)
    else:
        body = json.dumps(payload, separators=(",", ":")).encode("utf-8")

    flags = extra_flags
    if compression == CompressionMethod.ZLIB:
        flags |= FLAG_COMPRESSED
        body = zlib.compress(body)
    elif compression == CompressionMethod.SNAPPY:
        flags |= FLAG_COMPRESSED_SNAPPY
        body = snappy.compress(body)

    iv = iv if iv is not None else os.urandom(16)
    if encryption == EncryptionMethod.AES_CBC:
        flags |= FLAG_ENCRYPTED
        body = aes_cbc_encrypt(body, key_from_hex(key), iv)
    elif encryption == EncryptionMethod.AES_GCM:
        flags |= FLAG_ENCRYPTED_GCM
        # The tag length is part of the declared payload length and the header is the AAD.
        header = build_header(mac, flags, iv, len(body) + 16, version, data_type)
        return header + aes_gcm_encrypt(body, key_from_hex(key), iv, header)

    return build_header(mac, flags, iv, len(body), version, data_type) + body
