from __future__ import annotations

import json
import logging
import zlib
from typing import Any

import snappy

from unispi.crypto import aes_cbc_decrypt, aes_gcm_decrypt, key_from_hex
from unispi.parsing.inform.errors import (
    AuthenticationFailure,
    CipherTextInvalid,
    DecompressionFailure,
    InformPacketError,
    KeyFormatInvalid,
    PayloadDecodeFailure,
)
from unispi.parsing.inform.frame import PacketHeader
from unispi.parsing.inform.keys import KeyResolver, resolve_key
from unispi.parsing.inform.model import CompressionMethod, EncryptionMethod, PacketResult, PacketStage

logger = logging.getLogger(__name__)


def decode_key(key_hex: str) -> bytes:
    try:
        return key_from_hex(key_hex)
    except ValueError as exc:
        raise KeyFormatInvalid(f"Invalid key: {exc}") from exc


def decrypt_payload(header: PacketHeader, payload: bytes | memoryview, key: bytes) -> bytes | memoryview:
    method = header.encryption_method
    if method == EncryptionMethod.NONE:
        return payload
    if method == EncryptionMethod.AES_GCM:
        try:
            return aes_gcm_decrypt(payload, key, header.iv, header.raw_header)
        except ValueError as exc:
            raise AuthenticationFailure(f"AES-GCM authentication failed: {exc}") from exc
    # CBC carries no integrity check; a tampered payload decrypts to garbage.
    try:
        return aes_cbc_decrypt(payload, key, header.iv)
    except ValueError as exc:
        raise CipherTextInvalid(f"AES-CBC decryption failed: {exc}") from exc


def decompress_payload(method: CompressionMethod, data: bytes | memoryview) -> bytes | memoryview:
    if method == CompressionMethod.NONE:
        return data
    try:
        if method == CompressionMethod.ZLIB:
            return zlib.decompress(data)
        return snappy.uncompress(bytes(data))
    except Exception as exc:
        raise DecompressionFailure(method, exc) from exc


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are accepted by json.loads but are not JSON.
    raise ValueError(f"{name} is not a valid JSON value")


def decode_json_payload(data: bytes | memoryview) -> Any:
    try:
        text = bytes(data).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise PayloadDecodeFailure(f"Payload is not valid UTF-8: {exc}") from exc
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except RecursionError as exc:
        raise PayloadDecodeFailure("Payload is nested too deeply to decode") from exc
    except ValueError as exc:
        raise PayloadDecodeFailure(f"Payload is not valid JSON: {exc}") from exc


async def parse_inform_packet(packet: bytes, key_provider: KeyResolver) -> PacketResult:
    """
    Decode an inform packet into a ``PacketResult``.

    Stages run in a fixed order: header, key lookup, decrypt, decompress,
    JSON. The first failing stage ends decoding; its error is returned in
    ``result.error`` together with whatever was decoded before it.

    Args:
        packet: The raw packet bytes.
        key_provider: Callable mapping a MAC to a hex key or ``None``. May be
            a coroutine function.
    """
    result = PacketResult()
    try:
        header, payload, warnings = PacketHeader.from_bytes(packet)
        result.head = header
        result.warnings.extend(warnings)
        result.stage = PacketStage.HEADER_PARSED

        key_hex, result.key_used = await resolve_key(key_provider, header.mac)
        result.stage = PacketStage.KEY_RESOLVED

        key = decode_key(key_hex) if header.encryption_method != EncryptionMethod.NONE else b""
        decrypted = decrypt_payload(header, payload, key)
        result.stage = PacketStage.DECRYPTED

        decompressed = decompress_payload(header.compression_method, decrypted)
        result.stage = PacketStage.DECOMPRESSED

        result.data = decode_json_payload(decompressed)
        result.stage = PacketStage.DECODED
    except InformPacketError as exc:
        logger.debug("inform packet decode failed at %s: %s", result.stage.value, exc)
        result.error = exc
        result.data = None
        result.stage = PacketStage.FAILED
    return result
