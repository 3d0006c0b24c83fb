"""
Inform packet codec.

Parses the 40-byte ``TNBU`` header, resolves the device key, then decrypts,
decompresses and JSON-decodes the payload into a ``PacketResult``.
"""
from unispi.parsing.inform.decode import (
    decode_json_payload,
    decompress_payload,
    decrypt_payload,
    parse_inform_packet,
)
from unispi.parsing.inform.encode import build_inform_packet
from unispi.parsing.inform.errors import (
    AuthenticationFailure,
    CipherTextInvalid,
    DecompressionFailure,
    InformPacketError,
    KeyFormatInvalid,
    KeyResolutionFailure,
    MagicMismatch,
    PayloadDecodeFailure,
    TruncatedHeader,
    TruncatedPayload,
)
from unispi.parsing.inform.frame import HEADER_SIZE, INFORM_MAGIC, PacketHeader
from unispi.parsing.inform.keys import DEFAULT_KEY, DEFAULT_KEY_MARKER, KeyResolver
from unispi.parsing.inform.model import (
    CompressionMethod,
    EncryptionMethod,
    InformDataType,
    PacketResult,
    PacketStage,
)

__all__ = [
    "AuthenticationFailure",
    "build_inform_packet",
    "CipherTextInvalid",
    "CompressionMethod",
    "decode_json_payload",
    "decompress_payload",
    "decrypt_payload",
    "DecompressionFailure",
    "DEFAULT_KEY",
    "DEFAULT_KEY_MARKER",
    "EncryptionMethod",
    "HEADER_SIZE",
    "INFORM_MAGIC",
    "InformDataType",
    "InformPacketError",
    "KeyFormatInvalid",
    "KeyResolutionFailure",
    "KeyResolver",
    "MagicMismatch",
    "PacketHeader",
    "PacketResult",
    "PacketStage",
    "parse_inform_packet",
    "PayloadDecodeFailure",
    "TruncatedHeader",
    "TruncatedPayload",
]
