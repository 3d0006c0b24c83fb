"""Tests for inform header parsing and flag decoding."""
import pytest

from unispi.parsing.inform import (
    CompressionMethod,
    EncryptionMethod,
    HEADER_SIZE,
    MagicMismatch,
    PacketHeader,
    TruncatedHeader,
    TruncatedPayload,
)
from unispi.parsing.inform.encode import build_header
from unispi.parsing.inform.frame import decode_flags

MAC = "aa:bb:cc:dd:ee:ff"
IV = bytes(range(16))


def _packet(flags=0, payload=b'{"a":1}', version=0, declared=None):
    length = len(payload) if declared is None else declared
    return build_header(MAC, flags, IV, length, version=version) + payload


def test_parse_plain_header():
    header, payload, warnings = PacketHeader.from_bytes(_packet())
    assert header.mac == MAC
    assert header.version == 0
    assert header.iv == IV
    assert header.data_type == 1
    assert header.data_type_name == "JSON"
    assert header.flags == ()
    assert header.encryption_method == EncryptionMethod.NONE
    assert header.compression_method == CompressionMethod.NONE
    assert header.payload_length == 7
    assert bytes(payload) == b'{"a":1}'
    assert warnings == []


def test_raw_header_is_first_40_bytes():
    packet = _packet()
    header, _, _ = PacketHeader.from_bytes(packet)
    assert header.raw_header == packet[:HEADER_SIZE]
    assert len(header.raw_header) == 40


def test_manual_header_bytes():
    packet = (
        b"TNBU"
        + bytes(4)
        + bytes.fromhex("aabbccddeeff")
        + b"\x00\x00"
        + IV
        + bytes(4)
        + (7).to_bytes(4, "big")
        + b'{"a":1}'
    )
    header, payload, _ = PacketHeader.from_bytes(packet)
    assert header.mac == MAC
    assert header.data_type_name == "BINARY"
    assert bytes(payload) == b'{"a":1}'


def test_payload_is_a_view():
    packet = _packet()
    _, payload, _ = PacketHeader.from_bytes(packet)
    assert isinstance(payload, memoryview)
    assert payload.obj is packet


def test_trailing_bytes_ignored():
    packet = _packet() + b"trailing"
    _, payload, _ = PacketHeader.from_bytes(packet)
    assert bytes(payload) == b'{"a":1}'


def test_iv_read_without_encryption():
    header, _, _ = PacketHeader.from_bytes(_packet(flags=0))
    assert header.encryption_method == EncryptionMethod.NONE
    assert header.iv == IV


def test_magic_mismatch():
    packet = bytearray(_packet())
    packet[0:4] = b"UBNT"
    with pytest.raises(MagicMismatch) as excinfo:
        PacketHeader.from_bytes(bytes(packet))
    assert excinfo.value.found == b"UBNT"
    assert excinfo.value.value == int.from_bytes(b"UBNT", "big")
    assert "UBNT" in str(excinfo.value)


def test_magic_mismatch_only_needs_four_bytes():
    # Nothing past offset 4 exists, so a bad magic must be reported before any length check.
    with pytest.raises(MagicMismatch):
        PacketHeader.from_bytes(b"XXXX")


def test_too_short_for_magic():
    with pytest.raises(TruncatedHeader):
        PacketHeader.from_bytes(b"TN")


def test_too_short_for_header():
    with pytest.raises(TruncatedHeader) as excinfo:
        PacketHeader.from_bytes(b"TNBU" + bytes(20))
    assert excinfo.value.available == 24


def test_truncated_payload():
    with pytest.raises(TruncatedPayload) as excinfo:
        PacketHeader.from_bytes(_packet(payload=b"{}", declared=100))
    assert excinfo.value.expected == 100
    assert excinfo.value.available == 2


def test_payload_exactly_available():
    header, payload, _ = PacketHeader.from_bytes(_packet(payload=b"", declared=0))
    assert header.payload_length == 0
    assert bytes(payload) == b""


def test_version_mismatch_is_warning():
    header, _, warnings = PacketHeader.from_bytes(_packet(version=3))
    assert header.version == 3
    assert len(warnings) == 1
    assert "was 3" in warnings[0]


class TestFlags:
    def test_bit0_is_cbc(self):
        header, _, _ = PacketHeader.from_bytes(_packet(flags=0b0001))
        assert header.flags == ("Encrypted",)
        assert header.encryption_method == EncryptionMethod.AES_CBC
        assert header.compression_method == CompressionMethod.NONE

    def test_bit3_is_gcm(self):
        header, _, _ = PacketHeader.from_bytes(_packet(flags=0b1000))
        assert header.encryption_method == EncryptionMethod.AES_GCM

    def test_gcm_wins_over_cbc(self):
        header, _, _ = PacketHeader.from_bytes(_packet(flags=0b1001))
        assert header.flags == ("Encrypted", "EncryptedGCM")
        assert header.encryption_method == EncryptionMethod.AES_GCM

    def test_bit1_is_zlib(self):
        header, _, _ = PacketHeader.from_bytes(_packet(flags=0b0010))
        assert header.compression_method == CompressionMethod.ZLIB
        assert header.encryption_method == EncryptionMethod.NONE

    def test_snappy_wins_over_zlib(self):
        header, _, _ = PacketHeader.from_bytes(_packet(flags=0b0110))
        assert header.compression_method == CompressionMethod.SNAPPY

    def test_unknown_bits_warn_without_changing_methods(self):
        header, _, warnings = PacketHeader.from_bytes(_packet(flags=0b1000_0000_0011))
        assert header.flags == ("Encrypted", "Compressed", "Unk_11")
        assert header.unknown_flags == ("Unk_11",)
        assert header.encryption_method == EncryptionMethod.AES_CBC
        assert header.compression_method == CompressionMethod.ZLIB
        assert len(warnings) == 1
        assert "decoding may fail downstream" in warnings[0]

    def test_decode_flags_high_bit(self):
        assert decode_flags(0x8000) == ("Unk_15",)
        assert decode_flags(0) == ()


def test_as_dict():
    header, _, _ = PacketHeader.from_bytes(_packet(flags=0b0001))
    d = header.as_dict()
    assert d["mac"] == MAC
    assert d["encryption_method"] == "AES-CBC"
    assert d["compression_method"] == "none"
    assert d["iv"] == IV.hex()
    assert d["flags"] == ["Encrypted"]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"payload_length": 1 << 32},
        {"payload_length": -1},
        {"flags": 1 << 16},
        {"version": 1 << 32},
        {"data_type": 1 << 32},
    ],
)
def test_build_header_rejects_out_of_range_fields(kwargs):
    values = {"mac": MAC, "flags": 0, "iv": IV, "payload_length": 0}
    values.update(kwargs)
    with pytest.raises(ValueError):
        build_header(**values)


def test_build_header_rejects_short_iv():
    with pytest.raises(ValueError):
        build_header(MAC, 0, bytes(8), 0)
