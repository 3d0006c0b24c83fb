from __future__ import annotations

from typing import Iterator


def read_u16_be(data: bytes | memoryview, offset: int) -> int:
    return int.from_bytes(data[offset: offset + 2], byteorder="big")


def read_u32_be(data: bytes | memoryview, offset: int) -> int:
    return int.from_bytes(data[offset: offset + 4], byteorder="big")


def get_bit(value: int, bit_index: int, width: int = 16) -> bool:
    if bit_index < 0 or bit_index >= width:
        raise ValueError(f"bit_index must be between 0 and {width - 1}")
    return bool(value & (1 << bit_index))


def iter_set_bits(value: int, width: int = 16) -> Iterator[int]:
    for bit_index in range(width):
        if get_bit(value, bit_index, width):
            yield bit_index


def format_mac(raw: bytes | memoryview) -> str:
    return ":".join(f"{byte:02x}" for byte in bytes(raw))


def parse_mac(mac: str) -> bytes:
    cleaned = mac.replace(":", "").replace("-", "").strip()
    raw = bytes.fromhex(cleaned)
    if len(raw) != 6:
        raise ValueError(f"MAC address must be 6 bytes, got {len(raw)}")
    return raw
