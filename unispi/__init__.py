from unispi.keys import KeyStore
from unispi.parsing.inform import (
    DEFAULT_KEY,
    InformPacketError,
    PacketHeader,
    PacketResult,
    build_inform_packet,
    parse_inform_packet,
)
from unispi.relay_app import create_app, RelaySettings
from unispi.relay import InformRelay
from importlib.metadata import PackageNotFoundError, version

__all__ = [
    "DEFAULT_KEY",
    "InformPacketError",
    "PacketHeader",
    "PacketResult",
    "build_inform_packet",
    "parse_inform_packet",
    "KeyStore",
    "InformRelay",
    "create_app",
    "RelaySettings",
]

try:
    __version__ = version("unispi")
except PackageNotFoundError:
    __version__ = "0.0.0"
