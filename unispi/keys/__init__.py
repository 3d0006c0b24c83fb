from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional, Tuple

from unispi.crypto import key_from_hex

logger = logging.getLogger(__name__)

KEYS_FILE_TEMPLATE = (
    "# This file is used to store the keys used to decrypt the inform packets. One per line.\n"
    '# Example: {"mac": "aa:bb:cc:dd:ee:ff", "x_authkey": "ba86f2bbe107c7c57eb5f2690775c712"}\n'
)

# mongo shell exports wrap ids as ObjectId("..."); strip the wrapper so the line is JSON.
_OBJECT_ID_RE = re.compile(r"ObjectId\(([^)]+)\)")


class KeyStore:
    """
    Per-device inform keys, keyed by lowercase MAC address.

    Instances are callable so they can be handed straight to
    ``parse_inform_packet`` as the key provider.
    """

    def __init__(self, keys: Optional[Dict[str, str]] = None) -> None:
        self._keys: Dict[str, str] = {}
        for mac, key in (keys or {}).items():
            self.add(mac, key)

    def __call__(self, mac: str) -> Optional[str]:
        return self.get(mac)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, mac: object) -> bool:
        return isinstance(mac, str) and mac.lower() in self._keys

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._keys.items())

    def get(self, mac: str) -> Optional[str]:
        return self._keys.get(mac.lower())

    def add(self, mac: str, key: str) -> None:
        key_from_hex(key)
        self._keys[mac.lower()] = key.lower()

    def macs(self) -> list[str]:
        return sorted(self._keys)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "KeyStore":
        store = cls()
        for line in lines:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if not line.startswith("{"):
                logger.warning("Invalid line in keys file, ignoring: %s", line)
                continue
            try:
                entry = json.loads(_OBJECT_ID_RE.sub(r"\1 ", line))
            except json.JSONDecodeError as exc:
                logger.warning("Unparseable line in keys file, ignoring: %s (%s)", line, exc)
                continue
            mac = entry.get("mac") if isinstance(entry, dict) else None
            key = entry.get("x_authkey") if isinstance(entry, dict) else None
            if not isinstance(mac, str) or not isinstance(key, str):
                logger.warning("Invalid key in keys file, ignoring: %s", line)
                continue
            try:
                store.add(mac, key)
            except ValueError as exc:
                logger.warning("Invalid key for %s in keys file, ignoring: %s", mac, exc)
        return store

    @classmethod
    def load(cls, path: str | Path, create: bool = True) -> "KeyStore":
        """
        Load keys from a flat file with one JSON object per line.

        Args:
            path: Location of the keys file.
            create: Write a commented template when the file does not exist.

        Returns:
            The populated store; empty when the file is missing.
        """
        path = Path(path)
        if not path.exists():
            if create:
                path.write_text(KEYS_FILE_TEMPLATE, encoding="utf-8")
                logger.info("Created keys file template at %s", path)
            return cls()
        with open(path, "r", encoding="utf-8") as f:
            store = cls.from_lines(f)
        logger.info("Loaded %d keys from %s", len(store), path)
        return store


__all__ = ["KeyStore", "KEYS_FILE_TEMPLATE"]
