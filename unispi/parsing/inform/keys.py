from __future__ import annotations

import inspect
from typing import Awaitable, Callable, Optional, Tuple, Union

from unispi.parsing.inform.errors import KeyResolutionFailure

# Default key for UBNT devices: md5("ubnt").
DEFAULT_KEY = "ba86f2bbe107c7c57eb5f2690775c712"
DEFAULT_KEY_MARKER = "(default)"

KeyResolver = Callable[[str], Union[Optional[str], Awaitable[Optional[str]]]]


async def resolve_key(key_provider: KeyResolver, mac: str) -> Tuple[str, str]:
    """
    Look up the shared secret for ``mac``.

    Returns:
        ``(key_hex, key_used)`` where ``key_used`` is the marker reported in
        the packet result.

    Raises:
        KeyResolutionFailure: The provider raised instead of returning ``None``.
    """
    try:
        key = key_provider(mac)
        if inspect.isawaitable(key):
            key = await key
    except Exception as exc:
        raise KeyResolutionFailure(f"Key lookup for {mac} failed: {exc}") from exc

    key = key or DEFAULT_KEY
    if key == DEFAULT_KEY:
        return key, DEFAULT_KEY_MARKER
    return key, key


def no_keys(mac: str) -> Optional[str]:
    return None
