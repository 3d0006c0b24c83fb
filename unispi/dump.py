"""
Decode captured inform packets from disk and print them as JSON.

Example::

    python -m unispi.dump request.bin response.bin --keys keys.txt
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from unispi.keys import KeyStore
from unispi.parsing.inform import KeyResolver, PacketResult, parse_inform_packet


async def dump_packets(paths: List[str], key_provider: KeyResolver) -> List[PacketResult]:
    results = []
    for path in paths:
        results.append(await parse_inform_packet(Path(path).read_bytes(), key_provider))
    return results


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Decode captured inform packets.")
    parser.add_argument("packets", nargs="+", help="Files holding one raw inform packet each.")
    parser.add_argument("--keys", type=str, default=None, help="Keys file with one JSON object per line.")
    parser.add_argument("--key", type=str, default=None, help="Hex key applied to every device.")
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation.")
    args = parser.parse_args(argv)

    key_store = KeyStore.load(args.keys, create=False) if args.keys else KeyStore()

    def key_provider(mac: str) -> Optional[str]:
        return key_store.get(mac) or args.key

    results = asyncio.run(dump_packets(args.packets, key_provider))
    failed = False
    for path, result in zip(args.packets, results):
        print(json.dumps({"file": path, **result.as_dict()}, indent=args.indent))
        failed = failed or result.error is not None
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
