import argparse
import sys

import uvicorn

from unispi.relay_app import create_app, RelaySettings


class InformRelay:
    def __init__(self, settings: RelaySettings) -> None:
        self.settings = settings
        self.app = create_app(settings=self.settings)

    def start(self) -> None:
        uvicorn.run(self.app, host=self.settings.server_ip, port=self.settings.server_port, log_level="info")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Relay inform traffic to a controller and decode it on the side.")
    parser.add_argument("--ip", type=str, default="0.0.0.0", help="IP address to bind the relay to.")
    parser.add_argument("--port", type=int, default=8080, help="Port to listen on for device informs.")
    parser.add_argument("--controller", type=str, default=None, help="Base URL of the real controller.")
    parser.add_argument("--keys", type=str, default=None, help="Path to the keys file.")
    args = parser.parse_args(argv)

    overrides = {"server_ip": args.ip, "server_port": args.port}
    if args.controller:
        overrides["controller_url"] = args.controller
    if args.keys:
        overrides["keys_file"] = args.keys
    relay = InformRelay(RelaySettings(**overrides))
    relay.start()
    return 0


if __name__ == "__main__":
    sys.exit(main())
