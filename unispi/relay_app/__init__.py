from unispi.relay_app.api import create_app
from unispi.relay_app.config import RelaySettings, get_settings

__all__ = ["create_app", "RelaySettings", "get_settings"]
