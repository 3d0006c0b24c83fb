from functools import lru_cache

from pydantic import Field
from pydantic_settings import SettingsConfigDict, BaseSettings


class RelaySettings(BaseSettings):
    server_ip: str = Field("0.0.0.0", validation_alias="SERVER_IP")
    server_port: int = Field(8080, validation_alias="SERVER_PORT")

    controller_url: str = Field("http://192.168.2.11:8080", validation_alias="CONTROLLER_URL")
    controller_timeout: float = Field(10.0, validation_alias="CONTROLLER_TIMEOUT")
    controller_verify: bool = Field(False, validation_alias="CONTROLLER_VERIFY")

    keys_file: str = Field("keys.txt", validation_alias="KEYS_FILE")
    create_keys_file: bool = Field(True, validation_alias="CREATE_KEYS_FILE")

    store_max_size: int = Field(500, validation_alias="STORE_MAX_SIZE")
    log_ring_size: int = Field(200, validation_alias="LOG_RING_SIZE")

    enable_decoding: bool = Field(True, validation_alias="ENABLE_DECODING")
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", populate_by_name=True, extra="ignore")


@lru_cache
def get_settings() -> RelaySettings:
    return RelaySettings()
