from typing import Mapping, Optional

import httpx

from unispi.relay_app.config import RelaySettings

# Headers that describe the hop to us rather than the request body.
_HOP_HEADERS = {"host", "content-length", "connection", "transfer-encoding", "keep-alive"}


def forwardable_headers(headers: Mapping[str, str]) -> dict:
    return {name: value for name, value in headers.items() if name.lower() not in _HOP_HEADERS}


class ControllerAdapter:
    def __init__(self, settings: RelaySettings, logger, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.logger = logger
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _client_instance(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.controller_url,
                timeout=self.settings.controller_timeout,
                verify=self.settings.controller_verify,
                transport=self._transport,
            )
        return self._client

    async def forward_inform(self, body: bytes, headers: Mapping[str, str], path: str = "/inform") -> httpx.Response:
        client = await self._client_instance()
        try:
            resp = await client.post(path, content=body, headers=forwardable_headers(headers))
        except httpx.HTTPError as exc:
            self.logger.warning(
                "controller_forward_failed",
                extra={"details": {"controller": self.settings.controller_url, "error": str(exc)}},
            )
            raise ConnectionError(f"forward to controller failed: {exc}") from exc
        self.logger.info(
            "controller_forward_ok",
            extra={"details": {"status": resp.status_code, "bytes": len(resp.content)}},
        )
        return resp

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
