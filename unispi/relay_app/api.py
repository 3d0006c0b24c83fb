from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from fastapi import BackgroundTasks, FastAPI, Query, Request, Response
from fastapi.responses import PlainTextResponse

from unispi.keys import KeyStore
from unispi.relay_app.config import RelaySettings, get_settings
from unispi.relay_app.controller_adapter import ControllerAdapter
from unispi.relay_app.jobs import decode_transaction_job
from unispi.relay_app.logging import create_logger, ring_buffer
from unispi.relay_app.models import LogsResponse, TransactionsResponse
from unispi.relay_app.store import TransactionStore


def create_app(
    settings: Optional[RelaySettings] = None,
    key_store: Optional[KeyStore] = None,
    controller_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the inform relay.

    Requests to ``/inform`` are forwarded to the controller untouched; the
    request and response bodies are then decoded in the background and kept
    in the transaction store. Decoding never changes what the device receives.
    """
    settings = settings or get_settings()
    logger = create_logger("unispi.relay", settings.log_ring_size)
    if key_store is None:
        key_store = KeyStore.load(settings.keys_file, create=settings.create_keys_file)
    store = TransactionStore(max_entries=settings.store_max_size)
    adapter = ControllerAdapter(settings, logger, transport=controller_transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "relay_started",
            extra={"details": {"controller": settings.controller_url, "keys": len(key_store)}},
        )
        try:
            yield
        finally:
            await adapter.close()

    app = FastAPI(title="unispi inform relay", lifespan=lifespan)
    app.state.settings = settings
    app.state.key_store = key_store
    app.state.store = store
    app.state.adapter = adapter
    app.state.logger = logger

    @app.post("/inform")
    async def inform(request: Request, background: BackgroundTasks) -> Response:
        ip = request.client.host if request.client else None
        body = await request.body()
        logger.info(
            "inform_received",
            extra={"details": {"ip": ip, "bytes": len(body), "path": request.url.path}},
        )
        try:
            upstream = await adapter.forward_inform(body, request.headers)
        except ConnectionError as exc:
            return PlainTextResponse(str(exc), status_code=502)

        if settings.enable_decoding:
            background.add_task(
                decode_transaction_job, ip, body, upstream.content, key_store, store, logger
            )
        return Response(
            content=upstream.content,
            status_code=upstream.status_code,
            headers={
                name: value
                for name, value in upstream.headers.items()
                if name.lower() not in {"content-length", "content-encoding", "transfer-encoding", "connection"}
            },
        )

    @app.get("/transactions", response_model=TransactionsResponse)
    async def transactions(
        limit: Optional[int] = Query(50, ge=0),
        mac: Optional[str] = None,
    ) -> TransactionsResponse:
        items = await store.recent(limit=limit, mac=mac)
        return TransactionsResponse(transactions=items, total=store.total)

    @app.get("/logs", response_model=LogsResponse)
    async def logs() -> LogsResponse:
        handler = ring_buffer(logger)
        return LogsResponse(events=handler.get_events() if handler else [])

    @app.get("/health", response_class=PlainTextResponse)
    async def health() -> str:
        return "ok"

    return app
