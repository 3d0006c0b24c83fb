from typing import Optional

from unispi.parsing.inform import KeyResolver, PacketResult, parse_inform_packet
from unispi.relay_app.store import TransactionStore


def _failure_details(which: str, result: PacketResult) -> dict:
    return {
        "packet": which,
        "mac": result.head.mac if result.head is not None else None,
        "stage": result.error.stage.value if result.error is not None else None,
        "error": str(result.error),
        "error_type": type(result.error).__name__,
    }


async def decode_transaction_job(
    ip: Optional[str],
    req_body: bytes,
    res_body: bytes,
    key_provider: KeyResolver,
    store: TransactionStore,
    logger,
) -> None:
    req = await parse_inform_packet(req_body, key_provider)
    if req.error is not None:
        logger.warning("inform_decode_failed", extra={"details": _failure_details("request", req)})
        return

    res = await parse_inform_packet(res_body, key_provider)
    if res.error is not None:
        logger.warning("inform_decode_failed", extra={"details": _failure_details("response", res)})
        return

    for warning in req.warnings + res.warnings:
        logger.warning("inform_decode_warning", extra={"details": {"mac": req.head.mac, "warning": warning}})

    await store.insert(ip, req, res)
    logger.info(
        "inform_decoded",
        extra={"details": {"ip": ip, "mac": req.head.mac, "key_used": req.key_used}},
    )
