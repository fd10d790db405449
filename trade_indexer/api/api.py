import json
import logging
from typing import Optional
from fastapi import APIRouter, Query, Request, WebSocket, WebSocketDisconnect
from pydantic import BaseModel
from trade_indexer.config.settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from trade_indexer.sources.decoder.decode_transaction_input import decode_transaction_input

log = logging.getLogger(__name__)

router = APIRouter()


class DecodeRequest(BaseModel):
    data: str


@router.get("/")
def read_root():
    return {"message": "Pool trade indexer"}


@router.get("/status")
def status(request: Request):
    runtime = request.app.state.runtime
    scanner = runtime.scanner
    return {
        "mode": "index" if scanner is not None else "serve",
        "lastCheckedBlock": scanner.checkpoint if scanner else None,
        "persistedBlock": scanner.persisted_checkpoint if scanner else None,
        "pendingRecords": scanner.pending_count if scanner else 0,
        "pools": len(runtime.registry),
        "subscribers": len(runtime.hub),
        "rpcCalls": runtime.rpc.call_count if runtime.rpc else 0,
    }


@router.get("/trades")
async def trades(
    request: Request,
    token: Optional[str] = None,
    pool: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
):
    service = request.app.state.runtime.service
    return await service.historical(token=token, pool=pool, page=page, limit=limit)


@router.get("/metrics")
async def metrics(request: Request):
    return await request.app.state.runtime.service.metrics()


@router.post("/decode")
def decode(body: DecodeRequest):
    return decode_transaction_input(body.data).to_dict()


async def receive_frame(websocket: WebSocket) -> str:
    """Next text or binary frame as text; binary is read as UTF-8."""
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000))
    if message.get("text") is not None:
        return message["text"]
    return (message.get("bytes") or b"").decode("utf-8", errors="replace")


@router.websocket("/ws")
async def live_feed(websocket: WebSocket):
    """Historical queries in, historical answers and live updates out."""
    runtime = websocket.app.state.runtime
    await websocket.accept()
    runtime.hub.connect(websocket)
    try:
        while True:
            message = await receive_frame(websocket)
            try:
                response = await runtime.service.handle_message(message)
            except Exception:
                log.exception("❌ Failed to answer socket message")
                continue
            if response is not None:
                await websocket.send_text(json.dumps(response))
    except WebSocketDisconnect:
        pass
    finally:
        runtime.hub.disconnect(websocket)
