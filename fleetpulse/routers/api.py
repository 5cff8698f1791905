import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from ..config import Settings
from ..deps import get_settings, get_store
from ..errors import MalformedInput, NotFound
from ..schemas import HistoryEntryOut, NodeStatusIn, NodeStatusOut
from ..services.store import StatusStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


async def read_limited(request: Request, limit: int) -> bytes:
    # corta la lectura al pasar el límite, haya o no Content-Length
    chunks, total = [], 0
    async for chunk in request.stream():
        total += len(chunk)
        if total > limit:
            raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                                detail="Request body too large")
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/status")
async def api_status(request: Request,
                     store: StatusStore = Depends(get_store),
                     settings: Settings = Depends(get_settings)):
    body = await read_limited(request, settings.MAX_BODY_BYTES)
    try:
        payload = NodeStatusIn.model_validate_json(body)
    except ValidationError as ex:
        logger.warning("Reporte rechazado (formato): %s", ex.errors(include_url=False)[:1])
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON format")

    try:
        await run_in_threadpool(store.ingest, payload.to_report())
    except MalformedInput as ex:
        logger.warning("Reporte rechazado de %r: %s", payload.node_ip, ex)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid data")
    return {"ok": True}


@router.get("/nodes", response_model=Dict[str, NodeStatusOut])
def api_nodes(store: StatusStore = Depends(get_store)):
    return store.get_snapshot()


@router.get("/history", response_model=List[HistoryEntryOut])
def api_history(node: Optional[str] = None,
                start: Optional[str] = None,
                end: Optional[str] = None,
                store: StatusStore = Depends(get_store)):
    if not node:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="node parameter is required")
    try:
        return store.get_history(node, start, end)
    except NotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="node not found")
