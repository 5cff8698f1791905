from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse

from ..deps import get_store
from ..services import metrics
from ..services.store import StatusStore, utcnow

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/metrics", response_class=PlainTextResponse)
async def metrics_endpoint(store: StatusStore = Depends(get_store)):
    snapshot = await run_in_threadpool(store.get_snapshot)
    sizes = await run_in_threadpool(store.history_sizes)
    return metrics.render_metrics(snapshot, sizes, utcnow())
