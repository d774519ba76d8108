"""Snapshot SSE stream.

Clients subscribe to one or more collections and receive the full
current result set of each subscribed collection right away and then
again after every successful write to it.

    route handler --> commit --> publish_changes() --> broadcaster
                                                   --> SSE endpoint per client

Shutdown:
    Call signal_shutdown() during app shutdown to close all SSE
    connections promptly; open streams otherwise block uvicorn's
    graceful shutdown (and therefore --reload).
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_db
from src.dal import load_collection
from src.planner.subscriptions import COLLECTIONS, get_broadcaster, reset_broadcaster

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Stream"])


def signal_shutdown() -> None:
    """Close every open snapshot stream."""
    reset_broadcaster()


async def publish_changes(session: AsyncSession, *collections: str) -> None:
    """Push fresh result sets of the changed collections to subscribers.

    Call after the write has been committed. Collections nobody listens
    to are not reloaded.
    """
    broadcaster = get_broadcaster()
    for collection in dict.fromkeys(collections):
        if not broadcaster.wants(collection):
            continue
        broadcaster.publish(collection, await load_collection(session, collection))


def _parse_collections(raw: str) -> list[str]:
    names = [name.strip() for name in raw.split(",") if name.strip()]
    unknown = [name for name in names if name not in COLLECTIONS]
    if unknown or not names:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown collection(s): {', '.join(unknown) or '(none)'}. "
            f"Valid: {', '.join(COLLECTIONS)}",
        )
    return names


@router.get("/stream")
async def snapshot_stream(
    collections: str = Query(..., description="Comma-separated collection names"),
    session: AsyncSession = Depends(get_db),
) -> StreamingResponse:
    """SSE endpoint delivering full collection snapshots.

    Each event is ``{"collection": name, "items": [...]}``.
    """
    names = _parse_collections(collections)
    initial = {name: await load_collection(session, name) for name in names}
    logger.debug("Snapshot subscriber for %s", names)
    return StreamingResponse(
        get_broadcaster().stream(names, initial),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
