import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from faqflow.errors import PersistenceError
from faqflow.persistence.snapshot import from_snapshot, wrap
from faqflow.session import EditorSession

from backend.app.api.schemas import FaqsPayload, SaveResponse
from backend.app.dependencies import get_gateway, get_session

router = APIRouter()


def _failure(exc: PersistenceError, status_code: int = 500) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": exc.message,
            "error": exc.detail or str(exc),
        },
    )


@router.post("/faqs", response_model=SaveResponse)
async def update_faqs(
    payload: Optional[FaqsPayload] = Body(None),
    gateway=Depends(get_gateway),
    session: EditorSession = Depends(get_session),
):
    """
    Persist a full snapshot and make it the live forest. Only POST
    writes; any other method on this path is answered with 405 by the
    router.

    Saves queued by earlier edits are drained first, so none of them
    lands on top of the posted snapshot.
    """
    logger = logging.getLogger("faqflow.persistence")

    if payload is None or payload.faqs is None:
        logger.error("no FAQs received in the body")
        return JSONResponse(
            status_code=400,
            content={"message": "No FAQs received in the body"},
        )

    try:
        from_snapshot(payload.faqs)
    except PersistenceError as exc:
        logger.error("rejected malformed snapshot: %s", exc)
        return _failure(exc, status_code=400)

    session.dispatcher.drain()
    try:
        result = gateway.save(payload.faqs)
    except PersistenceError as exc:
        logger.error("snapshot write failed: %s", exc)
        return _failure(exc)

    report = session.adopt(payload.faqs)
    logger.info("adopted posted snapshot (%s cards)", report.nodes)

    return SaveResponse(
        success=True,
        message=result.get("message", "FAQs updated successfully"),
    )


@router.get("/faqs")
def read_faqs(gateway=Depends(get_gateway)):
    try:
        return wrap(gateway.load())
    except PersistenceError as exc:
        return _failure(exc)
