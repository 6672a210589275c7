"""
Chat endpoint.

Wire format: POST /chat with {"sessionId": ..., "message": ...} returns
{"response": ...}. All conversation logic lives in the workflow engine;
this module only validates the request and maps failures to HTTP codes.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from clinic_booking.conversation.workflow import WorkflowEngine
from clinic_booking.schemas.chat_schema import ChatRequest, ChatResponse, HealthResponse
from clinic_booking.tools.mock_provider import MockSchedulingProvider

logger = logging.getLogger(__name__)

router = APIRouter()


def get_engine(request: Request) -> WorkflowEngine:
    return request.app.state.engine


@router.get("/health", response_model=HealthResponse)
def health(engine: WorkflowEngine = Depends(get_engine)):
    mode = "MOCK" if isinstance(engine.provider, MockSchedulingProvider) else "LIVE"
    return HealthResponse(status="ok", mode=mode, sessions=len(engine.store))


@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, engine: WorkflowEngine = Depends(get_engine)):
    if not request.session_id or not request.message:
        raise HTTPException(status_code=400, detail="Missing sessionId or message")

    logger.debug("Received message for session %s", request.session_id)
    try:
        reply = await engine.process_message(request.session_id, request.message)
    except Exception:
        logger.exception("Error processing message for session %s", request.session_id)
        raise HTTPException(status_code=500, detail="Internal server error") from None

    return ChatResponse(response=reply)
