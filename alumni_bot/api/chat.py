# Role: Thin HTTP adapter for the chat endpoint. Validates request/response shapes and delegates the entire
# conversation turn to FlowController (business logic lives in core, not in the API layer).

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from alumni_bot.api.deps import flow_controller
from alumni_bot.models.intent import Intent, IntentResult

router = APIRouter(tags=["chat"])


class ChatRequest(BaseModel):
    phone: str = Field(min_length=1)
    message: str
    # Optional: channels that classify upstream (e.g. a webhook) can pass the intent through.
    intent: Optional[str] = None
    query: Optional[str] = None


class ChatResponse(BaseModel):
    phone: str
    reply: str
    waiting_for: Optional[str] = None


@router.post("/chat", response_model=ChatResponse)
async def chat(req: ChatRequest) -> ChatResponse:
    # 1) Parse a caller-supplied intent (if any)
    # 2) Forward (phone, message) to the orchestrator
    # 3) Return the reply in a stable schema for UI/clients
    intent: Optional[IntentResult] = None
    if req.intent:
        try:
            intent = IntentResult(Intent(req.intent.strip().lower()), query=req.query)
        except ValueError:
            raise HTTPException(status_code=422, detail=f"Unknown intent: {req.intent}")

    result = await flow_controller.handle_turn(req.phone, req.message, intent)
    return ChatResponse(phone=result.phone, reply=result.reply, waiting_for=result.waiting_for)
