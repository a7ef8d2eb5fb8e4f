"""API routes for chat sessions and price quotes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException

from ella.booking.base import FinalizedBooking
from ella.core.errors import SessionNotFound
from ella.dialogue.catalog import ADD_ONS, SERVICES
from ella.dialogue.classifier import classify
from ella.dialogue.types import Draft, Step
from ella.memory.transcript import TranscriptWriteError
from ella.pricing import compute_total, tip_for_percent
from ella.session import ChatSession, SessionRegistry


def create_chat_router(registry: SessionRegistry) -> APIRouter:
    router = APIRouter(tags=["chat"])
    completed: dict[str, FinalizedBooking] = {}

    def _session_or_404(session_id: str) -> ChatSession:
        session = registry.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    @router.post("/sessions", status_code=201)
    async def create_session() -> dict:
        session_id = registry.new_session_id()

        def remember(booking: FinalizedBooking) -> None:
            completed[session_id] = booking

        session = registry.create(session_id=session_id, on_booking_complete=remember)
        return {
            "session_id": session_id,
            "step": session.current_step.value,
            "messages": [message.to_dict() for message in session.transcript.messages],
        }

    @router.get("/sessions")
    async def list_sessions() -> list[dict]:
        return [session.to_dict() for session in registry]

    @router.get("/sessions/{session_id}/state")
    async def session_state(session_id: str) -> dict:
        return _session_or_404(session_id).to_dict()

    @router.get("/sessions/{session_id}/transcript")
    async def session_transcript(session_id: str, since: int = 0) -> dict:
        session = _session_or_404(session_id)
        return {
            "session_id": session_id,
            "messages": [m.to_dict() for m in session.transcript.messages if m.id > since],
        }

    @router.post("/sessions/{session_id}/messages")
    async def post_message(session_id: str, payload: dict) -> dict:
        session = _session_or_404(session_id)
        content = payload.get("content")
        if not isinstance(content, str) or not content.strip():
            raise HTTPException(status_code=400, detail="content is required")

        try:
            reply = await session.submit_user_input(content)
        except TranscriptWriteError:
            raise HTTPException(
                status_code=503, detail="transcript unavailable, please resend your message"
            )
        await session.drain()

        booking = completed.pop(session_id, None)
        return {
            "session_id": session_id,
            "step": session.current_step.value,
            "reply": reply.to_dict(),
            "draft": session.draft.to_dict(),
            "completed_booking": booking.to_dict() if booking else None,
        }

    @router.delete("/sessions/{session_id}", status_code=204)
    async def delete_session(session_id: str) -> None:
        session = registry.remove(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        completed.pop(session_id, None)
        await session.close()

    @router.post("/quote")
    async def quote(payload: dict) -> dict[str, Any]:
        service = SERVICES.get(classify(Step.SERVICE, str(payload.get("service") or "")))
        if service is None:
            raise HTTPException(status_code=400, detail="service must be standard, deep or move")

        add_ons = []
        for keyword in payload.get("add_ons") or []:
            add_on = ADD_ONS.get(classify(Step.ADDONS, str(keyword)))
            if add_on is None:
                raise HTTPException(status_code=400, detail=f"unknown add-on: {keyword}")
            if add_on not in add_ons:
                add_ons.append(add_on)

        frequency = payload.get("frequency")
        if frequency is not None and not isinstance(frequency, str):
            raise HTTPException(status_code=400, detail="frequency must be a string")

        tip_percent = payload.get("tip_percent") or 0
        if not isinstance(tip_percent, (int, float)) or tip_percent < 0:
            raise HTTPException(status_code=400, detail="tip_percent must be a non-negative number")

        draft = Draft(
            service_type=service.name,
            service_price=service.price,
            add_ons=tuple(add_ons),
            frequency=frequency,
            tip_amount=tip_for_percent(service.price, tip_percent),
        )
        return {"service": service.name, **compute_total(draft).to_dict()}

    return router
