"""Stream API Routes - Broadcast session control over HTTP.

Provides REST endpoints for the session manager:
- Initialize / list / inspect streams
- Start, pause, resume, stop
- Pre-live settings updates
- Avatar expression, gesture and voice commands
- Subtitles, voice and AI chat
- Participants

Domain errors propagate to the StudioError handler installed by the app.
"""

from typing import Any, Literal

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from studio.api.auth import verify_api_key
from studio.orchestrator.models import ParticipantRole, SubtitleOptions
from studio.orchestrator.session import SessionManager
from studio.orchestrator.state_machine import SessionState

router = APIRouter(
    prefix="/streams",
    tags=["streams"],
    dependencies=[Depends(verify_api_key)],
)


def get_session_manager(request: Request) -> SessionManager:
    """Session manager installed on the app at startup."""
    return request.app.state.session_manager


# Request models
class CreateStreamRequest(BaseModel):
    """Request to initialize a new broadcast."""

    avatar_id: str = Field(..., description="Avatar to host the broadcast")
    title: str = Field("", description="Broadcast title")
    description: str = Field("", description="Broadcast description")
    visibility: str = Field("public", description="public, private or unlisted")
    voice_profile: dict[str, Any] | None = Field(None, description="Voice profile")
    features: dict[str, bool] | None = Field(None, description="Feature flags")


class ExpressionRequest(BaseModel):
    expression_id: str


class GestureRequest(BaseModel):
    gesture_id: str


class TextRequest(BaseModel):
    """Free text for voice commands, speech or chat."""

    text: str = Field(..., min_length=1)


class SubtitlesRequest(BaseModel):
    """Enable or disable subtitles."""

    enabled: bool = True
    language: str = "en-US"
    provider: Literal["browser", "whisper", "azure"] = "browser"
    real_time: bool = True
    confidence: float = Field(0.8, ge=0.0, le=1.0)


class ParticipantRequest(BaseModel):
    name: str = Field(..., min_length=1)
    role: Literal["host", "moderator", "viewer"] = "viewer"


# Endpoints
@router.post("", status_code=status.HTTP_201_CREATED)
async def create_stream(
    request: CreateStreamRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    """Initialize a broadcast session. Nothing is published yet."""
    session = await manager.initialize_stream(request.model_dump(exclude_none=True))
    return session.to_dict()


@router.get("")
async def list_streams(
    state: str | None = None,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    """List sessions, optionally filtered by state."""
    try:
        filter_state = SessionState(state) if state else None
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown state: {state}")
    sessions = manager.list_sessions(filter_state)
    return {
        "sessions": [s.to_dict() for s in sessions],
        "active": manager.active_count,
    }


@router.get("/{session_id}")
async def get_stream(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    return manager.get_session(session_id).to_dict()


@router.patch("/{session_id}")
async def update_stream(
    session_id: str,
    payload: dict[str, Any] = Body(...),
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    """Update title, description, visibility or voice profile before going live."""
    config = await manager.update_stream_settings(session_id, payload)
    return config.to_dict()


@router.post("/{session_id}/start")
async def start_stream(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    status_ = await manager.start_stream(session_id)
    return status_.to_dict()


@router.post("/{session_id}/pause")
async def pause_stream(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    status_ = await manager.pause_stream(session_id)
    return status_.to_dict()


@router.post("/{session_id}/resume")
async def resume_stream(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    status_ = await manager.resume_stream(session_id)
    return status_.to_dict()


@router.post("/{session_id}/stop")
async def stop_stream(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    status_ = await manager.stop_stream(session_id)
    return status_.to_dict()


@router.post("/{session_id}/expression", status_code=status.HTTP_202_ACCEPTED)
async def update_expression(
    session_id: str,
    request: ExpressionRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, str]:
    await manager.update_avatar_expression(session_id, request.expression_id)
    return {"expression": request.expression_id}


@router.post("/{session_id}/gesture", status_code=status.HTTP_202_ACCEPTED)
async def trigger_gesture(
    session_id: str,
    request: GestureRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, str]:
    animation = await manager.trigger_avatar_gesture(session_id, request.gesture_id)
    return {"gesture": request.gesture_id, "animation": animation}


@router.post("/{session_id}/commands")
async def voice_command(
    session_id: str,
    request: TextRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    """Interpret a voice command. Always 200; see `success` in the body."""
    result = await manager.process_voice_command(session_id, request.text)
    return result.to_dict()


@router.post("/{session_id}/speak", status_code=status.HTTP_202_ACCEPTED)
async def speak(
    session_id: str,
    request: TextRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, str]:
    await manager.speak(session_id, request.text)
    return {"status": "queued"}


@router.post("/{session_id}/chat")
async def chat(
    session_id: str,
    request: TextRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, str]:
    response = await manager.generate_ai_response(session_id, request.text)
    return {"session_id": session_id, "response": response}


@router.post("/{session_id}/subtitles")
async def set_subtitles(
    session_id: str,
    request: SubtitlesRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    if request.enabled:
        options = SubtitleOptions(
            language=request.language,
            provider=request.provider,
            real_time=request.real_time,
            confidence=request.confidence,
        )
        await manager.enable_subtitles(session_id, options)
    else:
        await manager.disable_subtitles(session_id)
    return {"subtitles": request.enabled}


@router.get("/{session_id}/subtitles")
async def get_subtitles(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    lines = manager.get_subtitles(session_id)
    return {
        "lines": [
            {
                "id": line.id,
                "text": line.text,
                "timestamp": line.timestamp,
                "confidence": line.confidence,
                "is_interim": line.is_interim,
            }
            for line in lines
        ]
    }


@router.post("/{session_id}/participants", status_code=status.HTTP_201_CREATED)
async def add_participant(
    session_id: str,
    request: ParticipantRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    participant = await manager.add_participant(
        session_id, request.name, ParticipantRole(request.role)
    )
    return participant.to_dict()


@router.delete("/{session_id}/participants/{participant_id}")
async def remove_participant(
    session_id: str,
    participant_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, bool]:
    removed = await manager.remove_participant(session_id, participant_id)
    return {"removed": removed}
