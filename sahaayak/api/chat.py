from typing import Any, Dict

from fastapi import APIRouter, Depends

from sahaayak.api.dependencies import SessionRegistry, get_registry, get_session
from sahaayak.api.schemas import ChatRequest, DraftRequest, ModerationRequest, SettingsRequest
from sahaayak.core.session import AppSession

router = APIRouter(prefix="/api", tags=["chat"])

@router.post("/chat")
async def post_message(body: ChatRequest, session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    """One conversation turn; crisis turns carry is_crisis and no reply text for display"""
    result = await session.submit_message(body.message)
    return result.to_dict()

@router.post("/chat/screen")
async def screen_draft(body: DraftRequest, session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    screening = await session.screen_draft(body.text)
    return screening.to_dict()

@router.get("/chat/history")
async def get_history(session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    messages = session.state.chat_messages
    return {'messages': [m.to_dict() for m in messages], 'total': len(messages)}

@router.post("/moderate")
async def moderate(body: ModerationRequest, registry: SessionRegistry = Depends(get_registry)) -> Dict[str, Any]:
    verdict = await registry.moderator.moderate(body.text)
    return verdict.to_dict()

@router.get("/settings")
async def get_settings(session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    return session.settings.to_dict()

@router.put("/settings")
async def update_settings(body: SettingsRequest, session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    if body.selected_persona is not None:
        session.set_persona(body.selected_persona)
    if body.dynamic_persona_enabled is not None:
        session.set_dynamic_persona_enabled(body.dynamic_persona_enabled)
    return session.settings.to_dict()
