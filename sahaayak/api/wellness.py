from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from sahaayak.api.dependencies import SessionRegistry, get_registry, get_session
from sahaayak.api.schemas import (
    ContactRequest, GoalRequest, IntentionCompletionRequest, IntentionRequest,
    JournalRequest, MoodRequest, MutationResponse, mutation
)
from sahaayak.core.catalog import VERIFIED_HELPLINES
from sahaayak.core.models import EmergencyContact
from sahaayak.core.session import AppSession

router = APIRouter(prefix="/api", tags=["wellness"])

# ===== STREAKS & BADGES =====

@router.get("/streaks")
async def get_streaks(session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    return {key: record.to_dict() for key, record in session.state.streaks.items()}

@router.get("/badges")
async def get_badges(session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    earned = session.state.badges
    return {
        'earned': [badge.to_dict() for badge in earned],
        'catalog': [d.to_dict() for d in session.streak_engine.registry.get_all_badges()],
        'new': [badge.to_dict() for badge in session.pop_new_badges()]
    }

# ===== MOOD & JOURNAL =====

@router.post("/mood", response_model=MutationResponse)
async def add_mood(body: MoodRequest, session: AppSession = Depends(get_session)):
    log = session.add_mood_log(
        body.mood, on_date=body.on_date, source=body.source,
        activities=body.activities, people=body.people, note=body.note
    )
    return mutation(log)

@router.get("/mood")
async def get_mood_logs(session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    return {'logs': [log.to_dict() for log in session.state.mood_logs]}

@router.post("/journal", response_model=MutationResponse)
async def add_journal_entry(body: JournalRequest, session: AppSession = Depends(get_session)):
    entry = session.add_journal_entry(body.content, body.mood, prompt=body.prompt, on_date=body.on_date)
    return mutation(entry)

@router.get("/journal")
async def get_journal(session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    return {'entries': [entry.to_dict() for entry in session.state.journal_entries]}

# ===== INTENTIONS =====

@router.get("/intentions")
async def get_intentions(session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    return {'intentions': session.intention_progress()}

@router.post("/intentions", response_model=MutationResponse)
async def add_intention(body: IntentionRequest, session: AppSession = Depends(get_session)):
    return mutation(session.add_intention(body.title, body.frequency, body.target))

@router.post("/intentions/{intention_id}/complete", response_model=MutationResponse)
async def complete_intention(
    intention_id: str,
    body: Optional[IntentionCompletionRequest] = None,
    session: AppSession = Depends(get_session)
):
    if session.is_authenticated and session.intention_tracker.get(session.user_id, intention_id) is None:
        raise HTTPException(status_code=404, detail="Intention not found")
    return mutation(session.complete_intention(intention_id, body.on_date if body else None))

@router.delete("/intentions/{intention_id}")
async def delete_intention(intention_id: str, session: AppSession = Depends(get_session)) -> Dict[str, bool]:
    return {'deleted': session.delete_intention(intention_id)}

# ===== INSIGHTS =====

@router.get("/insights/analysis")
async def get_analysis(session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    analysis = await session.get_analysis()
    return {'analysis': analysis.to_dict() if analysis else None}

@router.get("/insights/suggestion")
async def get_suggestion(session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    suggestion = await session.get_proactive_suggestion()
    return {'suggestion': suggestion.to_dict() if suggestion else None}

@router.get("/insights/journal-prompt")
async def get_journal_prompt(session: AppSession = Depends(get_session)) -> Dict[str, str]:
    return {'prompt': await session.get_daily_journal_prompt()}

@router.post("/insights/goals")
async def get_goal_suggestions(body: GoalRequest, session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    return {'suggestions': await session.get_goal_suggestions(body.goal)}

# ===== SAFETY NET =====

@router.get("/emergency/helplines")
async def get_helplines() -> Dict[str, Any]:
    return {'helplines': [h.to_dict() for h in VERIFIED_HELPLINES]}

@router.get("/emergency/contacts")
async def get_contacts(session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    return {'contacts': [c.to_dict() for c in session.state.emergency_contacts]}

@router.post("/emergency/contacts", response_model=MutationResponse)
async def add_contact(body: ContactRequest, session: AppSession = Depends(get_session)):
    return mutation(session.add_emergency_contact(body.name, body.phone, body.relationship))

@router.put("/emergency/contacts/{contact_id}")
async def update_contact(contact_id: str, body: ContactRequest,
                         session: AppSession = Depends(get_session)) -> Dict[str, bool]:
    contact = EmergencyContact(contact_id=contact_id, name=body.name, phone=body.phone, relationship=body.relationship)
    return {'updated': session.update_emergency_contact(contact)}

@router.delete("/emergency/contacts/{contact_id}")
async def delete_contact(contact_id: str, session: AppSession = Depends(get_session)) -> Dict[str, bool]:
    return {'deleted': session.delete_emergency_contact(contact_id)}

@router.post("/emergency/helpline", response_model=MutationResponse)
async def log_helpline_tap(session: AppSession = Depends(get_session)):
    return mutation(session.log_emergency_action())

# ===== DATA CONTROL =====

@router.get("/export")
async def export_data(session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    data = session.export_user_data()
    if data is None:
        raise HTTPException(status_code=401, detail="Sign in to export data")
    return data

@router.delete("/data")
async def clear_data(
    session: AppSession = Depends(get_session),
    registry: SessionRegistry = Depends(get_registry)
) -> Dict[str, Any]:
    user_id = session.user_id
    removed = session.clear_all_user_data()
    if user_id:
        registry.drop_session(user_id)
    return {'removed': removed}
