from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from sahaayak.api.dependencies import get_session
from sahaayak.api.schemas import MutationResponse, TaskCompletionRequest, mutation
from sahaayak.core.catalog import WELLNESS_JOURNEYS, get_journey
from sahaayak.core.session import AppSession

router = APIRouter(prefix="/api/journeys", tags=["journeys"])

def _require_journey(journey_id: str) -> None:
    if get_journey(journey_id) is None:
        raise HTTPException(status_code=404, detail="Journey not found")

@router.get("")
async def list_journeys(session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    progress = session.state.journey_progress
    return {
        'journeys': [
            {
                'journey': journey.to_dict(),
                'progress': progress[journey.journey_id].to_dict() if journey.journey_id in progress else None
            }
            for journey in WELLNESS_JOURNEYS
        ]
    }

@router.get("/{journey_id}")
async def get_journey_details(journey_id: str, session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    _require_journey(journey_id)
    return session.journey_engine.describe(session.user_id, journey_id)

@router.post("/{journey_id}/start", response_model=MutationResponse)
async def start_journey(journey_id: str, session: AppSession = Depends(get_session)):
    _require_journey(journey_id)
    return mutation(session.start_journey(journey_id))

@router.post("/{journey_id}/tasks", response_model=MutationResponse)
async def complete_task(journey_id: str, body: TaskCompletionRequest, session: AppSession = Depends(get_session)):
    _require_journey(journey_id)
    return mutation(session.complete_journey_task(journey_id, body.day, body.task_id))

@router.post("/{journey_id}/advance", response_model=MutationResponse)
async def advance_day(journey_id: str, session: AppSession = Depends(get_session)):
    _require_journey(journey_id)
    return mutation(session.advance_journey_day(journey_id))
