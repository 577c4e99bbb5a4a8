from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from sahaayak.api.dependencies import get_session
from sahaayak.api.schemas import CommentRequest, MutationResponse, PostRequest, mutation
from sahaayak.core.catalog import COMMUNITY_CIRCLES
from sahaayak.core.session import AppSession

router = APIRouter(prefix="/api/community", tags=["community"])

@router.get("/circles")
async def list_circles() -> Dict[str, Any]:
    return {'circles': [circle.to_dict() for circle in COMMUNITY_CIRCLES]}

@router.get("/posts")
async def list_posts(circle_id: Optional[str] = None, session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    return {'posts': [post.to_dict() for post in session.get_posts(circle_id)]}

@router.get("/posts/{post_id}/comments")
async def list_comments(post_id: str, session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    return {'comments': [comment.to_dict() for comment in session.get_comments(post_id)]}

@router.post("/posts")
async def add_post(body: PostRequest, session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    """Moderated write; rejections come back with success=False and the reason"""
    result = await session.add_post(body.circle_id, body.title, body.content)
    return result.to_dict()

@router.post("/comments")
async def add_comment(body: CommentRequest, session: AppSession = Depends(get_session)) -> Dict[str, Any]:
    result = await session.add_comment(body.post_id, body.content)
    return result.to_dict()

@router.post("/posts/{post_id}/like", response_model=MutationResponse)
async def toggle_post_like(post_id: str, session: AppSession = Depends(get_session)):
    if session.is_authenticated and not any(p.post_id == post_id for p in session.get_posts()):
        raise HTTPException(status_code=404, detail="Post not found")
    return mutation(session.toggle_post_like(post_id))

@router.post("/comments/{comment_id}/like", response_model=MutationResponse)
async def toggle_comment_like(comment_id: str, session: AppSession = Depends(get_session)):
    return mutation(session.toggle_comment_like(comment_id))
