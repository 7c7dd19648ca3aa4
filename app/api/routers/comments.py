# app/api/routers/comments.py
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.api.deps import http_error
from app.data.database import get_db
from app.domain.errors import MarketplaceError
from app.domain.schemas import CommentOut, CommentUpdate
from app.services.comment_service import CommentService

router = APIRouter(prefix="/comments", tags=["comments"])


@router.patch("/{comment_id}", response_model=CommentOut)
def update_comment(
    comment_id: int,
    payload: CommentUpdate,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    try:
        return CommentService(db).update(comment_id, user_id, payload.text)
    except MarketplaceError as e:
        raise http_error(e)


@router.delete("/{comment_id}", status_code=204)
def delete_comment(
    comment_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    try:
        CommentService(db).delete(comment_id, user_id)
    except MarketplaceError as e:
        raise http_error(e)
    return Response(status_code=204)
