import uuid as uuid_mod

from fastapi import APIRouter, HTTPException
from sqlalchemy import select

from app.database import async_session, execute_with_retry
from app.models.comment import Comment
from app.models.task import Task
from app.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from app.services.realtime import broadcaster
from app.utils.response import success_response
from app.utils.timeparse import utc_now_iso

router = APIRouter(prefix="/comments", tags=["comments"])


def _dump(comment: Comment) -> dict:
    return CommentResponse.model_validate(comment).model_dump()


@router.get("")
async def list_comments(task_id: str | None = None):
    query = select(Comment)
    if task_id:
        query = query.where(Comment.task_id == task_id)
    query = query.order_by(Comment.created_at.desc())

    async with async_session() as session:
        result = await execute_with_retry(session, query)
        data = [_dump(c) for c in result.scalars().all()]
    return success_response(data=data)


@router.post("", status_code=201)
async def create_comment(payload: CommentCreate):
    async with async_session() as session:
        if not await session.get(Task, payload.task_id):
            raise HTTPException(status_code=404, detail="Task not found")

        comment = Comment(
            id=str(uuid_mod.uuid4()),
            task_id=payload.task_id,
            text=payload.text,
            author=payload.author,
            created_at=utc_now_iso(),
        )
        session.add(comment)
        await session.commit()
        await session.refresh(comment)
        data = _dump(comment)

    await broadcaster.publish("comments", "INSERT", [data["id"]])
    return success_response(data=data)


@router.patch("/{comment_id}")
async def update_comment(comment_id: str, payload: CommentUpdate):
    async with async_session() as session:
        comment = await session.get(Comment, comment_id)
        if not comment:
            raise HTTPException(status_code=404, detail="Comment not found")
        comment.text = payload.text
        await session.commit()
        await session.refresh(comment)
        data = _dump(comment)

    await broadcaster.publish("comments", "UPDATE", [comment_id])
    return success_response(data=data)


@router.delete("/{comment_id}")
async def delete_comment(comment_id: str):
    async with async_session() as session:
        comment = await session.get(Comment, comment_id)
        if not comment:
            raise HTTPException(status_code=404, detail="Comment not found")
        await session.delete(comment)
        await session.commit()

    await broadcaster.publish("comments", "DELETE", [comment_id])
    return success_response(data={"id": comment_id}, message="Comment deleted")
