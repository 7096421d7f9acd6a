import logging
import secrets
import uuid as uuid_mod
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, HTTPException
from sqlalchemy import select

from app.config import settings
from app.database import async_session, execute_with_retry
from app.models.share_link import ShareLink
from app.schemas.share_link import ShareLinkCreate, ShareLinkResponse
from app.services.realtime import broadcaster
from app.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/share-links", tags=["share-links"])
# mounted without the API key dependency
public_router = APIRouter(prefix="/shared", tags=["share-links"])


def _dump(link: ShareLink) -> dict:
    return ShareLinkResponse.model_validate(link).model_dump()


def is_expired(link: ShareLink, now: datetime | None = None) -> bool:
    if not link.expires_at:
        return False
    now = now or datetime.now(timezone.utc)
    return datetime.fromisoformat(link.expires_at) <= now


@router.get("")
async def list_share_links():
    async with async_session() as session:
        result = await execute_with_retry(session, select(ShareLink).order_by(ShareLink.created_at.desc()))
        data = [_dump(link) for link in result.scalars().all()]
    return success_response(data=data)


@router.post("", status_code=201)
async def create_share_link(payload: ShareLinkCreate):
    hours = settings.share_link_default_hours if payload.expires_in_hours is None else payload.expires_in_hours
    now = datetime.now(timezone.utc)

    link = ShareLink(
        id=str(uuid_mod.uuid4()),
        name=payload.name,
        page_url=payload.page_url,
        token=secrets.token_urlsafe(24),
        expires_at=(now + timedelta(hours=hours)).isoformat() if hours else None,
        is_active=1,
        access_count=0,
        created_at=now.isoformat(),
    )
    async with async_session() as session:
        session.add(link)
        await session.commit()
        await session.refresh(link)
        data = _dump(link)

    logger.info("Created share link %s for %s", data["id"], payload.page_url)
    await broadcaster.publish("share_links", "INSERT", [data["id"]])
    return success_response(data=data)


@router.post("/{link_id}/toggle")
async def toggle_share_link(link_id: str):
    async with async_session() as session:
        link = await session.get(ShareLink, link_id)
        if not link:
            raise HTTPException(status_code=404, detail="Share link not found")
        link.is_active = 0 if link.is_active else 1
        await session.commit()
        await session.refresh(link)
        data = _dump(link)

    await broadcaster.publish("share_links", "UPDATE", [link_id])
    return success_response(data=data)


@router.delete("/{link_id}")
async def delete_share_link(link_id: str):
    async with async_session() as session:
        link = await session.get(ShareLink, link_id)
        if not link:
            raise HTTPException(status_code=404, detail="Share link not found")
        await session.delete(link)
        await session.commit()

    await broadcaster.publish("share_links", "DELETE", [link_id])
    return success_response(data={"id": link_id}, message="Share link deleted")


@public_router.get("/{token}")
async def resolve_share_link(token: str):
    async with async_session() as session:
        result = await session.execute(select(ShareLink).where(ShareLink.token == token))
        link = result.scalars().first()
        if not link or not link.is_active:
            raise HTTPException(status_code=404, detail="Share link not found")
        if is_expired(link):
            raise HTTPException(status_code=410, detail="Share link has expired")

        link.access_count += 1
        await session.commit()
        data = {"name": link.name, "page_url": link.page_url, "expires_at": link.expires_at,
                "access_count": link.access_count}
    return success_response(data=data)
