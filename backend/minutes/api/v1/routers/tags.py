# minutes/api/v1/routers/tags.py
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from tortoise.exceptions import IntegrityError
from tortoise.functions import Count
from tortoise.transactions import in_transaction

from minutes.api.v1.deps import get_current_user, get_owned_tag
from minutes.models import Tag
from minutes.models.user import User
from minutes.schemas.organization import TagIn, TagUpdate, tag_out

router = APIRouter(prefix="/tags", tags=["tags"])

DUPLICATE = "A tag with this name already exists"

@router.get("", response_model=dict)
async def list_tags(user: User = Depends(get_current_user)):
    rows = await Tag.filter(user_id=user.id).annotate(meeting_count=Count("meetings")).order_by("name")
    return {"success": True, "data": [tag_out(t, t.meeting_count) for t in rows]}

@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_tag(body: TagIn, user: User = Depends(get_current_user)):
    if await Tag.filter(user_id=user.id, name=body.name).exists():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE)
    try:
        tag = await Tag.create(user=user, name=body.name, color=body.color)
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE)
    return {"success": True, "data": tag_out(tag, 0)}

@router.patch("/{tag_id}", response_model=dict)
async def update_tag(tag_id: UUID, body: TagUpdate, user: User = Depends(get_current_user)):
    tag = await get_owned_tag(tag_id, user)
    if body.name is not None and body.name != tag.name:
        if await Tag.filter(user_id=user.id, name=body.name).exclude(id=tag.id).exists():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE)
        tag.name = body.name
    if body.color is not None:
        tag.color = body.color
    try:
        await tag.save()
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE)
    return {"success": True, "data": tag_out(tag)}

@router.delete("/{tag_id}", response_model=dict)
async def delete_tag(tag_id: UUID, user: User = Depends(get_current_user)):
    """Delete the tag; tagged meetings only lose the association."""
    tag = await get_owned_tag(tag_id, user)
    async with in_transaction() as conn:
        await tag.meetings.clear(using_db=conn)
        await tag.delete(using_db=conn)
    return {"success": True}
