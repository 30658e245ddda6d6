# minutes/api/v1/routers/projects.py
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from tortoise.exceptions import IntegrityError
from tortoise.functions import Count
from tortoise.transactions import in_transaction

from minutes.api.v1.deps import get_current_user, get_owned_project
from minutes.models import Meeting, Project
from minutes.models.user import User
from minutes.schemas.organization import ProjectIn, ProjectUpdate, project_out

router = APIRouter(prefix="/projects", tags=["projects"])

DUPLICATE = "A project with this name already exists"

async def _name_taken(user: User, name: str, exclude: UUID | None = None) -> bool:
    qs = Project.filter(user_id=user.id, name=name)
    if exclude:
        qs = qs.exclude(id=exclude)
    return await qs.exists()

@router.get("", response_model=dict)
async def list_projects(user: User = Depends(get_current_user)):
    """The user's projects by name, each with its meeting count."""
    rows = await (
        Project.filter(user_id=user.id)
        .annotate(meeting_count=Count("meetings"))
        .order_by("name")
    )
    return {"success": True, "data": [project_out(p, p.meeting_count) for p in rows]}

@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_project(body: ProjectIn, user: User = Depends(get_current_user)):
    if await _name_taken(user, body.name):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE)
    try:
        project = await Project.create(user=user, name=body.name, color=body.color, icon=body.icon or None)
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE)
    return {"success": True, "data": project_out(project, 0)}

@router.get("/{project_id}", response_model=dict)
async def get_project(project_id: UUID, user: User = Depends(get_current_user)):
    project = await get_owned_project(project_id, user)
    count = await Meeting.filter(project_id=project.id).count()
    return {"success": True, "data": project_out(project, count)}

@router.patch("/{project_id}", response_model=dict)
async def update_project(project_id: UUID, body: ProjectUpdate, user: User = Depends(get_current_user)):
    project = await get_owned_project(project_id, user)
    if body.name is not None and body.name != project.name:
        if await _name_taken(user, body.name, exclude=project.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE)
        project.name = body.name
    if body.color is not None:
        project.color = body.color
    if "icon" in body.model_fields_set:
        project.icon = body.icon or None
    try:
        await project.save()
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE)
    return {"success": True, "data": project_out(project)}

@router.delete("/{project_id}", response_model=dict)
async def delete_project(project_id: UUID, user: User = Depends(get_current_user)):
    """Delete the project; its meetings are kept and just lose the project."""
    project = await get_owned_project(project_id, user)
    async with in_transaction() as conn:
        await Meeting.filter(project_id=project.id).using_db(conn).update(project_id=None)
        await project.delete(using_db=conn)
    return {"success": True}
