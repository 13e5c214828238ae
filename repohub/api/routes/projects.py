from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from repohub.api.dependencies.database import get_db_session
from repohub.api.schemas.project import ProjectResponse
from repohub.models import Project

router = APIRouter(prefix="/api/projects")


@router.get("/top", response_model=list[ProjectResponse])
async def get_top_projects(
    limit: Annotated[int, Query(ge=1, le=100)] = 5,
    db: AsyncSession = Depends(get_db_session),
) -> list[Project]:
    """Newest public, non-archived projects with their group's name"""
    result = await db.scalars(
        select(Project)
        .where(Project.is_archived.is_(False), Project.is_private.is_(False))
        .order_by(Project.created_at.desc())
        .limit(limit)
    )
    return result.all()
