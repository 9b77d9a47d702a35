"""
Skill catalog endpoints
"""
from fastapi import APIRouter, Depends
from typing import List

from mentorhub.core.dependencies import get_skill_service
from mentorhub.schemas.skill import SkillResponse
from mentorhub.services.skill_service import SkillService

router = APIRouter()


@router.get("/", response_model=List[SkillResponse])
async def list_skills(
    skill_service: SkillService = Depends(get_skill_service)
):
    """Active skills grouped by category"""
    return skill_service.list_skills()
