# Purpose: embeddings backfill and the runtime resume-analysis switch.
import dataclasses
import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from stuntpitch.api.deps import get_current_user
from stuntpitch.db.session import get_async_session
from stuntpitch.services.casting.pipeline import PipelineConfig
from stuntpitch.services.casting.resume_analyzer import PAID_TIERS, ResumeAnalysisConfig
from stuntpitch.services.profiles.embeddings import generate_missing_embeddings

logger = logging.getLogger("api.admin")

router = APIRouter(prefix="/api", tags=["admin"])


class ResumeConfigAction(BaseModel):
    action: Literal["testing", "pro_only", "disable"]


def _describe(config: ResumeAnalysisConfig) -> dict:
    return {
        "enableForAllUsers": config.enable_for_all_users,
        "eligibleTiers": list(config.eligible_tiers),
        "maxProfiles": config.max_profiles,
        "enabled": config.enabled,
    }


def apply_resume_action(config: ResumeAnalysisConfig, action: str) -> ResumeAnalysisConfig:
    defaults = ResumeAnalysisConfig.from_settings()
    max_profiles = config.max_profiles or defaults.max_profiles or 2
    if action == "testing":
        return dataclasses.replace(config, enable_for_all_users=True, max_profiles=max_profiles)
    if action == "pro_only":
        return dataclasses.replace(
            config, enable_for_all_users=False, eligible_tiers=PAID_TIERS, max_profiles=max_profiles,
        )
    return dataclasses.replace(config, max_profiles=0)


@router.get("/admin/resume-config")
async def get_resume_config(request: Request, user_id: str = Depends(get_current_user)):
    return _describe(request.app.state.pipeline_config.resume)


@router.post("/admin/resume-config")
async def set_resume_config(
    payload: ResumeConfigAction,
    request: Request,
    user_id: str = Depends(get_current_user),
):
    current: PipelineConfig = request.app.state.pipeline_config
    resume = apply_resume_action(current.resume, payload.action)
    request.app.state.pipeline_config = dataclasses.replace(current, resume=resume)
    logger.info("Resume analysis config set to '%s' by %s", payload.action, user_id)
    return {"status": "success", "action": payload.action, "config": _describe(resume)}


@router.post("/embeddings/generate")
async def generate_embeddings(
    request: Request,
    limit: int = Query(100, ge=1, le=1000),
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    return await generate_missing_embeddings(db, request.app.state.embedder, limit=limit)
