from fastapi import APIRouter, Request, status

from app.dependencies import ai_dependency
from app.limits import AI_LIMIT, limiter
from app.schemas.ai import AnnouncementText, EnhancementResult, ValidationResult

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post(
    "/enhance-announcement",
    status_code=status.HTTP_200_OK,
    response_model=EnhancementResult,
)
@limiter.limit(AI_LIMIT)
def enhance_announcement(request: Request, body: AnnouncementText, ai: ai_dependency):
    return ai.enhance(body.title, body.content)


@router.post(
    "/validate-announcement",
    status_code=status.HTTP_200_OK,
    response_model=ValidationResult,
)
@limiter.limit(AI_LIMIT)
def validate_announcement(request: Request, body: AnnouncementText, ai: ai_dependency):
    return ai.validate(body.title, body.content)
