from fastapi import APIRouter, Depends, HTTPException

from app.core.auth import get_current_user
from app.core.ratelimit import RateLimiter, get_rate_limiter
from app.core.security import check_length
from app.models.user import User
from app.schemas.tag import GeneratePromptIn, GeneratePromptOut
from app.services import ai

router = APIRouter(prefix="/api", tags=["ai"])


@router.post("/generate-prompt", response_model=GeneratePromptOut)
def generate_prompt(
    body: GeneratePromptIn,
    me: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    # 유저 단위 제한 (API 비용)
    limiter.hit("openai", me.id)

    check_length(body.title, "card_title", "Title")
    check_length(body.notes, "card_notes", "Notes")
    if not body.title:
        raise HTTPException(status_code=400, detail="Title is required")

    try:
        prompt = ai.generate_prompt(body.title, body.notes or "")
    except ai.PromptNotConfigured:
        raise HTTPException(status_code=503, detail="AI prompt generation is not configured")
    except ai.PromptGenerationError:
        raise HTTPException(status_code=502, detail="Failed to generate prompt")
    return GeneratePromptOut(prompt=prompt)
