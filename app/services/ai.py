import logging

import requests

from app.core.config import settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an AI assistant that helps developers create detailed prompts for an AI coding assistant.
Your job is to take a feature title and optional notes from a kanban card and transform it into a clear, detailed prompt that can be given to a coding assistant to implement that feature.

The prompt should:
- Be specific and actionable
- Include technical details when relevant
- Break down complex features into clear steps
- Include any relevant context from the notes
- Be written in a clear, professional tone

Keep the prompt concise but comprehensive, typically 2-5 sentences."""


class PromptGenerationError(Exception):
    pass


class PromptNotConfigured(PromptGenerationError):
    pass


def build_user_prompt(title: str, notes: str = "") -> str:
    context = f"\n\nAdditional Context: {notes}" if notes else ""
    return f"Feature Title: {title}{context}\n\nGenerate a prompt I can give to a coding assistant to implement this feature."


def generate_prompt(title: str, notes: str = "") -> str:
    if not settings.OPENAI_API_KEY:
        raise PromptNotConfigured("OPENAI_API_KEY is not set")

    try:
        r = requests.post(
            f"{settings.OPENAI_BASE_URL.rstrip('/')}/chat/completions",
            json={
                "model": settings.OPENAI_MODEL,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(title, notes)},
                ],
                "temperature": 0.7,
                "max_tokens": 500,
            },
            headers={"Authorization": f"Bearer {settings.OPENAI_API_KEY}"},
            timeout=settings.OPENAI_TIMEOUT_SECONDS,
        )
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.error("prompt generation request failed: %s", e)
        raise PromptGenerationError("upstream request failed") from e

    choices = data.get("choices") or []
    content = ((choices[0].get("message") or {}).get("content") if choices else None) or ""
    if not content.strip():
        raise PromptGenerationError("empty completion")
    return content.strip()
