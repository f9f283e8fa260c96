"""Text-generation provider factory."""
from __future__ import annotations

from functools import lru_cache

from goalplanner.core.config import settings
from goalplanner.services.text_generation.base import TextGenerator, UnconfiguredTextGenerator
from goalplanner.services.text_generation.openai_provider import OpenAITextGenerator


@lru_cache
def get_text_generator() -> TextGenerator:
    if not settings.openai_api_key:
        return UnconfiguredTextGenerator()
    return OpenAITextGenerator(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        timeout=settings.generation_timeout_seconds,
    )
