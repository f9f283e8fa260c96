"""OpenAI chat-completions provider."""
from __future__ import annotations

import logging

import openai

from goalplanner.services.text_generation.base import GenerationUnavailable, TextGenerator

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a pragmatic planning assistant. You turn personal goals into realistic "
    "day-by-day roadmaps and you always answer with a single JSON object."
)


class OpenAITextGenerator(TextGenerator):
    name = "openai"

    def __init__(self, *, api_key: str, model: str, timeout: float) -> None:
        self._client = openai.OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self._model = model

    def generate(self, prompt: str) -> str:
        try:
            completion = self._client.chat.completions.create(
                model=self._model,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
        except openai.OpenAIError as exc:
            logger.error("OpenAI request failed (model=%s): %s", self._model, exc)
            raise GenerationUnavailable(str(exc)) from exc

        if not completion.choices:
            raise GenerationUnavailable("OpenAI returned no choices")
        return completion.choices[0].message.content or ""
