"""Text-generation provider interface."""
from __future__ import annotations


class GenerationUnavailable(Exception):
    """The provider could not produce text (transport, quota, or auth error)."""


class TextGenerator:
    """Turns a prompt into raw model text."""

    name = "base"

    def generate(self, prompt: str) -> str:
        raise NotImplementedError


class UnconfiguredTextGenerator(TextGenerator):
    """Stand-in used when no provider credentials are configured."""

    name = "unconfigured"

    def generate(self, prompt: str) -> str:
        raise GenerationUnavailable("No text-generation provider is configured (OPENAI_API_KEY missing)")
