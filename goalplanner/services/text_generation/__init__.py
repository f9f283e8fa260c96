"""Pluggable text-generation providers."""
from goalplanner.services.text_generation.base import (
    GenerationUnavailable,
    TextGenerator,
    UnconfiguredTextGenerator,
)
from goalplanner.services.text_generation.factory import get_text_generator

__all__ = [
    "GenerationUnavailable",
    "TextGenerator",
    "UnconfiguredTextGenerator",
    "get_text_generator",
]
