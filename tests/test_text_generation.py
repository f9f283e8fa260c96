from __future__ import annotations

import json

import openai
import pytest

from goalplanner.core.config import settings
from goalplanner.services.text_generation import GenerationUnavailable, UnconfiguredTextGenerator
from goalplanner.services.text_generation import factory as generator_factory
from goalplanner.services.text_generation.openai_provider import OpenAITextGenerator


class DummyMessage:
    def __init__(self, content):
        self.content = content


class DummyChoice:
    def __init__(self, content):
        self.message = DummyMessage(content)


class DummyCompletion:
    def __init__(self, choices):
        self.choices = choices


def _dummy_client(create):
    class DummyClient:
        init_kwargs: dict = {}

        def __init__(self, *args, **kwargs):
            DummyClient.init_kwargs = kwargs

        class chat:  # type: ignore[valid-type]
            class completions:  # type: ignore[valid-type]
                pass

    DummyClient.chat.completions.create = staticmethod(create)
    return DummyClient


def _generator() -> OpenAITextGenerator:
    return OpenAITextGenerator(api_key="test-key", model="gpt-4o-mini", timeout=5)


def test_generate_returns_message_content(monkeypatch) -> None:
    calls = []
    reply = json.dumps({"adjustmentMessage": None, "roadmap": [{"day": 1, "task": "Tune"}]})

    def create(*args, **kwargs):
        calls.append(kwargs)
        return DummyCompletion([DummyChoice(reply)])

    client_cls = _dummy_client(create)
    monkeypatch.setattr("openai.OpenAI", client_cls)

    assert _generator().generate("Plan my guitar practice") == reply
    assert client_cls.init_kwargs["max_retries"] == 0
    assert calls[0]["model"] == "gpt-4o-mini"
    assert calls[0]["response_format"] == {"type": "json_object"}
    assert calls[0]["messages"][-1] == {"role": "user", "content": "Plan my guitar practice"}


def test_openai_errors_become_generation_unavailable(monkeypatch) -> None:
    def create(*args, **kwargs):
        raise openai.OpenAIError("quota exceeded")

    monkeypatch.setattr("openai.OpenAI", _dummy_client(create))

    with pytest.raises(GenerationUnavailable):
        _generator().generate("prompt")


def test_empty_choices_become_generation_unavailable(monkeypatch) -> None:
    monkeypatch.setattr("openai.OpenAI", _dummy_client(lambda *args, **kwargs: DummyCompletion([])))

    with pytest.raises(GenerationUnavailable):
        _generator().generate("prompt")


def test_null_content_is_returned_as_empty_text(monkeypatch) -> None:
    monkeypatch.setattr("openai.OpenAI", _dummy_client(lambda *args, **kwargs: DummyCompletion([DummyChoice(None)])))

    assert _generator().generate("prompt") == ""


def test_factory_without_api_key_returns_unconfigured(monkeypatch) -> None:
    generator_factory.get_text_generator.cache_clear()
    monkeypatch.setattr(settings, "openai_api_key", None)
    try:
        generator = generator_factory.get_text_generator()
        assert isinstance(generator, UnconfiguredTextGenerator)
        with pytest.raises(GenerationUnavailable):
            generator.generate("prompt")
    finally:
        generator_factory.get_text_generator.cache_clear()


def test_factory_with_api_key_builds_openai_generator(monkeypatch) -> None:
    generator_factory.get_text_generator.cache_clear()
    client_cls = _dummy_client(lambda *args, **kwargs: DummyCompletion([]))
    monkeypatch.setattr("openai.OpenAI", client_cls)
    monkeypatch.setattr(settings, "openai_api_key", "test-key")
    monkeypatch.setattr(settings, "generation_timeout_seconds", 12.0)
    try:
        assert isinstance(generator_factory.get_text_generator(), OpenAITextGenerator)
        assert client_cls.init_kwargs["timeout"] == 12.0
    finally:
        generator_factory.get_text_generator.cache_clear()
