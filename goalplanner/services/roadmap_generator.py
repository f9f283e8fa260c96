"""LLM-backed roadmap generation.

Builds the planning prompt for a goal, sends it to the configured text
generator once, and turns the raw reply into a bounded, validated roadmap.
Nothing here touches the database: callers persist the result only after
``generate_roadmap`` returns.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from time import perf_counter
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, field_validator

from goalplanner.core.config import settings
from goalplanner.core.errors import GenerationFailure
from goalplanner.observability.metrics import log_metric
from goalplanner.observability.tracing import annotate, trace
from goalplanner.services.text_generation import GenerationUnavailable, TextGenerator

logger = logging.getLogger(__name__)

MAX_PLAN_DAYS = 365
_FENCE_RE = re.compile(r"```(?:json|JSON)?")
_PREVIEW_CHARS = 300


class GeneratedEntry(BaseModel):
    day: StrictInt
    task: StrictStr


class GeneratedPlan(BaseModel):
    """Shape the model is asked to return."""

    model_config = ConfigDict(extra="ignore")

    adjustment_message: Optional[StrictStr] = Field(default=None, alias="adjustmentMessage")
    roadmap: Optional[List[GeneratedEntry]] = None

    @field_validator("adjustment_message")
    @classmethod
    def blank_message_is_null(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        # Models sometimes quote the null placeholder from the prompt template.
        if cleaned.lower() in {"null", "none"}:
            return None
        return cleaned or None


@dataclass
class ParsedPlan:
    adjustment_message: Optional[str]
    entries: List[GeneratedEntry] = field(default_factory=list)


@dataclass
class MalformedOutput:
    raw_text: str
    reason: str


ParseResult = Union[ParsedPlan, MalformedOutput]


@dataclass
class GeneratedRoadmap:
    adjustment_message: Optional[str]
    entries: List[Dict[str, Any]]


def build_roadmap_prompt(
    *,
    title: str,
    description: str,
    deadline: date,
    hours_per_day: float,
    today: date,
    max_days: int = MAX_PLAN_DAYS,
) -> str:
    start_day = today + timedelta(days=1)
    days_available = max((deadline - today).days, 0)
    description_text = description.strip() or "No further description provided."

    return (
        f"Today's date is {today.isoformat()} ({today.strftime('%A')}).\n"
        f'Goal: "{title.strip()}".\n'
        f'Description: "{description_text}".\n'
        f"Daily capacity: {hours_per_day:g} hours per day.\n"
        f"Requested deadline: {deadline.isoformat()}, which leaves {days_available} day(s) "
        "counted from today.\n\n"
        "### PLANNING RULES\n"
        f"1. The plan starts tomorrow, {start_day.isoformat()}. Day 1 is that date and days are numbered consecutively.\n"
        f"2. Judge whether the goal can realistically be completed in {days_available} day(s) "
        f"at {hours_per_day:g} hours per day.\n"
        "3. If it cannot, extend the timeline to a realistic number of days instead of overloading any single day.\n"
        f"4. The plan must never exceed {max_days} days. If a realistic plan would be longer, condense it to "
        f"exactly {max_days} days that cover only the core essentials.\n"
        "5. If the number of days in your plan differs from the requested deadline, explain the change to the "
        'user in one or two friendly sentences in "adjustmentMessage". Otherwise set "adjustmentMessage" to null.\n'
        "6. Each day gets one concrete, actionable task that fits the daily capacity.\n\n"
        "### OUTPUT\n"
        "Return ONLY a JSON object in exactly this format (no markdown, no code fences, no commentary):\n"
        "{\n"
        '  "adjustmentMessage": "Explanation or null",\n'
        '  "roadmap": [\n'
        '    { "day": 1, "task": "Task description" }\n'
        "  ]\n"
        "}"
    )


def parse_generation_output(raw_text: str) -> ParseResult:
    """Parse model text into a plan, tagging anything unusable as malformed."""
    if not isinstance(raw_text, str) or not raw_text.strip():
        return MalformedOutput(raw_text=raw_text or "", reason="empty response")

    candidate = _strip_fences(raw_text)
    document = _load_json_object(candidate)
    if document is None:
        return MalformedOutput(raw_text=raw_text, reason="response is not a JSON object")

    try:
        plan = GeneratedPlan.model_validate(document)
    except ValidationError as exc:
        return MalformedOutput(raw_text=raw_text, reason=f"unexpected shape: {exc.error_count()} validation error(s)")

    return ParsedPlan(adjustment_message=plan.adjustment_message, entries=list(plan.roadmap or []))


def generate_roadmap(
    generator: TextGenerator,
    *,
    title: str,
    description: str,
    deadline: date,
    hours_per_day: float,
    today: Optional[date] = None,
    request_id: Optional[str] = None,
) -> GeneratedRoadmap:
    """Produce a validated roadmap or raise ``GenerationFailure``. Single attempt, no retries."""
    today = today or date.today()
    max_days = min(settings.max_plan_days, MAX_PLAN_DAYS)
    prompt = build_roadmap_prompt(
        title=title,
        description=description,
        deadline=deadline,
        hours_per_day=hours_per_day,
        today=today,
        max_days=max_days,
    )
    metadata = {
        "provider": getattr(generator, "name", type(generator).__name__),
        "requested_days": max((deadline - today).days, 0),
        "hours_per_day": hours_per_day,
        "prompt_length": len(prompt),
    }
    logger.info("Generating roadmap (requested_days=%s, provider=%s)", metadata["requested_days"], metadata["provider"])

    start = perf_counter()
    success = False
    entry_count = 0
    try:
        with trace("roadmap.generate", metadata=metadata, request_id=request_id) as span:
            try:
                raw_text = generator.generate(prompt)
            except GenerationUnavailable as exc:
                logger.error("Roadmap generation unavailable: %s", exc)
                raise GenerationFailure("AI generation failed") from exc
            except Exception as exc:
                logger.exception("Text generator raised unexpectedly")
                raise GenerationFailure("AI generation failed") from exc

            parsed = parse_generation_output(raw_text)
            if isinstance(parsed, MalformedOutput):
                logger.warning(
                    "Discarding malformed roadmap response (%s): %r",
                    parsed.reason,
                    parsed.raw_text[:_PREVIEW_CHARS],
                )
                raise GenerationFailure("AI generation failed", details={"reason": parsed.reason})

            entries = parsed.entries
            if len(entries) > max_days:
                logger.warning("Model returned %s days; keeping the first %s", len(entries), max_days)
                entries = entries[:max_days]

            entry_count = len(entries)
            success = True
            annotate(span, entries=entry_count, adjusted=parsed.adjustment_message is not None)
    finally:
        latency_ms = (perf_counter() - start) * 1000
        log_metric("roadmap.generate.success", 1 if success else 0, metadata={"provider": metadata["provider"]})
        log_metric("roadmap.generate.latency_ms", latency_ms, metadata={"provider": metadata["provider"]})

    log_metric("roadmap.generate.entries", entry_count)
    log_metric("roadmap.generate.adjusted", 1 if parsed.adjustment_message else 0)
    logger.info("Generated roadmap with %s entries (adjusted=%s)", entry_count, parsed.adjustment_message is not None)

    return GeneratedRoadmap(
        adjustment_message=parsed.adjustment_message,
        entries=[{"day": entry.day, "task": entry.task} for entry in entries],
    )


def _strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def _load_json_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        document = json.loads(text)
    except json.JSONDecodeError:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            return None
        try:
            document = json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            return None
    return document if isinstance(document, dict) else None
