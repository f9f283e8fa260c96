"""Tests for the one-time code store."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from itertools import count

from goalplanner.services.otp_store import EXPIRED_GRACE, OtpCheck, OtpStore, generate_code


def _store(start: datetime):
    clock = {"now": start}
    codes = count(100000)
    store = OtpStore(
        ttl=timedelta(minutes=10),
        clock=lambda: clock["now"],
        code_factory=lambda: str(next(codes)),
    )
    return store, clock


def test_generated_codes_are_six_digits() -> None:
    for _ in range(50):
        code = generate_code()
        assert len(code) == 6
        assert 100000 <= int(code) <= 999999


def test_verify_outcomes() -> None:
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    store, clock = _store(start)
    code = store.issue("a@example.com")

    assert store.verify("b@example.com", code) is OtpCheck.MISSING
    assert store.verify("a@example.com", "999999") is OtpCheck.MISMATCH
    assert store.verify("a@example.com", code) is OtpCheck.OK

    clock["now"] = start + timedelta(minutes=10, seconds=1)
    assert store.verify("a@example.com", code) is OtpCheck.EXPIRED
    assert store.verify("a@example.com", code) is OtpCheck.MISSING


def test_code_valid_through_last_instant_of_ttl() -> None:
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    store, clock = _store(start)
    code = store.issue("a@example.com")

    clock["now"] = start + timedelta(minutes=10)

    assert store.verify("a@example.com", code) is OtpCheck.OK


def test_reissue_overwrites_previous_code() -> None:
    store, _ = _store(datetime(2026, 1, 1, tzinfo=timezone.utc))
    first = store.issue("a@example.com")
    second = store.issue("a@example.com")

    assert first != second
    assert store.verify("a@example.com", first) is OtpCheck.MISMATCH
    assert store.verify("a@example.com", second) is OtpCheck.OK
    assert len(store) == 1


def test_cache_drops_entries_after_grace_period() -> None:
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    store, clock = _store(start)
    store.issue("old@example.com")
    clock["now"] = start + timedelta(minutes=6)
    store.issue("new@example.com")
    clock["now"] = start + EXPIRED_GRACE + timedelta(minutes=10, seconds=1)

    assert len(store) == 1
    assert store.peek("old@example.com") is None
    assert store.verify("old@example.com", "100000") is OtpCheck.MISSING
    assert store.verify("new@example.com", "100001") is OtpCheck.OK


def test_store_is_bounded() -> None:
    store = OtpStore(ttl=timedelta(minutes=10), maxsize=2)
    for email in ("a@example.com", "b@example.com", "c@example.com"):
        store.issue(email)

    assert len(store) == 2
    assert store.peek("a@example.com") is None
    assert store.peek("c@example.com") is not None


def test_discard_consumes_code() -> None:
    store, _ = _store(datetime(2026, 1, 1, tzinfo=timezone.utc))
    code = store.issue("a@example.com")

    store.discard("a@example.com")

    assert store.verify("a@example.com", code) is OtpCheck.MISSING
