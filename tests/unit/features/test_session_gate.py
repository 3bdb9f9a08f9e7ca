from __future__ import annotations

import base64
from datetime import UTC, datetime, timedelta

import pytest

from ast_portal.common.errors import AuthError, InvalidRequestError
from ast_portal.common.time import to_epoch_ms
from ast_portal.features.auth.service import SessionGate, encode_secret


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now


def _token(raw: str) -> str:
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


@pytest.fixture()
def clock() -> _Clock:
    return _Clock()


@pytest.fixture()
def gate(clock: _Clock) -> SessionGate:
    return SessionGate(secret="hunter2", clock=clock)


def test_authenticate_issues_token_with_time_and_secret(gate: SessionGate, clock: _Clock) -> None:
    token = gate.authenticate("hunter2")

    decoded = base64.b64decode(token).decode("utf-8")
    assert decoded == f"{to_epoch_ms(clock.now)}:hunter2"
    assert gate.verify(token) is True


def test_authenticate_rejects_wrong_and_empty_passwords(gate: SessionGate) -> None:
    with pytest.raises(AuthError, match="Invalid password"):
        gate.authenticate("hunter3")
    with pytest.raises(InvalidRequestError, match="Password is required"):
        gate.authenticate("")
    with pytest.raises(InvalidRequestError):
        gate.authenticate(None)


def test_token_expires_after_max_age(gate: SessionGate, clock: _Clock) -> None:
    token = gate.issue_token()

    clock.now += timedelta(hours=24)
    assert gate.verify(token) is True

    clock.now += timedelta(milliseconds=1)
    assert gate.verify(token) is False


def test_token_for_previous_secret_is_rejected(clock: _Clock) -> None:
    token = SessionGate(secret="old-secret", clock=clock).issue_token()

    assert SessionGate(secret="new-secret", clock=clock).verify(token) is False


@pytest.mark.parametrize(
    "token",
    [
        None,
        "",
        "not base64 at all!",
        _token("1700000000000"),
        _token(":hunter2"),
        _token("1700000000000:"),
        _token("yesterday:hunter2"),
        _token("-5:hunter2"),
        base64.b64encode(b"\xff\xfe:hunter2").decode("ascii"),
    ],
)
def test_malformed_tokens_are_invalid_not_errors(gate: SessionGate, token: str | None) -> None:
    assert gate.verify(token) is False


def test_secret_containing_colon_round_trips(clock: _Clock) -> None:
    gate = SessionGate(secret="pa:ss:word", clock=clock)

    assert gate.verify(gate.authenticate("pa:ss:word")) is True


def test_password_comparison_uses_reversible_encoding() -> None:
    assert encode_secret("hunter2") == base64.b64encode(b"hunter2").decode("ascii")
    assert SessionGate(secret="hunter2").check_password("hunter2") is True
    assert SessionGate(secret="hunter2").check_password("Hunter2") is False


def test_empty_secret_is_refused() -> None:
    with pytest.raises(ValueError):
        SessionGate(secret="")
