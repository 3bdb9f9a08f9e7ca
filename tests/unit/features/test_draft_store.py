from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from ast_portal.features.drafts.schemas import RunDraft
from ast_portal.features.drafts.store import DraftStore
from ast_portal.features.spreadsheets.schemas import SpreadsheetSummary


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now


def _draft(run_id: str = "r-1") -> RunDraft:
    return RunDraft(
        id=run_id,
        run_name="Q3",
        file_name="q3.xlsx",
        file_size=4,
        file_type="application/vnd.ms-excel",
        file_as_base64="AAAA",
        summary=SpreadsheetSummary(
            lots_headers=["Lot"], patents_headers=[], lots_count=1, patents_count=0
        ),
        created_at=datetime(2026, 3, 1, tzinfo=UTC),
    )


@pytest.fixture()
def clock() -> _Clock:
    return _Clock()


@pytest.fixture()
def store(clock: _Clock) -> DraftStore:
    return DraftStore(ttl=timedelta(minutes=30), clock=clock)


def test_peek_leaves_draft_and_take_removes_it(store: DraftStore) -> None:
    key, entry = store.put(_draft())

    assert store.peek(key) == entry
    assert store.peek(key) == entry
    assert store.take(key) == entry
    assert store.take(key) is None
    assert store.peek(key) is None


def test_drafts_expire_after_ttl(store: DraftStore, clock: _Clock) -> None:
    key, entry = store.put(_draft())
    assert entry.expires_at == clock.now + timedelta(minutes=30)

    clock.now += timedelta(minutes=29, seconds=59)
    assert store.peek(key) is not None

    clock.now += timedelta(seconds=1)
    assert store.take(key) is None
    assert len(store) == 0


def test_keys_are_independent(store: DraftStore) -> None:
    first, _ = store.put(_draft("r-1"))
    second, _ = store.put(_draft("r-2"))

    assert first != second
    assert store.discard(first) is True
    assert store.discard(first) is False
    entry = store.peek(second)
    assert entry is not None and entry.draft.id == "r-2"


def test_missing_key_returns_nothing(store: DraftStore) -> None:
    assert store.peek(None) is None
    assert store.take("") is None
    assert store.discard(None) is False


def test_ttl_must_be_positive() -> None:
    with pytest.raises(ValueError):
        DraftStore(ttl=timedelta(0))
