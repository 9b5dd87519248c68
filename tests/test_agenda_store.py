"""Tests for AgendaStore — CRUD, renames, listing and counting."""

from __future__ import annotations

import pytest

from src.models.enums import AgendaStatus
from src.schemas.records import AgendaFilter
from src.storage import DuplicateKey, NotFound, ValidationError, create_stores


# ── Helpers ──────────────────────────────────────────────────────────


async def _make_agenda(agendas, agenda_id="a1", **overrides):
    fields = {
        "title": "Standup",
        "agenda_status": "SCHEDULED",
        "initiate_at": 1000,
        "terminate_at": 2000,
    }
    fields.update(overrides)
    return await agendas.create(agenda_id, **fields)


# ── create ───────────────────────────────────────────────────────────


class TestCreate:
    """Test AgendaStore.create."""

    @pytest.mark.asyncio()
    async def test_returns_stored_record(self, agendas):
        record = await _make_agenda(agendas)

        assert record.id == "a1"
        assert record.title == "Standup"
        assert record.agenda_status == "SCHEDULED"
        assert record.initiate_at == 1000
        assert record.terminate_at == 2000
        assert await agendas.get("a1") == record

    @pytest.mark.asyncio()
    async def test_enum_status_stored_as_text(self, agendas):
        record = await _make_agenda(agendas, agenda_status=AgendaStatus.ONGOING)
        assert record.agenda_status == "ongoing"

    @pytest.mark.asyncio()
    async def test_duplicate_id(self, agendas):
        await _make_agenda(agendas)

        with pytest.raises(DuplicateKey) as exc_info:
            await _make_agenda(agendas, title="Other")

        assert exc_info.value.record_id == "a1"
        assert (await agendas.get("a1")).title == "Standup"

    @pytest.mark.asyncio()
    async def test_title_at_limit_accepted(self, agendas):
        record = await _make_agenda(agendas, title="x" * 250)
        assert len(record.title) == 250

    @pytest.mark.asyncio()
    async def test_title_over_limit_rejected(self, agendas):
        with pytest.raises(ValidationError, match="title"):
            await _make_agenda(agendas, title="x" * 251)
        assert await agendas.count() == 0

    @pytest.mark.asyncio()
    async def test_empty_title_rejected(self, agendas):
        with pytest.raises(ValidationError):
            await _make_agenda(agendas, title="")

    @pytest.mark.asyncio()
    async def test_missing_field_rejected(self, agendas):
        with pytest.raises(ValidationError, match="agenda_status"):
            await _make_agenda(agendas, agenda_status=None)

    @pytest.mark.asyncio()
    async def test_empty_id_rejected(self, agendas):
        with pytest.raises(ValidationError):
            await _make_agenda(agendas, agenda_id="")

    @pytest.mark.asyncio()
    @pytest.mark.parametrize("field", ["initiate_at", "terminate_at"])
    @pytest.mark.parametrize("value", ["1000", True, 1000.0])
    async def test_timestamps_must_be_integers(self, agendas, field, value):
        with pytest.raises(ValidationError, match=field):
            await _make_agenda(agendas, **{field: value})

        assert await agendas.count() == 0

    @pytest.mark.asyncio()
    async def test_inverted_window_allowed_by_default(self, agendas):
        record = await _make_agenda(agendas, initiate_at=5000, terminate_at=0)
        assert record.terminate_at < record.initiate_at

    @pytest.mark.asyncio()
    async def test_inverted_window_rejected_when_enforced(self, session_factory):
        agendas, _ = create_stores(session_factory, enforce_time_window=True)

        with pytest.raises(ValidationError, match="precedes"):
            await _make_agenda(agendas, initiate_at=5000, terminate_at=0)


# ── get ──────────────────────────────────────────────────────────────


class TestGet:
    """Test AgendaStore.get."""

    @pytest.mark.asyncio()
    async def test_missing(self, agendas):
        with pytest.raises(NotFound) as exc_info:
            await agendas.get("nope")
        assert exc_info.value.entity == "agenda"

    @pytest.mark.asyncio()
    async def test_repeated_reads_identical(self, agendas):
        await _make_agenda(agendas)

        first = await agendas.get("a1")
        second = await agendas.get("a1")

        assert first == second


# ── update ───────────────────────────────────────────────────────────


class TestUpdate:
    """Test AgendaStore.update."""

    @pytest.mark.asyncio()
    async def test_partial_update(self, agendas):
        await _make_agenda(agendas)

        record = await agendas.update("a1", title="Retro", agenda_status=AgendaStatus.TERMINATED)

        assert record.title == "Retro"
        assert record.agenda_status == "terminated"
        assert record.initiate_at == 1000
        assert await agendas.get("a1") == record

    @pytest.mark.asyncio()
    async def test_empty_update_returns_record(self, agendas):
        created = await _make_agenda(agendas)
        assert await agendas.update("a1") == created

    @pytest.mark.asyncio()
    async def test_missing(self, agendas):
        with pytest.raises(NotFound):
            await agendas.update("nope", title="Retro")

    @pytest.mark.asyncio()
    async def test_unknown_field(self, agendas):
        await _make_agenda(agendas)
        with pytest.raises(ValidationError, match="colour"):
            await agendas.update("a1", colour="red")

    @pytest.mark.asyncio()
    async def test_null_value_rejected(self, agendas):
        await _make_agenda(agendas)
        with pytest.raises(ValidationError, match="null"):
            await agendas.update("a1", title=None)

    @pytest.mark.asyncio()
    async def test_boolean_timestamp_rejected(self, agendas):
        await _make_agenda(agendas)

        with pytest.raises(ValidationError, match="terminate_at"):
            await agendas.update("a1", terminate_at=False)

        assert (await agendas.get("a1")).terminate_at == 2000

    @pytest.mark.asyncio()
    async def test_title_over_limit(self, agendas):
        await _make_agenda(agendas)
        with pytest.raises(ValidationError):
            await agendas.update("a1", title="x" * 251)
        assert (await agendas.get("a1")).title == "Standup"

    @pytest.mark.asyncio()
    async def test_window_checked_against_stored_values(self, session_factory):
        agendas, _ = create_stores(session_factory, enforce_time_window=True)
        await _make_agenda(agendas)

        with pytest.raises(ValidationError):
            await agendas.update("a1", terminate_at=500)
        assert (await agendas.get("a1")).terminate_at == 2000

    @pytest.mark.asyncio()
    async def test_rename(self, agendas):
        await _make_agenda(agendas, "a2")

        record = await agendas.update("a2", id="a2-renamed")

        assert record.id == "a2-renamed"
        assert record.title == "Standup"
        with pytest.raises(NotFound):
            await agendas.get("a2")
        assert await agendas.get("a2-renamed") == record

    @pytest.mark.asyncio()
    async def test_rename_with_field_changes(self, agendas):
        await _make_agenda(agendas)

        record = await agendas.update("a1", id="b1", title="Planning", terminate_at=9000)

        assert record.id == "b1"
        assert record.title == "Planning"
        assert record.terminate_at == 9000

    @pytest.mark.asyncio()
    async def test_rename_to_same_id_is_plain_update(self, agendas):
        await _make_agenda(agendas)
        record = await agendas.update("a1", id="a1", title="Retro")
        assert record.id == "a1"
        assert record.title == "Retro"

    @pytest.mark.asyncio()
    async def test_rename_onto_existing_id(self, agendas):
        await _make_agenda(agendas, "a1")
        await _make_agenda(agendas, "b1", title="Other")

        with pytest.raises(DuplicateKey) as exc_info:
            await agendas.update("a1", id="b1")

        assert exc_info.value.record_id == "b1"
        assert (await agendas.get("a1")).title == "Standup"
        assert (await agendas.get("b1")).title == "Other"

    @pytest.mark.asyncio()
    async def test_rename_keeps_insertion_position(self, agendas):
        for agenda_id in ("a", "b", "c"):
            await _make_agenda(agendas, agenda_id)

        await agendas.update("a", id="z")

        ids = [a.id for a in await agendas.list().all()]
        assert ids == ["z", "b", "c"]


# ── delete ───────────────────────────────────────────────────────────


class TestDelete:
    """Test AgendaStore.delete."""

    @pytest.mark.asyncio()
    async def test_removes_record(self, agendas):
        await _make_agenda(agendas)

        cleared = await agendas.delete("a1")

        assert cleared == 0
        with pytest.raises(NotFound):
            await agendas.get("a1")

    @pytest.mark.asyncio()
    async def test_missing_leaves_store_unchanged(self, agendas):
        await _make_agenda(agendas)

        with pytest.raises(NotFound):
            await agendas.delete("missing")

        assert await agendas.count() == 1
        assert (await agendas.get("a1")).title == "Standup"

    @pytest.mark.asyncio()
    async def test_second_delete_raises(self, agendas):
        await _make_agenda(agendas)
        await agendas.delete("a1")

        with pytest.raises(NotFound):
            await agendas.delete("a1")

    @pytest.mark.asyncio()
    async def test_delete_while_iterating_listing(self, agendas):
        for agenda_id in ("a1", "a2", "a3"):
            await _make_agenda(agendas, agenda_id)

        deleted = []
        async for agenda in agendas.list():
            await agendas.delete(agenda.id)
            deleted.append(agenda.id)

        assert deleted == ["a1", "a2", "a3"]
        assert await agendas.count() == 0

    @pytest.mark.asyncio()
    async def test_rename_while_iterating_listing(self, agendas):
        for agenda_id in ("a1", "a2"):
            await _make_agenda(agendas, agenda_id)

        async for agenda in agendas.list():
            await agendas.update(agenda.id, id=f"{agenda.id}-moved")

        assert [a.id for a in await agendas.list().all()] == ["a1-moved", "a2-moved"]


# ── list / count ─────────────────────────────────────────────────────


class TestList:
    """Test AgendaStore.list and AgendaStore.count."""

    @pytest.mark.asyncio()
    async def test_insertion_order(self, agendas):
        for agenda_id in ("c", "a", "b"):
            await _make_agenda(agendas, agenda_id)

        ids = [a.id async for a in agendas.list()]
        assert ids == ["c", "a", "b"]

    @pytest.mark.asyncio()
    async def test_insertion_order_after_deleting_newest(self, agendas):
        for agenda_id in ("b", "a"):
            await _make_agenda(agendas, agenda_id)
        await agendas.delete("a")

        await _make_agenda(agendas, "c")
        await agendas.update("b", id="z")
        await _make_agenda(agendas, "d")

        ids = [a.id for a in await agendas.list().all()]
        assert ids == ["z", "c", "d"]

    @pytest.mark.asyncio()
    async def test_stream_is_lazy_and_restartable(self, agendas):
        await _make_agenda(agendas, "a1")
        stream = agendas.list()

        assert [a.id for a in await stream.all()] == ["a1"]

        await _make_agenda(agendas, "a2")
        assert [a.id for a in await stream.all()] == ["a1", "a2"]

    @pytest.mark.asyncio()
    async def test_empty(self, agendas):
        assert await agendas.list().all() == []

    @pytest.mark.asyncio()
    async def test_filter_by_status(self, agendas):
        await _make_agenda(agendas, "a1", agenda_status=AgendaStatus.STORED)
        await _make_agenda(agendas, "a2", agenda_status=AgendaStatus.ONGOING)
        await _make_agenda(agendas, "a3", agenda_status=AgendaStatus.ONGOING)

        result = await agendas.list(AgendaFilter(agenda_status=AgendaStatus.ONGOING)).all()

        assert [a.id for a in result] == ["a2", "a3"]

    @pytest.mark.asyncio()
    async def test_filter_by_title(self, agendas):
        await _make_agenda(agendas, "a1", title="Standup")
        await _make_agenda(agendas, "a2", title="Retro")

        result = await agendas.list(AgendaFilter(title="Retro")).all()

        assert [a.id for a in result] == ["a2"]

    @pytest.mark.asyncio()
    async def test_terminate_window_inclusive(self, agendas):
        await _make_agenda(agendas, "early", terminate_at=100)
        await _make_agenda(agendas, "start", terminate_at=200)
        await _make_agenda(agendas, "end", terminate_at=300)
        await _make_agenda(agendas, "late", terminate_at=400)

        result = await agendas.list(AgendaFilter(terminate_from=200, terminate_to=300)).all()

        assert [a.id for a in result] == ["start", "end"]

    @pytest.mark.asyncio()
    async def test_order_by_terminate_at(self, agendas):
        await _make_agenda(agendas, "a1", terminate_at=300)
        await _make_agenda(agendas, "a2", terminate_at=100)
        await _make_agenda(agendas, "a3", terminate_at=200)

        result = await agendas.list(AgendaFilter(order_by="terminate_at")).all()

        assert [a.id for a in result] == ["a2", "a3", "a1"]

    @pytest.mark.asyncio()
    async def test_count(self, agendas):
        await _make_agenda(agendas, "a1", agenda_status=AgendaStatus.STORED)
        await _make_agenda(agendas, "a2", agenda_status=AgendaStatus.ONGOING)

        assert await agendas.count() == 2
        assert await agendas.count(AgendaStatus.STORED) == 1
        assert await agendas.count("terminated") == 0
