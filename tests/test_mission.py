"""
Tests for mission records, money helpers, the audit log and the state machine.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from procure_engine.exceptions import InvalidTransitionError
from procure_engine.mission import (
    AgentLog,
    AgentName,
    FixedClock,
    LogLevel,
    Mission,
    MissionAuditLog,
    MissionContext,
    MissionStatus,
    ScriptedRandom,
)
from procure_engine.mission.money import apply_rate, format_money, to_whole_units
from procure_engine.mission.payloads import QuoteSetPayload
from procure_engine.orchestrator import MISSION_TRANSITIONS, can_transition, transition

NOW = datetime(2026, 10, 19, 9, 0)


def make_context() -> MissionContext:
    clock = FixedClock(NOW)
    mission = Mission(request_text="5 chairs", created_at=clock.now(), updated_at=clock.now())
    return MissionContext(mission, clock)


class TestMoney:

    def test_half_up_rounding(self):
        assert to_whole_units(2.5) == 3
        assert to_whole_units(3.5) == 4
        assert to_whole_units(2.4999) == 2
        assert to_whole_units(Decimal("123.5")) == 124
        assert to_whole_units(7) == 7

    def test_apply_rate_rounds_once(self):
        assert apply_rate(1540, Decimal("0.08")) == 123
        assert apply_rate(7, "0.08") == 1

    def test_format_money(self):
        assert format_money(12345) == "$12,345"
        assert format_money(10000.0) == "$10,000"
        assert format_money(19.99) == "$19.99"


class TestClock:

    def test_fixed_clock_is_utc(self):
        clock = FixedClock(NOW)
        assert clock.now().tzinfo == timezone.utc

    def test_advance(self):
        clock = FixedClock(NOW)
        clock.advance(days=2)
        assert clock.now().day == 21

    def test_scripted_random_replays_then_falls_back(self):
        source = ScriptedRandom([0.1, 0.2], fallback=0.9)
        assert [source.random() for _ in range(3)] == [0.1, 0.2, 0.9]
        assert source.draws == 3


class TestAuditLog:

    def test_entries_are_ordered_copies(self):
        audit = MissionAuditLog("m-1", FixedClock(NOW))
        audit.info(AgentName.ORCHESTRATOR, "first")
        audit.warn(AgentName.SOURCING_SCOUT, "second")

        entries = audit.entries
        entries.clear()

        assert [e.message for e in audit.entries] == ["first", "second"]
        assert len(audit) == 2
        assert audit.entries[1].level == LogLevel.WARN

    def test_for_agent(self):
        audit = MissionAuditLog("m-1", FixedClock(NOW))
        audit.info(AgentName.ORCHESTRATOR, "a")
        audit.info(AgentName.HITL_BRIDGE, "b")

        assert [e.message for e in audit.for_agent(AgentName.HITL_BRIDGE)] == ["b"]

    def test_payload_round_trips_by_kind(self):
        audit = MissionAuditLog("m-1", FixedClock(NOW))
        entry = audit.info(
            AgentName.SOURCING_SCOUT,
            "scored",
            QuoteSetPayload(item_name="Chair", scores={"TechDirect Pro": 64}, selected="TechDirect Pro")
        )

        restored = AgentLog.model_validate(entry.model_dump())

        assert isinstance(restored.payload, QuoteSetPayload)
        assert restored.payload.scores == {"TechDirect Pro": 64}


class TestStateMachine:

    def test_terminal_states_have_no_exits(self):
        assert MISSION_TRANSITIONS[MissionStatus.COMPLETED] == frozenset()
        assert MISSION_TRANSITIONS[MissionStatus.FAILED] == frozenset()

    def test_allowed_moves(self):
        assert can_transition(MissionStatus.PENDING, MissionStatus.RUNNING)
        assert can_transition(MissionStatus.RUNNING, MissionStatus.AWAITING_APPROVAL)
        assert can_transition(MissionStatus.AWAITING_APPROVAL, MissionStatus.FAILED)
        assert not can_transition(MissionStatus.AWAITING_APPROVAL, MissionStatus.RUNNING)
        assert not can_transition(MissionStatus.PENDING, MissionStatus.COMPLETED)

    def test_transition_records_audit_entry(self):
        context = make_context()
        transition(context, MissionStatus.RUNNING)

        assert context.mission.status == MissionStatus.RUNNING
        payload = context.audit.entries[-1].payload
        assert (payload.from_status, payload.to_status) == ("pending", "running")

    def test_terminal_mission_is_never_mutated(self):
        context = make_context()
        transition(context, MissionStatus.RUNNING)
        transition(context, MissionStatus.COMPLETED)

        with pytest.raises(InvalidTransitionError):
            transition(context, MissionStatus.FAILED)
        assert context.mission.status == MissionStatus.COMPLETED
