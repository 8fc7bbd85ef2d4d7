"""Tests for the session log and markdown summaries."""

import pytest

from scoutbook.core.enums import AttributeDomain, LensType, Perk, Reaction
from scoutbook.core.errors import ResourceExhaustedError
from scoutbook.core.models import ScoutProfile
from scoutbook.core.observation import (
    accept_hypothesis,
    add_reflection_note,
    advance_phase,
    allocate_focus,
    begin_session,
    flag_moment,
    reflect,
    remove_focus,
)
from scoutbook.events import FocusAllocatedEvent
from scoutbook.logging import MarkdownSessionWriter, SessionLog


@pytest.fixture
def log(bus, session) -> SessionLog:
    session_log = SessionLog(session.id)
    session_log.connect_to_event_bus(bus)
    return session_log


def play(session, bus):
    begin_session(session, bus)
    allocate_focus(session, "p-ana", LensType.GENERAL, bus)
    allocate_focus(session, "p-ana", LensType.TECHNICAL, bus)
    flag_moment(session, "m0-ana", Reaction.PROMISING, bus=bus)
    advance_phase(session, bus=bus)
    allocate_focus(session, "p-ben", LensType.PHYSICAL, bus)
    flag_moment(session, "m1-ana", Reaction.PROMISING, note="again", bus=bus)
    advance_phase(session, bus=bus)
    remove_focus(session, "p-ben", bus)
    advance_phase(session, bus=bus)


class TestSessionLog:
    def test_records_focus_stats(self, session, bus, log):
        play(session, bus)

        ana = log.player_stats["p-ana"]
        assert ana.allocations == 1
        assert ana.lens_switches == 1
        assert ana.lenses == ["general", "technical"]
        assert ana.flags == 2
        assert ana.standout_flags == 1
        assert log.player_stats["p-ben"].removals == 1

    def test_lens_switch_costs_no_token(self, session, bus, log):
        play(session, bus)

        assert log.tokens_spent == 2

    def test_counts(self, session, bus, log):
        play(session, bus)

        assert log.flag_count == 2
        assert log.refills == 1
        assert [e.description for e in log.get_entries("STATE")] == [
            "Session setup -> active",
            "Session active -> reflection",
        ]

    def test_phase_entries_filed_under_new_phase(self, session, bus, log):
        play(session, bus)

        phase_entries = log.get_entries("PHASE")
        assert [e.phase_index for e in phase_entries] == [1, 2]
        assert phase_entries[0].description == "Phase 1 -> 2 (halftime)"

    def test_groups_by_phase(self, session, bus, log):
        play(session, bus)

        by_phase = log.get_entries_by_phase()
        assert sorted(by_phase) == [0, 1, 2]
        assert all(e.phase_index == 0 for e in by_phase[0])

    def test_records_rejections(self, session, bus, log):
        begin_session(session, bus)
        flag_moment(session, "m0-ana", Reaction.PROMISING, bus=bus)

        with pytest.raises(ResourceExhaustedError):
            flag_moment(session, "m0-ben", Reaction.PROMISING, bus=bus)

        assert log.rejection_count == 1
        assert "flag_moment rejected (resource_exhausted)" in log.get_entries("REJECTED")[0].description

    def test_records_hypotheses(self, session, bus, log):
        play(session, bus)
        accept_hypothesis(session, "p-ana", "Sees passes early", AttributeDomain.TECHNICAL, bus=bus)

        entry = log.get_entries("HYPOTHESIS")[0]
        assert entry.description == "Hypothesis [technical]: Sees passes early"
        assert entry.player_id == "p-ana"

    def test_ignores_other_sessions(self, bus, log):
        bus.emit(FocusAllocatedEvent(session_id="elsewhere", player_id="p-x", lens="general"))

        assert log.entries == []

    def test_unbound_log_records_everything(self, bus):
        session_log = SessionLog()
        session_log.connect_to_event_bus(bus)

        bus.emit(FocusAllocatedEvent(session_id="elsewhere", player_id="p-x", lens="general"))

        assert len(session_log.entries) == 1

    def test_manual_entry(self):
        session_log = SessionLog()
        session_log.add_entry(3, 40, "PHASE", "Scout arrived late")

        assert session_log.get_entries_by_phase()[3][0].description == "Scout arrived late"


class TestMarkdownWriter:
    def test_summary_sections(self, session, bus, log, players):
        play(session, bus)
        scout = ScoutProfile(perks=frozenset({Perk.PA_ESTIMATE}))
        reflection = reflect(session, scout, players)
        suggestion = reflection.suggested_hypotheses[0]
        accept_hypothesis(session, suggestion.player_id, suggestion.text, suggestion.domain,
                          hypothesis_id=suggestion.id, bus=bus)
        add_reflection_note(session, "Check Ana away from home.")

        markdown = MarkdownSessionWriter().generate_summary_string(session, log, reflection)

        assert markdown.startswith("# Scouting Session: schoolMatch")
        assert "**Week:** 5, Season 2" in markdown
        assert "| Ana Costa | 1 | 1 | 2 | 3 |" in markdown
        assert "- **0'** Ana Costa (promising): Detailed: m0-ana" in markdown
        assert "*again*" in markdown
        assert "### Suggested Hypotheses" in markdown
        assert "### Gut Feeling" in markdown
        assert "Potential estimate: 145-155" in markdown
        assert "## Hypotheses" in markdown
        assert "- Check Ana away from home." in markdown
        assert "### Phase 3" in markdown
        assert "Generated by Scoutbook" in markdown

    def test_without_reflection(self, session, bus, log):
        begin_session(session, bus)

        markdown = MarkdownSessionWriter().generate_summary_string(session, log)

        assert "*No focus allocated*" in markdown
        assert "*No moments flagged*" in markdown
        assert "## Reflection" not in markdown
        assert "## Notes" not in markdown

    def test_rejections_noted(self, session, bus, log):
        begin_session(session, bus)
        flag_moment(session, "m0-ana", Reaction.PROMISING, bus=bus)
        with pytest.raises(ResourceExhaustedError):
            flag_moment(session, "m0-cai", Reaction.CONCERNING, bus=bus)

        markdown = MarkdownSessionWriter().generate_summary_string(session, log)

        assert "*1 action(s) rejected*" in markdown

    def test_write_to_file(self, session, bus, log, tmp_path):
        play(session, bus)
        output = tmp_path / "summary.md"

        MarkdownSessionWriter().write_session_summary(session, log, output)

        content = output.read_text()
        assert content.startswith("# Scouting Session")
        assert content.endswith("\n")
