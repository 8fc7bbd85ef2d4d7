"""Tests for the observation session state machine."""

import pytest

from scoutbook.config import ObservationSettings
from scoutbook.core.enums import (
    AttributeDomain,
    EvidenceDirection,
    HypothesisState,
    LensType,
    ObservationMode,
    Reaction,
    SessionState,
)
from scoutbook.core.errors import (
    InvalidTransitionError,
    MalformedInputError,
    NotFoundError,
    ResourceExhaustedError,
)
from scoutbook.core.observation import (
    PlayerPoolEntry,
    SessionConfig,
    SessionPlayer,
    accept_hypothesis,
    add_reflection_note,
    advance_phase,
    allocate_focus,
    begin_session,
    complete_reflection,
    create_session,
    dismiss_hypothesis,
    flag_moment,
    get_session_result,
    is_at_or_past_halftime,
    is_halftime_phase,
    reflect,
    remove_focus,
    update_hypothesis,
    view_moment,
    view_phase,
)
from scoutbook.core.observation.session import quality_tier, suggestion_id
from scoutbook.events import (
    ActionRejectedEvent,
    FocusAllocatedEvent,
    SessionStateChangedEvent,
    TokensRefreshedEvent,
)


def run_to_reflection(session, bus=None):
    """Begin the session and advance through every phase."""
    if session.state == SessionState.SETUP:
        begin_session(session, bus=bus)
    while session.state == SessionState.ACTIVE:
        advance_phase(session, bus=bus)


class TestLifecycle:
    """setup -> active -> reflection -> complete"""

    def test_happy_path(self, session, players, scout):
        begin_session(session)
        allocate_focus(session, "p-ana", LensType.TECHNICAL)
        flag_moment(session, "m0-ana", Reaction.PROMISING)
        for _ in range(3):
            advance_phase(session)

        assert session.state == SessionState.REFLECTION

        result = reflect(session, scout, players)
        assert len(result.flagged_moments) >= 1
        assert result.insight_points_from_reflection >= 0

        complete_reflection(session)
        assert session.state == SessionState.COMPLETE

    def test_begin_starts_at_first_phase(self, session):
        begin_session(session)

        assert session.state == SessionState.ACTIVE
        assert session.current_phase_index == 0

    def test_begin_twice(self, session):
        begin_session(session)

        with pytest.raises(InvalidTransitionError):
            begin_session(session)

    def test_advance_during_setup(self, session):
        with pytest.raises(InvalidTransitionError):
            advance_phase(session)

        assert session.state == SessionState.SETUP

    def test_final_advance_enters_reflection(self, session):
        begin_session(session)
        advance_phase(session)
        advance_phase(session)

        assert session.is_final_phase
        advance_phase(session)

        assert session.state == SessionState.REFLECTION
        assert session.current_phase_index == 2

    def test_no_active_actions_in_reflection(self, session):
        run_to_reflection(session)

        with pytest.raises(InvalidTransitionError):
            allocate_focus(session, "p-ana", LensType.GENERAL)
        with pytest.raises(InvalidTransitionError):
            flag_moment(session, "m2-ana", Reaction.PROMISING)
        with pytest.raises(InvalidTransitionError):
            advance_phase(session)

    def test_complete_is_terminal(self, session):
        run_to_reflection(session)
        complete_reflection(session)

        with pytest.raises(InvalidTransitionError):
            complete_reflection(session)
        with pytest.raises(InvalidTransitionError):
            add_reflection_note(session, "too late")

    def test_state_events(self, session, bus, recorded):
        run_to_reflection(session, bus)
        complete_reflection(session, bus)

        changes = [(e.from_state, e.to_state) for e in recorded if isinstance(e, SessionStateChangedEvent)]
        assert changes == [("setup", "active"), ("active", "reflection"), ("reflection", "complete")]
        assert all(e.session_id == "session-test" for e in recorded)


class TestFocusTokens:
    def test_token_conservation(self, session):
        session.players.append(SessionPlayer("p-dan", "Dan Price", "GK"))
        begin_session(session)
        assert session.focus_tokens.total == 3

        for player_id in ("p-ana", "p-ben", "p-cai"):
            allocate_focus(session, player_id, LensType.GENERAL)

        with pytest.raises(ResourceExhaustedError):
            allocate_focus(session, "p-dan", LensType.GENERAL)

        assert session.focus_tokens.available == 0
        assert not session.get_player("p-dan").is_focused

    def test_available_never_negative(self, session):
        begin_session(session)
        for player_id in ("p-ana", "p-ben", "p-cai"):
            allocate_focus(session, player_id, LensType.GENERAL)
        remove_focus(session, "p-ana")

        with pytest.raises(ResourceExhaustedError):
            allocate_focus(session, "p-ana", LensType.TECHNICAL)
        assert session.focus_tokens.available == 0

    def test_lens_switch_is_free(self, session, bus, recorded):
        begin_session(session, bus)
        allocate_focus(session, "p-ana", LensType.GENERAL, bus)
        allocate_focus(session, "p-ana", LensType.TECHNICAL, bus)

        assert session.focus_tokens.available == 2
        assert session.get_player("p-ana").current_lens == LensType.TECHNICAL
        focus_events = [e for e in recorded if isinstance(e, FocusAllocatedEvent)]
        assert [e.lens_switch for e in focus_events] == [False, True]

    def test_same_lens_twice(self, session):
        begin_session(session)
        allocate_focus(session, "p-ana", LensType.MENTAL)

        with pytest.raises(InvalidTransitionError):
            allocate_focus(session, "p-ana", LensType.MENTAL)
        assert session.focus_tokens.available == 2

    def test_unknown_player(self, session):
        begin_session(session)

        with pytest.raises(NotFoundError):
            allocate_focus(session, "p-nobody", LensType.GENERAL)
        assert session.focus_tokens.available == 3

    def test_remove_focus_does_not_refund(self, session):
        begin_session(session)
        allocate_focus(session, "p-ben", LensType.PHYSICAL)
        remove_focus(session, "p-ben")

        player = session.get_player("p-ben")
        assert not player.is_focused
        assert player.current_lens is None
        assert session.focus_tokens.available == 2

    def test_remove_focus_from_unfocused_player(self, session):
        begin_session(session)

        with pytest.raises(InvalidTransitionError):
            remove_focus(session, "p-ben")

    def test_focus_carries_into_next_phase(self, session):
        begin_session(session)
        allocate_focus(session, "p-ana", LensType.TECHNICAL)
        advance_phase(session)
        advance_phase(session)

        player = session.get_player("p-ana")
        assert player.is_focused
        assert player.focused_phases == [0, 1, 2]
        assert session.focus_tokens.allocations[0].phases_active == 3


class TestHalftime:
    def test_halftime_marked(self, session):
        assert session.halftime_index == 1
        assert is_halftime_phase(session, 1)
        assert not is_halftime_phase(session, 0)
        assert [p.is_halftime for p in session.phases] == [False, True, False]

    def test_at_or_past_halftime(self, session):
        begin_session(session)
        assert not is_at_or_past_halftime(session)

        advance_phase(session)
        assert is_at_or_past_halftime(session)
        assert is_at_or_past_halftime(session, 2)

    def test_tokens_refill_at_halftime(self, session, bus, recorded):
        begin_session(session, bus)
        for player_id in ("p-ana", "p-ben", "p-cai"):
            allocate_focus(session, player_id, LensType.GENERAL, bus)
        assert session.focus_tokens.available == 0

        advance_phase(session, bus=bus)

        assert session.focus_tokens.available == 3
        refills = [e for e in recorded if isinstance(e, TokensRefreshedEvent)]
        assert len(refills) == 1
        assert refills[0].phase_index == 1

    def test_no_refill_when_disabled(self, session, bus, recorded):
        settings = ObservationSettings(refill_tokens_at_halftime=False, flags_per_phase=1,
                                       gut_feeling_flag_threshold=2)
        begin_session(session)
        for player_id in ("p-ana", "p-ben", "p-cai"):
            allocate_focus(session, player_id, LensType.GENERAL)

        advance_phase(session, settings=settings, bus=bus)

        assert session.focus_tokens.available == 0
        assert not any(isinstance(e, TokensRefreshedEvent) for e in recorded)

    def test_no_refill_after_halftime(self, session):
        begin_session(session)
        advance_phase(session)
        allocate_focus(session, "p-ana", LensType.GENERAL)
        advance_phase(session)

        assert session.focus_tokens.available == 2


class TestVisibility:
    """Unfocused players are seen vaguely, focused players in detail."""

    def test_unfocused_moment_is_vague(self, session):
        begin_session(session)

        view = view_moment(session, "m0-ana")

        assert view.description == "Vague: m0-ana"
        assert view.player_id is None
        assert view.attributes_hinted == ()
        assert not view.is_standout

    def test_focused_moment_is_detailed(self, session):
        begin_session(session)
        allocate_focus(session, "p-ana", LensType.GENERAL)

        view = view_moment(session, "m0-ana")

        assert view.description == "Detailed: m0-ana"
        assert view.player_id == "p-ana"
        assert "passing" in view.attributes_hinted
        assert view.is_standout

    def test_matching_lens_reveals_more(self, session):
        begin_session(session)
        allocate_focus(session, "p-ana", LensType.GENERAL)
        general = view_moment(session, "m0-ana").attributes_hinted

        allocate_focus(session, "p-ana", LensType.TECHNICAL)
        technical = view_moment(session, "m0-ana").attributes_hinted

        assert set(general) < set(technical)

    def test_other_lens_shows_primary_hint_only(self, session):
        begin_session(session)
        allocate_focus(session, "p-ana", LensType.PHYSICAL)

        assert view_moment(session, "m0-ana").attributes_hinted == ("passing",)

    def test_phase_view_mixes_focus(self, session):
        begin_session(session)
        allocate_focus(session, "p-ben", LensType.PHYSICAL)

        view = view_phase(session)
        by_description = {m.description for m in view.moments}

        assert "Detailed: m0-ben" in by_description
        assert "Vague: m0-ana" in by_description

    def test_unknown_moment(self, session):
        begin_session(session)

        with pytest.raises(NotFoundError):
            view_moment(session, "m9-ana")

    def test_phase_out_of_range(self, session):
        with pytest.raises(NotFoundError):
            view_phase(session, 7)


class TestFlagging:
    def test_flag_awards_insight(self, session):
        begin_session(session)
        flagged = flag_moment(session, "m0-ana", Reaction.PROMISING, note="  lovely weight of pass ")

        assert flagged.phase_index == 0
        assert flagged.note == "lovely weight of pass"
        assert session.insight_points_earned == 5

    def test_flag_limit_per_phase(self, session):
        begin_session(session)
        flag_moment(session, "m0-ana", Reaction.PROMISING)

        with pytest.raises(ResourceExhaustedError):
            flag_moment(session, "m0-ben", Reaction.INTERESTING)
        assert len(session.flagged_moments) == 1

    def test_limit_resets_each_phase(self, session):
        begin_session(session)
        flag_moment(session, "m0-ana", Reaction.PROMISING)
        advance_phase(session)
        flag_moment(session, "m1-ana", Reaction.PROMISING)

        assert len(session.flagged_moments) == 2

    def test_moment_from_another_phase(self, session):
        begin_session(session)

        with pytest.raises(NotFoundError):
            flag_moment(session, "m1-ana", Reaction.PROMISING)

    def test_duplicate_flag(self, session):
        settings = ObservationSettings(refill_tokens_at_halftime=True, flags_per_phase=3,
                                       gut_feeling_flag_threshold=2)
        begin_session(session)
        flag_moment(session, "m0-ana", Reaction.PROMISING, settings=settings)

        with pytest.raises(InvalidTransitionError):
            flag_moment(session, "m0-ana", Reaction.CONCERNING, settings=settings)

    def test_blank_note_is_dropped(self, session):
        begin_session(session)

        assert flag_moment(session, "m0-ben", Reaction.NEEDS_MORE_DATA, note="   ").note is None


class TestRejections:
    """Rejected actions leave the session untouched and are published."""

    def test_rejection_event(self, session, bus, recorded):
        begin_session(session, bus)
        flag_moment(session, "m0-ana", Reaction.PROMISING, bus=bus)

        with pytest.raises(ResourceExhaustedError) as exc_info:
            flag_moment(session, "m0-ben", Reaction.PROMISING, bus=bus)

        rejected = [e for e in recorded if isinstance(e, ActionRejectedEvent)]
        assert len(rejected) == 1
        assert rejected[0].kind == "resource_exhausted"
        assert rejected[0].action == "flag_moment"
        assert exc_info.value.session_id == "session-test"

    def test_rejected_focus_changes_nothing(self, session, bus, recorded):
        begin_session(session, bus)
        before = session.to_dict()

        with pytest.raises(NotFoundError):
            allocate_focus(session, "p-zed", LensType.TACTICAL, bus)

        assert session.to_dict() == before
        assert recorded[-1].player_id == "p-zed"

    def test_error_payload(self, session):
        with pytest.raises(InvalidTransitionError) as exc_info:
            advance_phase(session)

        payload = exc_info.value.to_dict()
        assert payload["kind"] == "invalid_transition"
        assert payload["action"] == "advance_phase"
        assert payload["session_id"] == "session-test"
        assert "setup" in payload["reason"]


class TestHypotheses:
    def test_accept(self, session, bus, recorded):
        run_to_reflection(session)

        hypothesis = accept_hypothesis(session, "p-ana", "Reads the game early", AttributeDomain.TACTICAL, bus=bus)

        assert hypothesis.state == HypothesisState.OPEN
        assert hypothesis.created_at_week == 5
        assert session.get_hypothesis(hypothesis.id) is hypothesis
        assert recorded[-1].hypothesis_id == hypothesis.id

    def test_accept_before_reflection(self, session):
        begin_session(session)

        with pytest.raises(InvalidTransitionError):
            accept_hypothesis(session, "p-ana", "Too early", AttributeDomain.MENTAL)

    def test_accept_validation(self, session):
        run_to_reflection(session)

        with pytest.raises(NotFoundError):
            accept_hypothesis(session, "p-zed", "Unknown", AttributeDomain.MENTAL)
        with pytest.raises(MalformedInputError):
            accept_hypothesis(session, "p-ana", "   ", AttributeDomain.MENTAL)
        assert session.hypotheses == []

    def test_accept_twice(self, session):
        run_to_reflection(session)
        accept_hypothesis(session, "p-ana", "First", AttributeDomain.MENTAL, hypothesis_id="h-1")

        with pytest.raises(InvalidTransitionError):
            accept_hypothesis(session, "p-ana", "Again", AttributeDomain.MENTAL, hypothesis_id="h-1")

    def test_dismissed_cannot_be_accepted(self, session):
        run_to_reflection(session)
        accept_hypothesis(session, "p-ben", "Quick", AttributeDomain.PHYSICAL, hypothesis_id="h-2")
        dismiss_hypothesis(session, "h-2")

        with pytest.raises(InvalidTransitionError):
            accept_hypothesis(session, "p-ben", "Quick", AttributeDomain.PHYSICAL, hypothesis_id="h-2")
        with pytest.raises(InvalidTransitionError):
            dismiss_hypothesis(session, "h-2")

    def test_dismiss_unknown_id(self, session, bus, recorded):
        run_to_reflection(session)

        with pytest.raises(NotFoundError):
            dismiss_hypothesis(session, "h-404", bus=bus)
        assert session.dismissed_hypothesis_ids == []
        assert isinstance(recorded[-1], ActionRejectedEvent)
        assert recorded[-1].kind == "not_found"

    def test_dismiss_unsupported_suggestion_id(self, session):
        begin_session(session)
        flag_moment(session, "m0-ben", Reaction.PROMISING)
        run_to_reflection(session)
        single_flag = suggestion_id(session.id, "p-ben", AttributeDomain.PHYSICAL)

        with pytest.raises(NotFoundError):
            dismiss_hypothesis(session, single_flag)

    def test_dismiss_current_suggestion(self, session):
        begin_session(session)
        flag_moment(session, "m0-ana", Reaction.PROMISING)
        run_to_reflection(session)
        standout = suggestion_id(session.id, "p-ana", AttributeDomain.TECHNICAL)

        dismiss_hypothesis(session, standout)

        assert session.dismissed_hypothesis_ids == [standout]

    def test_dismiss_accepted(self, session):
        run_to_reflection(session)
        accept_hypothesis(session, "p-ana", "First", AttributeDomain.MENTAL, hypothesis_id="h-1")
        dismiss_hypothesis(session, "h-1")

        assert session.hypotheses == []
        assert "h-1" in session.dismissed_hypothesis_ids

    @pytest.mark.parametrize("directions,expected", [
        ([EvidenceDirection.FOR], HypothesisState.OPEN),
        ([EvidenceDirection.FOR, EvidenceDirection.AGAINST], HypothesisState.OPEN),
        ([EvidenceDirection.FOR] * 2, HypothesisState.SUPPORTED),
        ([EvidenceDirection.AGAINST] * 2, HypothesisState.CONTRADICTED),
        ([EvidenceDirection.FOR] * 3, HypothesisState.CONFIRMED),
        ([EvidenceDirection.AGAINST] * 3, HypothesisState.DEBUNKED),
    ])
    def test_evidence_moves_state(self, session, directions, expected):
        run_to_reflection(session)
        hypothesis = accept_hypothesis(session, "p-ben", "Quick", AttributeDomain.PHYSICAL)

        for direction in directions:
            update_hypothesis(session, hypothesis.id, direction, "seen again")

        assert hypothesis.state == expected

    def test_resolving_awards_insight(self, session):
        run_to_reflection(session)
        hypothesis = accept_hypothesis(session, "p-ben", "Quick", AttributeDomain.PHYSICAL)
        before = session.insight_points_earned

        for _ in range(3):
            update_hypothesis(session, hypothesis.id, EvidenceDirection.FOR, "burned the full back")

        assert session.insight_points_earned == before + 10

    def test_resolved_takes_no_more_evidence(self, session):
        run_to_reflection(session)
        hypothesis = accept_hypothesis(session, "p-ben", "Quick", AttributeDomain.PHYSICAL)
        for _ in range(3):
            update_hypothesis(session, hypothesis.id, EvidenceDirection.AGAINST, "off the pace")

        with pytest.raises(InvalidTransitionError):
            update_hypothesis(session, hypothesis.id, EvidenceDirection.FOR, "late burst")
        assert len(hypothesis.evidence) == 3

    def test_evidence_validation(self, session):
        run_to_reflection(session)
        hypothesis = accept_hypothesis(session, "p-ben", "Quick", AttributeDomain.PHYSICAL)

        with pytest.raises(NotFoundError):
            update_hypothesis(session, "h-missing", EvidenceDirection.FOR, "x")
        with pytest.raises(MalformedInputError):
            update_hypothesis(session, hypothesis.id, EvidenceDirection.FOR, "  ")


class TestNotes:
    def test_note_is_trimmed_and_rewarded(self, session):
        run_to_reflection(session)
        add_reflection_note(session, "  Ana drifts wide when pressed.  ")

        assert session.reflection_notes == ["Ana drifts wide when pressed."]
        assert session.insight_points_earned == 3

    def test_blank_note(self, session):
        run_to_reflection(session)

        with pytest.raises(MalformedInputError):
            add_reflection_note(session, "\n\t ")
        assert session.reflection_notes == []


class TestCreateSession:
    def test_deterministic(self, session_config):
        first = create_session(session_config)
        second = create_session(session_config)

        assert first.id == second.id
        assert len(first.phases) == len(second.phases)
        assert [p.phase_type for p in first.phases] == [p.phase_type for p in second.phases]

        begin_session(first)
        begin_session(second)
        assert [m.id for m in first.phases[0].moments] == [m.id for m in second.phases[0].moments]

    def test_full_observation_layout(self, session_config):
        session = create_session(session_config)

        assert session.mode == ObservationMode.FULL_OBSERVATION
        assert session.state == SessionState.SETUP
        assert 8 <= len(session.phases) <= 12
        assert session.halftime_index == len(session.phases) // 2
        assert session.focus_tokens.available == session.focus_tokens.total == 3
        assert all(phase.phase_type is not None and phase.description for phase in session.phases)
        assert not any(phase.moments for phase in session.phases)
        assert session.venue_atmosphere is not None

    def test_moments_generated_on_entry(self, session_config):
        session = create_session(session_config)

        begin_session(session)
        assert session.phases[0].moments
        assert not session.phases[1].moments

        allocate_focus(session, session.players[0].player_id, LensType.GENERAL)
        advance_phase(session)
        assert session.phases[1].moments
        assert not session.phases[2].moments

    def test_minutes_span_a_match(self, session_config):
        session = create_session(session_config)

        assert session.phases[0].minute == 0
        assert session.phases[-1].minute == 90

    @pytest.mark.parametrize("activity,mode,tokens", [
        ("followUpSession", ObservationMode.INVESTIGATION, 2),
        ("watchVideo", ObservationMode.ANALYSIS, 1),
        ("statsBriefing", ObservationMode.QUICK_INTERACTION, 0),
    ])
    def test_other_modes(self, pool, activity, mode, tokens):
        session = create_session(SessionConfig(activity_type=activity, player_pool=pool, seed="s"))

        assert session.mode == mode
        assert session.focus_tokens.total == tokens
        assert session.halftime_index is None
        assert all(not phase.moments for phase in session.phases)

    @pytest.mark.parametrize("activity", [
        "followUpSession", "parentCoachMeeting", "networkMeeting",
        "databaseQuery", "watchVideo", "deepVideoAnalysis",
        "statsBriefing", "assignTerritory",
    ])
    def test_every_mode_has_phase_content(self, pool, activity):
        session = create_session(SessionConfig(activity_type=activity, player_pool=pool, seed="s"))
        begin_session(session)

        for index in range(len(session.phases)):
            view = view_phase(session, index)
            content = view.moments + view.dialogue_nodes + view.data_points + view.choices
            assert content, f"phase {index} of {activity} is empty"
            assert view.description

    def test_investigation_dialogue(self, pool):
        config = SessionConfig(activity_type="parentCoachMeeting", player_pool=pool, seed="s",
                               target_player_id="p-ben")
        session = create_session(config)

        for phase in session.phases:
            assert len(phase.dialogue_nodes) == 1
            node = phase.dialogue_nodes[0]
            assert [o.risk_level for o in node.options] == ["safe", "moderate", "bold"]
            assert all(o.narrative for o in node.options)
            assert "{" not in node.text
        assert "Ben Adeyemi" in session.phases[0].dialogue_nodes[0].text

    def test_analysis_points_use_roster(self, pool):
        session = create_session(SessionConfig(activity_type="deepVideoAnalysis", player_pool=pool, seed="s"))
        roster = {entry.player_id for entry in pool}
        points = [point for phase in session.phases for point in phase.data_points]

        assert all(3 <= len(phase.data_points) <= 8 for phase in session.phases)
        assert any(point.player_id for point in points)
        assert {point.player_id for point in points if point.player_id} <= roster
        assert all(point.is_highlighted for point in points if point.category == "anomaly")

    def test_quick_interaction_choice_ids(self, pool):
        session = create_session(SessionConfig(activity_type="assignTerritory", player_pool=pool, seed="s"))

        first = session.phases[0]
        assert [c.id for c in first.choices] == [f"{session.id}-p0-c{j}" for j in range(3)]
        assert all(len(phase.choices) >= 2 for phase in session.phases)

    def test_mode_content_is_deterministic(self, pool):
        config = SessionConfig(activity_type="databaseQuery", player_pool=pool, seed="same")

        first = create_session(config)
        second = create_session(config)

        assert [p.to_dict() for p in first.phases] == [p.to_dict() for p in second.phases]

    def test_target_player_leads(self, pool):
        config = SessionConfig(activity_type="schoolMatch", player_pool=pool, seed="s", target_player_id="p-cai")

        assert create_session(config).players[0].player_id == "p-cai"

    def test_empty_pool(self):
        with pytest.raises(MalformedInputError):
            create_session(SessionConfig(activity_type="schoolMatch", player_pool=[], seed="s"))

    def test_duplicate_players(self):
        pool = [PlayerPoolEntry("p-1", "One", "CM"), PlayerPoolEntry("p-1", "Again", "CM")]

        with pytest.raises(MalformedInputError):
            create_session(SessionConfig(activity_type="schoolMatch", player_pool=pool, seed="s"))

    def test_unknown_target(self, pool):
        config = SessionConfig(activity_type="schoolMatch", player_pool=pool, seed="s", target_player_id="p-x")

        with pytest.raises(MalformedInputError):
            create_session(config)


class TestSessionResult:
    def test_result_after_session(self, session):
        begin_session(session)
        allocate_focus(session, "p-ana", LensType.TECHNICAL)
        flag_moment(session, "m0-ana", Reaction.PROMISING)
        run_to_reflection(session)

        result = get_session_result(session)

        assert result.phases_completed == 3
        assert result.total_phases == 3
        assert result.focused_player_ids == ["p-ana"]
        assert len(result.flagged_moments) == 1
        assert result.insight_points_earned == 5
        assert result.quality_tier == "poor"

    def test_preview_mid_session(self, session):
        begin_session(session)
        advance_phase(session)

        assert get_session_result(session).phases_completed == 2

    @pytest.mark.parametrize("points,phases,tier", [
        (0, 0, "poor"),
        (36, 3, "exceptional"),
        (24, 3, "excellent"),
        (15, 3, "good"),
        (6, 3, "average"),
        (5, 3, "poor"),
    ])
    def test_quality_tiers(self, points, phases, tier):
        assert quality_tier(points, phases) == tier
