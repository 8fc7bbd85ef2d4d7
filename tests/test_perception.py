"""Tests for noisy perception and session observation."""

import copy
import random

import pytest

from scoutbook.core.enums import (
    HIDDEN_ATTRIBUTES,
    AttributeDomain,
    LensType,
    ObservationContext,
    ObservationMode,
    PhaseType,
    Reaction,
    ScoutSkill,
)
from scoutbook.core.errors import InvalidTransitionError, NotFoundError
from scoutbook.core.models import AttributeReading, Player, ScoutProfile
from scoutbook.core.observation import (
    SessionPhase,
    SessionPlayer,
    advance_phase,
    allocate_focus,
    begin_session,
    build_session,
    complete_reflection,
    flag_moment,
    remove_focus,
)
from scoutbook.core.perception import observe_session, perceive_ability, perceive_attribute


def mean_error(samples: list[int], true_value: int) -> float:
    return sum(abs(s - true_value) for s in samples) / len(samples)


def sample(skill: int, context=ObservationContext.LIVE_MATCH, count: int = 1, form: int = 0,
           true_value: int = 12, n: int = 400) -> list[int]:
    rng = random.Random(7)
    return [perceive_attribute(rng, true_value, skill, count, context, form=form)[0] for _ in range(n)]


def finish(session, focus: dict[str, LensType]):
    begin_session(session)
    for player_id, lens in focus.items():
        allocate_focus(session, player_id, lens)
    flag_moment(session, "m0-ana", Reaction.PROMISING)
    for _ in session.phases:
        advance_phase(session)


class TestPerceiveAttribute:
    def test_values_stay_on_scale(self):
        rng = random.Random(1)
        for true_value in (1, 20):
            for _ in range(200):
                value, confidence = perceive_attribute(rng, true_value, 1, 1, ObservationContext.VIDEO_ANALYSIS)
                assert 1 <= value <= 20
                assert 0.0 <= confidence <= 1.0

    def test_skill_reduces_error(self):
        assert mean_error(sample(18), 12) < mean_error(sample(3), 12)

    def test_repeat_observation_reduces_error(self):
        assert mean_error(sample(8, count=9), 12) < mean_error(sample(8, count=1), 12)

    def test_training_ground_beats_video(self):
        training = mean_error(sample(8, ObservationContext.TRAINING_GROUND), 12)
        video = mean_error(sample(8, ObservationContext.VIDEO_ANALYSIS), 12)
        assert training < video

    def test_form_biases_reads(self):
        hot = sample(20, form=2)
        cold = sample(20, form=-2)
        assert sum(hot) / len(hot) > 13.5
        assert sum(cold) / len(cold) < 10.5

    def test_confidence_grows_with_skill_and_count(self):
        rng = random.Random(3)
        _, novice = perceive_attribute(rng, 10, 4, 1, ObservationContext.LIVE_MATCH)
        _, expert = perceive_attribute(rng, 10, 18, 1, ObservationContext.LIVE_MATCH)
        _, seasoned = perceive_attribute(rng, 10, 4, 9, ObservationContext.LIVE_MATCH)

        assert expert > novice
        assert seasoned > novice

    def test_same_seed_same_read(self):
        first = perceive_attribute(random.Random("x"), 14, 9, 2, ObservationContext.LIVE_MATCH)
        second = perceive_attribute(random.Random("x"), 14, 9, 2, ObservationContext.LIVE_MATCH)
        assert first == second


class TestPerceiveAbility:
    @pytest.mark.parametrize("age", [15, 19, 24, 31])
    def test_pa_never_below_ca(self, age):
        player = Player(id="p", name="P", position="CM", age=age, attributes={},
                        current_ability=140, potential_ability=120)
        rng = random.Random(age)
        for _ in range(100):
            reading = perceive_ability(rng, player, ScoutProfile(), 1, ObservationContext.LIVE_MATCH)
            assert reading.pa_low >= reading.perceived_ca
            assert reading.pa_low < reading.pa_high
            assert 1 <= reading.perceived_ca <= 200
            assert reading.pa_high <= 200

    def test_young_potential_is_wider(self):
        def average_width(age: int) -> float:
            player = Player(id="p", name="P", position="CM", age=age, attributes={},
                            current_ability=60, potential_ability=140)
            rng = random.Random(11)
            readings = [perceive_ability(rng, player, ScoutProfile(), 1, ObservationContext.LIVE_MATCH)
                        for _ in range(50)]
            return sum(r.pa_high - r.pa_low for r in readings) / len(readings)

        assert average_width(16) > average_width(30)

    def test_top_of_scale_player(self):
        player = Player(id="p", name="P", position="CM", age=27, attributes={},
                        current_ability=200, potential_ability=200)
        rng = random.Random(200)
        for _ in range(100):
            reading = perceive_ability(rng, player, ScoutProfile(), 1, ObservationContext.LIVE_MATCH)
            assert reading.pa_low >= reading.perceived_ca
            assert reading.pa_low <= reading.pa_high <= 200


class TestObserveSession:
    def test_one_observation_per_focused_player(self, session, players, scout):
        finish(session, {"p-ana": LensType.TECHNICAL, "p-ben": LensType.PHYSICAL})

        observations = observe_session(session, players, scout)

        assert [o.player_id for o in observations] == ["p-ana", "p-ben"]
        for observation in observations:
            assert observation.session_id == session.id
            assert observation.week == 5
            assert observation.season == 2
            assert observation.ability_reading is not None
            assert observation.notes

    def test_readings_carry_bounds(self, session, players, scout):
        finish(session, {"p-ana": LensType.TECHNICAL})

        observation = observe_session(session, players, scout)[0]

        assert observation.readings
        for reading in observation.readings:
            assert reading.has_range
            assert reading.range_low <= reading.perceived_value <= reading.range_high
            assert reading.domain == AttributeDomain.TECHNICAL

    def test_only_revealed_attributes(self, session, players, scout):
        finish(session, {"p-ana": LensType.MENTAL})

        observation = observe_session(session, players, scout)[0]

        assert {r.attribute for r in observation.readings} == {"passing"}
        assert observation.reading_for("passing").observation_count == 3

    def test_no_hidden_readings(self, session, players, scout):
        finish(session, {"p-cai": LensType.GENERAL})

        observation = observe_session(session, players, scout)[0]

        assert not any(r.attribute in HIDDEN_ATTRIBUTES for r in observation.readings)
        assert observation.readings == ()
        assert len(observation.notes) == 1

    def test_prior_counts_carry_forward(self, session, players, scout, observation_factory):
        finish(session, {"p-ana": LensType.MENTAL})
        prior = [
            observation_factory("o1", "p-ana", week=1, readings=(AttributeReading("passing", 13, 0.5, 4),)),
            observation_factory("o2", "p-ana", week=2, readings=(AttributeReading("passing", 14, 0.5, 2),)),
        ]

        observation = observe_session(session, players, scout, prior)[0]

        assert observation.reading_for("passing").observation_count == 7

    def test_other_players_history_ignored(self, session, players, scout, observation_factory):
        finish(session, {"p-ana": LensType.MENTAL})
        prior = [observation_factory("o1", "p-ben", week=1, readings=(AttributeReading("passing", 9, 0.5, 5),))]

        observation = observe_session(session, players, scout, prior)[0]

        assert observation.reading_for("passing").observation_count == 3

    def test_deterministic(self, session, players, scout):
        finish(session, {"p-ana": LensType.TECHNICAL, "p-ben": LensType.GENERAL})

        assert observe_session(session, players, scout) == observe_session(session, players, scout)

    def test_matching_lens_improves_confidence(self, session, players):
        other = copy.deepcopy(session)
        finish(session, {"p-ana": LensType.TECHNICAL})
        finish(other, {"p-ana": LensType.MENTAL})
        scout = ScoutProfile(skills={ScoutSkill.TECHNICAL_EYE: 10})

        matching = observe_session(session, players, scout)[0].reading_for("passing")
        mismatched = observe_session(other, players, scout)[0].reading_for("passing")

        assert matching.confidence > mismatched.confidence

    def test_works_after_completion(self, session, players, scout):
        finish(session, {"p-ben": LensType.PHYSICAL})
        complete_reflection(session)

        assert len(observe_session(session, players, scout)) == 1

    def test_rejects_active_session(self, session, players, scout):
        begin_session(session)

        with pytest.raises(InvalidTransitionError):
            observe_session(session, players, scout)

    def test_missing_player_data(self, session, players, scout):
        finish(session, {"p-ana": LensType.TECHNICAL})
        del players["p-ana"]

        with pytest.raises(NotFoundError):
            observe_session(session, players, scout)

    def test_no_focus_no_observations(self, session, players, scout):
        finish(session, {})

        assert observe_session(session, players, scout) == []


class TestLensQuality:
    def two_phase_session(self, moment_factory, pool) -> object:
        phases = [
            SessionPhase(index=0, minute=0, description="Phase 0", phase_type=PhaseType.BUILD_UP,
                         moments=[moment_factory("m0-ben", "p-ben")]),
            SessionPhase(index=1, minute=45, description="Phase 1", phase_type=PhaseType.BUILD_UP,
                         moments=[moment_factory("m1-ana", "p-ana")]),
        ]
        return build_session(
            "session-lens",
            ObservationMode.FULL_OBSERVATION,
            phases,
            [SessionPlayer(e.player_id, e.name, e.position) for e in pool],
        )

    def test_warm_lens_reads_more_confidently(self, moment_factory, pool, players, scout):
        warm = self.two_phase_session(moment_factory, pool)
        begin_session(warm)
        allocate_focus(warm, "p-ana", LensType.TECHNICAL)
        advance_phase(warm)
        advance_phase(warm)

        cold = self.two_phase_session(moment_factory, pool)
        begin_session(cold)
        allocate_focus(cold, "p-ana", LensType.GENERAL)
        advance_phase(cold)
        allocate_focus(cold, "p-ana", LensType.TECHNICAL)
        advance_phase(cold)

        warm_read = observe_session(warm, players, scout)[0].reading_for("passing")
        cold_read = observe_session(cold, players, scout)[0].reading_for("passing")

        assert warm_read.observation_count == cold_read.observation_count == 1
        assert warm_read.confidence > cold_read.confidence

    def test_peripheral_phases_read_primary_hint(self, session, players, scout):
        begin_session(session)
        allocate_focus(session, "p-ana", LensType.TECHNICAL)
        remove_focus(session, "p-ana")
        for _ in session.phases:
            advance_phase(session)

        observation = observe_session(session, players, scout)[0]

        assert observation.reading_for("passing").observation_count == 3
        assert observation.reading_for("first_touch").observation_count == 1
