"""
Perception: how a scout's noisy reads of a player are produced.

Noise shrinks with scout skill and with the square root of the number of
observations, grows in poor viewing contexts, and is shifted by the
player's current form. A finished session is folded into one Observation
per focused player built only from what the scout was shown.
"""

import logging
import math
import random
from typing import Iterable, Optional

from scoutbook.core.enums import (
    LensType,
    ObservationContext,
    ScoutSkill,
    SessionState,
    get_attribute_domain,
    is_hidden_attribute,
)
from scoutbook.core.errors import InvalidTransitionError, NotFoundError
from scoutbook.core.models import (
    ABILITY_MAX,
    ABILITY_MIN,
    ATTRIBUTE_MAX,
    ATTRIBUTE_MIN,
    AbilityReading,
    AttributeReading,
    Observation,
    Player,
    ScoutProfile,
)
from scoutbook.core.observation.attention import (
    find_active_allocation,
    focused_player_ids,
    lens_effectiveness,
    lens_skill_boosts,
    observation_quality,
)
from scoutbook.core.observation.moments import atmosphere_noise_multiplier
from scoutbook.core.observation.session import make_id
from scoutbook.core.observation.types import ObservationSession
from scoutbook.core.observation.visibility import peripheral_attributes, visible_attributes
from scoutbook.core.perception.aggregator import clamp_potential_range, pa_age_factor
from scoutbook.core.perception.confidence import (
    ABILITY_SCALE,
    clamp_confidence,
    confidence_range,
    range_half_width,
)

logger = logging.getLogger(__name__)

# Noise multiplier per context. Lower = more accurate.
CONTEXT_NOISE: dict[ObservationContext, float] = {
    ObservationContext.LIVE_MATCH: 1.0,
    ObservationContext.VIDEO_ANALYSIS: 1.5,
    ObservationContext.TRAINING_GROUND: 0.7,
    ObservationContext.YOUTH_TOURNAMENT: 1.1,
    ObservationContext.ACADEMY_VISIT: 0.8,
}

CONTEXT_CONFIDENCE: dict[ObservationContext, float] = {
    ObservationContext.TRAINING_GROUND: 0.05,
    ObservationContext.VIDEO_ANALYSIS: -0.05,
}

FORM_BIAS = 1.5  # Attribute points per form step
CA_FORM_BIAS = 3.0  # Ability points per form step
LENS_CONFIDENCE_BONUS = 0.05  # At full lens effectiveness
PERIPHERAL_NOISE = 1.5  # Extra noise on reads from the corner of the eye
DIVERSITY_OBSERVATIONS = 10  # Prior observations for full context diversity


def _diversity_factor(context_diversity: float) -> float:
    return 1 - min(0.3, context_diversity * 0.3)


def _confidence(
    skill: float,
    count: int,
    context: ObservationContext,
    context_diversity: float,
    skill_weight: float = 0.5,
    count_weight: float = 0.35,
) -> float:
    raw = (
        skill / 20 * skill_weight
        + min(count_weight, (1 - 1 / math.sqrt(count)) * count_weight)
        + context_diversity * 0.1
        + CONTEXT_CONFIDENCE.get(context, 0.0)
    )
    return clamp_confidence(raw)


def perceive_attribute(
    rng: random.Random,
    true_value: int,
    scout_skill: int,
    observation_count: int,
    context: ObservationContext,
    context_diversity: float = 0.0,
    form: int = 0,
    noise_multiplier: float = 1.0,
) -> tuple[int, float]:
    """
    One noisy read of an attribute.

    Args:
        rng: Random source
        true_value: Hidden 1-20 value
        scout_skill: Governing scout skill, 1-20
        observation_count: Observations including this one
        context: Where the player is being watched
        context_diversity: 0-1, variety of prior viewing contexts
        form: Player form, -3 to 3
        noise_multiplier: Extra noise from venue atmosphere

    Returns:
        (perceived value, confidence)
    """
    skill = max(1, min(20, scout_skill))
    count = max(1, observation_count)

    base_stddev = max(0.4, (20 - skill) / 3)
    stddev = (
        base_stddev / math.sqrt(count)
        * _diversity_factor(context_diversity)
        * CONTEXT_NOISE[context]
        * noise_multiplier
    )

    raw = rng.gauss(true_value + form * FORM_BIAS, stddev)
    perceived = max(ATTRIBUTE_MIN, min(ATTRIBUTE_MAX, int(round(raw))))
    return perceived, _confidence(skill, count, context, context_diversity)


def perceive_ability(
    rng: random.Random,
    player: Player,
    scout: ScoutProfile,
    observation_count: int,
    context: ObservationContext,
    context_diversity: float = 0.0,
) -> AbilityReading:
    """
    One noisy read of current and potential ability (1-200 scale).

    Potential is harder to read than current ability and harder still for
    young players. The PA range never starts below the perceived CA.
    """
    count = max(1, observation_count)
    diversity = _diversity_factor(context_diversity)
    noise = CONTEXT_NOISE[context]

    judgment = scout.skill(ScoutSkill.PLAYER_JUDGMENT)
    ca_stddev = max(5.0, (20 - judgment) * 1.5) / math.sqrt(count) * diversity * noise
    raw_ca = rng.gauss(player.current_ability + player.form * CA_FORM_BIAS, ca_stddev)
    perceived_ca = max(ABILITY_MIN, min(ABILITY_MAX, int(round(raw_ca))))
    ca_confidence = _confidence(judgment, count, context, context_diversity)

    potential = scout.skill(ScoutSkill.POTENTIAL_ASSESSMENT)
    age_factor = pa_age_factor(player.age)
    pa_stddev = max(7.5, (20 - potential) * 2.0) * age_factor / math.sqrt(count) * diversity * noise
    pa_mid = max(ABILITY_MIN, min(ABILITY_MAX, rng.gauss(player.potential_ability, pa_stddev)))
    pa_confidence = _confidence(
        potential, count, context, context_diversity, skill_weight=0.4, count_weight=0.3
    )

    half = range_half_width(pa_confidence, potential, count, ABILITY_SCALE) * age_factor
    pa_low, pa_high = clamp_potential_range(
        perceived_ca, int(round(pa_mid - half)), int(round(pa_mid + half))
    )

    return AbilityReading(
        perceived_ca=perceived_ca,
        ca_confidence=ca_confidence,
        pa_low=pa_low,
        pa_high=pa_high,
        pa_confidence=pa_confidence,
    )


def _prior_counts(history: list[Observation]) -> dict[str, int]:
    """Deepest observation count already held per attribute."""
    counts: dict[str, int] = {}
    for observation in history:
        for reading in observation.readings:
            counts[reading.attribute] = max(counts.get(reading.attribute, 0), reading.observation_count)
    return counts


def observe_session(
    session: ObservationSession,
    players: dict[str, Player],
    scout: ScoutProfile,
    prior_observations: Iterable[Observation] = (),
    rng: Optional[random.Random] = None,
    context: ObservationContext = ObservationContext.LIVE_MATCH,
) -> list[Observation]:
    """
    Fold a finished session into new observations.

    One Observation per player who held focus, built from the attributes
    revealed to the scout in that player's moments during focused phases.
    The lens in use boosts the matching scout skill and adds a little
    confidence to readings in its domain, both scaled by how warmed up or
    fatigued the lens was in that phase. For two phases after focus ends
    the scout still catches each moment's primary hint, read with no lens
    and extra noise. Hidden attributes never produce
    readings. Every reading carries precomputed range bounds.

    Args:
        session: Session in reflection or complete state
        players: True player data by id (must include every focused player)
        scout: The scout who ran the session
        prior_observations: Existing history, for observation counts and diversity
        rng: Random source (defaults to one seeded from the session id)
        context: Viewing context for noise

    Raises:
        InvalidTransitionError: session still in setup or active
        NotFoundError: a focused player is missing from players
    """
    if session.state not in (SessionState.REFLECTION, SessionState.COMPLETE):
        raise InvalidTransitionError(
            "observe_session", f"session is {session.state.value}, phases are not finished", session.id
        )

    rng = rng or random.Random(f"{session.id}:perception")
    history = list(prior_observations)
    observations = []

    for player_id in focused_player_ids(session.focus_tokens):
        player = players.get(player_id)
        if player is None:
            raise NotFoundError("observe_session", f"no player data for {player_id}", session.id)
        session_player = session.get_player(player_id)

        player_history = [o for o in history if o.player_id == player_id]
        prior = _prior_counts(player_history)
        diversity = min(1.0, len(player_history) / DIVERSITY_OBSERVATIONS)

        values: dict[str, list[int]] = {}
        confidences: dict[str, list[float]] = {}
        skills: dict[str, int] = {}
        last_lens: Optional[LensType] = None
        events = []

        for phase_index, phase in enumerate(session.phases):
            if phase.atmosphere_event is not None:
                events.append(phase.atmosphere_event)
            quality = observation_quality(session.focus_tokens, player_id, phase_index)
            if quality == "unfocused":
                continue

            noise = atmosphere_noise_multiplier(session.venue_atmosphere, events)
            if quality == "focused":
                allocation = find_active_allocation(session.focus_tokens, player_id, phase_index)
                lens = allocation.lens if allocation else LensType.GENERAL
                last_lens = lens
                effectiveness = lens_effectiveness(session.focus_tokens, player_id, lens, phase_index)
                boosted = scout.with_boosts(lens_skill_boosts(lens, effectiveness))
            else:
                lens = None
                effectiveness = 0.0
                boosted = scout
                noise *= PERIPHERAL_NOISE

            for moment in phase.moments:
                if moment.player_id != player_id:
                    continue
                if lens is None:
                    revealed = peripheral_attributes(moment)
                else:
                    revealed = visible_attributes(moment, phase, lens)
                for attr in revealed:
                    if is_hidden_attribute(attr):
                        continue
                    skill = boosted.skill_for_attribute(attr)
                    perceived, confidence = perceive_attribute(
                        rng,
                        player.get(attr),
                        skill,
                        prior.get(attr, 0) + len(values.get(attr, [])) + 1,
                        context,
                        diversity,
                        player.form,
                        noise,
                    )
                    if lens is not None and lens.domain is not None and lens.domain == get_attribute_domain(attr):
                        confidence = clamp_confidence(confidence + LENS_CONFIDENCE_BONUS * effectiveness)
                    values.setdefault(attr, []).append(perceived)
                    confidences.setdefault(attr, []).append(confidence)
                    skills[attr] = skill

        readings = []
        for attr, attr_values in values.items():
            perceived = int(round(sum(attr_values) / len(attr_values)))
            confidence = sum(confidences[attr]) / len(confidences[attr])
            count = prior.get(attr, 0) + len(attr_values)
            low, high = confidence_range(perceived, confidence, skills[attr], count)
            readings.append(AttributeReading(
                attribute=attr,
                perceived_value=perceived,
                confidence=confidence,
                observation_count=count,
                range_low=low,
                range_high=high,
            ))

        ability = perceive_ability(rng, player, scout, len(player_history) + 1, context, diversity)

        notes = [
            f"Observed {player.name} over {len(session_player.focused_phases)} focused phase(s): "
            f"{len(readings)} attribute(s) assessed."
        ]
        flags = [f for f in session.flagged_moments if f.moment.player_id == player_id]
        if flags:
            notes.append(f"{len(flags)} flagged moment(s).")

        observations.append(Observation(
            id=make_id(session.id, f"obs-{player_id}"),
            player_id=player_id,
            week=session.started_at_week,
            season=session.started_at_season,
            context=context,
            readings=tuple(readings),
            ability_reading=ability,
            notes=tuple(notes),
            focus_lens=last_lens,
            session_id=session.id,
        ))
        logger.debug(f"Session {session.id}: {len(readings)} readings for {player_id}")

    return observations
