"""
Post-session reflection.

Turns the evidence gathered in a session into a summary, an insight point
award, suggested hypotheses, reflection prompts and, when the flags show a
strong enough pattern, a gut feeling.

Reflection only reads the session. Accepting a suggestion or writing a
note goes through the session actions. The same session always reflects
to the same result: template choices are seeded from the session id.
"""

import logging
import math
import random
import re
from dataclasses import dataclass, field
from typing import Optional

from scoutbook.config import ObservationSettings, get_settings
from scoutbook.core.enums import AttributeDomain, EvidenceDirection, Perk, Reaction, SessionState
from scoutbook.core.errors import InvalidTransitionError
from scoutbook.core.models import ABILITY_MAX, ABILITY_MIN, Player, ScoutProfile, find_player
from scoutbook.core.observation.session import (
    group_flags,
    phases_completed,
    quality_tier,
    suggestion_id,
    supports_suggestion,
)
from scoutbook.core.observation.types import ObservationSession, SessionFlaggedMoment, SessionPlayer

logger = logging.getLogger(__name__)

BASE_REFLECTION_IP = 5
IP_PER_FLAG = 1
IP_PER_EXTRA_REACTION = 2
IP_PER_SUGGESTION = 2
IP_FOR_GUT_FEELING = 3

MAX_GUT_RELIABILITY = 0.85
HIGH_INTUITION = 15  # Scouts at or above this need one fewer flag for a gut feeling
PA_ESTIMATE_MARGIN = 5

CHAOTIC_VENUE = 0.5
VERY_CHAOTIC_VENUE = 0.6
CALM_VENUE = 0.3

STRONG_REACTIONS = (Reaction.PROMISING, Reaction.CONCERNING)


# =============================================================================
# Result types
# =============================================================================

@dataclass
class SuggestedHypothesis:
    """A hypothesis the scout may accept, derived from flagged moments."""
    id: str
    player_id: str
    player_name: str
    text: str
    domain: AttributeDomain
    direction: EvidenceDirection
    evidence_description: str
    evidence_strength: str  # "weak", "moderate", "strong"
    flag_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "player_id": self.player_id,
            "player_name": self.player_name,
            "text": self.text,
            "domain": self.domain.value,
            "direction": self.direction.value,
            "evidence_description": self.evidence_description,
            "evidence_strength": self.evidence_strength,
            "flag_ids": list(self.flag_ids),
        }


@dataclass
class GutFeelingCandidate:
    """
    A strong hunch about one player in one domain.

    pa_estimate is only set when the scout's perks grant it; otherwise it is
    absent, never zero.
    """
    player_id: str
    player_name: str
    domain: AttributeDomain
    narrative: str
    reliability: float  # 0-1
    trigger_reason: str
    pa_estimate: Optional[tuple[int, int]] = None

    def to_dict(self) -> dict:
        data = {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "domain": self.domain.value,
            "narrative": self.narrative,
            "reliability": self.reliability,
            "trigger_reason": self.trigger_reason,
        }
        if self.pa_estimate is not None:
            data["pa_estimate"] = {"low": self.pa_estimate[0], "high": self.pa_estimate[1]}
        return data


@dataclass
class ReflectionResult:
    """Everything reflection produces for one session."""
    session_summary: str
    insight_points_from_reflection: int
    suggested_hypotheses: list[SuggestedHypothesis]
    reflection_prompts: list[str]
    flagged_moments: list[SessionFlaggedMoment]
    gut_feeling_candidate: Optional[GutFeelingCandidate] = None

    def to_dict(self) -> dict:
        data = {
            "session_summary": self.session_summary,
            "insight_points_from_reflection": self.insight_points_from_reflection,
            "suggested_hypotheses": [h.to_dict() for h in self.suggested_hypotheses],
            "reflection_prompts": list(self.reflection_prompts),
            "flagged_moments": [f.to_dict() for f in self.flagged_moments],
        }
        if self.gut_feeling_candidate is not None:
            data["gut_feeling_candidate"] = self.gut_feeling_candidate.to_dict()
        return data


# =============================================================================
# Templates
# =============================================================================

# {name} is the player's name
HYPOTHESIS_TEXTS: dict[AttributeDomain, dict[EvidenceDirection, list[str]]] = {
    AttributeDomain.TECHNICAL: {
        EvidenceDirection.FOR: [
            "{name} shows above-average technique for this level.",
            "{name}'s ball control may be a genuine strength.",
        ],
        EvidenceDirection.AGAINST: [
            "{name}'s technique breaks down under pressure.",
            "{name}'s first touch lets them down in tight areas.",
        ],
    },
    AttributeDomain.PHYSICAL: {
        EvidenceDirection.FOR: [
            "{name}'s athleticism stands out at this level.",
            "{name} covers ground quickly and recovers well.",
        ],
        EvidenceDirection.AGAINST: [
            "{name} may have physical limits that cap their development.",
            "{name} faded late on. Endurance could be a concern.",
        ],
    },
    AttributeDomain.MENTAL: {
        EvidenceDirection.FOR: [
            "{name} is more composed than expected for their age.",
            "{name} makes good decisions under pressure.",
        ],
        EvidenceDirection.AGAINST: [
            "{name} looked rattled when things went wrong.",
            "{name}'s decision-making slipped as the session wore on.",
        ],
    },
    AttributeDomain.TACTICAL: {
        EvidenceDirection.FOR: [
            "{name} finds space instinctively. Tactical awareness looks advanced.",
            "{name}'s positioning suggests a natural feel for team shape.",
        ],
        EvidenceDirection.AGAINST: [
            "{name} was regularly caught out of position.",
            "{name} struggles to read the press and ends up isolated.",
        ],
    },
    AttributeDomain.HIDDEN: {
        EvidenceDirection.FOR: [
            "{name} shows character that the standard attributes miss.",
            "{name} has an intangible quality worth tracking.",
        ],
        EvidenceDirection.AGAINST: [
            "{name}'s reaction to adversity raises questions about mentality.",
            "{name} switched off at key moments.",
        ],
    },
}

GUT_FEELING_NARRATIVES: dict[AttributeDomain, list[str]] = {
    AttributeDomain.TECHNICAL: [
        "Something about the way {name} takes the ball stays with you. The numbers will not show it.",
        "On the drive home you keep replaying {name}'s first touch.",
    ],
    AttributeDomain.PHYSICAL: [
        "{name} covered more ground than anyone and you barely noticed the effort.",
        "The way {name} moves reminds you of players who went much further.",
    ],
    AttributeDomain.MENTAL: [
        "When the pressure spiked, {name} got calmer. You have learned to trust that.",
        "{name} kept scanning before every touch. That is how they think.",
    ],
    AttributeDomain.TACTICAL: [
        "{name} was in the right place a second before the ball every time.",
        "Nobody coached {name} into those pockets. They found them alone.",
    ],
    AttributeDomain.HIDDEN: [
        "There is more to {name} than the data will ever show.",
        "You cannot point to one moment, but {name} has something.",
    ],
}

PLAYER_PROMPTS = [
    "You could not pin down {name}'s ceiling today. That uncertainty is worth revisiting.",
    "{name} looked different under pressure than at rest. A dedicated mental focus would settle it.",
    "Was {name} quieter late on through fatigue or something else? A follow-up would tell.",
]

ATMOSPHERE_PROMPTS = [
    "The conditions affected your readings. Consider a follow-up somewhere calmer.",
    "Crowd noise made it hard to isolate individual behaviour. Do not over-weight today's data.",
]

FOCUS_PROMPTS = [
    "Most of your focus went on {name}. Do not forget the peripheral players who caught your eye.",
    "You flagged {flag_count} moment(s). Prioritise the standouts before writing the report.",
    "Was your focus spread too thin? Two or three players is usually enough.",
]

GENERIC_PROMPTS = [
    "First impressions age. Re-read your notes in a week and see if they hold.",
    "Which moments would you defend in a scout meeting? Start with those.",
    "You hold {hypothesis_count} hypothesis(es) from this session. Each is a reason to return.",
]


# =============================================================================
# Helpers
# =============================================================================

def _venue_label(venue_type: str) -> str:
    """'schoolMatch' -> 'school match'."""
    return re.sub(r"(?<!^)(?=[A-Z])", " ", venue_type).lower()


def _player_name(session: ObservationSession, player_id: str) -> str:
    player = session.get_player(player_id)
    return player.name if player else player_id


def _last_lens(session: ObservationSession, player: SessionPlayer):
    for allocation in reversed(session.focus_tokens.allocations):
        if allocation.player_id == player.player_id:
            return allocation.lens
    return player.current_lens


def _most_focused_player(session: ObservationSession) -> Optional[SessionPlayer]:
    best = None
    for player in session.players:
        if player.focused_phases and (best is None or len(player.focused_phases) > len(best.focused_phases)):
            best = player
    return best


def _evidence_strength(count: int) -> str:
    if count >= 3:
        return "strong"
    elif count == 2:
        return "moderate"
    return "weak"


def gut_feeling_threshold(settings: ObservationSettings, scout: Optional[ScoutProfile]) -> int:
    """Strong flags needed on one player/domain before a gut feeling forms."""
    threshold = settings.gut_feeling_flag_threshold
    if scout is not None and scout.intuition >= HIGH_INTUITION:
        threshold -= 1
    return max(1, threshold)


def gut_feeling_reliability(intuition: int) -> float:
    return min(MAX_GUT_RELIABILITY, 0.3 + intuition / 30)


def pa_estimate_range(player: Player, accuracy_bonus: float = 0.0) -> tuple[int, int]:
    """Perk-granted PA range around the player's true potential."""
    margin = max(1, math.floor(PA_ESTIMATE_MARGIN * (1 - accuracy_bonus)))
    return (
        max(ABILITY_MIN, player.potential_ability - margin),
        min(ABILITY_MAX, player.potential_ability + margin),
    )


# =============================================================================
# Pieces
# =============================================================================

def suggest_hypotheses(
    session: ObservationSession,
    rng: random.Random,
) -> list[SuggestedHypothesis]:
    """
    Hypotheses from flagged moments only.

    One per (player, domain) group with two or more flags or a standout,
    skipping pairs the session already holds and suggestions dismissed.
    """
    suggestions = []
    held = {(h.player_id, h.domain) for h in session.hypotheses}

    for (player_id, domain), flags in group_flags(session).items():
        if not supports_suggestion(flags) or (player_id, domain) in held:
            continue
        hypothesis_id = suggestion_id(session.id, player_id, domain)
        if hypothesis_id in session.dismissed_hypothesis_ids:
            continue

        promising = sum(1 for f in flags if f.reaction == Reaction.PROMISING)
        concerning = sum(1 for f in flags if f.reaction == Reaction.CONCERNING)
        direction = EvidenceDirection.FOR if promising >= concerning else EvidenceDirection.AGAINST
        leaning = "positive" if direction == EvidenceDirection.FOR else "concerning"
        name = _player_name(session, player_id)

        suggestions.append(SuggestedHypothesis(
            id=hypothesis_id,
            player_id=player_id,
            player_name=name,
            text=rng.choice(HYPOTHESIS_TEXTS[domain][direction]).format(name=name),
            domain=domain,
            direction=direction,
            evidence_description=f"Flagged {len(flags)} {leaning} {domain.value} moment(s) during the session.",
            evidence_strength=_evidence_strength(len(flags)),
            flag_ids=[f.id for f in flags],
        ))

    return suggestions


def check_gut_feeling(
    session: ObservationSession,
    rng: random.Random,
    settings: ObservationSettings,
    scout: Optional[ScoutProfile] = None,
    players: Optional[dict[str, Player]] = None,
) -> Optional[GutFeelingCandidate]:
    """
    A gut feeling forms when one player/domain group collects enough
    promising or concerning flags. The strongest group wins; ties go to
    the group flagged first.
    """
    threshold = gut_feeling_threshold(settings, scout)

    best_key, best_count = None, 0
    for key, flags in group_flags(session).items():
        strong = sum(1 for f in flags if f.reaction in STRONG_REACTIONS)
        if strong >= threshold and strong > best_count:
            best_key, best_count = key, strong
    if best_key is None:
        return None

    player_id, domain = best_key
    name = _player_name(session, player_id)
    intuition = scout.intuition if scout is not None else 10

    reasons = [f"{best_count} promising/concerning {domain.value} flag(s)"]
    session_player = session.get_player(player_id)
    if session_player is not None and session_player.focused_phases:
        reasons.append(f"{len(session_player.focused_phases)} phase(s) of direct focus")

    pa_estimate = None
    if scout is not None and scout.has_perk(Perk.PA_ESTIMATE):
        player = find_player(players, player_id)
        if player is not None:
            pa_estimate = pa_estimate_range(player, scout.pa_estimate_accuracy_bonus)

    return GutFeelingCandidate(
        player_id=player_id,
        player_name=name,
        domain=domain,
        narrative=rng.choice(GUT_FEELING_NARRATIVES[domain]).format(name=name),
        reliability=gut_feeling_reliability(intuition),
        trigger_reason=f"Triggered by: {', '.join(reasons)}.",
        pa_estimate=pa_estimate,
    )


def reflection_prompts(
    session: ObservationSession,
    rng: random.Random,
    max_prompts: int = 4,
) -> list[str]:
    """2-4 prompts drawn from what happened in the session."""
    primary = _most_focused_player(session)
    prompts = []

    if primary is not None:
        prompts.append(rng.choice(PLAYER_PROMPTS).format(name=primary.name))

    chaos = session.venue_atmosphere.chaos_level if session.venue_atmosphere else 0.0
    if chaos > CHAOTIC_VENUE:
        prompts.append(rng.choice(ATMOSPHERE_PROMPTS))

    prompts.append(rng.choice(FOCUS_PROMPTS).format(
        name=primary.name if primary else "your primary player",
        flag_count=len(session.flagged_moments),
    ))

    if len(prompts) < 3:
        prompts.append(rng.choice(GENERIC_PROMPTS).format(hypothesis_count=len(session.hypotheses)))

    rng.shuffle(prompts)
    return prompts[:max_prompts]


def session_summary(session: ObservationSession) -> str:
    """Deterministic paragraph summarising the session."""
    atmosphere = session.venue_atmosphere
    venue = _venue_label(atmosphere.venue_type if atmosphere else session.activity_type)
    completed = phases_completed(session)

    focused = [p for p in session.players if p.focused_phases]
    labels = []
    for player in focused:
        lens = _last_lens(session, player)
        labels.append(f"{player.name} ({lens.value} lens)" if lens else player.name)
    if not labels:
        focus_fragment = "without concentrating your focus on any single player"
    elif len(labels) == 1:
        focus_fragment = f"focusing primarily on {labels[0]}"
    else:
        focus_fragment = f"focusing primarily on {', '.join(labels[:-1])} and {labels[-1]}"

    flag_count = len(session.flagged_moments)
    if flag_count == 0:
        moment_fragment = "no moments worth flagging"
    else:
        moment_fragment = f"{flag_count} {'moment' if flag_count == 1 else 'moments'} worth flagging"

    hyp_count = len(session.hypotheses)
    if hyp_count == 0:
        hyp_fragment = "no new hypotheses"
    else:
        hyp_fragment = f"{hyp_count} new {'hypothesis' if hyp_count == 1 else 'hypotheses'}"

    summary = (
        f"After {completed} of {len(session.phases)} phases observing a {venue}, "
        f"you spent the session {focus_fragment}. "
        f"You identified {moment_fragment} and formed {hyp_fragment}."
    )
    if atmosphere is not None and atmosphere.chaos_level > VERY_CHAOTIC_VENUE:
        summary += " The chaotic atmosphere revealed raw instincts but made precise readings difficult."
    elif atmosphere is not None and atmosphere.chaos_level < CALM_VENUE:
        summary += " Calm conditions allowed clean, reliable observation throughout."
    summary += f" Session quality: {quality_tier(session.insight_points_earned, completed)}."
    return summary


# =============================================================================
# Entry point
# =============================================================================

def reflect(
    session: ObservationSession,
    scout: Optional[ScoutProfile] = None,
    players: Optional[dict[str, Player]] = None,
    settings: Optional[ObservationSettings] = None,
) -> ReflectionResult:
    """
    Reflect on a session that has finished its phases.

    Args:
        session: Session in reflection or complete state (not modified)
        scout: Scout profile, for intuition and perks
        players: True player data, only consulted for perk-granted PA estimates
        settings: Reflection settings (defaults to the global settings)

    Raises:
        InvalidTransitionError: session has not reached reflection yet
    """
    if session.state not in (SessionState.REFLECTION, SessionState.COMPLETE):
        error = InvalidTransitionError(
            "reflect", f"session is {session.state.value}, phases are not finished", session.id
        )
        logger.debug(f"Session {session.id}: {error}")
        raise error

    settings = settings or get_settings()
    rng = random.Random(session.id)

    suggestions = suggest_hypotheses(session, rng)
    gut_feeling = check_gut_feeling(session, rng, settings, scout, players)
    prompts = reflection_prompts(session, rng, settings.max_reflection_prompts)

    distinct_reactions = len({f.reaction for f in session.flagged_moments})
    insight_points = (
        BASE_REFLECTION_IP
        + IP_PER_FLAG * len(session.flagged_moments)
        + IP_PER_EXTRA_REACTION * max(0, distinct_reactions - 1)
        + IP_PER_SUGGESTION * len(suggestions)
        + (IP_FOR_GUT_FEELING if gut_feeling is not None else 0)
    )

    return ReflectionResult(
        session_summary=session_summary(session),
        insight_points_from_reflection=insight_points,
        suggested_hypotheses=suggestions,
        reflection_prompts=prompts,
        flagged_moments=list(session.flagged_moments),
        gut_feeling_candidate=gut_feeling,
    )
