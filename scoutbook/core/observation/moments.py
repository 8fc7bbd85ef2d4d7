"""
Phase content for full observation sessions.

Generates the moments, phase descriptions and venue atmosphere a scout
watches. All randomness comes from the ``random.Random`` passed in, so a
session built from the same seed always plays out the same way.
"""

import random
from typing import Optional

from scoutbook.core.enums import DOMAIN_ATTRIBUTES, MomentType, PhaseType
from scoutbook.core.observation.types import (
    AtmosphereEvent,
    PlayerMoment,
    SessionPhase,
    SessionPlayer,
    VenueAtmosphere,
)

# =============================================================================
# Moment type weights by venue
# =============================================================================

MOMENT_TYPE_WEIGHTS: dict[str, dict[MomentType, int]] = {
    "schoolMatch": {
        MomentType.TECHNICAL_ACTION: 30,
        MomentType.PHYSICAL_TEST: 15,
        MomentType.MENTAL_RESPONSE: 15,
        MomentType.TACTICAL_DECISION: 30,
        MomentType.CHARACTER_REVEAL: 10,
    },
    "streetFootball": {
        MomentType.TECHNICAL_ACTION: 35,
        MomentType.PHYSICAL_TEST: 30,
        MomentType.MENTAL_RESPONSE: 15,
        MomentType.TACTICAL_DECISION: 10,
        MomentType.CHARACTER_REVEAL: 10,
    },
    "youthFestival": {
        MomentType.TECHNICAL_ACTION: 15,
        MomentType.PHYSICAL_TEST: 15,
        MomentType.MENTAL_RESPONSE: 30,
        MomentType.TACTICAL_DECISION: 15,
        MomentType.CHARACTER_REVEAL: 25,
    },
    "attendMatch": {
        MomentType.TECHNICAL_ACTION: 20,
        MomentType.PHYSICAL_TEST: 15,
        MomentType.MENTAL_RESPONSE: 20,
        MomentType.TACTICAL_DECISION: 35,
        MomentType.CHARACTER_REVEAL: 10,
    },
    "trainingVisit": {
        MomentType.TECHNICAL_ACTION: 35,
        MomentType.PHYSICAL_TEST: 15,
        MomentType.MENTAL_RESPONSE: 15,
        MomentType.TACTICAL_DECISION: 30,
        MomentType.CHARACTER_REVEAL: 5,
    },
}
DEFAULT_MOMENT_WEIGHTS: dict[MomentType, int] = {t: 20 for t in MomentType}

# Phase types are drawn with build-up play most common
PHASE_TYPE_WEIGHTS: dict[PhaseType, int] = {
    PhaseType.BUILD_UP: 3,
    PhaseType.POSSESSION: 2,
    PhaseType.TRANSITION: 2,
    PhaseType.PRESSING_SEQUENCE: 2,
    PhaseType.COUNTER_ATTACK: 1,
    PhaseType.SET_PIECE: 1,
}

MIN_MOMENTS_PER_PHASE = 3
MAX_MOMENTS_PER_PHASE = 6
FOCUSED_PICK_CHANCE = 0.5
UNFOCUSED_PICK_CHANCE = 0.2
STANDOUT_QUALITY = 8
MAX_HINTS_PER_MOMENT = 3
ATMOSPHERE_EVENT_CHANCE = 0.25


# =============================================================================
# Description templates
# =============================================================================

# {name} is replaced with the player's name
MOMENT_DESCRIPTIONS: dict[MomentType, dict[str, list[str]]] = {
    MomentType.TECHNICAL_ACTION: {
        "high": [
            "{name} killed a dropping ball dead with one touch and moved it on before the press arrived.",
            "{name} threaded a disguised pass between two defenders into the striker's stride.",
            "{name} shifted the ball onto the weaker foot without breaking stride and whipped in a dangerous cross.",
        ],
        "medium": [
            "{name} took the ball in and played a simple, tidy pass forward.",
            "{name} controlled an awkward bounce well enough to keep possession.",
            "{name} tried a dribble, did not quite beat the defender, but kept the ball.",
        ],
        "low": [
            "{name} let a routine pass run under the foot and out of play.",
            "{name} snatched at a shooting chance and sliced it wide.",
            "{name} overhit a short pass with no one pressing.",
        ],
    },
    MomentType.PHYSICAL_TEST: {
        "high": [
            "{name} accelerated away from the full-back over twenty yards and never looked caught.",
            "{name} held off a bigger opponent with a low centre of gravity and came away with the ball.",
            "{name} tracked back the length of the pitch to make a recovery tackle.",
        ],
        "medium": [
            "{name} kept pace with the runner and stayed goal-side.",
            "{name} competed for a header and got decent contact.",
            "{name} rode a shoulder charge and stayed on their feet.",
        ],
        "low": [
            "{name} was left behind by a quick break and could not recover.",
            "{name} lost a fifty-fifty duel and ended up on the floor.",
            "{name} looked heavy-legged chasing a ball over the top.",
        ],
    },
    MomentType.MENTAL_RESPONSE: {
        "high": [
            "{name} stayed calm with three players closing and picked out the right option.",
            "{name} shook off an early mistake and immediately demanded the ball again.",
            "{name} read the second ball before it dropped and was already there.",
        ],
        "medium": [
            "{name} chose the safe pass when the game got frantic.",
            "{name} kept concentration through a long spell without the ball.",
            "{name} encouraged a teammate after a misplaced pass.",
        ],
        "low": [
            "{name} looked rattled after a heavy tackle and rushed the next few decisions.",
            "{name} switched off at a throw-in and lost their runner.",
            "{name} picked the harder option when an easy pass was on.",
        ],
    },
    MomentType.TACTICAL_DECISION: {
        "high": [
            "{name} timed a run across the line perfectly to stay onside and open the channel.",
            "{name} drifted into the half-space at exactly the right moment to create an overload.",
            "{name} triggered the press on the right cue and the whole team followed.",
        ],
        "medium": [
            "{name} made a sensible supporting run to give the ball carrier an option.",
            "{name} held position in the defensive block without being drawn out.",
            "{name} tracked the runner and handed them on correctly.",
        ],
        "low": [
            "{name} went too early with the run and the defence stepped up easily.",
            "{name} pressed alone and left a gap behind.",
            "{name} drifted out of the shape and left the flank open.",
        ],
    },
    MomentType.CHARACTER_REVEAL: {
        "high": [
            "{name} shrugged off a painful knock and carried straight on.",
            "{name} put an arm round a younger teammate after a costly error.",
            "{name} answered a bad decision by upping the work rate rather than arguing.",
        ],
        "medium": [
            "{name} jogged back into shape after losing the ball without fuss.",
            "{name} shook hands with an opponent after a hard challenge.",
            "{name} listened to a touchline instruction and acted on it straight away.",
        ],
        "low": [
            "{name} kicked the turf after a decision went against them and sulked for minutes.",
            "{name} went down easily looking for a free kick.",
            "{name} stopped running once the team fell behind.",
        ],
    },
}

# Peripheral vision only: no names
VAGUE_DESCRIPTIONS: dict[MomentType, list[str]] = {
    MomentType.TECHNICAL_ACTION: [
        "Someone did something neat on the ball.",
        "There was a flash of technique from one of the players.",
        "A player produced a tidy piece of skill, hard to see who.",
    ],
    MomentType.PHYSICAL_TEST: [
        "Someone showed a burst of pace on the break.",
        "A player won a physical contest convincingly.",
        "There was an athletic moment on the far side.",
    ],
    MomentType.MENTAL_RESPONSE: [
        "A player seemed composed when things got hectic.",
        "Someone made a decisive call in a tight moment.",
        "There was an interesting reaction under pressure.",
    ],
    MomentType.TACTICAL_DECISION: [
        "A player made a clever run off the ball.",
        "Someone's movement opened up a passing lane.",
        "One of the players seemed to read the shape well.",
    ],
    MomentType.CHARACTER_REVEAL: [
        "Something off the ball looked telling.",
        "A player's reaction to that incident stood out.",
        "There was a brief exchange worth a closer look.",
    ],
}

PHASE_DESCRIPTIONS: dict[str, list[str]] = {
    "early": [
        "Kick-off. Both sides are feeling each other out.",
        "The opening exchanges are scrappy and direct.",
        "Early minutes, and the shape of the game is still forming.",
    ],
    "mid": [
        "The game has settled into a rhythm and patterns are easier to read.",
        "Play is stretched now and individuals are starting to stand out.",
        "A quieter spell gives room to watch movement off the ball.",
    ],
    "late": [
        "Tired legs are opening gaps all over the pitch.",
        "Closing stages, and character is on display as much as ability.",
        "The final push. Who still has something left?",
    ],
}


# =============================================================================
# Venue atmosphere
# =============================================================================

WEATHER_CONDITIONS = ["clear", "overcast", "light_rain", "heavy_rain", "cold", "hot"]

# venue -> (chaos, crowd intensity, amplified, dampened)
VENUE_PROFILES: dict[str, tuple[float, float, list[str], list[str]]] = {
    "schoolMatch": (0.2, 0.3, ["positioning", "teamwork", "off_the_ball"], ["dribbling", "pace"]),
    "grassrootsTournament": (0.4, 0.5, ["stamina", "work_rate", "composure"], []),
    "streetFootball": (
        0.7, 0.2,
        ["dribbling", "first_touch", "agility", "balance"],
        ["positioning", "marking", "defensive_awareness"],
    ),
    "academyTrialDay": (0.1, 0.4, ["off_the_ball", "pressing", "composure"], ["leadership"]),
    "youthFestival": (0.5, 0.6, ["composure", "big_game_temperament", "leadership"], []),
    "attendMatch": (0.3, 0.8, ["decision_making", "composure", "vision"], []),
    "reserveMatch": (0.3, 0.3, ["positioning", "teamwork"], []),
    "trainingVisit": (0.1, 0.1, ["first_touch", "passing", "professionalism"], ["big_game_temperament"]),
}
DEFAULT_VENUE_PROFILE: tuple[float, float, list[str], list[str]] = (0.3, 0.3, [], [])

ATMOSPHERE_EVENTS: list[AtmosphereEvent] = [
    AtmosphereEvent(
        id="rain_starts",
        description="Rain starts falling and the surface gets quick and slippery.",
        effect="amplify",
        affected_attributes=["balance", "agility"],
        noise_delta=0.1,
    ),
    AtmosphereEvent(
        id="crowd_erupts",
        description="The crowd erupts after a contested decision and the tension rises.",
        effect="amplify",
        affected_attributes=["composure", "big_game_temperament"],
        noise_delta=0.15,
    ),
    AtmosphereEvent(
        id="lopsided_score",
        description="The game turns one-sided and the trailing team's body language says a lot.",
        effect="reveal",
        affected_attributes=["professionalism", "work_rate"],
        noise_delta=0.0,
    ),
    AtmosphereEvent(
        id="view_blocked",
        description="Spectators crowd the touchline and the view is partly blocked.",
        effect="distraction",
        noise_delta=0.2,
    ),
]


def create_venue_atmosphere(rng: random.Random, venue_type: str) -> VenueAtmosphere:
    chaos, crowd, amplified, dampened = VENUE_PROFILES.get(venue_type, DEFAULT_VENUE_PROFILE)
    return VenueAtmosphere(
        venue_type=venue_type,
        chaos_level=chaos,
        crowd_intensity=crowd,
        amplified_attributes=list(amplified),
        dampened_attributes=list(dampened),
        weather=rng.choice(WEATHER_CONDITIONS),
    )


def generate_atmosphere_event(rng: random.Random) -> Optional[AtmosphereEvent]:
    """A quarter of phases get a dynamic atmosphere event."""
    if rng.random() >= ATMOSPHERE_EVENT_CHANCE:
        return None
    template = rng.choice(ATMOSPHERE_EVENTS)
    return AtmosphereEvent(
        id=template.id,
        description=template.description,
        effect=template.effect,
        affected_attributes=list(template.affected_attributes),
        noise_delta=template.noise_delta,
    )


def atmosphere_noise_multiplier(
    atmosphere: Optional[VenueAtmosphere],
    events: list[AtmosphereEvent],
) -> float:
    """Observation noise from venue chaos plus accumulated events, in [0.5, 2.0]."""
    base = 1.0 + (atmosphere.chaos_level * 0.5 if atmosphere else 0.0)
    raw = base + sum(e.noise_delta for e in events)
    return min(2.0, max(0.5, raw))


# =============================================================================
# Generation
# =============================================================================

def phase_segment(phase_index: int, total_phases: int) -> str:
    """'early', 'mid' or 'late' by thirds of the session."""
    if total_phases <= 1:
        return "early"
    third = total_phases / 3
    if phase_index < third:
        return "early"
    if phase_index >= total_phases - third:
        return "late"
    return "mid"


def _quality_band(quality: int) -> str:
    if quality >= 7:
        return "high"
    elif quality >= 4:
        return "medium"
    return "low"


def _weighted_choice(rng: random.Random, weights: dict) -> object:
    items = list(weights.keys())
    return rng.choices(items, weights=[weights[i] for i in items], k=1)[0]


def _select_player(rng: random.Random, players: list[SessionPlayer]) -> SessionPlayer:
    candidates = [
        p for p in players
        if rng.random() < (FOCUSED_PICK_CHANCE if p.is_focused else UNFOCUSED_PICK_CHANCE)
    ]
    return rng.choice(candidates or players)


def generate_moments(
    rng: random.Random,
    players: list[SessionPlayer],
    venue_type: str,
    phase_index: int,
    total_phases: int,
    atmosphere: Optional[VenueAtmosphere] = None,
) -> list[PlayerMoment]:
    """
    Generate the moments for one phase.

    3-6 moments per phase. Quality is a gaussian draw around 5.5, standouts
    are quality 8+, and pressure becomes more likely late on and in front
    of a big crowd.
    """
    if not players:
        return []

    progress = phase_index / (total_phases - 1) if total_phases > 1 else 0.0
    crowd_boost = atmosphere.crowd_intensity * 0.15 if atmosphere else 0.0
    pressure_probability = min(0.2 + progress * 0.25 + crowd_boost, 0.7)
    weights = MOMENT_TYPE_WEIGHTS.get(venue_type, DEFAULT_MOMENT_WEIGHTS)

    moments = []
    for i in range(rng.randint(MIN_MOMENTS_PER_PHASE, MAX_MOMENTS_PER_PHASE)):
        player = _select_player(rng, players)
        moment_type = _weighted_choice(rng, weights)
        quality = int(round(min(10.0, max(1.0, rng.gauss(5.5, 2.0)))))

        pool = DOMAIN_ATTRIBUTES[moment_type.domain]
        hint_count = rng.randint(1, min(MAX_HINTS_PER_MOMENT, len(pool)))
        hints = rng.sample(pool, hint_count)

        template = rng.choice(MOMENT_DESCRIPTIONS[moment_type][_quality_band(quality)])
        moments.append(PlayerMoment(
            id=f"moment-p{phase_index}-{i}-{player.player_id[:8]}",
            player_id=player.player_id,
            moment_type=moment_type,
            description=template.format(name=player.name),
            vague_description=rng.choice(VAGUE_DESCRIPTIONS[moment_type]),
            attributes_hinted=hints,
            quality=quality,
            pressure_context=rng.random() < pressure_probability,
            is_standout=quality >= STANDOUT_QUALITY,
        ))

    return moments


def populate_phases(rng: random.Random, phases: list[SessionPhase]) -> None:
    """
    Fill skeleton phases with phase types, descriptions and atmosphere events.

    Moments are left empty; they are generated with generate_moments as each
    phase is entered, so the players under focus at that point feature more.
    """
    total = len(phases)
    for phase in phases:
        phase.phase_type = _weighted_choice(rng, PHASE_TYPE_WEIGHTS)
        phase.description = rng.choice(PHASE_DESCRIPTIONS[phase_segment(phase.index, total)])
        phase.atmosphere_event = generate_atmosphere_event(rng)
