"""
Phase content for the modes that are not watched live.

- investigation: one dialogue node per phase, three options of rising risk
- analysis: a handful of data points per phase, some tied to roster players
- quick interaction: a short branching run of strategic choices

Like full observation moments, everything is drawn from the
``random.Random`` passed in, so the same seed gives the same content.
"""

import random
import re
from dataclasses import dataclass
from typing import Callable, Optional, Union

from scoutbook.core.observation.moments import phase_segment
from scoutbook.core.observation.types import (
    DataPoint,
    DialogueNode,
    DialogueOption,
    SessionPhase,
    SessionPlayer,
    StrategicChoice,
)

# =============================================================================
# Investigation
# =============================================================================

RISK_LEVELS = ("safe", "moderate", "bold")

# Chance a choice at each risk level goes badly
NEGATIVE_OUTCOME_CHANCE: dict[str, float] = {
    "safe": 0.0,
    "moderate": 0.2,
    "bold": 0.45,
}

POSITIVE_NARRATIVES: dict[str, list[str]] = {
    "safe": [
        "The conversation stays comfortable. Nothing surprising, but trust builds a little.",
        "A steady exchange. You learn less than you hoped, but nobody is put on edge.",
        "Polite and measured. The door stays open for another visit.",
    ],
    "moderate": [
        "The question lands well and you get a candid answer you can use.",
        "A small push pays off. You come away with a clearer picture.",
        "The reply is thoughtful and tells you something the numbers never would.",
    ],
    "bold": [
        "The gamble works. The reaction tells you more than an hour of small talk.",
        "You catch them off guard and the honest response is revealing.",
        "A risky line of questioning, but it cuts straight to what matters.",
    ],
}

NEGATIVE_NARRATIVES: dict[str, list[str]] = {
    "moderate": [
        "The question is taken the wrong way and the answers turn guarded.",
        "A slight frown. You sense you pushed a little early.",
    ],
    "bold": [
        "It backfires. The room goes cold and you learn nothing useful.",
        "You overstep. The rest of the conversation is short and formal.",
        "The reaction is defensive and you leave with more doubts than answers.",
    ],
}

# Who is speaking when a template names "contact"
DEFAULT_SPEAKERS: dict[str, str] = {
    "followUpSession": "the coaching staff",
    "parentCoachMeeting": "the parent",
    "networkMeeting": "the contact",
}


@dataclass(frozen=True)
class DialogueTemplate:
    """A dialogue beat. Options are ordered safe, moderate, bold."""
    speaker: str  # "scout", "player" or "contact"
    text: str
    options: tuple[str, str, str]


# Per activity, a list of phase slots; each slot holds candidate templates.
# Sessions longer than the slot list reuse the final slot.
DIALOGUE_TEMPLATES: dict[str, list[list[DialogueTemplate]]] = {
    "followUpSession": [
        [
            DialogueTemplate(
                "scout",
                "You have {player} to yourself on a quiet training pitch. How do you open the session?",
                (
                    "Simple passing drills to settle them in",
                    "Straight into position-specific work",
                    "A high-pressure scenario from the first whistle",
                ),
            ),
            DialogueTemplate(
                "scout",
                "The morning group has gone and {player} is waiting. You have about ninety minutes.",
                (
                    "Measured technical drills you can compare later",
                    "Small-sided games against the reserves",
                    "Ask them to run the session their own way",
                ),
            ),
        ],
        [
            DialogueTemplate(
                "contact",
                "{speaker} wander over. \"They have been working on their weaker foot. Want to see it?\"",
                (
                    "Watch quietly from the touchline",
                    "Set a drill that tests the weaker foot under pressure",
                    "Ask {player} to show you without any warm-up",
                ),
            ),
        ],
        [
            DialogueTemplate(
                "player",
                "{player} misses an easy finish and their head drops for a moment.",
                (
                    "Give them a minute and carry on",
                    "Ask what went through their mind",
                    "Tell them bluntly that scouts notice moments like that",
                ),
            ),
            DialogueTemplate(
                "player",
                "{player} asks how they are doing so far.",
                (
                    "Keep it neutral and encouraging",
                    "Give one honest point to work on",
                    "Lay out every doubt you have",
                ),
            ),
        ],
        [
            DialogueTemplate(
                "scout",
                "The session is winding down. There is time for one last thing.",
                (
                    "A cool-down chat about their week",
                    "A final drill on the attribute you are least sure of",
                    "Ask where they see themselves in three years",
                ),
            ),
        ],
    ],
    "parentCoachMeeting": [
        [
            DialogueTemplate(
                "contact",
                "{speaker} greets you at the door, polite but wary. \"So you are interested in {player}?\"",
                (
                    "Explain your role and keep it low key",
                    "Ask how {player} handles setbacks at home",
                    "Say plainly that clubs are already circling",
                ),
            ),
        ],
        [
            DialogueTemplate(
                "contact",
                "Talk turns to {player}'s routine. \"They are out the door before school most days.\"",
                (
                    "Nod and let them keep talking",
                    "Ask about injuries or time missed",
                    "Ask whether the routine is theirs or a parent's idea",
                ),
            ),
            DialogueTemplate(
                "contact",
                "{speaker} mentions that {player} can be hard on themselves after bad games.",
                (
                    "Say that is common at this age",
                    "Ask for a recent example",
                    "Ask if it ever spills over in the dressing room",
                ),
            ),
        ],
        [
            DialogueTemplate(
                "contact",
                "The meeting is ending. \"Is there anything else you need from us?\"",
                (
                    "Thank them and leave your card",
                    "Ask to watch a training session unannounced",
                    "Ask what it would take for {player} to move away from home",
                ),
            ),
        ],
    ],
    "networkMeeting": [
        [
            DialogueTemplate(
                "contact",
                "{speaker} orders coffee and leans in. \"You wanted to know about {player}?\"",
                (
                    "Let them tell it their own way",
                    "Ask what the coaches really say about them",
                    "Ask who else has been asking",
                ),
            ),
        ],
        [
            DialogueTemplate(
                "contact",
                "\"Good player, trains hard,\" says {speaker}, \"though there was a falling out last season.\"",
                (
                    "Leave it there for now",
                    "Ask what the falling out was about",
                    "Press for names and dates",
                ),
            ),
        ],
        [
            DialogueTemplate(
                "contact",
                "{speaker} checks the time. \"I can keep an eye out for you if you like.\"",
                (
                    "Accept and keep things informal",
                    "Ask for a report after each of {player}'s games",
                    "Offer something in return for first word on {player}",
                ),
            ),
        ],
    ],
}


def _speaker_label(template: DialogueTemplate, player_name: str, speaker_name: str) -> str:
    if template.speaker == "scout":
        return "You"
    if template.speaker == "player":
        return player_name
    return speaker_name


def _narrative(rng: random.Random, risk_level: str) -> str:
    if rng.random() < NEGATIVE_OUTCOME_CHANCE[risk_level]:
        return rng.choice(NEGATIVE_NARRATIVES[risk_level])
    return rng.choice(POSITIVE_NARRATIVES[risk_level])


def build_dialogue_node(
    rng: random.Random,
    activity_type: str,
    phase_index: int,
    player_name: str,
    speaker_name: str,
) -> DialogueNode:
    """Pick a template for the phase and resolve its names and outcomes."""
    slots = DIALOGUE_TEMPLATES.get(activity_type, DIALOGUE_TEMPLATES["followUpSession"])
    template = rng.choice(slots[min(phase_index, len(slots) - 1)])
    names = {"player": player_name, "speaker": speaker_name}

    options = [
        DialogueOption(
            id=f"node-p{phase_index}-opt{i}",
            text=text.format(**names),
            risk_level=risk_level,
            narrative=_narrative(rng, risk_level),
        )
        for i, (text, risk_level) in enumerate(zip(template.options, RISK_LEVELS))
    ]
    return DialogueNode(
        id=f"node-p{phase_index}",
        speaker=_speaker_label(template, player_name, speaker_name),
        text=template.text.format(**names),
        options=options,
    )


def populate_investigation_phases(
    rng: random.Random,
    phases: list[SessionPhase],
    players: list[SessionPlayer],
    activity_type: str,
) -> None:
    """One dialogue node per phase, about the player leading the roster."""
    player_name = players[0].name if players else "the player"
    speaker_name = DEFAULT_SPEAKERS.get(activity_type, "your contact")
    for phase in phases:
        node = build_dialogue_node(rng, activity_type, phase.index, player_name, speaker_name)
        phase.dialogue_nodes = [node]
        phase.description = node.text


# =============================================================================
# Analysis
# =============================================================================

MIN_DATA_POINTS = 3
MAX_DATA_POINTS_EARLY = 6
MAX_DATA_POINTS_LATE = 8
LATE_PHASE_INDEX = 2
HIGHLIGHT_CHANCE_EARLY = 0.25
HIGHLIGHT_CHANCE_LATE = 0.4
PLAYER_BIND_CHANCE = 0.7


@dataclass(frozen=True)
class DataPointTemplate:
    label: str
    value: Callable[[random.Random], Union[float, str]]
    category: str = "statistical"
    related_attributes: tuple[str, ...] = ()


def _per_90(low: float, high: float) -> Callable[[random.Random], float]:
    return lambda rng: round(rng.uniform(low, high), 2)


def _percent(low: int, high: int) -> Callable[[random.Random], str]:
    return lambda rng: f"{rng.randint(low, high)}%"


DATA_POINT_TEMPLATES: dict[str, list[DataPointTemplate]] = {
    "databaseQuery": [
        DataPointTemplate("Players returned", lambda rng: rng.randint(18, 94)),
        DataPointTemplate("Minimum minutes played", lambda rng: rng.randint(500, 1800)),
        DataPointTemplate("Goals per 90", _per_90(0.1, 0.9), related_attributes=("finishing", "shooting")),
        DataPointTemplate("Key passes per 90", _per_90(0.3, 2.8), related_attributes=("passing", "vision")),
        DataPointTemplate(
            "Progressive passes per 90", _per_90(1.0, 9.5), related_attributes=("passing", "off_the_ball")
        ),
        DataPointTemplate(
            "Successful dribbles per 90", _per_90(0.2, 4.2), related_attributes=("dribbling", "agility")
        ),
        DataPointTemplate(
            "Aerial duels won", _percent(30, 72), related_attributes=("heading", "jumping", "strength")
        ),
        DataPointTemplate(
            "Tackles per 90", _per_90(0.5, 5.5), related_attributes=("tackling", "defensive_awareness")
        ),
        DataPointTemplate(
            "Output against league average", _percent(70, 145), "comparison", ("passing", "finishing")
        ),
        DataPointTemplate(
            "Minutes trend over three seasons",
            lambda rng: rng.choice(["rising", "flat", "falling"]),
            "trend",
            ("stamina", "injury_proneness"),
        ),
        DataPointTemplate(
            "Unusual drop in output after January", _percent(15, 40), "anomaly", ("consistency",)
        ),
    ],
    "watchVideo": [
        DataPointTemplate("Clips reviewed", lambda rng: rng.randint(6, 24)),
        DataPointTemplate(
            "Scanning before receiving",
            lambda rng: rng.choice(["rarely", "sometimes", "often", "constantly"]),
            related_attributes=("vision", "decision_making"),
        ),
        DataPointTemplate("First touch under pressure", _percent(55, 92), related_attributes=("first_touch",)),
        DataPointTemplate("Sprints per half", lambda rng: rng.randint(8, 30), related_attributes=("pace", "stamina")),
        DataPointTemplate(
            "Pressing triggers recognised", _percent(30, 85), related_attributes=("pressing", "anticipation")
        ),
        DataPointTemplate(
            "Recovery runs after losing the ball",
            lambda rng: rng.randint(1, 12),
            related_attributes=("work_rate",),
        ),
        DataPointTemplate(
            "Body language after mistakes",
            lambda rng: rng.choice(["resets quickly", "sulks briefly", "visibly rattled"]),
            related_attributes=("composure",),
        ),
        DataPointTemplate(
            "Compared with the positional benchmark", _percent(75, 130), "comparison", ("positioning",)
        ),
        DataPointTemplate(
            "Second half intensity", lambda rng: rng.choice(["higher", "level", "lower"]), "trend", ("stamina",)
        ),
        DataPointTemplate(
            "Switches off at set pieces", lambda rng: rng.randint(2, 6), "anomaly", ("marking", "anticipation")
        ),
    ],
    "deepVideoAnalysis": [
        DataPointTemplate("Matches broken down", lambda rng: rng.randint(3, 8)),
        DataPointTemplate("Frames tagged", lambda rng: rng.randint(120, 900)),
        DataPointTemplate(
            "Receiving on the half turn", _percent(20, 80), related_attributes=("first_touch", "balance")
        ),
        DataPointTemplate(
            "Line-breaking passes per 90", _per_90(0.5, 6.0), related_attributes=("passing", "vision")
        ),
        DataPointTemplate(
            "Defensive line holding errors", lambda rng: rng.randint(0, 7),
            related_attributes=("defensive_awareness", "positioning"),
        ),
        DataPointTemplate(
            "Off-ball runs into space per 90", _per_90(2.0, 14.0), related_attributes=("off_the_ball",)
        ),
        DataPointTemplate(
            "Decision speed in the final third",
            lambda rng: rng.choice(["hesitant", "average", "sharp"]),
            related_attributes=("decision_making",),
        ),
        DataPointTemplate(
            "Duel win rate against older opponents", _percent(25, 70), "comparison", ("strength", "balance")
        ),
        DataPointTemplate(
            "Touches per possession", lambda rng: rng.choice(["falling", "stable", "rising"]), "trend",
            ("first_touch", "passing"),
        ),
        DataPointTemplate(
            "Performance dips in big fixtures", _percent(10, 35), "anomaly", ("big_game_temperament",)
        ),
    ],
}

ANALYSIS_PHASE_DESCRIPTIONS: dict[str, list[str]] = {
    "early": [
        "You set up the first pass through the material.",
        "The data loads. Time to get a feel for what is here.",
    ],
    "mid": [
        "Patterns start to emerge. Some numbers deserve a closer look.",
        "You cross-check the first findings against each other.",
    ],
    "late": [
        "You pull the threads together before writing anything down.",
        "Last look. What holds up after everything you have seen?",
    ],
}


def _slug(label: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", label.lower())[:16]


def generate_data_points(
    rng: random.Random,
    activity_type: str,
    phase_index: int,
    players: list[SessionPlayer],
) -> list[DataPoint]:
    """
    Generate the data points for one analysis phase.

    3-6 points per phase, 3-8 from the third phase on, sampled without
    replacement from the activity's bank. Anomalies are always highlighted;
    other points are highlighted at 25%, rising to 40% later on. A point
    with related attributes describes a roster player 70% of the time and
    a league aggregate otherwise.

    Args:
        rng: Random source
        activity_type: Analysis activity; unknown types use databaseQuery
        phase_index: 0-based phase index
        players: Session roster for player binding
    """
    bank = DATA_POINT_TEMPLATES.get(activity_type, DATA_POINT_TEMPLATES["databaseQuery"])
    late = phase_index >= LATE_PHASE_INDEX
    count = rng.randint(MIN_DATA_POINTS, MAX_DATA_POINTS_LATE if late else MAX_DATA_POINTS_EARLY)
    highlight_chance = HIGHLIGHT_CHANCE_LATE if late else HIGHLIGHT_CHANCE_EARLY

    points = []
    for i, template in enumerate(rng.sample(bank, min(count, len(bank)))):
        highlighted = template.category == "anomaly" or rng.random() < highlight_chance
        player_id: Optional[str] = None
        if players and template.related_attributes and rng.random() < PLAYER_BIND_CHANCE:
            player_id = rng.choice(players).player_id
        points.append(DataPoint(
            id=f"dp-p{phase_index}-{i}-{_slug(template.label)}",
            label=template.label,
            value=template.value(rng),
            category=template.category,
            player_id=player_id,
            is_highlighted=highlighted,
            related_attributes=list(template.related_attributes),
        ))
    return points


def populate_analysis_phases(
    rng: random.Random,
    phases: list[SessionPhase],
    players: list[SessionPlayer],
    activity_type: str,
) -> None:
    total = len(phases)
    for phase in phases:
        phase.data_points = generate_data_points(rng, activity_type, phase.index, players)
        phase.description = rng.choice(ANALYSIS_PHASE_DESCRIPTIONS[phase_segment(phase.index, total)])


# =============================================================================
# Quick interaction
# =============================================================================

@dataclass(frozen=True)
class ChoiceTemplate:
    text: str
    description: str
    effect: str
    outcome_type: str  # "territory", "priority", "network", "technique"


@dataclass(frozen=True)
class QuickPhaseTemplate:
    prompt: str
    choices: tuple[ChoiceTemplate, ...]


@dataclass(frozen=True)
class QuickInteractionTemplate:
    """
    Phase 1 is fixed. Phase 2 follows on from the kind of choice offered in
    phase 1, falling back to a default. Any later phase comes from a pool.
    """
    opening: QuickPhaseTemplate
    follow_ups: dict[str, QuickPhaseTemplate]
    default_follow_up: QuickPhaseTemplate
    closing: tuple[QuickPhaseTemplate, ...]


QUICK_INTERACTION_TEMPLATES: dict[str, QuickInteractionTemplate] = {
    "statsBriefing": QuickInteractionTemplate(
        opening=QuickPhaseTemplate(
            "Where do you point the briefing first?",
            (
                ChoiceTemplate(
                    "Review the watchlist movers",
                    "Go through players whose numbers shifted most this week.",
                    "Keeps the watchlist current.",
                    "priority",
                ),
                ChoiceTemplate(
                    "Scan an under-covered region",
                    "Filter for leagues nobody has visited lately.",
                    "May surface names other clubs have missed.",
                    "territory",
                ),
                ChoiceTemplate(
                    "Compare notes with the data team",
                    "Ask the analysts what caught their eye.",
                    "Builds goodwill with the people behind the numbers.",
                    "network",
                ),
            ),
        ),
        follow_ups={
            "priority": QuickPhaseTemplate(
                "One mover stands out. What next?",
                (
                    ChoiceTemplate(
                        "Book a live viewing",
                        "Put them on next week's schedule.",
                        "Turns a number into a first-hand read.",
                        "priority",
                    ),
                    ChoiceTemplate(
                        "Ask for video first",
                        "Request clips before committing a trip.",
                        "Cheaper, but less reliable.",
                        "technique",
                    ),
                ),
            ),
            "territory": QuickPhaseTemplate(
                "The region looks promising but thin on data. How do you follow up?",
                (
                    ChoiceTemplate(
                        "Send a scout for a week",
                        "Commit time to the region.",
                        "Broader coverage at the cost of other areas.",
                        "territory",
                    ),
                    ChoiceTemplate(
                        "Find a local contact",
                        "Lean on someone who already watches there.",
                        "Slower, but it keeps paying off.",
                        "network",
                    ),
                ),
            ),
        },
        default_follow_up=QuickPhaseTemplate(
            "The analysts flag a player nobody asked about. Do you look?",
            (
                ChoiceTemplate(
                    "Add them to the watchlist",
                    "Keep an eye on them without committing.",
                    "A cheap hedge.",
                    "priority",
                ),
                ChoiceTemplate(
                    "Dig into the model behind the flag",
                    "Understand why the numbers picked them out.",
                    "Sharpens how you read future briefings.",
                    "technique",
                ),
            ),
        ),
        closing=(
            QuickPhaseTemplate(
                "How do you share what came out of the briefing?",
                (
                    ChoiceTemplate(
                        "Short note to the head of recruitment",
                        "Summarise the headline names.",
                        "Keeps decision makers informed.",
                        "network",
                    ),
                    ChoiceTemplate(
                        "Keep it for your own planning",
                        "Fold it into next week's schedule.",
                        "Nothing travels until you are sure.",
                        "priority",
                    ),
                ),
            ),
        ),
    ),
    "assignTerritory": QuickInteractionTemplate(
        opening=QuickPhaseTemplate(
            "How do you deploy the network for the coming weeks?",
            (
                ChoiceTemplate(
                    "Concentrate on the home region",
                    "Stack coverage where the club already recruits.",
                    "Depth over breadth.",
                    "territory",
                ),
                ChoiceTemplate(
                    "Spread thin across new areas",
                    "Put one pair of eyes in several untested regions.",
                    "Breadth over depth.",
                    "territory",
                ),
                ChoiceTemplate(
                    "Follow the current shortlist",
                    "Send scouts wherever the shortlist plays.",
                    "Less discovery, firmer reads on known names.",
                    "priority",
                ),
            ),
        ),
        follow_ups={
            "territory": QuickPhaseTemplate(
                "A gap in coverage is flagged. How do you close it?",
                (
                    ChoiceTemplate(
                        "Move a scout across",
                        "Shift someone from a quieter area.",
                        "Closes the gap, opens another.",
                        "territory",
                    ),
                    ChoiceTemplate(
                        "Ask a trusted contact to cover",
                        "Call in a favour for a few weeks.",
                        "Keeps your own scouts where they are.",
                        "network",
                    ),
                ),
            ),
        },
        default_follow_up=QuickPhaseTemplate(
            "Two shortlisted players clash on the same weekend. Who gets the viewing?",
            (
                ChoiceTemplate(
                    "The younger one",
                    "Potential is harder to judge later.",
                    "An early read on a longer project.",
                    "priority",
                ),
                ChoiceTemplate(
                    "The one closer to a decision",
                    "The club needs an answer soon.",
                    "Helps the immediate window.",
                    "priority",
                ),
            ),
        ),
        closing=(
            QuickPhaseTemplate(
                "Final sign-off on the plan. Anything to adjust?",
                (
                    ChoiceTemplate(
                        "Lock it in as it is",
                        "No more changes this cycle.",
                        "Scouts can plan their travel.",
                        "territory",
                    ),
                    ChoiceTemplate(
                        "Leave one slot flexible",
                        "Hold back capacity for surprises.",
                        "Slightly less coverage, more room to react.",
                        "technique",
                    ),
                ),
            ),
        ),
    ),
}

QUICK_PHASE_DESCRIPTIONS: list[list[str]] = [
    [
        "The session opens and there is more on the table than time allows.",
        "You have a short window and several things competing for it.",
    ],
    [
        "Your first call shapes what comes up next.",
        "One decision made, a narrower one follows.",
    ],
    [
        "One last decision before it wraps up.",
        "The session is closing. A final call remains.",
    ],
]


def _phase_choices(template: QuickPhaseTemplate, phase_index: int, session_id: str) -> list[StrategicChoice]:
    return [
        StrategicChoice(
            id=f"{session_id}-p{phase_index}-c{j}",
            text=choice.text,
            description=choice.description,
            effect=choice.effect,
            outcome_type=choice.outcome_type,
        )
        for j, choice in enumerate(template.choices)
    ]


def populate_quick_interaction_phases(
    rng: random.Random,
    phases: list[SessionPhase],
    activity_type: str,
    session_id: str,
) -> None:
    """
    Fill a quick interaction session with strategic choices.

    Phases are filled up front, so the follow-up phase is picked from the
    outcome type of an opening choice drawn from the rng.
    """
    template = QUICK_INTERACTION_TEMPLATES.get(activity_type, QUICK_INTERACTION_TEMPLATES["statsBriefing"])
    sampled = rng.choice(template.opening.choices)
    follow_up = template.follow_ups.get(sampled.outcome_type, template.default_follow_up)

    for phase in phases:
        if phase.index == 0:
            phase_template = template.opening
        elif phase.index == 1:
            phase_template = follow_up
        else:
            phase_template = rng.choice(template.closing)
        lead = rng.choice(QUICK_PHASE_DESCRIPTIONS[min(phase.index, len(QUICK_PHASE_DESCRIPTIONS) - 1)])
        phase.description = f"{lead} {phase_template.prompt}"
        phase.choices = _phase_choices(phase_template, phase.index, session_id)
