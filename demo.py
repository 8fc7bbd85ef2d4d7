#!/usr/bin/env python3
"""Demo script: run one scripted observation session end to end."""

import random
from pathlib import Path

from scoutbook.core.enums import ALL_ATTRIBUTES, LensType, Perk, Reaction, ScoutSkill, SessionState
from scoutbook.core.models import Player, ScoutProfile
from scoutbook.core.observation import (
    PlayerPoolEntry,
    SessionConfig,
    accept_hypothesis,
    add_reflection_note,
    advance_phase,
    allocate_focus,
    begin_session,
    complete_reflection,
    create_session,
    flag_moment,
    get_session_result,
    reflect,
    view_phase,
)
from scoutbook.core.perception import build_perceived_profile, confidence_label, observe_session
from scoutbook.events import EventBus, MomentFlaggedEvent, PhaseAdvancedEvent
from scoutbook.logging import MarkdownSessionWriter, SessionLog

NAMES = ["Tomas Reyes", "Kwame Boateng", "Luca Ferri", "Jonah Price", "Emre Yilmaz", "Sam Okafor"]
POSITIONS = ["CM", "ST", "CB", "LW", "DM", "GK"]


def make_player(rng: random.Random, index: int) -> Player:
    return Player(
        id=f"player-{index}",
        name=NAMES[index],
        position=POSITIONS[index],
        age=rng.randint(15, 19),
        attributes={attr: rng.randint(4, 18) for attr in ALL_ATTRIBUTES},
        current_ability=rng.randint(40, 110),
        potential_ability=rng.randint(110, 180),
        form=rng.randint(-1, 2),
    )


def main():
    """Run a demo scouting session."""
    print("=" * 60)
    print("SCOUTBOOK - Observation Session Demo")
    print("=" * 60)
    print()

    rng = random.Random(7)
    players = {p.id: p for p in (make_player(rng, i) for i in range(len(NAMES)))}
    scout = ScoutProfile(
        name="Demo Scout",
        skills={skill: 14 for skill in ScoutSkill},
        intuition=15,
        perks=frozenset({Perk.PA_ESTIMATE}),
    )

    config = SessionConfig(
        activity_type="schoolMatch",
        player_pool=[PlayerPoolEntry(p.id, p.name, p.position) for p in players.values()],
        seed="demo",
        target_player_id="player-0",
    )
    session = create_session(config)
    print(f"Session {session.id}: {len(session.phases)} phases, halftime at {session.halftime_index}")

    bus = EventBus()
    log = SessionLog(session.id)
    log.connect_to_event_bus(bus)

    def on_flag(event: MomentFlaggedEvent):
        print(f"  Flagged {event.moment_id} ({event.reaction})")

    def on_phase(event: PhaseAdvancedEvent):
        marker = " [halftime]" if event.is_halftime else ""
        print(f"Phase {event.to_phase + 1}{marker}")

    bus.subscribe(MomentFlaggedEvent, on_flag, session_id=session.id)
    bus.subscribe(PhaseAdvancedEvent, on_phase, session_id=session.id)

    begin_session(session, bus)
    allocate_focus(session, "player-0", LensType.TECHNICAL, bus)
    allocate_focus(session, "player-1", LensType.PHYSICAL, bus)
    print("Phase 1")

    while session.state == SessionState.ACTIVE:
        view = view_phase(session)
        focused = [m for m in view.moments if m.player_id is not None]
        if focused:
            best = max(focused, key=lambda m: len(m.attributes_hinted))
            reaction = Reaction.PROMISING if best.is_standout or rng.random() < 0.6 else Reaction.CONCERNING
            flag_moment(session, best.moment_id, reaction, bus=bus)
        advance_phase(session, bus=bus)

    print()
    result = reflect(session, scout, players)
    print(result.session_summary)
    for prompt in result.reflection_prompts:
        print(f"  ? {prompt}")
    for suggestion in result.suggested_hypotheses:
        print(f"  Suggested: {suggestion.text}")
    if result.gut_feeling_candidate:
        print(f"  Gut feeling: {result.gut_feeling_candidate.narrative}")

    if result.suggested_hypotheses:
        first = result.suggested_hypotheses[0]
        accept_hypothesis(session, first.player_id, first.text, first.domain,
                          hypothesis_id=first.id, bus=bus)
    add_reflection_note(session, "Worth a second look at the next trial.", bus)

    observations = observe_session(session, players, scout)
    complete_reflection(session, bus)

    print()
    for observation in observations:
        player = players[observation.player_id]
        profile = build_perceived_profile(observations, scout, player.id, player.age)
        print(f"{player.name} ({player.position}, {player.age})")
        for name, reading in sorted(profile.readings.items()):
            print(f"  {name:<16} {reading.range_low:>2}-{reading.range_high:<2} "
                  f"({confidence_label(reading.confidence)}; true {player.get(name)})")
        if profile.ability:
            print(f"  CA {profile.ability.ca_low}-{profile.ability.ca_high} (true {player.current_ability}), "
                  f"PA {profile.ability.pa_low}-{profile.ability.pa_high} (true {player.potential_ability})")

    final = get_session_result(session)
    print()
    print(f"Insight points: {final.insight_points_earned} ({final.quality_tier})")

    output = Path("session_summary.md")
    MarkdownSessionWriter().write_session_summary(session, log, output, result)
    print(f"Summary written to {output}")


if __name__ == "__main__":
    main()
