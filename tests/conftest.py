"""Shared pytest fixtures for Scoutbook tests."""

import pytest

from scoutbook.config import ObservationSettings, reset_settings, set_settings
from scoutbook.core.enums import (
    LensType,
    MomentType,
    ObservationContext,
    ObservationMode,
    PhaseType,
    ScoutSkill,
)
from scoutbook.core.models import AttributeReading, Observation, Player, ScoutProfile
from scoutbook.core.observation import (
    PlayerMoment,
    PlayerPoolEntry,
    SessionConfig,
    SessionPhase,
    SessionPlayer,
    build_session,
)
from scoutbook.events import EventBus, SessionEvent


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture(autouse=True)
def default_settings():
    """Pin settings so environment variables cannot leak into tests."""
    settings = ObservationSettings(
        refill_tokens_at_halftime=True,
        flags_per_phase=1,
        gut_feeling_flag_threshold=2,
        max_reflection_prompts=4,
    )
    set_settings(settings)
    yield settings
    reset_settings()


# =============================================================================
# Players and scouts
# =============================================================================


@pytest.fixture
def players() -> dict[str, Player]:
    """Three players with known true values."""
    roster = [
        Player(
            id="p-ana", name="Ana Costa", position="CM", age=17,
            attributes={"passing": 15, "first_touch": 14, "dribbling": 12, "pace": 11,
                        "composure": 13, "positioning": 12, "consistency": 9},
            current_ability=80, potential_ability=150, form=1,
        ),
        Player(
            id="p-ben", name="Ben Adeyemi", position="ST", age=19,
            attributes={"pace": 17, "strength": 12, "stamina": 14, "shooting": 13},
            current_ability=95, potential_ability=130,
        ),
        Player(
            id="p-cai", name="Cai Morgan", position="CB", age=24,
            attributes={"heading": 14, "strength": 15, "positioning": 13},
            current_ability=110, potential_ability=118, form=-1,
        ),
    ]
    return {p.id: p for p in roster}


@pytest.fixture
def pool(players) -> list[PlayerPoolEntry]:
    return [PlayerPoolEntry(p.id, p.name, p.position) for p in players.values()]


@pytest.fixture
def scout() -> ScoutProfile:
    """An average scout with no perks."""
    return ScoutProfile(id="scout-1", name="Test Scout")


@pytest.fixture
def sharp_scout() -> ScoutProfile:
    """A skilled, intuitive scout."""
    return ScoutProfile(
        id="scout-2",
        name="Sharp Scout",
        skills={skill: 16 for skill in ScoutSkill},
        intuition=16,
    )


@pytest.fixture
def session_config(pool) -> SessionConfig:
    return SessionConfig(activity_type="schoolMatch", player_pool=pool, seed="fixture-seed")


# =============================================================================
# Hand-built sessions
# =============================================================================


def make_moment(
    moment_id: str,
    player_id: str,
    moment_type: MomentType = MomentType.TECHNICAL_ACTION,
    hints: tuple[str, ...] = ("passing",),
    is_standout: bool = False,
) -> PlayerMoment:
    return PlayerMoment(
        id=moment_id,
        player_id=player_id,
        moment_type=moment_type,
        description=f"Detailed: {moment_id}",
        vague_description=f"Vague: {moment_id}",
        attributes_hinted=list(hints),
        quality=8 if is_standout else 5,
        is_standout=is_standout,
    )


def make_phases() -> list[SessionPhase]:
    """Three build-up phases with one moment per player per phase."""
    phases = []
    for i, minute in enumerate((0, 45, 90)):
        phases.append(SessionPhase(
            index=i,
            minute=minute,
            description=f"Phase {i}",
            phase_type=PhaseType.BUILD_UP,
            moments=[
                make_moment(f"m{i}-ana", "p-ana", MomentType.TECHNICAL_ACTION, ("passing",), is_standout=i == 0),
                make_moment(f"m{i}-ben", "p-ben", MomentType.PHYSICAL_TEST, ("pace", "stamina")),
                make_moment(f"m{i}-cai", "p-cai", MomentType.CHARACTER_REVEAL, ("consistency",)),
            ],
        ))
    return phases


@pytest.fixture
def session(pool):
    """A three phase full observation session in setup."""
    return build_session(
        "session-test",
        ObservationMode.FULL_OBSERVATION,
        make_phases(),
        [SessionPlayer(e.player_id, e.name, e.position) for e in pool],
        activity_type="schoolMatch",
        week=5,
        season=2,
    )


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorded(bus) -> list[SessionEvent]:
    """Every event emitted on the bus, in order."""
    events: list[SessionEvent] = []
    bus.subscribe_all(events.append)
    return events


# =============================================================================
# Observation history
# =============================================================================


def make_observation(
    obs_id: str,
    player_id: str,
    week: int,
    readings: tuple[AttributeReading, ...] = (),
    season: int = 1,
    ability=None,
) -> Observation:
    return Observation(
        id=obs_id,
        player_id=player_id,
        week=week,
        season=season,
        context=ObservationContext.LIVE_MATCH,
        readings=readings,
        ability_reading=ability,
        focus_lens=LensType.GENERAL,
    )


@pytest.fixture
def moment_factory():
    return make_moment


@pytest.fixture
def observation_factory():
    return make_observation
