"""
Lens-driven visibility.

Decides what a scout actually sees of a moment:

- unfocused: the vague description and no attribute hints
- focused, general lens: the detailed description, the moment's hints and
  the phase type's natural attributes in the moment's domain
- focused, lens matching the moment's domain: the general set plus up to
  two deeper attributes from that domain
- focused, any other lens: the detailed description and the single
  primary hint
"""

from typing import Optional

from scoutbook.core.enums import (
    DOMAIN_ATTRIBUTES,
    LensType,
    PhaseType,
    get_attribute_domain,
)
from scoutbook.core.observation.types import (
    MomentView,
    PhaseView,
    PlayerMoment,
    SessionPhase,
    SessionPlayer,
)

# Attributes each phase type naturally exposes
PHASE_VISIBLE_ATTRIBUTES: dict[PhaseType, tuple[str, ...]] = {
    PhaseType.BUILD_UP: (
        "passing", "first_touch", "dribbling", "composure", "positioning", "decision_making",
    ),
    PhaseType.TRANSITION: (
        "pace", "stamina", "agility", "decision_making", "passing", "off_the_ball",
    ),
    PhaseType.SET_PIECE: (
        "heading", "strength", "crossing", "composure", "positioning", "defensive_awareness",
    ),
    PhaseType.PRESSING_SEQUENCE: (
        "stamina", "work_rate", "pressing", "defensive_awareness", "agility", "decision_making",
    ),
    PhaseType.COUNTER_ATTACK: (
        "pace", "agility", "dribbling", "shooting", "composure", "off_the_ball",
    ),
    PhaseType.POSSESSION: (
        "passing", "first_touch", "positioning", "decision_making", "off_the_ball", "composure",
    ),
}

MAX_DEEPER_HINTS = 2


def _phase_attributes_in_domain(moment: PlayerMoment, phase: SessionPhase) -> list[str]:
    if phase.phase_type is None:
        return []
    return [
        attr for attr in PHASE_VISIBLE_ATTRIBUTES[phase.phase_type]
        if get_attribute_domain(attr) == moment.domain
    ]


def visible_attributes(
    moment: PlayerMoment,
    phase: SessionPhase,
    lens: Optional[LensType],
) -> list[str]:
    """
    Attributes revealed by a moment to a scout watching through a lens.

    Args:
        moment: The moment being watched
        phase: Phase the moment belongs to
        lens: Lens on the moment's player, or None if the player is unfocused

    Returns:
        Attribute names in reveal order, without duplicates
    """
    if lens is None:
        return []

    if lens != LensType.GENERAL and lens.domain != moment.domain:
        return list(moment.attributes_hinted[:1])

    revealed: list[str] = []
    for attr in list(moment.attributes_hinted) + _phase_attributes_in_domain(moment, phase):
        if attr not in revealed:
            revealed.append(attr)

    if lens != LensType.GENERAL:
        deeper = [a for a in DOMAIN_ATTRIBUTES[lens.domain] if a not in revealed]
        revealed.extend(deeper[:MAX_DEEPER_HINTS])

    return revealed


def peripheral_attributes(moment: PlayerMoment) -> list[str]:
    """The primary hint of a moment caught shortly after focus moved away."""
    return list(moment.attributes_hinted[:1])


def moment_view(
    moment: PlayerMoment,
    phase: SessionPhase,
    player: Optional[SessionPlayer],
) -> MomentView:
    """Render a moment the way the scout currently perceives it."""
    focused = player is not None and player.is_focused
    if not focused:
        return MomentView(
            moment_id=moment.id,
            player_id=None,
            moment_type=moment.moment_type,
            description=moment.vague_description,
            attributes_hinted=(),
            is_focused=False,
            lens=None,
            is_standout=False,
            pressure_context=moment.pressure_context,
        )

    lens = player.current_lens or LensType.GENERAL
    return MomentView(
        moment_id=moment.id,
        player_id=moment.player_id,
        moment_type=moment.moment_type,
        description=moment.description,
        attributes_hinted=tuple(visible_attributes(moment, phase, lens)),
        is_focused=True,
        lens=lens,
        is_standout=moment.is_standout,
        pressure_context=moment.pressure_context,
    )


def phase_view(phase: SessionPhase, players: list[SessionPlayer]) -> PhaseView:
    """Render a whole phase for presentation."""
    by_id = {p.player_id: p for p in players}
    return PhaseView(
        index=phase.index,
        minute=phase.minute,
        description=phase.description,
        is_halftime=phase.is_halftime,
        moments=tuple(moment_view(m, phase, by_id.get(m.player_id)) for m in phase.moments),
        atmosphere_event=phase.atmosphere_event,
        dialogue_nodes=tuple(phase.dialogue_nodes),
        data_points=tuple(phase.data_points),
        choices=tuple(phase.choices),
    )
