"""
Attention and focus.

Focus tokens are the scarce resource of an observation session. A token
puts a player under focus with a lens; the lens warms up over the first
phase, runs at full effectiveness for a few phases and then fatigues.
"""

from typing import Optional

from scoutbook.core.enums import LensType, ObservationMode, ScoutSkill
from scoutbook.core.observation.types import FocusAllocation, FocusTokenState

# =============================================================================
# Constants
# =============================================================================

TOKENS_PER_HALF: dict[ObservationMode, int] = {
    ObservationMode.FULL_OBSERVATION: 3,
    ObservationMode.INVESTIGATION: 2,
    ObservationMode.ANALYSIS: 1,
    ObservationMode.QUICK_INTERACTION: 0,
}

WARMUP_EFFECTIVENESS = 0.5  # First phase with a new lens
NORMAL_EFFECTIVENESS = 1.0
FATIGUE_ONSET_PHASE = 4  # Consecutive phases before fatigue sets in
FATIGUE_DECAY_PER_PHASE = 0.1
FATIGUE_EFFECTIVENESS_FLOOR = 0.7

PERIPHERAL_PHASE_WINDOW = 2  # Phases after focus ends that still count as peripheral

LENS_SKILL_BOOST = 3
TACTICAL_MENTAL_BOOST = 1

LENS_SKILLS: dict[LensType, ScoutSkill] = {
    LensType.TECHNICAL: ScoutSkill.TECHNICAL_EYE,
    LensType.PHYSICAL: ScoutSkill.PHYSICAL_ASSESSMENT,
    LensType.MENTAL: ScoutSkill.PSYCHOLOGICAL_READ,
    LensType.TACTICAL: ScoutSkill.TACTICAL_UNDERSTANDING,
}


# =============================================================================
# Token budget
# =============================================================================

def tokens_per_half(mode: ObservationMode) -> int:
    """Focus tokens granted per half for a session mode."""
    return TOKENS_PER_HALF[mode]


def create_focus_token_state(mode: ObservationMode) -> FocusTokenState:
    per_half = tokens_per_half(mode)
    return FocusTokenState(available=per_half, total=per_half)


# =============================================================================
# Allocation queries
# =============================================================================

def find_active_allocation(
    state: FocusTokenState,
    player_id: str,
    phase_index: int,
) -> Optional[FocusAllocation]:
    """
    Most recent allocation for a player that covers the given phase.

    An allocation covers phases start_phase..end_phase inclusive. When
    several cover the phase (a lens switch), the latest one wins.
    """
    best = None
    for allocation in state.allocations:
        if allocation.player_id != player_id:
            continue
        if allocation.start_phase <= phase_index <= allocation.end_phase:
            if best is None or allocation.start_phase >= best.start_phase:
                best = allocation
    return best


def focused_player_ids(state: FocusTokenState) -> list[str]:
    """Every player who held focus at some point, in first-focus order."""
    seen: list[str] = []
    for allocation in state.allocations:
        if allocation.player_id not in seen:
            seen.append(allocation.player_id)
    return seen


# =============================================================================
# Lens effectiveness
# =============================================================================

def lens_effectiveness(
    state: FocusTokenState,
    player_id: str,
    lens: LensType,
    phase_index: int,
) -> float:
    """
    Multiplier for how well a lens is reading a player at a phase.

    Returns:
        0.0 if the player is not focused with this lens, 0.5 on the first
        phase, 1.0 for phases 2-4, then -0.1 per phase down to 0.7.
    """
    allocation = find_active_allocation(state, player_id, phase_index)
    if allocation is None or allocation.lens != lens:
        return 0.0

    # Phases the lens has been on this player, up to and including this one
    consecutive = phase_index - allocation.start_phase + 1
    if consecutive <= 1:
        return WARMUP_EFFECTIVENESS
    if consecutive <= FATIGUE_ONSET_PHASE:
        return NORMAL_EFFECTIVENESS

    fatigued = NORMAL_EFFECTIVENESS - (consecutive - FATIGUE_ONSET_PHASE) * FATIGUE_DECAY_PER_PHASE
    return max(FATIGUE_EFFECTIVENESS_FLOOR, round(fatigued, 2))


def observation_quality(state: FocusTokenState, player_id: str, phase_index: int) -> str:
    """'focused', 'peripheral' (focus ended within 2 phases) or 'unfocused'."""
    if find_active_allocation(state, player_id, phase_index) is not None:
        return "focused"

    for allocation in state.allocations:
        if allocation.player_id != player_id:
            continue
        phases_since = phase_index - allocation.end_phase
        if 0 < phases_since <= PERIPHERAL_PHASE_WINDOW:
            return "peripheral"

    return "unfocused"


# =============================================================================
# Lens bonuses
# =============================================================================

def lens_skill_boosts(
    lens: Optional[LensType],
    effectiveness: float = NORMAL_EFFECTIVENESS,
) -> dict[ScoutSkill, int]:
    """
    Transient scout skill boosts while observing through a lens.

    +3 to the lens skill (tactical also reads mentality, +1). Boosts scale
    with lens effectiveness, so a lens still warming up or fatigued helps
    less; boosts that round to zero are dropped.
    """
    if lens is None or lens not in LENS_SKILLS:
        return {}
    boosts = {LENS_SKILLS[lens]: LENS_SKILL_BOOST}
    if lens == LensType.TACTICAL:
        boosts[ScoutSkill.PSYCHOLOGICAL_READ] = TACTICAL_MENTAL_BOOST
    scaled = {skill: int(round(boost * effectiveness)) for skill, boost in boosts.items()}
    return {skill: boost for skill, boost in scaled.items() if boost > 0}
