"""Markdown session summary writer."""

from datetime import datetime
from pathlib import Path
from typing import Optional

from scoutbook.core.observation.reflection import ReflectionResult
from scoutbook.core.observation.session import get_session_result
from scoutbook.core.observation.types import ObservationSession
from scoutbook.logging.session_log import SessionLog


class MarkdownSessionWriter:
    """Generates markdown session summaries."""

    def write_session_summary(
        self,
        session: ObservationSession,
        session_log: SessionLog,
        output_path: Path,
        reflection: Optional[ReflectionResult] = None,
    ) -> None:
        """
        Write a complete session summary to a markdown file.

        Args:
            session: Session to summarise (any state past setup)
            session_log: Log of the session's events
            output_path: Path to write markdown file
            reflection: Reflection output, if reflection has run
        """
        with open(output_path, "w") as f:
            f.write(self.generate_summary_string(session, session_log, reflection))
            f.write("\n")

    def generate_summary_string(
        self,
        session: ObservationSession,
        session_log: SessionLog,
        reflection: Optional[ReflectionResult] = None,
    ) -> str:
        """Generate markdown summary as a string."""
        result = get_session_result(session)
        names = {p.player_id: p.name for p in session.players}
        lines = []

        lines.append(f"# Scouting Session: {session.activity_type}")
        lines.append("")
        lines.append(f"**Mode:** {session.mode.value} | **State:** {session.state.value} | "
                     f"**Week:** {session.started_at_week}, Season {session.started_at_season}")
        lines.append("")
        lines.append(f"**Phases:** {result.phases_completed}/{result.total_phases} | "
                     f"**Insight points:** {result.insight_points_earned} | "
                     f"**Quality:** {result.quality_tier}")
        lines.append("")

        # Focus
        lines.append("## Focus")
        lines.append("")
        if session_log.player_stats:
            lines.append("| Player | Allocations | Lens switches | Flags | Phases |")
            lines.append("|--------|:---:|:---:|:---:|:---:|")
            for player_id, stats in session_log.player_stats.items():
                player = session.get_player(player_id)
                phases = len(set(player.focused_phases)) if player else 0
                lines.append(f"| {names.get(player_id, player_id)} | {stats.allocations} | "
                             f"{stats.lens_switches} | {stats.flags} | {phases} |")
        else:
            lines.append("*No focus allocated*")
        lines.append("")

        # Flags
        lines.append("## Flagged Moments")
        lines.append("")
        if session.flagged_moments:
            for flag in session.flagged_moments:
                name = names.get(flag.moment.player_id, flag.moment.player_id)
                line = f"- **{flag.minute}'** {name} ({flag.reaction.value}): {flag.moment.description}"
                if flag.note:
                    line += f" *{flag.note}*"
                lines.append(line)
        else:
            lines.append("*No moments flagged*")
        lines.append("")

        if reflection is not None:
            lines.append("## Reflection")
            lines.append("")
            lines.append(reflection.session_summary)
            lines.append("")
            if reflection.suggested_hypotheses:
                lines.append("### Suggested Hypotheses")
                lines.append("")
                for suggestion in reflection.suggested_hypotheses:
                    lines.append(f"- [{suggestion.domain.value}] {suggestion.text} "
                                 f"({suggestion.evidence_strength})")
                lines.append("")
            if reflection.gut_feeling_candidate is not None:
                gut = reflection.gut_feeling_candidate
                lines.append("### Gut Feeling")
                lines.append("")
                lines.append(f"{gut.narrative} (reliability {gut.reliability:.0%})")
                if gut.pa_estimate is not None:
                    lines.append("")
                    lines.append(f"Potential estimate: {gut.pa_estimate[0]}-{gut.pa_estimate[1]}")
                lines.append("")

        if session.hypotheses:
            lines.append("## Hypotheses")
            lines.append("")
            for hypothesis in session.hypotheses:
                name = names.get(hypothesis.player_id, hypothesis.player_id)
                lines.append(f"- {name}: {hypothesis.text} ({hypothesis.state.value}, "
                             f"{len(hypothesis.evidence)} evidence)")
            lines.append("")

        if session.reflection_notes:
            lines.append("## Notes")
            lines.append("")
            for note in session.reflection_notes:
                lines.append(f"- {note}")
            lines.append("")

        # Timeline
        lines.append("## Timeline")
        lines.append("")
        by_phase = session_log.get_entries_by_phase()
        for phase_index in sorted(by_phase.keys()):
            lines.append(f"### Phase {phase_index + 1}")
            lines.append("")
            for entry in by_phase[phase_index]:
                lines.append(f"- **{entry.minute}'** {entry.description}")
            lines.append("")

        if session_log.rejections:
            lines.append(f"*{session_log.rejection_count} action(s) rejected*")
            lines.append("")

        lines.append("---")
        lines.append(f"*Generated by Scoutbook - {datetime.now().strftime('%Y-%m-%d %H:%M')}*")

        return "\n".join(lines)
