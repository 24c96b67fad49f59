"""Static curriculum-week table."""

from collections.abc import Iterable

from chm_assistant.models.knowledge import Phase
from chm_assistant.models.quiz import CurriculumWeek

TEST_PHASES = (Phase.M1, Phase.MCE, Phase.LCE)


class CurriculumCatalog:
    """Curriculum weeks grouped by phase, in week order."""

    def __init__(self, weeks: Iterable[CurriculumWeek]) -> None:
        """Index weeks by (phase, week). Duplicate entries raise ValueError."""
        self._weeks: dict[tuple[Phase, int], CurriculumWeek] = {}
        for week in weeks:
            key = (week.phase, week.week)
            if key in self._weeks:
                raise ValueError(f"Duplicate curriculum week: {week.phase} week {week.week}")
            self._weeks[key] = week

    def __len__(self) -> int:
        return len(self._weeks)

    def phases(self) -> list[Phase]:
        """Phases that practice tests can target."""
        return list(TEST_PHASES)

    def weeks(self, phase: Phase | str) -> list[CurriculumWeek]:
        """Weeks defined for a phase, ascending. Unknown phase codes raise ValueError."""
        target = Phase(phase)
        if target not in TEST_PHASES:
            raise ValueError(f"No curriculum weeks for phase {target}")
        return sorted(
            (w for (p, _), w in self._weeks.items() if p == target),
            key=lambda w: w.week,
        )

    def get_week(self, phase: Phase | str, week: int) -> CurriculumWeek | None:
        """A single week, or None if the table has no entry for it."""
        return self._weeks.get((Phase(phase), week))
