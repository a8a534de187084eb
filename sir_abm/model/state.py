"""Snapshot and statistics history dataclasses for the SIR simulation."""

from dataclasses import dataclass, field
from typing import List, Dict, Tuple

from .agent import Agent, HealthState

STATE_LABELS = [s.value for s in HealthState]


@dataclass(frozen=True)
class SimulationState:
    """Snapshot of the simulation at the end of a tick."""
    tick: int
    agents: Tuple[Agent, ...]
    counts: Dict[str, int]


@dataclass
class StatisticsHistory:
    """Per-state population counts, one entry per tick from tick 0."""
    series: Dict[str, List[int]] = field(
        default_factory=lambda: {label: [] for label in STATE_LABELS})

    def append(self, counts: Dict[str, int]) -> None:
        """Record one tick; states absent from `counts` count as zero."""
        for label in STATE_LABELS:
            self.series[label].append(int(counts.get(label, 0)))

    def latest(self, state: HealthState) -> int:
        values = self.series[state.value]
        if not values:
            raise IndexError("No statistics recorded yet")
        return values[-1]

    def as_dict(self) -> Dict[str, List[int]]:
        return {label: list(values) for label, values in self.series.items()}

    def to_csv_rows(self) -> List[Dict]:
        return [
            {"tick": tick, **{label: self.series[label][tick]
                              for label in STATE_LABELS}}
            for tick in range(len(self))
        ]

    def __len__(self) -> int:
        return len(self.series[STATE_LABELS[0]])


def count_states(agents) -> Dict[str, int]:
    """Tally agents per health state, zero for absent states."""
    counts = {label: 0 for label in STATE_LABELS}
    for agent in agents:
        counts[agent.state.value] += 1
    return counts


def summarize_history(history: Dict[str, List[int]]) -> Dict:
    """Headline numbers of a finished run."""
    infected = history[HealthState.INFECTED.value]
    final = {label: history[label][-1] for label in STATE_LABELS}
    population = sum(final.values())
    resolved = final[HealthState.RECOVERED.value] + final[HealthState.DEAD.value]
    peak_tick = max(range(len(infected)), key=infected.__getitem__)

    return {
        'total_ticks': len(infected) - 1,
        'population': population,
        'final_counts': final,
        'peak_infected': infected[peak_tick],
        'peak_tick': peak_tick,
        'attack_rate': resolved / population if population > 0 else 0.0,
        'case_fatality': (final[HealthState.DEAD.value] / resolved
                          if resolved > 0 else 0.0)
    }
