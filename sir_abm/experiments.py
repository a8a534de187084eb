"""Replicate runs over several seeds and their aggregation."""

from typing import Dict, List, Sequence, TYPE_CHECKING
import numpy as np
from scipy import stats

from .model.engine import SimulationEngine
from .model.state import STATE_LABELS

if TYPE_CHECKING:
    from .config import SimulationConfig

History = Dict[str, List[int]]


def run_replicates(config: "SimulationConfig",
                   seeds: Sequence[int]) -> List[History]:
    """Run one simulation per seed, in seed order."""
    config.validate()
    return [
        SimulationEngine(config, rng=np.random.default_rng(seed)).run()
        for seed in seeds
    ]


def replicate_seeds(base_seed, count: int) -> List[int]:
    """Derive `count` independent seeds from a base seed (or entropy)."""
    seq = np.random.SeedSequence(base_seed)
    return [int(child.generate_state(1)[0]) for child in seq.spawn(count)]


def pad_histories(histories: Sequence[History]) -> Dict[str, np.ndarray]:
    """
    Stack histories into (runs, ticks) arrays per state.

    Shorter runs are padded with their final value: once nobody is
    infected the counts no longer change.
    """
    if not histories:
        raise ValueError("No histories to aggregate")
    length = max(len(h[STATE_LABELS[0]]) for h in histories)
    padded = {}
    for label in STATE_LABELS:
        rows = []
        for h in histories:
            values = h[label]
            rows.append(values + [values[-1]] * (length - len(values)))
        padded[label] = np.array(rows, dtype=np.int64)
    return padded


def summarize_replicates(histories: Sequence[History],
                         confidence: float = 0.95) -> Dict:
    """Per-tick mean and Student-t confidence half-width for each state."""
    padded = pad_histories(histories)
    n_runs = len(histories)
    mean = {label: arr.mean(axis=0) for label, arr in padded.items()}

    if n_runs > 1:
        t_crit = stats.t.ppf((1 + confidence) / 2, n_runs - 1)
        half_width = {
            label: t_crit * stats.sem(arr, axis=0)
            for label, arr in padded.items()
        }
    else:
        half_width = {label: np.zeros(arr.shape[1])
                      for label, arr in padded.items()}

    return {
        'runs': n_runs,
        'confidence': confidence,
        'mean': mean,
        'half_width': half_width,
        'durations': [len(h[STATE_LABELS[0]]) - 1 for h in histories],
    }
