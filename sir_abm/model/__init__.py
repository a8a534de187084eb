"""Model package for the SIR grid simulation."""

from .state import (SimulationState, StatisticsHistory, STATE_LABELS,
                    summarize_history)
from .grid import OccupancyGrid
from .agent import Agent, HealthState
from .engine import SimulationEngine, run_simulation

__all__ = [
    'SimulationState',
    'StatisticsHistory',
    'STATE_LABELS',
    'summarize_history',
    'OccupancyGrid',
    'Agent',
    'HealthState',
    'SimulationEngine',
    'run_simulation',
]
