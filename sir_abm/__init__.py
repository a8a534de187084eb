"""Agent-based SIR epidemic simulation on a toroidal grid."""

from .config import ConfigError, SimulationConfig, default_config, load_config
from .model import SimulationEngine, run_simulation

__version__ = "0.1.0"

__all__ = [
    'ConfigError',
    'SimulationConfig',
    'default_config',
    'load_config',
    'SimulationEngine',
    'run_simulation',
]
