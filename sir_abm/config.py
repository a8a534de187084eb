"""Configuration dataclasses and YAML loader for the SIR grid simulation."""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from pathlib import Path
import yaml


class ConfigError(ValueError):
    """Raised when a simulation configuration is invalid."""


@dataclass
class GridConfig:
    width: int
    height: int


@dataclass
class PopulationConfig:
    size: int
    initial_infected: int


@dataclass
class DiseaseConfig:
    infection_duration: int   # ticks an agent stays infectious
    death_probability: float  # chance of dying when the infection ends


@dataclass
class SimulationConfig:
    grid: GridConfig
    population: PopulationConfig
    disease: DiseaseConfig

    seed: Optional[int] = None
    max_ticks: Optional[int] = None
    replicates: int = 1

    # Export flags (can be overridden by CLI)
    csv_enabled: bool = True
    plot_enabled: bool = True
    snapshot_enabled: bool = False
    gif_enabled: bool = False
    quiet: bool = False
    out_dir: Path = field(default_factory=lambda: Path("./output"))

    def validate(self) -> None:
        """Reject configurations the simulation cannot run."""
        if self.grid.width < 1:
            raise ConfigError(f"grid.width must be >= 1, got {self.grid.width}")
        if self.grid.height < 1:
            raise ConfigError(f"grid.height must be >= 1, got {self.grid.height}")
        if self.population.size < 0:
            raise ConfigError(
                f"population.size must be >= 0, got {self.population.size}")
        infected = self.population.initial_infected
        if infected < 0:
            raise ConfigError(
                f"population.initial_infected must be >= 0, got {infected}")
        if infected > self.population.size:
            raise ConfigError(
                f"population.initial_infected ({infected}) exceeds "
                f"population.size ({self.population.size})")
        if self.disease.infection_duration < 0:
            raise ConfigError(
                "disease.infection_duration must be >= 0, "
                f"got {self.disease.infection_duration}")
        if not 0.0 <= self.disease.death_probability <= 1.0:
            raise ConfigError(
                "disease.death_probability must be in [0, 1], "
                f"got {self.disease.death_probability}")
        if self.max_ticks is not None and self.max_ticks < 0:
            raise ConfigError(f"max_ticks must be >= 0, got {self.max_ticks}")
        if self.replicates < 1:
            raise ConfigError(f"replicates must be >= 1, got {self.replicates}")


def default_config() -> SimulationConfig:
    """Reference scenario: 2000 agents on a 100x100 torus."""
    return SimulationConfig(
        grid=GridConfig(width=100, height=100),
        population=PopulationConfig(size=2000, initial_infected=10),
        disease=DiseaseConfig(infection_duration=21, death_probability=0.05)
    )


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Fetch a required top-level section from raw YAML data."""
    section = raw.get(name)
    if not isinstance(section, dict):
        raise ConfigError(f"Missing required section: {name}")
    return section


def _optional_section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Fetch an optional top-level section; absent or null means empty."""
    section = raw.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"Section {name} must be a mapping")
    return section


_REQUIRED = object()


def _value(section: Dict[str, Any], path: str, default):
    """Raw value for the last component of `path`, or `default` if absent."""
    key = path.rsplit('.', 1)[-1]
    if key not in section:
        if default is _REQUIRED:
            raise ConfigError(f"Missing required key: {path}")
        return default
    return section[key]


def _integer(section: Dict[str, Any], path: str, default=_REQUIRED):
    value = _value(section, path, default)
    if value is None and default is None:
        return None
    # bool is an int subclass; `width: yes` is a typo, not a number
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ConfigError(f"{path} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{path} must be an integer, got {value!r}") from e


def _float(section: Dict[str, Any], path: str, default=_REQUIRED) -> float:
    value = _value(section, path, default)
    if isinstance(value, bool):
        raise ConfigError(f"{path} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{path} must be a number, got {value!r}") from e


def _flag(section: Dict[str, Any], path: str, default: bool) -> bool:
    value = _value(section, path, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{path} must be true or false, got {value!r}")
    return value


def load_config(config_path: Path) -> SimulationConfig:
    """Load and validate YAML configuration file."""
    with open(config_path) as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(
            f"Configuration must be a mapping of sections, got {type(raw).__name__}")

    grid_raw = _section(raw, 'grid')
    pop_raw = _section(raw, 'population')
    disease_raw = _section(raw, 'disease')

    grid = GridConfig(
        width=_integer(grid_raw, 'grid.width'),
        height=_integer(grid_raw, 'grid.height')
    )
    population = PopulationConfig(
        size=_integer(pop_raw, 'population.size'),
        initial_infected=_integer(pop_raw, 'population.initial_infected', 1)
    )
    disease = DiseaseConfig(
        infection_duration=_integer(disease_raw, 'disease.infection_duration'),
        death_probability=_float(disease_raw, 'disease.death_probability')
    )

    # Optional sections
    sim_raw = _optional_section(raw, 'simulation')
    export_raw = _optional_section(raw, 'export')

    config = SimulationConfig(
        grid=grid,
        population=population,
        disease=disease,
        seed=_integer(sim_raw, 'simulation.seed', None),
        max_ticks=_integer(sim_raw, 'simulation.max_ticks', None),
        replicates=_integer(sim_raw, 'simulation.replicates', 1),
        csv_enabled=_flag(export_raw, 'export.csv', True),
        plot_enabled=_flag(export_raw, 'export.plot', True),
        snapshot_enabled=_flag(export_raw, 'export.snapshot', False),
        gif_enabled=_flag(export_raw, 'export.gif', False)
    )
    config.validate()
    return config
