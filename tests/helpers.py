"""Config and population builders shared by the tests."""

from __future__ import annotations

from typing import List

from sir_abm.config import DiseaseConfig, GridConfig, PopulationConfig, SimulationConfig
from sir_abm.model.agent import Agent
from sir_abm.model.engine import SimulationEngine


def make_config(
    population: int = 200,
    infected: int = 5,
    duration: int = 5,
    death_probability: float = 0.1,
    width: int = 20,
    height: int = 20,
    seed: int | None = 1,
    **kwargs,
) -> SimulationConfig:
    return SimulationConfig(
        grid=GridConfig(width=width, height=height),
        population=PopulationConfig(size=population, initial_infected=infected),
        disease=DiseaseConfig(infection_duration=duration, death_probability=death_probability),
        seed=seed,
        **kwargs,
    )


def install_agents(engine: SimulationEngine, agents: List[Agent]) -> None:
    """Replace an engine's population and rebuild its occupancy index."""
    engine.agents = list(agents)
    engine.grid.clear()
    for i, agent in enumerate(engine.agents):
        engine.grid.place(i, agent.x, agent.y)


