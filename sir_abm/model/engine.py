"""Simulation engine for the SIR grid epidemic."""

import numpy as np
from typing import List, Dict, Optional, TYPE_CHECKING

from .grid import OccupancyGrid
from .agent import (Agent, HealthState, move, to_dead, to_infected,
                    to_recovered)
from .state import (SimulationState, StatisticsHistory, count_states,
                    summarize_history)

if TYPE_CHECKING:
    from ..config import SimulationConfig


class SimulationEngine:
    """
    Owns the world and advances it one tick at a time.

    Each tick runs, in order:
    1. Health update (recoveries, deaths, new infections)
    2. Movement on the torus and rebuild of the occupancy index
    3. Statistics recording
    """

    def __init__(self, config: "SimulationConfig",
                 rng: Optional[np.random.Generator] = None):
        config.validate()
        self.config = config
        self.current_tick = 0
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)

        self.width = config.grid.width
        self.height = config.grid.height
        self.infection_duration = config.disease.infection_duration
        self.death_probability = config.disease.death_probability

        self.grid = OccupancyGrid(self.width, self.height)
        self.agents: List[Agent] = []
        self._spawn_agents()

        self.history = StatisticsHistory()
        self.record_statistics()

    def _spawn_agents(self) -> None:
        """Scatter the population uniformly; the first agents start infected."""
        size = self.config.population.size
        infected = self.config.population.initial_infected
        xs = self.rng.integers(1, self.width + 1, size=size)
        ys = self.rng.integers(1, self.height + 1, size=size)

        for i in range(size):
            state = (HealthState.INFECTED if i < infected
                     else HealthState.SUSCEPTIBLE)
            agent = Agent(x=int(xs[i]), y=int(ys[i]), state=state, state_since=0)
            self.agents.append(agent)
            self.grid.place(i, agent.x, agent.y)

    def update_health(self) -> None:
        """
        Resolve infections for the current tick.

        Agents infected during this tick (state_since == current_tick) do
        not infect others until the next tick, so infection never chains
        within a tick regardless of iteration order.
        """
        tick = self.current_tick
        agents = self.agents
        for i in range(len(agents)):
            agent = agents[i]
            if agent.state != HealthState.INFECTED:
                continue

            if tick - agent.state_since > self.infection_duration:
                if self.rng.random() < self.death_probability:
                    agents[i] = to_dead(agent, tick)
                else:
                    agents[i] = to_recovered(agent, tick)
            elif agent.state_since != tick:
                for j in self.grid.agents_at(agent.x, agent.y):
                    if agents[j].state == HealthState.SUSCEPTIBLE:
                        agents[j] = to_infected(agents[j], tick)

    def move_agents(self) -> None:
        """
        Move every living agent and rebuild the occupancy index.

        Offsets for the whole population are drawn in one batch and
        handed to `move`.
        """
        self.grid.clear()
        offsets = self.rng.integers(-1, 2, size=(len(self.agents), 2))
        for i, agent in enumerate(self.agents):
            moved = move(agent, self.width, self.height, offset=offsets[i])
            self.agents[i] = moved
            self.grid.place(i, moved.x, moved.y)

    def record_statistics(self) -> Dict[str, int]:
        """Append this tick's per-state counts to the history."""
        counts = count_states(self.agents)
        self.history.append(counts)
        return counts

    def step(self) -> SimulationState:
        """Execute one tick and return its snapshot."""
        self.current_tick += 1
        self.update_health()
        self.move_agents()
        counts = self.record_statistics()
        return SimulationState(
            tick=self.current_tick,
            agents=tuple(self.agents),
            counts=counts
        )

    def snapshot(self) -> SimulationState:
        """Snapshot of the current tick without advancing."""
        return SimulationState(
            tick=self.current_tick,
            agents=tuple(self.agents),
            counts=count_states(self.agents)
        )

    def is_finished(self) -> bool:
        """Check if simulation should terminate."""
        if self.history.latest(HealthState.INFECTED) == 0:
            return True
        max_ticks = self.config.max_ticks
        return max_ticks is not None and self.current_tick >= max_ticks

    def run(self) -> Dict[str, List[int]]:
        """Step until nobody is infected; return per-state tick series."""
        while not self.is_finished():
            self.step()
        return self.history.as_dict()

    def get_summary(self) -> Dict:
        """Get summary statistics for the simulation."""
        return summarize_history(self.history.series)


def run_simulation(config: "SimulationConfig",
                   rng: Optional[np.random.Generator] = None
                   ) -> Dict[str, List[int]]:
    """Run one simulation to termination and return its statistics."""
    return SimulationEngine(config, rng=rng).run()
