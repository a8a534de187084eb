"""Agent record and health/movement transitions."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple
import numpy as np


class HealthState(Enum):
    """Possible health states for an agent."""
    SUSCEPTIBLE = "susceptible"
    INFECTED = "infected"
    RECOVERED = "recovered"
    DEAD = "dead"


@dataclass(frozen=True)
class Agent:
    """
    Immutable agent on the toroidal grid.

    Coordinates are 1-based: x in [1, width], y in [1, height].
    `state_since` is the tick at which the agent entered `state`.
    Agents carry no id; the world addresses them by list index and
    replaces the whole record on every change.
    """
    x: int
    y: int
    state: HealthState
    state_since: int = 0

    @property
    def position(self):
        return (self.x, self.y)


def to_infected(agent: Agent, tick: int) -> Agent:
    return replace(agent, state=HealthState.INFECTED, state_since=tick)


def to_recovered(agent: Agent, tick: int) -> Agent:
    return replace(agent, state=HealthState.RECOVERED, state_since=tick)


def to_dead(agent: Agent, tick: int) -> Agent:
    return replace(agent, state=HealthState.DEAD, state_since=tick)


def wrap(value: int, size: int) -> int:
    """Wrap a 1-based coordinate onto [1, size]."""
    return (value - 1) % size + 1


def move(agent: Agent, width: int, height: int,
         rng: Optional[np.random.Generator] = None,
         offset: Optional[Tuple[int, int]] = None) -> Agent:
    """
    Random step in the Moore neighbourhood (staying put included).

    dx and dy are drawn independently from {-1, 0, 1}, so each of the
    nine outcomes is equally likely. Pass `offset` to apply a step that
    was already drawn, e.g. as part of a batch for the whole population.
    Dead agents never move.
    """
    if agent.state == HealthState.DEAD:
        return agent

    if offset is None:
        if rng is None:
            raise ValueError("move needs either rng or offset")
        offset = rng.integers(-1, 2, size=2)
    dx, dy = int(offset[0]), int(offset[1])
    return replace(agent,
                   x=wrap(agent.x + dx, width),
                   y=wrap(agent.y + dy, height))
