"""Tests for the simulation engine and driver loop."""

from __future__ import annotations

import numpy as np
import pytest

from sir_abm.config import ConfigError
from sir_abm.model.agent import Agent, HealthState
from sir_abm.model.engine import SimulationEngine, run_simulation
from sir_abm.model.state import STATE_LABELS
from tests.helpers import install_agents, make_config

S = HealthState.SUSCEPTIBLE
I = HealthState.INFECTED
R = HealthState.RECOVERED
D = HealthState.DEAD


class TestConstruction:
    def test_population_and_initial_counts(self, small_config) -> None:
        engine = SimulationEngine(small_config)
        assert len(engine.agents) == 200
        assert len(engine.grid) == 200
        assert engine.history.as_dict() == {
            "susceptible": [195],
            "infected": [5],
            "recovered": [0],
            "dead": [0],
        }

    def test_first_agents_start_infected(self, small_config) -> None:
        engine = SimulationEngine(small_config)
        states = [a.state for a in engine.agents]
        assert states[:5] == [I] * 5
        assert all(s == S for s in states[5:])
        assert all(a.state_since == 0 for a in engine.agents)

    def test_positions_within_grid(self) -> None:
        engine = SimulationEngine(make_config(width=7, height=3))
        assert all(1 <= a.x <= 7 and 1 <= a.y <= 3 for a in engine.agents)

    def test_invalid_config_rejected(self) -> None:
        with pytest.raises(ConfigError):
            SimulationEngine(make_config(population=5, infected=6))

    def test_injected_rng_overrides_seed(self) -> None:
        config = make_config(seed=None)
        a = SimulationEngine(config, rng=np.random.default_rng(3)).run()
        b = SimulationEngine(config, rng=np.random.default_rng(3)).run()
        assert a == b


class TestHealthUpdate:
    def _engine(self, agents, duration=5, death_probability=0.0, tick=1):
        engine = SimulationEngine(
            make_config(population=len(agents), infected=0, duration=duration,
                        death_probability=death_probability, width=5, height=5)
        )
        install_agents(engine, agents)
        engine.current_tick = tick
        return engine

    def test_infects_colocated_susceptibles_only(self) -> None:
        engine = self._engine([
            Agent(1, 1, I, 0),
            Agent(1, 1, S, 0),
            Agent(2, 2, S, 0),
            Agent(1, 1, R, 0),
        ])
        engine.update_health()
        assert engine.agents[1] == Agent(1, 1, I, 1)
        assert engine.agents[2] == Agent(2, 2, S, 0)
        assert engine.agents[3] == Agent(1, 1, R, 0)

    def test_agent_infected_this_tick_does_not_spread(self) -> None:
        engine = self._engine([
            Agent(3, 3, S, 0),
            Agent(3, 3, I, 4),
        ], tick=4)
        engine.update_health()
        assert engine.agents[0].state == S

    def test_recovers_only_after_duration_exceeded(self) -> None:
        engine = self._engine([Agent(1, 1, I, 0)], duration=2, tick=2)
        engine.update_health()
        assert engine.agents[0].state == I

        engine.current_tick = 3
        engine.update_health()
        assert engine.agents[0] == Agent(1, 1, R, 3)

    def test_death_probability_one_always_kills(self) -> None:
        agents = [Agent(x, 1, I, 0) for x in range(1, 6)]
        engine = self._engine(agents, duration=0, death_probability=1.0)
        engine.update_health()
        assert all(a == Agent(a.x, 1, D, 1) for a in engine.agents)

    def test_resolving_agent_does_not_infect(self) -> None:
        engine = self._engine([
            Agent(2, 2, I, 0),
            Agent(2, 2, S, 0),
        ], duration=0)
        engine.update_health()
        assert engine.agents[0].state == R
        assert engine.agents[1].state == S

    def test_isolated_infected_cannot_grow(self) -> None:
        agents = [
            Agent(1, 1, I, 0),
            Agent(1, 1, I, 0),
            Agent(3, 3, S, 0),
            Agent(5, 5, S, 0),
            Agent(3, 5, R, 0),
        ]
        still_sick = self._engine(agents, duration=5, tick=0)
        assert still_sick.step().counts["infected"] == 2

        resolving = self._engine(agents, duration=0, tick=0)
        assert resolving.step().counts["infected"] == 0


class TestMovement:
    def test_index_matches_positions_after_move(self, small_config) -> None:
        engine = SimulationEngine(small_config)
        for _ in range(5):
            engine.step()
            seen = []
            for x, y, ids in engine.grid.occupied_cells():
                for i in ids:
                    assert engine.agents[i].position == (x, y)
                    seen.append(i)
            assert sorted(seen) == list(range(len(engine.agents)))

    def test_movement_keeps_health_state(self, small_config) -> None:
        engine = SimulationEngine(small_config)
        before = [(a.state, a.state_since) for a in engine.agents]
        engine.move_agents()
        assert [(a.state, a.state_since) for a in engine.agents] == before


class TestRunInvariants:
    def test_counts_sum_to_population(self) -> None:
        history = run_simulation(make_config(seed=11))
        ticks = len(history["infected"])
        for t in range(ticks):
            assert sum(history[label][t] for label in STATE_LABELS) == 200

    def test_stops_when_infected_first_reaches_zero(self) -> None:
        history = run_simulation(make_config(seed=5))
        infected = history["infected"]
        assert infected[-1] == 0
        assert all(count > 0 for count in infected[:-1])

    def test_infected_never_grows_without_contact(self) -> None:
        engine = SimulationEngine(make_config(seed=12))
        quiet_ticks = 0
        while not engine.is_finished():
            before = engine.history.latest(I)
            contact = any(
                any(engine.agents[i].state == I for i in ids)
                and any(engine.agents[i].state == S for i in ids)
                for _, _, ids in engine.grid.occupied_cells()
            )
            engine.step()
            if not contact:
                quiet_ticks += 1
                assert engine.history.latest(I) <= before
        assert quiet_ticks > 0

    def test_dead_agents_never_move_or_change(self) -> None:
        engine = SimulationEngine(make_config(duration=2, death_probability=0.5, seed=8))
        dead = {}
        while not engine.is_finished():
            engine.step()
            for i, agent in enumerate(engine.agents):
                if i in dead:
                    assert agent == dead[i]
                elif agent.state == D:
                    dead[i] = agent
        assert dead

    def test_state_since_never_in_future(self) -> None:
        engine = SimulationEngine(make_config(seed=9))
        while not engine.is_finished():
            engine.step()
            assert all(a.state_since <= engine.current_tick for a in engine.agents)

    def test_same_seed_same_history(self) -> None:
        assert run_simulation(make_config(seed=42)) == run_simulation(make_config(seed=42))

    def test_different_seeds_usually_differ(self) -> None:
        runs = {tuple(run_simulation(make_config(seed=s))["infected"]) for s in range(5)}
        assert len(runs) > 1

    def test_reference_scenario_terminates(self) -> None:
        config = make_config(population=2000, infected=10, duration=21,
                             death_probability=0.05, width=100, height=100, seed=2024)
        history = run_simulation(config)
        assert history["infected"][-1] == 0
        final = {label: history[label][-1] for label in STATE_LABELS}
        assert final["susceptible"] + final["recovered"] + final["dead"] == 2000
        assert final["recovered"] + final["dead"] >= 10


class TestBoundaries:
    def test_no_initial_infected_runs_no_ticks(self) -> None:
        engine = SimulationEngine(make_config(infected=0))
        history = engine.run()
        assert engine.current_tick == 0
        assert history == {"susceptible": [200], "infected": [0],
                           "recovered": [0], "dead": [0]}

    def test_death_probability_one_leaves_no_recovered(self) -> None:
        history = run_simulation(make_config(death_probability=1.0, seed=4))
        assert history["recovered"][-1] == 0
        assert history["dead"][-1] >= 5

    def test_death_probability_zero_leaves_no_dead(self) -> None:
        history = run_simulation(make_config(death_probability=0.0, seed=4))
        assert history["dead"][-1] == 0
        assert history["recovered"][-1] >= 5

    def test_everyone_infected_resolves_after_duration(self) -> None:
        history = run_simulation(
            make_config(population=50, infected=50, duration=3, death_probability=0.0)
        )
        assert history["infected"] == [50, 50, 50, 50, 0]
        assert history["recovered"] == [0, 0, 0, 0, 50]
        assert set(history["susceptible"]) == {0}

    def test_empty_population(self) -> None:
        history = run_simulation(make_config(population=0, infected=0))
        assert history == {label: [0] for label in STATE_LABELS}

    def test_max_ticks_caps_run(self) -> None:
        engine = SimulationEngine(make_config(duration=1000, max_ticks=5))
        history = engine.run()
        assert engine.current_tick == 5
        assert len(history["infected"]) == 6
        assert history["infected"][-1] > 0


class TestSnapshotAndSummary:
    def test_step_returns_matching_snapshot(self, small_config) -> None:
        engine = SimulationEngine(small_config)
        state = engine.step()
        assert state.tick == 1
        assert len(state.agents) == 200
        assert state.counts == {label: engine.history.series[label][-1]
                                for label in STATE_LABELS}

    def test_history_rows_one_per_tick(self, small_config) -> None:
        engine = SimulationEngine(small_config)
        engine.step()
        engine.step()
        rows = engine.history.to_csv_rows()
        assert [r["tick"] for r in rows] == [0, 1, 2]
        assert rows[0] == {"tick": 0, "susceptible": 195, "infected": 5,
                           "recovered": 0, "dead": 0}
        assert rows[2]["infected"] == engine.history.series["infected"][2]

    def test_summary_fields(self) -> None:
        engine = SimulationEngine(make_config(death_probability=1.0, seed=6))
        engine.run()
        summary = engine.get_summary()
        assert summary["total_ticks"] == engine.current_tick
        assert summary["population"] == 200
        assert summary["final_counts"]["infected"] == 0
        assert summary["case_fatality"] == 1.0
        infected = engine.history.series["infected"]
        assert summary["peak_infected"] == max(infected)
        assert infected[summary["peak_tick"]] == max(infected)
