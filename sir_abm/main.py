#!/usr/bin/env python3
"""
SIR Grid Epidemic Simulation

An agent-based Susceptible-Infected-Recovered-Dead model on a toroidal grid.

Usage:
    sir-abm [--config configs/baseline.yaml] [options]

Examples:
    sir-abm --seed 42
    sir-abm --config configs/baseline.yaml --gif --out-dir results/
    sir-abm --population 500 --width 40 --height 40 --death-probability 1.0
    sir-abm --replicates 20 --seed 7 --no-snapshot --quiet
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from sir_abm.config import ConfigError, default_config, load_config
from sir_abm.experiments import replicate_seeds, run_replicates, summarize_replicates
from sir_abm.model.engine import SimulationEngine
from sir_abm.model.state import summarize_history
from sir_abm.export.csv_writer import CSVWriter
from sir_abm.export.visualizer import Visualizer
from sir_abm.export.reporter import Reporter

PROGRESS_EVERY = 50
GIF_EVERY = 5


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Agent-based SIR epidemic simulation on a toroidal grid',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    sir-abm --seed 42
    sir-abm --config configs/baseline.yaml --gif --out-dir results/
    sir-abm --replicates 20 --seed 7 --quiet
        """
    )

    parser.add_argument('--config', type=Path, default=None,
                        help='Path to YAML configuration file '
                             '(default: built-in reference scenario)')

    # Model overrides
    parser.add_argument('--population', type=int, default=None,
                        help='Total number of agents')
    parser.add_argument('--infected', type=int, default=None,
                        help='Number of initially infected agents')
    parser.add_argument('--duration', type=int, default=None,
                        help='Infection duration in ticks')
    parser.add_argument('--death-probability', type=float, default=None,
                        help='Probability of dying when the infection ends')
    parser.add_argument('--width', type=int, default=None,
                        help='Grid width')
    parser.add_argument('--height', type=int, default=None,
                        help='Grid height')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')
    parser.add_argument('--max-ticks', type=int, default=None,
                        help='Stop after this many ticks even if infections remain')
    parser.add_argument('--replicates', type=int, default=None,
                        help='Number of independent runs to aggregate')
    parser.add_argument('--out-dir', type=Path, default=None,
                        help='Output directory for exports (default: ./output)')

    # Export toggles
    parser.add_argument('--csv', dest='csv', action='store_true', default=None,
                        help='Enable CSV export (default)')
    parser.add_argument('--no-csv', dest='csv', action='store_false',
                        help='Disable CSV export')

    parser.add_argument('--plot', dest='plot', action='store_true', default=None,
                        help='Enable epidemic curve plot (default)')
    parser.add_argument('--no-plot', dest='plot', action='store_false',
                        help='Disable epidemic curve plot')

    parser.add_argument('--snapshot', dest='snapshot', action='store_true', default=None,
                        help='Enable final grid snapshot')
    parser.add_argument('--no-snapshot', dest='snapshot', action='store_false',
                        help='Disable final grid snapshot')

    parser.add_argument('--gif', action='store_true', default=False,
                        help='Enable GIF animation export')

    parser.add_argument('--quiet', action='store_true', default=False,
                        help='Suppress stdout output')

    return parser.parse_args(argv)


def apply_overrides(config, args: argparse.Namespace) -> None:
    """Copy CLI values that were given onto the configuration."""
    if args.population is not None:
        config.population.size = args.population
    if args.infected is not None:
        config.population.initial_infected = args.infected
    if args.duration is not None:
        config.disease.infection_duration = args.duration
    if args.death_probability is not None:
        config.disease.death_probability = args.death_probability
    if args.width is not None:
        config.grid.width = args.width
    if args.height is not None:
        config.grid.height = args.height
    if args.seed is not None:
        config.seed = args.seed
    if args.max_ticks is not None:
        config.max_ticks = args.max_ticks
    if args.replicates is not None:
        config.replicates = args.replicates
    if args.out_dir is not None:
        config.out_dir = args.out_dir
    if args.csv is not None:
        config.csv_enabled = args.csv
    if args.plot is not None:
        config.plot_enabled = args.plot
    if args.snapshot is not None:
        config.snapshot_enabled = args.snapshot
    if args.gif:
        config.gif_enabled = True
    config.quiet = args.quiet


def run_single(config) -> dict:
    """Step one simulation, streaming exports as ticks complete."""
    engine = SimulationEngine(config)
    visualizer = Visualizer(config.grid.width, config.grid.height)

    csv_writer = None
    if config.csv_enabled:
        csv_writer = CSVWriter(config.out_dir / 'simulation_log.csv')
        csv_writer.open()

    state = engine.snapshot()
    if csv_writer:
        csv_writer.append(state.tick, state.counts)
    if config.gif_enabled:
        visualizer.buffer_frame(state)

    try:
        while not engine.is_finished():
            state = engine.step()

            if csv_writer:
                csv_writer.append(state.tick, state.counts)

            if config.gif_enabled:
                if state.tick % GIF_EVERY == 0 or engine.is_finished():
                    visualizer.buffer_frame(state)

            if not config.quiet and state.tick % PROGRESS_EVERY == 0:
                counts = state.counts
                print(f"  Tick {state.tick}: {counts['susceptible']} S, "
                      f"{counts['infected']} I, {counts['recovered']} R, "
                      f"{counts['dead']} D")

    except KeyboardInterrupt:
        if not config.quiet:
            print("\nSimulation interrupted by user.")
    finally:
        if csv_writer:
            csv_writer.close()
            if not config.quiet:
                print(f"\nCSV saved: {config.out_dir / 'simulation_log.csv'}")

    history = engine.history.as_dict()

    if config.plot_enabled:
        curve_path = config.out_dir / 'epidemic_curve.png'
        visualizer.save_curves(history, curve_path)
        if not config.quiet:
            print(f"Curves saved: {curve_path}")

    if config.snapshot_enabled:
        snapshot_path = config.out_dir / 'final_state.png'
        visualizer.save_snapshot(state, snapshot_path)
        if not config.quiet:
            print(f"Snapshot saved: {snapshot_path}")

    if config.gif_enabled:
        gif_path = config.out_dir / 'simulation.gif'
        if not config.quiet:
            print(f"Generating GIF ({len(visualizer.frames)} frames)...")
        visualizer.generate_gif(gif_path, fps=10)
        if not config.quiet:
            print(f"Animation saved: {gif_path}")

    return engine.get_summary()


def run_many(config):
    """Run replicates, export them together and return (first summary, aggregate)."""
    seeds = replicate_seeds(config.seed, config.replicates)
    histories = run_replicates(config, seeds)
    aggregate = summarize_replicates(histories)

    if config.csv_enabled:
        with CSVWriter(config.out_dir / 'simulation_log.csv', with_seed=True) as writer:
            for seed, history in zip(seeds, histories):
                writer.append_history(history, seed=seed)
        if not config.quiet:
            print(f"\nCSV saved: {config.out_dir / 'simulation_log.csv'}")

    if config.plot_enabled:
        curve_path = config.out_dir / 'epidemic_curve.png'
        visualizer = Visualizer(config.grid.width, config.grid.height)
        visualizer.save_curves(histories[0], curve_path, summary=aggregate)
        if not config.quiet:
            print(f"Curves saved: {curve_path}")

    return summarize_history(histories[0]), aggregate


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Load configuration
    try:
        config = load_config(args.config) if args.config else default_config()
        apply_overrides(config, args)
        config.validate()
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except (ConfigError, yaml.YAMLError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    if not config.quiet:
        print("Initializing simulation...")
        print(f"  Grid: {config.grid.width}x{config.grid.height}")
        print(f"  Population: {config.population.size} "
              f"({config.population.initial_infected} infected)")
        print(f"  Infection duration: {config.disease.infection_duration} ticks")
        print(f"  Death probability: {config.disease.death_probability}")
        print(f"  Replicates: {config.replicates}")
        print("\nRunning simulation...")

    if config.replicates > 1:
        # Per-run grid exports only make sense for a single run
        snapshot_enabled = gif_enabled = False
        summary, aggregate = run_many(config)
    else:
        snapshot_enabled = config.snapshot_enabled
        gif_enabled = config.gif_enabled
        summary, aggregate = run_single(config), None

    if not config.quiet:
        reporter = Reporter(str(args.config) if args.config else None, config.seed)
        report = reporter.generate_summary(
            summary,
            config.out_dir,
            config.csv_enabled,
            config.plot_enabled,
            snapshot_enabled,
            gif_enabled,
            replicate_summary=aggregate
        )
        print(report)

    return 0


if __name__ == '__main__':
    sys.exit(main())
