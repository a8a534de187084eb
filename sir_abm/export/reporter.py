"""Summary report generation for the SIR simulation."""

from typing import Dict, Optional
from pathlib import Path

import numpy as np


class Reporter:
    """Formats run summaries into a text report."""

    def __init__(self, config_path: Optional[str], seed: Optional[int]):
        self.config_path = config_path
        self.seed = seed

    def generate_summary(self, summary: Dict,
                         output_dir: Path,
                         csv_enabled: bool,
                         plot_enabled: bool,
                         snapshot_enabled: bool,
                         gif_enabled: bool,
                         replicate_summary: Optional[Dict] = None) -> str:
        """Returns formatted text report."""
        population = summary['population']
        final = summary['final_counts']
        # With replicates the headline figures describe the first run only
        scope = ""
        if replicate_summary is not None:
            scope = f" (replicate 1 of {replicate_summary['runs']})"

        def pct(count: int) -> str:
            return f"{count / population * 100:.1f}%" if population > 0 else "n/a"

        lines = [
            "",
            "=" * 80,
            "                    SIR GRID EPIDEMIC SIMULATION REPORT",
            "=" * 80,
            f"Configuration: {self.config_path or '(built-in defaults)'}",
            f"Random Seed: {self.seed if self.seed is not None else 'None (random)'}",
            "",
            f"SIMULATION METRICS{scope}",
            "-" * 40,
            f"Total Ticks:           {summary['total_ticks']}",
            f"Population:            {population}",
            f"Peak Infected:         {summary['peak_infected']} "
            f"(tick {summary['peak_tick']})",
            "",
            f"FINAL STATE{scope}",
            "-" * 40,
        ]
        for label, count in final.items():
            lines.append(f"{label.capitalize() + ':':<23}{count} ({pct(count)})")
        lines += [
            f"Attack Rate:           {summary['attack_rate']:.4f}",
            f"Case Fatality:         {summary['case_fatality']:.4f}",
        ]

        if replicate_summary is not None:
            durations = np.array(replicate_summary['durations'])
            lines += [
                "",
                "REPLICATES",
                "-" * 40,
                f"Runs:                  {replicate_summary['runs']}",
                f"Duration (ticks):      mean {durations.mean():.1f}, "
                f"min {durations.min()}, max {durations.max()}",
            ]
            for label, mean in replicate_summary['mean'].items():
                hw = replicate_summary['half_width'][label][-1]
                lines.append(f"Final {label + ':':<17}{mean[-1]:.1f} +/- {hw:.1f}")

        lines += [
            "",
            "OUTPUT FILES",
            "-" * 40,
        ]

        outputs = [
            ("CSV Log:    ", csv_enabled, 'simulation_log.csv'),
            ("Curves:     ", plot_enabled, 'epidemic_curve.png'),
            ("Snapshot:   ", snapshot_enabled, 'final_state.png'),
            ("Animation:  ", gif_enabled, 'simulation.gif'),
        ]
        for prefix, enabled, name in outputs:
            if enabled:
                lines.append(f"{prefix}{output_dir / name}")
            else:
                lines.append(f"{prefix}(disabled)")

        lines.append("=" * 80)

        return "\n".join(lines)
