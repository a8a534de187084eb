"""Visualization and export for the SIR simulation."""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
from pathlib import Path
from typing import Dict, List, Optional
from PIL import Image
import io

from ..model.state import SimulationState, STATE_LABELS


class Visualizer:
    """
    Generates visual outputs using matplotlib.

    Supports:
    - Epidemic curve PNG (single run or replicate mean with band)
    - Grid snapshot PNG
    - Animated GIF compilation
    """

    COLORS = {
        'susceptible': '#3498DB',  # Blue
        'infected': '#E74C3C',     # Red
        'recovered': '#27AE60',    # Green
        'dead': '#2C3E50',         # Dark blue-gray
        'background': '#ECF0F1',   # Light gray
    }

    def __init__(self, grid_width: int, grid_height: int):
        self.width = grid_width
        self.height = grid_height
        self.frames: List[Image.Image] = []

    def _create_grid_figure(self, state: SimulationState) -> plt.Figure:
        """Scatter of agents on the grid, coloured by health state."""
        aspect = self.width / self.height
        fig_height = 6
        fig_width = max(6, fig_height * aspect)
        fig, ax = plt.subplots(figsize=(fig_width, fig_height))
        ax.set_facecolor(self.COLORS['background'])

        for label in STATE_LABELS:
            xs = [a.x for a in state.agents if a.state.value == label]
            ys = [a.y for a in state.agents if a.state.value == label]
            if xs:
                ax.plot(xs, ys, 'o', color=self.COLORS[label], markersize=3,
                        linestyle='none',
                        label=f"{label.capitalize()} ({len(xs)})")

        ax.set_title(f"Tick {state.tick} | Infected: "
                     f"{state.counts.get('infected', 0)}")
        ax.set_xlabel('X')
        ax.set_ylabel('Y')
        ax.set_xlim(0.5, self.width + 0.5)
        ax.set_ylim(0.5, self.height + 0.5)
        ax.set_aspect('equal')
        if state.agents:
            ax.legend(loc='upper right', fontsize=8)

        plt.tight_layout()
        return fig

    def save_curves(self, history: Dict[str, List[int]],
                    output_path: Path,
                    summary: Optional[Dict] = None) -> None:
        """
        Plot state counts over ticks.

        When `summary` (from summarize_replicates) is given, the mean
        curves are drawn with their confidence band instead.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig, ax = plt.subplots(figsize=(9, 5))

        for label in STATE_LABELS:
            color = self.COLORS[label]
            if summary is not None:
                mean = summary['mean'][label]
                hw = summary['half_width'][label]
                ticks = np.arange(len(mean))
                ax.plot(ticks, mean, color=color, label=label.capitalize())
                ax.fill_between(ticks, mean - hw, mean + hw,
                                color=color, alpha=0.2)
            else:
                values = history[label]
                ax.plot(np.arange(len(values)), values, color=color,
                        label=label.capitalize())

        title = 'SIR epidemic curves'
        if summary is not None:
            title += (f" (mean of {summary['runs']} runs, "
                      f"{summary['confidence']:.0%} CI)")
        ax.set_title(title)
        ax.set_xlabel('Tick')
        ax.set_ylabel('Agents')
        ax.legend(loc='center right', fontsize=8)
        ax.grid(alpha=0.3)

        plt.tight_layout()
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

    def buffer_frame(self, state: SimulationState) -> None:
        """Store frame for GIF generation."""
        fig = self._create_grid_figure(state)

        # Convert to PIL Image
        buf = io.BytesIO()
        fig.savefig(buf, format='png', dpi=80)
        buf.seek(0)
        img = Image.open(buf).copy()
        self.frames.append(img)
        buf.close()
        plt.close(fig)

    def save_snapshot(self, state: SimulationState, output_path: Path) -> None:
        """Save single PNG image of current state."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig = self._create_grid_figure(state)
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

    def generate_gif(self, output_path: Path, fps: int = 10) -> None:
        """Compile buffered frames into animated GIF."""
        if not self.frames:
            return

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        duration = int(1000 / fps)  # milliseconds per frame

        self.frames[0].save(
            output_path,
            save_all=True,
            append_images=self.frames[1:],
            duration=duration,
            loop=0
        )

    def clear_frames(self) -> None:
        """Clear buffered frames."""
        self.frames.clear()
