"""CSV export functionality for the SIR simulation."""

import csv
from pathlib import Path
from typing import Dict, List, Optional

from ..model.state import STATE_LABELS, StatisticsHistory


class CSVWriter:
    """
    Exports per-tick state counts to CSV format incrementally.

    Output format:
        tick,susceptible,infected,recovered,dead
        0,1990,10,0,0
        ...

    With `with_seed=True` a leading `seed` column tags each row with the
    replicate it came from.
    """

    def __init__(self, output_path: Path, with_seed: bool = False):
        self.output_path = Path(output_path)
        self.with_seed = with_seed
        self.file: Optional[object] = None
        self.writer: Optional[csv.DictWriter] = None
        self._is_open = False

    @property
    def fieldnames(self) -> List[str]:
        prefix = ['seed'] if self.with_seed else []
        return prefix + ['tick'] + STATE_LABELS

    def open(self) -> None:
        """Initialize file and write header."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.file = open(self.output_path, 'w', newline='')
        self.writer = csv.DictWriter(self.file, fieldnames=self.fieldnames)
        self.writer.writeheader()
        self._is_open = True

    def append(self, tick: int, counts: Dict[str, int],
               seed: Optional[int] = None) -> None:
        """Write counts for a single tick."""
        if not self._is_open:
            self.open()
        row = {'tick': tick, **{label: counts.get(label, 0)
                                for label in STATE_LABELS}}
        if self.with_seed:
            row['seed'] = seed
        self.writer.writerow(row)
        self.file.flush()

    def append_history(self, history: Dict[str, List[int]],
                       seed: Optional[int] = None) -> None:
        """Write every tick of a finished run."""
        for row in StatisticsHistory(series=history).to_csv_rows():
            tick = row.pop('tick')
            self.append(tick, row, seed=seed)

    def close(self) -> None:
        """Close file handle."""
        if self.file:
            self.file.close()
            self.file = None
            self.writer = None
            self._is_open = False

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
