"""Occupancy index for the SIR grid simulation."""

from typing import List, Iterator, Tuple


class OccupancyGrid:
    """
    Maps each grid cell to the indices of the agents standing on it.

    Cells live in a flat arena of buckets indexed by
    (y - 1) * width + (x - 1). Coordinates are 1-based like the agents'.
    """

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.buckets: List[List[int]] = [[] for _ in range(width * height)]

    def cell_index(self, x: int, y: int) -> int:
        """Flattened bucket index of cell (x, y)."""
        if not (1 <= x <= self.width and 1 <= y <= self.height):
            raise IndexError(f"Cell ({x}, {y}) outside "
                             f"{self.width}x{self.height} grid")
        return (y - 1) * self.width + (x - 1)

    def place(self, agent_index: int, x: int, y: int) -> None:
        """Register agent at position."""
        self.buckets[self.cell_index(x, y)].append(agent_index)

    def agents_at(self, x: int, y: int) -> List[int]:
        """Agent indices currently in cell (x, y)."""
        return self.buckets[self.cell_index(x, y)]

    def clear(self) -> None:
        """Empty every bucket, keeping the arena allocated."""
        for bucket in self.buckets:
            bucket.clear()

    def occupied_cells(self) -> Iterator[Tuple[int, int, List[int]]]:
        """Yield (x, y, indices) for every non-empty cell."""
        for i, bucket in enumerate(self.buckets):
            if bucket:
                yield i % self.width + 1, i // self.width + 1, bucket

    def __len__(self) -> int:
        """Total number of registered agents."""
        return sum(len(bucket) for bucket in self.buckets)
