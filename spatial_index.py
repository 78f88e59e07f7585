# spatial_index.py
"""
Uniform grid over screen space for neighbour lookups.

Cells are keyed by CellKey, a pair of plain integers, so distinct cells never
share a key regardless of sign or magnitude. The index is rebuilt from
scratch every frame; with a small swarm that is cheaper than tracking moves.
"""
import math
from collections import defaultdict
from typing import Dict, List, NamedTuple

import numpy as np

NEIGHBOR_OFFSETS = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),  (0, 0),  (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)


class CellKey(NamedTuple):
    """Grid cell coordinates."""
    cx: int
    cy: int

    @classmethod
    def from_position(cls, x: float, y: float, cell_size: float) -> "CellKey":
        return cls(math.floor(x / cell_size), math.floor(y / cell_size))


class SpatialIndex:
    """
    Maps grid cells to the indices of the particles currently inside them.

    A query for particle i returns every index in the 3x3 block of cells
    around i's cell. For any two particles closer than the cell size, each is
    therefore in the other's result.
    """
    def __init__(self, cell_size: float):
        if cell_size <= 0:
            raise ValueError(f"Cell size must be positive, got {cell_size}.")
        self.cell_size = float(cell_size)
        self.cells: Dict[CellKey, List[int]] = defaultdict(list)
        self._particle_cells: List[CellKey] = []

    def __len__(self) -> int:
        return len(self._particle_cells)

    def cell_of(self, x: float, y: float) -> CellKey:
        return CellKey.from_position(x, y, self.cell_size)

    def rebuild(self, positions: np.ndarray) -> None:
        """Clears the index and buckets every (x, y) row of `positions`."""
        self.cells.clear()
        self._particle_cells = []
        for i, (x, y) in enumerate(positions):
            key = self.cell_of(x, y)
            self.cells[key].append(i)
            self._particle_cells.append(key)

    def neighbors_of_cell(self, key: CellKey) -> List[int]:
        """Indices in the 3x3 block of cells centred on `key`."""
        nearby = []
        for dx, dy in NEIGHBOR_OFFSETS:
            # .get() so that empty cells are not materialised by the defaultdict
            nearby.extend(self.cells.get(CellKey(key.cx + dx, key.cy + dy), ()))
        return nearby

    def neighbors(self, index: int) -> List[int]:
        """Indices near particle `index` as of the last rebuild, itself included."""
        return self.neighbors_of_cell(self._particle_cells[index])
