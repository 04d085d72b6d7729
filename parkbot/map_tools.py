"""Occupancy grid helpers: coordinate transforms, ray distances and extents."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

Vec2 = tuple[float, float]
Cell = tuple[int, int]

OCCUPIED = 100
UNKNOWN = -1


@dataclass
class OccupancyGrid:
    """A row-major occupancy grid; ``data`` holds -1 (unknown) or 0..100."""

    width: int
    height: int
    resolution: float
    origin: Vec2 = (0.0, 0.0)
    data: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.data:
            self.data = [UNKNOWN] * (self.width * self.height)
        if len(self.data) != self.width * self.height:
            raise ValueError(
                f"grid data has {len(self.data)} cells, expected {self.width * self.height}"
            )

    def rows(self) -> list[Sequence[int]]:
        return [self.data[y * self.width:(y + 1) * self.width] for y in range(self.height)]


def _linear_transform(cs1: Vec2, cs2: Vec2) -> tuple[float, float]:
    scaling = (cs2[0] - cs2[1]) / (cs1[0] - cs1[1])
    translation = cs2[0] - cs1[0] * scaling
    return scaling, translation


class CoordinateTransformer:
    """Scale-and-offset transform between two 2D coordinate systems.

    ``c1_coords`` maps from the second system into the first (e.g. map cells
    to world), ``c2_coords`` the other way.
    """

    def __init__(self) -> None:
        self.origo: Vec2 = (0.0, 0.0)
        self.scale = 1.0
        self.inv_scale = 1.0

    def set_transforms(self, origin: Vec2, resolution: float) -> None:
        self.origo = (float(origin[0]), float(origin[1]))
        self.scale = float(resolution)
        self.inv_scale = 1.0 / resolution

    def set_transforms_between(
        self, origo_cs1: Vec2, end_cs1: Vec2, origo_cs2: Vec2, end_cs2: Vec2
    ) -> None:
        """Derive the transform from two corresponding point pairs.

        The scale is taken from the x axis only.
        """
        x_scale, x_offset = _linear_transform(
            (origo_cs1[0], end_cs1[0]), (origo_cs2[0], end_cs2[0])
        )
        _, y_offset = _linear_transform(
            (origo_cs1[1], end_cs1[1]), (origo_cs2[1], end_cs2[1])
        )
        self.origo = (x_offset, y_offset)
        self.scale = x_scale
        self.inv_scale = 1.0 / x_scale

    def c1_coords(self, map_coords: Vec2) -> Vec2:
        return (
            self.origo[0] + map_coords[0] * self.scale,
            self.origo[1] + map_coords[1] * self.scale,
        )

    def c2_coords(self, world_coords: Vec2) -> Vec2:
        return (
            (world_coords[0] - self.origo[0]) * self.inv_scale,
            (world_coords[1] - self.origo[1]) * self.inv_scale,
        )

    def c1_scale(self, c2_scale: float) -> float:
        return self.scale * c2_scale

    def c2_scale(self, c1_scale: float) -> float:
        return self.inv_scale * c1_scale


class DistanceMeasurementProvider:
    """Casts rays through an occupancy grid to find the first occupied cell."""

    def __init__(self) -> None:
        self._grid: OccupancyGrid | None = None
        self._transformer = CoordinateTransformer()

    def set_map(self, grid: OccupancyGrid) -> None:
        self._grid = grid
        self._transformer.set_transforms(grid.origin, grid.resolution)

    def _require_grid(self) -> OccupancyGrid:
        if self._grid is None:
            raise RuntimeError("no map has been set")
        return self._grid

    def distance(self, begin_world: Vec2, end_world: Vec2) -> tuple[float, Vec2] | None:
        """Return (world distance, world hit point) of the first obstacle, or None."""
        self._require_grid()
        begin_map = tuple(int(c) for c in self._transformer.c2_coords(begin_world))
        end_map = tuple(int(c) for c in self._transformer.c2_coords(end_world))
        hit = self.check_occupancy(begin_map, end_map)
        if hit is None:
            return None
        cells, hit_cell = hit
        hit_world = self._transformer.c1_coords((float(hit_cell[0]), float(hit_cell[1])))
        return self._transformer.c1_scale(cells), hit_world

    def check_occupancy(
        self, begin_map: Cell, end_map: Cell, max_length: int = 5000
    ) -> tuple[float, Cell] | None:
        """Walk a Bresenham line in cell coordinates.

        Returns (cell distance truncated to a whole number, hit cell), or None
        if either end lies outside the grid or nothing occupied is met. The
        end cell itself is not examined.
        """
        grid = self._require_grid()
        size_x, size_y = grid.width, grid.height
        x0, y0 = begin_map
        x1, y1 = end_map
        if not (0 <= x0 < size_x and 0 <= y0 < size_y):
            return None
        if not (0 <= x1 < size_x and 0 <= y1 < size_y):
            return None

        dx, dy = x1 - x0, y1 - y0
        abs_dx, abs_dy = abs(dx), abs(dy)
        offset_dx = 1 if dx > 0 else -1
        offset_dy = (1 if dy > 0 else -1) * size_x
        start = y0 * size_x + x0

        if abs_dx >= abs_dy:
            end_offset = self._bresenham(
                grid.data, abs_dx, abs_dy, abs_dx // 2, offset_dx, offset_dy, start, max_length
            )
        else:
            end_offset = self._bresenham(
                grid.data, abs_dy, abs_dx, abs_dy // 2, offset_dy, offset_dx, start, max_length
            )
        if end_offset is None:
            return None
        hit_cell = (end_offset % size_x, end_offset // size_x)
        cells = float(int(math.hypot(x0 - hit_cell[0], y0 - hit_cell[1])))
        return cells, hit_cell

    @staticmethod
    def _bresenham(
        data: Sequence[int],
        abs_da: int,
        abs_db: int,
        error_b: int,
        offset_a: int,
        offset_b: int,
        offset: int,
        max_length: int,
    ) -> int | None:
        for _ in range(min(max_length, abs_da)):
            if data[offset] == OCCUPIED:
                return offset
            offset += offset_a
            error_b += abs_db
            if error_b >= abs_da:
                offset += offset_b
                error_b -= abs_da
        return None


def map_extents(grid: OccupancyGrid) -> tuple[Cell, Cell] | None:
    """Bounding box of known cells as (top_left, bottom_right exclusive), or None."""
    known = [
        (x, y)
        for y, row in enumerate(grid.rows())
        for x, value in enumerate(row)
        if value != UNKNOWN
    ]
    if not known:
        return None
    xs = [x for x, _ in known]
    ys = [y for _, y in known]
    return (min(xs), min(ys)), (max(xs) + 1, max(ys) + 1)