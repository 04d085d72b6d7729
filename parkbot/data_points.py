"""A container of scan end points with an origin."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

Vector = tuple[float, ...]


def _scaled(vector: Vector, factor: float) -> Vector:
    return tuple(component * factor for component in vector)


class DataPointContainer:
    """Ordered scan points plus the origin they were measured from."""

    def __init__(self, points: Iterable[Vector] = (), origo: Vector = (0.0, 0.0)) -> None:
        self._points: list[Vector] = [tuple(p) for p in points]
        self.origo: Vector = tuple(origo)

    def add(self, point: Vector) -> None:
        self._points.append(tuple(point))

    def clear(self) -> None:
        self._points.clear()

    def set_from(self, other: DataPointContainer, factor: float) -> None:
        """Replace contents with those of ``other``, scaled by ``factor``."""
        self.origo = _scaled(other.origo, factor)
        self._points = [_scaled(p, factor) for p in other._points]

    def __len__(self) -> int:
        return len(self._points)

    def __getitem__(self, index: int) -> Vector:
        return self._points[index]

    def __iter__(self) -> Iterator[Vector]:
        return iter(self._points)

    def __repr__(self) -> str:
        return f"DataPointContainer({self._points!r}, origo={self.origo!r})"