"""
Tile Catalog
============

Shape library loaded from config plus the rotate/flip/normalize transforms
used by the sequence generator and by callers previewing a tile in hand.

A shape is a tuple of (row, col) offsets, always normalized so the minimum
row and column are 0 and sorted so equal shapes compare equal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, NamedTuple, Optional, Tuple

from birdcity.city_core.config_loader import GameConfig, get_config


Cell = Tuple[int, int]
Shape = Tuple[Cell, ...]


class Bounds(NamedTuple):
    """Bounding box of a shape."""
    rows: int
    cols: int


def normalize(cells: Iterable[Cell]) -> Shape:
    """Shift cells so min row/col are 0, then sort."""
    cells = list(cells)
    if not cells:
        raise ValueError("Shape must contain at least one cell")
    min_r = min(r for r, _ in cells)
    min_c = min(c for _, c in cells)
    return tuple(sorted((r - min_r, c - min_c) for r, c in cells))


def make_shape(cells: Iterable[Iterable[int]]) -> Shape:
    """
    Build a validated, normalized shape from raw offsets.

    Raises:
        ValueError: If the shape is empty or has duplicate cells.
    """
    pairs = [(int(r), int(c)) for r, c in cells]
    shape = normalize(pairs)
    if len(set(shape)) != len(shape):
        raise ValueError(f"Shape has duplicate cells: {pairs}")
    return shape


def rotate_shape(cells: Shape) -> Shape:
    """Rotate 90 degrees: (r, c) -> (c, -r), then normalize."""
    return normalize((c, -r) for r, c in cells)


def flip_shape(cells: Shape) -> Shape:
    """Mirror along the vertical axis: (r, c) -> (r, -c), then normalize."""
    return normalize((r, -c) for r, c in cells)


def shape_bounds(cells: Shape) -> Bounds:
    """Bounding box dimensions of a shape."""
    return Bounds(
        rows=max(r for r, _ in cells) + 1,
        cols=max(c for _, c in cells) + 1
    )


@dataclass(frozen=True)
class Tile:
    """
    One entry of a tile sequence.

    Immutable once generated; consumed exactly once (placed or skipped).
    """
    shape_key: str
    shape: Shape
    color: str

    @property
    def size(self) -> int:
        """Number of cells the tile covers."""
        return len(self.shape)

    def to_dict(self) -> Dict:
        return {
            "shape_key": self.shape_key,
            "shape": [list(cell) for cell in self.shape],
            "color": self.color,
        }

    def __repr__(self) -> str:
        return f"Tile({self.shape_key}, {self.color})"


class TileCatalog:
    """
    Collection of all named shapes and building colours.

    Provides keyed access to normalized shapes. Shapes that only appear in
    the legacy pool are reachable by key but are not part of `keys`, so
    the coverage policy never draws them.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._shapes: Dict[str, Shape] = {
            key: make_shape(cells) for key, cells in config.shapes.items()
        }
        self._keys: Tuple[str, ...] = tuple(self._shapes.keys())
        for key, cells in config.legacy_shapes.items():
            self._shapes[key] = make_shape(cells)

    def __len__(self) -> int:
        """Number of drawable shapes."""
        return len(self._keys)

    def __getitem__(self, key: str) -> Shape:
        """Get shape by key."""
        return self._shapes[key]

    def __contains__(self, key: str) -> bool:
        return key in self._shapes

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def keys(self) -> Tuple[str, ...]:
        """Shape keys in declaration order."""
        return self._keys

    @property
    def colors(self) -> Tuple[str, ...]:
        """Building colours."""
        return self._config.colors

    @property
    def min_size(self) -> int:
        """Cell count of the smallest shape."""
        return min(len(self._shapes[k]) for k in self._keys)

    @property
    def max_size(self) -> int:
        """Cell count of the largest shape."""
        return max(len(self._shapes[k]) for k in self._keys)

    def size_of(self, key: str) -> int:
        """Cell count of a named shape."""
        return len(self._shapes[key])

    def make_tile(self, key: str, color: str) -> Tile:
        """Build a tile from a shape key and colour."""
        if color not in self._config.colors:
            raise ValueError(f"Unknown color: {color}")
        return Tile(shape_key=key, shape=self._shapes[key], color=color)


# Module-level singleton
_cached_catalog: Optional[TileCatalog] = None


def get_catalog(config: Optional[GameConfig] = None) -> TileCatalog:
    """
    Get the tile catalog singleton.

    The catalog is rebuilt only when a different config object is passed.

    Args:
        config: Optional config to use. If None, uses cached or default config.

    Returns:
        TileCatalog instance.
    """
    global _cached_catalog
    if _cached_catalog is None or (
        config is not None and config is not _cached_catalog.config
    ):
        _cached_catalog = TileCatalog(config)
    return _cached_catalog


def get_shape(key: str, config: Optional[GameConfig] = None) -> Shape:
    """
    Get a named shape.

    Raises:
        KeyError: If the key is unknown.
    """
    return get_catalog(config)[key]
