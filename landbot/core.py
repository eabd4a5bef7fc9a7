"""
Territory Conquest Bot - Map Data Structures

This module contains the map view the decision engine reads every turn: a
rectangular grid of lands, each with a type, an owning color and an army.
"""

from typing import Any, Dict, Iterator, List, Set, Tuple
from dataclasses import dataclass
from enum import Enum

Pos = Tuple[int, int]


class LandType(Enum):
    """Enumeration for land types."""
    UNKNOWN = "unknown"
    UNKNOWN_CITY = "unknown_city"
    LAND = "land"
    CITY = "city"
    GENERAL = "general"

    @property
    def is_known(self) -> bool:
        """Check if this type is resolved (not a fog-of-war placeholder)."""
        return self not in (LandType.UNKNOWN, LandType.UNKNOWN_CITY)


@dataclass
class Land:
    """
    Represents a single tile of the map.

    Attributes:
        type: Land type
        color: Color of the owning player, 0 if neutral
        amount: Number of armies on the tile
    """
    type: LandType = LandType.UNKNOWN
    color: int = 0
    amount: int = 0

    @property
    def is_neutral(self) -> bool:
        """Check if this land is not owned by any player."""
        return self.color == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format for JSON serialization."""
        return {
            "type": self.type.value,
            "color": self.color,
            "amount": self.amount
        }


class GameMap:
    """
    Read-only (from the engine's point of view) snapshot of the game map.

    Positions are (x, y) pairs; blocked positions are impassable and never
    reported as neighbours.
    """

    # Fixed neighbour order: up, down, left, right
    _DIRECTIONS = ((0, -1), (0, 1), (-1, 0), (1, 0))

    def __init__(self, width: int, height: int):
        """
        Initialize a map filled with unknown lands.

        Args:
            width: Width of the grid
            height: Height of the grid

        Raises:
            ValueError: If dimensions are not positive
        """
        if width < 1 or height < 1:
            raise ValueError(f"Map dimensions must be positive, got {width}x{height}")

        self.width = width
        self.height = height
        self._lands: Dict[Pos, Land] = {}
        self._blocked: Set[Pos] = set()

        for y in range(height):
            for x in range(width):
                self._lands[(x, y)] = Land()

    def __getitem__(self, pos: Pos) -> Land:
        return self._lands[pos]

    def __len__(self) -> int:
        return len(self._lands)

    def in_bounds(self, pos: Pos) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def accessible(self, pos: Pos) -> bool:
        """Check if a position is on the map and not blocked."""
        return self.in_bounds(pos) and pos not in self._blocked

    def set_land(self, pos: Pos, land: Land) -> None:
        """
        Replace the land at a position.

        Args:
            pos: Position to update
            land: New land

        Raises:
            ValueError: If the position is outside the map
        """
        if not self.in_bounds(pos):
            raise ValueError(f"Position {pos} is outside the {self.width}x{self.height} map")

        self._lands[pos] = land

    def block(self, pos: Pos) -> None:
        """
        Mark a position as impassable.

        Raises:
            ValueError: If the position is outside the map
        """
        if not self.in_bounds(pos):
            raise ValueError(f"Position {pos} is outside the {self.width}x{self.height} map")

        self._blocked.add(pos)

    def neighbours(self, pos: Pos) -> List[Pos]:
        """
        Get the accessible orthogonal neighbours of a position.

        Args:
            pos: Position to get neighbours for

        Returns:
            New list of neighbour positions (callers may shuffle it)
        """
        x, y = pos
        neighbours = []

        for dx, dy in self._DIRECTIONS:
            nxt = (x + dx, y + dy)
            if self.accessible(nxt):
                neighbours.append(nxt)

        return neighbours

    def items(self) -> Iterator[Tuple[Pos, Land]]:
        """Iterate over every (position, land) pair in row-major order."""
        return iter(self._lands.items())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameMap":
        """
        Build a map from its wire representation.

        Args:
            data: Dictionary with "width", "height", a row-major "lands" list
                  and an optional "blocked" list of [x, y] pairs

        Returns:
            Parsed map

        Raises:
            ValueError: If the data is malformed
        """
        try:
            width = int(data["width"])
            height = int(data["height"])
            lands_data = data["lands"]
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed map data: {e}") from e

        game_map = cls(width, height)

        if len(lands_data) != width * height:
            raise ValueError(f"Expected {width * height} lands, got {len(lands_data)}")

        for index, land_data in enumerate(lands_data):
            try:
                land = Land(
                    type=LandType(land_data["type"]),
                    color=int(land_data.get("color", 0)),
                    amount=int(land_data.get("amount", 0))
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"Malformed land at index {index}: {e}") from e

            game_map.set_land((index % width, index // width), land)

        for pos in data.get("blocked", []):
            game_map.block((int(pos[0]), int(pos[1])))

        return game_map

    def to_dict(self) -> Dict[str, Any]:
        """Convert map to dictionary format for JSON serialization."""
        return {
            "width": self.width,
            "height": self.height,
            "lands": [land.to_dict() for _, land in self.items()],
            "blocked": [list(pos) for pos in sorted(self._blocked)]
        }
