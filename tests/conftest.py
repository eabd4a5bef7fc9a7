"""Shared test fixtures and helpers."""

import random

import pytest

from landbot.core import GameMap, Land, LandType

TYPE_CODES = {
    "L": LandType.LAND,
    "C": LandType.CITY,
    "G": LandType.GENERAL,
    "U": LandType.UNKNOWN,
    "Q": LandType.UNKNOWN_CITY,
}


def build_map(rows):
    """
    Build a map from rows of space separated cell tokens.

    A token is a type code, the owner color and the army, e.g. "G1:10" is a
    general of color 1 with 10 armies and "L0:0" an empty neutral land.
    "#" marks a blocked tile.
    """
    grid = [row.split() for row in rows]
    game_map = GameMap(len(grid[0]), len(grid))

    for y, row in enumerate(grid):
        for x, token in enumerate(row):
            if token == "#":
                game_map.block((x, y))
                continue

            color, amount = token[1:].split(":")
            game_map.set_land((x, y), Land(TYPE_CODES[token[0]], int(color), int(amount)))

    return game_map


@pytest.fixture
def make_map():
    """Factory building maps from compact cell tokens."""
    return build_map


@pytest.fixture
def rng():
    """Deterministic RNG seeded at 42."""
    return random.Random(42)
