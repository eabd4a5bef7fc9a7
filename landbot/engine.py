"""
Turn decision engine.

Each turn the engine looks for an immediately profitable capture next to its
territory. When there is none it plans a route toward a long-term target with
a randomized best-first search, and keeps advancing along that route over the
following turns.
"""

import logging
import math
import random
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterable, List, Optional, Set, Tuple

from landbot.config import BotConfig
from landbot.core import GameMap, Land, LandType, Pos

logger = logging.getLogger(__name__)

# (source, destination, split army in half)
Movement = Tuple[Pos, Pos, bool]

# (tile, accumulated score, path length, first hop)
SearchState = Tuple[Pos, int, int, Optional[Pos]]

TARGET_PRIORITY_UNRESOLVED = 9

SOURCE_WEIGHTS = {
    LandType.LAND: 1,
    LandType.CITY: 2,
    LandType.GENERAL: 3,
}
SOURCE_WEIGHT_OTHER = 4


@dataclass
class SearchContext:
    """Mutable state shared by every search attempt of one planner call."""
    queue: Deque[SearchState] = field(default_factory=deque)
    visited: Set[Pos] = field(default_factory=set)
    best_score: float = -math.inf
    best_hop: Optional[Pos] = None
    best_start: Optional[Pos] = None

    def reset_attempt(self, start: Pos, start_score: int) -> None:
        """Clear the queue and visited set and seed them with a start tile."""
        self.queue.clear()
        self.visited.clear()
        self.queue.append((start, start_score, 0, None))
        self.visited.add(start)


class Bot:
    """
    Per-game decision engine.

    Holds the state that carries over between turns: the sticky ``target``
    and the committed ``from_pos``, the tile where the advancing army sits.
    """

    def __init__(self, calc_cnt: int = BotConfig.CALC_CNT, score_power: float = BotConfig.SCORE_POWER,
                 my_color: int = 0, teammates: Iterable[int] = (), game_map: Optional[GameMap] = None,
                 rng: Optional[random.Random] = None, seed: Optional[int] = None):
        self.calc_cnt = calc_cnt
        self.score_power = score_power
        self.my_color = my_color
        self.teammates: Set[int] = set(teammates)
        self.gm = game_map if game_map is not None else GameMap(1, 1)
        self.rng = rng if rng is not None else random.Random(seed)

        self.target: Optional[Pos] = None
        self.from_pos: Optional[Pos] = None

    def reset(self) -> None:
        """Forget the current target and committed route."""
        self.target = None
        self.from_pos = None

    # Ownership helpers

    def _is_friendly(self, land: Land) -> bool:
        return land.color == self.my_color or land.color in self.teammates

    def _is_hostile(self, land: Land) -> bool:
        """Owned by a player that is neither me nor a teammate."""
        return not land.is_neutral and not self._is_friendly(land)

    def _has_other_threat(self, source: Pos, dest: Pos, include_neutral: bool) -> bool:
        """Check whether a land or city next to ``source`` (other than ``dest``) is not ours."""
        for neighbour in self.gm.neighbours(source):
            land = self.gm[neighbour]

            if neighbour == dest or land.type not in (LandType.LAND, LandType.CITY):
                continue

            if self._is_hostile(land) or (include_neutral and not self._is_friendly(land)):
                return True

        return False

    # Move tactician

    def move_to(self, source: Pos, dest: Pos) -> Movement:
        """
        Decide whether a move from ``source`` to ``dest`` should split the army.

        An attack on a hostile tile weak enough to be taken with half the army
        is split when another hostile land or city touches the source. Taking a
        neutral city with a large stack is split when any other non-friendly
        land or city touches the source.
        """
        from_land = self.gm[source]
        to_land = self.gm[dest]

        half = False

        if self._is_hostile(to_land) and (from_land.amount - 1) // 2 > to_land.amount:
            half = self._has_other_threat(source, dest, include_neutral=False)

        if (not half
                and to_land.type == LandType.CITY
                and to_land.is_neutral
                and from_land.amount > BotConfig.RULE_B_MIN_ARMY):
            half = self._has_other_threat(source, dest, include_neutral=True)

        return source, dest, half

    # Target selector

    def _target_priority(self, land: Land) -> int:
        if land.type == LandType.GENERAL:
            return 1
        if land.type == LandType.CITY:
            return 5 if land.is_neutral else 1
        if land.type == LandType.LAND:
            return 3 if land.is_neutral else 2
        return TARGET_PRIORITY_UNRESOLVED

    def new_target(self) -> Optional[Pos]:
        """
        Pick the most valuable visible tile that is not ours or a teammate's.

        Candidates are shuffled before a stable sort so ties are broken at random.
        """
        targets = [
            pos for pos, land in self.gm.items()
            if self.gm.accessible(pos) and land.type.is_known and not self._is_friendly(land)
        ]

        self.rng.shuffle(targets)
        targets.sort(key=lambda pos: self._target_priority(self.gm[pos]))

        return targets[0] if targets else None

    # Local expander

    def _expansion_score(self, from_land: Land, to_land: Land) -> int:
        from_score = SOURCE_WEIGHTS.get(from_land.type, SOURCE_WEIGHT_OTHER)

        if to_land.type == LandType.GENERAL:
            to_score = 10
        elif to_land.type == LandType.CITY:
            to_score = 40 if to_land.is_neutral else 20
        elif to_land.type == LandType.LAND:
            to_score = 50 if to_land.is_neutral else 30
        else:
            to_score = 90

        return from_score + to_score

    def capture_candidates(self) -> List[Tuple[Pos, Pos]]:
        """List every one-step capture the bot can afford this turn."""
        moves = []

        for source, from_land in self.gm.items():
            if from_land.color != self.my_color:
                continue

            for dest in self.gm.neighbours(source):
                to_land = self.gm[dest]

                if self._is_friendly(to_land):
                    continue

                # Owned cities resist capture more strongly
                delta = 2 if to_land.type == LandType.CITY and not to_land.is_neutral else 1

                if from_land.amount > to_land.amount + delta:
                    moves.append((source, dest))

        return moves

    def expand(self) -> Optional[Movement]:
        """
        Choose this turn's movement.

        Takes the best immediate capture if there is one, otherwise advances
        toward the current target.

        Returns:
            Movement to perform, or None to pass
        """
        moves = self.capture_candidates()

        if not moves:
            return self.move_to_target()

        self.rng.shuffle(moves)

        def rank(move: Tuple[Pos, Pos]) -> Tuple[int, int]:
            from_land, to_land = self.gm[move[0]], self.gm[move[1]]
            return self._expansion_score(from_land, to_land), to_land.amount - from_land.amount

        moves.sort(key=rank)
        source, dest = moves[0]

        if source != self.from_pos and dest != self.target:
            if self.target is not None:
                logger.debug(f"Expansion {source} -> {dest} left the planned route, dropping target {self.target}")
            self.target = None

        movement = self.move_to(source, dest)
        logger.debug(f"Expanding {movement}")
        return movement

    # Path planner

    def _path_score(self, pos: Pos) -> int:
        land = self.gm[pos]

        if self._is_friendly(land):
            return land.amount - 1
        return -land.amount - 1

    def _hostile_visible(self) -> bool:
        for _, land in self.gm.items():
            if self._is_hostile(land) and land.type in (LandType.GENERAL, LandType.CITY, LandType.LAND):
                return True
        return False

    def _is_safe_start(self, pos: Pos) -> bool:
        for neighbour in self.gm.neighbours(pos):
            land = self.gm[neighbour]
            if self._is_hostile(land) and land.type in (LandType.LAND, LandType.CITY):
                return False
        return True

    def _search_from(self, ctx: SearchContext, start: Pos, target: Pos, depth_limited: bool) -> None:
        """
        Run up to ``calc_cnt`` randomized breadth-first searches from ``start``
        toward ``target`` and fold the best route into ``ctx``.

        A route reaching the target scores ``score / length ** score_power``.
        """
        best_score = -math.inf
        best_hop = None

        for attempt in range(self.calc_cnt):
            ctx.reset_attempt(start, self._path_score(start))

            while ctx.queue:
                cur, amount, length, hop = ctx.queue.popleft()

                if cur == target:
                    score = amount / length ** self.score_power

                    # Never sacrifice the army on a single losing hop
                    if score > best_score and not (amount < 0 and length < 2):
                        best_score = score
                        best_hop = hop
                        continue

                if depth_limited and length > BotConfig.QUIET_SEARCH_DEPTH:
                    continue

                neighbours = self.gm.neighbours(cur)
                self.rng.shuffle(neighbours)

                for nxt in neighbours:
                    land = self.gm[nxt]

                    if land.type == LandType.GENERAL and land.color in self.teammates:
                        continue
                    if nxt in ctx.visited:
                        continue
                    ctx.visited.add(nxt)

                    first_hop = nxt if cur == start else hop
                    ctx.queue.append((nxt, amount + self._path_score(nxt), length + 1, first_hop))

            if (attempt == BotConfig.EARLY_ABORT_ATTEMPT
                    and best_score < ctx.best_score * BotConfig.EARLY_ABORT_RATIO):
                break

        if best_score > ctx.best_score:
            ctx.best_score = best_score
            ctx.best_hop = best_hop
            ctx.best_start = start

    def _start_tiles(self) -> List[Pos]:
        if self.from_pos is not None:
            return [self.from_pos]

        return [
            pos for pos, land in self.gm.items()
            if land.color == self.my_color and land.amount > 1 and self._is_safe_start(pos)
        ]

    def move_to_target(self, try_time: int = 0) -> Optional[Movement]:
        """
        Advance one hop along the best route toward the current target.

        A failed search discards the target and tries a freshly selected one,
        at most ``calc_cnt - try_time`` times in total.

        Returns:
            Movement to perform, or None if no route was found
        """
        if self.from_pos is not None and self.gm[self.from_pos].color != self.my_color:
            logger.debug(f"Committed tile {self.from_pos} was lost, abandoning route")
            self.from_pos = None

        for _ in range(try_time, self.calc_cnt):
            if self.target is None or self._is_friendly(self.gm[self.target]):
                self.target = self.new_target()
                self.from_pos = None
                logger.debug(f"New target: {self.target}")

            if self.target is None:
                return None

            ctx = SearchContext()
            depth_limited = not self._hostile_visible()

            for start in self._start_tiles():
                self._search_from(ctx, start, self.target, depth_limited)

            if ctx.best_hop is None:
                logger.debug(f"No route to target {self.target}")
                self.target = None
                continue

            if ctx.best_hop == self.target:
                self.target = None

            if self.from_pos is None:
                self.from_pos = ctx.best_start

            movement = self.move_to(self.from_pos, ctx.best_hop)
            self.from_pos = ctx.best_hop

            logger.debug(f"Advancing {movement} (score {ctx.best_score:.2f})")
            return movement

        return None
