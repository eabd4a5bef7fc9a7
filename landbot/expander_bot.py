#!/usr/bin/env python3
import sys
from typing import Optional

from landbot.botlib import GameBot, Command
from landbot.config import BotConfig, ServerConfig
from landbot.core import GameMap
from landbot.engine import Bot


class ExpanderBot(GameBot):
    """
    Captures profitable neighbouring tiles first, otherwise advances along a
    planned route toward the most valuable visible target.
    """

    def __init__(self, game_id: Optional[str] = None, player_id: Optional[str] = None,
                 server_url: str = ServerConfig.URL, calc_cnt: int = BotConfig.CALC_CNT,
                 score_power: float = BotConfig.SCORE_POWER, seed: Optional[int] = None):
        super().__init__(game_id, player_id, server_url)
        self.engine = Bot(calc_cnt=calc_cnt, score_power=score_power, seed=seed)

    def on_new_game(self) -> None:
        self.engine.reset()

    def play_turn(self, game_map: GameMap) -> Optional[Command]:
        self.engine.gm = game_map
        self.engine.my_color = self.my_color
        self.engine.teammates = set(self.teammates)

        movement = self.engine.expand()
        if movement is None:
            return None

        from_pos, to_pos, half = movement
        return Command(from_pos, to_pos, half)


def main():
    """Run the expander bot."""
    game_id = sys.argv[1] if len(sys.argv) > 1 else None
    player_id = sys.argv[2] if len(sys.argv) > 2 else None

    bot = ExpanderBot(game_id, player_id)
    bot.run()


if __name__ == "__main__":
    main()
