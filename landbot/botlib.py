"""
Bot Library for the Territory Conquest Game

This library handles the WebSocket connection, message parsing and game loop
so that bot implementations only need to decide one move per turn.

Usage:
1. Inherit from GameBot
2. Implement the play_turn() method
3. Call bot.run() to start the bot

Example:
    class MyBot(GameBot):
        def play_turn(self, game_map):
            for pos, land in game_map.items():
                if land.color == self.my_color and land.amount > 1:
                    return Command(pos, game_map.neighbours(pos)[0])
            return None

    bot = MyBot("my_game", "my_bot_id")
    bot.run()
"""

import asyncio
import json
import logging
import websockets
import random
import string
from typing import List, Dict, Optional, Any, Callable
from dataclasses import dataclass
from abc import ABC, abstractmethod

from landbot.config import ServerConfig
from landbot.core import GameMap, Pos

# Set up logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


@dataclass
class Command:
    """Represents a movement command."""
    from_pos: Pos
    to_pos: Pos
    half: bool = False

    def __post_init__(self):
        """Validate command data after initialization."""
        if self.from_pos == self.to_pos:
            raise ValueError("Cannot move armies to the same tile")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format for JSON serialization."""
        return {
            "from": list(self.from_pos),
            "to": list(self.to_pos),
            "half": self.half
        }


class GameBot(ABC):
    """
    Abstract base class for game bots. Handles all WebSocket communication
    and keeps track of the bot's color and teammates.
    """

    def __init__(self, game_id: Optional[str] = None, player_id: Optional[str] = None,
                 server_url: str = ServerConfig.URL):
        """
        Initialize the bot.

        Args:
            game_id: ID of the game to join (if None, will join "default" game)
            player_id: Unique identifier for this bot
            server_url: WebSocket URL of the game server
        """
        if not player_id:
            random_string = ''.join(random.choices(string.ascii_lowercase + string.digits, k=4))
            player_id = str(self.__class__.__name__) + " " + random_string

        self.player_id = player_id
        self.game_id = game_id if game_id is not None else "default"
        self.server_url = server_url
        self.websocket = None
        self.game_map: Optional[GameMap] = None
        self.game_status = "waiting"
        self.turn = 0
        self.my_color = 0
        self.teammates: List[int] = []
        self.running = False

        # Callbacks
        self.on_game_ended: Optional[Callable[[Dict], None]] = None

        logger.info(f"Bot {self.player_id} initialized for game {self.game_id}")

    @abstractmethod
    def play_turn(self, game_map: GameMap) -> Optional[Command]:
        """
        Main bot logic - implement this method.

        Args:
            game_map: Current map snapshot

        Returns:
            Command to execute this turn, or None to pass
        """
        pass

    def on_new_game(self) -> None:
        """Called when the bot is assigned to a game or the game is reset."""
        pass

    def _update_identity(self, message: Dict[str, Any]) -> None:
        if "color" in message:
            self.my_color = int(message["color"])
        if "teammates" in message:
            self.teammates = [int(color) for color in message["teammates"]]

    @property
    def is_game_active(self) -> bool:
        """Check if game is currently active."""
        return self.game_status == "active"

    # Connection and game loop management

    async def connect(self) -> bool:
        """Connect to the game server."""
        try:
            logger.info(f"[{self.player_id}] Connecting to {self.server_url}")
            self.websocket = await websockets.connect(self.server_url)

            # Join as bot with game ID
            join_message = {
                "type": "join_as_bot",
                "player_id": self.player_id,
                "game_id": self.game_id
            }
            await self.websocket.send(json.dumps(join_message))

            logger.info(f"[{self.player_id}] Sent join request")
            return True

        except Exception as e:
            logger.error(f"[{self.player_id}] Connection failed: {e}")
            return False

    async def disconnect(self):
        """Disconnect from the server."""
        if self.websocket:
            await self.websocket.close()
            self.websocket = None
            logger.info(f"[{self.player_id}] Disconnected")

    async def send_command(self, command: Optional[Command]) -> None:
        """Send this turn's command to the server; None passes the turn."""
        if not self.websocket:
            return

        message = {
            "type": "move_command",
            "commands": [command.to_dict()] if command else []
        }

        try:
            await self.websocket.send(json.dumps(message))
            logger.debug(f"[{self.player_id}] Sent {message['commands']}")
        except Exception as e:
            logger.error(f"[{self.player_id}] Failed to send command: {e}")

    async def handle_message(self, message: Dict[str, Any]) -> None:
        """Handle incoming message from server."""
        message_type = message.get("type")

        if message_type == "connection_confirmed":
            self._update_identity(message)
            logger.info(f"[{self.player_id}] Connection confirmed for game {message.get('game_id')}, "
                        f"color {self.my_color}, teammates {self.teammates}")
            self.on_new_game()

        elif message_type == "game_state":
            self._update_identity(message)
            self.game_status = message.get("game_status", "waiting")
            self.turn = message.get("turn", 0)

            if "map" in message:
                try:
                    self.game_map = GameMap.from_dict(message["map"])
                except ValueError as e:
                    logger.error(f"[{self.player_id}] Invalid map in turn {self.turn}: {e}")
                    self.game_map = None

            if self.is_game_active and self.game_map is None:
                await self.send_command(None)
            elif self.is_game_active:
                try:
                    command = self.play_turn(self.game_map)
                    await self.send_command(command)
                except Exception as e:
                    logger.error(f"[{self.player_id}] Error in play_turn: {e}")
                    # Pass so the game is not blocked
                    await self.send_command(None)

        elif message_type == "game_over":
            logger.info(f"[{self.player_id}] Game over!")
            rankings = message.get("final_rankings", [])
            logger.info(f"[{self.player_id}] Final rankings: {rankings}")
            if self.on_game_ended:
                self.on_game_ended(message)
            self.running = False

        elif message_type == "turn_processed":
            logger.debug(f"[{self.player_id}] Turn {message.get('turn')} processed")

        elif message_type == "game_reset":
            logger.info(f"[{self.player_id}] Game reset")
            self.game_map = None
            self.on_new_game()

        elif message_type == "error":
            error_msg = message.get("message", "Unknown error")
            logger.warning(f"[{self.player_id}] Server error: {error_msg}")

        else:
            logger.debug(f"[{self.player_id}] Unknown message type: {message_type}")

    async def game_loop(self) -> None:
        """Main game loop - handles messages from server."""
        try:
            while self.running:
                try:
                    # Wait for message with timeout
                    message_str = await asyncio.wait_for(
                        self.websocket.recv(),
                        timeout=ServerConfig.MESSAGE_TIMEOUT
                    )

                    message = json.loads(message_str)
                    await self.handle_message(message)

                except asyncio.TimeoutError:
                    logger.warning(f"[{self.player_id}] Timeout waiting for server message")
                    break

                except websockets.exceptions.ConnectionClosed:
                    logger.info(f"[{self.player_id}] Connection closed by server")
                    break

        except Exception as e:
            logger.error(f"[{self.player_id}] Game loop error: {e}")
        finally:
            self.running = False

    def run(self) -> None:
        """Run the bot (blocking call)."""
        asyncio.run(self._run_async())

    async def _run_async(self) -> None:
        """Async version of run."""
        self.running = True

        try:
            # Connect to server
            if not await self.connect():
                return

            # Start game loop
            await self.game_loop()

        finally:
            await self.disconnect()
            logger.info(f"[{self.player_id}] Bot terminated")
