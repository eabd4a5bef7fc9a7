# ===== SERVER CONFIGURATION =====
class ServerConfig:
    """WebSocket connection settings."""
    HOST = "localhost"
    PORT = 8765
    URL = f"ws://{HOST}:{PORT}"

    # Give up on the game loop after this long without a message
    MESSAGE_TIMEOUT = 60.0  # seconds


# ===== BOT DECISION ENGINE =====
class BotConfig:
    """Decision engine configuration."""

    # Target reselections per turn, and search attempts per start tile
    CALC_CNT = 5

    # Exponent applied to path length when scoring a route
    SCORE_POWER = 1.5

    # Stop retrying a start tile on this (zero-based) attempt if its best
    # score is below EARLY_ABORT_RATIO of the best score over all starts
    EARLY_ABORT_ATTEMPT = 2
    EARLY_ABORT_RATIO = 0.5

    # Route length cap while no hostile tile is visible
    QUIET_SEARCH_DEPTH = 6

    # Armies above which a neutral city is taken with a split move if threatened
    RULE_B_MIN_ARMY = 25
