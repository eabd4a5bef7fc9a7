"""Turn decision engine and websocket client for a grid territory-conquest bot."""
