"""A networked real-time strategy game with fog of war: shared game logic, a websocket server and a pygame client."""

__version__ = "0.1.0"