"""A player's websocket connection carrying game actions."""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Any

from websockets.exceptions import ConnectionClosed, WebSocketException

from .model import NIL_ID, Action, marshal_action, unmarshal_action

logger = logging.getLogger(__name__)


class ConnectionClosedError(ConnectionError):
    """Raised when the websocket connection is closed."""


class Client:
    """Reads actions from and writes actions to one websocket connection.

    ``ws`` is a synchronous websocket connection offering ``recv``, ``send``
    and ``close``.
    """

    def __init__(self, ws: Any) -> None:
        self.ws = ws
        self.connected = True
        self.player_id: uuid.UUID = NIL_ID
        self._lock = threading.Lock()

    def handle_in_messages(self) -> Action:
        """Wait for the next action from the peer.

        Raises ConnectionClosedError once the connection is closed and
        ValueError when a message cannot be decoded.
        """
        try:
            data = self.ws.recv()
        except ConnectionClosed as exc:
            self._close()
            self.connected = False
            logger.info("player %s connection closed", self.player_id)
            raise ConnectionClosedError(f"connection closed: {exc}") from exc
        try:
            action = unmarshal_action(data)
        except ValueError as exc:
            logger.warning("%s", exc)
            raise
        logger.info("player %s getting %s", self.player_id, action.type.value)
        return action

    def send(self, action: Action) -> None:
        """Write an action to the peer; does nothing once disconnected."""
        if not self.connected:
            return
        with self._lock:
            logger.info("player %s sending %s", self.player_id, action.type.value)
            try:
                self.ws.send(marshal_action(action))
            except ConnectionClosed as exc:
                raise ConnectionClosedError(f"write: {exc}") from exc

    def _close(self) -> None:
        try:
            self.ws.close()
        except (OSError, WebSocketException) as exc:
            logger.warning("error closing websocket: %s", exc)