"""The game client: a window onto the shared game, driven by one player."""

from __future__ import annotations

import argparse
import hashlib
import logging
import random
import threading
import uuid
from typing import Any

from .clientgame import ClientGame, InputState
from .comm import Client, ConnectionClosedError
from .model import (
    Action,
    Color,
    MoveStartAction,
    MoveStepAction,
    MoveStopAction,
    Player,
    PlayerJoinAction,
)
from .store import Store

logger = logging.getLogger(__name__)

SCREEN_WIDTH = 640
SCREEN_HEIGHT = 480
DEFAULT_SERVER_URL = "ws://localhost:8000/ws"
DEFAULT_TILES_IMAGE = "tiles1.png"
FRAME_RATE = 60

_NAMED_COLORS: dict[str, Color] = {
    "red": Color(255, 0, 0, 255),
    "green": Color(0, 255, 0, 255),
    "blue": Color(0, 0, 255, 255),
    "yellow": Color(255, 255, 0, 255),
    "cyan": Color(0, 255, 255, 255),
    "purple": Color(255, 0, 255, 255),
}


def random_rgba() -> Color:
    """A random opaque colour."""
    return Color(random.randrange(256), random.randrange(256), random.randrange(256), 255)


def name_to_color(name: str) -> Color:
    """The colour named by a player's name, or a random one."""
    color = _NAMED_COLORS.get(name.strip().lower())
    return color if color is not None else random_rgba()


def player_id_from_name(name: str) -> uuid.UUID:
    """A stable player identifier derived from the MD5 digest of the name."""
    return uuid.UUID(bytes=hashlib.md5(name.encode("utf-8")).digest())


class GameClient:
    """Connects the player's game to the server."""

    def __init__(self, player_id: uuid.UUID, ws: Any) -> None:
        self.player_id = player_id
        self.connection = Client(ws)
        self.connection.player_id = player_id
        self.game = ClientGame(player_id, Store(), self.process_new_action)

    def _send(self, action: Action) -> None:
        try:
            self.connection.send(action)
        except ConnectionClosedError as exc:
            logger.warning("route: %s", exc)

    def process_new_action(self, action: Action) -> None:
        """Send an action the player originated and apply it locally."""
        self._send(action)
        self.game.handle_action(action, self.route)

    def route(self, action: Action) -> None:
        """Send an action produced by the game; movement is also applied locally."""
        self._send(action)
        if isinstance(action, (MoveStartAction, MoveStepAction, MoveStopAction)):
            self.game.handle_action(action, self.route)

    def start_message_handler(self) -> threading.Thread:
        """Apply actions from the server in a background thread until disconnected."""
        thread = threading.Thread(target=self._handle_messages, daemon=True)
        thread.start()
        return thread

    def _handle_messages(self) -> None:
        while self.connection.connected:
            try:
                action = self.connection.handle_in_messages()
            except (ConnectionClosedError, ValueError) as exc:
                logger.warning("%s", exc)
                continue
            self.game.handle_action(action, self.route)

    def send_player_join(self, name: str) -> None:
        self._send(
            PlayerJoinAction(Player(id=self.player_id, name=name, color=name_to_color(name)))
        )


def _connect(url: str) -> Any:
    from websockets.sync.client import connect

    logger.info("connecting to %s", url)
    try:
        return connect(url)
    except (OSError, TimeoutError, ValueError) as exc:
        logger.error("dial error: %s", exc)
    except Exception as exc:  # websockets reports handshake failures with its own errors
        logger.error("dial error: %s", exc)
    return None


def _read_inputs() -> InputState:
    import pygame

    keys = pygame.key.get_pressed()
    buttons = pygame.mouse.get_pressed()
    return InputState(
        left=bool(keys[pygame.K_LEFT]),
        right=bool(keys[pygame.K_RIGHT]),
        up=bool(keys[pygame.K_UP]),
        down=bool(keys[pygame.K_DOWN]),
        shift=bool(keys[pygame.K_LSHIFT] or keys[pygame.K_RSHIFT]),
        mouse_left=bool(buttons[0]),
        mouse_right=bool(buttons[2]),
        focused=bool(pygame.key.get_focused()),
        cursor=pygame.mouse.get_pos(),
    )


def _run_game(game: ClientGame, name: str, tiles_path: str) -> int:
    import pygame

    pygame.init()
    try:
        pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT), pygame.RESIZABLE)
        pygame.display.set_caption(name)
        try:
            tiles_image = pygame.image.load(tiles_path).convert_alpha()
        except (OSError, pygame.error) as exc:
            logger.error("loading %s: %s", tiles_path, exc)
            return 1
        clock = pygame.time.Clock()
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
            surface = pygame.display.get_surface()
            game.layout(*surface.get_size())
            game.update(_read_inputs())
            surface.fill((0, 0, 0))
            game.draw(surface, tiles_image)
            pygame.display.flip()
            clock.tick(FRAME_RATE)
    finally:
        pygame.quit()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the game client for the named player."""
    parser = argparse.ArgumentParser(description="Fog of war game client.")
    parser.add_argument("name", nargs="?", default="", help="player name")
    parser.add_argument("--server", default=DEFAULT_SERVER_URL, help="websocket URL of the server")
    parser.add_argument("--tiles", default=DEFAULT_TILES_IMAGE, help="tile sprite image")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    if not args.name:
        logger.error("argument missing")
        return 1

    player_id = player_id_from_name(args.name)
    ws = _connect(args.server)
    if ws is None:
        return 1
    try:
        client = GameClient(player_id, ws)
        client.start_message_handler()
        client.send_player_join(args.name)
        return _run_game(client.game, args.name, args.tiles)
    finally:
        try:
            ws.close()
        except OSError as exc:
            logger.warning("error closing websocket: %s", exc)