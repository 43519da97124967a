"""The game server: authoritative game state shared over websockets."""

from __future__ import annotations

import argparse
import copy
import logging
import threading
import urllib.parse
import uuid
from http import HTTPStatus
from typing import Any

from websockets.sync.server import serve

from .comm import Client, ConnectionClosedError
from .logic import GameLogic
from .model import (
    Action,
    Dispatch,
    MapLoadAction,
    MapLoadSuccessAction,
    MapLoadSuccessPayload,
    MoveStepAction,
    MoveStopAction,
    PlayerJoinAction,
    PlayerJoinSuccessAction,
    PlayerJoinSuccessPayload,
    SpawnUnitAction,
    new_unit,
)
from .point import Point, to_pf
from .store import Store
from .world import DEFAULT_SERVER_ADDRESS, Tile, WorldRequest, WorldService, WorldServiceError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8000
WS_PATH = "/ws"
UNIT_SIZE = 16


class ServerGame(GameLogic):
    """Game logic with the server's duties: admitting players and serving map data."""

    def __init__(self, store: Store, world_service: Any) -> None:
        super().__init__(store)
        self.world_service = world_service
        # Starting point of each player; a free point maps to None.
        self.starting: dict[Point, uuid.UUID | None] = {
            Point(1, 1): None,
            Point(15, 1): None,
            Point(1, 15): None,
            Point(15, 15): None,
        }

    def handle_action(self, action: Action, dispatch: Dispatch) -> None:
        logger.info("server handle %s", action.type.value)
        super().handle_action(action, dispatch)
        match action:
            case PlayerJoinAction():
                self._handle_player_join(action, dispatch)
            case MapLoadAction():
                self._handle_map_load(action, dispatch)

    def _handle_player_join(self, action: PlayerJoinAction, dispatch: Dispatch) -> None:
        player = action.payload
        existing = self.store.get_player(player.id) is not None
        self.store.store_player(player)

        dispatch(
            PlayerJoinSuccessAction(
                PlayerJoinSuccessPayload(
                    player_id=player.id,
                    units=[copy.copy(u) for u in self.store.get_all_units()],
                    players=[copy.copy(p) for p in self.store.get_all_players()],
                )
            )
        )

        # Units are spawned only for new players.
        if existing:
            return

        start = Point()
        for point, owner in self.starting.items():
            if owner is None:
                start = point
                self.starting[point] = player.id
                break
        unit = new_unit(player.id, player.color, to_pf(start), UNIT_SIZE, UNIT_SIZE)
        dispatch(SpawnUnitAction(unit))

    def _handle_map_load(self, action: MapLoadAction, dispatch: Dispatch) -> None:
        if self._is_cached(action):
            self._dispatch_cached(action, dispatch)
        else:
            self._load_from_world_service(action, dispatch)

    def _is_cached(self, action: MapLoadAction) -> bool:
        p = action.payload
        return (
            self.store.get_tile(Point(p.min_x, p.min_y)) is not None
            and self.store.get_tile(Point(p.max_x, p.max_y)) is not None
        )

    def _cached_tiles(self, action: MapLoadAction) -> list[Tile]:
        p = action.payload
        tiles = []
        for x in range(p.min_x, p.max_x + 1):
            for y in range(p.min_y, p.max_y + 1):
                tile = self.store.get_tile(Point(x, y))
                if tile is not None:
                    tiles.append(tile.tile)
        return tiles

    def _dispatch_cached(self, action: MapLoadAction, dispatch: Dispatch) -> None:
        dispatch(
            MapLoadSuccessAction(
                MapLoadSuccessPayload(
                    tiles=self._cached_tiles(action),
                    player_id=action.payload.player_id,
                )
            )
        )

    def _load_from_world_service(self, action: MapLoadAction, dispatch: Dispatch) -> None:
        p = action.payload
        request = WorldRequest(min_x=p.min_x, min_y=p.min_y, max_x=p.max_x, max_y=p.max_y)
        try:
            response = self.world_service.load(request)
        except WorldServiceError as exc:
            logger.error("error loading map: %s", exc)
            return
        dispatch(
            MapLoadSuccessAction(
                MapLoadSuccessPayload(
                    tiles=response.tiles,
                    min_x=response.min_x,
                    min_y=response.min_y,
                    max_x=response.max_x,
                    max_y=response.max_y,
                    player_id=p.player_id,
                )
            )
        )


class Server:
    """Routes actions between connected players and the server game."""

    def __init__(self, game: ServerGame) -> None:
        self.game = game
        self.clients: dict[uuid.UUID, Client] = {}
        self._clients_lock = threading.Lock()

    def handle_connection(self, ws: Any) -> None:
        """Serve one websocket connection until it closes."""
        client = Client(ws)
        try:
            while client.connected:
                try:
                    action = client.handle_in_messages()
                except (ConnectionClosedError, ValueError) as exc:
                    logger.warning("%s", exc)
                    continue
                self.process_action(client, action)
        finally:
            try:
                ws.close()
            except OSError as exc:
                logger.warning("error closing websocket: %s", exc)

    def process_action(self, client: Client, action: Action) -> None:
        if isinstance(action, PlayerJoinAction):
            client.player_id = action.payload.id
            with self._clients_lock:
                self.clients[client.player_id] = client

        self.broadcast_others(client, action)
        self.game.handle_action(action, self._dispatcher(client))

    def broadcast_others(self, client: Client, action: Action) -> None:
        """Send an action to every client but its sender."""
        if isinstance(action, (PlayerJoinAction, MapLoadAction)):
            return
        for other in self._client_list():
            if other is not client:
                self._send_logged(other, action)

    def broadcast_all(self, action: Action) -> None:
        for client in self._client_list():
            self._send_logged(client, action)

    def route(self, client: Client, action: Action) -> None:
        """Deliver an action produced by the game; raise ConnectionClosedError on failure."""
        dispatch = self._dispatcher(client)
        match action:
            case MoveStepAction() | MoveStopAction() | SpawnUnitAction():
                self.broadcast_all(action)
                self.game.handle_action(action, dispatch)
            case PlayerJoinSuccessAction():
                client.send(action)
            case MapLoadSuccessAction():
                client.send(action)
                self.game.handle_action(action, dispatch)
            case _:
                self.broadcast_all(action)

    def _dispatcher(self, client: Client) -> Dispatch:
        def dispatch(action: Action) -> None:
            try:
                self.route(client, action)
            except ConnectionClosedError as exc:
                logger.warning("route: %s", exc)

        return dispatch

    def _client_list(self) -> list[Client]:
        with self._clients_lock:
            return list(self.clients.values())

    @staticmethod
    def _send_logged(client: Client, action: Action) -> None:
        try:
            client.send(action)
        except ConnectionClosedError as exc:
            logger.warning("%s", exc)


def _only_ws_path(connection: Any, request: Any) -> Any:
    if urllib.parse.urlsplit(request.path).path != WS_PATH:
        return connection.respond(HTTPStatus.NOT_FOUND, "Not Found\n")
    return None


def main(argv: list[str] | None = None) -> int:
    """Run the game server."""
    parser = argparse.ArgumentParser(description="Fog of war game server.")
    parser.add_argument("--host", default="", help="address to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    parser.add_argument(
        "--world", default=DEFAULT_SERVER_ADDRESS, help="address of the world service"
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    server = Server(ServerGame(Store(), WorldService(server_address=args.world)))
    with serve(
        server.handle_connection, args.host, args.port, process_request=_only_ws_path
    ) as ws_server:
        logger.info("server started on :%d", args.port)
        try:
            ws_server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0