"""Thread-safe in-memory storage of units, players and map tiles."""

from __future__ import annotations

import threading
import uuid

from .model import GameTile, Player, Unit
from .point import Point, Rect
from .world import Tile


class Store:
    """Holds the game state shared by the game logic and its front-ends."""

    def __init__(self) -> None:
        self._unit_lock = threading.Lock()
        self._tile_lock = threading.Lock()
        self._player_lock = threading.Lock()
        self._units: dict[uuid.UUID, Unit] = {}
        self._tiles: dict[Point, GameTile] = {}
        self._players: dict[uuid.UUID, Player] = {}

    def store_unit(self, unit: Unit) -> None:
        with self._unit_lock:
            self._units[unit.id] = unit

    def get_unit_by_id(self, unit_id: uuid.UUID) -> Unit | None:
        with self._unit_lock:
            return self._units.get(unit_id)

    def get_all_units(self) -> list[Unit]:
        with self._unit_lock:
            return list(self._units.values())

    def get_units_by_player_id(self, player_id: uuid.UUID) -> list[Unit]:
        with self._unit_lock:
            return [u for u in self._units.values() if u.owner == player_id]

    def get_player(self, player_id: uuid.UUID) -> Player | None:
        with self._player_lock:
            return self._players.get(player_id)

    def get_all_players(self) -> list[Player]:
        with self._player_lock:
            return list(self._players.values())

    def store_player(self, player: Player) -> None:
        with self._player_lock:
            self._players[player.id] = player

    def get_tiles_by_unit_id(self, unit_id: uuid.UUID) -> list[GameTile]:
        with self._tile_lock:
            return [
                t
                for t in self._tiles.values()
                if t.unit is not None and t.unit.id == unit_id
            ]

    def store_tile(self, tile: Tile) -> GameTile:
        """Store map data for a tile, keeping any unit already standing there."""
        with self._tile_lock:
            return self._store_tile_locked(tile)

    def _store_tile_locked(self, tile: Tile) -> GameTile:
        existing = self._tiles.get(tile.point)
        if existing is not None:
            existing.tile = tile
            return existing
        game_tile = GameTile(tile)
        self._tiles[tile.point] = game_tile
        return game_tile

    def get_tile(self, point: Point) -> GameTile | None:
        with self._tile_lock:
            return self._tiles.get(point)

    def create_tile(self, point: Point) -> GameTile:
        return self.store_tile(Tile(point=point))

    def get_tiles_by_rect(self, area: Rect) -> dict[Point, GameTile]:
        """Tiles from ``area.min`` to ``area.max`` inclusive, creating missing ones."""
        with self._tile_lock:
            result: dict[Point, GameTile] = {}
            for x in range(area.min.x, area.max.x + 1):
                for y in range(area.min.y, area.max.y + 1):
                    p = Point(x, y)
                    tile = self._tiles.get(p)
                    if tile is None:
                        tile = self._store_tile_locked(Tile(point=p))
                    result[p] = tile
            return result