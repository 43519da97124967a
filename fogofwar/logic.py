"""Game rules shared by the client and the server."""

from __future__ import annotations

import logging
import uuid

from .model import (
    Action,
    Dispatch,
    MapLoadSuccessAction,
    MoveStartAction,
    MoveStepAction,
    MoveStopAction,
    PlayerJoinSuccessAction,
    SpawnUnitAction,
    Unit,
)
from .point import Point
from .store import Store

logger = logging.getLogger(__name__)


class PositionTakenError(Exception):
    """Raised when a unit would be placed on a tile held by another unit."""


class GameLogic:
    """Applies actions to a store."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def handle_action(self, action: Action, dispatch: Dispatch) -> None:
        match action:
            case PlayerJoinSuccessAction():
                self._handle_player_join_success(action)
            case SpawnUnitAction():
                self._handle_spawn_unit(action)
            case MoveStartAction():
                self._handle_move_start(action)
            case MoveStepAction():
                self._handle_move_step(action, dispatch)
            case MoveStopAction():
                self._handle_move_stop(action)
            case MapLoadSuccessAction():
                self._handle_map_load_success(action)

    def _unit(self, unit_id: uuid.UUID) -> Unit:
        unit = self.store.get_unit_by_id(unit_id)
        if unit is None:
            raise KeyError(f"unknown unit {unit_id}")
        return unit

    def _handle_player_join_success(self, action: PlayerJoinSuccessAction) -> None:
        for unit in action.payload.units:
            self.store.store_unit(unit)
            try:
                self._place_unit(unit)
            except PositionTakenError as exc:
                logger.warning("%s", exc)
        for player in action.payload.players:
            self.store.store_player(player)

    def _handle_spawn_unit(self, action: SpawnUnitAction) -> None:
        unit = action.payload
        self.store.store_unit(unit)
        try:
            self._place_unit(unit)
        except PositionTakenError as exc:
            logger.warning("%s", exc)

    def _handle_move_start(self, action: MoveStartAction) -> None:
        self._unit(action.payload.unit_id).move_to(action.payload.point)

    def _handle_move_step(self, action: MoveStepAction, dispatch: Dispatch) -> None:
        payload = action.payload
        for tile in self.store.get_tiles_by_unit_id(payload.unit_id):
            tile.unit = None
        unit = self._unit(payload.unit_id)
        unit.position = payload.position
        unit.path = payload.path
        unit.step = payload.step

        try:
            self._place_unit(unit)
        except PositionTakenError as exc:
            logger.warning("%s", exc)

        # Reserve the next tile on the path.
        if len(payload.path) > payload.step:
            try:
                self._place_unit(unit, payload.path[payload.step])
            except PositionTakenError:
                dispatch(MoveStopAction(unit.id))

    def _handle_move_stop(self, action: MoveStopAction) -> None:
        unit = self._unit(action.payload)
        unit.path = []
        unit.step = 0

    def _handle_map_load_success(self, action: MapLoadSuccessAction) -> None:
        for tile in action.payload.tiles:
            self.store.store_tile(tile)

    def _place_unit(self, unit: Unit, *positions: Point) -> None:
        for p in positions or (unit.position.image_point(),):
            tile = self.store.get_tile(p)
            if tile is None:
                tile = self.store.create_tile(p)
            if tile.unit is not None and tile.unit.id != unit.id:
                raise PositionTakenError(f"position {p.x},{p.y} is taken")
            tile.unit = unit