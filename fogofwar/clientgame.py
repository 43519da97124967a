"""The player's view of the game: camera, selection, orders and fog of war."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

import pygame

from .logic import GameLogic
from .model import (
    Action,
    Dispatch,
    MapLoadSuccessAction,
    MoveStartAction,
    MoveStartPayload,
    MoveStepAction,
    PlayerJoinSuccessAction,
    SpawnUnitAction,
    Unit,
    new_map_load_action,
)
from .point import Point, Rect, rect
from .screen import TILE_SIZE, Screen, empty_screen
from .store import Store

logger = logging.getLogger(__name__)

CAMERA_SPEED = 2
SELECTION_COLOR = (0, 255, 0, 128)


@dataclass
class InputState:
    """Keyboard and mouse state for one frame."""

    left: bool = False
    right: bool = False
    up: bool = False
    down: bool = False
    shift: bool = False
    mouse_left: bool = False
    mouse_right: bool = False
    focused: bool = True
    cursor: tuple[int, int] = (0, 0)


def _div_trunc(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def unit_rect(unit: Unit) -> Rect:
    """The unit's area in world pixels."""
    position = unit.position.mul(TILE_SIZE).image_point()
    return Rect(position, position.add(unit.size))


class ClientGame(GameLogic):
    """Game logic with a camera, unit selection and fog of war."""

    def __init__(self, player_id: uuid.UUID, store: Store, en_dispatch: Dispatch) -> None:
        super().__init__(store)
        self.player_id = player_id
        self.en_dispatch = en_dispatch
        self.camera_x = 0
        self.camera_y = 0
        self.center_x = 0
        self.center_y = 0
        self.selection_box: Rect | None = None
        self.screen: Screen = empty_screen()

    def handle_action(self, action: Action, dispatch: Dispatch) -> None:
        logger.info("client handle %s", action.type.value)
        super().handle_action(action, dispatch)
        if isinstance(action, (SpawnUnitAction, MoveStepAction, PlayerJoinSuccessAction,
                               MapLoadSuccessAction)):
            self.update_visibility()

    def layout(self, outside_width: int, outside_height: int) -> tuple[int, int]:
        """Fit the screen to the window, requesting map data it lacks."""
        min_x, min_y = self.screen_to_world_tiles(0, 0)
        max_x, max_y = self.screen_to_world_tiles(outside_width, outside_height)
        area = rect(min_x, min_y, max_x, max_y)
        if not self.screen.matches(area):
            self.queue_map_load_actions(area)
            self.screen = Screen(area, self.store.get_tiles_by_rect(area))
            self.update_visibility()
        return outside_width, outside_height

    def draw(self, surface: pygame.Surface, tiles_image: pygame.Surface | None) -> None:
        self.screen.draw(surface, tiles_image, self.center_x + self.camera_x,
                         self.center_y + self.camera_y)
        if self.selection_box is None:
            return
        box = self.selection_box
        x1, y1 = self.world_to_screen(box.min.x, box.min.y)
        x2, y2 = self.world_to_screen(box.max.x, box.max.y)
        area = pygame.Rect(x1, y1, x2 - x1, y2 - y1)
        area.normalize()
        if area.width == 0 or area.height == 0:
            return
        overlay = pygame.Surface(area.size, pygame.SRCALPHA)
        overlay.fill(SELECTION_COLOR)
        surface.blit(overlay, area.topleft)

    def update(self, inputs: InputState) -> None:
        """Advance one frame with the given input."""
        self._handle_camera_movement(inputs)
        self._handle_unit_selection(inputs)
        self._handle_unit_movement(inputs)
        for unit in self.store.get_all_units():
            unit.update(self.en_dispatch)

    def _handle_camera_movement(self, inputs: InputState) -> None:
        if inputs.left:
            self.camera_x -= CAMERA_SPEED
        if inputs.right:
            self.camera_x += CAMERA_SPEED
        if inputs.up:
            self.camera_y -= CAMERA_SPEED
        if inputs.down:
            self.camera_y += CAMERA_SPEED

    def _handle_unit_selection(self, inputs: InputState) -> None:
        if inputs.mouse_left and inputs.focused:
            world_x, world_y = self.screen_to_world(*inputs.cursor)
            corner = Point(world_x + 1, world_y + 1)
            if self.selection_box is None:
                self.selection_box = rect(world_x, world_y, corner.x, corner.y)
            else:
                self.selection_box = Rect(self.selection_box.min, corner)
        else:
            self.selection_box = None

        if self.selection_box is not None:
            box = self.selection_box.canon()
            for unit in self.store.get_all_units():
                if box.overlaps(unit_rect(unit)):
                    unit.selected = True
                elif not inputs.shift:
                    unit.selected = False

    def _handle_unit_movement(self, inputs: InputState) -> None:
        if not (inputs.mouse_right and inputs.focused):
            return
        tile_x, tile_y = self.screen_to_world_tiles(*inputs.cursor)
        for unit in self.store.get_units_by_player_id(self.player_id):
            if unit.selected:
                self.en_dispatch(MoveStartAction(MoveStartPayload(unit.id, Point(tile_x, tile_y))))

    def update_visibility(self) -> None:
        """Reveal the tiles the player's units see and hide the rest."""
        visibility = {
            tile.point: False
            for tile in self.screen.tiles.values()
            if tile.visible or tile.unit is not None
        }
        for unit in self.store.get_units_by_player_id(self.player_id):
            origin = unit.position.image_point()
            for offset in unit.i_see:
                visibility[origin.add(offset)] = True
        for point, visible in visibility.items():
            tile = self.screen.tiles.get(point)
            if tile is not None:
                tile.visible = visible

    def screen_to_world(self, screen_x: int, screen_y: int) -> tuple[int, int]:
        return screen_x + self.camera_x, screen_y + self.camera_y

    def screen_to_world_tiles(self, screen_x: int, screen_y: int) -> tuple[int, int]:
        return (
            _div_trunc(screen_x + self.camera_x, TILE_SIZE),
            _div_trunc(screen_y + self.camera_y, TILE_SIZE),
        )

    def world_to_screen(self, world_x: int, world_y: int) -> tuple[int, int]:
        return world_x - self.camera_x, world_y - self.camera_y

    def queue_map_load_actions(self, area: Rect) -> None:
        """Request map data for the parts of ``area`` outside the current screen."""
        current = self.screen.area
        if area.min.x < current.min.x:
            self.en_dispatch(new_map_load_action(
                rect(area.min.x, area.min.y, current.min.x, current.max.y), self.player_id))
        if area.min.y < current.min.y:
            self.en_dispatch(new_map_load_action(
                rect(area.min.x, area.min.y, current.max.x, current.min.y), self.player_id))
        if area.max.x > current.max.x:
            self.en_dispatch(new_map_load_action(
                rect(current.min.x, current.max.y, area.max.x, area.max.y), self.player_id))
        if area.max.y > current.max.y:
            self.en_dispatch(new_map_load_action(
                rect(current.max.y, current.min.y, area.max.x, area.max.y), self.player_id))