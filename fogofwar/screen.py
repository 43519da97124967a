"""The visible part of the map and how it is drawn."""

from __future__ import annotations

import binascii
import logging

import pygame

from .model import Color, GameTile, Unit
from .point import Point, Rect

logger = logging.getLogger(__name__)

TILE_SIZE = 16
TILE_SPRITE_SIZE = 16
TILE_SPRITE_X_NUM = 7
SELECTED_BORDER = 2

SELECTED_COLOR = Color(0, 255, 0, 255)
_DIM = (128, 128, 128)

_BACKGROUNDS = {
    "grass": "74CF45FF",
    "water": "68A8C8FF",
    "sand": "BA936BFF",
}
_DEFAULT_BACKGROUND = "grass"

TILE_MAP: dict[str, int] = {
    "plain1": 0,
    "plain2": 1,
    "plain3": 2,
    "forest1": 3,
    "forest2": 4,
    "forest3": 5,
    "sea1": 99,
    "sea2": 99,
    "sea3": 99,
    "river1": 99,
    "river2": 99,
    "river3": 99,
    "mountain1": 10,
    "mountain2": 11,
    "mountain3": 12,
    "hill1": 13,
    "hill2": 13,
    "hill3": 13,
    "lake1": 18,
    "lake2": 19,
    "lake3": 20,
    "sand1": 78,
    "sand2": 78,
    "sand3": 78,
}


def _rgba(c: Color) -> tuple[int, int, int, int]:
    return (c.r, c.g, c.b, c.a)


def color_from_hex(value: str) -> Color:
    """Decode an ``RRGGBBAA`` string; a malformed one gives transparent black."""
    try:
        data = binascii.unhexlify(value)
    except (binascii.Error, ValueError) as exc:
        logger.warning("error decoding hex color %s: %s", value, exc)
        return Color(0, 0, 0, 0)
    if len(data) < 4:
        logger.warning("error decoding hex color %s: too short", value)
        return Color(0, 0, 0, 0)
    return Color(data[0], data[1], data[2], data[3])


def background_color(class_name: str) -> Color:
    """Background colour of a tile style class; grass for unknown classes."""
    return color_from_hex(_BACKGROUNDS.get(class_name, _BACKGROUNDS[_DEFAULT_BACKGROUND]))


def get_tile(class_name: str) -> int:
    """Sprite number of a tile style class; 0 for unknown classes."""
    return TILE_MAP.get(class_name, 0)


class Screen:
    """The tiles currently on screen and the units seen on them."""

    def __init__(self, area: Rect | None = None, tiles: dict[Point, GameTile] | None = None) -> None:
        self.area = area if area is not None else Rect()
        self.tiles: dict[Point, GameTile] = tiles if tiles is not None else {}
        self.units: dict[Unit, bool] = {}

    def matches(self, area: Rect) -> bool:
        """Whether this screen covers the same points as ``area``."""
        if self.area.is_empty() and area.is_empty():
            return True
        return self.area == area

    def draw(self, surface: pygame.Surface, tiles_image: pygame.Surface | None,
             camera_x: int, camera_y: int) -> None:
        for tile in self.tiles.values():
            if tile is None:
                continue
            _draw_tile(tile, surface, tiles_image, camera_x, camera_y)
            if tile.unit is not None:
                self.units[tile.unit] = tile.visible
        for unit, visible in self.units.items():
            if visible:
                _draw_unit(unit, surface, camera_x, camera_y)


def empty_screen() -> Screen:
    return Screen()


def _draw_tile(tile: GameTile, surface: pygame.Surface, tiles_image: pygame.Surface | None,
               camera_x: int, camera_y: int) -> None:
    image = pygame.Surface((TILE_SIZE, TILE_SIZE))
    image.fill(_rgba(background_color(tile.back_style_class)))
    if tiles_image is not None:
        sprite = get_tile(tile.front_style_class)
        sx = (sprite % TILE_SPRITE_X_NUM) * TILE_SPRITE_SIZE
        sy = (sprite // TILE_SPRITE_X_NUM) * TILE_SPRITE_SIZE
        image.blit(tiles_image, (0, 0), area=pygame.Rect(sx, sy, TILE_SPRITE_SIZE, TILE_SPRITE_SIZE))
    if not tile.visible:
        image.fill(_DIM, special_flags=pygame.BLEND_RGB_MULT)
    p = tile.point
    surface.blit(image, (p.x * TILE_SIZE - camera_x, p.y * TILE_SIZE - camera_y))


def _draw_unit(unit: Unit, surface: pygame.Surface, camera_x: int, camera_y: int) -> None:
    position = unit.position.mul(TILE_SIZE)
    x = position.x - camera_x
    y = position.y - camera_y
    if unit.selected:
        border = pygame.Rect(
            int(x - SELECTED_BORDER),
            int(y - SELECTED_BORDER),
            unit.size.x + SELECTED_BORDER * 2,
            unit.size.y + SELECTED_BORDER * 2,
        )
        pygame.draw.rect(surface, _rgba(SELECTED_COLOR), border)
    pygame.draw.rect(surface, _rgba(unit.color), pygame.Rect(int(x), int(y), unit.size.x, unit.size.y))