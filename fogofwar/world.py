"""World map tiles and the HTTP service that serves them."""

from __future__ import annotations

import json
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from typing import Any

from .point import Point

DEFAULT_SERVER_ADDRESS = "http://localhost:8080"


def _point_to_json(p: Point) -> dict[str, int]:
    return {"X": p.x, "Y": p.y}


def _point_from_json(data: Any) -> Point:
    data = data or {}
    return Point(int(data.get("X", 0)), int(data.get("Y", 0)))


@dataclass
class Tile:
    """One map tile as described by the world service."""

    point: Point = Point()
    value: str = ""
    land_type: str = ""
    front_style_class: str = ""
    back_style_class: str = ""
    ground_level: int = 0
    water_level: int | None = None
    post_glacial: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "point": _point_to_json(self.point),
            "value": self.value,
            "landType": self.land_type,
            "frontStyleClass": self.front_style_class,
            "backStyleClass": self.back_style_class,
            "groundLevel": self.ground_level,
            "waterLevel": self.water_level,
            "postGlacial": self.post_glacial,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tile:
        water_level = data.get("waterLevel")
        return cls(
            point=_point_from_json(data.get("point")),
            value=data.get("value") or "",
            land_type=data.get("landType") or "",
            front_style_class=data.get("frontStyleClass") or "",
            back_style_class=data.get("backStyleClass") or "",
            ground_level=int(data.get("groundLevel") or 0),
            water_level=None if water_level is None else int(water_level),
            post_glacial=bool(data.get("postGlacial", False)),
        )


@dataclass
class WorldRequest:
    """Bounds of a requested map area."""

    min_x: int = 0
    min_y: int = 0
    max_x: int = 0
    max_y: int = 0


@dataclass
class WorldResponse:
    """Tiles returned for a map area, with the area's bounds."""

    tiles: list[Tile] = field(default_factory=list)
    min_x: int = 0
    min_y: int = 0
    max_x: int = 0
    max_y: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "map": [tile.to_dict() for tile in self.tiles],
            "minX": self.min_x,
            "minY": self.min_y,
            "maxX": self.max_x,
            "maxY": self.max_y,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorldResponse:
        return cls(
            tiles=[Tile.from_dict(t) for t in data.get("map") or []],
            min_x=int(data.get("minX") or 0),
            min_y=int(data.get("minY") or 0),
            max_x=int(data.get("maxX") or 0),
            max_y=int(data.get("maxY") or 0),
        )


class WorldServiceError(Exception):
    """Raised when map data cannot be loaded from the world service."""


@dataclass
class WorldService:
    """Client of the world service that generates map tiles."""

    server_address: str = DEFAULT_SERVER_ADDRESS
    timeout: float = 10.0

    def load(self, request: WorldRequest) -> WorldResponse:
        """Fetch the tiles of the requested area."""
        query = urllib.parse.urlencode(
            sorted(
                {
                    "minX": request.min_x,
                    "minY": request.min_y,
                    "maxX": request.max_x,
                    "maxY": request.max_y,
                }.items()
            )
        )
        url = f"{self.server_address}/api/map/rect?{query}"
        try:
            with urllib.request.urlopen(url, timeout=self.timeout) as response:
                body = response.read()
        except urllib.error.HTTPError as exc:
            # The status is not checked; the body decides the outcome.
            with exc:
                body = exc.read()
        except (OSError, ValueError) as exc:
            raise WorldServiceError(f"loading map: {exc}") from exc

        try:
            data = json.loads(body)
        except ValueError as exc:
            raise WorldServiceError(f"decoding map: {exc}") from exc
        if not isinstance(data, dict):
            raise WorldServiceError("decoding map: unexpected response")
        try:
            return WorldResponse.from_dict(data)
        except (TypeError, ValueError, AttributeError) as exc:
            raise WorldServiceError(f"decoding map: {exc}") from exc