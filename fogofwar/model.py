"""Players, units, tiles and the actions exchanged between client and server."""

from __future__ import annotations

import enum
import json
import math
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar

from .point import PF, ZERO_POINT, Point, Rect, dist, next_step, to_pf
from .world import Tile, WorldRequest, WorldResponse

UNIT_SPEED = 0.1
DEFAULT_SIGHT = 5
NIL_ID = uuid.UUID(int=0)
ZERO_UNIT_ID = NIL_ID

DEFAULT_I_SEE: tuple[Point, ...] = tuple(
    Point(x, y)
    for x in range(-DEFAULT_SIGHT, DEFAULT_SIGHT + 1)
    for y in range(-DEFAULT_SIGHT, DEFAULT_SIGHT + 1)
    if dist(Point(x, y), ZERO_POINT) <= DEFAULT_SIGHT
)

Dispatch = Callable[["Action"], None]


def _uuid_to_json(value: uuid.UUID) -> list[int]:
    # Identifiers travel as arrays of 16 bytes.
    return list(value.bytes)


def _uuid_from_json(data: Any) -> uuid.UUID:
    if data is None:
        return NIL_ID
    if not isinstance(data, list) or len(data) != 16:
        raise ValueError(f"invalid identifier: {data!r}")
    return uuid.UUID(bytes=bytes(data))


def _point_to_json(p: Point) -> dict[str, int]:
    return {"X": p.x, "Y": p.y}


def _point_from_json(data: Any) -> Point:
    data = data or {}
    return Point(int(data.get("X", 0)), int(data.get("Y", 0)))


def _points_from_json(data: Any) -> list[Point]:
    return [_point_from_json(p) for p in data or []]


def _pf_to_json(p: PF) -> dict[str, float]:
    return {"X": p.x, "Y": p.y}


def _pf_from_json(data: Any) -> PF:
    data = data or {}
    return PF(float(data.get("X", 0.0)), float(data.get("Y", 0.0)))


@dataclass(frozen=True)
class Color:
    """An RGBA colour with 8-bit channels."""

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 0


def _color_to_json(c: Color) -> dict[str, int]:
    return {"R": c.r, "G": c.g, "B": c.b, "A": c.a}


def _color_from_json(data: Any) -> Color:
    data = data or {}
    return Color(*(int(data.get(k, 0)) for k in "RGBA"))


@dataclass
class Player:
    id: uuid.UUID = NIL_ID
    name: str = ""
    color: Color = Color()
    start: PF = PF()

    def to_dict(self) -> dict[str, Any]:
        return {
            "Id": _uuid_to_json(self.id),
            "Name": self.name,
            "Color": _color_to_json(self.color),
            "Start": _pf_to_json(self.start),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Player:
        return cls(
            id=_uuid_from_json(data.get("Id")),
            name=data.get("Name") or "",
            color=_color_from_json(data.get("Color")),
            start=_pf_from_json(data.get("Start")),
        )


def new_player_id() -> uuid.UUID:
    return uuid.uuid4()


def new_player(name: str) -> Player:
    return Player(id=new_player_id(), name=name)


def new_unit_id() -> uuid.UUID:
    return uuid.uuid4()


def plan(path: list[Point], target: Point) -> list[Point]:
    """Extend ``path`` one grid step at a time until it reaches ``target``."""
    planned = list(path)
    while planned[-1] != target:
        planned.append(next_step(planned[-1], target))
    return planned


@dataclass(eq=False)
class Unit:
    """A unit on the map; compared and hashed by identity."""

    id: uuid.UUID = NIL_ID
    owner: uuid.UUID = NIL_ID
    color: Color = Color()
    position: PF = PF()
    size: Point = Point()
    selected: bool = False
    velocity: PF = PF()
    path: list[Point] = field(default_factory=list)
    step: int = 0
    i_see: list[Point] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "Id": _uuid_to_json(self.id),
            "Owner": _uuid_to_json(self.owner),
            "Color": _color_to_json(self.color),
            "Position": _pf_to_json(self.position),
            "Size": _point_to_json(self.size),
            "Selected": self.selected,
            "Path": [_point_to_json(p) for p in self.path],
            "Step": self.step,
            "ISee": [_point_to_json(p) for p in self.i_see],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Unit:
        return cls(
            id=_uuid_from_json(data.get("Id")),
            owner=_uuid_from_json(data.get("Owner")),
            color=_color_from_json(data.get("Color")),
            position=_pf_from_json(data.get("Position")),
            size=_point_from_json(data.get("Size")),
            selected=bool(data.get("Selected", False)),
            path=_points_from_json(data.get("Path")),
            step=int(data.get("Step") or 0),
            i_see=_points_from_json(data.get("ISee")),
        )

    def move_to(self, target: Point) -> None:
        """Plan a path to ``target`` unless already heading there."""
        if self.path and self.path[-1] == target:
            return
        self.path = plan([self.position.image_point()], target)
        self.step = 0

    def set(self, unit: Unit) -> None:
        """Take over the movement state of another unit."""
        self.step = unit.step
        self.position = unit.position
        self.path = unit.path

    def update(self, dispatch: Dispatch) -> None:
        """Advance along the path; dispatch a step action on reaching a tile."""
        if len(self.path) <= self.step:
            return
        target = self.path[self.step]
        dx = target.x - self.position.x
        dy = target.y - self.position.y
        distance = math.sqrt(dx * dx + dy * dy)
        if distance < 0.1:
            self.velocity = PF(0.0, 0.0)
            self.position = to_pf(target)
            self.step += 1
            dispatch(
                MoveStepAction(
                    MoveStepPayload(
                        unit_id=self.id,
                        position=self.position,
                        path=list(self.path),
                        step=self.step,
                    )
                )
            )
        else:
            self.velocity = PF(dx / distance * UNIT_SPEED, dy / distance * UNIT_SPEED)
            self.position = self.position.add(self.velocity)


def new_unit(owner: uuid.UUID, color: Color, position: PF, width: int, height: int) -> Unit:
    return Unit(
        id=new_unit_id(),
        owner=owner,
        color=color,
        position=position,
        size=Point(width, height),
        i_see=list(DEFAULT_I_SEE),
    )


@dataclass(eq=False)
class GameTile:
    """A map tile with the unit standing on it and its visibility."""

    tile: Tile
    unit: Unit | None = None
    visible: bool = False

    def __getattr__(self, name: str) -> Any:
        if name == "tile":
            raise AttributeError(name)
        return getattr(self.tile, name)


class ActionType(str, enum.Enum):
    PLAYER_JOIN = "PlayerJoin"
    PLAYER_JOIN_SUCCESS = "PlayerJoinSuccess"
    SPAWN_UNIT = "SpawnUnit"
    MOVE_START = "MoveStart"
    MOVE_STEP = "MoveStep"
    MOVE_STOP = "MoveStop"
    MAP_LOAD = "MapLoad"
    MAP_LOAD_SUCCESS = "MapLoadSuccess"


@dataclass
class PlayerJoinSuccessPayload:
    player_id: uuid.UUID = NIL_ID
    units: list[Unit] = field(default_factory=list)
    players: list[Player] = field(default_factory=list)


@dataclass
class MoveStartPayload:
    unit_id: uuid.UUID = NIL_ID
    point: Point = Point()


@dataclass
class MoveStepPayload:
    unit_id: uuid.UUID = NIL_ID
    position: PF = PF()
    path: list[Point] = field(default_factory=list)
    step: int = 0


@dataclass
class MapLoadPayload(WorldRequest):
    player_id: uuid.UUID = NIL_ID


@dataclass
class MapLoadSuccessPayload(WorldResponse):
    player_id: uuid.UUID = NIL_ID

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "PlayerId": _uuid_to_json(self.player_id)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MapLoadSuccessPayload:
        response = WorldResponse.from_dict(data)
        return cls(
            tiles=response.tiles,
            min_x=response.min_x,
            min_y=response.min_y,
            max_x=response.max_x,
            max_y=response.max_y,
            player_id=_uuid_from_json(data.get("PlayerId")),
        )


@dataclass
class Action(ABC):
    """A typed message carrying a payload."""

    type: ClassVar[ActionType]
    payload: Any

    def to_dict(self) -> dict[str, Any]:
        return {"Type": self.type.value, "Payload": self._encode_payload()}

    @abstractmethod
    def _encode_payload(self) -> Any:
        """The payload as JSON-ready data."""

    @classmethod
    @abstractmethod
    def _decode_payload(cls, data: Any) -> Action:
        """Build the action from JSON payload data."""


@dataclass
class PlayerJoinAction(Action):
    type: ClassVar[ActionType] = ActionType.PLAYER_JOIN
    payload: Player = field(default_factory=Player)

    def _encode_payload(self) -> Any:
        return self.payload.to_dict()

    @classmethod
    def _decode_payload(cls, data: Any) -> PlayerJoinAction:
        return cls(Player.from_dict(data or {}))


@dataclass
class PlayerJoinSuccessAction(Action):
    type: ClassVar[ActionType] = ActionType.PLAYER_JOIN_SUCCESS
    payload: PlayerJoinSuccessPayload = field(default_factory=PlayerJoinSuccessPayload)

    def _encode_payload(self) -> Any:
        return {
            "PlayerId": _uuid_to_json(self.payload.player_id),
            "Units": [u.to_dict() for u in self.payload.units],
            "Players": [p.to_dict() for p in self.payload.players],
        }

    @classmethod
    def _decode_payload(cls, data: Any) -> PlayerJoinSuccessAction:
        data = data or {}
        return cls(
            PlayerJoinSuccessPayload(
                player_id=_uuid_from_json(data.get("PlayerId")),
                units=[Unit.from_dict(u) for u in data.get("Units") or []],
                players=[Player.from_dict(p) for p in data.get("Players") or []],
            )
        )


@dataclass
class SpawnUnitAction(Action):
    type: ClassVar[ActionType] = ActionType.SPAWN_UNIT
    payload: Unit = field(default_factory=Unit)

    def _encode_payload(self) -> Any:
        return self.payload.to_dict()

    @classmethod
    def _decode_payload(cls, data: Any) -> SpawnUnitAction:
        return cls(Unit.from_dict(data or {}))


@dataclass
class MoveStartAction(Action):
    type: ClassVar[ActionType] = ActionType.MOVE_START
    payload: MoveStartPayload = field(default_factory=MoveStartPayload)

    def _encode_payload(self) -> Any:
        return {
            "UnitId": _uuid_to_json(self.payload.unit_id),
            "Point": _point_to_json(self.payload.point),
        }

    @classmethod
    def _decode_payload(cls, data: Any) -> MoveStartAction:
        data = data or {}
        return cls(
            MoveStartPayload(
                unit_id=_uuid_from_json(data.get("UnitId")),
                point=_point_from_json(data.get("Point")),
            )
        )


@dataclass
class MoveStepAction(Action):
    type: ClassVar[ActionType] = ActionType.MOVE_STEP
    payload: MoveStepPayload = field(default_factory=MoveStepPayload)

    def _encode_payload(self) -> Any:
        return {
            "UnitId": _uuid_to_json(self.payload.unit_id),
            "Position": _pf_to_json(self.payload.position),
            "Path": [_point_to_json(p) for p in self.payload.path],
            "Step": self.payload.step,
        }

    @classmethod
    def _decode_payload(cls, data: Any) -> MoveStepAction:
        data = data or {}
        return cls(
            MoveStepPayload(
                unit_id=_uuid_from_json(data.get("UnitId")),
                position=_pf_from_json(data.get("Position")),
                path=_points_from_json(data.get("Path")),
                step=int(data.get("Step") or 0),
            )
        )


@dataclass
class MoveStopAction(Action):
    type: ClassVar[ActionType] = ActionType.MOVE_STOP
    payload: uuid.UUID = NIL_ID

    def _encode_payload(self) -> Any:
        return _uuid_to_json(self.payload)

    @classmethod
    def _decode_payload(cls, data: Any) -> MoveStopAction:
        return cls(_uuid_from_json(data))


@dataclass
class MapLoadAction(Action):
    type: ClassVar[ActionType] = ActionType.MAP_LOAD
    payload: MapLoadPayload = field(default_factory=MapLoadPayload)

    def _encode_payload(self) -> Any:
        return {
            "MinX": self.payload.min_x,
            "MinY": self.payload.min_y,
            "MaxX": self.payload.max_x,
            "MaxY": self.payload.max_y,
            "PlayerId": _uuid_to_json(self.payload.player_id),
        }

    @classmethod
    def _decode_payload(cls, data: Any) -> MapLoadAction:
        data = data or {}
        return cls(
            MapLoadPayload(
                min_x=int(data.get("MinX") or 0),
                min_y=int(data.get("MinY") or 0),
                max_x=int(data.get("MaxX") or 0),
                max_y=int(data.get("MaxY") or 0),
                player_id=_uuid_from_json(data.get("PlayerId")),
            )
        )


@dataclass
class MapLoadSuccessAction(Action):
    type: ClassVar[ActionType] = ActionType.MAP_LOAD_SUCCESS
    payload: MapLoadSuccessPayload = field(default_factory=MapLoadSuccessPayload)

    def _encode_payload(self) -> Any:
        return self.payload.to_dict()

    @classmethod
    def _decode_payload(cls, data: Any) -> MapLoadSuccessAction:
        return cls(MapLoadSuccessPayload.from_dict(data or {}))


_ACTION_CLASSES: dict[ActionType, type[Action]] = {
    cls.type: cls
    for cls in (
        PlayerJoinAction,
        PlayerJoinSuccessAction,
        SpawnUnitAction,
        MoveStartAction,
        MoveStepAction,
        MoveStopAction,
        MapLoadAction,
        MapLoadSuccessAction,
    )
}


def new_map_load_action(area: Rect, player_id: uuid.UUID) -> MapLoadAction:
    """A request for the tiles of ``area`` on behalf of a player."""
    return MapLoadAction(
        MapLoadPayload(
            min_x=area.min.x,
            min_y=area.min.y,
            max_x=area.max.x,
            max_y=area.max.y,
            player_id=player_id,
        )
    )


def marshal_action(action: Action) -> str:
    return json.dumps(action.to_dict())


def unmarshal_action(data: str | bytes) -> Action:
    """Decode an action message; raise ValueError if it is malformed."""
    try:
        message = json.loads(data)
    except ValueError as exc:
        raise ValueError(f"invalid action message: {exc}") from exc
    if not isinstance(message, dict):
        raise ValueError("invalid action message")
    try:
        action_type = ActionType(message.get("Type"))
    except ValueError:
        raise ValueError("action type unrecognized") from None
    try:
        return _ACTION_CLASSES[action_type]._decode_payload(message.get("Payload"))
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ValueError(f"invalid {action_type.value} payload: {exc}") from exc