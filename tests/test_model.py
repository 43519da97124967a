import json
import uuid

import pytest

from fogofwar.model import (
    DEFAULT_I_SEE,
    ActionType,
    Color,
    GameTile,
    MapLoadAction,
    MapLoadPayload,
    MapLoadSuccessAction,
    MapLoadSuccessPayload,
    MoveStartAction,
    MoveStartPayload,
    MoveStepAction,
    MoveStepPayload,
    MoveStopAction,
    Player,
    PlayerJoinAction,
    PlayerJoinSuccessAction,
    PlayerJoinSuccessPayload,
    SpawnUnitAction,
    Unit,
    marshal_action,
    new_map_load_action,
    new_player,
    new_player_id,
    new_unit,
    new_unit_id,
    plan,
    unmarshal_action,
)
from fogofwar.point import PF, Point, dist, rect
from fogofwar.world import Tile

PLAYER_ID = uuid.UUID("550e8400-e29b-41d4-a716-446655440000")


def _unit(position=Point(0, 0)):
    return Unit(
        id=new_unit_id(),
        owner=PLAYER_ID,
        color=Color(0, 255, 0, 255),
        position=PF(float(position.x), float(position.y)),
        size=Point(16, 16),
    )


def test_action_types():
    assert ActionType.PLAYER_JOIN == "PlayerJoin"
    assert ActionType.SPAWN_UNIT == "SpawnUnit"
    assert PlayerJoinAction().type is ActionType.PLAYER_JOIN


def test_new_player_id_unique():
    ids = [new_player_id() for _ in range(50)]
    assert len(set(ids)) == 50
    assert all(i.version == 4 for i in ids)


def test_new_unit_id_unique():
    ids = [new_unit_id() for _ in range(50)]
    assert len(set(ids)) == 50
    assert all(i.version == 4 for i in ids)


def test_new_player():
    player = new_player("alice")
    assert player.name == "alice"
    assert player.id != uuid.UUID(int=0)


def test_default_sight_within_radius():
    assert Point(5, 0) in DEFAULT_I_SEE
    assert Point(0, 0) in DEFAULT_I_SEE
    assert Point(4, 4) not in DEFAULT_I_SEE
    assert all(dist(p, Point(0, 0)) <= 5 for p in DEFAULT_I_SEE)


def test_new_unit():
    unit = new_unit(PLAYER_ID, Color(1, 2, 3, 255), PF(1.0, 2.0), 16, 8)
    assert unit.owner == PLAYER_ID
    assert unit.size == Point(16, 8)
    assert unit.position == PF(1.0, 2.0)
    assert unit.i_see == list(DEFAULT_I_SEE)


def test_plan():
    assert plan([Point(0, 0)], Point(2, 1)) == [Point(0, 0), Point(1, 1), Point(2, 1)]
    assert plan([Point(3, 3)], Point(3, 3)) == [Point(3, 3)]


def test_move_to_sets_path():
    unit = _unit()
    unit.move_to(Point(5, 5))
    assert unit.path[0] == Point(0, 0)
    assert unit.path[-1] == Point(5, 5)
    assert len(unit.path) == 6
    assert unit.step == 0


def test_move_to_same_target_keeps_progress():
    unit = _unit()
    unit.move_to(Point(2, 0))
    unit.step = 2
    unit.move_to(Point(2, 0))
    assert unit.step == 2


def test_set_copies_movement():
    unit, other = _unit(), _unit(Point(4, 4))
    other.path = [Point(4, 4), Point(5, 5)]
    other.step = 1
    unit.set(other)
    assert unit.position == PF(4.0, 4.0)
    assert unit.path == [Point(4, 4), Point(5, 5)]
    assert unit.step == 1


def test_update_reaches_tile_and_dispatches():
    unit = _unit()
    unit.path = [Point(0, 0), Point(1, 0)]
    dispatched = []
    unit.update(dispatched.append)
    assert unit.step == 1
    assert len(dispatched) == 1
    action = dispatched[0]
    assert isinstance(action, MoveStepAction)
    assert action.payload.unit_id == unit.id
    assert action.payload.step == 1
    assert action.payload.position == PF(0.0, 0.0)


def test_update_moves_towards_next_tile():
    unit = _unit()
    unit.path = [Point(0, 0), Point(1, 0)]
    unit.step = 1
    dispatched = []
    unit.update(dispatched.append)
    assert dispatched == []
    assert unit.position == PF(0.1, 0.0)
    assert unit.velocity == PF(0.1, 0.0)


def test_update_without_path_does_nothing():
    unit = _unit()
    dispatched = []
    unit.update(dispatched.append)
    assert dispatched == []
    assert unit.position == PF(0.0, 0.0)


def test_game_tile_delegates_to_tile():
    game_tile = GameTile(Tile(point=Point(1, 2), value="grass"))
    assert game_tile.value == "grass"
    assert game_tile.point == Point(1, 2)
    assert game_tile.unit is None
    with pytest.raises(AttributeError):
        game_tile.missing_attribute


def test_player_join_encoding():
    action = PlayerJoinAction(Player(id=PLAYER_ID, name="TestPlayer", color=Color(255, 0, 0, 255)))
    data = json.loads(marshal_action(action))
    assert data["Type"] == "PlayerJoin"
    assert data["Payload"]["Id"] == [85, 14, 132, 0, 226, 155, 65, 212, 167, 22, 68, 102, 85, 68, 0, 0]
    assert data["Payload"]["Color"] == {"R": 255, "G": 0, "B": 0, "A": 255}
    decoded = unmarshal_action(marshal_action(action))
    assert isinstance(decoded, PlayerJoinAction)
    assert decoded.payload == action.payload


def test_unit_encoding_skips_velocity():
    unit = _unit()
    unit.velocity = PF(1.0, 1.0)
    data = unit.to_dict()
    assert "Velocity" not in data
    assert Unit.from_dict(data).velocity == PF(0.0, 0.0)


def _sample_actions():
    unit = _unit(Point(2, 3))
    unit.path = [Point(2, 3), Point(3, 4)]
    return [
        PlayerJoinAction(Player(id=PLAYER_ID, name="TestPlayer")),
        PlayerJoinSuccessAction(
            PlayerJoinSuccessPayload(player_id=PLAYER_ID, units=[unit], players=[Player(id=PLAYER_ID)])
        ),
        SpawnUnitAction(unit),
        MoveStartAction(MoveStartPayload(unit_id=unit.id, point=Point(5, 5))),
        MoveStepAction(MoveStepPayload(unit_id=unit.id, position=PF(1.5, 1.5),
                                       path=[Point(1, 1), Point(2, 2)], step=1)),
        MoveStopAction(unit.id),
        MapLoadAction(MapLoadPayload(min_x=1, min_y=2, max_x=3, max_y=4, player_id=PLAYER_ID)),
        MapLoadSuccessAction(
            MapLoadSuccessPayload(tiles=[Tile(point=Point(0, 0), value="grass")],
                                  max_x=1, player_id=PLAYER_ID)
        ),
    ]


@pytest.mark.parametrize("action", _sample_actions(), ids=lambda a: a.type.value)
def test_round_trip(action):
    encoded = marshal_action(action)
    decoded = unmarshal_action(encoded.encode())
    assert type(decoded) is type(action)
    assert decoded.to_dict() == action.to_dict()


def test_move_stop_payload_decoded():
    unit_id = new_unit_id()
    decoded = unmarshal_action(json.dumps({"Type": "MoveStop", "Payload": list(unit_id.bytes)}))
    assert decoded.payload == unit_id


def test_map_load_payload_is_flattened():
    action = new_map_load_action(rect(0, 0, 4, 3), PLAYER_ID)
    assert (action.payload.min_x, action.payload.max_x, action.payload.max_y) == (0, 4, 3)
    assert action.payload.player_id == PLAYER_ID
    payload = action.to_dict()["Payload"]
    assert set(payload) == {"MinX", "MinY", "MaxX", "MaxY", "PlayerId"}


def test_map_load_success_payload_is_flattened():
    action = MapLoadSuccessAction(MapLoadSuccessPayload(tiles=[], max_x=2, player_id=PLAYER_ID))
    payload = action.to_dict()["Payload"]
    assert set(payload) == {"map", "minX", "minY", "maxX", "maxY", "PlayerId"}
    assert payload["maxX"] == 2


def test_unmarshal_unknown_type():
    with pytest.raises(ValueError, match="unrecognized"):
        unmarshal_action('{"Type": "Dance", "Payload": {}}')


def test_unmarshal_invalid_json():
    with pytest.raises(ValueError):
        unmarshal_action("{not json")


def test_unmarshal_invalid_payload():
    with pytest.raises(ValueError):
        unmarshal_action('{"Type": "MoveStop", "Payload": "abc"}')