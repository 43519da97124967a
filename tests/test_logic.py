import uuid

import pytest

from fogofwar.logic import GameLogic
from fogofwar.model import (
    Color,
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
)
from fogofwar.point import PF, Point
from fogofwar.store import Store
from fogofwar.world import Tile


def create_test_player(name):
    return Player(id=uuid.uuid4(), name=name, color=Color(255, 0, 0, 255), start=PF(0.0, 0.0))


def create_test_unit(owner, position):
    return Unit(
        id=uuid.uuid4(),
        owner=owner,
        color=Color(0, 255, 0, 255),
        position=PF(float(position.x), float(position.y)),
        size=Point(16, 16),
        path=[],
        step=0,
        i_see=[],
    )


@pytest.fixture
def setup():
    store = Store()
    dispatched = []
    return store, GameLogic(store), dispatched, dispatched.append


def test_player_join_success(setup):
    store, logic, _, dispatch = setup
    p1, p2 = create_test_player("player1"), create_test_player("player2")
    u1 = create_test_unit(p1.id, Point(0, 0))
    u2 = create_test_unit(p2.id, Point(1, 1))
    action = PlayerJoinSuccessAction(
        PlayerJoinSuccessPayload(player_id=p1.id, units=[u1, u2], players=[p1, p2])
    )
    logic.handle_action(action, dispatch)
    assert len(store.get_all_units()) == 2
    assert len(store.get_all_players()) == 2
    assert store.get_tile(Point(0, 0)).unit.id == u1.id
    assert store.get_tile(Point(1, 1)).unit.id == u2.id


def test_spawn_unit(setup):
    store, logic, _, dispatch = setup
    unit = create_test_unit(create_test_player("p").id, Point(2, 3))
    logic.handle_action(SpawnUnitAction(unit), dispatch)
    assert len(store.get_all_units()) == 1
    assert store.get_unit_by_id(unit.id).position == unit.position
    assert store.get_tile(Point(2, 3)).unit.id == unit.id


def test_move_start(setup):
    store, logic, _, dispatch = setup
    unit = create_test_unit(create_test_player("p").id, Point(0, 0))
    store.store_unit(unit)
    target = Point(5, 5)
    logic.handle_action(MoveStartAction(MoveStartPayload(unit_id=unit.id, point=target)), dispatch)
    stored = store.get_unit_by_id(unit.id)
    assert len(stored.path) > 0
    assert stored.path[-1] == target


def test_move_start_unknown_unit(setup):
    _, logic, _, dispatch = setup
    with pytest.raises(KeyError):
        logic.handle_action(
            MoveStartAction(MoveStartPayload(unit_id=uuid.uuid4(), point=Point(1, 1))), dispatch
        )


def test_move_step(setup):
    store, logic, _, dispatch = setup
    unit = create_test_unit(create_test_player("p").id, Point(0, 0))
    store.create_tile(Point(0, 0)).unit = unit
    store.store_unit(unit)
    new_position = PF(1.5, 1.5)
    path = [Point(1, 1), Point(2, 2), Point(3, 3)]
    logic.handle_action(
        MoveStepAction(MoveStepPayload(unit_id=unit.id, position=new_position, path=path, step=0)),
        dispatch,
    )
    stored = store.get_unit_by_id(unit.id)
    assert stored.position == new_position
    assert len(stored.path) == 3
    assert stored.step == 0
    assert store.get_tile(Point(1, 1)).unit is unit
    assert store.get_tile(Point(0, 0)).unit is None


def test_move_step_with_collision(setup):
    store, logic, dispatched, dispatch = setup
    owner = create_test_player("p").id
    u1 = create_test_unit(owner, Point(0, 0))
    u2 = create_test_unit(owner, Point(1, 1))
    store.store_unit(u1)
    store.store_unit(u2)
    store.create_tile(Point(1, 1)).unit = u2
    logic.handle_action(
        MoveStepAction(
            MoveStepPayload(unit_id=u1.id, position=PF(0.5, 0.5), path=[Point(1, 1)], step=0)
        ),
        dispatch,
    )
    assert len(dispatched) == 1
    assert isinstance(dispatched[0], MoveStopAction)
    assert dispatched[0].payload == u1.id


def test_move_stop(setup):
    store, logic, _, dispatch = setup
    unit = create_test_unit(create_test_player("p").id, Point(0, 0))
    unit.path = [Point(1, 1), Point(2, 2)]
    unit.step = 1
    store.store_unit(unit)
    logic.handle_action(MoveStopAction(unit.id), dispatch)
    stored = store.get_unit_by_id(unit.id)
    assert stored.path == []
    assert stored.step == 0


def test_map_load_success(setup):
    store, logic, _, dispatch = setup
    tiles = [
        Tile(point=Point(0, 0), value="grass", land_type="plains",
             back_style_class="grass", ground_level=100),
        Tile(point=Point(1, 0), value="water", land_type="water",
             back_style_class="water", ground_level=50),
    ]
    payload = MapLoadSuccessPayload(
        tiles=tiles, min_x=0, min_y=0, max_x=1, max_y=0, player_id=uuid.uuid4()
    )
    logic.handle_action(MapLoadSuccessAction(payload), dispatch)
    assert store.get_tile(Point(0, 0)).value == "grass"
    assert store.get_tile(Point(1, 0)).value == "water"


def test_unhandled_action(setup):
    store, logic, dispatched, dispatch = setup
    action = PlayerJoinAction(Player(id=uuid.uuid4(), name="test"))
    logic.handle_action(action, dispatch)
    assert dispatched == []
    assert store.get_all_players() == []


def test_place_unit_success(setup):
    store, logic, _, dispatch = setup
    unit = create_test_unit(create_test_player("p").id, Point(0, 0))
    logic.handle_action(SpawnUnitAction(unit), dispatch)
    tile = store.get_tile(Point(0, 0))
    assert tile is not None
    assert tile.unit.id == unit.id


def test_place_unit_creates_tile(setup):
    store, logic, _, dispatch = setup
    unit = create_test_unit(create_test_player("p").id, Point(10, 10))
    assert store.get_tile(Point(10, 10)) is None
    logic.handle_action(SpawnUnitAction(unit), dispatch)
    assert store.get_tile(Point(10, 10)).unit.id == unit.id


def test_collision_keeps_other_unit(setup):
    store, logic, dispatched, dispatch = setup
    owner = create_test_player("p").id
    u1 = create_test_unit(owner, Point(0, 0))
    u2 = create_test_unit(owner, Point(1, 1))
    store.store_unit(u1)
    store.create_tile(Point(0, 0)).unit = u1
    store.store_unit(u2)
    target_tile = store.create_tile(Point(1, 1))
    target_tile.unit = u2
    logic.handle_action(
        MoveStepAction(
            MoveStepPayload(unit_id=u1.id, position=PF(0.5, 0.5), path=[Point(1, 1)], step=0)
        ),
        dispatch,
    )
    assert len(dispatched) == 1
    assert dispatched[0].payload == u1.id
    assert target_tile.unit.id == u2.id


def test_same_unit_can_move_to_same_position(setup):
    store, logic, dispatched, dispatch = setup
    unit = create_test_unit(create_test_player("p").id, Point(0, 0))
    store.store_unit(unit)
    tile = store.create_tile(Point(0, 0))
    tile.unit = unit
    logic.handle_action(
        MoveStepAction(
            MoveStepPayload(unit_id=unit.id, position=PF(0.1, 0.1), path=[Point(0, 0)], step=0)
        ),
        dispatch,
    )
    assert not any(isinstance(a, MoveStopAction) for a in dispatched)
    assert tile.unit.id == unit.id