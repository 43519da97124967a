# fogofwar

A small multiplayer real-time strategy game. Every player controls units on a
tiled map; the map around your own units is visible, everything else stays
dimmed under the fog of war. Players connect to a shared server over
websockets and see each other's units move in real time.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Running a game

The game has two parts: a server that holds the shared game state and a
graphical client (pygame) for each player.

### Server

```
fogofwar-server [--host HOST] [--port PORT] [--world URL]
```

The server accepts websocket connections at `/ws` on port 8000 by default
(`--port`), on all addresses unless `--host` is given. Other paths are
answered with 404. Map tiles are fetched on demand from a world service, by
default at `http://localhost:8080` (`--world`), with a GET request to
`/api/map/rect?minX=..&minY=..&maxX=..&maxY=..`. When both corner tiles of a
requested area are already in the server's store, the area is answered from
the store instead.

The first four new players get the starting positions (1, 1), (15, 1),
(1, 15) and (15, 15), each with one 16×16 unit. A player who joins again with
an id the server already knows gets the current state but no new unit.

### Client

```
fogofwar-client NAME [--server URL] [--tiles PATH]
```

The name is required; without it the client exits with status 1. The player
id is derived from the MD5 digest of the name, so joining again with the same
name brings you back as the same player. The names `red`, `green`, `blue`,
`yellow`, `cyan` and `purple` (case and surrounding spaces ignored) give your
units that colour; any other name gets a random opaque colour.

The client connects to `ws://localhost:8000/ws` unless `--server` says
otherwise, and reads the tile sprite sheet from `tiles1.png` in the current
directory unless `--tiles` names another file. The sheet holds 16×16 sprites,
seven to a row. The window opens at 640×480 and can be resized.

### Controls

- Arrow keys: move the camera.
- Left mouse button, held and dragged: select the units touched by the box.
  Hold Shift to keep units outside the box selected.
- Right mouse button: send your selected units to the tile under the cursor.

## How it works

Everything that happens in the game is an action (`fogofwar.model.ActionType`):
`PlayerJoin`, `PlayerJoinSuccess`, `SpawnUnit`, `MoveStart`, `MoveStep`,
`MoveStop`, `MapLoad` and `MapLoadSuccess`. Actions travel as JSON text
messages, each an object with `Type` and `Payload`
(`marshal_action` / `unmarshal_action`), and are applied by the same
`fogofwar.logic.GameLogic` on the server and on every client.

Units move one tile at a time along a straight path toward their target,
stepping diagonally while both coordinates differ. On each step a unit
reserves the next tile of its path; if another unit holds it, a `MoveStop` is
dispatched. Each unit sees every tile within a radius of five tiles.

## Modules

- `fogofwar.point` – grid points (`Point`), rectangles (`Rect`, `rect`) and
  floating-point positions (`PF`), with `dist` and `next_step`.
- `fogofwar.world` – map tiles (`Tile`), `WorldRequest`, `WorldResponse` and
  `WorldService`, whose `load` raises `WorldServiceError` when the map cannot
  be fetched or decoded.
- `fogofwar.model` – `Player`, `Unit`, `GameTile`, `Color` and the action
  classes.
- `fogofwar.store` – `Store`, thread-safe in-memory storage of units, players
  and tiles.
- `fogofwar.logic` – `GameLogic`, the shared rules.
- `fogofwar.comm` – `Client`, one websocket connection carrying actions.
- `fogofwar.server` – `ServerGame`, `Server` and the server command.
- `fogofwar.screen`, `fogofwar.clientgame`, `fogofwar.client` – drawing, the
  player's view (camera, selection, fog of war) and the client command.

## What it does not do

- It does not generate maps. The server relies on an external world service
  at the address given by `--world`; if that service cannot be reached, map
  requests are logged and go unanswered, and tiles stay blank.
- It ships no tile sprite sheet; the client needs one at `--tiles` and exits
  with status 1 if it cannot be loaded.
- Game state lives only in the server's memory and is lost when it stops.