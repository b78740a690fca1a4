# promohub

A small HTTP toolkit built around a promotion tracking service.

It contains:

- **Promotions API** (`promohub.web`): a Flask application with CRUD routes
  over promotions, served through `PromotionService` and stored by
  `PromotionRepository` in SQLite.
- **Student records API** (`promohub.students`): a Flask application over an
  in-memory `StudentStore`.
- **Web service** (`promohub.server`): a Flask application with a greeting,
  a database health report from `DatabaseService`, a form greeting and a
  websocket that streams server timestamps.
- **Arithmetic arranger** (`promohub.arranger`): lays out addition and
  subtraction problems vertically.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Promotions API

Start the server:

```
promohub-promotions [--config env.yaml] [--database promotions.db] [--host 0.0.0.0] [--port 8080]
```

The command reads the YAML settings file given by `--config` (default
`env.yaml`, which must exist) and stores promotions in the SQLite file given
by `--database`.

Routes:

| Method | Path                              | Action              | Success |
|--------|-----------------------------------|---------------------|---------|
| GET    | `/`                               | `Hello, World!`     | 200     |
| GET    | `/promotions`                     | list all promotions | 200     |
| GET    | `/getpromotion/<promotion_id>`    | fetch one promotion | 200     |
| POST   | `/createpromotion`                | create a promotion  | 201     |
| PUT    | `/updatepromotion/<promotion_id>` | update a promotion  | 200     |
| DELETE | `/deletepromotion/<promotion_id>` | delete a promotion  | 204     |

A promotion is exchanged as JSON with the keys `promotion_id`,
`promotion_name`, `discount_type`, `discount_value`, `promotion_start_date`,
`promotion_end_date`, `ID`, `CreatedAt`, `UpdatedAt` and `DeletedAt`.
Timestamps are RFC 3339 strings with a time zone. Incoming keys match
case-insensitively, unknown keys are ignored, and an update overlays only the
keys that are sent on the stored promotion.

Errors are answered as `{"message": ...}`: 400 for a body that is not a valid
promotion, 404 when a promotion ID is unknown, 500 when the service fails.
Deleting removes every row with that promotion ID and answers 204 even if
there was none.

The application can be built around any service object:

```python
from promohub.repository import PromotionRepository
from promohub.service import PromotionService
from promohub.web import create_app

repository = PromotionRepository("promotions.db")   # ":memory:" by default
app = create_app(PromotionService(repository))
```

`PromotionRepository` is also a context manager that closes its connection on
exit. Looking up an unknown promotion raises
`promohub.exceptions.PromotionIDNotFoundError`; `promohub.models.Promotion`
offers `to_dict`, `from_dict` and `merged` for the JSON form.

### Settings

`promohub.config.load_config(path, environ)` reads a YAML file into flat,
lower-case, dotted keys (`database.user`, `database.host`, ...). A non-empty
environment variable named after a key in upper case, such as
`DATABASE.USER`, overrides the file. `promohub.config.build_dsn(config)` turns
the `database.user`, `database.pass`, `database.host`, `database.port` and
`database.name` settings into a PostgreSQL connection string.

### What it does not do

The promotions API stores its data in SQLite only. `build_dsn` produces a
PostgreSQL connection string, but nothing in the package connects to
PostgreSQL, and `promohub-promotions` uses the settings file only to check that
it can be read.

## Student records API

```python
from promohub.students import StudentStore, create_app

app = create_app(StudentStore())
```

Routes: `GET /students`, `GET /students/<id>`, `POST /students` (201),
`PUT /students/<id>` and `DELETE /students/<id>` (204). Students carry `id`,
`name`, `age` and `grade`; IDs are given out from 1. An unknown ID answers
404, a non-numeric ID or bad field types 400. Records live in memory only and
there is no command to serve this application.

## Web service

```
promohub-server [--port PORT]
```

The port defaults to the `PORT` environment variable. The health check uses
a SQLite database named by `BLUEPRINT_DB_DATABASE`, in memory when unset. The
server stops cleanly on SIGINT or SIGTERM.

Routes:

- `GET /` answers `{"message":"Hello World"}`.
- `GET /health` returns `DatabaseService.health()`: `status`, `message`
  and the connection counters as strings. `promohub.database.evaluate_health`
  chooses the message from a `PoolStats`.
- `POST /hello` takes a form field `name` and answers an HTML snippet
  greeting it.
- `GET /websocket` upgrades to a websocket and sends
  `server timestamp: <nanoseconds>` every two seconds until the client sends
  anything or disconnects. The upgrade works only under `promohub-server`;
  otherwise it answers `could not open websocket`.

Cross-origin requests are accepted from `http://localhost:5173` only; other
origins get 403.

## Arithmetic arranger

```python
from promohub.arranger import arithmetic_arranger

print(arithmetic_arranger(["32 - 698", "1 - 3801", "45 + 43", "123 + 49"], True))
```

```
   32         1      45      123
- 698    - 3801    + 43    +  49
-----    ------    ----    -----
 -666     -3800      88      172
```

At most five problems are accepted, only `+` and `-` operators, and numbers
of at most four digits; anything else, or a problem that is not three parts,
raises `promohub.arranger.ArrangerError`, whose message says why.