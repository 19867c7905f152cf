# minisqlnet

The building blocks of a small teaching SQL database server, and an
interactive command-line client that talks to such a server.

## What is inside

- `minisqlnet.rc`: the `RC` result-code enumeration and `strrc()`.
  `strrc()` returns the symbolic name of a code, or `"UNKNOWN"` for a code
  it does not know. Extended codes carry a detail number above the low
  byte. `RC.base` gives the primary code and `RC.detail` gives the detail
  number.
- `minisqlnet.querydefs`: the parsed-statement structures. These are
  `Query` (a `SqlCommandFlag` and its contents), `Selects`, `Inserts`,
  `Deletes`, `Updates`, `CreateTable`, `DropTable`, `CreateIndex`,
  `DropIndex`, `DescTable` and `LoadData`. Alongside them are `Value`,
  `RelAttr`, `Condition`, `AttrInfo` and the `AttrType` and `CompOp`
  enumerations. A statement holds at most `MAX_NUM` (20) attributes,
  relations, conditions or values. Going past that limit raises
  `ValueError`.
- `minisqlnet.value`: typed cell values (`IntValue`, `FloatValue`,
  `StringValue`). Each one renders itself with `to_string()` and compares
  itself with `compare()`. `FloatValue` is held at single precision.
- `minisqlnet.tuple`: `Tuple`, `TupleField`, `TupleSchema` and `TupleSet`,
  including the `a | b | c` text rendering of query results.
- `minisqlnet.session`: per-connection `Session` state. It holds the
  current database and whether a transaction spans several statements.
- `minisqlnet.server`: `ServerParam`, `Server`, `Connection`,
  `read_message()` and `send_message()`. Requests are NUL-terminated
  messages sent over TCP or a Unix socket.
- `minisqlnet.events`: `SessionEvent`, `SQLStageEvent`,
  `ExecutionPlanEvent` and `StorageEvent`. These events carry a request
  and its response between processing steps.
- `minisqlnet.client`: the interactive client.

## Installing

```
pip install .
```

## The client

```
minisqlnet-client                 # connect to 127.0.0.1:6789
minisqlnet-client -h db.local -p 7000
minisqlnet-client -s /tmp/miniob.sock
```

The client shows a `miniob > ` prompt and sends each non-blank line to the
server, followed by a NUL byte. It then prints the reply until the
terminating NUL byte arrives. A line that begins with `exit` or `bye`, in
any letter case, ends the session. If the server closes the connection,
the client says so and stops.

## Serving requests

`Server` listens on the address in its `ServerParam`. It reads each
NUL-terminated request and passes the connection and the request text to
a handler that you supply. The handler answers through `Connection.send()`
and must send the terminating NUL itself:

```python
from minisqlnet.server import Server, ServerParam

def echo(conn, request):
    conn.send(request.upper() + "\0")

with Server(ServerParam(port=6789), handler=echo) as server:
    server.serve()  # runs until server.shutdown() is called from elsewhere
```

A request that does not fit in 8192 bytes, terminator included, closes the
connection.

## Rendering results

```python
import io
from minisqlnet.querydefs import AttrType
from minisqlnet.tuple import Tuple, TupleSchema, TupleSet
from minisqlnet.value import IntValue, StringValue

schema = TupleSchema()
schema.add(AttrType.INTS, "t", "id")
schema.add(AttrType.CHARS, "t", "name")

rows = TupleSet()
rows.set_schema(schema)
row = Tuple()
row.add(IntValue(1))
row.add(StringValue("alice"))
rows.add(row)

out = io.StringIO()
rows.print(out)
print(out.getvalue())
# id | name
# 1 | alice
```

When the columns come from more than one table, the header names are
qualified as `table.field`.

## What this package does not do

This package has no SQL parser, no query executor and no storage of
tables or indexes. It provides no server command either. `Server` answers
only what your handler answers, and the `querydefs` structures have to be
built by code of your own. The only command it installs is the client.

## Running the tests

```
pip install .[test]
pytest
```