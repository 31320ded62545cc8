# anchorkit

anchorkit is a small set of building blocks for software that is laid out the way
firmware often is:

- a table-driven finite state machine (`anchorkit.fsm`);
- a level-filtered logging system with fixed-layout, length-limited lines
  (`anchorkit.logs`);
- the attribute and error-counter types used by SONAR attribute messaging
  (`anchorkit.sonar_types`).

It is pure Python with no runtime dependencies and needs Python 3.10 or later.

## Installation

```
pip install anchorkit
```

To run the tests:

```
pip install "anchorkit[test]"
pytest
```

## Finite state machines: `anchorkit.fsm`

A machine is built from `Transition(from_state, to_state, event)` entries, where
`State` and `Event` are frozen dataclasses that carry a name. You can pass two
optional handlers. Each one is called as `handler(fsm, state)`.

```python
from anchorkit.fsm import Event, Fsm, State, Transition

idle = State("idle")
running = State("running")
start = Event("start")
stop = Event("stop")

fsm = Fsm(
    transitions=[
        Transition(idle, running, start),
        Transition(running, idle, stop),
    ],
    initial_state=idle,
    on_state_enter=lambda machine, state: print("enter", state.name),
    on_state_exit=lambda machine, state: print("exit", state.name),
)

fsm.process_event(start)   # prints "exit idle", then "enter running"; returns True
fsm.process_event(start)   # no transition from running on start: returns False
fsm.state                  # State(name='running')
```

`Fsm.process_event(event)` works as follows:

- It checks the transitions in the order they were given and takes the first one
  whose `from_state` is the current state and whose `event` matches.
- When a transition runs, the exit handler is called for the old state, the state
  changes, and the enter handler is called for the new state. It then returns `True`.
- If no transition matches, the event is ignored and the call returns `False`.
- An event processed from inside an enter or exit handler is dropped rather than
  queued, and the call returns `False`. `Fsm.in_transition` is `True` while the
  handlers are running.

The machine reports through the standard `logging` module under the
`anchorkit.fsm` logger:

- dropped events at ERROR;
- executed transitions at INFO;
- ignored events at DEBUG.

## Logging: `anchorkit.logs`

A `LogSystem` takes a default `Level` (`DEBUG`, `INFO`, `WARN` or `ERROR`) and
exactly one output:

- a `write_function`, which receives each fully formatted line; or
- a `handler=` callable, which receives the raw `LogLine` and does its own
  formatting.

It also accepts these keyword options:

- `lock=`: any context manager, held while a line is formatted and written.
- `time_ms_function=`: a millisecond clock.
- `use_datetime=`: read timestamps as Unix-epoch milliseconds instead of uptime.
- `max_msg_length=`: defaults to 128.

The constructor raises `ValueError` in these cases:

- the default level is `Level.DEFAULT`;
- no output is given;
- `max_msg_length` is negative.

```python
import sys
from anchorkit.logs import Level, LogSystem

system = LogSystem(Level.INFO, sys.stdout.write)
log = system.get_logger("net")
log.info("connected after %d tries", 3)
# INFO  net:example.py:6: connected after 3 tries
log.debug("not shown")                 # below the default level
```

### Loggers and levels

- `LogSystem.get_logger(module_name, level)` returns a `Logger`. Its prefix is
  `"module_name:"`, or no prefix if no name is given. A logger at
  `Level.DEFAULT` uses the system's default level.
- `Logger.debug`, `info`, `warn` and `error` take a printf-style format and its
  arguments. They record the caller's file name and line number.
- `Logger.is_active(level)` and `LogSystem.level_is_active(logger, level)` tell
  you whether a level would be emitted.
- `LogSystem.log(...)` logs a line unconditionally.
- `LogSystem.log_line(...)` drops lines below the default level.

### Line layout

`LogSystem.format_line(log_line)` builds a line from these parts, in order:

1. A timestamp. It is included when a clock was given or the timestamp is non-zero.
2. The level tag, padded to six characters, for example `"INFO  "`.
3. The module prefix.
4. `file:line: `.
5. The formatted message.

Lines longer than the buffer limit are truncated, and every line ends with a
newline.

### Timestamps

- Uptime timestamps are written as `HHH:MM:SS.mmm`, with the hour right-aligned
  in three columns.
- Datetime timestamps are written as `YYYY-MM-DD HH:MM:SS.mmm`.
- `timestamp_components(timestamp, use_datetime)` returns the
  `TimestampComponents` behind these strings.
- `is_leap_year(year)` applies the Gregorian leap-year rule.

## SONAR types: `anchorkit.sonar_types`

### Attributes

- `AttributeOps` is an `IntFlag` of the operations read (`R`), write (`W`) and
  notify (`N`), plus the combinations `RW`, `RN`, `WN` and `RWN`.
- `Attribute(attribute_id, max_size, ops)` is a frozen attribute definition. The
  ID must fit in 12 bits, `max_size` must not be negative, and `ops` must be a
  non-empty combination of R, W and N. `ops` may be given as a flag or as a name
  such as `"RW"`. An invalid value raises `ValueError`.
- `Attribute.supports(ops)` returns whether every requested operation is allowed.

### Error counters

- `LinkLayerReceiveErrors` counts `invalid_header`, `invalid_crc`,
  `buffer_overflow` and `invalid_escape_sequence`.
- `LinkLayerErrors` counts `invalid_packet`, `unexpected_packet`,
  `invalid_sequence_number` and `retries`.
- Both have a `clear()` method.
- `SonarErrors` groups the two. `SonarErrors.get_and_clear()` returns a snapshot
  of the counters and resets them to zero.

## What is not included

anchorkit provides only the shared SONAR data types. It has none of the SONAR
protocol itself:

- no frame encoding or CRC;
- no link layer, retries or connection handling;
- no attribute client or server.

It has no interactive command console and no command-line program.