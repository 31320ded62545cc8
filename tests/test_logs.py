import datetime

import pytest

from anchorkit.logs import (
    Level,
    LogLine,
    LogSystem,
    Logger,
    TimestampComponents,
    is_leap_year,
    timestamp_components,
)


class Recorder:
    def __init__(self):
        self.lines = []

    def __call__(self, text):
        self.lines.append(text)


def make_system(default_level=Level.INFO, **kwargs):
    recorder = Recorder()
    return LogSystem(default_level, recorder, **kwargs), recorder


@pytest.mark.parametrize(
    "year, expected",
    [(2000, True), (1900, False), (2024, True), (2023, False), (1970, False)],
)
def test_is_leap_year(year, expected):
    assert is_leap_year(year) is expected


@pytest.mark.parametrize(
    "timestamp",
    [0, 999, 86_399_999, 86_400_000, 951_782_400_000, 1_709_164_800_123, 1_700_000_000_456],
)
def test_datetime_components_match_calendar(timestamp):
    components = timestamp_components(timestamp, use_datetime=True)
    expected = datetime.datetime.fromtimestamp(timestamp / 1000, datetime.timezone.utc)
    assert (components.year, components.month, components.day) == (
        expected.year,
        expected.month,
        expected.day,
    )
    assert (components.hour, components.minute, components.second) == (
        expected.hour,
        expected.minute,
        expected.second,
    )
    assert components.ms == timestamp % 1000


@pytest.mark.parametrize("timestamp", [0, 1, 59_999, 3_600_000, 123_456_789])
def test_uptime_components_round_trip(timestamp):
    c = timestamp_components(timestamp, use_datetime=False)
    assert c.year is None and not c.has_date
    assert 0 <= c.minute < 60 and 0 <= c.second < 60 and 0 <= c.ms < 1000
    assert ((c.hour * 60 + c.minute) * 60 + c.second) * 1000 + c.ms == timestamp


def test_epoch_datetime_string():
    assert str(timestamp_components(0, use_datetime=True)) == "1970-01-01 00:00:00.000"


def test_uptime_string_zero():
    assert str(TimestampComponents(0, 0, 0, 0)) == "  0:00:00.000"


def test_init_rejects_default_level():
    with pytest.raises(ValueError):
        LogSystem(Level.DEFAULT, Recorder())


def test_init_requires_writer_or_handler():
    with pytest.raises(ValueError):
        LogSystem(Level.INFO)


def test_log_line_without_timestamp():
    system, recorder = make_system()
    system.log_line(Level.INFO, "main.c", 10, None, "hello %d", 5)
    assert recorder.lines == ["INFO  main.c:10: hello 5\n"]


def test_log_line_with_module_prefix():
    system, recorder = make_system()
    system.log_line(Level.ERROR, "x.c", 3, "net:", "boom")
    assert recorder.lines == ["ERROR net:x.c:3: boom\n"]


def test_log_line_filters_below_default_level():
    system, recorder = make_system(Level.WARN)
    system.log_line(Level.INFO, "a.c", 1, None, "dropped")
    system.log_line(Level.DEBUG, "a.c", 1, None, "dropped")
    system.log_line(Level.WARN, "a.c", 2, None, "kept")
    assert recorder.lines == ["WARN  a.c:2: kept\n"]


def test_log_is_not_filtered():
    system, recorder = make_system(Level.ERROR)
    system.log(Level.DEBUG, "a.c", 7, None, "always")
    assert recorder.lines == ["DEBUG a.c:7: always\n"]


def test_time_function_adds_uptime_timestamp():
    system, recorder = make_system(time_ms_function=lambda: 0)
    system.log(Level.INFO, "t.c", 1, None, "msg")
    assert recorder.lines == ["  0:00:00.000 INFO  t.c:1: msg\n"]


def test_time_function_adds_datetime_timestamp():
    system, recorder = make_system(time_ms_function=lambda: 0, use_datetime=True)
    system.log(Level.WARN, "t.c", 1, None, "msg")
    assert recorder.lines == ["1970-01-01 00:00:00.000 WARN  t.c:1: msg\n"]


def test_timestamp_prefix_matches_components():
    stamp = 123_456_789
    system, recorder = make_system(time_ms_function=lambda: stamp)
    system.log(Level.INFO, "t.c", 1, None, "msg")
    expected_prefix = str(timestamp_components(stamp, use_datetime=False)) + " "
    assert recorder.lines[0].startswith(expected_prefix)


def test_format_line_truncates_and_keeps_newline():
    system, _ = make_system(max_msg_length=16)
    outputs = []
    for size in (500, 1000):
        record = LogLine(
            level=Level.INFO,
            file="f.c",
            line=1,
            module_prefix=None,
            timestamp=0,
            timestamp_components=timestamp_components(0, False),
            fmt="%s",
            args=("x" * size,),
        )
        outputs.append(system.format_line(record))
    assert all(out.endswith("\n") for out in outputs)
    assert len(outputs[0]) == len(outputs[1])
    assert len(outputs[0]) < 500
    assert outputs[0].startswith("INFO  f.c:1: xxx")


def test_short_message_not_truncated():
    system, _ = make_system(max_msg_length=16)
    record = LogLine(Level.INFO, "f.c", 1, None, 0, timestamp_components(0, False), "ok")
    assert system.format_line(record) == "INFO  f.c:1: ok\n"


def test_custom_handler_receives_log_line():
    received = []
    system = LogSystem(Level.DEBUG, handler=received.append, time_ms_function=lambda: 1500)
    system.log(Level.WARN, "h.c", 42, "mod:", "value=%s", "abc")
    assert len(received) == 1
    record = received[0]
    assert record.level == Level.WARN
    assert record.file == "h.c"
    assert record.line == 42
    assert record.module_prefix == "mod:"
    assert record.timestamp == 1500
    assert record.timestamp_components == timestamp_components(1500, False)
    assert record.message == "value=abc"


def test_lock_wraps_write():
    events = []

    class RecordingLock:
        def __enter__(self):
            events.append("acquire")
            return self

        def __exit__(self, *exc):
            events.append("release")
            return False

    system = LogSystem(
        Level.INFO, lambda text: events.append("write"), lock=RecordingLock()
    )
    system.log(Level.INFO, "l.c", 1, None, "x")
    assert events == ["acquire", "write", "release"]


def test_level_is_active_uses_default_for_default_logger():
    system, _ = make_system(Level.WARN)
    logger = system.get_logger()
    assert system.level_is_active(logger, Level.WARN) is True
    assert system.level_is_active(logger, Level.INFO) is False


def test_level_is_active_uses_logger_override():
    system, _ = make_system(Level.WARN)
    logger = system.get_logger("mod", Level.DEBUG)
    assert logger.is_active(Level.DEBUG) is True
    logger.level = Level.ERROR
    assert logger.is_active(Level.WARN) is False


def test_get_logger_module_prefix():
    system, _ = make_system()
    assert system.get_logger("radio").module_prefix == "radio:"
    assert system.get_logger().module_prefix is None


def test_logger_methods_record_caller_file_and_filter():
    system, recorder = make_system(Level.INFO)
    logger = system.get_logger("app")
    logger.debug("hidden")
    logger.info("count=%d", 3)
    logger.warn("careful")
    logger.error("bad %s", "thing")
    assert len(recorder.lines) == 3
    assert recorder.lines[0].startswith("INFO  app:test_logs.py:")
    assert recorder.lines[0].endswith(": count=3\n")
    assert recorder.lines[1].startswith("WARN  app:test_logs.py:")
    assert recorder.lines[2].endswith(": bad thing\n")


def test_logger_records_line_number():
    system, recorder = make_system(Level.DEBUG)
    logger = Logger(system)
    import inspect

    expected_line = inspect.currentframe().f_lineno + 1
    logger.debug("here")
    assert recorder.lines == [f"DEBUG test_logs.py:{expected_line}: here\n"]


def test_level_prefixes():
    system, recorder = make_system(Level.DEBUG)
    for level in (Level.DEBUG, Level.INFO, Level.WARN, Level.ERROR):
        system.log(level, "p.c", 1, None, "x")
    assert recorder.lines == [
        "DEBUG p.c:1: x\n",
        "INFO  p.c:1: x\n",
        "WARN  p.c:1: x\n",
        "ERROR p.c:1: x\n",
    ]