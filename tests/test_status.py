from __future__ import annotations

import inspect

import pytest

from apperror.logger import AppLogger
from apperror.sinks import BufferSink
from apperror.status import (
    AppError,
    AppStatus,
    ArgumentTypeError,
    ConfigurationError,
    MergeTypeError,
    UnresolvedErrorsError,
    UsageError,
    dedup,
)
from apperror.types import UNDEFINED


def _next_line() -> int:
    frame = inspect.currentframe()
    assert frame is not None and frame.f_back is not None
    return frame.f_back.f_lineno + 1


def test_empty_status_is_ok() -> None:
    s = AppStatus()
    assert s.ok()
    assert not (s.has_errors() or s.has_warnings() or s.has_info())
    assert s.render() == "ok"
    assert str(s) == "ok"
    assert s.last_error == ""
    assert s.value is UNDEFINED


def test_constructor_seeds_one_error_stamped_here() -> None:
    line = _next_line()
    s = AppStatus("unable to find boot sector ", 3)
    assert not s.ok()
    assert [e.text for e in s.errors] == [f"test_status.py:{line}: unable to find boot sector 3"]
    assert s.last_error == s.errors[0].text


def test_entries_are_stamped_with_the_adding_line() -> None:
    s = AppStatus()
    line = _next_line()
    s.add_info("a").add_warning("b").add_warn("c").add_error("d")
    assert [e.location for e in s.info + s.warnings + s.errors] == [f"test_status.py:{line}"] * 4
    assert s.render() == (
        f"ERROR: test_status.py:{line}: d; "
        f"WARN: test_status.py:{line}: b; test_status.py:{line}: c; "
        f"INFO: test_status.py:{line}: a"
    )


def test_extra_frames_stamps_the_helper_caller() -> None:
    def note(s: AppStatus) -> None:
        s.add_warning("from a helper", extra_frames=1)

    s = AppStatus()
    line = _next_line()
    note(s)
    assert s.warnings[0].location == f"test_status.py:{line}"


def test_tier_messages() -> None:
    s = AppStatus()
    assert s.info_msg() == s.warn_msg() == s.error_msg() == ""
    line = _next_line()
    s.add_info("a").add_info("b")
    assert s.info_msg() == f"INFO: test_status.py:{line}: a; test_status.py:{line}: b"
    assert s.err_msg() == s.error_msg()


def test_merge_appends_in_order_and_takes_last_error() -> None:
    s1 = AppStatus("e1")
    s2 = AppStatus("e2").add_warning("w2").add_info("i2")
    s1.add_info("i1")

    assert s1.add_status(s2) is s1
    assert [e.message for e in s1.errors] == ["e1", "e2"]
    assert [e.message for e in s1.warnings] == ["w2"]
    assert [e.message for e in s1.info] == ["i1", "i2"]
    assert s1.last_error == s2.last_error


def test_merge_keeps_last_error_when_other_has_none() -> None:
    s1 = AppStatus("mine")
    s1.merge(AppStatus().add_info("fine"))
    assert s1.last_error.endswith(": mine")


def test_merge_copies_entries_and_value_and_extras() -> None:
    s1 = AppStatus().add_value(1).set_extra("foo", "a").set_extra("keep", True)
    s2 = AppStatus("boom").add_value(2).set_extra("foo", "b")
    s1.add_status(s2)
    s2.clear_errors()

    assert len(s1.errors) == 1
    assert s1.value == 2
    assert s1.extra_fields() == {"value": 2, "foo": "b", "keep": True}


def test_merge_without_value_keeps_ours() -> None:
    s1 = AppStatus().add_value("mine")
    s1.add_status(AppStatus())
    assert s1.get_value() == "mine"


def test_merge_rejects_non_status() -> None:
    with pytest.raises(MergeTypeError, match="object type is str"):
        AppStatus().add_status("not a status")  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        AppStatus().merge(None)  # type: ignore[arg-type]


def test_value_is_gated_on_unresolved_errors() -> None:
    s = AppStatus("Houston, we have a problem")
    assert not s.has_value()
    s.add_value("foo")
    assert s.has_value()

    with pytest.raises(UnresolvedErrorsError, match="You must clear errors on status object before accessing value"):
        s.get_value()

    s.clear_errors()
    assert s.get_value() == "foo"


def test_none_is_a_value_and_undefined_is_not() -> None:
    s = AppStatus().add_value(None)
    assert s.has_value()
    assert s.get_value() is None
    s.add_value(UNDEFINED)
    assert not s.has_value()


def test_clear_errors_also_clears_last_error() -> None:
    s = AppStatus("gone")
    s.clear_errors()
    assert s.ok()
    assert s.last_error == ""


def test_clear_warnings_and_info_return_self() -> None:
    s = AppStatus().add_warning("w").add_info("i")
    assert s.clear_warnings().clear_info() is s
    assert not s.has_warnings()
    assert not s.has_info()


def test_dedup_plain_strings_in_place() -> None:
    msgs = ["x", "x", "y"]
    assert dedup(msgs) is msgs
    assert msgs == ["x (x2)", "y"]


def test_dedup_info_collapses_same_line_repeats() -> None:
    s = AppStatus()
    for _ in range(2):
        s.add_info("threshold 1 was not met")
    s.add_info("threshold 1 was not met")  # another line: kept apart
    s.dedup_info()

    assert len(s.info) == 2
    assert s.info[0].message == "threshold 1 was not met (x2)"
    assert s.info[1].message == "threshold 1 was not met"


def test_dedup_warnings_and_errors() -> None:
    s = AppStatus()
    for _ in range(3):
        s.add_warning("w")
        s.add_error("e")
    s.dedup_warnings().dedup_errors()
    assert [w.message for w in s.warnings] == ["w (x3)"]
    assert [e.message for e in s.errors] == ["e (x3)"]


def test_dedup_keeps_unique_and_empty_input_unchanged() -> None:
    assert dedup(["x", "y"]) == ["x", "y"]
    assert dedup([]) == []

    s = AppStatus()
    s.dedup_info()
    assert s.info == []

    s.add_info("first")
    s.add_info("second")
    before = list(s.info)
    s.dedup_info()
    assert s.info == before


def test_dedup_errors_carries_repeat_count_into_last_error() -> None:
    s = AppStatus()
    for _ in range(2):
        s.add_error("disk full")
    s.dedup_errors()
    assert len(s.errors) == 1
    assert s.last_error == s.errors[0].text
    assert s.last_error.endswith(": disk full (x2)")


def test_dedup_errors_leaves_unrepeated_last_error_alone() -> None:
    s = AppStatus()
    for _ in range(2):
        s.add_error("disk full")
    s.add_error("giving up")
    s.dedup_errors()
    assert s.last_error == s.errors[-1].text
    assert s.last_error.endswith(": giving up")


def test_negative_extra_frames_are_rejected() -> None:
    s = AppStatus()
    line = _next_line()
    with pytest.raises(ArgumentTypeError) as excinfo:
        s.add_info("x", extra_frames=-1)
    assert str(excinfo.value).startswith(f"ERROR: test_status.py:{line + 1}: extra_frames must be a non-negative")
    assert not s.has_info()

    with pytest.raises(ArgumentTypeError):
        AppStatus("boom", extra_frames=-1)
    with pytest.raises(ArgumentTypeError):
        s.add_info("fine").log_to(AppLogger("demo", {"verbose": 0}, sink=BufferSink()), extra_frames=-1)


def test_extra_fields_lead_with_value() -> None:
    s = AppStatus().set_extra("foo", "bar")
    assert s.extra_fields() == {"foo": "bar"}
    s.add_value(2)
    assert list(s.extra_fields()) == ["value", "foo"]
    assert s.get_extra("foo") == "bar"
    assert s.get_extra("missing", 0) == 0


def test_render_appends_extra_attributes() -> None:
    s = AppStatus().add_value(2).set_extra("foo", "bar")
    assert s.render() == 'ok; extra attributes: {"value":2,"foo":"bar"}'


def test_set_extra_rejects_reserved_and_non_string_names() -> None:
    with pytest.raises(ArgumentTypeError, match="extra field name"):
        AppStatus().set_extra("value", 1)
    with pytest.raises(UsageError):
        AppStatus().set_extra(3, 1)  # type: ignore[arg-type]


def test_log_to_writes_each_tier_at_the_callers_line() -> None:
    buff = BufferSink()
    logger = AppLogger("demo", {"verbose": 0}, sink=buff)
    s = AppStatus("bad").add_warning("iffy").add_info("fine")

    line = _next_line()
    s.log_to(logger, "nightly ", "import")
    out = buff.lines()

    assert len(out) == 3
    assert out[0].startswith(f"demo: ERROR: test_status.py:{line}: nightly import: ERROR: ")
    assert out[1].startswith(f"demo: WARN: test_status.py:{line}: nightly import: WARN: ")
    assert out[2].startswith(f"demo: INFO: test_status.py:{line}: nightly import: INFO: ")


def test_log_to_skips_empty_tiers() -> None:
    buff = BufferSink()
    AppStatus().log_to(AppLogger("demo", {"verbose": 0}, sink=buff))
    assert buff.getvalue() == ""


def test_app_error_carries_a_stamped_status() -> None:
    line = _next_line()
    err = AppError("Unexpectedly, we still have ", 4, " wheels")
    assert str(err) == f"ERROR: test_status.py:{line}: Unexpectedly, we still have 4 wheels"

    status = err.to_status()
    assert status is err.status
    status.add_warning("more to say")
    assert status.has_warnings()


def test_app_error_from_status_nests_its_rendering() -> None:
    s = AppStatus("wheels fell off")
    err = AppError(s)
    assert str(err).count("ERROR: ") == 2
    assert str(err).endswith(": wheels fell off")


def test_error_taxonomy() -> None:
    assert issubclass(ConfigurationError, AppError) and issubclass(ConfigurationError, ValueError)
    assert issubclass(UnresolvedErrorsError, UsageError)
    assert issubclass(ArgumentTypeError, UsageError) and issubclass(ArgumentTypeError, TypeError)
    assert issubclass(MergeTypeError, AppError) and issubclass(MergeTypeError, TypeError)
