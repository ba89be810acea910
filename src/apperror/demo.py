"""
Worked examples of the logger and status API.

Each ``do_*`` function writes to the logger it is given and returns the output
it expects that logger to have received. Locations are written as
``demo.py:<LINE>``; compare through ``normalize_output``. Scenarios must be
called from another module: some of them count stack frames in this file.
"""

from __future__ import annotations

import argparse
import re
import sys
from typing import Callable, List, Optional, Tuple

from apperror.callsite import adorn, frames_in_current_unit
from apperror.logger import AppLogger
from apperror.sinks import BufferSink
from apperror.status import AppError, AppStatus, ConfigurationError, UnresolvedErrorsError
from apperror.stringify import make_ascii
from apperror.types import UNDEFINED

Scenario = Callable[[AppLogger], Optional[str]]

_LOCATION_RE = re.compile(r"\S*demo\.py:\d+")


def normalize_output(text: str) -> List[str]:
    """Split into stripped lines with every ``demo.py:<n>`` location replaced by ``demo.py:<LINE>``."""
    return [_LOCATION_RE.sub("demo.py:<LINE>", line.strip()) for line in text.strip().splitlines()]


# ##################################################################################################
# Basic usage
# ##################################################################################################

def do_basic_logging(logger: AppLogger) -> str:
    logger.error("I owe: $", 300 + 100, " dollars to my ex")
    logger.warn("I don't have enough money in the bank:  $", 0)
    logger.info("wise to pay your debts!")
    logger.debug("i probably shouldn't borrow from her")
    logger.verbose = 2
    logger.v1("I borrowed $400")
    logger.v2("First it was $300")
    logger.v2("Then it was another $100")
    logger.v3("(It was to pay the rent)")
    return """
demo: ERROR: demo.py:<LINE>: I owe: $400 dollars to my ex
demo: WARN: demo.py:<LINE>: I don't have enough money in the bank:  $0
demo: INFO: demo.py:<LINE>: wise to pay your debts!
demo: DEBUG: demo.py:<LINE>: i probably shouldn't borrow from her
demo: V1: demo.py:<LINE>: I borrowed $400
demo: V2: demo.py:<LINE>: First it was $300
demo: V2: demo.py:<LINE>: Then it was another $100
"""


def do_basic_status(logger: AppLogger) -> str:
    s = AppStatus()
    if s.ok():
        logger.info("we're doing fine")

    s = AppStatus("unable to find boot sector")
    s.add_warn("backup all data now")
    if s.has_errors():  # show the whole status, warning included
        logger.error("We have a problem: ", s)
    return """
demo: INFO: demo.py:<LINE>: we're doing fine
demo: ERROR: demo.py:<LINE>: We have a problem: ERROR: demo.py:<LINE>: unable to find boot sector; WARN: demo.py:<LINE>: backup all data now
"""


# ##################################################################################################
# Verbosity
# ##################################################################################################

def do_check_verbose(logger: AppLogger) -> str:
    quiet = AppLogger("here we set verbosity", {"verbose": 0}, sink=logger.sink)
    quiet.v1("won't print (verbose=0), but also won't raise, ", "because verbosity was explicitly set")

    unset = AppLogger("here we did not set verbosity", sink=logger.sink)
    unset.verbose = None  # ignore any VERBOSE from the environment
    try:
        unset.v1("will raise (verbosity not set)")
    except ConfigurationError as err:
        logger.err(err)
    return """
demo: ERROR: demo.py:<LINE>: ConfigurationError: ERROR: demo.py:<LINE>: verbosity not set on logger 'here we did not set verbosity'
"""


def _show_verbosity(logger: AppLogger) -> None:
    logger.if_verbose("ok, we're verbose!")
    logger.if_verbose("very verbose!", level=2)
    if logger.get_verbose() > 2:  # manual check
        logger.warn("we're too darned verbose!")


def do_show_verbose(logger: AppLogger) -> str:
    chatty = AppLogger("demo", {"verbose": 2}, sink=logger.sink)
    _show_verbosity(chatty)
    chatty.v1("a verbose message")
    chatty.v2("a very verbose message")
    chatty.v3("a very, very verbose message")
    chatty.verbose = 1  # attribute way to set
    _show_verbosity(chatty)
    chatty.set_verbose(0)  # or the setter
    _show_verbosity(chatty)
    return """
demo: V1: demo.py:<LINE>: ok, we're verbose!
demo: V2: demo.py:<LINE>: very verbose!
demo: V1: demo.py:<LINE>: a verbose message
demo: V2: demo.py:<LINE>: a very verbose message
demo: V1: demo.py:<LINE>: ok, we're verbose!
"""


# ##################################################################################################
# Stringify
# ##################################################################################################

class _Point:
    def __init__(self) -> None:
        self.x = 1
        self.y = 2
        self._cache = "not shown"


def do_make_ascii(logger: AppLogger) -> str:
    logger.info("a string: ", make_ascii("foo"))
    logger.info("a number: ", make_ascii(42))
    logger.info("None: ", make_ascii(None))
    logger.info("undefined: ", make_ascii(UNDEFINED))
    logger.info("a list: ", make_ascii(["foo", 42]))
    logger.info("a dict: ", {"foo": 42})
    logger.info("an object: ", _Point())
    return """
demo: INFO: demo.py:<LINE>: a string: foo
demo: INFO: demo.py:<LINE>: a number: 42
demo: INFO: demo.py:<LINE>: None: null
demo: INFO: demo.py:<LINE>: undefined: undefined
demo: INFO: demo.py:<LINE>: a list: ["foo",42]
demo: INFO: demo.py:<LINE>: a dict: {"foo":42}
demo: INFO: demo.py:<LINE>: an object: {"x":1,"y":2}
"""


# ##################################################################################################
# Debug channels
# ##################################################################################################

def _show_debug_level(logger: AppLogger) -> None:
    logger.if_debug("we're debuggin!")  # only when debug is True or '*'
    logger.if_debug(5, " =? ", 2 + 3, tag="math")  # '*' or 'math'
    logger.if_debug("spelling is a breeze", tag="spelling")  # '*' or 'spelling'


def do_show_debug(logger: AppLogger) -> str:
    second = AppLogger("second-logger", {"verbose": 0, "debug": True}, sink=logger.sink)
    _show_debug_level(second)
    second.set_debug(False)
    _show_debug_level(second)
    second.set_debug("math")
    _show_debug_level(second)
    second.set_debug(["math", "art"])
    _show_debug_level(second)
    return """
second-logger: DEBUG: demo.py:<LINE>: we're debuggin!
second-logger: DEBUG[math]: demo.py:<LINE>: 5 =? 5
second-logger: DEBUG[spelling]: demo.py:<LINE>: spelling is a breeze
second-logger: INFO: demo.py:<LINE>: math debugging enabled
second-logger: DEBUG[math]: demo.py:<LINE>: 5 =? 5
second-logger: INFO: demo.py:<LINE>: math debugging enabled
second-logger: INFO: demo.py:<LINE>: art debugging enabled
second-logger: DEBUG[math]: demo.py:<LINE>: 5 =? 5
"""


def do_log_to_string(logger: AppLogger) -> str:
    for_later = "sleep this: " + str(logger.warn("I want to capture this log message for later", as_string=True))
    logger.info("Earlier I saw this message: ", for_later)
    return """
demo: INFO: demo.py:<LINE>: Earlier I saw this message: sleep this: demo: WARN: demo.py:<LINE>: I want to capture this log message for later
"""


# ##################################################################################################
# Status objects
# ##################################################################################################

def do_status_as_bool(logger: AppLogger) -> str:
    def check_ok(s: AppStatus) -> None:
        if s.ok():
            logger.info("we're ok")
        else:
            logger.info("not ok: ", s.error_msg())

    s = AppStatus()
    check_ok(s)
    s.add_warn("something fishy")
    check_ok(s)
    s.add_error("fish is rotten")
    check_ok(s)
    return """
demo: INFO: demo.py:<LINE>: we're ok
demo: INFO: demo.py:<LINE>: we're ok
demo: INFO: demo.py:<LINE>: not ok: ERROR: demo.py:<LINE>: fish is rotten
"""


def do_status_dump(logger: AppLogger) -> str:
    logger.info(AppStatus())
    return """
demo: INFO: demo.py:<LINE>: ok
"""


def do_add_diagnostics_to_status(logger: AppLogger) -> str:
    s = AppStatus()
    s.add_info("threshold 1 was not met")
    s.add_info("threshold 2 was not met")
    if s.has_info():
        logger.info(s.info_msg())
        s.clear_info()
    s.add_warn("I think the wheels fell off")
    if s.has_warnings():
        logger.warn(s.warn_msg())
        for warning in s.warnings:  # plain lists
            if "the wheels fell off" in warning.message:
                s.add_error(warning)  # keeps the warning's location too
        s.warnings = []
    if s.has_errors():
        logger.error(s.error_msg())
    return """
demo: INFO: demo.py:<LINE>: INFO: demo.py:<LINE>: threshold 1 was not met; demo.py:<LINE>: threshold 2 was not met
demo: WARN: demo.py:<LINE>: WARN: demo.py:<LINE>: I think the wheels fell off
demo: ERROR: demo.py:<LINE>: ERROR: demo.py:<LINE>: demo.py:<LINE>: I think the wheels fell off
"""


def do_add_value_to_status(logger: AppLogger) -> str:
    s = AppStatus("Houston, we have a problem")
    logger.info("status has_value(): ", s.has_value())
    s.add_value("foo")
    try:
        logger.info("got value '", s.get_value(), "'")
    except UnresolvedErrorsError as err:
        logger.warn(err)
        logger.info("status has_value(): ", s.has_value())
        s.clear_errors()  # normally, handle errors (e.g. log them) before clearing
        logger.info("got value '", s.get_value(), "'")
    return """
demo: INFO: demo.py:<LINE>: status has_value(): false
demo: WARN: demo.py:<LINE>: UnresolvedErrorsError: ERROR: demo.py:<LINE>: You must clear errors on status object before accessing value: ERROR: demo.py:<LINE>: Houston, we have a problem
demo: INFO: demo.py:<LINE>: status has_value(): true
demo: INFO: demo.py:<LINE>: got value 'foo'
"""


def do_add_extra_fields_to_status(logger: AppLogger) -> str:
    s = AppStatus()
    s.set_extra("my_other_value", "bar").set_extra("my_foo_value", "foo")
    logger.info("my status also has value ", s.get_extra("my_other_value"))
    logger.info("custom value: ", s.extra_fields()["my_other_value"])
    return """
demo: INFO: demo.py:<LINE>: my status also has value bar
demo: INFO: demo.py:<LINE>: custom value: bar
"""


def do_dedup_messages(logger: AppLogger) -> str:
    s = AppStatus()
    for _ in range(2):
        s.add_info("threshold 1 was not met")
    s.dedup_info()  # same message from the same line collapses into one with (x2)
    logger.info(s.info_msg())
    return """
demo: INFO: demo.py:<LINE>: INFO: demo.py:<LINE>: threshold 1 was not met (x2)
"""


def do_check_last_error(logger: AppLogger) -> str:
    s = AppStatus("1. bad stuff happened")
    s.add_error("2. the driver bailed")
    current = AppStatus("3. the wheels fell off the bus")
    s.add_status(current)
    if "the wheels fell off" in s.last_error:
        logger.info("at the end of the day, the wheels fell off")
    else:
        logger.error("unexpected sequence of events; last error was: ", s.last_error)
    return """
demo: INFO: demo.py:<LINE>: at the end of the day, the wheels fell off
"""


def do_switch_between_status_and_exception(logger: AppLogger) -> str:
    s = AppStatus("the wheels fell off the bus")
    try:
        raise AppError(s)  # or directly: AppError("Unexpectedly, we still have ", 4, " wheels")
    except AppError as err:
        current = err.to_status()
        current.add_warn("Now we can do more with the status object")
        logger.info(current)
    return """
demo: INFO: demo.py:<LINE>: ERROR: demo.py:<LINE>: ERROR: demo.py:<LINE>: the wheels fell off the bus; WARN: demo.py:<LINE>: Now we can do more with the status object
"""


def do_get_extra_attributes(logger: AppLogger) -> str:
    s = AppStatus()
    s.add_value(2)  # reported as an extra field
    s.add_warn("haha")  # diagnostics are not
    s.set_extra("foo", "bar")
    fields = s.extra_fields()
    logger.info("extra attributes: ", sorted(fields))
    logger.info("foo: ", fields["foo"])
    return """
demo: INFO: demo.py:<LINE>: extra attributes: ["foo","value"]
demo: INFO: demo.py:<LINE>: foo: bar
"""


def _merged_status() -> AppStatus:
    s1 = AppStatus().add_info("Stuff is going well").add_value(1)
    s2 = AppStatus("This time we blew it").add_value(2)
    s2.set_extra("foo", "bar")
    # On conflicts the merged-in status wins, so the value will be 2
    s1.add_status(s2)
    return s1


def do_merge_status_objects(logger: AppLogger) -> str:
    merged = _merged_status()
    logger.info(merged)
    return """
demo: INFO: demo.py:<LINE>: ERROR: demo.py:<LINE>: This time we blew it; INFO: demo.py:<LINE>: Stuff is going well; extra attributes: {"value":2,"foo":"bar"}
"""


def do_log_all_levels(logger: AppLogger) -> str:
    merged = _merged_status()
    merged.log_to(logger)
    merged.log_to(logger, "This is how it went down")
    return """
demo: ERROR: demo.py:<LINE>: ERROR: demo.py:<LINE>: This time we blew it
demo: INFO: demo.py:<LINE>: INFO: demo.py:<LINE>: Stuff is going well
demo: ERROR: demo.py:<LINE>: This is how it went down: ERROR: demo.py:<LINE>: This time we blew it
demo: INFO: demo.py:<LINE>: This is how it went down: INFO: demo.py:<LINE>: Stuff is going well
"""


# ##################################################################################################
# Advanced usage
# ##################################################################################################

def do_capture_into_a_buffer(logger: AppLogger) -> str:
    buff = BufferSink()
    restore = logger.sink
    logger.sink = buff
    logger.info("logging to a buffer now")
    logger.sink = restore
    logger.info("logging normally again; earlier we got: " + buff.read().rstrip("\n"))
    buff.end()

    with logger.capture() as captured:
        logger.warn("captured with a context manager")
    logger.info("and then we got: ", captured.getvalue().strip())
    return """
demo: INFO: demo.py:<LINE>: logging normally again; earlier we got: demo: INFO: demo.py:<LINE>: logging to a buffer now
demo: INFO: demo.py:<LINE>: and then we got: demo: WARN: demo.py:<LINE>: captured with a context manager
"""


def do_set_from_args(logger: AppLogger) -> str:
    parser = argparse.ArgumentParser(prog="demo")
    parser.add_argument("--verbose", action="append_const", const=True)  # repeated flags -> list
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args(["--verbose", "--verbose"])
    logger.set_from_args(args)  # a dict like {"--verbose": 2} works too
    _show_verbosity(logger)
    return """
demo: V1: demo.py:<LINE>: ok, we're verbose!
demo: V2: demo.py:<LINE>: very verbose!
"""


def do_hide_deep_call_stack(logger: AppLogger) -> str:
    def construct_status(msg: str) -> str:
        # returned rather than written because of as_string
        return str(logger.error("I'm deep in the error handler: ", msg, extra_frames=2, as_string=True))

    def handle_error(msg: str) -> None:
        deep_msg = construct_status(msg)
        logger.warn("I'm in the error handler: ", deep_msg, extra_frames=1)

    handle_error("Root problem is here")  # every location above cites this line
    return """
demo: WARN: demo.py:<LINE>: I'm in the error handler: demo: ERROR: demo.py:<LINE>: I'm deep in the error handler: Root problem is here
"""


def do_tell_me_how_deep_i_am(logger: AppLogger) -> str:
    def a() -> None:
        logger.info("num frames deep in this module: ", frames_in_current_unit())

    def b() -> None:
        a()
        logger.info("num frames deep in this module: ", frames_in_current_unit())

    def c() -> None:
        b()
        logger.info("num frames deep in this module: ", frames_in_current_unit())

    c()
    return """
demo: INFO: demo.py:<LINE>: num frames deep in this module: 4
demo: INFO: demo.py:<LINE>: num frames deep in this module: 3
demo: INFO: demo.py:<LINE>: num frames deep in this module: 2
"""


def do_adorn_message(logger: AppLogger) -> str:
    logger.info(adorn("Hello!"))  # both stamp a location; you would normally use one
    logger.info(adorn("Hello", " world!"))
    logger.info(adorn("Hello", " and check out my object! ", {"foo": "bar"}))
    return """
demo: INFO: demo.py:<LINE>: demo.py:<LINE>: Hello!
demo: INFO: demo.py:<LINE>: demo.py:<LINE>: Hello world!
demo: INFO: demo.py:<LINE>: demo.py:<LINE>: Hello and check out my object! {"foo":"bar"}
"""


def do_announce_myself(logger: AppLogger) -> str:
    logger.announce_myself()  # announce_myself(as_string=True) returns the line instead
    return f"demo: INFO: demo.py:<LINE>: called as: {' '.join(sys.argv)}"


def do_check_guard_against_bad_options(logger: AppLogger) -> str:
    AppLogger("logger1", {"verbose": 1, "debug": 0})
    for bad in (0, {"verbos": 1}):
        try:
            AppLogger("logger2", bad)  # type: ignore[arg-type]
        except ConfigurationError:
            continue
        logger.error("did not fail when calling AppLogger with options ", make_ascii(bad, canonical=True))
    return ""


SCENARIOS: Tuple[Scenario, ...] = (
    do_basic_logging,
    do_basic_status,
    do_check_verbose,
    do_show_verbose,
    do_make_ascii,
    do_show_debug,
    do_log_to_string,
    do_status_as_bool,
    do_status_dump,
    do_add_diagnostics_to_status,
    do_add_value_to_status,
    do_add_extra_fields_to_status,
    do_dedup_messages,
    do_check_last_error,
    do_switch_between_status_and_exception,
    do_get_extra_attributes,
    do_merge_status_objects,
    do_log_all_levels,
    do_capture_into_a_buffer,
    do_set_from_args,
    do_hide_deep_call_stack,
    do_tell_me_how_deep_i_am,
    do_adorn_message,
    do_announce_myself,
    do_check_guard_against_bad_options,
)
