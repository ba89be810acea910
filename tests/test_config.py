from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pytest

from apperror.config import LoggerConfig, coerce_verbose, parse_debug_tags, read_args
from apperror.status import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("VERBOSE", "DEBUG", "LOG_FILE", "MYAPP_VERBOSE", "MYAPP_DEBUG", "MYAPP_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)


def test_coerce_verbose_accepts_parsed_flag_shapes() -> None:
    assert coerce_verbose(None) == 0
    assert coerce_verbose([True, True, True]) == 3
    assert coerce_verbose(True) == 1
    assert coerce_verbose(False) == 0
    assert coerce_verbose(2) == 2
    assert coerce_verbose(" 4 ") == 4


def test_coerce_verbose_rejects_garbage() -> None:
    with pytest.raises(ConfigurationError, match="verbose must be an integer"):
        coerce_verbose("loud")
    with pytest.raises(ConfigurationError, match="verbose must be >= 0"):
        coerce_verbose(-1)


def test_parse_debug_tags() -> None:
    assert parse_debug_tags(True) == ("*",)
    assert parse_debug_tags(False) == ()
    assert parse_debug_tags(None) == ()
    assert parse_debug_tags(1) == ("*",)
    assert parse_debug_tags(0) == ()
    assert parse_debug_tags("math") == ("math",)
    assert parse_debug_tags("math, art") == ("math", "art")
    assert parse_debug_tags(["math,art", "io"]) == ("math", "art", "io")


def test_parse_debug_tags_rejects_other_types() -> None:
    with pytest.raises(ConfigurationError, match="debug must be a bool"):
        parse_debug_tags(object())


def test_parse_debug_tags_non_string_items_enable_every_channel() -> None:
    assert parse_debug_tags([True]) == ("*",)
    assert parse_debug_tags([True, True]) == ("*",)
    assert parse_debug_tags([False]) == ()
    assert parse_debug_tags(["math", 1]) == ("math", "*")


def test_read_args_from_mapping_and_namespace() -> None:
    assert read_args({"--verbose": 2, "--debug": "io"}) == (2, ("io",))
    assert read_args({"verbose": [True], "debug": False}) == (1, ())
    assert read_args(argparse.Namespace(verbose=None, debug=["a,b"])) == (0, ("a", "b"))
    assert read_args({}) == (0, ())


def test_logger_options() -> None:
    assert LoggerConfig().logger_options() == {"debug": []}
    assert LoggerConfig(verbose=2, debug=("io",)).logger_options() == {"debug": ["io"], "verbose": 2}


def test_from_env_reads_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("VERBOSE", "2")
    monkeypatch.setenv("DEBUG", "math,io")
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "run.log"))

    cfg = LoggerConfig.from_env()

    assert cfg.verbose == 2
    assert cfg.debug == ("math", "io")
    assert cfg.log_file == tmp_path / "run.log"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", ("*",)), ("true", ("*",)), ("YES", ("*",)), ("0", ()), ("false", ()), ("", ())],
)
def test_from_env_debug_words(monkeypatch: pytest.MonkeyPatch, raw: str, expected: tuple) -> None:
    monkeypatch.setenv("DEBUG", raw)
    assert LoggerConfig.from_env(default=LoggerConfig(debug=("keep",))).debug == expected


def test_from_env_invalid_values_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    base = LoggerConfig(verbose=1)

    monkeypatch.setenv("VERBOSE", "loud")
    assert LoggerConfig.from_env(default=base).verbose == 1

    monkeypatch.setenv("VERBOSE", "-3")
    assert LoggerConfig.from_env(default=base).verbose == 1


def test_from_env_respects_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    base = LoggerConfig(env_prefix="MYAPP_")
    monkeypatch.setenv("VERBOSE", "3")
    monkeypatch.setenv("MYAPP_VERBOSE", "1")

    cfg = LoggerConfig.from_env(default=base)

    assert cfg.verbose == 1
    assert cfg.env_prefix == "MYAPP_"


def test_from_args_overlays_only_given_values() -> None:
    base = LoggerConfig(component="importer", verbose=1, debug=("io",))

    same = LoggerConfig.from_args(argparse.Namespace(verbose=None, debug=None), default=base)
    assert same == base

    cfg = LoggerConfig.from_args({"--verbose": 3, "--debug": ["math"]}, default=base)
    assert cfg.verbose == 3
    assert cfg.debug == ("math",)
    assert cfg.component == "importer"


def test_from_yaml_top_level(tmp_path: Path) -> None:
    path = tmp_path / "logging.yaml"
    path.write_text("component: importer\nverbose: 2\ndebug: [math, io]\n", encoding="utf-8")

    cfg = LoggerConfig.from_yaml(path)

    assert cfg.component == "importer"
    assert cfg.verbose == 2
    assert cfg.debug == ("math", "io")


def test_from_yaml_logging_section_and_level_names(tmp_path: Path) -> None:
    path = tmp_path / "app.yaml"
    path.write_text(
        "logging:\n"
        "  console_level: warning\n"
        "  file_level: 10\n"
        "  log_file: logs/app.log\n"
        "  debug: true\n",
        encoding="utf-8",
    )

    cfg = LoggerConfig.from_yaml(path, default=LoggerConfig(component="kept"))

    assert cfg.component == "kept"
    assert cfg.console_level == logging.WARNING
    assert cfg.file_level == logging.DEBUG
    assert cfg.log_file == Path("logs/app.log")
    assert cfg.debug == ("*",)
    assert cfg.verbose is None


def test_from_yaml_empty_file_keeps_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert LoggerConfig.from_yaml(path) == LoggerConfig()


def test_from_yaml_errors(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="cannot read logger config"):
        LoggerConfig.from_yaml(tmp_path / "missing.yaml")

    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="must be a YAML mapping"):
        LoggerConfig.from_yaml(listing)

    unknown = tmp_path / "unknown.yaml"
    unknown.write_text("verbosity: 2\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="unknown logger config keys"):
        LoggerConfig.from_yaml(unknown)

    bad_level = tmp_path / "level.yaml"
    bad_level.write_text("console_level: LOUD\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="unknown log level"):
        LoggerConfig.from_yaml(bad_level)
