"""Tests for logging configuration."""

from __future__ import annotations

import io
import logging
import math
from pathlib import Path

import numpy as np
import orjson
import pytest

from binforecast.logging_config import (
    MAX_LIST_ITEMS,
    JsonFormatter,
    SimpleFormatter,
    _filter_log_record,
    get_logger,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield
    root.handlers.clear()
    root.setLevel(level)


def make_record(msg: str = "hello", level: int = logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord("binforecast.test", level, "test.py", 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFilterLogRecord:
    """Tests for extra-field filtering."""

    def test_scalars_pass_through(self) -> None:
        record = {"model_id": "v1", "loss": 0.4, "iterations": 12, "converged": True, "x": None}
        assert _filter_log_record(record) == record

    def test_short_lists_pass_through(self) -> None:
        assert _filter_log_record({"coefs": [0.1, 0.2]}) == {"coefs": [0.1, 0.2]}

    def test_long_lists_are_summarized(self) -> None:
        values = list(range(MAX_LIST_ITEMS + 1))
        assert _filter_log_record({"values": values}) == {"values": "[list:11 items]"}

    def test_bulk_fields_always_summarized(self) -> None:
        assert _filter_log_record({"predictions": [0.1, 0.9]}) == {
            "predictions": "[list:2 items]"
        }

    def test_numpy_arrays_are_summarized(self) -> None:
        filtered = _filter_log_record({"matrix": np.zeros((200, 8))})
        assert filtered == {"matrix": "[array:200x8 float64]"}

    def test_numpy_scalars_become_python(self) -> None:
        filtered = _filter_log_record({"loss": np.float64(0.25), "n": np.int64(3)})
        assert filtered == {"loss": 0.25, "n": 3}
        assert type(filtered["loss"]) is float

    def test_non_finite_floats_become_strings(self) -> None:
        filtered = _filter_log_record({"a": math.nan, "b": math.inf})
        assert filtered == {"a": "nan", "b": "inf"}

    def test_nested_dicts_are_filtered(self) -> None:
        filtered = _filter_log_record({"outer": {"X": [1, 2, 3], "lr": 0.01}})
        assert filtered == {"outer": {"X": "[list:3 items]", "lr": 0.01}}

    def test_depth_is_capped(self) -> None:
        deep: dict = {"v": 1}
        for _ in range(6):
            deep = {"d": deep}
        filtered = _filter_log_record(deep)
        assert "_truncated" in str(filtered)

    def test_other_types_are_stringified(self) -> None:
        assert _filter_log_record({"path": Path("models/v1.json")}) == {"path": "models/v1.json"}


class TestJsonFormatter:
    def test_output_is_one_json_object(self) -> None:
        line = JsonFormatter().format(make_record("fit done", model_id="v1", loss=0.5))
        data = orjson.loads(line)

        assert "\n" not in line
        assert data["level"] == "INFO"
        assert data["logger"] == "binforecast.test"
        assert data["msg"] == "fit done"
        assert data["model_id"] == "v1"
        assert data["loss"] == 0.5
        assert "ts" in data

    def test_warning_includes_location(self) -> None:
        data = orjson.loads(JsonFormatter().format(make_record(level=logging.WARNING)))
        assert data["file"] == "test.py"
        assert data["line"] == 10

    def test_bulk_extra_is_summarized(self) -> None:
        line = JsonFormatter().format(make_record(features=np.ones((50, 8))))
        assert orjson.loads(line)["features"] == "[array:50x8 float64]"


class TestSimpleFormatter:
    def test_human_readable(self) -> None:
        line = SimpleFormatter().format(make_record("trained", model_id="v2"))
        assert line.startswith("INFO")
        assert "binforecast.test: trained" in line
        assert "model_id=v2" in line


class TestSetupLogging:
    def test_json_to_stream(self, restore_root_logger: None) -> None:
        stream = io.StringIO()
        setup_logging(level=logging.DEBUG, json_format=True, stream=stream)
        get_logger("binforecast.demo").info("ready", extra={"n": 3})

        data = orjson.loads(stream.getvalue().strip())
        assert data["msg"] == "ready"
        assert data["n"] == 3

    def test_replaces_handlers(self, restore_root_logger: None) -> None:
        setup_logging(stream=io.StringIO())
        setup_logging(stream=io.StringIO())
        assert len(logging.getLogger().handlers) == 1

    def test_simple_format(self, restore_root_logger: None) -> None:
        stream = io.StringIO()
        setup_logging(json_format=False, stream=stream)
        get_logger("binforecast.demo").warning("careful")
        assert "WARNING  binforecast.demo: careful" in stream.getvalue()
