"""Option merging used to configure the coordinator."""

import pytest

from app.core.config import Settings, merge_options


def test_incoming_keys_override_base():
    merged = merge_options({"a": 1, "b": 2}, {"b": 3, "c": 4})

    assert dict(merged) == {"a": 1, "b": 3, "c": 4}


def test_none_values_override_too():
    merged = merge_options({"payment_deadline_minutes": 5}, {"payment_deadline_minutes": None})

    assert merged["payment_deadline_minutes"] is None


def test_missing_incoming_returns_copy_of_base():
    base = {"conflict_window_hours": 24}

    merged = merge_options(base, None)

    assert dict(merged) == base
    assert merged is not base


def test_inputs_are_left_untouched():
    base = {"a": 1}
    incoming = {"a": 2}

    merge_options(base, incoming)

    assert base == {"a": 1}
    assert incoming == {"a": 2}


def test_merged_options_are_read_only():
    merged = merge_options({"a": 1}, {})

    with pytest.raises(TypeError):
        merged["a"] = 2  # type: ignore[index]


def test_coordinator_options_come_from_settings():
    options = Settings().coordinator_options()

    assert set(options) == {"conflict_window_hours", "payment_deadline_minutes"}
