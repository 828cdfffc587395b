import logging

import pytest

from espnowsync.debug import DebugTagManager, Level


TAG = "TAG"
TAG2 = "TAG2"


def test_example_sequence_of_levels():
    manager = DebugTagManager(Level.VERBOSE)
    manager.set_tag_level(TAG, Level.WARN)
    assert manager.get_tag_level(TAG) == Level.WARN
    assert manager.get_tag_level_str(TAG) == "WARN"
    assert manager.get_tag_level(TAG2) == Level.VERBOSE
    assert manager.get_tag_level_str(TAG2) == "VERBOSE"
    manager.set_tag_to_default_level(TAG)
    assert manager.get_tag_level(TAG) == Level.VERBOSE
    manager.set_tag_level(TAG, Level.INFO)
    assert manager.get_tag_level(TAG) == Level.INFO
    assert manager.get_tag_level_str(TAG) == "INFO"


def test_tag_level_is_capped_by_default():
    manager = DebugTagManager(Level.WARN)
    manager.set_tag_level(TAG, Level.VERBOSE)
    assert manager.get_tag_level(TAG) == Level.WARN
    manager.set_tag_level(TAG, Level.ERROR)
    assert manager.get_tag_level(TAG) == Level.ERROR


def test_set_tag_level_replaces_previous():
    manager = DebugTagManager()
    manager.set_tag_level(TAG, Level.ERROR)
    manager.set_tag_level(TAG, Level.DBG)
    assert manager.get_tag_level(TAG) == Level.DBG
    assert manager.get_tag_level_str(TAG) == "DBG"


def test_no_debug_default_silences_everything():
    manager = DebugTagManager(Level.NO_DEBUG)
    manager.set_tag_level(TAG, Level.VERBOSE)
    assert manager.get_tag_level(TAG) == Level.NO_DEBUG
    assert manager.get_tag_level_str(TAG) == "NONE"
    assert manager.log(TAG, Level.ERROR, "Error message") is None


def test_unknown_level_name():
    manager = DebugTagManager()
    manager.set_tag_level(TAG, -3)
    assert manager.get_tag_level_str(TAG) == "UNKNOWN"


@pytest.mark.parametrize(
    "level, expected",
    [
        (Level.ERROR, True),
        (Level.WARN, True),
        (Level.INFO, False),
        (Level.DBG, False),
        (Level.VERBOSE, False),
    ],
)
def test_is_enabled_follows_tag_level(level, expected):
    manager = DebugTagManager()
    manager.set_tag_level(TAG, Level.WARN)
    assert manager.is_enabled(TAG, level) is expected


def test_log_returns_formatted_text_and_emits(caplog):
    manager = DebugTagManager()
    caplog.set_level(1, logger="espnowsync")
    text = manager.log(TAG, Level.WARN, "Warning %s", "message")
    assert text == "Warning message"
    assert any(
        record.name == "espnowsync.TAG" and record.getMessage() == "Warning message"
        for record in caplog.records
    )


def test_log_filtered_out_emits_nothing(caplog):
    manager = DebugTagManager()
    manager.set_tag_level(TAG, Level.WARN)
    caplog.set_level(1, logger="espnowsync")
    assert manager.log(TAG, Level.INFO, "Info message") is None
    assert [r for r in caplog.records if r.name == "espnowsync.TAG"] == []


def test_message_without_args_keeps_percent_signs():
    manager = DebugTagManager()
    assert manager.log(TAG, Level.ERROR, "100%") == "100%"


def test_log_error_if_non_zero():
    manager = DebugTagManager()
    assert manager.log_error_if_non_zero(TAG, -1, "Error message") == "Code: -1. Error message"
    assert manager.log_error_if_non_zero(TAG, 0, "Error message") is None


def test_log_error_if_zero():
    manager = DebugTagManager()
    assert manager.log_error_if_zero(TAG, 0, "Error message if zero") == "Code: 0. Error message if zero"
    assert manager.log_error_if_zero(TAG, 5, "Error message if zero") is None


def test_log_if_code():
    manager = DebugTagManager()
    assert manager.log_if_code(Level.WARN, TAG, -1, -1, "Warning") == "Code: -1. Warning"
    assert manager.log_if_code(Level.ERROR, TAG, -2, -1, "Error") is None


def test_log_if_code_respects_tag_level():
    manager = DebugTagManager()
    manager.set_tag_level(TAG, Level.ERROR)
    assert manager.log_if_code(Level.WARN, TAG, -1, -1, "Warning") is None


def test_error_helpers_respect_tag_level():
    manager = DebugTagManager()
    manager.set_tag_level(TAG, Level.NO_DEBUG)
    assert manager.log_error_if_non_zero(TAG, 7, "x") is None
    assert manager.log_error_if_zero(TAG, 0, "x") is None


def test_default_reset_of_unknown_tag_keeps_default():
    manager = DebugTagManager(Level.INFO)
    manager.set_tag_to_default_level("missing")
    assert manager.get_tag_level("missing") == Level.INFO