from __future__ import annotations

from typing import Any

import pytest

from canvasgov.actions.parsing import MalformedAction, ValidAction, extract_actions, parse_action_record


def test_parse_valid_record_keeps_freeform_fields() -> None:
    parsed = parse_action_record({"plugin": "emailer", "action": "send", "to": ["x@y.z"]})

    assert parsed == ValidAction(
        plugin="emailer",
        action="send",
        record={"plugin": "emailer", "action": "send", "to": ["x@y.z"]},
    )


def test_parsed_record_is_a_copy() -> None:
    raw = {"plugin": "emailer", "action": "send"}
    parsed = parse_action_record(raw)

    assert isinstance(parsed, ValidAction)
    parsed.record["thread_id"] = "t"
    assert "thread_id" not in raw


@pytest.mark.parametrize(
    ("raw", "reason"),
    [
        (None, "not a record"),
        ("emailer", "not a record"),
        ([{"plugin": "emailer", "action": "send"}], "not a record"),
        ({"action": "send"}, "missing plugin"),
        ({"plugin": "", "action": "send"}, "missing plugin"),
        ({"plugin": None, "action": "send"}, "missing plugin"),
        ({"plugin": "emailer"}, "missing action"),
        ({"plugin": "emailer", "action": ""}, "missing action"),
        ({"plugin": "0", "action": "send"}, "missing plugin"),
        ({"plugin": "emailer", "action": "0"}, "missing action"),
    ],
)
def test_parse_malformed_records(raw: Any, reason: str) -> None:
    parsed = parse_action_record(raw)

    assert isinstance(parsed, MalformedAction)
    assert parsed.reason == reason


@pytest.mark.parametrize("payload", [None, "actions", [], {}, {"actions": None}, {"actions": "x"}, {"actions": {}}])
def test_extract_actions_tolerates_bad_payloads(payload: Any) -> None:
    assert extract_actions(payload) == []


def test_extract_actions_returns_list_members() -> None:
    actions = [{"plugin": "emailer", "action": "send"}, None]

    assert extract_actions({"actions": actions}) == actions


def test_parse_accepts_zero_inside_longer_names() -> None:
    parsed = parse_action_record({"plugin": "v0", "action": "00"})

    assert isinstance(parsed, ValidAction)
