"""Unit tests for the rule converter."""

import json
from datetime import UTC, datetime

from permset.domain.services.rule_converter import (
    permission_from_storage,
    permission_to_storage,
    safe_json_parse,
    to_rule,
)
from permset.domain.value_objects import PermissionSource

from tests.conftest import permission_row


class TestSafeJsonParse:
    def test_none_and_blank(self) -> None:
        assert safe_json_parse(None) is None
        assert safe_json_parse("") is None
        assert safe_json_parse("   ") is None

    def test_decoded_values_pass_through(self) -> None:
        value = {"a": 1}
        assert safe_json_parse(value) is value
        assert safe_json_parse(["x"]) == ["x"]

    def test_invalid_json_returns_none(self) -> None:
        assert safe_json_parse("{not json", "permission p1") is None

    def test_iso_timestamps_revived(self) -> None:
        parsed = safe_json_parse('{"at": "2025-03-01T10:00:00.000Z", "n": "2025-03-01"}')
        assert parsed["at"] == datetime(2025, 3, 1, 10, 0, tzinfo=UTC)
        assert parsed["n"] == "2025-03-01"


class TestToRule:
    def test_decodes_json_columns_and_tags_source(self) -> None:
        row = permission_row(
            "p1",
            fields='["title", "body"]',
            conditions='{"author_id": "{{user.id}}"}',
            reason="nope",
        )
        rule = to_rule(row, PermissionSource.MEMBER_DIRECT)
        assert rule.source is PermissionSource.MEMBER_DIRECT
        assert rule.fields == ["title", "body"]
        assert rule.conditions == {"author_id": "{{user.id}}"}
        assert rule.reason == "nope"

    def test_malformed_optional_columns_become_none(self) -> None:
        row = permission_row("p1", fields="{broken", conditions='["not", "an", "object"]')
        rule = to_rule(row, PermissionSource.USER_DIRECT)
        assert rule.fields is None
        assert rule.conditions is None
        assert rule.action == "read"

    def test_missing_values_defaulted(self) -> None:
        rule = to_rule({"id": 7, "action": "read"}, PermissionSource.USER_DIRECT)
        assert rule.id == "7"
        assert rule.inverted is False
        assert rule.reason == ""
        assert rule.subject is None

    def test_list_valued_verbs(self) -> None:
        row = permission_row("p1", action='["read", "update"]', subject='["Post", "Comment"]')
        rule = to_rule(row, PermissionSource.USER_DIRECT)
        assert rule.actions == ["read", "update"]
        assert rule.subjects == ["Post", "Comment"]


def test_to_storage_encodes_json_columns_only_when_present() -> None:
    stored = permission_to_storage(
        {"action": ["read", "update"], "subject": "Post", "conditions": {"a": 1}}
    )
    assert json.loads(stored["action"]) == ["read", "update"]
    assert stored["subject"] == "Post"
    assert json.loads(stored["conditions"]) == {"a": 1}
    assert "fields" not in stored


def test_storage_round_trip_keeps_timestamps() -> None:
    at = datetime(2025, 3, 1, 10, 0, tzinfo=UTC)
    stored = permission_to_storage({"conditions": {"before": at}})
    assert "2025-03-01T10:00:00.000Z" in stored["conditions"]
    permission = permission_from_storage(permission_row("p1", conditions=stored["conditions"]))
    assert permission.conditions == {"before": at}
