from unittest.mock import Mock

import pytest

from ovs_inventory.exceptions import IdentityUnavailable
from ovs_inventory.resolution import (
    UNKNOWN,
    AlternateKeyIndex,
    Strategy,
    Unresolved,
    identity_unavailable,
    resolve_field,
)


def test_first_non_empty_value_wins_and_later_strategies_are_not_run():
    late = Mock(return_value="late")
    value = resolve_field(
        "f",
        [Strategy("a", lambda: ""), Strategy("b", lambda: "hit"), Strategy("c", late)],
    )
    assert value == "hit"
    late.assert_not_called()


def test_optional_field_defaults_to_unknown():
    def boom():
        raise OSError("nope")

    assert resolve_field("f", [Strategy("a", boom), Strategy("b", lambda: None)]) == UNKNOWN
    assert resolve_field("f", [], default="") == ""


def test_required_field_keeps_every_cause():
    def db():
        raise ConnectionError("db down")

    def file():
        raise FileNotFoundError("no file")

    with pytest.raises(Unresolved) as exc:
        resolve_field("system-id", [Strategy("database", db), Strategy("file", file)], required=True)
    assert [source for source, _ in exc.value.causes] == ["database", "file"]
    assert str(exc.value) == "failed to get system-id from database (db down) and file (no file)"

    converted = identity_unavailable(exc.value)
    assert isinstance(converted, IdentityUnavailable)
    assert [str(c) for c in converted.causes] == ["db down", "no file"]
    assert converted.to_dict()["code"] == "identity_unavailable"


def test_alternate_key_index_prefers_first_key():
    index = AlternateKeyIndex()
    index.add("by-uuid", "c-1", "")
    index.add("by-name", "", "compute-01")
    assert len(index) == 2
    assert "" not in index
    assert index.resolve("c-1", "compute-01") == "by-uuid"
    assert index.resolve("c-404", "compute-01") == "by-name"
    assert index.resolve("c-404", "compute-404") is None
    assert index.resolve("", "") is None
