"""RedactionEngine tests: masking, immutability, cap, error marker, idempotence."""

import copy
import json

import pytest

from auditsink.domain.exceptions import RedactionConfigError
from auditsink.domain.redaction import (
    MASK_TOKEN,
    SERIALIZATION_ERROR_MARKER,
    RedactionEngine,
)

KEYS = ["password", "apiKey", "Authorization"]


@pytest.fixture
def engine():
    return RedactionEngine(KEYS, 4096)


def test_masks_top_level_key(engine):
    out = engine.redact({"user": "alice", "password": "hunter2"})
    assert json.loads(out) == {"user": "alice", "password": MASK_TOKEN}


def test_match_is_case_insensitive(engine):
    out = json.loads(engine.redact({"PASSWORD": "a", "ApiKey": "b", "authorization": "c"}))
    assert out == {"PASSWORD": MASK_TOKEN, "ApiKey": MASK_TOKEN, "authorization": MASK_TOKEN}


def test_masks_nested_maps_and_list_elements(engine):
    tree = {
        "request": {"headers": {"Authorization": "Bearer x", "Accept": "json"}},
        "users": [{"name": "a", "password": "p1"}, {"name": "b", "password": "p2"}],
    }
    out = json.loads(engine.redact(tree))
    assert out["request"]["headers"] == {"Authorization": MASK_TOKEN, "Accept": "json"}
    assert out["users"] == [
        {"name": "a", "password": MASK_TOKEN},
        {"name": "b", "password": MASK_TOKEN},
    ]


def test_whole_subtree_under_matching_key_is_masked(engine):
    out = json.loads(engine.redact({"password": {"old": "a", "new": "b"}}))
    assert out == {"password": MASK_TOKEN}


def test_list_values_are_not_treated_as_keys():
    engine = RedactionEngine(["0", "password"], 4096)
    out = json.loads(engine.redact({"items": ["password", "x"]}))
    assert out == {"items": ["password", "x"]}


def test_caller_tree_is_not_mutated(engine):
    tree = {"a": {"password": "secret"}, "list": [{"apiKey": "k"}]}
    before = copy.deepcopy(tree)
    engine.redact(tree)
    assert tree == before


def test_scalars_pass_through(engine):
    assert engine.redact("plain") == '"plain"'
    assert engine.redact(42) == "42"
    assert engine.redact(True) == "true"


def test_none_in_none_out(engine):
    assert engine.redact(None) is None


def test_output_is_compact_and_keeps_key_order(engine):
    assert engine.redact({"b": 1, "a": [1, 2]}) == '{"b":1,"a":[1,2]}'


def test_over_cap_returns_truncation_marker_with_masked_size():
    engine = RedactionEngine(["password"], 64)
    tree = {"password": "x" * 500, "note": "y" * 100}
    masked = '{"password":"***","note":"' + "y" * 100 + '"}'
    out = engine.redact(tree)
    assert json.loads(out) == {"truncated": True, "sizeBytes": len(masked.encode("utf-8"))}
    assert len(out.encode("utf-8")) <= 64


def test_cap_is_measured_in_utf8_bytes():
    engine = RedactionEngine([], 64)
    # 40 two-byte characters fit the cap as characters but not as bytes.
    out = engine.redact("é" * 40)
    assert json.loads(out) == {"truncated": True, "sizeBytes": 82}


def test_exactly_at_cap_is_kept():
    engine = RedactionEngine([], 64)
    value = "a" * 62
    assert engine.redact(value) == json.dumps(value)


def test_unserializable_tree_returns_error_marker(engine):
    assert engine.redact({"ratio": float("nan")}) == SERIALIZATION_ERROR_MARKER
    assert engine.redact({"when": object()}) == SERIALIZATION_ERROR_MARKER


@pytest.mark.parametrize(
    "tree",
    [
        {"password": "p", "nested": {"apiKey": "k", "keep": [1, 2.5, None, False]}},
        {"big": "z" * 5000},
        ["a", {"Authorization": "t"}],
        "text",
    ],
)
def test_redaction_is_idempotent(engine, tree):
    once = engine.redact(tree)
    twice = engine.redact(json.loads(once))
    assert twice == once


def test_cap_below_marker_size_is_rejected():
    with pytest.raises(RedactionConfigError):
        RedactionEngine(["password"], 16)
