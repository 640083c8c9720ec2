import json

import pytest

from adaptive_parser import GrammarError, Production, Status, tokenize
from hairpin_grammar import (
    HAIRPIN_AFFINITY,
    HAIRPIN_GRAMMAR,
    HAIRPIN_JSON,
    HAIRPIN_TABLE,
    config_from_json,
    config_to_json,
    make_hairpin_parser,
    parser_from_json,
)


def test_shipped_grammar_is_the_hairpin():
    assert [str(p) for p in HAIRPIN_GRAMMAR] == ["S -> A S T", "S -> G S C", "S -> ."]
    assert HAIRPIN_TABLE == {"S": {"A": 0, "G": 1, ".": 2}}
    assert HAIRPIN_AFFINITY["T"]["U"] == 0.95
    assert HAIRPIN_AFFINITY["T"]["A"] == 0.05


def test_custom_affinity_replaces_the_default():
    parser = make_hairpin_parser(affinity={})
    assert parser.parse(tokenize("AG.CU")).status is Status.REJECTED


def test_json_round_trip_gives_an_equivalent_parser():
    config = config_from_json(HAIRPIN_JSON)
    assert config["grammar"] == HAIRPIN_GRAMMAR
    assert config["parse_table"] == HAIRPIN_TABLE
    assert config["start_symbol"] == "S"

    parser = parser_from_json(HAIRPIN_JSON)
    result = parser.parse(tokenize("AG.CU"))
    assert result.status is Status.STABLE
    assert result.aliases == {"U": "T"}


def test_json_is_plain_data():
    data = json.loads(config_to_json([Production("S", ["x"])], {"S": {"x": 0}}, {}))
    assert data == {
        "start": None,
        "grammar": [{"lhs": "S", "rhs": ["x"]}],
        "table": {"S": {"x": 0}},
        "affinity": {},
    }


def test_missing_keys_are_named():
    with pytest.raises(ValueError, match="table, affinity"):
        config_from_json('{"grammar": []}')


def test_malformed_rules_are_reported():
    text = json.dumps({"grammar": [{"lhs": "S"}], "table": {}, "affinity": {}})
    with pytest.raises(ValueError, match="lhs"):
        config_from_json(text)


def test_string_table_index_is_a_grammar_error():
    text = json.dumps({"grammar": [{"lhs": "S", "rhs": ["."]}],
                       "table": {"S": {".": "0"}}, "affinity": {}})
    with pytest.raises(GrammarError, match="not a production index"):
        parser_from_json(text)


def test_non_numeric_affinity_is_reported():
    text = json.dumps({"grammar": [{"lhs": "S", "rhs": ["."]}],
                       "table": {"S": {".": 0}}, "affinity": {"T": {"U": None}}})
    with pytest.raises(ValueError, match="numbers"):
        config_from_json(text)
