import io

import pytest

from hairpin_grammar import HAIRPIN_JSON
from resilient_cli import main, run_parse, run_regex


def test_regex_reports_each_stage():
    out = io.StringIO()
    assert run_regex("(A|G)+", ["AGAGA", "AT"], out=out) == 0
    lines = out.getvalue().splitlines()
    assert lines[:3] == [
        "Regex Pattern: (A|G)+",
        "Preprocessed:  (A|G).(A|G)*",
        "Postfix:       AG|AG|*.",
    ]
    assert "Testing string 'AGAGA': MATCH" in lines
    assert "Testing string 'AT': INVALID" in lines


def test_regex_malformed_pattern_is_reported_not_raised():
    out = io.StringIO()
    assert run_regex("", ["x"], out=out) == 1
    assert "Error: malformed pattern" in out.getvalue()


def test_parse_end_marker_token_is_reported_not_raised():
    out = io.StringIO()
    assert run_parse("A$", out=out) == 2
    assert "Error: token 1 is the end marker" in out.getvalue()


@pytest.mark.parametrize(
    "config, message",
    [
        ("{not json", "Error: "),
        ('{"grammar": []}', "Error: parser configuration is missing"),
        ('{"grammar": [{"lhs": "S", "rhs": ["."]}], "table": {"S": {".": "0"}}, "affinity": {}}',
         "not a production index"),
    ],
)
def test_parse_bad_config_is_reported_not_raised(config, message):
    out = io.StringIO()
    assert run_parse("A", config=config, out=out) == 2
    assert message in out.getvalue()


def test_main_parse_bad_json(capsys):
    assert main(["parse", "A", "--json", "{not json"]) == 2
    assert "Error: " in capsys.readouterr().out


def test_regex_trace_and_dot():
    out = io.StringIO()
    run_regex("ab", ["ab"], trace=True, dot=True, out=out)
    text = out.getvalue()
    assert "ACCEPT" in text
    assert "digraph" in text


def test_parse_exit_codes():
    assert run_parse("AG.CT", out=io.StringIO()) == 0
    assert run_parse("AG.CA", out=io.StringIO()) == 1


def test_parse_lists_learned_aliases():
    out = io.StringIO()
    run_parse("AG.CU", out=out)
    assert "Learned: U -> T (HIGH, 0.95)" in out.getvalue()
    assert "Status: Stable" in out.getvalue()


def test_parse_with_json_config():
    assert run_parse("AG.CU", config=HAIRPIN_JSON, out=io.StringIO()) == 0


def test_main_demo(capsys):
    assert main(["demo"]) == 0
    captured = capsys.readouterr().out
    assert "[PHASE 1]" in captured
    assert "Testing string 'AGAGA': MATCH" in captured
    assert "STRUCTURE STABLE" in captured


def test_main_regex_command(capsys):
    assert main(["regex", "a|b", "a", "c"]) == 0
    captured = capsys.readouterr().out
    assert "Testing string 'a': MATCH" in captured
    assert "Testing string 'c': INVALID" in captured


def test_main_requires_a_command():
    with pytest.raises(SystemExit):
        main([])
