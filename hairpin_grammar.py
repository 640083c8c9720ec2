# example configuration for the adaptive parser: nested DNA hairpins.
#
#   S -> A S T | G S C | .
#
# every A must be closed by a T and every G by a C, around a '.' loop.
# the affinity table says how acceptable a found base is in place of the
# expected one (RNA U for DNA T, the G-U wobble pair, purine clashes).

import json

from adaptive_parser import AdaptiveParser, Production

START_SYMBOL = "S"

HAIRPIN_GRAMMAR = [
    Production("S", ["A", "S", "T"]),
    Production("S", ["G", "S", "C"]),
    Production("S", ["."]),
]

HAIRPIN_TABLE = {
    "S": {"A": 0, "G": 1, ".": 2},
}

HAIRPIN_AFFINITY = {
    # RNA uracil stands in for thymine
    "T": {"U": 0.95, "A": 0.05},
    # G-U wobble pairing
    "C": {"U": 0.60, "A": 0.05},
}


def make_hairpin_parser(affinity=None) -> AdaptiveParser:
    return AdaptiveParser(HAIRPIN_GRAMMAR, HAIRPIN_TABLE,
                          HAIRPIN_AFFINITY if affinity is None else affinity,
                          start_symbol=START_SYMBOL)


# --- JSON form of a parser configuration ---

REQUIRED_KEYS = ("grammar", "table", "affinity")


def config_to_json(grammar, table, affinity, start_symbol=None) -> str:
    """
    Serialize a parser configuration to a JSON document string.
    """
    data = {
        "start": start_symbol,
        "grammar": [{"lhs": p.lhs, "rhs": list(p.rhs)} for p in grammar],
        "table": table,
        "affinity": affinity,
    }
    return json.dumps(data, indent=2)


def config_from_json(text: str) -> dict:
    """
    Parse a JSON configuration document into AdaptiveParser keyword arguments.
    """
    data = json.loads(text)
    missing = [key for key in REQUIRED_KEYS if key not in data]
    if missing:
        raise ValueError(f"parser configuration is missing {', '.join(missing)}")
    try:
        grammar = [Production(rule["lhs"], rule["rhs"]) for rule in data["grammar"]]
    except (KeyError, TypeError) as exc:
        raise ValueError(f"grammar rules need 'lhs' and 'rhs': {exc}") from exc
    try:
        affinity = {expected: {found: float(score) for found, score in row.items()}
                    for expected, row in data["affinity"].items()}
    except (AttributeError, TypeError, ValueError) as exc:
        raise ValueError(f"affinity scores must be numbers: {exc}") from exc
    return {
        "grammar": grammar,
        "parse_table": data["table"],
        "affinity": affinity,
        "start_symbol": data.get("start"),
    }


def parser_from_json(text: str) -> AdaptiveParser:
    return AdaptiveParser(**config_from_json(text))


HAIRPIN_JSON = config_to_json(HAIRPIN_GRAMMAR, HAIRPIN_TABLE, HAIRPIN_AFFINITY, START_SYMBOL)
