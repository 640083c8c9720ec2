# table-driven LL(1) stack parser that tries to repair a token mismatch
# before giving up.
#
# on a terminal mismatch the parser looks up how well the token it found can
# stand in for the one it expected (the affinity table):
#   affinity > high (0.8)        accept, remember found -> expected
#   medium (0.5) < affinity      same action, reported as a "wobble"
#   otherwise                    reject; nothing is learned
# learned aliases persist across parse() calls on the same instance until
# reset() is called, unless the caller threads its own alias dict through.

import enum
import logging

logger = logging.getLogger(__name__)

END_MARKER = "$"
HIGH_AFFINITY = 0.8
MEDIUM_AFFINITY = 0.5


class GrammarError(ValueError):
    # The grammar / table / affinity configuration is inconsistent.
    pass


class Status(enum.Enum):
    STABLE = "Stable"
    REJECTED = "Rejected"
    ERROR = "Error"


class Production:
    __slots__ = ("lhs", "rhs")

    def __init__(self, lhs: str, rhs):
        self.lhs = lhs
        self.rhs = tuple(rhs)

    def __eq__(self, other):
        return isinstance(other, Production) and (other.lhs, other.rhs) == (self.lhs, self.rhs)

    def __hash__(self):
        return hash((self.lhs, self.rhs))

    def __repr__(self):
        return f"Production({self.lhs!r}, {list(self.rhs)!r})"

    def __str__(self):
        return f"{self.lhs} -> {' '.join(self.rhs)}"


class Repair:
    # One affinity-based substitution made during a parse.
    __slots__ = ("position", "expected", "found", "affinity", "tier")

    def __init__(self, position, expected, found, affinity, tier):
        self.position = position
        self.expected = expected
        self.found = found
        self.affinity = affinity
        self.tier = tier

    def __eq__(self, other):
        return isinstance(other, Repair) and self._key() == other._key()

    def _key(self):
        return (self.position, self.expected, self.found, self.affinity, self.tier)

    def __repr__(self):
        return (f"Repair(position={self.position}, expected={self.expected!r}, "
                f"found={self.found!r}, affinity={self.affinity}, tier={self.tier!r})")


class ParseResult:
    """
    Outcome of AdaptiveParser.parse().

    status      Status.STABLE, REJECTED or ERROR
    trace       every action taken, one per line
    position    token index where parsing stopped (None when stable)
    repairs     substitutions made by consulting the affinity table
    alias_matches  (position, expected, found) for matches through a
                   previously learned alias
    aliases     snapshot of the alias map after the call
    """

    def __init__(self, status, trace, position, repairs, alias_matches, aliases):
        self.status = status
        self.trace = trace
        self.position = position
        self.repairs = repairs
        self.alias_matches = alias_matches
        self.aliases = aliases

    @property
    def stable(self) -> bool:
        return self.status is Status.STABLE

    def raise_for_error(self) -> "ParseResult":
        # Error means the table let the stack run dry: a configuration bug.
        if self.status is Status.ERROR:
            raise GrammarError(f"parser stack exhausted at token {self.position}\n{self.trace}")
        return self

    def __iter__(self):
        # allows `status, trace = parser.parse(tokens)`
        return iter((self.status, self.trace))

    def __repr__(self):
        return f"ParseResult({self.status.value}, position={self.position}, repairs={len(self.repairs)})"


def tokenize(text: str) -> list:
    # "AG.CU" -> ['A', 'G', '.', 'C', 'U']; whitespace is skipped
    return [c for c in text if not c.isspace()]


class AdaptiveParser:
    def __init__(self, grammar, parse_table, affinity, start_symbol=None,
                 end_marker=END_MARKER, high=HIGH_AFFINITY, medium=MEDIUM_AFFINITY):
        self.grammar = [p if isinstance(p, Production) else Production(*p) for p in grammar]
        self.parse_table = {nt: dict(row) for nt, row in parse_table.items()}
        self.affinity = {expected: dict(row) for expected, row in affinity.items()}
        if start_symbol is None:
            if not self.grammar:
                raise GrammarError("empty grammar and no start symbol")
            start_symbol = self.grammar[0].lhs
        self.start_symbol = start_symbol
        self.end_marker = end_marker
        self.high = high
        self.medium = medium
        self._aliases = {}
        self._validate()

    def _validate(self):
        if self.start_symbol not in self.parse_table:
            raise GrammarError(f"start symbol {self.start_symbol!r} has no parse table row")
        if not 0.0 <= self.medium <= self.high <= 1.0:
            raise GrammarError(f"thresholds must satisfy 0 <= medium <= high <= 1, "
                               f"got medium={self.medium}, high={self.high}")
        for nonterminal, row in self.parse_table.items():
            for lookahead, index in row.items():
                if isinstance(index, bool) or not isinstance(index, int):
                    raise GrammarError(
                        f"table[{nonterminal!r}][{lookahead!r}] = {index!r} is not a production index")
                if not 0 <= index < len(self.grammar):
                    raise GrammarError(
                        f"table[{nonterminal!r}][{lookahead!r}] names production {index}, "
                        f"grammar has {len(self.grammar)}")
                if self.grammar[index].lhs != nonterminal:
                    raise GrammarError(
                        f"table[{nonterminal!r}][{lookahead!r}] names {self.grammar[index]}")
        for expected, row in self.affinity.items():
            for found, score in row.items():
                if isinstance(score, bool) or not isinstance(score, (int, float)):
                    raise GrammarError(
                        f"affinity[{expected!r}][{found!r}] = {score!r} is not a number")
                if not 0.0 <= score <= 1.0:
                    raise GrammarError(
                        f"affinity[{expected!r}][{found!r}] = {score} is outside [0, 1]")
        for production in self.grammar:
            if self.end_marker in production.rhs:
                raise GrammarError(f"{production} uses the end marker {self.end_marker!r}")

    @property
    def aliases(self) -> dict:
        # copy; mutate through parse() or reset()
        return dict(self._aliases)

    def reset(self) -> None:
        self._aliases.clear()

    def is_nonterminal(self, symbol) -> bool:
        return symbol in self.parse_table

    def affinity_of(self, expected, found) -> float:
        return self.affinity.get(expected, {}).get(found, 0.0)

    def tier(self, affinity) -> str:
        if affinity > self.high:
            return "HIGH"
        if affinity > self.medium:
            return "MEDIUM"
        return "LOW"

    def parse(self, tokens, aliases=None) -> ParseResult:
        """
        Run the parser over `tokens`.

        `aliases` is the found -> expected map consulted and extended during
        the run; it defaults to the instance's own map, so learned aliases
        carry over to the next call. Pass a dict to keep them elsewhere.
        """
        tokens = list(tokens)
        if self.end_marker in tokens:
            raise ValueError(f"token {tokens.index(self.end_marker)} is the end marker {self.end_marker!r}")
        if aliases is None:
            aliases = self._aliases

        end = self.end_marker
        stream = tokens + [end]
        stack = [end, self.start_symbol]
        pos = 0
        lines = []
        repairs = []
        alias_matches = []

        def finish(status):
            trace = "\n".join(lines)
            stop = None if status is Status.STABLE else pos
            if status is Status.ERROR:
                logger.error("parser stack exhausted at token %d; check grammar and table", pos)
            else:
                logger.debug("parse finished: %s at %s", status.value, stop)
            return ParseResult(status, trace, stop, repairs, alias_matches, dict(aliases))

        while stack:
            top = stack[-1]
            if pos >= len(stream):
                break
            lookahead = stream[pos]

            if stack == [end] and lookahead == end:
                lines.append("STRUCTURE STABLE")
                return finish(Status.STABLE)

            if not self.is_nonterminal(top):
                if top == lookahead:
                    lines.append(f"Match {top}")
                elif lookahead != end and aliases.get(lookahead) == top:
                    lines.append(f"Match {top} (via {lookahead})")
                    alias_matches.append((pos, top, lookahead))
                else:
                    # running out of input is never repairable
                    affinity = 0.0 if lookahead == end else self.affinity_of(top, lookahead)
                    tier = self.tier(affinity)
                    lines.append(f"[!] Mismatch at token {pos}: Expected [{top}], Found [{lookahead}]")
                    lines.append(f"[*] Affinity: {affinity:g} / 1.0")
                    if tier == "LOW":
                        lines.append("[-] LOW: Rejecting. Parse failed.")
                        return finish(Status.REJECTED)
                    if tier == "HIGH":
                        lines.append("[+] HIGH: Accepting substitution.")
                        logger.info("accepted %r for %r (affinity %g)", lookahead, top, affinity)
                    else:
                        lines.append("[~] MEDIUM: Wobble pairing; continuing.")
                        logger.warning("wobble: %r for %r (affinity %g)", lookahead, top, affinity)
                    aliases[lookahead] = top
                    repairs.append(Repair(pos, top, lookahead, affinity, tier))
                stack.pop()
                pos += 1
                continue

            index = self.parse_table[top].get(lookahead)
            if index is None:
                lines.append("ERROR: Invalid start of structure.")
                return finish(Status.REJECTED)
            production = self.grammar[index]
            lines.append(f"Expand {production}")
            stack.pop()
            stack.extend(reversed(production.rhs))

        lines.append("Error: parser stack exhausted.")
        return finish(Status.ERROR)
