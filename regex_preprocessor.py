# turns a user pattern into the postfix form the Thompson builder consumes.
#
#   preprocess("(A|G)+")   -> "(A|G).(A|G)*"
#   to_postfix(...)        -> "AG|AG|*."
#
# preprocess runs three passes, in order:
#   1. expand_classes        [a-c] -> (a|b|c), \d -> (0|1|...|9)
#   2. expand_plus           a+ -> aa*, (ab)+ -> (ab)(ab)*
#   3. insert_concatenation  ab -> a.b
# none of the passes is safe to re-run on its own output; '.' is the
# concatenation marker but pass 3 reads it as an ordinary operand.

import logging
import string

logger = logging.getLogger(__name__)

CONCAT = "."
UNION = "|"
STAR = "*"
PLUS = "+"

# binding strength for the shunting-yard pass; all left-associative
PRECEDENCE = {STAR: 3, CONCAT: 2, UNION: 1}

# negated classes complement over printable ASCII
PRINTABLE_LOW = 33
PRINTABLE_HIGH = 126

DIGITS = string.digits
WORD = string.ascii_uppercase + string.ascii_lowercase + string.digits + "_"
BLANK = " "

ESCAPES = {"d": DIGITS, "w": WORD, "s": BLANK}

# characters that the later passes treat as operators, so they can not be
# produced as literal members of a negated class
_OPERATOR_CHARS = "()|*+."


def is_operator(c):
    return c in PRECEDENCE


def is_open_group(c):
    return c == "("


def is_close_group(c):
    return c == ")"


def ends_operand(c):
    # literal, ')' or '*' can finish an operand
    return c not in (UNION, "(")


def starts_operand(c):
    # literal or '(' can begin one
    return c not in (UNION, STAR, ")")


def union_of(chars: str) -> str:
    # (a|b|c); a single member needs no group, an empty set expands to nothing
    if not chars:
        return ""
    if len(chars) == 1:
        return chars
    return "(" + UNION.join(chars) + ")"


# --- PASS 1: character classes and escapes ---

def class_members(body: str) -> str:
    # Literal members of a bracket body such as 'a-z09_', in order of appearance.
    chars = []
    i = 0
    while i < len(body):
        if i + 2 < len(body) and body[i + 1] == "-":
            low, high = ord(body[i]), ord(body[i + 2])
            chars.extend(chr(code) for code in range(low, high + 1))
            i += 3
        else:
            chars.append(body[i])
            i += 1
    # keep first occurrence only
    return "".join(dict.fromkeys(chars))


def expand_class(body: str, negated: bool = False) -> str:
    members = class_members(body)
    if negated:
        members = "".join(
            chr(code) for code in range(PRINTABLE_LOW, PRINTABLE_HIGH + 1)
            if chr(code) not in members and chr(code) not in _OPERATOR_CHARS)
    return union_of(members)


def expand_classes(pattern: str) -> str:
    out = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "\\" and i + 1 < len(pattern):
            escaped = pattern[i + 1]
            # unknown escapes fall back to the bare character
            out.append(union_of(ESCAPES[escaped]) if escaped in ESCAPES else escaped)
            i += 2
        elif c == "[":
            close = pattern.find("]", i + 1)
            if close == -1:
                # unterminated class: keep the bracket as a literal
                out.append(c)
                i += 1
                continue
            body = pattern[i + 1:close]
            negated = body.startswith("^")
            if negated:
                body = body[1:]
            out.append(expand_class(body, negated))
            i = close + 1
        else:
            out.append(c)
            i += 1
    return "".join(out)


# --- PASS 2: '+' quantifier ---

def matching_open(text: str, close_index: int) -> int:
    # Index of the '(' that pairs with the ')' at close_index, or -1.
    depth = 0
    for j in range(close_index, -1, -1):
        if is_close_group(text[j]):
            depth += 1
        elif is_open_group(text[j]):
            depth -= 1
            if depth == 0:
                return j
    return -1


def expand_plus(pattern: str) -> str:
    expanded = ""
    for c in pattern:
        if c != PLUS:
            expanded += c
            continue
        if not expanded:
            # nothing to repeat
            continue
        prev = expanded[-1]
        if is_close_group(prev):
            start = matching_open(expanded, len(expanded) - 1)
            if start != -1:
                expanded += expanded[start:] + STAR
        else:
            expanded += prev + STAR
    return expanded


# --- PASS 3: explicit concatenation ---

def insert_concatenation(pattern: str) -> str:
    out = []
    for i, c in enumerate(pattern):
        out.append(c)
        if i + 1 < len(pattern) and ends_operand(c) and starts_operand(pattern[i + 1]):
            out.append(CONCAT)
    return "".join(out)


def preprocess(pattern: str) -> str:
    """
    Expand classes, escapes and '+', then make concatenation explicit.
    """
    with_classes = expand_classes(pattern)
    with_stars = expand_plus(with_classes)
    result = insert_concatenation(with_stars)
    logger.debug("preprocess %r -> %r -> %r -> %r",
                 pattern, with_classes, with_stars, result)
    return result


# --- infix -> postfix (shunting-yard) ---

def to_postfix(expanded: str) -> str:
    """
    Convert a preprocessed infix pattern to postfix.

    Parentheses are dropped from the output. A stray ')' pops back to the
    bottom of the operator stack and is otherwise ignored; a '(' still open
    at the end is discarded.
    """
    output = []
    stack = []
    for c in expanded:
        if is_operator(c):
            while stack and is_operator(stack[-1]) and PRECEDENCE[stack[-1]] >= PRECEDENCE[c]:
                output.append(stack.pop())
            stack.append(c)
        elif is_open_group(c):
            stack.append(c)
        elif is_close_group(c):
            while stack and not is_open_group(stack[-1]):
                output.append(stack.pop())
            if stack:
                stack.pop()
        else:
            output.append(c)
    while stack:
        top = stack.pop()
        if not is_open_group(top):
            output.append(top)
    postfix = "".join(output)
    logger.debug("postfix %r -> %r", expanded, postfix)
    return postfix
