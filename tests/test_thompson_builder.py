import pytest

from state_arena import EPSILON, Arena
from thompson_builder import (
    MalformedPattern,
    build,
    compile_pattern,
    make_concat,
    make_literal,
    make_star,
    make_union,
)
from regex_preprocessor import preprocess, to_postfix


def test_literal_is_two_states_one_edge():
    arena = Arena()
    fragment = make_literal(arena, "a")
    assert len(arena) == 2
    assert arena.state(fragment.entry).targets("a") == list(fragment.accepts)


def test_concat_links_accepts_to_second_entry():
    arena = Arena()
    a = make_literal(arena, "a")
    b = make_literal(arena, "b")
    ab = make_concat(a, b)
    assert ab.entry == a.entry
    assert ab.accepts == b.accepts
    (a_end,) = a.accepts
    assert arena.state(a_end).targets(EPSILON) == [b.entry]
    # concatenation allocates nothing new
    assert len(arena) == 4


def test_union_adds_fresh_entry_and_end():
    arena = Arena()
    a = make_literal(arena, "a")
    b = make_literal(arena, "b")
    either = make_union(a, b)
    assert len(arena) == 6
    assert arena.state(either.entry).targets(EPSILON) == [a.entry, b.entry]
    (end,) = either.accepts
    for accept in a.accepts | b.accepts:
        assert arena.state(accept).targets(EPSILON) == [end]


def test_star_loops_back_and_skips():
    arena = Arena()
    a = make_literal(arena, "a")
    starred = make_star(a)
    (end,) = starred.accepts
    assert arena.state(starred.entry).targets(EPSILON) == [a.entry, end]
    (a_end,) = a.accepts
    assert arena.state(a_end).targets(EPSILON) == [a.entry, end]


def test_fragments_from_different_arenas_do_not_mix():
    a = make_literal(Arena(), "a")
    b = make_literal(Arena(), "b")
    with pytest.raises(ValueError):
        make_concat(a, b)


def test_build_uses_given_arena():
    arena = Arena()
    fragment = build("ab|*", arena)
    assert fragment.arena is arena
    # two literals, one union, one star
    assert len(arena) == 8


@pytest.mark.parametrize("postfix", ["", "|", ".", "*", "a|", "a.", "ab", "ab|c"])
def test_build_rejects_malformed_postfix(postfix):
    with pytest.raises(MalformedPattern) as excinfo:
        build(postfix)
    assert excinfo.value.postfix == postfix


def test_malformed_pattern_is_a_value_error():
    with pytest.raises(ValueError):
        build("|")


def test_empty_pattern_through_the_pipeline():
    with pytest.raises(MalformedPattern, match="empty"):
        build(to_postfix(preprocess("")))


def test_leftover_operands_are_reported():
    with pytest.raises(MalformedPattern, match="2 fragments"):
        build("ab")


def test_compile_pattern_gets_its_own_arena():
    first = compile_pattern("a")
    second = compile_pattern("a")
    assert first.arena is not second.arena
    assert len(first.arena) == 2
