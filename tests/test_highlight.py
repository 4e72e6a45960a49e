import json
import re

import pytest

from zeekit.highlight import (
    AllPattern,
    ExactPattern,
    PatternList,
    RawHighlightRules,
    RegexPattern,
    Scope,
    build_node_to_selector_id_maps,
    parse_rules,
    parse_scope_pattern,
)
from zeekit.selector import NodeKindNotFoundError, RegexSyntaxError, SelectorSyntaxError

NODE_KINDS = ["source_file", "function", "identifier", "string", "pair", "let", "call"]


def ids(rules, *names):
    return [rules.get_selector_node_id(NODE_KINDS.index(name)) for name in names]


def test_deserialize_no_scopes():
    actual = RawHighlightRules.from_json('{"name": "Rust"}')
    assert actual.name == "Rust"
    assert actual.scopes == {}


def test_deserialize_all_scope_types():
    source = """{
        "name": "Rust",
        "scopes": {
            "type_identifier": "support.type",
            "\\"let\\"": {"exact": "let", "scopes": "keyword.control" }
        }
    }"""
    actual = RawHighlightRules.from_json(source)
    assert actual.name == "Rust"
    assert actual.scopes == {
        "type_identifier": AllPattern(Scope("support.type")),
        '"let"': ExactPattern("let", Scope("keyword.control")),
    }


def test_from_json_requires_name():
    with pytest.raises(ValueError):
        RawHighlightRules.from_json('{"scopes": {}}')


def test_parse_scope_pattern_variants():
    assert parse_scope_pattern("a") == AllPattern(Scope("a"))
    assert parse_scope_pattern({"match": "^x", "scopes": "b"}) == RegexPattern(
        re.compile("^x"), Scope("b")
    )
    assert parse_scope_pattern(["a", {"exact": "e", "scopes": "c"}]) == PatternList(
        (AllPattern(Scope("a")), ExactPattern("e", Scope("c")))
    )


def test_parse_scope_pattern_invalid_regex():
    with pytest.raises(RegexSyntaxError) as info:
        parse_scope_pattern({"match": "(", "scopes": "x"})
    assert str(info.value).startswith("Invalid regex syntax:")


@pytest.mark.parametrize("value", [5, None, {"scopes": "x"}, {"exact": "e"}])
def test_parse_scope_pattern_bad_shape(value):
    with pytest.raises(ValueError):
        parse_scope_pattern(value)


def test_pattern_matching():
    regex = parse_scope_pattern({"match": "^[A-Z]", "scopes": "constant"})
    assert regex.matches("Foo") == Scope("constant")
    assert regex.matches("foo") is None

    patterns = parse_scope_pattern(
        [{"exact": "self", "scopes": "variable.builtin"}, "variable"]
    )
    assert patterns.matches("self") == Scope("variable.builtin")
    assert patterns.matches("x") == Scope("variable")


def test_build_node_to_selector_id_maps_merges_duplicate_names():
    names, node_ids = build_node_to_selector_id_maps(["a", "b", "a", "c"])
    assert names == {"a": 0, "b": 1, "c": 2}
    assert node_ids == {0: 0, 1: 1, 2: 0, 3: 2}


def test_get_selector_node_id_unknown_gets_next_id():
    rules = parse_rules(["a", "b", "a"], '{"name": "T"}')
    assert rules.get_selector_node_id(2) == 0
    assert rules.get_selector_node_id(99) == 3


@pytest.mark.parametrize(
    "scopes",
    [
        {"identifier": "variable", "function > identifier": "function.name"},
        {"function > identifier": "function.name", "identifier": "variable"},
    ],
)
def test_more_specific_selector_wins(scopes):
    rules = parse_rules(NODE_KINDS, json.dumps({"name": "T", "scopes": scopes}))
    stack = ids(rules, "identifier", "function", "source_file")
    assert rules.matches(stack, [0, 0, 0], "foo") == Scope("function.name")
    other = ids(rules, "identifier", "call", "source_file")
    assert rules.matches(other, [0, 0, 0], "foo") == Scope("variable")


@pytest.mark.parametrize(
    "scopes",
    [{"function": "a", "call": "b"}, {"call": "b", "function": "a"}],
)
def test_closest_ancestor_wins(scopes):
    rules = parse_rules(NODE_KINDS, json.dumps({"name": "T", "scopes": scopes}))
    stack = ids(rules, "identifier", "call", "function")
    assert rules.matches(stack, [0, 0, 0], "x") == Scope("b")


def test_nth_child_constraint():
    rules = parse_rules(
        NODE_KINDS,
        json.dumps({"name": "T", "scopes": {"pair > string:nth-child(0)": "key"}}),
    )
    stack = ids(rules, "string", "pair")
    assert rules.matches(stack, [0, 3], "k") == Scope("key")
    assert rules.matches(stack, [1, 3], "k") is None


def test_exact_content_rule():
    rules = parse_rules(
        NODE_KINDS,
        json.dumps(
            {"name": "T", "scopes": {'"let"': {"exact": "let", "scopes": "keyword"}}}
        ),
    )
    stack = ids(rules, "let")
    assert rules.matches(stack, [0], "let") == Scope("keyword")
    assert rules.matches(stack, [0], "var") is None


def test_empty_stack_matches_nothing():
    rules = parse_rules(NODE_KINDS, json.dumps({"name": "T", "scopes": {"pair": "p"}}))
    assert rules.matches([], [], "x") is None


def test_compile_unknown_node_kind():
    with pytest.raises(NodeKindNotFoundError, match="`nope`"):
        parse_rules(NODE_KINDS, json.dumps({"name": "T", "scopes": {"nope": "x"}}))


def test_compile_bad_selector():
    with pytest.raises(SelectorSyntaxError):
        parse_rules(NODE_KINDS, json.dumps({"name": "T", "scopes": {",": "x"}}))


def test_compile_keeps_name_and_rule_count():
    rules = parse_rules(
        NODE_KINDS,
        json.dumps({"name": "Lang", "scopes": {"pair, string": "p", "call": "c"}}),
    )
    assert rules.name == "Lang"
    assert [len(rule.selectors) for rule in rules.rules] == [2, 1]