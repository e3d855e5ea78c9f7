from __future__ import annotations

from dualsync.domain.mapping import (
    Excluded,
    MappingRuleSet,
    derive_mapping_rules,
    effective_mapping_rules,
    map_path,
)
from dualsync.domain.model import LiteralExclusion, ModuleRecord, PatternExclusion


def test_longest_prefix_wins_over_catch_all() -> None:
    rules = MappingRuleSet({"lib/": "lib/", "": "lib/Foo/Bar/"})

    assert map_path((), rules, "lib/Foo.pm") == "lib/Foo.pm"
    assert map_path((), rules, "t/basic.t") == "lib/Foo/Bar/t/basic.t"


def test_path_without_matching_prefix_is_returned_unchanged() -> None:
    rules = MappingRuleSet({"b/": "Y/", "a/": "X/"})

    assert rules.select_prefix("a/file") == "a/"
    assert rules.select_prefix("c/file") is None
    assert map_path((), rules, "c/file") == "c/file"


def test_equal_length_prefixes_each_apply_to_their_own_paths() -> None:
    rules = MappingRuleSet({"t/": "T/", "": "root/"})
    same_length = MappingRuleSet({"ab": "first/", "aa": "second/"})

    assert map_path((), rules, "t/x.t") == "T/x.t"
    assert same_length.select_prefix("abc") == "ab"
    assert same_length.select_prefix("aac") == "aa"


def test_prefix_is_replaced_only_at_the_start() -> None:
    rules = MappingRuleSet({"lib/": "cpan/Foo/lib/"})

    assert map_path((), rules, "lib/lib/Foo.pm") == "cpan/Foo/lib/lib/Foo.pm"


def test_mapping_is_deterministic() -> None:
    excluded = (PatternExclusion.compile(r"^xt/"),)
    rules = MappingRuleSet({"": "ext/Foo/", "lib/": "ext/Foo/lib/", "t/": "ext/Foo/t/"})

    first = [map_path(excluded, rules, path) for path in ("lib/A.pm", "t/a.t", "xt/b.t", "c")]
    second = [map_path(excluded, rules, path) for path in ("lib/A.pm", "t/a.t", "xt/b.t", "c")]

    assert first == second


def test_exclusion_takes_precedence_over_mapping() -> None:
    literal = LiteralExclusion("t/author.t")
    pattern = PatternExclusion.compile(r"\.PL$")
    rules = MappingRuleSet({"": "lib/Foo/"})

    assert map_path((literal, pattern), rules, "t/author.t") == Excluded(literal)
    assert map_path((literal, pattern), rules, "bin/tool.PL") == Excluded(pattern)
    assert map_path((literal, pattern), rules, "t/author.t.bak") == "lib/Foo/t/author.t.bak"


def test_first_matching_exclusion_is_reported() -> None:
    first = PatternExclusion.compile(r"^t/")
    second = LiteralExclusion("t/a.t")

    result = map_path((first, second), MappingRuleSet({"": ""}), "t/a.t")

    assert isinstance(result, Excluded)
    assert result.rule is first


def test_derive_rules_for_single_ext_directory() -> None:
    rules = derive_mapping_rules(
        "Foo::Bar",
        ["ext/Foo-Bar/lib/Foo/Bar.pm", "ext/Foo-Bar/t/basic.t", "t/lib/Foo/Helper.pm"],
    )

    assert dict(rules.rules) == {"": "ext/Foo-Bar/"}


def test_derive_rules_falls_back_to_lib_layout() -> None:
    mixed = derive_mapping_rules("Foo::Bar", ["ext/Foo-Bar/Bar.pm", "ext/Other/x.t"])
    top_level = derive_mapping_rules("Foo::Bar", ["lib/Foo/Bar.pm", "t/foo-bar.t"])
    empty = derive_mapping_rules("Foo::Bar", ["t/lib/Foo/Helper.pm"])

    expected = {"lib/": "lib/", "": "lib/Foo/Bar/"}
    assert dict(mixed.rules) == expected
    assert dict(top_level.rules) == expected
    assert dict(empty.rules) == expected


def test_registry_rules_override_derived_defaults() -> None:
    record = ModuleRecord(
        name="Foo::Bar",
        dual_life=True,
        distribution_id="AUTHOR/Foo-Bar-1.0.tar.gz",
        mapping_rules={"lib/": "cpan/Foo-Bar/lib/"},
    )

    rules = effective_mapping_rules(record, ["ext/Foo-Bar/x"])

    assert dict(rules.rules) == {"lib/": "cpan/Foo-Bar/lib/"}
    assert rules.rewrite("Makefile.PL") == "Makefile.PL"


def test_empty_registry_rules_are_derived() -> None:
    record = ModuleRecord(name="Foo", dual_life=True, mapping_rules={})

    rules = effective_mapping_rules(record, ["ext/Foo/Foo.pm"])

    assert dict(rules.rules) == {"": "ext/Foo/"}
