import pytest

from contribstats.aliases import AliasGroup, AliasTable, load_directives, parse_directive
from contribstats.errors import ConfigurationError


# ============================================================================
# DIRECTIVE PARSING
# ============================================================================

def test_parse_group_directive():
    group = parse_directive("john.doe, JohnD => John")
    assert group == AliasGroup(canonical="John", aliases=frozenset({"john.doe", "JohnD"}))


def test_parse_pairwise_directive():
    group = parse_directive("jdoe=John Doe")
    assert group.canonical == "John Doe"
    assert group.aliases == frozenset({"jdoe"})


def test_parse_first_name_wins_directive():
    group = parse_directive("Alice Smith,asmith,alice")
    assert group.canonical == "Alice Smith"
    assert group.aliases == frozenset({"asmith", "alice"})


def test_canonical_listed_among_aliases_is_dropped():
    group = parse_directive("John,john.doe=>John")
    assert group.aliases == frozenset({"john.doe"})


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "just-a-name",
        "=>John",
        "a,b=>",
        "a,,b=>John",
        "a=>b=>c",
        "a=b=c",
        "=John",
        "alias=",
        "a=>John,Jim",
    ],
)
def test_malformed_directives(text):
    with pytest.raises(ConfigurationError):
        parse_directive(text)


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        parse_directive("nothing to see")


# ============================================================================
# TABLE CONSTRUCTION
# ============================================================================

def test_both_syntaxes_build_the_same_table():
    grouped = AliasTable.from_directives(["john.doe,JohnD=>John"])
    pairwise = AliasTable.from_directives(["john.doe=John", "JohnD=John"])
    for raw in ("john.doe", "JohnD", "John", "jane"):
        assert grouped.resolve(raw) == pairwise.resolve(raw)


def test_unmapped_author_is_identity(john_table):
    assert john_table.resolve("jane") == "jane"
    assert john_table.resolve("") == ""


def test_canonical_maps_to_itself(john_table):
    assert john_table.resolve("John") == "John"
    assert "John" in john_table


def test_later_directive_wins():
    table = AliasTable.from_directives(["shared=>Alice", "shared=>Bob"])
    assert table.resolve("shared") == "Bob"


def test_later_directive_wins_for_case_folded_lookup():
    table = AliasTable.from_directives(["Shared=>Alice", "shared=>Bob"])
    assert table.resolve("SHARED") == "Bob"


def test_case_insensitive_by_default(john_table):
    assert john_table.resolve("JOHN.DOE") == "John"
    assert john_table.resolve("johnd") == "John"
    assert john_table.resolve("john") == "John"


def test_case_sensitive_table():
    table = AliasTable.from_directives(["john.doe=>John"], ignore_case=False)
    assert table.resolve("john.doe") == "John"
    assert table.resolve("John.Doe") == "John.Doe"


def test_chains_are_flattened():
    table = AliasTable.from_directives(["jd=>John", "John=>John Doe"])
    assert table.resolve("jd") == "John Doe"
    assert table.resolve("John") == "John Doe"
    assert table.resolve("John Doe") == "John Doe"


def test_cycle_is_rejected():
    with pytest.raises(ConfigurationError, match="Circular"):
        AliasTable.from_directives(["a=b", "b=a"])


@pytest.mark.parametrize("raw", ["john.doe", "JohnD", "John", "jane", "JOHN.DOE", "unknown"])
def test_resolution_is_idempotent(john_table, raw):
    once = john_table.resolve(raw)
    assert john_table.resolve(once) == once


def test_resolution_is_deterministic_across_builds():
    directives = ["a,b=>A", "c=A", "B,x,y", "y=>Z"]
    first = AliasTable.from_directives(directives)
    second = AliasTable.from_directives(directives)
    for raw in ("a", "b", "c", "x", "y", "B", "Z", "nobody"):
        assert first.resolve(raw) == second.resolve(raw)
    assert first.resolve("y") == "Z"


def test_groups_listing(john_table):
    assert john_table.groups() == {"John": ["JohnD", "john.doe"]}


def test_empty_table():
    table = AliasTable()
    assert len(table) == 0
    assert table.resolve("anyone") == "anyone"


# ============================================================================
# MERGE FILES
# ============================================================================

def test_load_directives_skips_comments_and_blanks(tmp_path):
    path = tmp_path / "authors.txt"
    path.write_text(
        "# team aliases\n"
        "john.doe,JohnD=>John\n"
        "\n"
        "jdoe=John   # old laptop\n",
        encoding="utf-8",
    )
    assert load_directives(path) == ["john.doe,JohnD=>John", "jdoe=John"]


def test_load_directives_reports_line_number(tmp_path):
    path = tmp_path / "authors.txt"
    path.write_text("a=>A\nbroken\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match=r"authors.txt:2"):
        load_directives(path)


def test_load_directives_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="Cannot read merge file"):
        load_directives(tmp_path / "nope.txt")
