import pytest

from dbhelper.base.translation import GERMAN_CONNECTORS, DictTranslator
from dbhelper.filters.search import MessageType, SearchParser


class PlaceholderCollector:
    """Stands in for the filter criteria's placeholder generator."""

    def __init__(self):
        self.values = {}

    def __call__(self, value):
        for name, existing in self.values.items():
            if existing == value:
                return name
        name = f":PH{len(self.values) + 1:04d}"
        self.values[name] = value
        return name


@pytest.fixture
def parser():
    return SearchParser()


@pytest.mark.parametrize(
    "search, expected",
    [
        ("two", ["two"]),
        ("two OR three", ["two", "OR", "three"]),
        ("foo and bar", ["foo", "AND", "bar"]),
        ('"foo bar" baz', ["foo bar", "baz"]),
        ('"foo bar"', ["foo bar"]),
        ("NOT foo", ["NOT", "foo"]),
        ("  spaced   out  ", ["spaced", "out"]),
        ("", []),
    ],
)
def test_get_search_terms(parser, search, expected):
    assert parser.get_search_terms(search) == expected


def test_short_terms_are_dropped_with_info(parser):
    assert parser.get_search_terms("a two") == ["two"]
    assert len(parser.messages) == 1
    assert parser.messages[0].type is MessageType.INFO
    assert '"a"' in parser.messages[0].message


def test_quoted_connector_is_a_term(parser):
    assert parser.get_search_terms('"AND" foo') == ["AND", "foo"]


def test_translated_connectors():
    parser = SearchParser(DictTranslator(GERMAN_CONNECTORS))
    assert parser.get_search_terms("foo UND bar ODER baz NICHT qux") == [
        "foo", "AND", "bar", "OR", "baz", "NOT", "qux"
    ]
    # The canonical keywords keep working
    assert parser.get_search_terms("foo AND bar") == ["foo", "AND", "bar"]


def test_expression_or(parser):
    placeholders = PlaceholderCollector()
    expression = parser.build_expression(["two", "OR", "three"], ["`label`"], placeholders)
    assert expression == "((`label` LIKE :PH0001) OR (`label` LIKE :PH0002))"
    assert placeholders.values == {":PH0001": "%two%", ":PH0002": "%three%"}


def test_expression_implicit_and_over_several_fields(parser):
    placeholders = PlaceholderCollector()
    expression = parser.build_expression(["foo", "bar"], ["a", "b"], placeholders)
    assert expression == (
        "((a LIKE :PH0001 OR b LIKE :PH0001) AND (a LIKE :PH0002 OR b LIKE :PH0002))"
    )


def test_expression_negation_applies_to_one_term(parser):
    placeholders = PlaceholderCollector()
    expression = parser.build_expression(["NOT", "foo", "bar"], ["a", "b"], placeholders)
    assert expression == (
        "((a NOT LIKE :PH0001 AND b NOT LIKE :PH0001) AND (a LIKE :PH0002 OR b LIKE :PH0002))"
    )


def test_expression_escapes_underscores(parser):
    placeholders = PlaceholderCollector()
    parser.build_expression(["foo_bar"], ["a"], placeholders, " ESCAPE '\\'")
    assert placeholders.values == {":PH0001": "%foo\\_bar%"}


def test_expression_like_escape_clause(parser):
    expression = parser.build_expression(["foo"], ["a"], PlaceholderCollector(), " ESCAPE '\\'")
    assert expression == "(a LIKE :PH0001 ESCAPE '\\')"


@pytest.mark.parametrize(
    "terms",
    [
        ["AND", "two"],
        ["two", "OR"],
        ["two", "AND", "NOT"],
    ],
)
def test_leading_or_trailing_connector_is_dropped(parser, terms):
    expression = parser.build_expression(terms, ["a"], PlaceholderCollector())
    assert expression == "(a LIKE :PH0001)"
    assert [message.type for message in parser.messages] == [MessageType.WARNING]


def test_consecutive_connectors(parser):
    expression = parser.build_expression(["one", "AND", "OR", "two"], ["a"], PlaceholderCollector())
    assert expression == "((a LIKE :PH0001) AND (a LIKE :PH0002))"
    assert parser.messages[0].is_warning()


def test_no_terms(parser):
    assert parser.build_expression([], ["a"], PlaceholderCollector()) == ""
    assert parser.build_expression(["AND"], ["a"], PlaceholderCollector()) == ""
