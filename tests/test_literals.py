import dataclasses
from fractions import Fraction

import pytest

from shellforms import nodes as n
from shellforms import render


def test_nil():
    assert render(n.NilLiteral()) == "null"


def test_integer():
    assert render(n.IntegerLiteral(42)) == "42"


def test_ratio_renders_as_decimal():
    assert render(n.RatioLiteral(Fraction(1, 2))) == "0.5"


def test_string_is_not_quoted():
    assert render(n.StringLiteral("x")) == "x"
    assert render(n.StringLiteral("a b")) == "a b"


def test_keyword_and_symbol_render_bare():
    assert render(n.KeywordLiteral("force")) == "force"
    assert render(n.SymbolLiteral("ls")) == "ls"


def test_empty_splice_renders_nothing():
    assert render(n.EMPTY_SPLICE) == ""


def test_descriptor_renders_value():
    assert render(n.Descriptor("install-package")) == "install-package"


def test_no_forms():
    assert render() == ""


def test_empty_form_sequence():
    assert render(n.form()) == ""


def test_vector():
    vector = n.VectorLiteral(
        [n.IntegerLiteral(1), n.IntegerLiteral(2), n.symbol("a")]
    )
    assert render(vector) == "(1 2 a)"


def test_map():
    mapping = n.MapLiteral(
        {
            n.KeywordLiteral("a"): n.IntegerLiteral(1),
            n.KeywordLiteral("b"): n.IntegerLiteral(2),
        }
    )
    text = render(mapping)
    assert text.startswith("(")
    assert text.endswith(")")
    assert "[a]=1" in text
    assert "[b]=2" in text


def test_form_sequence_is_immutable():
    sequence = n.FormSequence([n.symbol("ls")])
    assert sequence.items == (n.symbol("ls"),)

    with pytest.raises(dataclasses.FrozenInstanceError):
        sequence.items = ()  # type: ignore


def test_map_keys_must_be_distinct():
    with pytest.raises(ValueError):
        n.MapLiteral(
            [
                (n.KeywordLiteral("a"), n.IntegerLiteral(1)),
                (n.KeywordLiteral("a"), n.IntegerLiteral(2)),
            ]
        )


def test_location_does_not_affect_equality():
    from shellforms.types import Location

    located = n.SymbolLiteral("ls", location=Location(0, 3, 4))
    assert located == n.SymbolLiteral("ls")


def test_splice():
    from shellforms import splice

    assert splice([]) is n.EMPTY_SPLICE
    assert splice([n.symbol("a"), n.IntegerLiteral(1)]) == n.StringLiteral(
        "a 1"
    )

    form = n.form(n.symbol("ls"), splice([]), n.symbol("-l"))
    assert render(form) == "ls -l"


def test_map_with_unhashable_descriptor_key():
    key = n.Descriptor({"package": "curl"})
    mapping = n.MapLiteral([(key, n.IntegerLiteral(1))])
    assert mapping.entries == ((key, n.IntegerLiteral(1)),)

    with pytest.raises(ValueError):
        n.MapLiteral([(key, n.NIL), (n.Descriptor(dict(key.value)), n.NIL)])
