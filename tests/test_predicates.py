"""Tests for the predicate tree and its constructors."""

from __future__ import annotations

import pytest

from cqrs_ddd_query_translator.predicates import (
    Combinator,
    Comparison,
    FieldRef,
    PredicateOperator,
    and_,
    eq,
    exists,
    ilike,
    in_,
    or_,
)

# -- FieldRef ----------------------------------------------------------------


def test_field_ref_from_dotted_string():
    ref = FieldRef.parse("address.city")
    assert ref.parts == ("address", "city")
    assert ref.path == "address.city"
    assert ref.is_nested is True


def test_field_ref_from_segments():
    assert FieldRef.parse(["profile", "display.name"]).parts == (
        "profile",
        "display.name",
    )


def test_field_ref_parse_is_identity_for_field_ref():
    ref = FieldRef(("name",))
    assert FieldRef.parse(ref) is ref
    assert str(ref) == "name"
    assert ref.is_nested is False


@pytest.mark.parametrize("path", ["", "a..b", ".a"])
def test_field_ref_rejects_empty_segments(path):
    with pytest.raises(ValueError, match="Invalid field path"):
        FieldRef.parse(path)


@pytest.mark.parametrize("path", [None, "", "a..b", "name.", ("a", "")])
def test_field_ref_parse_or_none_drops_malformed_paths(path):
    assert FieldRef.parse_or_none(path) is None


def test_field_ref_parse_or_none_keeps_valid_paths():
    assert FieldRef.parse_or_none("a.b") == FieldRef(("a", "b"))


# -- Constructors ------------------------------------------------------------


def test_leaf_constructors():
    assert eq("status", "active") == Comparison(
        FieldRef(("status",)), PredicateOperator.EQ, "active"
    )
    assert in_("kind", ("a", "b")).value == ["a", "b"]
    assert exists("deleted_at", False).value is False
    assert ilike("name", "ada").op == PredicateOperator.ILIKE


def test_combinators_require_children():
    with pytest.raises(ValueError, match="empty"):
        and_()
    with pytest.raises(ValueError, match="empty"):
        or_()


def test_combinator_keeps_child_order():
    group = or_(eq("a", 1), eq("b", 2))
    assert isinstance(group, Combinator)
    assert [c.field.path for c in group.children] == ["a", "b"]
    assert group.field is None


# -- to_dict -----------------------------------------------------------------


def test_leaf_to_dict():
    assert eq("status", "active").to_dict() == {"status": {"$eq": "active"}}


def test_nested_leaf_to_dict():
    assert ilike("address.city", "lon").to_dict() == {
        "address": {"city": {"$ilike": "lon"}}
    }


def test_unscoped_combinator_to_dict():
    group = or_(ilike("name", "foo"), ilike("bio", "foo"))
    assert group.to_dict() == {
        "$or": [{"name": {"$ilike": "foo"}}, {"bio": {"$ilike": "foo"}}]
    }


def test_field_scoped_combinator_to_dict():
    group = or_(eq("name", "x"), ilike("name", "y"), field="name")
    assert group.to_dict() == {"name": {"$or": [{"$eq": "x"}, {"$ilike": "y"}]}}


def test_nested_field_scoped_combinator_to_dict():
    group = and_(eq("a.b", 1), exists("a.b"), field="a.b")
    assert group.to_dict() == {"a": {"b": {"$and": [{"$eq": 1}, {"$exists": True}]}}}
