"""Tests for DocumentConventions naming, envelope helpers and conversion."""

from __future__ import annotations

import dataclasses
import datetime

import pytest
from pydantic import BaseModel

from ravendb_query import ConversionError, DocumentConventions
from ravendb_query.conventions import default_document_type_name


class Supplier(BaseModel):
    Name: str


class Order(BaseModel):
    Key: str | None = None
    Company: str
    OrderedAt: datetime.datetime | None = None


@dataclasses.dataclass
class Category:
    id: str
    Name: str


# -- Naming ------------------------------------------------------------------


@pytest.mark.parametrize(
    ("collection", "expected"),
    [
        ("Products", "Product"),
        ("Categories", "Category"),
        ("Addresses", "Address"),
        ("Boxes", "Box"),
        ("Matches", "Match"),
        ("Dishes", "Dish"),
        ("Glass", "Glass"),
        ("orders", "Order"),
        ("Staff", "Staff"),
    ],
)
def test_default_document_type_name(collection, expected):
    assert default_document_type_name(collection) == expected


def test_custom_name_resolver():
    conventions = DocumentConventions(document_type_name_resolver=str.upper)
    assert conventions.get_document_type_name("People") == "PEOPLE"


def test_id_property_resolution(product_cls):
    conventions = DocumentConventions(id_property_name="Id")
    conventions.register_document_type(Order)
    conventions.register_id_property(Order, "Key")

    assert conventions.get_id_property_name() == "Id"
    assert conventions.get_id_property_name(product_cls) == "Id"
    assert conventions.get_id_property_name(Order) == "Key"
    assert conventions.get_id_property_name("Order") == "Key"


def test_resolve_document_type(conventions, product_cls):
    conventions.register_document_type(product_cls)
    conventions.register_document_type(Supplier, "Vendor")

    assert conventions.resolve_document_type("Product") is product_cls
    assert conventions.resolve_document_type("Vendor") is Supplier
    assert conventions.resolve_document_type(Supplier) is Supplier
    assert conventions.resolve_document_type("Unknown") is None
    assert conventions.resolve_document_type(None) is None


# -- Envelope ----------------------------------------------------------------


def test_try_fetch_results(conventions):
    assert conventions.try_fetch_results(None) == []
    assert conventions.try_fetch_results({}) == []
    assert conventions.try_fetch_results({"Results": "bogus"}) == []
    assert conventions.try_fetch_results({"Results": [{"a": 1}]}) == [{"a": 1}]


def test_try_fetch_includes(conventions):
    include = {"Name": "Exotic Liquids", "@metadata": {"@id": "suppliers/1"}}
    assert conventions.try_fetch_includes({"Includes": [include]}) == [include]
    assert conventions.try_fetch_includes({"Includes": {"suppliers/1": include}}) == [include]
    assert conventions.try_fetch_includes({"Results": []}) == []


def test_check_is_projection(conventions):
    assert conventions.check_is_projection({"@metadata": {"@projection": True}}) is True
    assert conventions.check_is_projection({"@metadata": {"@projection": "true"}}) is False
    assert conventions.check_is_projection({"@metadata": {}}) is False
    assert conventions.check_is_projection({"Name": "x"}) is False


# -- Conversion --------------------------------------------------------------


def test_convert_to_pydantic_model(conventions, product_cls):
    raw = {
        "Name": "Chai",
        "Price": 18,
        "@metadata": {"@id": "products/1", "@collection": "Products"},
    }

    conversion = conventions.convert_to_document(raw, product_cls)

    assert conversion.document == product_cls(id="products/1", Name="Chai", Price=18)
    assert conversion.document_id == "products/1"
    assert conversion.document_type == "Product"
    assert conversion.raw_entity == raw
    assert conversion.metadata == {"@id": "products/1", "@collection": "Products"}


def test_convert_keeps_explicit_id(conventions):
    conversion = conventions.convert_to_document(
        {"id": "custom", "@metadata": {"@id": "products/1"}}
    )
    assert conversion.document == {"id": "custom"}


def test_convert_unknown_type_stays_dict(conventions):
    conversion = conventions.convert_to_document(
        {"Name": "Chai", "@metadata": {"@id": "products/1", "@collection": "Products"}},
        "Product",
    )
    assert conversion.document == {"Name": "Chai", "id": "products/1"}
    assert conversion.document_type == "Product"


def test_convert_uses_registered_id_property(conventions):
    conventions.register_document_type(Order)
    conventions.register_id_property(Order, "Key")

    conversion = conventions.convert_to_document(
        {"Company": "companies/1", "@metadata": {"@id": "orders/1"}}, "Order"
    )

    assert conversion.document == Order(Key="orders/1", Company="companies/1")


def test_convert_to_dataclass(conventions):
    conversion = conventions.convert_to_document(
        {"Name": "Beverages", "@metadata": {"@id": "categories/1"}}, Category
    )
    assert conversion.document == Category(id="categories/1", Name="Beverages")


def test_nested_object_types(conventions):
    conventions.register_document_type(Supplier)
    raw = {
        "Name": "Chai",
        "Created": "2024-03-01T10:00:00",
        "Suppliers": [{"Name": "A"}, {"Name": "B"}],
        "Other": {"x": 1},
        "@metadata": {"@id": "products/1"},
    }

    conversion = conventions.convert_to_document(
        raw,
        nested_object_types={"Created": "date", "Suppliers": "Supplier", "Other": "Missing"},
    )

    document = conversion.document
    assert document["Created"] == datetime.datetime(2024, 3, 1, 10, 0)
    assert document["Suppliers"] == [Supplier(Name="A"), Supplier(Name="B")]
    assert document["Other"] == {"x": 1}


def test_nested_class_inside_model(conventions):
    conversion = conventions.convert_to_document(
        {"Company": "companies/1", "OrderedAt": "2024-03-01T10:00:00"},
        Order,
        {"OrderedAt": "datetime"},
    )
    assert conversion.document.OrderedAt == datetime.datetime(2024, 3, 1, 10, 0)
    assert conversion.document_id is None


def test_conversion_error(conventions, product_cls):
    with pytest.raises(ConversionError, match="products/9"):
        conventions.convert_to_document(
            {"Price": "not-a-number", "@metadata": {"@id": "products/9"}}, product_cls
        )


def test_original_metadata_is_a_copy(conventions):
    raw = {"@metadata": {"@id": "products/1", "@flags": ["a"]}}

    conversion = conventions.convert_to_document(raw)
    conversion.metadata["@flags"].append("b")

    assert conversion.original_metadata == {"@id": "products/1", "@flags": ["a"]}
