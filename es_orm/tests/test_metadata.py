from __future__ import annotations

import pytest

from es_orm import Document, Property, document
from es_orm.errors import (
    DocumentParserError,
    InvalidDocumentClassError,
    MissingDocumentAnnotationError,
    UnknownDocumentTypeError,
)
from es_orm.metadata import MetadataCollector, load_class, parse_document
from sample_documents import CategoryTag, NotADocument, Product


def test_parse_document_reads_type_and_fields():
    metadata = parse_document(Product)

    assert metadata.type == "product"
    assert metadata.document_class is Product
    assert [(f.attribute, f.name) for f in metadata.fields] == [
        ("title", "title"),
        ("description", "description"),
        ("price", "price"),
        ("in_stock", "available"),
    ]


def test_type_defaults_to_snake_cased_class_name():
    assert parse_document(CategoryTag).type == "category_tag"


def test_document_mapping():
    assert parse_document(Product).get_mapping() == {
        "dynamic": "strict",
        "properties": {
            "title": {"type": "text", "fields": {"raw": {"type": "keyword"}}},
            "description": {"type": "keyword"},
            "price": {"type": "float"},
            "available": {"type": "boolean", "index": False},
        },
    }


def test_undecorated_class_is_rejected():
    with pytest.raises(MissingDocumentAnnotationError):
        parse_document(NotADocument)

    class Child(Product):
        pass

    with pytest.raises(MissingDocumentAnnotationError):
        parse_document(Child)


def test_duplicate_field_names_are_rejected():
    @document
    class Clash(Document):
        first = Property(type="text", name="value")
        second = Property(type="keyword", name="value")

    with pytest.raises(DocumentParserError, match="value"):
        parse_document(Clash)


def test_reserved_attribute_is_rejected():
    @document
    class WithId:
        id = Property(type="keyword")

    with pytest.raises(DocumentParserError, match="reserved"):
        parse_document(WithId)


@pytest.mark.parametrize("path", ["sample_documents:Product", "sample_documents.Product"])
def test_load_class_from_import_path(path):
    assert load_class(path) is Product


def test_load_class_passes_classes_through():
    assert load_class(Product) is Product


@pytest.mark.parametrize(
    "path",
    ["no_such_module:Thing", "sample_documents:Missing", "sample_documents:PRODUCT_HITS", "Product"],
)
def test_load_class_rejects_unloadable_names(path):
    with pytest.raises(InvalidDocumentClassError):
        load_class(path)


def test_load_class_rejects_non_strings():
    with pytest.raises(TypeError):
        load_class(42)


def test_collector_registers_and_resolves():
    collector = MetadataCollector([Product, "sample_documents:CategoryTag"])

    assert collector.types == ["product", "category_tag"]
    assert collector.get_document_type(Product) == "product"
    assert collector.get_document_type("sample_documents.CategoryTag") == "category_tag"
    assert collector.resolve_class("product") is Product
    assert collector.get_class_by_type("category_tag") is CategoryTag
    assert collector.register(Product) is collector.get_metadata(Product)


def test_collector_registers_lazily():
    collector = MetadataCollector()

    assert collector.has_type("product") is False
    assert collector.get_document_type(Product) == "product"
    assert collector.has_type("product") is True


def test_collector_rejects_two_classes_for_one_type():
    @document(type="product")
    class OtherProduct(Document):
        name = Property(type="keyword")

    collector = MetadataCollector([Product])

    with pytest.raises(DocumentParserError, match="already mapped"):
        collector.register(OtherProduct)


def test_unknown_type_lookup():
    collector = MetadataCollector([Product])

    with pytest.raises(UnknownDocumentTypeError):
        collector.get_class_by_type("order")


def test_collector_mappings_per_type():
    collector = MetadataCollector([Product, CategoryTag])

    mappings = collector.get_mappings()

    assert set(mappings) == {"product", "category_tag"}
    assert mappings["category_tag"] == {"properties": {"label": {"type": "keyword"}}}
    assert collector.get_mapping("product") == mappings["product"]
