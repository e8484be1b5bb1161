from __future__ import annotations

import inspect

import pytest
from elasticsearch import Elasticsearch

from es_orm.errors import InvalidDocumentClassError, MissingDocumentAnnotationError
from es_orm.manager import Manager
from es_orm.metadata import MetadataCollector
from es_orm.repository import Repository
from es_orm.results import DocumentIterator, RawIterator, ResultKind
from sample_documents import NotADocument, Product, RecordingClient, not_found_error, search_response


@pytest.fixture
def client() -> RecordingClient:
    return RecordingClient()


@pytest.fixture
def manager(client) -> Manager:
    return Manager(client, "shop", MetadataCollector([Product]))


@pytest.fixture
def repository(manager) -> Repository:
    return Repository(manager, Product)


def test_repository_resolves_type(manager, repository):
    assert repository.get_type() == "product"
    assert repository.get_manager() is manager
    assert repository.get_document_class() is Product
    assert repository.get_class_name() == "sample_documents.Product"


def test_repository_accepts_import_path(manager):
    assert Repository(manager, "sample_documents:Product").get_type() == "product"


def test_repository_rejects_non_string_class_name(manager):
    with pytest.raises(TypeError, match="must be a string"):
        Repository(manager, 42)


def test_repository_rejects_unloadable_class(manager):
    with pytest.raises(InvalidDocumentClassError, match="non-existing class"):
        Repository(manager, "sample_documents:Missing")


def test_repository_rejects_undecorated_class(manager):
    with pytest.raises(MissingDocumentAnnotationError):
        Repository(manager, NotADocument)


def test_find_delegates_to_manager(client, repository):
    client.get_result = {"_id": "7", "found": True, "_source": {"title": "soup"}}

    product = repository.find("7")

    assert client.last("get") == {"index": "shop", "id": "7"}
    assert product.title == "soup"
    assert product.id == "7"


def test_find_by_without_criteria_is_unfiltered(client, repository):
    results = repository.find_by({})

    assert client.last("search") == {"index": "shop", "body": {}}
    assert isinstance(results, DocumentIterator)
    assert [product.id for product in results] == ["1", "2", "3"]


def test_find_by_sequence_value_is_or_query(client, repository):
    repository.find_by({"group": ["best", "worst"]})

    assert client.last("search")["body"] == {
        "query": {"query_string": {"query": "best OR worst", "default_field": "group"}}
    }


def test_find_by_combines_criteria(client, repository):
    repository.find_by({"description": "weak", "available": True, "price": 15.1})

    must = client.last("search")["body"]["query"]["bool"]["must"]
    assert must == [
        {"query_string": {"query": "weak", "default_field": "description"}},
        {"query_string": {"query": "true", "default_field": "available"}},
        {"query_string": {"query": "15.1", "default_field": "price"}},
    ]


def test_find_by_does_not_escape_values(client, repository):
    repository.find_by({"title": "foo AND (bar"})

    query = client.last("search")["body"]["query"]["query_string"]["query"]
    assert query == "foo AND (bar"


def test_find_by_paging_and_sorting(client, repository):
    repository.find_by({}, order_by={"price": "DESC", "title": "asc"}, limit=5, offset=30)

    assert client.last("search")["body"] == {
        "size": 5,
        "from": 30,
        "sort": [{"price": {"order": "desc"}}, {"title": {"order": "asc"}}],
    }


def test_find_one_by_returns_first_document(client, repository):
    product = repository.find_one_by({"description": "weak"}, {"price": "asc"})

    assert product.id == "1"
    body = client.last("search")["body"]
    assert body["size"] == 1
    assert body["sort"] == [{"price": {"order": "asc"}}]


def test_find_one_by_without_match_returns_none(client, repository):
    client.search_result = search_response(hits=[])

    assert repository.find_one_by({"title": "nothing"}) is None


def test_create_search_is_empty(repository):
    assert repository.create_search().to_dict() == {}
    assert repository.create_search() is not repository.create_search()


def test_execute_passes_result_kind(client, repository):
    search = repository.create_search().query("match_all")

    assert isinstance(repository.execute(search, ResultKind.RAW_ITERATOR), RawIterator)
    assert repository.execute(search, "raw") is client.search_result
    assert client.last("search") == {"index": "shop", "body": {"query": {"match_all": {}}}}


def test_count_returns_number(client, repository):
    search = repository.create_search().query("term", description="weak")

    assert repository.count(search) == 3
    assert client.last("count") == {
        "index": "shop",
        "body": {"query": {"term": {"description": "weak"}}},
    }


def test_count_sends_only_the_query(client, repository):
    search = repository.create_search().query("match_all").sort("price").extra(size=10)

    repository.count(search)

    assert client.last("count")["body"] == {"query": {"match_all": {}}}


def test_count_raw_and_params(client, repository):
    raw = repository.count(repository.create_search(), params={"index": "archive", "routing": "a"}, return_raw=True)

    assert raw is client.count_result
    assert client.last("count") == {"index": "archive", "body": {}, "routing": "a"}


def test_remove_returns_raw_response(client, repository):
    response = repository.remove("3")

    assert client.last("delete") == {"index": "shop", "id": "3"}
    assert response["result"] == "deleted"


def test_update_with_fields(client, repository):
    response = repository.update("1", {"price": 9.99})

    assert client.last("update") == {"id": "1", "index": "shop", "body": {"doc": {"price": 9.99}}}
    assert response["result"] == "updated"


def test_update_with_script_only(client, repository):
    script = {"source": "ctx._source.price *= params.f", "params": {"f": 0.9}}

    repository.update("1", script=script)

    assert client.last("update")["body"] == {"script": script}


def test_update_with_fields_script_and_params(client, repository):
    repository.update("1", {"title": "x"}, "ctx._source.views++", params={"refresh": "wait_for", "index": "archive"})

    assert client.last("update") == {
        "id": "1",
        "index": "archive",
        "body": {"doc": {"title": "x"}, "script": "ctx._source.views++"},
        "refresh": "wait_for",
    }


def test_update_without_changes_sends_empty_body(client, repository):
    repository.update("1")

    assert client.last("update")["body"] == {}


def test_client_errors_propagate(client, repository):
    def broken(**kwargs):
        raise ConnectionError("cluster unreachable")

    client.delete = broken

    with pytest.raises(ConnectionError):
        repository.remove("1")


def test_remove_missing_document_returns_not_found_body(client, repository):
    def missing(**kwargs):
        raise not_found_error({"_id": kwargs["id"], "result": "not_found"})

    client.delete = missing

    assert repository.remove("9") == {"_id": "9", "result": "not_found"}


def test_update_missing_document_returns_error_body(client, repository):
    error = {"error": {"type": "document_missing_exception"}, "status": 404}

    def missing(**kwargs):
        raise not_found_error(error)

    client.update = missing

    assert repository.update("9", {"price": 1}) is error


def test_requests_fit_the_elasticsearch_client(client, repository):
    client.get_result = {"_id": "1", "found": True, "_source": {}}

    repository.find("1")
    repository.find_by({"title": "foo"}, {"price": "asc"}, limit=1)
    repository.count(repository.create_search())
    repository.remove("1")
    repository.update("1", {"price": 1}, "ctx._source.views++")

    assert [name for name, _ in client.calls] == ["get", "search", "count", "delete", "update"]
    for name, kwargs in client.calls:
        accepted = inspect.signature(getattr(Elasticsearch, name)).parameters
        # ``body`` is unpacked by the client's parameter rewriting
        assert set(kwargs) - {"body"} <= set(accepted), name
