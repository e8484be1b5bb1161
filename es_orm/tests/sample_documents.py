"""Document classes shared by the tests."""

from elastic_transport import ApiResponseMeta, HttpHeaders, NodeConfig
from elasticsearch import NotFoundError

from es_orm import Document, Property, document


@document(type="product", dynamic="strict")
class Product(Document):
    title = Property(type="text", fields={"raw": {"type": "keyword"}})
    description = Property(type="keyword")
    price = Property(type="float")
    in_stock = Property(type="boolean", name="available", index=False)


@document
class CategoryTag(Document):
    label = Property(type="keyword")


class NotADocument:
    title = Property(type="text")


PRODUCT_HITS = [
    {
        "_id": "1",
        "_score": 1.0,
        "_source": {"title": "foo", "description": "solid", "price": 10.45, "available": True},
    },
    {
        "_id": "2",
        "_score": 0.5,
        "_source": {"title": "bar", "description": "weak", "price": 32},
    },
    {
        "_id": "3",
        "_score": 0.25,
        "_source": {"title": "pizza", "description": "weak", "price": 15.1},
    },
]


def search_response(hits=None, total=None, aggregations=None) -> dict:
    hits = PRODUCT_HITS if hits is None else hits
    response = {
        "took": 1,
        "timed_out": False,
        "hits": {
            "total": {"value": len(hits) if total is None else total, "relation": "eq"},
            "max_score": 1.0,
            "hits": hits,
        },
    }
    if aggregations is not None:
        response["aggregations"] = aggregations
    return response


def not_found_error(body=None) -> NotFoundError:
    """The error the elasticsearch client raises for a 404 response."""
    meta = ApiResponseMeta(
        status=404,
        http_version="1.1",
        headers=HttpHeaders(),
        duration=0.0,
        node=NodeConfig("http", "localhost", 9200),
    )
    return NotFoundError("Not found", meta, body)


class RecordingClient:
    """Client double recording every call; search/get answer with canned responses."""

    def __init__(self, search_result=None, get_result=None, count_result=None):
        self.calls = []
        self.search_result = search_response() if search_result is None else search_result
        self.get_result = get_result
        self.count_result = {"count": 3, "_shards": {"total": 1}} if count_result is None else count_result

    def last(self, method):
        for name, kwargs in reversed(self.calls):
            if name == method:
                return kwargs
        raise AssertionError(f"{method} was never called")

    def search(self, **kwargs):
        self.calls.append(("search", kwargs))
        return self.search_result

    def get(self, **kwargs):
        self.calls.append(("get", kwargs))
        if isinstance(self.get_result, Exception):
            raise self.get_result
        return self.get_result

    def count(self, **kwargs):
        self.calls.append(("count", kwargs))
        return self.count_result

    def delete(self, **kwargs):
        self.calls.append(("delete", kwargs))
        return {"result": "deleted", **kwargs}

    def update(self, **kwargs):
        self.calls.append(("update", kwargs))
        return {"result": "updated", **kwargs}
