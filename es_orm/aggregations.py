"""Navigation over aggregation results.

The raw ``aggregations`` object of a search response is wrapped in an
:class:`AggregationIterator`.  Nodes are typed:

- :class:`AggregationIterator` -- named aggregations, or the buckets of a
  terms/range/histogram aggregation keyed by bucket key,
- :class:`Bucket` -- one bucket, possibly carrying sub-aggregations,
- :class:`ValueAggregation` -- metric and single-bucket aggregations.

Paths address nodes with dotted strings such as ``"test_agg.0.test_agg_2"``:
a name selects an aggregation, an integer selects a bucket by position and any
other string on a bucket list selects a bucket by key.  Keys containing dots
(``"*-20.0"``) need an explicit step sequence:
``AggregationPath(("test_agg", "weak", "test_agg_2", "*-20.0"))``.

Sub-aggregations are stored under ``agg_<name>``; both ``agg_<name>`` and the
bare name are accepted on lookup and iteration exposes the bare name.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Union

from .errors import AggregationLookupError

AGGREGATION_PREFIX = "agg_"

# Dict-valued fields of a bucket or metric result that are not sub-aggregations.
_VALUE_FIELDS = frozenset(
    {
        "key",
        "meta",
        "after_key",
        "hits",
        "values",
        "bounds",
        "location",
        "centroid",
        "std_deviation_bounds",
        "std_deviation_bounds_as_string",
    }
)

Step = Union[str, int]

_MISSING = object()


@dataclass(frozen=True)
class AggregationPath:
    steps: tuple[Step, ...]

    def __post_init__(self):
        if not self.steps:
            raise ValueError("Aggregation path must have at least one step.")

    @classmethod
    def parse(cls, path: Union[str, "AggregationPath", Sequence[Step]]) -> "AggregationPath":
        if isinstance(path, AggregationPath):
            return path
        if isinstance(path, str):
            segments = path.split(".")
            if not all(segments):
                raise ValueError(f"Empty segment in aggregation path {path!r}.")
            return cls(tuple(int(s) if s.isdigit() else s for s in segments))
        return cls(tuple(path))

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __str__(self) -> str:
        return ".".join(str(step) for step in self.steps)


def strip_prefix(name: str) -> str:
    if name.startswith(AGGREGATION_PREFIX):
        return name[len(AGGREGATION_PREFIX):]
    return name


def is_aggregation(key: str, value: Any) -> bool:
    if key.startswith(AGGREGATION_PREFIX):
        return True
    return isinstance(value, Mapping) and key not in _VALUE_FIELDS


def _bucket_key(raw: Mapping, position: int) -> Any:
    key = raw.get("key", position)
    try:
        hash(key)
    except TypeError:
        # composite aggregation keys are objects
        return position
    return key


class ValueAggregation:
    """Metric or single-bucket aggregation result."""

    def __init__(self, raw_data: Mapping):
        self._raw = raw_data
        self._aggregations: Optional["AggregationIterator"] = None

    def get_value(self) -> Any:
        """``value`` for single-value metrics, otherwise the own fields."""
        fields = self._fields()
        if set(fields) <= {"value", "value_as_string"} and "value" in fields:
            return fields["value"]
        return fields

    def get_aggregations(self) -> "AggregationIterator":
        if self._aggregations is None:
            self._aggregations = AggregationIterator(
                {key: value for key, value in self._raw.items() if is_aggregation(key, value)}
            )
        return self._aggregations

    def find(self, path, default=_MISSING):
        return self.get_aggregations().find(path, default)

    def get_raw(self) -> Mapping:
        return self._raw

    def _fields(self) -> dict[str, Any]:
        return {key: value for key, value in self._raw.items() if not is_aggregation(key, value)}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.get_value()!r})"


class Bucket(ValueAggregation):
    """One bucket of a multi-bucket aggregation."""

    def get_value(self) -> dict[str, Any]:
        return self._fields()

    def get_key(self) -> Any:
        return self._raw.get("key")

    def get_doc_count(self) -> int:
        return self._raw.get("doc_count", 0)


class AggregationIterator(Mapping):
    """Read-only mapping over named aggregations or over a bucket list."""

    def __init__(self, raw_data: Union[Mapping, Sequence]):
        if isinstance(raw_data, Mapping):
            self._is_buckets = False
            self._raw_nodes = {strip_prefix(name): raw for name, raw in raw_data.items()}
        else:
            self._is_buckets = True
            keys = [_bucket_key(raw, position) for position, raw in enumerate(raw_data)]
            if len(set(keys)) != len(keys):
                # repeated keys (the same range declared twice) fall back to positions
                keys = list(range(len(keys)))
            self._raw_nodes = dict(zip(keys, raw_data))
        self._keys = list(self._raw_nodes)
        self._nodes: dict[Any, Any] = {}

    @property
    def is_bucket_list(self) -> bool:
        return self._is_buckets

    def __getitem__(self, step: Step):
        return self._lookup(step, str(step))

    def __iter__(self) -> Iterator[Any]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, step) -> bool:
        try:
            self._resolve_key(step)
        except KeyError:
            return False
        return True

    # Iterate by stored key: an integer histogram key must not be read as a position.
    def items(self) -> Iterator[tuple[Any, Any]]:
        for key in self._keys:
            yield key, self._node(key)

    def values(self) -> Iterator[Any]:
        for key in self._keys:
            yield self._node(key)

    def find(self, path, default=_MISSING):
        """Resolve *path* from this node.

        Raises :class:`AggregationLookupError` on a miss unless *default*
        is given.
        """
        path = AggregationPath.parse(path)
        node: Any = self
        try:
            for step in path:
                if not isinstance(node, AggregationIterator):
                    node = node.get_aggregations()
                node = node._lookup(step, str(path))
        except AggregationLookupError:
            if default is _MISSING:
                raise
            return default
        return node

    def get_raw(self) -> list:
        return list(self._raw_nodes.values())

    def _resolve_key(self, step: Step) -> Any:
        if self._is_buckets:
            if isinstance(step, int) and not isinstance(step, bool):
                if -len(self._keys) <= step < len(self._keys):
                    return self._keys[step]
                raise KeyError(step)
            for key in self._keys:
                if key == step or str(key) == step:
                    return key
            raise KeyError(step)

        if not isinstance(step, str):
            raise KeyError(step)
        name = strip_prefix(step)
        if name in self._raw_nodes:
            return name
        raise KeyError(step)

    def _lookup(self, step: Step, path: str):
        try:
            key = self._resolve_key(step)
        except KeyError:
            if self._is_buckets:
                reason = f"no bucket at that position or with that key among {self._keys!r}"
            else:
                reason = f"no aggregation with that name among {self._keys!r}"
            raise AggregationLookupError(path, str(step), reason) from None
        return self._node(key)

    def _node(self, key: Any):
        if key not in self._nodes:
            self._nodes[key] = self._convert(self._raw_nodes[key])
        return self._nodes[key]

    def _convert(self, raw: Any):
        if self._is_buckets:
            return Bucket(raw)
        if isinstance(raw, Mapping) and "buckets" in raw:
            buckets = raw["buckets"]
            if isinstance(buckets, Mapping):
                # keyed=true responses
                buckets = [{"key": key, **bucket} for key, bucket in buckets.items()]
            return AggregationIterator(buckets)
        return ValueAggregation(raw)

    def __repr__(self) -> str:
        kind = "buckets" if self._is_buckets else "aggregations"
        return f"{type(self).__name__}({kind}={self._keys!r})"
