"""Declarations that describe how a Python class maps onto an Elasticsearch type.

A mapped class is decorated with :func:`document` and lists its fields as
:class:`Property` class attributes::

    @document(type="product", dynamic="strict")
    class Product(Document):
        title = Property(type="text", fields={"raw": {"type": "keyword"}})
        price = Property(type="float")
        in_stock = Property(type="boolean", name="available", index=False)

Both declarations are frozen pydantic models, so an unknown field type or an
option that does not apply to the declared type fails when the class body is
executed.
"""

from typing import Any, ClassVar, Iterable, Iterator, Literal, Optional, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, model_validator

from . import caser

FieldType = Literal[
    "string",
    "text",
    "keyword",
    "boolean",
    "integer",
    "float",
    "long",
    "short",
    "byte",
    "double",
    "date",
    "geo_point",
    "geo_shape",
    "ip",
    "binary",
    "token_count",
]

FIELD_TYPES: tuple[str, ...] = get_args(FieldType)

ANALYZED_TYPES = frozenset({"string", "text"})

DOCUMENT_ATTRIBUTE = "__es_document__"


class _Annotation(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    # Attributes never emitted by dump().
    dump_excludes: ClassVar[tuple[str, ...]] = ()

    def dump(self, exclude: Iterable[str] = ()) -> dict[str, Any]:
        """Return the declaration as a mapping fragment.

        Falsy values are dropped unless they are booleans, so ``index=False``
        survives while ``analyzer=None`` or ``options={}`` do not.  Keys are
        snake_cased.
        """
        excluded = set(self.dump_excludes) | set(exclude)
        return {
            caser.snake(key): value
            for key, value in self.model_dump().items()
            if (value or isinstance(value, bool)) and key not in excluded
        }


class Property(_Annotation):
    """One mapped field of a document class."""

    dump_excludes: ClassVar[tuple[str, ...]] = ("name",)

    type: FieldType
    name: Optional[str] = None
    options: dict[str, Any] = Field(default_factory=dict)

    index: Optional[bool] = None
    store: Optional[bool] = None
    doc_values: Optional[bool] = None
    analyzer: Optional[str] = None
    search_analyzer: Optional[str] = None
    format: Optional[str] = None
    null_value: Any = None
    boost: Optional[float] = None
    fields: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_type_options(self) -> "Property":
        if self.type not in ANALYZED_TYPES:
            for option in ("analyzer", "search_analyzer"):
                if getattr(self, option) is not None:
                    raise ValueError(
                        f"Option {option!r} does not apply to field type {self.type!r}"
                    )
        if self.format is not None and self.type != "date":
            raise ValueError(f"Option 'format' does not apply to field type {self.type!r}")
        return self

    def field_name(self, attribute: str) -> str:
        """Name of the field in the index for the class attribute *attribute*."""
        return self.name or caser.snake(attribute)

    def mapping(self) -> dict[str, Any]:
        """Mapping fragment with the free-form ``options`` merged in."""
        fragment = self.dump(exclude=["options"])
        fragment.update((caser.snake(key), value) for key, value in self.options.items())
        return fragment


class DocumentAnnotation(_Annotation):
    """Type-level settings of a document class."""

    dump_excludes: ClassVar[tuple[str, ...]] = ("type",)

    type: Optional[str] = None
    dynamic: Union[bool, Literal["strict", "runtime"], None] = None
    enabled: Optional[bool] = None
    date_detection: Optional[bool] = None
    dynamic_templates: list[dict[str, Any]] = Field(default_factory=list)
    dynamic_date_formats: list[str] = Field(default_factory=list)


def document(cls: Optional[type] = None, /, **options: Any):
    """Class decorator marking *cls* as a mapped document.

    Usable bare (``@document``) or with options (``@document(type="product")``).
    """
    annotation = DocumentAnnotation(**options)

    def decorate(target: type) -> type:
        setattr(target, DOCUMENT_ATTRIBUTE, annotation)
        return target

    if cls is not None:
        return decorate(cls)
    return decorate


def get_document_annotation(cls: type) -> Optional[DocumentAnnotation]:
    """Annotation declared directly on *cls*; inherited ones do not count."""
    return vars(cls).get(DOCUMENT_ATTRIBUTE)


def iter_properties(cls: type) -> Iterator[tuple[str, Property]]:
    """Yield ``(attribute, Property)`` pairs, base classes first."""
    seen: dict[str, Property] = {}
    for klass in reversed(cls.__mro__):
        for attribute, value in vars(klass).items():
            if isinstance(value, Property):
                seen[attribute] = value
    yield from seen.items()
