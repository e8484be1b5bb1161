"""Base class for mapped documents."""

from typing import Any, Optional

from .annotations import iter_properties

# Attribute names carrying hit metadata; a Property may not use them.
RESERVED_ATTRIBUTES = frozenset({"id", "score"})


class Document:
    """Convenience base class for ``@document`` classes.

    Every declared property becomes an instance attribute (``None`` unless
    given), so an unset field never reads back as its ``Property``.
    Subclassing is optional: results can be converted into any decorated class.
    """

    id: Optional[str] = None
    score: Optional[float] = None

    def __init__(self, id: Optional[str] = None, **values: Any):
        self.id = id
        self.score = None
        for attribute, _ in iter_properties(type(self)):
            setattr(self, attribute, values.pop(attribute, None))
        if values:
            unknown = ", ".join(sorted(values))
            raise TypeError(f"{type(self).__name__} got unexpected field(s): {unknown}")

    def __repr__(self) -> str:
        fields = ", ".join(
            f"{attribute}={getattr(self, attribute)!r}"
            for attribute, _ in iter_properties(type(self))
        )
        return f"{type(self).__name__}(id={self.id!r}, {fields})"
