"""Exceptions raised by es_orm.

Transport errors (connection failures, HTTP errors) come from the client
library itself and are never wrapped.
"""


class EsOrmError(Exception):
    """Base class for all es_orm errors."""


class DocumentParserError(EsOrmError, ValueError):
    """A document class declaration cannot be turned into metadata."""


class MissingDocumentAnnotationError(DocumentParserError):
    """The class was never decorated with ``@document``."""


class InvalidDocumentClassError(EsOrmError, ValueError):
    """A repository was requested for something that is not a loadable class."""


class UnknownDocumentTypeError(EsOrmError, KeyError):
    """No registered document class maps to the given type name."""


class AggregationLookupError(EsOrmError, KeyError):
    """An aggregation path does not resolve against a result tree."""

    def __init__(self, path: str, step: str, reason: str):
        self.path = path
        self.step = step
        self.reason = reason
        super().__init__(f"Cannot resolve {step!r} in aggregation path {path!r}: {reason}")

    def __str__(self) -> str:
        return self.args[0]
