"""YAML helpers and error types shared by the textual codecs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable


class CodecError(ValueError):
    """Base class for codec failures; always names the offending document."""

    def __init__(self, message: str, *, document: str) -> None:
        super().__init__(message)
        self.document = document


class ParseError(CodecError):
    """Raised when a document is not well-formed YAML."""


class SchemaError(CodecError):
    """Raised when a well-formed document lacks or mistypes a required field."""

    def __init__(self, message: str, *, document: str, field: str) -> None:
        super().__init__(message, document=document)
        self.field = field


def load_document(text: str, *, document: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ParseError(f"{document}: malformed YAML ({exc})", document=document) from exc


def load_documents(text: str, *, document: str) -> list[Any]:
    """Load a ``---`` separated stream, skipping empty documents."""

    try:
        return [doc for doc in yaml.safe_load_all(text) if doc is not None]
    except yaml.YAMLError as exc:
        raise ParseError(f"{document}: malformed YAML ({exc})", document=document) from exc


def dump_document(data: Any) -> str:
    return yaml.safe_dump(
        data,
        sort_keys=True,
        indent=2,
        width=120,
        default_flow_style=False,
        allow_unicode=True,
    )


def dump_documents(items: Iterable[Any]) -> str:
    return "---\n".join(dump_document(item) for item in items)


def require_mapping(data: Any, *, document: str, root_key: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise SchemaError(
            f"{document}: expected a mapping with a '{root_key}' key",
            document=document,
            field=root_key,
        )
    if root_key not in data:
        raise SchemaError(
            f"{document}: missing required field '{root_key}'",
            document=document,
            field=root_key,
        )
    return data


def validate_document[ModelT: BaseModel](
    model: type[ModelT],
    data: Any,
    *,
    document: str,
) -> ModelT:
    """Validate ``data`` against ``model`` and translate pydantic errors."""

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "<root>"
        if first["type"] == "missing":
            message = f"{document}: missing required field '{field}'"
        else:
            message = f"{document}: invalid field '{field}' ({first['msg']})"
        raise SchemaError(message, document=document, field=field) from exc


__all__ = [
    "CodecError",
    "ParseError",
    "SchemaError",
    "dump_document",
    "dump_documents",
    "load_document",
    "load_documents",
    "require_mapping",
    "validate_document",
]
