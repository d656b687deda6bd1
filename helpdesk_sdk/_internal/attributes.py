"""Attribute declarations, schemas and coercion for resource models.

Every resource class carries one ``Schema``: an ordered list of ``Attribute``
descriptors built once at import time. Coercion and required-attribute checks
consult the schema instead of per-instance metadata.
"""

from collections.abc import Iterator, Mapping
from datetime import datetime
from enum import Enum
from typing import Any

import pydantic
from pydantic import BaseModel, TypeAdapter

from helpdesk_sdk.exceptions import TypeCoercionError


class AttributeType(str, Enum):
    """Declared type of a resource attribute."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    TIME = "time"
    ARRAY = "array"
    ANY = "any"


_ADAPTERS: dict[AttributeType, TypeAdapter[Any]] = {
    AttributeType.INTEGER: TypeAdapter(int),
    AttributeType.BOOLEAN: TypeAdapter(bool),
    AttributeType.TIME: TypeAdapter(datetime),
}


class Attribute(BaseModel):
    """A single declared field of a resource."""

    name: str
    type: AttributeType = AttributeType.ANY
    read_only: bool = False
    required: bool = False
    identity: bool = False

    model_config = {"frozen": True}


def identity(name: str = "id", type: AttributeType = AttributeType.INTEGER) -> Attribute:
    """Declare the primary key attribute."""
    return Attribute(name=name, type=type, read_only=True, identity=True)


def attribute(
    name: str,
    type: AttributeType = AttributeType.ANY,
    *,
    read_only: bool = False,
    required: bool = False,
) -> Attribute:
    """Declare a regular attribute."""
    return Attribute(name=name, type=type, read_only=read_only, required=required)


def coerce(type: AttributeType, raw: Any) -> Any:
    """Convert a raw JSON value to the declared attribute type.

    ``None`` always stays ``None``. Scalars are converted best-effort and an
    unconvertible value yields ``None``; only array mismatches raise.

    Raises:
        TypeCoercionError: If ``type`` is ARRAY and ``raw`` is not a list.
    """
    if raw is None:
        return None

    if type is AttributeType.ANY:
        return raw

    if type is AttributeType.ARRAY:
        if isinstance(raw, (list, tuple)):
            return list(raw)
        raise TypeCoercionError(f"expected an array, got {raw.__class__.__name__}")

    if type is AttributeType.STRING:
        return raw if isinstance(raw, str) else str(raw)

    try:
        return _ADAPTERS[type].validate_python(raw)
    except pydantic.ValidationError:
        return None


def dump(type: AttributeType, value: Any) -> Any:
    """Render a coerced value back into its wire representation."""
    if value is None:
        return None
    if type is AttributeType.TIME and isinstance(value, datetime):
        return value.isoformat().replace("+00:00", "Z")
    return value


class Schema:
    """Ordered collection of attributes attached to one resource class."""

    def __init__(self, *attributes: Attribute) -> None:
        self._attributes: dict[str, Attribute] = {}
        for attr in attributes:
            if attr.name in self._attributes:
                raise ValueError(f"duplicate attribute: {attr.name}")
            self._attributes[attr.name] = attr

        identities = [attr for attr in attributes if attr.identity]
        if len(identities) > 1:
            raise ValueError("a schema can declare at most one identity")
        self.identity: Attribute | None = identities[0] if identities else None

    def __contains__(self, name: object) -> bool:
        return name in self._attributes

    def __getitem__(self, name: str) -> Attribute:
        return self._attributes[name]

    def __iter__(self) -> Iterator[Attribute]:
        return iter(self._attributes.values())

    def __len__(self) -> int:
        return len(self._attributes)

    @property
    def names(self) -> list[str]:
        return list(self._attributes)

    @property
    def required(self) -> list[str]:
        """Names of the attributes required on create, in declaration order."""
        return [attr.name for attr in self if attr.required]

    def coerce(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Coerce the known keys present in ``record``; unknown keys are dropped."""
        return {
            name: coerce(self._attributes[name].type, value)
            for name, value in record.items()
            if name in self._attributes
        }

    def dump(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Build the loosely-typed wire bag for ``values``."""
        return {
            name: dump(self._attributes[name].type, value)
            for name, value in values.items()
            if name in self._attributes
        }
