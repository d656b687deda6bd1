"""Base class for resource models.

A model instance holds coerced attribute values keyed by the names declared in
its class ``schema``, a dirty set of names assigned since the last load, and a
non-owning reference to the client that routes its requests.
"""

from typing import TYPE_CHECKING, Any, ClassVar

from helpdesk_sdk._internal.attributes import Schema, coerce
from helpdesk_sdk.exceptions import (
    HelpdeskConfigError,
    MissingIdentityError,
    RequiredAttributeError,
    ResourceDestroyedError,
)

if TYPE_CHECKING:
    from typing import Self

    from helpdesk_sdk._internal.collection import Collection
    from helpdesk_sdk.client import HelpdeskClient


def _settable(cls: type, name: str) -> bool:
    """Whether ``name`` is a data descriptor (association, property) on ``cls``."""
    return not name.startswith("_") and hasattr(getattr(cls, name, None), "__set__")


class Model:
    """A single resource instance.

    Class configuration:
        schema: Declared attributes of the resource.
        collection: Name of the client accessor for this resource's collection.
        model_root: JSON envelope key, e.g. "ticket".
        create_request, update_request, destroy_request: Registered request names.
    """

    schema: ClassVar[Schema] = Schema()
    collection: ClassVar[str]
    model_root: ClassVar[str]
    create_request: ClassVar[str | None] = None
    update_request: ClassVar[str | None] = None
    destroy_request: ClassVar[str | None] = None

    def __init__(self, client: "HelpdeskClient | None" = None, **attributes: Any) -> None:
        object.__setattr__(self, "_client", client)
        object.__setattr__(self, "_values", {})
        object.__setattr__(self, "_dirty", set())
        object.__setattr__(self, "_destroyed", False)

        for name, value in attributes.items():
            if name not in self.schema and not _settable(type(self), name):
                raise TypeError(f"{type(self).__name__} has no attribute {name!r}")
            setattr(self, name, value)

    @classmethod
    def load(cls, client: "HelpdeskClient | None", record: dict[str, Any]) -> "Self":
        """Build an instance from a raw record without marking anything dirty."""
        return cls(client).merge(record)

    def __getattr__(self, name: str) -> Any:
        if name in type(self).schema:
            return self._values.get(name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name in type(self).schema:
            self._assign(name, value)
        else:
            object.__setattr__(self, name, value)

    def _assign(self, name: str, value: Any) -> None:
        attr = self.schema[name]
        coerced = coerce(attr.type, value)

        if attr.identity:
            current = self._values.get(name)
            if current is not None and coerced != current:
                raise AttributeError(f"{name} is immutable once assigned")
            self._values[name] = coerced
            return

        if attr.read_only:
            raise AttributeError(f"{name} is read-only")

        self._values[name] = coerced
        self._dirty.add(name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Model) or type(other) is not type(self):
            return NotImplemented
        if self.identity is None or other.identity is None:
            return self is other
        return self.identity == other.identity

    def __hash__(self) -> int:
        if self.identity is None:
            return id(self)
        return hash((type(self), self.identity))

    def __repr__(self) -> str:
        values = " ".join(f"{name}={value!r}" for name, value in self._values.items())
        return f"<{type(self).__name__} {values}>"

    # =========================================================================
    # State
    # =========================================================================

    @property
    def client(self) -> "HelpdeskClient":
        if self._client is None:
            raise HelpdeskConfigError(f"{type(self).__name__} is not bound to a client")
        return self._client

    @property
    def identity(self) -> Any:
        if self.schema.identity is None:
            return None
        return self._values.get(self.schema.identity.name)

    @property
    def dirty(self) -> frozenset[str]:
        """Attributes assigned since the last load or save."""
        return frozenset(self._dirty)

    @property
    def destroyed(self) -> bool:
        return self._destroyed or bool(self._values.get("deleted"))

    def is_new(self) -> bool:
        return self.identity is None

    def attributes(self) -> dict[str, Any]:
        """Coerced attribute values currently held by the instance."""
        return dict(self._values)

    def dump(self) -> dict[str, Any]:
        """Wire representation of the current attribute values."""
        return self.schema.dump(self._values)

    def merge(self, record: dict[str, Any]) -> "Self":
        """Overwrite the attributes present in ``record``; leave the rest alone.

        Identity is taken from ``record`` only when it is not set yet.
        """
        identity_name = self.schema.identity.name if self.schema.identity else None
        for name, value in self.schema.coerce(record).items():
            if name == identity_name:
                if self._values.get(name) is None:
                    self._values[name] = value
                continue
            self._values[name] = value
            self._dirty.discard(name)
        return self

    def requires(self, *names: str) -> None:
        """Raise if any of ``names`` is unset or blank.

        The pseudo-name "identity" checks the primary key.

        Raises:
            MissingIdentityError: If "identity" is requested and unset.
            RequiredAttributeError: If other attributes are missing.
        """
        if "identity" in names and self.identity is None:
            raise MissingIdentityError(type(self).__name__)
        missing = [
            name for name in names
            if name != "identity" and self._values.get(name) in (None, "")
        ]
        if missing:
            raise RequiredAttributeError(missing)

    # =========================================================================
    # Persistence
    # =========================================================================

    def create_attributes(self) -> dict[str, Any]:
        """Body sent with the create request: writable, non-null attributes."""
        return {
            name: value
            for name, value in self.dump().items()
            if value is not None and not self.schema[name].read_only
        }

    def update_attributes(self) -> dict[str, Any]:
        """Body sent with the update request: identity plus dirty attributes."""
        dumped = self.dump()
        return {"id": self.identity, **{name: dumped.get(name) for name in self._dirty}}

    def save(self) -> "Self":
        """Create or update the record and merge the returned attributes.

        Raises:
            ResourceDestroyedError: If the instance was destroyed.
            RequiredAttributeError: If a required attribute is missing on create.
        """
        if self.destroyed:
            raise ResourceDestroyedError(f"{type(self).__name__} {self.identity} was destroyed")

        request = self.create_request if self.is_new() else self.update_request
        if request is None:
            action = "created" if self.is_new() else "updated"
            raise HelpdeskConfigError(f"{type(self).__name__} cannot be {action}")

        if self.is_new():
            self.requires(*self.schema.required)
            response = self.client.request(request, {self.model_root: self.create_attributes()})
        else:
            response = self.client.request(request, {self.model_root: self.update_attributes()})

        self.merge(response.body.get(self.model_root) or {})
        self._dirty.clear()
        return self

    def destroy(self) -> "Self":
        """Delete the record.

        Resources declaring a ``deleted`` attribute are soft-deleted: the flag
        is set locally once the request succeeds.

        Raises:
            MissingIdentityError: If identity is unset. No request is issued.
        """
        self.requires("identity")
        self.client.request(self.destroy_request, {self.model_root: {"id": self.identity}})

        if "deleted" in self.schema:
            self._values["deleted"] = True
        else:
            object.__setattr__(self, "_destroyed", True)
        return self

    def reload(self) -> "Self | None":
        """Re-fetch the record; ``None`` if it no longer exists."""
        self.requires("identity")
        fresh = self.related(self.collection).get(self.identity)
        if fresh is None:
            return None
        self.merge(fresh.dump())
        return self

    def related(self, collection: str, **scope: Any) -> "Collection[Any]":
        """A new collection from the owning client, optionally scoped."""
        return getattr(self.client, collection)(**scope)
