"""Lazy references between resources.

A reference is resolved through the related collection every time
``resolve()`` is called; nothing is cached, since the relationship can change
on the service without this instance knowing.
"""

from typing import TYPE_CHECKING, Any

from helpdesk_sdk.exceptions import MissingIdentityError

if TYPE_CHECKING:
    from helpdesk_sdk._internal.model import Model


class Reference:
    """A resolvable pointer from one model to another."""

    def __init__(self, owner: "Model", foreign_key: str, collection: str) -> None:
        self.owner = owner
        self.foreign_key = foreign_key
        self.collection = collection

    def __repr__(self) -> str:
        return f"<Reference {self.collection}:{self.identity}>"

    @property
    def identity(self) -> Any:
        return getattr(self.owner, self.foreign_key)

    def resolve(self) -> "Model | None":
        """Look up the referenced record; ``None`` when unset or dangling."""
        identity = self.identity
        if identity is None:
            return None
        return self.owner.related(self.collection).get(identity)


class BelongsTo:
    """Descriptor exposing a foreign key attribute as a ``Reference``.

    Assigning a model stores its identity in the foreign key; assigning any
    other value stores it as-is.
    """

    def __init__(self, foreign_key: str, collection: str) -> None:
        self.foreign_key = foreign_key
        self.collection = collection
        self.name = foreign_key

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: "Model | None", owner: type) -> Any:
        if instance is None:
            return self
        return Reference(instance, self.foreign_key, self.collection)

    def __set__(self, instance: "Model", value: Any) -> None:
        setattr(instance, self.foreign_key, self.identity_of(value))

    def identity_of(self, value: Any) -> Any:
        from helpdesk_sdk._internal.model import Model

        if isinstance(value, Model):
            if value.identity is None:
                raise MissingIdentityError(type(value).__name__)
            return value.identity
        return value
