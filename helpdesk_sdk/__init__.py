"""Helpdesk SDK for Python.

Typed resources for a hosted helpdesk REST API, executed either against the
real service or against an in-process simulation.

Public API:
    HelpdeskClient - Composition root; see ``helpdesk_sdk.client``
    helpdesk_sdk.models - Ticket, User, Organization, Group, Membership, ...
    helpdesk_sdk.exceptions - Error taxonomy

Internal (framework, not for direct use):
    _internal - Attributes, requests, collections and the mock store
"""

from helpdesk_sdk._version import __version__
from helpdesk_sdk.client import HelpdeskClient
from helpdesk_sdk.exceptions import (
    FieldError,
    HelpdeskAPIError,
    HelpdeskConfigError,
    HelpdeskError,
    MissingIdentityError,
    NotFound,
    RemoteError,
    RequiredAttributeError,
    ResourceDestroyedError,
    TypeCoercionError,
    ValidationError,
)

__all__ = [
    "__version__",
    "HelpdeskClient",
    "FieldError",
    "HelpdeskAPIError",
    "HelpdeskConfigError",
    "HelpdeskError",
    "MissingIdentityError",
    "NotFound",
    "RemoteError",
    "RequiredAttributeError",
    "ResourceDestroyedError",
    "TypeCoercionError",
    "ValidationError",
]
