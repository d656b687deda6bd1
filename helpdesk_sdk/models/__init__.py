"""Helpdesk resources.

Importing this package registers every request the resources define.
"""

from helpdesk_sdk.models.category import Categories, Category
from helpdesk_sdk.models.group import Group, Groups
from helpdesk_sdk.models.membership import Membership, Memberships
from helpdesk_sdk.models.organization import Organization, Organizations
from helpdesk_sdk.models.ticket import Ticket, Tickets
from helpdesk_sdk.models.ticket_comment import (
    TicketAudit,
    TicketAudits,
    TicketComment,
    TicketComments,
)
from helpdesk_sdk.models.ticket_field import TicketField, TicketFields
from helpdesk_sdk.models.user import User, Users

__all__ = [
    "Categories",
    "Category",
    "Group",
    "Groups",
    "Membership",
    "Memberships",
    "Organization",
    "Organizations",
    "Ticket",
    "TicketAudit",
    "TicketAudits",
    "TicketComment",
    "TicketComments",
    "TicketField",
    "TicketFields",
    "Tickets",
    "User",
    "Users",
]
