"""
Models package for the ticket tracker.

Staff identities are not stored here; they live in the login session
(see ticketdesk.auth.identity).
"""
from .base import db

from .ticket import Ticket

# Import Flask-Login user loader
from .. import login_manager
from ..auth.identity import StaffIdentity


@login_manager.user_loader
def load_user(user_id):
    return StaffIdentity.from_id(user_id)


__all__ = [
    'db',
    'Ticket',
    'load_user',
]
