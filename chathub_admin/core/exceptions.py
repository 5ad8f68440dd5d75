"""
core/exceptions.py
------------------
Domain exceptions for the approval and reconciliation workflow.

Services raise these; routes translate them into HTTP responses.
StoreUnavailable is the only one handled globally (see main.py) because any
store-facing call can raise it.
"""

from typing import Optional


class ChatHubError(Exception):
    """Base class for all domain errors raised by this service."""


class StoreUnavailable(ChatHubError):
    """The record store rejected or failed a read/write."""

    def __init__(self, collection: str, operation: str, reason: str = "") -> None:
        self.collection = collection
        self.operation = operation
        self.reason = reason
        super().__init__(
            f"Record store {operation} on '{collection}' failed"
            + (f": {reason}" if reason else "")
        )


class RecordNotFound(ChatHubError):
    """A lookup by id or email returned nothing."""

    collection: str = "records"

    def __init__(self, key: str, collection: Optional[str] = None) -> None:
        if collection is not None:
            self.collection = collection
        self.key = key
        super().__init__(f"No record '{key}' in '{self.collection}'")


class UserNotFound(RecordNotFound):
    collection = "users"


class CompanyNotFound(RecordNotFound):
    collection = "companies"


class WebsiteRequestNotFound(RecordNotFound):
    collection = "website_requests"


class CompanyAlreadyExists(ChatHubError):
    """The user is already linked to a company."""

    def __init__(self, user_id: str, company_id: str) -> None:
        self.user_id = user_id
        self.company_id = company_id
        super().__init__(f"User '{user_id}' already has company '{company_id}'")


class InvalidTransition(ChatHubError):
    """The approval state machine does not allow this move."""

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot move approval status from '{current}' to '{target}'")


class ValidationFailure(ChatHubError):
    """Operator input failed a client-side check before any store call."""
