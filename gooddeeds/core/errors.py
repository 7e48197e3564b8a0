"""
Error taxonomy for calls against the hosted backend.

Lookups (listing rooms, participants, messages, profiles, friends) raise
`LookupFailure`; writes (creating rooms, adding participants, inserting
messages, friendship changes) raise `MutationFailure`. The underlying
Supabase / PostgREST exception is always chained as `__cause__`.
"""

from typing import Optional


class BackendError(Exception):
    """Base class for failures talking to the hosted backend"""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        self.message = message or f"{operation} failed"
        super().__init__(self.message)


class LookupFailure(BackendError):
    pass


class MutationFailure(BackendError):
    pass


class InvalidChatTarget(ValueError):
    """Raised when a chat is requested with an unusable participant (e.g. yourself)."""
