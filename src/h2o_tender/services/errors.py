"""Exceptions raised by hydration services."""


class HydrationError(Exception):
    """Base class for hydration tracking errors."""


class ValidationError(HydrationError):
    """Raised when caller input is outside the accepted configuration surface."""


class StateError(HydrationError):
    """Raised when an operation is not valid in the current state."""


class NotInitializedError(StateError):
    """Raised when the daily state is used before it was loaded."""


class ProfileMissingError(StateError):
    """Raised when no profile has been saved yet."""


class ReminderLimitError(StateError):
    """Raised when more reminders are answered than were planned."""


class PersistenceError(HydrationError):
    """Raised when a storage write fails; the in-memory state is kept."""
