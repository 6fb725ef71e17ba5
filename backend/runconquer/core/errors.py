class RunConquerError(Exception):
    """Base class for errors raised by the game core."""


class InvalidRunTransition(RunConquerError, ValueError):
    """A run session was asked to move to a state it cannot reach."""


class LocationPermissionDenied(RunConquerError):
    """The location source refused access, so no run can start."""


class PersistenceError(RunConquerError):
    """A store write did not durably succeed.

    The transaction has been rolled back; callers should treat the game
    state as unchanged.
    """


class VerificationFailed(RunConquerError):
    """An e-mail verification code was missing, expired or wrong."""


class InvalidToken(RunConquerError):
    """A session token failed its signature or expiry check."""
