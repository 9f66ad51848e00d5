"""Exception types raised by the sampling core and the bank loaders."""


class SamplingError(Exception):
    """Base class for errors signaled while building a quiz selection."""


class InvalidRequest(SamplingError, ValueError):
    """The request itself is malformed (bad count, bad weights, missing groups)."""


class UnknownGroup(SamplingError, KeyError):
    """A requested group id is not configured in the pool."""

    def __init__(self, group_id: str, known_groups=None):
        self.group_id = group_id
        self.known_groups = list(known_groups or [])
        super().__init__(group_id)

    def __str__(self) -> str:
        if self.known_groups:
            return (
                f"Unknown group: {self.group_id}. "
                f"Available groups: {', '.join(self.known_groups)}"
            )
        return f"Unknown group: {self.group_id}"


class NoQuestionsAvailable(SamplingError):
    """The pool, or the part of it matching the request, holds no questions."""


class BankLoadError(IOError):
    """A question bank or bundle could not be read or fetched."""
