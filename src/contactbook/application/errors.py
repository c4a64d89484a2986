"""Store failures raised by repository adapters."""


class StoreError(Exception):
    """Base class for persistence failures."""


class DuplicateKeyError(StoreError):
    """A unique key (e.g. owner + normalized phone) is already taken.

    Expected when two writers race for the same key; callers treat it as a
    conflict, not a defect.
    """


class StoreUnavailable(StoreError):
    """The persistence layer cannot be reached."""
