"""Exception hierarchy for the pension and succession engines.

Grid lookups that can legitimately miss return None at the engine level; the
exceptions below are reserved for the primitives (RateGrid, Demembrement),
branch selection, and broken ownership invariants.
"""


class PatrimoineError(Exception):
    """Base class for all domain errors."""
    pass


class GridSliceNotFound(PatrimoineError, LookupError):
    """Raised when a grid has no slice for the given input (e.g. below the first floor)."""
    pass


class OutOfBounds(PatrimoineError):
    """Raised when a computation's precondition does not hold.

    Used between the discount and bonus computations of the general regime to
    signal that the other branch applies.
    """
    pass


class InvalidOwnership(PatrimoineError, ValueError):
    """Raised when an Ownership violates its share-sum invariant before or after a transfer."""
    pass


class NotDismembered(PatrimoineError, ValueError):
    """Raised when asking for the usufruct/bare split of an undismembered Ownership."""
    pass


class OwnersError(PatrimoineError, ValueError):
    """Base class for errors raised while editing a list of owners."""
    pass


class OwnerDoesNotExist(OwnersError):
    """Raised when the owner to replace is not in the list."""
    pass


class NoNewOwners(OwnersError):
    """Raised when an owner would be replaced by nobody."""
    pass
