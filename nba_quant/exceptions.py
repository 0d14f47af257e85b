"""Error kinds raised by the shrinkage engine."""


class ShrinkageError(Exception):
    """Base class for all shrinkage pipeline errors."""


class InvalidRecord(ShrinkageError, ValueError):
    """A shot record has inconsistent counts (negative, or made > attempts)."""


class DegenerateInput(ShrinkageError):
    """Input that no estimate can be computed from.

    Raised when a zero-attempt player reaches a log(attempts) stage, or when
    an identity-linked mean evaluates outside (0, 1).
    """


class NonConvergence(ShrinkageError):
    """The regression fit did not reach a stable optimum."""


class InvalidInput(ShrinkageError, ValueError):
    """A prediction request with non-positive attempts or impossible makes."""
