from __future__ import annotations


class GameRngError(Exception):
    """Base class for every error raised by gamerng."""


class ValidationError(GameRngError, ValueError):
    """A parameter was non-numeric, out of range or not an integer."""


class InvalidInputError(GameRngError, ValueError):
    """Input could not be interpreted (bad dice string, unknown chancy type...)."""


class MaxRecursionsError(GameRngError, RuntimeError):
    """Bounded resampling ran out of attempts while the throw policy is on."""


class LoopDetectedError(GameRngError, RuntimeError):
    """The uniform source produced a degenerate or repeating sequence."""


LoopDetected = LoopDetectedError


class IterationLimitError(GameRngError, RuntimeError):
    """A sampling loop hit the global iteration cap."""


class IncompatibleStateError(GameRngError, ValueError):
    """A serialized generator state is older than the supported format."""


class PoolEmptyError(GameRngError):
    pass


class PoolNotEnoughElementsError(GameRngError):
    pass
