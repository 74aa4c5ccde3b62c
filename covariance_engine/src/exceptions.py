"""
Engine Exceptions
=================
Error taxonomy shared by the returns, statistics and covariance modules.

None of these are recovered inside the engine: any of them aborts the
enclosing table or matrix build and is handed back to the caller.
"""


class CovarianceEngineError(Exception):
    """Base class for all engine errors."""


class InsufficientDataError(CovarianceEngineError, ValueError):
    """Raised when a second moment is requested on fewer than 2 observations."""


class DimensionMismatchError(CovarianceEngineError, ValueError):
    """Raised when two return series of unequal length are paired."""


class DivisionError(CovarianceEngineError, ZeroDivisionError):
    """Raised when a zero price would be used as a return denominator."""
