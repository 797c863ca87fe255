"""Exception types raised by sparsecore.

Structural problems (malformed offsets, out-of-range or duplicated indices)
are reported as :class:`SparseFormatError` when a pattern or matrix is
constructed. Operand shape problems in arithmetic are reported as
:class:`DimensionMismatch` before any output is allocated.
"""

import enum


class SparseError(Exception):
    """Base class for all sparsecore errors."""


class SparseFormatErrorKind(enum.Enum):
    """Which structural invariant a compressed or coordinate layout violates."""

    INVALID_OFFSET_ARRAY = "invalid offset array"
    INDEX_OUT_OF_BOUNDS = "index out of bounds"
    DUPLICATE_ENTRY = "duplicate entry"
    NONMONOTONIC_MINOR_INDICES = "nonmonotonic minor indices"


class SparseFormatError(SparseError, ValueError):
    """Invalid sparsity structure.

    Parameters
    ----------
    kind : SparseFormatErrorKind
        The violated invariant.
    message : str
        Human readable description.
    lane : int, optional
        Major lane in which the violation was found.
    index : int, optional
        Offending minor index (or offset value for offset errors).
    """

    def __init__(self, kind, message, lane=None, index=None):
        super().__init__(f"{kind.value}: {message}")
        self.kind = kind
        self.lane = lane
        self.index = index


class DimensionMismatch(SparseError, ValueError):
    """Operand extents are incompatible.

    ``expected`` and ``found`` hold the extent (or shape) the operation
    required and the one it received.
    """

    def __init__(self, expected, found, message=None):
        if message is None:
            message = f"dimension mismatch: expected {expected}, found {found}"
        super().__init__(message)
        self.expected = expected
        self.found = found


class EntryNotFound(SparseError, LookupError):
    """Raised when writing to a position that is not a structural entry."""

    def __init__(self, row, col):
        super().__init__(
            f"no structural entry at ({row}, {col}); "
            "the sparsity pattern cannot be changed in place"
        )
        self.row = row
        self.col = col
