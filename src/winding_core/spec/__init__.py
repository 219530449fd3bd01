"""Constants, arrangement contract and error types."""

from .constants import (
    INVALID,
    FRONT,
    BACK,
    EPS_ZERO,
    EPS_CLOSE,
    EPS_ANGLE,
    VERTEX_ROUND,
    METHOD_PATCH,
    METHOD_CELL,
    METHODS,
)
from .errors import (
    InvalidTopologyError,
    PropagationError,
    WindingInvariantError,
    InconsistentWindingError,
)
from .structures import validate_arrangement, create_arrangement, label_count
