"""
Arrangement Contract - THE input every entry point accepts
==========================================================

All builders MUST return an arrangement dict conforming to this contract.
All propagators read V, F and labels from it, NEVER from loose arrays
that skipped validation.
"""

import numpy as np
from typing import Tuple, List

from .errors import InvalidTopologyError


class ArrangementContract:
    """
    Documents the required fields for an arrangement dict.

    Required fields:
        V : np.ndarray (n×3) float
            Vertex positions. Immutable once loaded.
        F : np.ndarray (m×3) int
            Triangles as ordered vertex triples. The order fixes the face
            normal (right-hand rule); a consistently oriented closed
            surface has outward normals.
        labels : np.ndarray (m,) int
            Non-negative id of the input solid each face came from.

    Optional metadata:
        name : str
            Human-readable name
        n_labels : int
            max(labels) + 1 (0 for an empty face list)
    """

    REQUIRED_FIELDS = ['V', 'F', 'labels']


def label_count(labels: np.ndarray) -> int:
    """Number of label columns a winding table needs: max(labels) + 1."""
    labels = np.asarray(labels)
    if labels.size == 0:
        return 0
    return int(labels.max()) + 1


def validate_arrangement(arr: dict, strict: bool = True) -> Tuple[bool, List[str]]:
    """
    Validate an arrangement dict against the contract.

    Args:
        arr: The arrangement dict to validate
        strict: If True, raise on errors

    Returns:
        (is_valid, list of error messages)

    Raises:
        InvalidTopologyError: if strict and any check fails
    """
    errors = []

    for field in ArrangementContract.REQUIRED_FIELDS:
        if field not in arr:
            errors.append(f"Missing required field: {field}")

    if errors and strict:
        raise InvalidTopologyError(f"Arrangement contract violation: {errors}")

    if 'V' in arr:
        V = np.asarray(arr['V'])
        if V.ndim != 2 or V.shape[1] != 3:
            errors.append(f"V must have shape (n, 3), got {V.shape}")

    if 'F' in arr:
        F = np.asarray(arr['F'])
        if F.ndim != 2 or F.shape[1] != 3:
            errors.append(f"F must have shape (m, 3), got {F.shape}")
        elif F.size > 0:
            if not np.issubdtype(F.dtype, np.integer):
                errors.append(f"F must hold integer vertex indices, got dtype {F.dtype}")
            n_V = len(arr['V']) if 'V' in arr else None
            if n_V is not None and (F.min() < 0 or F.max() >= n_V):
                bad = int(np.where((F < 0) | (F >= n_V))[0][0])
                errors.append(f"Face {bad}: vertex index out of bounds [0, {n_V - 1}]")
            degenerate = np.where((F[:, 0] == F[:, 1]) |
                                  (F[:, 1] == F[:, 2]) |
                                  (F[:, 2] == F[:, 0]))[0]
            if len(degenerate) > 0:
                errors.append(f"Face {int(degenerate[0])}: has repeated vertices")

    if 'labels' in arr and 'F' in arr:
        labels = np.asarray(arr['labels'])
        if labels.shape != (len(arr['F']),):
            errors.append(f"labels must have shape ({len(arr['F'])},), got {labels.shape}")
        elif labels.size > 0:
            if not np.issubdtype(labels.dtype, np.integer):
                errors.append(f"labels must be integers, got dtype {labels.dtype}")
            elif labels.min() < 0:
                errors.append(f"labels must be non-negative, got min={labels.min()}")

    if errors and strict:
        raise InvalidTopologyError(f"Arrangement contract violation: {errors}")

    return (len(errors) == 0, errors)


def create_arrangement(V, F, labels=None, name: str = "unnamed") -> dict:
    """
    Helper to create a contract-compliant arrangement dict.

    Args:
        V: Vertex positions (n×3)
        F: Triangles (m×3)
        labels: Per-face labels; all zero when omitted
        name: Human-readable name

    Returns:
        Contract-compliant arrangement dict
    """
    V = np.asarray(V, dtype=float)
    if V.size == 0:
        V = V.reshape(0, 3)
    F = np.asarray(F)
    if F.size == 0:
        F = F.reshape(0, 3).astype(np.int64)
    if labels is None:
        labels = np.zeros(len(F), dtype=np.int64)

    arr = {
        'V': V,
        'F': F,
        'labels': np.asarray(labels),
        'name': name,
    }

    validate_arrangement(arr, strict=True)

    arr['F'] = arr['F'].astype(np.int64)
    arr['labels'] = arr['labels'].astype(np.int64)
    arr['n_V'] = len(arr['V'])
    arr['n_F'] = len(arr['F'])
    arr['n_labels'] = label_count(arr['labels'])

    return arr
