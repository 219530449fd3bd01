"""
Nesting Correction Across Facet Components
==========================================

Each facet component is propagated as if it were alone in space, so its
winding numbers are relative to its own infinity. A component lying
inside another must inherit the winding vector of the region of the
other component that contains it.

For every ordered pair (i, j), i != j:
    1. sample a point of component j (centroid of its first face)
    2. nearest face of component i to that point, and the side it lies on
    3. read that face's FRONT or BACK half of the winding vector
    4. accumulate it onto component j

All corrections are read from the UNCORRECTED tables and applied at the
end, so the result does not depend on component order.

NOTE:
    Components do not intersect, so a single sample point decides
    containment for the whole component.
"""

import logging
import numpy as np
from typing import List

from ..spec.constants import FRONT, BACK
from ..analysis.predicates import nearest_face

logger = logging.getLogger(__name__)


def sample_point(V: np.ndarray, F: np.ndarray, face_ids: np.ndarray) -> np.ndarray:
    """Centroid of the first face of a component."""
    return np.asarray(V, dtype=float)[np.asarray(F)[face_ids[0]]].mean(axis=0)


def ambient_corrections(V: np.ndarray, F: np.ndarray, W: np.ndarray,
                        components: List[np.ndarray]) -> np.ndarray:
    """
    Winding vector of the region around each component, due to the others.

    Args:
        V, F: full mesh
        W: (m, 2·L) uncorrected face winding table
        components: face indices of each component

    Returns:
        corrections: (n_components, L) int
    """
    n_components = len(components)
    n_labels = W.shape[1] // 2
    corrections = np.zeros((n_components, n_labels), dtype=np.int64)
    if n_components < 2:
        return corrections

    samples = np.array([sample_point(V, F, comp) for comp in components])
    F = np.asarray(F)

    for i, comp_i in enumerate(components):
        others = [j for j in range(n_components) if j != i]
        fids, on_front = nearest_face(V, F[comp_i], samples[others])
        for j, fid, front in zip(others, fids, on_front):
            side = FRONT if front else BACK
            corrections[j] += W[comp_i[fid], side::2]

    logger.debug("Nesting corrections for %d components: %s",
                 n_components, corrections.tolist())
    return corrections


def apply_nesting_correction(V: np.ndarray, F: np.ndarray, W: np.ndarray,
                             components: List[np.ndarray]) -> np.ndarray:
    """
    Add each component's ambient winding vector to both sides of its faces.

    Returns:
        corrected copy of W
    """
    corrections = ambient_corrections(V, F, W, components)
    W = W.copy()
    for comp, correction in zip(components, corrections):
        W[comp] += np.repeat(correction, 2)
    return W
