"""
Winding Number Propagation — public entry points
=================================================

    propagate_winding_numbers(V, F, labels)  →  (W, is_consistent)

W[f, 2k + FRONT] / W[f, 2k + BACK] are the winding numbers of label k
just in front of / just behind face f.

PIPELINE:
    1. Unique edges; reject odd-degree edges before anything else
    2. Split into facet components
    3. Per component: patches, curves, outer face, then
           method="patch": patch-wise BFS around ordered curves
           method="cell":  cell decomposition + cell graph BFS
    4. Scatter into one (m, 2·L) table, missing label columns stay 0
    5. Nesting correction between components

INCONSISTENCY:
    A component that fails closure (patch) or parity (cell) is logged and
    the best-effort result is kept; is_consistent becomes False.
        strict=True    raise InconsistentWindingError instead
        dump_dir=path  write the offending component / cells there
"""

import logging
import numpy as np
from typing import Tuple

from ..spec.constants import METHOD_PATCH, METHODS
from ..spec.errors import InconsistentWindingError
from ..spec.structures import create_arrangement
from ..operators.incidence import (
    unique_edge_map,
    check_even_degree,
    facet_components,
    build_topology_from_arrangement,
    is_orientable,
)
from ..operators.parity import cells_on_cycle
from ..analysis.predicates import outer_face
from ..analysis.curve_order import order_curves
from ..analysis.cell_topology import extract_cells
from ..io.mesh_writer import dump_component, dump_cells
from .patch_wise import propagate_patch_wise
from .cell_wise import propagate_cell_wise
from .nesting import apply_nesting_correction

logger = logging.getLogger(__name__)


def _check_method(method: str) -> None:
    if method not in METHODS:
        raise ValueError(f"Unknown method {method!r}, expected one of {METHODS}")


def propagate_single_component(V, F, labels=None, method: str = METHOD_PATCH,
                               dump_dir=None) -> Tuple[np.ndarray, bool]:
    """
    Winding numbers of one facet component, relative to its own infinity.

    Args:
        V: (n, 3) vertices
        F: (m, 3) faces, all connected through shared edges
        labels: (m,) per-face labels (default: all 0)
        method: "patch" or "cell"
        dump_dir: write odd-cycle cells here when the cell graph is not bipartite

    Returns:
        W: (m, 2·L) int, L = max(labels) + 1
        is_consistent: bool

    Raises:
        InvalidTopologyError: odd-degree edge or mixed-label patch
        PropagationError: unreachable patch or cell
    """
    _check_method(method)
    arr = create_arrangement(V, F, labels, name="component")
    V, F = arr['V'], arr['F']
    topo = build_topology_from_arrangement(arr)
    P = topo['P']
    labels_per_patch = topo['patch_labels']

    fid, flipped = outer_face(V, F)
    outer_patch = int(P[fid])

    if method == METHOD_PATCH:
        orders, orientations, patch_curves = order_curves(
            V, F, topo['uE'], topo['uE2E'], topo['curves'], P, topo['n_patches'])
        patch_W, is_consistent = propagate_patch_wise(
            topo['n_patches'], labels_per_patch, orders, orientations,
            patch_curves, outer_patch, flipped)
        return patch_W[P], is_consistent

    if not is_orientable(F, topo['uE'], topo['uE2E']):
        logger.warning("%s: faces are not consistently oriented", arr['name'])

    n_cells, per_patch_cells = extract_cells(V, F, P, topo['uE'], topo['uE2E'], topo['curves'])
    W, is_consistent, parity = propagate_cell_wise(
        P, labels_per_patch, per_patch_cells, n_cells, outer_patch, flipped)

    if parity['odd_cycle'] and dump_dir is not None:
        dump_cells(dump_dir, V, F, cells_on_cycle(per_patch_cells, P, parity['odd_cycle']))

    return W, is_consistent


def propagate_winding_numbers(V, F, labels=None, method: str = METHOD_PATCH,
                              strict: bool = False,
                              dump_dir=None) -> Tuple[np.ndarray, bool]:
    """
    Winding numbers of every label on both sides of every face.

    Args:
        V: (n, 3) vertices
        F: (m, 3) faces
        labels: (m,) per-face input solid id (default: all 0)
        method: "patch" (default) or "cell"
        strict: raise InconsistentWindingError on an inconsistent component
        dump_dir: directory for debug meshes of inconsistent components

    Returns:
        W: (m, 2·L) int
        is_consistent: True if every component passed verification

    Raises:
        InvalidTopologyError: odd-degree edge (before any propagation),
                              mixed-label patch, malformed arrays
        PropagationError: unreachable patch or cell
        InconsistentWindingError: only when strict=True
    """
    _check_method(method)
    arr = create_arrangement(V, F, labels, name="input")
    V, F, labels = arr['V'], arr['F'], arr['labels']
    n_labels = arr['n_labels']

    _, uE, _, uE2E = unique_edge_map(F)
    check_even_degree(uE2E, uE)

    W = np.zeros((len(F), 2 * n_labels), dtype=np.int64)
    if len(F) == 0:
        return W, True

    n_components, C = facet_components(F, uE2E)
    components = [np.where(C == i)[0] for i in range(n_components)]
    logger.debug("%d faces, %d labels, %d components, method=%s",
                 len(F), n_labels, n_components, method)

    all_consistent = True
    for i, comp in enumerate(components):
        W_comp, is_consistent = propagate_single_component(
            V, F[comp], labels[comp], method=method, dump_dir=dump_dir)
        W[comp, :W_comp.shape[1]] = W_comp

        if not is_consistent:
            all_consistent = False
            logger.warning("Component %d (%d faces): winding numbers are inconsistent",
                           i, len(comp))
            if dump_dir is not None:
                dump_component(dump_dir, V, F[comp])
            if strict:
                raise InconsistentWindingError(
                    f"Component {i} ({len(comp)} faces) failed {method}-wise verification"
                )

    if n_components > 1:
        W = apply_nesting_correction(V, F, W, components)

    return W, all_consistent
