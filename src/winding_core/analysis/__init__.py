"""
Analysis functions - geometry on top of the operators layer.

Separated from the combinatorics to maintain clean layering:
    builders → spec
    analysis → operators → spec
    propagation → analysis → operators → spec

Includes:
- predicates: angular order around an edge, outer face, nearest face
- curve_order: cyclic (patch, orientation) order around intersection curves
- cell_topology: patch sides merged into volumetric cells
"""

from .predicates import (
    face_normals,
    order_faces_around_edge,
    outer_face,
    nearest_face,
)

from .curve_order import (
    side_facing,
    edge_incidences,
    order_edge,
    order_curves,
)

from .cell_topology import extract_cells
