"""Combinatorial operators - unique edges, patches, curves, components, cell parity."""

from .incidence import (
    unique_edge_map,
    edge_degree_histogram,
    check_even_degree,
    is_positively_oriented,
    signed_face_index,
    is_orientable,
    facet_components,
    extract_manifold_patches,
    extract_non_manifold_edge_curves,
    patch_labels,
    build_topology_from_arrangement,
)

from .parity import (
    build_cell_adjacency,
    check_cell_parity,
    cells_on_cycle,
)
