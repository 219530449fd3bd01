"""Builders - closed triangulated solids and test arrangements."""

from .polyhedra import (
    orient_outward,
    build_box,
    build_tetrahedron,
    build_octahedron,
    build_icosahedron,
    merge_parts,
    build_nested_boxes,
    build_nested_icosahedra,
    build_disjoint_boxes,
    build_edge_touching_boxes,
    build_flipped_tetrahedra,
    build_edge_wedges,
    build_nested_wedges,
)
