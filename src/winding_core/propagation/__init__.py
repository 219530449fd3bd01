"""
Winding number propagation - depends on analysis and operators.

Two interchangeable strategies per facet component:
    patch_wise: BFS over patches around ordered intersection curves (default)
    cell_wise:  BFS over the cell graph

followed by nesting correction between components.
"""

from .patch_wise import (
    derive_neighbor_winding,
    seed_outer_patch,
    closure_mismatches,
    propagate_patch_wise,
)

from .cell_wise import (
    infinity_cell,
    propagate_cells,
    cell_to_face_winding,
    propagate_cell_wise,
)

from .nesting import (
    sample_point,
    ambient_corrections,
    apply_nesting_correction,
)

from .propagate import (
    propagate_single_component,
    propagate_winding_numbers,
)
