"""
WINDING_CORE - Winding number propagation for mesh arrangements
===============================================================

NO robust predicates. NO mesh repair. NO boolean evaluation.

Structure:
    spec/         - Constants, arrangement contract, errors
    operators/    - Unique edges, patches, curves, components, cell parity
    analysis/     - Angular order, outer face, nearest face, cells
    propagation/  - Patch-wise and cell-wise propagation, nesting
    builders/     - Closed solids and test arrangements
    io/           - Debug mesh export

Entry point:
    W, is_consistent = propagate_winding_numbers(V, F, labels)

Feb 2026
"""

from . import spec
from . import operators
from . import analysis
from . import propagation
from . import builders

from .propagation import propagate_winding_numbers, propagate_single_component

__version__ = "0.1.0"
