"""
mesh-winding Source Code
========================

Modules:
    winding_core - Winding number propagation for mesh arrangements
    tests        - Test suite

Requirements:
    Python >= 3.9
    numpy >= 1.20    (np.unique with axis and return_inverse)
    scipy >= 1.8     (csgraph connected_components on csr input)
    trimesh >= 3.9   (triangles.closest_point, mesh export)
"""

import sys

if sys.version_info < (3, 9):
    raise ImportError(f"mesh-winding requires Python >= 3.9, got {sys.version}")

import numpy as np
import scipy
import trimesh


def _major_minor(version):
    return tuple(int(p) for p in version.split('.')[:2] if p.isdigit())


_REQUIREMENTS = (
    ("numpy", np, (1, 20)),
    ("scipy", scipy, (1, 8)),
    ("trimesh", trimesh, (3, 9)),
)

for _name, _module, _minimum in _REQUIREMENTS:
    if _major_minor(_module.__version__) < _minimum:
        raise ImportError(
            f"mesh-winding requires {_name} >= {'.'.join(map(str, _minimum))}, "
            f"got {_module.__version__}"
        )
