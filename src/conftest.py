"""
Pytest Configuration
====================

Automatically loaded by pytest. Adds src/ to sys.path
so all modules are importable without installation, and
provides the shared test arrangements as fixtures.

Portable - works wherever the project is cloned.

Usage:
    cd src
    pytest tests/ -v
"""

import sys
from pathlib import Path

import pytest


def pytest_configure(config):
    """Add src/ to path before any imports happen."""
    src_root = Path(__file__).parent
    if str(src_root) not in sys.path:
        sys.path.insert(0, str(src_root))


# Also do it at module level for non-pytest usage
src_root = Path(__file__).parent
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))


# =============================================================================
# SHARED ARRANGEMENTS
# =============================================================================

@pytest.fixture
def unit_box():
    """Single closed box [0,1]³, label 0."""
    from winding_core.builders import build_box, merge_parts
    return merge_parts([(*build_box(), 0)], name="unit_box")


@pytest.fixture
def touching_boxes():
    """Two boxes (labels 0 and 1) sharing one edge."""
    from winding_core.builders import build_edge_touching_boxes
    return build_edge_touching_boxes()


@pytest.fixture
def nested_boxes():
    """Two disjoint boxes, one inside the other, both label 0."""
    from winding_core.builders import build_nested_boxes
    return build_nested_boxes()


@pytest.fixture
def flipped_tets():
    """Two tetrahedra sharing an edge, one face of label 1 flipped."""
    from winding_core.builders import build_flipped_tetrahedra
    return build_flipped_tetrahedra()
