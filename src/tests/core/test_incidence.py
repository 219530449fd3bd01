"""
Tests for the combinatorial layer (operators/incidence.py)
===========================================================

Unique edges, degree checks, orientation signs, patches, curves and
facet components.

Run: python -m pytest tests/core/test_incidence.py -v
"""

import pytest
import numpy as np

from winding_core.builders import build_box, build_icosahedron, build_edge_wedges
from winding_core.operators.incidence import (
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
from winding_core.spec import InvalidTopologyError


# =============================================================================
# UNIQUE EDGE MAP
# =============================================================================

class TestUniqueEdgeMap:
    """Half-edge layout and grouping."""

    def test_box_counts(self):
        """Closed box: 36 half-edges, 18 unique edges, each of degree 2."""
        _, F = build_box()
        E, uE, EMAP, uE2E = unique_edge_map(F)

        assert E.shape == (36, 2)
        assert uE.shape == (18, 2)
        assert EMAP.shape == (36,)
        assert all(len(g) == 2 for g in uE2E)
        assert sum(len(g) for g in uE2E) == 3 * len(F)

    def test_half_edge_is_opposite_corner(self):
        """Half-edge c·m + f runs F[f,(c+1)%3] → F[f,(c+2)%3]."""
        _, F = build_icosahedron()
        E, _, _, _ = unique_edge_map(F)
        m = len(F)
        for f in range(m):
            for c in range(3):
                assert tuple(E[c * m + f]) == (F[f, (c + 1) % 3], F[f, (c + 2) % 3])

    def test_emap_and_uE2E_agree(self):
        """uE[EMAP[ei]] is the sorted half-edge, and ei is listed in uE2E."""
        _, F = build_icosahedron()
        E, uE, EMAP, uE2E = unique_edge_map(F)

        assert np.all(uE[:, 0] < uE[:, 1]), "Unique edges must be sorted (s < d)"
        assert np.array_equal(uE[EMAP], np.sort(E, axis=1))
        for u, group in enumerate(uE2E):
            assert all(EMAP[ei] == u for ei in group)

    def test_empty(self):
        E, uE, EMAP, uE2E = unique_edge_map(np.zeros((0, 3), dtype=int))
        assert len(E) == 0 and len(uE) == 0 and len(EMAP) == 0
        assert uE2E == []


# =============================================================================
# DEGREE CHECKS
# =============================================================================

def test_degree_histogram_box():
    _, F = build_box()
    _, _, _, uE2E = unique_edge_map(F)
    result = edge_degree_histogram(uE2E)

    assert result['valid']
    assert result['histogram'] == {2: 18}
    assert result['n_manifold'] == 18
    assert result['n_non_manifold'] == 0


def test_degree_histogram_touching_boxes(touching_boxes):
    """The shared edge is the only non-manifold edge, of degree 4."""
    _, _, _, uE2E = unique_edge_map(touching_boxes['F'])
    result = edge_degree_histogram(uE2E)

    assert result['valid']
    assert result['n_non_manifold'] == 1
    assert result['max'] == 4


def test_degree_histogram_edge_wedges():
    """Three solids around one edge: a single edge of degree 6."""
    _, _, _, uE2E = unique_edge_map(build_edge_wedges()['F'])
    result = edge_degree_histogram(uE2E)

    assert result['valid']
    assert result['histogram'] == {2: 15, 6: 1}


def test_single_triangle_rejected():
    """Every edge of a lone triangle has degree 1."""
    F = np.array([[0, 1, 2]])
    _, uE, _, uE2E = unique_edge_map(F)

    result = edge_degree_histogram(uE2E)
    assert not result['valid']
    assert len(result['odd_edges']) == 3

    with pytest.raises(InvalidTopologyError, match="odd number of faces"):
        check_even_degree(uE2E, uE)


def test_open_box_rejected():
    """Removing one triangle leaves three boundary edges."""
    _, F = build_box()
    _, uE, _, uE2E = unique_edge_map(F[1:])
    with pytest.raises(InvalidTopologyError):
        check_even_degree(uE2E, uE)


# =============================================================================
# ORIENTATION
# =============================================================================

def test_positive_orientation_sign():
    """Face (0,1,2) traverses 2 → 0, so it is positive for (s, d) = (0, 2)."""
    face = [0, 1, 2]
    assert is_positively_oriented(face, 0, 2)
    assert not is_positively_oriented(face, 0, 1)
    assert not is_positively_oriented(face, 1, 2)


def test_positive_orientation_missing_edge():
    with pytest.raises(ValueError, match="does not belong"):
        is_positively_oriented([0, 1, 2], 0, 3)


def test_signed_face_index():
    F = np.array([[3, 4, 5], [0, 1, 2]])
    assert signed_face_index(F, 1, 0, 2) == 2
    assert signed_face_index(F, 1, 1, 2) == -2


def test_orientable(unit_box, flipped_tets):
    _, uE, _, uE2E = unique_edge_map(unit_box['F'])
    assert is_orientable(unit_box['F'], uE, uE2E)

    _, uE, _, uE2E = unique_edge_map(flipped_tets['F'])
    assert not is_orientable(flipped_tets['F'], uE, uE2E), \
        "A flipped face must break edge orientation balance"


# =============================================================================
# PATCHES, CURVES, COMPONENTS
# =============================================================================

def test_single_patch_closed_surface(unit_box):
    _, _, _, uE2E = unique_edge_map(unit_box['F'])
    n_patches, P = extract_manifold_patches(unit_box['F'], uE2E)
    assert n_patches == 1
    assert np.all(P == 0)


def test_touching_boxes_decomposition(touching_boxes):
    """Two patches, one curve of one edge, one facet component."""
    F = touching_boxes['F']
    _, uE, _, uE2E = unique_edge_map(F)

    n_patches, P = extract_manifold_patches(F, uE2E)
    assert n_patches == 2
    # Patches coincide with the two boxes
    for label in (0, 1):
        assert len(np.unique(P[touching_boxes['labels'] == label])) == 1

    curves = extract_non_manifold_edge_curves(uE, uE2E)
    assert len(curves) == 1
    assert len(curves[0]) == 1
    assert len(uE2E[curves[0][0]]) == 4

    n_components, C = facet_components(F, uE2E)
    assert n_components == 1
    assert np.all(C == 0)


def test_nested_boxes_two_components(nested_boxes):
    _, _, _, uE2E = unique_edge_map(nested_boxes['F'])
    n_components, C = facet_components(nested_boxes['F'], uE2E)
    assert n_components == 2
    assert np.bincount(C).tolist() == [12, 12]


class TestCurveChaining:
    """Curve extraction only looks at edge degrees, so degrees are faked."""

    @staticmethod
    def _curves(edges):
        uE = np.array(edges)
        uE2E = [[0, 1, 2, 3]] * len(edges)
        return extract_non_manifold_edge_curves(uE, uE2E)

    def test_open_chain(self):
        curves = self._curves([(0, 1), (1, 2), (2, 3)])
        assert len(curves) == 1
        assert curves[0] in ([0, 1, 2], [2, 1, 0])

    def test_closed_loop(self):
        curves = self._curves([(10, 11), (11, 12), (10, 12)])
        assert len(curves) == 1
        assert sorted(curves[0]) == [0, 1, 2]

    def test_junction_breaks_curve(self):
        """Three non-manifold edges at one vertex give three curves."""
        curves = self._curves([(20, 21), (20, 22), (20, 23)])
        assert sorted(map(tuple, curves)) == [(0,), (1,), (2,)]

    def test_manifold_edges_ignored(self):
        uE = np.array([(0, 1), (1, 2)])
        uE2E = [[0, 1], [2, 3, 4, 5]]
        assert extract_non_manifold_edge_curves(uE, uE2E) == [[1]]


def test_patch_labels_mixed_raises(unit_box):
    _, _, _, uE2E = unique_edge_map(unit_box['F'])
    n_patches, P = extract_manifold_patches(unit_box['F'], uE2E)

    labels = np.zeros(12, dtype=int)
    assert patch_labels(P, labels, n_patches).tolist() == [0]

    labels[5] = 1
    with pytest.raises(InvalidTopologyError, match="mixes labels"):
        patch_labels(P, labels, n_patches)


def test_build_topology_from_arrangement(touching_boxes):
    topo = build_topology_from_arrangement(touching_boxes)

    assert topo['n_patches'] == 2
    assert sorted(topo['patch_labels'].tolist()) == [0, 1]
    assert len(topo['curves']) == 1
    assert set(topo) == {'uE', 'uE2E', 'n_patches', 'P', 'patch_labels', 'curves'}
