"""
Geometric Predicates — Angular Order, Outer Face, Nearest Face
==============================================================

Floating-point renditions of the three geometric questions the winding
number propagation asks. They are NOT exact: ties and near-degenerate
configurations are resolved by fixed rules, not by exact arithmetic.

Functions:
  1. Normals — face_normals
  2. Angular order — order_faces_around_edge
  3. Outer face — outer_face
  4. Containment — nearest_face (closest points via trimesh.triangles)

ANGULAR ORDER CONVENTION:
    For the directed edge s → d, faces are sorted by the angle of their
    opposite vertex about the axis (s - d), right-handed. With this order:

        positive face (traverses d → s): normal points to the NEXT face
        negative face (traverses s → d): normal points to the PREVIOUS face

    Every cyclic-order consumer relies on this pairing.

Feb 2026
"""

import warnings
import numpy as np
import trimesh
from typing import Tuple

from ..spec.constants import EPS_ZERO, EPS_CLOSE, EPS_ANGLE


# =====================================================================
# 1. NORMALS
# =====================================================================

def face_normals(V: np.ndarray, F: np.ndarray) -> np.ndarray:
    """
    Unit normals by the right-hand rule over (F[:,0], F[:,1], F[:,2]).

    Zero-area faces get a zero normal.

    Returns:
        (m, 3) array
    """
    V = np.asarray(V, dtype=float)
    F = np.asarray(F)
    if len(F) == 0:
        return np.zeros((0, 3))
    a, b, c = V[F[:, 0]], V[F[:, 1]], V[F[:, 2]]
    normals = np.cross(b - a, c - a)
    norms = np.linalg.norm(normals, axis=1)
    safe = np.where(norms > EPS_ZERO, norms, 1.0)
    return np.where((norms > EPS_ZERO)[:, None], normals / safe[:, None], 0.0)


# =====================================================================
# 2. ANGULAR ORDER AROUND AN EDGE
# =====================================================================

def order_faces_around_edge(V: np.ndarray, F: np.ndarray, s: int, d: int,
                            signed_faces) -> np.ndarray:
    """
    Cyclic angular order of the faces incident to edge (s, d).

    Args:
        V: (n, 3) vertices
        F: (m, 3) faces
        s, d: edge end points, defining the directed edge s → d
        signed_faces: ±(f + 1) per incident face, positive when face f
                      traverses d → s

    Returns:
        order: (k,) permutation, order[i] = index into signed_faces of the
               i-th face around the edge

    NOTE:
        The starting face of the cycle is arbitrary. Equal angles (duplicate
        or coplanar faces) are broken by sign, negative first.
    """
    V = np.asarray(V, dtype=float)
    signed_faces = np.asarray(signed_faces, dtype=np.int64)
    if len(signed_faces) < 2:
        raise ValueError(f"Need at least 2 faces around edge ({s},{d}), got {len(signed_faces)}")

    fids = np.abs(signed_faces) - 1
    opposite = np.asarray(F)[fids].sum(axis=1) - s - d

    origin = V[d]
    axis = V[s] - origin
    axis_len = np.linalg.norm(axis)
    if axis_len < EPS_ZERO:
        raise ValueError(f"Degenerate edge ({s},{d}): zero length")
    axis = axis / axis_len

    rel = V[opposite] - origin
    perp = rel - np.outer(rel @ axis, axis)
    perp_len = np.linalg.norm(perp, axis=1)
    if np.any(perp_len < EPS_ANGLE * axis_len):
        bad = int(fids[np.argmin(perp_len)])
        warnings.warn(
            f"Face {bad} is degenerate at edge ({s},{d}): opposite vertex lies on the edge line. "
            f"Its angular position is arbitrary.",
            UserWarning
        )

    e1 = perp[np.argmax(perp_len)]
    e1 = e1 / max(np.linalg.norm(e1), EPS_ZERO)
    e2 = np.cross(axis, e1)

    angles = np.arctan2(perp @ e2, perp @ e1) % (2 * np.pi)
    return np.lexsort((np.sign(signed_faces), angles))


# =====================================================================
# 3. OUTER FACE
# =====================================================================

def outer_face(V: np.ndarray, F: np.ndarray, face_ids=None) -> Tuple[int, bool]:
    """
    A face on the outer hull of the faces in face_ids, and its orientation.

    Method:
        1. v* = vertex of maximal x among the selected faces
        2. among edges at v*, the one most perpendicular to x
        3. among faces around that edge, the one whose unit normal has
           the largest |n_x|

    Args:
        V: (n, 3) vertices
        F: (m, 3) faces
        face_ids: subset of faces to consider (default: all)

    Returns:
        (fid, flipped): fid indexes F; flipped is True when the face normal
        points toward -x, i.e. into the bounded side
    """
    V = np.asarray(V, dtype=float)
    F = np.asarray(F)
    if face_ids is None:
        face_ids = np.arange(len(F))
    face_ids = np.asarray(face_ids)
    if len(face_ids) == 0:
        raise ValueError("outer_face needs at least one face")

    verts = np.unique(F[face_ids].ravel())
    v_star = int(verts[np.argmax(V[verts, 0])])

    incident = face_ids[np.any(F[face_ids] == v_star, axis=1)]

    best_u, best_score = None, np.inf
    for fi in incident:
        for u in F[fi]:
            u = int(u)
            if u == v_star:
                continue
            direction = V[u] - V[v_star]
            length = np.linalg.norm(direction)
            if length < EPS_ZERO:
                continue
            score = abs(direction[0]) / length
            if score < best_score - EPS_CLOSE or (abs(score - best_score) <= EPS_CLOSE and u < best_u):
                best_u, best_score = u, score

    around = [int(fi) for fi in incident if best_u in F[fi]]
    normals = face_normals(V, F[around])
    k = int(np.argmax(np.abs(normals[:, 0])))
    return around[k], bool(normals[k, 0] < 0)


# =====================================================================
# 4. CONTAINMENT
# =====================================================================

def nearest_face(V: np.ndarray, F: np.ndarray, points) -> Tuple[np.ndarray, np.ndarray]:
    """
    For each query point, the nearest face and the side the point lies on.

    Among faces at (numerically) equal minimal distance - the query is
    nearest to a shared edge or vertex - the face whose normal is most
    aligned with the offset from its closest point wins.

    Args:
        V: (n, 3) vertices
        F: (m, 3) faces
        points: (q, 3) query points

    Returns:
        fids: (q,) face index per query
        on_front: (q,) True when the query lies on the side the face
                  normal points toward (outside a consistently oriented
                  closed surface)
    """
    V = np.asarray(V, dtype=float)
    F = np.asarray(F)
    points = np.atleast_2d(np.asarray(points, dtype=float))
    if len(F) == 0:
        raise ValueError("nearest_face needs at least one face")

    triangles = V[F]
    normals = face_normals(V, F)

    fids = np.zeros(len(points), dtype=np.int64)
    on_front = np.zeros(len(points), dtype=bool)
    for qi, p in enumerate(points):
        closest = trimesh.triangles.closest_point(triangles, np.tile(p, (len(F), 1)))
        offset = p - closest
        dist = np.linalg.norm(offset, axis=1)
        d_min = dist.min()
        candidates = np.where(dist <= d_min + EPS_CLOSE * max(1.0, d_min))[0]

        alignment = np.einsum('ij,ij->i', normals[candidates], offset[candidates])
        k = int(np.argmax(np.abs(alignment)))
        fids[qi] = candidates[k]
        on_front[qi] = alignment[k] >= 0

    return fids, on_front
