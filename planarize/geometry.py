"""Segment intersection and crossing counts over a fixed node/edge set."""
import numpy as np

CLAMP_INSET = 10.0


def _ccw(a, b, c):
    return (c[1] - a[1]) * (b[0] - a[0]) > (b[1] - a[1]) * (c[0] - a[0])


def segments_intersect(p1, p2, p3, p4):
    """True iff segment p1-p2 properly crosses segment p3-p4.

    Collinear or touching segments fall through the strict comparisons and
    count as non-crossing.
    """
    return (_ccw(p1, p3, p4) != _ccw(p2, p3, p4)
            and _ccw(p1, p2, p3) != _ccw(p1, p2, p4))


def _adjacent(e1, e2):
    a1, a2 = e1
    b1, b2 = e2
    return a1 == b1 or a1 == b2 or a2 == b1 or a2 == b2


def crossing_pairs(pos, edges):
    """Yield (i, j) edge-index pairs, i < j, whose segments cross."""
    for i in range(len(edges)):
        a1, a2 = edges[i]
        for j in range(i + 1, len(edges)):
            if _adjacent(edges[i], edges[j]):
                continue
            b1, b2 = edges[j]
            if segments_intersect(pos[a1], pos[a2], pos[b1], pos[b2]):
                yield i, j


def count_crossings(pos, edges):
    return sum(1 for _ in crossing_pairs(pos, edges))


def edge_is_crossed(pos, edges, edge):
    """Whether `edge` crosses any edge it shares no endpoint with."""
    a, b = edge
    for other in edges:
        if _adjacent(edge, other):
            continue
        c, d = other
        if segments_intersect(pos[a], pos[b], pos[c], pos[d]):
            return True
    return False


def node_crossing_counts(pos, edges):
    """Per-node crossing involvement: each crossing adds 1 to its 4 endpoints."""
    counts = [0] * len(pos)
    for i, j in crossing_pairs(pos, edges):
        for nid in edges[i] + edges[j]:
            counts[nid] += 1
    return counts


def clamp_positions(pos, width, height, inset=CLAMP_INSET):
    """Clamp every row of `pos` into the inset viewport, in place."""
    np.clip(pos[:, 0], inset, width - inset, out=pos[:, 0])
    np.clip(pos[:, 1], inset, height - inset, out=pos[:, 1])
    return pos


def clamp_point(x, y, width, height, inset=CLAMP_INSET):
    return (max(inset, min(width - inset, x)),
            max(inset, min(height - inset, y)))
