"""Random node placement and random edge sets."""
import logging
import random

import numpy as np

logger = logging.getLogger(__name__)

MARGIN = 80.0
SMALL_VIEW_MARGIN_FRAC = 0.15
EDGE_PROBABILITY = 0.35
MIN_RANDOM_NODES, MAX_RANDOM_NODES = 5, 10


def set_seed(seed=None):
    if seed is None:
        seed = random.randrange(1 << 30)
    random.seed(seed)
    np.random.seed(seed & 0xFFFFFFFF)
    return seed


def placement_margin(width, height):
    return min(MARGIN, SMALL_VIEW_MARGIN_FRAC * min(width, height))


def random_node_count(rng=None):
    rng = rng or random
    return rng.randint(MIN_RANDOM_NODES, MAX_RANDOM_NODES)


def generate_graph(node_count, width, height, rng=None, edge_probability=EDGE_PROBABILITY):
    """
    Place `node_count` nodes uniformly inside the margin and include every
    pair (i, j), i < j, as an edge with probability `edge_probability`.

    Returns (pos, edges): an (N, 2) float array and a list of (i, j) tuples.
    There is no connectivity guarantee; self-loops and duplicate edges are
    impossible by construction.
    """
    if node_count < 1:
        raise ValueError(f"node_count must be positive, got {node_count}")
    rng = rng or random
    m = placement_margin(width, height)
    pos = np.array([(rng.uniform(m, width - m), rng.uniform(m, height - m))
                    for _ in range(node_count)], dtype=float)
    edges = []
    for i in range(node_count - 1):
        for j in range(i + 1, node_count):
            if rng.random() < edge_probability:
                edges.append((i, j))
    logger.debug("generated %d nodes, %d edges in %.0fx%.0f", node_count, len(edges), width, height)
    return pos, edges
