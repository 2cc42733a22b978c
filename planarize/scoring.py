"""
Planarity percentage and composite score.

Every function here is pure: given the same geometry and counters it returns
the same numbers, so a saved game can be re-scored exactly.
"""
import re
from collections import namedtuple

import numpy as np

EXPERT_MULT = 1.6
HARD_MULT = 1.3
DEFAULT_MULT = 1.0

PLANARITY_WEIGHT = 12
MOVE_PENALTY = 2
BALANCE_MIN, BALANCE_MAX = 40, 100

Metrics = namedtuple('Metrics', 'crossings planarity score complexity balance')


def difficulty_multiplier(label):
    label = label or ""
    if re.search("expert", label, re.IGNORECASE):
        return EXPERT_MULT
    if re.search("hard", label, re.IGNORECASE):
        return HARD_MULT
    return DEFAULT_MULT


def planarity_percent(initial_crossings, crossings):
    initial = max(1, initial_crossings)
    progress = max(0, initial - crossings)
    return int(round(100 * progress / initial))


def complexity_score(node_count, edge_count, multiplier=DEFAULT_MULT):
    return int(round((6 * edge_count + 2 * node_count) * multiplier))


def edge_lengths(pos, edges):
    if not edges:
        return np.zeros(0)
    idx = np.asarray(edges, dtype=int)
    return np.linalg.norm(pos[idx[:, 1]] - pos[idx[:, 0]], axis=1)


def balance_bonus(pos, edges, width, height):
    """Near 100 for uniform edge lengths, decaying toward 40 as their variance grows."""
    if not edges:
        return 0
    var = float(np.var(edge_lengths(pos, edges)))
    scale = max(width, height)
    nv = var / (scale * 2)
    smooth = 100.0 / (1.0 + (nv * 25.0) ** 1.3)
    return int(round(max(BALANCE_MIN, min(BALANCE_MAX, smooth))))


def total_score(planarity, complexity, balance, moves, seconds):
    raw = planarity * PLANARITY_WEIGHT + complexity + balance - MOVE_PENALTY * moves - seconds
    return max(0, int(round(raw)))
