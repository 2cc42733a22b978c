"""Mutable state of one puzzle: graph geometry plus session counters."""
import math
from datetime import datetime

import numpy as np

from .geometry import clamp_positions, count_crossings
from .scoring import (Metrics, balance_bonus, complexity_score, difficulty_multiplier,
                      planarity_percent, total_score)

NODE_COLOR = (255, 215, 0)
HINT_COLOR = (255, 255, 102)
MIN_RADIUS, MAX_RADIUS = 8, 14
RADIUS_FRAC = 0.012
DEFAULT_DIFFICULTY = "Easy"


def node_radius(width):
    return max(MIN_RADIUS, min(MAX_RADIUS, width * RADIUS_FRAC))


def _check_edges(edges, node_count):
    out = []
    for e in edges:
        a, b = (int(v) for v in e)
        if a == b or not (0 <= a < node_count and 0 <= b < node_count):
            raise ValueError(f"edge {e!r} is invalid for {node_count} nodes")
        out.append((a, b))
    return out


class Session:
    """
    Nodes, edges and counters for the graph currently on screen.

    `generation` increases on every reset; work scheduled against an older
    generation (a solver run, a hint reversion) must not touch this graph.
    """

    def __init__(self, pos, edges, width, height, difficulty=DEFAULT_DIFFICULTY):
        self.width = float(width)
        self.height = float(height)
        self.difficulty = difficulty or DEFAULT_DIFFICULTY
        self.multiplier = difficulty_multiplier(self.difficulty)
        self.generation = 0
        self._load_graph(pos, edges)

    def _load_graph(self, pos, edges):
        pos = np.array(pos, dtype=float).reshape(-1, 2)
        self.edges = _check_edges(edges, len(pos))
        self.pos = clamp_positions(pos, self.width, self.height)
        self.colors = [NODE_COLOR] * len(self.pos)
        self.moves = 0
        self.timer = 0
        self.score = 0
        self.planarity = 0
        self.solved = False
        self.initial_crossings = max(1, self.crossings())

    def reset(self, pos, edges):
        """Replace the graph and start a fresh session on it."""
        self._load_graph(pos, edges)
        self.generation += 1

    @property
    def node_count(self):
        return len(self.pos)

    @property
    def radius(self):
        return node_radius(self.width)

    def crossings(self):
        return count_crossings(self.pos, self.edges)

    def complexity(self):
        return complexity_score(self.node_count, len(self.edges), self.multiplier)

    def balance(self):
        return balance_bonus(self.pos, self.edges, self.width, self.height)

    def metrics(self, crossings=None):
        if crossings is None:
            crossings = self.crossings()
        planarity = planarity_percent(self.initial_crossings, crossings)
        complexity = self.complexity()
        balance = self.balance()
        score = total_score(planarity, complexity, balance, self.moves, self.timer)
        return Metrics(crossings, planarity, score, complexity, balance)

    def resize(self, width, height):
        self.width = float(width)
        self.height = float(height)
        clamp_positions(self.pos, self.width, self.height)

    # ---------------------------- persistence ---------------------------------

    def snapshot(self):
        return {
            'nodes': [{'x': float(x), 'y': float(y)} for x, y in self.pos],
            'edges': [[a, b] for a, b in self.edges],
            'moves': self.moves,
            'timer': self.timer,
            'score': self.score,
            'planarity': self.planarity,
            'difficulty': self.difficulty,
            'initialCrossings': self.initial_crossings,
            'solved': self.solved,
            'width': self.width,
            'height': self.height,
        }

    @classmethod
    def from_snapshot(cls, data, width, height, difficulty=None):
        """Rebuild a session from `snapshot()` output; raises ValueError if malformed."""
        try:
            pos = [(float(n['x']), float(n['y'])) for n in data['nodes']]
            edges = [tuple(e) for e in data.get('edges') or []]
        except (KeyError, TypeError) as e:
            raise ValueError(f"malformed snapshot: {e}") from e
        if not pos:
            raise ValueError("snapshot has no nodes")
        if not all(math.isfinite(v) for p in pos for v in p):
            raise ValueError("snapshot has non-finite positions")
        s = cls(pos, edges, width, height, difficulty or data.get('difficulty'))
        s.moves = int(data.get('moves') or 0)
        s.timer = int(data.get('timer') or 0)
        s.score = int(data.get('score') or 0)
        s.planarity = int(data.get('planarity') or 0)
        s.initial_crossings = max(1, int(data.get('initialCrossings') or s.initial_crossings))
        s.solved = bool(data.get('solved', False))
        return s

    def history_record(self, metrics=None, when=None):
        metrics = metrics or self.metrics()
        when = when or datetime.now()
        return {
            'difficulty': self.difficulty,
            'score': metrics.score,
            'moves': self.moves,
            'time': f"{self.timer}s",
            'date': when.isoformat(sep=' ', timespec='seconds'),
            'nodes': [{'x': round(float(x) / self.width, 3), 'y': round(float(y) / self.height, 3)}
                      for x, y in self.pos],
            'edges': [[a, b] for a, b in self.edges],
            'complexity': metrics.complexity,
            'balanceBonus': metrics.balance,
        }
