"""
Auto-solve: a force-directed layout interleaved with stochastic local search.

The solver never runs to completion in one call. `step_frame()` executes one
small batch of iterations and returns, so the frame loop keeps drawing and
handling input between batches.

Per iteration every node pair repels with k / d^2 and every edge acts as a
spring toward a fixed rest length; positions move by force * lr with a
learning rate that anneals linearly over the iteration budget. On top of the
physics:

- targeted search: every `local_search_every` iterations the nodes involved
  in the most crossings get a few random nearby trial positions, and the
  best strictly-improving one is kept;
- jitter: every `jitter_every` iterations a few random nodes are nudged;
- stagnation escape: after `stagnation_limit` batches without a strict drop
  in crossings, a few nodes are thrown to fresh random positions.
"""
import enum
import logging
import random
from dataclasses import dataclass

import numpy as np

from .geometry import clamp_point, clamp_positions, count_crossings, node_crossing_counts

logger = logging.getLogger(__name__)


@dataclass
class SolverConfig:
    # Budget
    max_total_iterations: int = 6000
    iterations_per_frame: int = 5

    # Annealed step size
    lr_max: float = 0.035
    lr_min: float = 0.002

    # Physics
    repulsion: float = 1000.0
    min_dist2: float = 1e-4
    spring_k: float = 0.02
    rest_length: float = 110.0
    edge_eps: float = 1e-3
    inset: float = 10.0

    # Targeted local search
    local_search_every: int = 60
    local_search_nodes: int = 3
    local_search_attempts: int = 10
    local_radius_frac: float = 0.06

    # Exploration
    jitter_every: int = 200
    jitter_nodes: int = 3
    jitter_frac: float = 0.06
    stagnation_limit: int = 15
    relocate_max: int = 3
    relocate_margin: float = 40.0


class SolverState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


DONE_STATES = (SolverState.CONVERGED, SolverState.EXHAUSTED, SolverState.CANCELLED)


class AutoSolver:
    def __init__(self, session, config=None, rng=None):
        self.session = session
        self.config = config or SolverConfig()
        self.rng = rng or random
        self.token = session.generation
        self.state = SolverState.IDLE
        self.iterations = 0
        self.stagnation = 0
        self.last_crossings = session.crossings()

    @property
    def running(self):
        return self.state is SolverState.RUNNING

    @property
    def done(self):
        return self.state in DONE_STATES

    def _extent(self):
        return max(self.session.width, self.session.height)

    def start(self):
        if self.state is not SolverState.IDLE:
            return False
        self.state = SolverState.RUNNING
        self.last_crossings = self.session.crossings()
        logger.info("auto-solve started: %d nodes, %d edges, %d crossings",
                    self.session.node_count, len(self.session.edges), self.last_crossings)
        return True

    def learning_rate(self):
        cfg = self.config
        progress = self.iterations / max(1, cfg.max_total_iterations)
        return max(cfg.lr_min, cfg.lr_max * (1.0 - progress) + cfg.lr_min)

    # ------------------------------ physics ----------------------------------

    def forces(self):
        """Net repulsion + spring force on every node, shape (N, 2)."""
        cfg = self.config
        pos = self.session.pos
        diff = pos[:, None, :] - pos[None, :, :]
        dist2 = np.maximum((diff ** 2).sum(axis=2), cfg.min_dist2)
        dist = np.sqrt(dist2)
        # Diagonal terms have diff == 0 and drop out.
        f = (diff / dist[:, :, None] * (cfg.repulsion / dist2)[:, :, None]).sum(axis=1)

        if self.session.edges:
            idx = np.asarray(self.session.edges, dtype=int)
            a, b = idx[:, 0], idx[:, 1]
            d = pos[b] - pos[a]
            length = np.linalg.norm(d, axis=1) + cfg.edge_eps
            pull = (d / length[:, None]) * ((length - cfg.rest_length) * cfg.spring_k)[:, None]
            np.add.at(f, a, pull)
            np.add.at(f, b, -pull)
        return f

    def physics_step(self, lr=None):
        s = self.session
        if lr is None:
            lr = self.learning_rate()
        s.pos += self.forces() * lr
        clamp_positions(s.pos, s.width, s.height, self.config.inset)

    # ---------------------------- local search -------------------------------

    def local_improve(self, idx, attempts=None, max_disp=None):
        """
        Try random positions for node `idx` within `max_disp` of where it is and
        keep the best one that strictly lowers the crossing count. The node is
        left where it was if nothing helps. Returns the resulting count.
        """
        cfg = self.config
        s = self.session
        if attempts is None:
            attempts = cfg.local_search_attempts
        if max_disp is None:
            max_disp = self._extent() * cfg.local_radius_frac
        ox, oy = s.pos[idx]
        best_x, best_y, best_c = ox, oy, s.crossings()
        for _ in range(attempts):
            nx = ox + self.rng.uniform(-1.0, 1.0) * max_disp
            ny = oy + self.rng.uniform(-1.0, 1.0) * max_disp
            s.pos[idx] = clamp_point(nx, ny, s.width, s.height, cfg.inset)
            c = s.crossings()
            if c < best_c:
                best_x, best_y, best_c = s.pos[idx][0], s.pos[idx][1], c
        s.pos[idx] = (best_x, best_y)
        return best_c

    def worst_nodes(self, k=None):
        if k is None:
            k = self.config.local_search_nodes
        counts = node_crossing_counts(self.session.pos, self.session.edges)
        order = sorted(range(len(counts)), key=lambda i: -counts[i])
        return order[:min(k, len(order))]

    def targeted_search(self):
        improved = False
        for idx in self.worst_nodes():
            before = self.session.crossings()
            after = self.local_improve(idx)
            if after < before:
                improved = True
                self.stagnation = 0
        return improved

    def jitter(self):
        cfg = self.config
        s = self.session
        scale = self._extent() * cfg.jitter_frac
        for _ in range(min(cfg.jitter_nodes, s.node_count)):
            idx = self.rng.randrange(s.node_count)
            x, y = s.pos[idx]
            s.pos[idx] = clamp_point(x + (self.rng.random() - 0.5) * scale,
                                     y + (self.rng.random() - 0.5) * scale,
                                     s.width, s.height, cfg.inset)

    def relocate(self):
        """Throw a few random nodes to fresh positions."""
        cfg = self.config
        s = self.session
        m = cfg.relocate_margin
        count = min(cfg.relocate_max, max(1, s.node_count // 4))
        moved = []
        for _ in range(count):
            idx = self.rng.randrange(s.node_count)
            s.pos[idx] = clamp_point(self.rng.uniform(m, max(m, s.width - m)),
                                     self.rng.uniform(m, max(m, s.height - m)),
                                     s.width, s.height, cfg.inset)
            moved.append(idx)
        logger.debug("stagnation escape at iteration %d, relocated %s", self.iterations, moved)
        return moved

    # ------------------------------ stepping ---------------------------------

    def _finish_if_done(self, crossings):
        if crossings == 0:
            self._finish(SolverState.CONVERGED, crossings)
        elif self.iterations >= self.config.max_total_iterations:
            self._finish(SolverState.EXHAUSTED, crossings)
        return self.done

    def _finish(self, state, crossings):
        self.state = state
        logger.info("auto-solve %s after %d iterations, %d crossings left",
                    state.value, self.iterations, crossings)

    def step_frame(self):
        """Run one batch of iterations. Returns the solver state afterwards."""
        if self.state is not SolverState.RUNNING:
            return self.state
        if self.session.generation != self.token:
            self.state = SolverState.CANCELLED
            logger.info("auto-solve cancelled: graph was regenerated")
            return self.state

        cfg = self.config
        if self._finish_if_done(self.session.crossings()):
            return self.state

        lr = self.learning_rate()
        for _ in range(cfg.iterations_per_frame):
            if self.iterations >= cfg.max_total_iterations:
                break
            self.physics_step(lr)
            self.iterations += 1

            if self.iterations % cfg.local_search_every == 0:
                self.targeted_search()
            if self.iterations % cfg.jitter_every == 0:
                self.jitter()

        crossings = self.session.crossings()
        if crossings >= self.last_crossings:
            self.stagnation += 1
        else:
            self.stagnation = 0
        self.last_crossings = crossings

        if self.stagnation > cfg.stagnation_limit:
            self.relocate()
            self.stagnation = 0
            crossings = self.session.crossings()

        self._finish_if_done(crossings)
        return self.state

    def run(self):
        """Step to completion synchronously. Headless use and tests only."""
        self.start()
        while self.running:
            self.step_frame()
        return self.state
