"""
Game controller: owns the session, the auto-solver, dragging, hints and the
one-time bookkeeping when a graph becomes planar.

Nothing here touches pygame; the front end turns events into calls on
`PlanarityGame` and draws whatever `session` and `metrics` say.
"""
import logging
import random

from .generator import generate_graph, random_node_count
from .geometry import clamp_point, node_crossing_counts
from .session import DEFAULT_DIFFICULTY, HINT_COLOR, NODE_COLOR, Session
from .solver import AutoSolver
from .storage import MemoryStore, append_history, load_current, save_current

logger = logging.getLogger(__name__)

DEFAULT_NODES = 6
HIT_PADDING = 8
HINT_MS = 1400


class PlanarityGame:
    def __init__(self, width, height, difficulty=DEFAULT_DIFFICULTY, store=None,
                 rng=None, solver_config=None):
        self.rng = rng or random
        self.store = store if store is not None else MemoryStore()
        self.solver_config = solver_config
        self.difficulty = difficulty or DEFAULT_DIFFICULTY
        self.session = None
        self.solver = None
        self.selected = None
        self.metrics = None
        self._hint = None     # [node index, ms left]
        self._clock_ms = 0
        self._last_saved = None
        self._width = float(width)
        self._height = float(height)

    # ------------------------------ lifecycle --------------------------------

    def new_graph(self, node_count=DEFAULT_NODES):
        """Start a fresh session on a new random graph."""
        pos, edges = generate_graph(node_count, self._width, self._height, rng=self.rng)
        if self.session is None:
            self.session = Session(pos, edges, self._width, self._height, self.difficulty)
        else:
            self.session.reset(pos, edges)
        self._forget_transients()
        self.metrics = None
        logger.info("new graph: %d nodes, %d edges, %d crossings",
                    self.session.node_count, len(self.session.edges),
                    self.session.initial_crossings)
        return self.session

    def new_random_graph(self):
        return self.new_graph(random_node_count(self.rng))

    def load_or_generate(self, force_new=False):
        """Resume the saved game unless `force_new`; otherwise, or if nothing usable is saved, generate."""
        if not force_new:
            data = load_current(self.store)
            if data is not None:
                try:
                    restored = Session.from_snapshot(data, self._width, self._height, self.difficulty)
                except (ValueError, TypeError) as e:
                    logger.warning("discarding saved game: %s", e)
                else:
                    if self.session is not None:
                        restored.generation = self.session.generation + 1
                    self.session = restored
                    self._forget_transients()
                    logger.info("resumed saved game: %d nodes, %d moves, %ds",
                                restored.node_count, restored.moves, restored.timer)
                    self.refresh()
                    return self.session
        self.new_graph()
        return self.session

    def _forget_transients(self):
        self.solver = None
        self.selected = None
        self._hint = None
        self._clock_ms = 0

    # ----------------------------- interaction -------------------------------

    def node_at(self, x, y):
        s = self.session
        reach = s.radius + HIT_PADDING
        for i, (nx, ny) in enumerate(s.pos):
            if (nx - x) ** 2 + (ny - y) ** 2 < reach * reach:
                return i
        return None

    def start_drag(self, x, y):
        self.selected = self.node_at(x, y)
        return self.selected

    def drag(self, x, y):
        if self.selected is None:
            return False
        s = self.session
        s.pos[self.selected] = clamp_point(x, y, s.width, s.height)
        s.moves += 1
        self.refresh()
        return True

    def end_drag(self):
        self.selected = None

    # -------------------------------- hint -----------------------------------

    def hint(self):
        """Highlight the node involved in the most crossings for a moment."""
        s = self.session
        self._revert_hint()
        counts = node_crossing_counts(s.pos, s.edges)
        if not counts or max(counts) == 0:
            return None
        worst = counts.index(max(counts))
        s.colors[worst] = HINT_COLOR
        self._hint = [worst, HINT_MS]
        logger.debug("hint: node %d involved in %d crossings", worst, counts[worst])
        return worst

    def _revert_hint(self):
        if self._hint is None:
            return
        idx = self._hint[0]
        self._hint = None
        if idx < self.session.node_count:
            self.session.colors[idx] = NODE_COLOR

    @property
    def hint_pending(self):
        return self._hint is not None

    # ------------------------------ auto-solve -------------------------------

    def auto_solve(self):
        """Start the solver. Does nothing while a run is already in progress."""
        if self.solver is not None and self.solver.running:
            return False
        self.solver = AutoSolver(self.session, self.solver_config, rng=self.rng)
        return self.solver.start()

    @property
    def solving(self):
        return self.solver is not None and self.solver.running

    # ------------------------------ frame tick -------------------------------

    def update(self, dt_ms):
        """Advance timers and the solver by one frame, then refresh and persist."""
        s = self.session
        if not s.solved:
            self._clock_ms += dt_ms
            while self._clock_ms >= 1000:
                self._clock_ms -= 1000
                s.timer += 1

        if self._hint is not None:
            self._hint[1] -= dt_ms
            if self._hint[1] <= 0:
                self._revert_hint()

        if self.solver is not None and self.solver.running:
            self.solver.step_frame()

        self.refresh()
        self.persist()

    def refresh(self):
        """Recompute metrics from current geometry and record a solve once."""
        s = self.session
        m = s.metrics()
        s.planarity = m.planarity
        s.score = m.score
        self.metrics = m
        if m.crossings == 0 and not s.solved:
            s.solved = True
            self._clock_ms = 0
            try:
                append_history(self.store, s.history_record(m))
            except OSError as e:
                logger.warning("could not record solved game: %s", e)
            logger.info("planar! score %d, %d moves, %ds", m.score, s.moves, s.timer)
        return m

    def persist(self):
        snap = self.session.snapshot()
        if snap != self._last_saved:
            # Marked saved even on failure; the next change retries.
            self._last_saved = snap
            try:
                save_current(self.store, snap)
            except OSError as e:
                logger.warning("could not save current game: %s", e)

    def resize(self, width, height):
        self._width = float(width)
        self._height = float(height)
        if self.session is not None:
            self.session.resize(width, height)
            self.refresh()
