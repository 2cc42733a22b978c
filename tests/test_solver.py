"""
Auto-solver tests.

Runs use a reduced iteration budget so the suite stays fast; one test runs
the default budget end to end.
"""
import random

import numpy as np
import pytest

from planarize.generator import generate_graph
from planarize.session import Session
from planarize.solver import AutoSolver, SolverConfig, SolverState

W, H = 800, 600


def make_session(node_count, seed):
    rng = random.Random(seed)
    pos, edges = generate_graph(node_count, W, H, rng=rng)
    return Session(pos, edges, W, H)


def in_bounds(session, inset=10.0):
    p = session.pos
    return ((p[:, 0] >= inset) & (p[:, 0] <= session.width - inset)
            & (p[:, 1] >= inset) & (p[:, 1] <= session.height - inset)).all()


class TestTermination:

    @pytest.mark.parametrize("node_count", [5, 6, 7, 8, 9, 10, 11])
    def test_bounded_run(self, node_count):
        s = make_session(node_count, seed=node_count)
        edges = list(s.edges)
        cfg = SolverConfig(max_total_iterations=600)
        solver = AutoSolver(s, cfg, rng=random.Random(node_count))
        frames = 0
        solver.start()
        while solver.running:
            solver.step_frame()
            frames += 1
            assert frames <= cfg.max_total_iterations // cfg.iterations_per_frame + 1
        assert solver.state in (SolverState.CONVERGED, SolverState.EXHAUSTED)
        assert solver.iterations <= cfg.max_total_iterations
        assert s.node_count == node_count
        assert s.edges == edges
        assert in_bounds(s)
        if solver.state is SolverState.CONVERGED:
            assert s.crossings() == 0
        else:
            assert solver.iterations == cfg.max_total_iterations

    def test_default_budget(self):
        s = make_session(7, seed=99)
        solver = AutoSolver(s, rng=random.Random(5))
        state = solver.run()
        assert state in (SolverState.CONVERGED, SolverState.EXHAUSTED)
        assert solver.iterations <= SolverConfig().max_total_iterations

    def test_converges_immediately_without_edges(self):
        s = Session([(100, 100), (200, 200), (300, 100)], [], W, H)
        solver = AutoSolver(s)
        solver.start()
        assert solver.step_frame() is SolverState.CONVERGED
        assert solver.iterations == 0

    def test_step_is_noop_unless_running(self):
        s = make_session(6, seed=1)
        solver = AutoSolver(s)
        before = s.pos.copy()
        assert solver.step_frame() is SolverState.IDLE
        assert (s.pos == before).all()


class TestReentrancy:

    def test_start_only_once(self):
        solver = AutoSolver(make_session(6, seed=2))
        assert solver.start() is True
        assert solver.start() is False
        assert solver.running

    def test_stale_run_is_cancelled(self):
        s = make_session(8, seed=3)
        solver = AutoSolver(s)
        solver.start()
        pos, edges = generate_graph(6, W, H, rng=random.Random(4))
        s.reset(pos, edges)
        fresh = s.pos.copy()
        assert solver.step_frame() is SolverState.CANCELLED
        assert (s.pos == fresh).all()
        assert solver.step_frame() is SolverState.CANCELLED


class TestLocalSearch:

    def test_local_improve_never_worsens(self):
        for seed in range(10):
            s = make_session(10, seed=seed)
            solver = AutoSolver(s, rng=random.Random(seed))
            for idx in range(s.node_count):
                before = s.crossings()
                after = solver.local_improve(idx)
                assert after <= before
                assert s.crossings() == after

    def test_targeted_search_never_worsens(self):
        s = make_session(11, seed=21)
        solver = AutoSolver(s, rng=random.Random(0))
        before = s.crossings()
        solver.targeted_search()
        assert s.crossings() <= before

    def test_worst_nodes_prefers_lowest_index_on_ties(self, square):
        pos, edges = square
        solver = AutoSolver(Session(pos, edges, W, H))
        assert solver.worst_nodes(3) == [0, 1, 2]


class TestPhysics:

    def test_learning_rate_anneals(self):
        solver = AutoSolver(make_session(5, seed=0))
        cfg = solver.config
        assert solver.learning_rate() == pytest.approx(cfg.lr_max + cfg.lr_min)
        solver.iterations = cfg.max_total_iterations
        assert solver.learning_rate() == pytest.approx(cfg.lr_min)

    def test_repulsion_pushes_apart(self):
        s = Session([(300, 300), (320, 300)], [], W, H)
        f = AutoSolver(s).forces()
        assert f[0][0] < 0 < f[1][0]
        assert f[0][1] == pytest.approx(0.0)

    def test_coincident_nodes_give_finite_forces(self):
        s = Session([(300, 300), (300, 300), (400, 300)], [(0, 1)], W, H)
        assert np.isfinite(AutoSolver(s).forces()).all()

    def test_long_spring_contracts(self):
        s = Session([(100, 300), (400, 300)], [(0, 1)], W, H)
        AutoSolver(s).physics_step()
        assert s.pos[1][0] - s.pos[0][0] < 300

    def test_physics_step_clamps(self):
        s = Session([(10, 10), (11, 10)], [], W, H)
        AutoSolver(s).physics_step(lr=10.0)
        assert in_bounds(s)


class TestExploration:

    def test_relocate_subset(self):
        s = make_session(9, seed=8)
        solver = AutoSolver(s, rng=random.Random(8))
        moved = solver.relocate()
        assert len(moved) == 2
        assert in_bounds(s)

    def test_relocate_small_graph_moves_one(self):
        s = make_session(3, seed=8)
        assert len(AutoSolver(s).relocate()) == 1

    def test_jitter_stays_in_bounds(self):
        s = Session([(10, 10), (790, 590), (400, 300)], [(0, 1)], W, H)
        solver = AutoSolver(s, rng=random.Random(1))
        for _ in range(50):
            solver.jitter()
        assert in_bounds(s)


class TestSchedule:
    """Physics switched off so the crossing count only changes when a heuristic fires."""

    @staticmethod
    def frozen_config(**overrides):
        base = dict(repulsion=0.0, spring_k=0.0, max_total_iterations=200,
                    local_search_every=10 ** 9, jitter_every=10 ** 9,
                    stagnation_limit=10 ** 9)
        base.update(overrides)
        return SolverConfig(**base)

    def test_stagnation_escape_fires_after_limit(self, square):
        pos, edges = square
        s = Session(pos, edges, W, H)
        cfg = self.frozen_config(stagnation_limit=15)
        solver = AutoSolver(s, cfg, rng=random.Random(0))
        calls = []
        solver.relocate = lambda: calls.append(solver.iterations)
        solver.start()
        for batch in range(1, cfg.stagnation_limit + 1):
            solver.step_frame()
            assert solver.stagnation == batch
        assert calls == []

        solver.step_frame()
        assert calls == [(cfg.stagnation_limit + 1) * cfg.iterations_per_frame]
        assert solver.stagnation == 0

        while solver.running:
            solver.step_frame()
        assert calls == [80, 160]
        assert s.crossings() == 1

    def test_jitter_on_multiples_of_cadence(self, square):
        pos, edges = square
        s = Session(pos, edges, W, H)
        cfg = self.frozen_config(jitter_every=50, iterations_per_frame=7)
        solver = AutoSolver(s, cfg, rng=random.Random(0))
        calls = []
        solver.jitter = lambda: calls.append(solver.iterations)
        assert solver.run() is SolverState.EXHAUSTED
        assert calls == [50, 100, 150, 200]

    def test_targeted_search_on_multiples_of_cadence(self, square):
        pos, edges = square
        s = Session(pos, edges, W, H)
        cfg = self.frozen_config(local_search_every=60)
        solver = AutoSolver(s, cfg, rng=random.Random(0))
        calls = []
        solver.targeted_search = lambda: calls.append(solver.iterations)
        solver.run()
        assert calls == [60, 120, 180]
