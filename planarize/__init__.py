"""
Planarize: drag the nodes of a random graph until no two edges cross.
"""
from .geometry import count_crossings, segments_intersect
from .game import PlanarityGame
from .solver import AutoSolver, SolverConfig, SolverState

__all__ = ['AutoSolver', 'PlanarityGame', 'SolverConfig', 'SolverState',
           'count_crossings', 'segments_intersect']
__version__ = '1.0.0'
