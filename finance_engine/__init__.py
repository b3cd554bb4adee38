"""
Finance Engine - Source Package

The projection and recommendation core of a personal finance dashboard.
Compares debt payoff strategies, projects funding sources toward a target,
and evaluates portfolio findings with a health score.

DESIGN PRINCIPLES:
1. Every calculation is a pure function of its inputs
2. Snapshots are fetched once, before any simulation runs
3. Bad input is rejected at the boundary, not inside the loops
4. Every run is auditable
5. Data sources are swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Engine Team"
