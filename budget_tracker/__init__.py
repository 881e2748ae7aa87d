"""
Budget Tracker - Source Package

A personal monthly-budget tracker. Authenticated users record months,
recurring and one-off outgoings, transfers between accounts, and the
named bank accounts those transfers land in.

DESIGN PRINCIPLES:
1. Every row belongs to exactly one user, every query is filtered by owner
2. Ownership mismatches look exactly like missing rows
3. Fail loudly: datastore errors reach the caller unchanged
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Budget Tracker Team"
