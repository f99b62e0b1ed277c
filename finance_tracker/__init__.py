"""
Finance Tracker - Ledger Core

Personal accounts, their operation history and progress toward saving
goals.

DESIGN PRINCIPLES:
1. Balances are derived from history, never stored
2. Amounts are non-negative magnitudes; the kind carries the direction
3. Allocation into a goal writes one operation on each side, atomically
4. Invalid input fails loudly with a typed error
5. Storage is a swappable collaborator
"""

__version__ = "1.0.0"
