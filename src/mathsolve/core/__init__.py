"""Core logic module.

Modules:
- answer_checker: Answer normalization and comparison
- ranking: Score to rank tier
- scoring: Points policy and submission persistence
- scratchpad: Freehand drawing surface and snapshots
- problem_selection: Problem sources and random draw
- accounts: Sign-up, sign-in, profile refresh
- vault: Saved notes and scratchpad per problem
- leaderboard: Leaderboard and submission history
"""

__all__ = [
    "answer_checker",
    "ranking",
    "scoring",
    "scratchpad",
    "problem_selection",
    "accounts",
    "vault",
    "leaderboard",
]
