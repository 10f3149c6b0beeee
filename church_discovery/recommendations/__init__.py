"""
Venue recommendation engine.

Responsibilities:
- Score each candidate venue against the user's preferences and history.
- Rank candidates with deterministic, bounded heuristics.
- Suggest not-yet-visited venues with a short human-readable reason.
"""
