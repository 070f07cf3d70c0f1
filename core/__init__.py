"""
Core workflow layer

This package holds every rule of the submission workflow:
- State machine: the only place submission_status changes
- Managers: games, submissions, reviews and versions
- Event log: one row per status transition
- Locks: row locks and status-guarded updates
"""
