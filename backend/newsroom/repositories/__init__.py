"""
Repository layer for data access.

Isolates SQL from the guard and lifecycle services. Multi-column state
changes (lockout, counters, status transitions) are single UPDATE
statements.
"""
