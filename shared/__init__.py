"""
Shared building blocks of the booking engine.

Entity and aggregate bases, the error taxonomy, request deadlines,
keyed locks, the unit of work and the event bus used by every app.
"""
