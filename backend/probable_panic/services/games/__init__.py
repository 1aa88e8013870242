"""Game domain services: identifiers, questions, scoring, lifecycle,
the round scheduler and guess intake.

HTTP routes and socket handlers import from here, keeping transport
concerns separated from core game mechanics.
"""
