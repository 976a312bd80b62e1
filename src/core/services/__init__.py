"""
Business services for Trip Crew.

- trips.py: trip creation (owner becomes the first member) and owner-only edits
- membership.py: the membership store, idempotent adds and removals
- permissions.py: the permission evaluator, pure checks over TripFacts
- participants.py: participant listing, removal and leave
- invites.py: token-based invitation lifecycle
- notifications.py: invitation emails through SES
- expenses.py / ledger.py: expense persistence and trip statistics
- migration.py: programmatic Alembic upgrades
"""

__all__: list[str] = []
