"""
Core business logic package for Trip Crew.

Membership, permissions, invitations and the expense ledger live here.
Lambda handlers in src/handlers/ are thin wrappers that call into core/.
"""

__all__: list[str] = []
