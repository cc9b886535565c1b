"""State/cache layer.

This package is the single source of truth for how outbound optimistic
writes and inbound device reports are merged into a per-fan state
snapshot.
"""
