"""
API server package — HTTP interface for reputation lookups and moderation.

Handles rate limiting and identity checks, and delegates to the upstream
aggregator and the moderation store.
"""
