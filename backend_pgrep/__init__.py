"""
Backend pgrep — player reputation service for Counter-Strike profiles.

Aggregates Steam, FACEIT and Leetify data into a single trust score and
runs the community moderation workflow (reports, admin review, auto-flags).
Modular layout: reputation scorer, upstream clients, API server.
"""

__version__ = "0.1.0"
