"""Collectra - collection session management.

Tracks scheduled pickups of recyclable material from suppliers through
their lifecycle, with problem reports, comments and completion metrics.
"""

__version__ = "0.1.0"
