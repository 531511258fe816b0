"""
Streaming Dashboard Metrics Engine

Period-over-period growth, categorical distributions and retention cohorts
over snapshots of a streaming platform's users, catalogue and daily rollups.
"""

__version__ = "1.0.0"
