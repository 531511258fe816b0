"""
Dashboard Serving Layer

FastAPI routes over the metrics facade with a Redis result cache.
"""
