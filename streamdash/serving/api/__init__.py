"""
Dashboard HTTP API
"""
