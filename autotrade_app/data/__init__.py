"""
Market data models, normalization and historical data access.
"""
