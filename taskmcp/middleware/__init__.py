"""
Middleware and logging setup.
"""
