"""
Dependency injection: the service container and its accessors.
"""
