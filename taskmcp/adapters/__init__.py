"""
Adapters isolating third-party framework imports.
"""
