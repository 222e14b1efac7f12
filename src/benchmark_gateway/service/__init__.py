"""
HTTP service for the benchmark gateway.
"""
