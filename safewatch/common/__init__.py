"""
Shared utilities for SafeWatch (errors, retry, geo, time).
"""
