"""
Observability for SafeWatch: logging, Prometheus metrics and the HTTP surface.
"""
