"""
SafeWatch - personal hazard monitoring with acknowledgment escalation.
"""

__version__ = "0.1.0"
