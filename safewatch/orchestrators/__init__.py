"""
Orchestrators for SafeWatch.

This module contains the orchestrators that coordinate
the flow between ports and adapters.
"""
from .aggregator import Aggregator
from .alerting import AlertLifecycle
from .services import Services, build_services

__all__ = ["Aggregator", "AlertLifecycle", "Services", "build_services"]
