"""Configuration, logging and performance utilities."""
from .performance import PerformanceMonitor, PerformanceMetrics
from .logger import setup_logging, GestureLogger

__all__ = ["PerformanceMonitor", "PerformanceMetrics", "setup_logging", "GestureLogger"]
