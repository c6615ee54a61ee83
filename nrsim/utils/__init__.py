"""
Utility modules for 5G NR scenarios.

This module provides configuration management and visualization utilities.
"""

from .config import ConfigManager
from .visualization import KPIVisualizer

__all__ = ['ConfigManager', 'KPIVisualizer']
