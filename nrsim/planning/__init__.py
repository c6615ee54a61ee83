"""
Planning module for 5G NR scenarios.

This module derives spectrum, power, attachment and bearer plans from scenario
parameters.
"""

from .planner import ScenarioPlanner, ScenarioPlan, CellPlan, plan
from .spectrum import SpectrumPlan, BandPlan, linear_power_budget

__all__ = ['ScenarioPlanner', 'ScenarioPlan', 'CellPlan', 'plan',
           'SpectrumPlan', 'BandPlan', 'linear_power_budget']
