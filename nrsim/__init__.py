"""
5G NR Scenario Planning and Flow KPI Framework

This package derives the spectrum, power, attachment and bearer plan that
configures a 5G NR network simulation, and reduces the per-flow counters the
simulator reports after the run into throughput, delay, loss and fairness KPIs.
"""

__version__ = "1.0.0"
__author__ = "Carlos Lopes"
