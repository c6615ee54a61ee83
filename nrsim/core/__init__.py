"""Core configuration and error types."""

from .config import ScenarioConfig, BandConfig, TrafficClassConfig
from .errors import ScenarioError, InvalidFrequency, DuplicatePort, MalformedRecord

__all__ = ['ScenarioConfig', 'BandConfig', 'TrafficClassConfig',
           'ScenarioError', 'InvalidFrequency', 'DuplicatePort', 'MalformedRecord']
