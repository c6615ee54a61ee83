"""
Quality of Service (QoS) module for 5G NR scenarios.

This module implements the 3GPP 5QI (5G QoS Identifier) framework and the
dedicated bearers and traffic flow templates built from it.
"""

from .qci_mapping import QCIMapping, QosClass, ResourceType
from .bearer import BearerManager, BearerTFT, PacketFilter, build_bearers

__all__ = ['QCIMapping', 'QosClass', 'ResourceType',
           'BearerManager', 'BearerTFT', 'PacketFilter', 'build_bearers']
