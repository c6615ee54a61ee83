"""
3GPP 5QI (5G QoS Identifier) mapping implementation.

This module names the bearer QoS classes the way the simulator's EPS bearer
API does and maps each one to its standardized characteristics according to
3GPP TS 23.501 Table 5.7.4-1.
"""

from typing import NamedTuple, Union
from enum import Enum


class ResourceType(Enum):
    """Resource types for 5QI."""
    GBR = "GBR"  # Guaranteed Bit Rate
    NON_GBR = "Non-GBR"  # Non-Guaranteed Bit Rate
    DELAY_CRITICAL_GBR = "Delay Critical GBR"


class QosClass(Enum):
    """Bearer QoS classes, valued by their standardized 5QI."""
    GBR_CONV_VOICE = 1
    GBR_CONV_VIDEO = 2
    GBR_GAMING = 3
    GBR_NON_CONV_VIDEO = 4
    NGBR_IMS = 5
    NGBR_VIDEO_TCP_OPERATOR = 6
    NGBR_VOICE_VIDEO_GAMING = 7
    NGBR_VIDEO_TCP_PREMIUM = 8
    NGBR_VIDEO_TCP_DEFAULT = 9
    GBR_MC_PUSH_TO_TALK = 65
    GBR_NMC_PUSH_TO_TALK = 66
    GBR_MC_VIDEO = 67
    NGBR_MC_DELAY_SIGNAL = 69
    NGBR_MC_DATA = 70
    GBR_V2X = 75
    NGBR_V2X = 79
    NGBR_LOW_LAT_EMBB = 80
    DGBR_DISCRETE_AUT_SMALL = 82
    DGBR_DISCRETE_AUT_LARGE = 83
    DGBR_ITS = 84
    DGBR_ELECTRICITY = 85

    @classmethod
    def parse(cls, value: Union['QosClass', str, int]) -> 'QosClass':
        """
        Resolve a QoS class from its name or its 5QI value.

        Args:
            value: A QosClass, a class name such as "GBR_CONV_VOICE" or a 5QI
                given as int or numeric string

        Returns:
            The matching QosClass

        Raises:
            ValueError: If nothing matches
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and not value.strip().isdigit():
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown QoS class: {value}") from None
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            raise ValueError(f"Unknown 5QI value: {value}") from None


class QoSCharacteristics(NamedTuple):
    """QoS characteristics for a 5QI."""
    resource_type: ResourceType
    priority_level: int
    packet_delay_budget: int  # milliseconds
    packet_error_rate: float
    description: str


class QCIMapping:
    """3GPP 5QI to QoS characteristics mapping."""

    _5QI_MAPPING = {
        # GBR
        QosClass.GBR_CONV_VOICE: QoSCharacteristics(
            ResourceType.GBR, 20, 100, 1e-2, "Conversational Voice"),
        QosClass.GBR_CONV_VIDEO: QoSCharacteristics(
            ResourceType.GBR, 40, 150, 1e-3, "Conversational Video (Live Streaming)"),
        QosClass.GBR_GAMING: QoSCharacteristics(
            ResourceType.GBR, 30, 50, 1e-3, "Real Time Gaming, V2X messages"),
        QosClass.GBR_NON_CONV_VIDEO: QoSCharacteristics(
            ResourceType.GBR, 50, 300, 1e-6, "Non-Conversational Video (Buffered Streaming)"),
        QosClass.GBR_MC_PUSH_TO_TALK: QoSCharacteristics(
            ResourceType.GBR, 7, 75, 1e-2, "Mission Critical user plane Push To Talk voice"),
        QosClass.GBR_NMC_PUSH_TO_TALK: QoSCharacteristics(
            ResourceType.GBR, 20, 100, 1e-2, "Non-Mission-Critical user plane Push To Talk voice"),
        QosClass.GBR_MC_VIDEO: QoSCharacteristics(
            ResourceType.GBR, 15, 100, 1e-3, "Mission Critical Video user plane"),
        QosClass.GBR_V2X: QoSCharacteristics(
            ResourceType.GBR, 25, 50, 1e-2, "V2X messages"),

        # Non-GBR
        QosClass.NGBR_IMS: QoSCharacteristics(
            ResourceType.NON_GBR, 10, 100, 1e-6, "IMS Signalling"),
        QosClass.NGBR_VIDEO_TCP_OPERATOR: QoSCharacteristics(
            ResourceType.NON_GBR, 60, 300, 1e-6, "Video (Buffered Streaming) TCP-based, operator"),
        QosClass.NGBR_VOICE_VIDEO_GAMING: QoSCharacteristics(
            ResourceType.NON_GBR, 70, 100, 1e-3, "Voice, Video (Live Streaming), Interactive Gaming"),
        QosClass.NGBR_VIDEO_TCP_PREMIUM: QoSCharacteristics(
            ResourceType.NON_GBR, 80, 300, 1e-6, "Video (Buffered Streaming) TCP-based, premium"),
        QosClass.NGBR_VIDEO_TCP_DEFAULT: QoSCharacteristics(
            ResourceType.NON_GBR, 90, 300, 1e-6, "Video (Buffered Streaming) TCP-based, default"),
        QosClass.NGBR_MC_DELAY_SIGNAL: QoSCharacteristics(
            ResourceType.NON_GBR, 5, 60, 1e-6, "Mission Critical delay sensitive signalling"),
        QosClass.NGBR_MC_DATA: QoSCharacteristics(
            ResourceType.NON_GBR, 55, 200, 1e-6, "Mission Critical Data"),
        QosClass.NGBR_V2X: QoSCharacteristics(
            ResourceType.NON_GBR, 65, 50, 1e-2, "V2X messages"),
        QosClass.NGBR_LOW_LAT_EMBB: QoSCharacteristics(
            ResourceType.NON_GBR, 68, 10, 1e-6, "Low Latency eMBB applications, Augmented Reality"),

        # Delay critical GBR
        QosClass.DGBR_DISCRETE_AUT_SMALL: QoSCharacteristics(
            ResourceType.DELAY_CRITICAL_GBR, 19, 10, 1e-4, "Discrete Automation (small packets)"),
        QosClass.DGBR_DISCRETE_AUT_LARGE: QoSCharacteristics(
            ResourceType.DELAY_CRITICAL_GBR, 22, 10, 1e-4, "Discrete Automation (large packets)"),
        QosClass.DGBR_ITS: QoSCharacteristics(
            ResourceType.DELAY_CRITICAL_GBR, 24, 30, 1e-5, "Intelligent Transport Systems"),
        QosClass.DGBR_ELECTRICITY: QoSCharacteristics(
            ResourceType.DELAY_CRITICAL_GBR, 21, 5, 1e-5, "Electricity Distribution, high voltage"),
    }

    @classmethod
    def get_qos_characteristics(cls, qos_class: Union[QosClass, str, int]) -> QoSCharacteristics:
        """Get QoS characteristics for a given QoS class or 5QI value."""
        return cls._5QI_MAPPING[QosClass.parse(qos_class)]

    @classmethod
    def get_supported_classes(cls) -> list[QosClass]:
        """Get list of supported QoS classes."""
        return list(cls._5QI_MAPPING.keys())

    @classmethod
    def is_gbr_service(cls, qos_class: Union[QosClass, str, int]) -> bool:
        """Check if a QoS class is a guaranteed bit rate service."""
        characteristics = cls.get_qos_characteristics(qos_class)
        return characteristics.resource_type in [ResourceType.GBR, ResourceType.DELAY_CRITICAL_GBR]

    @classmethod
    def get_priority_level(cls, qos_class: Union[QosClass, str, int]) -> int:
        """Get priority level for a given QoS class."""
        return cls.get_qos_characteristics(qos_class).priority_level

    @classmethod
    def get_packet_delay_budget(cls, qos_class: Union[QosClass, str, int]) -> int:
        """Get packet delay budget in milliseconds for a given QoS class."""
        return cls.get_qos_characteristics(qos_class).packet_delay_budget
