"""
Configuration management for 5G NR scenarios.

This module provides utilities for loading and validating scenario
configurations and ships the predefined scenarios.
"""

import json
import logging
import yaml
from typing import Dict, Any, List
from pathlib import Path
import jsonschema

from ..core.config import ScenarioConfig, BandConfig, TrafficClassConfig
from ..qos.qci_mapping import QosClass

logger = logging.getLogger(__name__)

DEFAULT_CELL_HEIGHT = 10.0  # meters


class ConfigManager:
    """Manages scenario configuration loading and validation."""

    # Configuration schema for validation
    CONFIG_SCHEMA = {
        "type": "object",
        "properties": {
            "simulation": {
                "type": "object",
                "properties": {
                    "simulation_time": {"type": "number", "exclusiveMinimum": 0},
                    "app_start_time": {"type": "number", "minimum": 0},
                    "log_level": {"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR"]},
                    "output_directory": {"type": "string"},
                    "enable_plots": {"type": "boolean"}
                },
                "required": ["simulation_time"],
                "additionalProperties": False
            },
            "network": {
                "type": "object",
                "properties": {
                    "num_cells": {"type": "integer", "minimum": 1},
                    "num_terminals": {"type": "integer", "minimum": 1},
                    "cell_positions": {
                        "type": "array",
                        "items": {
                            "type": "array",
                            "items": {"type": "number"},
                            "minItems": 2,
                            "maxItems": 3
                        }
                    },
                    "total_tx_power": {"type": "number"},
                    "double_operational_band": {"type": "boolean"},
                    "scheduler": {"type": "string"},
                    "max_frequency": {"type": "number", "exclusiveMinimum": 0}
                },
                "required": ["num_cells", "num_terminals"],
                "additionalProperties": False
            },
            "bands": {
                "type": "array",
                "minItems": 1,
                "maxItems": 2,
                "items": {
                    "type": "object",
                    "properties": {
                        "center_frequency": {"type": "number", "minimum": 0},
                        "bandwidth": {"type": "number", "exclusiveMinimum": 0},
                        "numerology": {"type": "integer", "minimum": 0, "maximum": 6}
                    },
                    "required": ["center_frequency", "bandwidth"],
                    "additionalProperties": False
                }
            },
            "traffic": {
                "type": "object",
                "properties": {
                    "classes": {
                        "type": "array",
                        "minItems": 1,
                        "items": {
                            "type": "object",
                            "properties": {
                                "name": {"type": "string"},
                                "port": {"type": "integer", "minimum": 0, "maximum": 65535},
                                "qos_class": {"type": ["string", "integer"]},
                                "packet_size": {"type": "integer", "minimum": 1},
                                "lambda": {"type": "integer", "minimum": 1}
                            },
                            "required": ["name", "port", "qos_class"],
                            "additionalProperties": False
                        }
                    }
                },
                "required": ["classes"],
                "additionalProperties": False
            }
        },
        "required": ["simulation", "network", "bands", "traffic"],
        "additionalProperties": False
    }

    @classmethod
    def load_config(cls, config_file: str) -> ScenarioConfig:
        """
        Load configuration from file.

        Args:
            config_file: Path to configuration file (JSON or YAML)

        Returns:
            ScenarioConfig object

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If the file format is unsupported or a QoS class is unknown
            jsonschema.ValidationError: If config doesn't match schema
        """
        config_path = Path(config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_file}")

        logger.info(f"Loading configuration from {config_file}")

        # Load configuration based on file extension
        with open(config_path, 'r') as f:
            if config_path.suffix.lower() in ['.yaml', '.yml']:
                config_data = yaml.safe_load(f)
            elif config_path.suffix.lower() == '.json':
                config_data = json.load(f)
            else:
                raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

        try:
            cls.validate_config(config_data)
        except jsonschema.ValidationError as e:
            logger.error(f"Configuration validation error: {e.message}")
            raise

        return cls.config_from_dict(config_data)

    @classmethod
    def validate_config(cls, config_data: Dict[str, Any]):
        """
        Validate configuration against schema.

        Raises:
            jsonschema.ValidationError: If config is invalid
        """
        jsonschema.validate(config_data, cls.CONFIG_SCHEMA)

    @classmethod
    def validate_config_file(cls, config_file: str) -> bool:
        """Check whether a configuration file loads and validates"""
        try:
            cls.load_config(config_file)
            return True
        except (OSError, ValueError, jsonschema.ValidationError, yaml.YAMLError) as e:
            logger.error(f"Configuration validation failed: {e}")
            return False

    @classmethod
    def config_from_dict(cls, config_data: Dict[str, Any]) -> ScenarioConfig:
        """Create ScenarioConfig from validated configuration data."""
        sim_config = config_data.get('simulation', {})
        network_config = config_data.get('network', {})
        bands_config = config_data.get('bands', [])
        traffic_config = config_data.get('traffic', {})
        defaults = ScenarioConfig()

        positions = network_config.get('cell_positions')
        if positions is not None:
            positions = tuple(
                (float(p[0]), float(p[1]), float(p[2]) if len(p) > 2 else DEFAULT_CELL_HEIGHT)
                for p in positions
            )

        bands = tuple(
            BandConfig(
                center_frequency=float(band['center_frequency']),
                bandwidth=float(band['bandwidth']),
                numerology=band.get('numerology', 0)
            )
            for band in bands_config
        )

        traffic_classes = tuple(
            TrafficClassConfig(
                name=tc['name'],
                port=tc['port'],
                qos_class=QosClass.parse(tc['qos_class']),
                packet_size=tc.get('packet_size', 512),
                lambda_pps=tc.get('lambda', 10000)
            )
            for tc in traffic_config.get('classes', [])
        )

        return ScenarioConfig(
            # Network parameters
            num_cells=network_config.get('num_cells', defaults.num_cells),
            num_terminals=network_config.get('num_terminals', defaults.num_terminals),
            cell_positions=positions,
            total_tx_power=network_config.get('total_tx_power', defaults.total_tx_power),
            scheduler=network_config.get('scheduler', defaults.scheduler),
            max_frequency=network_config.get('max_frequency', defaults.max_frequency),

            # Spectrum parameters
            bands=bands or defaults.bands,
            double_operational_band=network_config.get('double_operational_band', len(bands) > 1),

            # Traffic parameters
            traffic_classes=traffic_classes or defaults.traffic_classes,

            # Run parameters
            simulation_time=sim_config.get('simulation_time', defaults.simulation_time),
            app_start_time=sim_config.get('app_start_time', defaults.app_start_time),
            log_level=sim_config.get('log_level', defaults.log_level),
            output_directory=sim_config.get('output_directory', defaults.output_directory),
            enable_plots=sim_config.get('enable_plots', defaults.enable_plots)
        )

    @classmethod
    def config_to_dict(cls, config: ScenarioConfig) -> Dict[str, Any]:
        """Inverse of config_from_dict"""
        network = {
            "num_cells": config.num_cells,
            "num_terminals": config.num_terminals,
            "total_tx_power": config.total_tx_power,
            "double_operational_band": config.double_operational_band,
            "scheduler": config.scheduler,
            "max_frequency": config.max_frequency
        }
        if config.cell_positions is not None:
            network["cell_positions"] = [list(p) for p in config.cell_positions]

        return {
            "simulation": {
                "simulation_time": config.simulation_time,
                "app_start_time": config.app_start_time,
                "log_level": config.log_level,
                "output_directory": config.output_directory,
                "enable_plots": config.enable_plots
            },
            "network": network,
            "bands": [
                {
                    "center_frequency": band.center_frequency,
                    "bandwidth": band.bandwidth,
                    "numerology": band.numerology
                }
                for band in config.bands
            ],
            "traffic": {
                "classes": [
                    {
                        "name": tc.name,
                        "port": tc.port,
                        "qos_class": tc.qos_class.name,
                        "packet_size": tc.packet_size,
                        "lambda": tc.lambda_pps
                    }
                    for tc in config.traffic_classes
                ]
            }
        }

    @classmethod
    def merge_configs(cls, base_config: Dict, override_config: Dict) -> Dict:
        """
        Merge two configuration dictionaries

        Args:
            base_config: Base configuration
            override_config: Override values

        Returns:
            Merged configuration
        """
        def deep_merge(base: Dict, override: Dict) -> Dict:
            result = base.copy()

            for key, value in override.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = deep_merge(result[key], value)
                else:
                    result[key] = value

            return result

        return deep_merge(base_config, override_config)

    @classmethod
    def create_default_config(cls, config_file: str, scenario: str = "low_latency"):
        """
        Create a default configuration file.

        Args:
            config_file: Output configuration file path
            scenario: Scenario type ("low_latency", "voice", "mixed")
        """
        config = cls.get_scenario_config(scenario)

        # Save configuration
        config_path = Path(config_file)
        with open(config_path, 'w') as f:
            if config_path.suffix.lower() in ['.yaml', '.yml']:
                yaml.dump(config, f, default_flow_style=False, indent=2, sort_keys=False)
            else:
                json.dump(config, f, indent=2)
        logger.info(f"Created {scenario} scenario configuration: {config_file}")

    @classmethod
    def get_scenario_config(cls, scenario: str) -> Dict[str, Any]:
        """Get a predefined scenario configuration"""
        if scenario == "low_latency":
            return cls._create_low_latency_scenario_config()
        elif scenario == "voice":
            return cls._create_voice_scenario_config()
        elif scenario == "mixed":
            return cls._create_mixed_scenario_config()
        raise ValueError(f"Unknown scenario: {scenario}")

    @classmethod
    def _create_base_scenario_config(cls) -> Dict[str, Any]:
        """Three cells in a row serving five terminals on a dual band at 28 GHz."""
        return {
            "simulation": {
                "simulation_time": 60.0,
                "app_start_time": 0.1,
                "log_level": "INFO",
                "output_directory": "results",
                "enable_plots": True
            },
            "network": {
                "num_cells": 3,
                "num_terminals": 5,
                "cell_positions": [[30.0, 50.0, 10.0], [50.0, 50.0, 10.0], [70.0, 50.0, 10.0]],
                "total_tx_power": 55.0,
                "double_operational_band": True,
                "scheduler": "ns3::NrMacSchedulerTdmaRR",
                "max_frequency": 100e9
            },
            "bands": [
                {"center_frequency": 28e9, "bandwidth": 100e6, "numerology": 4},
                {"center_frequency": 28.2e9, "bandwidth": 100e6, "numerology": 2}
            ],
            "traffic": {"classes": []}
        }

    @classmethod
    def _create_low_latency_scenario_config(cls) -> Dict[str, Any]:
        """Create low-latency eMBB scenario configuration."""
        return cls.merge_configs(cls._create_base_scenario_config(), {
            "network": {"max_frequency": 400e9},
            "bands": [
                {"center_frequency": 28e9, "bandwidth": 400e6, "numerology": 3},
                {"center_frequency": 28.2e9, "bandwidth": 400e6, "numerology": 2}
            ],
            "traffic": {
                "classes": [
                    {"name": "low_latency", "port": 1236, "qos_class": "NGBR_LOW_LAT_EMBB",
                     "packet_size": 512, "lambda": 10000}
                ]
            }
        })

    @classmethod
    def _create_voice_scenario_config(cls) -> Dict[str, Any]:
        """Create conversational voice scenario configuration."""
        return cls.merge_configs(cls._create_base_scenario_config(), {
            "traffic": {
                "classes": [
                    {"name": "voice", "port": 1235, "qos_class": "GBR_CONV_VOICE",
                     "packet_size": 1024, "lambda": 10000}
                ]
            }
        })

    @classmethod
    def _create_mixed_scenario_config(cls) -> Dict[str, Any]:
        """Create a scenario alternating terminals between low-latency and voice traffic."""
        return cls.merge_configs(cls._create_base_scenario_config(), {
            "network": {"num_terminals": 6},
            "traffic": {
                "classes": [
                    {"name": "low_latency", "port": 1236, "qos_class": "NGBR_LOW_LAT_EMBB",
                     "packet_size": 512, "lambda": 10000},
                    {"name": "voice", "port": 1235, "qos_class": "GBR_CONV_VOICE",
                     "packet_size": 1024, "lambda": 10000}
                ]
            }
        })

    @classmethod
    def get_available_scenarios(cls) -> List[str]:
        """Get list of available predefined scenarios."""
        return ["low_latency", "voice", "mixed"]
