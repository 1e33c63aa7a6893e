"""
Configuration Schema - JSON Schema validation for config.json
"""
import json
from typing import Any, Dict, List, Tuple

import jsonschema

from .constants import (
    DEFAULT_API_HOST,
    DEFAULT_API_PORT,
    DEFAULT_HOST,
    DEFAULT_LOG_DIR,
    DEFAULT_REFRESH_INTERVAL_MS,
    MAX_FIXTURES,
    MAX_PRESETS,
    MAX_TEMPLATES,
    MAX_UNIVERSE,
    VALUE_POLICIES,
    VALUE_POLICY_PRESERVE,
)
from .logger import get_logger

logger = get_logger(__name__)

# Form values may arrive as numbers or as the raw text of an input field
_INT_OR_TEXT = {"type": ["integer", "string"]}

INSTANCE_SCHEMA = {
    "type": "object",
    "properties": {
        "host": {
            "type": "string",
            "description": "Art-Net node IP address"
        },
        "universe": {
            "type": "integer",
            "minimum": 0,
            "maximum": MAX_UNIVERSE,
            "description": "Flat Art-Net universe (net/subnet/universe)"
        },
        "templateCount": {"type": "integer", "minimum": 1, "maximum": MAX_TEMPLATES},
        "fixtureCount": {"type": "integer", "minimum": 1, "maximum": MAX_FIXTURES},
        "presetCount": {"type": "integer", "minimum": 0, "maximum": MAX_PRESETS},
        "refresh_interval_ms": {
            "type": "integer",
            "minimum": 0,
            "maximum": 60000,
            "description": "Keep-alive resend interval (0 = send only on change)"
        },
        "value_policy": {
            "type": "string",
            "enum": list(VALUE_POLICIES),
            "description": "Keep or drop runtime attribute values when the config is re-applied"
        }
    },
    "patternProperties": {
        "^template_\\d+_(name|channels)$": {"type": "string"},
        "^fixture_\\d+_(name|type)$": {"type": "string"},
        "^fixture_\\d+_address$": _INT_OR_TEXT,
        "^preset_\\d+_(name|type|attribute)$": {"type": "string"},
        "^preset_\\d+_value$": _INT_OR_TEXT
    },
    "additionalProperties": True
}

CONFIG_SCHEMA = {
    "type": "object",
    "required": ["instance"],
    "properties": {
        "instance": INSTANCE_SCHEMA,
        "api": {
            "type": "object",
            "properties": {
                "host": {"type": "string", "description": "REST API host"},
                "port": {"type": "integer", "minimum": 1, "maximum": 65535, "description": "REST API port"}
            }
        },
        "app": {
            "type": "object",
            "properties": {
                "console_log_level": {
                    "type": "string",
                    "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
                },
                "log_level": {
                    "type": "string",
                    "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
                },
                "log_dir": {"type": ["string", "null"]},
                "max_log_files": {"type": "integer", "minimum": 0}
            }
        }
    },
    "additionalProperties": True
}


class ConfigValidator:
    """Validates configuration against the schema."""

    def __init__(self):
        self.validator = jsonschema.Draft7Validator(CONFIG_SCHEMA)
        self.instance_validator = jsonschema.Draft7Validator(INSTANCE_SCHEMA)

    @staticmethod
    def _collect(validator, data) -> List[str]:
        errors = []
        for error in validator.iter_errors(data):
            path = ".".join(str(p) for p in error.path) if error.path else "root"
            errors.append(f"{path}: {error.message}")
        return errors

    def validate(self, config: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """
        Validate a full config file.

        Returns:
            Tuple[bool, List[str]]: (is_valid, error_messages)
        """
        errors = self._collect(self.validator, config)
        if not errors:
            errors.extend(self._custom_validations(config.get("instance", {})))

        if errors:
            logger.error(f"Config validation failed: {len(errors)} error(s)")
            for error in errors:
                logger.error(f"  - {error}")
        else:
            logger.debug("Config validation successful")
        return not errors, errors

    def validate_instance(self, instance_config: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """Validate only the fixture/instance section (as posted by the host form)."""
        errors = self._collect(self.instance_validator, instance_config)
        if not errors:
            errors.extend(self._custom_validations(instance_config))
        return not errors, errors

    def _custom_validations(self, instance_config: Dict[str, Any]) -> List[str]:
        errors = []
        host = instance_config.get("host")
        if host and not self._is_valid_ip(host):
            errors.append(f"instance.host: Invalid IP address '{host}'")
        return errors

    def _is_valid_ip(self, ip: str) -> bool:
        parts = ip.split(".")
        if len(parts) != 4:
            return False

        try:
            for part in parts:
                num = int(part)
                if not 0 <= num <= 255:
                    return False
            return True
        except ValueError:
            return False

    def get_schema(self) -> Dict[str, Any]:
        return CONFIG_SCHEMA

    def get_default_config(self) -> Dict[str, Any]:
        """Default configuration: one dimmer template and one fixture at address 1."""
        return {
            "instance": {
                "host": DEFAULT_HOST,
                "universe": 0,
                "refresh_interval_ms": DEFAULT_REFRESH_INTERVAL_MS,
                "value_policy": VALUE_POLICY_PRESERVE,
                "templateCount": 1,
                "template_1_name": "Type 1",
                "template_1_channels": "1:Dimmer:8",
                "fixtureCount": 1,
                "fixture_1_name": "Fixture 1",
                "fixture_1_address": 1,
                "fixture_1_type": "Type 1",
                "presetCount": 0
            },
            "api": {
                "host": DEFAULT_API_HOST,
                "port": DEFAULT_API_PORT
            },
            "app": {
                "console_log_level": "WARNING",
                "log_level": "INFO",
                "log_dir": DEFAULT_LOG_DIR,
                "max_log_files": 10
            }
        }


def validate_config_file(config_path: str) -> Tuple[bool, List[str], Dict[str, Any]]:
    """
    Load and validate a config file.

    Returns:
        Tuple[bool, List[str], Dict]: (is_valid, errors, config_dict)
    """
    validator = ConfigValidator()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = json.load(f)
    except FileNotFoundError:
        return False, [f"Config file not found: {config_path}"], {}
    except json.JSONDecodeError as e:
        return False, [f"JSON parse error: {str(e)}"], {}

    is_valid, errors = validator.validate(config)
    return is_valid, errors, config
