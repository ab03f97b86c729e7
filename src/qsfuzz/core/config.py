"""Configuration loader for qsfuzz.

This module loads the YAML rule file and parses the header flag accepted on
the command line.
"""

from pathlib import Path
from typing import Any

import yaml

from qsfuzz.core.exceptions import ConfigError
from qsfuzz.core.models import FuzzConfig, Rule


# ============================================================================
# Rule File Loader
# ============================================================================

def load_config(config_file: Path | str) -> FuzzConfig:
    """Load a rule configuration from YAML file.

    Args:
        config_file: Path to the rule YAML file

    Returns:
        FuzzConfig with rules in file order

    Raises:
        ConfigError: If the file is missing, unparseable or invalid
    """
    config_path = Path(config_file)

    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config YAML: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {e}") from e

    if not data:
        raise ConfigError("Configuration is empty")

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    return parse_config(data)


def parse_config(data: dict[str, Any]) -> FuzzConfig:
    """Build a FuzzConfig from already decoded configuration data.

    Raises:
        ConfigError: If the configuration is invalid
    """
    if "rules" not in data or not data["rules"]:
        raise ConfigError("Missing 'rules' section in config")

    rules_data = data["rules"]
    if not isinstance(rules_data, dict):
        raise ConfigError("'rules' must be a mapping of rule name to rule")

    rules = [_parse_rule(str(name), rule_data) for name, rule_data in rules_data.items()]

    cookies = data.get("cookies") or ""
    if not isinstance(cookies, str):
        raise ConfigError("'cookies' must be a string")

    headers = data.get("headers") or {}
    if not isinstance(headers, dict):
        raise ConfigError("'headers' must be a mapping")

    return FuzzConfig(
        rules=rules,
        cookies=cookies,
        headers={str(k): str(v) for k, v in headers.items()},
    )


def _parse_rule(name: str, rule_data: Any) -> Rule:
    """Parse one rule entry.

    A rule is either a mapping with an ``injections`` list or a bare list
    of injections.
    """
    if isinstance(rule_data, list):
        rule_data = {"injections": rule_data}

    if not isinstance(rule_data, dict):
        raise ConfigError(f"Invalid rule configuration for '{name}'")

    injections = rule_data.get("injections")
    if not injections:
        raise ConfigError(f"Missing required field 'injections' in rule '{name}'")
    if not isinstance(injections, list):
        raise ConfigError(f"'injections' must be a list in rule '{name}'")

    for injection in injections:
        if not isinstance(injection, (str, int, float)) or isinstance(injection, bool):
            raise ConfigError(f"Invalid injection {injection!r} in rule '{name}'")

    return Rule(
        name=name,
        injections=[str(injection) for injection in injections],
        description=rule_data.get("description"),
        extra={k: v for k, v in rule_data.items() if k not in ("injections", "description")},
    )


# ============================================================================
# Header Flag Parser
# ============================================================================

def parse_headers(raw_headers: str) -> dict[str, str]:
    """Parse headers given as ``"Name: value;Other:value"``.

    Parts without a colon are ignored.

    Raises:
        ConfigError: If no header in the string has a colon
    """
    if ":" not in raw_headers:
        raise ConfigError(
            "Headers not formatted properly (no colon to separate header and value)"
        )

    headers: dict[str, str] = {}
    for header in raw_headers.split(";"):
        if ": " in header:
            name, value = header.split(": ", 1)
        elif ":" in header:
            name, value = header.split(":", 1)
        else:
            continue
        headers[name.strip()] = value.strip()

    return headers
