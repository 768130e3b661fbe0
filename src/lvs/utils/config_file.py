"""
Configuration file support for lvs.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import tomli
import yaml

from lvs.utils import schema
from lvs.utils.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILES = [
    ".lvs.yml",
    ".lvs.yaml",
    "lvs.yml",
    "lvs.yaml",
    "pyproject.toml",  # For [tool.lvs] section
]


KNOWN_KEYS = {
    "format",
    "output_format",
    "ecosystems",
    "concurrency",
    "max_output_bytes",
    "request_timeout",
    "audit_timeout",
    "osv_url",
    "npm_manifest",
    "python_manifest",
    "exclude_dir",
    "output",
}


def find_config_file(start_path: Optional[Path] = None) -> Optional[Path]:
    """
    Find configuration file by searching up the directory tree.

    A pyproject.toml only counts when it carries a [tool.lvs] section.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while True:
        for config_name in DEFAULT_CONFIG_FILES:
            config_path = current / config_name
            if not config_path.is_file():
                continue
            if config_name == "pyproject.toml" and not _has_tool_section(config_path):
                continue
            logger.debug(f"Found config file: {config_path}")
            return config_path
        if current == current.parent:
            return None
        current = current.parent


def _has_tool_section(config_path: Path) -> bool:
    try:
        with open(config_path, "rb") as f:
            return "lvs" in tomli.load(f).get("tool", {})
    except (OSError, tomli.TOMLDecodeError):
        return False


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """
    Load configuration from a YAML or TOML file.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    suffix = config_path.suffix.lower()
    if suffix in [".yml", ".yaml"]:
        return load_yaml_config(config_path)
    elif suffix == ".toml":
        return load_toml_config(config_path)
    raise ConfigError(f"Unsupported config file format: {config_path}")


def load_yaml_config(config_path: Path) -> Dict[str, Any]:
    """Load configuration from YAML file."""
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}")

    if not isinstance(config, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")
    logger.info(f"Loaded config from {config_path}")
    return config


def load_toml_config(config_path: Path) -> Dict[str, Any]:
    """Load configuration from TOML file (pyproject.toml)."""
    try:
        with open(config_path, "rb") as f:
            data = tomli.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}")
    except tomli.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}")

    config = data.get("tool", {}).get("lvs", {})
    if config:
        logger.info(f"Loaded config from {config_path} [tool.lvs]")
    return config


def validate_config(
    config: Dict[str, Any], base_dir: Optional[Path] = None
) -> Dict[str, Any]:
    """
    Validate and normalize configuration values.

    Unknown keys are dropped with a warning. The result only holds keys
    that ``schema.ScanConfig`` accepts. A relative ``output`` path is taken
    relative to ``base_dir``, normally the config file's directory.
    """
    validated: Dict[str, Any] = {}

    for key in config:
        if key not in KNOWN_KEYS:
            logger.warning(f"Ignoring unknown config key '{key}'")

    # Output format
    if "format" in config or "output_format" in config:
        fmt = config.get("output_format", config.get("format"))
        try:
            validated["output_format"] = schema.OutputFormat(str(fmt).lower())
        except ValueError:
            available = [f.value for f in schema.OutputFormat]
            raise ConfigError(f"Invalid output format '{fmt}'. Available: {available}")

    # Ecosystems
    if "ecosystems" in config:
        value = config["ecosystems"]
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            raise ConfigError("'ecosystems' must be a string or list of strings")
        try:
            validated["ecosystems"] = [schema.Ecosystem(str(e).lower()) for e in value]
        except ValueError:
            available = [e.value for e in schema.Ecosystem]
            raise ConfigError(f"Invalid ecosystem in {value}. Available: {available}")

    # Numeric values
    if "concurrency" in config:
        value = config["concurrency"]
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise ConfigError("'concurrency' must be a positive integer")
        validated["concurrency"] = value

    if "max_output_bytes" in config:
        value = config["max_output_bytes"]
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ConfigError("'max_output_bytes' must be a non-negative integer")
        validated["max_output_bytes"] = value

    for key in ["request_timeout", "audit_timeout"]:
        if key in config:
            value = config[key]
            if value is None and key == "audit_timeout":
                validated[key] = None
                continue
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
                raise ConfigError(f"'{key}' must be a positive number")
            validated[key] = float(value)

    # Strings
    for key in ["osv_url", "npm_manifest", "python_manifest", "exclude_dir"]:
        if key in config:
            value = config[key]
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"'{key}' must be a non-empty string")
            validated[key] = value.strip()

    # Output path
    if "output" in config:
        value = config["output"]
        if not isinstance(value, str) or not value.strip():
            raise ConfigError("'output' must be a non-empty path")
        output_file = Path(value.strip()).expanduser()
        if base_dir is not None and not output_file.is_absolute():
            output_file = base_dir / output_file
        validated["output_file"] = output_file

    return validated


def merge_config(
    file_config: Dict[str, Any], cli_overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Layer CLI options over the config file.

    An option left unset on the command line arrives as None and keeps the
    file's value (or the ScanConfig default).
    """
    given = {key: value for key, value in cli_overrides.items() if value is not None}
    return {**file_config, **given}


def create_sample_config() -> str:
    """Create a sample configuration file content."""
    return """# lvs configuration file
# Save as .lvs.yml in your project root

# Output format: pretty or json
format: pretty

# Ecosystems to scan: npm, pypi
ecosystems:
  - npm
  - pypi

# Parallel OSV queries for requirements.txt packages (1 = sequential)
concurrency: 8

# Seconds before an OSV request is abandoned
request_timeout: 30

# Seconds before `npm audit` is killed
audit_timeout: 300

# Ceiling for captured `npm audit` output, in bytes (minimum 10 MiB)
max_output_bytes: 10485760

# Write the report to a file instead of the terminal
# output: lvs-report.txt
"""


def save_sample_config(config_path: Path) -> None:
    """Save a sample configuration file."""
    with open(config_path, "w", encoding="utf-8") as f:
        f.write(create_sample_config())
    logger.info(f"Created sample config file: {config_path}")


# For pyproject.toml users
PYPROJECT_TOML_EXAMPLE = """
# Add this section to your pyproject.toml
[tool.lvs]
format = "pretty"
ecosystems = ["npm", "pypi"]
concurrency = 8
"""
