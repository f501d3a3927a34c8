"""Configuration loading and validation."""

import os
import tempfile
import yaml
from pathlib import Path
from typing import Dict, Any, List
from . import actions


KEYCHAIN_SUFFIX = ".keychain"
DEFAULT_TIMEOUT = 3600
DEFAULT_SECURITY_PATH = "security"

REQUIRED_KEYS = [
    "keychain_name",
    "keychain_password",
    "signing_certificates",
    "signing_certificate_passphrase",
]


class ConfigError(Exception):
    """Configuration validation error."""
    pass


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off", ""):
            return False
    raise ConfigError(f"{key} must be boolean")


def _parse_timeout(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError("keychain_timeout must be an integer")
    try:
        timeout = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"keychain_timeout must be an integer, got {value!r}")
    if timeout < 0:
        raise ConfigError("keychain_timeout must be >= 0")
    return timeout


class KeychainConfig:
    """Configuration for one keychain job."""

    def __init__(self, data: Dict[str, Any]):
        """
        Initialize configuration from dictionary.

        Args:
            data: Configuration dictionary (YAML file or action inputs)
        """
        self.data = data
        self._validate()

    def _validate(self) -> None:
        """Validate configuration schema."""
        for key in REQUIRED_KEYS:
            value = self.data.get(key)
            if not value or (isinstance(value, str) and not value.strip()):
                raise ConfigError(f"{key} is required")

        for key in ("keychain_name", "keychain_password", "signing_certificate_passphrase"):
            if not isinstance(self.data[key], str):
                raise ConfigError(f"{key} must be a string")

        certificates = self.data["signing_certificates"]
        if isinstance(certificates, str):
            certificates = [certificates]
        if not isinstance(certificates, list):
            raise ConfigError("signing_certificates must be a list")
        for idx, blob in enumerate(certificates):
            if not isinstance(blob, str) or not blob.strip():
                raise ConfigError(f"signing_certificates[{idx}] must be a non-empty string")

        _parse_timeout(self.data.get("keychain_timeout", DEFAULT_TIMEOUT))
        if "retain_keychain" in self.data:
            _parse_bool(self.data["retain_keychain"], "retain_keychain")

    @property
    def keychain_name(self) -> str:
        """Keychain name with the .keychain suffix."""
        name = self.data["keychain_name"].strip()
        if not name.endswith(KEYCHAIN_SUFFIX):
            name += KEYCHAIN_SUFFIX
        return name

    @property
    def keychain_password(self) -> str:
        return self.data["keychain_password"]

    @property
    def keychain_timeout(self) -> int:
        return _parse_timeout(self.data.get("keychain_timeout", DEFAULT_TIMEOUT))

    @property
    def signing_certificates(self) -> List[str]:
        certificates = self.data["signing_certificates"]
        if isinstance(certificates, str):
            return [certificates]
        return list(certificates)

    @property
    def signing_certificate_passphrase(self) -> str:
        return self.data["signing_certificate_passphrase"]

    @property
    def retain_keychain(self) -> bool:
        """Keep the keychain after the job; defaults to runner debug mode."""
        if "retain_keychain" in self.data:
            return _parse_bool(self.data["retain_keychain"], "retain_keychain")
        return actions.is_debug()

    @property
    def security_path(self) -> str:
        return self.data.get("security_path") or DEFAULT_SECURITY_PATH

    @property
    def temp_dir(self) -> str:
        return (
            self.data.get("temp_dir")
            or os.getenv("RUNNER_TEMP")
            or tempfile.gettempdir()
        )

    def get_tool_config(self) -> Dict[str, Any]:
        """Configuration handed to the store tool."""
        return {"security_path": self.security_path}

    def merge_with_cli_args(self, **overrides: Any) -> "KeychainConfig":
        """
        Merge configuration with CLI arguments.
        CLI arguments take precedence; None values are ignored.

        Returns:
            New KeychainConfig with merged values
        """
        merged = self.data.copy()
        for key, value in overrides.items():
            if value is not None:
                merged[key] = value
        return KeychainConfig(merged)

    def apply_environment_overrides(self) -> "KeychainConfig":
        """
        Apply environment variable overrides.

        Environment variables:
        - SIGNING_KEYCHAIN_SECURITY_PATH: Override security executable
        - SIGNING_KEYCHAIN_TIMEOUT: Override keychain timeout
        - SIGNING_KEYCHAIN_RETAIN: Keep the keychain after the job

        Returns:
            New KeychainConfig with environment overrides applied
        """
        merged = self.data.copy()

        security_path = os.getenv("SIGNING_KEYCHAIN_SECURITY_PATH")
        if security_path:
            merged["security_path"] = security_path

        timeout = os.getenv("SIGNING_KEYCHAIN_TIMEOUT")
        if timeout:
            merged["keychain_timeout"] = timeout

        retain = os.getenv("SIGNING_KEYCHAIN_RETAIN")
        if retain:
            merged["retain_keychain"] = retain

        return KeychainConfig(merged)

    @classmethod
    def from_action_inputs(cls, **overrides: Any) -> "KeychainConfig":
        """
        Build configuration from GitHub Actions step inputs.

        Args:
            **overrides: Values taking precedence over the inputs (None ignored)

        Raises:
            ConfigError: If a required value is missing or invalid
        """
        data = read_action_inputs()
        for key, value in overrides.items():
            if value is not None:
                data[key] = value
        return cls(data)


ACTION_INPUTS = {
    "keychain_name": "keychain-name",
    "keychain_password": "keychain-password",
    "keychain_timeout": "keychain-timeout",
    "signing_certificate_passphrase": "signing-certificate-passphrase",
}


def read_action_inputs() -> Dict[str, Any]:
    """
    Read the action inputs that are set, keyed by configuration name.

    Secret inputs are registered for masking as soon as they are read.

    Returns:
        Dictionary of supplied inputs (blank inputs are omitted)
    """
    data: Dict[str, Any] = {}

    for key, input_name in ACTION_INPUTS.items():
        value = actions.get_input(input_name)
        if value:
            data[key] = value

    certificates = actions.get_multiline_input("signing-certificates")
    if certificates:
        data["signing_certificates"] = certificates

    actions.set_secret(data.get("keychain_password"))
    actions.set_secret(data.get("signing_certificate_passphrase"))

    return data


def load_config(config_path: str) -> KeychainConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        KeychainConfig instance

    Raises:
        ConfigError: If config file is invalid
        FileNotFoundError: If config file doesn't exist
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping")

    # YAML keys may use the action's dashed input names
    data = {str(key).replace("-", "_"): value for key, value in data.items()}

    return KeychainConfig(data)
