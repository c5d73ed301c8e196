"""Settings configuration loader module.

This module handles loading and parsing of the main settings.conf file which contains
general application settings: where the marketplace documents are stored, how to reach
the chain gateway, and the defaults applied to new assets.

The settings file uses INI format with a [DEFAULT] section containing key-value pairs.
Every key is optional; missing keys fall back to DEFAULTS and a missing file yields
the defaults unchanged.

Example settings.conf:
    [DEFAULT]
    data_dir = ./data
    gateway_url = https://engine.example.com
    secret_key = <thirdweb secret key>
    backend_wallet_address = 0x742d35Cc6634C0532925a3b8D93C0dd4B7c4f2ca
    contract_address =

Secrets can also be supplied through the environment (see ENV_OVERRIDES).

Raises:
    SettingsError: If the settings file is invalid or a value fails validation
"""
from configparser import ConfigParser
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Any, List
import os

class ConfigValidationError:
    """Helper class to format configuration validation errors"""
    def __init__(self):
        self.invalid_values: List[str] = []
        self.missing_sections: List[str] = []

    def has_errors(self) -> bool:
        """Check if any errors exist"""
        return bool(self.invalid_values or self.missing_sections)

    def format_message(self) -> str:
        """Format error message in a clean, readable way"""
        messages = []

        if self.missing_sections:
            messages.append("Missing required sections:")
            messages.extend(f"  - {item}" for item in self.missing_sections)

        if self.invalid_values:
            if messages:
                messages.append("")
            messages.append("Invalid settings:")
            messages.extend(f"  - {item}" for item in self.invalid_values)

        return "\n".join(messages)

class SettingsError(Exception):
    """Raised when there are issues loading or parsing the settings configuration."""
    pass

# Default settings
DEFAULTS = {
    'data_dir': './data',  # Empty value keeps everything in memory
    'assets_file': 'assets.json',
    'sales_file': 'sales.json',
    'gateway_url': 'http://localhost:3005',  # Thirdweb Engine compatible REST service
    'rpc_url': 'https://11155111.rpc.thirdweb.com',
    'secret_key': '',
    'backend_wallet_address': '',
    'chain': 'sepolia',
    'contract_address': '',
    'network_name': 'Ethereum Sepolia Testnet',
    'explorer_url': 'https://sepolia.etherscan.io',
    'currency': 'ETH',
    'default_price': '0.001',
    'default_max_supply': '100',
    'collection_name': 'Hackathon Buyable Assets',
    'collection_symbol': 'HACK',
    'contract_uri': 'https://marketplace.example.com/contract-metadata.json',
    'gateway_timeout': '30',  # Seconds before a gateway request is abandoned
    'api_host': '0.0.0.0',
    'api_port': '3000'
}

# Environment variables that take precedence over settings.conf
ENV_OVERRIDES = {
    'THIRDWEB_SECRET_KEY': 'secret_key',
    'BACKEND_WALLET_ADDRESS': 'backend_wallet_address',
    'CONTRACT_ADDRESS': 'contract_address',
    'MARKETPLACE_DATA_DIR': 'data_dir',
    'PORT': 'api_port'
}

def load_settings_conf(settings_path: str = ".") -> Dict[str, Any]:
    """Load and parse settings.conf file with strict validation

    Args:
        settings_path: Directory containing settings.conf

    Returns:
        Dictionary containing parsed and validated settings

    Raises:
        SettingsError: If parsing fails or validation fails
    """
    config_path = Path(settings_path) / 'settings.conf'
    settings = dict(DEFAULTS)

    if config_path.exists():
        try:
            parser = ConfigParser()
            parser.read(config_path)
        except Exception as e:
            raise SettingsError(f"Error parsing settings.conf: {str(e)}")

        # Ensure DEFAULT section has content
        if not parser.defaults():
            errors = ConfigValidationError()
            errors.missing_sections.append('[DEFAULT]')
            raise SettingsError(
                "Settings Configuration Validation Failed\n\n" +
                errors.format_message()
            )

        settings.update(parser.defaults())

    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            settings[key] = value

    return validate_settings(settings)

def validate_settings(settings: Dict[str, Any]) -> Dict[str, Any]:
    """Validate loaded settings.

    Args:
        settings: Dictionary of settings to validate

    Returns:
        Validated and processed settings

    Raises:
        SettingsError: If validation fails
    """
    errors = ConfigValidationError()

    for key in ('default_max_supply', 'gateway_timeout', 'api_port'):
        try:
            settings[key] = int(settings[key])
            if settings[key] < 1:
                errors.invalid_values.append(f"{key}: must be at least 1")
        except (TypeError, ValueError):
            errors.invalid_values.append(f"{key}: not an integer ({settings[key]!r})")

    try:
        if Decimal(str(settings['default_price'])) <= 0:
            errors.invalid_values.append("default_price: must be positive")
    except InvalidOperation:
        errors.invalid_values.append(f"default_price: not a decimal ({settings['default_price']!r})")

    if settings['data_dir']:
        settings['data_dir'] = str(Path(os.path.expanduser(settings['data_dir'])).resolve())

    settings['gateway_url'] = settings['gateway_url'].rstrip('/')
    settings['explorer_url'] = settings['explorer_url'].rstrip('/')

    if errors.has_errors():
        raise SettingsError(
            "Settings Configuration Validation Failed\n\n" +
            errors.format_message()
        )

    return settings
