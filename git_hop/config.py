"""User configuration stored as JSON in the XDG config folder."""
import json
import os
import sys
from typing import Any, Dict, Optional

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']

DEFAULT_CONFIG: Dict[str, Any] = {
    'check_updates': True,
    'update_timeout': 3.0,
    'log_file': None,
    'log_level': 'WARNING',
}


def get_config_path() -> str:
    """Get the path to the configuration file.

    Uses XDG Base Directory specification for config location.

    Returns:
        Full path to config.json file
    """
    xdg_config_home = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
    return os.path.join(xdg_config_home, 'git-hop', 'config.json')


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from file or return defaults.

    Invalid values fall back to their defaults with a warning on stderr.
    An unreadable file means defaults for everything.

    Args:
        config_path: File to read, the XDG location by default

    Returns:
        Configuration dictionary
    """
    config_path = config_path or get_config_path()

    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                user_config = json.load(f)
            if isinstance(user_config, dict):
                return validate_config(user_config, DEFAULT_CONFIG)
            print(f"Warning: Config in {config_path} is not a JSON object.", file=sys.stderr)
        except (json.JSONDecodeError, IOError) as e:
            print(f"Warning: Could not load config from {config_path}: {e}", file=sys.stderr)
        print("Using default configuration.", file=sys.stderr)

    return DEFAULT_CONFIG.copy()


def validate_config(user_config: Dict[str, Any], default_config: Dict[str, Any]) -> Dict[str, Any]:
    """Validate user configuration and merge with defaults.

    Args:
        user_config: Configuration loaded from file
        default_config: Default configuration values

    Returns:
        Validated configuration dictionary
    """
    validated = default_config.copy()
    warnings = []

    if 'check_updates' in user_config:
        if isinstance(user_config['check_updates'], bool):
            validated['check_updates'] = user_config['check_updates']
        else:
            warnings.append("Invalid check_updates value, using true")

    if 'update_timeout' in user_config:
        timeout = user_config['update_timeout']
        # bool is an int subclass, reject it explicitly
        if isinstance(timeout, (int, float)) and not isinstance(timeout, bool) and timeout > 0:
            validated['update_timeout'] = float(timeout)
        else:
            warnings.append(f"Invalid update_timeout, using {default_config['update_timeout']}")

    if 'log_file' in user_config:
        log_file = user_config['log_file']
        if log_file is None or (isinstance(log_file, str) and log_file.strip()):
            validated['log_file'] = os.path.expanduser(log_file) if log_file else None
        else:
            warnings.append("Invalid log_file, logging disabled")

    if 'log_level' in user_config:
        level = user_config['log_level']
        if isinstance(level, str) and level.upper() in LOG_LEVELS:
            validated['log_level'] = level.upper()
        else:
            warnings.append(f"Invalid log_level '{level}', using {default_config['log_level']}")

    if warnings:
        print("\nConfiguration warnings:", file=sys.stderr)
        for warning in warnings:
            print(f"  - {warning}", file=sys.stderr)
        print("", file=sys.stderr)

    return validated
