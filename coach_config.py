"""
Configuration management for the training coach.

Loads configuration from config.yaml (or environment variables as fallback).
"""
from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

log = logging.getLogger(__name__)

# Load .env file if it exists (for local development)
load_dotenv()

DEFAULT_CONFIG: Dict[str, Any] = {
    'logging': {
        'level': 'INFO',
    },
    'storage': {
        'data_dir': 'data',
        'key': 'baileyCoachData_v2',
    },
    'weather': {
        'base_url': 'https://api.open-meteo.com/v1/forecast',
        'latitude': 47.16,
        'longitude': -122.51,
        'timezone': 'America/Los_Angeles',
    },
    'api': {
        'strava': {
            'base_url': 'https://www.strava.com/api/v3',
            'token_url': 'https://www.strava.com/api/v3/oauth/token',
            'per_page': 30,
        },
        'timeout_seconds': 30,
    },
    'gear': {
        'shoe_capacity_miles': 350,
    },
}

ENV_OVERRIDES = {
    'COACH_LOG_LEVEL': ('logging.level', str),
    'COACH_DATA_DIR': ('storage.data_dir', str),
    'COACH_STORAGE_KEY': ('storage.key', str),
    'COACH_LATITUDE': ('weather.latitude', float),
    'COACH_LONGITUDE': ('weather.longitude', float),
    'COACH_TIMEZONE': ('weather.timezone', str),
    'STRAVA_CLIENT_ID': ('api.strava.client_id', str),
    'STRAVA_CLIENT_SECRET': ('api.strava.client_secret', str),
    'STRAVA_REFRESH_TOKEN': ('api.strava.refresh_token', str),
    'STRAVA_ACCESS_TOKEN': ('api.strava.access_token', str),
}

SECRET_KEYS = ('client_secret', 'refresh_token', 'access_token')


class Config:
    """
    Coach configuration.

    Loads configuration from:
    1. config.yaml in the working directory (if exists)
    2. Environment variables (as override)
    3. Defaults (as fallback)

    Example:
        >>> config = get_config()
        >>> config.get('storage.key')
        'baileyCoachData_v2'
    """

    def __init__(self, config_path: Optional[Path] = None, env: Optional[Dict[str, str]] = None):
        self._config: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)
        self._load_yaml(Path(config_path) if config_path else Path('config.yaml'))
        self._load_env_overrides(os.environ if env is None else env)

    def _load_yaml(self, config_path: Path) -> None:
        if not config_path.exists():
            log.info("No %s found. Using defaults and environment variables.", config_path)
            return
        try:
            with open(config_path, 'r') as f:
                yaml_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            log.warning("Failed to load %s: %s. Using defaults.", config_path, e)
            return
        if yaml_config:
            self._merge_config(yaml_config)
            log.info("Loaded configuration from %s", config_path)

    def _merge_config(self, new_config: Dict[str, Any]) -> None:
        """Recursively merge new config into existing config."""
        def merge(base: Dict, update: Dict) -> Dict:
            for key, value in update.items():
                if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                    merge(base[key], value)
                else:
                    base[key] = value
            return base

        merge(self._config, new_config)

    def _load_env_overrides(self, env: Dict[str, str]) -> None:
        for name, (key_path, cast) in ENV_OVERRIDES.items():
            raw = env.get(name)
            if not raw:
                continue
            try:
                self.set(key_path, cast(raw))
            except ValueError:
                log.warning("Ignoring %s=%r: not a valid %s", name, raw, cast.__name__)

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        Example:
            >>> config.get('weather.timezone')
            'America/Los_Angeles'
        """
        value: Any = self._config
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value: Any) -> None:
        keys = key_path.split('.')
        node = self._config
        for key in keys[:-1]:
            node = node.setdefault(key, {})
        node[keys[-1]] = value

    def get_log_level(self) -> str:
        return str(self.get('logging.level', 'INFO')).upper()

    def get_data_dir(self) -> Path:
        return Path(self.get('storage.data_dir', 'data'))

    def get_storage_key(self) -> str:
        return self.get('storage.key', 'baileyCoachData_v2')

    def get_coordinates(self) -> tuple:
        return float(self.get('weather.latitude')), float(self.get('weather.longitude'))

    def get_timezone(self) -> str:
        return self.get('weather.timezone', 'America/Los_Angeles')

    def get_timeout(self) -> int:
        return int(self.get('api.timeout_seconds', 30))

    def get_strava_setting(self, name: str) -> Optional[Any]:
        return self.get(f'api.strava.{name}')

    def get_shoe_capacity(self) -> float:
        return float(self.get('gear.shoe_capacity_miles', 350))

    def validate(self) -> list:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        lat, lon = self.get_coordinates()
        if not -90 <= lat <= 90 or not -180 <= lon <= 180:
            errors.append(f"Invalid weather coordinate: {lat}, {lon}")
        has_refresh = all(
            self.get_strava_setting(name) for name in ('client_id', 'client_secret', 'refresh_token')
        )
        if not has_refresh and not self.get_strava_setting('access_token'):
            errors.append(
                "Strava not configured (set STRAVA_CLIENT_ID/STRAVA_CLIENT_SECRET/STRAVA_REFRESH_TOKEN "
                "or STRAVA_ACCESS_TOKEN)"
            )
        return errors

    def __repr__(self) -> str:
        """String representation (hides sensitive data)."""
        safe_config = copy.deepcopy(self._config)
        strava = safe_config.get('api', {}).get('strava', {})
        for key in SECRET_KEYS:
            if strava.get(key):
                strava[key] = '***MASKED***'
        return f"Config({safe_config})"


_config: Optional[Config] = None


def get_config() -> Config:
    """Get the shared configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    global _config
    _config = None
