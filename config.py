"""
Screen service configuration

Loads defaults, environment specific YAML files, an explicit config file and
environment variables, in that order, into typed config sections.
"""

import os
import yaml
import json
from typing import Dict, Any, Optional
from dataclasses import dataclass
from pathlib import Path
import logging

logger = logging.getLogger(__name__)


@dataclass
class ServiceConfig:
    """HTTP service settings"""
    host: str = "0.0.0.0"
    port: int = 8090
    debug: bool = False
    enable_cors: bool = True


@dataclass
class AuthConfig:
    """Access token settings"""
    issuer: str = "screen-service"
    jwt_secret: str = "CHANGE_ME_SCREEN_SERVICE_SECRET"
    access_token_ttl_seconds: int = 900


@dataclass
class ScreenConfig:
    """Screen routing and rendering settings"""
    url_prefix: str = "/dashboard"
    async_segment: str = "async"
    form_validate_message: Optional[str] = None


@dataclass
class LoggingConfig:
    """Logging settings"""
    level: str = "INFO"
    file: str = "logs/screen.log"
    max_size: int = 10485760  # 10MB
    backup_count: int = 5
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ScreenServiceConfig:
    """Main configuration of the screen service"""

    SECTIONS = ('service', 'auth', 'screen', 'logging')

    def __init__(self, config_file: Optional[str] = None, environment: str = "development"):
        """Initialise configuration

        Args:
            config_file: explicit config file path
            environment: environment name (development, testing, production)
        """
        self.environment = environment
        self.config_file = config_file
        self._config_data: Dict[str, Any] = {}

        self.service = ServiceConfig()
        self.auth = AuthConfig()
        self.screen = ScreenConfig()
        self.logging = LoggingConfig()

        self._load_config()

        logger.info(f"Screen service config initialized for environment: {environment}")

    def _load_config(self) -> None:
        """Load every configuration source"""
        try:
            self._load_default_config()
            self._load_environment_config()

            if self.config_file:
                self._load_file_config(self.config_file)

            self._load_env_config()
            self._apply_config()

        except Exception as e:
            logger.error(f"Failed to load config: {e}")
            raise

    def _load_default_config(self) -> None:
        """Load defaults"""
        default_config = {
            'service': {
                'host': '0.0.0.0',
                'port': 8090,
                'debug': False,
                'enable_cors': True,
            },
            'auth': {
                'issuer': 'screen-service',
                'jwt_secret': 'CHANGE_ME_SCREEN_SERVICE_SECRET',
                'access_token_ttl_seconds': 900,
            },
            'screen': {
                'url_prefix': '/dashboard',
                'async_segment': 'async',
                'form_validate_message': None,
            },
            'logging': {
                'level': 'INFO',
                'file': 'logs/screen.log',
                'max_size': 10485760,
                'backup_count': 5,
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            },
        }

        self._config_data.update(default_config)

    def _load_environment_config(self) -> None:
        """Load config/screen_{environment}.yaml when present"""
        env_config_file = f"config/screen_{self.environment}.yaml"
        if os.path.exists(env_config_file):
            self._load_file_config(env_config_file)

    def _load_file_config(self, config_file: str) -> None:
        """Load a YAML or JSON file"""
        try:
            config_path = Path(config_file)
            if not config_path.exists():
                logger.warning(f"Config file not found: {config_file}")
                return

            with open(config_path, 'r', encoding='utf-8') as f:
                if config_path.suffix.lower() in ['.yaml', '.yml']:
                    file_config = yaml.safe_load(f)
                elif config_path.suffix.lower() == '.json':
                    file_config = json.load(f)
                else:
                    logger.warning(f"Unsupported config file format: {config_file}")
                    return

            if file_config:
                self._merge_config(self._config_data, file_config)
                logger.info(f"Loaded config from: {config_file}")

        except Exception as e:
            logger.error(f"Failed to load config file {config_file}: {e}")
            raise

    def _load_env_config(self) -> None:
        """Apply environment variable overrides"""
        env_mappings = {
            'SCREEN_HOST': ('service', 'host', str),
            'SCREEN_PORT': ('service', 'port', int),
            'SCREEN_DEBUG': ('service', 'debug', bool),
            'SCREEN_ENABLE_CORS': ('service', 'enable_cors', bool),

            'SCREEN_AUTH_ISSUER': ('auth', 'issuer', str),
            'SCREEN_AUTH_SECRET': ('auth', 'jwt_secret', str),
            'SCREEN_AUTH_ACCESS_TOKEN_TTL_SECONDS': ('auth', 'access_token_ttl_seconds', int),

            'SCREEN_URL_PREFIX': ('screen', 'url_prefix', str),
            'SCREEN_ASYNC_SEGMENT': ('screen', 'async_segment', str),
            'SCREEN_FORM_VALIDATE_MESSAGE': ('screen', 'form_validate_message', str),

            'LOG_LEVEL': ('logging', 'level', str),
            'LOG_FILE': ('logging', 'file', str),
        }

        for env_var, (section, key, type_func) in env_mappings.items():
            value = os.getenv(env_var)
            if value is not None:
                try:
                    if type_func == bool:
                        value = value.lower() in ('true', '1', 'yes', 'on')
                    elif type_func == str and value.lower() == 'none':
                        value = None
                    else:
                        value = type_func(value)

                    if section not in self._config_data:
                        self._config_data[section] = {}
                    self._config_data[section][key] = value

                    logger.info(f"Applied env config: {env_var}")

                except (ValueError, TypeError) as e:
                    logger.warning(f"Invalid env config value for {env_var}: {value}, error: {e}")

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Deep merge ``override`` into ``base``"""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def _apply_config(self) -> None:
        """Copy raw values onto the section dataclasses"""
        try:
            for section in self.SECTIONS:
                if section not in self._config_data:
                    continue
                target = getattr(self, section)
                for key, value in self._config_data[section].items():
                    if hasattr(target, key):
                        setattr(target, key, value)

        except Exception as e:
            logger.error(f"Failed to apply config: {e}")
            raise

    def get(self, key: str, default: Any = None) -> Any:
        """Read a value

        Args:
            key: dotted key, e.g. ``screen.url_prefix``
            default: default value

        Returns:
            Any: config value
        """
        keys = key.split('.')
        value = self._config_data

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """Write a value

        Args:
            key: dotted key
            value: config value
        """
        keys = key.split('.')
        config = self._config_data

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

        self._apply_config()

    def validate(self) -> bool:
        """Validate the configuration

        Returns:
            bool: whether the configuration is usable
        """
        try:
            for section in self.SECTIONS:
                if section not in self._config_data:
                    logger.error(f"Missing required config section: {section}")
                    return False

            validations = [
                (1 <= self.service.port <= 65535, "service port must be between 1 and 65535"),
                (self.service.host is not None, "service host must be specified"),
                (bool(self.auth.jwt_secret), "auth jwt_secret must be specified"),
                (self.auth.access_token_ttl_seconds > 0, "auth access_token_ttl_seconds must be positive"),
                (str(self.screen.url_prefix or '/').startswith('/'), "screen url_prefix must start with '/'"),
                (bool(self.screen.async_segment), "screen async_segment must be specified"),
            ]

            for condition, message in validations:
                if not condition:
                    logger.error(f"Config validation failed: {message}")
                    return False

            logger.info("Config validation passed")
            return True

        except Exception as e:
            logger.error(f"Config validation error: {e}")
            return False

    def to_dict(self) -> Dict[str, Any]:
        """Raw configuration dict"""
        return self._config_data.copy()

    def save_to_file(self, file_path: str) -> None:
        """Save the configuration

        Args:
            file_path: target path (.yaml, .yml or .json)
        """
        try:
            config_path = Path(file_path)
            config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(config_path, 'w', encoding='utf-8') as f:
                if config_path.suffix.lower() in ['.yaml', '.yml']:
                    yaml.dump(self._config_data, f, default_flow_style=False, allow_unicode=True)
                elif config_path.suffix.lower() == '.json':
                    json.dump(self._config_data, f, indent=2, ensure_ascii=False)
                else:
                    raise ValueError(f"Unsupported file format: {config_path.suffix}")

            logger.info(f"Config saved to: {file_path}")

        except Exception as e:
            logger.error(f"Failed to save config to {file_path}: {e}")
            raise
