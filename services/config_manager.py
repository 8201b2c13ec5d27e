"""
Configuration manager: finds, loads, validates and saves AppConfig files.

YAML and JSON are both accepted; the file is split into the sections
``app``, ``reconstruction``, ``ocr``, ``storage``, ``assistant`` and
``logging``. Missing sections or keys keep their defaults.
"""
import os
import json
import logging
from typing import Dict, Any, Optional

import yaml

from models.config import (
    AppConfig,
    AssistantConfig,
    LoggingConfig,
    OCRConfig,
    ReconstructionConfig,
    StorageConfig,
)

DEFAULT_CONFIG_NAMES = (
    "chatlog.yaml",
    "chatlog.yml",
    "chatlog.json",
    "config.yaml",
    "config.yml",
    "config.json",
)

YAML_EXTENSIONS = (".yaml", ".yml")


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def _coerce(name: str, value: Any, target: type) -> Any:
    """Convert a raw YAML/JSON value to the field's type; ValueError names the setting."""
    if isinstance(value, target) and not (target is int and isinstance(value, bool)):
        return value
    # "0.7" -> 0.7, 3.0 -> 3; 2.5 for an int setting is rejected
    try:
        if target is int:
            number = float(value)
            if not number.is_integer() or isinstance(value, bool):
                raise ValueError
            return int(number)
        if target is float and not isinstance(value, bool):
            return float(value)
        if target is str and value is not None:
            return str(value)
    except (TypeError, ValueError):
        pass
    raise ValueError(f"Configuration validation failed: {name} has invalid value {value!r}")


class ConfigManager:
    """Loads the application configuration once and caches it."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Args:
            config_path: explicit config file; when None the working directory
                is searched for one of DEFAULT_CONFIG_NAMES.
        """
        self.logger = logging.getLogger(__name__)
        self.config_path = config_path or self._find_config_file()
        self._config: Optional[AppConfig] = None

    def _find_config_file(self) -> Optional[str]:
        return next((name for name in DEFAULT_CONFIG_NAMES if os.path.exists(name)), None)

    def load_config(self) -> AppConfig:
        """
        Read the configuration file (or fall back to defaults) and validate it.

        Raises:
            FileNotFoundError: an explicit config path does not exist
            ValueError: unsupported file type or invalid values
        """
        if self._config is not None:
            return self._config

        if not self.config_path:
            config = AppConfig()
        else:
            config = self._create_config_from_dict(self._load_config_file(self.config_path))
            self.logger.debug(f"Configuration read from {self.config_path}")

        config.validate()
        self._config = config
        return config

    def _load_config_file(self, file_path: str) -> Dict[str, Any]:
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        ext = os.path.splitext(file_path)[1].lower()
        if ext not in YAML_EXTENSIONS and ext != ".json":
            raise ValueError(f"Unsupported configuration file format: {ext}")

        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) if ext in YAML_EXTENSIONS else json.load(f)
        return data or {}

    def _create_config_from_dict(self, config_data: Dict[str, Any]) -> AppConfig:
        """Build an AppConfig section by section; ``extra_noise_words`` may be a single string."""
        rc = ReconstructionConfig()
        for key, value in _section(config_data, 'reconstruction').items():
            if not hasattr(rc, key):
                self.logger.warning(f"Unknown reconstruction setting ignored: {key}")
                continue
            if key == 'extra_noise_words':
                if value is None:
                    value = []
                elif isinstance(value, str):
                    value = [value]
                else:
                    value = [str(v) for v in value]
            else:
                value = _coerce(f"reconstruction.{key}", value, type(getattr(rc, key)))
            setattr(rc, key, value)

        ocr_data = _section(config_data, 'ocr')
        ocr = OCRConfig(
            language=ocr_data.get('language', OCRConfig.language),
            confidence_threshold=float(ocr_data.get('confidence_threshold', OCRConfig.confidence_threshold)),
            use_angle_cls=bool(ocr_data.get('use_angle_cls', OCRConfig.use_angle_cls)),
        )

        storage_data = _section(config_data, 'storage')
        storage = StorageConfig(
            directory=storage_data.get('directory', StorageConfig.directory),
            contacts_file=storage_data.get('contacts_file', StorageConfig.contacts_file),
            import_file=storage_data.get('import_file', StorageConfig.import_file),
        )

        assistant_data = _section(config_data, 'assistant')
        assistant = AssistantConfig(
            recent_message_count=int(assistant_data.get('recent_message_count', AssistantConfig.recent_message_count)),
        )
        if assistant_data.get('fallback_suggestions'):
            assistant.fallback_suggestions = [str(s) for s in assistant_data['fallback_suggestions']]

        log_data = _section(config_data, 'logging')
        log_cfg = LoggingConfig(
            level=log_data.get('level', LoggingConfig.level),
            file=log_data.get('file', LoggingConfig.file),
            max_size=str(log_data.get('max_size', LoggingConfig.max_size)),
        )

        return AppConfig(
            default_label=_section(config_data, 'app').get('default_label', AppConfig.default_label),
            reconstruction=rc,
            ocr=ocr,
            storage=storage,
            assistant=assistant,
            logging=log_cfg,
        )

    def save_config(self, config: AppConfig, file_path: Optional[str] = None) -> None:
        """Write ``config`` as YAML or JSON depending on the target extension."""
        save_path = file_path or self.config_path or DEFAULT_CONFIG_NAMES[0]
        ext = os.path.splitext(save_path)[1].lower()
        if ext not in YAML_EXTENSIONS and ext != ".json":
            raise ValueError(f"Unsupported configuration file format: {ext}")

        parent = os.path.dirname(save_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        with open(save_path, 'w', encoding='utf-8') as f:
            if ext in YAML_EXTENSIONS:
                yaml.safe_dump(config.to_dict(), f, default_flow_style=False, allow_unicode=True)
            else:
                json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)
        self.logger.info(f"Configuration written to {save_path}")

    def get_config(self) -> AppConfig:
        return self._config if self._config is not None else self.load_config()

    def reload_config(self) -> AppConfig:
        self._config = None
        return self.load_config()

    def create_default_config_file(self, file_path: str = DEFAULT_CONFIG_NAMES[0]) -> None:
        self.save_config(AppConfig(), file_path)
