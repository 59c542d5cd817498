"""
Конфигурация извлечения схемы.

DEFAULT_CONFIG: значения по умолчанию; load_config(path) накладывает
поверх них YAML-файл пользователя. Компоненты получают свой раздел
(config["parser"], config["depth"], ...) и дополняют его через setdefault.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from sqlschema.core.constants import DEFAULT_DELIMITER, SUPPORTED_DIALECTS, DIALECT_ALIASES
from sqlschema.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "parser": {
        "delimiter": DEFAULT_DELIMITER,
        "classify_head_chars": 1024,
        "zip_positional_rows": True,
    },
    "depth": {
        "reverse": False,
        "matcher": "suffix",
    },
    "converter": {
        "dialect": "mysql",
        "drop_table_comments": True,
    },
    "report": {
        "format": "json",
        "include_rows": False,
    },
    "logging": {
        "level": "INFO",
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _validate(config: Dict[str, Any]) -> None:
    for section in DEFAULT_CONFIG:
        if not isinstance(config.get(section), dict):
            raise ConfigurationError(f"Раздел '{section}' должен быть словарём", config_key=section)

    dialect = str(config["converter"].get("dialect", "")).strip().lower()
    if dialect not in DIALECT_ALIASES:
        raise ConfigurationError(
            f"Неизвестный диалект '{dialect}', ожидается один из: {', '.join(SUPPORTED_DIALECTS)}",
            config_key="converter.dialect",
            config_value=dialect,
        )

    delimiter = config["parser"].get("delimiter")
    if not isinstance(delimiter, str) or not delimiter.strip():
        raise ConfigurationError("Разделитель не может быть пустым", config_key="parser.delimiter")


def build_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """DEFAULT_CONFIG + переопределения, с проверкой."""
    config = _deep_merge(DEFAULT_CONFIG, overrides or {})
    _validate(config)
    return config


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Загружает YAML-конфигурацию и накладывает её на DEFAULT_CONFIG."""
    if path is None:
        return build_config()

    settings_path = Path(path)
    if not settings_path.exists():
        raise ConfigurationError(f"Файл конфигурации не найден: {settings_path}", config_key="path")

    try:
        with open(settings_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Некорректный YAML в {settings_path}: {e}", config_key="path") from e

    if not data:
        logger.warning("Файл конфигурации %s пуст, используются значения по умолчанию", settings_path)
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Корень {settings_path} должен быть словарём", config_key="path")

    return build_config(data)
