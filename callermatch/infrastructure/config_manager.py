#!/usr/bin/env python3
"""Layered configuration manager for callermatch.

This module provides configuration management with:
- 4-level precedence hierarchy
- YAML configuration files
- Log4perl-style properties files
- Environment variable overrides
- Thread-safe operations
- Building named CallerPredicate filters from configuration

Example:
    >>> config = ConfigManager()
    >>> config.load_file("callermatch.yaml")
    >>> config.get("callermatch.logging.level", default="INFO")
    >>> filters = config.build_filters()
"""

import copy
import os
import re
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from callermatch.core.constants import (
    CALLER_MATCH_CLASSES,
    DEFAULT_CONFIG,
    ConfigKey,
    ErrorCode,
    OptionKey,
)
from callermatch.core.validators import ConfigurationError
from callermatch.infrastructure.logger import get_logger
from callermatch.rules.engine import CallerPredicate

# File suffixes parsed as YAML; anything else is read as properties
YAML_SUFFIXES = (".yaml", ".yml")


class ConfigSource(Enum):
    """Configuration source precedence levels."""

    COMPILED_DEFAULTS = 1  # Lowest precedence
    USER_CONFIG = 2
    ENVIRONMENT = 3
    RUNTIME = 4  # Highest precedence


def parse_properties(text: str) -> Dict[str, Any]:
    """Parse Log4perl properties into a configuration dictionary.

    Only filter definitions are kept:

        log4perl.filter.MyFilter                = Log::Log4perl::Filter::CallerMatch
        log4perl.filter.MyFilter.SubToMatch     = WebGUI::Session::ErrorHandler
        log4perl.filter.MyFilter.PackageToMatch = Flux::

    A trailing backslash continues a line onto the next one.

    Args:
        text: Properties file content

    Returns:
        {"callermatch": {"filters": {name: {option: value}}}}

    Raises:
        ConfigurationError: If a non-comment line has no '='
    """
    filters: Dict[str, Dict[str, Any]] = {}
    lines = enumerate(text.splitlines(), start=1)

    for lineno, raw in lines:
        line = raw.strip()
        if not line or line.startswith(("#", "!")):
            continue

        while line.endswith("\\"):
            _, following = next(lines, (lineno, ""))
            line = line[:-1] + following.strip()

        key, sep, value = line.partition("=")
        if not sep:
            raise ConfigurationError(f"Line {lineno}: expected 'key = value', got {line!r}")

        parts = key.strip().split(".")
        if len(parts) < 3 or parts[1] != "filter":
            continue

        name = parts[2]
        options = filters.setdefault(name, {})
        if len(parts) == 3:
            options[OptionKey.CLASS] = value.strip()
        else:
            options[".".join(parts[3:])] = value.strip()

    return {"callermatch": {"filters": filters}}


def is_caller_match_class(filter_class: Optional[str]) -> bool:
    """Check whether a filter's declared class is a caller-match filter.

    Args:
        filter_class: Value of the filter's "class" key, if any

    Returns:
        True for no class, or one whose last component names CallerMatch
    """
    if not filter_class:
        return True

    last = re.split(r"::|\.", str(filter_class).strip())[-1]
    return last in CALLER_MATCH_CLASSES


class ConfigManager:
    """Thread-safe layered configuration manager.

    Manages configuration from multiple sources with precedence:
    1. Compiled defaults (lowest)
    2. User config file (YAML or properties)
    3. Environment variables (CALLERMATCH_*)
    4. Runtime updates (highest)
    """

    def __init__(self, config_file: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_file: Optional config file to load
        """
        self._config: Dict[ConfigSource, Dict[str, Any]] = {}
        self._lock = threading.RLock()
        self._logger = get_logger()

        self._config[ConfigSource.COMPILED_DEFAULTS] = copy.deepcopy(DEFAULT_CONFIG)

        if config_file:
            self.load_file(config_file)

        self._load_environment()

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG) -> None:
        """Load configuration from a YAML or properties file.

        Args:
            file_path: Path to config file (.yaml/.yml, otherwise properties)
            source: Configuration source level

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        path = Path(file_path).expanduser().resolve()

        if not path.exists():
            raise ConfigurationError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        if path.suffix.lower() not in YAML_SUFFIXES:
            self.load_properties(str(path), source)
            return

        try:
            with open(path, "r") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"YAML parse error in {file_path}: {e}", ErrorCode.INVALID_INPUT)
        except OSError as e:
            raise ConfigurationError(
                f"Error loading config {file_path}: {e}", ErrorCode.INTERNAL_ERROR
            )

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Invalid config format in {file_path}", ErrorCode.INVALID_INPUT)

        with self._lock:
            self._config[source] = config_data

        self._logger.debug("Loaded configuration", file=str(path), format="yaml")

    def load_properties(
        self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG
    ) -> None:
        """Load filter definitions from a Log4perl properties file.

        Args:
            file_path: Path to properties file
            source: Configuration source level

        Raises:
            ConfigurationError: If file cannot be read or parsed
        """
        path = Path(file_path).expanduser().resolve()

        try:
            text = path.read_text()
        except FileNotFoundError:
            raise ConfigurationError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)
        except OSError as e:
            raise ConfigurationError(
                f"Error loading config {file_path}: {e}", ErrorCode.INTERNAL_ERROR
            )

        try:
            config_data = parse_properties(text)
        except ConfigurationError as e:
            raise ConfigurationError(f"{file_path}: {e.message}", e.error_code)

        with self._lock:
            self._config[source] = config_data

        self._logger.debug("Loaded configuration", file=str(path), format="properties")

    def load_dict(self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Load configuration from dictionary.

        Args:
            config_data: Configuration dictionary
            source: Configuration source level
        """
        with self._lock:
            self._config[source] = copy.deepcopy(config_data)

    def _load_environment(self) -> None:
        """Load configuration from environment variables.

        Environment variables in format: CALLERMATCH_SECTION_KEY=value
        Example: CALLERMATCH_LOGGING_LEVEL=DEBUG
        """
        env_config: Dict[str, Any] = {}
        prefix = ConfigKey.ENV_PREFIX

        for key, value in os.environ.items():
            if not key.startswith(prefix) or len(key) == len(prefix):
                continue

            parts = key[len(prefix):].lower().split("_")

            current = env_config
            for part in parts[:-1]:
                current = current.setdefault(part, {})

            current[parts[-1]] = self._parse_env_value(value)

        if env_config:
            with self._lock:
                self._config[ConfigSource.ENVIRONMENT] = {ConfigKey.ROOT: env_config}

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value.

        Args:
            value: String value from environment

        Returns:
            Parsed value (int or str)
        """
        try:
            return int(value)
        except ValueError:
            return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Args:
            key: Dot-separated key path (e.g., "callermatch.logging.level")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        with self._lock:
            for source in sorted(self._config.keys(), key=lambda s: s.value, reverse=True):
                value = self._get_nested(self._config[source], key)
                if value is not None:
                    return value

            return default

    def _get_nested(self, config: Dict[str, Any], key: str) -> Optional[Any]:
        """Get value from nested dictionary using dot notation.

        Args:
            config: Configuration dictionary
            key: Dot-separated key path

        Returns:
            Value or None if not found
        """
        current: Any = config

        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]

        return current

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Set configuration value.

        Args:
            key: Dot-separated key path
            value: Value to set
            source: Configuration source level
        """
        with self._lock:
            current = self._config.setdefault(source, {})

            parts = key.split(".")
            for part in parts[:-1]:
                current = current.setdefault(part, {})

            current[parts[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Get merged configuration from all sources.

        Returns:
            Merged configuration dictionary
        """
        with self._lock:
            merged: Dict[str, Any] = {}

            for source in sorted(self._config.keys(), key=lambda s: s.value):
                merged = self._deep_merge(merged, self._config[source])

            return merged

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries.

        Args:
            base: Base dictionary
            override: Override dictionary

        Returns:
            Merged dictionary
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Clear configuration.

        Args:
            source: Specific source to clear, or None for all except defaults
        """
        with self._lock:
            if source:
                if source in self._config and source != ConfigSource.COMPILED_DEFAULTS:
                    del self._config[source]
            else:
                for s in [s for s in self._config if s != ConfigSource.COMPILED_DEFAULTS]:
                    del self._config[s]

    def _filters_section(self) -> Dict[str, Any]:
        filters = self.get_all().get(ConfigKey.ROOT, {}).get("filters") or {}
        if not isinstance(filters, dict):
            raise ConfigurationError(
                f"'{ConfigKey.FILTERS}' must be a mapping of filter names to options",
                key=ConfigKey.FILTERS,
            )
        return filters

    def filter_names(self) -> List[str]:
        """Get the names of all configured filters, sorted."""
        return sorted(self._filters_section())

    def filter_options(self, name: str) -> Dict[str, Any]:
        """Get the raw options of one filter.

        Args:
            name: Filter name

        Returns:
            Copy of the filter's option mapping

        Raises:
            ConfigurationError: If the filter is missing or not a mapping
        """
        filters = self._filters_section()

        if name not in filters:
            raise ConfigurationError(f"Filter not configured: {name}", ErrorCode.NOT_FOUND, key=name)

        options = filters[name]
        if options is None:
            return {}
        if not isinstance(options, dict):
            raise ConfigurationError(f"Options for filter {name} must be a mapping", key=name)

        return dict(options)

    def build_filter(self, name: str) -> CallerPredicate:
        """Build the predicate for one configured filter.

        Args:
            name: Filter name

        Returns:
            Constructed predicate

        Raises:
            ConfigurationError: If the filter is missing, declares another
                filter class, or its options are invalid
        """
        options = self.filter_options(name)

        filter_class = options.get(OptionKey.CLASS)
        if not is_caller_match_class(filter_class):
            raise ConfigurationError(
                f"Filter {name}: class {filter_class} is not a CallerMatch filter",
                key=OptionKey.CLASS,
            )

        with self._logger.add_context(filter=name):
            try:
                predicate = CallerPredicate.create(options)
            except ConfigurationError as e:
                raise ConfigurationError(f"Filter {name}: {e.message}", e.error_code, e.key)

            self._logger.debug("Configured caller filter")

        return predicate

    def build_filters(self) -> Dict[str, CallerPredicate]:
        """Build predicates for every configured CallerMatch filter.

        Filters declaring another class (LevelMatch, StringMatch, ...) are
        skipped with a warning.

        Returns:
            Mapping of filter name to predicate

        Raises:
            ConfigurationError: On the first filter that fails to build
        """
        predicates = {}

        for name in self.filter_names():
            filter_class = self.filter_options(name).get(OptionKey.CLASS)
            if not is_caller_match_class(filter_class):
                self._logger.warning(
                    "Skipping filter of another class", filter=name, filter_class=filter_class
                )
                continue
            predicates[name] = self.build_filter(name)

        return predicates


# Global config manager instance
_global_config: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[str] = None) -> ConfigManager:
    """Get or create global configuration manager.

    Args:
        config_file: Optional config file to load

    Returns:
        Global configuration manager
    """
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager(config_file)
    return _global_config


def set_global_config(config: ConfigManager) -> None:
    """Set the global configuration manager.

    Args:
        config: Configuration manager to use globally
    """
    global _global_config
    _global_config = config
