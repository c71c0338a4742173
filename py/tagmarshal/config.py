"""Configuration loading and parsing.

This module loads YAML files binding views to drivers, so deployments can
pick encodings without code changes.
"""

import importlib
import logging
from typing import Any

import yaml

from tagmarshal.drivers import BUILTIN_DRIVERS, Driver
from tagmarshal.errors import ConfigError
from tagmarshal.registry import GLOBAL, register_driver

logger = logging.getLogger(__name__)


def load_config(path: str) -> dict[str, Any]:
    """Load configuration from a YAML file.

    The configuration file should have the format:
    ```yaml
    strict: false
    drivers:            # views of the global namespace
      full: json
      wire: msgpack
    namespaces:         # views of named namespaces
      billing:
        full: assoc
        custom: mypkg.drivers:MyDriver
    ```

    Args:
        path: Path to the YAML configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ConfigError: If the config file is malformed
    """
    with open(path) as f:
        try:
            config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ConfigError("Config file must contain a dictionary")

    logger.trace(f"Loaded configuration from {path}")  # type: ignore
    return config


def resolve_driver(ref: str) -> type[Driver]:
    """Resolve a driver reference.

    Args:
        ref: A built-in driver name ("base", "assoc", "json", "msgpack") or
            an import path of the form "package.module:ClassName"

    Returns:
        The driver class

    Raises:
        ConfigError: If the reference cannot be resolved to a Driver subclass
    """
    if ref in BUILTIN_DRIVERS:
        return BUILTIN_DRIVERS[ref]

    module_name, sep, class_name = str(ref).partition(":")
    if not sep or not module_name or not class_name:
        raise ConfigError(
            f"Unknown driver '{ref}'. Expected one of {sorted(BUILTIN_DRIVERS)} "
            f"or <module>:<ClassName>"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import driver module '{module_name}': {e}") from e

    driver_cls = getattr(module, class_name, None)
    if not (isinstance(driver_cls, type) and issubclass(driver_cls, Driver)):
        raise ConfigError(f"'{ref}' is not a Driver subclass")
    return driver_cls


def _view_drivers(section: Any, where: str) -> dict[str, type[Driver]]:
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{where}' must map view names to drivers")
    return {str(view): resolve_driver(ref) for view, ref in section.items()}


def extract_drivers(config: dict[str, Any]) -> dict[str, dict[str, type[Driver]]]:
    """Extract driver bindings per namespace from a configuration.

    Args:
        config: Configuration dictionary

    Returns:
        Dictionary mapping namespace names to view -> driver class
    """
    bindings = {GLOBAL: _view_drivers(config.get("drivers"), "drivers")}

    namespaces = config.get("namespaces") or {}
    if not isinstance(namespaces, dict):
        raise ConfigError("'namespaces' must map namespace names to view bindings")
    for name, section in namespaces.items():
        views = _view_drivers(section, f"namespaces.{name}")
        bindings.setdefault(str(name), {}).update(views)

    return bindings


def apply_config(config: dict[str, Any]) -> None:
    """Register every driver binding of a configuration.

    Args:
        config: Configuration dictionary
    """
    for namespace, views in extract_drivers(config).items():
        for view, driver_cls in views.items():
            register_driver(namespace, view, driver_cls)
        if views:
            logger.debug(f"Configured {len(views)} view(s) in namespace '{namespace}'")
