"""
dealflow_config -- single public entrypoint for engine configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Engines never read configuration files or
    environment variables; callers load an ``EngineConfig`` here and pass
    its parts (proforma assumptions, sigma table, task windows) to the
    engines.

Architecture position:
    Configuration -- YAML-driven, validated at load time.
    This package sits above ``dealflow_engines``.  Engines MUST NEVER
    import from ``dealflow_config``; ``bridges`` translates parsed
    configuration into engine parameter types.

Failure modes:
    - ``ConfigNotFoundError`` -- no YAML set with the requested name.
    - ``InvalidConfigError`` -- malformed YAML, a missing key, a value of
      the wrong type or range, or an unordered sigma table.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``DEALFLOW_CONFIG_TRACE`` log entry with the config_id, version and
    checksum, tying displayed metrics back to the exact configuration
    that produced them.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from dealflow_config.bridges import EngineConfig, build_engine_config
from dealflow_config.loader import load_yaml_file, parse_configuration_set
from dealflow_kernel.exceptions import (
    ConfigNotFoundError,
    InvalidConfigError,
    SigmaTableError,
)

_logger = logging.getLogger("dealflow.config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

__all__ = ["EngineConfig", "get_active_config"]


def get_active_config(
    config_name: str = "default",
    config_dir: Path | None = None,
) -> EngineConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_name: Name of the YAML set (``<config_dir>/<name>.yaml``).
        config_dir: Override path to configuration sets directory.
            Defaults to dealflow_config/sets/.

    Returns:
        EngineConfig -- the runtime artifact.

    Raises:
        ConfigNotFoundError: If the set does not exist.
        InvalidConfigError: If the set cannot be parsed or validated.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    path = sets_dir / f"{config_name}.yaml"
    if not path.is_file():
        _logger.error("config_not_found", extra={
            "config_name": config_name,
            "config_dir": str(sets_dir),
        })
        raise ConfigNotFoundError(config_name, str(sets_dir))

    try:
        data = load_yaml_file(path)
        config_set = parse_configuration_set(data)
        config = build_engine_config(config_set)
    except yaml.YAMLError as exc:
        raise InvalidConfigError(config_name, f"malformed YAML: {exc}") from exc
    except KeyError as exc:
        raise InvalidConfigError(config_name, f"missing key {exc}") from exc
    except (ValueError, TypeError, AttributeError, SigmaTableError) as exc:
        raise InvalidConfigError(config_name, str(exc)) from exc

    _logger.info(
        "DEALFLOW_CONFIG_TRACE",
        extra={
            "trace_type": "DEALFLOW_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "sigma_rows": len(config.sigma_table.points),
        },
    )
    return config
