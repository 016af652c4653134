"""
tooling_config -- single public entrypoint for runtime configuration.

Responsibility:
    ``get_active_config()`` is the one way to obtain configuration: tax
    rate, document-number width, inventory thresholds and the BOM catalog.
    It reads ``settings.yaml`` and ``bom_catalog.yaml`` from a configuration
    directory (default: the ``sets`` directory shipped with this package).

Architecture position:
    Sits above ``tooling_kernel`` and beside ``tooling_modules``.  The
    kernel and engines never import this package; modules import it lazily
    only where a default is needed (``resolve_bom`` without a catalog).

Failure modes:
    - ``FileNotFoundError`` -- the directory has no settings.yaml.
    - ``ValueError`` -- a value fails schema validation.

Audit relevance:
    Every call emits a ``TOOLING_CONFIG_TRACE`` log entry carrying the
    config id, version, checksum and catalog size.
"""

from __future__ import annotations

from pathlib import Path

from tooling_config.bridges import ToolingConfiguration, build_configuration
from tooling_config.loader import load_configuration_set
from tooling_kernel.logging_config import get_logger

_logger = get_logger("config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"


def get_active_config(config_dir: Path | None = None) -> ToolingConfiguration:
    """
    Load and return the active configuration.

    Args:
        config_dir: Override path to a configuration directory.
            Defaults to tooling_config/sets/.

    Raises:
        FileNotFoundError: If settings.yaml is missing.
        ValueError: If a value is invalid.
    """
    sets_dir = Path(config_dir) if config_dir is not None else _DEFAULT_CONFIG_DIR
    config = build_configuration(load_configuration_set(sets_dir))

    _logger.info(
        "TOOLING_CONFIG_TRACE",
        extra={
            "trace_type": "TOOLING_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "tool_count": len(config.bom_catalog.tool_numbers()),
            "tax_rate": config.requisitions.tax_rate,
        },
    )
    return config


__all__ = ["ToolingConfiguration", "get_active_config"]
