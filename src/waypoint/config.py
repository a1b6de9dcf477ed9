"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

ALIAS_VARIABLE = "WAYPOINT_ENV"
DEFAULT_ALIAS = "default"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, alias_variable="DEPLOY_ENV")
    """

    debug: bool = False

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB

    # Execution alias handed to processors as ``ext.alias``
    alias_variable: str = ALIAS_VARIABLE
    default_alias: str = DEFAULT_ALIAS


def resolve_alias(
    environ: Mapping[str, str] | None = None,
    *,
    variable: str = ALIAS_VARIABLE,
    default: str = DEFAULT_ALIAS,
) -> str:
    """Return the execution alias from *environ*.

    Falls back to *default* when the variable is unset or empty. Reads
    ``os.environ`` when no mapping is injected.
    """
    source = os.environ if environ is None else environ
    return source.get(variable) or default
