"""Config discovery, merging, validation and name resolution."""

from scrobblehub.application.config.env_builder import (
    ENV_VARIABLES,
    EnvConfigBuilder,
    default_configure_as,
)
from scrobblehub.application.config.loader import (
    COMBINED_CONFIG_FILE,
    CombinedConfig,
    ConfigLoader,
    TypeConfigFile,
)
from scrobblehub.application.config.merger import ConfigMerger
from scrobblehub.application.config.name_resolver import NameResolver
from scrobblehub.application.config.validator import (
    ConfigValidator,
    validate_full,
    validate_structure,
)

__all__ = [
    "COMBINED_CONFIG_FILE",
    "ENV_VARIABLES",
    "CombinedConfig",
    "ConfigLoader",
    "ConfigMerger",
    "ConfigValidator",
    "EnvConfigBuilder",
    "NameResolver",
    "TypeConfigFile",
    "default_configure_as",
    "validate_full",
    "validate_structure",
]
