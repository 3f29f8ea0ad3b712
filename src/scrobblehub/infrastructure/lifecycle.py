"""Startup and shutdown helpers for the source subsystem.

Hey future me - call initialize_sources() ONCE at process start. It configures
logging from Settings, tags the pass with a correlation ID and runs the
resolution pass. The only exception that escapes is ConfigParseError (broken
config.json) - everything else is logged per source and reflected in the
returned ScrobbleSources registry. shutdown_sources() closes the shared HTTP pool.
"""

import logging
import os
from collections.abc import Mapping

from scrobblehub.application.services.source_builder import ScrobbleSources
from scrobblehub.config import Settings, get_settings
from scrobblehub.domain.exceptions import ConfigParseError
from scrobblehub.infrastructure.integrations.http_pool import HttpClientPool
from scrobblehub.infrastructure.observability.logging import (
    configure_logging,
    set_correlation_id,
)

logger = logging.getLogger(__name__)


async def initialize_sources(
    settings: Settings | None = None,
    env: Mapping[str, str] | None = None,
    *,
    setup_logging: bool = True,
) -> ScrobbleSources:
    """Build all configured sources.

    Args:
        settings: Process settings (defaults to get_settings())
        env: Environment snapshot for single-user configs (defaults to os.environ)
        setup_logging: Configure root logging from settings first

    Returns:
        ScrobbleSources holding the registry

    Raises:
        ConfigParseError: If config.json could not be parsed
    """
    settings = settings or get_settings()

    if setup_logging:
        configure_logging(
            log_level=settings.log_level,
            json_format=settings.observability.log_json_format,
            app_name=settings.app_name,
        )
    correlation_id = set_correlation_id()
    logger.info(
        "Building sources from %s (pass %s)", settings.config_dir, correlation_id
    )

    sources = ScrobbleSources(
        settings.local_url,
        settings.config_dir,
        dict(os.environ) if env is None else env,
        http_settings=settings.http,
    )
    try:
        await sources.build_sources_from_config()
    except ConfigParseError as e:
        logger.error("Sources could not be built: %s", e.message)
        raise
    return sources


async def shutdown_sources() -> None:
    """Release shared resources (HTTP connections)."""
    await HttpClientPool.close()
