"""Drives one resolved config entry through construct → initialize → auth → register.

Hey future me - the asymmetry here is INTENTIONAL:
- initialize fails  -> source is NOT registered. It isn't usable at all.
- auth fails        -> source IS registered, just un-authed. Credentials are
                       revocable/retriable state that downstream code can fix
                       (user re-authorizes) without rebuilding the adapter.

Every failure is contained to its entry. process() never raises; add_source()
raises for the structural/construction problems so callers that add a single
source by hand get a real exception.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from scrobblehub.application.config.validator import validate_full
from scrobblehub.domain.entities import (
    AuthOutcome,
    AuthResult,
    BuildStatus,
    SourceBuildResult,
    SourceConfigEntry,
)
from scrobblehub.domain.exceptions import (
    AuthenticationFailure,
    ConstructionError,
    InitializationFailure,
    StructuralValidationError,
    UnknownSourceTypeError,
)
from scrobblehub.domain.ports.source import ISource
from scrobblehub.infrastructure.observability.log_messages import LogMessages
from scrobblehub.infrastructure.sources.factory import SourceFactory
from scrobblehub.infrastructure.sources.registry import SourceRegistry

logger = logging.getLogger(__name__)


def _result(entry: SourceConfigEntry, status: BuildStatus, error: str | None = None) -> SourceBuildResult:
    return SourceBuildResult(
        type=entry.type, name=entry.name, source=entry.source, status=status, error=error
    )


class SourceLifecycle:
    """Constructs, initializes, authenticates and registers sources."""

    def __init__(self, factory: SourceFactory, registry: SourceRegistry) -> None:
        self._factory = factory
        self._registry = registry

    async def add_source(
        self, entry: SourceConfigEntry, defaults: Mapping[str, Any] | None = None
    ) -> SourceBuildResult:
        """
        Run the full lifecycle for one entry.

        Args:
            entry: Resolved entry (unique name within its type)
            defaults: sourceDefaults layered under the entry's data

        Returns:
            SourceBuildResult (REGISTERED, AUTH_FAILED or INIT_FAILED)

        Raises:
            StructuralValidationError: Pass-2 validation failed
            UnknownSourceTypeError: No adapter for entry.type
            ConstructionError: Adapter rejected its config
        """
        errors = validate_full(entry, defaults)
        if errors:
            raise StructuralValidationError(
                f"{entry.label} has errors: {' | '.join(errors)}", errors
            )

        data = entry.effective_data(defaults)
        logger.debug("(%s) Constructing %s source", entry.name, entry.type)
        source = self._factory.create(entry.type, entry.name, data, list(entry.clients))

        if not source.initialized:
            logger.debug("(%s) Attempting %s initialization...", entry.name, entry.type)
            ready, reason = await self._initialize(source)
            if not ready:
                logger.error(LogMessages.source_init_failed(entry.name, entry.type, reason))
                return _result(entry, BuildStatus.INIT_FAILED, reason)
        logger.info("(%s) %s source initialized", entry.name, entry.type)

        status = BuildStatus.REGISTERED
        error = None
        if source.requires_auth and not source.authed:
            logger.debug("(%s) Checking %s source auth...", entry.name, entry.type)
            auth = await self._authenticate(source)
            if auth.outcome is AuthOutcome.FAILED:
                logger.warning(LogMessages.source_auth_failed(entry.name, entry.type, auth.reason))
                status = BuildStatus.AUTH_FAILED
                error = auth.reason
            else:
                logger.info("(%s) %s source auth OK", entry.name, entry.type)

        self._registry.add(source)
        return _result(entry, status, error)

    async def process(
        self, entry: SourceConfigEntry, defaults: Mapping[str, Any] | None = None
    ) -> SourceBuildResult:
        """add_source() with every failure contained and logged. Never raises."""
        try:
            return await self.add_source(entry, defaults)
        except StructuralValidationError as e:
            logger.error(LogMessages.config_entry_invalid(entry.label, e.errors))
            return _result(entry, BuildStatus.INVALID, e.message)
        except UnknownSourceTypeError as e:
            # Loader only produces known types - getting here means a bug
            logger.error(
                LogMessages.source_not_added(str(entry.name), str(entry.type), e.message),
                exc_info=True,
            )
            return _result(entry, BuildStatus.UNKNOWN_TYPE, e.message)
        except ConstructionError as e:
            logger.error(LogMessages.source_not_added(str(entry.name), str(entry.type), e.message))
            return _result(entry, BuildStatus.CONSTRUCTION_FAILED, e.message)
        except Exception as e:
            logger.error(
                LogMessages.source_not_added(str(entry.name), str(entry.type), str(e)),
                exc_info=True,
            )
            return _result(entry, BuildStatus.CONSTRUCTION_FAILED, str(e))

    @staticmethod
    async def _initialize(source: ISource) -> tuple[bool, str | None]:
        try:
            ready = await source.initialize()
        except InitializationFailure as e:
            return False, e.reason
        except Exception as e:
            logger.debug("(%s) initialize raised", source.name, exc_info=True)
            return False, str(e)
        return bool(ready), None

    @staticmethod
    async def _authenticate(source: ISource) -> AuthResult:
        try:
            return await source.test_auth()
        except AuthenticationFailure as e:
            return AuthResult.failed(e.reason or e.message)
        except Exception as e:
            # An exception during the auth check is just another failed check
            logger.debug("(%s) test_auth raised", source.name, exc_info=True)
            return AuthResult.failed(str(e))
