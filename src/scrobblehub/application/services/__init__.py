"""Application services for the source lifecycle."""

from scrobblehub.application.services.source_builder import ScrobbleSources
from scrobblehub.application.services.source_lifecycle import SourceLifecycle

__all__ = ["ScrobbleSources", "SourceLifecycle"]
