"""Exceptions raised by taskdoc.

The document operations themselves never raise: malformed input becomes an
empty document and coordinates are clamped. These exceptions surface only
from strict validation and from the host-facing API.
"""

from typing import Optional


class TaskdocError(Exception):
    """Base class for taskdoc errors."""


class MalformedDocumentError(TaskdocError, ValueError):
    """A JSON document does not have the expected node structure."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path or "$"
        super().__init__(f"{self.path}: {message}")


class FeatureDisabledError(TaskdocError):
    """An API method was called while its feature is switched off."""

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(f"Feature '{feature}' is disabled in the editor configuration")
