#!/usr/bin/env python3
"""
Error handling for the recipe formatting surfaces.
The formatter core never raises; these exceptions belong to the layers around
it (input envelopes, output serialization, configuration loading, HTTP API).
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RecipeProcessingError(Exception):
    """Base exception for recipe processing errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None,
                 severity: ErrorSeverity = ErrorSeverity.MEDIUM):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.severity = severity
        self.timestamp = datetime.now(timezone.utc)
        self.trace_id = str(uuid.uuid4())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable error body."""
        return {
            "code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "trace_id": self.trace_id,
        }


class InvalidRecognitionInputError(RecipeProcessingError):
    """Recognition envelope could not be turned into a RawRecognitionResult."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="INVALID_RECOGNITION_INPUT",
                         details=details, severity=ErrorSeverity.LOW)


class UnsupportedOutputFormatError(RecipeProcessingError):
    """Requested serialization format is not available."""

    def __init__(self, output_format: str, supported=()):
        super().__init__(
            f"Unsupported output format: {output_format}",
            error_code="UNSUPPORTED_OUTPUT_FORMAT",
            details={"format": output_format, "supported": list(supported)},
            severity=ErrorSeverity.LOW,
        )


class ConfigurationError(RecipeProcessingError):
    """Configuration file is unreadable or carries invalid values."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="CONFIGURATION_ERROR",
                         details=details, severity=ErrorSeverity.HIGH)
