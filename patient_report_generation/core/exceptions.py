"""
Domain Exceptions for Patient Document Generation

This module defines all custom exceptions used throughout the patient
document pipeline. Well-defined exceptions enable:
    1. Clear error categorization for debugging
    2. Specific catch blocks for different failure modes
    3. Rich error context for troubleshooting

Exception Hierarchy:
    PatientDocumentError (base)
    ├── ConfigurationError      → Invalid configuration
    ├── PermissionDeniedError   → Caller lacks a capability
    ├── RecordError             → Patient record errors
    │   └── PatientNotFoundError
    ├── RepositoryError         → Data source failures
    │   └── DatasetLoadError
    ├── DocumentSaveError       → Writing a generated document failed
    └── GenerationError         → Document generation failures
        ├── PromptError
        └── LLMError
            ├── LLMRateLimitError
            ├── LLMContentFilteredError
            └── LLMResponseFormatError

Note:
    Missing optional fields and malformed encounter dates are NOT errors.
    They are absorbed by the prompt builder with fallback text. Only the
    external generation call can fail.

Usage:
    from patient_report_generation.core.exceptions import PatientNotFoundError

    try:
        record = repository.get_patient_or_raise("patient-1")
    except PatientNotFoundError as e:
        logger.error(f"Patient not found: {e.patient_id}")

Author: Shubham Singh
Date: January 2026
"""

from typing import Optional


# =============================================================================
# STAGE 1: BASE EXCEPTION
# =============================================================================
# All domain exceptions inherit from this base class.


class PatientDocumentError(Exception):
    """
    Base exception for all patient document errors.

    What it does:
        Provides a common base class for all domain-specific exceptions,
        enabling catch-all handling while preserving specific error types.

    Attributes:
        message: Human-readable error description
        context: Dictionary of additional context for debugging
    """

    def __init__(self, message: str, context: Optional[dict] = None):
        """
        Initialize with message and optional context.

        Args:
            message: Human-readable error description
            context: Additional debugging context (patient, stage, inputs)
        """
        self.message = message
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format message with context for display."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{context_str}]"
        return self.message


# =============================================================================
# STAGE 2: CONFIGURATION AND ACCESS ERRORS
# =============================================================================


class ConfigurationError(PatientDocumentError):
    """
    Error in pipeline configuration.

    When raised:
        - Missing required API keys
        - Unsupported LLM provider
        - Invalid numeric settings

    Example:
        >>> raise ConfigurationError(
        ...     "API key not configured",
        ...     context={"setting": "GEMINI_API_KEY", "source": "environment"}
        ... )
    """

    pass


class PermissionDeniedError(PatientDocumentError):
    """
    The caller's capabilities do not allow the requested action.

    Attributes:
        capability: Name of the missing capability
        role: Role of the caller (if known)
    """

    def __init__(self, capability: str, role: Optional[str] = None):
        self.capability = capability
        self.role = role
        super().__init__(
            f"Missing capability: {capability}",
            context={"capability": capability, "role": role or "unknown"},
        )


# =============================================================================
# STAGE 3: RECORD ERRORS
# =============================================================================


class RecordError(PatientDocumentError):
    """Base exception for patient record errors."""

    pass


class PatientNotFoundError(RecordError):
    """
    Patient record does not exist in the repository.

    Attributes:
        patient_id: The identifier that was not found
    """

    def __init__(self, patient_id: str, message: Optional[str] = None):
        self.patient_id = patient_id
        super().__init__(
            message or f"Patient not found: {patient_id}", context={"patient_id": patient_id}
        )


# =============================================================================
# STAGE 4: GENERATION ERRORS
# =============================================================================


class GenerationError(PatientDocumentError):
    """
    Base exception for document generation errors.

    What it does:
        Raised when the external text-generation collaborator fails or
        returns no usable result. The pipeline never retries on its own.
    """

    pass


class PromptError(GenerationError):
    """
    Error constructing a prompt document.

    When raised:
        - A prompt is requested for an unknown document kind
    """

    pass


class LLMError(GenerationError):
    """
    Error from LLM API call.

    Attributes:
        provider: The LLM provider (gemini, openai)
        original_error: The wrapped original exception
    """

    def __init__(self, message: str, provider: str, original_error: Optional[Exception] = None):
        self.provider = provider
        self.original_error = original_error
        super().__init__(
            message,
            context={
                "provider": provider,
                "original_error": str(original_error) if original_error else None,
            },
        )


class LLMRateLimitError(LLMError):
    """
    LLM API rate limit exceeded.

    Attributes:
        retry_after: Seconds to wait before retrying (if known)
    """

    def __init__(
        self,
        provider: str,
        retry_after: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        self.retry_after = retry_after
        super().__init__(
            f"Rate limit exceeded for {provider}", provider=provider, original_error=original_error
        )
        self.context["retry_after"] = retry_after


class LLMContentFilteredError(LLMError):
    """LLM response was filtered due to provider safety settings."""

    def __init__(self, provider: str, reason: Optional[str] = None):
        super().__init__(
            f"Content filtered by {provider} safety settings: {reason or 'unknown reason'}",
            provider=provider,
        )
        self.reason = reason


class LLMResponseFormatError(LLMError):
    """
    LLM reply did not satisfy the requested output schema.

    Attributes:
        output_field: The single string field the reply had to contain
    """

    def __init__(
        self, provider: str, output_field: str, original_error: Optional[Exception] = None
    ):
        self.output_field = output_field
        super().__init__(
            f"Response from {provider} is missing string field '{output_field}'",
            provider=provider,
            original_error=original_error,
        )
        self.context["output_field"] = output_field


# =============================================================================
# STAGE 5: REPOSITORY ERRORS
# =============================================================================


class RepositoryError(PatientDocumentError):
    """Error accessing the patient data source."""

    pass


class DatasetLoadError(RepositoryError):
    """
    Error loading a patient dataset file.

    Attributes:
        file_path: Path to the dataset file
        reason: Why loading failed
    """

    def __init__(self, file_path: str, reason: str):
        self.file_path = file_path
        self.reason = reason
        super().__init__(
            f"Failed to load dataset from {file_path}: {reason}",
            context={"file_path": file_path, "reason": reason},
        )


# =============================================================================
# STAGE 6: OUTPUT ERRORS
# =============================================================================


class DocumentSaveError(PatientDocumentError):
    """
    A generated document could not be written to disk.

    Attributes:
        file_path: Target path of the write
        reason: Underlying OS error text
    """

    def __init__(self, file_path: str, reason: str):
        self.file_path = file_path
        self.reason = reason
        super().__init__(
            f"Failed to save document to {file_path}: {reason}",
            context={"file_path": file_path, "reason": reason},
        )
