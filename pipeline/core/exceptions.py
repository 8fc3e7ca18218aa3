"""
Custom exceptions for pipeline execution.

Transient model errors are absorbed by the model call executor's retry
loop. Everything else reaches the sequence generator, which marks the
sequence failed and re-raises for the caller.
"""

from typing import List, Optional


class PipelineExecutionError(Exception):
    """
    Base exception for pipeline execution failures.

    All step-specific exceptions inherit from this.
    """
    pass


class StepExecutionError(PipelineExecutionError):
    """
    Raised when a pipeline step fails with an unexpected exception.

    Attributes:
        step_name: Name of the failed step
        original_error: The underlying exception
    """

    def __init__(self, step_name: str, original_error: Exception):
        self.step_name = step_name
        self.original_error = original_error
        error_message = f"Step '{step_name}' failed: {str(original_error)}"
        super().__init__(error_message)


class ValidationError(PipelineExecutionError):
    """
    Raised when a request or step prerequisite is malformed.

    Never retried and never produces a generation attempt record.
    """
    pass


class NotFoundError(PipelineExecutionError):
    """Raised when a referenced tone config, sequence or prospect does not exist."""
    pass


class InvalidStatusTransitionError(PipelineExecutionError):
    """Raised when a sequence status change would move backwards or leave a terminal state."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Invalid sequence status transition: {current} -> {target}")


class ExternalAPIError(PipelineExecutionError):
    """Raised when calls to the language model endpoint fail."""
    pass


class TransientModelError(ExternalAPIError):
    """
    A single model call failed or timed out.

    Retried by the executor with exponential backoff.
    """

    def __init__(self, model: str, attempt: int, message: str):
        self.model = model
        self.attempt = attempt
        super().__init__(message)


class FallbackExhaustedError(ExternalAPIError):
    """
    Every configured model exhausted its retries.

    Attributes:
        models: Models tried, in order
        retries: Attempts made per model
        last_error: Message of the final underlying failure
    """

    def __init__(self, models: List[str], retries: int, last_error: Optional[str]):
        self.models = models
        self.retries = retries
        self.last_error = last_error
        super().__init__(
            f"AI generation failed after {retries} retries "
            f"(models: {', '.join(models)}): {last_error}"
        )


class ParseError(PipelineExecutionError):
    """
    Model output could not be turned into the expected structure.

    Attributes:
        raw_text: Start of the offending model output, for diagnostics
    """

    MAX_RAW_TEXT = 2000

    def __init__(self, message: str, raw_text: str = ""):
        self.raw_text = (raw_text or "")[:self.MAX_RAW_TEXT]
        super().__init__(message)
