"""
Core pipeline infrastructure - base classes for all steps.

BasePipelineStep: Abstract base class for pipeline steps
PipelineRunner: Orchestrates sequential step execution
"""

from abc import ABC, abstractmethod
from typing import Optional, List
import time
import logfire

from pipeline.models.core import GenerationData, StepResult
from pipeline.core.exceptions import PipelineExecutionError, StepExecutionError, ValidationError


class BasePipelineStep(ABC):
    """
    Abstract base class for all pipeline steps.

    Each step must implement:
    - _execute_step(): Core business logic
    - Optionally: _validate_input(): Input validation

    The execute() method wraps step execution with:
    - Logfire observability spans
    - Error handling and logging
    - Timing metrics
    """

    def __init__(self, step_name: str):
        """
        Initialize pipeline step.

        Args:
            step_name: Unique identifier for this step (used in logs)
        """
        self.step_name = step_name

    async def execute(self, pipeline_data: GenerationData) -> StepResult:
        """
        Execute the pipeline step with full observability.

        Errors from the pipeline taxonomy (ParseError, FallbackExhaustedError,
        ...) pass through unchanged so callers can tell them apart; anything
        else is wrapped in StepExecutionError. Cancellation is never caught.

        Args:
            pipeline_data: Shared data object (modified in-place)

        Returns:
            StepResult indicating success/failure
        """
        start_time = time.perf_counter()

        with logfire.span(
            f"pipeline.{self.step_name}",
            sequence_id=str(pipeline_data.sequence_id),
            step=self.step_name
        ):
            try:
                logfire.info(
                    f"{self.step_name} started",
                    sequence_id=str(pipeline_data.sequence_id)
                )

                validation_error = await self._validate_input(pipeline_data)
                if validation_error:
                    raise ValidationError(f"Input validation failed: {validation_error}")

                result = await self._execute_step(pipeline_data)

                duration = time.perf_counter() - start_time
                pipeline_data.add_timing(self.step_name, duration)

                if result.metadata is None:
                    result.metadata = {}
                result.metadata["duration"] = duration

                logfire.info(
                    f"{self.step_name} completed",
                    sequence_id=str(pipeline_data.sequence_id),
                    duration=duration,
                    success=result.success,
                    warnings=result.warnings
                )

                return result

            except Exception as e:
                duration = time.perf_counter() - start_time

                logfire.error(
                    f"{self.step_name} failed",
                    sequence_id=str(pipeline_data.sequence_id),
                    error=str(e),
                    error_type=type(e).__name__,
                    duration=duration,
                    exc_info=True
                )

                pipeline_data.add_error(self.step_name, str(e))

                if isinstance(e, PipelineExecutionError):
                    raise
                raise StepExecutionError(self.step_name, e) from e

    async def _validate_input(self, pipeline_data: GenerationData) -> Optional[str]:
        """
        Validate that prerequisites for this step are met.

        Returns:
            Error message if validation fails, None if valid
        """
        return None

    @abstractmethod
    async def _execute_step(self, pipeline_data: GenerationData) -> StepResult:
        """
        Execute step-specific business logic.

        MUST BE IMPLEMENTED by each step.

        Args:
            pipeline_data: Shared data object (modify in-place)

        Returns:
            StepResult with success=True/False
        """
        pass


class PipelineRunner:
    """
    Orchestrates sequential execution of all pipeline steps.

    Responsibilities:
    - Register steps in execution order
    - Execute steps sequentially (each step depends on the previous one)
    - Stop at the first failure
    - Return the populated GenerationData
    """

    def __init__(self, steps: Optional[List[BasePipelineStep]] = None):
        self.steps = steps or []

    def register_step(self, step: BasePipelineStep) -> None:
        """
        Add a step to the pipeline.

        Steps execute in the order they are registered.
        """
        self.steps.append(step)

    async def run(self, pipeline_data: GenerationData) -> GenerationData:
        """
        Run all pipeline steps sequentially.

        Args:
            pipeline_data: Shared data object

        Returns:
            The same GenerationData, populated by every step

        Raises:
            PipelineExecutionError: If any step fails, or the final step
                wrote no messages
        """
        with logfire.span(
            "pipeline.full_run",
            sequence_id=str(pipeline_data.sequence_id),
            sequence_length=pipeline_data.sequence_length
        ):
            logfire.info(
                "Pipeline execution started",
                sequence_id=str(pipeline_data.sequence_id),
                total_steps=len(self.steps)
            )

            for i, step in enumerate(self.steps):
                logfire.info(
                    f"Executing step {i+1}/{len(self.steps)}",
                    step=step.step_name
                )

                result = await step.execute(pipeline_data)

                if not result.success:
                    raise StepExecutionError(
                        step.step_name,
                        Exception(result.error or "Unknown error")
                    )

            if not pipeline_data.messages:
                raise PipelineExecutionError(
                    "Pipeline completed but no messages were written. "
                    "SequenceComposer step must populate pipeline_data.messages"
                )

            logfire.info(
                "Pipeline execution completed",
                sequence_id=str(pipeline_data.sequence_id),
                message_count=len(pipeline_data.messages),
                total_duration=pipeline_data.total_duration(),
                step_timings=pipeline_data.step_timings
            )

            return pipeline_data
