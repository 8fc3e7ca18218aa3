"""
Pipeline factory function.

This module provides create_sequence_pipeline() which instantiates
all pipeline steps in the correct order.
"""

from typing import Optional, TYPE_CHECKING

from pipeline.core.runner import PipelineRunner

if TYPE_CHECKING:
    from database.session import SessionFactory
    from pipeline.core.executor import ModelCallExecutor


def create_sequence_pipeline(
    executor: "ModelCallExecutor",
    session_factory: Optional["SessionFactory"] = None
) -> PipelineRunner:
    """
    Create the two-pass sequence generation pipeline.

    Steps are registered in execution order:
    1. ProspectAnalyzer: Analyze the prospect profile (pass 1)
    2. SequenceComposer: Generate messages and write them to the database (pass 2)

    Both steps share the executor, so both passes run under the same
    retry/fallback policy and write to the same generation ledger.

    Example:
        ```python
        runner = create_sequence_pipeline(executor)
        data = await runner.run(GenerationData(
            sequence_id=sequence.id,
            prospect=prospect.to_dict(),
            company_context="We sell onboarding software",
            sequence_length=3,
            tov_instructions=translate_tov(0.8, 0.6, 0.5)
        ))
        ```
    """
    runner = PipelineRunner()

    # Import step classes lazily to avoid circular dependencies at package import time
    from pipeline.steps.prospect_analyzer.main import ProspectAnalyzerStep
    from pipeline.steps.sequence_composer.main import SequenceComposerStep

    runner.register_step(ProspectAnalyzerStep(executor, session_factory))
    runner.register_step(SequenceComposerStep(executor, session_factory))

    return runner
