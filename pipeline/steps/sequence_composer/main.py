"""
Sequence Composer Step - pass 2

Final pipeline step - generates the message sequence and writes it to the database.

Responsibilities:
- Combine tone instructions, company context and the pass-1 analysis
- Call the model through the executor (retries, fallback, ledger)
- Recover, validate and normalize the messages
- Write one sequence_messages row per message
"""

import asyncio
import logfire
from typing import Optional

from database.session import SessionFactory
from pipeline.core.executor import ModelCallExecutor
from pipeline.core.runner import BasePipelineStep
from pipeline.models.core import GenerationData, GenerationPhase, StepResult
from utils.json_recovery import recover_json

from .db_utils import write_messages_to_db
from .models import get_message_types, parse_sequence_result
from .prompts import build_generation_messages


class SequenceComposerStep(BasePipelineStep):
    """
    Step 2: Generate the outreach sequence and write it to the database.

    Updates GenerationData fields:
    - messages: normalized messages, ordered by step_number
    - overall_confidence: float in [0, 1]
    - metadata["message_ids"]: UUIDs of the written rows
    """

    def __init__(
        self,
        executor: ModelCallExecutor,
        session_factory: Optional[SessionFactory] = None
    ):
        super().__init__(step_name="sequence_composer")
        self.executor = executor
        self.session_factory = session_factory

    async def _validate_input(self, pipeline_data: GenerationData) -> Optional[str]:
        if not pipeline_data.prospect_analysis:
            return "prospect_analysis is missing (ProspectAnalyzer must run first)"

        if not pipeline_data.tov_instructions:
            return "tov_instructions is missing"

        if not 1 <= pipeline_data.sequence_length <= 10:
            return f"sequence_length out of range: {pipeline_data.sequence_length}"

        return None

    async def _execute_step(self, pipeline_data: GenerationData) -> StepResult:
        message_types = get_message_types(pipeline_data.sequence_length)

        prompt_messages = build_generation_messages(
            prospect=pipeline_data.prospect,
            analysis=pipeline_data.prospect_analysis,
            tov_instructions=pipeline_data.tov_instructions,
            company_context=pipeline_data.company_context,
            sequence_length=pipeline_data.sequence_length,
            message_types=message_types
        )

        logfire.info(
            "Generating message sequence",
            sequence_id=str(pipeline_data.sequence_id),
            sequence_length=pipeline_data.sequence_length,
            message_types=message_types
        )

        result = await self.executor.execute(
            prompt_messages,
            GenerationPhase.SEQUENCE_GENERATION,
            pipeline_data.sequence_id
        )

        recovered = recover_json(result.text, context="sequence generation")
        messages, overall_confidence, warnings = parse_sequence_result(
            recovered.value,
            pipeline_data.sequence_length
        )

        for warning in warnings:
            logfire.warning(
                "Sequence output normalized",
                sequence_id=str(pipeline_data.sequence_id),
                detail=warning
            )

        message_ids = await asyncio.to_thread(
            write_messages_to_db,
            pipeline_data.sequence_id,
            messages,
            self.session_factory
        )

        pipeline_data.messages = messages
        pipeline_data.overall_confidence = overall_confidence
        pipeline_data.metadata["message_ids"] = message_ids
        pipeline_data.metadata["generation_model"] = result.model
        pipeline_data.metadata["generation_recovery_stage"] = recovered.stage

        return StepResult(
            success=True,
            step_name=self.step_name,
            metadata={
                "model": result.model,
                "attempts": result.attempts,
                "recovery_stage": recovered.stage,
                "message_count": len(messages),
                "overall_confidence": overall_confidence
            },
            warnings=warnings
        )
