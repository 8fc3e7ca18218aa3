"""
Prospect Analyzer Step - pass 1

Responsibilities:
- Render the prospect profile into a prompt
- Call the model through the executor (retries, fallback, ledger)
- Recover and normalize the JSON analysis
- Persist the analysis on the sequence
"""

import asyncio
import logfire
from typing import Optional

from database.session import SessionFactory
from pipeline.core.executor import ModelCallExecutor
from pipeline.core.runner import BasePipelineStep
from pipeline.models.core import GenerationData, GenerationPhase, StepResult
from services.prospect_service import build_profile_summary
from utils.json_recovery import recover_json

from .db_utils import save_prospect_analysis
from .models import normalize_prospect_analysis
from .prompts import build_analysis_messages


class ProspectAnalyzerStep(BasePipelineStep):
    """
    Step 1: Analyze the prospect for personalization opportunities.

    Updates GenerationData fields:
    - prospect_analysis: normalized analysis dict
    - metadata["analysis_model"], metadata["analysis_recovery_stage"]
    """

    def __init__(
        self,
        executor: ModelCallExecutor,
        session_factory: Optional[SessionFactory] = None
    ):
        super().__init__(step_name="prospect_analyzer")
        self.executor = executor
        self.session_factory = session_factory

    async def _validate_input(self, pipeline_data: GenerationData) -> Optional[str]:
        if not pipeline_data.prospect:
            return "prospect is missing"

        if not pipeline_data.company_context:
            return "company_context is missing"

        return None

    async def _execute_step(self, pipeline_data: GenerationData) -> StepResult:
        messages = build_analysis_messages(
            profile_summary=build_profile_summary(pipeline_data.prospect),
            company_context=pipeline_data.company_context
        )

        result = await self.executor.execute(
            messages,
            GenerationPhase.PROFILE_ANALYSIS,
            pipeline_data.sequence_id
        )

        recovered = recover_json(result.text, context="prospect analysis")
        analysis = normalize_prospect_analysis(recovered.value)

        await asyncio.to_thread(
            save_prospect_analysis,
            pipeline_data.sequence_id,
            analysis,
            self.session_factory
        )

        pipeline_data.prospect_analysis = analysis
        pipeline_data.metadata["analysis_model"] = result.model
        pipeline_data.metadata["analysis_recovery_stage"] = recovered.stage

        logfire.info(
            "Prospect analyzed",
            sequence_id=str(pipeline_data.sequence_id),
            model=result.model,
            attempts=result.attempts,
            recovery_stage=recovered.stage,
            seniority_level=analysis["seniority_level"]
        )

        return StepResult(
            success=True,
            step_name=self.step_name,
            metadata={
                "model": result.model,
                "attempts": result.attempts,
                "recovery_stage": recovered.stage,
                "total_tokens": result.total_tokens
            }
        )
