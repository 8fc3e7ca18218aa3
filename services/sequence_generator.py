"""
Sequence generator: the two-pass orchestrator behind POST /api/sequences/generate.

Flow:
    1. Resolve the prospect (cache or synthesize)
    2. Resolve the tone config (by id, or store the inline one)
    3. Create the sequence (pending -> generating), committed before any model call
    4. Run the pipeline: prospect analysis, then sequence generation
    5. Mark the sequence completed, or failed with the error message, and re-raise
"""

import asyncio
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

import logfire
from sqlalchemy.orm import Session

from config.settings import Settings
from database.base import SessionLocal
from database.session import SessionFactory, get_db_context
from models.ai_generation import AIGeneration
from models.message_sequence import MessageSequence
from models.tov_config import DEFAULT_ENTHUSIASM, DEFAULT_HUMOR, TovConfig
from pipeline import create_sequence_pipeline
from pipeline.core.exceptions import NotFoundError, ValidationError
from pipeline.core.executor import (
    COST_TABLE,
    SELF_HOSTED_RATES,
    ExecutorConfig,
    ModelCallExecutor,
)
from pipeline.core.ledger import DatabaseLedger
from pipeline.core.runner import PipelineRunner
from pipeline.models.core import GenerationData, SequenceStatus
from pipeline.steps.prospect_analyzer.models import ProspectAnalysis
from schemas.sequence import (
    AIMetadata,
    GenerateSequenceRequest,
    MessageResponse,
    ProspectSummary,
    SequenceResponse,
    TovConfigSummary,
)
from services.prospect_service import get_or_fetch_prospect
from services.tov_translator import get_tov_label, translate_tov
from utils.llm_client import OpenAICompatibleClient

CANCELLED_MESSAGE = "Generation cancelled"


def resolve_tov_config(db: Session, request: GenerateSequenceRequest) -> TovConfig:
    """
    Find the referenced tone config, or store the inline one.

    An id takes precedence over an inline config. The inline row is flushed,
    not committed; it is committed together with the sequence.

    Raises:
        NotFoundError: If tov_config_id does not exist
        ValidationError: If neither tov_config nor tov_config_id is given
    """
    if request.tov_config_id is not None:
        config = db.get(TovConfig, request.tov_config_id)
        if config is None:
            raise NotFoundError(f"TOV config not found: {request.tov_config_id}")
        return config

    if request.tov_config is not None:
        inline = request.tov_config
        config = TovConfig(
            name=f"Inline ({datetime.now(timezone.utc):%Y-%m-%d %H:%M:%S} UTC)",
            formality=inline.formality,
            warmth=inline.warmth,
            directness=inline.directness,
            humor=inline.humor,
            enthusiasm=inline.enthusiasm,
            custom_instructions=inline.custom_instructions or None,
        )
        db.add(config)
        db.flush()
        return config

    raise ValidationError("Either tov_config or tov_config_id must be provided")


def tov_instructions_for(config: TovConfig) -> str:
    return translate_tov(
        formality=config.formality,
        warmth=config.warmth,
        directness=config.directness,
        humor=config.humor,
        enthusiasm=config.enthusiasm,
        custom_instructions=config.custom_instructions,
    )


def _distinct_in_order(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


def build_sequence_response(db: Session, sequence_id: UUID) -> SequenceResponse:
    """
    Load a sequence with its prospect, tone config, messages and attempt totals.

    Raises:
        NotFoundError: If the sequence does not exist
    """
    sequence = db.get(MessageSequence, sequence_id)
    if sequence is None:
        raise NotFoundError("Sequence not found")

    prospect = sequence.prospect
    tov_config = sequence.tov_config

    generations = (
        db.query(AIGeneration)
        .filter(AIGeneration.sequence_id == sequence_id)
        .order_by(AIGeneration.created_at)
        .all()
    )

    prospect_summary = ProspectSummary()
    if prospect is not None:
        prospect_summary = ProspectSummary(
            id=prospect.id,
            full_name=prospect.full_name or "Unknown",
            headline=prospect.headline or "",
            current_company=prospect.current_company or "",
            current_position=prospect.current_position or "",
            linkedin_url=prospect.linkedin_url or "",
        )

    tov_summary = TovConfigSummary()
    if tov_config is not None:
        tov_summary = TovConfigSummary(
            id=tov_config.id,
            name=tov_config.name,
            formality=tov_config.formality,
            warmth=tov_config.warmth,
            directness=tov_config.directness,
            humor=tov_config.humor,
            enthusiasm=tov_config.enthusiasm,
            label=get_tov_label(tov_config.formality, tov_config.warmth, tov_config.directness),
        )

    analysis = None
    if sequence.prospect_analysis:
        analysis = ProspectAnalysis.model_validate(sequence.prospect_analysis)

    return SequenceResponse(
        id=sequence.id,
        status=SequenceStatus(sequence.status),
        prospect=prospect_summary,
        tov_config=tov_summary,
        company_context=sequence.company_context,
        sequence_length=sequence.sequence_length,
        prospect_analysis=analysis,
        overall_confidence=sequence.overall_confidence,
        error_message=sequence.error_message,
        messages=[
            MessageResponse(
                step_number=message.step_number,
                message_type=message.message_type,
                subject=message.subject,
                body=message.body,
                thinking_process=message.thinking_process or "",
                confidence_score=message.confidence_score or 0.0,
                personalization_points=message.personalization_points or [],
            )
            for message in sequence.messages
        ],
        ai_metadata=AIMetadata(
            total_tokens=sum(g.total_tokens or 0 for g in generations),
            total_cost_usd=sum(g.estimated_cost_usd or 0.0 for g in generations),
            models_used=_distinct_in_order([g.model for g in generations]),
        ),
        created_at=sequence.created_at,
        updated_at=sequence.updated_at,
    )


class SequenceGenerator:
    """
    Two-pass orchestrator.

    Owns the sequence lifecycle: every status change is committed before
    the next phase starts, and a sequence always ends completed or failed
    unless the process itself dies mid-generation.

    Args:
        session_factory: Session factory shared with the pipeline steps and ledger
        executor: Model call executor used by both passes
        runner: Pipeline to run; defaults to create_sequence_pipeline()
    """

    def __init__(
        self,
        executor: ModelCallExecutor,
        session_factory: Optional[SessionFactory] = None,
        runner: Optional[PipelineRunner] = None
    ):
        self.executor = executor
        self.session_factory = session_factory
        self.runner = runner or create_sequence_pipeline(executor, session_factory)

    async def generate(self, request: GenerateSequenceRequest) -> SequenceResponse:
        """
        Generate a sequence end to end.

        Returns:
            The completed, fully hydrated sequence

        Raises:
            ValidationError, NotFoundError: Before any sequence row is created
            ExternalAPIError, ParseError, PipelineExecutionError: After the
                sequence has been marked failed
            asyncio.CancelledError: After the sequence has been marked failed
        """
        with logfire.span(
            "sequence_generator.generate",
            prospect_url=request.prospect_url,
            sequence_length=request.sequence_length
        ):
            pipeline_data = self._start_sequence(request)
            sequence_id = pipeline_data.sequence_id

            try:
                await self.runner.run(pipeline_data)
                self._mark_completed(sequence_id, pipeline_data.overall_confidence)
            except asyncio.CancelledError:
                self._mark_failed(sequence_id, CANCELLED_MESSAGE)
                raise
            except Exception as e:
                self._mark_failed(sequence_id, str(e) or type(e).__name__)
                raise

            logfire.info(
                "Sequence completed",
                sequence_id=str(sequence_id),
                message_count=len(pipeline_data.messages),
                overall_confidence=pipeline_data.overall_confidence,
                total_duration=pipeline_data.total_duration()
            )

            with get_db_context(self.session_factory) as db:
                return build_sequence_response(db, sequence_id)

    def _start_sequence(self, request: GenerateSequenceRequest) -> GenerationData:
        """Resolve inputs and create the sequence in generating state."""
        with get_db_context(self.session_factory) as db:
            prospect = get_or_fetch_prospect(db, request.prospect_url)
            tov_config = resolve_tov_config(db, request)

            sequence = MessageSequence(
                prospect_id=prospect.id,
                tov_config_id=tov_config.id,
                company_context=request.company_context,
                sequence_length=request.sequence_length,
                status=SequenceStatus.PENDING,
            )
            db.add(sequence)
            db.flush()

            sequence.transition_to(SequenceStatus.GENERATING)
            db.commit()

            logfire.info(
                "Sequence created",
                sequence_id=str(sequence.id),
                prospect_id=str(prospect.id),
                tov_config_id=str(tov_config.id)
            )

            return GenerationData(
                sequence_id=sequence.id,
                prospect=prospect.to_dict(),
                company_context=request.company_context,
                sequence_length=request.sequence_length,
                tov_instructions=tov_instructions_for(tov_config),
            )

    def _mark_completed(self, sequence_id: UUID, overall_confidence: Optional[float]) -> None:
        with get_db_context(self.session_factory) as db:
            sequence = db.get(MessageSequence, sequence_id)
            sequence.transition_to(SequenceStatus.COMPLETED)
            sequence.overall_confidence = overall_confidence
            db.commit()

    def _mark_failed(self, sequence_id: UUID, error_message: str) -> None:
        logfire.error(
            "Sequence generation failed",
            sequence_id=str(sequence_id),
            error=error_message
        )

        try:
            with get_db_context(self.session_factory) as db:
                sequence = db.get(MessageSequence, sequence_id)
                sequence.transition_to(SequenceStatus.FAILED)
                sequence.error_message = error_message
                db.commit()
        except Exception as e:
            # The original failure is re-raised by the caller
            logfire.error(
                "Could not mark sequence failed",
                sequence_id=str(sequence_id),
                error=str(e),
                error_type=type(e).__name__
            )


def create_executor(settings: Settings, session_factory: Optional[SessionFactory] = None) -> ModelCallExecutor:
    """Build the model call executor for the configured provider."""
    if settings.is_self_hosted:
        client = OpenAICompatibleClient(
            api_key="",
            base_url=settings.ollama_base_url,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            json_mode=settings.llm_json_mode,
        )
        rate_table = {settings.ollama_model: SELF_HOSTED_RATES}
    else:
        client = OpenAICompatibleClient(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            json_mode=settings.llm_json_mode,
        )
        rate_table = dict(COST_TABLE)

    config = ExecutorConfig(
        primary_model=settings.active_primary_model,
        fallback_model=settings.active_fallback_model,
        max_retries=settings.llm_max_retries,
        timeout_seconds=settings.llm_timeout_seconds,
        backoff_base_seconds=settings.llm_backoff_base_seconds,
        rate_table=rate_table,
    )

    logfire.info(
        "Model call executor configured",
        provider=settings.llm_provider,
        models=config.models,
        max_retries=config.max_retries,
        timeout_seconds=config.timeout_seconds
    )

    return ModelCallExecutor(client, config, DatabaseLedger(session_factory))


def create_sequence_generator(
    settings: Settings,
    session_factory: Optional[SessionFactory] = None
) -> SequenceGenerator:
    """Build a SequenceGenerator wired from settings."""
    session_factory = session_factory or SessionLocal
    return SequenceGenerator(
        executor=create_executor(settings, session_factory),
        session_factory=session_factory,
    )
