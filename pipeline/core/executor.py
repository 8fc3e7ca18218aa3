"""
Model call executor.

Wraps a single logical model call with a per-attempt timeout, exponential
backoff between attempts, and a fallback model once the primary model
exhausts its retries:

    primary:  attempt 1 --2s--> attempt 2 --4s--> attempt 3 (logged as timeout)
    fallback: attempt 1 --2s--> attempt 2 --4s--> attempt 3 (logged as timeout)
    -> FallbackExhaustedError

When the fallback equals the primary (a single self-hosted model) the
fallback pass is skipped.
"""

import asyncio
import json
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Mapping, Optional
from uuid import UUID

import logfire

from pipeline.core.exceptions import FallbackExhaustedError, TransientModelError
from pipeline.core.ledger import AttemptLedger, AttemptRecord
from pipeline.models.core import AttemptStatus, GenerationPhase
from utils.llm_client import ChatMessage, ModelClient


@dataclass(frozen=True)
class ModelRates:
    """USD per million tokens."""
    input_per_million: float
    output_per_million: float


COST_TABLE: Mapping[str, ModelRates] = {
    "gpt-4o-mini": ModelRates(input_per_million=0.15, output_per_million=0.6),
    "gpt-4o": ModelRates(input_per_million=2.5, output_per_million=10.0),
}

SELF_HOSTED_RATES = ModelRates(input_per_million=0.0, output_per_million=0.0)


def estimate_cost(
    model: str,
    prompt_tokens: int,
    completion_tokens: int,
    rate_table: Mapping[str, ModelRates] = COST_TABLE,
) -> float:
    """
    Estimate the USD cost of one completion.

    Unknown models are priced at the cheapest entry in the table.
    """
    rates = rate_table.get(model)
    if rates is None:
        rates = min(
            rate_table.values(),
            key=lambda r: r.input_per_million + r.output_per_million,
            default=SELF_HOSTED_RATES,
        )
    return (
        prompt_tokens * rates.input_per_million
        + completion_tokens * rates.output_per_million
    ) / 1_000_000


@dataclass(frozen=True)
class ExecutorConfig:
    """Retry, timeout and pricing policy for a ModelCallExecutor."""

    primary_model: str
    fallback_model: Optional[str] = None
    max_retries: int = 3
    timeout_seconds: float = 120.0
    backoff_base_seconds: float = 1.0
    rate_table: Mapping[str, ModelRates] = field(default_factory=lambda: dict(COST_TABLE))

    @property
    def models(self) -> List[str]:
        """Models to try, in order."""
        if self.fallback_model and self.fallback_model != self.primary_model:
            return [self.primary_model, self.fallback_model]
        return [self.primary_model]

    def backoff_seconds(self, attempt: int) -> float:
        """Delay after failed attempt n: 2**n * base."""
        return (2 ** attempt) * self.backoff_base_seconds


@dataclass(frozen=True)
class ModelCallResult:
    """Successful model call: raw text plus usage of the attempt that succeeded."""

    text: str
    model: str
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    estimated_cost_usd: float
    latency_ms: int
    attempts: int


SleepFunc = Callable[[float], Awaitable[None]]


class ModelCallExecutor:
    """
    Runs model calls under the retry/backoff/fallback policy and records
    every attempt in the ledger.

    Args:
        client: Model-call capability (see utils.llm_client.ModelClient)
        config: Explicit policy; the executor never reads global settings
        ledger: Attempt sink, written before each return or retry
        sleep: Backoff sleep, injectable so tests need not wait
    """

    def __init__(
        self,
        client: ModelClient,
        config: ExecutorConfig,
        ledger: AttemptLedger,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.client = client
        self.config = config
        self.ledger = ledger
        self._sleep = sleep

    async def _record(self, attempt: AttemptRecord) -> None:
        """Write an attempt from a worker thread so the event loop keeps serving other generations."""
        await asyncio.to_thread(self.ledger.record, attempt)

    async def execute(
        self,
        messages: List[ChatMessage],
        phase: GenerationPhase,
        sequence_id: UUID,
    ) -> ModelCallResult:
        """
        Run one logical model call.

        Returns:
            ModelCallResult from the first successful attempt

        Raises:
            FallbackExhaustedError: If every model exhausted its retries
            asyncio.CancelledError: If the surrounding task is cancelled
        """
        raw_prompt = json.dumps(messages)
        models = self.config.models
        max_retries = self.config.max_retries
        timeout = self.config.timeout_seconds
        last_error: Optional[TransientModelError] = None
        attempts_made = 0

        with logfire.span(
            f"model_call.{phase.value}",
            sequence_id=str(sequence_id),
            models=models,
            max_retries=max_retries
        ):
            for model_index, model in enumerate(models):
                if model_index > 0:
                    logfire.warning(
                        "Switching to fallback model",
                        previous_model=models[model_index - 1],
                        fallback_model=model,
                        phase=phase.value
                    )

                for attempt in range(1, max_retries + 1):
                    attempts_made += 1
                    started = time.perf_counter()

                    try:
                        response = await asyncio.wait_for(
                            self.client.complete(messages, model, timeout),
                            timeout=timeout,
                        )
                    except asyncio.CancelledError:
                        # Written inline: a second cancel must not skip the record
                        self.ledger.record(AttemptRecord(
                            sequence_id=sequence_id,
                            phase=phase,
                            model=model,
                            status=AttemptStatus.ERROR,
                            raw_prompt=raw_prompt,
                            latency_ms=_elapsed_ms(started),
                            error_message="cancelled",
                        ))
                        logfire.warning(
                            "Model call cancelled",
                            model=model,
                            attempt=attempt,
                            phase=phase.value
                        )
                        raise
                    except Exception as e:
                        last_error = TransientModelError(model, attempt, _describe_failure(e, timeout))
                        is_final_attempt = attempt == max_retries

                        await self._record(AttemptRecord(
                            sequence_id=sequence_id,
                            phase=phase,
                            model=model,
                            status=AttemptStatus.TIMEOUT if is_final_attempt else AttemptStatus.ERROR,
                            raw_prompt=raw_prompt,
                            latency_ms=_elapsed_ms(started),
                            error_message=str(last_error),
                        ))

                        logfire.warning(
                            "Model call attempt failed",
                            model=model,
                            attempt=attempt,
                            max_attempts=max_retries,
                            phase=phase.value,
                            error=str(last_error),
                            error_type=type(e).__name__
                        )

                        if not is_final_attempt:
                            delay = self.config.backoff_seconds(attempt)
                            logfire.info("Retrying model call", model=model, retry_delay=delay)
                            await self._sleep(delay)
                        continue

                    latency_ms = _elapsed_ms(started)
                    cost = estimate_cost(
                        model,
                        response.prompt_tokens,
                        response.completion_tokens,
                        self.config.rate_table,
                    )

                    await self._record(AttemptRecord(
                        sequence_id=sequence_id,
                        phase=phase,
                        model=model,
                        status=AttemptStatus.SUCCESS,
                        raw_prompt=raw_prompt,
                        latency_ms=latency_ms,
                        raw_response=response.text,
                        prompt_tokens=response.prompt_tokens,
                        completion_tokens=response.completion_tokens,
                        total_tokens=response.total_tokens,
                        estimated_cost_usd=cost,
                    ))

                    logfire.info(
                        "Model call succeeded",
                        model=model,
                        attempt=attempt,
                        phase=phase.value,
                        latency_ms=latency_ms,
                        total_tokens=response.total_tokens,
                        estimated_cost_usd=cost
                    )

                    return ModelCallResult(
                        text=response.text,
                        model=model,
                        prompt_tokens=response.prompt_tokens,
                        completion_tokens=response.completion_tokens,
                        total_tokens=response.total_tokens,
                        estimated_cost_usd=cost,
                        latency_ms=latency_ms,
                        attempts=attempts_made,
                    )

            logfire.error(
                "Model call failed on every model",
                models=models,
                attempts=attempts_made,
                phase=phase.value,
                last_error=str(last_error) if last_error else None
            )
            raise FallbackExhaustedError(
                models=models,
                retries=max_retries,
                last_error=str(last_error) if last_error else None,
            )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def _describe_failure(error: Exception, timeout: float) -> str:
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return f"Model call timed out after {timeout:g}s"
    return str(error) or type(error).__name__
