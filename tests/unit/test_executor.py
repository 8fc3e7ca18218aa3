"""
Tests for the model call executor: retries, backoff, fallback, ledger
records and cost estimation.

No real model is called; conftest.FakeModelClient replays a script and
the backoff sleep is recorded instead of awaited.
"""

import asyncio
import threading
from uuid import uuid4

import logfire
import pytest

from pipeline.core.exceptions import FallbackExhaustedError
from pipeline.core.executor import (
    COST_TABLE,
    SELF_HOSTED_RATES,
    ExecutorConfig,
    ModelRates,
    estimate_cost,
)
from pipeline.models.core import AttemptStatus, GenerationPhase


MESSAGES = [
    {"role": "system", "content": "Return JSON."},
    {"role": "user", "content": "Analyze this prospect."},
]


# ===================================================================
# TESTS - Retry and fallback
# ===================================================================

@pytest.mark.asyncio
@pytest.mark.unit
async def test_first_attempt_success(make_executor, fake_client, memory_ledger, recording_sleep):
    fake_client.push('{"ok": true}')
    executor = make_executor(memory_ledger)
    sequence_id = uuid4()

    result = await executor.execute(MESSAGES, GenerationPhase.PROFILE_ANALYSIS, sequence_id)

    assert result.text == '{"ok": true}'
    assert result.model == "gpt-4o-mini"
    assert result.attempts == 1
    assert result.total_tokens == 150
    assert recording_sleep.delays == []

    assert memory_ledger.statuses == ["success"]
    record = memory_ledger.records[0]
    assert record.sequence_id == sequence_id
    assert record.phase == GenerationPhase.PROFILE_ANALYSIS
    assert record.raw_response == '{"ok": true}'
    assert record.prompt_tokens == 100
    assert record.completion_tokens == 50
    assert record.total_tokens == 150
    assert record.estimated_cost_usd == pytest.approx(result.estimated_cost_usd)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_retries_with_exponential_backoff(make_executor, fake_client, memory_ledger, recording_sleep):
    """Two failures, then success on the third attempt of the primary model."""
    fake_client.push(
        ConnectionError("connection reset"),
        ConnectionError("connection reset"),
        '{"ok": true}',
    )
    executor = make_executor(memory_ledger)

    with logfire.span("test_retries_with_exponential_backoff"):
        result = await executor.execute(MESSAGES, GenerationPhase.SEQUENCE_GENERATION, uuid4())

    assert result.attempts == 3
    assert result.model == "gpt-4o-mini"
    assert fake_client.models_called == ["gpt-4o-mini"] * 3
    assert recording_sleep.delays == [2.0, 4.0]
    assert memory_ledger.statuses == ["error", "error", "success"]
    assert memory_ledger.records[0].error_message == "connection reset"
    assert memory_ledger.records[0].raw_response is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_falls_back_after_primary_exhausted(make_executor, fake_client, memory_ledger, recording_sleep):
    fake_client.push(
        RuntimeError("503"),
        RuntimeError("503"),
        RuntimeError("503"),
        '{"ok": true}',
    )
    executor = make_executor(memory_ledger)

    result = await executor.execute(MESSAGES, GenerationPhase.PROFILE_ANALYSIS, uuid4())

    assert result.model == "gpt-4o"
    assert result.attempts == 4
    assert fake_client.models_called == ["gpt-4o-mini"] * 3 + ["gpt-4o"]
    # No sleep between the primary's last attempt and the fallback's first
    assert recording_sleep.delays == [2.0, 4.0]
    assert memory_ledger.statuses == ["error", "error", "timeout", "success"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_all_models_exhausted(make_executor, fake_client, memory_ledger, recording_sleep):
    fake_client.push(*[RuntimeError("model overloaded") for _ in range(6)])
    executor = make_executor(memory_ledger)

    with pytest.raises(FallbackExhaustedError) as exc_info:
        await executor.execute(MESSAGES, GenerationPhase.PROFILE_ANALYSIS, uuid4())

    error = exc_info.value
    assert error.models == ["gpt-4o-mini", "gpt-4o"]
    assert error.retries == 3
    assert error.last_error == "model overloaded"
    assert "AI generation failed after 3 retries" in str(error)

    assert len(fake_client.calls) == 6
    assert recording_sleep.delays == [2.0, 4.0, 2.0, 4.0]
    assert memory_ledger.statuses == ["error", "error", "timeout", "error", "error", "timeout"]
    assert [r.model for r in memory_ledger.records] == ["gpt-4o-mini"] * 3 + ["gpt-4o"] * 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_same_primary_and_fallback_skips_fallback(make_executor, fake_client, memory_ledger):
    config = ExecutorConfig(primary_model="llama3.2", fallback_model="llama3.2", max_retries=3)
    fake_client.push(*[RuntimeError("connection refused") for _ in range(3)])
    executor = make_executor(memory_ledger, config=config)

    with pytest.raises(FallbackExhaustedError) as exc_info:
        await executor.execute(MESSAGES, GenerationPhase.PROFILE_ANALYSIS, uuid4())

    assert exc_info.value.models == ["llama3.2"]
    assert len(fake_client.calls) == 3
    assert memory_ledger.statuses == ["error", "error", "timeout"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_timeout_counts_as_failed_attempt(make_executor, memory_ledger, recording_sleep):
    class SlowClient:
        def __init__(self):
            self.calls = 0

        async def complete(self, messages, model, timeout):
            self.calls += 1
            if self.calls == 1:
                await asyncio.sleep(10)
            from utils.llm_client import ModelResponse
            return ModelResponse(text="{}", prompt_tokens=10, completion_tokens=5)

    config = ExecutorConfig(primary_model="gpt-4o-mini", timeout_seconds=0.05)
    executor = make_executor(memory_ledger, config=config, client=SlowClient())

    result = await executor.execute(MESSAGES, GenerationPhase.PROFILE_ANALYSIS, uuid4())

    assert result.attempts == 2
    assert memory_ledger.statuses == ["error", "success"]
    assert memory_ledger.records[0].error_message == "Model call timed out after 0.05s"
    assert recording_sleep.delays == [2.0]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cancellation_is_recorded_and_propagates(make_executor, memory_ledger):
    started = asyncio.Event()

    class HangingClient:
        async def complete(self, messages, model, timeout):
            started.set()
            await asyncio.sleep(10)

    executor = make_executor(memory_ledger, client=HangingClient())
    task = asyncio.create_task(
        executor.execute(MESSAGES, GenerationPhase.SEQUENCE_GENERATION, uuid4())
    )
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert memory_ledger.statuses == ["error"]
    assert memory_ledger.records[0].error_message == "cancelled"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_ledger_failure_propagates(make_executor, fake_client):
    class BrokenLedger:
        def record(self, attempt):
            raise RuntimeError("database is locked")

    fake_client.push('{"ok": true}')
    executor = make_executor(BrokenLedger())

    with pytest.raises(RuntimeError, match="database is locked"):
        await executor.execute(MESSAGES, GenerationPhase.PROFILE_ANALYSIS, uuid4())


@pytest.mark.asyncio
@pytest.mark.unit
async def test_ledger_writes_run_off_the_event_loop(make_executor, fake_client):
    class ThreadRecordingLedger:
        def __init__(self):
            self.threads = []

        def record(self, attempt):
            self.threads.append(threading.get_ident())

    fake_client.push(RuntimeError("502 Bad Gateway"), '{"ok": true}')
    ledger = ThreadRecordingLedger()
    executor = make_executor(ledger)

    await executor.execute(MESSAGES, GenerationPhase.PROFILE_ANALYSIS, uuid4())

    assert len(ledger.threads) == 2
    assert threading.get_ident() not in ledger.threads


# ===================================================================
# TESTS - Policy and pricing
# ===================================================================

@pytest.mark.unit
def test_backoff_schedule():
    config = ExecutorConfig(primary_model="m", backoff_base_seconds=0.5)

    assert [config.backoff_seconds(n) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]


@pytest.mark.unit
def test_models_without_fallback():
    assert ExecutorConfig(primary_model="m").models == ["m"]
    assert ExecutorConfig(primary_model="m", fallback_model="n").models == ["m", "n"]


@pytest.mark.unit
def test_known_model_cost():
    # 1M input at 0.15 + 1M output at 0.60
    assert estimate_cost("gpt-4o-mini", 1_000_000, 1_000_000) == pytest.approx(0.75)
    assert estimate_cost("gpt-4o", 1000, 500) == pytest.approx((1000 * 2.5 + 500 * 10.0) / 1_000_000)


@pytest.mark.unit
def test_unknown_model_uses_cheapest_rate():
    assert estimate_cost("some-new-model", 1000, 1000) == estimate_cost("gpt-4o-mini", 1000, 1000)


@pytest.mark.unit
def test_self_hosted_cost_is_zero():
    table = {"llama3.2": SELF_HOSTED_RATES}

    assert estimate_cost("llama3.2", 5000, 5000, table) == 0.0
    assert estimate_cost("anything", 5000, 5000, {}) == 0.0


@pytest.mark.unit
def test_custom_rate_table():
    table = {"house-model": ModelRates(input_per_million=1.0, output_per_million=2.0)}

    assert estimate_cost("house-model", 2_000_000, 1_000_000, table) == pytest.approx(4.0)
    assert "gpt-4o-mini" in COST_TABLE
