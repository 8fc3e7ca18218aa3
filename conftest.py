"""Root conftest.py for pytest configuration.

This file configures pytest for the entire project, ensuring:
- Proper Python path setup for imports
- Logfire observability configuration (local only, nothing is sent)
- An in-memory SQLite database per test
- A scripted model client so no test talks to a real model
"""

import os
import sys
from pathlib import Path
from typing import Any, List, Optional, Union

import logfire
import pytest


# ============================================================================
# Python Path Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom settings and ensure project root is in sys.path."""

    # Add project root to sys.path to ensure 'pipeline' package is importable
    project_root = Path(__file__).parent.resolve()
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

    # Settings are read at import time; keep the module-level engine off disk
    os.environ.setdefault("DATABASE_URL", "sqlite://")
    os.environ.setdefault("ENVIRONMENT", "test")

    # Register custom markers
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers",
        "integration: marks tests that exercise the HTTP API end to end"
    )
    config.addinivalue_line(
        "markers",
        "unit: marks tests as unit tests (fast, no external dependencies)"
    )

    # Configure logfire for all tests
    logfire.configure(
        service_name="outreach-sequencer-tests",
        environment="test",
        send_to_logfire=False,
        console=False,
    )

    logfire.info(
        "Starting test suite",
        project_root=str(project_root),
        python_path=sys.path[:3],
    )


def pytest_sessionfinish(session, exitstatus):
    """Log test session completion with summary statistics."""
    logfire.info(
        "Test suite completed",
        exit_status=exitstatus,
        tests_collected=session.testscollected,
        tests_failed=session.testsfailed,
    )


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with every table created."""
    from database.base import build_engine
    from database.utils import init_db

    test_engine = build_engine("sqlite://")
    init_db(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Session factory bound to the test database."""
    from sqlalchemy.orm import sessionmaker

    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    """A session on the test database, closed after the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ============================================================================
# Model Client Fixtures
# ============================================================================

Scripted = Union[str, BaseException]


class FakeModelClient:
    """
    ModelClient that replays a script.

    Each entry is either the raw text to return or an exception to raise.
    Calls past the end of the script raise RuntimeError.
    """

    def __init__(self, script: Optional[List[Scripted]] = None, prompt_tokens: int = 100, completion_tokens: int = 50):
        self.script = list(script or [])
        self.prompt_tokens = prompt_tokens
        self.completion_tokens = completion_tokens
        self.calls: List[dict] = []

    def push(self, *entries: Scripted) -> None:
        self.script.extend(entries)

    async def complete(self, messages, model, timeout):
        from utils.llm_client import ModelResponse

        self.calls.append({"messages": messages, "model": model, "timeout": timeout})
        if not self.script:
            raise RuntimeError("FakeModelClient script exhausted")

        entry = self.script.pop(0)
        if isinstance(entry, BaseException):
            raise entry

        return ModelResponse(
            text=entry,
            prompt_tokens=self.prompt_tokens,
            completion_tokens=self.completion_tokens,
        )

    @property
    def models_called(self) -> List[str]:
        return [call["model"] for call in self.calls]


class MemoryLedger:
    """AttemptLedger that keeps records in a list."""

    def __init__(self):
        self.records: List[Any] = []

    def record(self, attempt) -> None:
        self.records.append(attempt)

    @property
    def statuses(self) -> List[str]:
        return [r.status.value for r in self.records]


@pytest.fixture
def fake_client():
    return FakeModelClient()


@pytest.fixture
def memory_ledger():
    return MemoryLedger()


@pytest.fixture
def recording_sleep():
    """Async sleep replacement that records requested delays and returns at once."""

    class _RecordingSleep:
        def __init__(self):
            self.delays: List[float] = []

        async def __call__(self, delay: float) -> None:
            self.delays.append(delay)

    return _RecordingSleep()


@pytest.fixture
def executor_config():
    from pipeline.core.executor import ExecutorConfig

    return ExecutorConfig(
        primary_model="gpt-4o-mini",
        fallback_model="gpt-4o",
        max_retries=3,
        timeout_seconds=5.0,
        backoff_base_seconds=1.0,
    )


@pytest.fixture
def make_executor(fake_client, recording_sleep, executor_config):
    """
    Build a ModelCallExecutor on the fake client.

    Usage:
        executor = make_executor(ledger)
        executor = make_executor(ledger, config=ExecutorConfig(...))
    """
    from pipeline.core.executor import ModelCallExecutor

    def _make(ledger, config=None, client=None):
        return ModelCallExecutor(
            client or fake_client,
            config or executor_config,
            ledger,
            sleep=recording_sleep,
        )

    return _make


# ============================================================================
# Domain Fixtures
# ============================================================================

ANALYSIS_RESPONSE = {
    "professional_summary": "Co-chair of a global foundation focused on health and education.",
    "key_interests": ["global health", "climate technology"],
    "potential_pain_points": ["measuring program impact across regions"],
    "personalization_hooks": [
        {
            "hook": "Founded Breakthrough Energy",
            "source": "experience",
            "relevance": "Shows appetite for long-horizon technology bets",
        }
    ],
    "recommended_angles": ["impact measurement at scale"],
    "seniority_level": "executive",
}


def _sequence_payload(message_types, overall_confidence=0.82):
    """Pass-2 JSON the model would return for the given message types."""
    return {
        "messages": [
            {
                "step_number": index + 1,
                "message_type": message_type,
                "subject": None if index == 0 else f"Subject {index + 1}",
                "body": f"Message body {index + 1}",
                "thinking_process": f"Reasoning for step {index + 1}",
                "confidence_score": 0.8,
                "personalization_points": [
                    {"point": "Breakthrough Energy", "source": "experience", "reasoning": "Shared interest"}
                ],
            }
            for index, message_type in enumerate(message_types)
        ],
        "overall_confidence": overall_confidence,
    }


@pytest.fixture
def analysis_response():
    return dict(ANALYSIS_RESPONSE)


@pytest.fixture
def sequence_payload():
    """
    Factory for pass-2 responses.

    Usage:
        json.dumps(sequence_payload(["connection_request", "follow_up_value"]))
    """
    return _sequence_payload


@pytest.fixture
def generating_sequence(session_factory):
    """
    A prospect, a tone config and a sequence in generating state.

    Returns:
        GenerationData for the sequence, ready for the pipeline steps
    """
    from models.message_sequence import MessageSequence
    from models.tov_config import TovConfig
    from pipeline.models.core import GenerationData, SequenceStatus
    from services.prospect_service import get_or_fetch_prospect
    from services.tov_translator import translate_tov

    session = session_factory()
    try:
        prospect = get_or_fetch_prospect(session, "williamhgates")
        tov_config = TovConfig(name="Test tone", formality=0.8, warmth=0.6, directness=0.5)
        session.add(tov_config)
        session.flush()

        sequence = MessageSequence(
            prospect_id=prospect.id,
            tov_config_id=tov_config.id,
            company_context="We build impact-measurement software for nonprofits.",
            sequence_length=3,
            status=SequenceStatus.PENDING,
        )
        session.add(sequence)
        session.flush()
        sequence.transition_to(SequenceStatus.GENERATING)
        session.commit()

        return GenerationData(
            sequence_id=sequence.id,
            prospect=prospect.to_dict(),
            company_context=sequence.company_context,
            sequence_length=3,
            tov_instructions=translate_tov(0.8, 0.6, 0.5),
        )
    finally:
        session.close()
