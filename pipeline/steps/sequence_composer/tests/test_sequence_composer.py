"""
Test suite for Sequence Composer Step (pass 2)

Covers the message-type vocabulary, normalization of model output, and the
step itself writing sequence_messages rows.

Run with:
    pytest pipeline/steps/sequence_composer/tests/test_sequence_composer.py -v
"""

import json
import threading

import logfire
import pytest

from models.sequence_message import SequenceMessage
from pipeline.core.exceptions import ParseError, ValidationError
from pipeline.core.ledger import DatabaseLedger
from pipeline.steps.sequence_composer import main as composer_main
from pipeline.steps.sequence_composer.db_utils import write_messages_to_db
from pipeline.steps.sequence_composer.main import SequenceComposerStep
from pipeline.steps.sequence_composer.models import (
    clamp_confidence,
    get_message_types,
    normalize_generated_messages,
    parse_sequence_result,
    resolve_overall_confidence,
)


THREE_TYPES = ["connection_request", "follow_up_value", "direct_ask"]


# ===================================================================
# FIXTURES
# ===================================================================

@pytest.fixture
def composer(make_executor, session_factory):
    executor = make_executor(DatabaseLedger(session_factory))
    return SequenceComposerStep(executor, session_factory)


@pytest.fixture
def analyzed_sequence(generating_sequence, analysis_response):
    """GenerationData as ProspectAnalyzer leaves it."""
    generating_sequence.prospect_analysis = analysis_response
    return generating_sequence


def _raw_message(step, body="Hello", message_type=None, **extra):
    message = {"step_number": step, "body": body}
    if message_type:
        message["message_type"] = message_type
    message.update(extra)
    return message


# ===================================================================
# TESTS - Message type vocabulary
# ===================================================================

@pytest.mark.unit
@pytest.mark.parametrize(
    "length, expected",
    [
        (1, ["connection_request"]),
        (2, ["connection_request", "follow_up_value"]),
        (3, THREE_TYPES),
        (4, ["connection_request", "follow_up_value", "case_study", "social_proof"]),
        (6, ["connection_request", "follow_up_value", "case_study", "social_proof", "direct_ask", "breakup"]),
    ],
)
def test_message_types(length, expected):
    assert get_message_types(length) == expected


@pytest.mark.unit
def test_long_sequences_fall_back_to_follow_up():
    messages, _ = normalize_generated_messages([_raw_message(i) for i in range(1, 9)], 8)

    assert [m["message_type"] for m in messages[6:]] == ["follow_up_value", "follow_up_value"]


# ===================================================================
# TESTS - Normalization
# ===================================================================

@pytest.mark.unit
def test_fewer_messages_than_requested_is_an_error():
    with pytest.raises(ParseError, match="AI returned 2 messages, expected 3"):
        normalize_generated_messages([_raw_message(1), _raw_message(2)], 3)


@pytest.mark.unit
def test_extra_messages_are_dropped_with_warning():
    messages, warnings = normalize_generated_messages([_raw_message(i) for i in range(1, 6)], 3)

    assert [m["step_number"] for m in messages] == [1, 2, 3]
    assert any("keeping the first 3" in w for w in warnings)


@pytest.mark.unit
def test_out_of_order_step_numbers_are_kept_and_sorted():
    raw = [_raw_message(3, "third"), _raw_message(1, "first"), _raw_message(2, "second")]

    messages, warnings = normalize_generated_messages(raw, 3)

    assert [m["body"] for m in messages] == ["first", "second", "third"]
    assert warnings == []


@pytest.mark.unit
def test_duplicate_step_numbers_are_renumbered():
    raw = [_raw_message(1, "a"), _raw_message(1, "b"), _raw_message(5, "c")]

    messages, warnings = normalize_generated_messages(raw, 3)

    assert [(m["step_number"], m["body"]) for m in messages] == [(1, "a"), (2, "b"), (3, "c")]
    assert any("renumbered" in w for w in warnings)


@pytest.mark.unit
def test_missing_step_numbers_use_position():
    raw = [{"body": "a"}, {"body": "b"}]

    messages, warnings = normalize_generated_messages(raw, 2)

    assert [m["step_number"] for m in messages] == [1, 2]
    assert warnings == []


@pytest.mark.unit
def test_unknown_message_type_falls_back_to_vocabulary():
    raw = [_raw_message(1, message_type="cold_pitch"), _raw_message(2), _raw_message(3, message_type="breakup")]

    messages, warnings = normalize_generated_messages(raw, 3)

    assert [m["message_type"] for m in messages] == ["connection_request", "follow_up_value", "breakup"]
    assert len(warnings) == 1
    assert "cold_pitch" in warnings[0]


@pytest.mark.unit
@pytest.mark.parametrize("body", [None, "", "   ", 42])
def test_missing_body_is_an_error(body):
    raw = [_raw_message(1), {"step_number": 2, "body": body}]

    with pytest.raises(ParseError, match="message 2 has no body"):
        normalize_generated_messages(raw, 2)


@pytest.mark.unit
def test_non_object_message_is_an_error():
    with pytest.raises(ParseError, match="not an object"):
        normalize_generated_messages([_raw_message(1), "just text"], 2)


@pytest.mark.unit
def test_fields_are_coerced():
    raw = [
        _raw_message(
            1,
            body="  Hi Jane  ",
            subject="   ",
            thinking_process=None,
            confidence_score=1.7,
            personalization_points=[{"point": "Stripe", "source": "experience"}, "loose string"],
        ),
        _raw_message(2, subject=" Quick idea ", confidence_score="0.4"),
    ]

    messages, _ = normalize_generated_messages(raw, 2)
    first, second = messages

    assert first["body"] == "Hi Jane"
    assert first["subject"] is None
    assert first["thinking_process"] == ""
    assert first["confidence_score"] == 1.0
    assert first["personalization_points"] == [{"point": "Stripe", "source": "experience", "reasoning": ""}]
    assert second["subject"] == "Quick idea"
    assert second["confidence_score"] == 0.4


@pytest.mark.unit
@pytest.mark.parametrize(
    "value, expected",
    [(0.5, 0.5), (-1, 0.0), (3, 1.0), ("0.25", 0.25), ("high", None), (None, None), (True, None), (float("nan"), None)],
)
def test_clamp_confidence(value, expected):
    assert clamp_confidence(value) == expected


@pytest.mark.unit
def test_overall_confidence_defaults_to_message_mean():
    messages = [{"confidence_score": 0.6}, {"confidence_score": 0.8}]

    assert resolve_overall_confidence(None, messages) == pytest.approx(0.7)
    assert resolve_overall_confidence(0.9, messages) == 0.9


@pytest.mark.unit
@pytest.mark.parametrize("raw", [[], {"overall_confidence": 0.8}, "messages"])
def test_result_without_messages_array_is_an_error(raw):
    with pytest.raises(ParseError, match="missing messages array"):
        parse_sequence_result(raw, 3)


# ===================================================================
# TESTS - Step execution
# ===================================================================

@pytest.mark.asyncio
@pytest.mark.unit
async def test_messages_written_in_order(composer, fake_client, analyzed_sequence, sequence_payload, session_factory):
    logfire.info("Starting test: test_messages_written_in_order")

    # Arrange
    fake_client.push(json.dumps(sequence_payload(THREE_TYPES, overall_confidence=0.82)))

    # Act
    with logfire.span("test_messages_written_in_order"):
        result = await composer.execute(analyzed_sequence)

    # Assert - step result
    assert result.success is True
    assert result.step_name == "sequence_composer"
    assert result.metadata["message_count"] == 3
    assert result.warnings == []

    # Assert - pipeline data
    assert [m["message_type"] for m in analyzed_sequence.messages] == THREE_TYPES
    assert analyzed_sequence.overall_confidence == 0.82
    assert len(analyzed_sequence.metadata["message_ids"]) == 3

    # Assert - database
    with session_factory() as db:
        rows = (
            db.query(SequenceMessage)
            .filter(SequenceMessage.sequence_id == analyzed_sequence.sequence_id)
            .order_by(SequenceMessage.step_number)
            .all()
        )
        assert [r.step_number for r in rows] == [1, 2, 3]
        assert rows[0].subject is None
        assert rows[1].subject == "Subject 2"
        assert rows[2].personalization_points[0]["point"] == "Breakthrough Energy"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_messages_written_off_the_event_loop(
    composer, fake_client, analyzed_sequence, sequence_payload, monkeypatch
):
    threads = []

    def _write(*args):
        threads.append(threading.get_ident())
        return write_messages_to_db(*args)

    monkeypatch.setattr(composer_main, "write_messages_to_db", _write)
    fake_client.push(json.dumps(sequence_payload(THREE_TYPES)))

    await composer.execute(analyzed_sequence)

    assert len(threads) == 1
    assert threads[0] != threading.get_ident()
    assert len(analyzed_sequence.metadata["message_ids"]) == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_prompt_includes_tone_and_analysis(composer, fake_client, analyzed_sequence, sequence_payload):
    fake_client.push(json.dumps(sequence_payload(THREE_TYPES)))

    await composer.execute(analyzed_sequence)

    system_prompt = fake_client.calls[0]["messages"][0]["content"]
    assert analyzed_sequence.tov_instructions in system_prompt
    assert "Founded Breakthrough Energy" in system_prompt
    assert "connection_request, follow_up_value, direct_ask" in system_prompt


@pytest.mark.asyncio
@pytest.mark.unit
async def test_short_output_writes_nothing(composer, fake_client, analyzed_sequence, sequence_payload, session_factory):
    fake_client.push(json.dumps(sequence_payload(THREE_TYPES[:2])))

    with pytest.raises(ParseError, match="expected 3"):
        await composer.execute(analyzed_sequence)

    with session_factory() as db:
        assert db.query(SequenceMessage).count() == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_requires_prospect_analysis(composer, fake_client, generating_sequence):
    with pytest.raises(ValidationError, match="prospect_analysis"):
        await composer.execute(generating_sequence)

    assert fake_client.calls == []
