"""
Recovery of structured values from model output.

Models are asked for JSON but regularly wrap it in markdown fences, add a
prose preamble, leave trailing commas, use single quotes or stop mid-object
when they hit the token limit. recover_json() runs an ordered cascade of
stages and stops at the first one that parses:

    1. direct            - the text as-is
    2. code_fence        - content of a ```json ... ``` block
    3. brace_extraction  - first '{' through last '}'
    4. repair            - trailing commas, control characters, single quotes
    5. truncation        - close unterminated strings, arrays and objects

Every stage returns a value or _FAILED; none of them raise.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

import logfire

from pipeline.core.exceptions import ParseError

_FAILED = object()

_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?\s*([\s\S]*?)\s*```")
_TRAILING_COMMA_PATTERN = re.compile(r",\s*([\]}])")
_CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
_DANGLING_KEY_PATTERN = re.compile(r'"(?:[^"\\]|\\.)*"\s*:\s*$')
_VALUE_START = "[{:,"
_VALUE_END = ",:}]"

STAGE_DIRECT = "direct"
STAGE_CODE_FENCE = "code_fence"
STAGE_BRACE_EXTRACTION = "brace_extraction"
STAGE_REPAIR = "repair"
STAGE_TRUNCATION = "truncation"


@dataclass(frozen=True)
class RecoveryResult:
    """Parsed value plus the cascade stage that produced it."""
    value: Any
    stage: str


def _parse(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return _FAILED


def _brace_slice(raw: str) -> Optional[str]:
    first = raw.find("{")
    last = raw.rfind("}")
    if first == -1 or last <= first:
        return None
    return raw[first:last + 1]


def _strip_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA_PATTERN.sub(r"\1", text)


def _strip_control_chars(text: str) -> str:
    return _CONTROL_CHAR_PATTERN.sub("", text)


def _opens_single_quoted(out: List[str]) -> bool:
    """A ' starts a string only where a JSON value or key can start."""
    for char in reversed(out):
        if not char.isspace():
            return char in _VALUE_START
    return True


def _closes_single_quoted(text: str, index: int) -> bool:
    """A ' ends a string only when a separator or closer follows it."""
    rest = text[index:].lstrip()
    return not rest or rest[0] in _VALUE_END


def _normalize_single_quotes(text: str) -> str:
    """
    Rewrite single-quoted strings as double-quoted ones.

    Only delimiters outside double-quoted strings are touched, so an
    apostrophe or a 'quoted phrase' inside a normal string survives. A
    double quote inside a rewritten string is escaped.
    """
    out: List[str] = []
    in_double = False
    in_single = False
    escaped = False

    for index, char in enumerate(text):
        if in_double:
            out.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_double = False
            continue

        if in_single:
            if escaped:
                escaped = False
                out.append(char if char == "'" else "\\" + char)
            elif char == "\\":
                escaped = True
            elif char == "'" and _closes_single_quoted(text, index + 1):
                out.append('"')
                in_single = False
            elif char == '"':
                out.append('\\"')
            else:
                out.append(char)
            continue

        if char == '"':
            in_double = True
            out.append(char)
        elif char == "'" and _opens_single_quoted(out):
            in_single = True
            out.append('"')
        else:
            out.append(char)

    return "".join(out)


def _repair_base(raw: str) -> str:
    """Text the repair and truncation stages work on."""
    sliced = _brace_slice(raw)
    if sliced is not None:
        return sliced
    # An opening brace with no closing one is the usual truncation shape
    first = raw.find("{")
    return raw[first:] if first != -1 else raw


def _close_unterminated(text: str) -> str:
    """
    Append the closers a truncated document is missing.

    Openers are closed in the reverse order they were seen; brackets and
    braces inside string literals are ignored. This is a best-effort
    heuristic: a deeply nested truncation can come back syntactically
    valid but missing data.
    """
    stack: List[str] = []
    in_string = False
    escaped = False

    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in "{[":
            stack.append(char)
        elif char in "}]" and stack:
            stack.pop()

    body = text.rstrip()
    if not in_string:
        # Cut right after a key: drop the key, it has no value to close
        body = _DANGLING_KEY_PATTERN.sub("", body).rstrip()

    closers = '"' if in_string else ""
    closers += "".join("}" if opener == "{" else "]" for opener in reversed(stack))
    return body.rstrip(",") + closers


# ===================================================================
# STAGES
# ===================================================================

def _stage_direct(raw: str) -> Any:
    return _parse(raw.strip())


def _stage_code_fence(raw: str) -> Any:
    match = _FENCE_PATTERN.search(raw)
    if not match:
        return _FAILED
    return _parse(match.group(1))


def _stage_brace_extraction(raw: str) -> Any:
    sliced = _brace_slice(raw)
    if sliced is None:
        return _FAILED
    return _parse(sliced)


def _stage_repair(raw: str) -> Any:
    repaired = _strip_trailing_commas(_strip_control_chars(_repair_base(raw)))
    value = _parse(repaired)
    if value is not _FAILED:
        return value
    return _parse(_strip_trailing_commas(_normalize_single_quotes(repaired)))


def _stage_truncation(raw: str) -> Any:
    # Work from the first brace to the end; the last "}" may sit inside a string
    first = raw.find("{")
    base = raw[first:] if first != -1 else raw
    repaired = _strip_trailing_commas(_strip_control_chars(base))
    for candidate in (repaired, _normalize_single_quotes(repaired)):
        value = _parse(_strip_trailing_commas(_close_unterminated(candidate)))
        if value is not _FAILED:
            return value
    return _FAILED


STAGES: Tuple[Tuple[str, Callable[[str], Any]], ...] = (
    (STAGE_DIRECT, _stage_direct),
    (STAGE_CODE_FENCE, _stage_code_fence),
    (STAGE_BRACE_EXTRACTION, _stage_brace_extraction),
    (STAGE_REPAIR, _stage_repair),
    (STAGE_TRUNCATION, _stage_truncation),
)


def try_recover(raw: Optional[str]) -> Optional[RecoveryResult]:
    """
    Run the recovery cascade.

    Returns:
        RecoveryResult from the first stage that parsed, or None
    """
    if not raw or not raw.strip():
        return None

    for stage_name, stage in STAGES:
        value = stage(raw)
        if value is not _FAILED:
            return RecoveryResult(value=value, stage=stage_name)
    return None


def recover_json(raw: Optional[str], context: str = "model response") -> RecoveryResult:
    """
    Recover a structured value from model output.

    Args:
        raw: Raw model output
        context: What the output was for, used in the error message

    Returns:
        RecoveryResult with the parsed value and the stage that produced it

    Raises:
        ParseError: If no stage could parse the text
    """
    result = try_recover(raw)

    if result is None:
        logfire.warning(
            "Model output could not be recovered as JSON",
            context=context,
            raw_length=len(raw or ""),
            raw_preview=(raw or "")[:200]
        )
        raise ParseError(f"AI returned invalid JSON for {context}", raw_text=raw or "")

    if result.stage != STAGE_DIRECT:
        logfire.info(
            "Recovered malformed model output",
            context=context,
            stage=result.stage
        )

    return result
