"""
Parsing and repair of JSON payloads returned by Gemini.

Every payload is treated as untrusted text. The result is tagged so callers
must decide what to do with a repaired or malformed payload explicitly.
"""
import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from utils.logger import get_logger

logger = get_logger(__name__)

CODE_FENCE_PATTERN = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)

# How many candidate cut points to try before giving up on a repair
MAX_REPAIR_ATTEMPTS = 200


class ParseStatus(Enum):
    OK = "ok"
    REPAIRED = "repaired"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ParsedPayload:
    """Outcome of parsing one response"""
    status: ParseStatus
    raw: str
    data: Optional[Dict[str, Any]] = None

    @property
    def is_usable(self) -> bool:
        return self.status is not ParseStatus.MALFORMED

    def entries(self, list_key: str) -> List[Any]:
        if not self.data:
            return []
        return list(self.data.get(list_key) or [])


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fences and any prose before the JSON body"""
    cleaned = (text or "").strip()
    if "```" in cleaned:
        match = CODE_FENCE_PATTERN.search(cleaned)
        if match:
            cleaned = match.group(1)
        else:
            # Unterminated fence, typically a truncated response
            cleaned = re.sub(r"^```(?:json)?", "", cleaned).strip()
    starts = [position for position in (cleaned.find("{"), cleaned.find("[")) if position >= 0]
    if starts and min(starts) > 0:
        cleaned = cleaned[min(starts):]
    return cleaned.strip()


def parse_payload(raw: str, list_key: str) -> ParsedPayload:
    """
    Parse a payload of the form {list_key: [ ... ]}

    Args:
        raw: Raw response text
        list_key: Name of the array the payload must carry

    Returns:
        ParsedPayload tagged OK, REPAIRED or MALFORMED
    """
    cleaned = strip_code_fences(raw)

    if cleaned.endswith(("}", "]")):
        data = _load_with_key(cleaned, list_key)
        if data is not None:
            return ParsedPayload(ParseStatus.OK, raw, data)

    repaired = repair_truncated_json(cleaned, list_key)
    if repaired is not None:
        logger.warning(
            f"Repaired truncated response: recovered {len(repaired[list_key])} '{list_key}' entries"
        )
        return ParsedPayload(ParseStatus.REPAIRED, raw, repaired)

    logger.debug(f"Unparsable payload: {raw!r}")
    return ParsedPayload(ParseStatus.MALFORMED, raw)


def repair_truncated_json(text: str, list_key: str) -> Optional[Dict[str, Any]]:
    """
    Cut a truncated payload back to its last complete array element and
    close the remaining open brackets

    Returns:
        The parsed payload, or None if no cut point yields valid JSON
    """
    if not text.startswith("{"):
        return None

    cut = len(text)
    for _ in range(MAX_REPAIR_ATTEMPTS):
        cut = text.rfind("}", 0, cut)
        if cut < 0:
            return None
        candidate = text[:cut + 1]
        closing = _closing_sequence(candidate)
        if closing is not None:
            data = _load_with_key(candidate + closing, list_key)
            if data is not None:
                return data
    return None


def _closing_sequence(text: str) -> Optional[str]:
    """Brackets needed to close text, or None if it ends inside a string"""
    stack = []
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
        elif char in "}]":
            if not stack:
                return None
            stack.pop()
    if in_string:
        return None
    return "".join("}" if opener == "{" else "]" for opener in reversed(stack))


def _load_with_key(text: str, list_key: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, RecursionError):
        # RecursionError: nesting deeper than the decoder can follow
        return None
    if isinstance(data, list):
        data = {list_key: data}
    if isinstance(data, dict) and isinstance(data.get(list_key), list):
        return data
    return None
