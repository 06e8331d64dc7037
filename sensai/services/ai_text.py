"""
AI response text extraction

Generative-AI SDKs (and their test doubles) return several different response
shapes. Extraction tries an explicit, ordered list of strategies and falls back
to serializing the whole object, so the same input always yields the same text.
"""
import json
import re
from typing import Any, Callable, List, Optional, Tuple

from sensai.errors import AIResponseMalformedError

_MISSING = object()

# ``` optionally followed by a language tag, plus the newline after it
CODE_FENCE_RE = re.compile(r"```[A-Za-z0-9_+\-]*[ \t]*\n?")


def _field(obj: Any, name: str) -> Any:
    """Read a key from a dict or an attribute from an object."""
    if obj is None:
        return _MISSING
    if isinstance(obj, dict):
        return obj.get(name, _MISSING)
    return getattr(obj, name, _MISSING)


def _first(seq: Any) -> Any:
    if isinstance(seq, (list, tuple)) and seq:
        return seq[0]
    return _MISSING


def _path(obj: Any, *steps: str) -> Any:
    """Follow field names; "[0]" takes the first element of a sequence."""
    current = obj
    for step in steps:
        current = _first(current) if step == "[0]" else _field(current, step)
        if current is _MISSING or current is None:
            return _MISSING
    return current


def _as_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _from_plain_string(response: Any) -> Optional[str]:
    return _as_text(response)


def _from_text_accessor(response: Any) -> Optional[str]:
    accessor = _field(response, "text")
    if accessor is _MISSING:
        return None
    if callable(accessor):
        # Gemini's quick accessor raises on blocked or multi-part responses
        try:
            return _as_text(accessor())
        except Exception:
            return None
    return _as_text(accessor)


def _from_candidate_parts(response: Any) -> Optional[str]:
    return _as_text(_path(response, "candidates", "[0]", "content", "parts", "[0]", "text"))


def _from_candidate_content(response: Any) -> Optional[str]:
    return _as_text(_path(response, "candidates", "[0]", "content", "text"))


def _from_output(response: Any) -> Optional[str]:
    return _as_text(_path(response, "output", "text"))


def _from_content_blocks(response: Any) -> Optional[str]:
    # Anthropic messages: content=[TextBlock(text=...)]
    return _as_text(_path(response, "content", "[0]", "text"))


EXTRACTION_STRATEGIES: List[Tuple[str, Callable[[Any], Optional[str]]]] = [
    ("plain_string", _from_plain_string),
    ("text_accessor", _from_text_accessor),
    ("candidate_parts", _from_candidate_parts),
    ("candidate_content", _from_candidate_content),
    ("output_text", _from_output),
    ("content_blocks", _from_content_blocks),
]


def _serialize(response: Any) -> str:
    try:
        return json.dumps(response, default=lambda o: getattr(o, "__dict__", str(o)))
    except (TypeError, ValueError):
        return str(response)


def strip_code_fences(text: str) -> str:
    """Trim and remove every Markdown code-fence marker."""
    return CODE_FENCE_RE.sub("", text.strip()).strip()


def extract_text(response: Any) -> str:
    """
    Produce the generated text from an AI response object.

    Raises:
        AIResponseMalformedError: if the response itself is absent
    """
    if response is None:
        raise AIResponseMalformedError("AI model returned no response")

    # Some SDKs wrap the payload: result.response
    wrapped = _field(response, "response")
    if wrapped is not _MISSING and wrapped is not None and not isinstance(response, str):
        response = wrapped

    for _name, strategy in EXTRACTION_STRATEGIES:
        text = strategy(response)
        if text is not None:
            return strip_code_fences(text)

    return strip_code_fences(_serialize(response))
