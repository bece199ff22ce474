import json
import re

from app.exceptions import ParseError

_decoder = json.JSONDecoder()
_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def extract_json_object(text: str) -> dict:
    """Return the first JSON object embedded in model output.

    Markdown code fences are unwrapped first. Raises ParseError when no
    object is found or the first `{` does not start a valid JSON object.
    """
    if not isinstance(text, str) or not text.strip():
        raise ParseError("Model returned empty text")

    fenced = _FENCE_RE.search(text)
    if fenced:
        text = fenced.group(1)

    start = text.find("{")
    if start == -1:
        raise ParseError("No JSON object found in model output")
    try:
        obj, _ = _decoder.raw_decode(text, start)
    except json.JSONDecodeError as e:
        raise ParseError(f"Malformed JSON in model output: {e.msg}") from e
    if not isinstance(obj, dict):
        raise ParseError("Model output JSON is not an object")
    return obj
