import logging
from typing import Optional

from pydantic import ValidationError

from app.exceptions import InvalidInputError, ParseError, UpstreamError
from app.schemas.ai import EnhancementResult, ValidationResult
from app.services.gemini import GeminiClient
from app.services.prompts import enhancement_prompt, validation_prompt
from app.utils.json_extract import extract_json_object

logger = logging.getLogger(__name__)

FALLBACK_SCORE = 0.7
FALLBACK_FEEDBACK = (
    "Detailed validation failed, so only basic checks were applied: "
    "the title must be longer than 3 characters and the content longer than 10."
)


def _require_text(title: Optional[str], content: Optional[str]) -> None:
    if not title or not content:
        raise InvalidInputError("Missing required parameters: title and content")


def fallback_verdict(title: str, content: str) -> ValidationResult:
    """Heuristic verdict used when the model's answer cannot be parsed."""
    return ValidationResult(
        is_valid=len(title) > 3 and len(content) > 10,
        score=FALLBACK_SCORE,
        issues=[],
        feedback=FALLBACK_FEEDBACK,
    )


def _verdict_from_json(data: dict) -> ValidationResult:
    issues = data.get("issues") or []
    if isinstance(issues, str):
        issues = [issues]
    elif not isinstance(issues, list):
        raise ParseError("Verdict issues is not a list")
    try:
        score = float(data.get("score", 0.0))
    except (TypeError, ValueError) as e:
        raise ParseError("Verdict score is not a number") from e
    if isinstance(data.get("score"), bool):
        raise ParseError("Verdict score is not a number")
    is_valid = data.get("isValid")
    if not isinstance(is_valid, bool):
        raise ParseError("Verdict has no boolean isValid")
    return ValidationResult(
        is_valid=is_valid,
        score=min(1.0, max(0.0, score)),
        issues=[str(issue) for issue in issues],
        feedback=str(data.get("feedback") or ""),
    )


class AnnouncementAIService:
    def __init__(self, client: Optional[GeminiClient] = None):
        self.client = client or GeminiClient()

    def validate(self, title: Optional[str], content: Optional[str]) -> ValidationResult:
        _require_text(title, content)
        text = self.client.generate_text(
            validation_prompt(title, content),
            temperature=0.2,
            top_p=0.8,
            top_k=40,
            max_output_tokens=1024,
            response_mime_type="application/json",
        )
        try:
            return _verdict_from_json(extract_json_object(text))
        except ParseError as e:
            logger.warning(f"Falling back to basic validation: {e.message}")
            return fallback_verdict(title, content)

    def enhance(self, title: Optional[str], content: Optional[str]) -> EnhancementResult:
        _require_text(title, content)
        text = self.client.generate_text(
            enhancement_prompt(title, content),
            temperature=0.7,
            top_p=0.95,
            top_k=40,
            max_output_tokens=1024,
        )
        try:
            return EnhancementResult.model_validate(extract_json_object(text))
        except ParseError as e:
            logger.error(f"Could not extract enhanced content: {e.message}")
            raise UpstreamError(f"Could not extract enhanced content: {e.message}") from e
        except ValidationError as e:
            logger.error(f"Enhanced content is incomplete: {e}")
            raise UpstreamError("Gemini returned incomplete enhanced content") from e
