# =============================================================================
# Cover Letter Drafting
# =============================================================================
"""
Builds cover letter prompts, calls the completion service, and shapes the
answer into exactly three paragraphs.

The model is allowed one structured refusal: when the job description does
not name the company or role it answers with a JSON error payload instead
of a letter, which is surfaced to the user as an actionable message.
"""

import json
import logging
import math
import re
from typing import Any, Optional

from jobdesk.services.completion.service import TextCompletionService


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Prompts
# -----------------------------------------------------------------------------
SYSTEM_PROMPT = (
    "You write professional cover letters using only the supplied resume and job "
    "description. Do not invent facts. Body text only. No headers or contact blocks."
)

METADATA_ERROR_CODE = "INSUFFICIENT_JD_METADATA"

METADATA_ERROR_MESSAGE = (
    "Could not identify the company name or role title from the job description. "
    "Please add this information at the top of the job description using this format:\n\n"
    "Company: [Company Name]\nRole: [Role Title]\n\n[Rest of job description]"
)

USER_PROMPT_TEMPLATE = """Goal: Draft a professional cover letter in three concise paragraphs (~220 words).

Constraints:
- Use only information present or directly implied by the resume and job description.
- Do not add contact blocks, dates, or headings. Provide only the body text.

Gate: Before writing, identify the company name and the role title from the job description.

Output rules:
- Gate passed → Output only the final cover-letter body text, three paragraphs separated by blank lines.
- Gate failed (Could not identify the company name or role title) → Output only this JSON object:
{error_payload}

Resume:
{resume}

Job description:
{jd}"""

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------
class CoverLetterRejectedError(Exception):
    """
    The model declined to write a letter and explained why.

    Attributes:
        code: Machine-readable reason, e.g. ``INSUFFICIENT_JD_METADATA``.
        message: Instructions for the user.
        metadata: The full payload returned by the model.
    """

    def __init__(self, code: str, message: str, metadata: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.metadata = metadata or {}


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def build_prompts(resume: str, jd: str) -> tuple[str, str]:
    """
    Build the system and user prompts for a cover letter.

    Args:
        resume: Résumé text.
        jd: Job description text.

    Returns:
        Tuple of (system prompt, user prompt).
    """
    error_payload = json.dumps(
        {
            "status": "error",
            "error": METADATA_ERROR_CODE,
            "message": METADATA_ERROR_MESSAGE,
            "missing": ["company", "role_title"],
        },
        indent=2,
    )
    user = USER_PROMPT_TEMPLATE.format(error_payload=error_payload, resume=resume, jd=jd)
    return SYSTEM_PROMPT, user


def ensure_three_paragraphs(text: Optional[str]) -> str:
    """
    Reshape text into exactly three paragraphs.

    Text that already has three paragraphs is only trimmed. Anything else is
    flattened and its words are split evenly into three paragraphs.

    Args:
        text: Model output.

    Returns:
        Three blank-line-separated paragraphs, fewer only if there are fewer
        words than paragraphs, or an empty string for empty input.
    """
    trimmed = (text or "").strip()
    if not trimmed:
        return ""

    paragraphs = [p.strip() for p in re.split(r"\n{2,}", trimmed) if p.strip()]
    if len(paragraphs) == 3:
        return "\n\n".join(paragraphs)

    all_text = " ".join(paragraphs) if paragraphs else re.sub(r"\n+", " ", trimmed)
    words = all_text.split()
    per = math.ceil(len(words) / 3)
    chunks = [" ".join(words[i * per:(i + 1) * per]) for i in range(3)]
    return "\n\n".join(chunk for chunk in chunks if chunk.strip())


def parse_rejection(text: str) -> Optional[dict[str, Any]]:
    """
    Detect a structured refusal in model output.

    Args:
        text: Model output.

    Returns:
        The error payload if the output is a JSON object with
        ``status == "error"``, otherwise None.
    """
    candidate = _CODE_FENCE.sub("", text.strip())
    if not candidate.startswith("{"):
        return None
    try:
        data = json.loads(candidate)
    except ValueError:
        return None
    if isinstance(data, dict) and data.get("status") == "error":
        return data
    return None


# -----------------------------------------------------------------------------
# Cover Letter Service Class
# -----------------------------------------------------------------------------
class CoverLetterService:
    """
    Drafts cover letters from a résumé and a job description.

    Attributes:
        completion: Text completion collaborator.
    """

    def __init__(self, completion: TextCompletionService) -> None:
        self.completion = completion

    async def generate(self, resume: str, jd: str) -> str:
        """
        Draft a three-paragraph cover letter.

        Args:
            resume: Résumé text.
            jd: Job description text.

        Returns:
            The letter body, or an empty string if the model returned nothing.

        Raises:
            CoverLetterRejectedError: If the model refused with a structured error.
            CompletionError: If the completion call failed.
        """
        system, user = build_prompts(resume, jd)
        output = await self.completion.complete(system, user)

        rejection = parse_rejection(output)
        if rejection is not None:
            code = str(rejection.get("error") or "GENERATION_REJECTED")
            logger.info(f"Cover letter generation rejected by model: {code}")
            raise CoverLetterRejectedError(
                code=code,
                message=str(rejection.get("message") or METADATA_ERROR_MESSAGE),
                metadata=rejection,
            )

        return ensure_three_paragraphs(output)
