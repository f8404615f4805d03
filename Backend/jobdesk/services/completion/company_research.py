# =============================================================================
# Company Research
# =============================================================================
"""
Produces a company research report for a job seeker.

The model answers with a Markdown report followed by one JSON object, either
bare at the end of the answer or inside a ```json fence. The two parts are
split apart and the JSON is validated against ``CompanyResearchReport``.
A missing or invalid JSON object does not fail the request: the Markdown is
still returned, with a warning.

Usage:
    from jobdesk.services.completion import CompanyResearchService

    service = CompanyResearchService(completion)
    result = await service.research(CompanyResearchRequest(company="Acme"))
    print(result.markdown, result.report)
"""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from pydantic import ValidationError

from jobdesk.models.company_research import CompanyResearchReport, CompanyResearchRequest
from jobdesk.services.completion.service import TextCompletionService


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Prompts
# -----------------------------------------------------------------------------
SYSTEM_PROMPT = (
    "You are a diligent company analyst helping a job seeker decide whether to "
    "join a company. Be specific and cite dated evidence. When something cannot "
    "be verified say so plainly instead of guessing."
)

REPORT_SKELETON = """{
  "company": string, "stage": string,
  "summary": {"what": string, "momentum": string, "ai": string, "leadership": string, "verdict": string},
  "leadership": {"founder_market_fit": string, "track_record": string, "org_stability": string, "board_governance": string, "ai_ownership": string},
  "snapshot": {"products": [string], "icp": [string], "pricing_model": string, "geo": string, "headcount_trend": string},
  "financials": {"profitability": string, "cash_runway_months": number|null, "burn_trend": string, "customer_concentration": string},
  "traction": {"nrr": number|null, "grr": number|null, "acv_bands": [string], "logos": [string]},
  "ai": {"in_product": string, "internal_use": string, "stack": string, "evals": string, "safety_privacy": string},
  "security_compliance": {"certs": [string], "dpa": string, "residency": string, "retention": string},
  "capital_structure": {"investors": [string], "board": string, "prefs": string, "option_pool_remaining_pct": number|null, "secondaries": string},
  "comp_equity": {"salary_signals": string, "equity_scenarios": {"bear": number|null, "base": number|null, "bull": number|null}, "assumptions": string},
  "distribution": {"channels": [string], "partnerships": [string], "moat": string, "sales_motion": string},
  "team_culture": {"manager_signal": string, "attrition_signal": string, "rto_policy": string},
  "risks": [{"risk": string, "likelihood": string, "impact": string}],
  "role_fit": {"impact_12mo": string, "initiatives": [string], "red_flags": [string]},
  "evidence_table": [{"dimension": string, "evidence": string, "date": string, "source": string}],
  "confidence": {"leadership": number, "financials": number, "ai": number, "overall": number}
}"""

USER_PROMPT_TEMPLATE = """Research the company below as of {today} for a candidate.

Input:
{request}

Write a concise Markdown report with these sections: Summary, Leadership, Snapshot, \
Financials, Traction, AI, Security & Compliance, Capital Structure, Compensation & Equity, \
Distribution, Team & Culture, Risks, Role Fit, Evidence.

After the report, output one JSON object with exactly this shape and no other text after it:
{skeleton}

Use empty strings, empty lists or null for anything you could not find. \
Confidence values are between 0 and 1."""

NO_JSON_WARNING = "The report did not include structured data."
INVALID_JSON_WARNING = "The report's structured data was incomplete and has been omitted."

_JSON_FENCE = re.compile(r"```json\s*(.*?)\s*```", re.IGNORECASE | re.DOTALL)


# -----------------------------------------------------------------------------
# Data Classes
# -----------------------------------------------------------------------------
@dataclass
class ResearchValidation:
    """
    Outcome of validating a structured report.

    Attributes:
        ok: True if the data matched the report schema.
        report: The validated report, when ok.
        errors: One ``location: message`` entry per problem.
    """

    ok: bool
    report: Optional[CompanyResearchReport] = None
    errors: list[str] = field(default_factory=list)


@dataclass
class CompanyResearchResult:
    """Markdown report, validated structured report and warnings."""

    markdown: str
    report: Optional[CompanyResearchReport] = None
    warnings: list[str] = field(default_factory=list)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def build_research_prompts(
    request: CompanyResearchRequest,
    today: Optional[date] = None,
) -> tuple[str, str]:
    """
    Build the system and user prompts for a research request.

    Args:
        request: Research request. Unset fields are left out of the prompt.
        today: Fallback reference date when the request has none.

    Returns:
        Tuple of (system prompt, user prompt).
    """
    reference = request.today or (today or date.today()).isoformat()
    payload = request.model_dump(exclude_none=True)
    payload["today"] = reference
    user = USER_PROMPT_TEMPLATE.format(
        today=reference,
        request=json.dumps(payload, indent=2, ensure_ascii=False),
        skeleton=REPORT_SKELETON,
    )
    return SYSTEM_PROMPT, user


def extract_json_and_markdown(raw: Optional[str]) -> tuple[Optional[dict[str, Any]], str]:
    """
    Split model output into its JSON object and Markdown report.

    A fenced ```json block wins; the last one that parses is used. Otherwise
    the earliest ``{`` that starts an object running to the end of the text
    is taken as the trailing JSON.

    Args:
        raw: Model output.

    Returns:
        Tuple of (parsed object or None, Markdown without the JSON).
    """
    text = (raw or "").strip()
    if not text:
        return None, ""

    for match in reversed(list(_JSON_FENCE.finditer(text))):
        data = _loads_object(match.group(1))
        if data is not None:
            markdown = text[:match.start()] + text[match.end():]
            return data, markdown.strip()

    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            data, end = decoder.raw_decode(text, start)
        except (ValueError, RecursionError):
            data, end = None, start
        if isinstance(data, dict) and not text[end:].strip():
            return data, text[:start].strip()
        start = text.find("{", start + 1)

    return None, text


def validate_company_research(data: Any) -> ResearchValidation:
    """
    Check a parsed object against the report schema.

    Args:
        data: Parsed JSON value.

    Returns:
        ResearchValidation with the report or the list of problems.
    """
    try:
        report = CompanyResearchReport.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
            for error in e.errors()
        ]
        return ResearchValidation(ok=False, errors=errors)
    return ResearchValidation(ok=True, report=report)


def _loads_object(candidate: str) -> Optional[dict[str, Any]]:
    try:
        data = json.loads(candidate)
    except (ValueError, RecursionError):
        return None
    return data if isinstance(data, dict) else None


# -----------------------------------------------------------------------------
# Company Research Service Class
# -----------------------------------------------------------------------------
class CompanyResearchService:
    """
    Researches companies through a text completion service.

    Attributes:
        completion: Text completion collaborator.
    """

    def __init__(self, completion: TextCompletionService) -> None:
        self.completion = completion

    async def research(self, request: CompanyResearchRequest) -> CompanyResearchResult:
        """
        Run a research request.

        Args:
            request: Company and optional role details.

        Returns:
            The Markdown report, the structured report when valid, and warnings.

        Raises:
            CompletionError: If the completion call failed.
        """
        system, user = build_research_prompts(request)
        output = await self.completion.complete(system, user)

        data, markdown = extract_json_and_markdown(output)
        if data is None:
            logger.warning(f"Research for {request.company!r} returned no JSON")
            return CompanyResearchResult(
                markdown=markdown,
                warnings=[NO_JSON_WARNING] if markdown else [],
            )

        validation = validate_company_research(data)
        if not validation.ok:
            logger.warning(
                f"Research JSON for {request.company!r} failed validation: "
                f"{'; '.join(validation.errors[:5])}"
            )
            return CompanyResearchResult(markdown=markdown, warnings=[INVALID_JSON_WARNING])

        logger.info(f"Research for {request.company!r} complete ({len(markdown)} chars)")
        return CompanyResearchResult(markdown=markdown, report=validation.report)
