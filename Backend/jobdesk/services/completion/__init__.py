# =============================================================================
# Completion Package
# =============================================================================
"""
LLM-backed text generation: cover letters and company research.

Usage:
    from jobdesk.services.completion import AnthropicCompletionService, CoverLetterService

    completion = AnthropicCompletionService(api_key="sk-ant-...", model="claude-sonnet-4-20250514")
    letter = await CoverLetterService(completion).generate(resume, jd)
"""

from jobdesk.services.completion.company_research import (
    CompanyResearchResult,
    CompanyResearchService,
    ResearchValidation,
    build_research_prompts,
    extract_json_and_markdown,
    validate_company_research,
)
from jobdesk.services.completion.cover_letter import (
    CoverLetterRejectedError,
    CoverLetterService,
    build_prompts,
    ensure_three_paragraphs,
    parse_rejection,
)
from jobdesk.services.completion.service import (
    AnthropicCompletionService,
    CompletionError,
    CompletionTimeoutError,
    TextCompletionService,
)

__all__ = [
    "AnthropicCompletionService",
    "CompanyResearchResult",
    "CompanyResearchService",
    "CompletionError",
    "CompletionTimeoutError",
    "CoverLetterRejectedError",
    "CoverLetterService",
    "ResearchValidation",
    "TextCompletionService",
    "build_prompts",
    "build_research_prompts",
    "ensure_three_paragraphs",
    "extract_json_and_markdown",
    "parse_rejection",
    "validate_company_research",
]
