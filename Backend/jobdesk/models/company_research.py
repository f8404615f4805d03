# =============================================================================
# Company Research Models
# =============================================================================
"""
Pydantic models for company research requests and the structured report.

The report models describe the JSON object the model appends to its
Markdown report. Nullable numbers are required keys whose value may be null.
"""

from typing import Optional

from pydantic import BaseModel, Field


# -----------------------------------------------------------------------------
# Request Models
# -----------------------------------------------------------------------------
class ResearchURLs(BaseModel):
    """Company pages the user already knows about."""

    careers: Optional[str] = None
    blog: Optional[str] = None
    press: Optional[str] = None
    docs: Optional[str] = None


class CompanyHints(BaseModel):
    """
    Optional hints that help the model find the right company.

    Attributes:
        products: Known product names.
        competitors: Known competitors.
        execs: Known executives.
        urls: Known company pages.
        notes: Free-form notes.
    """

    products: Optional[list[str]] = None
    competitors: Optional[list[str]] = None
    execs: Optional[list[str]] = None
    urls: Optional[ResearchURLs] = None
    notes: Optional[str] = None


class RoleDetails(BaseModel):
    """The role the user is considering, if any."""

    job_url: Optional[str] = None
    job_title: Optional[str] = None
    team: Optional[str] = None
    jd_text: Optional[str] = None


class CompanyResearchRequest(BaseModel):
    """
    Request payload for the company research endpoint.

    Attributes:
        company: Company name. Required.
        role_function: Function of the role, e.g. "Engineering".
        location_mode: Remote, hybrid or onsite preference.
        today: Reference date (YYYY-MM-DD) for recency judgements.
        role_details: The role being considered.
        company_hints: Hints that disambiguate the company.
    """

    company: str = Field(
        default="",
        description="Company name"
    )
    role_function: Optional[str] = Field(
        default=None,
        description="Function of the role, e.g. Engineering"
    )
    location_mode: Optional[str] = Field(
        default=None,
        description="Remote, hybrid or onsite"
    )
    today: Optional[str] = Field(
        default=None,
        description="Reference date in YYYY-MM-DD format"
    )
    role_details: Optional[RoleDetails] = None
    company_hints: Optional[CompanyHints] = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "company": "Acme",
                    "role_function": "Engineering",
                    "today": "2025-01-15",
                    "role_details": {"job_title": "Staff Engineer"},
                }
            ]
        }
    }


# -----------------------------------------------------------------------------
# Report Models
# -----------------------------------------------------------------------------
class ResearchSummary(BaseModel):
    what: str
    momentum: str
    ai: str
    leadership: str
    verdict: str


class LeadershipAssessment(BaseModel):
    founder_market_fit: str
    track_record: str
    org_stability: str
    board_governance: str
    ai_ownership: str


class CompanySnapshot(BaseModel):
    products: list[str]
    icp: list[str]
    pricing_model: str
    geo: str
    headcount_trend: str


class Financials(BaseModel):
    profitability: str
    cash_runway_months: Optional[float]
    burn_trend: str
    customer_concentration: str


class Traction(BaseModel):
    nrr: Optional[float]
    grr: Optional[float]
    acv_bands: list[str]
    logos: list[str]


class AIPosture(BaseModel):
    in_product: str
    internal_use: str
    stack: str
    evals: str
    safety_privacy: str


class SecurityCompliance(BaseModel):
    certs: list[str]
    dpa: str
    residency: str
    retention: str


class CapitalStructure(BaseModel):
    investors: list[str]
    board: str
    prefs: str
    option_pool_remaining_pct: Optional[float]
    secondaries: str


class EquityScenarios(BaseModel):
    bear: Optional[float]
    base: Optional[float]
    bull: Optional[float]


class CompEquity(BaseModel):
    salary_signals: str
    equity_scenarios: EquityScenarios
    assumptions: str


class Distribution(BaseModel):
    channels: list[str]
    partnerships: list[str]
    moat: str
    sales_motion: str


class TeamCulture(BaseModel):
    manager_signal: str
    attrition_signal: str
    rto_policy: str


class ResearchRisk(BaseModel):
    risk: str
    likelihood: str
    impact: str


class RoleFit(BaseModel):
    impact_12mo: str
    initiatives: list[str]
    red_flags: list[str]


class EvidenceRow(BaseModel):
    dimension: str
    evidence: str
    date: str
    source: str


class ResearchConfidence(BaseModel):
    """Confidence per area, from 0 to 1."""

    leadership: float
    financials: float
    ai: float
    overall: float


class CompanyResearchReport(BaseModel):
    """
    Structured company research report.

    Every section is required. Sections the model could not research carry
    empty strings, empty lists or nulls rather than being omitted.
    """

    company: str
    stage: str
    summary: ResearchSummary
    leadership: LeadershipAssessment
    snapshot: CompanySnapshot
    financials: Financials
    traction: Traction
    ai: AIPosture
    security_compliance: SecurityCompliance
    capital_structure: CapitalStructure
    comp_equity: CompEquity
    distribution: Distribution
    team_culture: TeamCulture
    risks: list[ResearchRisk]
    role_fit: RoleFit
    evidence_table: list[EvidenceRow]
    confidence: ResearchConfidence


# -----------------------------------------------------------------------------
# Response Models
# -----------------------------------------------------------------------------
class CompanyResearchResponse(BaseModel):
    """
    Company research result.

    Attributes:
        markdown: Human-readable report.
        research_json: Structured report, serialized as ``json``. None when
            the model returned no valid structured data.
        warnings: Notes about missing or invalid structured data.
    """

    markdown: str = Field(
        description="Markdown research report"
    )
    research_json: Optional[CompanyResearchReport] = Field(
        default=None,
        alias="json",
        description="Structured report, when the model returned a valid one"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Notes about the structured data"
    )

    model_config = {"populate_by_name": True}
