# =============================================================================
# Shared Test Fixtures
# =============================================================================
"""
Fixtures and sample pages shared across the test suite.

Network access is never needed: HTTP goes through ``httpx.MockTransport``
and DNS through an in-memory resolver.
"""

import socket
from typing import Awaitable, Callable

import pytest


# -----------------------------------------------------------------------------
# Sample Pages
# -----------------------------------------------------------------------------
JSONLD_PAGE = """<!doctype html>
<html><head>
<title>Senior Engineer at Acme</title>
<script type="application/ld+json">{"@type":"JobPosting","title":"Senior Engineer","description":"<p>Build things</p>"}</script>
</head><body><nav>Home | Jobs</nav><p>Apply now</p></body></html>
"""

JOB_PAGE = """<!doctype html>
<html><head>
<script type="application/ld+json">
{"@context": "https://schema.org", "@type": "JobPosting", "title": "Senior Engineer",
 "description": "&lt;p&gt;Build things that help people find work.&lt;/p&gt;&lt;ul&gt;&lt;li&gt;Design APIs&lt;/li&gt;&lt;li&gt;Mentor engineers&lt;/li&gt;&lt;/ul&gt;"}
</script>
</head><body><p>Apply now</p></body></html>
"""

ARTICLE_PAGE = """<!doctype html>
<html><head><title>Platform Engineer</title></head>
<body>
<nav><a href="/">Home</a> <a href="/jobs">Jobs</a></nav>
<article>
<h1>Platform Engineer</h1>
<p>We are hiring a platform engineer to build and operate the internal developer
platform that every product team at our company relies on for deployments.</p>
<p>You will own the build pipeline, the service templates and the observability
stack, working closely with security and product engineering on the roadmap.</p>
<p>We value clear writing, careful reviews and pragmatic decisions, and we offer
a remote-friendly schedule with a yearly learning budget for every engineer.</p>
</article>
</body></html>
"""

HEADING_PAGE = "<h2>Responsibilities</h2><p>Do stuff</p>"

LONG_HEADING_PAGE = """<html><body>
<h2>Responsibilities</h2>
<p>Design, build and maintain the services behind our job application tools.</p>
<h2>Requirements</h2>
<p>Three or more years of Python experience.</p>
</body></html>
"""


RESEARCH_REPORT = {
    "company": "Acme",
    "stage": "Early",
    "summary": {"what": "a", "momentum": "b", "ai": "c", "leadership": "d", "verdict": "Buy"},
    "leadership": {
        "founder_market_fit": "x",
        "track_record": "y",
        "org_stability": "z",
        "board_governance": "g",
        "ai_ownership": "own",
    },
    "snapshot": {"products": [], "icp": [], "pricing_model": "free", "geo": "US", "headcount_trend": "up"},
    "financials": {
        "profitability": "prof",
        "cash_runway_months": None,
        "burn_trend": "flat",
        "customer_concentration": "low",
    },
    "traction": {"nrr": None, "grr": None, "acv_bands": [], "logos": []},
    "ai": {"in_product": "yes", "internal_use": "ok", "stack": "x", "evals": "n/a", "safety_privacy": "ok"},
    "security_compliance": {"certs": [], "dpa": "n/a", "residency": "us", "retention": "90d"},
    "capital_structure": {
        "investors": [],
        "board": "x",
        "prefs": "std",
        "option_pool_remaining_pct": None,
        "secondaries": "n/a",
    },
    "comp_equity": {
        "salary_signals": "x",
        "equity_scenarios": {"bear": None, "base": None, "bull": None},
        "assumptions": "n/a",
    },
    "distribution": {"channels": [], "partnerships": [], "moat": "x", "sales_motion": "plg"},
    "team_culture": {"manager_signal": "x", "attrition_signal": "y", "rto_policy": "z"},
    "risks": [],
    "role_fit": {"impact_12mo": "x", "initiatives": [], "red_flags": []},
    "evidence_table": [],
    "confidence": {"leadership": 0.5, "financials": 0.5, "ai": 0.5, "overall": 0.5},
}


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def make_resolver() -> Callable[[dict[str, str]], Callable[[str], Awaitable[str]]]:
    """
    Build in-memory DNS resolvers.

    Returns:
        Factory taking a hostname-to-address map. The resolver it returns
        records every lookup in its ``calls`` attribute and raises
        ``socket.gaierror`` for unknown hosts.
    """

    def factory(records: dict[str, str]):
        calls: list[str] = []

        async def resolver(hostname: str) -> str:
            calls.append(hostname)
            if hostname not in records:
                raise socket.gaierror(f"Name or service not known: {hostname}")
            return records[hostname]

        resolver.calls = calls
        return resolver

    return factory
