# =============================================================================
# JobDesk - Backend Package
# =============================================================================
"""
JobDesk Backend

A FastAPI-based backend for job-search tooling: job description import
from URLs, résumé text extraction, and LLM-assisted cover letter drafting.
"""

__version__ = "0.1.0"
