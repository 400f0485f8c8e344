"""FastAPI dependency injection — shared analyzer."""

from __future__ import annotations

from fastapi import Request

from src.parsers.token_analyzer import TokenAnalyzer


def get_analyzer(request: Request) -> TokenAnalyzer:
    """Return the process-wide analyzer created in the app lifespan."""
    return request.app.state.analyzer
