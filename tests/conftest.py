"""Shared fixtures for techdebt-tasks tests."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest
import structlog

from techdebt_tasks.signals import (
    AnalysisResult,
    CommentMarker,
    IncompleteCodeFinding,
    RepositoryContext,
    SecurityFinding,
    SourceComment,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def repository() -> RepositoryContext:
    return RepositoryContext(full_name="acme/webapp", last_commit_at=None, open_issues=5)


@pytest.fixture
def make_analysis():
    """Build an AnalysisResult with sensible defaults."""

    def _make(path="src/app.py", language="python", complexity=40, markers=(), incomplete=(), security=()):
        return AnalysisResult(
            path=path,
            language=language,
            complexity=complexity,
            comments=[SourceComment(text=m.description, line_number=m.line_number, tasks=[m]) for m in markers],
            incomplete_code=list(incomplete),
            security_issues=list(security),
        )

    return _make


@pytest.fixture
def mixed_analysis(make_analysis) -> AnalysisResult:
    return make_analysis(
        markers=[
            CommentMarker(category="TODO", description="add retry logic", line_number=3),
            CommentMarker(category="BUG", description="fix login button not working", line_number=10),
        ],
        incomplete=[IncompleteCodeFinding(type="STUB", name="parseConfig", line_number=20)],
        security=[
            SecurityFinding(
                type="SQL_INJECTION",
                description="raw query built from input",
                line_number=30,
                location="UserRepository.findByName",
            )
        ],
    )
