from __future__ import annotations
from datetime import datetime, timezone
from typing import Dict, Any, Iterable, List, Optional, Sequence, Tuple

import structlog

from .signals import (
    AnalysisResult, Category, CommentMarker, IncompleteCodeFinding, PriorityWeights, RepositoryContext,
    SecurityFinding, Task,
)
from .scoring import calculate_priority_factors, calculate_priority_score, bucket
from .titles import generate_title, generate_incomplete_code_title, generate_security_title
from .utils import exclude_spec

logger = structlog.get_logger(__name__)

INCOMPLETE_BONUS = 2
SECURITY_BONUS = 5

SUGGESTED_STEPS = {
    Category.TODO: "Review the TODO comment and implement the required functionality",
    Category.FIXME: "Investigate the issue described and apply the necessary fix",
    Category.BUG: "Debug and resolve the reported bug",
    Category.SECURITY: "Address the security vulnerability immediately",
    Category.OPTIMIZE: "Profile the code and implement performance improvements",
    Category.REVIEW: "Conduct a code review of the flagged section",
    Category.REFACTOR: "Refactor the code to improve maintainability",
    Category.DOCUMENTATION: "Add or update documentation for this code section",
}
DEFAULT_STEPS = "Review and address the flagged code"
INCOMPLETE_STEPS = "Complete the implementation of this function or class"
SECURITY_STEPS = "Review and fix this security vulnerability immediately"
INCOMPLETE_DESCRIPTION = "Code implementation is incomplete"


def suggested_steps(category: str) -> str:
    known = Category.parse(category)
    if known is None:
        return DEFAULT_STEPS
    return SUGGESTED_STEPS.get(known, DEFAULT_STEPS)


def code_locator(analysis: AnalysisResult, line_number: Optional[int]) -> str:
    return f"Line {line_number or 0} in {analysis.path}"


def _language_tag(analysis: AnalysisResult) -> str:
    return (analysis.language or "unknown").lower()


def task_from_comment(
    marker: CommentMarker,
    analysis: AnalysisResult,
    repository: RepositoryContext,
    weights: PriorityWeights,
    now: Optional[datetime] = None,
) -> Task:
    factors = calculate_priority_factors(marker.category, analysis, repository, 0, now)
    return Task(
        title=generate_title(marker.description, marker.category),
        description=marker.description,
        category=marker.category,
        priority_score=calculate_priority_score(factors, weights),
        priority_factors=factors,
        file_path=analysis.path,
        line_number=marker.line_number or 0,
        code_snippet=code_locator(analysis, marker.line_number),
        suggested_next_steps=suggested_steps(marker.category),
        tags=[marker.category.lower(), _language_tag(analysis)],
    )


def task_from_incomplete_code(
    finding: IncompleteCodeFinding,
    analysis: AnalysisResult,
    repository: RepositoryContext,
    weights: PriorityWeights,
    now: Optional[datetime] = None,
) -> Task:
    category = Category.INCOMPLETE_CODE.value
    factors = calculate_priority_factors(category, analysis, repository, INCOMPLETE_BONUS, now)
    return Task(
        title=generate_incomplete_code_title(finding),
        description=finding.description or INCOMPLETE_DESCRIPTION,
        category=category,
        priority_score=calculate_priority_score(factors, weights),
        priority_factors=factors,
        file_path=analysis.path,
        line_number=finding.line_number or 0,
        code_snippet=code_locator(analysis, finding.line_number),
        suggested_next_steps=INCOMPLETE_STEPS,
        tags=["incomplete", _language_tag(analysis), finding.type.lower()],
    )


def task_from_security_issue(
    finding: SecurityFinding,
    analysis: AnalysisResult,
    repository: RepositoryContext,
    weights: PriorityWeights,
    now: Optional[datetime] = None,
) -> Task:
    category = Category.SECURITY.value
    factors = calculate_priority_factors(category, analysis, repository, SECURITY_BONUS, now)
    return Task(
        title=generate_security_title(finding),
        description=finding.description,
        category=category,
        priority_score=calculate_priority_score(factors, weights),
        priority_factors=factors,
        file_path=analysis.path,
        line_number=finding.line_number or 0,
        code_snippet=code_locator(analysis, finding.line_number),
        suggested_next_steps=SECURITY_STEPS,
        tags=["security", "critical", _language_tag(analysis)],
    )


def tasks_for_file(
    analysis: AnalysisResult,
    repository: RepositoryContext,
    weights: PriorityWeights,
    now: Optional[datetime] = None,
) -> List[Task]:
    tasks: List[Task] = []

    # Comment markers
    for comment in analysis.comments:
        for marker in comment.tasks:
            tasks.append(task_from_comment(marker, analysis, repository, weights, now))

    # Incomplete code
    for finding in analysis.incomplete_code:
        tasks.append(task_from_incomplete_code(finding, analysis, repository, weights, now))

    # Security issues
    for finding in analysis.security_issues:
        tasks.append(task_from_security_issue(finding, analysis, repository, weights, now))

    return tasks


def dedupe_key(task: Task) -> Tuple[str, int, str]:
    return (task.file_path, task.line_number, task.category)


def deduplicate_tasks(tasks: Iterable[Task]) -> List[Task]:
    """Keep one task per (file, line, category); a strictly higher score replaces the earlier one."""
    seen: Dict[Tuple[str, int, str], Task] = {}
    for task in tasks:
        key = dedupe_key(task)
        existing = seen.get(key)
        if existing is None or task.priority_score > existing.priority_score:
            seen[key] = task
    return list(seen.values())


def generate_tasks(
    results: Sequence[AnalysisResult],
    repository: RepositoryContext,
    weights: Optional[PriorityWeights] = None,
    exclude: Optional[List[str]] = None,
    max_items: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[Task]:
    weights = weights or PriorityWeights()
    now = now or datetime.now(timezone.utc)
    spec = exclude_spec(exclude)

    tasks: List[Task] = []
    for analysis in results:
        if spec.match_file(analysis.path):
            logger.debug("file_excluded", path=analysis.path)
            continue
        tasks.extend(tasks_for_file(analysis, repository, weights, now))

    unique = deduplicate_tasks(tasks)
    # sorted() is stable, so equal scores keep their input order
    unique = sorted(unique, key=lambda t: t.priority_score, reverse=True)
    if max_items is not None:
        unique = unique[:max_items]

    logger.info("tasks_generated", count=len(unique), repository=repository.full_name)
    return unique


def summarize(tasks: Sequence[Task]) -> Dict[str, Any]:
    totals: Dict[str, Any] = {"count": len(tasks), "by_category": {}, "avg_score": 0.0}
    if tasks:
        totals["avg_score"] = round(sum(t.priority_score for t in tasks) / len(tasks), 2)
        for t in tasks:
            totals["by_category"][t.category] = totals["by_category"].get(t.category, 0) + 1
    return totals


def tasks_payload(tasks: Sequence[Task], repository: RepositoryContext) -> Dict[str, Any]:
    items = []
    for t in tasks:
        item = t.to_dict()
        item["priority_bucket"] = bucket(t.priority_score)
        items.append(item)
    return {
        "repository": repository.full_name,
        "summary": summarize(tasks),
        "items": items,
    }
