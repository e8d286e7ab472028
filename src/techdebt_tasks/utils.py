from __future__ import annotations
import os, json
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional
from pathspec import PathSpec

from .signals import (
    AnalysisResult, CommentMarker, IncompleteCodeFinding, RepositoryContext, SecurityFinding, SourceComment,
)


class AnalysisInputError(ValueError):
    """Raised when analysis input does not have the expected structure."""


def exclude_spec(excludes: Optional[List[str]]) -> PathSpec:
    return PathSpec.from_lines("gitwildmatch", excludes or [])


def _get(raw: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    # Accept both the collaborator's camelCase keys and snake_case.
    for k in keys:
        if k in raw and raw[k] is not None:
            return raw[k]
    return default


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _type_tag(raw: Dict[str, Any], default: str) -> str:
    tag = str(_get(raw, "type", default="")).strip()
    return tag or default


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def parse_marker(raw: Dict[str, Any]) -> CommentMarker:
    return CommentMarker(
        category=str(_get(raw, "category", default="TODO")).upper(),
        description=_text(_get(raw, "description", default="")),
        line_number=_get(raw, "lineNumber", "line_number"),
    )


def parse_comment(raw: Dict[str, Any]) -> SourceComment:
    line = _get(raw, "lineNumber", "line_number")
    if "tasks" in raw:
        markers = [parse_marker(t) for t in raw.get("tasks") or []]
    elif "category" in raw:
        # A bare marker without the surrounding comment record.
        markers = [parse_marker(raw)]
    else:
        markers = []
    return SourceComment(text=_get(raw, "text", "content", default=""), line_number=line, tasks=markers)


def parse_analysis_result(raw: Dict[str, Any]) -> AnalysisResult:
    if not isinstance(raw, dict) or "path" not in raw:
        raise AnalysisInputError(f"analysis entry must be an object with a 'path': {raw!r:.80}")
    return AnalysisResult(
        path=raw["path"],
        language=_get(raw, "language", default="unknown"),
        complexity=float(_get(raw, "complexity", default=0) or 0),
        comments=[parse_comment(c) for c in _get(raw, "comments", default=[])],
        incomplete_code=[
            IncompleteCodeFinding(
                type=_type_tag(i, "INCOMPLETE"),
                name=_text(_get(i, "name")),
                description=_text(_get(i, "description")),
                line_number=_get(i, "lineNumber", "line_number"),
            )
            for i in _get(raw, "incompleteCode", "incomplete_code", default=[])
        ],
        security_issues=[
            SecurityFinding(
                type=_type_tag(s, "SECURITY_ISSUE"),
                description=_text(_get(s, "description", default="")),
                line_number=_get(s, "lineNumber", "line_number"),
                location=_text(_get(s, "location")),
                affected_component=_text(_get(s, "affectedComponent", "affected_component")),
            )
            for s in _get(raw, "securityIssues", "security_issues", default=[])
        ],
    )


def load_analysis(path: str) -> List[AnalysisResult]:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise AnalysisInputError(f"{path} is not valid JSON: {e}") from e
    if isinstance(data, dict):
        data = data.get("files", data.get("results"))
    if not isinstance(data, list):
        raise AnalysisInputError(f"{path} must contain a list of file analysis results")
    return [parse_analysis_result(r) for r in data]


def repository_context(full_name: str, last_commit_at: Any = None, open_issues: int = 0) -> RepositoryContext:
    return RepositoryContext(
        full_name=full_name,
        last_commit_at=parse_timestamp(last_commit_at),
        open_issues=max(0, int(open_issues or 0)),
    )


def write_json(payload: Any, out_dir: str) -> str:
    path = os.path.join(out_dir, "tech-debt-tasks.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, default=str)
    return path
