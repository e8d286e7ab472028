from __future__ import annotations
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional, List


class Category(str, Enum):
    TODO = "TODO"
    FIXME = "FIXME"
    BUG = "BUG"
    HACK = "HACK"
    XXX = "XXX"
    NOTE = "NOTE"
    SECURITY = "SECURITY"
    INCOMPLETE_CODE = "INCOMPLETE_CODE"
    OPTIMIZE = "OPTIMIZE"
    REVIEW = "REVIEW"
    REFACTOR = "REFACTOR"
    DOCUMENTATION = "DOCUMENTATION"

    @classmethod
    def parse(cls, label: str) -> Optional["Category"]:
        """Return the matching member, or None for labels outside the known set."""
        try:
            return cls(label)
        except ValueError:
            return None


CRITICAL_CATEGORIES = frozenset({Category.SECURITY, Category.BUG, Category.FIXME})


@dataclass(frozen=True)
class CommentMarker:
    category: str
    description: str = ""
    line_number: Optional[int] = None


@dataclass(frozen=True)
class SourceComment:
    text: str = ""
    line_number: Optional[int] = None
    tasks: List[CommentMarker] = field(default_factory=list)


@dataclass(frozen=True)
class IncompleteCodeFinding:
    type: str  # EMPTY_FUNCTION|STUB|PASS_STATEMENT|MOCK_IMPLEMENTATION|...
    name: Optional[str] = None
    description: Optional[str] = None
    line_number: Optional[int] = None


@dataclass(frozen=True)
class SecurityFinding:
    type: str  # SQL_INJECTION|XSS|HARDCODED_SECRET|...
    description: str = ""
    line_number: Optional[int] = None
    location: Optional[str] = None
    affected_component: Optional[str] = None


@dataclass(frozen=True)
class AnalysisResult:
    path: str
    language: str = "unknown"
    complexity: float = 0.0
    comments: List[SourceComment] = field(default_factory=list)
    incomplete_code: List[IncompleteCodeFinding] = field(default_factory=list)
    security_issues: List[SecurityFinding] = field(default_factory=list)


@dataclass(frozen=True)
class RepositoryContext:
    full_name: str = ""
    last_commit_at: Optional[datetime] = None
    open_issues: int = 0


@dataclass(frozen=True)
class PriorityWeights:
    critical_comments: float = 3
    days_since_commit: float = 2
    open_issues: float = 2
    code_complexity: float = 1.5
    security_vulnerability: float = 5
    custom_priority: Optional[float] = 1


@dataclass(frozen=True)
class PriorityFactors:
    critical_comments: float = 0
    days_since_commit: float = 0.0
    open_issues: float = 0.0
    code_complexity: float = 0.0
    security_vulnerability: float = 0
    custom_priority: float = 0


@dataclass
class Task:
    title: str
    description: str
    category: str
    priority_score: float
    priority_factors: PriorityFactors
    file_path: str
    line_number: int = 0
    code_snippet: str = ""
    suggested_next_steps: str = ""
    status: str = "open"
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
