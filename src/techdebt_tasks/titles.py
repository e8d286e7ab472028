from __future__ import annotations
import re
from typing import NamedTuple, Optional, Tuple

from .signals import IncompleteCodeFinding, SecurityFinding

FALLBACK_DESCRIPTION = "Task needs attention"
MAX_DETAIL_LENGTH = 60
MAX_FALLBACK_LENGTH = 80
MAX_SECURITY_SUBJECT_LENGTH = 30

LEADING_MARKER = re.compile(r"^\s*[-*#]+\s*")
WHITESPACE = re.compile(r"\s+")
CATEGORY_PREFIX = re.compile(r"^(TODO|FIXME|BUG|HACK|XXX|NOTE):\s*", re.I)
LEADING_COLON = re.compile(r"^\s*:\s*")
TRAILING_PUNCT = re.compile(r"\s*[.!?]+\s*$")
TRAILING_QUESTION = re.compile(r"\?+$")


class TitlePattern(NamedTuple):
    name: str
    regex: re.Pattern
    template: str


def _p(name: str, regex: str, template: str) -> TitlePattern:
    return TitlePattern(name, re.compile(regex, re.I), template)


# Scanned top to bottom, first match wins. Overlaps are resolved by position
# only, e.g. "fix" shadows "bug" and "update" shadows "upgrade".
TITLE_PATTERNS: Tuple[TitlePattern, ...] = (
    # implementation
    _p("implement", r"(?:implement|add|create|build|develop)\s+(.+)", "Implement {detail}"),
    _p("feature", r"(?:feature|functionality):\s*(.+)", "Add feature: {detail}"),
    # defects
    _p("fix", r"(?:fix|repair|resolve|solve|correct)\s+(.+)", "Fix {detail}"),
    _p("bug", r"(?:bug|issue|problem|error):\s*(.+)", "Fix bug: {detail}"),
    _p("broken", r"(?:broken|not working|doesn't work|fails?)\s*(.+)", "Repair broken {detail}"),
    # update / refactor
    _p("update", r"(?:update|upgrade|migrate)\s+(.+)", "Update {detail}"),
    _p("refactor", r"(?:refactor|restructure|reorganize|clean up?)\s+(.+)", "Refactor {detail}"),
    _p("optimize", r"(?:optimize|improve|enhance|speed up)\s+(.+)", "Optimize {detail}"),
    # security
    _p("security", r"(?:security|vulnerability|exploit|injection|xss|csrf)\s*(.+)", "Fix security issue: {detail}"),
    _p("validate", r"(?:validate|sanitize|escape)\s+(.+)", "Add validation for {detail}"),
    # documentation
    _p("document", r"(?:document|docs?|write docs?)\s+(?:for\s+)?(.+)", "Document {detail}"),
    _p("comment", r"(?:add comments?|comment)\s+(?:to\s+)?(.+)", "Add comments to {detail}"),
    # testing
    _p("test", r"(?:test|write tests?|add tests?)\s+(?:for\s+)?(.+)", "Add tests for {detail}"),
    _p("coverage", r"(?:coverage|cover)\s+(.+)", "Improve test coverage for {detail}"),
    # configuration
    _p("config", r"(?:configure|config|setup)\s+(.+)", "Configure {detail}"),
    _p("env", r"(?:environment|env|settings?)\s+(.+)", "Setup environment for {detail}"),
    # api / integration
    _p("api", r"(?:api|endpoint|route)\s+(.+)", "Implement API {detail}"),
    _p("integrate", r"(?:integrate|connect|link)\s+(.+)", "Integrate {detail}"),
    # ui / ux
    _p("ui", r"(?:ui|user interface|frontend)\s+(.+)", "Update UI: {detail}"),
    _p("ux", r"(?:ux|user experience|usability)\s+(.+)", "Improve UX: {detail}"),
    _p("style", r"(?:style|css|styling|design)\s+(.+)", "Fix styling: {detail}"),
    # database
    _p("database", r"(?:database|db|query|migration)\s+(.+)", "Update database {detail}"),
    _p("schema", r"(?:schema|model|table)\s+(.+)", "Modify schema: {detail}"),
    # performance
    _p("performance", r"(?:performance|slow|latency|speed)\s+(.+)", "Improve performance: {detail}"),
    _p("memory", r"(?:memory|leak|ram|heap)\s+(.+)", "Fix memory issue: {detail}"),
    # dependencies
    _p("dependency", r"(?:dependency|dependencies|package|library)\s+(.+)", "Update dependency: {detail}"),
    _p("upgrade", r"(?:upgrade|update)\s+(.+)", "Upgrade {detail}"),
)

QUESTION_PREFIXES: Tuple[Tuple[str, str], ...] = (
    ("why", "Investigate"),
    ("how", "Research"),
    ("what", "Clarify"),
    ("should", "Decide"),
)
DEFAULT_QUESTION_LABEL = "Answer"

KEYWORD_CUES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("deprecated",), "Replace deprecated {subject}"),
    (("unused", "dead code"), "Remove unused {subject}"),
    (("duplicate",), "Consolidate duplicate {subject}"),
    (("missing",), "Add missing {subject}"),
    (("incomplete",), "Complete {subject}"),
    (("temporary", "temp"), "Replace temporary {subject}"),
    (("hack", "workaround"), "Improve workaround for {subject}"),
)

CODE_NOUNS: Tuple[str, ...] = (
    "function", "method", "class", "variable", "component", "module", "file", "code", "logic",
    "implementation", "feature", "api", "endpoint", "route", "model", "controller", "service",
)

INCOMPLETE_TITLES = {
    "EMPTY_FUNCTION": "Implement empty function",
    "EMPTY_METHOD": "Implement empty method",
    "EMPTY_CLASS": "Implement empty class",
    "EMPTY_BLOCK": "Complete empty code block",
    "PLACEHOLDER": "Replace placeholder implementation",
    "STUB": "Complete stub implementation",
    "NOT_IMPLEMENTED": "Implement missing functionality",
    "THROW_NOT_IMPLEMENTED": "Replace NotImplemented exception",
    "PASS_STATEMENT": "Replace pass statement with implementation",
    "EMPTY_CATCH": "Handle exception in empty catch block",
    "EMPTY_FINALLY": "Add cleanup code to finally block",
    "EMPTY_CONSTRUCTOR": "Initialize constructor",
    "EMPTY_DESTRUCTOR": "Implement destructor cleanup",
    "PARTIAL_IMPLEMENTATION": "Complete partial implementation",
    "MOCK_IMPLEMENTATION": "Replace mock with real implementation",
}

SECURITY_TITLES = {
    # injection
    "SQL_INJECTION": "Fix SQL injection vulnerability",
    "XSS": "Fix XSS (Cross-Site Scripting) vulnerability",
    "COMMAND_INJECTION": "Fix command injection vulnerability",
    "LDAP_INJECTION": "Fix LDAP injection vulnerability",
    "XXE": "Fix XML External Entity (XXE) vulnerability",
    "PATH_TRAVERSAL": "Fix path traversal vulnerability",
    "UNSAFE_EVAL": "Remove unsafe eval() usage",
    "INSECURE_DESERIALIZATION": "Fix insecure deserialization",
    # crypto / secrets
    "INSECURE_RANDOM": "Replace insecure random number generation",
    "HARDCODED_SECRET": "Remove hardcoded secret/credential",
    "HARDCODED_PASSWORD": "Remove hardcoded password",
    "WEAK_CRYPTO": "Replace weak cryptographic algorithm",
    "NO_ENCRYPTION": "Add encryption for sensitive data",
    # auth
    "CSRF": "Add CSRF protection",
    "MISSING_AUTHENTICATION": "Add authentication check",
    "MISSING_AUTHORIZATION": "Add authorization check",
    "WEAK_PASSWORD_REQUIREMENTS": "Strengthen password requirements",
    "INSECURE_COOKIE": "Secure cookie configuration",
    "MISSING_HTTPS": "Enforce HTTPS/TLS",
    "MISSING_RATE_LIMITING": "Add rate limiting",
    # exposure
    "EXPOSED_SENSITIVE_DATA": "Protect exposed sensitive data",
    "SENSITIVE_DATA_IN_URL": "Remove sensitive data from URL",
    "SENSITIVE_DATA_IN_LOGS": "Remove sensitive data from logs",
    "DIRECTORY_LISTING": "Disable directory listing",
    "INFORMATION_DISCLOSURE": "Prevent information disclosure",
    "MISSING_SECURITY_HEADERS": "Add security headers",
    # input / output
    "UNVALIDATED_INPUT": "Add input validation",
    "UNSANITIZED_OUTPUT": "Sanitize output data",
    "INSECURE_FILE_UPLOAD": "Secure file upload handling",
    "UNSAFE_REGEX": "Fix ReDoS vulnerable regex",
    # memory / concurrency
    "RACE_CONDITION": "Fix race condition vulnerability",
    "BUFFER_OVERFLOW": "Fix buffer overflow risk",
    "INTEGER_OVERFLOW": "Fix integer overflow vulnerability",
    # supply chain
    "OUTDATED_DEPENDENCY": "Update vulnerable dependency",
}


def clean_description(description: Optional[str]) -> str:
    if not description:
        return FALLBACK_DESCRIPTION
    cleaned = LEADING_MARKER.sub("", description, count=1)
    cleaned = WHITESPACE.sub(" ", cleaned)
    cleaned = CATEGORY_PREFIX.sub("", cleaned, count=1)
    cleaned = LEADING_COLON.sub("", cleaned, count=1)
    cleaned = TRAILING_PUNCT.sub("", cleaned, count=1)
    cleaned = cleaned.strip()
    if cleaned:
        cleaned = cleaned[0].upper() + cleaned[1:]
    return cleaned or FALLBACK_DESCRIPTION


def truncate(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def extract_subject(description: str) -> str:
    """Pick a short noun phrase from ``description``.

    The first listed code noun found wins and comes back with one neighbouring
    word on each side; otherwise the first three words are used.
    """
    lowered = description.lower()
    for noun in CODE_NOUNS:
        if noun not in lowered:
            continue
        m = re.search(rf"(\w+\s+)?{noun}(\s+\w+)?", description, re.I)
        if m:
            return m.group(0).strip()
    return " ".join(description.split()[:3])


def match_pattern(description: str) -> Optional[str]:
    for pattern in TITLE_PATTERNS:
        m = pattern.regex.search(description)
        if m:
            detail = (m.group(1) or "").strip() or description
            return pattern.template.format(detail=truncate(detail, MAX_DETAIL_LENGTH))
    return None


def match_question(description: str) -> Optional[str]:
    lowered = description.lower()
    starts = [prefix for prefix, _ in QUESTION_PREFIXES if lowered.startswith(prefix)]
    if "?" not in lowered and not starts:
        return None
    question = TRAILING_QUESTION.sub("", description)
    for prefix, label in QUESTION_PREFIXES:
        if question.lower().startswith(prefix):
            return f"{label}: {question}"
    return f"{DEFAULT_QUESTION_LABEL}: {question}"


def match_keyword(description: str) -> Optional[str]:
    lowered = description.lower()
    for cues, template in KEYWORD_CUES:
        if any(cue in lowered for cue in cues):
            return template.format(subject=extract_subject(description))
    return None


def generate_title(description: Optional[str], category: str) -> str:
    cleaned = clean_description(description)
    for stage in (match_pattern, match_question, match_keyword):
        title = stage(cleaned)
        if title:
            return title
    return f"{category}: {truncate(cleaned, MAX_FALLBACK_LENGTH)}"


def _humanize(type_tag: str) -> str:
    return type_tag.replace("_", " ").lower()


def generate_incomplete_code_title(finding: IncompleteCodeFinding) -> str:
    base = INCOMPLETE_TITLES.get(finding.type) or f"Complete {_humanize(finding.type)}"
    if finding.name:
        return f"{base}: {finding.name}"
    if finding.description:
        subject = extract_subject(finding.description)
        if subject and subject != finding.description:
            return f"{base} for {subject}"
    return base


def generate_security_title(finding: SecurityFinding) -> str:
    base = SECURITY_TITLES.get(finding.type) or f"Fix {_humanize(finding.type)}"
    if finding.location:
        return f"{base} in {finding.location}"
    if finding.affected_component:
        return f"{base}: {finding.affected_component}"
    if finding.description:
        subject = extract_subject(finding.description)
        if subject and len(subject) < MAX_SECURITY_SUBJECT_LENGTH:
            return f"{base} - {subject}"
    return base
