from __future__ import annotations

import pytest

from techdebt_tasks.signals import IncompleteCodeFinding, SecurityFinding
from techdebt_tasks.titles import (
    TITLE_PATTERNS,
    clean_description,
    extract_subject,
    generate_incomplete_code_title,
    generate_security_title,
    generate_title,
)


# ----------------------------------------------------------------------------
# Cleaning
# ----------------------------------------------------------------------------


def test_clean_description_strips_markers_prefix_and_punctuation():
    assert clean_description("  - TODO: refactor   the parser.  ") == "Refactor the parser"
    assert clean_description("## fixme:handle nulls!!") == "Handle nulls"
    assert clean_description(": leftover colon") == "Leftover colon"


@pytest.mark.parametrize("raw", [None, "", "...", "???", "  -  "])
def test_clean_description_falls_back_when_empty(raw):
    assert clean_description(raw) == "Task needs attention"


# ----------------------------------------------------------------------------
# Pattern table
# ----------------------------------------------------------------------------


def test_pattern_table_order_is_fixed():
    assert [p.name for p in TITLE_PATTERNS] == [
        "implement", "feature", "fix", "bug", "broken", "update", "refactor", "optimize",
        "security", "validate", "document", "comment", "test", "coverage", "config", "env",
        "api", "integrate", "ui", "ux", "style", "database", "schema", "performance", "memory",
        "dependency", "upgrade",
    ]


def test_fix_pattern_keeps_detail():
    assert generate_title("fix login button not working", "BUG") == "Fix login button not working"


def test_fix_wins_over_bug_when_both_match():
    assert generate_title("fix the bug: crash on save", "BUG") == "Fix the bug: crash on save"
    assert generate_title("Issue: crash on save", "FIXME") == "Fix bug: crash on save"


def test_update_shadows_upgrade():
    assert generate_title("upgrade lodash to v5", "TODO") == "Update lodash to v5"


def test_implement_pattern_covers_add():
    assert generate_title("TODO: add retry logic", "TODO") == "Implement retry logic"


def test_long_detail_is_truncated_to_sixty_characters():
    title = generate_title("implement " + "x" * 70, "TODO")
    assert title == "Implement " + "x" * 60 + "..."


# ----------------------------------------------------------------------------
# Question and keyword fallbacks
# ----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "description, expected",
    [
        ("why does this loop twice?", "Investigate: Why does this loop twice"),
        ("how to handle retries", "Research: How to handle retries"),
        ("what is the retry budget?", "Clarify: What is the retry budget"),
        ("should we cache results", "Decide: Should we cache results"),
        ("is this right? maybe not", "Answer: Is this right? maybe not"),
    ],
)
def test_question_titles(description, expected):
    assert generate_title(description, "NOTE") == expected


def test_keyword_fallback_uses_subject():
    assert generate_title("missing null check in parser service", "TODO") == "Add missing parser service"


@pytest.mark.parametrize(
    "description, expected",
    [
        ("uses deprecated parser module", "Replace deprecated parser module"),
        ("dead code in billing module", "Remove unused billing module"),
        ("duplicate parsing logic", "Consolidate duplicate parsing logic"),
        ("incomplete export logic", "Complete export logic"),
        ("temporary cache service", "Replace temporary cache service"),
        ("temp retry service", "Replace temporary retry service"),
        ("ugly hack around parser service", "Improve workaround for parser service"),
        ("workaround for the cron service", "Improve workaround for cron service"),
    ],
)
def test_keyword_cue_templates(description, expected):
    assert generate_title(description, "TODO") == expected


def test_keyword_cues_are_checked_in_order():
    assert generate_title("duplicate and unused helpers", "TODO").startswith("Remove unused ")


def test_final_fallback_uses_category_and_truncates():
    title = generate_title("z" * 100, "NOTE")
    assert title == "NOTE: Z" + "z" * 79 + "..."


def test_question_marks_only_fall_back_to_placeholder():
    assert generate_title("???", "TODO") == "TODO: Task needs attention"


def test_unknown_category_still_produces_title():
    assert generate_title(None, "WHATEVER") == "WHATEVER: Task needs attention"


# ----------------------------------------------------------------------------
# Subject extraction
# ----------------------------------------------------------------------------


def test_extract_subject_returns_noun_with_neighbours():
    assert extract_subject("the login function is slow") == "login function is"


def test_extract_subject_without_code_noun_uses_first_three_words():
    assert extract_subject("nothing relevant here at all") == "nothing relevant here"


def test_extract_subject_bare_noun():
    assert extract_subject("Function") == "Function"


# ----------------------------------------------------------------------------
# Incomplete code titles
# ----------------------------------------------------------------------------


def test_incomplete_title_with_name():
    finding = IncompleteCodeFinding(type="STUB", name="parseConfig")
    assert generate_incomplete_code_title(finding) == "Complete stub implementation: parseConfig"


def test_incomplete_title_unknown_type():
    assert generate_incomplete_code_title(IncompleteCodeFinding(type="EMPTY_LAMBDA")) == "Complete empty lambda"


def test_incomplete_title_with_description_subject():
    finding = IncompleteCodeFinding(type="EMPTY_FUNCTION", description="empty handler function for uploads")
    assert generate_incomplete_code_title(finding) == "Implement empty function for handler function for"


def test_incomplete_title_skips_subject_equal_to_description():
    finding = IncompleteCodeFinding(type="PLACEHOLDER", description="returns fake data")
    assert generate_incomplete_code_title(finding) == "Replace placeholder implementation"


# ----------------------------------------------------------------------------
# Security titles
# ----------------------------------------------------------------------------


def test_security_title_prefers_location():
    finding = SecurityFinding(
        type="SQL_INJECTION",
        description="query built from input",
        location="UserRepository.findByName",
        affected_component="UserRepository",
    )
    assert generate_security_title(finding) == "Fix SQL injection vulnerability in UserRepository.findByName"


def test_security_title_uses_affected_component():
    finding = SecurityFinding(type="XSS", affected_component="CommentList")
    assert generate_security_title(finding) == "Fix XSS (Cross-Site Scripting) vulnerability: CommentList"


def test_security_title_uses_short_subject():
    finding = SecurityFinding(type="HARDCODED_SECRET", description="secret in config module")
    assert generate_security_title(finding) == "Remove hardcoded secret/credential - config module"


def test_security_title_drops_long_subject():
    finding = SecurityFinding(
        type="WEAK_CRYPTO",
        description="the extraordinarilylongidentifiername function definitelyoverlongsuffix",
    )
    assert generate_security_title(finding) == "Replace weak cryptographic algorithm"


@pytest.mark.parametrize(
    "description, expected",
    [
        # three words, 29 characters
        ("abcdefghij abcdefghij abcdefg", "Replace weak cryptographic algorithm - abcdefghij abcdefghij abcdefg"),
        # three words, exactly 30 characters
        ("abcdefghij abcdefghij abcdefgh", "Replace weak cryptographic algorithm"),
    ],
)
def test_security_subject_must_be_shorter_than_thirty_characters(description, expected):
    assert generate_security_title(SecurityFinding(type="WEAK_CRYPTO", description=description)) == expected


def test_security_title_unknown_type():
    assert generate_security_title(SecurityFinding(type="SERVER_SIDE_REQUEST_FORGERY")) == (
        "Fix server side request forgery"
    )
