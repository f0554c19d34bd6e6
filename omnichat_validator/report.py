"""Aggregation of run results and rendering of the report."""

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from omnichat_validator.auth import AuthMode
from omnichat_validator.catalogue import KNOWN_ENDPOINT_COUNT
from omnichat_validator.models.result import TestResult
from omnichat_validator.runner import RunContext

type CategoryRule = tuple[Callable[[str], bool], str]

OTHER_CATEGORY = "Other"


def _contains(*fragments: str) -> Callable[[str], bool]:
    return lambda name: any(fragment in name for fragment in fragments)


# Evaluated in order, first match wins: names such as
# "GET /api/conversations/{id}/messages" match more than one rule.
CATEGORY_RULES: Sequence[CategoryRule] = (
    (_contains("/auth"), "Authentication"),
    (_contains("/chat", "/models"), "Chat & AI"),
    (_contains("/conversations"), "Conversations"),
    (_contains("/messages"), "Messages"),
    (_contains("/upload", "/files"), "Files"),
    (_contains("/search"), "Search"),
    (_contains("/battery"), "Battery"),
    (_contains("/user"), "User"),
    (_contains("/stripe"), "Billing"),
    (_contains("/config", "/openapi", "/docs"), "Public"),
)

STATUS_SYMBOLS = {
    "passed": "✅",
    "auth": "🔒",
    "failed": "❌",
}

NEXT_STEPS: Mapping[AuthMode, Sequence[str]] = {
    "none": (
        "💡 To test authenticated endpoints:",
        "   1. Get a Clerk token from the web app session",
        "   2. Get a JWT token via: POST /api/v1/auth/apple",
        "   3. Run: omnichat-validator --clerk CLERK_TOKEN --bearer JWT_TOKEN",
    ),
    "clerk": (
        "💡 To test V1 API endpoints:",
        "   1. Get a JWT token via: POST /api/v1/auth/apple",
        "   2. Run: omnichat-validator --bearer JWT_TOKEN",
    ),
    "jwt": (
        "💡 To test web app endpoints:",
        "   1. Get a Clerk token from the web app session",
        "   2. Run: omnichat-validator --clerk CLERK_TOKEN",
    ),
    "both": (),
}


def categorize(name: str, rules: Sequence[CategoryRule] = CATEGORY_RULES) -> str:
    """Map an endpoint name to its functional category."""
    for matches, label in rules:
        if matches(name):
            return label
    return OTHER_CATEGORY


@dataclass(kw_only=True)
class CategoryStats:
    """Counters for one category."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    auth_required: int = 0

    def add(self, result: TestResult) -> None:
        """Count one result."""
        self.total += 1
        if result.success:
            self.passed += 1
            return
        self.failed += 1
        if result.is_auth_failure:
            self.auth_required += 1


@dataclass(frozen=True, kw_only=True)
class RunSummary:
    """Aggregated view over the results of a run."""

    overall: CategoryStats
    categories: Mapping[str, CategoryStats]
    known_total: int = KNOWN_ENDPOINT_COUNT

    @property
    def coverage(self) -> float:
        """Fraction of the known API surface exercised by the run."""
        return self.overall.total / self.known_total


def summarize(
    results: Sequence[TestResult], known_total: int = KNOWN_ENDPOINT_COUNT
) -> RunSummary:
    """Group results by category and count outcomes.

    Categories keep the order in which they first appear in ``results``.
    """
    overall = CategoryStats()
    categories: dict[str, CategoryStats] = {}
    for result in results:
        overall.add(result)
        categories.setdefault(categorize(result.name), CategoryStats()).add(result)
    return RunSummary(overall=overall, categories=categories, known_total=known_total)


def has_failures(results: Sequence[TestResult]) -> bool:
    """Whether any result failed for a reason other than missing credentials."""
    return any(not r.success and not r.is_auth_failure for r in results)


def _result_symbol(result: TestResult) -> str:
    if result.success:
        return STATUS_SYMBOLS["passed"]
    if result.is_auth_failure:
        return STATUS_SYMBOLS["auth"]
    return STATUS_SYMBOLS["failed"]


def render_result(result: TestResult, expected_hint: str | None = None) -> Sequence[str]:
    """Render one result as report lines."""
    lines = [
        f"{_result_symbol(result)} {result.name}: {result.status_code} "
        f"({result.duration:.2f}s)"
    ]
    if result.error_message:
        lines.extend(f"   {line}" for line in result.error_message.splitlines())
    if expected_hint:
        lines.append(f"   💡 {expected_hint}")
    return lines


def render_stats(label: str, stats: CategoryStats) -> str:
    """Render the counters of one category."""
    line = (
        f"  {label:<20} Total: {stats.total:2d} | Passed: {stats.passed} "
        f"| Failed: {stats.failed}"
    )
    if stats.auth_required:
        line += f" | Auth Required: {stats.auth_required}"
    return line


def render_report(context: RunContext, summary: RunSummary) -> Sequence[str]:
    """Render the full textual report for a run."""
    lines = [f"🔐 Authentication: {context.auth.status}", ""]

    for category in summary.categories:
        lines.append(f"{category}:")
        for spec, result in context.entries():
            if categorize(result.name) != category:
                continue
            hint = None if result.success else spec.expected_failures.get(result.status_code)
            lines.extend(render_result(result, hint))
        lines.append("")

    overall = summary.overall
    lines.append("📊 Test Summary:")
    lines.append("By Category:")
    lines.extend(render_stats(label, stats) for label, stats in summary.categories.items())
    lines.append("")
    lines.append(
        f"Overall: Total: {overall.total} | Passed: {overall.passed} "
        f"| Failed: {overall.failed} | Auth Required: {overall.auth_required}"
    )
    lines.append(
        f"Endpoint Coverage: {overall.total}/{summary.known_total} "
        f"({summary.coverage * 100:.1f}%)"
    )

    if steps := NEXT_STEPS[context.auth.mode]:
        lines.append("")
        lines.extend(steps)

    if overall.failed > overall.auth_required:
        lines.extend(["", "❌ Some tests failed beyond auth issues. Review errors above."])
    elif overall.passed == overall.total:
        lines.extend(["", "✅ All accessible tests passed!"])

    return lines


def log_report(log: logging.Logger, context: RunContext, summary: RunSummary) -> None:
    """Log the rendered report line by line."""
    log.info("=" * 60)
    for line in render_report(context, summary):
        log.info("%s", line)
    log.info("=" * 60)


def format_output(context: RunContext, summary: RunSummary) -> dict[str, Any]:
    """Format run results for JSON output."""
    overall = summary.overall
    return {
        "auth_mode": context.auth.mode,
        "total": overall.total,
        "passed": overall.passed,
        "failed": overall.failed,
        "auth_required": overall.auth_required,
        "known_total": summary.known_total,
        "coverage": round(summary.coverage, 4),
        "has_failures": has_failures(context.results),
        "categories": {
            label: {
                "total": stats.total,
                "passed": stats.passed,
                "failed": stats.failed,
                "auth_required": stats.auth_required,
            }
            for label, stats in summary.categories.items()
        },
        "results": [
            {
                "name": result.name,
                "category": categorize(result.name),
                "success": result.success,
                "status_code": result.status_code,
                "duration": round(result.duration, 4),
                "error": result.error_message,
            }
            for result in context.results
        ],
    }
