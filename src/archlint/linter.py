"""Linter orchestrator: load config, scan, build the graph, validate, format results."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from archlint.graph.builder import build, build_detailed
from archlint.infrastructure.config import (
    SHARED_IMPORTS_ERROR,
    SHARED_IMPORTS_WARN,
    ConfigError,
    ErrorPrompt,
    load_config,
)
from archlint.infrastructure.scanner import ScanError, scan
from archlint.rules.policy import TestFileLocation
from archlint.rules.validator import validate
from archlint.rules.violations import ViolationKind

if TYPE_CHECKING:
    from pathlib import Path

    from archlint.graph.model import Graph
    from archlint.infrastructure.coverage_runner import DirectorySummary
    from archlint.rules.policy import PackageCoverage, Policy
    from archlint.rules.violations import Violation

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class LintError(Exception):
    """Raised when lint cannot run: bad configuration or unparseable sources."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class LintResult:
    """Result of a lint run."""

    violations: list[Violation] = field(default_factory=list)
    graph: Graph | None = None
    files_scanned: int = 0
    rules_evaluated: int = 0
    elapsed_ms: float = 0.0
    shared_imports_mode: str = SHARED_IMPORTS_WARN
    error_prompt: ErrorPrompt = field(default_factory=ErrorPrompt)
    preset: str | None = None
    coverage: list[PackageCoverage] = field(default_factory=list)
    coverage_summaries: list[DirectorySummary] = field(default_factory=list)
    overall_coverage: float | None = None


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def count_enabled_rules(policy: Policy, *, with_structure: bool, with_coverage: bool) -> int:
    """Number of rule passes a run with *policy* evaluates."""
    enabled = [
        True,  # cmd/pkg isolation
        bool(policy.directories_import),
        with_structure and bool(policy.required_directories),
        policy.detect_unused,
        policy.detect_shared_external_imports,
        policy.lint_test_files and policy.test_file_location is not TestFileLocation.ANY,
        policy.require_blackbox_tests,
        policy.coverage_enabled and with_coverage,
        policy.strict_test_naming,
    ]
    return sum(enabled)


def lint(
    project_root: Path,
    *,
    detailed: bool = False,
    config_path: Path | None = None,
    measure_coverage: bool = True,
) -> LintResult:
    """Lint the Go project at *project_root*.

    Parameters
    ----------
    project_root:
        Directory holding ``go.mod`` and, optionally, ``.archlint.yml``.
    detailed:
        Record which symbols each import is used for (slower scan).
    config_path:
        Explicit configuration file instead of ``<project_root>/.archlint.yml``.
    measure_coverage:
        Run ``go test -cover`` when the config enables coverage thresholds.

    Raises
    ------
    LintError
        When the configuration is invalid or a source file cannot be parsed.
    """
    start = time.monotonic()

    try:
        config = load_config(project_root, config_path)
    except ConfigError as exc:
        msg = f"Invalid configuration: {exc}"
        raise LintError(msg) from exc

    policy = config.to_policy()

    try:
        scanned = scan(
            project_root,
            config.scan_paths,
            config.ignore_paths,
            include_tests=(
                config.lint_test_files
                or config.strict_test_naming
                or config.require_blackbox_tests
            ),
            include_usages=detailed,
        )
    except ScanError as exc:
        msg = f"Scan failed: {exc}"
        raise LintError(msg) from exc

    if detailed:
        graph = build_detailed(scanned.files, config.module, scanned.usages)
    else:
        graph = build(scanned.files, config.module)

    result = LintResult(
        graph=graph,
        files_scanned=len(scanned.files),
        shared_imports_mode=config.shared_imports_mode,
        error_prompt=config.error_prompt,
        preset=config.preset,
    )

    if config.coverage_enabled and measure_coverage:
        _collect_coverage(project_root, config.module, config.scan_paths, result)

    result.violations = validate(graph, policy, result.coverage, project_root)
    result.rules_evaluated = count_enabled_rules(
        policy, with_structure=True, with_coverage=bool(result.coverage)
    )
    result.elapsed_ms = (time.monotonic() - start) * 1000
    logger.debug(
        "Lint finished: %d files, %d violations, %.0f ms",
        result.files_scanned,
        len(result.violations),
        result.elapsed_ms,
    )
    return result


def _collect_coverage(
    project_root: Path, module: str, scan_paths: tuple[str, ...], result: LintResult
) -> None:
    from archlint.infrastructure.coverage_runner import (
        CoverageError,
        overall_coverage,
        run_coverage,
        summarize_by_directory,
    )

    try:
        coverage = run_coverage(project_root, module, scan_paths)
    except CoverageError as exc:
        logger.warning("Failed to run coverage analysis: %s", exc)
        return

    result.coverage = coverage
    result.coverage_summaries = summarize_by_directory(coverage, module, scan_paths)
    result.overall_coverage = overall_coverage(coverage)


def should_fail(result: LintResult) -> bool:
    """True when the violations should fail the build.

    Shared external imports alone only fail in ``error`` mode.
    """
    for v in result.violations:
        if v.kind is not ViolationKind.SHARED_EXTERNAL_IMPORT:
            return True
        if result.shared_imports_mode == SHARED_IMPORTS_ERROR:
            return True
    return False


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------

_RULE = "─" * 78


def _section(title: str, body: str) -> list[str]:
    return [f"┌─ {title} {_RULE[len(title) + 4 :]}", body.strip("\n"), _RULE, ""]


def _is_warning(v: Violation, result: LintResult) -> bool:
    return (
        v.kind is ViolationKind.SHARED_EXTERNAL_IMPORT
        and result.shared_imports_mode != SHARED_IMPORTS_ERROR
    )


def _format_violation(v: Violation, result: LintResult) -> list[str]:
    marker = "⚠" if _is_warning(v, result) else "✗"
    lines = [f"{marker} {v.kind.label}"]
    if v.file:
        loc = f"{v.file}:{v.line}" if v.line > 0 else v.file
        lines.append(f"  File: {loc}")
    lines.append(f"  Issue: {v.issue}")
    lines.append(f"  Rule: {v.rule}")
    fix_lines = v.fix.splitlines() or [""]
    lines.append(f"  Fix: {fix_lines[0]}")
    lines.extend(f"       {extra}" for extra in fix_lines[1:])
    lines.append("")
    return lines


def _preamble(prompt: ErrorPrompt, preset: str | None) -> list[str]:
    lines = ["ARCHITECTURAL VIOLATIONS DETECTED", ""]
    if preset:
        lines.append(f"This project uses the '{preset}' architectural preset.")
    lines.append(
        "The violations below show where the current structure departs from the target\n"
        "architecture. Review the goals and guidance to restructure the code accordingly."
    )
    lines.append("")
    if prompt.architectural_goals:
        lines.extend(_section("ARCHITECTURAL GOALS", prompt.architectural_goals))
    if prompt.principles:
        lines.extend(
            _section("KEY PRINCIPLES", "\n".join(f"  • {p}" for p in prompt.principles))
        )
    return lines


def _guidance(violations: list[Violation], prompt: ErrorPrompt) -> list[str]:
    has_test = any(v.kind.is_test_related for v in violations)
    has_whitebox = any(v.kind is ViolationKind.WHITEBOX_TEST for v in violations)
    has_arch = any(
        not v.kind.is_test_related and v.kind is not ViolationKind.WHITEBOX_TEST
        for v in violations
    )

    lines: list[str] = []
    if has_arch and prompt.refactoring_guidance:
        lines.extend(_section("REFACTORING GUIDANCE", prompt.refactoring_guidance))
    if has_test and prompt.coverage_guidance:
        lines.extend(_section("TEST COVERAGE GUIDANCE", prompt.coverage_guidance))
    if has_whitebox and prompt.blackbox_testing_guidance:
        lines.extend(_section("BLACKBOX TESTING GUIDANCE", prompt.blackbox_testing_guidance))

    if has_arch and (has_test or has_whitebox):
        tip = "Address architectural violations first, then improve test quality and coverage."
    elif has_arch:
        tip = (
            "These violations show architectural misalignment, not just linter errors.\n"
            "     Restructure toward the goals above rather than moving code to silence them."
        )
    elif has_whitebox and has_test:
        tip = "Start with blackbox testing, then improve coverage."
    elif has_whitebox:
        tip = "Blackbox tests (package foo_test) verify behavior through the public interface."
    else:
        tip = "Test critical paths and business logic first, then use coverage to find gaps."
    lines.append(f"TIP: {tip}")
    lines.append("")
    return lines


def format_rich(result: LintResult) -> str:
    """Format a LintResult as human-readable text.

    Example output with violations::

        Files: 12 scanned
        Rules: 3 evaluated

        ✗ Forbidden pkg-to-pkg Dependency
          File: pkg/http/server.go
          Issue: pkg/http imports pkg/database
          Rule: pkg packages must not import other pkg packages (except own subpackages)
          Fix: Import from internal/ or define interface locally

        1 violation found (3 rules evaluated, 0.1s)

    With ``error_prompt.enabled`` the report is wrapped in the configured
    architectural goals and the guidance matching the violation categories.
    """
    lines: list[str] = [
        f"Files: {result.files_scanned} scanned",
        f"Rules: {result.rules_evaluated} evaluated",
    ]
    if result.overall_coverage is not None:
        lines.append(f"Coverage: {result.overall_coverage:.1f}% overall")
    lines.append("")

    elapsed_str = f"{result.elapsed_ms / 1000:.1f}s"
    stats = f"({result.rules_evaluated} rules evaluated, {elapsed_str})"

    if not result.violations:
        lines.append(f"✓ No violations found {stats}")
        return "\n".join(lines)

    prompt = result.error_prompt
    if prompt.enabled:
        lines.extend(_preamble(prompt, result.preset))

    for v in result.violations:
        lines.extend(_format_violation(v, result))

    if prompt.enabled:
        lines.extend(_guidance(result.violations, prompt))

    count = len(result.violations)
    warnings = sum(1 for v in result.violations if _is_warning(v, result))
    noun = "violation" if count == 1 else "violations"
    summary = f"{count} {noun} found"
    if warnings:
        summary += f", {warnings} as warnings"
    lines.append(f"{summary} {stats}")
    return "\n".join(lines)


def format_json(result: LintResult) -> str:
    """Format a LintResult as structured JSON.

    Returns a JSON string with ``violations`` array and ``summary`` object.
    """
    violations_list: list[dict[str, object]] = []
    for v in result.violations:
        violations_list.append(
            {
                "kind": v.kind.value,
                "label": v.kind.label,
                "file": v.file,
                "line": v.line if v.line > 0 else None,
                "issue": v.issue,
                "rule": v.rule,
                "fix": v.fix,
                "severity": "warning" if _is_warning(v, result) else "error",
            }
        )

    summary: dict[str, object] = {
        "rules_evaluated": result.rules_evaluated,
        "violations_count": len(result.violations),
        "files_scanned": result.files_scanned,
        "elapsed_ms": result.elapsed_ms,
        "failed": should_fail(result),
    }
    if result.preset:
        summary["preset"] = result.preset
    if result.overall_coverage is not None:
        summary["overall_coverage"] = result.overall_coverage

    return json.dumps({"violations": violations_list, "summary": summary}, indent=2)


def format_porcelain(result: LintResult) -> str:
    """Format a LintResult as one ``kind:file:line:issue`` line per violation.

    The line is empty when unknown; only the first line of a multi-line
    issue is kept. Returns empty string when there are no violations.
    """
    if not result.violations:
        return ""

    lines: list[str] = []
    for v in result.violations:
        line_number = str(v.line) if v.line > 0 else ""
        issue = v.issue.splitlines()[0] if v.issue else ""
        lines.append(f"{v.kind.value}:{v.file}:{line_number}:{issue}")

    return "\n".join(lines)


def format_graph_markdown(graph: Graph) -> str:
    """Render the dependency graph as markdown, one section per file.

    Local dependencies come first, then non-standard-library external ones,
    each followed by the symbols used from it when known.
    """
    lines = ["# Dependency Graph", ""]
    for node in sorted(graph.nodes, key=lambda n: n.rel_path):
        lines.append(f"## {node.rel_path}")
        if not node.dependencies:
            lines.append("depends on: (none)")
            lines.append("")
            continue

        lines.append("depends on:")
        deps = sorted(node.dependencies, key=lambda d: (not d.is_local, d.import_path))
        for dep in deps:
            if dep.is_local:
                lines.append(f"  - local:{dep.local_path}")
            elif not dep.is_stdlib:
                lines.append(f"  - external:{dep.import_path}")
            else:
                continue
            lines.extend(f"    - {symbol}" for symbol in dep.used_symbols)
        lines.append("")

    return "\n".join(lines)
