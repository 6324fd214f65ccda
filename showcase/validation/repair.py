"""Bounded auto-repair loop.

Repairers are looked up by diagnostic code. A rewrite is kept only when a full
re-validation of the rewritten text shows fewer errors, or the same number of
errors with fewer of the targeted code. At most ``max_passes`` passes run, and
a pass that keeps nothing ends the loop.
"""

import logging
from collections import Counter
from functools import partial
from typing import Callable, NamedTuple

from showcase.types import Dialect, Severity, ValidationDiagnostic
from showcase.validation import structural
from showcase.validation.dialects import RepairFn, dialect_repairs
from showcase.validation.imports import consolidate_deep_imports
from showcase.validation.parser import ParsedArtifact

logger = logging.getLogger(__name__)

AnalyzeFn = Callable[[str], tuple[ParsedArtifact, list[ValidationDiagnostic]]]


class Repairer(NamedTuple):
    name: str
    apply: RepairFn


# Candidates are tried in order; the first accepted one wins for that code.
STRUCTURAL_REPAIRS: dict[str, list[Repairer]] = {
    "truncation": [
        Repairer("drop_dangling_tail", structural.drop_dangling_tail),
        Repairer("close_dangling_constructs", structural.close_dangling_constructs),
        Repairer("drop_truncated_line", structural.drop_truncated_line),
    ],
    "orphan-closing-tag": [Repairer("drop_dangling_tail", structural.drop_dangling_tail)],
    "unclosed-jsx": [Repairer("close_dangling_constructs", structural.close_dangling_constructs)],
    "unbalanced-bracket": [Repairer("close_dangling_constructs", structural.close_dangling_constructs)],
    "unterminated-string": [
        Repairer("close_unterminated_strings", structural.close_unterminated_strings),
    ],
    "brace-imbalance": [
        Repairer("rebalance_braces", structural.rebalance_braces),
        Repairer("drop_dangling_tail", structural.drop_dangling_tail),
    ],
    "title-unescaped-quote": [Repairer("escape_title_quotes", structural.escape_title_quotes)],
    "duplicate-title-words": [
        Repairer("collapse_duplicate_title_words", structural.collapse_duplicate_title_words),
    ],
}


def repair_registry(dialect: Dialect, canonical: str = "") -> dict[str, list[Repairer]]:
    registry = {code: list(repairers) for code, repairers in STRUCTURAL_REPAIRS.items()}
    if canonical and dialect != Dialect.WEB_COMPONENTS:
        registry["deep-import-path"] = [
            Repairer("consolidate_deep_imports", partial(_deep_import_repair, canonical=canonical)),
        ]
    for code, fn in dialect_repairs(dialect).items():
        registry.setdefault(code, []).append(Repairer(fn.__name__, fn))
    return registry


def _deep_import_repair(text: str, parsed: ParsedArtifact, canonical: str) -> str:
    return consolidate_deep_imports(text, parsed, canonical)


def _error_counts(diags: list[ValidationDiagnostic]) -> Counter:
    return Counter(d.code for d in diags if d.severity == Severity.ERROR)


def is_improvement(before: list[ValidationDiagnostic], after: list[ValidationDiagnostic], code: str) -> bool:
    old, new = _error_counts(before), _error_counts(after)
    old_total, new_total = sum(old.values()), sum(new.values())
    if new_total < old_total:
        return True
    return new_total == old_total and new[code] < old[code]


class RepairResult(NamedTuple):
    text: str
    parsed: ParsedArtifact
    diagnostics: list[ValidationDiagnostic]
    applied: list[tuple[str, str]]  # (repairer name, targeted code)


def run_repairs(
    text: str,
    analyze: AnalyzeFn,
    registry: dict[str, list[Repairer]],
    max_passes: int = 3,
) -> RepairResult:
    parsed, diags = analyze(text)
    applied: list[tuple[str, str]] = []

    for pass_no in range(1, max_passes + 1):
        codes = [code for code in dict.fromkeys(d.code for d in diags if d.is_error) if code in registry]
        if not codes:
            break
        kept = 0
        for code in codes:
            if not _error_counts(diags)[code]:
                continue  # fixed as a side effect of an earlier repair
            for repairer in registry[code]:
                try:
                    candidate = repairer.apply(text, parsed)
                except Exception:
                    logger.exception("Repair %s failed on pass %d", repairer.name, pass_no)
                    continue
                if candidate == text:
                    continue
                new_parsed, new_diags = analyze(candidate)
                if not is_improvement(diags, new_diags, code):
                    logger.debug("Repair %s for %s rejected: no improvement", repairer.name, code)
                    continue
                logger.debug("Repair %s for %s kept on pass %d", repairer.name, code, pass_no)
                text, parsed, diags = candidate, new_parsed, new_diags
                applied.append((repairer.name, code))
                kept += 1
                break
        if not kept:
            break

    return RepairResult(text, parsed, diags, applied)
