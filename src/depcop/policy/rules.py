"""
Rule engine.

Evaluates allow/deny rules against a candidate module.

Pattern forms:
    "..."           every module outside the standard library
    "acme/..."      acme itself and everything below it
    "acme/billing"  exactly that module

Standard library modules are never decided by "...": it returns undecided
for them so the search continues further up the directory tree.
"""

import re
from functools import lru_cache
from typing import Sequence

from depcop.schema import WILDCARD_PATTERN, Module, Rule, Verdict

SUBTREE_SUFFIX = "/" + WILDCARD_PATTERN


@lru_cache(maxsize=1024)
def _compile_pattern(pattern: str) -> re.Pattern[str]:
    expr = re.escape(pattern)
    escaped_suffix = re.escape(SUBTREE_SUFFIX)
    if expr.endswith(escaped_suffix):
        expr = expr[: -len(escaped_suffix)] + "(/.*)?"
    return re.compile(expr)


def evaluate_rule(rule: Rule, module: Module) -> Verdict:
    """
    Evaluate one rule against a candidate module.

    Args:
        rule: The rule to apply
        module: The module being matched

    Returns:
        REJECT/APPROVE when the rule matches, UNDECIDED otherwise
    """
    decision = Verdict.REJECT if rule.is_deny else Verdict.APPROVE

    if rule.pattern == WILDCARD_PATTERN:
        if module.is_stdlib:
            return Verdict.UNDECIDED
        return decision

    if _compile_pattern(rule.pattern).fullmatch(module.name):
        return decision
    return Verdict.UNDECIDED


def evaluate_rules(rules: Sequence[Rule], module: Module) -> tuple[Verdict, int | None]:
    """
    Evaluate a ruleset in order; the first decisive rule wins.

    Returns:
        (verdict, index of the deciding rule), or (UNDECIDED, None)
    """
    for index, rule in enumerate(rules):
        verdict = evaluate_rule(rule, module)
        if verdict != Verdict.UNDECIDED:
            return verdict, index
    return Verdict.UNDECIDED, None
