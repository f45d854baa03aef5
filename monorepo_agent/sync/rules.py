# Monorepo Agent Sync Rules
# Compiles a submodule's ordered include/exclude list into a canonical rule set

import re
from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from monorepo_agent.config.schema import RuleKind, SyncRule
from monorepo_agent.errors import InvalidRule, VacuousRuleSet

CATCH_ALL = SyncRule.exclude("*")


@lru_cache(maxsize=256)
def _pattern_regex(pattern: str) -> re.Pattern[str]:
    """
    Translate an rsync-style pattern into a regex over relative paths.

    ``*`` stops at ``/``, ``**`` crosses it, a trailing ``/***`` matches the
    directory itself and everything below it. A leading ``/`` anchors the
    pattern at the submodule root; otherwise it may match at any depth.
    """
    anchored = pattern.startswith("/")
    body = pattern.lstrip("/").rstrip("/")

    tail = ""
    if body.endswith("/***"):
        body = body[:-4]
        tail = "(?:/.*)?"

    out = []
    i = 0
    while i < len(body):
        c = body[i]
        if body.startswith("***", i) or body.startswith("**", i):
            step = 3 if body.startswith("***", i) else 2
            out.append(".*")
            i += step
        elif c == "*":
            out.append("[^/]*")
            i += 1
        elif c == "?":
            out.append("[^/]")
            i += 1
        elif c == "[":
            end = body.find("]", i + 1)
            if end == -1:
                out.append(re.escape(c))
                i += 1
            else:
                cls = body[i + 1 : end]
                if cls.startswith("!"):
                    cls = "^" + cls[1:]
                out.append(f"[{cls}]")
                i = end + 1
        else:
            out.append(re.escape(c))
            i += 1

    prefix = "^" if anchored else "^(?:.*/)?"
    return re.compile(prefix + "".join(out) + tail + "$")


def rule_matches(rule: SyncRule, path: str, *, is_dir: bool = False) -> bool:
    """
    Check whether a rule matches a path relative to the submodule root.

    Patterns ending in ``/`` only match directories.
    """
    if rule.pattern.endswith("/") and not is_dir:
        return False
    return _pattern_regex(rule.pattern).match(path.strip("/")) is not None


def _subtree_prefix(rule: SyncRule) -> Optional[str]:
    pattern = rule.pattern.lstrip("/")
    if pattern.endswith("/***"):
        return pattern[:-3]
    return None


def _promote_shadowed_excludes(rules: list[SyncRule]) -> list[SyncRule]:
    """
    Move excludes nested inside an earlier whole-subtree include ahead of it.

    ``[+ lib/***, - lib/secret/***]`` would never exclude anything under
    first-match-wins, so the exclude is placed directly before the include
    that covers it. Every other rule keeps its position.
    """
    result: list[SyncRule] = []
    for rule in rules:
        if rule.kind == RuleKind.EXCLUDE:
            pattern = rule.pattern.lstrip("/")
            for index, earlier in enumerate(result):
                prefix = _subtree_prefix(earlier) if earlier.is_include else None
                if prefix and pattern.startswith(prefix) and pattern != earlier.pattern.lstrip("/"):
                    result.insert(index, rule)
                    break
            else:
                result.append(rule)
        else:
            result.append(rule)
    return result


def validate_rules(rules: Sequence[SyncRule], *, submodule: Optional[str] = None) -> None:
    """
    Reject rules with empty patterns.

    Raises:
        InvalidRule: If any pattern is empty or blank.
    """
    for position, rule in enumerate(rules, start=1):
        if not rule.pattern or not rule.pattern.strip():
            raise InvalidRule(f"rule #{position} has an empty pattern", submodule=submodule)


@dataclass(frozen=True)
class RuleSet:
    """Canonical, ordered rule list ready for the mirroring tool."""

    rules: tuple[SyncRule, ...]

    def __iter__(self):
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def as_list(self) -> list[SyncRule]:
        return list(self.rules)

    def lines(self) -> list[str]:
        """Human-readable ``+ pattern`` / ``- pattern`` lines."""
        return [str(rule) for rule in self.rules]

    def first_match(self, path: str, *, is_dir: bool = False) -> SyncRule:
        for rule in self.rules:
            if rule_matches(rule, path, is_dir=is_dir):
                return rule
        # Unreachable with the trailing catch-all, kept for hand-built sets
        return CATCH_ALL

    def is_included(self, path: str, *, is_dir: bool = False) -> bool:
        """
        Decide whether a path relative to the submodule root is mirrored.

        Like rsync, a path is only reached when every parent directory is
        included too.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        if not parts:
            return False
        for depth in range(1, len(parts)):
            if not self.first_match("/".join(parts[:depth]), is_dir=True).is_include:
                return False
        return self.first_match("/".join(parts), is_dir=is_dir).is_include


def compile_rules(rules: Sequence[SyncRule], *, submodule: Optional[str] = None) -> RuleSet:
    """
    Compile a submodule's rules into a canonical rule set.

    Input order is kept (first match wins), excludes hidden by an earlier
    ``dir/***`` include are promoted ahead of it, and a catch-all
    ``- *`` is appended unless the list already ends with one.

    Args:
        rules: Ordered rules as configured.
        submodule: Optional submodule name for error reporting.

    Returns:
        RuleSet: Compiled rules.

    Raises:
        InvalidRule: If a pattern is empty.
        VacuousRuleSet: If no rule includes anything.
    """
    validate_rules(rules, submodule=submodule)
    if not any(rule.is_include for rule in rules):
        raise VacuousRuleSet(submodule=submodule)

    compiled = _promote_shadowed_excludes(list(rules))
    if compiled[-1] != CATCH_ALL:
        compiled.append(CATCH_ALL)
    return RuleSet(rules=tuple(compiled))


def to_rsync_filters(rule_set: RuleSet) -> list[str]:
    """Translate a compiled rule set into rsync ``--include``/``--exclude`` arguments."""
    args = []
    for rule in rule_set:
        flag = "--include" if rule.is_include else "--exclude"
        args.append(f"{flag}={rule.pattern}")
    return args
