"""Repair common shape deviations in backend output before validation.

The backend is asked to copy the output template exactly, but it regularly
renames a top-level key, returns a bare string where a record is expected,
or drops a nested object. ``normalize_model_output`` coerces those cases
toward the scope document shape without inventing business content: every
default is either empty (which still fails validation on purpose) or a fixed
neutral placeholder.

The function never raises, never mutates its argument and is idempotent.
"""

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeAlias

logger = logging.getLogger(__name__)

JSONValue: TypeAlias = None | bool | int | float | str | list["JSONValue"] | dict[str, "JSONValue"]

# (canonical key, alias the model sometimes uses instead)
KEY_ALIASES: tuple[tuple[str, str], ...] = (
    ("projectTitle", "title"),
    ("executiveSummary", "summary"),
    ("problemStatement", "problem"),
)

MILESTONE_LIMIT = 5
RISK_LIMIT = 6
DEFAULT_RISK_IMPACT = "Medium"
DEFAULT_MITIGATION = "Mitigate via clear requirements, checkpoints, and staged rollout."

TIMELINE_PHASE_NAMES = ("Discovery", "Build", "QA & Launch")
DEFAULT_DURATION_WEEKS = 1
DEFAULT_WHAT_HAPPENS = ("Define scope", "Implement features", "Test + deploy")


def _is_record(value: JSONValue) -> bool:
    return isinstance(value, dict)


def _is_sequence(value: JSONValue) -> bool:
    return isinstance(value, list)


def _is_number(value: JSONValue) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _is_present(value: JSONValue) -> bool:
    return True


@dataclass(frozen=True)
class ShapeRule:
    """Ensure the value at ``path`` is acceptable, else replace it with ``default()``.

    Missing and null values are always replaced. Intermediate records along
    the path are created (or replaced, if they are not records) as needed.
    """

    path: tuple[str, ...]
    accepts: Callable[[JSONValue], bool]
    default: Callable[[], JSONValue]


def _record(*path: str) -> ShapeRule:
    return ShapeRule(path, _is_record, dict)


def _sequence(*path: str) -> ShapeRule:
    return ShapeRule(path, _is_sequence, list)


SHAPE_RULES: tuple[ShapeRule, ...] = (
    # Top-level list fields
    _sequence("goals"),
    _sequence("userTypes"),
    _sequence("nonGoals"),
    _sequence("assumptions"),
    _sequence("dependencies"),
    _sequence("deliverables"),
    _sequence("acceptanceCriteria"),
    _sequence("nextSteps"),
    _sequence("milestones"),
    _sequence("risks"),
    _sequence("timeline"),
    # Nested records and their required children
    _record("mvp"),
    _sequence("mvp", "features"),
    _sequence("mvp", "userStories"),
    _record("phase2"),
    _sequence("phase2", "features"),
    _record("scopeBoundaries"),
    _sequence("scopeBoundaries", "inScope"),
    _sequence("scopeBoundaries", "outOfScope"),
    _record("pricingEstimate"),
    ShapeRule(("pricingEstimate", "lowUSD"), _is_present, lambda: 0),
    ShapeRule(("pricingEstimate", "highUSD"), _is_present, lambda: 0),
    _sequence("pricingEstimate", "pricingDrivers"),
    ShapeRule(("pricingEstimate", "paymentScheduleSuggestion"), _is_present, str),
    _record("techStack"),
    _sequence("techStack", "frontend"),
    _sequence("techStack", "backend"),
    _sequence("techStack", "database"),
    _sequence("techStack", "auth"),
    _sequence("techStack", "hosting"),
    _sequence("techStack", "integrations"),
)


def apply_shape_rule(doc: dict[str, JSONValue], rule: ShapeRule) -> None:
    """Walk ``rule.path`` inside ``doc`` and enforce the rule in place."""
    parent = doc
    for key in rule.path[:-1]:
        child = parent.get(key)
        if not isinstance(child, dict):
            child = {}
            parent[key] = child
        parent = child

    leaf = rule.path[-1]
    value = parent.get(leaf)
    if value is None or not rule.accepts(value):
        parent[leaf] = rule.default()


def _apply_aliases(doc: dict[str, JSONValue]) -> None:
    for canonical, alias in KEY_ALIASES:
        if doc.get(canonical) in (None, "") and doc.get(alias) not in (None, ""):
            doc[canonical] = doc[alias]


def _all_strings(items: list[JSONValue]) -> bool:
    return bool(items) and all(isinstance(item, str) for item in items)


def _repair_milestones(doc: dict[str, JSONValue]) -> None:
    milestones = doc["milestones"]
    if not _all_strings(milestones):
        return
    doc["milestones"] = [
        {
            "name": f"Milestone {i + 1}",
            "description": text,
            "dueWeek": i + 1,
            "deliverables": [text],
        }
        for i, text in enumerate(milestones[:MILESTONE_LIMIT])
    ]


def _repair_risks(doc: dict[str, JSONValue]) -> None:
    risks = doc["risks"]
    if not _all_strings(risks):
        return
    doc["risks"] = [
        {"risk": text, "impact": DEFAULT_RISK_IMPACT, "mitigation": DEFAULT_MITIGATION}
        for text in risks[:RISK_LIMIT]
    ]


def _fallback_phase_name(index: int) -> str:
    if index < len(TIMELINE_PHASE_NAMES):
        return TIMELINE_PHASE_NAMES[index]
    return f"Phase {index + 1}"


def _repair_timeline(doc: dict[str, JSONValue]) -> None:
    repaired: list[JSONValue] = []
    for index, item in enumerate(doc["timeline"]):
        entry = item if isinstance(item, dict) else {}
        phase = entry.get("phase")
        duration = entry.get("durationWeeks")
        what_happens = entry.get("whatHappens")
        repaired.append(
            {
                "phase": phase if isinstance(phase, str) else _fallback_phase_name(index),
                "durationWeeks": duration if _is_number(duration) else DEFAULT_DURATION_WEEKS,
                "whatHappens": (
                    what_happens if isinstance(what_happens, list) else list(DEFAULT_WHAT_HAPPENS)
                ),
            }
        )
    doc["timeline"] = repaired


def normalize_model_output(value: Any) -> dict[str, JSONValue]:
    """Coerce parsed backend output toward the scope document shape.

    A value that is not a record at all degrades to a candidate built only
    from defaults, so the schema always has something to evaluate.
    """
    doc: dict[str, JSONValue] = {}
    if isinstance(value, dict):
        try:
            doc = copy.deepcopy(value)
        except RecursionError:
            logger.warning("Backend output nests too deeply to copy; using defaults only")

    _apply_aliases(doc)
    for rule in SHAPE_RULES:
        apply_shape_rule(doc, rule)
    _repair_milestones(doc)
    _repair_risks(doc)
    _repair_timeline(doc)

    return doc
