"""Scope Document schema.

This is the structural contract every generated scope of work must satisfy
before it is accepted. The rules mirror what reviewers need from a usable
document:

- every identity string is non-empty
- every list (except ``techStack.integrations``) has at least one element
- week counts are positive integers, prices are non-negative integers
- risk impact is one of Low, Medium, High

``validate_scope_document`` reports every violation rather than stopping at
the first, so a failed generation can be diagnosed from a single log line.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BeforeValidator, ConfigDict, Field, StrictInt, ValidationError

from scopegen.models.common import CamelModel, ValidationIssue, issues_from_error


def _whole_float_to_int(value: Any) -> Any:
    # JSON has one number type; 2.0 is a whole number, 2.5 and "2" are not.
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


NonEmptyStr = Annotated[str, Field(min_length=1)]
NonEmptyStrList = Annotated[list[NonEmptyStr], Field(min_length=1)]
WholeNumber = Annotated[StrictInt, BeforeValidator(_whole_float_to_int)]
PositiveWeek = Annotated[WholeNumber, Field(ge=1)]
NonNegativeUSD = Annotated[WholeNumber, Field(ge=0)]


class ScopeModel(CamelModel):
    """Scope document records only accept their camelCase keys.

    The backend is told to copy the template keys exactly, so a snake_case
    key counts as a missing one.
    """

    model_config = ConfigDict(populate_by_name=False)


class RiskImpact(StrEnum):
    """Allowed impact levels for a risk."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Risk(ScopeModel):
    risk: NonEmptyStr
    impact: RiskImpact
    mitigation: NonEmptyStr


class TimelinePhase(ScopeModel):
    phase: NonEmptyStr
    duration_weeks: PositiveWeek
    what_happens: NonEmptyStrList


class Milestone(ScopeModel):
    name: NonEmptyStr
    description: NonEmptyStr
    due_week: PositiveWeek
    deliverables: NonEmptyStrList


class PricingEstimate(ScopeModel):
    low_usd: NonNegativeUSD = Field(alias="lowUSD")
    high_usd: NonNegativeUSD = Field(alias="highUSD")
    pricing_drivers: NonEmptyStrList
    payment_schedule_suggestion: NonEmptyStr


class TechStack(ScopeModel):
    frontend: NonEmptyStrList
    backend: NonEmptyStrList
    database: NonEmptyStrList
    auth: NonEmptyStrList
    hosting: NonEmptyStrList
    integrations: list[NonEmptyStr] = Field(default_factory=list)


class MVP(ScopeModel):
    features: NonEmptyStrList
    user_stories: NonEmptyStrList


class Phase2(ScopeModel):
    features: NonEmptyStrList


class ScopeBoundaries(ScopeModel):
    in_scope: NonEmptyStrList
    out_of_scope: NonEmptyStrList


class ScopeDocument(ScopeModel):
    """A complete scope of work."""

    # Overview
    project_title: NonEmptyStr
    executive_summary: NonEmptyStr
    problem_statement: NonEmptyStr

    # Goals & users
    goals: NonEmptyStrList
    user_types: NonEmptyStrList

    # Scope
    mvp: MVP
    phase2: Phase2
    non_goals: NonEmptyStrList
    scope_boundaries: ScopeBoundaries

    # Planning
    timeline: Annotated[list[TimelinePhase], Field(min_length=1)]
    milestones: Annotated[list[Milestone], Field(min_length=1)]

    # Constraints
    assumptions: NonEmptyStrList
    dependencies: NonEmptyStrList
    risks: Annotated[list[Risk], Field(min_length=1)]

    # Commercials & tech
    pricing_estimate: PricingEstimate
    tech_stack: TechStack

    # Delivery
    deliverables: NonEmptyStrList
    acceptance_criteria: NonEmptyStrList
    next_steps: NonEmptyStrList


@dataclass
class ScopeValidationResult:
    """Outcome of checking a candidate against the scope document schema."""

    document: ScopeDocument | None
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.document is not None


def validate_scope_document(value: Any) -> ScopeValidationResult:
    """Check an arbitrary JSON-like value against the scope document schema."""
    try:
        document = ScopeDocument.model_validate(value)
    except ValidationError as exc:
        return ScopeValidationResult(document=None, issues=issues_from_error(exc))
    return ScopeValidationResult(document=document)
