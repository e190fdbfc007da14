"""Intake and Scope Document schema models."""

from scopegen.models.common import CamelModel, ValidationIssue, issues_from_error
from scopegen.models.intake import (
    BudgetRange,
    Deadline,
    DesignPreference,
    ExportFormat,
    Industry,
    Intake,
    IntakeValidationError,
    OutputPrefs,
    PrimaryGoal,
    ProjectType,
    ProposalStyle,
    ScreensEstimate,
    validate_intake,
)
from scopegen.models.scope import (
    MVP,
    Milestone,
    Phase2,
    PricingEstimate,
    Risk,
    RiskImpact,
    ScopeBoundaries,
    ScopeDocument,
    ScopeValidationResult,
    TechStack,
    TimelinePhase,
    validate_scope_document,
)

__all__ = [
    # Common
    "CamelModel",
    "ValidationIssue",
    "issues_from_error",
    # Intake
    "BudgetRange",
    "Deadline",
    "DesignPreference",
    "ExportFormat",
    "Industry",
    "Intake",
    "IntakeValidationError",
    "OutputPrefs",
    "PrimaryGoal",
    "ProjectType",
    "ProposalStyle",
    "ScreensEstimate",
    "validate_intake",
    # Scope document
    "MVP",
    "Milestone",
    "Phase2",
    "PricingEstimate",
    "Risk",
    "RiskImpact",
    "ScopeBoundaries",
    "ScopeDocument",
    "ScopeValidationResult",
    "TechStack",
    "TimelinePhase",
    "validate_scope_document",
]
