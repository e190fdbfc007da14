"""Unit tests for backend output normalization."""

import copy

import pytest

from scopegen.generation.normalizer import (
    DEFAULT_MITIGATION,
    MILESTONE_LIMIT,
    RISK_LIMIT,
    normalize_model_output,
)
from scopegen.models.scope import validate_scope_document


class TestNormalizeInvariants:
    """Properties that hold for any input."""

    @pytest.mark.parametrize(
        "value",
        [
            {},
            None,
            "just text",
            [1, 2, 3],
            {"milestones": ["Kickoff", "Beta"], "risks": ["Scope creep"]},
            {"timeline": ["junk", {"phase": "Build", "durationWeeks": "3"}]},
            {"title": "Alias only", "mvp": "oops", "pricingEstimate": None},
        ],
    )
    def test_idempotent(self, value):
        once = normalize_model_output(value)
        assert normalize_model_output(once) == once

    def test_template_unchanged(self, template):
        """Test that an already-conforming document passes through untouched."""
        assert normalize_model_output(template) == template

    def test_input_not_mutated(self, template):
        template["milestones"] = ["Kickoff"]
        del template["mvp"]
        before = copy.deepcopy(template)

        normalize_model_output(template)

        assert template == before

    @pytest.mark.parametrize("value", [None, "text", 42, ["a"]])
    def test_non_record_becomes_defaults(self, value):
        """Test that non-record input yields a default-only candidate that still fails validation."""
        doc = normalize_model_output(value)

        assert doc["goals"] == []
        assert doc["mvp"] == {"features": [], "userStories": []}
        assert doc["pricingEstimate"]["lowUSD"] == 0
        assert not validate_scope_document(doc).is_valid


class TestKeyAliases:
    """Tests for canonical key recovery."""

    def test_alias_fills_missing_canonical(self):
        doc = normalize_model_output(
            {"title": "Portal", "summary": "Short summary", "problem": "Slow process"}
        )

        assert doc["projectTitle"] == "Portal"
        assert doc["executiveSummary"] == "Short summary"
        assert doc["problemStatement"] == "Slow process"

    def test_alias_fills_empty_canonical(self):
        doc = normalize_model_output({"projectTitle": "", "title": "Portal"})
        assert doc["projectTitle"] == "Portal"

    def test_canonical_wins(self):
        doc = normalize_model_output({"projectTitle": "Real", "title": "Other"})
        assert doc["projectTitle"] == "Real"

    def test_empty_alias_ignored(self):
        doc = normalize_model_output({"title": ""})
        assert "projectTitle" not in doc


class TestShapeDefaults:
    """Tests for list and nested record defaults."""

    def test_missing_lists_become_empty(self):
        doc = normalize_model_output({"goals": "not a list"})

        assert doc["goals"] == []
        assert doc["nextSteps"] == []
        assert doc["milestones"] == []

    def test_nested_record_replaced(self):
        doc = normalize_model_output({"mvp": "oops", "scopeBoundaries": {"inScope": ["Auth"]}})

        assert doc["mvp"] == {"features": [], "userStories": []}
        assert doc["scopeBoundaries"] == {"inScope": ["Auth"], "outOfScope": []}

    def test_tech_stack_children(self):
        doc = normalize_model_output({"techStack": {"frontend": ["React"], "auth": None}})

        assert doc["techStack"] == {
            "frontend": ["React"],
            "backend": [],
            "database": [],
            "auth": [],
            "hosting": [],
            "integrations": [],
        }

    def test_pricing_defaults_only_when_missing(self):
        doc = normalize_model_output({"pricingEstimate": {"lowUSD": None}})

        assert doc["pricingEstimate"] == {
            "lowUSD": 0,
            "highUSD": 0,
            "pricingDrivers": [],
            "paymentScheduleSuggestion": "",
        }

    def test_present_pricing_values_kept(self):
        """Test that wrongly typed but present prices are left for validation to reject."""
        doc = normalize_model_output({"pricingEstimate": {"lowUSD": "5000", "highUSD": 9000}})

        assert doc["pricingEstimate"]["lowUSD"] == "5000"
        assert doc["pricingEstimate"]["highUSD"] == 9000


class TestListRepairs:
    """Tests for milestone, risk and timeline repair."""

    def test_string_milestones_expanded(self):
        doc = normalize_model_output({"milestones": ["Kickoff", "Beta"]})

        assert doc["milestones"] == [
            {"name": "Milestone 1", "description": "Kickoff", "dueWeek": 1, "deliverables": ["Kickoff"]},
            {"name": "Milestone 2", "description": "Beta", "dueWeek": 2, "deliverables": ["Beta"]},
        ]

    def test_string_milestones_capped(self):
        doc = normalize_model_output({"milestones": [f"m{i}" for i in range(9)]})

        assert len(doc["milestones"]) == MILESTONE_LIMIT
        assert doc["milestones"][-1]["description"] == "m4"

    def test_mixed_milestones_untouched(self):
        milestones = ["Kickoff", {"name": "Beta"}]
        doc = normalize_model_output({"milestones": milestones})
        assert doc["milestones"] == milestones

    def test_string_risks_expanded(self):
        doc = normalize_model_output({"risks": ["Scope creep"]})

        assert doc["risks"] == [
            {"risk": "Scope creep", "impact": "Medium", "mitigation": DEFAULT_MITIGATION}
        ]

    def test_string_risks_capped(self):
        doc = normalize_model_output({"risks": [f"r{i}" for i in range(10)]})
        assert len(doc["risks"]) == RISK_LIMIT

    def test_timeline_entries_rebuilt(self):
        doc = normalize_model_output(
            {
                "timeline": [
                    {"phase": "Kickoff", "durationWeeks": 2, "whatHappens": ["Plan"], "notes": "x"},
                    "junk",
                    {"phase": 7, "durationWeeks": "3"},
                    {},
                ]
            }
        )

        assert doc["timeline"] == [
            {"phase": "Kickoff", "durationWeeks": 2, "whatHappens": ["Plan"]},
            {"phase": "Build", "durationWeeks": 1, "whatHappens": ["Define scope", "Implement features", "Test + deploy"]},
            {"phase": "QA & Launch", "durationWeeks": 1, "whatHappens": ["Define scope", "Implement features", "Test + deploy"]},
            {"phase": "Phase 4", "durationWeeks": 1, "whatHappens": ["Define scope", "Implement features", "Test + deploy"]},
        ]

    def test_timeline_numbers_kept_for_validation(self):
        """Test that non-integer numbers survive normalization and are rejected later."""
        doc = normalize_model_output({"timeline": [{"phase": "Build", "durationWeeks": 1.5}]})
        assert doc["timeline"][0]["durationWeeks"] == 1.5

    def test_repaired_strings_validate(self, template):
        """Test that a reply with bare-string milestones and risks is accepted after repair."""
        template["milestones"] = ["Scope approved", "Launch"]
        template["risks"] = ["Scope creep", "Late feedback"]

        result = validate_scope_document(normalize_model_output(template))

        assert result.is_valid
        assert [m.due_week for m in result.document.milestones] == [1, 2]


class TestDeepNesting:
    """Output nested deeper than the interpreter can copy."""

    def test_too_deep_to_copy_degrades_to_defaults(self):
        nested: list = []
        for _ in range(5000):
            nested = [nested]

        doc = normalize_model_output({"goals": nested, "projectTitle": "Deep"})

        assert doc["goals"] == []
        assert "projectTitle" not in doc
        assert not validate_scope_document(doc).is_valid
