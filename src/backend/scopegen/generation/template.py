"""Output template pinned into every generation prompt.

The model is asked to copy this exact key/nesting shape and replace the
values. It must always pass ``validate_scope_document`` on its own; the unit
tests treat a failure here as contract drift.
"""

from typing import Any

OUTPUT_TEMPLATE: dict[str, Any] = {
    "projectTitle": "Customer Portal MVP",
    "executiveSummary": (
        "A web portal that lets customers self-serve their account tasks "
        "while giving the internal team an admin dashboard to manage records."
    ),
    "problemStatement": (
        "Customer requests are handled manually over email, which is slow, "
        "error-prone and hard to report on."
    ),
    "goals": [
        "Reduce manual request handling",
        "Give customers 24/7 self-service",
        "Provide basic reporting to the team",
    ],
    "userTypes": ["Admins", "End users"],
    "mvp": {
        "features": ["Authentication", "Admin dashboard", "Core workflow"],
        "userStories": [
            "As an admin, I can sign in and manage records.",
            "As a user, I can complete the primary workflow.",
            "As an admin, I can review and export data.",
        ],
    },
    "phase2": {
        "features": ["Advanced analytics", "Automations", "Notifications"],
    },
    "nonGoals": ["Enterprise SSO in MVP", "Native mobile apps in MVP"],
    "scopeBoundaries": {
        "inScope": [
            "Auth/roles",
            "Admin CRUD",
            "Primary user workflow",
            "Basic reporting",
        ],
        "outOfScope": ["Enterprise SSO", "Native apps", "Custom data warehouse"],
    },
    "timeline": [
        {
            "phase": "Discovery & spec",
            "durationWeeks": 1,
            "whatHappens": ["Confirm scope", "Define roles", "Finalize success metrics"],
        },
        {
            "phase": "Build MVP",
            "durationWeeks": 3,
            "whatHappens": ["Implement features", "Admin dashboard", "APIs + data model"],
        },
        {
            "phase": "QA & launch",
            "durationWeeks": 1,
            "whatHappens": ["Testing", "Bug fixes", "Deploy + handoff"],
        },
    ],
    "milestones": [
        {
            "name": "Scope Approved",
            "description": "Stakeholder approves requirements, milestones, and acceptance criteria.",
            "dueWeek": 1,
            "deliverables": ["Approved scope", "Milestone plan", "Acceptance criteria"],
        },
        {
            "name": "Feature Complete",
            "description": "MVP features implemented and ready for QA in staging.",
            "dueWeek": 4,
            "deliverables": ["Staging build", "Release notes"],
        },
        {
            "name": "Launch",
            "description": "Production deploy and handoff completed.",
            "dueWeek": 5,
            "deliverables": ["Production deployment", "Handoff docs"],
        },
    ],
    "assumptions": [
        "Client provides brand assets/content or approves placeholders.",
        "A single primary stakeholder approves scope and deliverables.",
        "Third-party services are available and configured as needed.",
    ],
    "dependencies": [
        "Access to required systems/third-party services (if applicable).",
        "Timely stakeholder feedback during weekly check-ins.",
        "Any existing data samples provided early for validation (if applicable).",
    ],
    "risks": [
        {
            "risk": "Ambiguous requirements or shifting priorities",
            "impact": "High",
            "mitigation": "Weekly checkpoints, change log, and a strict MVP boundary.",
        },
        {
            "risk": "Timeline pressure due to scope creep",
            "impact": "Medium",
            "mitigation": "Prioritize MVP must-haves; move extras to Phase 2.",
        },
        {
            "risk": "Data migration complexity (if importing legacy data)",
            "impact": "Medium",
            "mitigation": "Validate sample data early and define import rules/edge cases.",
        },
    ],
    "pricingEstimate": {
        "lowUSD": 5000,
        "highUSD": 15000,
        "pricingDrivers": [
            "Project complexity",
            "Feature count",
            "Deadline",
            "Integrations/compliance",
        ],
        "paymentScheduleSuggestion": "40% deposit, 30% mid-milestone, 30% upon delivery.",
    },
    "techStack": {
        "frontend": ["React", "TypeScript", "Tailwind"],
        "backend": ["FastAPI", "Python"],
        "database": ["PostgreSQL", "SQLAlchemy"],
        "auth": ["Managed auth provider"],
        "hosting": ["Container platform"],
        "integrations": ["Email provider (Resend/SendGrid)", "Stripe (if needed)"],
    },
    "deliverables": [
        "Working MVP web application",
        "Admin dashboard",
        "Production deployment",
        "Basic documentation (setup + handoff)",
    ],
    "acceptanceCriteria": [
        "Primary MVP workflow works end-to-end in production",
        "No P1 bugs at launch; critical issues resolved",
        "Admin dashboard supports required CRUD actions",
        "Docs delivered and handoff completed",
    ],
    "nextSteps": [
        "Confirm MVP feature list and remove nice-to-haves",
        "Agree on milestones and communication cadence",
        "Collect brand assets and any data samples",
    ],
}
