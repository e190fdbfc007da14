"""Intake schema - the client questionnaire that seeds scope generation."""

from enum import StrEnum
from typing import Annotated, Any

from pydantic import AfterValidator, AnyUrl, EmailStr, Field, TypeAdapter, ValidationError, field_validator

from scopegen.models.common import CamelModel, ValidationIssue, issues_from_error


class Industry(StrEnum):
    REAL_ESTATE = "Real Estate"
    HEALTHCARE = "Healthcare"
    ECOMMERCE = "eCommerce"
    EDUCATION = "Education"
    FINANCE = "Finance"
    LOGISTICS = "Logistics"
    NONPROFIT = "Nonprofit"
    OTHER = "Other"


class ProjectType(StrEnum):
    MARKETING_WEBSITE = "Marketing website"
    WEB_APP = "Web app (SaaS)"
    MOBILE_APP = "Mobile app"
    INTERNAL_TOOL = "Internal tool"
    API_ONLY = "API only"
    NOT_SURE = "Not sure"


class PrimaryGoal(StrEnum):
    GET_LEADS = "Get leads"
    SELL_PRODUCTS = "Sell products"
    AUTOMATE_OPERATIONS = "Automate operations"
    REDUCE_SUPPORT_LOAD = "Reduce support load"
    IMPROVE_REPORTING = "Improve reporting"
    OTHER = "Other"


class DesignPreference(StrEnum):
    CLEAN_MODERN = "Clean & modern"
    BOLD_PLAYFUL = "Bold & playful"
    CORPORATE = "Corporate"
    MINIMAL = "Minimal"
    MATCH_EXISTING = "Match my existing site"


class ScreensEstimate(StrEnum):
    FEW = "1–3"
    SOME = "4–7"
    MANY = "8–15"
    LOTS = "16+"


class Deadline(StrEnum):
    ASAP = "ASAP (2–4 weeks)"
    ONE_TO_TWO_MONTHS = "1–2 months"
    THREE_TO_FOUR_MONTHS = "3–4 months"
    FLEXIBLE = "Flexible"


class BudgetRange(StrEnum):
    UNDER_2K = "<$2k"
    FROM_2K_TO_5K = "$2k–$5k"
    FROM_5K_TO_10K = "$5k–$10k"
    FROM_10K_TO_25K = "$10k–$25k"
    OVER_25K = "$25k+"


class ProposalStyle(StrEnum):
    FRIENDLY = "Friendly"
    FORMAL = "Formal"
    AGENCY = "Agency"
    SHORT_AND_PUNCHY = "Short & punchy"


class ExportFormat(StrEnum):
    PDF = "PDF"
    SHARE_LINK = "Share link"
    BOTH = "Both"


_url_adapter = TypeAdapter(AnyUrl)


def _check_url(value: str) -> str:
    # Validate only; keep the caller's spelling rather than pydantic's normalized form.
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        raise ValueError("not a well-formed URL") from None
    return value


Label50 = Annotated[str, Field(min_length=2, max_length=50)]
Label80 = Annotated[str, Field(min_length=2, max_length=80)]
ReferenceLink = Annotated[str, AfterValidator(_check_url)]


class OutputPrefs(CamelModel):
    """How the user wants the proposal presented."""

    proposal_style: ProposalStyle = ProposalStyle.FRIENDLY
    include_pricing: bool = True
    include_tech_stack: bool = True
    include_timeline: bool = True
    export_format: ExportFormat = ExportFormat.PDF


class Intake(CamelModel):
    """Canonical intake record.

    Every enumerated field must be one of its option set. List fields are
    always present (empty when not supplied) and ``output_prefs`` defaults
    fully when absent.
    """

    project_name: str = Field(..., min_length=2, max_length=120)
    client_name: str | None = Field(default=None, max_length=120)
    client_email: EmailStr | None = None

    industry: Industry
    project_type: ProjectType
    primary_goal: PrimaryGoal

    description: str | None = Field(default=None, min_length=10, max_length=4000)

    user_types: list[Label50] = Field(default_factory=list)
    roles: list[Label50] = Field(default_factory=list)
    features: list[Label80] = Field(default_factory=list)

    must_haves: str | None = Field(default=None, max_length=3000)
    nice_to_haves: str | None = Field(default=None, max_length=3000)

    design_preference: DesignPreference | None = None
    reference_links: list[ReferenceLink] = Field(default_factory=list)
    screens_estimate: ScreensEstimate | None = None

    deadline: Deadline
    budget_range: BudgetRange

    risk_flags: list[Label80] = Field(default_factory=list)

    output_prefs: OutputPrefs = Field(default_factory=OutputPrefs)

    @field_validator(
        "user_types", "roles", "features", "reference_links", "risk_flags", mode="before"
    )
    @classmethod
    def null_list_to_empty(cls, v: Any) -> Any:
        # Stored records may carry explicit nulls for lists that were never filled in.
        return [] if v is None else v

    @field_validator("output_prefs", mode="before")
    @classmethod
    def null_prefs_to_defaults(cls, v: Any) -> Any:
        return {} if v is None else v


class IntakeValidationError(ValueError):
    """Raised when a raw intake record does not satisfy the intake schema."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        fields = ", ".join(issue.path for issue in issues)
        super().__init__(f"Invalid intake ({len(issues)} issue(s)): {fields}")


def validate_intake(raw: Any) -> Intake:
    """Validate and normalize a raw intake record.

    Pure: the same input always yields the same Intake or the same issue list.

    Raises:
        IntakeValidationError: listing every offending field.
    """
    try:
        return Intake.model_validate(raw)
    except ValidationError as exc:
        raise IntakeValidationError(issues_from_error(exc)) from exc
