"""
Business Record Data Structures

Typed, already-validated records consumed by the section renderers, one per
document kind. Records arrive hydrated from the surrounding application; the
from_dict() constructors only tolerate the storage quirks that application is
known to produce (missing optional keys, JSON-encoded list columns).
"""

import json
from dataclasses import dataclass, field, fields
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional


class DocumentKind(str, Enum):
    """Document kinds known to the default registry."""

    PROPOSAL = "proposal"
    TECHNICAL_REQUEST = "technical_request"
    CASE_STUDY = "case_study"
    RESUME = "resume"
    LOG_REPORT = "log_report"


def _as_list(value: Any) -> list:
    """Coerce a stored list column (list, JSON string, None) into a list."""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            return []
        return decoded if isinstance(decoded, list) else []
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _as_int(value: Any, default: int = 0) -> int:
    """Coerce a nullable numeric column into an int."""
    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _from_known_keys(cls, data: Optional[Dict[str, Any]]):
    """
    Instantiate a flat dataclass from the keys of data that it declares.

    display_order is a nullable column; it is always an int on the record so
    renderers can sort on it.
    """
    data = data or {}
    known = {f.name for f in fields(cls)}
    values = {key: value for key, value in data.items() if key in known}
    if "display_order" in known:
        values["display_order"] = _as_int(values.get("display_order"))
    return cls(**values)


def _nested(cls, items: Any) -> list:
    return [item if isinstance(item, cls) else cls.from_dict(item) for item in _as_list(items)]


# --- Proposal ---


@dataclass(frozen=True)
class ProposalSection:
    """Template-driven free-text section attached to a proposal."""

    title: str = ""
    content: Optional[str] = None
    display_order: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProposalSection":
        return _from_known_keys(cls, data)


@dataclass(frozen=True)
class ServiceOffering:
    name: str = ""
    category: Optional[str] = None
    description: Optional[str] = None
    custom_description: Optional[str] = None
    display_order: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceOffering":
        return _from_known_keys(cls, data)


@dataclass(frozen=True)
class ProposalResume:
    """Key personnel summary card on a proposal."""

    employee_name: str = ""
    job_title: Optional[str] = None
    role_on_project: Optional[str] = None
    years_experience: Optional[int] = None
    summary: Optional[str] = None
    display_order: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProposalResume":
        return _from_known_keys(cls, data)


@dataclass(frozen=True)
class CustomerInfo:
    name: Optional[str] = None
    facility: Optional[str] = None
    owner: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CustomerInfo":
        return _from_known_keys(cls, data)


@dataclass(frozen=True)
class CompanyInfo:
    """The tenant company issuing the document."""

    company_name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CompanyInfo":
        return _from_known_keys(cls, data)


@dataclass(frozen=True)
class AuthorInfo:
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    title: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AuthorInfo":
        return _from_known_keys(cls, data)


# --- Case study ---


@dataclass(frozen=True)
class CaseStudyImage:
    """
    Photo attached to a published case study.

    image_url holds a fully qualified URL when the photo was uploaded to the
    object store with a public URL; file_path holds the stored key or local
    path otherwise.
    """

    image_url: Optional[str] = None
    file_path: Optional[str] = None
    caption: Optional[str] = None
    is_hero_image: bool = False
    display_order: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CaseStudyImage":
        return _from_known_keys(cls, data)

    @property
    def stored_reference(self) -> str:
        return self.image_url or self.file_path or ""


@dataclass(frozen=True)
class CaseStudyOptions:
    """Presentation options from the case study template."""

    layout_style: str = "standard"
    show_images: bool = True
    show_metrics: bool = True
    show_logo: bool = True
    accent_color: str = "#c0392b"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CaseStudyOptions":
        return _from_known_keys(cls, data)


@dataclass(frozen=True)
class CaseStudyRecord:
    title: str
    id: Optional[str] = None
    subtitle: Optional[str] = None
    customer_name: Optional[str] = None
    project_name: Optional[str] = None
    market: Optional[str] = None
    project_value: Optional[float] = None
    project_square_footage: Optional[float] = None
    project_start_date: Optional[str] = None
    project_end_date: Optional[str] = None
    construction_type: Optional[str] = None
    project_size: Optional[str] = None
    executive_summary: Optional[str] = None
    challenge: Optional[str] = None
    solution: Optional[str] = None
    results: Optional[str] = None
    cost_savings: Optional[float] = None
    timeline_improvement_days: Optional[int] = None
    quality_score: Optional[float] = None
    services_provided: List[str] = field(default_factory=list)
    images: List[CaseStudyImage] = field(default_factory=list)
    customer_logo_key: Optional[str] = None
    options: CaseStudyOptions = field(default_factory=CaseStudyOptions)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CaseStudyRecord":
        data = dict(data)
        data["services_provided"] = [str(s) for s in _as_list(data.get("services_provided"))]
        data["images"] = _nested(CaseStudyImage, data.get("images"))
        if not isinstance(data.get("options"), CaseStudyOptions):
            data["options"] = CaseStudyOptions.from_dict(data.get("options"))
        return _from_known_keys(cls, data)


# --- Proposal (continued; embeds case studies) ---


@dataclass(frozen=True)
class ProposalRecord:
    proposal_number: str
    title: str
    id: Optional[str] = None
    created_at: Optional[str] = None
    valid_until: Optional[str] = None
    version_number: int = 1
    customer_name: Optional[str] = None
    customer_owner: Optional[str] = None
    customer_address: Optional[str] = None
    project_name: Optional[str] = None
    project_location: Optional[str] = None
    total_amount: Optional[float] = None
    payment_terms: Optional[str] = None
    executive_summary: Optional[str] = None
    company_overview: Optional[str] = None
    scope_of_work: Optional[str] = None
    approach_and_methodology: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    created_by_name: Optional[str] = None
    sections: List[ProposalSection] = field(default_factory=list)
    service_offerings: List[ServiceOffering] = field(default_factory=list)
    resumes: List[ProposalResume] = field(default_factory=list)
    case_studies: List[CaseStudyRecord] = field(default_factory=list)
    customer: Optional[CustomerInfo] = None
    company: Optional[CompanyInfo] = None
    author: Optional[AuthorInfo] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProposalRecord":
        data = dict(data)
        data["sections"] = _nested(ProposalSection, data.get("sections"))
        data["service_offerings"] = _nested(ServiceOffering, data.get("service_offerings"))
        data["resumes"] = _nested(ProposalResume, data.get("resumes"))
        data["case_studies"] = _nested(CaseStudyRecord, data.get("case_studies"))
        for key, cls_ in (("customer", CustomerInfo), ("company", CompanyInfo), ("author", AuthorInfo)):
            if data.get(key) is not None and not isinstance(data[key], cls_):
                data[key] = cls_.from_dict(data[key])
        return _from_known_keys(cls, data)


# --- Resume ---


@dataclass(frozen=True)
class Certification:
    name: str = ""
    issuer: Optional[str] = None
    year: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Certification":
        return _from_known_keys(cls, data)


@dataclass(frozen=True)
class Reference:
    name: str = ""
    title: Optional[str] = None
    company: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reference":
        return _from_known_keys(cls, data)


@dataclass(frozen=True)
class LanguageSkill:
    language: str = ""
    proficiency: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LanguageSkill":
        return _from_known_keys(cls, data)


@dataclass(frozen=True)
class ResumeProject:
    project_name: str = ""
    customer_name: Optional[str] = None
    location: Optional[str] = None
    square_footage: Optional[float] = None
    project_value: Optional[float] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResumeProject":
        return _from_known_keys(cls, data)


@dataclass(frozen=True)
class ResumeRecord:
    employee_name: str
    employee_id: Optional[str] = None
    job_title: Optional[str] = None
    years_experience: Optional[int] = None
    summary: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    education: Optional[str] = None
    photo_key: Optional[str] = None
    certifications: List[Certification] = field(default_factory=list)
    skills: List[str] = field(default_factory=list)
    languages: List[LanguageSkill] = field(default_factory=list)
    hobbies: List[str] = field(default_factory=list)
    references: List[Reference] = field(default_factory=list)
    projects: List[ResumeProject] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResumeRecord":
        data = dict(data)
        data["certifications"] = _nested(Certification, data.get("certifications"))
        data["skills"] = [str(s) for s in _as_list(data.get("skills"))]
        data["languages"] = _nested(LanguageSkill, data.get("languages"))
        data["hobbies"] = [str(h) for h in _as_list(data.get("hobbies"))]
        data["references"] = _nested(Reference, data.get("references"))
        data["projects"] = _nested(ResumeProject, data.get("projects"))
        return _from_known_keys(cls, data)


# --- Technical request (RFI) ---


@dataclass(frozen=True)
class TechnicalRequestRecord:
    number: str
    subject: str = ""
    question: Optional[str] = None
    status: str = "open"
    project_name: Optional[str] = None
    project_number: Optional[str] = None
    created_at: Optional[str] = None
    due_date: Optional[str] = None
    priority: str = "normal"
    created_by_name: Optional[str] = None
    recipient_company_name: Optional[str] = None
    recipient_contact_name: Optional[str] = None
    recipient_contact_phone: Optional[str] = None
    recipient_contact_email: Optional[str] = None
    spec_section: Optional[str] = None
    drawing_sheet: Optional[str] = None
    detail_grid_ref: Optional[str] = None
    discipline: Optional[str] = None
    discipline_other: Optional[str] = None
    suggested_solution: Optional[str] = None
    schedule_impact: Optional[bool] = None
    schedule_impact_days: Optional[int] = None
    cost_impact: Optional[bool] = None
    cost_impact_amount: Optional[float] = None
    affects_other_trades: Optional[bool] = None
    affected_trades: Optional[str] = None
    has_sketches: bool = False
    has_photos: bool = False
    has_spec_pages: bool = False
    has_shop_drawings: bool = False
    attachment_notes: Optional[str] = None
    response: Optional[str] = None
    responded_at: Optional[str] = None
    responded_by_name: Optional[str] = None
    response_classification: Optional[str] = None
    response_reference: Optional[str] = None
    issuer_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TechnicalRequestRecord":
        data = dict(data)
        data["number"] = str(data.get("number", ""))
        return _from_known_keys(cls, data)


# --- Operational log report (RFI log) ---


@dataclass(frozen=True)
class LogEntry:
    number: str = ""
    subject: str = ""
    status: str = "open"
    recipient_company_name: Optional[str] = None
    recipient_contact_name: Optional[str] = None
    assigned_to_name: Optional[str] = None
    created_at: Optional[str] = None
    due_date: Optional[str] = None
    responded_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        data = dict(data)
        data["number"] = str(data.get("number", ""))
        return _from_known_keys(cls, data)


@dataclass(frozen=True)
class LogReportRecord:
    project_name: str
    entries: List[LogEntry] = field(default_factory=list)
    as_of: Optional[date] = None
    issuer_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogReportRecord":
        data = dict(data)
        data["entries"] = _nested(LogEntry, data.get("entries"))
        return _from_known_keys(cls, data)


RECORD_TYPES = {
    DocumentKind.PROPOSAL: ProposalRecord,
    DocumentKind.TECHNICAL_REQUEST: TechnicalRequestRecord,
    DocumentKind.CASE_STUDY: CaseStudyRecord,
    DocumentKind.RESUME: ResumeRecord,
    DocumentKind.LOG_REPORT: LogReportRecord,
}


def record_from_dict(kind: DocumentKind, data: Dict[str, Any]):
    """Build the typed record for a kind from a plain mapping (fixtures, previews)."""
    return RECORD_TYPES[DocumentKind(kind)].from_dict(data)
