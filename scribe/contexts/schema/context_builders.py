"""
Context Builders

Named pure functions that render AI-prompt fragments from schema-specific data.

Two kinds, selected by the schema:
- item builders take an item's data mapping (field id -> value)
- section builders take a whole ResumeSection and summarise its items

Both also receive the whole document, which most builders ignore. Builder ids are
a closed enumeration; a schema that names an id with no registered builder gets an
empty string from SchemaRegistry.build_context.
"""

from enum import Enum
from typing import Any, Callable, Dict

# (item data or section, whole document) -> prompt fragment
ContextBuilder = Callable[[Any, Any], str]


class ContextBuilderId(str, Enum):
    # summary
    SUMMARY_CONTENT = "summary-content"
    SUMMARY_SECTION = "summary-section"
    # experience
    JOB_TITLE = "job-title"
    COMPANY_NAME = "company-name"
    JOB_DESCRIPTION = "job-description"
    EXPERIENCE_ITEM = "experience-item"
    EXPERIENCE_SUMMARY = "experience-summary"
    # education
    DEGREE_NAME = "degree-name"
    INSTITUTION_NAME = "institution-name"
    EDUCATION_DETAILS = "education-details"
    EDUCATION_ITEM = "education-item"
    EDUCATION_SUMMARY = "education-summary"
    # skills
    SKILL_NAME = "skill-name"
    SKILL_ITEM = "skill-item"
    SKILLS_SUMMARY = "skills-summary"
    # custom text
    CUSTOM_CONTENT = "custom-content"
    CUSTOM_SUMMARY = "custom-summary"
    # advanced skills
    SKILL_CATEGORY = "skill-category"
    SKILL_LIST = "skill-list"
    SKILL_PROFICIENCY = "skill-proficiency"
    SKILL_EXPERIENCE = "skill-experience"
    ADVANCED_SKILLS_ITEM = "advanced-skills-item"
    ADVANCED_SKILLS_SUMMARY = "advanced-skills-summary"
    # projects
    PROJECT_NAME = "project-name"
    PROJECT_DESCRIPTION = "project-description"
    PROJECT_TECHNOLOGIES = "project-technologies"
    PROJECTS_ITEM = "projects-item"
    PROJECTS_SUMMARY = "projects-summary"
    # certifications
    CERTIFICATION_NAME = "certification-name"
    CERTIFICATION_ISSUER = "certification-issuer"
    CERTIFICATION_DESCRIPTION = "certification-description"
    CERTIFICATIONS_ITEM = "certifications-item"
    CERTIFICATIONS_SUMMARY = "certifications-summary"
    # volunteer
    VOLUNTEER_POSITION = "volunteer-position"
    VOLUNTEER_ORG = "volunteer-org"
    VOLUNTEER_IMPACT = "volunteer-impact"
    VOLUNTEER_ITEM = "volunteer-item"
    VOLUNTEER_SUMMARY = "volunteer-summary"
    # cover letter
    COVER_LETTER_CONTENT = "cover-letter-content"
    COVER_LETTER_SECTION = "cover-letter-section"


def builder_key(builder_id) -> str:
    """Normalise a ContextBuilderId or raw string to the lookup key."""
    if isinstance(builder_id, Enum):
        return builder_id.value
    return str(builder_id)


# --- Helpers ---


def _get(data: Any, key: str, default: str = "") -> Any:
    if isinstance(data, dict):
        value = data.get(key)
        return value if value not in (None, "") else default
    return default


def _join(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return "" if value is None else str(value)


def _item_data(items) -> list:
    """Data mappings of a section's items (accepts SectionItem or plain dicts)."""
    return [getattr(item, "data", item) or {} for item in items or []]


def _first_content(section) -> str:
    items = _item_data(getattr(section, "items", None))
    return _get(items[0], "content") if items else ""


def _text_content(data, _document=None) -> str:
    if not data:
        return ""
    if isinstance(data, str):
        return data
    content = data.get("content") if isinstance(data, dict) else None
    return content if isinstance(content, str) else ""


# --- Experience ---


def _experience_item(data, _document=None) -> str:
    title = _get(data, "jobTitle", "Untitled Job")
    company = _get(data, "company", "Unnamed Company")
    return f"- {title} at {company}: {_get(data, 'description')}"


def _experience_summary(section, document=None) -> str:
    lines = [_experience_item(data, document) for data in _item_data(section.items)]
    return "## Experience\n" + "\n".join(lines)


def _job_description(data, _document=None) -> str:
    title = _get(data, "jobTitle", "Untitled Job")
    company = _get(data, "company", "Unnamed Company")
    return f"Job: {title} at {company}\nDescription: {_get(data, 'description')}"


# --- Education ---


def _education_item(data, _document=None) -> str:
    degree = _get(data, "degree", "Untitled Degree")
    institution = _get(data, "institution", "Unnamed Institution")
    return f"- {degree} from {institution}"


def _education_summary(section, document=None) -> str:
    lines = [_education_item(data, document) for data in _item_data(section.items)]
    return "## Education\n" + "\n".join(lines)


def _education_details(data, _document=None) -> str:
    degree = _get(data, "degree", "Untitled Degree")
    institution = _get(data, "institution", "Unnamed Institution")
    return f"Education: {degree} from {institution}\nDetails: {_get(data, 'details')}"


# --- Skills ---


def _skills_summary(section, _document=None) -> str:
    names = [_get(data, "name", "Unnamed Skill") for data in _item_data(section.items)]
    return "## Skills\n" + ", ".join(names)


# --- Advanced skills ---


def _advanced_skills_item(data, _document=None) -> str:
    proficiency = _get(data, "proficiency")
    suffix = f" ({proficiency})" if proficiency else ""
    return f"{_get(data, 'category')}: {_join(_get(data, 'skills'))}{suffix}"


def _advanced_skills_summary(section, _document=None) -> str:
    categories = [
        f"{_get(data, 'category')}: {_join(_get(data, 'skills'))}" for data in _item_data(section.items)
    ]
    return "## Advanced Skills\n" + "; ".join(categories)


# --- Projects ---


def _project_description(data, _document=None) -> str:
    tech = _join(_get(data, "technologies"))
    return f"Project: {_get(data, 'name')}, Technologies: {tech}\nDescription: {_get(data, 'description')}"


def _projects_summary(section, _document=None) -> str:
    projects = [f"{_get(data, 'name')}: {_get(data, 'description')}" for data in _item_data(section.items)]
    return "## Projects\n" + "; ".join(projects)


# --- Certifications ---


def _certifications_item(data, _document=None) -> str:
    date = _get(data, "date")
    suffix = f" ({date})" if date else ""
    return f"{_get(data, 'name')} from {_get(data, 'issuer')}{suffix}"


def _certifications_summary(section, _document=None) -> str:
    certs = [f"{_get(data, 'name')} ({_get(data, 'issuer')})" for data in _item_data(section.items)]
    return "## Certifications\n" + ", ".join(certs)


# --- Volunteer ---


def _volunteer_item(data, _document=None) -> str:
    position = _get(data, "position", "Untitled Position")
    organization = _get(data, "organization", "Unnamed Organization")
    return f"- {position} at {organization}: {_get(data, 'impact')}"


def _volunteer_summary(section, document=None) -> str:
    lines = [_volunteer_item(data, document) for data in _item_data(section.items)]
    return "## Volunteer Experience\n" + "\n".join(lines)


def _volunteer_impact(data, _document=None) -> str:
    position = _get(data, "position", "Untitled Position")
    organization = _get(data, "organization", "Unnamed Organization")
    return f"Volunteer: {position} at {organization}\nImpact: {_get(data, 'impact')}"


B = ContextBuilderId

DEFAULT_CONTEXT_BUILDERS: Dict[ContextBuilderId, ContextBuilder] = {
    B.SUMMARY_CONTENT: _text_content,
    B.SUMMARY_SECTION: lambda section, _doc: f"## Summary\n{_first_content(section)}",
    B.JOB_TITLE: lambda data, _doc: f"Job Title: {_get(data, 'jobTitle', 'Untitled Job')}",
    B.COMPANY_NAME: lambda data, _doc: f"Company: {_get(data, 'company', 'Unnamed Company')}",
    B.JOB_DESCRIPTION: _job_description,
    B.EXPERIENCE_ITEM: _experience_item,
    B.EXPERIENCE_SUMMARY: _experience_summary,
    B.DEGREE_NAME: lambda data, _doc: f"Degree: {_get(data, 'degree', 'Untitled Degree')}",
    B.INSTITUTION_NAME: lambda data, _doc: f"Institution: {_get(data, 'institution', 'Unnamed Institution')}",
    B.EDUCATION_DETAILS: _education_details,
    B.EDUCATION_ITEM: _education_item,
    B.EDUCATION_SUMMARY: _education_summary,
    B.SKILL_NAME: lambda data, _doc: f"Skill: {_get(data, 'name', 'Unnamed Skill')}",
    B.SKILL_ITEM: lambda data, _doc: _get(data, "name", "Unnamed Skill"),
    B.SKILLS_SUMMARY: _skills_summary,
    B.CUSTOM_CONTENT: _text_content,
    B.CUSTOM_SUMMARY: lambda section, _doc: (
        f"## {getattr(section, 'title', '') or 'Custom Section'}\n{_first_content(section)}"
    ),
    B.SKILL_CATEGORY: lambda data, _doc: (
        f"Skill Category: {_get(data, 'category')}, Skills: {_join(_get(data, 'skills'))}"
    ),
    B.SKILL_LIST: lambda data, _doc: _join(_get(data, "skills")),
    B.SKILL_PROFICIENCY: lambda data, _doc: f"Proficiency: {_get(data, 'proficiency', 'Not specified')}",
    B.SKILL_EXPERIENCE: lambda data, _doc: (
        f"Years of Experience: {_get(data, 'yearsOfExperience', 'Not specified')}"
    ),
    B.ADVANCED_SKILLS_ITEM: _advanced_skills_item,
    B.ADVANCED_SKILLS_SUMMARY: _advanced_skills_summary,
    B.PROJECT_NAME: lambda data, _doc: f"Project: {_get(data, 'name', 'Untitled Project')}",
    B.PROJECT_DESCRIPTION: _project_description,
    B.PROJECT_TECHNOLOGIES: lambda data, _doc: _join(_get(data, "technologies")),
    B.PROJECTS_ITEM: lambda data, _doc: (
        f"Project: {_get(data, 'name')}, Tech: {_join(_get(data, 'technologies'))}"
    ),
    B.PROJECTS_SUMMARY: _projects_summary,
    B.CERTIFICATION_NAME: lambda data, _doc: (
        f"Certification: {_get(data, 'name', 'Unnamed Certification')}"
    ),
    B.CERTIFICATION_ISSUER: lambda data, _doc: f"Issuer: {_get(data, 'issuer', 'Unknown Issuer')}",
    B.CERTIFICATION_DESCRIPTION: lambda data, _doc: (
        f"Certification: {_get(data, 'name')} from {_get(data, 'issuer')}\n"
        f"Description: {_get(data, 'description')}"
    ),
    B.CERTIFICATIONS_ITEM: _certifications_item,
    B.CERTIFICATIONS_SUMMARY: _certifications_summary,
    B.VOLUNTEER_POSITION: lambda data, _doc: f"Position: {_get(data, 'position', 'Untitled Position')}",
    B.VOLUNTEER_ORG: lambda data, _doc: (
        f"Organization: {_get(data, 'organization', 'Unnamed Organization')}"
    ),
    B.VOLUNTEER_IMPACT: _volunteer_impact,
    B.VOLUNTEER_ITEM: _volunteer_item,
    B.VOLUNTEER_SUMMARY: _volunteer_summary,
    B.COVER_LETTER_CONTENT: _text_content,
    B.COVER_LETTER_SECTION: lambda section, _doc: f"## Cover Letter\n{_first_content(section)}",
}
