"""Projection of the builder form into the resume markdown document.

Everything here is pure: the same form state and display name always give
byte-identical markdown. The markdown is meant for display only and is never
parsed back into form fields.
"""
from typing import List, Optional

from mirai.schemas.resume import ContactInfo, Entry, ResumeFormState

# (field, formatter) in output order
CONTACT_FORMATS = (
    ("email", "📧 {}"),
    ("mobile", "📱 {}"),
    ("linkedin", "💼 [LinkedIn]({})"),
    ("twitter", "🐦 [Twitter]({})"),
)

SUMMARY_HEADING = "Professional Summary"
SKILLS_HEADING = "Skills"
EXPERIENCE_HEADING = "Work Experience"
EDUCATION_HEADING = "Education"
PROJECTS_HEADING = "Projects"


def contact_markdown(contact: ContactInfo, display_name: str) -> str:
    """Centered name + contact line, or "" when no contact field is set."""
    parts = []
    for field, fmt in CONTACT_FORMATS:
        value = getattr(contact, field)
        if value:
            parts.append(fmt.format(value))

    if not parts:
        return ""
    return (
        f'## <div align="center">{display_name}</div>\n\n'
        f'<div align="center">\n\n{" | ".join(parts)}\n\n</div>'
    )


def _date_range(entry: Entry) -> str:
    end = "Present" if entry.current else (entry.endDate or "")
    return f"{entry.startDate} - {end}"


def entries_to_markdown(entries: Optional[List[Entry]], heading: str) -> str:
    if not entries:
        return ""
    body = "\n\n".join(
        f"### {e.title} @ {e.organization}\n{_date_range(e)}\n\n{e.description}"
        for e in entries
    )
    return f"## {heading}\n\n{body}"


def project_form_state(state: ResumeFormState, display_name: str = "") -> str:
    sections = [
        contact_markdown(state.contactInfo, display_name),
        state.summary and f"## {SUMMARY_HEADING}\n\n{state.summary}",
        state.skills and f"## {SKILLS_HEADING}\n\n{state.skills}",
        entries_to_markdown(state.experience, EXPERIENCE_HEADING),
        entries_to_markdown(state.education, EDUCATION_HEADING),
        entries_to_markdown(state.projects, PROJECTS_HEADING),
    ]
    return "\n\n".join(s for s in sections if s)
