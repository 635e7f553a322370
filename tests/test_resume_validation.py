"""
Tests for the builder form submission rules
"""

from mirai.schemas.resume import ContactInfo, Entry, ResumeFormState, collect_field_errors


def _valid_state(**overrides):
    data = dict(
        contactInfo=ContactInfo(email="jane@example.com"),
        summary="Engineer",
        skills="Python",
        experience=[
            Entry(
                title="Engineer",
                organization="Acme",
                startDate="2020",
                endDate="2022",
                description="Built things",
            )
        ],
    )
    data.update(overrides)
    return ResumeFormState(**data)


def test_valid_state_has_no_errors():
    assert collect_field_errors(_valid_state()) == {}


def test_empty_form_reports_required_fields():
    errors = collect_field_errors(ResumeFormState())

    assert errors["contactInfo.email"] == "Invalid email address"
    assert errors["summary"] == "Professional summary is required"
    assert errors["skills"] == "Skills are required"


def test_invalid_email():
    errors = collect_field_errors(_valid_state(contactInfo=ContactInfo(email="not-an-email")))
    assert errors == {"contactInfo.email": "Invalid email address"}


def test_end_date_required_unless_current():
    missing_end = Entry(title="Lead", organization="Acme", startDate="2023", description="Leading")
    current = Entry(title="Lead", organization="Acme", startDate="2023", description="Leading", current=True)

    errors = collect_field_errors(_valid_state(experience=[missing_end]))
    assert errors == {
        "experience.0.endDate": "End date is required unless this is your current position"
    }
    assert collect_field_errors(_valid_state(experience=[current])) == {}


def test_entry_field_paths():
    errors = collect_field_errors(_valid_state(projects=[Entry(current=True)]))

    assert errors["projects.0.title"] == "Title is required"
    assert errors["projects.0.organization"] == "Organization is required"
    assert errors["projects.0.startDate"] == "Start date is required"
    assert errors["projects.0.description"] == "Description is required"
    assert "projects.0.endDate" not in errors
