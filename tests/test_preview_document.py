from mirai.schemas.resume import ResumeFormState
from mirai.services import preview_document
from mirai.services.preview_document import Derived, Overridden, PreviewMode


def test_derived_follows_the_form():
    doc = Derived(ResumeFormState(summary="First"))
    doc = preview_document.recompute(doc, ResumeFormState(summary="Second"))

    assert doc.mode is PreviewMode.DERIVED
    assert doc.markdown == "## Professional Summary\n\nSecond"


def test_overridden_text_survives_form_changes():
    doc = preview_document.override("# My own resume")
    doc = preview_document.recompute(doc, ResumeFormState(summary="Ignored"))

    assert isinstance(doc, Overridden)
    assert doc.mode is PreviewMode.OVERRIDDEN
    assert doc.markdown == "# My own resume"


def test_revert_goes_back_to_projection():
    state = ResumeFormState(skills="Python")
    doc = preview_document.revert_to_form(state)

    assert isinstance(doc, Derived)
    assert doc.markdown == "## Skills\n\nPython"
