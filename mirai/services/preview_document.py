"""The markdown shown in the preview: derived from the form or typed by the user."""
from dataclasses import dataclass
from enum import Enum
from typing import Union

from mirai.schemas.resume import ResumeFormState
from mirai.services.resume_markdown import project_form_state


class PreviewMode(str, Enum):
    DERIVED = "derived"
    OVERRIDDEN = "overridden"


@dataclass(frozen=True)
class Derived:
    state: ResumeFormState
    display_name: str = ""

    mode = PreviewMode.DERIVED

    @property
    def markdown(self) -> str:
        return project_form_state(self.state, self.display_name)


@dataclass(frozen=True)
class Overridden:
    text: str

    mode = PreviewMode.OVERRIDDEN

    @property
    def markdown(self) -> str:
        return self.text


PreviewDocument = Union[Derived, Overridden]


def recompute(doc: PreviewDocument, state: ResumeFormState, display_name: str = "") -> PreviewDocument:
    """Apply a form change. Overridden text is never replaced implicitly."""
    if isinstance(doc, Overridden):
        return doc
    return Derived(state, display_name)


def override(text: str) -> Overridden:
    return Overridden(text)


def revert_to_form(state: ResumeFormState, display_name: str = "") -> Derived:
    """Drop the user's text and go back to projecting the form."""
    return Derived(state, display_name)
