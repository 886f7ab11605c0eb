"""Notes draft generation from structured form state."""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import TYPE_CHECKING

from intake_bridge.constants import DEFAULT_BRAND_NAME
from intake_bridge.exceptions import DraftGenerationError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from intake_bridge.adapters.base import GenerationAdapter
    from intake_bridge.core.models import Company
    from intake_bridge.core.types import SurveyForm

logger = logging.getLogger(__name__)

_NA = "N/A"

_PROMPT_TEMPLATE = """\
You are an assistant for a property manager filling out a service request form for {company}.
Based on the following request details, write a brief, professional, and clear message for the "Additional Notes" section.
Summarize the key information and needs. Be concise and direct.

Request Details:
{context}

Draft a note that can be sent as is. For example: "We are looking to get a quote for [services] for [unit info]. The timeline is [timeline]. Please let us know availability."
"""


def build_context(
    form: SurveyForm,
    *,
    directory: Sequence[Company] = (),
    company_name: str = "",
) -> str:
    """Render the request details block, one line per field in a fixed order."""
    prop = next(
        (
            p
            for company in directory
            for p in company.properties
            if p.id == form.property_id
        ),
        None,
    )
    contact = f"{form.first_name} {form.last_name}".strip()
    lines = [
        ("Company", company_name or _NA),
        ("Property", prop.name if prop else _NA),
        ("Contact", f"{contact} ({form.title or _NA})"),
        ("Services needed", ", ".join(form.services) or _NA),
        ("Unit/Area Info", form.unit_info or _NA),
        ("Timeline", form.timeline or _NA),
    ]
    return "\n".join(f"- {label}: {value}" for label, value in lines)


class DraftGenerator:
    """Turns form state into an "Additional Notes" draft with one request."""

    def __init__(
        self,
        adapter: GenerationAdapter,
        *,
        company_name: str = "",
        brand: str = DEFAULT_BRAND_NAME,
    ) -> None:
        self._adapter = adapter
        self._company_name = company_name
        self._brand = brand

    async def generate_draft(
        self,
        form: SurveyForm,
        *,
        directory: Sequence[Company] = (),
        company_name: str | None = None,
    ) -> str:
        """Return the stripped draft text.

        Raises:
            DraftGenerationError: The service failed or returned no text.
        """
        context = build_context(
            form,
            directory=directory,
            company_name=company_name if company_name is not None else self._company_name,
        )
        prompt = _PROMPT_TEMPLATE.format(company=self._brand, context=context)
        try:
            text = await self._adapter.generate_text(prompt)
        except Exception as e:
            logger.error("Notes draft request failed: %s", e, exc_info=True)
            raise DraftGenerationError(
                "Failed to generate notes draft from Gemini API."
            ) from e

        draft = (text or "").strip()
        if not draft:
            raise DraftGenerationError("Gemini API returned an empty notes draft.")
        return draft

    async def with_draft_notes(
        self,
        form: SurveyForm,
        *,
        directory: Sequence[Company] = (),
        company_name: str | None = None,
    ) -> SurveyForm:
        """Return a copy of ``form`` whose notes are the new draft.

        ``form`` itself is never modified; on failure the error propagates
        and the caller still holds the original notes.
        """
        draft = await self.generate_draft(
            form, directory=directory, company_name=company_name
        )
        return replace(form, notes=draft)
