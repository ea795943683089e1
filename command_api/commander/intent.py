from __future__ import annotations

from enum import Enum
from dataclasses import dataclass
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, StrictBool, ValidationError, field_validator

from .commands import find_target
from .models import Command


class ActionType(str, Enum):
    GENERATE_EMBARQUE_PDF = "generate_embarque_pdf"
    GENERATE_MOTORISTA_PDF = "generate_motorista_pdf"
    GENERATE_HOTEL_PDF = "generate_hotel_pdf"
    NAVIGATE = "navigate"
    UNKNOWN = "unknown"

    @property
    def requires_destination(self) -> bool:
        return self in PDF_KINDS

    @property
    def pdf_kind(self) -> Optional[str]:
        return PDF_KINDS.get(self)


PDF_KINDS = {
    ActionType.GENERATE_EMBARQUE_PDF: "embarque",
    ActionType.GENERATE_MOTORISTA_PDF: "motorista",
    ActionType.GENERATE_HOTEL_PDF: "hotel",
}


@dataclass(frozen=True)
class ParsedIntent:
    understood: bool
    action_type: ActionType
    destination_phrase: Optional[str] = None
    destination_keywords: tuple[str, ...] = ()
    target_path: Optional[str] = None
    confirmation_message: str = ""


@dataclass(frozen=True)
class ExtractionFailure:
    """The completion service could not be reached or returned garbage."""
    reason: str


ExtractionOutcome = Union[ParsedIntent, ExtractionFailure]

NOT_UNDERSTOOD = ParsedIntent(understood=False, action_type=ActionType.UNKNOWN)


class CompletionEnvelope(BaseModel):
    """Fields shared by every completion answer, read leniently."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    understood: Optional[StrictBool] = False
    confirmation_message: Optional[str] = Field("", alias="confirmationMessage")


class PdfIntentPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    action_type: Literal["generate_embarque_pdf", "generate_motorista_pdf", "generate_hotel_pdf"] = Field(
        ..., alias="actionType"
    )
    destination: Optional[str] = None
    destination_search_terms: List[Any] = Field(default_factory=list, alias="destinationSearchTerms")

    @field_validator("destination", mode="before")
    @classmethod
    def _destination_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("destination_search_terms", mode="before")
    @classmethod
    def _terms_list(cls, value: Any) -> list:
        return value if isinstance(value, list) else []


class NavigateIntentPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    action_type: Literal["navigate"] = Field(..., alias="actionType")
    target_path: str = Field(..., alias="targetPath", min_length=1)


IntentPayload = Annotated[Union[PdfIntentPayload, NavigateIntentPayload], Field(discriminator="action_type")]

_PAYLOAD_ADAPTER: TypeAdapter = TypeAdapter(IntentPayload)


def clean_keywords(terms: List[Any]) -> tuple[str, ...]:
    """Keep non-blank string terms, first occurrence wins (case-insensitive)."""
    seen = set()
    out = []
    for term in terms:
        if not isinstance(term, str):
            continue
        term = term.strip()
        key = term.casefold()
        if not term or key in seen:
            continue
        seen.add(key)
        out.append(term)
    return tuple(out)


def intent_from_payload(data: dict, navigation: List[Command]) -> ParsedIntent:
    """Validate a decoded completion answer against the closed action catalog.

    Any shape that does not match a known actionType is reported as
    ``ActionType.UNKNOWN`` instead of trusting whatever fields are present.
    Raises ``ValidationError`` only when the envelope itself is malformed.
    """
    envelope = CompletionEnvelope.model_validate(data)
    if not envelope.understood:
        return NOT_UNDERSTOOD

    confirmation = envelope.confirmation_message or ""
    unknown = ParsedIntent(understood=True, action_type=ActionType.UNKNOWN, confirmation_message=confirmation)

    try:
        payload = _PAYLOAD_ADAPTER.validate_python(data)
    except ValidationError:
        return unknown

    if isinstance(payload, NavigateIntentPayload):
        target = find_target(payload.target_path, navigation)
        if target is None:
            return unknown
        # Navigation never carries destination keywords
        return ParsedIntent(
            understood=True,
            action_type=ActionType.NAVIGATE,
            target_path=target.open.path,
            confirmation_message=confirmation,
        )

    phrase = (payload.destination or "").strip() or None
    return ParsedIntent(
        understood=True,
        action_type=ActionType(payload.action_type),
        destination_phrase=phrase,
        destination_keywords=clean_keywords(payload.destination_search_terms),
        confirmation_message=confirmation,
    )
