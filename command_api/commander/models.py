from __future__ import annotations

from datetime import date
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CommandOpen(BaseModel):
    path: str


class Command(BaseModel):
    """Navigation target offered to the completion service (commands.yml)."""
    name: str
    keywords: List[str]
    open: CommandOpen


class DestinationEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    active: bool = True
    trip_end: Optional[date] = None


ActionKind = Literal[
    "navigate",
    "click_tab",
    "select_destination",
    "click_button",
    "fill_input",
    "submit_form",
    "show_notification",
    "generate_pdf_direct",
]


class Action(BaseModel):
    """One described side effect; the UI dispatcher executes it."""
    model_config = ConfigDict(frozen=True)

    type: ActionKind
    description: str
    params: Optional[dict[str, Any]] = None


class CommandResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    is_command: Literal[True] = Field(True, alias="isCommand")
    actions: Optional[List[Action]] = None
    message: str
    requires_user_action: Optional[bool] = Field(None, alias="requiresUserAction")

    def to_payload(self) -> dict[str, Any]:
        """JSON shape consumed by the chat UI (camelCase, unset fields omitted)."""
        return self.model_dump(by_alias=True, exclude_none=True)
