from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from .compiler import ActionCompiler
from .config import settings
from .directory import DestinationDirectory, YamlDestinationDirectory
from .intent import ExtractionFailure
from .llm_extractor import LLMIntentExtractor, create_extractor
from .logging_utils import create_session_id, log_execution, setup_orchestrator_logger
from .models import CommandResult
from .normalizer import is_command, normalize_command
from .presentation.html_renderer import HtmlRenderer
from .presentation.presenters import create_presenter
from .resolver import DestinationResolver, take_snapshot
from .security import require_api_key


app = FastAPI(title="Roda Bem Command Assistant API", version="0.1.0")

origins = (
    [o.strip() for o in settings.cors_origins.split(",")]
    if getattr(settings, "cors_origins", None)
    else ["*"]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@dataclass
class CommandOrchestrator:
    """Runs one command through normalize -> extract -> resolve -> compile.

    Every invocation is independent: the directory is read once per command
    (never cached) and no exception escapes ``run``.
    """

    extractor: LLMIntentExtractor
    directory: DestinationDirectory
    resolver: DestinationResolver = field(default_factory=DestinationResolver)
    compiler: ActionCompiler = field(default_factory=ActionCompiler)
    trigger: str = "/"

    def __post_init__(self):
        self.logger = setup_orchestrator_logger("orchestrator", settings.log_level)

    def run(self, text: str) -> CommandResult:
        session_id = create_session_id()
        start_time = time.time()
        command = normalize_command(text, self.trigger)

        try:
            outcome, metrics = self.extractor.extract(command)

            if isinstance(outcome, ExtractionFailure):
                self._log(session_id, command, start_time, "unknown", False, metrics.model_used,
                          False, "extraction_failed", error=outcome.reason)
                return self.compiler.extraction_failed()

            match = None
            destinations = []
            if outcome.understood and outcome.action_type.requires_destination:
                destinations = take_snapshot(self.directory)
                match = self.resolver.resolve(outcome.destination_phrase, outcome.destination_keywords,
                                              destinations)

            result = self.compiler.compile(outcome, match, destinations)

            if not outcome.understood:
                label = "not_understood"
            elif outcome.action_type.requires_destination and match is None:
                label = "destination_not_found"
            elif not result.actions:
                label = "unrecognized"
            else:
                label = outcome.action_type.value

            self._log(session_id, command, start_time, outcome.action_type.value, outcome.understood,
                      metrics.model_used, bool(result.actions), label,
                      actions_count=len(result.actions or []),
                      destination=match.entry.name if match else None)
            return result

        except Exception as e:
            self._log(session_id, command, start_time, "unknown", False, "unknown",
                      False, "error", error=str(e))
            return self.compiler.extraction_failed()

    def _log(self, session_id: str, command: str, start_time: float, action_type: str,
             understood: bool, model: str, success: bool, outcome: str, **extra) -> None:
        duration_ms = (time.time() - start_time) * 1000
        log_execution(self.logger, session_id, command, action_type, understood, model,
                      success, duration_ms, outcome, **extra)


def build_orchestrator() -> CommandOrchestrator:
    return CommandOrchestrator(
        extractor=create_extractor(settings),
        directory=YamlDestinationDirectory(Path(settings.destinations_file)),
        compiler=ActionCompiler(trigger=settings.command_trigger),
        trigger=settings.command_trigger,
    )


ASSISTANT = build_orchestrator()


def get_orchestrator() -> CommandOrchestrator:
    return ASSISTANT


class CommandRequest(BaseModel):
    message: str = Field(..., min_length=1, description="Mensagem do chat, começando com o gatilho (ex.: /)")


@app.get("/health")
def health():
    return {
        "status": "ok",
        "service": "command-assistant",
        "version": "0.1.0",
        "time": datetime.now().astimezone().isoformat()
    }


@app.post("/api/command", dependencies=[Depends(require_api_key)])
def run_command(
    body: CommandRequest,
    format: Optional[str] = Query(default=None, description="'html' para página renderizada"),
    orchestrator: CommandOrchestrator = Depends(get_orchestrator),
):
    if not is_command(body.message, orchestrator.trigger):
        raise HTTPException(400, detail=f"Comandos devem começar com '{orchestrator.trigger}'")

    result = orchestrator.run(body.message)

    if format == "html":
        presenter = create_presenter("command")
        html = HtmlRenderer().render(
            presenter.to_markdown(result),
            title="Assistente",
            metadata={"actions": len(result.actions or [])},
        )
        return HTMLResponse(html)

    return result.to_payload()


@app.get("/api/destinations", dependencies=[Depends(require_api_key)])
def active_destinations(
    format: Optional[str] = Query(default=None),
    orchestrator: CommandOrchestrator = Depends(get_orchestrator),
):
    destinations = take_snapshot(orchestrator.directory)

    if format == "html":
        presenter = create_presenter("destinations")
        return HTMLResponse(HtmlRenderer().render(presenter.to_markdown(destinations), title="Destinos ativos"))

    return {"destinations": [d.model_dump(mode="json") for d in destinations]}
