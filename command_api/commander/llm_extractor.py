from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Protocol

from openai import OpenAI

from .commands import describe_targets, load_commands
from .config import Settings
from .intent import ExtractionFailure, ExtractionOutcome, NOT_UNDERSTOOD, intent_from_payload
from .logging_utils import setup_orchestrator_logger
from .models import Command

logger = setup_orchestrator_logger("extractor")

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.S | re.I)


@dataclass(frozen=True)
class Completion:
    """Raw answer of the completion service."""
    content: Optional[str]
    model: str = ""
    usage: Optional[dict] = None


class CompletionService(Protocol):
    def complete(self, system_prompt: str, user_prompt: str) -> Completion:
        ...


@dataclass(frozen=True)
class ExtractionMetrics:
    """Metrics for one extraction call."""
    request_time: float
    response_time: float
    total_latency_ms: float
    token_usage: Optional[dict] = None
    model_used: str = ""
    success: bool = True
    error_message: Optional[str] = None


class OpenAICompletionService:
    """Chat completion over any OpenAI-compatible endpoint (Groq by default).

    JSON mode is always requested. The client is built on first use and
    never retries: a failed call surfaces immediately to the caller.
    """

    def __init__(self,
                 api_key: str,
                 base_url: Optional[str] = None,
                 model: str = "llama-3.3-70b-versatile",
                 temperature: float = 0.3,
                 max_tokens: int = 512,
                 timeout: float = 30.0):
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client: Optional[OpenAI] = None

    def is_enabled(self) -> bool:
        return self.api_key.strip() != ""

    def _get_client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url or None,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    def complete(self, system_prompt: str, user_prompt: str) -> Completion:
        if not self.is_enabled():
            raise RuntimeError("completion API key is not configured")

        response = self._get_client().chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content if response.choices else None
        return Completion(
            content=content,
            model=getattr(response, "model", None) or self.model,
            usage=response.usage.model_dump() if response.usage else None,
        )


class LLMIntentExtractor:
    """Turns a normalized command into a ParsedIntent using the completion service.

    Fails closed: transport errors, empty answers and malformed JSON all come
    back as ``ExtractionFailure`` values, never as exceptions.
    """

    def __init__(self, completion: CompletionService, navigation: Optional[List[Command]] = None):
        self.completion = completion
        self.navigation = list(navigation or [])
        self._system_prompt = build_system_prompt(self.navigation)

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    def extract(self, text: str) -> tuple[ExtractionOutcome, ExtractionMetrics]:
        """Extract the intent of ``text`` and return it with call metrics."""
        start_time = time.time()

        if not (text or "").strip():
            return NOT_UNDERSTOOD, ExtractionMetrics(
                request_time=start_time,
                response_time=start_time,
                total_latency_ms=0,
                model_used="skipped-empty-command",
            )

        try:
            completion = self.completion.complete(self._system_prompt, build_user_prompt(text))
        except Exception as e:
            logger.warning(f"⚠️ Completion call failed: {e}")
            return ExtractionFailure(reason=f"completion call failed: {e}"), self._metrics(
                start_time, success=False, error=str(e)
            )

        response_time = time.time()
        metrics = ExtractionMetrics(
            request_time=start_time,
            response_time=response_time,
            total_latency_ms=(response_time - start_time) * 1000,
            token_usage=completion.usage,
            model_used=completion.model,
        )

        try:
            data = decode_completion(completion.content)
            parsed = intent_from_payload(data, self.navigation)
        except ValueError as e:
            # json.JSONDecodeError and pydantic.ValidationError are both ValueError
            logger.warning(f"⚠️ Unusable completion: {e}")
            return ExtractionFailure(reason=f"invalid completion: {e}"), ExtractionMetrics(
                request_time=metrics.request_time,
                response_time=metrics.response_time,
                total_latency_ms=metrics.total_latency_ms,
                token_usage=metrics.token_usage,
                model_used=metrics.model_used,
                success=False,
                error_message=str(e),
            )

        logger.debug(f"🧭 Extracted intent: {parsed}")
        return parsed, metrics

    def _metrics(self, start_time: float, success: bool, error: Optional[str] = None) -> ExtractionMetrics:
        now = time.time()
        return ExtractionMetrics(
            request_time=start_time,
            response_time=now,
            total_latency_ms=(now - start_time) * 1000,
            model_used=getattr(self.completion, "model", "") or "",
            success=success,
            error_message=error,
        )


def decode_completion(content: Optional[str]) -> dict[str, Any]:
    """Decode the completion text into a JSON object.

    Missing content decodes as ``{}``. Markdown fences are tolerated.
    Raises ``ValueError`` for anything that is not a JSON object.
    """
    raw = (content or "").strip() or "{}"
    fenced = _FENCE_RE.match(raw)
    if fenced:
        raw = fenced.group(1) or "{}"
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def build_user_prompt(text: str) -> str:
    return f"Comando: {text}"


def build_system_prompt(navigation: List[Command]) -> str:
    """System instruction listing the whole command catalog with examples."""
    navigation_section = describe_targets(navigation)
    paths = " | ".join(f'"{cmd.open.path}"' for cmd in navigation) or '"/"'

    return f"""Você é um assistente que traduz comandos em português para ações específicas no sistema Roda Bem Turismo.

COMANDOS DISPONÍVEIS E SUAS AÇÕES:

1. GERAR PDF DE EMBARQUE
Comando exemplo: "gera o pdf embarque da aparecida do norte 12/12"
IMPORTANTE: Extraia APENAS o nome do destino, removendo datas, meses e números.
Exemplo: "aparecida do norte 12/12" → extrair apenas "aparecida do norte"
Exemplo: "gramado natal luz 15 de dezembro" → extrair apenas "gramado natal luz"
actionType: "generate_embarque_pdf"

2. GERAR PDF DO MOTORISTA
Comando exemplo: "gera o pdf motorista da aparecida do norte 12/12"
IMPORTANTE: Extraia APENAS o nome do destino, removendo datas.
actionType: "generate_motorista_pdf"

3. GERAR PDF DO HOTEL
Comando exemplo: "gera o pdf hotel da aparecida do norte 12/12"
IMPORTANTE: Extraia APENAS o nome do destino, removendo datas.
actionType: "generate_hotel_pdf"

{navigation_section}

Para abrir páginas use actionType "navigate" e targetPath com um destes caminhos: {paths}
Se o comando não corresponder a nenhum item acima, responda com "understood": false.

Responda SEMPRE e SOMENTE em formato JSON com a seguinte estrutura:
{{
  "understood": true/false,
  "actionType": "generate_embarque_pdf" | "generate_motorista_pdf" | "generate_hotel_pdf" | "navigate" | "unknown",
  "destination": "nome do destino SEM datas, meses ou números" (se aplicável),
  "destinationSearchTerms": ["termo1", "termo2", "termo3"] (palavras-chave principais do destino para busca),
  "targetPath": "/caminho" (se navegação),
  "confirmationMessage": "mensagem amigável em português confirmando o que será feito"
}}

Exemplo:
Comando: "gera o pdf embarque da aparecida do norte 12/12"
Response: {{
  "understood": true,
  "actionType": "generate_embarque_pdf",
  "destination": "aparecida do norte",
  "destinationSearchTerms": ["aparecida", "norte"],
  "confirmationMessage": "Vou gerar o PDF de embarque de Aparecida do Norte"
}}

Exemplo:
Comando: "ver parcelas"
Response: {{
  "understood": true,
  "actionType": "navigate",
  "targetPath": "/parcelas",
  "confirmationMessage": "Vou abrir a página de parcelas"
}}"""


def create_extractor(settings: Settings) -> LLMIntentExtractor:
    """Build the extractor from settings (Groq/OpenAI endpoint + commands.yml)."""
    completion = OpenAICompletionService(
        api_key=settings.completion_api_key,
        base_url=settings.completion_base_url,
        model=settings.completion_model,
        temperature=settings.completion_temperature,
        max_tokens=settings.completion_max_tokens,
        timeout=settings.completion_timeout,
    )
    navigation = load_commands(Path(settings.commands_file))
    if not navigation:
        logger.warning(f"⚠️ No navigation targets loaded from {settings.commands_file}")
    return LLMIntentExtractor(completion=completion, navigation=navigation)
