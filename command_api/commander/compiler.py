from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .intent import ActionType, ParsedIntent
from .models import Action, CommandResult, DestinationEntry
from .resolver import MatchCandidate


@dataclass(frozen=True)
class ActionCompiler:
    """Maps a validated intent (plus resolved destination) to a CommandResult.

    Closed state machine:
    - generate_*_pdf: one ``generate_pdf_direct`` action, or zero actions and
      the list of active destinations when nothing matched
    - navigate: ``navigate`` then ``show_notification``
    - not understood / unknown action type: help text, zero actions

    Only describes effects; the chat UI dispatcher executes them in order.
    """

    trigger: str = "/"

    def compile(self,
                intent: ParsedIntent,
                match: Optional[MatchCandidate] = None,
                destinations: Sequence[DestinationEntry] = ()) -> CommandResult:
        if not intent.understood:
            return self.not_understood()

        if intent.action_type.requires_destination:
            if match is None:
                return self.destination_not_found(intent.destination_phrase, destinations)
            return self.generate_pdf(intent.action_type, match.entry)

        if intent.action_type == ActionType.NAVIGATE and intent.target_path:
            return self.navigate(intent.target_path, intent.confirmation_message)

        return self.unrecognized()

    def generate_pdf(self, action_type: ActionType, destination: DestinationEntry) -> CommandResult:
        pdf_kind = action_type.pdf_kind
        action = Action(
            type="generate_pdf_direct",
            description=f"Gerando e baixando PDF de {pdf_kind}...",
            params={
                "destinationId": destination.id,
                "destinationName": destination.name,
                "pdfType": pdf_kind,
                "pdfKind": pdf_kind,
                "pdfLabel": pdf_kind,
            },
        )
        return CommandResult(
            actions=[action],
            message=(
                f"🚀 Perfeito! Encontrei o destino **{destination.name}**.\n\n"
                f"Vou gerar e baixar o PDF de {pdf_kind} automaticamente..."
            ),
            requires_user_action=True,
        )

    def navigate(self, path: str, confirmation: str = "") -> CommandResult:
        actions = [
            Action(type="navigate", description=f"Abrindo {path}", params={"path": path}),
            Action(type="show_notification", description="✅ Página aberta!", params={"type": "success"}),
        ]
        headline = confirmation.strip() or f"Abrindo {path}"
        return CommandResult(
            actions=actions,
            message=f"🚀 {headline}\n\nAbrindo a página...",
            requires_user_action=True,
        )

    def destination_not_found(self,
                              phrase: Optional[str],
                              destinations: Sequence[DestinationEntry]) -> CommandResult:
        if phrase:
            header = f'❌ Não encontrei o destino "{phrase}" nos destinos ativos.'
        else:
            header = "❌ Não identifiquei o destino no comando."

        if not destinations:
            return CommandResult(message=f"{header}\n\nNenhum destino ativo no momento.")

        listing = "\n".join(f"• {d.name}" for d in destinations)
        return CommandResult(
            message=(
                f"{header}\n\nDestinos disponíveis:\n{listing}\n\n"
                f"💡 Tente novamente com um dos destinos acima."
            )
        )

    def not_understood(self) -> CommandResult:
        t = self.trigger
        return CommandResult(
            message=(
                "❌ Não consegui entender esse comando. Tente algo como:\n"
                f"- {t}gera o pdf embarque da gramado\n"
                f"- {t}adicionar cliente\n"
                f"- {t}ver parcelas"
            )
        )

    def unrecognized(self) -> CommandResult:
        t = self.trigger
        return CommandResult(
            message=(
                "❌ Comando não reconhecido. Comandos disponíveis:\n"
                f"- {t}gera o pdf embarque da [destino]\n"
                f"- {t}gera o pdf motorista da [destino]\n"
                f"- {t}gera o pdf hotel da [destino]\n"
                f"- {t}adicionar cliente\n"
                f"- {t}ver parcelas\n"
                f"- {t}abrir caixa"
            )
        )

    def extraction_failed(self) -> CommandResult:
        return CommandResult(message="❌ Erro ao processar comando. Tente novamente.")
