"""
Presenters for command results
Convert engine output to Markdown for HTML display
"""

from __future__ import annotations

import html
from typing import Any, Dict, List

from ..models import CommandResult, DestinationEntry


class BasePresenter:
    """Base presenter with common formatting utilities"""

    def escape_html(self, text: str) -> str:
        """Neutralize raw HTML; Markdown would pass it through untouched"""
        return html.escape(text or "", quote=False)

    def escape_markdown(self, text: str) -> str:
        """Escape markdown special characters (and raw HTML)"""
        if not text:
            return ""

        text = self.escape_html(text)
        for char in ['\\', '*', '_', '`', '[', ']', '#']:
            text = text.replace(char, f'\\{char}')
        return text

    def to_markdown(self, data: Any) -> str:
        raise NotImplementedError


class CommandResultPresenter(BasePresenter):
    """Convert a CommandResult to Markdown"""

    ACTION_LABELS = {
        "navigate": "Abrir página",
        "click_tab": "Selecionar aba",
        "select_destination": "Selecionar destino",
        "click_button": "Clicar botão",
        "fill_input": "Preencher campo",
        "submit_form": "Enviar formulário",
        "show_notification": "Notificação",
        "generate_pdf_direct": "Gerar PDF",
    }

    def to_markdown(self, result: CommandResult) -> str:
        # The message is already Markdown (bold destination names, bullet lists)
        markdown = ["## 🤖 Assistente", "", self.escape_html(result.message), ""]

        if result.actions:
            markdown.extend(["### ▶️ Ações", ""])
            for number, action in enumerate(result.actions, start=1):
                label = self.ACTION_LABELS.get(action.type, action.type)
                markdown.append(f"{number}. **{label}**: {self.escape_markdown(action.description)}")
                for key, value in (action.params or {}).items():
                    markdown.append(f"    - `{key}`: {self.escape_markdown(str(value))}")
            markdown.append("")

        if result.requires_user_action:
            markdown.append("_Aguardando execução no navegador._")

        return "\n".join(markdown)


class DestinationsPresenter(BasePresenter):
    """Convert the active destination list to Markdown"""

    def to_markdown(self, destinations: List[DestinationEntry]) -> str:
        if not destinations:
            return "## Destinos ativos\n\n**Nenhum destino ativo no momento.**"

        markdown = [f"## Destinos ativos ({len(destinations)})", ""]
        for entry in destinations:
            line = f"- {self.escape_markdown(entry.name)}"
            if entry.trip_end:
                line += f" (até {entry.trip_end.strftime('%d/%m/%Y')})"
            markdown.append(line)
        return "\n".join(markdown)


def create_presenter(content_type: str) -> BasePresenter:
    """Create appropriate presenter for content type"""
    presenters: Dict[str, BasePresenter] = {
        'command': CommandResultPresenter(),
        'destinations': DestinationsPresenter(),
    }
    if content_type not in presenters:
        raise ValueError(f"Unknown content type: {content_type}")
    return presenters[content_type]
