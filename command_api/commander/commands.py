from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import ValidationError

from .models import Command


def load_commands(commands_file: Path) -> List[Command]:
    """
    Lê o catálogo de navegação (commands.yml) e converte em objetos Command

    Args:
        commands_file: caminho do commands.yml

    Returns:
        List[Command]: comandos carregados (lista vazia se o arquivo não existir)

    Entries that do not match the Command shape are skipped so one bad
    item cannot take the whole catalog down.
    """
    if not commands_file.exists():
        return []
    data = yaml.safe_load(commands_file.read_text(encoding="utf-8"))
    if not data:
        return []
    commands = []
    for item in data:
        try:
            commands.append(Command(**item))
        except (TypeError, ValidationError):
            continue
    return commands


def find_target(path: Optional[str], commands: List[Command]) -> Optional[Command]:
    """Return the catalog entry whose open path equals ``path`` (trailing slash ignored)."""
    if not path:
        return None
    wanted = path.strip().rstrip("/") or "/"
    for cmd in commands:
        if (cmd.open.path.rstrip("/") or "/") == wanted:
            return cmd
    return None


def describe_targets(commands: List[Command]) -> str:
    """Numbered catalog section for the completion prompt, one block per page."""
    blocks = []
    for number, cmd in enumerate(commands, start=4):
        examples = " ou ".join(f'"{kw}"' for kw in cmd.keywords[:2])
        blocks.append(
            f"{number}. {cmd.name.upper()}\n"
            f"Comando exemplo: {examples}\n"
            f"Ações necessárias:\n"
            f"- Navegar para {cmd.open.path}"
        )
    return "\n\n".join(blocks)
