"""
HTML Renderer for command results
Converts Markdown to a styled HTML page for clients without Markdown support
"""

from __future__ import annotations

import html
from typing import Dict, Optional

import markdown

from ..config import settings


class HtmlRenderer:
    """HTML renderer with configurable CSS themes and mobile optimization"""

    # background, text, code background, highlight
    PALETTES: Dict[str, tuple] = {
        "light": ("#ffffff", "#1f2328", "#f3f4f6", "#0b5cad"),
        "dark": ("#111418", "#e6e8eb", "#22272e", "#6cb6ff"),
    }

    def __init__(
        self,
        theme: Optional[str] = None,
        mobile_optimized: Optional[bool] = None,
        font_size: Optional[str] = None,
        max_width: Optional[str] = None
    ):
        # Use settings defaults or override with parameters
        self.theme = theme or settings.css_theme
        self.mobile_optimized = mobile_optimized if mobile_optimized is not None else settings.mobile_optimized
        self.font_size = font_size or settings.html_font_size
        self.max_width = max_width or settings.html_max_width

        self.md = markdown.Markdown(
            extensions=[
                'tables',
                'sane_lists',
                'nl2br',            # chat messages use single newlines
            ]
        )

    def render(self, markdown_text: str, title: str = "Assistente", metadata: Optional[dict] = None) -> str:
        """Convert Markdown to styled HTML with optional metadata"""
        self.md.reset()
        html_content = self.md.convert(markdown_text or "")
        css = self._get_complete_css()
        return self._build_html_document(html_content, css, title, metadata)

    def _build_html_document(self, content: str, css: str, title: str, metadata: Optional[dict] = None) -> str:
        # Metadata goes into <meta> tags so the dispatcher can read it without parsing the body
        metadata_elements = ""
        if metadata:
            for key, value in metadata.items():
                safe_key = self._escape_html(str(key))
                safe_value = self._escape_html(str(value))
                metadata_elements += f'    <meta name="command-{safe_key}" content="{safe_value}">\n'

        return f"""<!DOCTYPE html>
<html lang="pt-BR">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{self._escape_html(title)}</title>
{metadata_elements}    <style>
{css}
    </style>
</head>
<body>
    <article class="markdown-body">
        {content}
    </article>
</body>
</html>"""

    def _escape_html(self, text: str) -> str:
        return html.escape(text, quote=True)

    def _get_complete_css(self) -> str:
        background, text, code_background, highlight = self.PALETTES.get(self.theme, self.PALETTES["light"])
        css = f"""
:root {{ --font-size: {self.font_size}; --max-width: {self.max_width}; --gap: 14px; }}
body {{ background: {background}; color: {text}; margin: 0; }}
.markdown-body {{
    font: var(--font-size)/1.5 system-ui, sans-serif;
    max-width: var(--max-width);
    margin: 0 auto;
    padding: 20px;
}}
h2, h3, ul, ol {{ margin-bottom: var(--gap); }}
ul, ol {{ padding-left: 1.6em; }}
code {{ background: {code_background}; padding: 1px 4px; border-radius: 3px; font-size: 85%; }}
strong {{ color: {highlight}; }}
"""
        if self.mobile_optimized:
            # Phones get the full width and a larger base font
            css += """
@media screen and (max-width: 768px) {
    :root { --font-size: 17px; --max-width: 100%; --gap: 10px; }
    .markdown-body { padding: 12px; }
}
"""
        return css
