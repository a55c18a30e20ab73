"""
HTML Renderer for keyword results
Converts the presenters' Markdown to a standalone styled page
"""

from __future__ import annotations

import markdown
from typing import Optional
from ..config import settings


class HtmlRenderer:
    """HTML renderer with light/dark themes and optional mobile CSS"""

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
                'tables',           # keyword list
                'fenced_code',      # action bodies
            ]
        )

    def render(self, markdown_text: str, title: str = "Keyword Actions", metadata: dict = None) -> str:
        """Convert Markdown to styled HTML with optional metadata"""
        self.md.reset()
        html_content = self.md.convert(markdown_text)
        css = self._get_complete_css()
        return self._build_html_document(html_content, css, title, metadata)

    def _build_html_document(self, content: str, css: str, title: str, metadata: dict = None) -> str:
        # Metadata goes into <meta> tags so scripts can read it without parsing the body
        metadata_elements = ""
        if metadata:
            for key, value in metadata.items():
                safe_key = self._escape_html(str(key))
                safe_value = self._escape_html(str(value))
                metadata_elements += f'    <meta name="keyword-{safe_key}" content="{safe_value}">\n'

        return f"""<!DOCTYPE html>
<html lang="en">
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
        """Escape HTML entities"""
        return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")

    def _get_complete_css(self) -> str:
        css_parts = [
            self._get_css_variables(),
            self._get_base_css(),
            self._get_theme_css(),
        ]

        if self.mobile_optimized:
            css_parts.append(self._get_mobile_css())

        return "\n".join(css_parts)

    def _get_css_variables(self) -> str:
        return f"""
:root {{
    --font-size: {self.font_size};
    --max-width: {self.max_width};
    --line-height: 1.6;
    --spacing: 16px;
}}
"""

    def _get_base_css(self) -> str:
        return """
.markdown-body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Helvetica, Arial, sans-serif;
    font-size: var(--font-size);
    line-height: var(--line-height);
    max-width: var(--max-width);
    margin: 0 auto;
    padding: 20px;
    word-wrap: break-word;
}

h2, h3 {
    margin-top: 24px;
    margin-bottom: var(--spacing);
    font-weight: 600;
    line-height: 1.25;
}

code, pre {
    font-family: 'SF Mono', Monaco, 'Cascadia Code', 'Roboto Mono', Consolas, monospace;
    font-size: 85%;
}

code {
    padding: 2px 4px;
    border-radius: 3px;
}

pre {
    padding: var(--spacing);
    border-radius: 6px;
    overflow: auto;
    line-height: 1.45;
}

pre code {
    padding: 0;
    display: block;
}

a {
    text-decoration: none;
    word-break: break-all;
}

table {
    border-collapse: collapse;
    width: 100%;
    margin-bottom: var(--spacing);
}

th, td {
    border: 1px solid;
    padding: 8px 12px;
    text-align: left;
}
"""

    def _get_theme_css(self) -> str:
        themes = {
            "light": self._get_light_theme(),
            "dark": self._get_dark_theme(),
        }

        return themes.get(self.theme, themes["light"])

    def _get_light_theme(self) -> str:
        return """
body { background-color: #ffffff; color: #24292f; }
code, pre, th { background-color: #f6f8fa; }
th, td { border-color: #d0d7de; }
a { color: #0969da; }
h2 { border-bottom: 1px solid #d0d7de; padding-bottom: 8px; }
"""

    def _get_dark_theme(self) -> str:
        return """
body { background-color: #0d1117; color: #e6edf3; }
code, pre, th { background-color: #161b22; }
th, td { border-color: #30363d; }
a { color: #2f81f7; }
h2 { border-bottom: 1px solid #30363d; padding-bottom: 8px; }
"""

    def _get_mobile_css(self) -> str:
        return """
@media screen and (max-width: 768px) {
    :root {
        --font-size: 18px;
        --max-width: 100%;
        --spacing: 12px;
    }

    .markdown-body {
        padding: 12px;
    }

    pre code {
        white-space: pre-wrap;
        word-break: break-all;
    }
}
"""
