"""
HTML <-> markdown conversion helpers.
"""
import markdown
from markdown.extensions import Extension
from markdownify import markdownify


class BackslashEscapeHtmlTagsExtension(Extension):
    """
    Let `\\<tag\\>` render as literal text instead of raw HTML.
    """

    def extendMarkdown(self, md: markdown.Markdown) -> None:
        if '<' not in md.ESCAPED_CHARS:
            md.ESCAPED_CHARS.append('<')


def html_to_markdown(html: str) -> str:
    if not html:
        return ""
    return markdownify(html, heading_style="ATX").strip()


def markdown_to_html(text: str, backslash_escapes_html_tags: bool = True) -> str:
    extensions = []
    if backslash_escapes_html_tags:
        extensions.append(BackslashEscapeHtmlTagsExtension())
    return markdown.markdown(text or "", extensions=extensions)
