"""HTML to text/markdown conversion for fetched pages."""

import re

import html2text
from bs4 import BeautifulSoup

TEXT_STRIP_TAGS = ["script", "style", "noscript", "iframe", "object", "embed"]
MARKDOWN_STRIP_TAGS = ["script", "style", "meta", "link"]

OUTPUT_FORMATS = ("text", "markdown", "html")


def extract_text_from_html(html: str) -> str:
    """Extract readable text from HTML using BeautifulSoup."""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(TEXT_STRIP_TAGS):
        element.decompose()

    text = soup.get_text()
    text = re.sub(r"\s+\n", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def convert_html_to_markdown(html: str) -> str:
    """Convert HTML to markdown with ATX headings and unwrapped lines."""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(MARKDOWN_STRIP_TAGS):
        element.decompose()

    converter = html2text.HTML2Text()
    converter.body_width = 0
    converter.ul_item_mark = "-"
    converter.emphasis_mark = "*"
    converter.mark_code = False
    return converter.handle(str(soup)).strip()


def normalize_output(raw: str, output_format: str, content_type: str) -> str:
    """Transform a fetched body for the requested format.

    Only HTML bodies are converted; everything else passes through.
    """
    if "text/html" not in content_type:
        return raw
    if output_format == "markdown":
        return convert_html_to_markdown(raw)
    if output_format == "text":
        return extract_text_from_html(raw)
    return raw
