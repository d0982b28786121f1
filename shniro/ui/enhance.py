"""Post-render pass over rendered answer HTML.

Runs after every rich render pass (once per revealed character), so each
step is idempotent: spacing styles are re-assigned, math spans that were
already converted are skipped, and a code block never gets a second copy
button.
"""

import re

from bs4 import BeautifulSoup, NavigableString, Tag

COPY_BUTTON_CLASS = "copy-btn"
COPY_LABEL = "Copy Code"
COPIED_LABEL = "Copied!"
COPIED_DURATION_MS = 2000

MATH_CLASS = "math"
MATH_DISPLAY_CLASS = "math-display"
MATH_INLINE_CLASS = "math-inline"

SPACING_STYLES: dict[tuple[str, ...], str] = {
    ("p",): "margin-bottom: 1.5rem; line-height: 1.7; display: block;",
    ("h1", "h2", "h3"): (
        "margin-top: 1.5rem; margin-bottom: 0.8rem; font-weight: bold; display: block;"
    ),
    ("ul", "ol"): "margin-bottom: 1.5rem; padding-left: 1.5rem; display: block;",
    ("li",): "margin-bottom: 0.6rem; line-height: 1.6; display: list-item;",
}

CODE_BLOCK_STYLE = (
    "background: rgba(0,0,0,0.2); padding: 15px; border-radius: 8px; "
    "overflow-x: auto; clear: both; margin: 10px 0;"
)
COPY_BUTTON_STYLE = (
    "float:right; cursor:pointer; font-size:11px; padding:3px 8px; "
    "border-radius:4px; border:none; background:rgba(255,255,255,0.2); color:inherit;"
)
COPY_BUTTON_ONCLICK = (
    "const b=this; const pre=b.parentElement; const code=pre.querySelector('code');"
    "const text=code ? code.innerText : pre.innerText.replace(b.innerText, '');"
    "navigator.clipboard.writeText(text);"
    f"b.innerText='{COPIED_LABEL}';"
    f"setTimeout(() => b.innerText='{COPY_LABEL}', {COPIED_DURATION_MS});"
)

# $$...$$ (display) is tried before $...$ (inline)
MATH_PATTERN = re.compile(r"\$\$(?P<display>.+?)\$\$|\$(?P<inline>[^$\n]+?)\$", re.DOTALL)

# Text under these is never scanned for math
_MATH_SKIP_TAGS = {"code", "pre", "script", "style", "button"}


def _inside_skipped(node: NavigableString) -> bool:
    for parent in node.parents:
        if parent.name in _MATH_SKIP_TAGS:
            return True
        if MATH_CLASS in (parent.get("class") or []):
            return True
    return False


def _math_tag(soup: BeautifulSoup, tex: str, display: bool) -> Tag:
    kind = MATH_DISPLAY_CLASS if display else MATH_INLINE_CLASS
    tag = soup.new_tag("span", attrs={"class": [MATH_CLASS, kind]})
    tag.string = tex.strip()
    return tag


def render_math(soup: BeautifulSoup) -> None:
    """Convert delimited math in text nodes into tagged math elements.

    The TeX source is kept as the element text without delimiters; the
    browser typesets elements by class.
    """
    candidates = [
        node
        for node in soup.find_all(string=MATH_PATTERN)
        if isinstance(node, NavigableString) and not _inside_skipped(node)
    ]
    for node in candidates:
        text = str(node)
        pieces: list[NavigableString | Tag] = []
        last = 0
        for match in MATH_PATTERN.finditer(text):
            if match.start() > last:
                pieces.append(NavigableString(text[last : match.start()]))
            display = match.group("display") is not None
            tex = match.group("display") if display else match.group("inline")
            pieces.append(_math_tag(soup, tex, display))
            last = match.end()
        if last < len(text):
            pieces.append(NavigableString(text[last:]))
        node.replace_with(*pieces)


def apply_spacing(soup: BeautifulSoup) -> None:
    """Assign presentation spacing to block elements by tag name."""
    for names, style in SPACING_STYLES.items():
        for element in soup.find_all(list(names)):
            element["style"] = style


def attach_copy_buttons(soup: BeautifulSoup) -> None:
    """Give every code block exactly one copy-to-clipboard button."""
    for block in soup.find_all("pre"):
        if block.find("button", class_=COPY_BUTTON_CLASS):
            continue
        button = soup.new_tag(
            "button",
            attrs={
                "class": [COPY_BUTTON_CLASS],
                "type": "button",
                "style": COPY_BUTTON_STYLE,
                "onclick": COPY_BUTTON_ONCLICK,
            },
        )
        button.string = COPY_LABEL
        block.insert(0, button)
        block["style"] = CODE_BLOCK_STYLE


def enhance(html: str) -> str:
    """Apply math, spacing and copy-button decoration to rendered HTML."""
    soup = BeautifulSoup(html, "html.parser")
    render_math(soup)
    apply_spacing(soup)
    attach_copy_buttons(soup)
    return str(soup)
