import html
import re

_CODE_BLOCK_RE = re.compile(r"```\w*\n?(.*?)```", re.DOTALL)
_INLINE_CODE_RE = re.compile(r"`([^`\n]+)`")
_LINK_RE = re.compile(r"\[([^\]\n]+)\]\((https?://[^)\s]+)\)")
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*|__(.+?)__")
_ITALIC_RE = re.compile(r"(?<!\w)\*([^*\n]+?)\*(?!\w)|(?<!\w)_([^_\n]+?)_(?!\w)")
_STRIKE_RE = re.compile(r"~~(.+?)~~")
_HEADER_RE = re.compile(r"^#{1,6}\s+(.+)$", re.MULTILINE)
_TAG_RE = re.compile(r"<(/?)(b|i|s|code|pre|a)(?: [^>]*)?>")

_PLACEHOLDER = "\x00{}\x00"
_PLACEHOLDER_RE = re.compile(r"\x00(\d+)\x00")


def md_to_html(text: str) -> str:
    """Convert Markdown from the AI reply into Telegram's HTML subset."""
    protected: list[str] = []

    def _protect(fragment: str) -> str:
        protected.append(fragment)
        return _PLACEHOLDER.format(len(protected) - 1)

    # Code and links are rendered first and kept out of escaping.
    text = _CODE_BLOCK_RE.sub(lambda m: _protect(f"<pre>{html.escape(m.group(1))}</pre>"), text)
    text = _INLINE_CODE_RE.sub(lambda m: _protect(f"<code>{html.escape(m.group(1))}</code>"), text)
    text = _LINK_RE.sub(
        lambda m: _protect(
            f'<a href="{html.escape(m.group(2), quote=True)}">{html.escape(m.group(1))}</a>'
        ),
        text,
    )

    text = html.escape(text, quote=False)
    text = _BOLD_RE.sub(lambda m: f"<b>{m.group(1) or m.group(2)}</b>", text)
    text = _HEADER_RE.sub(r"<b>\1</b>", text)
    text = _STRIKE_RE.sub(r"<s>\1</s>", text)
    text = _ITALIC_RE.sub(lambda m: f"<i>{m.group(1) or m.group(2)}</i>", text)

    return _PLACEHOLDER_RE.sub(lambda m: protected[int(m.group(1))], text)


def sanitize_html(text: str) -> str:
    """Close tags the model left open, innermost first."""
    stack: list[str] = []
    for m in _TAG_RE.finditer(text):
        closing, tag = m.group(1) == "/", m.group(2)
        if not closing:
            stack.append(tag)
        elif tag in stack:
            while stack and stack.pop() != tag:
                pass
    return text + "".join(f"</{tag}>" for tag in reversed(stack))
