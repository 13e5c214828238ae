"""Render repository Markdown (READMEs, .md blobs) to HTML.

Relative image references are rewritten to the raw content endpoint so they
resolve no matter which page the document is shown on. Raw HTML inside the
document is passed through untouched and is not sanitized.
"""

from markdown_it import MarkdownIt
from markdown_it.token import Token

_md = MarkdownIt("commonmark", {"html": True}).enable(["table", "strikethrough"])


def transform_image_url(
    src: str | None, owner: str, repository: str, branch: str | None
) -> str:
    if not src:
        return ""

    if src.startswith("http"):
        return src

    return f"/api/repositories/{owner}/{repository}/raw?branch={branch or 'main'}&path={src}"


def _walk(tokens: list[Token]):
    for token in tokens:
        yield token
        if token.children:
            yield from _walk(token.children)


def rewrite_image_sources(
    tokens: list[Token], owner: str, repository: str, branch: str | None
) -> list[Token]:
    for token in _walk(tokens):
        if token.type == "image":
            token.attrSet(
                "src",
                transform_image_url(token.attrGet("src"), owner, repository, branch),
            )
    return tokens


def render_markdown(
    text: str, owner: str, repository: str, branch: str | None = "main"
) -> str:
    env: dict = {}
    tokens = _md.parse(text, env)
    rewrite_image_sources(tokens, owner, repository, branch)
    return _md.renderer.render(tokens, _md.options, env)
