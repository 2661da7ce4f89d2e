"""Page rendering: content first, then the layout around it.

HTML pages are kida templates rendered with the page meta as context.
Markdown pages are rendered with patitas. Either way the result is
handed to the page's layout as ``content``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from kida.template import Markup

if TYPE_CHECKING:
    from kida import Environment

    from atoll.markdown import MarkdownRenderer
    from atoll.pages.layouts import LayoutRegistry
    from atoll.pages.types import Page


class PageRenderer:
    """Render discovered pages against one build's environment."""

    __slots__ = ("_env", "_layouts", "_markdown")

    def __init__(self, env: Environment, layouts: LayoutRegistry, markdown: MarkdownRenderer) -> None:
        self._env = env
        self._layouts = layouts
        self._markdown = markdown

    def page_context(self, page: Page) -> dict[str, Any]:
        context = dict(page.meta)
        context["title"] = page.title
        context["meta"] = dict(page.meta)
        context["path"] = "/" + page.output_name
        return context

    def render_content(self, page: Page) -> str:
        if page.kind == "markdown":
            return self._markdown.render(page.body)
        template = self._env.get_template(page.template_name)
        return template.render(self.page_context(page))

    def render(self, page: Page) -> str:
        """Render *page* to a full HTML document (before asset injection)."""
        content = self.render_content(page)
        layout = page.layout
        if layout is None:
            return content

        template = self._env.get_template(self._layouts.template_name(layout))
        context = self.page_context(page)
        context["content"] = Markup(content)
        return template.render(context)
