from abc import ABC
from abc import abstractmethod
from typing import TextIO

from rich.console import Console
from rich.text import Text

from sbomview.core.config import DisplayConfig
from sbomview.models.graph import ComponentGraph


class Renderer(ABC):
    """Writes a prepared graph to a text sink. Renderers never mutate the graph."""

    def __init__(self, config: DisplayConfig):
        self.config = config

    @abstractmethod
    def render(self, graph: ComponentGraph, writer: TextIO) -> None:
        ...


class TextRenderer(Renderer):
    """Line oriented renderer printing rich Text through a console bound to the sink."""

    def __init__(self, config: DisplayConfig):
        super().__init__(config)
        self._console: Console | None = None

    def _open(self, writer: TextIO) -> None:
        # Text objects only, so bracketed SBOM data is never parsed as markup
        self._console = Console(
            file=writer,
            markup=False,
            highlight=False,
            emoji=False,
            soft_wrap=True,
            color_system=None if self.config.no_color else 'auto',
            no_color=self.config.no_color,
        )

    def _line(self, *parts: str | Text | tuple[str, str]) -> None:
        self._console.print(Text.assemble(*parts))
