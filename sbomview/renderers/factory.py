from sbomview.core.config import DisplayConfig
from sbomview.core.config import OutputFormat
from sbomview.renderers.base import Renderer
from sbomview.renderers.flat_renderer import FlatRenderer
from sbomview.renderers.json_renderer import JsonRenderer
from sbomview.renderers.tree_renderer import TreeRenderer


class RendererFactory:
    _MAPPING = {
        OutputFormat.TREE: TreeRenderer,
        OutputFormat.FLAT: FlatRenderer,
        OutputFormat.JSON: JsonRenderer,
    }

    @staticmethod
    def get_renderer(config: DisplayConfig) -> Renderer:
        try:
            output_format = OutputFormat(config.format)
        except ValueError:
            raise ValueError(f"Unsupported format: {config.format}")
        return RendererFactory._MAPPING[output_format](config)


def get_renderer(config: DisplayConfig) -> Renderer:
    return RendererFactory.get_renderer(config)
