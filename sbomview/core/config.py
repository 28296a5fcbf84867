"""Configuration management for sbomview."""
import os
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from enum import Enum

import dotenv


class OutputFormat(str, Enum):
    TREE = 'tree'
    FLAT = 'flat'
    JSON = 'json'

    def __str__(self) -> str:
        return self.value


class Reachability(str, Enum):
    """Which links make a node part of the primary (non-island) tree."""
    ASSEMBLY = 'assembly'
    DEPENDENCIES = 'dependencies'

    def __str__(self) -> str:
        return self.value


@dataclass
class FilterConfig:
    """Predicates applied by the filter pipeline. `max_depth` is left to renderers."""
    types: list[str] = field(default_factory=list)
    min_severity: str = ''
    only_unresolved: bool = False
    max_depth: int = 0

    @property
    def is_default(self) -> bool:
        return not self.types and not self.min_severity and not self.only_unresolved


@dataclass
class DisplayConfig:
    """What the renderers show and how. `max_depth` 0 means unlimited."""
    show_dependencies: bool = True
    show_vulnerabilities: bool = True
    show_annotations: bool = True
    show_compositions: bool = False
    show_properties: bool = False
    show_hashes: bool = False
    show_licenses: bool = False
    max_depth: int = 0
    collapse_islands: bool = False
    verbose_output: bool = False
    filter_by_type: str = ''
    only_primary: bool = False
    show_only_licenses: bool = False
    min_severity: str = ''
    only_unresolved: bool = False
    format: str = OutputFormat.TREE.value
    no_color: bool = False
    output: str = ''
    reachability: str = Reachability.ASSEMBLY.value

    @classmethod
    def default(cls) -> 'DisplayConfig':
        return cls()

    @classmethod
    def minimal(cls) -> 'DisplayConfig':
        return cls(
            show_dependencies=False,
            show_annotations=False,
            max_depth=2,
            collapse_islands=True,
        )

    @classmethod
    def compact(cls) -> 'DisplayConfig':
        return cls(show_annotations=False, max_depth=3)

    @classmethod
    def verbose_preset(cls) -> 'DisplayConfig':
        return cls().with_verbose()

    def with_verbose(self) -> 'DisplayConfig':
        return replace(
            self,
            verbose_output=True,
            show_dependencies=True,
            show_vulnerabilities=True,
            show_annotations=True,
            show_compositions=True,
            show_properties=True,
            show_hashes=True,
            show_licenses=True,
        )

    def with_only_licenses(self) -> 'DisplayConfig':
        return replace(
            self,
            show_only_licenses=True,
            show_licenses=True,
            show_dependencies=False,
            show_vulnerabilities=False,
            show_annotations=False,
            show_compositions=False,
            show_properties=False,
            show_hashes=False,
        )


PRESETS = {
    'default': DisplayConfig.default,
    'minimal': DisplayConfig.minimal,
    'compact': DisplayConfig.compact,
    'verbose': DisplayConfig.verbose_preset,
}


@dataclass
class ViewerConfig:
    """Environment driven defaults for the CLI."""
    default_format: str = field(
        default_factory=lambda: os.getenv('SBOMVIEW_FORMAT', OutputFormat.TREE.value),
    )
    default_max_depth: int = field(
        default_factory=lambda: int(os.getenv('SBOMVIEW_MAX_DEPTH', '0')),
    )
    no_color: bool = field(
        default_factory=lambda: bool(os.getenv('NO_COLOR')),
    )

    @classmethod
    def load(cls) -> 'ViewerConfig':
        dotenv.load_dotenv()
        return cls()


_config: ViewerConfig | None = None


def get_config() -> ViewerConfig:
    global _config
    if _config is None:
        _config = ViewerConfig.load()
    return _config
