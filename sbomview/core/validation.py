"""Input and configuration validation for sbomview."""
from pathlib import Path

from sbomview.core.config import DisplayConfig
from sbomview.core.config import OutputFormat
from sbomview.core.config import Reachability
from sbomview.models.severity import Severity


class ValidationError(ValueError):
    """Validation error."""


class DocumentError(ValidationError):
    """The SBOM document could not be read or is not a supported format."""


def validate_sbom_file(sbom_path: Path) -> bool:
    """
    Validate that an SBOM file can be read.

    Returns:
        True if valid

    Raises:
        DocumentError if the path is missing, not a file or empty
    """
    if not sbom_path.exists():
        raise DocumentError(f"SBOM file does not exist: {sbom_path}")

    if not sbom_path.is_file():
        raise DocumentError(f"Not a file: {sbom_path}")

    if sbom_path.stat().st_size == 0:
        raise DocumentError(f"SBOM file is empty: {sbom_path}")

    return True


def validate_display_config(config: DisplayConfig) -> bool:
    """
    Validate a display configuration before any document is read.

    Raises:
        ValidationError on unknown format, severity or reachability, or a negative max depth
    """
    formats = [f.value for f in OutputFormat]
    if config.format not in formats:
        raise ValidationError(
            f"invalid format: {config.format} (valid: {', '.join(formats)})",
        )

    if config.min_severity:
        severities = [s.value for s in reversed(Severity)]
        if config.min_severity.strip().lower() not in severities:
            raise ValidationError(
                f"invalid severity: {config.min_severity} (valid: {', '.join(severities)})",
            )

    if config.max_depth < 0:
        raise ValidationError('max depth must be >= 0')

    modes = [r.value for r in Reachability]
    if config.reachability not in modes:
        raise ValidationError(
            f"invalid reachability: {config.reachability} (valid: {', '.join(modes)})",
        )

    return True
