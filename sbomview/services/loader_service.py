import json
from pathlib import Path

import pydantic
import structlog

from sbomview.core.validation import DocumentError
from sbomview.core.validation import validate_sbom_file
from sbomview.models.sbom import CdxDocument

logger = structlog.get_logger('loader_service')


class LoaderService:
    """Reads CycloneDX JSON documents. SPDX and XML inputs are rejected."""

    def load(self, sbom_path: Path) -> CdxDocument:
        validate_sbom_file(sbom_path)
        try:
            text = sbom_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentError(f"Cannot read {sbom_path}: {e}")
        return self.parse(text, source=str(sbom_path))

    def parse(self, text: str, source: str = '<input>') -> CdxDocument:
        stripped = text.lstrip('\ufeff').lstrip()
        if stripped.startswith('<'):
            raise DocumentError(f"XML SBOMs are not supported, convert {source} to CycloneDX JSON")

        try:
            data = json.loads(stripped)
        except json.JSONDecodeError as e:
            raise DocumentError(f"Invalid JSON in {source}: {e}")

        if not isinstance(data, dict):
            raise DocumentError(f"Expected a JSON object in {source}")
        if 'spdxVersion' in data:
            raise DocumentError(f"SPDX documents are not supported: {source}")
        if str(data.get('bomFormat', '')).lower() != 'cyclonedx':
            raise DocumentError(f"Not a CycloneDX document (missing bomFormat): {source}")

        try:
            document = CdxDocument.model_validate(data)
        except pydantic.ValidationError as e:
            raise DocumentError(f"Invalid CycloneDX document {source}: {e}")

        logger.debug(
            'Document loaded',
            source=source,
            spec_version=document.spec_version,
            components=len(document.components),
        )
        return document
