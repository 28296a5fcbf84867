import json
from unittest.mock import patch

import pytest
from conftest import component
from conftest import make_document
from structlog.testing import capture_logs
from typer.testing import CliRunner

from sbomview.__main__ import app
from sbomview.commands.view import build_display_config

runner = CliRunner()


@pytest.fixture
def sbom_path(write_sbom, app_document):
    return write_sbom(app_document)


class TestViewCommand:
    """Tests for `sbomview view`."""

    def test_tree(self, sbom_path):
        """Test the default tree view."""
        result = runner.invoke(app, ['view', str(sbom_path), '--quiet'])
        assert result.exit_code == 0
        assert 'app@1.0.0 [PRIMARY] (application)' in result.stdout
        assert 'Statistics:' in result.stdout

    def test_json(self, sbom_path):
        """Test JSON output on stdout."""
        result = runner.invoke(app, ['view', str(sbom_path), '--format', 'json', '--quiet'])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data['primary']['key'] == 'app'
        assert len(data['components']) == 4

    def test_flat_with_hidden_islands(self, sbom_path):
        """Test the flat view without island members."""
        result = runner.invoke(app, ['view', str(sbom_path), '--format', 'flat', '--hide-islands', '-q'])
        assert result.exit_code == 0
        assert '─── Component 2/2:' in result.stdout
        assert 'Name: urllib3' not in result.stdout

    def test_output_file(self, sbom_path, tmp_path):
        """Test --output writes the view to a file."""
        target = tmp_path / 'view.txt'
        result = runner.invoke(app, ['view', str(sbom_path), '-o', str(target), '-q'])
        assert result.exit_code == 0
        assert '[PRIMARY]' in target.read_text(encoding='utf-8')
        assert '[PRIMARY]' not in result.stdout

    def test_output_file_untouched_on_render_error(self, sbom_path, tmp_path):
        """Test a failing render leaves no partial output file."""
        target = tmp_path / 'view.txt'
        with patch('sbomview.services.view_service.ViewService.render', side_effect=RuntimeError('boom')):
            result = runner.invoke(app, ['view', str(sbom_path), '-o', str(target), '-q'])
        assert result.exit_code == 1
        assert not target.exists()

    def test_min_severity_filter(self, write_sbom, severity_document):
        """Test --min-severity keeps only matching components."""
        path = write_sbom(severity_document)
        result = runner.invoke(app, ['view', str(path), '--min-severity', 'high', '--format', 'json', '-q'])
        assert result.exit_code == 0
        assert set(json.loads(result.stdout)['components']) == {'crit', 'high'}

    def test_preset(self, sbom_path):
        """Test --preset starts from a named configuration."""
        result = runner.invoke(app, ['view', str(sbom_path), '--preset', 'minimal', '-q'])
        assert result.exit_code == 0
        assert 'Showing up to depth 2' in result.stdout

    def test_invalid_format(self, sbom_path):
        """Test an unknown format exits with a validation error."""
        result = runner.invoke(app, ['view', str(sbom_path), '--format', 'yaml'])
        assert result.exit_code == 1
        assert 'Validation Error' in result.output
        assert 'invalid format: yaml' in result.output

    def test_missing_file(self, tmp_path):
        """Test a missing SBOM exits with an error and renders nothing."""
        result = runner.invoke(app, ['view', str(tmp_path / 'nope.json')])
        assert result.exit_code == 1
        assert 'does not exist' in result.output
        assert 'Statistics:' not in result.output

    def test_unsupported_document(self, tmp_path):
        """Test SPDX input is reported, not converted."""
        path = tmp_path / 'spdx.json'
        path.write_text('{"spdxVersion": "SPDX-2.3"}', encoding='utf-8')
        result = runner.invoke(app, ['view', str(path)])
        assert result.exit_code == 1
        assert 'SPDX documents are not supported' in result.output

    def test_warnings_logged(self, write_sbom):
        """Test graph warnings are logged, and silenced by --quiet."""
        doc = make_document(
            primary=component('app'),
            dependencies=[{'ref': 'app', 'dependsOn': ['ghost']}],
        )
        path = write_sbom(doc)

        with patch('sbomview.__main__.setup_logging'), capture_logs() as captured:
            result = runner.invoke(app, ['view', str(path)])
        assert result.exit_code == 0
        events = [e['event'] for e in captured if e['log_level'] == 'warning']
        assert 'dangling dependency reference: app -> ghost' in events

        with patch('sbomview.__main__.setup_logging'), capture_logs() as captured:
            runner.invoke(app, ['view', str(path), '--quiet'])
        assert not [e for e in captured if e['log_level'] == 'warning']


class TestStatsCommand:
    """Tests for `sbomview stats`."""

    def test_tables(self, sbom_path):
        """Test the summary panel and tables."""
        result = runner.invoke(app, ['stats', str(sbom_path)])
        assert result.exit_code == 0
        assert 'Components by Type' in result.stdout
        assert 'Vulnerabilities by Severity' in result.stdout
        assert 'Islands (2)' in result.stdout
        assert 'Max Assembly Level: 1' in result.stdout

    def test_json(self, sbom_path):
        """Test --json prints machine readable statistics."""
        result = runner.invoke(app, ['stats', str(sbom_path), '--json'])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data['totalComponents'] == 4
        assert data['islandCount'] == 2


def test_version():
    """Test --version prints the version and exits."""
    result = runner.invoke(app, ['--version'])
    assert result.exit_code == 0
    assert result.stdout.startswith('sbomview ')


class TestBuildDisplayConfig:
    """Tests for flag precedence."""

    def test_toggles_override_preset(self):
        """Test explicit toggles win over the preset, unset ones keep it."""
        config = build_display_config(
            preset='minimal',
            toggles={'show_dependencies': True, 'show_hashes': None},
        )
        assert config.show_dependencies
        assert not config.show_hashes
        assert config.max_depth == 2

    def test_verbose_beats_toggles(self):
        """Test --verbose ignores individual toggles."""
        config = build_display_config(verbose=True, toggles={'show_hashes': False})
        assert config.show_hashes
        assert config.verbose_output

    def test_only_licenses_beats_verbose(self):
        """Test --only-licenses wins over --verbose."""
        config = build_display_config(verbose=True, only_licenses=True)
        assert config.show_only_licenses
        assert not config.verbose_output
        assert not config.show_dependencies

    def test_options_applied(self):
        """Test non-toggle options are copied when given."""
        config = build_display_config(max_depth=4, format='json', min_severity=None)
        assert config.max_depth == 4
        assert config.format == 'json'
        assert config.min_severity == ''

    def test_unknown_preset(self):
        """Test an unknown preset is a validation problem."""
        with pytest.raises(ValueError, match='Unknown preset'):
            build_display_config(preset='fancy')
