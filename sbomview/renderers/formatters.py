"""Text fragments shared by the tree and flat renderers."""
from datetime import datetime
from datetime import timezone

from rich.text import Text

from sbomview.graph.statistics import Statistics
from sbomview.models.component import EnrichedComponent
from sbomview.models.component import HashInfo
from sbomview.models.component import LicenseInfo
from sbomview.models.component import PropertyInfo
from sbomview.models.component import SBOMMetadata
from sbomview.models.component import VulnerabilityInfo
from sbomview.models.component import VulnerabilityStats

STYLES = {
    'primary': 'bold cyan',
    'name': 'bold',
    'label': 'bright_black',
    'critical': 'bold red',
    'high': 'bright_red',
    'medium': 'yellow',
    'low': 'blue',
    'tree': 'bright_black',
    'dependency': 'green',
    'annotation': 'magenta',
    'island': 'red',
    'success': 'green',
    'info': 'cyan',
    'purl': 'bright_cyan',
    'license': 'bright_yellow',
    'supplier': 'bright_magenta',
}

TIME_FORMAT = '%Y-%m-%d %H:%M:%S'


def style(name: str) -> str:
    return STYLES.get(name, '')


def severity_style(severity: str) -> str:
    return STYLES.get((severity or '').lower(), STYLES['label'])


def truncate(value: str, max_len: int) -> str:
    if len(value) <= max_len:
        return value
    return value[:max_len - 3] + '...'


def _plural(count: int, unit: str) -> str:
    return f'1 {unit}' if count == 1 else f'{count} {unit}s'


def relative_time(ts: datetime, now: datetime | None = None) -> str:
    """Human form of the distance to `ts`, e.g. `5 days ago`."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    seconds = (now - ts).total_seconds()
    future = seconds < 0
    seconds = abs(seconds)

    if seconds < 60:
        return 'just now'
    if seconds < 3600:
        text = _plural(int(seconds // 60), 'minute')
    elif seconds < 86400:
        text = _plural(int(seconds // 3600), 'hour')
    elif seconds < 30 * 86400:
        text = _plural(int(seconds // 86400), 'day')
    elif seconds < 365 * 86400:
        text = _plural(int(seconds // (30 * 86400)), 'month')
    else:
        text = _plural(int(seconds // (365 * 86400)), 'year')
    return f'{text} from now' if future else f'{text} ago'


def component_header(node: EnrichedComponent) -> Text:
    text = Text()
    if node.is_primary:
        text.append(f'{node.label} [PRIMARY]', style=style('primary'))
    else:
        text.append(node.label, style=style('name'))
    if node.type:
        text.append(f' ({node.type})', style=style('label'))
    return text


def list_header(title: str, count: int) -> Text:
    if count == 0:
        return Text(f'{title}: none', style=style('label'))
    return Text(f'{title} ({count}):', style=style('name'))


def vulnerability_summary(stats: VulnerabilityStats) -> Text:
    if stats.total == 0:
        return Text('No embedded vulnerabilities', style=style('success'))

    parts = [
        (stats.critical, 'C', 'critical'),
        (stats.high, 'H', 'high'),
        (stats.medium, 'M', 'medium'),
        (stats.low, 'L', 'low'),
        (stats.unknown, 'U', 'label'),
    ]
    text = Text(f'Vulnerabilities: {stats.total} (')
    first = True
    for count, letter, name in parts:
        if not count:
            continue
        if not first:
            text.append(', ')
        text.append(f'{count}{letter}', style=style(name))
        first = False
    text.append(')')
    return text


def vulnerability(vuln: VulnerabilityInfo) -> Text:
    text = Text(f'{vuln.id} [')
    text.append(vuln.severity.upper(), style=severity_style(vuln.severity))
    text.append(']')
    if vuln.analysis_state:
        text.append(f' ({vuln.analysis_state})', style=style('label'))
    if vuln.score:
        text.append(f' Score: {vuln.score:.1f}', style=style('label'))
    if vuln.source_name:
        text.append(f' Source: {vuln.source_name}', style=style('label'))
    return text


def vulnerability_verbose(vuln: VulnerabilityInfo) -> Text:
    """`ID (state) (SEVERITY) (source) (score)` with empty parts left out."""
    text = Text(vuln.id)
    if vuln.analysis_state:
        text.append(f' ({vuln.analysis_state})', style=style('label'))
    if vuln.severity:
        text.append(f' ({vuln.severity.upper()})', style=severity_style(vuln.severity))
    if vuln.source_name:
        text.append(f' ({vuln.source_name})', style=style('info'))
    if vuln.score:
        text.append(f' ({vuln.score:.1f})', style=style('info'))
    return text


def dependency(target: EnrichedComponent) -> Text:
    text = Text(target.label, style=style('dependency'))
    if target.type and target.type != 'unknown':
        text.append(f' ({target.type})', style=style('label'))
    return text


def dependency_verbose(target: EnrichedComponent) -> Text:
    text = dependency(target)
    if target.purl:
        text.append(f' ({target.purl})', style=style('purl'))
    licenses = [lic.label for lic in target.licenses if lic.label]
    if licenses:
        text.append(f" ({','.join(licenses)})", style=style('license'))
    if target.supplier:
        text.append(f' ({target.supplier})', style=style('supplier'))
    return text


def license_text(lic: LicenseInfo) -> Text:
    if lic.label:
        return Text(lic.label, style=style('license'))
    return Text('(unknown)', style=style('label'))


def hash_text(item: HashInfo, verbose: bool = False) -> Text:
    value = item.value if verbose else truncate(item.value, 16)
    return Text.assemble((item.algorithm, style('label')), ': ', (value, style('info')))


def property_text(prop: PropertyInfo) -> Text:
    return Text.assemble((prop.name, style('label')), ': ', (truncate(prop.value, 50), style('info')))


def sbom_header(metadata: SBOMMetadata, verbose: bool = False) -> list[Text]:
    lines = [Text(f'SBOM: {metadata.format} {metadata.spec_version}', style=style('primary'))]

    if metadata.timestamp is not None:
        lines.append(
            Text(
                f'Generated: {metadata.timestamp.strftime(TIME_FORMAT)} '
                f'({relative_time(metadata.timestamp)})',
                style=style('label'),
            ),
        )
    if metadata.serial_number:
        lines.append(Text(f'Serial: {truncate(metadata.serial_number, 50)}', style=style('label')))

    if verbose:
        if metadata.supplier:
            lines.append(Text.assemble('Supplier: ', (metadata.supplier, style('supplier'))))
        if metadata.authors:
            lines.append(Text.assemble('Authors: ', (', '.join(metadata.authors), style('info'))))
        if metadata.manufacturer:
            lines.append(Text.assemble('Manufacturer: ', (metadata.manufacturer, style('supplier'))))

    if metadata.tools:
        names = []
        for tool in metadata.tools:
            name = f'{tool.name} {tool.version}' if tool.version else tool.name
            if verbose and tool.vendor:
                name = f'{tool.vendor}/{name}'
            names.append(name)
        lines.append(Text(f"Tools: {', '.join(names)}", style=style('label')))

    if verbose and metadata.licenses:
        line = Text('Licenses: ')
        for i, lic in enumerate(metadata.licenses):
            if i:
                line.append(', ')
            line.append_text(license_text(lic))
        lines.append(line)

    return lines


def statistics_lines(stats: Statistics) -> list[Text]:
    def value(label: str, number: int, name: str = 'info') -> Text:
        return Text.assemble(f'  {label}: ', (str(number), style(name)))

    lines = [
        Text('Statistics:', style=style('name')),
        value('Total Components', stats.total_components),
        value('Total Dependencies', stats.total_dependencies),
        value('Max Depth', stats.max_depth),
    ]
    if stats.total_annotations:
        lines.append(value('Total Annotations', stats.total_annotations))
    if stats.total_compositions:
        lines.append(value('Total Compositions', stats.total_compositions))

    lines.append(Text('  ') + vulnerability_summary(stats.total_vulnerabilities))

    if stats.components_by_type:
        lines.append(Text('  Components by type:'))
        for comp_type, count in stats.components_by_type.items():
            lines.append(
                Text.assemble('    ', (comp_type or 'unknown', style('label')), ': ', (str(count), style('info'))),
            )
    if stats.island_count:
        lines.append(value('Islands', stats.island_count, 'island'))
    return lines
