#!/usr/bin/env python3
import argparse
import json
import logging
import os
import re
import sys
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union

try:
    from bs4 import BeautifulSoup
    from bs4.builder import ParserRejectedMarkup
    import pandas as pd
except ImportError:
    print("═" * 60)
    print("  ERROR: Required packages not installed.")
    print("═" * 60)
    print("  Run: pip install beautifulsoup4 lxml pandas")
    print("═" * 60)
    sys.exit(1)

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass(frozen=True)
class ReportMeta:
    """Report header information."""
    site: Optional[str] = None
    generated_on: Optional[str] = None
    scanner_version: Optional[str] = None


@dataclass(frozen=True)
class SummaryCounts:
    """Alert tallies per risk level. None means the report did not say."""
    total: Optional[int] = None
    high: Optional[int] = None
    medium: Optional[int] = None
    low: Optional[int] = None
    informational: Optional[int] = None
    false_positives: Optional[int] = None


@dataclass(frozen=True)
class SequenceStep:
    step: Optional[str] = None
    result: Optional[str] = None
    risk: Optional[str] = None


@dataclass(frozen=True)
class Instance:
    """One request/response pair that triggered an alert."""
    url: Optional[str] = None
    method: Optional[str] = None
    parameter: Optional[str] = None
    attack: Optional[str] = None
    evidence: Optional[str] = None
    other_info: Optional[str] = None


@dataclass(frozen=True)
class AlertItem:
    """Alert type with its instances."""
    id: Optional[str] = None
    name: Optional[str] = None
    risk: Optional[str] = None
    confidence: Optional[str] = None
    count: Optional[int] = None
    cwe: Optional[str] = None
    wasc: Optional[str] = None
    description: Optional[str] = None
    solution: Optional[str] = None
    attack: Optional[str] = None
    other_info: Optional[str] = None
    references: Tuple[str, ...] = ()
    instances: Tuple[Instance, ...] = ()


@dataclass(frozen=True)
class Report:
    meta: ReportMeta = field(default_factory=ReportMeta)
    summary: SummaryCounts = field(default_factory=SummaryCounts)
    sequences: Tuple[SequenceStep, ...] = ()
    alerts: Tuple[AlertItem, ...] = ()


class InputError(ValueError):
    """Input could not be read or parsed as HTML."""


# ============================================================================
# LABEL TABLES
# ============================================================================

class FieldKind(Enum):
    URL = 'url'
    METHOD = 'method'
    PARAMETER = 'parameter'
    ATTACK = 'attack'
    EVIDENCE = 'evidence'
    OTHER_INFO = 'other_info'
    DESCRIPTION = 'description'
    SOLUTION = 'solution'
    REFERENCES = 'references'
    CWE = 'cwe'
    WASC = 'wasc'
    CONFIDENCE = 'confidence'
    RISK = 'risk'


@dataclass(frozen=True)
class LabelRule:
    """Maps label keywords to a field. Exact rules must equal the whole label."""
    kind: FieldKind
    keywords: Tuple[str, ...]
    exact: bool = False


# Order matters: first matching rule wins.
DETAIL_LABEL_RULES: Tuple[LabelRule, ...] = (
    LabelRule(FieldKind.URL, ('url', '網址'), exact=True),
    LabelRule(FieldKind.METHOD, ('method', '方法')),
    LabelRule(FieldKind.PARAMETER, ('parameter', '參數')),
    LabelRule(FieldKind.ATTACK, ('attack', '攻擊')),
    LabelRule(FieldKind.EVIDENCE, ('evidence', '證據')),
    LabelRule(FieldKind.OTHER_INFO, ('other info', '其他資訊')),
    LabelRule(FieldKind.DESCRIPTION, ('description', '描述')),
    LabelRule(FieldKind.SOLUTION, ('solution', '解決方案', '建議')),
    LabelRule(FieldKind.REFERENCES, ('reference', '參考')),
    LabelRule(FieldKind.CWE, ('cwe',)),
    LabelRule(FieldKind.WASC, ('wasc',)),
    LabelRule(FieldKind.CONFIDENCE, ('confidence', '信心')),
    LabelRule(FieldKind.RISK, ('risk', '風險')),
)

# (SummaryCounts field, keywords); "informational" must be tested before "total"
# because "Number of Informational alerts" also contains "alerts".
SUMMARY_BUCKETS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('high', ('high',)),
    ('medium', ('medium',)),
    ('low', ('low',)),
    ('informational', ('informational', 'info')),
    ('false_positives', ('false',)),
    ('total', ('number of alerts', 'alerts', 'total')),
)

META_LABELS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('site', ('site:', '網站:', '網站：')),
    ('generated_on', ('generated on', '產生於', '生成時間')),
    ('scanner_version', ('scanner version', 'zap version', 'zap 版本', '掃描器版本')),
)

INSTANCE_FIELDS = {
    FieldKind.URL: 'url',
    FieldKind.METHOD: 'method',
    FieldKind.PARAMETER: 'parameter',
    FieldKind.ATTACK: 'attack',
    FieldKind.EVIDENCE: 'evidence',
    FieldKind.OTHER_INFO: 'other_info',
}

# Fields that never open an implicit instance and fall back to the alert.
ALERT_FALLBACK_KINDS = (FieldKind.ATTACK, FieldKind.OTHER_INFO)

ITEM_KINDS = (FieldKind.SOLUTION, FieldKind.CWE, FieldKind.WASC,
              FieldKind.CONFIDENCE, FieldKind.RISK)

HEADING_TAGS = ['h1', 'h2', 'h3', 'h4']
META_TAGS = HEADING_TAGS + ['p', 'div', 'span', 'td']
SUMMARY_TEXT_TAGS = ['p', 'li', 'div', 'span']
COLON_CHARS = ':：'


@dataclass(frozen=True)
class ExtractorConfig:
    """Synonym tables used by ReportExtractor."""
    detail_labels: Tuple[LabelRule, ...] = DETAIL_LABEL_RULES
    summary_buckets: Tuple[Tuple[str, Tuple[str, ...]], ...] = SUMMARY_BUCKETS
    meta_labels: Tuple[Tuple[str, Tuple[str, ...]], ...] = META_LABELS
    alerts_table_class: str = 'alerts'
    summary_heading: str = 'summary of alerts'
    sequences_heading: str = 'summary of sequences'


def normalize_label(text: str) -> str:
    """Lowercase, collapse spaces and drop trailing colons."""
    label = clean(text).lower()
    label = re.sub(r'\s+', ' ', label)
    return label.rstrip(COLON_CHARS).strip()


def classify_label(text: str, rules: Iterable[LabelRule] = DETAIL_LABEL_RULES) -> Optional[FieldKind]:
    """Return the field a detail-row label refers to, or None."""
    label = normalize_label(text)
    if not label:
        return None
    for rule in rules:
        if rule.exact:
            if label in rule.keywords:
                return rule.kind
        elif any(keyword in label for keyword in rule.keywords):
            return rule.kind
    return None


def classify_summary_label(text: str, buckets=SUMMARY_BUCKETS) -> Optional[str]:
    """Return the SummaryCounts field a summary label counts, or None."""
    label = normalize_label(text)
    for name, keywords in buckets:
        if any(keyword in label for keyword in keywords):
            return name
    return None


# ============================================================================
# TEXT HELPERS
# ============================================================================

def clean(text: Optional[str]) -> str:
    if text is None:
        return ''
    return text.replace('\xa0', ' ').strip()


def parse_int(text: Optional[str]) -> Optional[int]:
    """Keep the digits of *text*; None when there are none."""
    digits = re.sub(r'[^0-9]', '', text or '')
    return int(digits) if digits else None


def first_non_empty(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value is not None and value.strip():
            return value
    return None


def _set_first(fields: Dict, key: str, value: Optional[str]):
    """Store *value* unless the field already holds a non-empty value."""
    fields[key] = first_non_empty(fields.get(key), value)


def _inline_text(elem) -> str:
    return clean(elem.get_text(' ', strip=True))


def _block_text(elem) -> str:
    """Extract text from element keeping line breaks, without modifying the original."""
    elem_copy = BeautifulSoup(str(elem), 'lxml')
    for br in elem_copy.find_all('br'):
        br.replace_with('\n')
    for block in elem_copy.find_all(['p', 'div', 'li']):
        block.append('\n')
    lines = [clean(line) for line in elem_copy.get_text().split('\n')]
    return '\n'.join(line for line in lines if line)


def _cells(row) -> List:
    return row.find_all(['th', 'td'], recursive=False) or row.find_all(['th', 'td'])


def _closest(elem, name: str):
    """The element itself when it is a *name* tag, else its nearest *name* ancestor."""
    if elem is None:
        return None
    if elem.name == name:
        return elem
    return elem.find_parent(name)


def _is_inside(elem, container) -> bool:
    return container is not None and any(parent is container for parent in elem.parents)


def sanitize_filename(site: Optional[str]) -> str:
    """Turn a site URL into a safe file name stem."""
    if site is None or not site.strip():
        return 'ZAP_output'
    name = re.sub(r'(?i)^https?://', '', site.strip())
    if name.endswith('/'):
        name = name[:-1]
    return re.sub(r'[^a-zA-Z0-9.\-_]', '_', name)


# ============================================================================
# INPUT
# ============================================================================

def parse_document(markup: Union[str, bytes]) -> BeautifulSoup:
    """Parse HTML markup (UTF-8 when given as bytes) into a document tree.

    Empty or whitespace-only input raises InputError, the same as an empty
    report file. Markup that parses to an empty document is accepted.
    """
    if not isinstance(markup, (str, bytes)):
        raise InputError(f"Unsupported input type: {type(markup).__name__}")
    if not markup.strip():
        raise InputError("Input is empty")
    try:
        if isinstance(markup, bytes):
            return BeautifulSoup(markup, 'lxml', from_encoding='utf-8')
        return BeautifulSoup(markup, 'lxml')
    except ParserRejectedMarkup as e:
        raise InputError(f"Input is not parseable as HTML: {e}") from e


def load_document(path: str) -> BeautifulSoup:
    """Read and parse an HTML report from disk."""
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise InputError(f"Cannot read {path}: {e}") from e
    logger.info(f"Read {len(data) / 1024:.1f} KB from {path}")
    return parse_document(data)


# ============================================================================
# HTML PARSER
# ============================================================================

class _InstanceScanner:
    """Row accumulator with two states: no open instance, or one open instance.

    A url row always opens a fresh instance, flushing the previous one.
    """

    def __init__(self):
        self.instances: List[Instance] = []
        self.current: Optional[Dict[str, Optional[str]]] = None

    @property
    def is_open(self) -> bool:
        return self.current is not None

    def start(self, url: Optional[str]):
        self.flush()
        self.current = {'url': url or None}

    def set(self, name: str, value: Optional[str]):
        if self.current is None:
            self.current = {}
        _set_first(self.current, name, value)

    def flush(self):
        if self.current is not None:
            self.instances.append(Instance(**self.current))
            self.current = None


class ReportExtractor:
    """Parses ZAP HTML reports into a Report.

    Every step is best-effort: anything not found is left unset.
    """

    def __init__(self, config: Optional[ExtractorConfig] = None):
        self.config = config or ExtractorConfig()

    def extract(self, soup: BeautifulSoup) -> Report:
        """Parse the complete HTML report."""
        logger.info("Parsing ZAP HTML report...")
        report = Report(
            meta=self._extract_meta(soup),
            summary=self._extract_summary(soup),
            sequences=tuple(self._extract_sequences(soup)),
            alerts=tuple(self._extract_alerts(soup)),
        )
        total_instances = sum(len(a.instances) for a in report.alerts)
        logger.info(f"Parsed {len(report.alerts)} alerts, {total_instances} instances")
        return report

    # ------------------------------------------------------------------ meta

    def _extract_meta(self, soup) -> ReportMeta:
        elements = soup.find_all(META_TAGS)
        values = {}
        for name, keywords in self.config.meta_labels:
            values[name] = self._find_labelled_value(elements, keywords)
            if values[name] is None:
                logger.debug(f"Report meta field not found: {name}")
        return ReportMeta(**values)

    @staticmethod
    def _value_after(elem, keyword: str) -> Optional[str]:
        text = clean(elem.get_text(' ', strip=True))
        match = re.search(r'(?<!\w)' + re.escape(keyword), text, re.IGNORECASE)
        if not match:
            return None
        value = text[match.end():].strip()
        if value[:1] and value[0] in COLON_CHARS:
            value = value[1:].strip()
        return value or None

    def _find_labelled_value(self, elements, keywords) -> Optional[str]:
        for elem in elements:
            for keyword in keywords:
                value = self._value_after(elem, keyword)
                if value is None:
                    continue
                # Outer containers repeat the label; the innermost element holding a value wins.
                if any(self._value_after(d, keyword) for d in elem.find_all(META_TAGS)):
                    continue
                return value
        return None

    # --------------------------------------------------------------- summary

    @staticmethod
    def _find_heading(soup, text: str, exact: bool = True):
        for heading in soup.find_all(HEADING_TAGS):
            label = normalize_label(heading.get_text(' ', strip=True))
            if label == text or (not exact and label.startswith(text)):
                return heading
        return None

    @staticmethod
    def _section_elements(heading, names: List[str]):
        """Elements after *heading*, inside its container, up to the next heading."""
        container = heading.parent
        for elem in heading.find_all_next(HEADING_TAGS + names):
            if elem.name in HEADING_TAGS or not _is_inside(elem, container):
                return
            yield elem

    def _table_after(self, heading):
        return next(self._section_elements(heading, ['table']), None)

    def _extract_summary(self, soup) -> SummaryCounts:
        heading = self._find_heading(soup, self.config.summary_heading)
        if heading is None:
            logger.debug("No 'Summary of Alerts' heading found")
            return SummaryCounts()

        counts: Dict[str, int] = {}
        table = self._table_after(heading)
        if table is not None:
            for row in table.find_all('tr'):
                cells = _cells(row)
                if len(cells) >= 2:
                    self._fill_summary(counts, _inline_text(cells[0]), _inline_text(cells[-1]))
        else:
            for elem in self._section_elements(heading, SUMMARY_TEXT_TAGS):
                # Wrappers join their children's lines; read the innermost blocks only.
                if any(self._summary_pairs(d) for d in elem.find_all(SUMMARY_TEXT_TAGS)):
                    continue
                for label, value in self._summary_pairs(elem):
                    self._fill_summary(counts, label, value)
        return SummaryCounts(**counts)

    @staticmethod
    def _summary_pairs(elem) -> List[Tuple[str, str]]:
        """Label/value pairs split on semicolons; values holding letters are dropped."""
        pairs = []
        for part in _inline_text(elem).split(';'):
            pair = re.split('[:：]', part, maxsplit=1)
            if len(pair) == 2 and not re.search(r'[^\W\d_]', pair[1]):
                pairs.append((pair[0], pair[1]))
        return pairs

    def _fill_summary(self, counts: Dict[str, int], label: str, value: str):
        number = parse_int(value)
        if number is None:
            return
        bucket = classify_summary_label(label, self.config.summary_buckets)
        if bucket is not None and bucket not in counts:
            counts[bucket] = number

    # ------------------------------------------------------------- sequences

    def _extract_sequences(self, soup) -> List[SequenceStep]:
        heading = self._find_heading(soup, self.config.sequences_heading, exact=False)
        if heading is None:
            return []
        table = self._table_after(heading)
        if table is None:
            return []

        rows = table.find_all('tr')
        if not rows:
            return []
        columns = {}
        for idx, cell in enumerate(_cells(rows[0])):
            header = _inline_text(cell).lower()
            for name in ('step', 'result', 'risk'):
                if name in header:
                    columns[idx] = name
                    break

        steps = []
        for row in rows[1:]:
            cells = row.find_all('td')
            values = {}
            for idx, name in columns.items():
                if idx < len(cells):
                    values[name] = _inline_text(cells[idx]) or None
            if any(values.values()):
                steps.append(SequenceStep(**values))
        return steps

    # ---------------------------------------------------------------- alerts

    def _extract_alerts(self, soup) -> List[AlertItem]:
        """Enumerate alerts, then fill each from its detail block."""
        alerts_table = soup.select_one(f'table[class*="{self.config.alerts_table_class}"]')
        if alerts_table is not None:
            items = self._enumerate_from_table(alerts_table)
        else:
            logger.debug("No alerts table found, falling back to in-page links")
            items = self._enumerate_from_links(soup)

        alerts = []
        total = len(items)
        for idx, item in enumerate(items):
            if idx % 10 == 0:
                logger.info(f"Processing alert {idx + 1}/{total}...")
            alerts.append(self._hydrate(soup, item, alerts_table))
        return alerts

    def _enumerate_from_table(self, table) -> List[Dict]:
        rows = table.find_all('tr')
        columns = {}
        if rows and not rows[0].find('td'):
            for idx, cell in enumerate(_cells(rows[0])):
                header = _inline_text(cell).lower()
                if 'risk' in header:
                    columns.setdefault('risk', idx)
                elif 'confidence' in header:
                    columns.setdefault('confidence', idx)
                elif any(k in header for k in ('instance', 'number', 'count')):
                    columns.setdefault('count', idx)
        else:
            columns = {'risk': 1, 'count': 2}

        items = []
        for row in rows:
            cells = row.find_all('td')
            if not cells:
                continue
            name_cell = cells[0]
            item: Dict = {}
            link = name_cell.find('a', href=True)
            if link is not None:
                href = link['href'].strip()
                if href.startswith('#') and len(href) > 1:
                    item['id'] = href[1:]
                item['name'] = _inline_text(link) or None
            else:
                item['name'] = _inline_text(name_cell) or None

            for name in ('risk', 'confidence'):
                idx = columns.get(name)
                if idx is not None and idx < len(cells):
                    item[name] = _inline_text(cells[idx]) or None
            idx = columns.get('count')
            if idx is not None and idx < len(cells):
                item['count'] = parse_int(_inline_text(cells[idx]))
            items.append(item)
        return items

    @staticmethod
    def _enumerate_from_links(soup) -> List[Dict]:
        items = []
        for link in soup.find_all('a', href=True):
            href = link['href'].strip()
            text = _inline_text(link)
            if not href.startswith('#') or not re.search(r'[A-Za-z]', text):
                continue
            items.append({'id': href[1:] or None, 'name': text})
        return items

    def _hydrate(self, soup, item: Dict, alerts_table) -> AlertItem:
        item_id = item.get('id')
        block = None
        if item_id:
            block = self._detail_block_by_id(soup, item_id)
        elif item.get('name'):
            block = self._detail_block_by_name(soup, item['name'], alerts_table)

        if block is None:
            logger.debug(f"No detail block for alert {item.get('name')!r}")
            item['references'] = ()
            item['instances'] = ()
        else:
            self._parse_detail_block(block, item)

        if item.get('count') is None:
            item['count'] = len(item['instances'])
        return AlertItem(**item)

    def _detail_block_by_id(self, soup, item_id: str) -> Optional[List]:
        anchor = (soup.find('a', id=item_id)
                  or soup.find(id=item_id)
                  or soup.find('a', attrs={'name': item_id}))
        if anchor is None:
            return None

        header_row = _closest(anchor, 'tr')
        if header_row is not None:
            table = _closest(header_row, 'table')
        else:
            # Anchor outside any row: read the table that follows it.
            table = _closest(anchor, 'table') or anchor.find_next('table')
        if table is None:
            return None
        return self._rows_after(table, header_row, item_id)

    def _detail_block_by_name(self, soup, name: str, alerts_table) -> Optional[List]:
        needle = name.lower()
        for elem in soup.find_all(['th', 'td', 'h2', 'h3', 'h4']):
            if alerts_table is not None and _is_inside(elem, alerts_table):
                continue
            if needle not in _inline_text(elem).lower():
                continue
            row = _closest(elem, 'tr')
            table = _closest(row, 'table') if row is not None else None
            if table is not None:
                return self._rows_after(table, row, None)
        return None

    @staticmethod
    def _row_identifiers(row) -> List[str]:
        ths = row.find_all('th')
        if not ths or not any(_inline_text(th) or th.find('a') for th in ths):
            return []
        ids = [row.get('id')]
        for th in ths:
            ids.append(th.get('id'))
            for a in th.find_all('a'):
                ids.extend([a.get('id'), a.get('name')])
        return [i for i in ids if i]

    def _rows_after(self, table, header_row, item_id: Optional[str]) -> List:
        """Rows following *header_row* up to the next alert header row."""
        rows = table.find_all('tr')
        start = 0
        if header_row is not None:
            for idx, row in enumerate(rows):
                if row is header_row:
                    start = idx + 1
                    break
        block = []
        for row in rows[start:]:
            ids = self._row_identifiers(row)
            if ids and item_id not in ids:
                break
            block.append(row)
        return block

    def _parse_detail_block(self, rows: List, item: Dict):
        rules = self.config.detail_labels
        labelled = []
        for row in rows:
            cells = _cells(row)
            if len(cells) < 2:
                continue
            kind = classify_label(_inline_text(cells[0]), rules)
            if kind is not None:
                labelled.append((kind, cells[1]))

        for kind, cell in labelled:
            if kind is FieldKind.DESCRIPTION:
                _set_first(item, 'description', _block_text(cell))
                if item.get('description'):
                    break

        references: List[str] = []
        scanner = _InstanceScanner()
        for kind, cell in labelled:
            if kind is FieldKind.URL:
                link = cell.find('a', href=True)
                scanner.start(clean(link['href']) if link is not None else _inline_text(cell))
            elif kind in ALERT_FALLBACK_KINDS:
                value = _block_text(cell) if kind is FieldKind.OTHER_INFO else _inline_text(cell)
                if scanner.is_open:
                    scanner.set(INSTANCE_FIELDS[kind], value)
                else:
                    _set_first(item, kind.value, value)
            elif kind in INSTANCE_FIELDS:
                scanner.set(INSTANCE_FIELDS[kind], _inline_text(cell))
            elif kind is FieldKind.SOLUTION:
                _set_first(item, 'solution', _block_text(cell))
            elif kind is FieldKind.REFERENCES:
                references.extend(r.strip() for r in re.split(r'[;,\n]', _block_text(cell)) if r.strip())
            elif kind in ITEM_KINDS:
                _set_first(item, kind.value, _inline_text(cell))
        scanner.flush()

        item['references'] = tuple(references)
        item['instances'] = tuple(scanner.instances)


def extract_file(path: str, config: Optional[ExtractorConfig] = None) -> Report:
    """Read, parse and extract one report file."""
    return ReportExtractor(config).extract(load_document(path))


# ============================================================================
# FILTERING AND VALIDATION
# ============================================================================

RISK_ALIASES = {'info': 'informational', 'critical': 'high'}
RISK_LEVELS = ('high', 'medium', 'low', 'informational')


def _risk_level(risk: Optional[str]) -> Optional[str]:
    text = clean(risk).lower()
    for level in RISK_LEVELS:
        if text.startswith(level):
            return level
    return None


def filter_by_risk(report: Report, risks: Iterable[str]) -> Report:
    """Return a new Report keeping only alerts whose risk is in *risks*."""
    wanted = set()
    for risk in risks:
        risk = risk.strip().lower()
        if risk:
            wanted.add(RISK_ALIASES.get(risk, risk))
    return replace(report, alerts=tuple(a for a in report.alerts if _risk_level(a.risk) in wanted))


def validate_report(report: Report) -> List[str]:
    """Best-effort consistency checks. Returns a list of warnings."""
    issues = []
    summary = report.summary

    if summary.total is not None and summary.total != len(report.alerts):
        issues.append(f"Summary reports {summary.total} alerts, extracted {len(report.alerts)}")

    per_risk = {level: 0 for level in RISK_LEVELS}
    for alert in report.alerts:
        level = _risk_level(alert.risk)
        if level is not None:
            per_risk[level] += 1
    for level in RISK_LEVELS:
        declared = getattr(summary, level)
        if declared is not None and declared != per_risk[level]:
            issues.append(f"Summary reports {declared} {level} alerts, extracted {per_risk[level]}")

    for alert in report.alerts:
        if alert.instances and alert.count is not None and alert.count != len(alert.instances):
            issues.append(f"Alert {alert.name!r}: declared {alert.count} instances, "
                          f"extracted {len(alert.instances)}")
        if not alert.instances and not alert.description:
            issues.append(f"Alert {alert.name!r}: no detail block found")
    return issues


# ============================================================================
# OUTPUT
# ============================================================================

CSV_COLUMNS = ['name', 'risk', 'confidence', 'cwe', 'wasc', 'instances_count', 'first_url']


def _camel(key: str) -> str:
    return re.sub(r'_([a-z])', lambda m: m.group(1).upper(), key)


def _camelize(value):
    if isinstance(value, dict):
        return {_camel(k): _camelize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_camelize(v) for v in value]
    return value


def report_to_dict(report: Report) -> Dict:
    """Plain dict with camelCase keys, ready for JSON."""
    return _camelize(asdict(report))


def report_to_json(report: Report, indent: Optional[int] = 2) -> str:
    return json.dumps(report_to_dict(report), ensure_ascii=False, indent=indent)


def report_to_csv(report: Report) -> str:
    """One summary row per alert."""
    rows = []
    for alert in report.alerts:
        rows.append({
            'name': alert.name,
            'risk': alert.risk,
            'confidence': alert.confidence,
            'cwe': alert.cwe,
            'wasc': alert.wasc,
            'instances_count': alert.count if alert.count is not None else len(alert.instances),
            'first_url': alert.instances[0].url if alert.instances else None,
        })
    df = pd.DataFrame(rows, columns=CSV_COLUMNS)
    return df.to_csv(index=False, lineterminator='\n')


def write_report(report: Report, output_path: str, fmt: str = 'json', indent: Optional[int] = 2):
    content = report_to_csv(report) if fmt == 'csv' else report_to_json(report, indent=indent)
    with open(output_path, 'w', encoding='utf-8', newline='') as f:
        f.write(content)


# ============================================================================
# MAIN
# ============================================================================

def _output_path(args, report: Report) -> str:
    ext = '.' + args.format
    if args.output:
        return args.output
    if args.output_dir:
        os.makedirs(args.output_dir, exist_ok=True)
        return os.path.join(args.output_dir, sanitize_filename(report.meta.site) + ext)
    return os.path.splitext(args.input_file)[0] + ext


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='ZAP HTML report to JSON/CSV converter',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
EXAMPLES:
  %(prog)s report.html
      Convert to report.json next to the input

  %(prog)s report.html -f csv -o alerts.csv
      One CSV row per alert

  %(prog)s report.html --output-dir JSON
      Write JSON/<site>.json, named after the scanned site

  %(prog)s report.html -r high,medium --validate
      Keep High and Medium alerts and check the report for inconsistencies
"""
    )

    parser.add_argument('input_file', help='Input ZAP HTML report')
    parser.add_argument('-o', '--output', help='Output file')
    parser.add_argument('--output-dir', help='Output folder; file name is derived from the report site')
    parser.add_argument('-f', '--format', choices=['json', 'csv'], default='json', help='Output format (default: json)')
    parser.add_argument('--compact', action='store_true', help='Do not indent JSON output')
    parser.add_argument('--risk', '-r',
                        help='Comma-separated risk levels to include (e.g., high,medium). '
                             'Options: high, medium, low, info. Default: all levels')
    parser.add_argument('--validate', action='store_true', help='Report inconsistencies found in the extracted data')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not os.path.exists(args.input_file):
        logger.error(f"File not found: {args.input_file}")
        sys.exit(1)

    logger.info(f"Reading: {args.input_file}")
    try:
        report = extract_file(args.input_file)
    except InputError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    if args.risk:
        risks = [r.strip() for r in args.risk.split(',')]
        logger.info(f"Risk filter: {risks}")
        report = filter_by_risk(report, risks)

    output_path = _output_path(args, report)
    write_report(report, output_path, fmt=args.format, indent=None if args.compact else 2)

    total_instances = sum(len(a.instances) for a in report.alerts)
    print(f"\n{'='*60}")
    print(f"  CONVERSION COMPLETE")
    print(f"{'='*60}")
    print(f"  Output: {output_path}")
    print(f"  Site  : {report.meta.site or '-'}")
    print(f"")
    print(f"  Alerts          : {len(report.alerts)}")
    print(f"  Total Instances : {total_instances}")
    for label, value in (('High', report.summary.high), ('Medium', report.summary.medium),
                         ('Low', report.summary.low), ('Informational', report.summary.informational)):
        print(f"  {label:<16}: {value if value is not None else '-'}")
    print(f"{'='*60}")

    if args.validate:
        issues = validate_report(report)
        for issue in issues:
            logger.warning(issue)
        if issues:
            print(f"  VALIDATION: PASSED WITH WARNINGS ({len(issues)})")
        else:
            print(f"  VALIDATION: PASSED - All checks successful")

    return 0


if __name__ == '__main__':
    main()
