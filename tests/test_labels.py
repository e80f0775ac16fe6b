"""
Tests for label classification tables.
"""

import pytest

from zap_to_json import (
    DETAIL_LABEL_RULES,
    ExtractorConfig,
    FieldKind,
    LabelRule,
    classify_label,
    classify_summary_label,
    normalize_label,
)


class TestClassifyLabel:
    """Test detail-row label resolution."""

    @pytest.mark.parametrize("label, kind", [
        ("URL", FieldKind.URL),
        ("URL:", FieldKind.URL),
        ("網址", FieldKind.URL),
        ("Method", FieldKind.METHOD),
        ("方法", FieldKind.METHOD),
        ("Parameter", FieldKind.PARAMETER),
        ("參數：", FieldKind.PARAMETER),
        ("Attack", FieldKind.ATTACK),
        ("攻擊", FieldKind.ATTACK),
        ("Evidence", FieldKind.EVIDENCE),
        ("證據", FieldKind.EVIDENCE),
        ("Other Info", FieldKind.OTHER_INFO),
        ("Other Information", FieldKind.OTHER_INFO),
        ("其他資訊", FieldKind.OTHER_INFO),
        ("Description", FieldKind.DESCRIPTION),
        ("描述", FieldKind.DESCRIPTION),
        ("Solution", FieldKind.SOLUTION),
        ("解決方案", FieldKind.SOLUTION),
        ("建議", FieldKind.SOLUTION),
        ("Reference", FieldKind.REFERENCES),
        ("References", FieldKind.REFERENCES),
        ("參考", FieldKind.REFERENCES),
        ("CWE Id", FieldKind.CWE),
        ("WASC Id", FieldKind.WASC),
        ("Confidence", FieldKind.CONFIDENCE),
        ("Risk:", FieldKind.RISK),
        ("風險:", FieldKind.RISK),
    ])
    def test_known_labels(self, label, kind):
        """Test English and Chinese synonyms resolve to the same field."""
        assert classify_label(label) is kind

    @pytest.mark.parametrize("label", ["Plugin Id", "Instances", "", "   ", "Alert Tags"])
    def test_unknown_labels(self, label):
        """Test unrecognized labels are ignored."""
        assert classify_label(label) is None

    def test_url_requires_whole_label(self):
        """Test url only matches the complete label, not a substring."""
        assert classify_label("curl command") is None
        assert classify_label("  Url :") is FieldKind.URL

    def test_non_breaking_space(self):
        """Test labels padded with &nbsp; still match."""
        assert classify_label("\xa0Other\xa0Info\xa0") is FieldKind.OTHER_INFO

    def test_extended_rules(self):
        """Test callers can extend the synonym table."""
        config = ExtractorConfig(
            detail_labels=DETAIL_LABEL_RULES + (LabelRule(FieldKind.METHOD, ("verb",)),)
        )
        assert classify_label("HTTP Verb") is None
        assert classify_label("HTTP Verb", config.detail_labels) is FieldKind.METHOD


class TestClassifySummaryLabel:
    """Test summary bucket selection."""

    @pytest.mark.parametrize("label, bucket", [
        ("High", "high"),
        ("Medium", "medium"),
        ("Low", "low"),
        ("Informational", "informational"),
        ("Info", "informational"),
        ("False Positives:", "false_positives"),
        ("Total", "total"),
        ("Number of Alerts", "total"),
        ("Number of Informational alerts", "informational"),
    ])
    def test_buckets(self, label, bucket):
        """Test the first matching bucket wins."""
        assert classify_summary_label(label) == bucket

    def test_unknown(self):
        """Test labels outside every bucket."""
        assert classify_summary_label("Risk Level") is None


def test_normalize_label():
    """Test lowercasing, whitespace collapsing and colon stripping."""
    assert normalize_label("  Other   Info： ") == "other info"
    assert normalize_label("URL:") == "url"
