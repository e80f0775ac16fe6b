"""
Shared fixtures: small ZAP-style HTML reports.
"""

import pytest

from zap_to_json import ReportExtractor, parse_document


ZAP_REPORT = """
<html>
<head><title>ZAP Scanning Report</title></head>
<body>
<h1>ZAP Scanning Report</h1>
<h2>Site: http://testphp.example.com</h2>
<p>Generated on Tue, 14 Nov 2023 14:31:14</p>
<p>ZAP Version: 2.14.0</p>

<h3>Summary of Alerts</h3>
<table class="summary">
  <tr><th>Risk Level</th><th>Number of Alerts</th></tr>
  <tr><td>High</td><td>2</td></tr>
</table>

<h3>Alerts</h3>
<table class="alerts">
  <tr><th>Name</th><th>Risk Level</th><th>Number of Instances</th></tr>
  <tr><td><a href="#a1">SQL Injection</a></td><td>High</td><td>2</td></tr>
</table>

<h3>Alert Detail</h3>
<table class="results">
  <tr><th id="a1">High</th><th>SQL Injection</th></tr>
  <tr><td>Description</td><td><div>SQL injection may be possible.</div></td></tr>
  <tr><td>URL:</td><td><a href="http://testphp.example.com/a?id=1">http://testphp.example.com/a?id=1</a></td></tr>
  <tr><td>Parameter:</td><td>id</td></tr>
  <tr><td>URL:</td><td>http://testphp.example.com/b?q=2</td></tr>
  <tr><td>Parameter:</td><td>q</td></tr>
  <tr><td>Solution</td><td>Use prepared statements.</td></tr>
  <tr><td>Reference</td><td>https://owasp.org/a; https://cwe.mitre.org/b</td></tr>
  <tr><td>CWE Id</td><td>89</td></tr>
  <tr><td>WASC Id</td><td>19</td></tr>
</table>
</body>
</html>
"""


@pytest.fixture
def zap_html():
    return ZAP_REPORT


@pytest.fixture
def extract():
    """Parse markup and run the extractor on it."""
    def _extract(markup):
        return ReportExtractor().extract(parse_document(markup))
    return _extract


@pytest.fixture
def report_file(tmp_path, zap_html):
    path = tmp_path / "report.html"
    path.write_text(zap_html, encoding="utf-8")
    return path
