"""Shared fixtures: an on-disk modules directory with an nginx module."""

from pathlib import Path

import pytest


ACCESS_MANIFEST = """
module_version: "1.0"

var:
  - name: paths
    default:
      - /var/log/nginx/access.log*
    os:
      darwin:
        - /usr/local/var/log/nginx/access.log*
      windows:
        - c:/programdata/nginx/logs/*access.log*
  - name: pipeline
    default: default
  - name: tag
    default: "{{.builtin.hostname}}-access"

ingest_pipeline: ingest/{{.pipeline}}.json
prospector: config/nginx-access.yml
"""

ACCESS_PROSPECTOR = """
type: log
paths:
{{ range $i, $path := .paths }}
 - {{$path}}
{{ end }}
exclude_files: [".gz$"]
fields:
  source_host: {{.builtin.hostname}}
  tag: {{.tag}}
pipeline: {{.beat.pipeline_id}}
"""

ACCESS_PIPELINE = """
{
  "description": "Pipeline for nginx access logs from {{.builtin.hostname}}",
  "processors": [
    {"grok": {"field": "message", "patterns": ["%{IPORHOST:remote_ip} %{DATA:user_name}"]}}
  ]
}
"""

ERROR_MANIFEST = """
module_version: "1.0"
var:
  - name: paths
    default: ["/var/log/nginx/error.log*"]
ingest_pipeline: ingest/pipeline.json
prospector: config/nginx-error.yml
"""


def write_file(path: Path, content: str) -> Path:
    """Helper to write a file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def modules_path(tmp_path):
    """Create a modules root holding nginx/access and nginx/error."""
    root = tmp_path / "module"
    access = root / "nginx" / "access"
    write_file(access / "manifest.yml", ACCESS_MANIFEST)
    write_file(access / "config" / "nginx-access.yml", ACCESS_PROSPECTOR)
    write_file(access / "ingest" / "default.json", ACCESS_PIPELINE)

    error = root / "nginx" / "error"
    write_file(error / "manifest.yml", ERROR_MANIFEST)
    write_file(error / "config" / "nginx-error.yml", "type: log\npaths: {{.paths}}\n")
    write_file(error / "ingest" / "pipeline.json", '{"processors": []}')

    # Not a fileset: no manifest
    (root / "nginx" / "_meta").mkdir()

    return root


@pytest.fixture
def hostname_provider():
    """Deterministic host name for the builtin variables."""
    return lambda: "web1.example.com"
