"""Tests for ingest pipeline ID derivation."""

from fileset.pipeline import format_pipeline_id, remove_ext


def test_remove_ext_last_dot_only():
    assert remove_ext("a.b.c") == "a.b"


def test_remove_ext_without_dot():
    assert remove_ext("noext") == "noext"


def test_remove_ext_hidden_file():
    assert remove_ext(".hidden") == ""


def test_remove_ext_stops_at_separator():
    assert remove_ext("dir.d/file") == "dir.d/file"
    assert remove_ext("dir.d/file.json") == "dir.d/file"


def test_format_pipeline_id():
    assert format_pipeline_id("nginx", "access", "access.json") == "nginx-access-access"


def test_format_pipeline_id_uses_basename():
    assert format_pipeline_id("nginx", "access", "ingest/default.json") == "nginx-access-default"
    assert format_pipeline_id("syslog", "system", "ingest/pipeline") == "syslog-system-pipeline"
