"""Tests for {{ .field }} template rendering."""

import pytest

from fileset.exceptions import TemplateError
from fileset.variables import TemplateRenderer, render_template


class TestTemplateRenderer:
    """Field substitution and strict error behavior."""

    def setup_method(self):
        """Set up test fixtures."""
        self.renderer = TemplateRenderer()
        self.variables = {
            'builtin': {'hostname': 'web1', 'domain': 'example.com'},
            'paths': ['/var/log/a.log', '/var/log/b.log'],
            'enabled': True,
            'port': 5044,
            'name': 'access',
        }

    def test_simple_field(self):
        assert self.renderer.render("{{.name}}", self.variables) == "access"

    def test_nested_field(self):
        result = self.renderer.render("{{.builtin.hostname}}.{{.builtin.domain}}", self.variables)
        assert result == "web1.example.com"

    def test_whitespace_inside_action(self):
        assert self.renderer.render("x-{{ .name }}-y", self.variables) == "x-access-y"

    def test_text_without_actions_is_unchanged(self):
        text = "/var/log/nginx/*.log } }} {"
        assert self.renderer.render(text, self.variables) == text

    def test_list_renders_as_json(self):
        result = self.renderer.render("paths: {{.paths}}", self.variables)
        assert result == 'paths: ["/var/log/a.log", "/var/log/b.log"]'

    def test_scalars(self):
        assert self.renderer.render("{{.enabled}}", self.variables) == "true"
        assert self.renderer.render("{{.port}}", self.variables) == "5044"

    def test_missing_field_is_an_error(self):
        with pytest.raises(TemplateError) as exc_info:
            self.renderer.render("{{.missing}}", self.variables)

        assert exc_info.value.undefined_vars == ['missing']
        assert exc_info.value.template == "{{.missing}}"

    def test_missing_nested_field_is_an_error(self):
        with pytest.raises(TemplateError) as exc_info:
            self.renderer.render("{{.builtin.fqdn}} {{.name.x}}", self.variables)

        assert exc_info.value.undefined_vars == ['builtin.fqdn', 'name.x']

    def test_unsupported_action_rejected(self):
        with pytest.raises(TemplateError) as exc_info:
            self.renderer.render("{{ len .paths }}", self.variables)

        assert "unsupported action" in str(exc_info.value)

    def test_pipe_rejected(self):
        with pytest.raises(TemplateError) as exc_info:
            self.renderer.render("{{ .name | printf }}", self.variables)

        assert "unsupported action" in str(exc_info.value)

    def test_unclosed_action_rejected(self):
        with pytest.raises(TemplateError) as exc_info:
            self.renderer.render("prefix {{ .name", self.variables)

        assert "unclosed action" in str(exc_info.value)

    def test_renderer_is_reusable_after_error(self):
        with pytest.raises(TemplateError):
            self.renderer.render("{{.missing}}", self.variables)

        assert self.renderer.render("{{.name}}", self.variables) == "access"


def test_render_template_helper():
    assert render_template("{{.a.b}}", {'a': {'b': 'c'}}) == "c"


class TestTemplateBlocks:
    """range/if blocks, $variables and trim markers."""

    def setup_method(self):
        """Set up test fixtures."""
        self.renderer = TemplateRenderer()
        self.variables = {
            'builtin': {'hostname': 'web1', 'domain': ''},
            'paths': ['/var/log/nginx/access.log*', '/var/log/nginx/other.log'],
            'servers': [{'host': 'a', 'port': 1}, {'host': 'b', 'port': 2}],
            'fields': {'b': 2, 'a': 1},
            'empty': [],
            'enabled': False,
        }

    def test_range_with_index_and_value(self):
        template = "paths:\n{{ range $i, $path := .paths }}\n - {{$path}}\n{{ end }}\n"
        result = self.renderer.render(template, self.variables)

        assert result == (
            "paths:\n"
            "\n - /var/log/nginx/access.log*\n"
            "\n - /var/log/nginx/other.log\n"
            "\n"
        )

    def test_range_with_trim_markers(self):
        template = "paths:\n{{- range .paths }}\n  - {{ . }}\n{{- end }}\nexclude_files: [\".gz$\"]\n"
        result = self.renderer.render(template, self.variables)

        assert result == (
            "paths:\n"
            "  - /var/log/nginx/access.log*\n"
            "  - /var/log/nginx/other.log\n"
            "exclude_files: [\".gz$\"]\n"
        )

    def test_range_rebinds_dot(self):
        template = "{{ range .servers }}{{ .host }}:{{ .port }},{{ end }}"
        assert self.renderer.render(template, self.variables) == "a:1,b:2,"

    def test_root_reachable_inside_range(self):
        template = "{{ range $p := .paths }}{{ $.builtin.hostname }}={{ $p }};{{ end }}"
        result = self.renderer.render(template, self.variables)
        assert result == "web1=/var/log/nginx/access.log*;web1=/var/log/nginx/other.log;"

    def test_range_over_mapping_in_key_order(self):
        template = "{{ range $k, $v := .fields }}{{ $k }}={{ $v }};{{ end }}"
        assert self.renderer.render(template, self.variables) == "a=1;b=2;"

    def test_range_else(self):
        template = "{{ range .empty }}x{{ else }}none{{ end }}"
        assert self.renderer.render(template, self.variables) == "none"

    def test_if_else(self):
        template = "{{ if .enabled }}on{{ else }}off{{ end }}/{{ if .paths }}set{{ end }}"
        assert self.renderer.render(template, self.variables) == "off/set"

    def test_comment_dropped(self):
        assert self.renderer.render("a{{/* note */}}b", self.variables) == "ab"

    def test_missing_field_inside_range(self):
        with pytest.raises(TemplateError) as exc_info:
            self.renderer.render("{{ range .servers }}{{ .user }}{{ end }}", self.variables)

        assert exc_info.value.undefined_vars == ['user']

    def test_missing_range_target(self):
        with pytest.raises(TemplateError) as exc_info:
            self.renderer.render("{{ range .nope }}x{{ end }}", self.variables)

        assert exc_info.value.undefined_vars == ['nope']

    def test_undefined_variable(self):
        with pytest.raises(TemplateError) as exc_info:
            self.renderer.render("{{ $path }}", self.variables)

        assert "undefined variable $path" in str(exc_info.value)

    def test_range_over_scalar(self):
        with pytest.raises(TemplateError) as exc_info:
            self.renderer.render("{{ range .builtin.hostname }}x{{ end }}", self.variables)

        assert "range can't iterate over" in str(exc_info.value)

    def test_missing_end(self):
        with pytest.raises(TemplateError) as exc_info:
            self.renderer.render("{{ range .paths }}x", self.variables)

        assert "unexpected EOF" in str(exc_info.value)

    def test_stray_end(self):
        with pytest.raises(TemplateError) as exc_info:
            self.renderer.render("x{{ end }}", self.variables)

        assert "unexpected {{end}}" in str(exc_info.value)
