"""
Template substitution implementation.
Handles {{ .field.path }} references, $variables and range/if blocks
against a variable environment.
"""

import json
import re
from typing import Any, Dict, List, Optional, Set, Tuple

from fileset.exceptions import TemplateError


class TemplateRenderer:
    """
    Renders text templates against a variable environment.

    Supported actions:
    - ``{{ .name }}``, ``{{ .name.nested }}``: field of the current value (dot)
    - ``{{ . }}``: the current value itself
    - ``{{ $ }}``, ``{{ $.name }}``: the root environment
    - ``{{ $var }}``, ``{{ $var.name }}``: a variable declared by range
    - ``{{ range .x }}``, ``{{ range $v := .x }}``, ``{{ range $i, $v := .x }}``
      with optional ``{{ else }}``, closed by ``{{ end }}``; dot is the element
      inside the body
    - ``{{ if .x }}`` with optional ``{{ else }}``, closed by ``{{ end }}``
    - ``{{/* comment */}}``

    ``{{- `` trims the whitespace before an action and `` -}}`` the whitespace
    after it. Pipes and function calls are rejected. Missing fields are an
    error rather than an empty string.
    """

    # Any {{ ... }} action with optional trim markers
    ACTION_PATTERN = re.compile(r'\{\{(-\s)?(.*?)(\s-)?\}\}', re.DOTALL)

    IDENT = r'[A-Za-z_][A-Za-z0-9_]*'
    # ".", ".a.b", "$", "$x", "$.a", "$x.a"
    FIELD_PATTERN = re.compile(
        rf'^(?:\.|(?:\$(?:{IDENT})?)?(?:\.{IDENT})+|\$(?:{IDENT})?)$'
    )
    RANGE_PATTERN = re.compile(
        rf'^range\s+(?:(\${IDENT})\s*(?:,\s*(\${IDENT})\s*)?:=\s*)?(\S+)$'
    )
    IF_PATTERN = re.compile(r'^if\s+(\S+)$')

    _MISSING = object()

    def __init__(self):
        """Initialize the renderer."""
        self.undefined_vars: Set[str] = set()
        self._template = ""

    def render(self, template: str, variables: Dict[str, Any]) -> str:
        """
        Render a template string.

        Args:
            template: Text containing template actions
            variables: Environment to read fields from

        Returns:
            Rendered text

        Raises:
            TemplateError: If the template is malformed or references undefined fields
        """
        self.undefined_vars.clear()
        self._template = template

        tokens = self._tokenize(template)
        nodes, _, _ = self._parse(tokens, 0, None)

        out: List[str] = []
        self._execute(nodes, variables, variables, {}, out)

        if self.undefined_vars:
            undefined = sorted(self.undefined_vars)
            raise TemplateError(
                f"Error executing template {template!r}: undefined variables {undefined}",
                template=template,
                undefined_vars=undefined
            )

        return ''.join(out)

    def _tokenize(self, template: str) -> List[Tuple[str, str]]:
        """Split a template into ('text', ...) and ('action', ...) tokens, applying trim markers."""
        tokens: List[Tuple[str, str]] = []
        pos = 0
        trim_next = False

        for match in self.ACTION_PATTERN.finditer(template):
            text = template[pos:match.start()]
            if trim_next:
                text = text.lstrip()
            if match.group(1):
                text = text.rstrip()
            if text:
                tokens.append(('text', text))

            tokens.append(('action', match.group(2).strip()))
            trim_next = bool(match.group(3))
            pos = match.end()

        text = template[pos:]
        if '{{' in text:
            self._parse_error("unclosed action")
        if trim_next:
            text = text.lstrip()
        if text:
            tokens.append(('text', text))

        return tokens

    def _parse(
        self,
        tokens: List[Tuple[str, str]],
        pos: int,
        block: Optional[str]
    ) -> Tuple[List[tuple], int, Optional[str]]:
        """
        Parse tokens into a node list until the end of the enclosing block.

        Returns:
            Tuple of (nodes, next position, terminating keyword or None at EOF)
        """
        nodes: List[tuple] = []

        while pos < len(tokens):
            kind, value = tokens[pos]
            pos += 1

            if kind == 'text':
                nodes.append(('text', value))
                continue

            if value.startswith('/*') and value.endswith('*/'):
                continue

            if value in ('end', 'else'):
                if block is None:
                    self._parse_error(f"unexpected {{{{{value}}}}}")
                return nodes, pos, value

            match = self.RANGE_PATTERN.match(value)
            if match:
                first, second, expr = match.groups()
                self._check_expression(expr)
                body, else_body, pos = self._parse_branches(tokens, pos, 'range')
                # A single variable receives the element, two receive index and element
                key_var, value_var = (first, second) if second else (None, first)
                nodes.append(('range', expr, key_var, value_var, body, else_body))
                continue

            match = self.IF_PATTERN.match(value)
            if match:
                expr = match.group(1)
                self._check_expression(expr)
                body, else_body, pos = self._parse_branches(tokens, pos, 'if')
                nodes.append(('if', expr, body, else_body))
                continue

            if self.FIELD_PATTERN.match(value):
                nodes.append(('field', value))
                continue

            self._parse_error(f"unsupported action '{{{{{value}}}}}'")

        if block is not None:
            self._parse_error(f"unexpected EOF in {{{{{block}}}}}")
        return nodes, pos, None

    def _parse_branches(
        self,
        tokens: List[Tuple[str, str]],
        pos: int,
        block: str
    ) -> Tuple[List[tuple], List[tuple], int]:
        body, pos, terminator = self._parse(tokens, pos, block)
        else_body: List[tuple] = []
        if terminator == 'else':
            else_body, pos, terminator = self._parse(tokens, pos, block)
            if terminator != 'end':
                self._parse_error(f"unexpected {{{{{terminator}}}}} in {{{{{block}}}}}")
        return body, else_body, pos

    def _check_expression(self, expr: str) -> None:
        if not self.FIELD_PATTERN.match(expr):
            self._parse_error(f"unsupported expression '{expr}'")

    def _execute(
        self,
        nodes: List[tuple],
        dot: Any,
        root: Dict[str, Any],
        scope: Dict[str, Any],
        out: List[str]
    ) -> None:
        """Render parsed nodes into out."""
        for node in nodes:
            kind = node[0]

            if kind == 'text':
                out.append(node[1])

            elif kind == 'field':
                value = self._evaluate(node[1], dot, root, scope)
                if value is not self._MISSING:
                    out.append(self._format_value(value))

            elif kind == 'if':
                _, expr, body, else_body = node
                value = self._evaluate(expr, dot, root, scope)
                if value is self._MISSING:
                    continue
                self._execute(body if value else else_body, dot, root, scope, out)

            elif kind == 'range':
                _, expr, key_var, value_var, body, else_body = node
                value = self._evaluate(expr, dot, root, scope)
                if value is self._MISSING:
                    continue

                items = self._range_items(value, expr)
                if not items:
                    self._execute(else_body, dot, root, scope, out)
                for key, item in items:
                    inner = dict(scope)
                    if key_var:
                        inner[key_var] = key
                    if value_var:
                        inner[value_var] = item
                    self._execute(body, item, root, inner, out)

    def _evaluate(self, expr: str, dot: Any, root: Dict[str, Any], scope: Dict[str, Any]) -> Any:
        """
        Evaluate a field or variable expression.

        Returns:
            Resolved value, or the _MISSING sentinel for an undefined field
        """
        if expr == '.':
            return dot

        if expr.startswith('$'):
            name, _, path = expr.partition('.')
            if name == '$':
                base = root
            elif name in scope:
                base = scope[name]
            else:
                raise TemplateError(
                    f"Error executing template {self._template!r}: undefined variable {name}",
                    template=self._template
                )
            if not path:
                return base
        else:
            base, path = dot, expr[1:]

        value = self._resolve_field(path, base)
        if value is self._MISSING:
            self.undefined_vars.add(expr.lstrip('.'))
        return value

    def _range_items(self, value: Any, expr: str) -> List[Tuple[Any, Any]]:
        """Return (key, element) pairs to range over; mappings iterate in key order."""
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return list(enumerate(value))
        if isinstance(value, dict):
            return [(key, value[key]) for key in sorted(value)]
        raise TemplateError(
            f"Error executing template {self._template!r}: "
            f"range can't iterate over {expr} ({type(value).__name__})",
            template=self._template
        )

    def _resolve_field(self, field_path: str, variables: Any) -> Any:
        """
        Resolve a dotted field path like 'builtin.hostname'.

        Returns:
            Resolved value, or the _MISSING sentinel if any part is absent
        """
        current: Any = variables
        for part in field_path.split('.'):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return self._MISSING
        return current

    def _format_value(self, value: Any) -> str:
        """Convert a resolved value to text."""
        if isinstance(value, bool):
            return 'true' if value else 'false'
        elif value is None:
            return 'null'
        elif isinstance(value, (int, float)):
            return str(value)
        elif isinstance(value, str):
            return value
        else:
            # Lists and mappings render as JSON, which is also valid YAML flow style
            return json.dumps(value)

    def _parse_error(self, reason: str) -> None:
        raise TemplateError(
            f"Error parsing template {self._template!r}: {reason}",
            template=self._template
        )


def render_template(template: str, variables: Dict[str, Any]) -> str:
    """Render a template with a fresh TemplateRenderer."""
    return TemplateRenderer().render(template, variables)
