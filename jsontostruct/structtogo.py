# pylint: disable=line-too-long

""" StructToGo class for rendering resolved types as Go struct definitions """

import logging
import re
import shutil
import subprocess
from typing import Dict, List, Optional

import jinja2

from jsontostruct.common import process_template, type_identifier
from jsontostruct.config import GeneratorConfig
from jsontostruct.resolvedtype import ResolvedType, TypeKind
from jsontostruct.statcomments import describe_field

logger = logging.getLogger(__name__)

INDENT = '\t'

GO_SCALAR_TYPES: Dict[TypeKind, str] = {
    TypeKind.BOOL: 'bool',
    TypeKind.NUMBER: 'float64',
    TypeKind.STRING: 'string',
    TypeKind.NULL: 'any',
    TypeKind.DYNAMIC: 'any',
    TypeKind.ARRAY: '[]any',
}

# gofmt reports "<standard input>:LINE:COL: message"
_GOFMT_LOCATION = re.compile(r':(\d+):(\d+):')


class RenderError(Exception):
    """
    Exception raised when generated source cannot be rendered or formatted.

    Attributes:
        message: Human-readable error description
        source: The raw, unformatted text that was rejected
        line: Best-effort 1-based line of the problem, if known
        column: Best-effort 1-based column of the problem, if known
    """

    def __init__(self, message: str, source: str = '', line: Optional[int] = None,
                 column: Optional[int] = None) -> None:
        self.message = message
        self.source = source
        self.line = line
        self.column = column
        full_message = message
        if line is not None:
            full_message = f"{message} (line {line}" + (f", column {column})" if column is not None else ")")
        super().__init__(full_message)

    def excerpt(self, context: int = 2) -> str:
        """The lines of ``source`` around ``line``, numbered."""
        lines = self.source.splitlines()
        if self.line is None or not lines:
            return self.source
        start = max(self.line - 1 - context, 0)
        end = min(self.line + context, len(lines))
        return '\n'.join(f"{n + 1:4d}  {lines[n]}" for n in range(start, end))


def format_go_source(src: str, enabled: bool = True) -> str:
    """
    Run ``gofmt`` over generated source.

    When ``gofmt`` is not installed (or formatting is disabled) the source
    is returned unchanged.

    Raises:
        RenderError: if ``gofmt`` rejects the source.
    """
    if not enabled:
        return src
    gofmt = shutil.which('gofmt')
    if gofmt is None:
        logger.debug("gofmt not found, emitting unformatted source")
        return src
    result = subprocess.run([gofmt], input=src, capture_output=True, text=True, check=False)
    if result.returncode != 0:
        message = result.stderr.strip() or 'gofmt failed'
        match = _GOFMT_LOCATION.search(message)
        line, column = (int(match.group(1)), int(match.group(2))) if match else (None, None)
        raise RenderError(f"error formatting generated code: {message}", source=src, line=line, column=column)
    return result.stdout


class StructToGo:
    """ Renders a resolved type tree as Go source """

    def __init__(self, config: GeneratorConfig) -> None:
        self.config = config

    def go_type(self, node: ResolvedType, depth: int = 0) -> str:
        """Go type expression of a field; nested records render inline."""
        pointer = node.nullable and not node.repeated
        if node.ref is not None:
            base = node.ref
        elif node.kind is TypeKind.RECORD:
            base = self.inline_struct(node.children, depth)
        else:
            base = GO_SCALAR_TYPES[node.kind]
            pointer = pointer and node.kind not in (TypeKind.NULL, TypeKind.DYNAMIC)
        if pointer:
            base = '*' + base
        if node.repeated:
            base = '[]' + base
        return base

    def go_tag(self, node: ResolvedType) -> str:
        key = node.serialization_key
        if self.config.omit_empty:
            key += ',omitempty'
        return f'`json:"{key}"`'

    def go_comment(self, node: ResolvedType) -> str:
        if not self.config.stat_comments or node.stat is None:
            return ''
        return describe_field(node.stat, node.stat_total, node.kind)

    def field_context(self, node: ResolvedType, depth: int) -> Dict[str, str]:
        return {
            'name': node.name,
            'type': self.go_type(node, depth),
            'tag': self.go_tag(node),
            'comment': self.go_comment(node),
        }

    def inline_struct(self, children: List[ResolvedType], depth: int) -> str:
        """Anonymous struct literal for a record that was not extracted."""
        if not children:
            return 'struct{}'
        indent = INDENT * (depth + 1)
        lines = ['struct {']
        for child in children:
            f = self.field_context(child, depth + 1)
            line = f"{indent}{INDENT}{f['name']} {f['type']} {f['tag']}"
            if f['comment']:
                line += f" // {f['comment']}"
            lines.append(line)
        lines.append(indent + '}')
        return '\n'.join(lines)

    def render_struct(self, name: str, node: ResolvedType) -> str:
        """Named type declaration for a record (root or shared definition)."""
        context = {
            'name': name,
            'fields': [self.field_context(child, 0) for child in node.children],
        }
        return self._template('structtogo/go_struct.jinja', **context)

    def render_file(self, root: ResolvedType, definitions: List[ResolvedType]) -> str:
        """
        Render the complete source file: package clause, shared definitions
        in emission order, then the root type. The result is not formatted.
        """
        context = {
            'package': self.config.package_name,
            'definitions': [self.render_struct(d.name, d) for d in definitions],
            'root': self.render_struct(type_identifier(root.name), root),
        }
        return self._template('structtogo/go_file.jinja', **context)

    def render(self, root: ResolvedType, definitions: List[ResolvedType]) -> str:
        """Render and format; see ``format_go_source``."""
        return format_go_source(self.render_file(root, definitions), self.config.gofmt)

    def _template(self, template: str, **context) -> str:
        try:
            return process_template(template, self.config.template_dir, **context)
        except jinja2.TemplateSyntaxError as e:
            raise RenderError(f"template error in {e.name or template}: {e.message}",
                              source=e.source or '', line=e.lineno) from e
        except jinja2.TemplateError as e:
            raise RenderError(f"template error in {template}: {e}") from e
