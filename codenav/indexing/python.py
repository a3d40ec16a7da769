"""Python AST parser for extracting declarations, bases and calls."""

from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path

from codenav.core.exceptions import ParseError
from codenav.indexing.models import (
    ParsedBase,
    ParsedCall,
    ParsedSymbol,
    ParseResult,
    TypedVar,
)
from codenav.model.base import Parameter, SymbolKind

_ABSTRACT_DECORATORS = {"abstractmethod", "abc.abstractmethod"}
_MODIFIER_DECORATORS = {
    "staticmethod": "static",
    "classmethod": "classmethod",
    "property": "property",
}


class PythonParser:
    """Parser for Python source files using the ast module."""

    def supports(self, file: Path) -> bool:
        """Check if this parser supports the given file."""
        return file.suffix in (".py", ".pyi")

    def parse(self, file: Path, root: Path | None = None) -> ParseResult:
        """Parse a Python file.

        ``root`` is the directory module names are computed from; it defaults
        to the file's own directory.
        """
        try:
            source = file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(f"Cannot read {file}: {e}") from e

        try:
            tree = ast.parse(source, filename=str(file))
        except SyntaxError as e:
            raise ParseError(f"Syntax error in {file}: {e}") from e

        relative = file.relative_to(root) if root is not None else Path(file.name)
        visitor = _PythonVisitor(_path_to_module(relative))
        visitor.visit(tree)

        return ParseResult(
            file=file,
            module=visitor.module,
            symbols=visitor.symbols,
            bases=visitor.bases,
            calls=visitor.calls,
            imports=visitor.imports,
            typed_vars=visitor.typed_vars,
        )


def _path_to_module(path: Path) -> str:
    """Convert a relative file path to a dotted module name."""
    parts = list(path.with_suffix("").parts)
    if parts and parts[0] == "src":
        parts = parts[1:]
    if len(parts) > 1 and parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join(parts)


@dataclass
class _Scope:
    """Tracks the current scope during AST traversal."""

    name: str
    qualified_name: str
    kind: SymbolKind


class _PythonVisitor(ast.NodeVisitor):
    """AST visitor that collects declarations, base classes and calls."""

    def __init__(self, module: str) -> None:
        self.module = module
        self.symbols: list[ParsedSymbol] = []
        self.bases: list[ParsedBase] = []
        self.calls: list[ParsedCall] = []
        self.imports: dict[str, str] = {}
        self.typed_vars: list[TypedVar] = []

        self._scope_stack: list[_Scope] = []
        self._current_class: str | None = None
        self._current_func_params: dict[str, str] = {}

    def _current_scope(self) -> _Scope | None:
        return self._scope_stack[-1] if self._scope_stack else None

    def _make_qualified_name(self, name: str) -> str:
        scope = self._current_scope()
        prefix = scope.qualified_name if scope else self.module
        return f"{prefix}.{name}"

    def _add_symbol(self, name: str, node: ast.stmt, kind: SymbolKind, **extra) -> str:
        """Add a declaration and return its qualified name."""
        qualified_name = self._make_qualified_name(name)
        parent = self._current_scope()
        self.symbols.append(
            ParsedSymbol(
                name=name,
                qualified_name=qualified_name,
                line=node.lineno,
                end_line=getattr(node, "end_lineno", None),
                kind=kind,
                parent_qualified_name=parent.qualified_name if parent else None,
                **extra,
            )
        )
        return qualified_name

    # -- imports ------------------------------------------------------------

    def visit_Import(self, node: ast.Import) -> None:
        """Handle: import foo, import foo.bar, import foo as f"""
        for alias in node.names:
            local_name = alias.asname or alias.name.split(".")[0]
            self.imports[local_name] = alias.name if alias.asname else local_name

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        """Handle: from foo import bar, from foo import bar as b"""
        module = node.module or ""
        if node.level > 0:
            module = self._resolve_relative_import(node.level, module)

        for alias in node.names:
            if alias.name == "*":
                continue
            local_name = alias.asname or alias.name
            self.imports[local_name] = f"{module}.{alias.name}" if module else alias.name

    def _resolve_relative_import(self, level: int, module: str) -> str:
        parts = self.module.split(".")
        if len(parts) < level:
            return module
        base_parts = parts[:-level]
        if module:
            return ".".join(base_parts + [module])
        return ".".join(base_parts)

    # -- declarations -------------------------------------------------------

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        """Handle class definitions and their bases."""
        qualified_name = self._add_symbol(node.name, node, SymbolKind.CLASS)

        for base in node.bases:
            base_name = _get_name_from_node(base)
            if base_name:
                self.bases.append(ParsedBase(qualified_name, base_name))

        old_class = self._current_class
        self._current_class = qualified_name
        self._scope_stack.append(_Scope(node.name, qualified_name, SymbolKind.CLASS))

        self.generic_visit(node)

        self._scope_stack.pop()
        self._current_class = old_class

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._visit_function(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._visit_function(node, is_async=True)

    def _visit_function(
        self, node: ast.FunctionDef | ast.AsyncFunctionDef, is_async: bool = False
    ) -> None:
        """Common handler for sync and async functions."""
        parent = self._current_scope()
        is_method = parent is not None and parent.kind is SymbolKind.CLASS
        kind = SymbolKind.METHOD if is_method else SymbolKind.FUNCTION

        modifiers = set()
        if is_async:
            modifiers.add("async")
        for decorator in node.decorator_list:
            dec_name = _get_name_from_node(decorator)
            if dec_name in _ABSTRACT_DECORATORS:
                modifiers.add("abstract")
            elif dec_name in _MODIFIER_DECORATORS:
                modifiers.add(_MODIFIER_DECORATORS[dec_name])

        qualified_name = self._add_symbol(
            node.name,
            node,
            kind,
            parameters=_parameters(node.args),
            return_type=_unparse(node.returns),
            modifiers=modifiers,
        )
        self._extract_parameter_types(node, qualified_name)

        old_params = self._current_func_params
        self._current_func_params = {}
        if is_method and node.name == "__init__":
            for arg in node.args.args:
                if arg.annotation and arg.arg not in ("self", "cls"):
                    type_name = _extract_type_from_annotation(arg.annotation)
                    if type_name:
                        self._current_func_params[arg.arg] = type_name

        # Decorators and defaults are evaluated in the enclosing scope
        for expr in node.decorator_list + node.args.defaults:
            self.visit(expr)
        for expr in node.args.kw_defaults:
            if expr is not None:
                self.visit(expr)

        self._scope_stack.append(_Scope(node.name, qualified_name, kind))
        for child in node.body:
            self.visit(child)
        self._scope_stack.pop()
        self._current_func_params = old_params

    def _extract_parameter_types(
        self, node: ast.FunctionDef | ast.AsyncFunctionDef, func_qualified_name: str
    ) -> None:
        """Record annotated parameters for typed-call resolution."""
        for arg in node.args.args + node.args.kwonlyargs:
            if arg.annotation and arg.arg not in ("self", "cls"):
                type_name = _extract_type_from_annotation(arg.annotation)
                if type_name:
                    self.typed_vars.append(TypedVar(arg.arg, type_name, func_qualified_name))

    def _track_self_assignment(self, target: ast.expr, value: ast.expr) -> None:
        """Track self.x = param assignments for type inference."""
        if not self._current_class or not self._current_func_params:
            return
        if not isinstance(target, ast.Attribute):
            return
        if not isinstance(target.value, ast.Name) or target.value.id != "self":
            return
        if not isinstance(value, ast.Name) or value.id not in self._current_func_params:
            return
        self.typed_vars.append(
            TypedVar(
                name=f"self.{target.attr}",
                type_name=self._current_func_params[value.id],
                scope_qualified_name=self._current_class,
            )
        )

    def visit_Assign(self, node: ast.Assign) -> None:
        """Module and class level assignments declare variables."""
        scope = self._current_scope()
        for target in node.targets:
            self._track_self_assignment(target, node.value)

        if scope is None or scope.kind is SymbolKind.CLASS:
            kind = SymbolKind.FIELD if scope is not None else SymbolKind.VARIABLE
            for target in node.targets:
                names = target.elts if isinstance(target, ast.Tuple) else [target]
                for elt in names:
                    if isinstance(elt, ast.Name):
                        self._add_symbol(elt.id, node, kind)

        self.generic_visit(node)

    def visit_AnnAssign(self, node: ast.AnnAssign) -> None:
        """Handle annotated assignments (e.g., x: int = 5)."""
        scope = self._current_scope()
        if scope is None or scope.kind is SymbolKind.CLASS:
            if isinstance(node.target, ast.Name):
                kind = SymbolKind.FIELD if scope is not None else SymbolKind.VARIABLE
                self._add_symbol(node.target.id, node, kind)
        self.generic_visit(node)

    # -- calls --------------------------------------------------------------

    def visit_Call(self, node: ast.Call) -> None:
        """Record calls made inside a function or class body."""
        scope = self._current_scope()
        callee_name = _get_name_from_node(node.func)
        if scope is not None and callee_name:
            self.calls.append(ParsedCall(scope.qualified_name, callee_name, node.lineno))
        self.generic_visit(node)


def _get_name_from_node(node: ast.AST | None) -> str | None:
    """Extract a dotted name from various AST node types."""
    if node is None:
        return None
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        value_name = _get_name_from_node(node.value)
        if value_name:
            return f"{value_name}.{node.attr}"
        return node.attr
    if isinstance(node, ast.Call):
        return _get_name_from_node(node.func)
    if isinstance(node, ast.Subscript):
        return _get_name_from_node(node.value)
    return None


def _extract_type_from_annotation(node: ast.expr) -> str | None:
    """Extract the actual type from an annotation, handling Annotated types."""
    if isinstance(node, ast.Subscript):
        base_name = _get_name_from_node(node.value)
        if base_name == "Annotated":
            if isinstance(node.slice, ast.Tuple) and node.slice.elts:
                return _get_name_from_node(node.slice.elts[0])
            return _get_name_from_node(node.slice)
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return node.value
    return _get_name_from_node(node)


def _unparse(node: ast.expr | None) -> str | None:
    return ast.unparse(node) if node is not None else None


def _parameters(args: ast.arguments) -> list[Parameter]:
    """Declared parameters in source order, including star arguments."""
    params = [Parameter(a.arg, _unparse(a.annotation)) for a in args.posonlyargs + args.args]
    if args.vararg is not None:
        params.append(Parameter(f"*{args.vararg.arg}", _unparse(args.vararg.annotation)))
    params.extend(Parameter(a.arg, _unparse(a.annotation)) for a in args.kwonlyargs)
    if args.kwarg is not None:
        params.append(Parameter(f"**{args.kwarg.arg}", _unparse(args.kwarg.annotation)))
    return params
