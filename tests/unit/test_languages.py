"""Unit tests for the Go, Python and JavaScript/TypeScript backends."""

import pytest

from codenav.core.availability import AvailabilityGate
from codenav.core.models import Capability, Direction
from codenav.core.registry import CapabilityRegistry
from codenav.languages import register_default_backends
from codenav.languages.go import GoBackend
from codenav.languages.javascript import JavaScriptBackend
from codenav.languages.python import PythonBackend
from codenav.model.base import Project, Relation, StaticHost, Symbol, SymbolKind
from codenav.model.languages import GO, JAVASCRIPT, PYTHON, TYPESCRIPT, TYPESCRIPT_JSX
from codenav.model.memory import InMemoryCodeModel


def available(plugin_id: str) -> AvailabilityGate:
    return AvailabilityGate(plugin_id, lambda: True)


# ---------------------------------------------------------------------------
# Go
# ---------------------------------------------------------------------------


@pytest.fixture
def go_project() -> tuple[Project, dict[str, Symbol]]:
    """Starter interface, Base struct, Server embedding Base, and main.

    type Starter interface { Start() error }
    type Base struct{}
    func (b *Base) Start() error
    type Server struct { Base }
    func (s *Server) Start() error { s.Base.Start() }
    func main() { srv.Start(); fmt.Println() }
    """
    model = InMemoryCodeModel()
    s: dict[str, Symbol] = {}
    s["Starter"] = model.declare("Starter", SymbolKind.INTERFACE, GO, file="srv/srv.go", line=1, end_line=3)
    s["Starter.Start"] = model.declare(
        "Start", SymbolKind.METHOD, GO, parent=s["Starter"], line=2, return_type="error"
    )
    s["Base"] = model.declare("Base", SymbolKind.STRUCT, GO, file="srv/base.go", line=1, end_line=3)
    s["Base.Start"] = model.declare(
        "Start", SymbolKind.METHOD, GO, file="srv/base.go", line=5, end_line=7, receiver="*Base", return_type="error"
    )
    s["Server"] = model.declare("Server", SymbolKind.STRUCT, GO, file="srv/server.go", line=1, end_line=4)
    model.add_type_reference(s["Server"], "Base", relation=Relation.EMBEDS)
    s["Server.Start"] = model.declare(
        "Start", SymbolKind.METHOD, GO, file="srv/server.go", line=6, end_line=9, receiver="*Server", return_type="error"
    )
    model.add_call(s["Server.Start"], s["Base.Start"], line=7, text="s.Base.Start")
    s["main"] = model.declare("main", SymbolKind.FUNCTION, GO, file="cmd/main.go", line=1, end_line=5)
    model.add_call(s["main"], s["Server.Start"], line=3, text="srv.Start")
    model.add_call(s["main"], None, line=4, text="fmt.Println")
    return Project(model, name="server"), s


class TestGoBackend:
    """Tests for embedding-based hierarchies and implicit interfaces."""

    @pytest.fixture
    def backend(self) -> GoBackend:
        return GoBackend(available("go"))

    def test_embedded_supertypes(self, backend: GoBackend, go_project) -> None:
        project, s = go_project
        hierarchy = backend.type_hierarchy(s["Server"], project)

        assert [t.name for t in hierarchy.supertypes] == ["Base"]
        assert hierarchy.supertypes[0].element.kind == "STRUCT"
        assert hierarchy.subtypes == ()

    def test_interface_subtypes_are_structural(self, backend: GoBackend, go_project) -> None:
        project, s = go_project
        hierarchy = backend.type_hierarchy(s["Starter"], project)

        assert hierarchy.supertypes == ()
        assert [t.name for t in hierarchy.subtypes] == ["Base", "Server"]

    def test_interface_implementations(self, backend: GoBackend, go_project) -> None:
        project, s = go_project
        results = backend.find_implementations(s["Starter"], project)
        assert [(r.name, r.kind) for r in results] == [("Base", "STRUCT"), ("Server", "STRUCT")]

    def test_interface_method_implementations(self, backend: GoBackend, go_project) -> None:
        project, s = go_project
        results = backend.find_implementations(s["Starter.Start"], project)

        assert [r.name for r in results] == ["Base.Start", "Server.Start"]
        assert results[1].file == "srv/server.go"
        assert results[1].line == 6

    def test_struct_has_no_implementations(self, backend: GoBackend, go_project) -> None:
        project, s = go_project
        assert backend.find_implementations(s["Base"], project) is None

    def test_super_methods(self, backend: GoBackend, go_project) -> None:
        project, s = go_project
        result = backend.find_super_methods(s["Server.Start"], project)

        assert result.method.containing_class == "Server"
        assert result.method.signature == "Start() error"
        assert [
            (h.containing_class, h.containing_class_kind, h.is_interface, h.depth) for h in result.hierarchy
        ] == [
            ("Base", "STRUCT", False, 1),
            ("Starter", "INTERFACE", True, 1),
        ]

    def test_plain_function_has_no_super_methods(self, backend: GoBackend, go_project) -> None:
        project, s = go_project
        assert backend.find_super_methods(s["main"], project) is None

    def test_callers_of_receiver_method(self, backend: GoBackend, go_project) -> None:
        project, s = go_project
        hierarchy = backend.call_hierarchy(s["Server.Start"], project, Direction.CALLERS, 3)

        assert hierarchy.root.name == "Server.Start"
        assert [c.name for c in hierarchy.calls] == ["main"]

    def test_callers_through_promotion(self, backend: GoBackend, go_project) -> None:
        project, s = go_project
        hierarchy = backend.call_hierarchy(s["Base.Start"], project, "callers", 2)

        (server,) = hierarchy.calls
        assert server.name == "Server.Start"
        assert [c.name for c in server.children] == ["main"]

    def test_callees_drop_unresolved(self, backend: GoBackend, go_project) -> None:
        project, s = go_project
        hierarchy = backend.call_hierarchy(s["main"], project, "callees", 2)

        (server,) = hierarchy.calls
        assert server.name == "Server.Start"
        assert [c.name for c in server.children] == ["Base.Start"]

    def test_search_reports_receiver_as_container(self, backend: GoBackend, go_project) -> None:
        project, _ = go_project
        matches = backend.search_symbols(project, "Start")

        assert [m.name for m in matches] == ["Start", "Start", "Start", "Starter"]
        assert [m.container_name for m in matches] == ["Starter", "Base", "Server", None]


# ---------------------------------------------------------------------------
# Python
# ---------------------------------------------------------------------------


def declare_class(
    model: InMemoryCodeModel, name: str, bases: list[str], methods: list[str], line: int
) -> tuple[Symbol, dict[str, Symbol]]:
    """Declare ``class name(*bases)`` with one-line methods in ``pkg/mod.py``."""
    cls = model.declare(
        name,
        SymbolKind.CLASS,
        PYTHON,
        qualified_name=f"pkg.{name}",
        file="pkg/mod.py",
        line=line,
        end_line=line + len(methods) + 1,
    )
    for base in bases:
        model.add_type_reference(cls, base)
    members = {
        m: model.declare(m, SymbolKind.METHOD, PYTHON, parent=cls, line=line + i + 1, parameters=["self"])
        for i, m in enumerate(methods)
    }
    return cls, members


class TestPythonBackend:
    """Tests for multiple inheritance and override chains."""

    @pytest.fixture
    def backend(self) -> PythonBackend:
        return PythonBackend(available("python"))

    def test_object_and_unresolved_bases_are_omitted(self, backend: PythonBackend) -> None:
        model = InMemoryCodeModel()
        declare_class(model, "Base", ["object"], [], 1)
        child, _ = declare_class(model, "Child", ["Base", "Mystery"], [], 10)

        hierarchy = backend.type_hierarchy(child, Project(model))
        (parent,) = hierarchy.supertypes
        assert parent.name == "pkg.Base"
        assert parent.supertypes == ()

    def test_override_chain_depths(self, backend: PythonBackend) -> None:
        model = InMemoryCodeModel()
        declare_class(model, "A", [], ["f"], 1)
        declare_class(model, "B", ["A"], ["f"], 10)
        declare_class(model, "C", ["B"], ["f"], 20)
        _, d = declare_class(model, "D", ["C"], ["f"], 30)

        result = backend.find_super_methods(d["f"], Project(model))
        assert [(h.containing_class, h.depth) for h in result.hierarchy] == [
            ("pkg.C", 1),
            ("pkg.B", 2),
            ("pkg.A", 3),
        ]
        assert all(h.containing_class_kind == "CLASS" for h in result.hierarchy)
        assert not any(h.is_interface for h in result.hierarchy)
        assert result.method.signature == "f(self)"

    def test_nearest_declaring_ancestor(self, backend: PythonBackend) -> None:
        model = InMemoryCodeModel()
        declare_class(model, "A", [], ["f"], 1)
        declare_class(model, "B", ["A"], [], 10)
        _, c = declare_class(model, "C", ["B"], ["f"], 20)

        result = backend.find_super_methods(c["f"], Project(model))
        assert [(h.containing_class, h.depth) for h in result.hierarchy] == [("pkg.A", 1)]

    def test_diamond(self, backend: PythonBackend) -> None:
        model = InMemoryCodeModel()
        declare_class(model, "Base", [], ["run"], 1)
        declare_class(model, "Left", ["Base"], ["run"], 10)
        declare_class(model, "Right", ["Base"], ["run"], 20)
        _, child = declare_class(model, "Child", ["Left", "Right"], ["run"], 30)

        result = backend.find_super_methods(child["run"], Project(model))
        assert [(h.containing_class, h.depth) for h in result.hierarchy] == [
            ("pkg.Left", 1),
            ("pkg.Right", 1),
            ("pkg.Base", 2),
        ]

    def test_module_function_has_no_super_methods(self, backend: PythonBackend) -> None:
        model = InMemoryCodeModel()
        fn = model.declare("helper", SymbolKind.FUNCTION, PYTHON, file="pkg/util.py", line=1)
        assert backend.find_super_methods(fn, Project(model)) is None

    def test_callable_names(self, backend: PythonBackend) -> None:
        model = InMemoryCodeModel()
        _, a = declare_class(model, "A", [], ["f"], 1)
        fn = model.declare("helper", SymbolKind.FUNCTION, PYTHON, file="pkg/util.py", line=1)
        model.add_call(fn, a["f"], line=1)

        hierarchy = backend.call_hierarchy(fn, Project(model), "callees", 1)
        assert hierarchy.root.name == "helper"
        assert [c.name for c in hierarchy.calls] == ["A.f"]


# ---------------------------------------------------------------------------
# JavaScript / TypeScript
# ---------------------------------------------------------------------------


@pytest.fixture
def ts_project() -> tuple[Project, dict[str, Symbol]]:
    """A TSX component extending a JS class and implementing a TS interface."""
    model = InMemoryCodeModel()
    s: dict[str, Symbol] = {}
    s["Entity"] = model.declare("Entity", SymbolKind.CLASS, JAVASCRIPT, file="src/entity.js", line=1, end_line=5)
    s["Greeter"] = model.declare("Greeter", SymbolKind.INTERFACE, TYPESCRIPT, file="src/greeter.ts", line=1, end_line=3)
    s["Greeter.greet"] = model.declare(
        "greet",
        SymbolKind.METHOD,
        TYPESCRIPT,
        parent=s["Greeter"],
        line=2,
        parameters=[("name", "string")],
        return_type="string",
    )
    s["Person"] = model.declare("Person", SymbolKind.CLASS, TYPESCRIPT_JSX, file="src/person.tsx", line=1, end_line=10)
    model.add_type_reference(s["Person"], "Greeter", relation=Relation.IMPLEMENTS)
    model.add_type_reference(s["Person"], "Entity", relation=Relation.EXTENDS)
    model.add_type_reference(s["Person"], "Component", "React.Component", Relation.EXTENDS)
    s["Person.greet"] = model.declare(
        "greet",
        SymbolKind.METHOD,
        TYPESCRIPT_JSX,
        parent=s["Person"],
        line=3,
        end_line=5,
        parameters=[("name", "string")],
        return_type="string",
    )
    return Project(model), s


class TestJavaScriptBackend:
    """Tests for the JavaScript and TypeScript backend."""

    def test_tsx_element_reaches_typescript_backend(self, ts_project) -> None:
        project, s = ts_project
        registry = CapabilityRegistry()
        register_default_backends(registry, StaticHost())

        backend = registry.resolve(Capability.TYPE_HIERARCHY, s["Person"])
        assert isinstance(backend, JavaScriptBackend)
        assert backend.language_id == TYPESCRIPT

    def test_extends_before_implements(self, ts_project) -> None:
        project, s = ts_project
        backend = JavaScriptBackend(available("javascript"), TYPESCRIPT)
        hierarchy = backend.type_hierarchy(s["Person"], project)

        assert [t.name for t in hierarchy.supertypes] == ["Entity", "Greeter"]
        assert hierarchy.root.element.language == "TypeScript"
        assert hierarchy.supertypes[0].element.language == "JavaScript"

    def test_super_methods_from_interface(self, ts_project) -> None:
        project, s = ts_project
        backend = JavaScriptBackend(available("javascript"), TYPESCRIPT)
        result = backend.find_super_methods(s["Person.greet"], project)

        assert result.method.signature == "greet(name: string): string"
        (entry,) = result.hierarchy
        assert entry.containing_class == "Greeter"
        assert entry.containing_class_kind == "INTERFACE"
        assert entry.is_interface is True

    def test_interface_implementations(self, ts_project) -> None:
        project, s = ts_project
        backend = JavaScriptBackend(available("javascript"))
        results = backend.find_implementations(s["Greeter.greet"], project)
        assert [r.name for r in results] == ["Person.greet"]
