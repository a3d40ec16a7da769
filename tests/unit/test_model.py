"""Unit tests for the in-memory code model and snapshots."""

import json
import tempfile
from pathlib import Path

import pytest

from codenav.core.exceptions import IndexNotReadyError, SnapshotError
from codenav.model.base import Project, Relation, SymbolKind, TypeRef
from codenav.model.languages import GO, JAVA, PYTHON
from codenav.model.memory import InMemoryCodeModel, receiver_base
from codenav.model.snapshot import (
    load_snapshot,
    model_from_dict,
    model_to_dict,
    plugins_from_dict,
    read_snapshot,
    save_snapshot,
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


@pytest.fixture
def python_model() -> InMemoryCodeModel:
    """Animal <- Dog <- Puppy, with a call from Puppy.play to Dog.bark."""
    model = InMemoryCodeModel()
    animal = model.declare(
        "Animal", SymbolKind.CLASS, PYTHON, qualified_name="zoo.Animal", file="zoo.py", line=1, end_line=4
    )
    model.declare("speak", SymbolKind.METHOD, PYTHON, parent=animal, line=2, end_line=3)
    dog = model.declare(
        "Dog", SymbolKind.CLASS, PYTHON, qualified_name="zoo.Dog", file="zoo.py", line=6, end_line=12
    )
    model.add_type_reference(dog, "Animal", "zoo.Animal")
    bark = model.declare("bark", SymbolKind.METHOD, PYTHON, parent=dog, line=7, end_line=8)
    puppy = model.declare(
        "Puppy", SymbolKind.CLASS, PYTHON, qualified_name="zoo.Puppy", file="zoo.py", line=14, end_line=20
    )
    model.add_type_reference(puppy, "Dog")
    play = model.declare("play", SymbolKind.METHOD, PYTHON, parent=puppy, line=15, end_line=17)
    model.add_call(play, bark, line=16, text="self.bark")
    model.add_call(play, None, line=17, text="print")
    return model


class TestInMemoryCodeModel:
    """Tests for population and the provider queries."""

    def test_default_qualified_name(self, python_model: InMemoryCodeModel) -> None:
        bark = python_model.find_by_qualified_name("zoo.Dog.bark")
        assert bark is not None
        assert bark.file == "zoo.py"
        assert bark.parent_id == python_model.find_by_qualified_name("zoo.Dog").id

    def test_duplicate_id_rejected(self) -> None:
        model = InMemoryCodeModel()
        model.declare("A", SymbolKind.CLASS, JAVA, id="a")
        with pytest.raises(ValueError, match="Duplicate"):
            model.declare("B", SymbolKind.CLASS, JAVA, id="a")

    def test_element_at_picks_innermost(self, python_model: InMemoryCodeModel) -> None:
        element = python_model.element_at("zoo.py", 7)
        assert element is not None
        assert element.qualified_name == "zoo.Dog.bark"

        assert python_model.element_at("zoo.py", 11).qualified_name == "zoo.Dog"
        assert python_model.element_at("zoo.py", 99) is None
        assert python_model.element_at("other.py", 7) is None

    def test_containing_includes_element(self, python_model: InMemoryCodeModel) -> None:
        bark = python_model.find_by_qualified_name("zoo.Dog.bark")
        assert python_model.containing(bark, {SymbolKind.METHOD}) == bark
        assert python_model.containing(bark, {SymbolKind.CLASS}).name == "Dog"
        assert python_model.containing(bark, {SymbolKind.STRUCT}) is None

    def test_resolve_type_by_simple_name(self, python_model: InMemoryCodeModel) -> None:
        puppy = python_model.find_by_qualified_name("zoo.Puppy")
        (ref,) = python_model.type_references(puppy)
        assert python_model.resolve_type(ref, puppy).qualified_name == "zoo.Dog"

    def test_resolve_type_prefers_same_file(self) -> None:
        model = InMemoryCodeModel()
        model.declare("Node", SymbolKind.CLASS, JAVA, qualified_name="a.Node", file="a/Node.java", line=1)
        local = model.declare("Node", SymbolKind.CLASS, JAVA, qualified_name="b.Node", file="b/Tree.java", line=1)
        tree = model.declare("Tree", SymbolKind.CLASS, JAVA, qualified_name="b.Tree", file="b/Tree.java", line=5)

        assert model.resolve_type(TypeRef("Node"), tree) == local

    def test_resolve_type_stays_in_family(self) -> None:
        model = InMemoryCodeModel()
        model.declare("Base", SymbolKind.CLASS, PYTHON, file="base.py", line=1)
        java = model.declare("Child", SymbolKind.CLASS, JAVA, file="Child.java", line=1)

        assert model.resolve_type(TypeRef("Base"), java) is None

    def test_inheritors_are_transitive(self, python_model: InMemoryCodeModel) -> None:
        animal = python_model.find_by_qualified_name("zoo.Animal")
        names = [s.name for s in python_model.inheritors(animal)]
        assert names == ["Dog", "Puppy"]

    def test_inheritors_ignore_self_reference(self) -> None:
        model = InMemoryCodeModel()
        loop = model.declare("Loop", SymbolKind.CLASS, JAVA, line=1)
        model.add_type_reference(loop, "Loop")
        assert list(model.inheritors(loop)) == []

    def test_calls_and_references(self, python_model: InMemoryCodeModel) -> None:
        play = python_model.find_by_qualified_name("zoo.Puppy.play")
        bark = python_model.find_by_qualified_name("zoo.Dog.bark")

        calls = python_model.calls_within(play)
        assert [c.text for c in calls] == ["self.bark", "print"]
        assert python_model.resolve_call(calls[0]) == bark
        assert python_model.resolve_call(calls[1]) is None
        assert [r.line for r in python_model.references(bark)] == [16]

    def test_library_references_filtered(self) -> None:
        model = InMemoryCodeModel()
        target = model.declare("run", SymbolKind.FUNCTION, PYTHON, file="app.py", line=1)
        lib = model.declare("helper", SymbolKind.FUNCTION, PYTHON, file="site-packages/lib.py", line=1, library=True)
        model.add_call(lib, target, line=2)

        assert list(model.references(target)) == []
        assert len(list(model.references(target, include_libraries=True))) == 1

    def test_names_and_declarations(self, python_model: InMemoryCodeModel) -> None:
        names = set(python_model.names())
        assert {"Animal", "Dog", "Puppy", "bark", "play", "speak"} <= names
        assert "self.bark" not in names
        assert [s.qualified_name for s in python_model.declarations_named("bark")] == ["zoo.Dog.bark"]


class TestGoModel:
    """Tests for Go receiver methods and structural interfaces."""

    @pytest.fixture
    def go_model(self) -> InMemoryCodeModel:
        model = InMemoryCodeModel()
        reader = model.declare("Reader", SymbolKind.INTERFACE, GO, file="io/io.go", line=1, end_line=3)
        model.declare("Read", SymbolKind.METHOD, GO, parent=reader, line=2)
        model.declare("Empty", SymbolKind.INTERFACE, GO, file="io/io.go", line=5)
        model.declare("File", SymbolKind.STRUCT, GO, file="io/file.go", line=1, end_line=3)
        model.declare("Read", SymbolKind.METHOD, GO, file="io/file.go", line=5, end_line=7, receiver="*File")
        model.declare("Pipe", SymbolKind.STRUCT, GO, file="io/pipe.go", line=1)
        return model

    def test_receiver_base(self) -> None:
        assert receiver_base("*Server[T]") == "Server"
        assert receiver_base(" Server ") == "Server"

    def test_receiver_methods_are_members(self, go_model: InMemoryCodeModel) -> None:
        file_type = go_model.find_by_qualified_name("File")
        assert [m.qualified_name for m in go_model.members(file_type)] == ["File.Read"]

    def test_structural_inheritors(self, go_model: InMemoryCodeModel) -> None:
        reader = go_model.find_by_qualified_name("Reader")
        assert [s.name for s in go_model.inheritors(reader)] == ["File"]

    def test_empty_interface_has_no_structural_inheritors(self, go_model: InMemoryCodeModel) -> None:
        empty = go_model.find_by_qualified_name("Empty")
        assert list(go_model.inheritors(empty)) == []


class TestProject:
    """Tests for the project wrapper."""

    def test_ensure_ready(self) -> None:
        model = InMemoryCodeModel(ready=False)
        project = Project(model, name="demo")
        with pytest.raises(IndexNotReadyError, match="demo"):
            project.ensure_ready()

        model.set_ready(True)
        project.ensure_ready()

    def test_relative_path(self) -> None:
        project = Project(InMemoryCodeModel(), base_path=Path("/work/app"))
        assert project.relative_path("/work/app/src/main.py") == "src/main.py"
        assert project.relative_path("src/main.py") == "src/main.py"
        assert project.relative_path("/elsewhere/lib.py") == "/elsewhere/lib.py"
        assert project.relative_path(None) is None


class TestSnapshot:
    """Tests for the JSON snapshot format."""

    def test_save_and_load(self, python_model: InMemoryCodeModel, temp_dir: Path) -> None:
        path = temp_dir / ".codenav" / "model.json"
        save_snapshot(python_model, path, plugins=["python"])

        loaded = load_snapshot(path)
        assert len(loaded) == len(python_model)

        puppy = loaded.find_by_qualified_name("zoo.Puppy")
        assert loaded.type_references(puppy) == (TypeRef("Dog", None, Relation.EXTENDS),)

        play = loaded.find_by_qualified_name("zoo.Puppy.play")
        bark = loaded.find_by_qualified_name("zoo.Dog.bark")
        assert loaded.resolve_call(loaded.calls_within(play)[0]) == bark
        assert read_snapshot(path)["plugins"] == ["python"]

    def test_shape(self, python_model: InMemoryCodeModel) -> None:
        data = model_to_dict(python_model)
        assert data["version"] == 1
        assert {s["kind"] for s in data["symbols"]} == {"CLASS", "METHOD"}
        assert len(data["calls"]) == 2
        assert data["type_refs"][0] == {
            "owner": "zoo.Dog",
            "name": "Animal",
            "qualified_name": "zoo.Animal",
            "relation": "extends",
        }

    def test_unsupported_version(self) -> None:
        with pytest.raises(SnapshotError, match="version"):
            model_from_dict({"version": 99, "symbols": []})

    def test_unknown_reference(self) -> None:
        data = {
            "version": 1,
            "symbols": [],
            "type_refs": [{"owner": "missing", "name": "Base"}],
        }
        with pytest.raises(SnapshotError):
            model_from_dict(data)

    def test_missing_file(self, temp_dir: Path) -> None:
        with pytest.raises(SnapshotError, match="No code model snapshot"):
            read_snapshot(temp_dir / "model.json")

    def test_invalid_json(self, temp_dir: Path) -> None:
        path = temp_dir / "model.json"
        path.write_text("{not json")
        with pytest.raises(SnapshotError):
            load_snapshot(path)

    def test_not_an_object(self, temp_dir: Path) -> None:
        path = temp_dir / "model.json"
        path.write_text(json.dumps([1, 2, 3]))
        with pytest.raises(SnapshotError):
            read_snapshot(path)

    def test_plugins(self, python_model: InMemoryCodeModel) -> None:
        assert plugins_from_dict(model_to_dict(python_model, ["go", "java"])) == frozenset({"go", "java"})
        assert plugins_from_dict(model_to_dict(python_model)) is None
        with pytest.raises(SnapshotError):
            plugins_from_dict({"plugins": "python"})
