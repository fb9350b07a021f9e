"""Tests for hierarchy linking."""

from typegraph_cli.hierarchy import bare_roots, iter_nodes, link_declarations, qualified_path
from typegraph_cli.models import DeclarationRecord, FieldInfo, TypeNode


def _record(name, parent=None, line=1, **fields):
    return DeclarationRecord(
        name=name,
        parent_name=parent,
        fields={k: FieldInfo(name=k, type=v) for k, v in fields.items()},
        line=line,
    )


def _decls(*records):
    return {r.name: r for r in records}


def test_links_children_under_parent():
    decls = _decls(
        _record("UserInstance", id="string"),
        _record("AdminInstance", parent="UserInstance"),
        _record("GuestInstance", parent="UserInstance"),
    )
    roots = link_declarations(decls, source_file="types.ts", root_suffix="Instance")

    assert [r.name for r in roots] == ["UserInstance"]
    user = roots[0]
    assert list(user.children) == ["AdminInstance", "GuestInstance"]
    assert user.children["AdminInstance"].parent is user
    assert user.children["AdminInstance"].qualified_path == "UserInstance.AdminInstance"
    assert user.source_file == "types.ts"


def test_root_requires_suffix():
    decls = _decls(_record("UserInstance"), _record("Helper"))
    roots = link_declarations(decls, root_suffix="Instance")
    assert [r.name for r in roots] == ["UserInstance"]


def test_empty_suffix_accepts_every_parentless_record():
    decls = _decls(_record("A"), _record("B", parent="A"), _record("C"))
    roots = link_declarations(decls, root_suffix="")
    assert [r.name for r in roots] == ["A", "C"]


def test_roots_keep_declaration_order():
    decls = _decls(_record("ZInstance"), _record("AInstance"), _record("MInstance"))
    roots = link_declarations(decls, root_suffix="Instance")
    assert [r.name for r in roots] == ["ZInstance", "AInstance", "MInstance"]


def test_dangling_parent_is_excluded():
    decls = _decls(
        _record("RootInstance"),
        _record("Orphan", parent="Missing"),
        _record("OrphanChild", parent="Orphan"),
    )
    roots = link_declarations(decls, root_suffix="Instance")
    reachable = {n.name for n in iter_nodes(roots)}
    assert reachable == {"RootInstance"}


def test_qualified_path_independent_of_declaration_order():
    """A grandchild declared before its parent is linked still gets the full path."""
    decls = _decls(
        _record("LeafInstance", parent="MidInstance"),
        _record("MidInstance", parent="TopInstance"),
        _record("TopInstance"),
    )
    roots = link_declarations(decls, root_suffix="Instance")
    leaf = roots[0].children["MidInstance"].children["LeafInstance"]
    assert leaf.qualified_path == "TopInstance.MidInstance.LeafInstance"


def test_mutual_parents_terminate_and_are_unreachable():
    decls = _decls(
        _record("AInstance", parent="BInstance"),
        _record("BInstance", parent="AInstance"),
    )
    roots = link_declarations(decls, root_suffix="Instance")
    assert roots == []


def test_qualified_path_stops_on_cycle():
    a = TypeNode(name="A", fields={}, source_file="", line=1)
    b = TypeNode(name="B", fields={}, source_file="", line=2)
    a.parent, b.parent = b, a
    assert qualified_path(a) == "B.A"
    assert qualified_path(b) == "A.B"


def test_bare_roots_from_fallback_records():
    records = [
        DeclarationRecord(name="UserType", parent_name=None, fields={}, line=3, source_file="src/index.ts"),
        DeclarationRecord(name="AdminType", parent_name=None, fields={}, line=1, source_file="src/admin.ts"),
    ]
    roots = bare_roots(records)
    assert [r.name for r in roots] == ["UserType", "AdminType"]
    assert roots[1].source_file == "src/admin.ts"
    assert all(r.parent is None and not r.children for r in roots)


def test_fields_are_copied_from_records():
    record = _record("XInstance", a="string")
    roots = link_declarations(_decls(record), root_suffix="Instance")
    roots[0].fields["b"] = FieldInfo(name="b", type="number")
    assert "b" not in record.fields
