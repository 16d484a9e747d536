"""Tests for declaration loading and flattening."""

import json

import pytest

from declguard.declarations import (
    DeclarationKind,
    DeclarationLoadError,
    DeclarationNode,
    Visibility,
    flatten,
    index_by_address,
    index_by_key,
    join_path,
    load_declarations,
    parse_declarations,
)


class TestDeclarationNode:
    """Tests for building declaration trees from records."""

    def test_children_are_folded_in_order(self, td):
        """Test that signatures and parameters become ordered children."""
        tree = parse_declarations(td.project(
            td.function("f", td.signature("f", td.intrinsic("void"), td.param("x", td.intrinsic("string")))),
        ))
        function = tree.children[0]
        signature = function.children[0]

        assert function.kind is DeclarationKind.FUNCTION
        assert signature.kind is DeclarationKind.CALL_SIGNATURE
        assert [child.name for child in signature.children] == ["x"]

    def test_accessor_signatures(self, td):
        record = td.decl(
            "size",
            "Accessor",
            getSignature=td.decl("size", "Get signature", type=td.intrinsic("number")),
            setSignature=td.decl("size", "Set signature", type=td.intrinsic("void")),
        )
        tree = parse_declarations(td.project(td.widget(record)))
        accessor = tree.children[0].children[0]

        assert [child.kind for child in accessor.children] == [
            DeclarationKind.GET_SIGNATURE,
            DeclarationKind.SET_SIGNATURE,
        ]

    def test_flags(self, td):
        """Test flag parsing."""
        tree = parse_declarations(td.project(
            td.prop("a", td.intrinsic("string"), isProtected=True, isReadonly=True),
            td.prop("b", td.intrinsic("string"), isPrivate=True, isStatic=True),
            td.decl("c", "Parameter", type=td.intrinsic("number"), defaultValue="1"),
        ))
        a, b, c = tree.children

        assert a.flags.visibility is Visibility.PROTECTED
        assert a.flags.readonly
        assert b.flags.visibility is Visibility.PRIVATE
        assert b.flags.static
        assert c.flags.optional

    def test_unknown_kind_keeps_raw_tag(self, td):
        tree = parse_declarations(td.project(td.decl("x", "Mystery")))
        node = tree.children[0]

        assert node.kind is DeclarationKind.UNKNOWN
        assert node.display_kind == "Mystery"

    def test_sources(self, td):
        record = td.prop("a", td.intrinsic("string"))
        record["sources"] = [{"fileName": "src/widget.ts", "line": 12, "character": 4}]
        node = parse_declarations(td.project(record)).children[0]

        assert node.sources[0].render() == "src/widget.ts:12"
        assert node.sources[0].render("lib/") == "lib/src/widget.ts:12"

    def test_deep_nesting_does_not_recurse(self):
        """Test that trees deeper than the recursion limit are handled."""
        depth = 1500
        root = {"name": "lib", "kindString": "Project"}
        current = root
        for level in range(depth):
            child = {"name": f"ns{level}", "kindString": "Namespace"}
            current["children"] = [child]
            current = child

        tree = DeclarationNode.from_dict(root)
        flat = flatten(tree)

        assert len(flat) == depth + 1
        assert flat[-1].depth == depth
        assert flat[-1].name == f"ns{depth - 1}"


class TestLoader:
    """Tests for reading declaration files."""

    def test_load_file(self, td, write_json):
        path = write_json("api.json", td.project(td.widget()))
        tree = load_declarations(path)

        assert tree.name == "lib"
        assert tree.children[0].name == "Widget"

    def test_root_name_override(self, td, write_json):
        path = write_json("api.json", td.project())
        assert load_declarations(path, root_name="core").name == "core"

    def test_missing_file(self, tmp_path):
        with pytest.raises(DeclarationLoadError) as exc_info:
            load_declarations(tmp_path / "missing.json")
        assert exc_info.value.path == tmp_path / "missing.json"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(DeclarationLoadError, match="Invalid JSON"):
            load_declarations(path)

    def test_not_an_object(self, write_json):
        path = write_json("list.json", [1, 2, 3])

        with pytest.raises(DeclarationLoadError, match="must be a JSON object"):
            load_declarations(path)


class TestFlatten:
    """Tests for the flattener."""

    def test_pre_order_with_paths(self, td):
        tree = parse_declarations(td.project(
            td.widget(td.prop("size", td.intrinsic("number"))),
            td.function("make", td.signature("make", td.intrinsic("void"))),
        ))
        paths = [flat.qualified_path for flat in flatten(tree)]

        assert paths == [
            "lib",
            "lib.Widget",
            "lib.Widget.size",
            "lib.make",
            "lib.make.make",
        ]

    def test_excluding_root_name(self, td):
        tree = parse_declarations(td.project(td.widget(td.prop("size", td.intrinsic("number")))))
        flat = flatten(tree, root_name="")

        assert [node.qualified_path for node in flat] == ["", "Widget", "Widget.size"]
        assert flat[0].is_root
        assert flat[1].parent_address == ""

    def test_overload_ordinals(self, td):
        """Test that same-named siblings get positional addresses."""
        tree = parse_declarations(td.project(td.widget(td.method(
            "on",
            td.signature("on", td.intrinsic("void"), td.param("x", td.intrinsic("string"))),
            td.signature("on", td.intrinsic("void"), td.param("x", td.intrinsic("number"))),
        ))))
        flat = flatten(tree, root_name="")
        signatures = [node for node in flat if node.kind is DeclarationKind.CALL_SIGNATURE]

        assert [node.address for node in signatures] == ["Widget.on.on", "Widget.on.on#1"]
        assert [node.qualified_path for node in signatures] == ["Widget.on.on", "Widget.on.on"]
        assert [node.ordinal for node in signatures] == [0, 1]

        params = [node for node in flat if node.kind is DeclarationKind.PARAMETER]
        assert params[1].address == "Widget.on.on#1.x"
        assert params[1].parent_address == "Widget.on.on#1"

    def test_merged_declarations_are_counted_per_kind(self, td):
        """Test that a function and a namespace sharing a name keep separate ordinals."""
        tree = parse_declarations(td.project(
            td.function("foo", td.signature("foo", td.intrinsic("void"))),
            td.decl("foo", "Namespace", children=[td.prop("x", td.intrinsic("string"))]),
        ))
        flat = flatten(tree, root_name="")
        tops = [node for node in flat if node.depth == 1]

        assert [node.address for node in tops] == ["foo", "foo"]
        assert [node.ordinal for node in tops] == [0, 0]
        assert tops[0].key != tops[1].key
        assert len(index_by_key(flat)) == len(flat)

        member = next(node for node in flat if node.name == "x")
        assert member.parent_key == tops[1].key

    def test_index_first_entry_wins(self, td):
        tree = parse_declarations(td.project(td.widget()))
        flat = flatten(tree)
        index = index_by_address(flat + flat)

        assert index["lib.Widget"] is flat[1]

    def test_join_path(self):
        assert join_path("", "a") == "a"
        assert join_path("a", "") == "a"
        assert join_path("a", "b") == "a.b"

    def test_flatten_is_deterministic(self, td):
        record = td.project(td.widget(td.prop("a", td.intrinsic("string")), td.prop("b", td.intrinsic("number"))))
        first = [node.address for node in flatten(parse_declarations(record))]
        second = [node.address for node in flatten(parse_declarations(json.loads(json.dumps(record))))]

        assert first == second
