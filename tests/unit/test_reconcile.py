"""
Reconciliation tests

Covers owner re-derivation at every depth, sibling position, atomicity on
invalid documents and consistency for concurrent readers.
"""

import threading

import pytest

from nestview.core import (
    CompositeNode,
    LeafNode,
    ReconciliationEngine,
    Serializer,
    TreeContext,
    reparent_subtree,
    walk,
)
from nestview.exceptions import (
    InvalidDescriptionError,
    NodeNotFoundError,
    OwnershipCycleError,
)


def build_three_levels(context: TreeContext):
    """root -> A -> B -> C, plus a sibling on each level"""
    catalog = context.catalog
    root = context.add_view(CompositeNode("root"))
    root.add_child(LeafNode.list_view("first", catalog))
    a = root.add_child(CompositeNode("A"))
    root.add_child(LeafNode.all_view("last", catalog))
    b = a.add_child(CompositeNode("B"))
    a.add_child(LeafNode.list_view("a-list", catalog))
    c = b.add_child(CompositeNode("C"))
    c.add_child(LeafNode.all_view("c-all", catalog))
    return root, a, b, c


REPLACEMENT_A = {
    "name": "ignored",
    "type": "nested",
    "default_view": "a-list2",
    "views": [
        {
            "name": "B2",
            "type": "nested",
            "views": [
                {
                    "name": "C2",
                    "type": "nested",
                    "views": [{"name": "c-all2", "type": "all"}],
                }
            ],
        },
        {"name": "a-list2", "type": "list", "jobs": ["x"]},
    ],
}


def assert_owners_consistent(context: TreeContext):
    for top in context.views():
        assert top.owner is context
        for node, owner in walk(top):
            assert owner.registry.get(node.name) is node


class TestReplaceFromDescription:
    """Wholesale replacement of a nested view"""

    def test_owner_chain_at_every_depth(self, context):
        root, a, b, c = build_three_levels(context)

        result = a.replace_from_description(REPLACEMENT_A)

        new_a = root.get_child("A")
        assert result.replacement is new_a
        assert result.original is a
        assert new_a is not a
        assert new_a.owner is root
        b2 = new_a.get_child("B2")
        c2 = b2.get_child("C2")
        leaf = c2.get_child("c-all2")
        assert b2.owner is new_a
        assert c2.owner is b2
        assert leaf.owner is c2
        assert leaf.context is context
        assert leaf.full_name == "root/A/B2/C2/c-all2"
        assert result.nodes_reparented == 4
        assert_owners_consistent(context)

    def test_old_nodes_unreachable(self, context):
        root, a, b, c = build_three_levels(context)

        a.replace_from_description(REPLACEMENT_A)

        reachable = {id(node) for node, _ in walk(root)}
        for old in (a, b, c):
            assert id(old) not in reachable
        assert context.find("root/A/B") is None
        assert context.find("root/A/B2/C2") is not None

    def test_swapped_out_nodes_report_detached(self, context):
        root, a, b, c = build_three_levels(context)
        assert all(node.is_attached for node in (root, a, b, c))

        result = a.replace_from_description(REPLACEMENT_A)

        for old in (a, b, c, c.get_child("c-all")):
            assert not old.is_attached
        for node, _ in walk(result.replacement):
            assert node.is_attached
        assert root.is_attached
        assert root.get_child("first").is_attached

    def test_name_and_position_kept(self, context):
        root, a, _, _ = build_three_levels(context)

        root.get_child("A").replace_from_description(REPLACEMENT_A)

        assert [v.name for v in root.list_children()] == ["first", "A", "last"]
        assert root.get_child("A").default_child_name == "a-list2"

    def test_top_level_view_keeps_root_owner(self, context):
        root, _, _, _ = build_three_levels(context)
        document = Serializer(context.catalog).serialize(root)
        document = document.replace("first", "new")

        result = root.replace_from_description(document)

        new_root = context.get_view("root")
        assert result.replacement is new_root
        assert new_root.owner is context
        assert new_root.get_child("new").owner is new_root
        assert new_root.get_child("A").owner is new_root
        a = new_root.get_child("A")
        assert a.get_child("B").owner is a
        assert a.get_child("B").get_child("C").owner is a.get_child("B")
        assert_owners_consistent(context)

    def test_leaf_replacement(self, context):
        root, _, _, _ = build_three_levels(context)
        first = root.get_child("first")

        context.engine.replace_from_description(
            first, {"name": "first", "type": "list", "include_regex": ".*"}
        )

        assert root.get_child("first").source.include_regex == ".*"
        assert root.get_child("first").owner is root


class TestAtomicity:
    """Invalid documents leave the tree alone"""

    @pytest.mark.parametrize(
        "document",
        [
            "name: [broken",
            {"name": "A", "type": "nested", "views": [{"name": "x"}]},
            {
                "name": "A",
                "type": "nested",
                "views": [
                    {"name": "dup", "type": "all"},
                    {"name": "dup", "type": "all"},
                ],
            },
            {"name": "A", "type": "all"},
            b"name: A\ntype: all\n",
            b"name: \xff\xfe\ntype: nested\n",
            b"name: [broken",
            "&a {name: x, type: nested, views: [*a]}",
            "&a {name: A, type: nested, views: [{name: B, type: nested, views: [*a]}]}",
            {"name": "A", "type": "nested", "views": [{"name": "x", "type": "custom"}]},
        ],
    )
    def test_invalid_document_changes_nothing(self, context, document):
        root, a, b, c = build_three_levels(context)
        before = Serializer(context.catalog).to_dict(root)
        nodes_before = walk(root)

        with pytest.raises(InvalidDescriptionError):
            a.replace_from_description(document)

        assert Serializer(context.catalog).to_dict(root) == before
        assert walk(root) == nodes_before
        assert root.get_child("A") is a
        assert c.owner is b


class TestReconcile:
    """Swapping materialized subtrees"""

    def test_detached_original(self, context):
        engine = ReconciliationEngine(context.serializer)
        with pytest.raises(NodeNotFoundError):
            engine.reconcile(CompositeNode("loose"), CompositeNode("other"))

    def test_replacement_attached_elsewhere_is_moved(self, context):
        root, a, _, _ = build_three_levels(context)
        holder = context.add_view(CompositeNode("holder"))
        candidate = holder.add_child(CompositeNode("candidate"))

        context.engine.reconcile(a, candidate)

        assert not holder.has_child("candidate")
        assert root.get_child("A") is candidate
        assert candidate.name == "A"
        assert candidate.owner is root

    def test_replacement_stays_put_when_original_already_gone(self, context):
        root, a, _, _ = build_three_levels(context)
        holder = context.add_view(CompositeNode("holder"))
        candidate = holder.add_child(CompositeNode("candidate"))
        context.engine.reconcile(a, CompositeNode("newer"))

        with pytest.raises(NodeNotFoundError):
            context.engine.reconcile(a, candidate)

        assert holder.get_child("candidate") is candidate
        assert candidate.name == "candidate"
        assert candidate.owner is holder
        assert root.get_child("A") is not candidate
        assert_owners_consistent(context)

    def test_cannot_replace_with_ancestor(self, context):
        root, a, b, c = build_three_levels(context)

        with pytest.raises(OwnershipCycleError):
            context.engine.reconcile(c, a)
        assert b.get_child("C") is c

    def test_reparent_subtree_fixes_stale_owners(self):
        top = CompositeNode("top")
        inner = top.add_child(CompositeNode("inner"))
        other = CompositeNode("other")
        inner._set_owner(other)

        count = reparent_subtree(top)

        assert count == 1
        assert inner.owner is top


class TestConcurrentReaders:
    """Readers see the old subtree or the new one, never a mix"""

    def test_readers_during_reloads(self, context):
        root, _, _, _ = build_three_levels(context)
        documents = [
            REPLACEMENT_A,
            {
                "name": "A",
                "type": "nested",
                "views": [
                    {
                        "name": "B",
                        "type": "nested",
                        "views": [{"name": "C", "type": "nested"}],
                    }
                ],
            },
        ]
        problems = []
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                a = root.get_child("A")
                names = {child.name for child in a.list_children()}
                if names not in ({"B2", "a-list2"}, {"B"}, {"B", "a-list"}):
                    problems.append(names)
                for node, owner in walk(a):
                    if node is not a and owner.registry.get(node.name) is not node:
                        problems.append(node.full_name)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for i in range(200):
            root.get_child("A").replace_from_description(documents[i % 2])
        stop.set()
        for t in threads:
            t.join()

        assert problems == []
        assert_owners_consistent(context)
