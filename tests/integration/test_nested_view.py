"""
Nested view end-to-end tests

Builds view trees the way the host does (create, configure, reload) and
checks navigation, default redirects, aggregate status and reloads.
"""

import pytest

from nestview.core import CompositeNode, LeafNode, Outcome, TreeContext
from nestview.exceptions import InvalidDescriptionError, NodeNotFoundError
from tests.fakes import FakeJob


@pytest.fixture
def host(catalog):
    catalog.register(FakeJob("Abcd"))
    catalog.register(FakeJob("Efgh"))
    return TreeContext(catalog)


class TestNestedViewScenario:
    """Create a nested view with subviews and a default"""

    def test_subviews_and_default(self, host):
        nest = host.load_view({"name": "test-nest", "type": "nested"})
        nest.add_child(
            LeafNode.list_view("subview", host.catalog, include_regex="E.*")
        )
        nest.add_child(CompositeNode("subnest"))
        nest.add_child(LeafNode.all_view("suball", host.catalog))

        urls = {child.url for child in nest.list_children()}
        assert urls == {
            "view/test-nest/view/subview/",
            "view/test-nest/view/subnest/",
            "view/test-nest/view/suball/",
        }

        # "None" and 2 views in alphabetical order; subnest is not offered
        assert nest.default_child_candidates() == ["", "suball", "subview"]

        nest.default_child_name = "subview"
        target = host.find("test-nest").resolve_default()
        assert target is nest.get_child("subview")
        assert [item.name for item in target.list_items()] == ["Efgh"]

        subnest = host.find("test-nest/subnest")
        assert subnest.list_children() == []
        assert subnest.resolve_default() is None

    def test_status_follows_jobs(self, host):
        nest = host.add_view(CompositeNode("test"))
        nest.add_child(LeafNode.all_view("foo", host.catalog))
        assert host.get_worst_result("test") is None

        host.catalog.get("Abcd").run(Outcome.SUCCESS)
        assert host.get_worst_result("test") is Outcome.SUCCESS

        host.catalog.get("Efgh").run(Outcome.FAILURE)
        assert host.get_worst_result("test") is Outcome.FAILURE

        host.catalog.get("Efgh").disable()
        assert host.get_worst_result("test") is Outcome.SUCCESS

    def test_unknown_path(self, host):
        with pytest.raises(NodeNotFoundError):
            host.get_worst_result("nope")
        assert host.find("") is None
        assert host.find("a/b") is None


class TestConfigReload:
    """Reloading a nested view from the description it provides"""

    def build(self, host):
        root = CompositeNode("nestedRoot")
        host.add_view(root)
        root.add_child(LeafNode.list_view("listViewlvl1", host.catalog))
        level1 = root.add_child(CompositeNode("nestedViewlvl1"))
        level2 = level1.add_child(CompositeNode("nestedViewlvl2"))
        level1.add_child(LeafNode.list_view("listViewlvl2", host.catalog))
        level2.add_child(LeafNode.list_view("listViewlvl3", host.catalog))
        return root

    def test_reload_sets_owners(self, host):
        self.build(host)
        document = host.describe_view("nestedRoot").replace("listViewlvl1", "new")

        host.reload_view("nestedRoot", document)

        root = host.get_view("nestedRoot")
        assert root.owner is host
        assert root.get_child("new") is not None
        assert root.get_child("nestedViewlvl1").owner is root
        assert root.get_child("new").owner is root
        subview = root.get_child("nestedViewlvl1")
        assert subview.get_child("nestedViewlvl2").owner is subview
        assert subview.get_child("listViewlvl2").owner is subview
        level2 = subview.get_child("nestedViewlvl2")
        assert level2.get_child("listViewlvl3").owner is level2
        assert host.find("nestedRoot/nestedViewlvl1/nestedViewlvl2/listViewlvl3") is not None

    def test_invalid_reload_keeps_tree(self, host):
        root = self.build(host)
        before = host.describe_view("nestedRoot")

        with pytest.raises(InvalidDescriptionError):
            host.reload_view("nestedRoot", "name: nestedRoot\ntype: nested\nviews: 5\n")

        assert host.get_view("nestedRoot") is root
        assert host.describe_view("nestedRoot") == before

    def test_reload_keeps_status(self, host):
        self.build(host)
        host.catalog.get("Abcd").run(Outcome.UNSTABLE)
        data = host.serializer.to_dict(host.get_view("nestedRoot"))
        level3 = data["views"][1]["views"][0]["views"][0]
        assert level3["name"] == "listViewlvl3"
        level3["jobs"] = ["Abcd"]

        host.reload_view("nestedRoot", data)

        assert host.get_worst_result("nestedRoot") is Outcome.UNSTABLE

    def test_reload_unknown_view(self, host):
        with pytest.raises(NodeNotFoundError):
            host.reload_view("missing", {"name": "missing", "type": "all"})
