"""Unit tests for link relation resolution."""

import pytest

from src.halgraph.core.links import Targets, expand_uri, link_href, link_targets
from src.halgraph.utils.exceptions import MalformedResourceError


@pytest.fixture
def resource():
    return {
        "_links": {
            "self": {"href": "http://example.com"},
            "rel1": {"href": "http://example.com/linked1"},
            "rel2": [
                {"href": "http://example.com/linked2a"},
                {"href": "http://example.com/linked2b"},
            ],
            "tpl1": {"href": "http://example.com/templated1/{foo}", "templated": True},
            "tpl2": [
                {"href": "http://example.com/templated2a/{foo}", "templated": True},
                {"href": "http://example.com/templated2b/{foo}", "templated": True},
            ],
            "both": {"href": "http://example.com/both/linked"},
            "none": [],
        },
        "_embedded": {
            "emb1": {"_links": {"self": {"href": "http://example.com/embedded1"}}},
            "emb2": [
                {"_links": {"self": {"href": "http://example.com/embedded2a"}}},
                {"_links": {"self": {"href": "http://example.com/embedded2b"}}},
            ],
            "both": {"_links": {"self": {"href": "http://example.com/both/embedded"}}},
        },
    }


class TestLinkHref:
    """Test link_href()."""

    def test_returns_href_of_link(self, resource):
        assert link_href(resource, "rel1") == "http://example.com/linked1"

    def test_returns_hrefs_of_link_array(self, resource):
        assert link_href(resource, "rel2") == [
            "http://example.com/linked2a",
            "http://example.com/linked2b",
        ]

    def test_expands_templated_link(self, resource):
        assert link_href(resource, "tpl1", {"foo": "bar"}) == "http://example.com/templated1/bar"

    def test_expands_templated_link_array(self, resource):
        assert link_href(resource, "tpl2", {"foo": "bar"}) == [
            "http://example.com/templated2a/bar",
            "http://example.com/templated2b/bar",
        ]

    def test_templated_link_without_params_is_unchanged(self, resource):
        assert link_href(resource, "tpl1") == "http://example.com/templated1/{foo}"

    def test_plain_link_ignores_params(self, resource):
        assert link_href(resource, "rel1", {"foo": "bar"}) == "http://example.com/linked1"

    def test_falls_back_to_embedded_self_href(self, resource):
        assert link_href(resource, "emb1") == "http://example.com/embedded1"

    def test_falls_back_to_embedded_array(self, resource):
        assert link_href(resource, "emb2") == [
            "http://example.com/embedded2a",
            "http://example.com/embedded2b",
        ]

    def test_prefers_link_over_embedded(self, resource):
        assert link_href(resource, "both") == "http://example.com/both/linked"

    def test_returns_none_for_missing_relation(self, resource):
        assert link_href(resource, "nonexistent") is None

    def test_empty_link_array_resolves_to_empty_list(self, resource):
        assert link_href(resource, "none") == []

    def test_works_on_resource_without_reserved_maps(self):
        assert link_href({"name": "bare"}, "rel") is None

    def test_link_without_href_is_malformed(self):
        resource = {"_links": {"self": {"href": "/a"}, "broken": {"title": "no href"}}}

        with pytest.raises(MalformedResourceError, match="broken"):
            link_href(resource, "broken")

    def test_embedded_without_self_is_malformed(self):
        resource = {"_links": {}, "_embedded": {"child": {"name": "anonymous"}}}

        with pytest.raises(MalformedResourceError):
            link_href(resource, "child")


class TestLinkTargets:
    """Test the Targets form used by the embedder."""

    def test_single_link_is_not_many(self, resource):
        targets = link_targets(resource, "rel1")

        assert targets == Targets(hrefs=("http://example.com/linked1",), many=False)

    def test_link_array_is_many(self, resource):
        targets = link_targets(resource, "rel2")

        assert targets.many is True
        assert len(targets.hrefs) == 2

    def test_single_element_array_stays_many(self):
        resource = {"_links": {"items": [{"href": "/only"}]}}

        targets = link_targets(resource, "items")

        assert targets.many is True
        assert targets.unwrap() == ["/only"]

    def test_prefer_embedded(self, resource):
        targets = link_targets(resource, "both", prefer_embedded=True)

        assert targets.hrefs == ("http://example.com/both/embedded",)

    def test_prefer_embedded_falls_back_to_links(self, resource):
        targets = link_targets(resource, "rel1", prefer_embedded=True)

        assert targets.hrefs == ("http://example.com/linked1",)

    def test_prefer_embedded_skips_empty_embedded_array(self):
        resource = {"_links": {"items": [{"href": "/1"}]}, "_embedded": {"items": []}}

        targets = link_targets(resource, "items", prefer_embedded=True)

        assert targets == Targets(hrefs=("/1",), many=True)

    def test_prefer_embedded_empty_array_without_link(self):
        resource = {"_links": {}, "_embedded": {"items": []}}

        targets = link_targets(resource, "items", prefer_embedded=True)

        assert targets == Targets(hrefs=(), many=True)

    def test_shape_mirrors_plurality(self):
        assert Targets(hrefs=("/a",), many=False).shape(["A"]) == "A"
        assert Targets(hrefs=("/a",), many=True).shape(["A"]) == ["A"]


class TestExpandUri:
    """Test URI Template expansion."""

    def test_query_expansion(self):
        uri = expand_uri("/orders{?page,size}", {"page": "2", "size": "10"})

        assert uri == "/orders?page=2&size=10"

    def test_missing_variables_are_dropped(self):
        assert expand_uri("/orders/{id}", {}) == "/orders/"
