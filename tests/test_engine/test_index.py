"""Tests for apidex.engine.index."""

from __future__ import annotations

import logging

from apidex.engine.index import build_index, group_by_tag
from apidex.models import HTTPMethod


TWO_PATHS = {
    "/widgets": {"get": {}, "post": {}},
    "/widgets/{id}": {"get": {}, "post": {}},
}


class TestBuildIndex:
    """Flattening the operations table."""

    def test_one_record_per_path_and_method(self, petstore_spec) -> None:
        records = build_index(petstore_spec)
        assert [r.key for r in records] == [
            ("GET", "/pets"),
            ("POST", "/pets"),
            ("GET", "/pets/{petId}"),
            ("DELETE", "/pets/{petId}"),
            ("GET", "/store/inventory"),
            ("GET", "/health"),
        ]

    def test_identities_unique(self, petstore_spec, widgets_spec) -> None:
        for spec in (petstore_spec, widgets_spec):
            keys = [r.key for r in build_index(spec)]
            assert len(keys) == len(set(keys))

    def test_untagged_operations_filed_under_other(self, make_spec) -> None:
        records = build_index(make_spec(TWO_PATHS))
        assert len(records) == 4
        assert {r.tag for r in records} == {"Other"}

    def test_method_keys_upper_cased(self, make_spec) -> None:
        records = build_index(make_spec({"/a": {"Get": {}, "pAtCh": {}}}))
        assert [r.method for r in records] == [HTTPMethod.GET, HTTPMethod.PATCH]

    def test_non_method_keys_ignored(self, make_spec) -> None:
        spec = make_spec(
            {
                "/a": {
                    "summary": "path summary",
                    "parameters": [],
                    "x-internal": True,
                    "get": {},
                }
            }
        )
        assert [r.key for r in build_index(spec)] == [("GET", "/a")]

    def test_case_duplicates_skipped_with_warning(self, make_spec, caplog) -> None:
        spec = make_spec({"/a": {"get": {"summary": "first"}, "GET": {"summary": "second"}}})
        with caplog.at_level(logging.WARNING, logger="apidex.engine.index"):
            records = build_index(spec)
        assert len(records) == 1
        assert records[0].summary == "first"
        assert "duplicate" in caplog.text

    def test_non_mapping_operation_still_indexed(self, make_spec) -> None:
        records = build_index(make_spec({"/a": {"get": "broken"}}))
        assert len(records) == 1
        assert records[0].tag == "Other"

    def test_path_parameters_applied_to_every_method(self, petstore_spec) -> None:
        records = {r.key: r for r in build_index(petstore_spec)}
        for method in ("GET", "DELETE"):
            params = records[(method, "/pets/{petId}")].parameters
            assert [p.name for p in params] == ["petId"]
            assert params[0].required is True

    def test_global_security_inherited(self, make_spec) -> None:
        spec = make_spec({"/a": {"get": {}}}, security=[{"basic": []}])
        assert build_index(spec)[0].security == ({"basic": ()},)

    def test_loosely_typed_operation_indexed(self, make_spec) -> None:
        spec = make_spec(
            {
                "/a": {
                    "get": {
                        "parameters": [{"name": "n", "in": "query", "type": "integer", "format": 32}],
                        "security": [{"oauth": ["read"]}, "junk"],
                        "responses": {200: {"description": 1}},
                    }
                }
            }
        )
        (record,) = build_index(spec)
        assert record.parameters[0].format == "32"
        assert record.security == ({"oauth": ("read",)},)
        assert [(r.code, r.description) for r in record.responses] == [("200", "1")]


class TestGroupByTag:
    """The navigation grouping shared by every presenter."""

    def test_groups_sorted_ordinally(self, petstore_spec) -> None:
        groups = group_by_tag(build_index(petstore_spec))
        assert [tag for tag, _ in groups] == ["Other", "pets", "store"]

    def test_uppercase_sorts_before_lowercase(self, make_spec) -> None:
        spec = make_spec(
            {
                "/a": {"get": {"tags": ["beta"]}},
                "/b": {"get": {"tags": ["Alpha"]}},
                "/c": {"get": {"tags": ["alpha"]}},
            }
        )
        assert [tag for tag, _ in group_by_tag(build_index(spec))] == ["Alpha", "alpha", "beta"]

    def test_members_keep_index_order(self, petstore_spec) -> None:
        groups = dict(group_by_tag(build_index(petstore_spec)))
        assert [r.key for r in groups["pets"]] == [
            ("GET", "/pets"),
            ("POST", "/pets"),
            ("GET", "/pets/{petId}"),
            ("DELETE", "/pets/{petId}"),
        ]

    def test_empty_input(self) -> None:
        assert group_by_tag(()) == []
