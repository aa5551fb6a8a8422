from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest

from rest_resource import MemoryCacheEngine, Resource, ResourceConfig, RestError


@pytest.fixture()
def resource(config, http_client, widgets):
    return Resource(config, {"widget": widgets}, client=http_client)


@pytest.fixture()
def cached_resource(config, http_client, widgets):
    return Resource(config, {"widget": widgets}, client=http_client, cache=MemoryCacheEngine())


def test_find_by_id_appends_id_to_path(resource, http_client, recorder):
    http_client.respond("get", "/widgets/7", data={"id": 7, "name": "sprocket"})

    resource.find("widget", {"where": {"id": 7}}, recorder)

    assert http_client.calls == [("get", "/widgets/7", None)]
    assert recorder.calls == [(None, [{"id": 7, "name": "sprocket"}])]


def test_find_unwraps_results_envelope(resource, http_client, widgets, recorder):
    http_client.respond("get", "/widgets", data={"results": [{"id": 1}]})

    resource.find("widget", {}, recorder)

    assert recorder.calls == [(None, [{"id": 1}])]
    assert widgets.unserialized == [{"id": 1}]
    assert widgets.cast_records == [{"id": 1}]


def test_find_places_selector_and_pagination_in_query(resource, http_client, recorder):
    resource.find("widget", {"where": {"color": "red"}, "limit": 10, "skip": 20}, recorder)

    verb, path, body = http_client.calls[0]
    assert verb == "get"
    assert path == "/widgets?color=red&skip=20&limit=10"
    assert body is None


def test_find_does_not_mutate_caller_options(resource, recorder):
    options = {"where": {"id": 3, "color": "blue"}}

    resource.find("widget", options, recorder)

    assert options == {"where": {"id": 3, "color": "blue"}}


def test_bulk_update_fans_out_per_matched_record(resource, http_client, recorder):
    http_client.respond("get", "/widgets?color=red", data=[{"id": 1}, {"id": 2}])
    http_client.respond("put", "/widgets/1", data={"id": 1, "price": 5})
    http_client.respond("put", "/widgets/2", data={"id": 2, "price": 5})

    resource.update("widget", {"where": {"color": "red"}}, {"price": 5}, recorder)

    assert http_client.calls == [
        ("get", "/widgets?color=red", None),
        ("put", "/widgets/1", {"price": 5}),
        ("put", "/widgets/2", {"price": 5}),
    ]
    assert recorder.calls == [(None, {"id": 2, "price": 5})]


def test_bulk_destroy_reports_first_sub_request_error(resource, http_client, recorder):
    http_client.respond("get", "/widgets?color=red", data=[{"id": 1}, {"id": 2}])
    http_client.respond("delete", "/widgets/1", status=404, error=RuntimeError("not found"))

    resource.destroy("widget", {"where": {"color": "red"}}, recorder)

    assert [call[:2] for call in http_client.calls] == [("get", "/widgets?color=red"), ("delete", "/widgets/1"), ("delete", "/widgets/2")]
    assert len(recorder.calls) == 1
    assert isinstance(recorder.error, RestError)
    assert recorder.error.message == "not found"


def test_bulk_update_enumeration_failure_aborts(resource, http_client, recorder):
    http_client.respond("get", "/widgets?color=red", status=None, error=ConnectionError("unreachable"))

    resource.update("widget", {"where": {"color": "red"}}, {"price": 5}, recorder)

    assert len(http_client.calls) == 1
    assert len(recorder.calls) == 1
    assert isinstance(recorder.error, RestError)
    assert recorder.error.message == "unreachable"


def test_bulk_update_without_matches_completes_with_empty_list(resource, http_client, recorder):
    http_client.respond("get", "/widgets?color=green", data=[])

    resource.update("widget", {"where": {"color": "green"}}, {"price": 5}, recorder)

    assert len(http_client.calls) == 1
    assert recorder.calls == [(None, [])]


def test_bulk_update_keeps_configuration_overrides(resource, http_client, recorder):
    http_client.respond("get", "/gadgets?color=red", data=[{"id": 4}])

    resource.update("widget", {"where": {"color": "red"}, "resource": "gadgets"}, {"price": 1}, recorder)

    assert http_client.calls[1] == ("put", "/gadgets/4", {"price": 1})


def test_update_by_id_layers_selector_over_values(resource, http_client, recorder):
    resource.update("widget", {"where": {"id": 9, "version": 3}}, {"price": 5}, recorder)

    assert http_client.calls == [("put", "/widgets/9", {"price": 5, "version": 3})]


def test_create_posts_values(resource, http_client, widgets, recorder):
    http_client.respond("post", "/widgets", data={"id": 11, "name": "cog"})

    resource.create("widget", {"name": "cog"}, recorder)

    assert http_client.calls == [("post", "/widgets", {"name": "cog"})]
    assert recorder.calls == [(None, {"id": 11, "name": "cog"})]
    assert widgets.unserialized == [{"id": 11, "name": "cog"}]


def test_invalid_method_fails_without_io(http_client, recorder):
    resource = Resource(ResourceConfig(hostname="api.example.com", methods={"find": "fetch"}), client=http_client)

    resource.find("widget", {}, recorder)

    assert http_client.calls == []
    assert isinstance(recorder.error, RestError)
    assert recorder.error.message == "Invalid REST method: fetch"


def test_unmapped_method_is_invalid(http_client, recorder):
    resource = Resource(ResourceConfig(hostname="api.example.com", methods={"find": "get"}), client=http_client)

    resource.create("widget", {"name": "cog"}, recorder)

    assert http_client.calls == []
    assert recorder.error.message == "Invalid REST method: None"


def test_http_error_status_is_normalized(resource, http_client, recorder):
    http_client.respond("get", "/widgets/1", status=500, data={"detail": "boom"}, error=RuntimeError("Internal Server Error"))

    resource.find("widget", {"where": {"id": 1}}, recorder)

    error = recorder.error
    assert len(recorder.calls) == 1
    assert isinstance(error, RestError)
    assert error.message == "Internal Server Error"
    assert error.status_code == 500
    assert error.data == {"detail": "boom"}
    assert error.request.path == "/widgets/1"


def test_transport_error_with_success_status_is_not_a_failure(resource, http_client, recorder):
    http_client.respond("post", "/widgets", status=201, data={"id": 2}, error=ValueError("trailing garbage"))

    resource.create("widget", {"name": "cog"}, recorder)

    assert recorder.calls == [(None, {"id": 2})]


def test_find_results_are_cached_by_uri(cached_resource, http_client, recorder):
    http_client.respond("get", "/widgets?color=red", data=[{"id": 1}])

    cached_resource.find("widget", {"where": {"color": "red"}}, recorder)
    cached_resource.find("widget", {"where": {"color": "red"}}, recorder)

    assert len(http_client.calls) == 1
    assert recorder.calls == [(None, [{"id": 1}]), (None, [{"id": 1}])]


def test_empty_cached_result_is_a_hit(cached_resource, http_client, recorder):
    http_client.respond("get", "/widgets", data=[])

    cached_resource.find("widget", {}, recorder)
    cached_resource.find("widget", {}, recorder)

    assert len(http_client.calls) == 1


def test_write_invalidates_cache_entry_for_its_uri(cached_resource, http_client, recorder):
    http_client.respond("get", "/widgets/7", data={"id": 7})

    cached_resource.find("widget", {"where": {"id": 7}}, recorder)
    cached_resource.update("widget", {"where": {"id": 7}}, {"price": 5}, recorder)
    cached_resource.find("widget", {"where": {"id": 7}}, recorder)

    assert [call[:2] for call in http_client.calls] == [("get", "/widgets/7"), ("put", "/widgets/7"), ("get", "/widgets/7")]


def test_failed_find_is_not_cached(cached_resource, http_client, recorder):
    http_client.respond("get", "/widgets", status=503, error=RuntimeError("unavailable"))

    cached_resource.find("widget", {}, recorder)
    cached_resource.find("widget", {}, recorder)

    assert len(http_client.calls) == 2


def test_options_override_configuration_per_call(resource, http_client, recorder):
    resource.find("widget", {"resource": "gizmos", "pathname": "/v2", "unknown": "ignored"}, recorder)
    resource.find("widget", {}, recorder)

    assert [call[1] for call in http_client.calls] == ["/v2/gizmos", "/widgets"]
    assert resource.config.resource is None
    assert resource.config.pathname == ""


def test_default_query_is_sent_and_not_leaked(http_client, recorder):
    config = ResourceConfig(hostname="api.example.com", query={"format": "json"})
    resource = Resource(config, client=http_client)

    resource.find("widget", {"where": {"color": "red"}}, recorder)
    resource.find("widget", {}, recorder)

    assert [call[1] for call in http_client.calls] == ["/widgets?format=json&color=red", "/widgets?format=json"]
    assert dict(config.query) == {"format": "json"}


def test_hooks_wrap_formatting(http_client, recorder):
    config = ResourceConfig(
        hostname="api.example.com",
        before_format_result=lambda record: {**record, "seen": True},
        after_format_results=lambda records: sorted(records, key=lambda record: record["id"]),
    )
    resource = Resource(config, client=http_client)
    http_client.respond("get", "/widgets", data={"objects": [{"id": 2}, {"id": 1}]})

    resource.find("widget", {}, recorder)

    assert recorder.result == [{"id": 1, "seen": True}, {"id": 2, "seen": True}]


def test_unregistered_collection_returns_raw_records(http_client, recorder):
    resource = Resource(ResourceConfig(hostname="api.example.com"), client=http_client)
    http_client.respond("get", "/people", data=[{"id": 1}])

    resource.find("person", {}, recorder)

    assert recorder.result == [{"id": 1}]


def test_records_exposing_id_attribute_are_fanned_out(http_client, recorder):
    class ObjectCollection:
        def unserialize(self, raw):
            return SimpleNamespace(**raw)

        def cast(self, record):
            return None

    resource = Resource(ResourceConfig(hostname="api.example.com"), {"widget": ObjectCollection()}, client=http_client)
    http_client.respond("get", "/widgets?color=red", data=[{"id": 5}])

    resource.destroy("widget", {"where": {"color": "red"}}, recorder)

    assert http_client.calls[-1] == ("delete", "/widgets/5", None)
    assert len(recorder.calls) == 1


def test_null_selector_destroys_collection_path_without_fan_out(resource, http_client, recorder):
    http_client.respond("get", "/widgets", data=[{"id": 1}, {"id": 2}, {"id": 3}])

    resource.destroy("widget", {"where": None}, recorder)

    assert http_client.calls == [("delete", "/widgets", None)]
    assert len(recorder.calls) == 1


def test_fan_out_waits_for_out_of_order_completions(config, widgets, recorder, deferred_client):
    resource = Resource(config, {"widget": widgets}, client=deferred_client)
    deferred_client.respond("get", "/widgets?color=red", data=[{"id": 1}, {"id": 2}, {"id": 3}])
    for record_id in (1, 2, 3):
        deferred_client.respond("put", f"/widgets/{record_id}", data={"id": record_id, "price": 5})

    resource.update("widget", {"where": {"color": "red"}}, {"price": 5}, recorder)

    assert [call[1] for call in deferred_client.calls] == ["/widgets?color=red", "/widgets/1", "/widgets/2", "/widgets/3"]
    assert recorder.calls == []

    callbacks_seen = []
    deferred_client.release_reversed(on_each=lambda: callbacks_seen.append(len(recorder.calls)))

    assert callbacks_seen == [0, 0, 1]
    assert recorder.calls == [(None, {"id": 3, "price": 5})]


def test_request_failures_are_logged_with_request_context(resource, http_client, recorder, caplog):
    http_client.respond("get", "/widgets/1", status=500, error=RuntimeError("boom"))

    with caplog.at_level(logging.WARNING, logger="rest_resource.resource"):
        resource.find("widget", {"where": {"id": 1}}, recorder)

    record = next(item for item in caplog.records if item.getMessage() == "REST request failed")
    assert record.collection == "widget"
    assert record.operation == "find"
    assert record.status_code == 500
    assert record.url == "http://api.example.com/widgets/1"
    assert record.base_url == "http://api.example.com"


def test_invalid_method_is_logged_with_collection(http_client, recorder, caplog):
    resource = Resource(ResourceConfig(hostname="api.example.com", methods={"find": "fetch"}), client=http_client)

    with caplog.at_level(logging.ERROR, logger="rest_resource.resource"):
        resource.find("widget", {}, recorder)

    record = next(item for item in caplog.records if item.getMessage() == "Invalid REST method")
    assert record.collection == "widget"
    assert record.method == "fetch"
