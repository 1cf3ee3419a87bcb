from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from conftest import make_response, make_session

from gtm_cli.managers.account_manager import AccountManager, format_account
from gtm_cli.managers.container_manager import ContainerManager, container_body, format_container
from gtm_cli.managers.environment_manager import EnvironmentManager, environment_body
from gtm_cli.managers.tag_manager import TagManager, format_tag, format_tag_detail, tag_body
from gtm_cli.managers.trigger_manager import format_trigger_detail, trigger_body
from gtm_cli.managers.variable_manager import VariableManager, variable_body
from gtm_cli.managers.version_manager import (
    VersionManager,
    format_version,
    format_version_header,
    version_body,
)
from gtm_cli.managers.workspace_manager import WorkspaceManager
from gtm_cli.utils.errors import NOT_FOUND, HttpError
from gtm_cli.utils.gtm_api import API_BASE, GtmApi, workspace_path

WS = workspace_path("1", "2", "3")


def _api(*responses) -> GtmApi:
    return GtmApi("TOKEN", session=make_session(*responses), sleep=MagicMock())


def _calls(api: GtmApi) -> list[tuple[str, str, object]]:
    calls = []
    for call in api.session.request.call_args_list:
        method, url = call.args
        data = call.kwargs["data"]
        calls.append((method, url, json.loads(data) if data is not None else None))
    return calls


def test_api_sends_bearer_token_and_builds_urls() -> None:
    api = _api(make_response(200, {"account": [{"accountId": "1", "name": "Acme"}]}))

    page = AccountManager(api).list_accounts(page_token="next")

    assert page["account"][0]["name"] == "Acme"
    call = api.session.request.call_args
    assert call.args == ("GET", f"{API_BASE}/accounts?pageToken=next")
    assert call.kwargs["headers"]["Authorization"] == "Bearer TOKEN"


def test_api_retries_failed_calls() -> None:
    api = _api(make_response(503, text="unavailable"), make_response(200, {"accountId": "1"}))

    assert AccountManager(api).get_account("1") == {"accountId": "1"}
    api.sleep.assert_called_once_with(1.0)


def test_api_surfaces_classified_error_after_retries() -> None:
    api = _api(*[make_response(404, {}) for _ in range(4)])

    with pytest.raises(HttpError) as exc_info:
        ContainerManager(api).get_container("1", "2")

    assert exc_info.value.code == NOT_FOUND
    assert api.session.request.call_count == 4


def test_list_all_follows_pagination() -> None:
    api = _api(
        make_response(200, {"container": [{"containerId": "a"}], "nextPageToken": "p2"}),
        make_response(200, {"container": [{"containerId": "b"}]}),
    )

    containers = ContainerManager(api).list_all_containers("1")

    assert [c["containerId"] for c in containers] == ["a", "b"]
    assert [url for _, url, _ in _calls(api)] == [
        f"{API_BASE}/accounts/1/containers",
        f"{API_BASE}/accounts/1/containers?pageToken=p2",
    ]


def test_create_posts_body_to_collection() -> None:
    api = _api(make_response(200, {"tagId": "10", "name": "GA4"}))
    body = tag_body(name="GA4", tag_type="gaawe", firing_trigger_id="1, 2")

    created = TagManager(api).create_tag(WS, body)

    assert created["tagId"] == "10"
    assert _calls(api) == [
        (
            "POST",
            f"{API_BASE}/accounts/1/containers/2/workspaces/3/tags",
            {"name": "GA4", "type": "gaawe", "firingTriggerId": ["1", "2"]},
        )
    ]


def test_create_dry_run_makes_no_request() -> None:
    api = _api()

    result = WorkspaceManager(api).create_workspace("1", "2", {"name": "ws"}, dry_run=True)

    assert result == {
        "dryRun": True,
        "method": "POST",
        "url": f"{API_BASE}/accounts/1/containers/2/workspaces",
        "body": {"name": "ws"},
    }
    api.session.request.assert_not_called()


def test_update_merges_changes_over_current_resource() -> None:
    current = {"variableId": "5", "name": "old", "type": "c", "notes": "keep", "fingerprint": "f1"}
    api = _api(make_response(200, current), make_response(200, {**current, "name": "new"}))

    VariableManager(api).update_variable(WS, "5", variable_body(name="new"))

    get_call, put_call = _calls(api)
    assert get_call[0] == "GET"
    assert put_call == (
        "PUT",
        f"{API_BASE}/accounts/1/containers/2/workspaces/3/variables/5",
        {**current, "name": "new"},
    )


def test_update_dry_run_reads_but_does_not_write() -> None:
    current = {"environmentId": "4", "name": "Staging", "description": "old"}
    api = _api(make_response(200, current))

    result = EnvironmentManager(api).update_environment(
        "1", "2", "4", environment_body(description=""), dry_run=True
    )

    assert result["method"] == "PUT"
    assert result["body"] == {"environmentId": "4", "name": "Staging", "description": ""}
    assert [method for method, _, _ in _calls(api)] == ["GET"]


def test_delete_and_delete_dry_run() -> None:
    api = _api(make_response(204))
    manager = TagManager(api)

    preview = manager.delete_tag(WS, "7", dry_run=True)
    assert preview == {
        "dryRun": True,
        "method": "DELETE",
        "url": f"{API_BASE}/accounts/1/containers/2/workspaces/3/tags/7",
    }
    api.session.request.assert_not_called()

    assert manager.delete_tag(WS, "7") == {}
    assert _calls(api) == [("DELETE", preview["url"], None)]


def test_version_create_and_publish_paths() -> None:
    api = _api(
        make_response(200, {"containerVersion": {"containerVersionId": "12"}}),
        make_response(200, {"containerVersion": {"containerVersionId": "12"}, "compilerError": True}),
    )
    manager = VersionManager(api)

    manager.create_version(WS, version_body(name="Release", notes=""))
    published = manager.publish_version("1", "2", "12")

    assert published["compilerError"] is True
    assert _calls(api) == [
        ("POST", f"{API_BASE}/accounts/1/containers/2/workspaces/3:create_version", {"name": "Release"}),
        ("POST", f"{API_BASE}/accounts/1/containers/2/versions/12:publish", None),
    ]


def test_version_list_uses_version_headers() -> None:
    api = _api(make_response(200, {"containerVersionHeader": [{"containerVersionId": "1"}]}))

    page = VersionManager(api).list_versions("1", "2")

    assert page["containerVersionHeader"][0]["containerVersionId"] == "1"
    assert _calls(api)[0][1] == f"{API_BASE}/accounts/1/containers/2/version_headers"


def test_publish_dry_run_has_no_body() -> None:
    api = _api()
    result = VersionManager(api).publish_version("1", "2", "12", dry_run=True)
    assert "body" not in result
    assert result["url"].endswith("/versions/12:publish")


def test_container_body_normalises_flags() -> None:
    body = container_body(name="Site", usage_context="web", domain_name="a.com, b.com", notes=None)
    assert body == {"name": "Site", "usageContext": ["WEB"], "domainName": ["a.com", "b.com"]}


def test_trigger_body_keeps_condition_lists() -> None:
    conditions = [{"type": "equals", "parameter": []}]
    body = trigger_body(name="Click", trigger_type="click", filter_conditions=conditions, notes="")
    assert body == {"name": "Click", "type": "click", "filter": conditions, "notes": ""}


def test_formatters() -> None:
    assert format_account({"accountId": "1", "name": "Acme"}) == {
        "account_id": "1",
        "name": "Acme",
        "share_data": False,
        "tag_manager_url": "",
    }
    assert format_container({"usageContext": ["WEB", "AMP"]})["usage_context"] == "WEB, AMP"

    tag = {"tagId": "1", "name": "T", "type": "html", "firingTriggerId": ["2", "3"], "parameter": [{"key": "html"}]}
    assert format_tag(tag)["firing_triggers"] == "2, 3"
    detail = format_tag_detail(tag)
    assert json.loads(detail["parameters"]) == [{"key": "html"}]
    assert detail["notes"] == ""

    assert format_trigger_detail({"triggerId": "1"})["filter"] == ""

    assert format_version({"containerVersionId": "4", "tag": [{}, {}], "variable": [{}]}) == {
        "version_id": "4",
        "name": "",
        "description": "",
        "num_tags": 2,
        "num_triggers": 0,
        "num_variables": 1,
        "tag_manager_url": "",
    }
    assert format_version_header({"containerVersionId": "4", "numTags": "3"})["num_triggers"] == "0"
