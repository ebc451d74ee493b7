import json
from typing import List

import httpx

from teams_enum.adapters.teams.client import CLIENT_VERSION, TeamsClient
from teams_enum.domain.models import PresenceRecord


def make_client(handler, requests: List[httpx.Request]) -> TeamsClient:
    def recording(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return TeamsClient("eyJ0eXAi.token", transport=httpx.MockTransport(recording))


def test_search_sends_identity_in_path_with_headers():
    requests: List[httpx.Request] = []
    client = make_client(
        lambda request: httpx.Response(
            200,
            json=[
                {
                    "displayName": "Alice A",
                    "givenName": "Alice",
                    "mri": "8:orgid:alice",
                    "userPrincipalName": "alice@example.com",
                    "tenantId": "ignored",
                }
            ],
        ),
        requests,
    )

    result = client.search_identity("alice@example.com")

    assert result.status_code == 200
    assert result.record.display_name == "Alice A"
    assert result.record.given_name == "Alice"
    assert result.record.mri == "8:orgid:alice"
    assert result.record.user_principal_name == "alice@example.com"
    request = requests[0]
    assert request.method == "GET"
    assert request.url.path == "/api/mt/emea/beta/users/alice@example.com/externalsearchv3"
    assert request.headers["Authorization"] == "Bearer eyJ0eXAi.token"
    assert request.headers["x-ms-client-version"] == CLIENT_VERSION


def test_search_empty_array_has_no_record():
    client = make_client(lambda request: httpx.Response(200, json=[]), [])
    result = client.search_identity("nobody@example.com")
    assert result.status_code == 200
    assert result.record is None


def test_search_malformed_body_degrades_to_empty_record():
    client = make_client(lambda request: httpx.Response(200, content=b"<html>oops"), [])
    result = client.search_identity("alice@example.com")
    assert result.status_code == 200
    assert result.record is None


def test_search_error_status_without_body():
    client = make_client(lambda request: httpx.Response(403), [])
    result = client.search_identity("blocked@example.com")
    assert result.status_code == 403
    assert result.record is None


def test_search_transport_error_returns_status_zero():
    def fail(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(fail, [])
    result = client.search_identity("alice@example.com")
    assert result.status_code == 0
    assert result.record is None


def test_presence_posts_mri():
    requests: List[httpx.Request] = []
    client = make_client(
        lambda request: httpx.Response(
            200,
            json=[{"mri": "8:orgid:alice", "presence": {"availability": "Available", "deviceType": "Desktop"}}],
        ),
        requests,
    )

    presence = client.fetch_presence("8:orgid:alice")

    assert presence == PresenceRecord(availability="Available", deviceType="Desktop")
    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://presence.teams.microsoft.com/v1/presence/getpresence/"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["Authorization"] == "Bearer eyJ0eXAi.token"
    assert json.loads(request.content) == [{"mri": "8:orgid:alice"}]


def test_presence_empty_array_means_offline():
    client = make_client(lambda request: httpx.Response(200, json=[]), [])
    assert client.fetch_presence("8:orgid:alice") == PresenceRecord.unavailable()


def test_presence_failure_degrades_to_error_fields():
    def fail(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = make_client(fail, [])
    presence = client.fetch_presence("8:orgid:alice")
    assert (presence.availability, presence.device_type) == ("error", "error")


def test_existing_bearer_prefix_is_kept():
    requests: List[httpx.Request] = []
    client = TeamsClient(
        "Bearer eyJ0eXAi.token",
        transport=httpx.MockTransport(lambda request: requests.append(request) or httpx.Response(200, json=[])),
    )
    client.search_identity("alice@example.com")
    assert requests[0].headers["Authorization"] == "Bearer eyJ0eXAi.token"
