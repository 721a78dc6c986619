"""
Unit tests for the HTTP cloud event source.

The cloud API is simulated with httpx.MockTransport.
"""

import json

import httpx
import pytest

from sessionrelay.modules.sources import ContactRequest, HttpCloudEventSource

API = "https://cloud.test"
OWNER = "U-headless"


class FakeCloud:
    """Minimal in-memory cloud API."""

    def __init__(self):
        self.sessions = []
        self.contacts = []
        self.login_response = httpx.Response(200, json={"entity": {"userId": OWNER, "token": "tok"}})
        self.requests = []
        self.fail = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if self.fail and request.method == "GET":
            return httpx.Response(500)
        if request.method == "POST" and path == "/userSessions":
            return self.login_response
        if request.method == "GET" and path == "/sessions":
            return httpx.Response(200, json=self.sessions)
        if request.method == "GET" and path == f"/users/{OWNER}/contacts":
            return httpx.Response(200, json=self.contacts)
        if request.method == "DELETE" and path.startswith("/userSessions/"):
            return httpx.Response(200)
        return httpx.Response(404)


class RecordingHandler:
    def __init__(self):
        self.events = []

    async def on_added(self, key, record):
        self.events.append(("added", key, record.active_user_count))

    async def on_updated(self, key, record):
        self.events.append(("updated", key, record.active_user_count))

    async def on_removed(self, key, record):
        self.events.append(("removed", key, record.active_user_count))

    async def on_contact_merge(self, contact_id, records):
        self.events.append(("merge", contact_id, len(records)))

    async def on_new_contact_request(self, request):
        self.events.append(("request", request))


def session(session_id, active, host=OWNER, name="World"):
    return {
        "sessionId": session_id,
        "name": name,
        "hostUserId": host,
        "activeUsers": active,
        "joinedUsers": active + 1,
        "accessLevel": "Contacts",
        "hideFromListing": False,
        "tags": ["ignored"],
    }


@pytest.fixture
def cloud():
    return FakeCloud()


@pytest.fixture
def source(cloud):
    client = httpx.AsyncClient(base_url=API, transport=httpx.MockTransport(cloud.handler))
    return HttpCloudEventSource(API, client=client)


@pytest.mark.asyncio
async def test_login_success_sets_auth_header(source, cloud):
    result = await source.login("headless", "secret")

    assert result.ok is True
    assert result.user_id == OWNER
    body = json.loads(cloud.requests[0].content)
    assert body["username"] == "headless"
    assert body["authentication"] == {"$type": "password", "password": "secret"}
    assert body["rememberMe"] is False

    handler = RecordingHandler()
    source.subscribe(handler)
    await source.update()
    assert cloud.requests[1].headers["Authorization"] == f"res {OWNER}:tok"


@pytest.mark.asyncio
async def test_login_two_factor_required(source, cloud):
    cloud.login_response = httpx.Response(403, text="TOTP")

    result = await source.login("headless", "secret")

    assert result.ok is False
    assert result.two_factor_required is True


@pytest.mark.asyncio
async def test_login_rejected(source, cloud):
    cloud.login_response = httpx.Response(403, text="Invalid credentials")

    result = await source.login("headless", "wrong")

    assert result.ok is False
    assert "403" in result.error


@pytest.mark.asyncio
async def test_login_transport_error():
    def broken(request):
        raise httpx.ConnectError("no route", request=request)

    client = httpx.AsyncClient(base_url=API, transport=httpx.MockTransport(broken))
    source = HttpCloudEventSource(API, client=client)

    result = await source.login("headless", "secret")

    assert result.ok is False
    assert "transport error" in result.error


@pytest.mark.asyncio
async def test_update_before_login_is_noop(source, cloud):
    source.subscribe(RecordingHandler())

    await source.update()

    assert cloud.requests == []


@pytest.mark.asyncio
async def test_session_diffing(source, cloud):
    handler = RecordingHandler()
    await source.login("headless", "secret")
    source.subscribe(handler)

    cloud.sessions = [session("S-1", 1), session("S-2", 0, host="U-other")]
    await source.update()
    cloud.sessions = [session("S-1", 1)]
    await source.update()

    assert handler.events == [
        ("added", "S-1", 1),
        ("added", "S-2", 0),
        ("updated", "S-1", 1),
        ("removed", "S-2", 0),
    ]


@pytest.mark.asyncio
async def test_records_carry_owner_and_name(source, cloud):
    records = {}

    class Capture(RecordingHandler):
        async def on_added(self, key, record):
            records[key] = record

    await source.login("headless", "secret")
    source.subscribe(Capture())
    cloud.sessions = [session("S-1", 2, name="[fp] Club")]
    await source.update()

    assert records["S-1"].owner_id == OWNER
    assert records["S-1"].display_name == "[fp] Club"
    assert records["S-1"].total_user_count == 3
    assert records["S-1"].access_level == "Contacts"


@pytest.mark.asyncio
async def test_new_contact_requests_reported_once(source, cloud):
    handler = RecordingHandler()
    await source.login("headless", "secret")
    source.subscribe(handler)

    cloud.contacts = [
        {"id": "U-fan", "contactUsername": "Fan", "contactStatus": "Requested", "isAccepted": False},
        {"id": "U-friend", "contactUsername": "Friend", "contactStatus": "Accepted", "isAccepted": True},
    ]
    await source.update()
    await source.update()

    assert handler.events == [("request", ContactRequest(user_id="U-fan", username="Fan"))]


@pytest.mark.asyncio
async def test_update_raises_on_server_error(source, cloud):
    await source.login("headless", "secret")
    source.subscribe(RecordingHandler())
    cloud.fail = True

    with pytest.raises(httpx.HTTPStatusError):
        await source.update()


@pytest.mark.asyncio
async def test_logout_clears_session(source, cloud):
    await source.login("headless", "secret")

    await source.logout()

    assert cloud.requests[-1].method == "DELETE"
    assert cloud.requests[-1].url.path == f"/userSessions/{OWNER}/tok"
    assert source.user_id is None


@pytest.mark.asyncio
async def test_contact_request_reported_again_after_it_was_ignored(source, cloud):
    handler = RecordingHandler()
    await source.login("headless", "secret")
    source.subscribe(handler)
    request = {"id": "U-fan", "contactUsername": "Fan", "contactStatus": "Requested", "isAccepted": False}

    cloud.contacts = [request]
    await source.update()
    cloud.contacts = [dict(request, contactStatus="Ignored")]
    await source.update()
    cloud.contacts = [request]
    await source.update()

    assert handler.events == [("request", ContactRequest(user_id="U-fan", username="Fan"))] * 2


@pytest.mark.asyncio
async def test_login_with_non_json_body(source, cloud):
    cloud.login_response = httpx.Response(200, text="<html>maintenance</html>")

    result = await source.login("headless", "secret")

    assert result.ok is False
    assert result.error == "malformed login response"


@pytest.mark.asyncio
async def test_close_releases_owned_client_without_login():
    source = HttpCloudEventSource(API)

    await source.close()

    assert source._client.is_closed


@pytest.mark.asyncio
async def test_close_leaves_injected_client_open(source):
    await source.close()

    assert not source._client.is_closed
    await source._client.aclose()
