from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

import pytest

from pydyapi.client import DyClient
from pydyapi.config import DataCenter, DyConfig, IdentityPolicy
from pydyapi.exceptions import DyConfigError, DyHttpStatusError, DyPreconditionError
from pydyapi.models import ChooseResult
from pydyapi.session import MemoryIdentityStorage, SessionState


class _FakeResponse:
    def __init__(self, status: int, payload: Any) -> None:
        self.status = status
        self._body = b"" if payload is None else json.dumps(payload).encode("utf-8")

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


@dataclass
class FakeDyBackend:
    """Stands in for the aiohttp session; routes on path and records requests."""

    responses: dict[str, tuple[int, Any]] = field(default_factory=dict)
    requests: list[dict[str, Any]] = field(default_factory=list)
    closed: bool = False

    def request(self, method: str, url: str, **kwargs: Any) -> _FakeResponse:
        parts = urlsplit(url)
        data = kwargs.get("data")
        self.requests.append(
            {
                "method": method,
                "url": url,
                "host": parts.netloc,
                "path": parts.path,
                "headers": kwargs.get("headers", {}),
                "params": kwargs.get("params"),
                "body": json.loads(data) if data is not None else None,
            }
        )
        status, payload = self.responses.get(parts.path, (200, {"success": True}))
        return _FakeResponse(status, payload)

    async def close(self) -> None:
        self.closed = True

    @property
    def last(self) -> dict[str, Any]:
        return self.requests[-1]


@pytest.fixture
def backend() -> FakeDyBackend:
    return FakeDyBackend()


@pytest.fixture
def config() -> DyConfig:
    return DyConfig(api_key="k", data_center=DataCenter.US)


def _client(config: DyConfig, backend: FakeDyBackend, **kwargs: Any) -> DyClient:
    return DyClient(config, session=backend, **kwargs)  # type: ignore[arg-type]


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_choose_variations_happy_path(config: DyConfig, backend: FakeDyBackend) -> None:
    envelope = {"context": {"page": "home"}, "options": {"variations": [{"id": "123"}]}}
    original = copy.deepcopy(envelope)

    async with _client(config, backend) as client:
        client.set_identity("s1", "u1")
        result = await client.choose_variations(envelope)

    assert result == {"success": True}
    sent = backend.last
    assert sent["method"] == "POST"
    assert sent["url"] == "https://dy-api.com/v2/serve/user/choose"
    assert sent["headers"]["dy-api-key"] == "k"
    assert sent["body"]["session"]["id"] == "s1"
    assert sent["body"]["user"]["dyid"] == "u1"
    assert sent["body"]["context"] == {"page": "home"}
    assert sent["body"]["options"] == {"variations": [{"id": "123"}]}
    assert envelope == original
    # Injected sessions are owned by the caller.
    assert backend.closed is False


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_choose_variations_400_raises(config: DyConfig, backend: FakeDyBackend) -> None:
    backend.responses["/v2/serve/user/choose"] = (400, {"error": "bad request"})

    async with _client(config, backend) as client:
        client.set_identity("s1", "u1")
        with pytest.raises(DyHttpStatusError, match="chooseVariations failed: 400") as exc_info:
            await client.choose_variations({"context": {"page": "home"}})

    assert exc_info.value.status_code == 400
    assert exc_info.value.operation == "chooseVariations"


@pytest.mark.asyncio
@pytest.mark.e2e
@pytest.mark.parametrize(
    "method_name",
    ["choose_variations", "search", "track_pageviews", "track_engagement", "track_events", "external_events_api"],
)
async def test_e2e_missing_identity_fails_before_network(
    config: DyConfig,
    backend: FakeDyBackend,
    method_name: str,
) -> None:
    async with _client(config, backend) as client:
        with pytest.raises(DyPreconditionError):
            await getattr(client, method_name)({"context": {}})

    assert backend.requests == []


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_default_empty_policy_sends_empty_identity(backend: FakeDyBackend) -> None:
    config = DyConfig(api_key="k", identity_policy=IdentityPolicy.DEFAULT_EMPTY)

    async with _client(config, backend) as client:
        await client.track_pageviews({"context": {"page": {"type": "HOMEPAGE"}}})

    assert backend.last["body"]["session"] == {"id": ""}
    assert backend.last["body"]["user"]["dyid"] == ""


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_identity_operations_hit_their_paths(config: DyConfig, backend: FakeDyBackend) -> None:
    async with _client(config, backend, identity=SessionState(session_id="s1", user_id="u1")) as client:
        await client.search({"query": {"text": "shoes"}})
        await client.track_pageviews({"context": {}})
        await client.track_engagement({"engagements": [{"type": "CLICK"}]})
        await client.track_events({"events": [{"name": "Add to Cart"}]})
        await client.external_events_api({"events": [{"name": "Store visit"}]})

    paths = [request["path"] for request in backend.requests]
    assert paths == [
        "/v2/serve/user/search",
        "/v2/collect/user/pageview",
        "/v2/collect/user/engagement",
        "/v2/collect/user/event",
        "/v2/userdata/events",
    ]
    for request in backend.requests:
        assert request["method"] == "POST"
        assert request["body"]["session"] == {"id": "s1"}
        assert request["body"]["user"] == {"dyid": "u1", "sharedDevice": False}


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_feed_operations(config: DyConfig, backend: FakeDyBackend) -> None:
    backend.responses["/v2/feeds/feed-1/bulk"] = (200, {"transactionId": "tx-9"})
    items = {"items": [{"action": "add", "sku": "A1", "data": {"name": "Shoe"}}]}

    async with _client(config, backend) as client:
        submitted = await client.update_product_feed("feed-1", items)
        await client.track_transaction_status_whole_transaction("feed-1", submitted["transactionId"])
        await client.track_transaction_status_specific_item("feed-1", "tx-9", "A1")
        await client.update_branch_feed("branch 7", {"inventory": [{"sku": "A1", "qty": 3}]})
        await client.report_outages({"outages": [{"branchId": "b1"}]})
        await client.user_data_api("users-feed", {"users": [{"cuid": "a@b.c"}]})

    summary = [(r["method"], r["path"]) for r in backend.requests]
    assert summary == [
        ("POST", "/v2/feeds/feed-1/bulk"),
        ("GET", "/v2/feeds/feed-1/transaction/tx-9"),
        ("GET", "/v2/feeds/feed-1/transaction/tx-9/item/A1"),
        ("POST", "/v2/feeds/branch/branch%207/inventory"),
        ("POST", "/v2/feeds/branch/outage/bulk"),
        ("POST", "/v2/userdata/users-feed/bulk"),
    ]
    assert backend.requests[0]["body"] == items
    # Feed calls carry no visitor identity.
    assert "session" not in backend.requests[0]["body"]
    assert backend.requests[1]["body"] is None
    assert "content-type" not in backend.requests[1]["headers"]


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_profile_anywhere(config: DyConfig, backend: FakeDyBackend) -> None:
    backend.responses["/v2/userprofile"] = (200, {"user": {"audiences": [1, 2]}})

    async with _client(config, backend) as client:
        profile = await client.profile_anywhere("a@b.c", "email", affinity=True)

    assert profile == {"user": {"audiences": [1, 2]}}
    assert backend.last["method"] == "GET"
    assert backend.last["params"] == {"cuid": "a@b.c", "cuidType": "email", "affinity": "true"}


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_invalid_path_parameter_fails_before_network(config: DyConfig, backend: FakeDyBackend) -> None:
    async with _client(config, backend) as client:
        with pytest.raises(ValueError):
            await client.update_product_feed("", {"items": []})

    assert backend.requests == []


@pytest.mark.asyncio
@pytest.mark.e2e
@pytest.mark.parametrize("feed_id", [".", ".."])
async def test_e2e_dot_segment_path_parameter_fails_before_network(
    config: DyConfig, backend: FakeDyBackend, feed_id: str
) -> None:
    async with _client(config, backend) as client:
        with pytest.raises(ValueError, match="dot segment"):
            await client.update_product_feed(feed_id, {"items": []})
        with pytest.raises(ValueError, match="dot segment"):
            await client.track_transaction_status_whole_transaction("f1", feed_id)

    assert backend.requests == []


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_region_changes_only_host(backend: FakeDyBackend) -> None:
    identity = SessionState(session_id="s1", user_id="u1")
    for data_center in (DataCenter.US, DataCenter.EU):
        async with _client(DyConfig(api_key="k", data_center=data_center), backend, identity=identity) as client:
            await client.choose_variations({"context": {}})

    us, eu = backend.requests
    assert us["host"] == "dy-api.com"
    assert eu["host"] == "dy-api.eu"
    assert us["path"] == eu["path"] == "/v2/serve/user/choose"
    assert us["body"] == eu["body"]


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_response_cookies_update_identity_and_storage(config: DyConfig, backend: FakeDyBackend) -> None:
    backend.responses["/v2/serve/user/choose"] = (
        200,
        {
            "choices": [{"id": 1, "name": "Hero", "variations": [{"id": 2, "payload": {}}]}],
            "cookies": [
                {"name": "_dyid_server", "value": "u-server", "maxAge": 31540000},
                {"name": "_dyjsession", "value": "s-server", "maxAge": 1800},
            ],
        },
    )
    storage = MemoryIdentityStorage()

    async with _client(config, backend, storage=storage) as client:
        client.set_identity("s1", "u1")
        before = client.identity
        result = await client.choose({"selector": {"names": ["Hero"]}})
        await client.track_pageviews({"context": {}})

        assert isinstance(result, ChooseResult)
        assert result.get_choice("Hero") is not None
        assert client.identity.session_id == "s-server"
        assert client.identity.user_id == "u-server"
        # Snapshots taken earlier are unaffected.
        assert before.user_id == "u1"

    assert backend.requests[0]["body"]["user"]["dyid"] == "u1"
    assert backend.last["body"]["user"]["dyid"] == "u-server"
    assert backend.last["body"]["session"]["id"] == "s-server"
    assert storage.get("_dyid_server") == "u-server"


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_cookie_sync_can_be_disabled(backend: FakeDyBackend) -> None:
    backend.responses["/v2/serve/user/choose"] = (200, {"cookies": [{"name": "_dyid_server", "value": "u-server"}]})
    config = DyConfig(api_key="k", sync_identity_cookies=False)

    async with _client(config, backend, identity=SessionState(session_id="s1", user_id="u1")) as client:
        await client.choose_variations({})
        assert client.identity.user_id == "u1"


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_malformed_cookies_do_not_fail_call(config: DyConfig, backend: FakeDyBackend) -> None:
    backend.responses["/v2/serve/user/choose"] = (200, {"choices": [], "cookies": "oops"})

    async with _client(config, backend, identity=SessionState(session_id="s1", user_id="u1")) as client:
        result = await client.choose_variations({})
        assert result == {"choices": [], "cookies": "oops"}
        assert client.identity.user_id == "u1"


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_user_id_loaded_from_storage(backend: FakeDyBackend) -> None:
    storage = MemoryIdentityStorage({"_dyid_server": "u-stored"})
    config = DyConfig(api_key="k", generate_session_id=True)

    async with _client(config, backend, storage=storage) as client:
        assert client.identity.user_id == "u-stored"
        assert client.identity.session_id
        await client.track_pageviews({"context": {}})

    assert backend.last["body"]["user"]["dyid"] == "u-stored"


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_consent_flag_is_sent(config: DyConfig, backend: FakeDyBackend) -> None:
    async with _client(config, backend, identity=SessionState(session_id="s1", user_id="u1")) as client:
        client.set_consent(True)
        await client.track_events({"events": []})

    assert backend.last["body"]["user"]["activeConsentAccepted"] is True


@pytest.mark.asyncio
async def test_client_requires_context_manager(config: DyConfig) -> None:
    client = DyClient(config, identity=SessionState(session_id="s1", user_id="u1"))
    with pytest.raises(DyConfigError, match="async with"):
        await client.choose_variations({})


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_consent_can_be_cleared(config: DyConfig, backend: FakeDyBackend) -> None:
    storage = MemoryIdentityStorage()

    identity = SessionState(session_id="s1", user_id="u1")

    async with _client(config, backend, storage=storage, identity=identity) as client:
        accepted = client.set_consent(True)
        assert client.identity is accepted
        assert client.set_consent(True) is accepted
        cleared = client.set_consent(None)
        await client.track_events({"events": []})

    assert cleared.consent_accepted is None
    assert (cleared.session_id, cleared.user_id) == ("s1", "u1")
    assert "activeConsentAccepted" not in backend.last["body"]["user"]
    # Consent changes never touch the persisted user id.
    assert storage.get("_dyid_server") is None


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_choose_tolerates_malformed_cookie_entries(config: DyConfig, backend: FakeDyBackend) -> None:
    backend.responses["/v2/serve/user/choose"] = (
        200,
        {
            "choices": [],
            "cookies": [
                {"name": "_dyid_server", "value": "u2", "maxAge": 1.5},
                {"name": "other"},
            ],
        },
    )

    async with _client(config, backend, identity=SessionState(session_id="s1", user_id="u1")) as client:
        result = await client.choose({})

        assert isinstance(result, ChooseResult)
        assert [cookie.name for cookie in result.cookies] == ["_dyid_server"]
        assert client.identity.user_id == "u2"
