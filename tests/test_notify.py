"""
Unit tests for notification sinks, the Publisher and the SinkFactory.
"""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import redis.asyncio as redis

from conftest import RecordingSink
from sessionrelay.config.provider import SinkConfig
from sessionrelay.exceptions import NotificationError
from sessionrelay.modules.notify import (
    LogNotificationSink,
    Publisher,
    RedisNotificationSink,
    SinkFactory,
    WebhookNotificationSink,
)

WEBHOOK = "https://chat.test/api/webhooks/1/abc"


def webhook_client(status=204, captured=None):
    def handler(request):
        if captured is not None:
            captured.append(request)
        return httpx.Response(status, text="" if status < 400 else "rate limited")

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_publisher_reports_success(recording_sink):
    publisher = Publisher(recording_sink, timeout=1.0)

    assert await publisher.send("A: 1") is True
    assert recording_sink.messages == ["A: 1"]


@pytest.mark.asyncio
async def test_publisher_swallows_sink_errors():
    publisher = Publisher(RecordingSink(fail=True), timeout=1.0)

    assert await publisher.send("A: 1") is False


@pytest.mark.asyncio
async def test_publisher_swallows_unexpected_errors():
    sink = AsyncMock()
    sink.send.side_effect = KeyError("boom")

    assert await Publisher(sink, timeout=1.0).send("A: 1") is False


@pytest.mark.asyncio
async def test_publisher_times_out():
    publisher = Publisher(RecordingSink(delay=2.0), timeout=0.05)

    assert await publisher.send("A: 1") is False


@pytest.mark.asyncio
async def test_publisher_close_closes_sink(recording_sink):
    await Publisher(recording_sink).close()

    assert recording_sink.closed is True


@pytest.mark.asyncio
async def test_log_sink_logs():
    with patch("sessionrelay.modules.notify.sinks.logger") as mock_logger:
        await LogNotificationSink("status").send("A: 1")

    mock_logger.info.assert_called_once_with("[status] A: 1")


@pytest.mark.asyncio
async def test_webhook_sink_posts_content():
    captured = []
    sink = WebhookNotificationSink(WEBHOOK, client=webhook_client(captured=captured))

    await sink.send("A: 1 | B: 2")

    assert captured[0].method == "POST"
    assert str(captured[0].url) == WEBHOOK
    payload = json.loads(captured[0].content)
    assert payload["content"] == "A: 1 | B: 2"
    assert payload["allowed_mentions"] == {"parse": []}


@pytest.mark.asyncio
async def test_webhook_sink_truncates_and_fills_empty():
    captured = []
    sink = WebhookNotificationSink(WEBHOOK, client=webhook_client(captured=captured))

    await sink.send("x" * 3000)
    await sink.send("")

    assert len(json.loads(captured[0].content)["content"]) == 2000
    assert json.loads(captured[1].content)["content"] == "\u200b"


@pytest.mark.asyncio
async def test_webhook_sink_raises_on_rejection():
    sink = WebhookNotificationSink(WEBHOOK, client=webhook_client(status=429))

    with pytest.raises(NotificationError, match="429"):
        await sink.send("A: 1")


@pytest.mark.asyncio
async def test_webhook_sink_raises_on_transport_error():
    def broken(request):
        raise httpx.ConnectError("refused", request=request)

    sink = WebhookNotificationSink(WEBHOOK, client=httpx.AsyncClient(transport=httpx.MockTransport(broken)))

    with pytest.raises(NotificationError, match="refused"):
        await sink.send("A: 1")


@pytest.mark.asyncio
async def test_redis_sink_publishes(mock_redis):
    sink = RedisNotificationSink(mock_redis, "sessionrelay:status")

    await sink.send("A: 1")

    channel, message = mock_redis.publish.call_args[0]
    assert channel == "sessionrelay:status"
    data = json.loads(message)
    assert data["text"] == "A: 1"
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_redis_sink_wraps_errors(mock_redis):
    mock_redis.publish.side_effect = redis.ConnectionError("down")
    sink = RedisNotificationSink(mock_redis, "sessionrelay:status")

    with pytest.raises(NotificationError):
        await sink.send("A: 1")


def sink_config(kind, url=None):
    return SinkConfig(name="status", kind=kind, webhook_url=url, channel="sessionrelay:status")


def test_factory_builds_each_kind(mock_redis):
    assert isinstance(SinkFactory.build(sink_config("log")), LogNotificationSink)
    assert isinstance(SinkFactory.build(sink_config("webhook", WEBHOOK)), WebhookNotificationSink)

    redis_sink = SinkFactory.build(sink_config("redis"), mock_redis)
    assert isinstance(redis_sink, RedisNotificationSink)
    assert redis_sink.channel == "sessionrelay:status"


@pytest.mark.parametrize(
    "config",
    [sink_config("webhook"), sink_config("redis"), sink_config("carrier-pigeon")],
)
def test_factory_rejects_incomplete_config(config):
    with pytest.raises(ValueError):
        SinkFactory.build(config)
