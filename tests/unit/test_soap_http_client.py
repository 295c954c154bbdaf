"""
Tests for SoapHttpClient: send(), send_stream(), fetch() and receipts.
"""
from unittest.mock import Mock

import pytest

from fixtures.soap_fixtures import join_lines, make_envelope

from soapwire.config import HttpConfig, RuntimeConfig
from soapwire.http import MockTransport, ResponseNormalizer, SoapHttpClient, SoapResponse
from soapwire.http.transport import MockResponse, RequestsTransport
from soapwire.schemas.errors import InvalidURLError, TransportError


def _collect():
    """Completion callback recording its arguments."""
    calls = []

    def on_complete(error, response, body):
        calls.append((error, response, body))

    return on_complete, calls


class TestSend:
    """send() builds, transmits and normalizes."""

    def test_normalized_body_delivered(self, client, mock_transport, envelope):
        on_complete, calls = _collect()
        client.send("http://example.org/ws", "<x/>", on_complete)

        assert len(calls) == 1
        error, response, body = calls[0]
        assert error is None
        assert response.status_code == 200
        assert body == '<?xml version="1.0" encoding="UTF-8"?>\n' + envelope

    def test_request_passed_to_transport(self, client, mock_transport):
        on_complete, _ = _collect()
        client.send(
            "http://example.org:8080/ws",
            "<x/>",
            on_complete,
            headers={"SOAPAction": '"urn:Ping"'},
            options={"timeout": 3},
        )

        request = mock_transport.last_request
        assert request.method == "POST"
        assert request.url == "http://example.org:8080/ws"
        assert request.headers["Host"] == "example.org:8080"
        assert request.headers["SOAPAction"] == '"urn:Ping"'
        assert request.headers["User-Agent"] == "soapwire-tests/1.0"
        assert request.extra == {"timeout": 3}

    def test_returns_transport_handle(self, client):
        on_complete, _ = _collect()
        handle = client.send("http://example.org/ws", None, on_complete)
        assert isinstance(handle, MockResponse)

    def test_transport_error_forwarded_without_normalizing(self, runtime_config):
        failure = TransportError("connection refused")
        transport = MockTransport("<s:Envelope>distinct</s:Envelope>", error=failure)
        normalizer = Mock(spec=ResponseNormalizer)
        client = SoapHttpClient(transport, config=runtime_config, normalizer=normalizer)

        on_complete, calls = _collect()
        client.send("http://example.org/ws", None, on_complete)

        assert calls == [(failure, None, None)]
        normalizer.normalize.assert_not_called()

    def test_any_transport_error_type_is_forwarded_unchanged(self, runtime_config):
        failure = TimeoutError("read timed out")
        client = SoapHttpClient(MockTransport(error=failure), config=runtime_config)

        on_complete, calls = _collect()
        client.send("http://example.org/ws", None, on_complete)

        assert calls[0][0] is failure

    def test_invalid_url_raised_before_transport(self, client, mock_transport):
        on_complete, calls = _collect()
        with pytest.raises(InvalidURLError):
            client.send("example.org/ws", None, on_complete)
        assert mock_transport.calls == []
        assert calls == []

    def test_repair_disabled_by_config(self):
        body = join_lines(["<a>", 'element="itr:LogicalAddress"', "</wsdl:part>", "b", "</wsdl:message>"])
        config = RuntimeConfig(http=HttpConfig(repair_logical_address=False))
        client = SoapHttpClient(MockTransport(body), config=config)

        on_complete, calls = _collect()
        client.send("http://example.org/ws", None, on_complete)

        assert calls[0][2] == body


class TestSendStream:
    """send_stream() returns the raw handle."""

    def test_never_normalizes(self, runtime_config, mock_transport):
        normalizer = Mock(spec=ResponseNormalizer)
        client = SoapHttpClient(mock_transport, config=runtime_config, normalizer=normalizer)

        handle = client.send_stream("http://example.org/ws", "<x/>")

        assert isinstance(handle, MockResponse)
        assert handle.body == mock_transport.body
        normalizer.normalize.assert_not_called()

    def test_builds_request_identically(self, client, mock_transport):
        client.send_stream("http://example.org/ws", "<x/>", headers={"A": "1"}, options={"verify": False})
        streamed = mock_transport.last_request

        on_complete, _ = _collect()
        client.send("http://example.org/ws", "<x/>", on_complete, headers={"A": "1"}, options={"verify": False})
        sent = mock_transport.last_request

        assert streamed.to_dict() == sent.to_dict()


class TestFetch:
    """fetch() is the blocking wrapper."""

    def test_returns_soap_response(self, client, envelope):
        response = client.fetch("http://example.org/ws?wsdl")

        assert isinstance(response, SoapResponse)
        assert response.ok
        assert response.status_code == 200
        assert response.body.endswith(envelope)
        assert response.headers["Content-Type"] == "text/xml; charset=utf-8"
        assert response.url == "http://example.org/ws?wsdl"

    def test_raises_reported_error(self, runtime_config):
        failure = TransportError("dns failure")
        client = SoapHttpClient(MockTransport(error=failure), config=runtime_config)

        with pytest.raises(TransportError) as exc_info:
            client.fetch("http://example.org/ws")
        assert exc_info.value is failure

    def test_transport_that_never_completes(self, runtime_config):
        transport = Mock(return_value=None)
        client = SoapHttpClient(transport, config=runtime_config)

        with pytest.raises(RuntimeError):
            client.fetch("http://example.org/ws")

    def test_raise_for_status(self, runtime_config):
        client = SoapHttpClient(MockTransport("oops", status_code=500), config=runtime_config)
        response = client.fetch("http://example.org/ws")

        assert not response.ok
        with pytest.raises(TransportError) as exc_info:
            response.raise_for_status()
        assert exc_info.value.status_code == 500
        assert exc_info.value.retryable


class TestReceipts:
    """Receipt recording around send()."""

    def test_successful_exchange_recorded(self, mock_transport, runtime_config, recorder):
        client = SoapHttpClient(mock_transport, config=runtime_config, recorder=recorder)
        response = client.fetch("http://example.org/ws", "<x/>")

        receipts = recorder.get_receipts()
        assert len(receipts) == 1
        receipt = receipts[0]
        assert receipt.method == "POST"
        assert receipt.url == "http://example.org/ws"
        assert receipt.status_code == 200
        assert receipt.request["body"] == "<x/>"
        assert receipt.response["content_type"] == "text/xml; charset=utf-8"
        assert receipt.request_hash.startswith("0x")
        assert receipt.is_successful
        assert response.receipt_id == receipt.receipt_id
        assert recorder.pending_count == 0

    def test_failed_exchange_recorded(self, runtime_config, recorder):
        client = SoapHttpClient(
            MockTransport(error=TransportError("refused")),
            config=runtime_config,
            recorder=recorder,
        )
        on_complete, _ = _collect()
        client.send("http://example.org/ws", None, on_complete)

        receipt = recorder.get_receipts()[0]
        assert receipt.error == "refused"
        assert not receipt.is_successful

    def test_stream_not_recorded(self, mock_transport, runtime_config, recorder):
        client = SoapHttpClient(mock_transport, config=runtime_config, recorder=recorder)
        client.send_stream("http://example.org/ws")
        assert recorder.get_receipts() == []

    def test_recorder_created_from_config(self, mock_transport):
        client = SoapHttpClient(mock_transport, config=RuntimeConfig(record_receipts=True))
        client.fetch("http://example.org/ws")
        assert len(client.recorder.get_receipts()) == 1


class TestLifecycle:
    """Default transport and closing."""

    def test_default_transport_uses_config(self):
        config = RuntimeConfig(http=HttpConfig(timeout=7.5, proxy="http://proxy:3128"))
        client = SoapHttpClient(config=config)

        assert isinstance(client.transport, RequestsTransport)
        assert client.transport.timeout == 7.5
        assert client.transport.proxy == "http://proxy:3128"

    def test_context_manager_closes_transport(self, runtime_config):
        transport = Mock()
        with SoapHttpClient(transport, config=runtime_config):
            pass
        transport.close.assert_called_once_with()

    def test_close_without_transport_close(self, runtime_config):
        client = SoapHttpClient(MockTransport(make_envelope()), config=runtime_config)
        client.close()
