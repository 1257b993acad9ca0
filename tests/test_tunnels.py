# tests/test_tunnels.py
"""
Tunnel Discovery Tests - Unit Tests for Local and External Tunnel Clients

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- sharelink.adapters.network.tunnels (LocalTunnelClient, ExternalTunnelClient)
- sharelink.domain.errors (TunnelDiscoveryError)
- unittest.mock (patching requests.get)
"""
import pytest
import requests
from unittest.mock import Mock, patch

from sharelink.adapters.network.tunnels import ExternalTunnelClient, LocalTunnelClient
from sharelink.domain.errors import TunnelDiscoveryError


def json_response(data):
    resp = Mock()
    resp.raise_for_status.return_value = None
    resp.json.return_value = data
    return resp


class TestLocalTunnelClient:
    def test_select_https_tunnel(self):
        data = {
            "tunnels": [
                {"proto": "http", "public_url": "http://abc.ngrok.io"},
                {"proto": "https", "public_url": "https://abc.ngrok.io/"},
            ]
        }
        assert LocalTunnelClient.select_https_tunnel(data) == "https://abc.ngrok.io"

    def test_select_ignores_inconsistent_entries(self):
        data = {"tunnels": [{"proto": "https", "public_url": "http://abc.ngrok.io"}]}
        assert LocalTunnelClient.select_https_tunnel(data) is None

    def test_select_handles_odd_payloads(self):
        assert LocalTunnelClient.select_https_tunnel([]) is None
        assert LocalTunnelClient.select_https_tunnel({"tunnels": "nope"}) is None
        assert LocalTunnelClient.select_https_tunnel({}) is None

    @patch('sharelink.adapters.network.tunnels.requests.get')
    def test_discover_tries_ports_in_order(self, mock_get):
        mock_get.side_effect = [
            requests.exceptions.ConnectionError("refused"),
            json_response({"tunnels": [{"proto": "https", "public_url": "https://x.ngrok.io"}]}),
        ]

        client = LocalTunnelClient(ports=[4040, 4041], timeout=2)
        assert client.discover() == "https://x.ngrok.io"

        urls = [c.args[0] for c in mock_get.call_args_list]
        assert urls == ["http://127.0.0.1:4040/api/tunnels", "http://127.0.0.1:4041/api/tunnels"]
        assert all(c.kwargs["timeout"] == 2 for c in mock_get.call_args_list)

    @patch('sharelink.adapters.network.tunnels.requests.get')
    def test_discover_raises_when_nothing_found(self, mock_get):
        mock_get.side_effect = [
            json_response({"tunnels": []}),
            requests.exceptions.Timeout("slow"),
        ]
        with pytest.raises(TunnelDiscoveryError, match="No local https tunnel"):
            LocalTunnelClient(ports=[4040, 4041], timeout=1).discover()


class TestExternalTunnelClient:
    def test_extract_url_keys(self):
        assert ExternalTunnelClient.extract_url({"url": "https://a.tunnelmole.net/"}) == "https://a.tunnelmole.net"
        assert ExternalTunnelClient.extract_url({"public_url": "https://b.loca.lt"}) == "https://b.loca.lt"
        assert ExternalTunnelClient.extract_url({"url": "not a url"}) is None
        assert ExternalTunnelClient.extract_url(["https://a"]) is None

    @patch('sharelink.adapters.network.tunnels.requests.get')
    def test_discover_skips_failing_endpoints(self, mock_get):
        bad_json = Mock()
        bad_json.raise_for_status.return_value = None
        bad_json.json.side_effect = ValueError("no json")
        mock_get.side_effect = [bad_json, json_response({"url": "https://c.loca.lt"})]

        client = ExternalTunnelClient(endpoints=["https://one.test", "https://two.test"], timeout=3)
        assert client.discover() == "https://c.loca.lt"

    @patch('sharelink.adapters.network.tunnels.requests.get')
    def test_discover_raises_without_url(self, mock_get):
        mock_get.return_value = json_response({"tunnels": 0})
        with pytest.raises(TunnelDiscoveryError, match="No external tunnel"):
            ExternalTunnelClient(endpoints=["https://one.test"], timeout=1).discover()
