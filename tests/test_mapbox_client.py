import json
import unittest
from unittest.mock import patch

import requests
from requests.adapters import BaseAdapter

from commute_timely.data_sources import mapbox_client
from commute_timely.data_sources.http import build_session
from commute_timely.domain import Coordinates

ORIGIN = Coordinates(latitude=37.7749, longitude=-122.4194)
DESTINATION = Coordinates(latitude=37.7936, longitude=-122.3965)


class DummyResp:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return self._payload


class StubSession:
    def __init__(self, resp):
        self.resp = resp
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        return self.resp


class TrafficAdapter(BaseAdapter):
    """Answers every request with a longer route than the last one."""

    def __init__(self):
        super().__init__()
        self.requests = 0

    def send(self, request, **kwargs):
        self.requests += 1
        resp = requests.Response()
        resp.status_code = 200
        resp.headers["Content-Type"] = "application/json"
        resp._content = json.dumps({"code": "Ok", "routes": [{"duration": 600 * self.requests, "distance": 5000}]}).encode()
        resp.url = request.url
        resp.request = request
        return resp

    def close(self):
        pass


class TestMapboxClient(unittest.TestCase):
    def test_fetch_driving_eta(self):
        stub = StubSession(DummyResp({"code": "Ok", "routes": [{"duration": 1499.6, "distance": 8012.4}]}))
        with patch.object(mapbox_client, "session", stub):
            estimate = mapbox_client.fetch_driving_eta(ORIGIN, DESTINATION, access_token="tok", timeout=3)

        self.assertEqual(estimate.duration_seconds, 1500)
        self.assertEqual(estimate.distance_meters, 8012)

        url, params, timeout = stub.calls[0]
        self.assertTrue(url.startswith(mapbox_client.MAPBOX_DIRECTIONS_URL))
        self.assertTrue(url.endswith("/-122.4194,37.7749;-122.3965,37.7936"))
        self.assertEqual(params["access_token"], "tok")
        self.assertEqual(params["alternatives"], "false")
        self.assertEqual(timeout, 3)

    def test_no_routes_raises(self):
        stub = StubSession(DummyResp({"code": "NoRoute", "routes": []}))
        with patch.object(mapbox_client, "session", stub):
            with self.assertRaises(ValueError):
                mapbox_client.fetch_driving_eta(ORIGIN, DESTINATION, access_token="tok")

    def test_http_error_propagates(self):
        stub = StubSession(DummyResp({}, status=401))
        with patch.object(mapbox_client, "session", stub):
            with self.assertRaises(requests.HTTPError):
                mapbox_client.fetch_driving_eta(ORIGIN, DESTINATION, access_token="tok")

    def test_every_fetch_reaches_the_network(self):
        adapter = TrafficAdapter()
        live_session = build_session()
        live_session.mount("https://api.mapbox.com/", adapter)
        with patch.object(mapbox_client, "session", live_session):
            first = mapbox_client.fetch_driving_eta(ORIGIN, DESTINATION, access_token="tok")
            second = mapbox_client.fetch_driving_eta(ORIGIN, DESTINATION, access_token="tok")

        self.assertEqual(adapter.requests, 2)
        self.assertEqual(first.duration_seconds, 600)
        self.assertEqual(second.duration_seconds, 1200)

    def test_missing_token(self):
        with patch.object(mapbox_client.settings, "mapbox_access_token", None):
            with self.assertRaises(ValueError):
                mapbox_client.fetch_driving_eta(ORIGIN, DESTINATION)


if __name__ == "__main__":
    unittest.main()
