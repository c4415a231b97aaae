# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import threading
import time
from datetime import datetime, timezone

import httpx
import pytest

from fleetprobe.config import ProbeSettings
from fleetprobe.dispatch import Dispatcher, dispatch
from fleetprobe.errors import ErrorCategory, FailureKind
from fleetprobe.http import HttpxClient
from fleetprobe.http.models import HttpRequest, HttpResponse
from fleetprobe.models import RequestSpec, Target

LAUNCHED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _target(identity, state="running", address=None):
    return Target(identity=identity, address=address or f"10.0.0.{identity[-1]}", lifecycle_state=state, created_at=LAUNCHED)


class RecordingHttpClient:
    def __init__(self, response=None, exc=None):
        self.response = response or HttpResponse(ok=True, status_code=200, elapsed=0.01)
        self.exc = exc
        self.requests = []
        self._lock = threading.Lock()

    def request(self, request: HttpRequest) -> HttpResponse:
        with self._lock:
            self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return self.response

    def close(self) -> None:
        self.closed = True


def _mock_dispatcher(handler, **settings):
    settings = ProbeSettings(**settings)
    return Dispatcher(HttpxClient(settings, transport=httpx.MockTransport(handler)), settings)


def _by_id(outcomes):
    return {outcome.identity: outcome for outcome in outcomes}


def test_dispatch_empty_target_list():
    client = RecordingHttpClient()
    assert Dispatcher(client, ProbeSettings()).dispatch([], RequestSpec()) == []
    assert client.requests == []


def test_non_running_targets_are_skipped_without_network_calls():
    client = RecordingHttpClient()
    targets = [_target("i-1", "stopped"), _target("i-2", "pending"), _target("i-3", "unknown")]

    outcomes = Dispatcher(client, ProbeSettings()).dispatch(targets, RequestSpec())

    assert len(outcomes) == 3
    assert client.requests == []
    for outcome in outcomes:
        assert outcome.latency == 0
        assert outcome.failure is None
        assert outcome.status == "Skipped"
    assert _by_id(outcomes)["i-2"].lifecycle_state == "pending"


def test_every_target_yields_one_outcome_when_all_exchanges_fail():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    targets = [_target(f"i-{n}") for n in range(8)] + [_target("i-9", "stopped")]
    outcomes = _mock_dispatcher(handler).dispatch(targets, RequestSpec(timeout=1.0))

    assert len(outcomes) == len(targets)
    assert {o.identity for o in outcomes} == {t.identity for t in targets}
    failed = [o for o in outcomes if o.failure is not None]
    assert len(failed) == 8
    assert all(o.failure.kind == FailureKind.TRANSPORT for o in failed)
    assert all(o.latency == 0 for o in failed)
    assert _by_id(outcomes)["i-9"].status == "Skipped"


def test_one_failing_target_does_not_affect_others():
    def handler(request):
        if request.url.host == "10.0.0.2":
            raise httpx.ConnectError("no route to host", request=request)
        return httpx.Response(200, content=b"ok")

    outcomes = _by_id(_mock_dispatcher(handler).dispatch([_target("i-1"), _target("i-2"), _target("i-3")], RequestSpec()))

    assert outcomes["i-2"].failure.message == "no route to host"
    assert outcomes["i-1"].ok and outcomes["i-3"].ok
    assert outcomes["i-1"].status_code == 200


def test_dispatch_is_idempotent_for_deterministic_transport():
    def handler(request):
        if request.url.host == "10.0.0.1":
            return httpx.Response(200)
        raise httpx.ReadTimeout("timed out", request=request)

    dispatcher = _mock_dispatcher(handler)
    targets = [_target("i-1"), _target("i-2"), _target("i-3", "stopped")]

    def classify(outcomes):
        return sorted((o.identity, o.failure.kind if o.failure else None) for o in outcomes)

    assert classify(dispatcher.dispatch(targets, RequestSpec())) == classify(dispatcher.dispatch(targets, RequestSpec()))


@pytest.mark.parametrize("body", [None, b"{}"])
def test_headers_applied_to_every_request(body):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200)

    spec = RequestSpec(body=body, headers={"X-Test": "1"})
    _mock_dispatcher(handler).dispatch([_target("i-1"), _target("i-2")], spec)

    assert len(seen) == 2
    assert all(request.headers["X-Test"] == "1" for request in seen)
    assert {request.method for request in seen} == {"POST" if body else "GET"}


def test_running_and_stopped_targets_end_to_end():
    def handler(request):
        time.sleep(0.01)
        return httpx.Response(200, content=b"healthy")

    outcomes = _by_id(_mock_dispatcher(handler).dispatch([_target("i-1"), _target("i-2", "stopped")], RequestSpec()))

    assert len(outcomes) == 2
    running = outcomes["i-1"]
    assert running.failure is None
    assert 0.01 <= running.latency < 1.0
    assert running.created_at == LAUNCHED
    stopped = outcomes["i-2"]
    assert stopped.failure is None
    assert stopped.latency == 0
    assert stopped.lifecycle_state == "stopped"


def test_post_body_and_content_type_reach_transport():
    seen = []

    def handler(request):
        seen.append((request.method, request.content, request.headers.get("content-type"), str(request.url)))
        return httpx.Response(201)

    spec = RequestSpec(path="/api/ping", port=8080, body=b'{"ping": true}', content_type="application/json")
    outcomes = _mock_dispatcher(handler).dispatch([_target("i-1")], spec)

    assert outcomes[0].ok
    assert seen == [("POST", b'{"ping": true}', "application/json", "http://10.0.0.1:8080/api/ping")]


def test_timeout_against_silent_peer_is_bounded(silent_port):
    spec = RequestSpec(port=silent_port, timeout=0.05)
    dispatcher = Dispatcher(settings=ProbeSettings())

    start = time.perf_counter()
    outcomes = dispatcher.dispatch([_target("i-1", address="127.0.0.1")], spec)
    elapsed = time.perf_counter() - start

    assert outcomes[0].failure.kind == FailureKind.TRANSPORT
    assert outcomes[0].failure.category == ErrorCategory.TIMEOUT
    assert outcomes[0].latency == 0
    assert elapsed < 1.0


def _dispatch_timed(port, timeout):
    spec = RequestSpec(port=port, timeout=timeout)
    start = time.perf_counter()
    outcomes = Dispatcher(settings=ProbeSettings()).dispatch([_target("i-1", address="127.0.0.1")], spec)
    return outcomes[0], time.perf_counter() - start


def test_slow_headers_are_a_bounded_transport_timeout(trickle_server):
    response = b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\nX-Padding: " + b"a" * 40 + b"\r\n\r\nok"
    outcome, elapsed = _dispatch_timed(trickle_server(b"", response, 0.05), 0.2)

    assert outcome.failure.kind == FailureKind.TRANSPORT
    assert outcome.failure.category == ErrorCategory.TIMEOUT
    assert outcome.latency == 0
    assert elapsed < 1.0


def test_slow_body_is_a_bounded_body_read_timeout(trickle_server):
    head = b"HTTP/1.1 200 OK\r\nContent-Length: 40\r\n\r\n"
    outcome, elapsed = _dispatch_timed(trickle_server(head, b"x" * 40, 0.05), 0.2)

    assert outcome.failure.kind == FailureKind.BODY_READ
    assert outcome.failure.category == ErrorCategory.TIMEOUT
    assert outcome.status.startswith("failed to read response body")
    assert outcome.latency == 0
    assert elapsed < 1.0


def test_unreadable_payload_fails_each_running_target(tmp_path):
    client = RecordingHttpClient()
    spec = RequestSpec(payload_path=tmp_path / "missing.json")

    outcomes = _by_id(Dispatcher(client, ProbeSettings()).dispatch([_target("i-1"), _target("i-2"), _target("i-3", "stopped")], spec))

    assert client.requests == []
    assert outcomes["i-1"].failure.kind == FailureKind.PAYLOAD_READ
    assert outcomes["i-2"].failure.kind == FailureKind.PAYLOAD_READ
    assert outcomes["i-3"].status == "Skipped"


def test_payload_file_is_read_once_per_dispatch(tmp_path, monkeypatch):
    payload = tmp_path / "body.json"
    payload.write_bytes(b'{"a": 1}')
    reads = []
    original = RequestSpec.read_body

    def counting_read(self):
        reads.append(1)
        return original(self)

    monkeypatch.setattr(RequestSpec, "read_body", counting_read)
    client = RecordingHttpClient()

    Dispatcher(client, ProbeSettings()).dispatch([_target("i-1"), _target("i-2"), _target("i-3")], RequestSpec(payload_path=payload))

    assert len(reads) == 1
    assert [r.body for r in client.requests] == [b'{"a": 1}'] * 3
    assert all(r.method == "POST" for r in client.requests)


def test_raising_client_is_captured_as_transport_failure():
    client = RecordingHttpClient(exc=RuntimeError("boom"))
    outcomes = Dispatcher(client, ProbeSettings()).dispatch([_target("i-1"), _target("i-2", "stopped")], RequestSpec())

    failed = _by_id(outcomes)["i-1"]
    assert failed.failure.kind == FailureKind.TRANSPORT
    assert failed.failure.message == "boom"
    assert _by_id(outcomes)["i-2"].failure is None


def test_request_construction_failure_is_per_target():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200)

    outcomes = _by_id(_mock_dispatcher(handler).dispatch([_target("i-1"), _target("i-2", "stopped")], RequestSpec(port="notaport")))

    assert outcomes["i-1"].failure.kind == FailureKind.REQUEST_CONSTRUCTION
    assert outcomes["i-2"].status == "Skipped"
    assert seen == []


def test_exchanges_run_concurrently():
    barrier = threading.Barrier(5, timeout=5)

    def handler(request):
        barrier.wait()
        return httpx.Response(200)

    outcomes = _mock_dispatcher(handler).dispatch([_target(f"i-{n}") for n in range(5)], RequestSpec(timeout=10.0))

    assert all(o.ok for o in outcomes)


def test_max_workers_caps_in_flight_exchanges():
    lock = threading.Lock()
    active = [0]
    peak = [0]

    def handler(request):
        with lock:
            active[0] += 1
            peak[0] = max(peak[0], active[0])
        time.sleep(0.01)
        with lock:
            active[0] -= 1
        return httpx.Response(200)

    outcomes = _mock_dispatcher(handler, max_workers=2).dispatch([_target(f"i-{n}") for n in range(6)], RequestSpec())

    assert len(outcomes) == 6
    assert peak[0] <= 2


def test_module_level_dispatch_closes_client():
    client = RecordingHttpClient()
    outcomes = dispatch([_target("i-1")], RequestSpec(), http_client=client, settings=ProbeSettings())
    assert outcomes[0].ok
    assert outcomes[0].latency == pytest.approx(0.01)
    assert client.closed is True
