"""
Tests for the Feature and List service clients, with a scripted session.
"""

import pytest
import requests

from genomatrix.lib.collaborators import FeatureClient, ListClient, collaborator_clients
from genomatrix.lib.errors import Forbidden, NotFound, Unauthorized, UpstreamUnavailable


class FakeResponse:

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self.payload = payload
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self.text is not None:
            raise ValueError("No JSON object could be decoded")
        return self.payload


class FakeSession:
    """Returns (or raises) the scripted outcomes in order and records calls."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        o = self.outcomes.pop(0)
        if isinstance(o, Exception):
            raise o
        return o


def _feature_client(*outcomes, retries=1):
    return FeatureClient("http://features/", timeout_seconds=2, retries=retries,
                         retry_backoff_seconds=0, session=FakeSession(*outcomes))


def _list_client(*outcomes):
    return ListClient("http://lists", timeout_seconds=2, retries=1,
                      retry_backoff_seconds=0, session=FakeSession(*outcomes))


# ============================================================================
# Tests: Retries and Error Mapping
# ============================================================================


class TestRequestHandling:
    """Tests for retries, timeouts and status mapping."""

    def test_request_parameters(self):
        """Requests carry the timeout and the reference genome."""
        c = _feature_client(FakeResponse(payload={"contig": "chr1", "start": 1, "end": 9}))
        assert c.coordinates("LOC_1", "IRGSP-1.0") == {"contig": "chr1", "start": 1, "end": 9}
        method, url, kwargs = c.session.calls[0]
        assert (method, url) == ("GET", "http://features/features/coordinates/LOC_1")
        assert kwargs["params"] == {"referenceGenome": "IRGSP-1.0"}
        assert kwargs["timeout"] == 2

    def test_retry_after_timeout(self):
        """A timeout is retried once."""
        c = _feature_client(
            requests.Timeout("slow"),
            FakeResponse(payload={"contig": "chr1", "start": 1, "end": 9})
        )
        assert c.coordinates("LOC_1", "IRGSP-1.0")["contig"] == "chr1"
        assert len(c.session.calls) == 2

    def test_retries_exhausted(self):
        """Repeated connection failures raise UpstreamUnavailable."""
        c = _feature_client(requests.ConnectionError("down"), requests.ConnectionError("down"))
        with pytest.raises(UpstreamUnavailable):
            c.coordinates("LOC_1", "IRGSP-1.0")
        assert len(c.session.calls) == 2

    def test_gateway_status_retried(self):
        """Gateway errors are retried, then reported as unavailable."""
        c = _feature_client(FakeResponse(503), FakeResponse(502))
        with pytest.raises(UpstreamUnavailable):
            c.coordinates("LOC_1", "IRGSP-1.0")
        assert len(c.session.calls) == 2

    def test_not_found_not_retried(self):
        """Definite answers are not retried."""
        c = _feature_client(FakeResponse(404))
        with pytest.raises(NotFound):
            c.coordinates("LOC_x", "IRGSP-1.0")
        assert len(c.session.calls) == 1

    def test_unreadable_body(self):
        """Bodies which aren't JSON raise UpstreamUnavailable."""
        c = _feature_client(FakeResponse(text="<html>"))
        with pytest.raises(UpstreamUnavailable):
            c.coordinates("LOC_1", "IRGSP-1.0")

    def test_incomplete_coordinates(self):
        """Coordinates without contig count as not found."""
        c = _feature_client(FakeResponse(payload={"start": 1, "end": 9}))
        with pytest.raises(NotFound):
            c.coordinates("LOC_1", "IRGSP-1.0")


# ============================================================================
# Tests: Feature Service
# ============================================================================


class TestFeatureClient:
    """Tests for batch coordinates and name lookups."""

    def test_batch_coordinates(self):
        """Batch results are split into located and failed loci."""
        c = _feature_client(FakeResponse(payload={
            "success": [
                {"id": "LOC_1", "contig": "chr1", "start": "10", "end": "20"},
                {"id": "LOC_2", "contig": None, "start": 1, "end": 2},
            ],
            "failed": ["LOC_3"]
        }))
        success, failed = c.batch_coordinates(["LOC_1", "LOC_2", "LOC_3"], "IRGSP-1.0")
        assert success == [{"contig": "chr1", "start": 10, "end": 20, "id": "LOC_1"}]
        assert failed == ["LOC_3", "LOC_2"]
        method, url, kwargs = c.session.calls[0]
        assert method == "POST"
        assert kwargs["json"] == {"locusIds": ["LOC_1", "LOC_2", "LOC_3"], "referenceGenome": "IRGSP-1.0"}

    def test_lookup_names(self):
        """Locus names are keyed by id."""
        c = _feature_client(FakeResponse(payload=[
            {"_id": "LOC_1", "geneName": "Hd1"},
            {"id": "LOC_2"},
        ]))
        assert c.lookup_names(["LOC_1", "LOC_2"]) == {"LOC_1": "Hd1"}


# ============================================================================
# Tests: List Service
# ============================================================================


class TestListClient:
    """Tests for saved list retrieval."""

    def test_identity_header(self):
        """The caller identity is passed as header."""
        c = _list_client(FakeResponse(payload=["chr1:1500", " ", "chr1:1600 "]))
        assert c.list_content("l1", "user-1") == ["chr1:1500", "chr1:1600"]
        method, url, kwargs = c.session.calls[0]
        assert url == "http://lists/lists/l1/content"
        assert kwargs["headers"] == {"X-User-Id": "user-1"}

    def test_content_object(self):
        """Payloads with a `content` list are accepted."""
        c = _list_client(FakeResponse(payload={"content": ["v1"]}))
        assert c.list_content("l1", "user-1") == ["v1"]

    def test_access_errors(self):
        """401 and 403 map to the access errors."""
        with pytest.raises(Forbidden):
            _list_client(FakeResponse(403)).list_content("l1", "user-2")
        with pytest.raises(Unauthorized):
            _list_client(FakeResponse(401)).list_content("l1", "user-2")


def test_collaborator_clients(config):
    """Clients are built from the configured URLs and timeouts."""
    f_c, l_c = collaborator_clients(config)
    assert f_c.base_url == "http://localhost:5001"
    assert l_c.base_url == "http://localhost:5003"
    assert f_c.timeout_seconds == 10
    assert l_c.retries == 1
