"""
Tests for the CGI services and their request/response helpers.
"""

import io
import json

from genomatrix.lib.service_helpers import list_parameter, request_parameters, run_service
from genomatrix.services.chromosomeRange import chromosome_range_service
from genomatrix.services.genomicOptions import genomic_options_service
from genomatrix.services.genotypeSearch import genotype_search
from genomatrix.services.idResolver import id_resolver


def _split_response(text):
    head, body = text.split("\n\n", 1)
    return head.splitlines(), body


def _json_response(out):
    head, body = _split_response(out.getvalue())
    return head, json.loads(body)


# ============================================================================
# Tests: Request Parameters
# ============================================================================


class TestRequestParameters:
    """Tests for reading CGI request parameters."""

    def test_query_string(self):
        """Query string values are read; repeated keys keep the last value."""
        p = request_parameters(env={"QUERY_STRING": "referenceGenome=IRGSP-1.0&snpSet=a&snpSet=base"})
        assert p == {"referenceGenome": "IRGSP-1.0", "snpSet": "base"}

    def test_post_body(self):
        """JSON bodies of POST requests are merged over the query string."""
        body = json.dumps({"varietySet": "3K", "regionStart": 1000})
        p = request_parameters(
            env={"REQUEST_METHOD": "POST", "CONTENT_LENGTH": str(len(body)), "QUERY_STRING": "varietySet=x"},
            stdin=io.StringIO(body)
        )
        assert p == {"varietySet": "3K", "regionStart": 1000}

    def test_caller_identity_from_header_only(self):
        """Caller identities in parameters are dropped; the header is used."""
        p = request_parameters(env={"QUERY_STRING": "callerIdentity=someone"})
        assert "callerIdentity" not in p
        p = request_parameters(env={"QUERY_STRING": "callerIdentity=someone", "HTTP_X_USER_ID": "user-1"})
        assert p["callerIdentity"] == "user-1"

    def test_list_parameter(self):
        """Comma separated and list values are accepted."""
        assert list_parameter({"ids": "a, b,,c"}, "ids") == ["a", "b", "c"]
        assert list_parameter({"ids": ["a", " "]}, "ids") == ["a"]
        assert list_parameter({}, "ids") == []


# ============================================================================
# Tests: Genotype Search Service
# ============================================================================


class TestGenotypeSearchService:
    """Tests for the genotypeSearch service."""

    def test_json_response(self, search, base_params):
        """Responses are camelCased JSON after the header lines."""
        out = io.StringIO()
        genotype_search(params=dict(base_params, regionChromosome="chr1", regionStart=1000, regionEnd=2000),
                        search=search, out=out)
        head, d = _json_response(out)
        assert head == ["Content-Type: application/json", "status: 200"]
        assert d["referenceGenomeName"] == "IRGSP-1.0"
        assert d["positions"] == [1500, 1800]
        assert d["varieties"][1]["alleles"] == {"1500": "G", "1800": "-"}

    def test_tsv_response(self, search, base_params):
        """`output=tsv` gives a tab separated attachment."""
        out = io.StringIO()
        genotype_search(params=dict(base_params, regionChromosome="chr1", regionStart=1000, regionEnd=2000,
                                    output="tsv"), search=search, out=out)
        head, body = _split_response(out.getvalue())
        assert head[0] == "Content-Type: text/plain"
        assert 'filename="IRGSP-1.0_genotypes.tsv"' in head[1]
        lines = body.strip().split("\n")
        assert lines[0].split("\t") == ["name", "accession", "assay", "subpop", "dataset", "mismatch", "1500", "1800"]
        assert lines[1].split("\t") == ["IRGSP-1.0", "GCF_001433935.1", "Reference", "-", "-", "0", "A", "T"]
        assert len(lines) == 4

    def test_error_status(self, search, base_params):
        """Known errors are answered with their status."""
        out = io.StringIO()
        run_service(genotype_search, params=dict(base_params, referenceGenome="MSU7"), search=search, out=out)
        head, d = _json_response(out)
        assert head[1] == "status: 404"
        assert d["error"]["errorCode"] == 404
        assert "MSU7" in d["error"]["errorMessage"]

    def test_invalid_region(self, search, base_params):
        """Region errors are answered with 400."""
        out = io.StringIO()
        run_service(genotype_search, params=dict(base_params, regionChromosome="chr1", regionStart=10, regionEnd=5),
                    search=search, out=out)
        head, d = _json_response(out)
        assert d["error"]["errorCode"] == 400

    def test_unexpected_error(self, base_params):
        """Unexpected failures give a generic 500 response."""
        class BrokenSearch:
            def search(self, query):
                raise RuntimeError("connection pool exploded")
        out = io.StringIO()
        run_service(genotype_search, params=base_params, search=BrokenSearch(), out=out)
        head, d = _json_response(out)
        assert head[1] == "status: 500"
        assert d["error"]["errorMessage"] == "Server Error."


# ============================================================================
# Tests: Lookup Services
# ============================================================================


class TestLookupServices:
    """Tests for the option, range and id resolver services."""

    def test_genomic_options(self, store):
        """Option types are accepted in camelCase."""
        out = io.StringIO()
        genomic_options_service(params={"optionType": "varietySets"}, store=store, out=out)
        head, d = _json_response(out)
        assert d == {"optionType": "variety_sets", "results": ["3K", "other"]}

    def test_unknown_option_type(self, store):
        """Unknown option types are rejected."""
        out = io.StringIO()
        run_service(genomic_options_service, params={"optionType": "colors"}, store=store, out=out)
        head, d = _json_response(out)
        assert d["error"]["errorCode"] == 400

    def test_chromosome_range(self, store):
        """The range is returned with camelCased keys."""
        out = io.StringIO()
        chromosome_range_service(params={"referenceGenome": "IRGSP-1.0", "contig": "chr2"}, store=store, out=out)
        head, d = _json_response(out)
        assert d == {"minPosition": 500, "maxPosition": 900}

    def test_id_resolver(self, store, feature_client):
        """Variety and locus ids are resolved; ids keep their spelling."""
        out = io.StringIO()
        id_resolver(params={"varietyIds": "v1,v9", "locusIds": "LOC_Os01g01010"},
                    store=store, feature_client=feature_client, out=out)
        head, d = _json_response(out)
        assert d == {"resolved": {"v1": "V1", "LOC_Os01g01010": "gene-LOC_Os01g01010"}}
