"""
Pytest configuration and fixtures for the genomatrix tests.
"""

import pytest

from genomatrix.lib.config import load_config
from genomatrix.lib.errors import Forbidden, NotFound, UpstreamUnavailable
from genomatrix.lib.genotype_search import GenotypeSearch
from genomatrix.lib.genotype_store import MemoryGenotypeStore


# ============================================================================
# Collaborator Doubles
# ============================================================================

class FakeFeatureClient:
    """Feature service double; `loci` maps locus ids to coordinates."""

    def __init__(self, loci=None, unavailable=False):
        self.loci = loci or {}
        self.unavailable = unavailable
        self.calls = []

    def coordinates(self, locus_id, reference_genome):
        self.calls.append(("coordinates", locus_id, reference_genome))
        if self.unavailable:
            raise UpstreamUnavailable("FeatureClient could not be reached.")
        if locus_id not in self.loci:
            raise NotFound(f"Locus '{locus_id}' not found for {reference_genome}.")
        return dict(self.loci[locus_id])

    def batch_coordinates(self, locus_ids, reference_genome):
        self.calls.append(("batch_coordinates", tuple(locus_ids), reference_genome))
        if self.unavailable:
            raise UpstreamUnavailable("FeatureClient could not be reached.")
        success = []
        failed = []
        for l_id in locus_ids:
            if l_id in self.loci:
                c = dict(self.loci[l_id])
                c.update({"id": l_id})
                success.append(c)
            else:
                failed.append(l_id)
        return success, failed

    def lookup_names(self, locus_ids):
        self.calls.append(("lookup_names", tuple(locus_ids)))
        if self.unavailable:
            raise UpstreamUnavailable("FeatureClient could not be reached.")
        return {l: f"gene-{l}" for l in locus_ids if l in self.loci}


class FakeListClient:
    """List service double; `lists` maps list ids to `(owner, items)`."""

    def __init__(self, lists=None, unavailable=False):
        self.lists = lists or {}
        self.unavailable = unavailable
        self.calls = []

    def list_content(self, list_id, caller_identity):
        self.calls.append((list_id, caller_identity))
        if self.unavailable:
            raise UpstreamUnavailable("ListClient could not be reached.")
        if list_id not in self.lists:
            raise NotFound(f"Saved list '{list_id}' not found.")
        owner, items = self.lists[list_id]
        if owner != caller_identity:
            raise Forbidden("Access Denied: the saved list belongs to another user.")
        return list(items)


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def config():
    """Default configuration, independent of the test environment."""
    return load_config(env={}, overrides={"matrix": {"max_fetch_workers": 2}})


# ============================================================================
# Genotype Document Fixtures
# ============================================================================

@pytest.fixture
def genotype_documents():
    """
    IRGSP-1.0 with one chr1 window (1500:A, 1800:T) and one chr2 window;
    V1 and V2 are in 3K/base, V3 belongs to another variety set.
    """
    return {
        "reference_genomes": [
            {"_id": "ref-irgsp", "id": "GCF_001433935.1", "name": "IRGSP-1.0", "snpSet": "base", "varietySet": "3K"},
            {"_id": "ref-empty", "id": "", "name": "Empty-1.0", "snpSet": "base", "varietySet": "3K"},
        ],
        "reference_chunks": [
            {"_id": "rc-1", "referenceId": "ref-irgsp", "contig": "chr1", "start": 1000, "end": 2000,
             "positions": {"1500": "A", "1800": "T"}},
            {"_id": "rc-2", "referenceId": "ref-irgsp", "contig": "chr2", "start": 500, "end": 900,
             "positions": {"600": "C", "700": None}},
        ],
        "varieties": [
            {"_id": "v1", "id": "V1", "name": "V1", "accession": "ACC-1", "irisId": "IRIS 313-1",
             "subpopulation": "indx", "varietySet": "3K", "snpSet": "base", "country": "PH"},
            {"_id": "v2", "id": "V2", "name": "V2", "accession": "ACC-2", "irisId": None,
             "subpopulation": "japx", "varietySet": "3K", "snpSet": "base", "country": "JP"},
            {"_id": "v3", "id": "V3", "name": "V3", "accession": "ACC-3", "irisId": "IRIS 313-3",
             "subpopulation": "indx", "varietySet": "other", "snpSet": "base", "country": "IN"},
        ],
        "variety_chunks": [
            {"_id": "vc-1", "referenceId": "v1", "contig": "chr1", "start": 1000, "end": 1600,
             "positions": {"1500": "G"}},
            {"_id": "vc-2", "referenceId": "v2", "contig": "chr1", "start": 1000, "end": 2000,
             "positions": {"1500": "A", "1800": "C", "1900": "G"}},
            {"_id": "vc-3", "referenceId": "v2", "contig": "chr2", "start": 500, "end": 900,
             "positions": {"600": "T", "700": "C"}},
            {"_id": "vc-4", "referenceId": "v3", "contig": "chr1", "start": 1000, "end": 2000,
             "positions": {"1500": "C", "1800": "C"}},
        ],
    }


@pytest.fixture
def store(genotype_documents):
    """Memory store over the example documents."""
    return MemoryGenotypeStore(**genotype_documents)


# ============================================================================
# Collaborator Fixtures
# ============================================================================

@pytest.fixture
def feature_client():
    """Feature service knowing two loci on chr1 and one on chr2."""
    return FakeFeatureClient(loci={
        "LOC_Os01g01010": {"contig": "chr1", "start": 1000, "end": 2000},
        "LOC_Os01g01020": {"contig": "chr1", "start": 1700, "end": 1900},
        "LOC_Os02g01010": {"contig": "chr2", "start": 550, "end": 650},
    })


@pytest.fixture
def list_client():
    """List service with lists owned by `user-1`."""
    return FakeListClient(lists={
        "snps-1": ("user-1", ["chr1:1500", "chr1:1550"]),
        "snps-mixed": ("user-1", ["chr1:1500", "chr2"]),
        "loci-1": ("user-1", ["LOC_Os01g01020", "LOC_Os02g01010", "LOC_missing"]),
        "loci-none": ("user-1", ["LOC_missing"]),
        "varieties-1": ("user-1", ["v2", "v3"]),
        "varieties-empty": ("user-1", []),
    })


@pytest.fixture
def search(config, store, feature_client, list_client):
    """Genotype search wired to the memory store and collaborator doubles."""
    return GenotypeSearch(config, store=store, feature_client=feature_client, list_client=list_client)


@pytest.fixture
def base_params():
    """Dataset parameters shared by most search requests."""
    return {"referenceGenome": "IRGSP-1.0", "varietySet": "3K", "snpSet": "base"}
