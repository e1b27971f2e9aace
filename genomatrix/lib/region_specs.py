"""
Region selection types and the parsed genotype query.

A request selects its genomic region in exactly one of four ways; each way
is one `RegionSpec` variant and the resolver dispatches on the variant type.
Every variant resolves to a `QueryRegion`, i.e. one or more `Segment` windows
plus, for saved SNP lists, an explicit column set.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from humps import decamelize

from genomatrix.lib.errors import InvalidRegion, InvalidRequest, Unauthorized


@dataclass(frozen=True)
class Segment:
    """A query window; `None` bounds stand for an unbounded scan."""
    contig: Optional[str] = None
    start: Optional[int] = None
    end: Optional[int] = None

    @property
    def bounded(self) -> bool:
        return self.start is not None and self.end is not None

    def contains(self, position: int) -> bool:
        if not self.bounded:
            return True
        return self.start <= position <= self.end


@dataclass(frozen=True)
class QueryRegion:
    """Resolved region; `specific` drives the empty-result policy."""
    segments: Tuple[Segment, ...]
    specific: bool
    explicit_positions: Optional[Tuple[int, ...]] = None


@dataclass(frozen=True)
class RangeRegion:
    contig: Optional[str] = None
    start: Optional[int] = None
    end: Optional[int] = None
    requires_identity = False

    def validate(self):
        if not self.contig:
            if self.start is not None or self.end is not None:
                raise InvalidRegion("Start and end positions can only be used with a specific chromosome.")
            return
        if self.start is None or self.end is None:
            raise InvalidRegion("Start Position and End Position are required when a specific Chromosome is selected.")
        if self.start < 0 or self.end < 0 or self.start > self.end:
            raise InvalidRegion(f"Invalid Start/End position {self.start}-{self.end} for chromosome search.")

    def query_region(self) -> QueryRegion:
        if not self.contig:
            return QueryRegion(segments=(Segment(),), specific=False)
        return QueryRegion(segments=(Segment(self.contig, self.start, self.end),), specific=True)


@dataclass(frozen=True)
class GeneLocusRegion:
    locus_id: str
    requires_identity = False

    def validate(self):
        if not self.locus_id:
            raise InvalidRequest("A gene locus id is required for gene locus searches.")


@dataclass(frozen=True)
class SnpListRegion:
    list_id: str
    requires_identity = True

    def validate(self):
        if not self.list_id:
            raise InvalidRequest("A saved SNP list id is required for SNP list searches.")


@dataclass(frozen=True)
class LocusListRegion:
    list_id: str
    requires_identity = True

    def validate(self):
        if not self.list_id:
            raise InvalidRequest("A saved locus list id is required for locus list searches.")


RegionSpec = Union[RangeRegion, GeneLocusRegion, SnpListRegion, LocusListRegion]


################################################################################

@dataclass(frozen=True)
class GenotypeQuery:
    reference_genome: str
    variety_set: str
    snp_set: str
    region: RegionSpec
    subpopulation: Optional[str] = None
    saved_variety_list_id: Optional[str] = None
    caller_identity: Optional[str] = None
    output: str = "json"

    @classmethod
    def from_params(cls, params: dict) -> "GenotypeQuery":
        """
        Builds the query from request parameters (camelCase or snake_case
        keys) and runs all checks which don't need store access:

        * missing dataset parameters or contradictory filters raise
          `InvalidRequest` (region problems `InvalidRegion`)
        * list based region modes and saved variety lists without a caller
          identity raise `Unauthorized`
        """
        p = decamelize(dict(params))

        for k in ("reference_genome", "variety_set", "snp_set"):
            if not _text(p.get(k)):
                raise InvalidRequest("Reference Genome, Variety Set, and SNP Set are required.")

        subpop = _text(p.get("subpopulation")) or _text(p.get("variety_subpopulation"))
        v_l_id = _text(p.get("saved_variety_list_id"))
        if subpop and v_l_id:
            raise InvalidRequest("A saved variety list can't be combined with a subpopulation filter.")

        q = cls(
            reference_genome=_text(p["reference_genome"]),
            variety_set=_text(p["variety_set"]),
            snp_set=_text(p["snp_set"]),
            region=_region_from_params(p),
            subpopulation=subpop,
            saved_variety_list_id=v_l_id,
            caller_identity=_text(p.get("caller_identity")),
            output=_text(p.get("output")) or "json"
        )
        q.region.validate()
        q.check_access()

        return q


    def check_access(self):
        needs_identity = self.region.requires_identity or self.saved_variety_list_id is not None
        if needs_identity and not self.caller_identity:
            raise Unauthorized("Access Denied: saved lists require an authenticated caller.")


################################################################################

def _region_from_params(p):
    r_t = _text(p.get("region_type")) or "range"
    # accepts "geneLocus", "gene_locus", "genelocus" ...
    r_t = r_t.replace("_", "").lower()

    if r_t == "range":
        return RangeRegion(
            contig=_text(p.get("region_chromosome")),
            start=_position(p.get("region_start"), "start"),
            end=_position(p.get("region_end"), "end")
        )
    if r_t == "genelocus":
        return GeneLocusRegion(locus_id=_text(p.get("region_gene_locus")))
    if r_t == "snplist":
        return SnpListRegion(list_id=_text(p.get("saved_snp_list_id")))
    if r_t == "locuslist":
        return LocusListRegion(list_id=_text(p.get("saved_locus_list_id")))

    raise InvalidRequest(f"Unknown region type `{r_t}`.")


def _text(v):
    if v is None:
        return None
    v = str(v).strip()
    return v if len(v) > 0 else None


def _position(v, label):
    if v is None or (isinstance(v, str) and len(v.strip()) < 1):
        return None
    if isinstance(v, bool):
        raise InvalidRegion(f"Invalid {label} position `{v}`.")
    try:
        return int(str(v).strip())
    except ValueError:
        raise InvalidRegion(f"Invalid {label} position `{v}`.")
