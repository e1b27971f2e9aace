import logging, re

from genomatrix.lib.errors import InvalidRequest, NotFound
from genomatrix.lib.genotype_store import natural_contig_key
from genomatrix.lib.region_specs import (
    GeneLocusRegion,
    LocusListRegion,
    QueryRegion,
    RangeRegion,
    Segment,
    SnpListRegion
)

logger = logging.getLogger(__name__)

SNP_POSITION_RE = re.compile(r'^(?P<contig>[^:\s]+):(?P<position>\d+)$')
SNP_RANGE_RE = re.compile(r'^(?P<contig>[^:\s]+):(?P<start>\d+)-(?P<end>\d+)$')
CONTIG_RE = re.compile(r'^[^:\s]+$')

################################################################################

class RegionResolver:
    """
    Turns a `RegionSpec` into a `QueryRegion`. The gene locus and list modes
    call the Feature and List collaborators; range requests are resolved
    locally.
    """

    def __init__(self, feature_client, list_client):
        self.feature_client = feature_client
        self.list_client = list_client


    # -------------------------------------------------------------------------#
    # ----------------------------- public ------------------------------------#
    # -------------------------------------------------------------------------#

    def resolve(self, query):
        region = query.region
        if isinstance(region, RangeRegion):
            return region.query_region()
        if isinstance(region, GeneLocusRegion):
            return self.__gene_locus(region, query.reference_genome)
        if isinstance(region, SnpListRegion):
            return self.__snp_list(region, query.caller_identity)
        if isinstance(region, LocusListRegion):
            return self.__locus_list(region, query.reference_genome, query.caller_identity)

        raise InvalidRequest(f"Unsupported region selection {type(region).__name__}.")


    # -------------------------------------------------------------------------#
    # ----------------------------- private -----------------------------------#
    # -------------------------------------------------------------------------#

    def __gene_locus(self, region, reference_genome):
        c = self.feature_client.coordinates(region.locus_id, reference_genome)
        r = RangeRegion(contig=c["contig"], start=c["start"], end=c["end"])
        r.validate()
        logger.info(f"locus {region.locus_id} => {c['contig']}:{c['start']}-{c['end']}")
        return r.query_region()


    # -------------------------------------------------------------------------#

    def __snp_list(self, region, caller_identity):
        items = self.list_client.list_content(region.list_id, caller_identity)
        return snp_list_region(items)


    # -------------------------------------------------------------------------#

    def __locus_list(self, region, reference_genome, caller_identity):
        locus_ids = self.list_client.list_content(region.list_id, caller_identity)
        if len(locus_ids) < 1:
            return QueryRegion(segments=(), specific=True)

        success, failed = self.feature_client.batch_coordinates(locus_ids, reference_genome)
        if len(failed) > 0:
            logger.warning(f"{len(failed)} loci from list {region.list_id} without coordinates: {failed}")
        if len(success) < 1:
            raise NotFound(f"None of the loci in list '{region.list_id}' could be located in {reference_genome}.")

        segments = []
        for s in success:
            r = RangeRegion(contig=s["contig"], start=s["start"], end=s["end"])
            r.validate()
            segments.append(Segment(s["contig"], s["start"], s["end"]))

        return QueryRegion(segments=merge_segments(segments), specific=True)


################################################################################

def snp_list_region(items):
    """
    Saved SNP list entries are read as

    * `contig:position` - a single SNP position
    * `contig:start-end` - a window
    * `contig` - the whole contig

    If all entries are single positions, these positions are the explicit
    column set of the matrix. Otherwise single positions are queried as
    one base windows and the columns come from the reference aggregation.
    Unreadable entries are skipped with a warning.
    """
    segments = []
    points = []
    skipped = []
    mixed = False

    for i in items:
        i = i.strip()
        if (m := SNP_POSITION_RE.match(i)):
            p = int(m.group("position"))
            points.append(p)
            segments.append(Segment(m.group("contig"), p, p))
        elif (m := SNP_RANGE_RE.match(i)):
            s, e = int(m.group("start")), int(m.group("end"))
            if s > e:
                skipped.append(i)
                continue
            mixed = True
            segments.append(Segment(m.group("contig"), s, e))
        elif CONTIG_RE.match(i):
            mixed = True
            segments.append(Segment(i, None, None))
        else:
            skipped.append(i)

    if len(skipped) > 0:
        logger.warning(f"skipped {len(skipped)} unreadable SNP list entries: {skipped}")

    explicit = None
    if len(points) > 0 and not mixed:
        explicit = tuple(sorted(set(points)))

    return QueryRegion(segments=merge_segments(segments), specific=True, explicit_positions=explicit)


################################################################################

def merge_segments(segments):
    """
    Merges overlapping or adjacent windows per contig; a whole contig window
    absorbs all bounded windows on that contig. Output is sorted by contig
    (natural order) and start.
    """
    by_contig = {}
    for s in segments:
        by_contig.setdefault(s.contig, []).append(s)

    merged = []
    for contig in sorted(by_contig.keys(), key=lambda c: natural_contig_key(c or "")):
        c_s = by_contig[contig]
        if any(not s.bounded for s in c_s):
            merged.append(Segment(contig, None, None))
            continue
        c_s = sorted(c_s, key=lambda s: (s.start, s.end))
        cur_s, cur_e = c_s[0].start, c_s[0].end
        for s in c_s[1:]:
            if s.start <= cur_e + 1:
                cur_e = max(cur_e, s.end)
                continue
            merged.append(Segment(contig, cur_s, cur_e))
            cur_s, cur_e = s.start, s.end
        merged.append(Segment(contig, cur_s, cur_e))

    return tuple(merged)
