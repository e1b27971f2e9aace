import logging

logger = logging.getLogger(__name__)

"""
The reference aggregation establishes the column set of the allele matrix:
a position is a column iff it was found in a reference chunk overlapping the
query region (or, for explicit SNP lists, iff it is in the list).
"""

################################################################################

def aggregate_positions(store, reference_id, region, unknown_allele="?"):
    """
    Collects the positions and reference alleles of all reference chunks
    overlapping the segments of `region`.

    * positions are clipped to the segment bounds; unbounded segments take
      all positions of the matched chunks
    * if a position shows up in several chunks the first chunk in store
      order wins, and so does its contig
    * non-string alleles resolve to `unknown_allele`
    * for explicit position lists, only listed positions are kept and all
      listed positions become columns, unknown ones with `unknown_allele`
      on the contig of their list entry

    Returns the sorted distinct positions, the `{position: allele}` map and
    the `{position: contig}` map of the column contigs.
    """
    explicit = None
    if region.explicit_positions is not None:
        explicit = set(region.explicit_positions)

    ref_alleles = {}
    col_contigs = {}
    chunk_no = 0
    for seg in region.segments:
        for chunk in store.reference_chunks(reference_id, seg):
            chunk_no += 1
            for p_k, allele in (chunk.get("positions") or {}).items():
                p = position_value(p_k)
                if p is None:
                    continue
                if not seg.contains(p):
                    continue
                if explicit is not None and p not in explicit:
                    continue
                if p in ref_alleles:
                    continue
                ref_alleles[p] = allele if isinstance(allele, str) else unknown_allele
                col_contigs[p] = chunk.get("contig")

    if explicit is not None:
        for p in explicit:
            if p in ref_alleles:
                continue
            ref_alleles[p] = unknown_allele
            col_contigs[p] = next((s.contig for s in region.segments if s.bounded and s.contains(p)), None)

    positions = sorted(ref_alleles.keys())
    logger.info(f"{chunk_no} reference chunks => {len(positions)} positions")

    return positions, ref_alleles, col_contigs


################################################################################

def position_value(p_k):
    if isinstance(p_k, bool):
        return None
    if isinstance(p_k, int):
        return p_k
    try:
        return int(str(p_k).strip())
    except ValueError:
        return None
