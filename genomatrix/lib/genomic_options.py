import logging

from genomatrix.lib.errors import GenomatrixError, InvalidRequest, NotFound
from genomatrix.lib.genotype_store import natural_contig_key
from genomatrix.lib.reference_resolution import resolve_reference

logger = logging.getLogger(__name__)

"""
Lookup values for building genotype queries: selectable datasets,
subpopulations, chromosomes and reference genomes, the coordinate range of a
chromosome and the display names for variety and locus ids.
"""

OPTION_TYPES = {
    "variety_sets": "varietySet",
    "snp_sets": "snpSet",
    "subpopulations": "subpopulation"
}

################################################################################

def genomic_options(store, option_type):
    if option_type in OPTION_TYPES:
        return sorted(store.distinct_variety_values(OPTION_TYPES[option_type]))
    if option_type == "chromosomes":
        return sorted(store.distinct_contigs(), key=natural_contig_key)
    if option_type == "reference_genomes":
        return store.reference_genomes()

    raise InvalidRequest(f"Unknown option type `{option_type}`; use one of {list(OPTION_TYPES) + ['chromosomes', 'reference_genomes']}.")


################################################################################

def chromosome_range(store, reference_genome_name, contig):
    if not contig or not reference_genome_name:
        raise InvalidRequest("Contig (Chromosome) and Reference Genome query parameters are required.")

    ref = resolve_reference(store, reference_genome_name)
    min_p, max_p = store.contig_range(ref["_id"], contig)
    if min_p is None or max_p is None:
        raise NotFound(f"No position range data found for chromosome '{contig}' in reference genome '{reference_genome_name}'.")

    return {"min_position": min_p, "max_position": max_p}


################################################################################

def resolve_names(store, feature_client, variety_ids=None, locus_ids=None):
    """
    Maps variety and locus ids to display names. Unknown ids are left out;
    a failing Feature service only leaves the loci unresolved.
    """
    v_ids = _unique(variety_ids)
    l_ids = _unique(locus_ids)
    resolved = {}

    if len(v_ids) > 0:
        for v in store.varieties_by_ids(v_ids):
            if v.get("name"):
                resolved.update({v["_id"]: v["name"]})

    if len(l_ids) > 0:
        try:
            resolved.update(feature_client.lookup_names(l_ids))
        except GenomatrixError as e:
            logger.warning(f"locus names for {len(l_ids)} ids not resolved: {e}")

    return resolved


def _unique(ids):
    u = []
    for i in ids or []:
        i = str(i).strip()
        if len(i) > 0 and i not in u:
            u.append(i)
    return u
