import logging

from genomatrix.lib.errors import NotFound

logger = logging.getLogger(__name__)

################################################################################

def resolve_reference(store, reference_genome_name):
    """
    Returns the reference genome record; its stringified `_id` scopes all
    reference chunk queries.
    """
    ref = store.reference_genome(reference_genome_name)
    if not ref:
        raise NotFound(f"Reference Genome '{reference_genome_name}' not found.")

    logger.debug(f"reference genome {reference_genome_name} => {ref['_id']}")

    return ref
