import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait

from genomatrix.lib.allele_matrix import AlleleMatrixBuilder
from genomatrix.lib.collaborators import collaborator_clients
from genomatrix.lib.genotype_store import MongoGenotypeStore
from genomatrix.lib.matrix_response import MatrixFormatter
from genomatrix.lib.position_aggregation import aggregate_positions
from genomatrix.lib.reference_resolution import resolve_reference
from genomatrix.lib.region_resolution import RegionResolver
from genomatrix.lib.region_specs import GenotypeQuery
from genomatrix.lib.variety_filter import VarietyFilter

logger = logging.getLogger(__name__)

################################################################################

class GenotypeSearch:
    """
    Genotype region query: first the collaborator lookups (region and saved
    variety list) side by side, so that access errors are raised before any
    store read; then the reference genome lookup, then the reference
    position aggregation and the variety selection side by side; finally
    the allele matrix and the response.

    Stores and collaborator clients default to the MongoDB store and the
    HTTP clients defined by `config`; tests inject their own.
    """

    def __init__(self, config, store=None, feature_client=None, list_client=None):
        self.config = config
        self.store = store or MongoGenotypeStore(config)
        if feature_client is None or list_client is None:
            f_c, l_c = collaborator_clients(config)
            feature_client = feature_client or f_c
            list_client = list_client or l_c
        self.region_resolver = RegionResolver(feature_client, list_client)
        self.variety_filter = VarietyFilter(self.store, list_client)
        self.matrix_builder = AlleleMatrixBuilder(
            self.store,
            max_workers=config.max_fetch_workers,
            no_call_allele=config.no_call_allele,
            unknown_reference_allele=config.unknown_reference_allele
        )


    # -------------------------------------------------------------------------#
    # ----------------------------- public ------------------------------------#
    # -------------------------------------------------------------------------#

    def search(self, query):
        """
        Accepts a `GenotypeQuery` or raw request parameters and returns the
        snake_case response dict. Request and access errors are raised before
        any store access.
        """
        if not isinstance(query, GenotypeQuery):
            query = GenotypeQuery.from_params(query)

        region, list_ids = fork_join(
            lambda: self.region_resolver.resolve(query),
            lambda: self.variety_filter.saved_list_ids(query)
        )

        reference = resolve_reference(self.store, query.reference_genome)

        (positions, ref_alleles, col_contigs), varieties = fork_join(
            lambda: aggregate_positions(
                self.store, reference["_id"], region,
                unknown_allele=self.config.unknown_reference_allele
            ),
            lambda: self.variety_filter.select(query, list_ids=list_ids)
        )

        formatter = MatrixFormatter(
            query.reference_genome,
            reference,
            unknown_reference_allele=self.config.unknown_reference_allele
        )

        if len(positions) < 1:
            logger.info(f"no reference positions for {query.reference_genome} in {region.segments}")
            return formatter.formatted(region, positions, ref_alleles, [])

        matrix_rows = self.matrix_builder.build(
            varieties, region, positions, ref_alleles, column_contigs=col_contigs
        )
        logger.info(f"{query.reference_genome}: {len(positions)} positions x {len(matrix_rows)} varieties")

        return formatter.formatted(region, positions, ref_alleles, matrix_rows)


################################################################################

def fork_join(*tasks):
    """
    Runs the callables concurrently and returns their results in order. The
    first failure cancels the tasks not yet started and is re-raised.
    """
    executor = ThreadPoolExecutor(max_workers=len(tasks))
    futures = [ executor.submit(t) for t in tasks ]
    done, pending = wait(futures, return_when=FIRST_EXCEPTION)
    for f in futures:
        if f.done() and f.exception() is not None:
            for p in pending:
                p.cancel()
            executor.shutdown(wait=False, cancel_futures=True)
            raise f.exception()
    executor.shutdown(wait=True)

    return [ f.result() for f in futures ]
