import logging
from concurrent.futures import ThreadPoolExecutor

from genomatrix.lib.position_aggregation import position_value

logger = logging.getLogger(__name__)

################################################################################

class AlleleMatrixBuilder:
    """
    Fills the allele matrix for a fixed column set. Each variety's chunks
    are fetched in its own task on a pool of at most `max_workers` threads;
    a failing fetch cancels the pending ones and fails the whole build.
    """

    def __init__(self, store, max_workers=8, no_call_allele="-", unknown_reference_allele="?"):
        self.store = store
        self.max_workers = max_workers
        self.no_call_allele = no_call_allele
        self.unknown_reference_allele = unknown_reference_allele


    # -------------------------------------------------------------------------#
    # ----------------------------- public ------------------------------------#
    # -------------------------------------------------------------------------#

    def build(self, varieties, region, positions, reference_alleles, column_contigs=None):
        """
        Returns one `{"variety", "alleles", "mismatch"}` row per variety, in
        the order of `varieties`; `alleles` holds an allele for every
        position, `no_call_allele` where the variety has no data.

        `column_contigs` maps positions to the contig of their reference
        column; variety data from other contigs never fills such a column.
        """
        if len(varieties) < 1 or len(positions) < 1:
            return []

        columns = { p: (column_contigs or {}).get(p) for p in positions }
        v_maps = self.__fetch_all(varieties, region, columns)

        rows = []
        for v, v_map in zip(varieties, v_maps):
            alleles = { p: v_map.get(p, self.no_call_allele) for p in positions }
            rows.append({
                "variety": v,
                "alleles": alleles,
                "mismatch": self.mismatch_count(alleles, reference_alleles, positions)
            })

        return rows


    # -------------------------------------------------------------------------#

    def variety_alleles(self, variety_id, region, columns):
        """
        Position => allele map of one variety, limited to the column set, the
        column contigs and the segment bounds; `columns` maps positions to
        their contig (`None` for any contig). The first chunk in store order
        wins.
        """
        v_map = {}
        for seg in region.segments:
            for chunk in self.store.variety_chunks(variety_id, seg):
                for p_k, allele in (chunk.get("positions") or {}).items():
                    p = position_value(p_k)
                    if p is None or p not in columns:
                        continue
                    if columns[p] is not None and chunk.get("contig") != columns[p]:
                        continue
                    if not seg.contains(p):
                        continue
                    if p in v_map:
                        continue
                    v_map[p] = allele if isinstance(allele, str) else self.no_call_allele

        return v_map


    # -------------------------------------------------------------------------#

    def mismatch_count(self, alleles, reference_alleles, positions):
        # missing data on either side never counts
        m = 0
        for p in positions:
            v_a = alleles.get(p, self.no_call_allele)
            r_a = reference_alleles.get(p, self.unknown_reference_allele)
            if v_a == self.no_call_allele or r_a == self.unknown_reference_allele:
                continue
            if v_a != r_a:
                m += 1
        return m


    # -------------------------------------------------------------------------#
    # ----------------------------- private -----------------------------------#
    # -------------------------------------------------------------------------#

    def __fetch_all(self, varieties, region, columns):
        w_no = max(1, min(self.max_workers, len(varieties)))
        logger.info(f"fetching allele chunks for {len(varieties)} varieties with {w_no} workers")

        executor = ThreadPoolExecutor(max_workers=w_no)
        futures = [
            executor.submit(self.variety_alleles, v["_id"], region, columns)
            for v in varieties
        ]
        try:
            v_maps = [ f.result() for f in futures ]
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)

        return v_maps
