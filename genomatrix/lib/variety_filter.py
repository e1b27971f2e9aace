import logging

from genomatrix.lib.errors import InvalidRequest, Unauthorized

logger = logging.getLogger(__name__)

################################################################################

class VarietyFilter:
    """
    Selects the varieties of a query, either by dataset (`varietySet`,
    `snpSet`, optional `subpopulation`) or by membership in a saved variety
    list (restricted to the same `varietySet`/`snpSet`). The two modes are
    exclusive. No match is an empty list, not an error.
    """

    def __init__(self, store, list_client):
        self.store = store
        self.list_client = list_client


    # -------------------------------------------------------------------------#

    def saved_list_ids(self, query):
        """
        Variety ids of the saved list of the query, from the List service;
        `None` in dataset mode. Does not touch the store.
        """
        v_l_id = query.saved_variety_list_id
        if not v_l_id:
            return None
        if query.subpopulation:
            raise InvalidRequest("A saved variety list can't be combined with a subpopulation filter.")
        if not query.caller_identity:
            raise Unauthorized("Access Denied: saved lists require an authenticated caller.")

        return self.list_client.list_content(v_l_id, query.caller_identity)


    # -------------------------------------------------------------------------#

    def select(self, query, list_ids=None):
        """
        `list_ids` are the already fetched saved list ids; if missing for a
        list query they are fetched here.
        """
        v_l_id = query.saved_variety_list_id
        if v_l_id and query.subpopulation:
            raise InvalidRequest("A saved variety list can't be combined with a subpopulation filter.")

        if not v_l_id:
            v_s = self.store.varieties(query.variety_set, query.snp_set, subpopulation=query.subpopulation)
            logger.info(f"{len(v_s)} varieties for {query.variety_set} / {query.snp_set} / {query.subpopulation}")
            return v_s

        if list_ids is None:
            list_ids = self.saved_list_ids(query)
        if len(list_ids) < 1:
            return []
        v_s = self.store.varieties(query.variety_set, query.snp_set, ids=list_ids)
        logger.info(f"{len(v_s)} of {len(list_ids)} varieties from list {v_l_id} in {query.variety_set} / {query.snp_set}")

        return v_s
