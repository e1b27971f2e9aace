import logging, re
from functools import wraps
from bson import ObjectId
from pymongo import ASCENDING, MongoClient
from pymongo.errors import PyMongoError

from genomatrix.lib.errors import InternalError
from genomatrix.lib.file_utils import read_genotype_documents
from genomatrix.lib.interval_index import IntervalIndex

logger = logging.getLogger(__name__)

"""
Read access to the genotype documents. Both stores return plain dicts with
stringified `_id` values and chunk lists in their natural order, i.e. sorted
by contig, window start and insertion; callers rely on that order for the
"first chunk wins" tie break.

* `MongoGenotypeStore` queries the MongoDB collections
* `MemoryGenotypeStore` keeps the same documents in per contig interval
  indexes, e.g. for fixture files and tests
"""

CHUNK_FIELDS = {"_id": 1, "contig": 1, "start": 1, "end": 1, "positions": 1, "referenceId": 1}
VARIETY_FIELDS = {
    "_id": 1, "id": 1, "name": 1, "accession": 1, "irisId": 1,
    "subpopulation": 1, "varietySet": 1, "snpSet": 1
}

################################################################################

def store_access(func):
    """Wraps database failures into `InternalError`, after logging them."""
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except PyMongoError as e:
            logger.exception(f"Store access failure in {func.__name__}{args}: {e}")
            raise InternalError(f"store access failed in {func.__name__}: {e}")
    return wrapper


################################################################################
################################################################################
################################################################################

class MongoGenotypeStore:

    def __init__(self, config, client=None):
        self.config = config
        self.mongo_client = client or MongoClient(
            host=config.mongo_host,
            serverSelectionTimeoutMS=config.server_selection_timeout_ms
        )
        colls = config.collections
        data_db = self.mongo_client[ config.mongo_db ]
        self.ref_coll = data_db[ colls["reference_genomes"] ]
        self.ref_pos_coll = data_db[ colls["reference_chunks"] ]
        self.var_coll = data_db[ colls["varieties"] ]
        self.var_pos_coll = data_db[ colls["variety_chunks"] ]


    # -------------------------------------------------------------------------#
    # ----------------------------- public ------------------------------------#
    # -------------------------------------------------------------------------#

    @store_access
    def reference_genome(self, name):
        ref = self.ref_coll.find_one({"name": name})
        return _stringify_id(ref) if ref else None


    # -------------------------------------------------------------------------#

    @store_access
    def reference_genomes(self):
        return sorted(n for n in self.ref_coll.distinct("name") if _valid_label(n))


    # -------------------------------------------------------------------------#

    @store_access
    def reference_chunks(self, reference_id, segment):
        query = _chunk_query(reference_id, segment)
        return self.__sorted_chunks(self.ref_pos_coll, query)


    # -------------------------------------------------------------------------#

    @store_access
    def variety_chunks(self, variety_id, segment):
        query = _chunk_query(variety_id, segment)
        return self.__sorted_chunks(self.var_pos_coll, query)


    # -------------------------------------------------------------------------#

    @store_access
    def varieties(self, variety_set, snp_set, subpopulation=None, ids=None):
        query = {"varietySet": variety_set, "snpSet": snp_set}
        if subpopulation:
            query.update({"subpopulation": subpopulation})
        if ids is not None:
            query.update({"_id": {"$in": _object_ids(ids)}})
        v_s = self.var_coll.find(query, VARIETY_FIELDS).sort("_id", ASCENDING)
        return [ _stringify_id(v) for v in v_s ]


    # -------------------------------------------------------------------------#

    @store_access
    def varieties_by_ids(self, ids):
        v_s = self.var_coll.find({"_id": {"$in": _object_ids(ids)}}, VARIETY_FIELDS).sort("_id", ASCENDING)
        return [ _stringify_id(v) for v in v_s ]


    # -------------------------------------------------------------------------#

    @store_access
    def distinct_variety_values(self, field):
        return [ v for v in self.var_coll.distinct(field) if _valid_label(v) ]


    # -------------------------------------------------------------------------#

    @store_access
    def distinct_contigs(self):
        return [ c for c in self.var_pos_coll.distinct("contig") if _valid_label(c) ]


    # -------------------------------------------------------------------------#

    @store_access
    def contig_range(self, reference_id, contig):
        r = list(self.ref_pos_coll.aggregate([
            { "$match": {"referenceId": reference_id, "contig": contig} },
            { "$group": {"_id": None, "min_position": {"$min": "$start"}, "max_position": {"$max": "$end"}} }
        ]))
        if len(r) < 1:
            return None, None
        return r[0].get("min_position"), r[0].get("max_position")


    # -------------------------------------------------------------------------#
    # ----------------------------- private -----------------------------------#
    # -------------------------------------------------------------------------#

    def __sorted_chunks(self, coll, query):
        c_s = coll.find(query, CHUNK_FIELDS).sort([("contig", ASCENDING), ("start", ASCENDING), ("_id", ASCENDING)])
        return [ _stringify_id(c) for c in c_s ]


################################################################################
################################################################################
################################################################################

class MemoryGenotypeStore:
    """
    In-process store over document lists shaped like the MongoDB collections.
    Chunks live in one arena list; for every `(owner, contig)` an
    `IntervalIndex` maps windows to arena handles.
    """

    def __init__(self, reference_genomes=(), reference_chunks=(), varieties=(), variety_chunks=()):
        self.__id_count = 0
        self.reference_docs = [ self.__with_id(r) for r in reference_genomes ]
        self.variety_docs = [ self.__with_id(v) for v in varieties ]
        self.arena = []
        self.ref_indexes = self.__index_chunks(reference_chunks)
        self.var_indexes = self.__index_chunks(variety_chunks)


    @classmethod
    def from_file(cls, filepath):
        """
        Reads a YAML (or JSON) file with the top level keys `referenceGenomes`,
        `referenceGenomesPos`, `varieties` and `varietiesPos`.
        """
        d = read_genotype_documents(filepath)
        return cls(
            reference_genomes=d["referenceGenomes"],
            reference_chunks=d["referenceGenomesPos"],
            varieties=d["varieties"],
            variety_chunks=d["varietiesPos"]
        )


    # -------------------------------------------------------------------------#
    # ----------------------------- public ------------------------------------#
    # -------------------------------------------------------------------------#

    def reference_genome(self, name):
        for r in self.reference_docs:
            if r.get("name") == name:
                return dict(r)
        return None


    # -------------------------------------------------------------------------#

    def reference_genomes(self):
        return sorted(set(r.get("name") for r in self.reference_docs if _valid_label(r.get("name"))))


    # -------------------------------------------------------------------------#

    def reference_chunks(self, reference_id, segment):
        return self.__chunks(self.ref_indexes, reference_id, segment)


    # -------------------------------------------------------------------------#

    def variety_chunks(self, variety_id, segment):
        return self.__chunks(self.var_indexes, variety_id, segment)


    # -------------------------------------------------------------------------#

    def varieties(self, variety_set, snp_set, subpopulation=None, ids=None):
        id_set = set(ids) if ids is not None else None
        v_s = []
        for v in self.variety_docs:
            if v.get("varietySet") != variety_set or v.get("snpSet") != snp_set:
                continue
            if subpopulation and v.get("subpopulation") != subpopulation:
                continue
            if id_set is not None and v["_id"] not in id_set:
                continue
            v_s.append(dict(v))
        return sorted(v_s, key=lambda v: v["_id"])


    # -------------------------------------------------------------------------#

    def varieties_by_ids(self, ids):
        id_set = set(ids)
        v_s = [ dict(v) for v in self.variety_docs if v["_id"] in id_set ]
        return sorted(v_s, key=lambda v: v["_id"])


    # -------------------------------------------------------------------------#

    def distinct_variety_values(self, field):
        vals = []
        for v in self.variety_docs:
            f_v = v.get(field)
            if _valid_label(f_v) and f_v not in vals:
                vals.append(f_v)
        return vals


    # -------------------------------------------------------------------------#

    def distinct_contigs(self):
        contigs = []
        for owner, contig in self.var_indexes.keys():
            if _valid_label(contig) and contig not in contigs:
                contigs.append(contig)
        return contigs


    # -------------------------------------------------------------------------#

    def contig_range(self, reference_id, contig):
        i_x = self.ref_indexes.get((reference_id, contig))
        if i_x is None:
            return None, None
        return i_x.span()


    # -------------------------------------------------------------------------#
    # ----------------------------- private -----------------------------------#
    # -------------------------------------------------------------------------#

    def __with_id(self, doc):
        doc = dict(doc)
        self.__id_count += 1
        if "_id" not in doc:
            doc["_id"] = doc.get("id", f"gmx-{self.__id_count}")
        doc["_id"] = str(doc["_id"])
        return doc


    # -------------------------------------------------------------------------#

    def __index_chunks(self, chunks):
        by_key = {}
        for c in chunks:
            c = self.__with_id(c)
            h = len(self.arena)
            self.arena.append(c)
            k = (str(c.get("referenceId")), c.get("contig"))
            by_key.setdefault(k, []).append((c["start"], c["end"], h))

        return { k: IntervalIndex(v) for k, v in by_key.items() }


    # -------------------------------------------------------------------------#

    def __chunks(self, indexes, owner_id, segment):
        keys = [ k for k in indexes.keys() if k[0] == owner_id ]
        if segment.contig:
            keys = [ k for k in keys if k[1] == segment.contig ]
        # missing contigs first, as null sorts in MongoDB
        keys = sorted(keys, key=lambda k: (k[1] is not None, k[1] or ""))

        chunks = []
        for k in keys:
            for h in indexes[k].overlapping(segment.start, segment.end):
                chunks.append(dict(self.arena[h]))

        return chunks


################################################################################
################################################################################
################################################################################

def _chunk_query(owner_id, segment):
    query = {"referenceId": owner_id}
    if segment.contig:
        query.update({"contig": segment.contig})
    if segment.bounded:
        query.update({
            "start": {"$lte": segment.end},
            "end": {"$gte": segment.start}
        })
    return query


def _object_ids(ids):
    o_ids = []
    for i in ids:
        o_ids.append(ObjectId(i) if ObjectId.is_valid(i) else i)
    return o_ids


def _stringify_id(doc):
    doc = dict(doc)
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


def _valid_label(v):
    return isinstance(v, str) and len(v.strip()) > 0


################################################################################

def natural_contig_key(contig):
    """Sorts `chr2` before `chr10`; names without digits sort lexically after."""
    digits = re.sub(r'[^0-9]', '', contig)
    if len(digits) > 0:
        return (0, int(digits), contig)
    return (1, 0, contig)
