from pymongo import ASCENDING, MongoClient

################################################################################

def mongodb_update_indexes(config, mongo_client=None):
    """
    Creates the indexes listed under `indexed_collections`; each entry is a
    list of key names for one (compound) ascending index.
    """
    mongo_client = mongo_client or MongoClient(host=config.mongo_host)
    data_db = mongo_client[ config.mongo_db ]
    coll_names = data_db.list_collection_names()
    created = []

    for collname, index_defs in config.indexed_collections.items():
        if collname not in coll_names:
            print(f"¡¡¡ Collection {collname} does not exist in {config.mongo_db} !!!")
            continue

        i_coll = data_db[ collname ]
        for keys in index_defs:
            print(f'Creating index "{".".join(keys)}" in {collname} from {config.mongo_db}')
            m = i_coll.create_index([ (k, ASCENDING) for k in keys ])
            created.append(f"{collname}.{m}")

    return created
