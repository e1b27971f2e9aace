#!/usr/bin/env python3

import argparse, datetime
from progress.bar import Bar
from pymongo import MongoClient

from genomatrix.lib.chunk_loading import chunk_errors, linked_chunk
from genomatrix.lib.config import load_config
from genomatrix.lib.file_utils import read_genotype_documents, write_log

"""
## `genotypeChunksLoader`

Loads reference genomes, varieties and their genotype chunks from a YAML or
JSON document file (keys `referenceGenomes`, `varieties`,
`referenceGenomesPos`, `varietiesPos`) into the configured database. Chunks
refer to their owner's `id`, which is replaced by the database `_id` on
insertion. Chunks failing the window checks are skipped and logged to
`<inputfile>.log`.

```
bin/genotypeChunksLoader.py -i rsrc/irgsp_chunks.yaml --test
```
"""

################################################################################
################################################################################
################################################################################

def main():
    genotype_chunks_loader()

################################################################################

def genotype_chunks_loader():
    parser = argparse.ArgumentParser()
    parser.add_argument("-i", "--inputfile", required=True, help="YAML or JSON genotype document file")
    parser.add_argument("-c", "--config", help="local configuration file")
    parser.add_argument("-t", "--test", action="store_true", help="test mode, no database writes")
    args = parser.parse_args()

    config = load_config(args.config)
    test_mode = args.test
    if not test_mode:
        tmi = input("Do you want to run in TEST MODE (i.e. no database insertions/updates)?\n(Y|n): ")
        if not "n" in tmi.lower():
            test_mode = True
    if test_mode:
        print("... running in TEST MODE")

    docs = read_genotype_documents(args.inputfile)
    colls = config.collections
    data_db = MongoClient(host=config.mongo_host)[ config.mongo_db ]
    log = []

    print(f'=> The file contains {len(docs["referenceGenomes"])} reference genomes, {len(docs["varieties"])} varieties,')
    print(f'   {len(docs["referenceGenomesPos"])} reference chunks and {len(docs["varietiesPos"])} variety chunks.')
    if not test_mode:
        proceed = input(f'Do you want to continue to update database **{config.mongo_db}**?\n(Y|n): ')
        if "n" in proceed.lower():
            exit()

    #>----------------------- owners: genomes & varieties ---------------------<#

    ref_ids = _insert_owners(data_db[ colls["reference_genomes"] ], docs["referenceGenomes"], test_mode)
    var_ids = _insert_owners(data_db[ colls["varieties"] ], docs["varieties"], test_mode)

    #>------------------------------- chunks ---------------------------------<#

    for c_k, owner_ids in (("referenceGenomesPos", ref_ids), ("varietiesPos", var_ids)):
        chunks = docs[c_k]
        c_no = len(chunks)
        coll = data_db[ colls["reference_chunks"] if c_k == "referenceGenomesPos" else colls["variety_chunks"] ]
        bar = Bar(f"Writing {c_k}", max = c_no, suffix='%(percent)d%%'+" of "+str(c_no) ) if not test_mode else False
        up_no = 0

        for i, c in enumerate(chunks, 1):
            bar.next() if not test_mode else False
            if len(errors := chunk_errors(c)) > 0:
                log.append(f'{c_k}\t{i}\t{c.get("id", "")}\t{"; ".join(errors)}')
                continue
            if not (l_c := linked_chunk(c, owner_ids)):
                log.append(f'{c_k}\t{i}\t{c.get("id", "")}\tunknown owner {c.get("referenceId")}')
                continue
            l_c.update({"updated": datetime.datetime.now().isoformat()})
            if not test_mode:
                coll.insert_one(l_c)
            up_no += 1

        if not test_mode:
            bar.finish()
        print(f'==> {"checked" if test_mode else "inserted"} {up_no} of {c_no} {c_k} documents')

    write_log(log, args.inputfile)


################################################################################

def _insert_owners(coll, owners, test_mode):
    """
    Inserts (or in test mode only numbers) the owner documents; returns the
    `id` => `_id` mapping used for linking the chunks.
    """
    o_ids = {}
    for i, o in enumerate(owners, 1):
        o_id = str(o.get("id", ""))
        if len(o_id) < 1:
            print(f"¡¡¡ owner document {i} without `id` is skipped !!!")
            continue
        if test_mode:
            o_ids.update({o_id: f"test-{i}"})
            continue
        o = dict(o)
        o.update({"updated": datetime.datetime.now().isoformat()})
        o_ids.update({o_id: str(coll.insert_one(o).inserted_id)})

    return o_ids


################################################################################
################################################################################
################################################################################

if __name__ == '__main__':
    main()
