#!/usr/bin/env python3

import argparse

from genomatrix.lib.config import load_config
from genomatrix.lib.mongodb_utils import mongodb_update_indexes

"""
The housekeeping script contains **non-destructive** maintenance tasks, i.e.
currently the (re-)creation of the indexes used by the chunk overlap queries.
"""

################################################################################
################################################################################
################################################################################

def main():
    housekeeping()

################################################################################

def housekeeping():
    parser = argparse.ArgumentParser()
    parser.add_argument("-c", "--config", help="local configuration file")
    args = parser.parse_args()

    config = load_config(args.config)

    todos = {
        "mongodb_index_creation": input(f"Check & refresh MongoDB indexes in {config.mongo_db}?\n(Y|n): ")
    }

    #>-------------------- MongoDB index updates -----------------------------<#

    if not "n" in todos.get("mongodb_index_creation", "y").lower():
        print(f'\n==> updating indexes for {config.mongo_db}')
        created = mongodb_update_indexes(config)
        print(f'==> {len(created)} indexes checked')

    #>------------------- / MongoDB index updates ----------------------------<#


################################################################################
################################################################################
################################################################################

if __name__ == '__main__':
    main()
