#!/usr/bin/env python3

from genomatrix.lib.collaborators import collaborator_clients
from genomatrix.lib.genomic_options import resolve_names
from genomatrix.lib.genotype_store import MongoGenotypeStore
from genomatrix.lib.service_helpers import *

"""podmd
Batch resolution of variety and locus ids to their display names.

* http://genomatrix.test/services/idResolver/?varietyIds=64b0c1...,64b0c2...&locusIds=LOC_Os01g01010
podmd"""

################################################################################
################################################################################
################################################################################

def main():
    run_service(id_resolver)

################################################################################

def id_resolver(params=None, store=None, feature_client=None, out=None):
    if params is None:
        params = request_parameters()
    if store is None or feature_client is None:
        config = service_config()
        store = store or MongoGenotypeStore(config)
        feature_client = feature_client or collaborator_clients(config)[0]

    resolved = resolve_names(
        store,
        feature_client,
        variety_ids=list_parameter(params, "varietyIds"),
        locus_ids=list_parameter(params, "locusIds")
    )

    # ids are data and have to keep their underscores
    print_json_response({"resolved": resolved}, out=out, camelize_keys=False)


################################################################################
################################################################################
################################################################################

if __name__ == '__main__':
    main()
