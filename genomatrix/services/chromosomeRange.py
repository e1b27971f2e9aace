#!/usr/bin/env python3

from genomatrix.lib.genomic_options import chromosome_range
from genomatrix.lib.genotype_store import MongoGenotypeStore
from genomatrix.lib.service_helpers import *

"""podmd
Minimum chunk start and maximum chunk end of a chromosome in a reference
genome, e.g. for prefilling range inputs.

* http://genomatrix.test/services/chromosomeRange/?referenceGenome=IRGSP-1.0&contig=chr01
podmd"""

################################################################################
################################################################################
################################################################################

def main():
    run_service(chromosome_range_service)

################################################################################

def chromosome_range_service(params=None, store=None, out=None):
    if params is None:
        params = request_parameters()
    if store is None:
        store = MongoGenotypeStore(service_config())

    c_r = chromosome_range(
        store,
        str(params.get("referenceGenome", "")).strip(),
        str(params.get("contig", "")).strip()
    )
    print_json_response(c_r, out=out)


################################################################################
################################################################################
################################################################################

if __name__ == '__main__':
    main()
