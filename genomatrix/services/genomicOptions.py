#!/usr/bin/env python3

import re

from genomatrix.lib.genomic_options import genomic_options
from genomatrix.lib.genotype_store import MongoGenotypeStore
from genomatrix.lib.service_helpers import *

"""podmd
Selectable values for genotype queries, sorted; chromosomes in natural order.

* http://genomatrix.test/services/genomicOptions/?optionType=varietySets
* http://genomatrix.test/services/genomicOptions/?optionType=snpSets
* http://genomatrix.test/services/genomicOptions/?optionType=subpopulations
* http://genomatrix.test/services/genomicOptions/?optionType=chromosomes
* http://genomatrix.test/services/genomicOptions/?optionType=referenceGenomes
podmd"""

################################################################################
################################################################################
################################################################################

def main():
    run_service(genomic_options_service)

################################################################################

def genomic_options_service(params=None, store=None, out=None):
    if params is None:
        params = request_parameters()
    if store is None:
        store = MongoGenotypeStore(service_config())

    o_t = params.get("optionType", params.get("option_type", ""))
    o_t = re.sub(r'([a-z])([A-Z])', r'\1_\2', str(o_t)).lower()
    results = genomic_options(store, o_t)

    # option values are data, so only the envelope keys are camelCased
    print_json_response({"optionType": o_t, "results": results}, out=out, camelize_keys=False)


################################################################################
################################################################################
################################################################################

if __name__ == '__main__':
    main()
