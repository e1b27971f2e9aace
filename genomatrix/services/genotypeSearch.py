#!/usr/bin/env python3
import re

from genomatrix.lib.genotype_search import GenotypeSearch
from genomatrix.lib.matrix_response import matrix_tsv_lines
from genomatrix.lib.region_specs import GenotypeQuery
from genomatrix.lib.service_helpers import *

"""podmd
The genotype search returns the allele matrix of all varieties of a dataset
(or a saved variety list) for a genomic region, together with the reference
alleles and the per variety mismatch counts.

* http://genomatrix.test/services/genotypeSearch/?referenceGenome=IRGSP-1.0&varietySet=3K&snpSet=base&regionChromosome=chr01&regionStart=1000&regionEnd=2000
* http://genomatrix.test/services/genotypeSearch/?referenceGenome=IRGSP-1.0&varietySet=3K&snpSet=base&regionType=geneLocus&regionGeneLocus=LOC_Os01g01010
* `output=tsv` delivers the matrix as tab-separated text
podmd"""

################################################################################
################################################################################
################################################################################

def main():
    run_service(genotype_search)

################################################################################

def genotype_search(params=None, config=None, search=None, out=None):
    if params is None:
        params = request_parameters()
    query = GenotypeQuery.from_params(params)
    if search is None:
        search = GenotypeSearch(config or service_config())

    response = search.search(query)

    if "tsv" in query.output:
        f_n = re.sub(r'[^\w\-.]', '_', f'{query.reference_genome}_genotypes.tsv')
        print_text_lines(matrix_tsv_lines(response, search.config.tsv_columns()), filename=f_n, out=out)
        return

    print_json_response(response, out=out)


################################################################################
################################################################################
################################################################################

if __name__ == '__main__':
    main()
