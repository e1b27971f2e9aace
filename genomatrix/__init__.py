"""
`genomatrix` assembles position-by-variety allele matrices from chunked
reference and variety genotype documents.
"""

__version__ = "0.3.0"

from genomatrix.lib.config import GenomatrixConfig, load_config, setup_logging
from genomatrix.lib.errors import *
from genomatrix.lib.genotype_search import GenotypeSearch
from genomatrix.lib.genotype_store import MemoryGenotypeStore, MongoGenotypeStore
