import logging, yaml
from copy import deepcopy
from deepmerge import Merger
from os import environ, path

from genomatrix.lib.errors import ConfigError

pkg_path = path.dirname( path.dirname( path.abspath(__file__) ) )
default_config_file = path.join( pkg_path, "config", "genomatrix.yaml" )

"""
The configuration is read once, from the packaged `genomatrix.yaml` defaults,
an optional local YAML file (explicit path or `GENOMATRIX_CONFIG`) and a few
deployment environment variables. The resulting `GenomatrixConfig` is passed
into the stores, collaborator clients and the search service; nothing reads
the environment at request time.
"""

# environment variable => dotted config key
ENV_OVERRIDES = {
    "GENOMATRIX_MONGO_HOST": "db_config.host",
    "GENOMATRIX_MONGO_DB": "db_config.database",
    "GENOMATRIX_FEATURE_URL": "collaborators.feature_url",
    "GENOMATRIX_LIST_URL": "collaborators.list_url"
}

# local values replace default lists (e.g. `tsv_columns`) instead of extending them
config_merger = Merger(
    [(list, ["override"]), (dict, ["merge"]), (set, ["union"])],
    ["override"],
    ["override"]
)

################################################################################

class GenomatrixConfig:

    def __init__(self, config: dict):
        self.raw = config
        self.__check_required()

        db = config["db_config"]
        self.mongo_host = db["host"]
        self.mongo_db = db["database"]
        self.server_selection_timeout_ms = int(db.get("server_selection_timeout_ms", 5000))
        self.collections = db["collections"]

        c = config["collaborators"]
        self.feature_url = c["feature_url"].rstrip("/")
        self.list_url = c["list_url"].rstrip("/")
        self.timeout_seconds = float(c["timeout_seconds"])
        self.retries = int(c.get("retries", 1))
        self.retry_backoff_seconds = float(c.get("retry_backoff_seconds", 0))

        m = config["matrix"]
        self.max_fetch_workers = int(m["max_fetch_workers"])
        self.unknown_reference_allele = m.get("unknown_reference_allele", "?")
        self.no_call_allele = m.get("no_call_allele", "-")

        self.logging = config.get("logging", {})
        self.service_config = config.get("service_config", {})
        self.indexed_collections = config.get("indexed_collections", {})

        self.__check_values()


    # -------------------------------------------------------------------------#

    def tsv_columns(self):
        return self.service_config.get("method_keys", {}).get("tsv_columns", [])


    # -------------------------------------------------------------------------#
    # ----------------------------- private -----------------------------------#
    # -------------------------------------------------------------------------#

    def __check_required(self):
        for k in ("db_config.host", "db_config.database", "db_config.collections",
                  "collaborators.feature_url", "collaborators.list_url",
                  "collaborators.timeout_seconds", "matrix.max_fetch_workers"):
            if get_nested_value(self.raw, k) in (None, ""):
                raise ConfigError(f"No `{k}` value defined in configuration")

        colls = self.raw["db_config"]["collections"]
        for c_k in ("reference_genomes", "reference_chunks", "varieties", "variety_chunks"):
            if not colls.get(c_k):
                raise ConfigError(f"No `db_config.collections.{c_k}` value defined in configuration")


    # -------------------------------------------------------------------------#

    def __check_values(self):
        if self.timeout_seconds <= 0:
            raise ConfigError("`collaborators.timeout_seconds` has to be positive")
        if self.retries < 0:
            raise ConfigError("`collaborators.retries` can't be negative")
        if self.max_fetch_workers < 1:
            raise ConfigError("`matrix.max_fetch_workers` has to be at least 1")


################################################################################

def load_config(config_file=None, overrides=None, env=environ):
    try:
        with open( default_config_file ) as y_c:
            config = yaml.safe_load( y_c )
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Default configuration could not be read: {e}")

    l_f = config_file or env.get("GENOMATRIX_CONFIG")
    if l_f:
        try:
            with open( l_f ) as y_c:
                local = yaml.safe_load( y_c ) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Local configuration {l_f} could not be read: {e}")
        config = config_merger.merge(config, local)

    for e_k, c_k in ENV_OVERRIDES.items():
        if (v := env.get(e_k)):
            assign_nested_value(config, c_k, v)

    config = config_merger.merge(config, deepcopy(overrides or {}))

    return GenomatrixConfig(config)


################################################################################

def setup_logging(config):
    l_c = config.logging
    logging.basicConfig(
        level=getattr(logging, str(l_c.get("level", "WARNING")).upper(), logging.WARNING),
        format=l_c.get("format", "%(levelname)s %(name)s: %(message)s")
    )


################################################################################

def get_nested_value(parent, dotted_key):
    v = parent
    for k in dotted_key.split("."):
        if not isinstance(v, dict):
            return None
        v = v.get(k)
    return v


################################################################################

def assign_nested_value(parent, dotted_key, v):
    ps = dotted_key.split(".")
    for k in ps[:-1]:
        parent = parent.setdefault(k, {})
    parent[ ps[-1] ] = v
