import yaml

################################################################################

def read_genotype_documents(filepath):
    """
    Reads a YAML or JSON document file with the top level keys
    `referenceGenomes`, `referenceGenomesPos`, `varieties`, `varietiesPos`.
    """
    with open(filepath) as f:
        d = yaml.safe_load(f) or {}
    if not isinstance(d, dict):
        raise ValueError(f"{filepath} doesn't contain a document mapping")

    return {
        "referenceGenomes": d.get("referenceGenomes", []),
        "referenceGenomesPos": d.get("referenceGenomesPos", []),
        "varieties": d.get("varieties", []),
        "varietiesPos": d.get("varietiesPos", [])
    }


################################################################################

def write_log(log, filepath):
    if len(log) < 1:
        return
    l_f = f"{filepath}.log"
    with open(l_f, "w") as f:
        for l in log:
            f.write(f"{l}\n")
    print(f"=> Wrote {len(log)} log lines to {l_f}")
