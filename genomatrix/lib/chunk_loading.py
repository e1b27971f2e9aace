from genomatrix.lib.position_aggregation import position_value

"""
Checks and linking for genotype chunk documents before they are written to
the database. In document files, chunks refer to their reference genome or
variety by its `id` value; in the database `referenceId` holds the owner's
stringified `_id`.
"""

################################################################################

def chunk_errors(chunk):
    errors = []
    for k in ("contig", "start", "end", "positions", "referenceId"):
        if k not in chunk:
            errors.append(f"missing `{k}`")
    if len(errors) > 0:
        return errors

    try:
        start, end = int(chunk["start"]), int(chunk["end"])
    except (TypeError, ValueError):
        return [ f'invalid window {chunk["start"]}-{chunk["end"]}' ]
    if start > end:
        errors.append(f"window start {start} after end {end}")
    if not isinstance(chunk["positions"], dict):
        errors.append("`positions` is not a mapping")
        return errors

    outside = []
    for p_k in chunk["positions"].keys():
        p = position_value(p_k)
        if p is None:
            errors.append(f"position key `{p_k}` is not an integer")
        elif not start <= p <= end:
            outside.append(p)
    if len(outside) > 0:
        errors.append(f"{len(outside)} positions outside {start}-{end}, e.g. {outside[0]}")

    return errors


################################################################################

def linked_chunk(chunk, owner_ids):
    """
    Returns an insertable copy of `chunk` with `referenceId` replaced by the
    database id of its owner, or `None` if the owner is unknown.
    """
    o_id = owner_ids.get(str(chunk.get("referenceId")))
    if o_id is None:
        return None

    c = dict(chunk)
    c.update({
        "referenceId": str(o_id),
        "start": int(c["start"]),
        "end": int(c["end"]),
        "positions": { str(position_value(k)): v for k, v in c["positions"].items() }
    })
    c.setdefault("id", f'{c["contig"]}:{c["start"]}-{c["end"]}')

    return c
