################################################################################

class MatrixFormatter:
    """
    Builds the genotype search response from the aggregation and matrix
    results. The response is always complete: either the full matrix or one
    of the well defined empty shapes.

    * specific region without positions: no rows at all
    * broad region without positions: the reference row only, no alleles
    * positions without matching varieties: the reference row only
    * otherwise: reference row, then one row per variety in filter order
    """

    def __init__(self, reference_genome_name, reference, unknown_reference_allele="?"):
        self.reference_genome_name = reference_genome_name
        self.reference = reference
        self.unknown_reference_allele = unknown_reference_allele


    # -------------------------------------------------------------------------#
    # ----------------------------- public ------------------------------------#
    # -------------------------------------------------------------------------#

    def formatted(self, region, positions, reference_alleles, matrix_rows):
        if len(positions) < 1:
            if region.specific:
                return self.__response([], [])
            return self.__response([], [ self.reference_row([], {}) ])

        rows = [ self.reference_row(positions, reference_alleles) ]
        for m_r in matrix_rows:
            rows.append(self.variety_row(m_r, positions))

        return self.__response(positions, rows)


    # -------------------------------------------------------------------------#

    def reference_row(self, positions, reference_alleles):
        return {
            "name": self.reference_genome_name,
            "accession": self.reference.get("id") or "-",
            "assay": "Reference",
            "subpop": "-",
            "dataset": "-",
            "mismatch": 0,
            "alleles": {
                str(p): reference_alleles.get(p, self.unknown_reference_allele) for p in positions
            }
        }


    # -------------------------------------------------------------------------#

    def variety_row(self, matrix_row, positions):
        v = matrix_row["variety"]
        alleles = matrix_row["alleles"]
        return {
            "name": v.get("name"),
            "accession": v.get("accession"),
            "assay": v.get("irisId") or "N/A",
            "subpop": v.get("subpopulation"),
            "dataset": v.get("varietySet"),
            "mismatch": matrix_row["mismatch"],
            "alleles": { str(p): alleles[p] for p in positions }
        }


    # -------------------------------------------------------------------------#
    # ----------------------------- private -----------------------------------#
    # -------------------------------------------------------------------------#

    def __response(self, positions, rows):
        return {
            "reference_genome_name": self.reference_genome_name,
            "positions": list(positions),
            "varieties": rows
        }


TSV_COLUMNS = ("name", "accession", "assay", "subpop", "dataset", "mismatch")

################################################################################

def matrix_tsv_lines(response, columns=TSV_COLUMNS):
    """
    Renders a (snake_case or camelCase) search response as TSV lines: the
    row columns followed by one column per position.
    """
    positions = [ str(p) for p in response.get("positions", []) ]
    columns = list(columns)
    lines = [ "\t".join(columns + positions) ]
    for row in response.get("varieties", []):
        line = [ "-" if row.get(c) is None else str(row.get(c)) for c in columns ]
        alleles = row.get("alleles", {})
        for p in positions:
            line.append(alleles.get(p, ""))
        lines.append("\t".join(line))

    return lines
