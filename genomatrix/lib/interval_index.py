from bisect import bisect_left, bisect_right

################################################################################

class IntervalIndex:
    """
    Static overlap index over closed `[start, end]` intervals.

    Intervals are kept sorted by start, together with the largest interval
    span seen. An overlap query for `[q_start, q_end]` only has to look at
    intervals starting in `[q_start - max_span, q_end]`, which are found by
    bisection; the result is O(log n + k) for evenly sized chunks.

    Each interval carries an integer handle (e.g. the position of a chunk in
    an arena list), and queries return handles in start order; ties keep
    their insertion order.
    """

    def __init__(self, intervals=()):
        entries = sorted(
            ((int(s), int(e), h) for s, e, h in intervals),
            key=lambda x: x[0]
        )
        self.starts = [ x[0] for x in entries ]
        self.ends = [ x[1] for x in entries ]
        self.handles = [ x[2] for x in entries ]
        self.max_span = max((max(0, e - s) for s, e, h in entries), default=0)


    def __len__(self):
        return len(self.handles)


    # -------------------------------------------------------------------------#

    def overlapping(self, q_start=None, q_end=None):
        if q_start is None or q_end is None:
            return list(self.handles)

        lo = bisect_left(self.starts, q_start - self.max_span)
        hi = bisect_right(self.starts, q_end)
        hits = []
        for i in range(lo, hi):
            if self.ends[i] >= q_start:
                hits.append(self.handles[i])

        return hits


    # -------------------------------------------------------------------------#

    def span(self):
        if len(self.starts) < 1:
            return None, None
        return min(self.starts), max(self.ends)
