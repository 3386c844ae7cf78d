import numpy as np
from scipy.ndimage import median_filter, maximum_filter1d
from scipy.stats import median_abs_deviation


# Tracks shorter than this are fitted exactly, longer ones on a compacted set of candidate breakpoints
EXACT_PCF_MAX = 1000

# (window half-width, fraction of positions kept as candidates) for the breakpoint filter
CANDIDATE_SCALES = ((8, 0.12), (1, 0.05))


class ChangePointFitter(object):
    """
    Piecewise-constant fitting routine consumed by the segmentation passes.

    fit(values, kmin, gamma) returns an array with one fitted value per input position,
    constant within each inferred segment. Segments shorter than <kmin> values are not allowed,
    and every additional segment costs <gamma>. Identical inputs must give identical outputs.
    """

    def fit(self, values, kmin, gamma):
        raise NotImplementedError


class PcfFitter(ChangePointFitter):
    def fit(self, values, kmin, gamma):
        return select_fast_pcf(values, kmin, gamma, yest=True)


def running_median(x, k):
    n = len(x)
    width = 2 * k + 1

    # The window cannot be wider than the data, and has to stay odd
    if width > n:
        if n == 0:
            width = 1
        elif n % 2 == 0:
            width = n - 1
        else:
            width = n

    return median_filter(x, size=width, mode='reflect')


def get_mad(x, k=25):
    """
    Robust estimate of the noise level of <x>: the (normal-consistent) median absolute deviation of
    <x> around its running median of width 2k+1. Returns NaN for fewer than 2 usable values.
    """
    x = np.asarray(x, dtype=float)
    # Exact zeros carry no information on the spread
    x = x[x != 0]
    if len(x) < 2:
        return np.nan

    dif = x - running_median(x, k)
    return median_abs_deviation(dif, scale='normal')


def potts_compact(nr, sums, kmin, gamma):
    """
    Potts filtering on a compacted track.
    Block i holds nr[i] consecutive values summing to sums[i]; breakpoints may only fall between blocks.
    Minimizes the residual sum of squares plus <gamma> per segment, with every segment covering at least
    <kmin> values.

    Returns the index of the first block of each segment.
    """
    nr = np.asarray(nr, dtype=float)
    sums = np.asarray(sums, dtype=float)
    n_blocks = len(nr)

    cum_n = np.concatenate([[0.0], np.cumsum(nr)])
    cum_s = np.concatenate([[0.0], np.cumsum(sums)])

    # best_cost[m] is the optimal cost of the first m blocks (up to the constant sum of squares)
    best_cost = np.full(n_blocks + 1, np.inf)
    best_cost[0] = 0
    best_split = np.zeros(n_blocks + 1, dtype=int)

    for m in range(1, n_blocks + 1):
        seg_n = cum_n[m] - cum_n[:m]
        seg_s = cum_s[m] - cum_s[:m]
        cost = best_cost[:m] - seg_s ** 2 / seg_n + gamma
        cost[seg_n < kmin] = np.inf

        j = int(np.argmin(cost))
        best_cost[m] = cost[j]
        best_split[m] = j

    starts = []
    m = n_blocks
    while m > 0:
        m = best_split[m]
        starts.append(m)
    return starts[::-1]


def mark_candidates(y, scales=CANDIDATE_SCALES):
    """
    Mark positions after which a breakpoint is plausible.
    For each window half-width L, the difference between the means of the L values after and before
    each boundary is computed; local maxima among the top fraction of these differences are kept.
    The last position is always marked.
    """
    n = len(y)
    cs = np.concatenate([[0.0], np.cumsum(y)])
    mark = np.zeros(n, dtype=bool)

    for L, frac in scales:
        if n < 2 * L + 1:
            continue
        # boundary b lies between y[b - 1] and y[b]
        b = np.arange(L, n - L + 1)
        diff = np.abs((cs[b + L] - cs[b]) - (cs[b] - cs[b - L])) / L

        stat = np.zeros(n + 1)
        stat[b] = diff
        is_peak = (stat >= maximum_filter1d(stat, size=7, mode='constant')) & (stat > 0)
        limit = np.quantile(diff, 1 - frac)

        peaks = np.where(is_peak & (stat > limit))[0]
        mark[peaks - 1] = True

    mark[n - 1] = True
    return mark


def compact(y, mark):
    """
    Collapse <y> into blocks ending at the marked positions.
    Returns the number of values and the sum of values in each block.
    """
    ends = np.where(mark)[0]
    cs = np.concatenate([[0.0], np.cumsum(y)])
    bounds = np.concatenate([[0], ends + 1])
    return np.diff(bounds), np.diff(cs[bounds])


def _fit_blocks(nr, sums, kmin, gamma):
    starts = potts_compact(nr, sums, kmin, gamma)
    cum_n = np.concatenate([[0], np.cumsum(nr)])
    cum_s = np.concatenate([[0.0], np.cumsum(sums)])
    bounds = np.array(starts + [len(nr)])

    lengths = np.diff(cum_n[bounds]).astype(int)
    means = np.diff(cum_s[bounds]) / lengths
    return lengths, means


def exact_pcf(y, kmin, gamma, yest=True):
    """
    Exact piecewise constant fit of <y> by Potts filtering.
    With <yest> the fitted value of every position is returned, otherwise segment lengths and means.
    """
    y = np.asarray(y, dtype=float)
    n = len(y)

    if n == 0:
        lengths, means = np.zeros(0, dtype=int), np.zeros(0)
    elif n < 2 * kmin:
        lengths, means = np.array([n]), np.array([np.mean(y)])
    else:
        lengths, means = _fit_blocks(np.ones(n), y, kmin, gamma)

    if yest:
        return np.repeat(means, lengths)
    return lengths, means


def select_fast_pcf(y, kmin, gamma, yest=True):
    """
    Piecewise constant fit of <y>, exact for short tracks. Longer tracks are first reduced to blocks
    between candidate breakpoints (see mark_candidates) and the Potts filtering is run on the blocks.
    """
    y = np.asarray(y, dtype=float)
    n = len(y)
    if n < EXACT_PCF_MAX:
        return exact_pcf(y, kmin, gamma, yest=yest)

    nr, sums = compact(y, mark_candidates(y))
    lengths, means = _fit_blocks(nr, sums, kmin, gamma)

    if yest:
        return np.repeat(means, lengths)
    return lengths, means
