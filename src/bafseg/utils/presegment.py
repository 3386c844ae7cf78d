import numpy as np
import pandas as pd

import bafseg.utils.Supporting as sp


def add_big_holes(breakpoints, positions, chromosome, startpos, max_snp_distance):
    """
    Close a presegment right before every gap of at least <max_snp_distance> bp between consecutive
    <positions> (e.g., a centromere), and start the next one at the first SNP after the gap.
    Returns the extended breakpoints list and the start of the presegment that is still open.
    """
    bigholes = np.where(np.diff(positions) >= max_snp_distance)[0]
    for endindex in bigholes:
        breakpoints.append((chromosome, startpos, positions[endindex]))
        startpos = positions[endindex + 1]
    return breakpoints, startpos


def svs_to_presegment_breakpoints(chromosome, sv_positions, snp_positions, max_snp_distance=3000000, big_holes=True):
    """
    Split a chromosome into presegments that are segmented independently.

    Parameters:
        chromosome: chromosome name, copied into the output
        sv_positions: structural variant breakpoint positions on this chromosome (may be empty)
        snp_positions: ascending positions of the SNPs on this chromosome
        max_snp_distance: SNP gaps at least this large also close a presegment
        big_holes: whether to split at large SNP gaps

    Returns a DataFrame with columns chrom, start and end (inclusive), in ascending order.
    Every SNP falls in exactly one presegment.
    """
    positions = np.asarray(snp_positions)
    svs = np.unique(np.asarray(sv_positions))
    breakpoints = []

    if len(positions) == 0:
        return pd.DataFrame(breakpoints, columns=['chrom', 'start', 'end'])

    if len(svs) > 0:
        # The first presegment starts at whichever comes first, the first SNP or the first SV
        if positions[0] < svs[0]:
            startpos = positions[0]
            remaining_svs = svs
        else:
            startpos = svs[0]
            # A lone SV still closes the presegment [sv, sv] when SNPs sit on it
            remaining_svs = svs if len(svs) == 1 else svs[1:]

        for svposition in remaining_svs:
            if startpos is None:
                # all SNPs have been assigned already
                break

            selected = np.where((positions >= startpos) & (positions <= svposition))[0]
            # An SV without SNPs since the current start does not close a presegment
            if len(selected) == 0:
                continue

            if big_holes:
                breakpoints, startpos = add_big_holes(
                    breakpoints, positions[selected], chromosome, startpos, max_snp_distance
                )

            endindex = selected[-1]
            breakpoints.append((chromosome, startpos, positions[endindex]))
            startpos = positions[endindex + 1] if endindex + 1 < len(positions) else None

        # Add the remainder of the chromosome, if any. It is a single final presegment
        # unless it holds a big gap, which is split like any other presegment.
        if startpos is not None and positions[-1] >= startpos:
            if big_holes:
                breakpoints, startpos = add_big_holes(
                    breakpoints, positions[positions >= startpos], chromosome, startpos, max_snp_distance
                )
            breakpoints.append((chromosome, startpos, positions[-1]))
    else:
        sp.log(msg=f'No SVs on chromosome {chromosome}\n', level='INFO')
        startpos = positions[0]
        if big_holes:
            breakpoints, startpos = add_big_holes(breakpoints, positions, chromosome, startpos, max_snp_distance)
        breakpoints.append((chromosome, startpos, positions[-1]))

    return pd.DataFrame(breakpoints, columns=['chrom', 'start', 'end'])
