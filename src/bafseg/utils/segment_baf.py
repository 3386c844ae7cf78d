import warnings
from functools import partial
from itertools import groupby
import numpy as np
import pandas as pd

from bafseg.utils.ArgParsing import parse_segment_baf_args, parse_segment_baf_sv_args
import bafseg.utils.Supporting as sp
from bafseg.utils.pcf import PcfFitter, get_mad
from bafseg.utils.presegment import svs_to_presegment_breakpoints
from bafseg.utils.plot_segments import plot_phase_fit, plot_segmented_baf


BAF_COLUMNS = ['Chromosome', 'Position', 'BAF']
SV_COLUMNS = ['chromosome', 'position']
OUTPUT_COLUMNS = ['Chromosome', 'Position', 'BAF', 'BAFphased', 'BAFseg']


def main(args=None):
    sp.log(msg='# Parsing and checking input arguments\n', level='STEP')
    args = parse_segment_baf_args(args)
    sp.logArgs(args, 80)

    sp.log(msg='# Reading phased SNPs\n', level='STEP')
    bafraw = read_baf_table(args['inputfile'])

    sp.log(msg='# Segmenting phased BAF per chromosome\n', level='STEP')
    bafoutput = segment_baf_phased(
        bafraw,
        samplename=args['samplename'],
        plot_dir=args['plot_dir'],
        **segmentation_params(args),
    )

    bafoutput.to_csv(args['outputfile'], sep='\t', index=False)
    sp.log(msg='# Done\n', level='STEP')


def main_sv(args=None):
    sp.log(msg='# Parsing and checking input arguments\n', level='STEP')
    args = parse_segment_baf_sv_args(args)
    sp.logArgs(args, 80)

    sp.log(msg='# Reading phased SNPs and structural variants\n', level='STEP')
    bafraw = read_baf_table(args['inputfile'])
    svs = read_sv_table(args['svs'])

    sp.log(msg='# Segmenting phased BAF per presegment\n', level='STEP')
    bafoutput = segment_baf_phased_sv(
        bafraw,
        svs,
        max_snp_distance=args['max_snp_distance'],
        samplename=args['samplename'],
        plot_dir=args['plot_dir'],
        no_segmentation=args['no_segmentation'],
        **segmentation_params(args),
    )

    bafoutput.to_csv(args['outputfile'], sep='\t', index=False)
    sp.log(msg='# Done\n', level='STEP')


def segmentation_params(args):
    keys = ['gamma', 'kmin', 'phasegamma', 'phasekmin', 'calc_seg_baf_option', 'min_snps', 'min_sdev', 'mad_window']
    return {k: args[k] for k in keys}


def read_baf_table(filename):
    """
    Read the phased SNP table. Rows without a (numeric) BAF are kept here and dropped per chromosome,
    so that the order in which chromosomes first appear is preserved.
    """
    bafraw = pd.read_table(filename, dtype={'Chromosome': str})
    missing = [c for c in BAF_COLUMNS if c not in bafraw.columns]
    sp.ensure(len(missing) == 0, f'Missing column(s) {missing} in BAF file {filename}, expected {BAF_COLUMNS}')

    bafraw = bafraw[BAF_COLUMNS].copy()
    bafraw['Position'] = pd.to_numeric(bafraw.Position, errors='coerce')
    bafraw['BAF'] = pd.to_numeric(bafraw.BAF, errors='coerce')
    return bafraw


def read_sv_table(filename):
    svs = pd.read_table(filename, dtype={'chromosome': str})
    missing = [c for c in SV_COLUMNS if c not in svs.columns]
    sp.ensure(len(missing) == 0, f'Missing column(s) {missing} in SV file {filename}, expected {SV_COLUMNS}')
    return svs


def chromosome_snps(bafraw, chromosome):
    """
    Positions and BAFs of the SNPs on <chromosome> that have a BAF value.
    """
    snps = bafraw[bafraw.Chromosome == chromosome]
    snps = snps[snps.BAF.notna() & snps.Position.notna()]
    snps = snps.sort_values(by='Position', kind='stable')
    return snps.Position.to_numpy(dtype=np.int64), snps.BAF.to_numpy(dtype=float)


def interval_mean(values):
    if len(values) == 0:
        return np.zeros(0)
    return np.full(len(values), np.mean(values))


def estimate_sdev(baf, mad_window=25, min_sdev=0.09):
    """
    Noise level of a BAF track, estimated on the BAF mirrored around 0.5.
    """
    baf = np.asarray(baf, dtype=float)
    sdev = get_mad(np.minimum(baf, 1 - baf), k=mad_window)
    # Standard deviation is not defined for a single value
    if np.isnan(sdev):
        sdev = 0
    # In LOH regions (e.g., in cell lines) the spread goes to zero, which leads to oversegmentation.
    # The default floor is about what is expected for a binomial around 0.5 at depth 30
    return max(sdev, min_sdev)


def correct_phase(baf, sdev, phasekmin=3, phasegamma=3, min_snps=50, fitter=None):
    """
    Find switched haplotype blocks with a short segmentation, and flip the SNPs in them.
    Returns the fit of the segmentation and the phase-corrected BAF.
    """
    baf = np.asarray(baf, dtype=float)
    if len(baf) < min_snps:
        bafsegm = interval_mean(baf)
    else:
        fitter = fitter or PcfFitter()
        bafsegm = np.asarray(fitter.fit(baf, phasekmin, phasegamma * sdev), dtype=float)

    # a fit of exactly 0.5 is flipped
    bafphased = np.where(bafsegm > 0.5, baf, 1 - baf)
    return bafsegm, bafphased


def segment_phased(bafphased, sdev, kmin=3, gamma=10, min_snps=50, no_segmentation=False, fitter=None):
    """
    Segmentation of the phase-corrected BAF that is reported.
    """
    bafphased = np.asarray(bafphased, dtype=float)
    if len(bafphased) < min_snps or no_segmentation:
        return interval_mean(bafphased)

    fitter = fitter or PcfFitter()
    return np.asarray(fitter.fit(bafphased, kmin, gamma * sdev), dtype=float)


def run_lengths(values):
    """
    Generate (value, length) for every maximal run of equal consecutive values
    """
    for value, run in groupby(values):
        yield value, sum(1 for _ in run)


def adjust_segment_values(bafphased, bafseg):
    """
    Replace the value of each segment (a run of equal values in <bafseg>) by the median of its BAFphased.
    The mean taken by the segmentation is sensitive to badly phased SNPs.
    """
    bafphased = np.asarray(bafphased, dtype=float)
    lengths = [length for _, length in run_lengths(bafseg)]
    bounds = np.cumsum([0] + lengths)
    medians = [np.median(bafphased[start:end]) for start, end in zip(bounds[:-1], bounds[1:])]
    return np.repeat(np.asarray(medians, dtype=float), lengths)


def recalc_segment_baf(bafphased, bafseg, calc_seg_baf_option=1):
    if calc_seg_baf_option == 1:
        return adjust_segment_values(bafphased, bafseg)
    elif calc_seg_baf_option == 2:
        # the segmentation already reports the mean
        return np.asarray(bafseg, dtype=float)
    else:
        msg = f'Supplied calc_seg_baf_option [{calc_seg_baf_option}] not valid, using mean BAF by default'
        sp.warn(msg + '\n')
        warnings.warn(msg)
        return np.asarray(bafseg, dtype=float)


def segment_interval(
    chromosome,
    positions,
    baf,
    gamma=10,
    kmin=3,
    phasegamma=3,
    phasekmin=3,
    calc_seg_baf_option=1,
    no_segmentation=False,
    min_snps=50,
    min_sdev=0.09,
    mad_window=25,
    fitter=None,
    adjust=True,
):
    """
    Run both segmentation passes on the SNPs of a single interval.
    Returns a DataFrame with the output columns, plus the fit of the phase correction pass in BAFsegm.
    With adjust=False, BAFseg holds the fitted segment means and recalc_segment_baf is left to the caller.
    """
    baf = np.asarray(baf, dtype=float)
    sp.log(msg=f'BAFlen={len(baf)}\n', level='INFO')

    sdev = estimate_sdev(baf, mad_window=mad_window, min_sdev=min_sdev)
    bafsegm, bafphased = correct_phase(
        baf, sdev, phasekmin=phasekmin, phasegamma=phasegamma, min_snps=min_snps, fitter=fitter
    )

    sdev = estimate_sdev(bafphased, mad_window=mad_window, min_sdev=min_sdev)
    bafphseg = segment_phased(
        bafphased, sdev, kmin=kmin, gamma=gamma, min_snps=min_snps, no_segmentation=no_segmentation, fitter=fitter
    )

    if adjust and len(baf) > 0:
        bafphseg = recalc_segment_baf(bafphased, bafphseg, calc_seg_baf_option)

    return pd.DataFrame(
        {
            'Chromosome': [chromosome] * len(baf),
            'Position': np.asarray(positions, dtype=np.int64),
            'BAF': baf,
            'BAFphased': bafphased,
            'BAFseg': bafphseg,
            'BAFsegm': bafsegm,
        }
    )


def segment_chromosome(chromosome, positions, baf, breakpoints, calc_seg_baf_option=1, phase_plot=None, **params):
    """
    Segment each presegment in <breakpoints> (columns start, end) independently and concatenate the results.
    <phase_plot>, if given, is called with the concatenated results before the segment values are recalculated.
    """
    positions = np.asarray(positions)
    baf = np.asarray(baf, dtype=float)

    results = []
    for _, r in breakpoints.iterrows():
        in_interval = (positions >= r.start) & (positions <= r.end)
        results.append(segment_interval(chromosome, positions[in_interval], baf[in_interval], adjust=False, **params))

    if len(results) == 0:
        return pd.DataFrame(columns=OUTPUT_COLUMNS + ['BAFsegm'])

    if phase_plot is not None:
        phase_plot(pd.concat(results, ignore_index=True))

    # segment values are recalculated per presegment, runs never continue across a presegment boundary
    for result in results:
        if len(result) > 0:
            result['BAFseg'] = recalc_segment_baf(
                result.BAFphased.to_numpy(), result.BAFseg.to_numpy(), calc_seg_baf_option
            )
    return pd.concat(results, ignore_index=True)


def plot_phase_pass(result, chromosome, samplename, plot_dir, svs_pos=None):
    plot_phase_fit(
        chromosome,
        result.Position,
        result.BAF,
        result.BAFsegm,
        samplename,
        outdir=plot_dir,
        svs_pos=svs_pos,
    )


def plot_final_pass(result, chromosome, samplename, plot_dir, svs_pos=None):
    plot_segmented_baf(
        chromosome,
        result.Position,
        result.BAF,
        result.BAFsegm > 0.5,
        result.BAFseg,
        samplename,
        outdir=plot_dir,
        svs_pos=svs_pos,
    )


def segment_and_plot(chromosome, positions, baf, breakpoints, samplename, plot_dir, svs_pos=None, **params):
    """
    Segment one chromosome. With a <plot_dir>, the phase correction fit is plotted before the segment values
    are recalculated, and the final segments after.
    """
    phase_plot = None
    if plot_dir is not None:
        phase_plot = partial(
            plot_phase_pass, chromosome=chromosome, samplename=samplename, plot_dir=plot_dir, svs_pos=svs_pos
        )

    result = segment_chromosome(chromosome, positions, baf, breakpoints, phase_plot=phase_plot, **params)

    if plot_dir is not None:
        plot_final_pass(result, chromosome, samplename, plot_dir, svs_pos=svs_pos)
    return result


def concat_chromosomes(results):
    results = [r[OUTPUT_COLUMNS] for r in results if len(r) > 0]
    if len(results) == 0:
        return pd.DataFrame(columns=OUTPUT_COLUMNS)
    return pd.concat(results, ignore_index=True)


def segment_baf_phased(bafraw, samplename='sample', plot_dir=None, fitter=None, **params):
    """
    Segment the phased BAF of every chromosome as a whole.

    The segmentation is done in two steps. A first segmentation aims to find short segments, which are used to
    find haplotype blocks that have been switched. These are switched back, after which the second segmentation
    produces the segments that are reported.

    Parameters:
        bafraw: DataFrame with columns Chromosome, Position, BAF
        samplename: name of the sample, used to name the plots
        plot_dir: directory for per-chromosome plots, or None to skip plotting
        fitter: ChangePointFitter used by both passes (default PcfFitter)
        params: gamma, kmin, phasegamma, phasekmin, calc_seg_baf_option, min_snps, min_sdev, mad_window

    Returns a DataFrame with columns Chromosome, Position, BAF, BAFphased, BAFseg.
    """
    results = []
    for chromosome in bafraw.Chromosome.unique():
        sp.log(msg=f'Segmenting {chromosome}\n', level='INFO')
        positions, baf = chromosome_snps(bafraw, chromosome)
        if len(positions) == 0:
            sp.log(msg=f'No SNPs with a BAF on chromosome {chromosome}, skipping\n', level='WARN')
            continue

        # the chromosome is segmented as a whole
        breakpoints = pd.DataFrame([(chromosome, positions[0], positions[-1])], columns=['chrom', 'start', 'end'])
        result = segment_and_plot(
            chromosome, positions, baf, breakpoints, samplename, plot_dir, fitter=fitter, **params
        )
        results.append(result)

    return concat_chromosomes(results)


def segment_baf_phased_sv(
    bafraw,
    svs,
    max_snp_distance=3000000,
    samplename='sample',
    plot_dir=None,
    fitter=None,
    **params,
):
    """
    Segment the phased BAF with structural variant breakpoints and large gaps between SNPs (e.g., centromeres)
    as presegments. Each presegment goes through both segmentation steps independently, so segments never
    span an SV breakpoint.

    Parameters:
        bafraw: DataFrame with columns Chromosome, Position, BAF
        svs: DataFrame with (at least) columns chromosome, position
        max_snp_distance: gaps between SNPs of at least this many bp start a new presegment
        params: as for segment_baf_phased, plus no_segmentation

    Returns a DataFrame with columns Chromosome, Position, BAF, BAFphased, BAFseg.
    """
    results = []
    for chromosome in bafraw.Chromosome.unique():
        sp.log(msg=f'Segmenting {chromosome}\n', level='INFO')
        positions, baf = chromosome_snps(bafraw, chromosome)
        if len(positions) == 0:
            sp.log(msg=f'No SNPs with a BAF on chromosome {chromosome}, skipping\n', level='WARN')
            continue

        svs_pos = svs[svs.chromosome == chromosome].position.to_numpy()
        breakpoints = svs_to_presegment_breakpoints(
            chromosome, svs_pos, positions, max_snp_distance=max_snp_distance, big_holes=True
        )
        result = segment_and_plot(
            chromosome, positions, baf, breakpoints, samplename, plot_dir, svs_pos=svs_pos, fitter=fitter, **params
        )
        results.append(result)

    return concat_chromosomes(results)


if __name__ == '__main__':
    main()
