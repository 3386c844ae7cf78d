import os
import argparse

from bafseg.utils.Supporting import ensure
from bafseg import config, __version__


def add_segmentation_arguments(parser, section):
    """
    Arguments shared by all segmentation commands, with defaults taken from the [<section>] config section
    """
    defaults = getattr(config, section)
    parser.add_argument(
        '-i',
        '--inputfile',
        required=True,
        type=str,
        help='Tab-separated table of phased heterozygous SNPs with columns Chromosome, Position, BAF',
    )
    parser.add_argument(
        '-o',
        '--outputfile',
        required=True,
        type=str,
        help='Filename for the segmented BAF table',
    )
    parser.add_argument(
        '-n',
        '--samplename',
        required=False,
        type=str,
        default=defaults.samplename,
        help=f'Name of the sample, used to name the plots (default {defaults.samplename})',
    )
    parser.add_argument(
        '-g',
        '--gamma',
        required=False,
        type=float,
        default=defaults.gamma,
        help=(
            'Penalty for starting a new segment in the final segmentation, the key parameter for the number of '
            f'segments (default {defaults.gamma})'
        ),
    )
    parser.add_argument(
        '-k',
        '--kmin',
        required=False,
        type=int,
        default=defaults.kmin,
        help=f'Minimum number of SNPs in a final segment (default {defaults.kmin})',
    )
    parser.add_argument(
        '--phasegamma',
        required=False,
        type=float,
        default=defaults.phasegamma,
        help=f'Penalty used in the segmentation that corrects phasing mistakes (default {defaults.phasegamma})',
    )
    parser.add_argument(
        '--phasekmin',
        required=False,
        type=int,
        default=defaults.phasekmin,
        help=(
            'Minimum number of SNPs in a segment of the segmentation that corrects phasing mistakes '
            f'(default {defaults.phasekmin})'
        ),
    )
    parser.add_argument(
        '-c',
        '--calc_seg_baf_option',
        required=False,
        type=int,
        default=defaults.calc_seg_baf_option,
        help=(
            'How the BAF of a segment is recalculated: 1 - median BAFphased, 2 - mean BAFphased '
            f'(default {defaults.calc_seg_baf_option})'
        ),
    )
    parser.add_argument(
        '--min_snps',
        required=False,
        type=int,
        default=defaults.min_snps,
        help=f'Segments with fewer SNPs than this are not segmented, the mean is used (default {defaults.min_snps})',
    )
    parser.add_argument(
        '--min_sdev',
        required=False,
        type=float,
        default=defaults.min_sdev,
        help=f'Lower bound for the estimated BAF noise level (default {defaults.min_sdev})',
    )
    parser.add_argument(
        '--mad_window',
        required=False,
        type=int,
        default=defaults.mad_window,
        help=f'Half-width of the running median used to estimate the noise level (default {defaults.mad_window})',
    )
    parser.add_argument(
        '-p',
        '--plot_dir',
        required=False,
        type=str,
        default=defaults.plot_dir,
        help='Directory for per-chromosome plots (default: no plots)',
    )
    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {__version__}')


def check_segmentation_arguments(args):
    ensure(os.path.isfile(args.inputfile), f'The specified input file does not exist: {args.inputfile}')

    outdir = os.path.dirname(os.path.abspath(args.outputfile))
    ensure(
        os.path.isdir(outdir),
        f'Directory for output file does not exist: <{outdir}>',
    )
    ensure(
        args.plot_dir is None or os.path.isdir(args.plot_dir),
        f'The specified plot directory does not exist: {args.plot_dir}',
    )
    ensure(args.gamma > 0, 'The gamma argument must be positive.')
    ensure(args.phasegamma > 0, 'The phasegamma argument must be positive.')
    ensure(args.kmin >= 1, 'The kmin argument must be at least 1.')
    ensure(args.phasekmin >= 1, 'The phasekmin argument must be at least 1.')
    ensure(args.min_snps >= 1, 'The min_snps argument must be at least 1.')
    ensure(args.min_sdev >= 0, 'The min_sdev argument must not be negative.')
    ensure(args.mad_window >= 1, 'The mad_window argument must be at least 1.')

    return {
        'inputfile': args.inputfile,
        'outputfile': args.outputfile,
        'samplename': args.samplename,
        'gamma': args.gamma,
        'kmin': args.kmin,
        'phasegamma': args.phasegamma,
        'phasekmin': args.phasekmin,
        'calc_seg_baf_option': args.calc_seg_baf_option,
        'min_snps': args.min_snps,
        'min_sdev': args.min_sdev,
        'mad_window': args.mad_window,
        'plot_dir': args.plot_dir,
    }


def parse_segment_baf_args(args=None):
    """
    Parse command line arguments for segmenting the phased BAF of each chromosome as a whole
    """
    parser = argparse.ArgumentParser(
        prog='bafseg segment-baf',
        description=(
            'Segment the phased BAF of each chromosome in two steps: a short segmentation that corrects haplotype '
            'blocks that have been switched, followed by the segmentation that is reported.'
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    add_segmentation_arguments(parser, 'segment_baf')
    args = parser.parse_args(args)

    return check_segmentation_arguments(args)


def parse_segment_baf_sv_args(args=None):
    """
    Parse command line arguments for segmenting the phased BAF with structural variant breakpoints as presegments
    """
    parser = argparse.ArgumentParser(
        prog='bafseg segment-baf-sv',
        description=(
            'Segment the phased BAF using structural variant breakpoints and large gaps between SNPs as initial '
            'breakpoints. Each presegment is segmented independently.'
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    add_segmentation_arguments(parser, 'segment_baf_sv')
    parser.add_argument(
        '-s',
        '--svs',
        required=True,
        type=str,
        help='Tab-separated table of structural variant breakpoints with (at least) columns chromosome, position',
    )
    parser.add_argument(
        '--max_snp_distance',
        required=False,
        type=int,
        default=config.segment_baf_sv.max_snp_distance,
        help=(
            'A gap between consecutive SNPs of at least this many bp starts a new presegment '
            f'(default {config.segment_baf_sv.max_snp_distance})'
        ),
    )
    parser.add_argument(
        '--no_segmentation',
        required=False,
        action='store_true',
        default=config.segment_baf_sv.no_segmentation,
        help='Only correct the phasing, and report the mean BAFphased of each presegment',
    )
    args = parser.parse_args(args)

    ensure(os.path.isfile(args.svs), f'The specified SV file does not exist: {args.svs}')
    ensure(args.max_snp_distance > 0, 'The max_snp_distance argument must be positive.')

    parsed = check_segmentation_arguments(args)
    parsed['svs'] = args.svs
    parsed['max_snp_distance'] = args.max_snp_distance
    parsed['no_segmentation'] = args.no_segmentation
    return parsed
