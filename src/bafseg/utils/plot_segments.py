import os
import matplotlib

matplotlib.use('Agg')
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import seaborn as sns  # noqa: E402

plt.rcParams['savefig.dpi'] = 200
plt.style.use('ggplot')
sns.set_style('white')


def _finish(ax, positions, title, svs_pos, outfile, display):
    ax.set_xlim(np.min(positions), np.max(positions))
    ax.set_ylim(0, 1)
    ax.set_xlabel('Position (Mb)')
    ax.set_ylabel('BAF (phased)')
    ax.set_title(title)

    if svs_pos is not None:
        for x in svs_pos:
            ax.axvline(x=x, linestyle=':', linewidth=1, color='grey')

    plt.tight_layout()
    if outfile is not None:
        plt.savefig(outfile)
    if not display:
        plt.close()


def plot_phase_fit(
    chromosome,
    positions,
    baf,
    phase_fit,
    samplename,
    outdir=None,
    svs_pos=None,
    figsize=(10, 5),
    display=False,
):
    """
    Raw BAF (red) with the fit of the phase correction pass (green).
    """
    positions = np.asarray(positions) / 1e6
    _, ax = plt.subplots(figsize=figsize)
    ax.scatter(positions, baf, s=2, c='red')
    ax.scatter(positions, phase_fit, s=2, c='green')

    outfile = os.path.join(outdir, f'{samplename}_RAFseg_chr{chromosome}.png') if outdir is not None else None
    svs_mb = np.asarray(svs_pos) / 1e6 if svs_pos is not None else None
    _finish(ax, positions, f'{samplename}, chromosome {chromosome}', svs_mb, outfile, display)


def plot_segmented_baf(
    chromosome,
    positions,
    baf,
    plot_red,
    baf_seg,
    samplename,
    outdir=None,
    svs_pos=None,
    figsize=(10, 5),
    display=False,
):
    """
    Raw BAF colored by the phase chosen for each SNP (red: kept, blue: flipped),
    overlaid with the segment values (dark red) and their mirror image (dark blue).
    """
    positions = np.asarray(positions) / 1e6
    baf = np.asarray(baf)
    plot_red = np.asarray(plot_red, dtype=bool)
    baf_seg = np.asarray(baf_seg)

    _, ax = plt.subplots(figsize=figsize)
    ax.scatter(positions[plot_red], baf[plot_red], s=2, c='red')
    ax.scatter(positions[~plot_red], baf[~plot_red], s=2, c='blue')
    ax.scatter(positions, baf_seg, s=2, c='darkred')
    ax.scatter(positions, 1 - baf_seg, s=2, c='darkblue')

    outfile = os.path.join(outdir, f'{samplename}_segment_chr{chromosome}.png') if outdir is not None else None
    svs_mb = np.asarray(svs_pos) / 1e6 if svs_pos is not None else None
    _finish(ax, positions, f'{samplename}, chromosome {chromosome}', svs_mb, outfile, display)
