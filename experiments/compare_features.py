# experiments/compare_features.py
"""
Compare ORB, BRISK and A-KAZE on an image pair with a ground-truth homography.

For every pipeline: detect and describe keypoints in both images, match
descriptors with the NNDR test, classify the matches against the
homography, and report keypoints / matches / inliers / timing.

Usage:
    python -m experiments.compare_features -L img1.ppm -R img2.ppm -H H1to2p
    python -m experiments.compare_features -L img1.ppm -R img2.ppm -H H1to2p \
        --pipelines orb akaze --descriptor KAZE --output-dir results

Run from the project root.
"""

import argparse
import os
import sys

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from matchbench.benchmark import BenchmarkConfig, run_benchmark
from matchbench.detectors import (
    AKAZE_DESCRIPTORS,
    DIFFUSIVITIES,
    AkazeParams,
    BriskParams,
    OrbParams,
    akaze_pipeline,
    brisk_pipeline,
    orb_pipeline,
)
from matchbench.homography import load_homography
from matchbench.io_utils import load_grayscale, save_results
from matchbench.report import print_report
from matchbench.visualization import draw_matches, plot_comparison


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Compare ORB, BRISK and A-KAZE matching accuracy '
                    'against a ground-truth homography')
    parser.add_argument('-L', '--left', required=True,
                        help='Path of image 1')
    parser.add_argument('-R', '--right', required=True,
                        help='Path of image 2')
    parser.add_argument('-H', '--homography', required=True,
                        help='Ground-truth homography file (3x3, image 1 -> image 2)')
    parser.add_argument('--pipelines', nargs='+', default=['orb', 'brisk', 'akaze'],
                        choices=['orb', 'brisk', 'akaze'],
                        help='Pipelines to run, in order')

    matching = parser.add_argument_group('matching')
    matching.add_argument('--ratio', type=float, default=0.8,
                          help='NNDR ratio threshold')
    matching.add_argument('--inlier-threshold', type=float, default=2.5,
                          help='Max reprojection error (px) of an inlier')

    orb = parser.add_argument_group('ORB')
    orb.add_argument('--orb-max-keypoints', type=int, default=OrbParams.max_keypoints)
    orb.add_argument('--orb-scale-factor', type=float, default=OrbParams.scale_factor)
    orb.add_argument('--orb-levels', type=int, default=OrbParams.pyramid_levels)

    brisk = parser.add_argument_group('BRISK')
    brisk.add_argument('--brisk-threshold', type=int, default=BriskParams.threshold)
    brisk.add_argument('--brisk-octaves', type=int, default=BriskParams.octaves)

    akaze = parser.add_argument_group('A-KAZE')
    akaze.add_argument('--omax', type=int, default=AkazeParams.octaves,
                       help='Maximum octave evolution')
    akaze.add_argument('--nsublevels', type=int, default=AkazeParams.sublevels,
                       help='Number of sublevels per octave')
    akaze.add_argument('--dthreshold', type=float, default=AkazeParams.threshold,
                       help='Detector response threshold')
    akaze.add_argument('--diffusivity', default=AkazeParams.diffusivity,
                       choices=sorted(DIFFUSIVITIES))
    akaze.add_argument('--descriptor', default=AkazeParams.descriptor,
                       choices=sorted(AKAZE_DESCRIPTORS))
    akaze.add_argument('--descriptor-size', type=int, default=AkazeParams.descriptor_size,
                       help='Descriptor size in bits (0 = full size)')
    akaze.add_argument('--descriptor-channels', type=int,
                       default=AkazeParams.descriptor_channels, choices=[1, 2, 3])

    parser.add_argument('--workers', type=int, default=1,
                        help='Run pipelines on this many threads')
    parser.add_argument('--output-dir', type=str, default=None,
                        help='Save results.json and figures here')
    parser.add_argument('--no-figures', action='store_true',
                        help='Do not render figures into the output directory')
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser


def build_pipelines(args) -> list:
    builders = {
        'orb': lambda: orb_pipeline(OrbParams(
            max_keypoints=args.orb_max_keypoints,
            scale_factor=args.orb_scale_factor,
            pyramid_levels=args.orb_levels,
        )),
        'brisk': lambda: brisk_pipeline(BriskParams(
            threshold=args.brisk_threshold,
            octaves=args.brisk_octaves,
        )),
        'akaze': lambda: akaze_pipeline(AkazeParams(
            descriptor=args.descriptor,
            descriptor_size=args.descriptor_size,
            descriptor_channels=args.descriptor_channels,
            threshold=args.dthreshold,
            octaves=args.omax,
            sublevels=args.nsublevels,
            diffusivity=args.diffusivity,
        )),
    }
    return [builders[name]() for name in args.pipelines]


def save_figures(img1, img2, results, output_dir: str) -> None:
    for r in results:
        fig = draw_matches(img1, img2, r)
        path = os.path.join(output_dir, f"matches_{r.name.lower().replace('-', '')}.png")
        fig.savefig(path, dpi=150)
        plt.close(fig)
        print(f"  Saved: {path}")

    fig = plot_comparison(results)
    path = os.path.join(output_dir, 'comparison.png')
    fig.savefig(path, dpi=150)
    plt.close(fig)
    print(f"  Saved: {path}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # Shared inputs and options are checked before any pipeline runs
    try:
        config = BenchmarkConfig(
            ratio=args.ratio,
            inlier_threshold=args.inlier_threshold,
            max_workers=args.workers,
            verbose=args.verbose,
        )
        pipelines = build_pipelines(args)
        img1 = load_grayscale(args.left)
        img2 = load_grayscale(args.right)
        H = load_homography(args.homography)
    except (FileNotFoundError, ValueError) as e:
        print(f"[ERROR] {e}")
        return 1

    if args.verbose:
        print(f"  Image 1: {args.left} ({img1.shape[1]}x{img1.shape[0]})")
        print(f"  Image 2: {args.right} ({img2.shape[1]}x{img2.shape[0]})")

    try:
        results = run_benchmark(pipelines, img1, img2, H, config)
    except ValueError as e:
        print(f"[ERROR] {e}")
        return 1

    print()
    print_report(results)

    if args.output_dir:
        os.makedirs(args.output_dir, exist_ok=True)
        save_results(results, os.path.join(args.output_dir, 'results.json'), extra={
            'left': args.left,
            'right': args.right,
            'homography': H.tolist(),
            'ratio': config.ratio,
            'inlier_threshold': config.inlier_threshold,
            'pipeline_params': {p.name: p.params for p in pipelines},
        })
        print(f"\n  Saved: {os.path.join(args.output_dir, 'results.json')}")
        if not args.no_figures:
            save_figures(img1, img2, results, args.output_dir)

    return 0


if __name__ == '__main__':
    sys.exit(main())
