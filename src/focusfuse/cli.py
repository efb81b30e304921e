"""Command line front end for focusfuse."""

import argparse
import logging
import sys
from typing import Optional

import cv2

from . import __version__
from .common.enums import AlignmentMode, FusionMethod
from .common.exceptions import FocusFuseException, FocusFuseValidationException
from .internal.models.validation import StackingOptions
from .stack import stack_images

logger = logging.getLogger(__name__)

MERGE_METHODS = {
    "pyramid": FusionMethod.PYRAMID_BLEND,
    "wavelet": FusionMethod.PYRAMID_BLEND,
    "label": FusionMethod.LABEL_SELECTION,
    "laplacian": FusionMethod.LABEL_SELECTION,
}

MAX_THREADS = 1024


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="focusfuse",
        description="Merge a focus-bracketed image stack into one sharp image.",
    )
    parser.add_argument("inputs", nargs="*", help="Input images in focus order")

    output = parser.add_argument_group("Output file options")
    output.add_argument("--output", default="output.jpg", help="Merged image path")
    output.add_argument("--depthmap", default=None, help="Write a depth map image")
    output.add_argument(
        "--3dview", dest="view3d", default=None, help="Write a 3D preview image"
    )
    output.add_argument(
        "--save-steps",
        action="store_true",
        help="Save intermediate images from processing steps",
    )
    output.add_argument("--jpgquality", type=int, default=95, help="JPG quality (0-100)")
    output.add_argument(
        "--nocrop",
        action="store_true",
        help="Save full image, including extrapolated border data",
    )

    align = parser.add_argument_group("Image alignment options")
    align.add_argument(
        "--reference", type=int, default=None, help="Reference frame index (default middle)"
    )
    align.add_argument(
        "--global-align", action="store_true", help="Align directly against reference"
    )
    align.add_argument(
        "--full-resolution-align",
        action="store_true",
        help="Use full resolution images in alignment (default max 2048 px)",
    )
    align.add_argument("--no-whitebalance", action="store_true")
    align.add_argument("--no-contrast", action="store_true")
    align.add_argument(
        "--no-transform", action="store_true", help="Skip the geometric transform"
    )
    align.add_argument(
        "--align-only", action="store_true", help="Only align and write aligned stack"
    )
    align.add_argument(
        "--align-keep-size",
        action="store_true",
        help="Keep full image size by not cropping alignment borders",
    )
    align.add_argument("--no-align", action="store_true", help="Skip alignment")

    merge = parser.add_argument_group("Image merge options")
    merge.add_argument("--consistency", type=int, default=2, help="Filter level 0..2")
    merge.add_argument("--denoise", type=float, default=1.0, help="Denoise level")
    merge.add_argument(
        "--merge-method",
        choices=sorted(MERGE_METHODS),
        default="pyramid",
        help="pyramid/wavelet blending or label/laplacian selection",
    )
    merge.add_argument(
        "--pyramid-levels",
        "--wavelet-levels",
        dest="pyramid_levels",
        type=int,
        default=5,
        help="Pyramid levels (1-10)",
    )

    depth = parser.add_argument_group("Depth map options")
    depth.add_argument("--depthmap-threshold", type=int, default=10)
    depth.add_argument("--depthmap-smooth-xy", type=int, default=20)
    depth.add_argument("--depthmap-smooth-z", type=int, default=40)
    depth.add_argument(
        "--remove-bg",
        type=int,
        default=0,
        help="Positive removes black background, negative white",
    )
    depth.add_argument("--halo-radius", type=int, default=20)
    depth.add_argument(
        "--3dviewpoint", dest="viewpoint", default="1:1:1:2", help="x:y:z:zscale"
    )

    performance = parser.add_argument_group("Performance options")
    performance.add_argument(
        "--threads", type=int, default=0, help="Number of OpenCV threads (0 = auto)"
    )

    info = parser.add_argument_group("Information options")
    info.add_argument("--verbose", action="store_true", help="Verbose output")
    info.add_argument("--version", action="store_true", help="Show version info")
    info.add_argument(
        "--opencv-version", action="store_true", help="Show OpenCV library version"
    )
    return parser


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _configure_threads(threads: int) -> None:
    """Set the OpenCV worker thread count; 0 keeps the library default."""
    if not 0 <= threads <= MAX_THREADS:
        raise FocusFuseValidationException(
            f"threads must be between 0 and {MAX_THREADS}, got {threads}"
        )
    if threads > 0:
        cv2.setNumThreads(threads)
        logger.debug(f"OpenCV threads set to {threads}")


def options_from_args(args: argparse.Namespace) -> StackingOptions:
    return StackingOptions(
        reference_index=args.reference,
        alignment_mode=AlignmentMode.DIRECT if args.global_align else AlignmentMode.CHAINED,
        align_max_resolution=0 if args.full_resolution_align else 2048,
        no_whitebalance=args.no_whitebalance,
        no_contrast=args.no_contrast,
        no_transform=args.no_transform,
        disable_alignment=args.no_align,
        align_only=args.align_only,
        align_keep_size=args.align_keep_size,
        no_crop=args.nocrop,
        fusion_method=MERGE_METHODS[args.merge_method],
        pyramid_levels=args.pyramid_levels,
        consistency=args.consistency,
        denoise=args.denoise,
        depthmap_threshold=args.depthmap_threshold,
        depthmap_smooth_xy=args.depthmap_smooth_xy,
        depthmap_smooth_z=args.depthmap_smooth_z,
        halo_radius=args.halo_radius,
        remove_background=args.remove_bg,
        viewpoint=args.viewpoint,
        render_preview=args.view3d is not None,
    )


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"focusfuse {__version__}")
        print(f"OpenCV: {cv2.__version__}")
        return 0

    if args.opencv_version:
        print(cv2.__version__)
        return 0

    _setup_logging(args.verbose)

    if not args.inputs:
        parser.print_usage(sys.stderr)
        logger.error("No input files provided.")
        return 2

    try:
        _configure_threads(args.threads)
        options = options_from_args(args)
        stack_images(
            args.inputs,
            args.output,
            depth_map_path=args.depthmap,
            preview_path=args.view3d,
            options=options,
            jpeg_quality=args.jpgquality,
            save_steps=args.save_steps,
        )
    except FocusFuseValidationException as e:
        logger.error(str(e))
        return 2
    except FocusFuseException as e:
        logger.error(f"Focus stacking failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
