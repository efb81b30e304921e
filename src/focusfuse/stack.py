import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import numpy as np

from .common.exceptions import (
    FocusFuseAlignmentException,
    FocusFuseStackingException,
)
from .internal.config.base import FocusStackingConfig
from .internal.models.align.crop import Rectangle
from .internal.models.factory import FocusStackingConfigFactory
from .internal.models.focus import label_dtype
from .internal.models.stack.base import FusionResult
from .internal.models.validation import (
    FocusFuseInputValidation,
    StackingOptions,
    validate_frames,
)
from .internal.util.image import ImageUtils
from .internal.util.resource_monitor import (
    ResourceMonitor,
    check_resources_before_processing,
)

logger = logging.getLogger(__name__)


@dataclass
class StackResult:
    """Outputs of a stacking run.

    ``composite`` and ``depth_map`` are None for align-only runs, ``preview``
    is None unless a preview was requested.
    """

    composite: Optional[np.ndarray]
    depth_map: Optional[np.ndarray]
    preview: Optional[np.ndarray] = None
    aligned_frames: list[np.ndarray] = field(default_factory=list)
    labels: Optional[np.ndarray] = None
    crop: Optional[Rectangle] = None


def stack_frames(
    frames: list[np.ndarray],
    *,
    options: Optional[StackingOptions] = None,
    steps_prefix: Optional[Union[str, Path]] = None,
) -> StackResult:
    """Align, fuse and derive depth for an in-memory stack of RGB uint8 frames.

    Args:
        frames: Frames in focus order, all the same size
        options: Validated options; defaults are used when omitted
        steps_prefix: When set, intermediate images are written to
            ``<steps_prefix>_step_*.png``

    Raises:
        FocusFuseValidationException: If the stack or options are invalid
        FocusFuseAlignmentException: If registration fails
        FocusFuseStackingException: If fusion, depth or preview fails
    """
    options = options or StackingOptions()
    reference_index = validate_frames(frames, options.reference_index)

    logger.info(f"Starting focus stacking with {len(frames)} frames")
    logger.info(f"Reference frame: {reference_index}")
    if options.disable_alignment:
        logger.info("Alignment: disabled")
    else:
        logger.info(f"Alignment: {options.alignment_mode}")
    logger.info(f"Fusion: {options.fusion_method}")

    config = FocusStackingConfigFactory.create(options)
    check_resources_before_processing(frames, options.pyramid_levels)

    aligned_frames = [frame.copy() for frame in frames]
    crop = None
    if config.aligner is not None:
        try:
            alignment = config.aligner.align(frames, reference_index)
        except Exception as e:
            raise FocusFuseAlignmentException(f"Alignment failed: {e}") from e
        aligned_frames, crop = alignment.frames, alignment.crop

    if options.align_only:
        logger.info("Align-only run, skipping merge")
        return StackResult(
            composite=None, depth_map=None, aligned_frames=aligned_frames, crop=crop
        )

    try:
        result = _fuse_and_render(aligned_frames, config, steps_prefix)
    except Exception as e:
        raise FocusFuseStackingException(f"Stacking failed: {e}") from e

    result.crop = crop
    ResourceMonitor.log_resource_status("After processing")
    ResourceMonitor.force_garbage_collection()
    return result


def _fuse_and_render(
    frames: list[np.ndarray],
    config: FocusStackingConfig,
    steps_prefix: Optional[Union[str, Path]],
) -> StackResult:
    responses = config.focus_scorer.responses(frames)

    if len(frames) == 1:
        # Nothing to merge: the frame is the composite, untouched by denoising
        fusion = FusionResult(
            composite=frames[0].copy(),
            labels=np.zeros(frames[0].shape[:2], dtype=label_dtype(1)),
            best_response=responses[0],
        )
        composite = fusion.composite
    else:
        fusion = config.blender.blend(frames, responses)
        composite = config.blender.denoise(fusion.composite)
    del responses

    if steps_prefix is not None:
        _save_intermediate_steps(Path(steps_prefix), fusion)

    depth_map = config.depth_deriver.derive(
        fusion.labels, fusion.best_response, composite, len(frames)
    )

    preview = None
    if config.preview_renderer is not None:
        preview = config.preview_renderer.render(composite, depth_map)

    return StackResult(
        composite=composite,
        depth_map=depth_map,
        preview=preview,
        aligned_frames=frames,
        labels=fusion.labels,
    )


def _save_intermediate_steps(prefix: Path, fusion: FusionResult) -> None:
    labels_vis = np.clip(fusion.labels.astype(np.int32) * 16, 0, 255).astype(np.uint8)
    ImageUtils.save_image(labels_vis, f"{prefix}_step_labels.png")

    response_vis = ImageUtils.normalize_min_max(fusion.best_response, 0.0, 255.0)
    ImageUtils.save_image(
        np.rint(response_vis).astype(np.uint8), f"{prefix}_step_focus_response.png"
    )

    ImageUtils.save_image(fusion.composite, f"{prefix}_step_merged_raw.png")
    logger.info(f"Saved intermediate steps with prefix {prefix}")


def stack_images(
    image_paths: list[Union[str, Path]],
    destination_image_path: Union[str, Path],
    *,
    depth_map_path: Optional[Union[str, Path]] = None,
    preview_path: Optional[Union[str, Path]] = None,
    options: Optional[StackingOptions] = None,
    jpeg_quality: int = 95,
    save_steps: bool = False,
) -> StackResult:
    """Load frames from disk, stack them and write the requested outputs.

    With ``options.align_only`` the aligned frames are written next to the
    destination as ``<stem>_aligned_NNN<ext>`` instead of a merged image.
    """
    validated_input = FocusFuseInputValidation(
        image_paths=image_paths,
        destination_image_path=destination_image_path,
        depth_map_path=depth_map_path,
        preview_path=preview_path,
        jpeg_quality=jpeg_quality,
    )
    destination = Path(validated_input.destination_image_path)
    options = options or StackingOptions()
    if validated_input.preview_path is not None and not options.render_preview:
        options = options.model_copy(update={"render_preview": True})

    logger.info(f"Loading {len(validated_input.image_paths)} source images")
    frames = [ImageUtils.load_image(path) for path in validated_input.image_paths]

    ResourceMonitor.check_disk_space(destination.parent)

    steps_prefix = destination.parent / destination.stem if save_steps else None
    result = stack_frames(frames, options=options, steps_prefix=steps_prefix)

    quality = validated_input.jpeg_quality
    if options.align_only:
        for index, frame in enumerate(result.aligned_frames):
            aligned_path = destination.with_name(
                f"{destination.stem}_aligned_{index:03d}{destination.suffix}"
            )
            ImageUtils.save_image(frame, aligned_path, quality)
        logger.info(f"Saved {len(result.aligned_frames)} aligned frames")
        return result

    ImageUtils.save_image(result.composite, destination, quality)
    logger.info(f"Saved merged image to {destination}")

    if validated_input.depth_map_path is not None:
        ImageUtils.save_image(result.depth_map, validated_input.depth_map_path, quality)
        logger.info(f"Saved depth map to {validated_input.depth_map_path}")

    if validated_input.preview_path is not None and result.preview is not None:
        ImageUtils.save_image(result.preview, validated_input.preview_path, quality)
        logger.info(f"Saved 3D preview to {validated_input.preview_path}")

    return result
