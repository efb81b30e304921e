# type: ignore[unknown-argument]

from ...common.exceptions import FocusFuseConfigurationException
from ..config.base import FocusStackingConfig
from ..config.depth import DepthConfig, PreviewConfig

# Import modules to trigger decorator registration
from .align import chained, direct  # noqa: F401
from .depth import DepthMapDeriver
from .focus import FocusScorer
from .preview import ReliefPreviewRenderer
from .registry import (
    _aligner_config_map,
    _aligner_map,
    _blender_config_map,
    _blenders_map,
)
from .stack import label_selection, pyramid_blend  # noqa: F401
from .validation import StackingOptions


class FocusStackingConfigFactory:
    """Factory that dispatches to appropriate config class based on enum."""

    @classmethod
    def create(cls, options: StackingOptions) -> FocusStackingConfig:
        if options.fusion_method not in _blenders_map:
            raise FocusFuseConfigurationException(
                f"No blender registered for {options.fusion_method}"
            )
        if options.alignment_mode not in _aligner_map:
            raise FocusFuseConfigurationException(
                f"No aligner registered for {options.alignment_mode}"
            )

        blender_config = _blender_config_map[options.fusion_method](
            levels=options.pyramid_levels,
            consistency_level=options.consistency,
            denoise_level=options.denoise,
        )
        blender_instance = _blenders_map[options.fusion_method](config=blender_config)

        aligner_instance = None
        if not options.disable_alignment:
            aligner_config = _aligner_config_map[options.alignment_mode](
                white_balance=not options.no_whitebalance,
                contrast=not options.no_contrast,
                transform=not options.no_transform,
                crop=not (options.no_crop or options.align_keep_size),
                max_resolution=options.align_max_resolution,
            )
            aligner_instance = _aligner_map[options.alignment_mode](
                config=aligner_config
            )

        depth_deriver = DepthMapDeriver(
            config=DepthConfig(
                threshold=options.depthmap_threshold,
                smooth_xy=options.depthmap_smooth_xy,
                smooth_z=options.depthmap_smooth_z,
                halo_radius=options.halo_radius,
                remove_background=options.remove_background,
            )
        )

        preview_renderer = None
        if options.render_preview:
            preview_renderer = ReliefPreviewRenderer(
                config=PreviewConfig(viewpoint=options.viewpoint)
            )

        return FocusStackingConfig(
            aligner=aligner_instance,
            blender=blender_instance,
            focus_scorer=FocusScorer(
                blender_config.laplacian_kernel_size,
                blender_config.response_blur_sigma,
            ),
            depth_deriver=depth_deriver,
            preview_renderer=preview_renderer,
        )
