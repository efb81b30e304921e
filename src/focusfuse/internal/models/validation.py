from typing import Annotated, Any, ClassVar, Optional, Union

import numpy as np
from pydantic import BaseModel, Field, FilePath, ValidationError, field_validator
from pydantic.types import NewPath

from ...common.enums import AlignmentMode, FusionMethod
from ...common.exceptions import FocusFuseValidationException
from ..config.depth import ViewPoint


class FocusFuseModel(BaseModel):
    """Base model converting Pydantic errors into FocusFuseValidationException."""

    def __init__(self, **data):
        """Initialize with custom validation error handling."""
        try:
            super().__init__(**data)
        except (ValidationError, ValueError) as e:
            if isinstance(e, ValidationError) and hasattr(e, "errors"):
                errors = e.errors()
            else:
                errors = [{"msg": str(e), "type": "value_error", "loc": ["unknown"]}]
            raise FocusFuseValidationException(
                self._format_validation_errors(errors)
            ) from e

    @staticmethod
    def _format_validation_errors(errors: list) -> str:
        """Format Pydantic validation errors into user-friendly messages."""
        formatted_errors = []

        for error in errors:
            loc = error.get("loc") or ["unknown"]
            field = loc[-1] if loc else "unknown"
            error_type = error.get("type", "unknown")
            message = error.get("msg", "Validation error")
            input_value = error.get("input", "unknown")

            if error_type == "path_not_file":
                formatted_errors.append(f"Path '{input_value}' is not a file.")
            elif error_type == "path_exists":
                formatted_errors.append(f"Path '{input_value}' already exists.")
            else:
                formatted_errors.append(f"{field}: {message}")

        return "; ".join(formatted_errors)


class StackingOptions(FocusFuseModel):
    """Validated options for a focus stacking run."""

    reference_index: Annotated[
        Optional[int],
        Field(ge=0, description="Reference frame index; None selects the middle frame"),
    ] = None
    alignment_mode: Annotated[
        AlignmentMode,
        Field(description="Align to the neighbour (chained) or to the reference (direct)"),
    ] = AlignmentMode.CHAINED
    align_max_resolution: Annotated[
        int,
        Field(ge=0, description="Largest side used for alignment fits; 0 = full size"),
    ] = 2048
    no_whitebalance: bool = False
    no_contrast: bool = False
    no_transform: bool = False
    disable_alignment: bool = False
    align_only: bool = False
    align_keep_size: bool = False
    no_crop: bool = False

    fusion_method: Annotated[
        FusionMethod,
        Field(description="Pyramid coefficient selection or per-pixel label selection"),
    ] = FusionMethod.PYRAMID_BLEND
    pyramid_levels: Annotated[
        int, Field(ge=1, le=10, description="Pyramid detail levels (1-10)")
    ] = 5
    consistency: Annotated[
        int, Field(ge=0, le=2, description="Label consistency filter level (0-2)")
    ] = 2
    denoise: Annotated[
        float, Field(ge=0.0, le=100.0, description="Merged image denoise level")
    ] = 1.0

    depthmap_threshold: Annotated[int, Field(ge=0, le=255)] = 10
    depthmap_smooth_xy: Annotated[int, Field(ge=0, le=1000)] = 20
    depthmap_smooth_z: Annotated[int, Field(ge=0, le=1000)] = 40
    halo_radius: Annotated[int, Field(ge=0, le=1000)] = 20
    remove_background: Annotated[
        int,
        Field(
            ge=-255,
            le=255,
            description="Positive removes black background, negative removes white",
        ),
    ] = 0

    viewpoint: ViewPoint = ViewPoint()
    render_preview: bool = False

    @field_validator("viewpoint", mode="before")
    @classmethod
    def parse_viewpoint(cls, v: Any) -> Any:
        """Accept ``"x:y:z:zscale"`` strings as well as ViewPoint values."""
        if isinstance(v, str):
            return ViewPoint.parse(v)
        if isinstance(v, (tuple, list)):
            return ViewPoint(*v)
        return v


class FocusFuseInputValidation(FocusFuseModel):
    """Input validation model for the stack_images function."""

    VALID_EXTENSIONS: ClassVar[set[str]] = {".jpg", ".jpeg", ".png", ".tif", ".tiff"}

    image_paths: Annotated[
        list[FilePath],
        Field(
            min_length=1,
            description="Source image paths in focus order",
            examples=[["image1.jpg", "image2.jpg", "image3.jpg"]],
        ),
    ]
    destination_image_path: Annotated[
        NewPath,
        Field(
            description="Output path for the merged image",
            examples=["output.jpg"],
        ),
    ]
    depth_map_path: Optional[NewPath] = None
    preview_path: Optional[NewPath] = None
    jpeg_quality: Annotated[int, Field(ge=0, le=100)] = 95

    @field_validator("image_paths")
    @classmethod
    def validate_image_extensions(cls, v):
        """Validate that all image paths have a supported extension."""
        for path in v:
            cls._validate_image_extension(path, "image")
        return v

    @field_validator("destination_image_path", "depth_map_path", "preview_path")
    @classmethod
    def validate_output_extension(cls, v, info):
        """Validate that output paths have a supported extension."""
        if v is not None:
            cls._validate_image_extension(v, info.field_name)
        return v

    @classmethod
    def _validate_image_extension(
        cls, path: Union[NewPath, FilePath], field_name: str
    ) -> None:
        """Shared validation logic for image file extensions."""
        if path.suffix.lower() not in cls.VALID_EXTENSIONS:
            raise ValueError(
                f"Unsupported {field_name} format '{path.suffix.lower()}' for '{path}'. "
                f"Supported formats: {', '.join(sorted(cls.VALID_EXTENSIONS))}"
            )


def validate_frames(frames: list[np.ndarray], reference_index: Optional[int]) -> int:
    """Check the stack invariants and resolve the reference index.

    Returns:
        The reference index, defaulting to the middle frame

    Raises:
        FocusFuseValidationException: On an empty stack, frames that are not
            RGB uint8, mismatched sizes or an out of range reference index
    """
    if not frames:
        raise FocusFuseValidationException("At least one frame is required")

    first_shape = frames[0].shape
    for index, frame in enumerate(frames):
        if frame.dtype != np.uint8 or frame.ndim != 3 or frame.shape[2] != 3:
            raise FocusFuseValidationException(
                f"Frame {index} must be an RGB uint8 image, "
                f"got dtype {frame.dtype} and shape {frame.shape}"
            )
        if frame.shape != first_shape:
            raise FocusFuseValidationException(
                f"All frames must have the same dimensions: frame {index} is "
                f"{frame.shape[1]}x{frame.shape[0]}, expected "
                f"{first_shape[1]}x{first_shape[0]}"
            )

    if reference_index is None:
        return len(frames) // 2
    if not 0 <= reference_index < len(frames):
        raise FocusFuseValidationException(
            f"Reference frame index out of range: {reference_index} "
            f"(stack has {len(frames)} frames)"
        )
    return reference_index
