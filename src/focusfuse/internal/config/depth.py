"""Depth map and 3D preview configuration."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ViewPoint:
    """Light/view direction and depth exaggeration for the relief preview."""

    x: float = 1.0
    y: float = 1.0
    z: float = 1.0
    z_scale: float = 2.0

    @classmethod
    def parse(cls, value: str) -> "ViewPoint":
        """Parse ``"x:y:z:zscale"``."""
        parts = value.split(":")
        if len(parts) != 4:
            raise ValueError(f"Invalid viewpoint '{value}', expected x:y:z:zscale")
        try:
            x, y, z, z_scale = (float(p) for p in parts)
        except ValueError as e:
            raise ValueError(f"Invalid viewpoint '{value}': {e}") from e
        return cls(x, y, z, z_scale)


@dataclass
class DepthConfig:
    """Depth map post-filter parameters; zero disables a filter."""

    threshold: int = 10
    smooth_xy: int = 20
    smooth_z: int = 40
    halo_radius: int = 20
    remove_background: int = 0

    z_spatial_sigma: float = 5.0


@dataclass
class PreviewConfig:
    """Relief shading parameters."""

    viewpoint: ViewPoint = field(default_factory=ViewPoint)
    ambient_floor: float = 0.35
    min_z_scale: float = 0.1
