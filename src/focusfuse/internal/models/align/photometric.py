"""Photometric pre-matching of a moving frame to its alignment target."""

import cv2
import numpy as np

EPSILON = 1e-6


class PhotometricMatcher:
    """Colour and exposure corrections applied before the geometric fit."""

    @staticmethod
    def match_white_balance(moving: np.ndarray, target: np.ndarray) -> np.ndarray:
        """Scale each RGB channel so its mean matches the target's.

        Channels that are black in the moving frame keep a gain of 1.
        """
        moving_means = moving.reshape(-1, 3).mean(axis=0)
        target_means = target.reshape(-1, 3).mean(axis=0)
        gains = np.where(
            moving_means > EPSILON, target_means / np.maximum(moving_means, EPSILON), 1.0
        )
        balanced = moving.astype(np.float32) * gains.astype(np.float32)
        return np.rint(np.clip(balanced, 0, 255)).astype(np.uint8)

    @staticmethod
    def match_contrast(moving: np.ndarray, target: np.ndarray) -> np.ndarray:
        """Match mean and standard deviation of the Lab lightness channel.

        Chroma channels are left untouched; a flat moving frame only gets its
        mean shifted.
        """
        moving_lab = cv2.cvtColor(moving, cv2.COLOR_RGB2LAB)
        target_lab = cv2.cvtColor(target, cv2.COLOR_RGB2LAB)

        lightness = moving_lab[..., 0].astype(np.float32)
        target_lightness = target_lab[..., 0].astype(np.float32)

        moving_std = float(lightness.std())
        gain = float(target_lightness.std()) / moving_std if moving_std > EPSILON else 1.0
        bias = float(target_lightness.mean()) - gain * float(lightness.mean())

        moving_lab[..., 0] = np.rint(np.clip(lightness * gain + bias, 0, 255)).astype(
            np.uint8
        )
        return cv2.cvtColor(moving_lab, cv2.COLOR_LAB2RGB)
