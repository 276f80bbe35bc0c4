"""Base model types shared across the package."""

from .base import DevnetModel, KebabModel, StrictBaseModel, to_kebab

__all__ = [
    "DevnetModel",
    "KebabModel",
    "StrictBaseModel",
    "to_kebab",
]
