"""Environment configuration for bv."""

from bv.core.config.env import load_layered_env

__all__ = ["load_layered_env"]
