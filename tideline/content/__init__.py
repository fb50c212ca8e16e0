"""Ready-made content bundles."""

from tideline.content.starter_bundle import STARTER_BUNDLE, load_starter_bundle

__all__ = ["STARTER_BUNDLE", "load_starter_bundle"]
