"""Infrastructure layer: reference implementations of external capabilities.

The core and behaviors only depend on the capability protocols; these
implementations exist for local use and tests.
"""
