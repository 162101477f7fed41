from finmap.core.testing import _sample_finmaps_fixture  # noqa: F401
