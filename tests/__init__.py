"""Test suite package marker.

Making ``tests`` a package gives nested modules fully qualified names such
as ``tests.observational.test_transits`` and lets test modules import the
shared synthetic solar system from :mod:`tests.conftest`.
"""
