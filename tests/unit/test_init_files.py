"""
Unit tests for __init__.py files

This module provides tests for package initialization files to ensure:
- Version attributes are defined
- __all__ exports are correct
- Module imports work without errors
"""

import importlib

import pytest


class TestCdcFlattenInit:
    """Test src/cdc_flatten/__init__.py"""

    def test_version_attribute_exists(self):
        """Test that __version__ attribute is defined"""
        import cdc_flatten

        assert cdc_flatten.__version__ == "1.0.0"

    def test_exports_resolve(self):
        """Test that every name in __all__ is importable"""
        import cdc_flatten

        for name in cdc_flatten.__all__:
            assert getattr(cdc_flatten, name) is not None

    def test_public_api(self):
        """Test that the transform entry points are exported"""
        import cdc_flatten

        for name in ("ExtractNewDocumentState", "FlattenConfig", "Record", "flatten"):
            assert name in cdc_flatten.__all__


class TestUtilsInit:
    """Test src/utils/__init__.py"""

    def test_version_attribute_exists(self):
        """Test that __version__ attribute is defined"""
        import utils

        assert utils.__version__ == "1.0.0"

    def test_submodules_can_be_imported(self):
        """Test that submodules listed in __all__ can be imported"""
        import utils

        assert utils.__all__ == ["logging", "metrics", "tracing"]
        for module_name in utils.__all__:
            try:
                module = importlib.import_module(f"utils.{module_name}")
            except ImportError as e:
                pytest.fail(f"Failed to import utils.{module_name}: {e}")
            assert module.__all__
