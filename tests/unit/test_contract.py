"""
Tests for the Plugin Contract.

This test suite covers:
1. Structural Plugin protocol checks
2. Contract validation of instantiated plugins
3. PluginBase defaults
"""

import pytest

from plugkit.plugin.contract import (
    Plugin,
    PluginBase,
    PluginContractError,
    PluginError,
    RegistrationError,
    check_plugin,
    has_deregister,
)


class MinimalPlugin:
    name = "minimal"
    version = "1.0.0"

    async def register(self, options=None):
        pass


class SamplePlugin(PluginBase):
    name = "sample"
    version = "2.1.0"


class TestProtocol:
    """Test structural protocol conformance."""

    def test_structural_plugin(self):
        """Classes satisfy the protocol without inheriting from it."""
        assert isinstance(MinimalPlugin(), Plugin)
        assert isinstance(SamplePlugin(), Plugin)

    def test_has_deregister(self):
        assert has_deregister(SamplePlugin())
        assert not has_deregister(MinimalPlugin())

    def test_error_hierarchy(self):
        assert issubclass(RegistrationError, PluginError)
        assert issubclass(PluginContractError, PluginError)


class TestCheckPlugin:
    """Test contract validation."""

    def test_valid_plugin(self):
        check_plugin(MinimalPlugin())

    def test_missing_name(self):
        class NoName:
            version = "1.0.0"

            async def register(self, options=None):
                pass

        with pytest.raises(PluginContractError, match="non-empty string 'name'"):
            check_plugin(NoName())

    def test_non_string_version(self):
        class BadVersion(MinimalPlugin):
            version = 1

        with pytest.raises(PluginContractError, match="string 'version'"):
            check_plugin(BadVersion())

    def test_missing_register(self):
        class NoRegister:
            name = "x"
            version = "1.0.0"

        with pytest.raises(PluginContractError, match="does not define register"):
            check_plugin(NoRegister())


class TestPluginBase:
    """Test PluginBase defaults."""

    @pytest.mark.asyncio
    async def test_register_merges_options(self):
        plugin = SamplePlugin()

        await plugin.register({"a": 1})
        await plugin.register({"b": 2})
        await plugin.register(None)

        assert plugin.state == {"a": 1, "b": 2}

    @pytest.mark.asyncio
    async def test_deregister_is_noop(self):
        await SamplePlugin().deregister()

    def test_repr(self):
        assert repr(SamplePlugin()) == "SamplePlugin(name='sample', version='2.1.0')"
