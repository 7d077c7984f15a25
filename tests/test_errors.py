"""Tests for the error hierarchy."""

import pytest

from slogen.core.errors import (
    ConfigurationError,
    ExitCode,
    PluginCollisionError,
    PluginError,
    PluginLoadError,
    PluginNotFoundError,
    ProcessingError,
    SLOGenerationError,
    SlogenError,
    TemplateError,
    ValidationError,
)


class TestExitCodes:
    """Tests for the exit code of each error."""

    @pytest.mark.parametrize(
        "error, code",
        [
            (ConfigurationError("bad"), ExitCode.CONFIG_ERROR),
            (ValidationError("bad"), ExitCode.VALIDATION_ERROR),
            (TemplateError("bad"), ExitCode.PROCESSING_ERROR),
            (PluginLoadError("bad"), ExitCode.PLUGIN_ERROR),
            (PluginCollisionError("x", "slo"), ExitCode.PLUGIN_ERROR),
            (PluginNotFoundError("x"), ExitCode.PLUGIN_ERROR),
            (ProcessingError("x", "bad"), ExitCode.PROCESSING_ERROR),
            (SLOGenerationError("x", "bad"), ExitCode.PROCESSING_ERROR),
            (SlogenError("bad"), ExitCode.UNKNOWN_ERROR),
        ],
    )
    def test_exit_code(self, error, code):
        """Test each error maps to its exit code."""
        assert error.exit_code == code

    def test_plugin_errors_share_base(self):
        """Test plugin failures can be caught together."""
        for error in (PluginLoadError("a"), PluginCollisionError("b", "sli"), PluginNotFoundError("c")):
            assert isinstance(error, PluginError)


class TestErrorMessages:
    """Tests for the error messages and details."""

    def test_processing_error(self):
        """Test the processor ID is part of the message."""
        error = ProcessingError("sloth.dev/core/sli_rules/v1", "boom")

        assert str(error) == "slo processor 'sloth.dev/core/sli_rules/v1' failed: boom"
        assert error.processor_id == "sloth.dev/core/sli_rules/v1"
        assert error.details == {"processor_id": "sloth.dev/core/sli_rules/v1"}

    def test_slo_generation_error(self):
        """Test the SLO ID is part of the message."""
        error = SLOGenerationError("svc-slo", "boom")

        assert error.message == "could not generate 'svc-slo' slo: boom"
        assert error.slo_id == "svc-slo"

    def test_not_found(self):
        """Test the missing plugin ID is kept."""
        error = PluginNotFoundError("example.com/x/v1")
        assert error.message == "plugin 'example.com/x/v1' not found"
        assert error.plugin_id == "example.com/x/v1"
