"""Tests for perch.errors — exception hierarchy."""

from perch.errors import ConfigurationError, PerchError, TemplateError


class TestHierarchy:
    def test_configuration_error_is_perch_error(self) -> None:
        assert issubclass(ConfigurationError, PerchError)

    def test_template_error_is_perch_error(self) -> None:
        assert issubclass(TemplateError, PerchError)


class TestTemplateError:
    def test_fields_and_message(self) -> None:
        err = TemplateError("500.html", "not found")
        assert err.template == "500.html"
        assert err.detail == "not found"
        assert str(err) == "500.html: not found"


class TestLazyImports:
    def test_top_level_names(self) -> None:
        import perch

        for name in perch.__all__:
            assert getattr(perch, name) is not None
