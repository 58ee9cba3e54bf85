import pytest

from restclient.exceptions import ConfigurationError, HTTPError, RestClientError, status_text


class TestHTTPError:
    def test_message_defaults_to_reason_phrase(self):
        error = HTTPError(404)
        assert str(error) == "Not Found"
        assert error.message == "Not Found"
        assert error.code == 404
        assert error.status_text == "Not Found"
        assert error.response == {}

    def test_status_text_derived_from_code_not_message(self):
        error = HTTPError(500, "upstream exploded", {"detail": "boom"})
        assert str(error) == "upstream exploded"
        assert error.status_text == "Internal Server Error"
        assert error.response == {"detail": "boom"}

    def test_code_is_coerced_to_int(self):
        error = HTTPError("418")
        assert error.code == 418
        assert error.status_text == "I'm a Teapot"

    def test_unknown_code_has_empty_status_text(self):
        error = HTTPError(599, "custom")
        assert error.status_text == ""
        assert str(error) == "custom"

    def test_properties_are_read_only(self):
        error = HTTPError(400)
        with pytest.raises(AttributeError):
            error.code = 401

    def test_is_distinct_from_generic_errors(self):
        error = HTTPError(502)
        assert isinstance(error, RestClientError)
        assert not isinstance(error, ValueError)
        with pytest.raises(HTTPError):
            raise error


def test_configuration_error_is_value_error():
    assert issubclass(ConfigurationError, ValueError)
    assert issubclass(ConfigurationError, RestClientError)


def test_status_text():
    assert status_text(200) == "OK"
    assert status_text(1000) == ""
