"""
Tests for the URL cleaner (service functions and POST /url/clean).
"""

import pytest
from fastapi import status

from booklib.exceptions import ValidationError
from booklib.schemas.url import CleanOperation
from booklib.services.url_cleaner import canonicalize, clean_url, redirect

SAMPLE_URL = "https://BYFOOD.com/food-EXPeriences?query=abc/"


class TestCleanUrl:
    def test_canonical(self):
        assert clean_url(SAMPLE_URL, CleanOperation.CANONICAL) == "https://BYFOOD.com/food-EXPeriences"

    def test_redirection(self):
        assert (
            clean_url(SAMPLE_URL, CleanOperation.REDIRECTION)
            == "https://www.byfood.com/food-experiences?query=abc/"
        )

    def test_all(self):
        assert clean_url(SAMPLE_URL, CleanOperation.ALL) == "https://www.byfood.com/food-experiences"

    def test_canonical_trims_trailing_slash(self):
        assert canonicalize("https://example.com/books/#top") == "https://example.com/books"

    def test_redirect_keeps_existing_www(self):
        assert redirect("http://WWW.Example.com/A") == "https://www.example.com/a"

    @pytest.mark.parametrize("url", ["not a url", "/relative/path", "https://"])
    def test_invalid_url(self, url):
        with pytest.raises(ValidationError):
            clean_url(url, CleanOperation.ALL)


class TestCleanEndpoint:
    """Tests for POST /url/clean"""

    def test_clean_success(self, client):
        response = client.post("/url/clean", json={"url": SAMPLE_URL, "operation": "all"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"processed_url": "https://www.byfood.com/food-experiences"}

    def test_unknown_operation(self, client):
        response = client.post("/url/clean", json={"url": SAMPLE_URL, "operation": "shorten"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_invalid_url(self, client):
        response = client.post("/url/clean", json={"url": "nope", "operation": "canonical"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"].startswith("Invalid URL")
