"""
URL Cleaner Schemas

Request/response bodies for POST /url/clean.
"""

from enum import Enum

from pydantic import BaseModel, Field


class CleanOperation(str, Enum):
    """
    Transformations the URL cleaner can apply.

    - CANONICAL: Drop query and fragment, trim the trailing slash
    - REDIRECTION: Force https, www-prefixed lowercase host, lowercase path
    - ALL: Canonical, then redirection
    """
    CANONICAL = "canonical"
    REDIRECTION = "redirection"
    ALL = "all"


class URLCleanRequest(BaseModel):
    url: str = Field(
        ...,
        min_length=1,
        max_length=2048,
        description="Absolute URL to clean",
        examples=["https://BYFOOD.com/food-EXPeriences?query=abc/"],
    )
    operation: CleanOperation = Field(
        ...,
        description="canonical, redirection or all",
    )


class URLCleanResponse(BaseModel):
    processed_url: str = Field(..., description="The cleaned URL")
