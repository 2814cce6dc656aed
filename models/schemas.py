import ipaddress
from pydantic import AnyHttpUrl, BaseModel, TypeAdapter, ValidationError, field_validator
from typing import Any, Dict, List

INVALID_URL_MESSAGE = "Invalid URL format. URL must start with http:// or https://"

# Open-ended: any og:/twitter: suffix may show up as a key
LinkMetadata = Dict[str, str]

_http_url = TypeAdapter(AnyHttpUrl)


def _has_public_host(host: str) -> bool:
    """Hosts must be an IP literal or a dotted name with an alphabetic (or punycode) TLD"""
    try:
        ipaddress.ip_address(host.strip("[]"))
        return True
    except ValueError:
        pass
    labels = host.rstrip(".").split(".")
    tld = labels[-1]
    return len(labels) > 1 and len(tld) >= 2 and (tld.isalpha() or tld.startswith("xn--"))


class PreviewQuery(BaseModel):
    # Kept as the caller's string so it can be echoed back untouched
    url: str

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        if any(ch.isspace() for ch in value):
            raise ValueError(INVALID_URL_MESSAGE)
        try:
            parsed = _http_url.validate_python(value)
        except ValidationError:
            raise ValueError(INVALID_URL_MESSAGE) from None
        # the parser happily repairs "http:/host" and similar
        if not value.lower().startswith(f"{parsed.scheme}://"):
            raise ValueError(INVALID_URL_MESSAGE)
        if not parsed.host or not _has_public_host(parsed.host):
            raise ValueError(INVALID_URL_MESSAGE)
        return value


class ValidationErrorItem(BaseModel):
    type: str = "field"
    value: Any = None
    msg: str
    path: str
    location: str


class ValidationErrorResponse(BaseModel):
    errors: List[ValidationErrorItem]


class ErrorResponse(BaseModel):
    error: str
    message: str
