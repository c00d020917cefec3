# Copyright 2022 TIER IV, INC. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Stateless HTTP helpers: status tables, cookies, route patterns, encodings."""


from __future__ import annotations

import base64
import hashlib
import mimetypes
import re
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime
from functools import partial
from typing import Callable, Dict, MutableMapping, Optional
from urllib.parse import SplitResult, parse_qs, quote, unquote, urlsplit

DEFAULT_MIME_TYPE = "application/octet-stream"

# fmt: off
STATUS_CODES: Dict[int, str] = {
    100: "Continue",
    101: "Switching Protocols",
    102: "Processing",                       # RFC 2518, obsoleted by RFC 4918
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non-Authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",
    207: "Multi-Status",                     # RFC 4918
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Moved Temporarily",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    307: "Temporary Redirect",
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    407: "Proxy Authentication Required",
    408: "Request Time-out",
    409: "Conflict",
    410: "Gone",
    411: "Length Required",
    412: "Precondition Failed",
    413: "Request Entity Too Large",
    414: "Request-URI Too Large",
    415: "Unsupported Media Type",
    416: "Requested Range Not Satisfiable",
    417: "Expectation Failed",
    418: "I'm a teapot",                     # RFC 2324
    422: "Unprocessable Entity",             # RFC 4918
    423: "Locked",                           # RFC 4918
    424: "Failed Dependency",                # RFC 4918
    425: "Unordered Collection",             # RFC 4918
    426: "Upgrade Required",                 # RFC 2817
    428: "Precondition Required",            # RFC 6585
    429: "Too Many Requests",                # RFC 6585
    431: "Request Header Fields Too Large",  # RFC 6585
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    505: "HTTP Version Not Supported",
    506: "Variant Also Negotiates",          # RFC 2295
    507: "Insufficient Storage",             # RFC 4918
    509: "Bandwidth Limit Exceeded",
    510: "Not Extended",                     # RFC 2774
    511: "Network Authentication Required",  # RFC 6585
}
# fmt: on

STATUS_WITHOUT_CONTENT = frozenset({100, 101, 204, 304})
SAFE_REQUEST_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})


def status_has_content(status: int) -> bool:
    return status not in STATUS_WITHOUT_CONTENT


def is_safe_request_method(method: str) -> bool:
    return method.upper() in SAFE_REQUEST_METHODS


# ------ route patterns ------ #

_REGEXP_SPECIAL_CHARS = re.compile(r"([.?*+^$[\]\\(){}-])")
_ROUTE_TOKEN = re.compile(r"(:[a-z_$][a-z0-9_$]*)|[*.+()]", re.IGNORECASE)


def escape_regexp(_input: str) -> str:
    return _REGEXP_SPECIAL_CHARS.sub(r"\\\1", str(_input))


def _route_token_to_pattern(match: re.Match[str]) -> str:
    token = match.group(0)
    if token == "*":
        return "(.*?)"
    if token in ".+()":
        return escape_regexp(token)
    return "([^./?#]+)"  # named key


def compile_route(route: str) -> re.Pattern[str]:
    """Compile <route> into a case-insensitive, fully anchored pattern.

    A named key is a colon followed by an identifier, i.e. ":name", ":_name"
    or ":$name", and matches one path segment without dots. "*" matches anything.
    Captured groups are in the order they appear in <route>.
    """
    pattern = _ROUTE_TOKEN.sub(_route_token_to_pattern, route)
    return re.compile(f"^{pattern}$", re.IGNORECASE)


# ------ encoding, hashing and parsing ------ #


def mime_type(fname: str) -> str:
    return mimetypes.guess_type(fname)[0] or DEFAULT_MIME_TYPE


def make_hash(_input: str | bytes) -> str:
    """Return the sha1 hexdigest of <_input>."""
    if isinstance(_input, str):
        _input = _input.encode()
    return hashlib.sha1(_input).hexdigest()


def make_key(length: int) -> str:
    """Return a random hex string of <length> chars."""
    return secrets.token_hex(length)[:length]


def encode_base64(_input: str) -> str:
    return base64.b64encode(_input.encode()).decode()


def decode_base64(_input: str) -> str:
    return base64.b64decode(_input).decode()


def parse_query_string(query: str) -> dict[str, list[str]]:
    return parse_qs(query, keep_blank_values=True)


def parse_url(url: str) -> SplitResult:
    return urlsplit(url)


# ------ cookies ------ #

_COOKIE_SEPARATOR = re.compile(r"[;,] *")
# same as the unreserved marks of javascript encodeURIComponent
_URI_COMPONENT_SAFE = "!'()*"


def parse_cookie(cookie: str) -> dict[str, str]:
    """Parse a Cookie header value into a dict.

    Pairs are separated by ";" or ",". For a name that appears more than once,
    the first value wins.
    """
    res: dict[str, str] = {}
    for pair in _COOKIE_SEPARATOR.split(cookie):
        if not pair:
            continue
        name, _, value = pair.partition("=")
        res.setdefault(unquote(name.strip()), unquote(value.strip()))
    return res


def encode_cookie(
    name: str,
    value: str | None = None,
    *,
    domain: str | None = None,
    path: str | None = None,
    expires: datetime | None = None,
    secure: bool = False,
    http_only: bool = False,
) -> str:
    """Encode a cookie into a Set-Cookie header value.

    If <expires> is naive, it is treated as local time.
    """
    cookie = f"{quote(name, safe=_URI_COMPONENT_SAFE)}="
    if value:
        cookie += quote(value, safe=_URI_COMPONENT_SAFE)
    if domain:
        cookie += f"; domain={domain}"
    if path:
        cookie += f"; path={path}"
    if expires:
        _expires = format_datetime(expires.astimezone(timezone.utc), usegmt=True)
        cookie += f"; expires={_expires}"
    if secure:
        cookie += "; secure"
    if http_only:
        cookie += "; HttpOnly"
    return cookie


def set_cookie(
    headers: MutableMapping[str, str], name: str, value: str | None = None, **kwargs
) -> None:
    """Add a cookie to <headers>, multiple cookies are separated by newline."""
    cookie = encode_cookie(name, value, **kwargs)
    if _existed := headers.get("Set-Cookie"):
        headers["Set-Cookie"] = f"{_existed}\n{cookie}"
    else:
        headers["Set-Cookie"] = cookie


# ------ text responses ------ #


@dataclass
class TextResponse:
    status: int
    content: str
    headers: Dict[str, str] = field(default_factory=dict)


def text_response(status: int, content: Optional[str] = None) -> TextResponse:
    """Make a text/plain response, with content defaults to the status reason."""
    content = content or STATUS_CODES.get(status, "")
    return TextResponse(
        status=status,
        content=content,
        headers={
            "Content-Type": "text/plain",
            "Content-Length": str(len(content.encode())),
        },
    )


TextResponder = Callable[[Optional[str]], TextResponse]


def _make_text_responder(status: int) -> TextResponder:
    return partial(text_response, status)


ok = _make_text_responder(200)
bad_request = _make_text_responder(400)
forbidden = _make_text_responder(403)
not_found = _make_text_responder(404)
request_entity_too_large = _make_text_responder(413)
internal_server_error = _make_text_responder(500)


def default_app(method: str, path: str) -> TextResponse:
    return text_response(404, f"Not Found: {method} {path}")
