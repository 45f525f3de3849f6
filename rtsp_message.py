#https://tools.ietf.org/html/rfc2326#section-6
# RTSP request parsing and response formatting, no I/O here
import re
from enum import Enum

RTSP_VERSION = "RTSP/1.0"
CRLF = "\r\n"
HEADER_SEPARATOR = ": "
# wire text is kept as latin1 so every byte maps to one character
ENCODING = "latin1"

DIGITS = re.compile(r"[0-9]+")


class RtspMethod(Enum):
    OPTIONS = "OPTIONS"
    DESCRIBE = "DESCRIBE"
    SETUP = "SETUP"
    PLAY = "PLAY"
    PAUSE = "PAUSE"
    TEARDOWN = "TEARDOWN"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_token(cls, token):
        """Exact, case sensitive lookup. Anything else (ANNOUNCE, options, ...) is UNKNOWN"""
        try:
            return cls(token)
        except ValueError:
            return cls.UNKNOWN


class ParseFailure(Enum):
    MALFORMED_REQUEST_LINE = "malformed request line"
    MALFORMED_STATUS_LINE = "malformed status line"
    INVALID_CONTENT_LENGTH = "invalid Content-Length"


class ParseError(Exception):
    def __init__(self, reason, detail=""):
        self.reason = reason
        self.detail = detail
        msg = reason.value
        if detail:
            msg = "%s: %r" % (msg, detail)
        Exception.__init__(self, msg)


def _text(raw):
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return bytes(raw).decode(ENCODING)
    return raw


def _body_bytes(body):
    if body is None or isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode(ENCODING)
    return bytes(body)


class RtspMessage:
    """Headers and optional body shared by requests and responses"""

    def __init__(self, headers=None, body=None):
        self.headers = dict(headers) if headers is not None else {}
        self.body = _body_bytes(body)

    def set_header(self, name, value):
        self.headers[name] = str(value)

    def get_header(self, name, default=None):
        return self.headers.get(name, default)

    def _head_and_body(self, first_line):
        head = first_line + CRLF
        head += "".join("%s%s%s%s" % (k, HEADER_SEPARATOR, v, CRLF) for k, v in self.headers.items())
        head += CRLF
        out = head.encode(ENCODING)
        if self.body is not None:
            out += self.body
        return out


class RtspRequest(RtspMessage):
    def __init__(self, method, uri, version, headers=None, body=None):
        RtspMessage.__init__(self, headers, body)
        self.method = method
        self.uri = uri
        self.version = version

    @property
    def method_type(self):
        return RtspMethod.from_token(self.method)

    def to_bytes(self):
        return self._head_and_body("%s %s %s" % (self.method, self.uri, self.version))

    def __repr__(self):
        return "RtspRequest(%s %s %s, headers=%r, body=%r)" % (self.method, self.uri, self.version, self.headers, self.body)


class RtspResponse(RtspMessage):
    def __init__(self, status_code, status_text, headers=None, body=None):
        RtspMessage.__init__(self, headers, body)
        self.status_code = status_code
        self.status_text = status_text

    def to_bytes(self):
        return format_response(self)

    def __repr__(self):
        return "RtspResponse(%d %s, headers=%r, body=%r)" % (self.status_code, self.status_text, self.headers, self.body)


def _parse_headers(lines):
    """Consumes header lines from the iterator up to the blank line.

    Lines without ": " are dropped on purpose, they never fail the parse.
    """
    headers = {}
    for line in lines:
        if line == "":
            break
        k, sep, v = line.partition(HEADER_SEPARATOR)
        if sep:
            headers[k] = v
    return headers


def _content_length(headers):
    length = headers.get("Content-Length")
    if length is None:
        return 0
    if not DIGITS.fullmatch(length):
        raise ParseError(ParseFailure.INVALID_CONTENT_LENGTH, length)
    return int(length)


def _parse_body(headers, lines):
    if _content_length(headers) == 0:
        return None
    # one CRLF segment is the body, the declared length is not checked against it
    segment = next(lines, None)
    if segment is None:
        return None
    return segment.encode(ENCODING)


def parse_request(raw):
    """Parses one request held entirely in raw (bytes or str).

    Raises ParseError when the request line has less than three tokens or
    Content-Length is not a non negative integer.
    """
    lines = iter(_text(raw).split(CRLF))
    first = next(lines)
    parts = first.split(" ")
    if len(parts) < 3:
        raise ParseError(ParseFailure.MALFORMED_REQUEST_LINE, first)
    method, uri, version = parts[:3]
    headers = _parse_headers(lines)
    body = _parse_body(headers, lines)
    return RtspRequest(method, uri, version, headers, body)


def parse_response(raw):
    """Client side counterpart of parse_request.

    The body is everything after the blank line, cut at Content-Length, so
    multi line bodies such as SDP come back whole.
    """
    head, _, rest = _text(raw).partition(CRLF + CRLF)
    lines = iter(head.split(CRLF))
    first = next(lines)
    parts = first.split(" ", 2)
    if len(parts) < 3 or not DIGITS.fullmatch(parts[1]):
        raise ParseError(ParseFailure.MALFORMED_STATUS_LINE, first)
    headers = _parse_headers(lines)
    length = _content_length(headers)
    body = rest[:length].encode(ENCODING) if length > 0 else None
    return RtspResponse(int(parts[1]), parts[2], headers, body)


def format_response(response):
    return response._head_and_body("%s %d %s" % (RTSP_VERSION, response.status_code, response.status_text))
