import pytest

from rtsp_dispatch import SDP_BODY, dispatch, make_response
from rtsp_message import RtspRequest, parse_request


def request(method, **headers):
    return RtspRequest(method, "rtsp://example.com/test", "RTSP/1.0", headers)


def test_options():
    r = dispatch(parse_request("OPTIONS rtsp://example.com/test RTSP/1.0\r\nCSeq: 1\r\n\r\n"))
    assert (r.status_code, r.status_text) == (200, "OK")
    assert r.headers == {"Public": "OPTIONS, DESCRIBE, SETUP, PLAY, PAUSE, TEARDOWN"}
    assert r.body is None


def test_describe():
    r = dispatch(request("DESCRIBE", Accept="application/sdp"))
    assert r.status_code == 200
    assert r.headers["Content-Type"] == "application/sdp"
    assert r.headers["Content-Length"] == str(len(SDP_BODY))
    assert r.body == SDP_BODY


def test_sdp_body():
    lines = SDP_BODY.split(b"\r\n")
    assert lines[0] == b"v=0"
    assert b"m=video 0 RTP/AVP 96" in lines
    assert b"a=rtpmap:96 H264/90000" in lines


def test_setup():
    r = dispatch(request("SETUP", Transport="RTP/AVP;unicast;client_port=5000-5001"))
    assert r.status_code == 200
    assert r.headers["Session"] == "12345"
    # client transport is not negotiated
    assert r.headers["Transport"] == "RTP/AVP;unicast;client_port=8000-8001;server_port=9000-9001"
    assert "server_port=" in r.headers["Transport"]


def test_play():
    r = dispatch(request("PLAY", Session="999"))
    assert r.status_code == 200
    assert r.headers == {"Session": "12345", "Range": "npt=0.000-"}


def test_pause():
    r = dispatch(request("PAUSE"))
    assert (r.status_code, r.headers, r.body) == (200, {"Session": "12345"}, None)


def test_teardown():
    r = dispatch(request("TEARDOWN"))
    assert (r.status_code, r.status_text, r.headers, r.body) == (200, "OK", {}, None)


@pytest.mark.parametrize("method", ["ANNOUNCE", "RECORD", "GET_PARAMETER", "options", "UNKNOWN"])
def test_not_implemented(method):
    r = dispatch(request(method))
    assert (r.status_code, r.status_text) == (501, "Not Implemented")
    assert r.headers == {}
    assert r.body is None


def test_responses_are_not_shared():
    a = dispatch(request("PAUSE"))
    a.set_header("Session", "changed")
    assert dispatch(request("PAUSE")).headers["Session"] == "12345"


def test_describe_wire_form():
    out = dispatch(request("DESCRIBE")).to_bytes()
    head, _, body = out.partition(b"\r\n\r\n")
    assert head.startswith(b"RTSP/1.0 200 OK\r\n")
    assert body == SDP_BODY


def test_make_response_not_found():
    r = make_response(404)
    assert r.to_bytes() == b"RTSP/1.0 404 Not Found\r\n\r\n"
