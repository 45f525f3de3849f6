# Fixed replies for the six RTSP methods we know about, 501 for the rest.
# No handler looks at the request: there are no sessions, the id is constant.
from rtsp_message import RtspMethod, RtspResponse

STATUS_TEXT = {
    200: "OK",
    404: "Not Found",
    501: "Not Implemented",
}

PUBLIC_METHODS = "OPTIONS, DESCRIBE, SETUP, PLAY, PAUSE, TEARDOWN"
SESSION_ID = "12345"
TRANSPORT = "RTP/AVP;unicast;client_port=8000-8001;server_port=9000-9001"
PLAY_RANGE = "npt=0.000-"

# one H264 stream, port 0 and origin are placeholders
SDP_BODY = b"\r\n".join([
    b"v=0",
    b"o=- 0 0 IN IP4 127.0.0.1",
    b"s=RTSP Session",
    b"c=IN IP4 0.0.0.0",
    b"t=0 0",
    b"m=video 0 RTP/AVP 96",
    b"a=rtpmap:96 H264/90000",
    b"",
])


def make_response(code, headers=None, body=None):
    return RtspResponse(code, STATUS_TEXT[code], headers, body)


def handle_options(request):
    return make_response(200, {"Public": PUBLIC_METHODS})


def handle_describe(request):
    r = make_response(200, {"Content-Type": "application/sdp"}, SDP_BODY)
    r.set_header("Content-Length", len(SDP_BODY))
    return r


def handle_setup(request):
    return make_response(200, {"Session": SESSION_ID, "Transport": TRANSPORT})


def handle_play(request):
    return make_response(200, {"Session": SESSION_ID, "Range": PLAY_RANGE})


def handle_pause(request):
    return make_response(200, {"Session": SESSION_ID})


def handle_teardown(request):
    return make_response(200)


def handle_not_implemented(request):
    return make_response(501)


HANDLERS = {
    RtspMethod.OPTIONS: handle_options,
    RtspMethod.DESCRIBE: handle_describe,
    RtspMethod.SETUP: handle_setup,
    RtspMethod.PLAY: handle_play,
    RtspMethod.PAUSE: handle_pause,
    RtspMethod.TEARDOWN: handle_teardown,
}


def dispatch(request):
    """Returns a new RtspResponse for request, never raises"""
    handler = HANDLERS.get(request.method_type, handle_not_implemented)
    return handler(request)
