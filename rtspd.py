# rtspd --port=8554 --logging=debug
# ffplay rtsp://127.0.0.1:8554/test  (control only, no media is ever sent)
import signal

from tornado.options import define, options, parse_command_line

from rtsp_server import DEFAULT_ADDRESS, DEFAULT_PORT, RECV_BUFFER_SIZE, RTSPServer

define("port", default=DEFAULT_PORT, type=int, help="RTSP port")
define("address", default=DEFAULT_ADDRESS, help="address to bind, all interfaces by default")
define("buffer_size", default=RECV_BUFFER_SIZE, type=int, help="bytes per read, one request per read")
define("sequential", default=True, type=bool, help="serve one connection at a time")


def main(args=None):
    # also sets up tornado log formatting, see --logging
    parse_command_line(args)
    server = RTSPServer(options.port, options.address, options.buffer_size, options.sequential)
    signal.signal(signal.SIGINT, lambda x, y: server.stop())
    signal.signal(signal.SIGTERM, lambda x, y: server.stop())
    server.serve_forever()


if __name__ == "__main__":
    main()
