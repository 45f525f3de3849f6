import logging

from termcolor import colored
from tornado import gen
from tornado.ioloop import IOLoop
from tornado.iostream import StreamClosedError
from tornado.locks import Lock
from tornado.tcpserver import TCPServer

from rtsp_dispatch import dispatch
from rtsp_message import ParseError, parse_request

log = logging.getLogger("rtsp")

DEFAULT_PORT = 8554
DEFAULT_ADDRESS = "0.0.0.0"
RECV_BUFFER_SIZE = 4096
ACCEPT_BACKLOG = 128


class RTSPServer(TCPServer):
    """RTSP control channel server.

    Every read from a connection is taken as exactly one request, nothing is
    buffered across reads. With sequential=True (the default) a connection is
    served to the end before the next accepted one is read from.

    An accept() failure other than would-block or an aborted connection stops
    the server, serve_forever() then raises it.
    """

    def __init__(self, port=DEFAULT_PORT, address=DEFAULT_ADDRESS, buffer_size=RECV_BUFFER_SIZE, sequential=True):
        TCPServer.__init__(self)
        self.port = port
        self.address = address
        self.buffer_size = buffer_size
        self.sequential = sequential
        self.accept_error = None
        self._serial = Lock()
        self._loop = None
        self._shutdown = False

    def ports(self):
        return [sock.getsockname()[1] for sock in self._sockets.values() if sock.fileno() != -1]

    def add_sockets(self, sockets):
        loop = IOLoop.current()
        for sock in sockets:
            self._sockets[sock.fileno()] = sock
            self._handlers[sock.fileno()] = self._add_accept_handler(loop, sock)

    def _add_accept_handler(self, loop, sock):
        # same as tornado.netutil.add_accept_handler, except fatal errors stop us
        removed = [False]

        def on_accept(fd, events):
            for i in range(ACCEPT_BACKLOG):
                if removed[0]:
                    return
                try:
                    connection, address = sock.accept()
                except BlockingIOError:
                    return
                except ConnectionAbortedError:
                    continue
                except OSError as e:
                    log.error("RTSP accept failed: %s", e)
                    remove_handler()
                    self.accept_error = e
                    self.stop()
                    return
                self._handle_connection(connection, address)

        def remove_handler():
            loop.remove_handler(sock)
            removed[0] = True

        loop.add_handler(sock, on_accept, IOLoop.READ)
        return remove_handler

    def serve_forever(self):
        """Listens (unless sockets were added already) and blocks until stop()"""
        self._loop = IOLoop.current()
        # stop() may already have run, before any socket existed
        if self._shutdown:
            log.info("RTSP server stopped")
            return
        if not self._sockets:
            self.listen(self.port, address=self.address)
        log.info("RTSP listening on %s:%s", self.address, self.ports())
        self._loop.start()
        log.info("RTSP server stopped")
        if self.accept_error is not None:
            raise self.accept_error

    def stop(self):
        # may come from a signal handler or another thread
        if self._shutdown:
            return
        self._shutdown = True
        if self._loop is None:
            TCPServer.stop(self)
        else:
            self._loop.add_callback(self._stop_loop)

    def _stop_loop(self):
        TCPServer.stop(self)
        self._loop.stop()

    @gen.coroutine
    def handle_stream(self, stream, address):
        if not self.sequential:
            yield self.serve_connection(stream, address)
            return
        with (yield self._serial.acquire()):
            yield self.serve_connection(stream, address)

    @gen.coroutine
    def serve_connection(self, stream, address):
        log.info("RTSP connection from %s", address)
        try:
            while True:
                data = yield stream.read_bytes(self.buffer_size, partial=True)
                if not data:
                    break
                log.debug("RTSP raw request from %s %r", address, data)
                try:
                    request = parse_request(data)
                except ParseError as e:
                    # no reply and the connection stays open
                    log.warning("RTSP bad request from %s: %s", address, e)
                    continue
                log.info("RTSP %s %s from %s", colored(request.method, "red"), request.uri, address)
                response = dispatch(request)
                out = response.to_bytes()
                log.info("RTSP response: %s %s", colored(str(response.status_code), "green"), response.status_text)
                log.debug("RTSP raw response %r", out)
                yield stream.write(out)
        except StreamClosedError as e:
            if e.real_error is not None:
                log.warning("RTSP connection %s failed: %s", address, e.real_error)
            else:
                log.info("RTSP client %s left", address)
        finally:
            stream.close()
