import logging
import threading
from typing import Iterable


logger = logging.getLogger("keycloak_testcontainer")
""" Library logger; container output is logged by its `container` child. """

container_logger = logger.getChild("container")


def log(msg: object, level: int = logging.INFO) -> None:
    """ Logs `msg` with the library logger. Exceptions are logged with their traceback. """
    if isinstance(msg, BaseException):
        logger.log(level, "%s", msg, exc_info=msg)
    else:
        logger.log(level, "%s", msg)


def _decode_lines(chunks: Iterable[bytes]) -> Iterable[str]:
    """ Splits a stream of raw log chunks into decoded lines. """
    buffer = b""
    for chunk in chunks:
        buffer += chunk
        *lines, buffer = buffer.split(b"\n")
        for line in lines:
            yield line.decode("utf-8", errors="replace").rstrip("\r")
    if buffer:
        yield buffer.decode("utf-8", errors="replace").rstrip("\r")


class ContainerLogFollower:
    """
    Forwards output of a running container to `container_logger`
    in a background thread, until the container's log stream is closed.
    """
    def __init__(self, name: str, stream: Iterable[bytes], level: int = logging.DEBUG):
        self.name = name
        """ Prefix of forwarded lines. """
        self.level = level
        self._stream = stream
        self._thread = threading.Thread(
            target=self._follow,
            name=f"{name}-log-follower",
            daemon=True
        )

    def start(self) -> None:
        self._thread.start()

    def _follow(self) -> None:
        for line in _decode_lines(self._stream):
            container_logger.log(self.level, "%s > %s", self.name, line)


def log_container_output(name: str, output: bytes, level: int = logging.ERROR) -> None:
    """ Logs complete `output` of a container in a single record. """
    container_logger.log(level, "%s logs:\n%s", name, output.decode("utf-8", errors="replace"))
