from pathlib import Path

from dev_session.runner import LogChunk, LogStream


def test_log_stream_notifies_listeners(tmp_path: Path) -> None:
    stream_path = tmp_path / "logs" / "build.log"
    received: list[LogChunk] = []
    with LogStream(stream_path) as stream:
        remove = stream.add_listener(received.append)
        stream.write("hello\n", source="setup", pid=10, stream="stdout")
        stream.write("oops\n", source="setup", pid=10, stream="stderr")
        remove()
        stream.write("tail\n", source="setup", pid=10)
    assert stream.closed
    assert stream_path.read_text() == "hello\noops\ntail\n"
    assert {chunk.stream for chunk in received} == {"stdout", "stderr"}
    assert {chunk.source for chunk in received} == {"setup"}


def test_log_stream_without_path_only_notifies() -> None:
    received: list[LogChunk] = []
    stream = LogStream()
    stream.add_listener(received.append)
    chunk = stream.write("line\n", source="dev:express", pid=None)
    assert received == [chunk]
    assert stream.path is None
    stream.close()
