from dev_session.runner import MuteLatch, should_silence


def test_boolean_silence_is_constant() -> None:
    assert should_silence(True, "anything")
    assert not should_silence(False, "anything")


def test_predicate_is_asked_each_time() -> None:
    calls: list[str] = []

    def predicate(chunk: str) -> bool:
        calls.append(chunk)
        return chunk.startswith("debug")

    assert should_silence(predicate, "debug: a")
    assert not should_silence(predicate, "info: b")
    assert calls == ["debug: a", "info: b"]


def test_latch_is_one_way() -> None:
    latch = MuteLatch()
    assert should_silence(latch, "x")
    latch.release()
    assert latch.released
    assert not should_silence(latch, "x")
    latch.release()
    assert not latch("y")


def test_latch_can_start_released() -> None:
    latch = MuteLatch(muted=False)
    assert latch.released
    assert not should_silence(latch, "x")
