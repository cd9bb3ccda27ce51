import json
import logging

import pytest

from vizengine.services import ChartEvent, EventBus, LoggingService


@pytest.fixture
def engine_logger():
    logger = logging.getLogger("vizengine.tests")
    root = logging.getLogger("vizengine")
    level = root.level
    yield logger
    root.setLevel(level)


def test_capture_and_capacity(engine_logger):
    svc = LoggingService(capacity=3)
    svc.attach()
    try:
        for i in range(5):
            engine_logger.info("message %d", i)
    finally:
        svc.detach()
    assert [e.message for e in svc.recent()] == ["message 2", "message 3", "message 4"]
    assert [e.message for e in svc.recent(1)] == ["message 4"]
    engine_logger.info("after detach")
    assert len(svc.recent()) == 3
    assert not svc.attached


def test_filter_by_level_and_name(engine_logger):
    svc = LoggingService()
    svc.attach()
    try:
        engine_logger.warning("careful")
        engine_logger.debug("details")
        logging.getLogger("vizengine.other").debug("elsewhere")
    finally:
        svc.detach()
    assert [e.message for e in svc.filter(level="WARNING")] == ["careful"]
    assert [e.message for e in svc.filter(name_contains="other")] == ["elsewhere"]
    svc.clear()
    assert svc.recent() == []


def test_records_are_published_on_the_bus(engine_logger):
    bus = EventBus()
    payloads = []
    bus.subscribe(ChartEvent.ENGINE_LOG, lambda e: payloads.append(e.payload))
    svc = LoggingService(bus=bus)
    svc.attach()
    try:
        engine_logger.warning("frame dropped")
    finally:
        svc.detach()
    assert payloads == [{"level": "WARNING", "name": "vizengine.tests", "message": "frame dropped"}]


def test_failing_log_handler_does_not_recurse(engine_logger):
    bus = EventBus()

    def bad(_):
        raise RuntimeError("sink down")

    bus.subscribe(ChartEvent.ENGINE_LOG, bad)
    svc = LoggingService(bus=bus)
    svc.attach()
    try:
        engine_logger.info("hello")
    finally:
        svc.detach()
    messages = [e.message for e in svc.recent()]
    assert messages[0] == "hello"
    assert any("sink down" in m for m in messages[1:])
    assert len(bus.errors) == 1


def test_export_jsonl(tmp_path, engine_logger):
    svc = LoggingService()
    svc.attach()
    try:
        engine_logger.info("one")
        engine_logger.error("two")
    finally:
        svc.detach()
    target = tmp_path / "log.jsonl"
    assert svc.export_jsonl(str(target), level="ERROR") == 1
    rows = [json.loads(line) for line in target.read_text(encoding="utf-8").splitlines()]
    assert rows[0]["message"] == "two"
    assert rows[0]["level"] == "ERROR"
    assert svc.export_jsonl(str(target), append=True) == 2
    assert len(target.read_text(encoding="utf-8").splitlines()) == 3
