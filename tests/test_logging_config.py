from __future__ import annotations

import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.monitor",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Rejected feed update",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_extra_keys() -> None:
    formatter = ContextualFormatter(fmt="%(levelname)s %(message)s")

    message = formatter.format(_record(feed_path="/sensors", reason="missing field", unknown="x"))

    assert message == "WARNING Rejected feed update | feed_path=/sensors reason=missing field"


def test_formatter_skips_none_values() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["level"])

    assert formatter.format(_record(level=None)) == "Rejected feed update"
    assert formatter.format(_record(level="critical")) == "Rejected feed update | level=critical"
