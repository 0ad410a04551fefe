from __future__ import annotations

from datetime import datetime

import pytest

from lib_log_cascade.domain.filename import LogFileNamer, extract_timestamp, parse_timestamp, short_hostname
from lib_log_cascade.domain.severity import Severity

PREFIX = "prog.host.user.log."


@pytest.mark.parametrize(
    "name, expected",
    [
        ("prog.host.user.log.WARNING.20171202-210922.13848", "20171202-210922"),
        ("prog.host.user.log.INFO.20171202-132113.2841.gz", "20171202-132113"),
        ("prog.host.user.log.ERROR.20171202-132113.2841.1", "20171202-132113"),
        ("prog.host.user.log.FATAL.20171202-132113", "20171202-132113"),
        ("prog.host.user.log.WARNING.20171202-21092", ""),
        ("prog.host.user.log.WARNING.2017120x-210922.1", ""),
        ("prog.host.user.log.WARNING.20171202-2109221", ""),
        ("prog.host.user.log.DEBUG.20171202-210922.1", ""),
        ("other.host.user.log.INFO.20171202-210922.1", ""),
        ("WARNING.20171202-210922.1", ""),
        ("prog.host.user.log.", ""),
    ],
)
def test_extract_timestamp(name: str, expected: str) -> None:
    assert extract_timestamp(name, PREFIX) == expected


def test_file_name_parses_back_to_its_timestamp() -> None:
    namer = LogFileNamer("prog", "host", "user")
    moment = datetime(2017, 12, 2, 13, 21, 13)

    for severity in Severity:
        name = namer.file_name(severity, moment, 2841)
        assert name.startswith(namer.prefix())
        assert parse_timestamp(name, namer.prefix()) == moment


def test_parse_timestamp_rejects_impossible_dates() -> None:
    assert parse_timestamp(PREFIX + "INFO.20171302-132113.1", PREFIX) is None


def test_pointer_names_cover_every_severity() -> None:
    namer = LogFileNamer("prog", "host", "user")

    assert namer.pointer_name(Severity.ERROR) == "prog.ERROR"
    assert namer.pointer_names() == {"prog.INFO", "prog.WARNING", "prog.ERROR", "prog.FATAL"}


def test_short_hostname_strips_the_domain() -> None:
    assert short_hostname("web-01.eu.example.com") == "web-01"
    assert short_hostname("localhost") == "localhost"
