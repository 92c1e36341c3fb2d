"""State-machine parser for the textual report of an alternatives query.

The report is line oriented::

    Name: pager
    Link: /usr/bin/pager
    Slaves:
     pager.1.gz /usr/share/man/man1/pager.1.gz
    Status: auto
    Best: /usr/bin/less
    Value: /usr/bin/less

    Alternative: /usr/bin/less
    Priority: 77
    Slaves:
     pager.1.gz /usr/share/man/man1/less.1.gz

Each state inspects one line and returns a `Transition`. When a transition is
not `consumed`, the driver re-evaluates the same line against the new state.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

from useralt.errors import ParseError
from useralt.query.models import Candidate, GroupReport

LOGGER = logging.getLogger(__name__)

SLAVES_HEADER = "Slaves:"
_SLAVE_LINE = re.compile(r"^ (?P<name>\S+) (?P<value>.+)$")
_PRIORITY = re.compile(r"^[0-9]+$")


class ParserState(Enum):
    """Closed set of parser states, in report order."""

    NAME = "name"
    LINK = "link"
    MAYBE_SLAVES_HEADER = "maybe_slaves_header"
    SLAVE_ENTRY = "slave_entry"
    STATUS = "status"
    BEST = "best"
    VALUE = "value"
    MAYBE_ALT_START = "maybe_alt_start"
    ALT_VALUE = "alt_value"
    ALT_PRIORITY = "alt_priority"
    MAYBE_ALT_SLAVES_HEADER = "maybe_alt_slaves_header"
    MAYBE_ALT_SLAVE_ENTRY = "maybe_alt_slave_entry"


TERMINAL_STATES: frozenset[ParserState] = frozenset(
    {
        ParserState.MAYBE_ALT_START,
        ParserState.MAYBE_ALT_SLAVES_HEADER,
        ParserState.MAYBE_ALT_SLAVE_ENTRY,
    }
)


class Transition(NamedTuple):
    state: ParserState
    consumed: bool = True


@dataclass(slots=True)
class _CandidateDraft:
    value: str
    priority: int | None = None
    secondary_values: dict[int, str] = field(default_factory=dict)


@dataclass(slots=True)
class _ReportBuilder:
    """Fields accumulated while one report is parsed."""

    name: str = ""
    primary_link: str = ""
    slave_names: list[str] = field(default_factory=list)
    slave_links: list[str] = field(default_factory=list)
    status: str = ""
    best_value: str = ""
    current_value: str = ""
    best_index: int | None = None
    current_index: int | None = None
    candidates: list[_CandidateDraft] = field(default_factory=list)

    def build(self) -> GroupReport:
        return GroupReport(
            name=self.name,
            primary_link=self.primary_link,
            slave_names=tuple(self.slave_names),
            slave_links=tuple(self.slave_links),
            status=self.status,
            best_value=self.best_value,
            current_value=self.current_value,
            candidates=tuple(
                Candidate(
                    value=draft.value,
                    priority=draft.priority if draft.priority is not None else 0,
                    secondary_values=draft.secondary_values,
                )
                for draft in self.candidates
            ),
            best_index=self.best_index,
            current_index=self.current_index,
        )


class _LineError(Exception):
    """Internal signal carrying a message; positional context is added by the driver."""


def _field_value(line: str, label: str) -> str:
    prefix = f"{label}: "
    if not line.startswith(prefix) or line == prefix:
        raise _LineError(f"Malformed {label} field")
    return line[len(prefix):]


def _on_name(builder: _ReportBuilder, line: str) -> Transition:
    builder.name = _field_value(line, "Name")
    return Transition(ParserState.LINK)


def _on_link(builder: _ReportBuilder, line: str) -> Transition:
    builder.primary_link = _field_value(line, "Link")
    return Transition(ParserState.MAYBE_SLAVES_HEADER)


def _on_maybe_slaves_header(builder: _ReportBuilder, line: str) -> Transition:
    if line == SLAVES_HEADER:
        return Transition(ParserState.SLAVE_ENTRY)
    return Transition(ParserState.STATUS, consumed=False)


def _on_slave_entry(builder: _ReportBuilder, line: str) -> Transition:
    match = _SLAVE_LINE.match(line)
    if match is None:
        return Transition(ParserState.STATUS, consumed=False)
    slave_name = match.group("name")
    if slave_name in builder.slave_names:
        raise _LineError(f"Duplicate slave {slave_name!r}")
    builder.slave_names.append(slave_name)
    builder.slave_links.append(match.group("value"))
    return Transition(ParserState.SLAVE_ENTRY)


def _on_status(builder: _ReportBuilder, line: str) -> Transition:
    builder.status = _field_value(line, "Status")
    return Transition(ParserState.BEST)


def _on_best(builder: _ReportBuilder, line: str) -> Transition:
    builder.best_value = _field_value(line, "Best")
    return Transition(ParserState.VALUE)


def _on_value(builder: _ReportBuilder, line: str) -> Transition:
    builder.current_value = _field_value(line, "Value")
    return Transition(ParserState.MAYBE_ALT_START)


def _on_maybe_alt_start(builder: _ReportBuilder, line: str) -> Transition:
    if line != "":
        raise _LineError("Expected blank line before alternative block")
    return Transition(ParserState.ALT_VALUE)


def _on_alt_value(builder: _ReportBuilder, line: str) -> Transition:
    value = _field_value(line, "Alternative")
    index = len(builder.candidates)
    builder.candidates.append(_CandidateDraft(value=value))
    if builder.best_index is None and value == builder.best_value:
        builder.best_index = index
    if builder.current_index is None and value == builder.current_value:
        builder.current_index = index
    return Transition(ParserState.ALT_PRIORITY)


def _on_alt_priority(builder: _ReportBuilder, line: str) -> Transition:
    raw_priority = _field_value(line, "Priority")
    if _PRIORITY.match(raw_priority) is None:
        raise _LineError("Malformed Priority field")
    builder.candidates[-1].priority = int(raw_priority)
    return Transition(ParserState.MAYBE_ALT_SLAVES_HEADER)


def _on_maybe_alt_slaves_header(builder: _ReportBuilder, line: str) -> Transition:
    if line == SLAVES_HEADER:
        return Transition(ParserState.MAYBE_ALT_SLAVE_ENTRY)
    return Transition(ParserState.MAYBE_ALT_START, consumed=False)


def _on_maybe_alt_slave_entry(builder: _ReportBuilder, line: str) -> Transition:
    match = _SLAVE_LINE.match(line)
    if match is None:
        return Transition(ParserState.MAYBE_ALT_START, consumed=False)
    slave_name = match.group("name")
    try:
        slave_index = builder.slave_names.index(slave_name)
    except ValueError:
        LOGGER.debug("query_parser.unknown_slave name=%s slave=%s", builder.name, slave_name)
        return Transition(ParserState.MAYBE_ALT_SLAVE_ENTRY)
    builder.candidates[-1].secondary_values[slave_index] = match.group("value")
    return Transition(ParserState.MAYBE_ALT_SLAVE_ENTRY)


_HANDLERS: dict[ParserState, Callable[[_ReportBuilder, str], Transition]] = {
    ParserState.NAME: _on_name,
    ParserState.LINK: _on_link,
    ParserState.MAYBE_SLAVES_HEADER: _on_maybe_slaves_header,
    ParserState.SLAVE_ENTRY: _on_slave_entry,
    ParserState.STATUS: _on_status,
    ParserState.BEST: _on_best,
    ParserState.VALUE: _on_value,
    ParserState.MAYBE_ALT_START: _on_maybe_alt_start,
    ParserState.ALT_VALUE: _on_alt_value,
    ParserState.ALT_PRIORITY: _on_alt_priority,
    ParserState.MAYBE_ALT_SLAVES_HEADER: _on_maybe_alt_slaves_header,
    ParserState.MAYBE_ALT_SLAVE_ENTRY: _on_maybe_alt_slave_entry,
}


def parse_query_report(lines: Iterable[str]) -> GroupReport:
    """Parse the lines of one query report into a frozen `GroupReport`.

    Trailing line terminators are ignored. Any line that does not fit the
    current state aborts the parse with `ParseError`; no partial report is
    returned.
    """

    builder = _ReportBuilder()
    state = ParserState.NAME
    for line_no, raw_line in enumerate(lines, start=1):
        line = raw_line.rstrip("\r\n")
        while True:
            try:
                transition = _HANDLERS[state](builder, line)
            except _LineError as exc:
                raise ParseError(str(exc), line_no=line_no, line=line, state=state.value) from None
            state = transition.state
            if transition.consumed:
                break

    if state not in TERMINAL_STATES:
        raise ParseError(f"Unexpected end of input in state {state.value}", state=state.value)
    return builder.build()


def parse_query_text(text: str) -> GroupReport:
    """Parse a complete report held in one string."""

    return parse_query_report(text.splitlines())
