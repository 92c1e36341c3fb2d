"""Query report model and parser."""

from useralt.query.models import NO_CURRENT_VALUE, Candidate, GroupReport
from useralt.query.parser import ParserState, Transition, parse_query_report, parse_query_text

__all__ = [
    "NO_CURRENT_VALUE",
    "Candidate",
    "GroupReport",
    "ParserState",
    "Transition",
    "parse_query_report",
    "parse_query_text",
]
