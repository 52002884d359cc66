from dynamics_assistant.query.executor import QueryExecutor
from dynamics_assistant.query.filter_builder import build_filter, build_param_filter
from dynamics_assistant.query.nl_parser import NaturalLanguageParser, NLQueryService
from dynamics_assistant.query.shorthand import ShorthandCommandService, parse_command

__all__ = [
    "QueryExecutor",
    "build_filter",
    "build_param_filter",
    "NaturalLanguageParser",
    "NLQueryService",
    "ShorthandCommandService",
    "parse_command",
]
