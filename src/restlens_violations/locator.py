"""
Violation locator - maps violation keys back onto the raw spec text

The rule engine reports violations against a parsed document, so its keys
carry no offsets. Each key type has an ordered table of probes that search
the unparsed JSON or YAML text; the first probe that matches wins. Nothing
here raises: an unresolved key lands on the first line of the document.
"""

import logging
import re
from typing import Callable, NamedTuple, Optional, assert_never

from .models import (
    HttpCodeKey,
    InfoKey,
    LinePosition,
    OperationKey,
    PathKey,
    SchemaKey,
    SystemKey,
    TagKey,
    ViolationKey,
)

logger = logging.getLogger(__name__)

# (offset, length) of a match in the full text
Span = tuple[int, int]
Finder = Callable[[str, int, int], Optional[Span]]


class Probe(NamedTuple):
    """A named search step; find(text, start, end) looks only inside [start, end)"""

    name: str
    find: Finder

    def __call__(self, text: str, start: int = 0, end: Optional[int] = None) -> Optional[Span]:
        return self.find(text, start, len(text) if end is None else end)


PATHS_SECTION_YAML = re.compile(r"^paths:\s*$", re.MULTILINE)
PATHS_SECTION_JSON = re.compile(r'"paths"\s*:\s*\{')
TOP_LEVEL_KEY = re.compile(r"\n[a-zA-Z][a-zA-Z0-9]*:")
NEXT_SCHEMA = re.compile(r"\n {2}[A-Z][a-zA-Z0-9]*:")
SCHEMA_PROPERTY_MESSAGE = re.compile(r"Schema property '([^']+)'")
UNDERSCORE_PATH = re.compile(r"""^[ \t]*["']?(/[^\s"':]*_[^\s"':]*)["']?[ \t]*:""", re.MULTILINE)

OPERATION_ID_PATTERNS = (
    "operationId: {}",
    'operationId: "{}"',
    "operationId: '{}'",
    '"operationId": "{}"',
)
TAG_PATTERNS = (
    "- {}",
    '- "{}"',
    "- '{}'",
    "name: {}",
    'name: "{}"',
    "name: '{}'",
)


def _is_name_char(char: str) -> bool:
    return char.isalnum() or char in "_-"


def _unquoted(pattern: str) -> bool:
    return pattern.endswith("{}")


# -----------------------------------------------------------------------------
# Probe builders
# -----------------------------------------------------------------------------


def literal(pattern: str, prefix: str = "", bounded: bool = False) -> Probe:
    """Literal substring search.

    The prefix must precede the pattern but is not part of the reported span.
    A bounded pattern is rejected when it runs straight into a longer name
    (``getPet`` must not match ``getPets``).
    """
    needle = prefix + pattern

    def find(text: str, start: int, end: int) -> Optional[Span]:
        index = text.find(needle, start, end)
        while index != -1:
            after = index + len(needle)
            if not (bounded and after < len(text) and _is_name_char(text[after])):
                return index + len(prefix), len(pattern)
            index = text.find(needle, index + 1, end)
        return None

    return Probe(repr(needle), find)


def regex(pattern: re.Pattern, group: int = 0) -> Probe:
    """Regex search; the span runs from the start of `group` to the end of the match"""

    def find(text: str, start: int, end: int) -> Optional[Span]:
        match = pattern.search(text, start, end)
        if match is None:
            return None
        return match.start(group), match.end() - match.start(group)

    return Probe(pattern.pattern, find)


def key_probes(name: str) -> list[Probe]:
    """A mapping key written bare (YAML), double-quoted (JSON) or single-quoted"""
    return [
        regex(re.compile(r"(?<![\w$./#'\"-])" + re.escape(name) + ":")),
        literal(f'"{name}":'),
        literal(f"'{name}':"),
    ]


def paths_section(text: str) -> Optional[tuple[int, int]]:
    """Bounds of the top-level paths section, or None when there is none.

    The section ends at the next column-0 key, so JSON documents (whose keys
    are indented) run to the end of the text.
    """
    match = PATHS_SECTION_YAML.search(text) or PATHS_SECTION_JSON.search(text)
    if match is None:
        return None

    start = match.start()
    next_section = TOP_LEVEL_KEY.search(text, start)
    end = next_section.start() if next_section else len(text)
    return start, end


def within_paths(probe: Probe) -> Probe:
    def find(text: str, start: int, end: int) -> Optional[Span]:
        section = paths_section(text)
        if section is None:
            return None
        return probe(text, *section)

    return Probe(f"paths:{probe.name}", find)


def path_segments(path: str) -> list[str]:
    """Literal segments of a path template, parameters like {id} skipped"""
    return [s for s in path.split("/") if s and not s.startswith("{")]


def segment_pattern(segment: str) -> re.Pattern:
    """A path key line whose path has `segment` as one of its segments"""
    return re.compile(
        r"""^[ \t]*["']?(/(?:[^\s"':]*/)?"""
        + re.escape(segment)
        + r"""(?:/[^\s"':]*)?)["']?[ \t]*:""",
        re.MULTILINE,
    )


def schema_name(schema_path: str) -> str:
    parts = re.sub(r"^#/", "", schema_path).split("/")
    return parts[-1] or schema_path


def first_match(probes: list[Probe], text: str, start: int = 0, end: Optional[int] = None) -> Optional[Span]:
    for probe in probes:
        span = probe(text, start, end)
        if span is not None:
            return span
    return None


def schema_property(name: str, property_name: str) -> Probe:
    """A property key inside the named schema's block.

    The block runs from the schema key to the next two-space indented
    capitalised key (or the end of the document).
    """

    def find(text: str, start: int, end: int) -> Optional[Span]:
        schema = first_match(key_probes(name), text, start, end)
        if schema is None:
            return None

        schema_start = schema[0]
        next_schema = NEXT_SCHEMA.search(text, schema_start, end)
        schema_end = next_schema.start() if next_schema else end
        return first_match(key_probes(property_name), text, schema_start, schema_end)

    return Probe(f"{name}.{property_name}", find)


# -----------------------------------------------------------------------------
# Probe tables, one per key type
# -----------------------------------------------------------------------------


def operation_probes(operation_id: Optional[str], path: Optional[str]) -> list[Probe]:
    """operationId forms in priority order, then the path as a fallback.

    The unquoted form is not a plain substring match: `operationId: getPet`
    is skipped where it continues into `getPets`, and the search moves on.
    """
    probes = []
    if operation_id:
        probes += [
            literal(pattern.format(operation_id), bounded=_unquoted(pattern))
            for pattern in OPERATION_ID_PATTERNS
        ]
    if path:
        probes += path_probes(path)
    return probes


def path_probes(path: Optional[str], message: Optional[str] = None) -> list[Probe]:
    probes = []
    if path:
        probes += [
            within_paths(literal(f"{path}:", prefix="\n  ")),
            within_paths(literal(f"{path}:", prefix="\n    ")),
            within_paths(literal(f'"{path}":')),
            within_paths(literal(f"'{path}':")),
        ]
    # Underscore rules may report a normalised path that isn't in the document
    if message and "underscore" in message.lower():
        probes.append(within_paths(regex(UNDERSCORE_PATH, group=1)))
    if path:
        probes += [within_paths(regex(segment_pattern(s), group=1)) for s in path_segments(path)]
    return probes


def schema_probes(schema_path: Optional[str], message: Optional[str] = None) -> list[Probe]:
    if not schema_path:
        return []

    name = schema_name(schema_path)
    probes = []
    match = SCHEMA_PROPERTY_MESSAGE.search(message or "")
    if match:
        probes.append(schema_property(name, match.group(1)))
    return probes + key_probes(name)


def http_code_probes(http_code: Optional[str], operation_id: Optional[str], path: Optional[str]) -> list[Probe]:
    if not http_code:
        return []
    return key_probes(http_code) + operation_probes(operation_id, path)


def tag_probes(tag: Optional[str]) -> list[Probe]:
    """List-item forms before `name:` forms; unquoted forms must end at the tag"""
    if not tag:
        return []
    return [literal(pattern.format(tag), bounded=_unquoted(pattern)) for pattern in TAG_PATTERNS]


def info_probes() -> list[Probe]:
    return key_probes("info")


def probes_for(key: ViolationKey, message: Optional[str] = None) -> list[Probe]:
    """Ordered search steps for a key; earlier probes take priority"""
    if isinstance(key, OperationKey):
        return operation_probes(key.operation_id, key.path)
    if isinstance(key, PathKey):
        return path_probes(key.path, message)
    if isinstance(key, SchemaKey):
        return schema_probes(key.schema_path, message)
    if isinstance(key, HttpCodeKey):
        return http_code_probes(key.http_code, key.operation_id, key.path)
    if isinstance(key, TagKey):
        return tag_probes(key.tag)
    if isinstance(key, InfoKey):
        return info_probes()
    if isinstance(key, SystemKey):
        return []
    assert_never(key)


# -----------------------------------------------------------------------------
# Locator
# -----------------------------------------------------------------------------


class ViolationLocator:
    """Resolves violation keys against one raw spec document"""

    def __init__(self, text: str):
        self.text = text
        self.lines = text.split("\n")

    @property
    def default_position(self) -> LinePosition:
        return LinePosition.default(self.lines)

    def find_span(self, key: ViolationKey, message: Optional[str] = None) -> Optional[Span]:
        for probe in probes_for(key, message):
            span = probe(self.text)
            if span is not None:
                logger.debug("Located %r via %s", key, probe.name)
                return span
        return None

    def locate(self, key: ViolationKey, message: Optional[str] = None) -> LinePosition:
        """Best-effort position for a key; never raises"""
        try:
            span = self.find_span(key, message)
        except Exception:
            logger.debug("Matching failed for %r, using default position", key, exc_info=True)
            return self.default_position

        if span is None:
            if not isinstance(key, SystemKey):
                logger.debug("No location found for %r", key)
            return self.default_position

        offset, length = span
        return LinePosition.from_offset(self.lines, offset, length)


def locate(key: ViolationKey, text: str, message: Optional[str] = None) -> LinePosition:
    """Find the line position for a violation in the spec text."""
    return ViolationLocator(text).locate(key, message)
