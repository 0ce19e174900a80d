"""Cheap checks for whether a file or text is an OpenAPI 3.x document."""

import re

OPENAPI_YAML = re.compile(r"""^openapi:\s*["']?3\.""", re.MULTILINE)
OPENAPI_JSON = re.compile(r'"openapi"\s*:\s*"3\.')

SPEC_SUFFIXES = (".yaml", ".yml", ".json")


def is_openapi_content(text: str) -> bool:
    return bool(OPENAPI_YAML.search(text) or OPENAPI_JSON.search(text))


def is_openapi_filename(filename: str) -> bool:
    return filename.lower().endswith(SPEC_SUFFIXES)
