"""
Steam app manifest helpers.

Extracts build ids from appmanifest_<appid>.acf contents and from the
steamcmd.net info document.
"""

import re
from typing import Any

from satisfactory.core.errors import ParseError

BUILD_ID_PATTERN = re.compile(r'"buildid"\s+"(\d+)"')


def parse_manifest_build_id(text: str) -> int:
    """
    Extract the installed build id from an app manifest.

    Args:
        text: Raw appmanifest .acf contents

    Returns:
        Build id as an integer

    Raises:
        ParseError: If no ``"buildid" "<digits>"`` token is present

    Examples:
        >>> parse_manifest_build_id('"buildid"\\t\\t"100"')
        100
    """
    match = BUILD_ID_PATTERN.search(text or "")
    if not match:
        raise ParseError("Build id not found in app manifest", payload=text)
    return int(match.group(1))


def extract_latest_build_id(document: Any, app_id: str) -> int:
    """
    Extract the public branch build id from a steamcmd.net info document.

    The value lives at ``data[app_id].depots.branches.public.buildid`` and is
    usually a numeric string.

    Raises:
        ParseError: If the field is missing or not a non-negative integer
    """
    try:
        raw = document["data"][str(app_id)]["depots"]["branches"]["public"]["buildid"]
    except (KeyError, TypeError) as e:
        raise ParseError(f"Build id missing from version info: {e}", payload=document) from e

    if isinstance(raw, bool):
        raise ParseError(f"Build id is not numeric: {raw!r}", payload=document)

    try:
        build_id = int(str(raw).strip(), 10)
    except ValueError as e:
        raise ParseError(f"Build id is not numeric: {raw!r}", payload=document) from e

    if build_id < 0:
        raise ParseError(f"Build id is negative: {build_id}", payload=document)
    return build_id
