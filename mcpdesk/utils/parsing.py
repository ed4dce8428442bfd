import re
from typing import Optional


def extract_param_description(text: str, param_name: str) -> Optional[str]:
    """
    Find a prose line documenting `param_name` ("<name>: <text>") and return <text>.

    A bullet or a parenthesised type between the name and the colon is tolerated,
    e.g. "- path (str): file to read". Returns None if no such line exists.
    """
    if not text or not param_name:
        return None
    pattern = re.compile(
        rf"^[^\S\n]*(?:[-*][^\S\n]*)?{re.escape(param_name)}(?:[^\S\n]*\([^)\n]*\))?[^\S\n]*:[^\S\n]*(.+)$",
        re.MULTILINE,
    )
    match = pattern.search(text)
    if match:
        return match.group(1).strip()
    return None
