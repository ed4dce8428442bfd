import re

# Newline followed by indentation (spaces/tabs, not further newlines)
INDENT_AFTER_NEWLINE = re.compile(r"\n[^\S\n]+")

ARGS_MARKER = "Args:"


def collapse_indentation(text: str) -> str:
    """
    Drop the indentation that pretty-printed docstrings carry after each newline.
    """
    if not text:
        return ""
    return INDENT_AFTER_NEWLINE.sub("\n", text)


def strip_args_section(text: str) -> str:
    """
    Truncate a description at its first "Args:" marker, once parameter docs have been harvested.
    """
    if ARGS_MARKER not in text:
        return text
    return text.split(ARGS_MARKER, 1)[0].rstrip()
