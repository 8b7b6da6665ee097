"""Request path to script name translation.

``/list-events`` is served by the script registered as ``ListEvents.py``.
"""

import unicodedata


def dashes_to_camel_case(value: str, capitalize_first: bool = False) -> str:
    """Convert a dash-separated string to CamelCase.

    The first character of every dash-separated piece is upper-cased and
    the dashes are dropped; nothing else changes, so already-camel input
    passes through untouched::

        dashes_to_camel_case("list-events", True)   # "ListEvents"
        dashes_to_camel_case("ListEvents", True)    # "ListEvents"
        dashes_to_camel_case("donor-report")        # "donorReport"
    """
    result = "".join(piece[:1].upper() + piece[1:] for piece in value.split("-"))
    if not capitalize_first:
        result = result[:1].lower() + result[1:]
    return result


def normalize_text(value: str) -> str:
    """Normalize to Unicode NFC so composed and decomposed input compare equal."""
    return unicodedata.normalize("NFC", value)


def strip_root(path: str, root_path: str) -> str:
    """Strip ``root_path + "/"`` from the front of *path*.

    With an empty root this drops the leading slash.
    """
    prefix = f"{root_path}/"
    if path.startswith(prefix):
        return path[len(prefix) :]
    return path


def script_file_name(short_name: str, suffix: str) -> str:
    """The conventional script name for a short name (``list-events`` -> ``ListEvents.py``)."""
    return dashes_to_camel_case(short_name, True) + suffix
