import re
from os import getenv
from os.path import exists, join

LEADING_DIGITS = re.compile(r"\s*(\d+)")


# env vars could be true or 1, or anything else -- here's a centralized location to
# handle that
def env_vars(env_var: str, default: str) -> bool:
    var = getenv(env_var, default).lower()
    return var == "true" or var == "1"


def parse_list(value: str, delimiter: str = ",") -> tuple[list[str], int]:
    """Split a raw field value on `delimiter`, dropping empty items.

    Items are stripped but otherwise kept as is, so `libc (>= 2.3)` stays one
    entry. Returns the items and their count."""
    items = [item.strip() for item in value.split(delimiter)]
    items = [item for item in items if item]
    return items, len(items)


def leading_int(value: str) -> int | None:
    """Parse the leading run of decimal digits in value, or None if there is none"""
    match = LEADING_DIGITS.match(value)
    if match is None:
        return None
    return int(match.group(1))


def file_exists(*args) -> str:
    """Confirms if a file exists"""
    file_path = join(*args)
    if not exists(file_path):
        raise FileNotFoundError(f"{file_path} not found")
    return file_path
