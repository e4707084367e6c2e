"""
Safe .env parser for taskboard.env.

Reads KEY=value lines without shell execution and rejects values that look
like shell substitutions.
"""

import re
from pathlib import Path

FORBIDDEN_PATTERNS = [
    r'`',           # backticks
    r'\$\(',        # command substitution
    r'\$\{',        # variable expansion
    r';',           # command chaining
    r'&&',          # AND chaining
    r'\|',          # pipe / OR chaining
]

KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')


def parse_env(text: str) -> dict[str, str]:
    """
    Parse env-file content into a dict.

    Raises:
        ValueError: if a line is malformed or a value contains a forbidden pattern
    """
    result = {}
    for lineno, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue

        if line.startswith('export '):
            line = line[len('export '):].lstrip()

        key, sep, value = line.partition('=')
        if not sep:
            raise ValueError(f"Line {lineno}: Invalid syntax (no '=')")

        key = key.strip()
        value = value.strip()
        if not KEY_PATTERN.match(key):
            raise ValueError(f"Line {lineno}: Invalid key '{key}'")

        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]

        for pattern in FORBIDDEN_PATTERNS:
            if re.search(pattern, value):
                raise ValueError(f"Line {lineno}: Forbidden pattern in value for {key}")

        result[key] = value

    return result


def load_env(filepath: str | Path) -> dict[str, str]:
    """
    Parse an env file.

    Raises:
        FileNotFoundError: if file doesn't exist
        ValueError: see parse_env
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Env file not found: {filepath}")
    return parse_env(path.read_text())
