"""Builders for reflected test data."""

from docexport.models import RawDocBlock
from docexport.parsing import build_tag

HASH_PARAM_TEXT = (
    "array $args {\n"
    "    Optional. Arguments to retrieve posts.\n"
    "\n"
    "    @type int    $numberposts Total number of posts.\n"
    "    @type array  $meta {\n"
    "        @type string $key   Meta key.\n"
    "        @type string $value Meta value.\n"
    "    }\n"
    "}"
)


def make_docblock(
    short: str = "",
    long: str = "",
    tags: list[tuple[str, str]] | None = None,
) -> RawDocBlock:
    """Build a docblock from ``(name, text)`` annotation pairs."""
    return RawDocBlock(
        short_description=short,
        long_description=long,
        tags=[build_tag(name, text) for name, text in tags or []],
    )
