"""
Hash Notation Parser.

Parses the content of a ``@param`` annotation that documents the shape
of an array argument:

    @param array $args {
        Optional. Arguments to retrieve posts.

        @type int    $numberposts Total number of posts.
        @type array  $meta {
            @type string $key   Meta key.
            @type string $value Meta value.
        }
    }

The content is first split into ``OPEN``, ``CLOSE``, ``ANNOTATION`` and
``TEXT`` tokens, then a recursive-descent parser builds the ``HashNode``
tree while tracking the open blocks on an explicit stack of frames.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from docexport.models.tags import HashNode
from docexport.parsing.registry import TagRegistry, default_registry
from docexport.parsing.tag_parser import ParameterSpec, TagSyntaxError, parse_parameter

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3

_ANNOTATION_PATTERN = re.compile(r"@([\w-]+)")


class HashNotationError(ValueError):
    """Raised when hash-notation content cannot be parsed."""

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        path: Optional[list[Union[int, str]]] = None,
    ) -> None:
        """Initialize hash notation error.

        Args:
            message: Error message
            position: Character offset of the offending token
            path: Keys of the blocks open at the point of failure
        """
        super().__init__(message)
        self.position = position
        self.path = path or []

    def __str__(self) -> str:
        msg = super().__str__()
        if self.path:
            msg = f"{msg} (in {' > '.join(str(key) for key in self.path)})"
        if self.position is not None:
            msg = f"{msg} at offset {self.position}"
        return msg


class TokenType(str, Enum):
    """Lexical token kinds of hash notation."""

    OPEN = "open"
    CLOSE = "close"
    ANNOTATION = "annotation"
    TEXT = "text"


@dataclass(frozen=True)
class Token:
    """One lexical token.

    Attributes:
        type: Token kind
        value: Source text (annotation name for ANNOTATION)
        position: Character offset in the tokenized text
    """

    type: TokenType
    value: str
    position: int


def _at_boundary(text: str, index: int) -> bool:
    return index < 0 or index >= len(text) or text[index].isspace()


def tokenize(text: str, registry: Optional[TagRegistry] = None) -> list[Token]:
    """Split hash-notation text into tokens.

    A ``{`` followed by whitespace opens a block, also when it is attached
    to the preceding word as in ``$bar{``; an inline ``{@...}`` literal is
    text. A ``}`` preceded by whitespace closes a block. Only
    annotations registered as hash markers become ANNOTATION tokens.
    Backslash-escaped braces are literal text.

    Args:
        text: Content with the outermost braces already removed
        registry: Tag registry naming the hash markers

    Returns:
        Tokens in source order
    """
    registry = registry or default_registry()
    tokens: list[Token] = []
    buffer: list[str] = []
    buffer_start = 0

    def flush() -> None:
        if buffer:
            tokens.append(Token(TokenType.TEXT, "".join(buffer), buffer_start))
            buffer.clear()

    def emit(token_type: TokenType, value: str, position: int) -> None:
        flush()
        tokens.append(Token(token_type, value, position))

    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        chunk = char

        if char == "\\" and i + 1 < length and text[i + 1] in "{}":
            chunk = text[i + 1]
            step = 2
        elif char == "{" and text.startswith("{@", i):
            end = text.find("}", i)
            end = length - 1 if end == -1 else end
            chunk = text[i : end + 1]
            step = len(chunk)
        elif char == "{" and _at_boundary(text, i + 1):
            emit(TokenType.OPEN, char, i)
            i += 1
            continue
        elif char == "}" and _at_boundary(text, i - 1):
            emit(TokenType.CLOSE, char, i)
            i += 1
            continue
        elif char == "@" and _at_boundary(text, i - 1):
            match = _ANNOTATION_PATTERN.match(text, i)
            if (
                match
                and registry.is_hash_marker(match.group(1))
                and _at_boundary(text, match.end())
            ):
                emit(TokenType.ANNOTATION, match.group(1), i)
                i = match.end()
                continue
            step = 1
        else:
            step = 1

        if not buffer:
            buffer_start = i
        buffer.append(chunk)
        i += step

    flush()
    return tokens


@dataclass
class _Frame:
    """An open block: its key, its node and its positional counter."""

    key: Union[int, str, None]
    node: HashNode
    positional: int = 0


@dataclass
class _ParseState:
    """Mutable state of one ``parse()`` call."""

    tokens: list[Token]
    pos: int = 0
    index: int = 0  # shared positional counter
    frames: list[_Frame] = field(default_factory=list)


class HashNotationParser:
    """Parses hash-notation annotation content into a ``HashNode`` tree.

    The positional counter used for blocks without a variable name is
    scoped to a single ``parse()`` call. By default it is shared across
    all branches of the tree and advances on every opened block; with
    ``shared_index=False`` every block numbers its own positional children
    from zero.

    Usage:
        parser = HashNotationParser(max_depth=3)
        tree = parser.parse("{ @type string $foo Foo. }")
        tree.children["$foo"].content  # "Foo."
    """

    def __init__(
        self,
        registry: Optional[TagRegistry] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        shared_index: bool = True,
    ) -> None:
        """Initialize the parser.

        Args:
            registry: Tag registry naming the hash markers
            max_depth: Maximum number of nested blocks below the root
            shared_index: Share one positional counter across the tree

        Raises:
            ValueError: If max_depth is less than 1
        """
        if max_depth < 1:
            raise ValueError("max_depth must be >= 1")
        self._registry = registry or default_registry()
        self._max_depth = max_depth
        self._shared_index = shared_index

    @property
    def registry(self) -> TagRegistry:
        """Get the tag registry."""
        return self._registry

    @property
    def max_depth(self) -> int:
        """Get the maximum supported nesting depth."""
        return self._max_depth

    @staticmethod
    def looks_like_hash(content: str) -> bool:
        """Check if annotation content is written in hash notation."""
        return content.lstrip().startswith("{")

    def parse(self, content: str) -> HashNode:
        """Parse hash-notation content.

        Args:
            content: Annotation content starting with ``{``

        Returns:
            Root node; its children are the documented keys

        Raises:
            HashNotationError: On malformed entries, unbalanced braces or
                nesting deeper than ``max_depth``
        """
        text = content.strip()
        if not text.startswith("{"):
            raise HashNotationError("Hash notation must start with '{'", 0)
        if not text.endswith("}") or len(text) < 2:
            raise HashNotationError("Hash notation must end with '}'", len(text))

        root = HashNode()
        state = _ParseState(tokens=tokenize(text[1:-1], self._registry))
        state.frames.append(_Frame(key=None, node=root))

        self._parse_description(state, root)
        self._parse_entries(state)

        stray = self._peek(state)
        if stray is not None:
            raise HashNotationError("Unbalanced '}'", stray.position)

        logger.debug(f"Parsed hash notation: {len(root.children)} keys, depth {root.depth()}")
        return root

    def _peek(self, state: _ParseState) -> Optional[Token]:
        if state.pos < len(state.tokens):
            return state.tokens[state.pos]
        return None

    def _take_text(self, state: _ParseState) -> str:
        token = self._peek(state)
        if token is not None and token.type == TokenType.TEXT:
            state.pos += 1
            return token.value
        return ""

    def _path(self, state: _ParseState) -> list[Union[int, str]]:
        return [frame.key for frame in state.frames[1:] if frame.key is not None]

    def _parse_description(self, state: _ParseState, node: HashNode) -> None:
        text = " ".join(self._take_text(state).split())
        if text:
            node.content = f"{node.content} {text}" if node.content else text

    def _parse_entries(self, state: _ParseState) -> None:
        """Parse entries of the innermost open block up to its CLOSE."""
        while (token := self._peek(state)) is not None:
            if token.type == TokenType.CLOSE:
                return

            state.pos += 1
            if token.type == TokenType.ANNOTATION:
                declaration = self._take_text(state)
                following = self._peek(state)
                if following is not None and following.type == TokenType.OPEN:
                    state.pos += 1
                    self._parse_block(state, declaration, following)
                else:
                    self._add_leaf(state, declaration, token)
            elif token.type == TokenType.OPEN:
                self._parse_block(state, "", token)
            elif token.value.strip():
                raise HashNotationError(
                    f"Unexpected text '{token.value.strip()}'",
                    token.position,
                    self._path(state),
                )

    def _parse_declaration(self, state: _ParseState, declaration: str, token: Token) -> ParameterSpec:
        try:
            return parse_parameter(declaration)
        except TagSyntaxError as e:
            raise HashNotationError(str(e), token.position, self._path(state)) from e

    def _next_key(self, state: _ParseState, spec: Optional[ParameterSpec]) -> Union[int, str]:
        parent = state.frames[-1]
        shared = state.index
        state.index += 1
        if spec is not None and spec.variable:
            return spec.variable
        if self._shared_index:
            return shared
        key = parent.positional
        parent.positional += 1
        return key

    def _parse_block(self, state: _ParseState, declaration: str, token: Token) -> None:
        if len(state.frames) > self._max_depth:
            raise HashNotationError(
                f"Hash notation nested deeper than {self._max_depth} levels is not supported",
                token.position,
                self._path(state),
            )

        spec = self._parse_declaration(state, declaration, token) if declaration.strip() else None
        key = self._next_key(state, spec)
        node = HashNode(
            content=spec.description if spec else "",
            types=spec.types if spec else ["array"],
        )
        state.frames[-1].node.children[key] = node
        state.frames.append(_Frame(key=key, node=node))

        self._parse_description(state, node)
        self._parse_entries(state)

        if self._peek(state) is None:
            raise HashNotationError(f"Unclosed block '{key}'", token.position, self._path(state))
        state.pos += 1
        state.frames.pop()

    def _add_leaf(self, state: _ParseState, declaration: str, token: Token) -> None:
        spec = self._parse_declaration(state, declaration, token)
        if not spec.variable:
            raise HashNotationError(
                f"Entry '{declaration.strip()}' has no variable name",
                token.position,
                self._path(state),
            )
        state.frames[-1].node.children[spec.variable] = HashNode(
            content=spec.description,
            types=spec.types,
        )


def parse_hash_notation(
    content: str,
    registry: Optional[TagRegistry] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    shared_index: bool = True,
) -> HashNode:
    """Convenience function to parse hash-notation content.

    Args:
        content: Annotation content starting with ``{``
        registry: Tag registry naming the hash markers
        max_depth: Maximum nesting depth
        shared_index: Share one positional counter across the tree

    Returns:
        Root node of the parsed tree
    """
    parser = HashNotationParser(registry, max_depth=max_depth, shared_index=shared_index)
    return parser.parse(content)
