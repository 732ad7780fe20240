"""Extraction of fenced code blocks from markdown text."""

from common.logger import get_logger

from .models import CodeBlock

logger = get_logger(__name__)

FENCE = "```"


def extract_code_blocks(text: str) -> list[CodeBlock]:
    """Extract fenced code blocks from a document.

    An opening fence is a line starting with three backticks; whatever follows
    them is the language tag (possibly empty). A closing fence is a line that
    is exactly three backticks. A fence left open at the end of the document
    yields no block.

    Args:
        text: Full document text

    Returns:
        Code blocks in document order

    Example:
        >>> extract_code_blocks("Intro\\n```js\\nvar x = 1;\\n```")
        [CodeBlock(code='var x = 1;', language='js', start_line=2)]
    """
    blocks = []
    language = None
    start_line = 0
    body: list[str] = []

    for line_num, line in enumerate(text.split("\n"), start=1):
        stripped = line.strip()

        if language is None:
            if stripped.startswith(FENCE):
                language = stripped[len(FENCE) :].strip()
                start_line = line_num
                body = []
        elif stripped == FENCE:
            blocks.append(CodeBlock(code="\n".join(body), language=language, start_line=start_line))
            language = None
        else:
            body.append(line)

    if language is not None:
        logger.debug(f"Ignoring unterminated code fence opened on line {start_line}")

    return blocks
