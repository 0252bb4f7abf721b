"""
Structural Patcher
Best-effort splice of a new render tree into previous markup.
"""

from ..core.logging_config import get_logger
from ..markup.ast import first_element
from ..markup.parser import MarkupParseError, parse
from ..models.version import PatchResult

logger = get_logger(__name__)

FALLBACK_MESSAGE = "Fallback: replaced entire file (no incremental patch possible)."


def apply_patch(old_code: str, new_code: str) -> PatchResult:
    """
    Replace the first top-level element of ``old_code`` with that of ``new_code``.

    Text around the old element (imports, wrapper function) is kept as is.
    Anything that prevents a clean splice yields ``new_code`` verbatim with
    ``incremental=False``.
    """
    try:
        old_tree = first_element(parse(old_code))
        new_tree = first_element(parse(new_code))
    except MarkupParseError as e:
        logger.info("patch_parse_failed", error=e.message)
        return PatchResult(code=new_code, incremental=False, success=False, message=str(e))

    if old_tree is None or new_tree is None:
        return PatchResult(code=new_code, incremental=False, message=FALLBACK_MESSAGE)

    patched = old_code[: old_tree.start] + new_code[new_tree.start:new_tree.end] + old_code[old_tree.end:]
    try:
        parse(patched)
    except MarkupParseError as e:
        logger.warning("patch_reparse_failed", error=e.message)
        return PatchResult(code=new_code, incremental=False, success=False, message=f"{FALLBACK_MESSAGE} {e.message}")

    logger.debug("patch_applied", old_span=old_tree.end - old_tree.start, new_span=new_tree.end - new_tree.start)
    return PatchResult(code=patched, incremental=True)
