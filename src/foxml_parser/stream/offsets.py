"""Byte offset correction for engines with 32-bit wrapping cursors.

Some XML engines report their current byte index as a signed 32-bit value,
which wraps for documents larger than 2 GiB. The reader's file position does
not wrap, so it identifies which 2 GiB window the engine is in and lets the
raw index be lifted back to an absolute offset. Engines reporting 64-bit
indexes never hit the correction branches and get their index back as is.
"""

WRAP_WINDOW = 2 ** 31


def corrected_offset(raw_index: int, file_position: int) -> int:
    """Reconcile a possibly wrapped engine byte index with the file position.

    Args:
        raw_index: Byte index reported by the event engine
        file_position: Bytes consumed from the file so far

    Returns:
        Absolute byte offset of the engine cursor

    Examples:
        >>> corrected_offset(100, 100)
        100
        >>> corrected_offset(5, 4294967500)
        4294967301
    """
    if raw_index > WRAP_WINDOW:
        return raw_index
    if raw_index >= 0 and file_position < WRAP_WINDOW:
        return raw_index

    slot = file_position // WRAP_WINDOW
    if slot % 2:
        candidate = raw_index + (slot + 1) * WRAP_WINDOW
    else:
        candidate = raw_index + slot * WRAP_WINDOW

    # The engine can never be ahead of what the reader has consumed.
    while candidate > file_position and candidate - WRAP_WINDOW >= raw_index:
        candidate -= WRAP_WINDOW
    return candidate
