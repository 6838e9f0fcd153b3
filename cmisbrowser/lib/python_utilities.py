def to_wire(text):
    """
    Content going out to the server should be bytes.  str is encoded
    as utf-8, bytes are passed through untouched.
    """
    if text is None:
        return None
    if isinstance(text, str):
        text = bytes(text, "utf-8")
    return text


def to_normal_str(text):
    """
    Make sure we return a normal string, no matter if the server
    handed us bytes or str
    """
    if text is None:
        return text
    if not isinstance(text, str):
        text = text.decode("utf-8", errors="replace")
    return text
