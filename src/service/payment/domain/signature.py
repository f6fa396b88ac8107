import hmac


def verify_signature(
    raw_body: bytes, signature_header: str | None, secret: str, algorithm: str
) -> bool:
    """
    HMAC hex digest of the exact request bytes, compared in constant time.

    Never raises: an empty secret, a missing header or an unsupported
    algorithm all verify as False.
    """
    if not secret or not signature_header:
        return False
    try:
        expected = hmac.new(secret.encode(), raw_body, algorithm).hexdigest()
    except ValueError:
        return False
    return hmac.compare_digest(
        expected.encode(), signature_header.strip().lower().encode('utf-8', errors='replace')
    )
