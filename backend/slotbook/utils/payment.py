from urllib.parse import quote


def build_payment_uri(
    *,
    payee_id: str,
    payee_name: str,
    amount: int,
    currency: str,
    note: str,
) -> str:
    """Build the UPI payment-request string handed to the QR renderer."""
    if not payee_id:
        raise ValueError("payee_id is not configured")
    if amount < 0:
        raise ValueError("amount must not be negative")
    params = [
        ("pa", payee_id),
        ("pn", payee_name),
        ("am", str(amount)),
        ("cu", currency),
        ("tn", note),
    ]
    query = "&".join(f"{key}={quote(value, safe='@.')}" for key, value in params)
    return f"upi://pay?{query}"
