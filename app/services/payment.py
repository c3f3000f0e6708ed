from urllib.parse import quote, urlencode

from app.core.config import settings


def build_upi_string(amount: int, note: str) -> str:
    """
    UPI deep link for a payment request.

    Payee and name come from settings; name and note are percent-encoded.
    """
    return (
        f"upi://pay?pa={quote(settings.UPI_PAYEE_ADDRESS, safe='@')}"
        f"&pn={quote(settings.UPI_PAYEE_NAME)}"
        f"&am={amount}"
        f"&cu=INR"
        f"&tn={quote(note)}"
    )


def registration_upi_string(tournament) -> str:
    return build_upi_string(tournament.entry_fee, f"Tournament Registration - {tournament.title}")


def qr_code_url(data: str) -> str:
    """Image URL of a QR code encoding ``data``"""
    return f"{settings.QR_SERVICE_URL}?{urlencode({'size': settings.QR_SIZE, 'data': data})}"
