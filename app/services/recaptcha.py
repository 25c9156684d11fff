import logging

import requests

from app.core.config import settings

logger = logging.getLogger(__name__)

VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


def verify_recaptcha(token: str) -> bool:
    if not settings.RECAPTCHA_SECRET_KEY:
        logger.warning("reCAPTCHA secret key not configured, skipping verification")
        return True
    try:
        r = requests.post(
            VERIFY_URL,
            data={"secret": settings.RECAPTCHA_SECRET_KEY, "response": token},
            timeout=5,
        )
        return r.json().get("success") is True
    except (requests.RequestException, ValueError) as e:
        logger.error("reCAPTCHA verification error: %s", e)
        return False
