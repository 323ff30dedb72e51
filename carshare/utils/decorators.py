from functools import wraps

from flask import request

from carshare.exceptions import ValidationError


def json_body(fn):
    """Parse the request body as a JSON object and pass it as ``payload``."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object", "INVALID_JSON")
        return fn(*args, payload=payload, **kwargs)

    return wrapper
