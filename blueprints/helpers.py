from functools import wraps

from flask import request
from flask_login import current_user
from pydantic import ValidationError

from exceptions import AuthenticationFailed, Forbidden, ValidationFailed


def require_roles(roles):
    if not current_user.is_authenticated:
        raise AuthenticationFailed("Authentication required")
    if current_user.role not in roles:
        raise Forbidden("Insufficient permissions")


def roles_required(*roles):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            require_roles(roles)
            return view(*args, **kwargs)
        return wrapper
    return decorator


def parse(model, data):
    """Validate ``data`` against a pydantic model or raise ``ValidationFailed``."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        details = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationFailed("Invalid request payload", details=details)


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationFailed("Request body must be a JSON object")
    return data


def query_args():
    return request.args.to_dict()


def page_response(result):
    return {"data": [row.to_dict() for row in result["data"]], "total": result["total"]}


def bearer_token():
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
