import json
from unittest.mock import MagicMock


def make_response(status=200, body=None, reason=""):
    """A requests.Response stand-in with the attributes the client reads."""
    resp = MagicMock()
    resp.status_code = status
    resp.ok = status < 400
    resp.reason = reason
    if body is None:
        resp.content = b""
        resp.json.side_effect = ValueError("no body")
    else:
        resp.content = json.dumps(body).encode()
        resp.json.return_value = body
    return resp


def token_response(token="tok-1", expires_in=3600):
    return make_response(200, {"access_token": token, "expires_in": expires_in, "token_type": "Bearer"})
