from __future__ import annotations

import functools
import hashlib
import hmac
import logging

from flask import Response, current_app, request

logger = logging.getLogger(__name__)

AUTH_REQUIRED = "This endpoint requires authentication.\n"
BAD_CREDENTIALS = "Bad credentials.\n"


def match(given: str, expected: str) -> bool:
    # digests have a fixed length, compare_digest leaks nothing about the inputs
    given_digest = hashlib.sha256(given.encode("utf-8")).digest()
    expected_digest = hashlib.sha256(expected.encode("utf-8")).digest()
    return hmac.compare_digest(given_digest, expected_digest)


def grant_permission(username: str, password: str, expected_user: str, expected_pass: str) -> bool:
    if not expected_user or not expected_pass:
        logger.warning("BASIC_AUTH_USER and BASIC_AUTH_PASS must be set")
        return False
    user_ok = match(username, expected_user)
    pass_ok = match(password, expected_pass)
    return user_ok and pass_ok


def requires_auth(view):
    @functools.wraps(view)
    def wrapper(*args, **kwargs):
        auth = request.authorization
        if auth is None or auth.type != "basic":
            return Response(
                AUTH_REQUIRED,
                status=401,
                mimetype="text/plain",
                headers={"WWW-Authenticate": "Basic"},
            )
        config = current_app.config["SITE"]
        if not grant_permission(
            auth.username or "",
            auth.password or "",
            config.basic_auth_user,
            config.basic_auth_pass,
        ):
            return Response(BAD_CREDENTIALS, status=401, mimetype="text/plain")
        return view(*args, **kwargs)

    return wrapper
