"""
RestGate — Request Body Decoding
==================================

What:  FastAPI dependency that decodes the request payload into a dict,
       whatever its encoding.
How:   JSON bodies are parsed with the json module; url-encoded and
       multipart bodies are parsed by Starlette's form parser
       (python-multipart). Other content types decode to {}.

Usage:
    @router.post("/echo")
    async def echo(body: Dict[str, Any] = Depends(decoded_body)):
        return body
"""

import json
from typing import Any, Dict

from starlette.requests import Request

from restgate.exceptions import FieldErrors, ValidationFailure

FORM_MEDIA_TYPES = {"application/x-www-form-urlencoded", "multipart/form-data"}


def _media_type(request: Request) -> str:
    return request.headers.get("content-type", "").split(";")[0].strip().lower()


async def decoded_body(request: Request) -> Dict[str, Any]:
    """
    Decode the request body.

    Repeated form keys become lists. A malformed or non-object JSON body
    raises ValidationFailure (400).
    """
    media_type = _media_type(request)

    if media_type == "application/json" or media_type.endswith("+json"):
        raw = await request.body()
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            raise ValidationFailure([FieldErrors("body", ["Malformed JSON body"])])
        if not isinstance(data, dict):
            raise ValidationFailure([FieldErrors("body", ["JSON body must be an object"])])
        return data

    if media_type in FORM_MEDIA_TYPES:
        form = await request.form()
        decoded: Dict[str, Any] = {}
        for key in form.keys():
            values = form.getlist(key)
            decoded[key] = values[0] if len(values) == 1 else values
        return decoded

    return {}
