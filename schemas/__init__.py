"""Request schemas validated at the HTTP boundary.

Bodies and query strings use the camelCase keys of the public API; the
models expose snake_case attributes.
"""
from flask import request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RequestSchema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="forbid",
    )


def parse_body(schema):
    """Validate the JSON body; pydantic's ValidationError becomes a 400 upstream."""
    return schema.model_validate(request.get_json(silent=True) or {})


def parse_args(schema):
    return schema.model_validate(request.args.to_dict())


def normalize_amenities(values) -> list:
    seen = set()
    out = []
    for value in values or []:
        name = (value or "").strip()
        if name and name.lower() not in seen:
            seen.add(name.lower())
            out.append(name)
    return out
