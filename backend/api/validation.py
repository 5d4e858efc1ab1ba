"""Validation API

Exposes the rule registry over HTTP. The request body holds the rule's
keyword arguments:

    POST /api/validation/validate-integer
    {"value": "150", "min_value": 100, "max_value": 200}

- 204: the input passed
- 422: the input was rejected (body names the raised failure type)
- 400: the rule was misconfigured or called with bad arguments
- 404: no such rule
"""
import inspect
from typing import Any

from fastapi import APIRouter, Body, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core.config import settings
from core.errors import ErrorCode, invalid_options, raise_result, validation_error
from core.logging import api_logger
from core.validation import ConfigurationError, get_rule, list_rules, resolve_failure_type
from core.validation.failures import qualified_name

router = APIRouter()
log = api_logger()


class RuleSummary(BaseModel):
    name: str
    summary: str
    parameters: list[str]


class RuleListResponse(BaseModel):
    rules: list[RuleSummary]


@router.get("/rules", response_model=RuleListResponse)
async def get_rules():
    """List registered rules and their parameters."""
    return RuleListResponse(rules=[
        RuleSummary(name=spec.name, summary=spec.summary, parameters=spec.parameters)
        for spec in list_rules()
    ])


@router.post("/{rule_name}", status_code=204)
def run_rule(rule_name: str, payload: dict[str, Any] = Body(default={})):
    """Run one rule against the request body's arguments."""
    lookup = get_rule(rule_name)
    raise_result(lookup)
    spec = lookup.unwrap()

    try:
        bound = inspect.signature(spec.func).bind(**payload)
    except TypeError as e:
        raise_result(invalid_options(rule_name, [{"type": "arguments", "msg": str(e)}], origin="api"))

    failure_name = payload.get("failure_type") or settings.DEFAULT_FAILURE_TYPE
    try:
        spec(*bound.args, **bound.kwargs)
    except ConfigurationError:
        raise
    except Exception as exc:
        expected = resolve_failure_type(failure_name)
        if expected.is_err() or not isinstance(exc, expected.unwrap()):
            raise
        log.info("rule_rejected", rule=rule_name, failure_type=qualified_name(type(exc)))
        error = validation_error(
            f"Input rejected by {rule_name}",
            code=ErrorCode.E2000_VALIDATION_GENERIC,
            origin="api",
        ).unwrap_err()
        body = error.to_dict()
        body["error"]["failure_type"] = qualified_name(type(exc))
        body["error"]["rule"] = rule_name
        return JSONResponse(status_code=error.code.http_status, content=body)

    return Response(status_code=204)
