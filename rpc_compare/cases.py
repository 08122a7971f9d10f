"""
RPC comparison test cases.

An ``RpcTest`` pairs a request with two checks. The syntax check decides
whether one endpoint's result has the expected shape; the semantic check
compares both results once each side passed its syntax check. The reference
endpoint is assumed to be correct: only the system under test can be marked
``InvalidResponse``.
"""

import asyncio
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any, Callable, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from .client.transport import ErrorKind, RpcClient, RpcError
from .models.core import EndpointStatus, RpcRequest


CheckSyntax = Callable[[Any], bool]
CheckSemantics = Callable[[Any, Any], bool]


@lru_cache(maxsize=None)
def _adapter(result_type: Any) -> TypeAdapter:
    return TypeAdapter(result_type)


def decode(result_type: Any, value: Any) -> Any:
    """Decode a raw JSON result into ``result_type``.

    Raises:
        pydantic.ValidationError: If the value does not have the expected shape
    """
    return _adapter(result_type).validate_python(value)


def conforms(result_type: Any, value: Any) -> bool:
    try:
        decode(result_type, value)
    except ValidationError:
        return False
    return True


@dataclass
class CallOutcome:
    """Raw result of one call: either a JSON value or an ``RpcError``."""
    value: Any = None
    error: Optional[RpcError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


_ERROR_STATUSES = {
    ErrorKind.METHOD_NOT_FOUND: EndpointStatus.MISSING_METHOD,
    ErrorKind.INVALID_REQUEST: EndpointStatus.INVALID_REQUEST,
    ErrorKind.PARSE_ERROR: EndpointStatus.INVALID_RESPONSE,
    ErrorKind.TIMEOUT: EndpointStatus.TIMEOUT,
}


def status_from_error(error: RpcError) -> EndpointStatus:
    return _ERROR_STATUSES.get(error.kind, EndpointStatus.INTERNAL_SERVER_ERROR)


async def call_endpoint(client: RpcClient, request: RpcRequest) -> CallOutcome:
    try:
        return CallOutcome(value=await client.call(request))
    except RpcError as e:
        return CallOutcome(error=e)


@dataclass(frozen=True)
class RpcTest:
    """One comparison test.

    Attributes:
        request: Request sent to both endpoints
        check_syntax: Shape check applied to each side independently
        check_semantics: Comparison of both raw results
        ignore_reason: When set, the test only runs in ``ignored-only``
            or ``all`` mode
    """

    __test__ = False

    request: RpcRequest
    check_syntax: CheckSyntax
    check_semantics: CheckSemantics
    ignore_reason: Optional[str] = None

    @classmethod
    def basic(cls, request: RpcRequest) -> "RpcTest":
        """Check that the method exists and both results share the same schema."""
        result_type = request.result_type
        return cls(
            request=request,
            check_syntax=lambda value: conforms(result_type, value),
            check_semantics=lambda sut, reference: True,
        )

    @classmethod
    def validate(cls, request: RpcRequest, predicate: Callable[[Any, Any], bool]) -> "RpcTest":
        """Like ``basic``, then compare the decoded results with ``predicate``."""
        result_type = request.result_type

        def check_semantics(sut_json: Any, reference_json: Any) -> bool:
            try:
                sut = decode(result_type, sut_json)
                reference = decode(result_type, reference_json)
            except ValidationError:
                return False
            return bool(predicate(sut, reference))

        return cls(
            request=request,
            check_syntax=lambda value: conforms(result_type, value),
            check_semantics=check_semantics,
        )

    @classmethod
    def identity(cls, request: RpcRequest) -> "RpcTest":
        """Both endpoints must return equal decoded results."""
        return cls.validate(request, lambda sut, reference: sut == reference)

    def ignore(self, reason: str) -> "RpcTest":
        return replace(self, ignore_reason=reason)

    def with_timeout(self, seconds: float) -> "RpcTest":
        return replace(self, request=self.request.with_timeout(seconds))

    @property
    def method_name(self) -> str:
        return self.request.method_name

    @property
    def ignored(self) -> bool:
        return self.ignore_reason is not None

    def side_status(self, outcome: CallOutcome) -> EndpointStatus:
        """Status of one endpoint judged on its own."""
        if not outcome.ok:
            return status_from_error(outcome.error)
        if self.check_syntax(outcome.value):
            return EndpointStatus.VALID
        return EndpointStatus.INVALID_JSON

    def classify(self, sut: CallOutcome, reference: CallOutcome) -> Tuple[EndpointStatus, EndpointStatus]:
        """Turn both outcomes into ``(sut_status, reference_status)``."""
        if not sut.ok and not reference.ok:
            sut_status = status_from_error(sut.error)
            reference_status = status_from_error(reference.error)
            if sut_status == reference_status:
                if sut_status is EndpointStatus.TIMEOUT:
                    return EndpointStatus.TIMEOUT, EndpointStatus.TIMEOUT
                # Equally unsupported on both nodes is not a regression, unlike two nodes that never answered
                if ErrorKind.TRANSPORT not in (sut.error.kind, reference.error.kind):
                    return EndpointStatus.VALID, EndpointStatus.VALID
            return sut_status, reference_status

        if sut.ok and reference.ok and self.check_syntax(sut.value) and self.check_syntax(reference.value):
            if self.check_semantics(sut.value, reference.value):
                return EndpointStatus.VALID, EndpointStatus.VALID
            return EndpointStatus.INVALID_RESPONSE, EndpointStatus.VALID

        return self.side_status(sut), self.side_status(reference)

    async def run(self, sut: RpcClient, reference: RpcClient) -> Tuple[EndpointStatus, EndpointStatus]:
        """Call both endpoints concurrently and classify the outcomes."""
        sut_outcome, reference_outcome = await asyncio.gather(
            call_endpoint(sut, self.request),
            call_endpoint(reference, self.request),
        )
        return self.classify(sut_outcome, reference_outcome)
