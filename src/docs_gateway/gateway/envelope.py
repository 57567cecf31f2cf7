"""Wire models for the generic dispatcher endpoint.

The dispatcher takes ``{function, parameters, devMode}`` and answers with
either a top-level ``error`` or a ``response.result`` object.
"""

from typing import Any

from pydantic import BaseModel, Field

DISPATCHER_FUNCTION = "callMethod"


class RPCRequest(BaseModel):
    """A call to the dispatcher.

    Attributes:
        function: Dispatcher entry point, always "callMethod".
        parameters: [document_specifier, method, args, api_version].
        dev_mode: Ask the server to run development code.
    """

    function: str = Field(default=DISPATCHER_FUNCTION)
    parameters: list[Any] = Field(default_factory=list)
    dev_mode: bool = Field(default=False, alias="devMode")

    model_config = {"populate_by_name": True}

    @classmethod
    def for_method(
        cls,
        document_specifier: Any,
        method: str,
        args: list[Any],
        api_version: int,
        dev_mode: bool = False,
    ) -> "RPCRequest":
        return cls(parameters=[document_specifier, method, args, api_version], dev_mode=dev_mode)

    def to_body(self) -> dict[str, Any]:
        """Serialize with wire field names."""
        return self.model_dump(by_alias=True)


class ErrorDetail(BaseModel):
    error_message: str = Field(default="", alias="errorMessage")
    error_type: str | None = Field(default=None, alias="errorType")
    script_stack_trace_elements: list[dict[str, Any]] = Field(
        default_factory=list, alias="scriptStackTraceElements"
    )

    model_config = {"populate_by_name": True}


class RemoteError(BaseModel):
    """Top-level dispatcher failure."""

    code: int | None = Field(default=None)
    message: str = Field(default="")
    details: list[ErrorDetail] = Field(default_factory=list)

    @property
    def first_detail(self) -> ErrorDetail:
        return self.details[0] if self.details else ErrorDetail()


class RPCResult(BaseModel):
    """The ``response.result`` object of a successful dispatch.

    Attributes:
        response: Value returned by the remote method.
        debug: Debug lines logged by the server.
        lock_error: Set when another session holds the document lock.
        doc_access_error: Set when the account cannot access the document.
        error: Non-fatal error message.
    """

    response: Any = Field(default=None)
    debug: list[Any] | None = Field(default=None)
    lock_error: Any = Field(default=None, alias="lockError")
    doc_access_error: Any = Field(default=None, alias="docAccessError")
    error: Any = Field(default=None)

    model_config = {"populate_by_name": True}


class RPCResponse(BaseModel):
    result: RPCResult | None = Field(default=None)


class RPCResponseEnvelope(BaseModel):
    """Parsed dispatcher response."""

    error: RemoteError | None = Field(default=None)
    response: RPCResponse | None = Field(default=None)

    @property
    def result(self) -> RPCResult:
        if self.response is None or self.response.result is None:
            return RPCResult()
        return self.response.result
