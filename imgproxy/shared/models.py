"""Data models for the image proxy."""

from typing import Annotated, Any

from pydantic import BaseModel, Field

from imgproxy.shared.errors import ErrorKind, ProxyError


class ProxyRequest(BaseModel):
    """Inbound request as seen by the pipeline, independent of the invocation runtime."""

    method: Annotated[str, Field(description="Inbound HTTP method")] = "GET"
    url: Annotated[str, Field(description="Target URL parameter (raw or base64 encoded)")] = ""
    deadline: Annotated[float | None, Field(gt=0, description="Seconds left before the invocation is abandoned")] = None

    @property
    def upstream_method(self) -> str:
        """HEAD is mirrored, every other method fetches with GET."""
        return "HEAD" if self.method.upper() == "HEAD" else "GET"


class ProxyResponse(BaseModel):
    """Outbound response, serialized in the API Gateway proxy integration shape."""

    status_code: Annotated[int, Field(ge=100, le=599, serialization_alias="statusCode", description="HTTP status code")]
    headers: Annotated[dict[str, str], Field(description="Response headers")] = {}
    is_base64_encoded: Annotated[
        bool, Field(serialization_alias="isBase64Encoded", description="Body holds base64 text")
    ] = False
    body: Annotated[str, Field(description="Response body")] = ""
    error: Annotated[ErrorKind | None, Field(exclude=True, description="Failure kind, unset on success")] = None

    @classmethod
    def failure(cls, error: ProxyError) -> "ProxyResponse":
        """Empty-body response carrying the classified failure."""
        return cls(status_code=error.status_code, error=error.kind)

    def to_envelope(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
