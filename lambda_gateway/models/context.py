"""
Request context model.

Encapsulates all data the invocation pipeline and route hooks need.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from starlette.requests import Request


class RequestContext(BaseModel):
    """
    Rich context representing an incoming request.

    Hooks receive this instead of the framework request; the raw Starlette
    request stays reachable through `request` for anything not captured here.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    route_id: str
    method: str
    path: str
    headers: Dict[str, str] = Field(default_factory=dict)
    multi_headers: Dict[str, List[str]] = Field(default_factory=dict)
    query_params: Dict[str, str] = Field(default_factory=dict)
    multi_query_params: Dict[str, List[str]] = Field(default_factory=dict)
    path_params: Dict[str, str] = Field(default_factory=dict)
    body: bytes = b""
    request_id: Optional[str] = None
    trace_id: Optional[str] = None
    request: Optional[Request] = Field(default=None, exclude=True, repr=False)

    @classmethod
    async def from_request(
        cls,
        request: Request,
        route_id: str,
        request_id: Optional[str] = None,
        trace_id: Optional[str] = None,
    ) -> "RequestContext":
        multi_headers: Dict[str, List[str]] = {}
        for key, value in request.headers.items():
            multi_headers.setdefault(key, []).append(value)

        multi_query: Dict[str, List[str]] = {}
        for key, value in request.query_params.multi_items():
            multi_query.setdefault(key, []).append(value)

        return cls(
            route_id=route_id,
            method=request.method,
            path=request.url.path,
            headers=dict(request.headers),
            multi_headers=multi_headers,
            query_params=dict(request.query_params),
            multi_query_params=multi_query,
            path_params={k: str(v) for k, v in request.path_params.items()},
            body=await request.body(),
            request_id=request_id,
            trace_id=trace_id,
            request=request,
        )
