"""Shared base for RPC request and response messages.

Fields are snake_case in Python and camelCase on the wire.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RpcModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class EmptyRequest(RpcModel):
    pass


class SuccessResponse(RpcModel):
    success: bool = True
