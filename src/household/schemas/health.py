from enum import Enum

from src.household.schemas.base import RpcModel


class ServingStatus(str, Enum):
    SERVING = "SERVING"
    NOT_SERVING = "NOT_SERVING"


class CheckResponse(RpcModel):
    """Health of the service and each database it holds open.

    Database entries are ``ok`` or ``error``; error details stay in the logs.
    """

    status: ServingStatus
    databases: dict[str, str]
