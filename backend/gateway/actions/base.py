"""
Event Gateway: Abstract Action Interface
=========================================

What:  Abstract base class for every action the gateway serves.
How:   The request pipeline is always decode → validate → call collaborator →
       map result. Decoding and validation happen in the pydantic schemas at
       the route boundary; mapping errors to status codes happens in the
       global exception handlers. What is left for each action is `execute`:
       transform the validated input, make exactly one collaborator call and
       build the output model.
Who:   Concrete actions in this package; routes resolve them through FastAPI
       dependencies so tests can substitute fakes.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)


class Action(ABC, Generic[InputT, OutputT]):
    """
    Contract:
        - `execute()` receives an already-validated input model
        - it performs its collaborator call(s) without retrying
        - failures are raised as GatewayError subclasses, never returned
        - it holds no per-request state, so one instance serves all requests
    """

    #: Short name used in log lines
    name: str = "action"

    @abstractmethod
    async def execute(self, payload: InputT) -> OutputT:
        ...
