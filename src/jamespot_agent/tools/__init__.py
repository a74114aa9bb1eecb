"""
Tool registry for the Jamespot agent.

A tool is a :class:`ToolDescriptor`: a unique name, a description the LLM reads to decide when to use
it, a pydantic model describing its parameters, and an async body that receives the validated
parameters and returns a string.  Descriptors are collected in a :class:`ToolCatalog`, which is the
name -> tool mapping the agent loop dispatches through.
"""

import logging
from dataclasses import dataclass
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Type,
)

from pydantic import (
    BaseModel,
    ConfigDict,
)
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class ToolArgs(BaseModel):
    """
    Base class for tool parameter models.

    Fields are declared in snake_case and exposed to the LLM in camelCase, which is what the
    Jamespot API itself uses.  Unknown keys sent by the LLM are ignored.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class NoArgs(ToolArgs):
    """Parameter model for tools that take no input."""


ToolFunc = Callable[[Any], Awaitable[str]]


def _clean_property(schema: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = {k: v for k, v in schema.items() if k != "title"}
    if "anyOf" in cleaned:
        cleaned["anyOf"] = [_clean_property(option) for option in cleaned["anyOf"]]
    if isinstance(cleaned.get("items"), dict):
        cleaned["items"] = _clean_property(cleaned["items"])
    return cleaned


@dataclass(frozen=True)
class ToolDescriptor:
    """A named, schema-typed, independently invocable operation exposed to the LLM."""

    name: str
    description: str
    args_model: Type[ToolArgs]
    func: ToolFunc

    def parameters_schema(self) -> Dict[str, Any]:
        """JSON schema of the parameters, without pydantic's generated titles."""
        schema = self.args_model.model_json_schema(by_alias=True)
        properties = schema.get("properties", {})
        cleaned: Dict[str, Any] = {
            "type": "object",
            "properties": {name: _clean_property(prop) for name, prop in properties.items()},
        }
        if schema.get("required"):
            cleaned["required"] = list(schema["required"])
        return cleaned

    async def invoke(self, args: Mapping[str, Any] | None = None) -> str:
        """
        Validate *args* and run the tool body.

        Raises
        ------
        pydantic.ValidationError
            If *args* do not satisfy the parameter model.
        """
        params = self.args_model.model_validate(dict(args or {}))
        return await self.func(params)


class ToolCatalog:
    """
    Ordered collection of tools keyed by name.

    Names must be unique; registering the same name twice raises ``ValueError``.
    """

    def __init__(self, tools: Iterable[ToolDescriptor] = ()) -> None:
        self._tools: Dict[str, ToolDescriptor] = {}
        self.extend(tools)

    def register(self, tool: ToolDescriptor) -> ToolDescriptor:
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered.")
        logger.debug("Registering tool '%s'", tool.name)
        self._tools[tool.name] = tool
        return tool

    def extend(self, tools: Iterable[ToolDescriptor]) -> None:
        for tool in tools:
            self.register(tool)

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)
