"""
Base tool class for agent tools.

A tool describes itself with a JSON schema; the same schema validates the
arguments a model sends and is translated into the provider's function
declaration format.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional

import jsonschema
from jsonschema import ValidationError as JSONSchemaValidationError
from pydantic import BaseModel, Field

from .exceptions import ValidationError


class ToolMetadata(BaseModel):
    """Tool metadata schema."""

    name: str
    description: str
    input_schema: Dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )
    output_schema: Dict[str, Any] = Field(default_factory=dict)


class BaseTool(ABC):
    """Base class for all tools."""

    def __init__(self):
        self.metadata = self._get_metadata()

    @property
    def name(self) -> str:
        return self.metadata.name

    @abstractmethod
    def _get_metadata(self) -> ToolMetadata:
        """Get tool metadata."""
        pass

    @abstractmethod
    async def execute(self, **kwargs) -> Dict[str, Any]:
        """Execute the tool with given parameters."""
        pass

    async def validate_input(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Validate input parameters against schema."""
        try:
            jsonschema.validate(params, self.metadata.input_schema)
            return params
        except JSONSchemaValidationError as e:
            raise ValidationError(f"Input validation failed: {e.message}") from e

    async def validate_output(self, result: Dict[str, Any]) -> Dict[str, Any]:
        """Validate output against schema, when the tool declares one."""
        if not self.metadata.output_schema:
            return result
        try:
            jsonschema.validate(result, self.metadata.output_schema)
            return result
        except JSONSchemaValidationError as e:
            raise ValidationError(f"Output validation failed: {e.message}") from e


class FunctionTool(BaseTool):
    """
    Wrap an async function as a tool.

    Example:
        >>> async def add(a: int, b: int) -> dict:
        ...     return {"sum": a + b}
        >>> tool = FunctionTool(
        ...     add,
        ...     name="add",
        ...     description="Add two integers",
        ...     input_schema={
        ...         "type": "object",
        ...         "properties": {"a": {"type": "integer"}, "b": {"type": "integer"}},
        ...         "required": ["a", "b"],
        ...     },
        ... )
    """

    def __init__(
        self,
        fn: Callable[..., Awaitable[Dict[str, Any]]],
        name: str,
        description: str,
        input_schema: Optional[Dict[str, Any]] = None,
    ):
        self._fn = fn
        self._name = name
        self._description = description
        self._input_schema = input_schema or {"type": "object", "properties": {}}
        super().__init__()

    def _get_metadata(self) -> ToolMetadata:
        return ToolMetadata(
            name=self._name,
            description=self._description,
            input_schema=self._input_schema,
        )

    async def execute(self, **kwargs) -> Dict[str, Any]:
        return await self._fn(**kwargs)
