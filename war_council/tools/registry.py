"""Tool registry - the fixed set of council tools and their schemas."""

from __future__ import annotations
from typing import Any, Optional
from pydantic import BaseModel, Field


class ToolParameter(BaseModel):
    """Definition of a tool parameter."""
    name: str
    type: str  # "string", "number", "integer", "boolean"
    description: str
    required: bool = True


class Tool(BaseModel):
    """A tool that advisors can call."""
    name: str
    description: str
    parameters: list[ToolParameter] = Field(default_factory=list)

    def to_openai_schema(self) -> dict[str, Any]:
        """Convert to OpenAI function calling schema."""
        properties = {}
        required = []

        for param in self.parameters:
            properties[param.name] = {
                "type": param.type,
                "description": param.description,
            }
            if param.required:
                required.append(param.name)

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": properties,
                    "required": required,
                }
            }
        }


class ToolRegistry:
    """Registry of the four council tools."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}
        self._register_core_tools()

    def _register_core_tools(self) -> None:
        """Register the 4 core tools."""

        # 1. get_travel_time
        self.register(Tool(
            name="get_travel_time",
            description="Return additive travel days between locations using the world graph.",
            parameters=[
                ToolParameter(
                    name="origin",
                    type="string",
                    description="City, town, hamlet, or notable location to start from",
                ),
                ToolParameter(
                    name="destination",
                    type="string",
                    description="City, town, hamlet, or notable location to reach",
                ),
            ],
        ))

        # 2. get_threat_future
        self.register(Tool(
            name="get_threat_future",
            description="Return future stage summary for a threat in months without intervention.",
            parameters=[
                ToolParameter(
                    name="threatId",
                    type="string",
                    description="Identifier of the threat",
                ),
                ToolParameter(
                    name="months",
                    type="number",
                    description="Months from now with no intervention",
                ),
            ],
        ))

        # 3. get_armies
        self.register(Tool(
            name="get_armies",
            description="Return the list of army assets.",
        ))

        # 4. get_council_public
        self.register(Tool(
            name="get_council_public",
            description="Return the council roster with public agendas and descriptions.",
        ))

    def register(self, tool: Tool) -> None:
        """Register a tool."""
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[Tool]:
        """Get a tool by name."""
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def list_tools(self) -> list[Tool]:
        """List all registered tools."""
        return list(self._tools.values())

    def get_openai_tools(self) -> list[dict[str, Any]]:
        """Get tools in OpenAI function calling format."""
        return [t.to_openai_schema() for t in self.list_tools()]
