"""MCP tool declarations.

Input schemas are declared here and validated by the MCP layer before a
handler runs.
"""

from __future__ import annotations

from typing import Any

from mcp.types import Tool

from core.estimates import HEIGHT_LIMITS, MATERIALS, STRUCTURES
from core.models import InspectionType, Phase, Urgency

_DIMENSIONS = {
    "type": "object",
    "properties": {
        "length": {"type": "number"},
        "width": {"type": "number"},
        "height": {"type": "number"},
    },
    "required": ["length", "width", "height"],
}


def _values(enum_cls: Any) -> list[str]:
    return [item.value for item in enum_cls]


TOOL_SPECS: list[dict[str, Any]] = [
    {
        "name": "create_project",
        "description": "Create and track a construction project",
        "inputSchema": {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "location": {"type": "string"},
                "timeline": {"type": "string"},
                "budget": {"type": "number", "minimum": 0},
                "contact": {
                    "type": "string",
                    "description": "Channel address: @username, +phone, chat_id:<id> or group:<name>",
                },
            },
            "required": ["name", "location", "contact"],
        },
    },
    {
        "name": "track_progress",
        "description": "Update project progress; milestones (25/50/75/100%) notify the project contact",
        "inputSchema": {
            "type": "object",
            "properties": {
                "projectId": {"type": "string"},
                "phase": {"type": "string", "enum": _values(Phase)},
                "completion": {"type": "number", "minimum": 0, "maximum": 100},
                "notes": {"type": "string"},
            },
            "required": ["projectId", "phase", "completion"],
        },
    },
    {
        "name": "schedule_inspection",
        "description": "Schedule a quality inspection and notify the project contact",
        "inputSchema": {
            "type": "object",
            "properties": {
                "projectId": {"type": "string"},
                "inspectionType": {"type": "string", "enum": _values(InspectionType)},
                "date": {"type": "string"},
                "inspector": {"type": "string"},
            },
            "required": ["projectId", "inspectionType", "date"],
        },
    },
    {
        "name": "send_whatsapp_update",
        "description": "Send a project update to the project contact",
        "inputSchema": {
            "type": "object",
            "properties": {
                "projectId": {"type": "string"},
                "message": {"type": "string"},
                "urgency": {"type": "string", "enum": _values(Urgency)},
            },
            "required": ["projectId", "message"],
        },
    },
    {
        "name": "send_group_message",
        "description": "Send a message to a group chat",
        "inputSchema": {
            "type": "object",
            "properties": {
                "groupName": {"type": "string", "description": "Name (or part of the name) of the group"},
                "message": {"type": "string", "description": "Message to send"},
            },
            "required": ["groupName", "message"],
        },
    },
    {
        "name": "read_group_messages",
        "description": "Read recent messages from a group chat",
        "inputSchema": {
            "type": "object",
            "properties": {
                "groupName": {"type": "string", "description": "Name (or part of the name) of the group"},
                "limit": {
                    "type": "number",
                    "default": 10,
                    "description": "Number of recent messages to read (max 50)",
                },
            },
            "required": ["groupName"],
        },
    },
    {
        "name": "list_groups",
        "description": "List all group chats",
        "inputSchema": {"type": "object", "properties": {}},
    },
    {
        "name": "connection_status",
        "description": "Report the messaging channel connection state",
        "inputSchema": {"type": "object", "properties": {}},
    },
    {
        "name": "calculate_materials",
        "description": "Calculate construction materials needed for basic structures",
        "inputSchema": {
            "type": "object",
            "properties": {
                "structure": {"type": "string", "enum": list(STRUCTURES)},
                "dimensions": _DIMENSIONS,
            },
            "required": ["structure", "dimensions"],
        },
    },
    {
        "name": "estimate_cost",
        "description": "Quick cost estimation for materials",
        "inputSchema": {
            "type": "object",
            "properties": {
                "material": {"type": "string", "enum": list(MATERIALS)},
                "quantity": {"type": "number"},
                "unit": {"type": "string", "enum": ["m³", "pieces"]},
            },
            "required": ["material", "quantity"],
        },
    },
    {
        "name": "compliance_check",
        "description": "Verify building height against code limits",
        "inputSchema": {
            "type": "object",
            "properties": {
                "structure": {"type": "string"},
                "dimensions": _DIMENSIONS,
                "location": {"type": "string"},
                "buildingType": {"type": "string", "enum": list(HEIGHT_LIMITS)},
            },
            "required": ["structure", "dimensions", "buildingType"],
        },
    },
]


def build_tools() -> list[Tool]:
    return [Tool(**spec) for spec in TOOL_SPECS]
