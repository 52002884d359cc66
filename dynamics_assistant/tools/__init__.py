from dynamics_assistant.tools.definitions import tool_list
from dynamics_assistant.tools.dispatcher import ToolDispatcher

__all__ = ["ToolDispatcher", "tool_list"]
